"""Google Drive file and folder tools."""
