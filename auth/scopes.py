"""
Google API scopes requested by the server.
"""

DOCS_SCOPE = "https://www.googleapis.com/auth/documents"
# Full Drive access is needed for listing, searching and moving files.
DRIVE_SCOPE = "https://www.googleapis.com/auth/drive"

SCOPES = [DOCS_SCOPE, DRIVE_SCOPE]
