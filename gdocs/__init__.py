"""Google Docs tools and the style-request translation layer."""
