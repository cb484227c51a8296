"""Google OAuth authorization and API clients."""
