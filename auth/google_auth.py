"""
Google OAuth 2.0 authorization for the installed-app flow.

A token is stored next to the client secrets after the first successful
consent and reused (and refreshed) on every later start. When the server is
launched by an MCP client there is no terminal to complete consent in, so the
flow refuses to start and asks the user to run ``main.py --setup`` once.
"""
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from auth.scopes import SCOPES
from core.config import get_client_secret_path, get_token_path

logger = logging.getLogger(__name__)


class GoogleAuthenticationError(Exception):
    """Raised when no usable Google credentials can be obtained."""

    pass


def load_client_secrets(client_secret_path: str) -> Dict[str, Any]:
    """
    Read the OAuth client configuration from a client secrets file.

    Both "installed" (desktop) and "web" client types are accepted.

    Raises:
        GoogleAuthenticationError: If the file is missing, unreadable or has no client entry
    """
    try:
        with open(client_secret_path, "r") as f:
            keys = json.load(f)
    except FileNotFoundError:
        raise GoogleAuthenticationError(
            f"OAuth client secrets file not found at '{client_secret_path}'. "
            "Download an OAuth client ID (Desktop app) from Google Cloud Console and "
            "set GOOGLE_CLIENT_SECRET_PATH or place it in the working directory as credentials.json."
        ) from None
    except (OSError, json.JSONDecodeError) as e:
        raise GoogleAuthenticationError(
            f"Could not read OAuth client secrets from '{client_secret_path}': {e}"
        ) from e

    key = keys.get("installed") or keys.get("web")
    if not key:
        raise GoogleAuthenticationError(
            f"Could not find client secrets in {client_secret_path}."
        )
    return key


def load_saved_credentials(token_path: str, scopes: List[str]) -> Optional[Credentials]:
    """Load previously saved user credentials, or None if there are none usable."""
    if not os.path.exists(token_path):
        return None
    try:
        return Credentials.from_authorized_user_file(token_path, scopes)
    except (ValueError, json.JSONDecodeError) as e:
        logger.warning(f"Ignoring unreadable token file {token_path}: {e}")
        return None


def save_credentials(credentials: Credentials, token_path: str) -> None:
    """Persist credentials so later runs can skip the consent flow."""
    with open(token_path, "w") as f:
        f.write(credentials.to_json())
    logger.info(f"Token stored to {token_path}")


def get_authorization_url(client_secret_path: str, scopes: List[str]) -> str:
    """Build the consent URL a user can open manually."""
    client_config = load_client_secrets(client_secret_path)
    flow = InstalledAppFlow.from_client_secrets_file(client_secret_path, scopes)
    flow.redirect_uri = (client_config.get("redirect_uris") or ["http://localhost"])[0]
    url, _ = flow.authorization_url(access_type="offline", prompt="consent")
    return url


def is_interactive() -> bool:
    """True when both stdin and stdout are attached to a terminal."""
    return sys.stdin.isatty() and sys.stdout.isatty()


def authenticate(
    client_secret_path: str,
    token_path: str,
    scopes: List[str] = SCOPES,
    interactive: Optional[bool] = None,
) -> Credentials:
    """
    Run the OAuth consent flow and store the resulting token.

    Args:
        client_secret_path: OAuth client secrets file
        token_path: Where to save the token
        scopes: Scopes to request
        interactive: Override terminal detection

    Raises:
        GoogleAuthenticationError: When not interactive, or when the flow fails
    """
    load_client_secrets(client_secret_path)
    if interactive is None:
        interactive = is_interactive()

    if not interactive:
        authorize_url = get_authorization_url(client_secret_path, scopes)
        logger.error("=== GOOGLE DOCS MCP SETUP REQUIRED ===")
        logger.error("No saved authentication found. Run the following command ONCE to authenticate:")
        logger.error("    python main.py --setup")
        logger.error(f"Or visit this URL and follow the setup instructions: {authorize_url}")
        raise GoogleAuthenticationError("Authentication required - run setup first")

    flow = InstalledAppFlow.from_client_secrets_file(client_secret_path, scopes)
    try:
        credentials = flow.run_local_server(port=0, access_type="offline", prompt="consent")
    except Exception as e:
        logger.error(f"Error retrieving access token: {e}", exc_info=True)
        raise GoogleAuthenticationError("Authentication failed") from e

    if credentials.refresh_token:
        save_credentials(credentials, token_path)
    else:
        logger.warning("Did not receive refresh token. Token might expire.")
    logger.info("Authentication successful!")
    return credentials


def authorize(
    client_secret_path: Optional[str] = None,
    token_path: Optional[str] = None,
    scopes: List[str] = SCOPES,
) -> Credentials:
    """
    Return valid credentials, reusing or refreshing a saved token when possible.

    Falls back to authenticate() when there is no token or it cannot be refreshed.
    """
    client_secret_path = client_secret_path or get_client_secret_path()
    token_path = token_path or get_token_path()

    credentials = load_saved_credentials(token_path, scopes)
    if credentials and credentials.valid:
        logger.info("Using saved credentials.")
        return credentials

    if credentials and credentials.refresh_token:
        try:
            credentials.refresh(Request())
            save_credentials(credentials, token_path)
            logger.info("Refreshed saved credentials.")
            return credentials
        except RefreshError as e:
            logger.warning(f"Saved token could not be refreshed, re-authenticating: {e}")

    logger.info("Starting authentication flow...")
    return authenticate(client_secret_path, token_path, scopes)


def run_setup(
    client_secret_path: Optional[str] = None,
    token_path: Optional[str] = None,
) -> Credentials:
    """Run the consent flow from a terminal and save the token."""
    logger.info("=== Google Docs MCP Server Setup ===")
    credentials = authenticate(
        client_secret_path or get_client_secret_path(),
        token_path or get_token_path(),
        SCOPES,
        interactive=True,
    )
    logger.info("Setup complete! The MCP server is now ready to use.")
    return credentials
