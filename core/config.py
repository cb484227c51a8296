"""
Server configuration.

Values come from environment variables, which main.py populates from a .env
file (python-dotenv) before anything else is imported.
"""
import os

DEFAULT_CLIENT_SECRET_FILE = "credentials.json"
DEFAULT_TOKEN_FILE = "token.json"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000

VALID_TRANSPORTS = ("stdio", "streamable-http")

_current_transport_mode = os.getenv("MCP_TRANSPORT", "stdio")


def get_client_secret_path() -> str:
    """Path to the OAuth client secrets file downloaded from Google Cloud Console."""
    return os.path.abspath(os.getenv("GOOGLE_CLIENT_SECRET_PATH", DEFAULT_CLIENT_SECRET_FILE))


def get_token_path() -> str:
    """Path where the authorized user token is stored between runs."""
    return os.path.abspath(os.getenv("GOOGLE_TOKEN_PATH", DEFAULT_TOKEN_FILE))


def get_server_host() -> str:
    return os.getenv("MCP_HOST", DEFAULT_HOST)


def get_server_port() -> int:
    return int(os.getenv("MCP_PORT", str(DEFAULT_PORT)))


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_transport_mode() -> str:
    """Gets the current transport mode."""
    return _current_transport_mode


def set_transport_mode(mode: str) -> None:
    """Sets the transport mode for the server ("stdio" or "streamable-http")."""
    global _current_transport_mode
    if mode not in VALID_TRANSPORTS:
        raise ValueError(f"Unsupported transport '{mode}'. Use one of: {', '.join(VALID_TRANSPORTS)}")
    _current_transport_mode = mode
