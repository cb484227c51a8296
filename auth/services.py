"""
Authorized Google API clients.

The clients are built once at startup and handed to the tool registration
functions, so tool code never reaches for a global client.
"""
import logging
from dataclasses import dataclass
from typing import Any

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GoogleServices:
    """Authorized Docs v1 and Drive v3 clients."""
    docs: Any
    drive: Any


def build_google_services(credentials: Credentials) -> GoogleServices:
    """Build the Docs and Drive clients from authorized credentials."""
    docs = build("docs", "v1", credentials=credentials, cache_discovery=False)
    drive = build("drive", "v3", credentials=credentials, cache_discovery=False)
    logger.info("Google Docs and Drive API clients ready")
    return GoogleServices(docs=docs, drive=drive)
