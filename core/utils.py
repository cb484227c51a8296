import functools
import logging
import re
from typing import Optional

from googleapiclient.errors import HttpError

from auth.google_auth import GoogleAuthenticationError
from gdocs.errors import (
    DocsErrorBuilder,
    DocsToolError,
    DocumentApiError,
    format_error,
)

logger = logging.getLogger(__name__)


_SEGMENT_END_RE = re.compile(
    r"Index\s+(\d+)\s+must be less than the end index of the referenced segment,?\s*(\d+)?",
    re.IGNORECASE,
)
_INSERTION_INDEX_RE = re.compile(r"index[:\s]+(\d+)", re.IGNORECASE)


def _parse_docs_index_error(error_details: str) -> Optional[str]:
    """
    Turn a Docs API 400 about an out-of-range index into a structured error.

    Recognizes "Index X must be less than the end index of the referenced
    segment, Y" and "The insertion index must be inside the bounds of an
    existing paragraph". Returns None for any other 400.
    """
    match = _SEGMENT_END_RE.search(error_details)
    if match:
        document_length = int(match.group(2)) if match.group(2) else None
        return format_error(
            DocsErrorBuilder.index_beyond_document(int(match.group(1)), document_length)
        )

    if "insertion index must be inside the bounds" in error_details.lower():
        idx_match = _INSERTION_INDEX_RE.search(error_details)
        index_value = int(idx_match.group(1)) if idx_match else None
        return format_error(DocsErrorBuilder.index_beyond_document(index_value))

    return None


def _http_status(error: Exception) -> Optional[int]:
    if isinstance(error, DocumentApiError):
        return error.status
    resp = getattr(error, "resp", None)
    return getattr(resp, "status", None)


def handle_http_errors(tool_name: str, service_type: Optional[str] = None):
    """
    A decorator to turn tool failures into responses the MCP client can act on.

    Local validation failures (DocsToolError) are returned as structured JSON
    errors. Google API failures (HttpError, or DocumentApiError wrapping one)
    are logged and re-raised as a plain Exception with a user-friendly
    message, except Docs 404s and index errors which also come back as
    structured JSON. Nothing is retried here.

    Args:
        tool_name (str): The name of the tool being decorated (e.g., 'apply_text_style').
        service_type (str): Optional. The Google service type ('docs' or 'drive').
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except DocsToolError as e:
                logger.warning(f"[{tool_name}] Rejected: {e}")
                return format_error(e.to_structured_error())
            except (HttpError, DocumentApiError) as error:
                status = _http_status(error)
                error_details = str(error)

                if status in [401, 403]:
                    message = (
                        f"API error in {tool_name}: {error}. "
                        f"You might need to re-authenticate. "
                        f"Run 'python main.py --setup' and restart the server."
                    )
                elif status == 400 and service_type == "docs":
                    structured_error = _parse_docs_index_error(error_details)
                    if structured_error:
                        logger.error(f"Index error in {tool_name}: {error}", exc_info=True)
                        return structured_error
                    message = f"API error in {tool_name}: {error}"
                elif status == 404 and service_type == "docs":
                    document_id = kwargs.get("document_id") or getattr(
                        error, "document_id", "unknown"
                    )
                    logger.error(f"Document not found in {tool_name}: {error}", exc_info=True)
                    return format_error(DocsErrorBuilder.document_not_found(document_id))
                else:
                    message = f"API error in {tool_name}: {error}"

                logger.error(f"API error in {tool_name}: {error}", exc_info=True)
                raise Exception(message) from error
            except GoogleAuthenticationError:
                raise
            except Exception as e:
                message = f"An unexpected error occurred in {tool_name}: {e}"
                logger.exception(message)
                raise Exception(message) from e

        return wrapper

    return decorator
