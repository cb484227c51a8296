"""
Google Docs Error Handling

This module provides structured, actionable error messages for Google Docs operations.
Errors are designed to be self-documenting and help both humans and AI agents
understand what went wrong and how to fix it.

Local failures raised by the style and search helpers derive from DocsToolError.
Tool handlers never let them escape: each one renders itself as a StructuredError
which is returned to the client as JSON.
"""
import json
import logging
from enum import Enum
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Standardized error codes for Google Docs operations."""

    # Document errors
    INVALID_DOCUMENT_ID = "INVALID_DOCUMENT_ID"
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    EMPTY_DOCUMENT = "EMPTY_DOCUMENT"

    # Index errors
    INDEX_OUT_OF_BOUNDS = "INDEX_OUT_OF_BOUNDS"
    INVALID_INDEX_RANGE = "INVALID_INDEX_RANGE"

    # Formatting errors
    EMPTY_STYLE = "EMPTY_STYLE"
    INVALID_COLOR_FORMAT = "INVALID_COLOR_FORMAT"
    INVALID_FONT_SIZE = "INVALID_FONT_SIZE"
    INVALID_STYLE_VALUE = "INVALID_STYLE_VALUE"

    # Search errors
    EMPTY_SEARCH_TEXT = "EMPTY_SEARCH_TEXT"
    SEARCH_TEXT_NOT_FOUND = "SEARCH_TEXT_NOT_FOUND"
    INVALID_OCCURRENCE = "INVALID_OCCURRENCE"

    # Table errors
    INVALID_TABLE_DIMENSIONS = "INVALID_TABLE_DIMENSIONS"

    # Parameter errors
    MISSING_REQUIRED_PARAM = "MISSING_REQUIRED_PARAM"
    INVALID_PARAM_VALUE = "INVALID_PARAM_VALUE"


@dataclass
class ErrorContext:
    """Additional context for error messages."""
    received: Optional[Dict[str, Any]] = None
    expected: Optional[Dict[str, Any]] = None
    occurrences_found: Optional[int] = None
    possible_causes: Optional[List[str]] = None
    document_length: Optional[int] = None


@dataclass
class StructuredError:
    """
    Structured error response with actionable guidance.

    Attributes:
        error: Always True for error responses
        code: Machine-readable error code from ErrorCode enum
        message: Human-readable error description
        reason: Explanation of why this error occurred
        suggestion: Actionable advice on how to fix the issue
        example: Optional example showing correct usage
        context: Additional context like received values, occurrence counts, etc.
    """
    error: bool = True
    code: str = ""
    message: str = ""
    reason: str = ""
    suggestion: str = ""
    example: Optional[Dict[str, Any]] = None
    context: Optional[ErrorContext] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        result = {
            "error": self.error,
            "code": self.code,
            "message": self.message,
        }

        if self.reason:
            result["reason"] = self.reason
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.example:
            result["example"] = self.example
        if self.context:
            ctx = asdict(self.context)
            ctx = {k: v for k, v in ctx.items() if v is not None}
            if ctx:
                result["context"] = ctx

        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)


class DocsErrorBuilder:
    """
    Builder for creating structured error messages.

    Usage:
        error = DocsErrorBuilder.invalid_index_range(
            start_index=10, end_index=5
        ).to_json()
    """

    @staticmethod
    def invalid_index_range(
        start_index: int,
        end_index: int
    ) -> StructuredError:
        """Error when a range is empty, reversed or starts before index 1."""
        if start_index < 1:
            message = f"start_index ({start_index}) must be 1 or greater"
            reason = "Index 0 is reserved by Google Docs; document content starts at index 1."
            suggestion = "Use a start_index of 1 or greater."
        else:
            message = f"start_index ({start_index}) must be less than end_index ({end_index})"
            reason = "The start of a range must come before its end."
            suggestion = "Swap the values or correct the range specification."
        return StructuredError(
            code=ErrorCode.INVALID_INDEX_RANGE.value,
            message=message,
            reason=reason,
            suggestion=suggestion,
            context=ErrorContext(
                received={"start_index": start_index, "end_index": end_index},
                expected={"start_index": ">= 1", "end_index": "> start_index"}
            )
        )

    @staticmethod
    def index_out_of_bounds(index_name: str, index_value: int) -> StructuredError:
        """Error when a single insertion index is below the first valid position."""
        return StructuredError(
            code=ErrorCode.INDEX_OUT_OF_BOUNDS.value,
            message=f"{index_name} must be 1 or greater (got {index_value})",
            reason="Index 0 is reserved by Google Docs; document content starts at index 1.",
            suggestion="Use read_google_doc with format='json' to inspect element indices.",
            context=ErrorContext(received={index_name: index_value})
        )

    @staticmethod
    def index_beyond_document(
        index_value: Optional[int],
        document_length: Optional[int] = None
    ) -> StructuredError:
        """Error when the Docs API rejects an index past the end of the body."""
        if document_length:
            message = f"Index {index_value} exceeds document length ({document_length})"
            reason = (
                f"Document length is {document_length} characters "
                f"(valid indices: 1 to {document_length - 1})."
            )
        else:
            message = "Insertion index is outside document bounds" + (
                f" (index: {index_value})" if index_value is not None else ""
            )
            reason = "The insertion point is not inside an existing paragraph."
        return StructuredError(
            code=ErrorCode.INDEX_OUT_OF_BOUNDS.value,
            message=message,
            reason=reason,
            suggestion=(
                "Use read_google_doc with format='json' to check element indices, "
                "or append_to_google_doc to add text at the end."
            ),
            context=ErrorContext(
                received={"index": index_value} if index_value is not None else None,
                document_length=document_length
            )
        )

    @staticmethod
    def empty_style(style_kind: str, attributes: List[str]) -> StructuredError:
        """Error when a styling tool is called without any styling attribute."""
        return StructuredError(
            code=ErrorCode.EMPTY_STYLE.value,
            message=f"At least one {style_kind} styling property must be provided",
            reason="No styling attribute was set, so there is nothing to apply.",
            suggestion=f"Provide one or more of: {', '.join(attributes)}",
            context=ErrorContext(expected={"one_of": attributes})
        )

    @staticmethod
    def invalid_color_format(
        color_value: str,
        param_name: str = "color",
        api_field: Optional[str] = None
    ) -> StructuredError:
        """Error when a color value has an invalid format."""
        field_note = f" ({api_field})" if api_field else ""
        return StructuredError(
            code=ErrorCode.INVALID_COLOR_FORMAT.value,
            message=f"Invalid color format for '{param_name}'{field_note}: '{color_value}'",
            reason="Colors must be specified as 3- or 6-digit hex codes, with or without a leading '#'.",
            suggestion="Use hex format such as #FF0000 or #F00.",
            example={
                "hex_color": "#FF0000",
                "short_hex": "#F00",
                "usage": f"apply_text_style(document_id='...', start_index=1, end_index=10, {param_name}='#FF0000')"
            },
            context=ErrorContext(
                received={param_name: color_value},
                expected={"format": "#RRGGBB or #RGB"}
            )
        )

    @staticmethod
    def invalid_font_size(font_size: Any) -> StructuredError:
        """Error when a font size is not a positive number."""
        return StructuredError(
            code=ErrorCode.INVALID_FONT_SIZE.value,
            message=f"Invalid font_size: {font_size!r}",
            reason="Font sizes are expressed in points and must be a positive number.",
            suggestion="Use a value such as 11, 12.5 or 24.",
            context=ErrorContext(received={"font_size": font_size})
        )

    @staticmethod
    def invalid_style_value(
        param_name: str,
        value: Any,
        allowed: List[str]
    ) -> StructuredError:
        """Error when an enumerated style value is not recognized."""
        return StructuredError(
            code=ErrorCode.INVALID_STYLE_VALUE.value,
            message=f"Invalid value for '{param_name}': '{value}'",
            reason=f"'{param_name}' only accepts a fixed set of values.",
            suggestion=f"Use one of: {', '.join(allowed)}",
            context=ErrorContext(
                received={param_name: value},
                expected={param_name: allowed}
            )
        )

    @staticmethod
    def empty_search_text() -> StructuredError:
        """Error when search text is empty."""
        return StructuredError(
            code=ErrorCode.EMPTY_SEARCH_TEXT.value,
            message="Search text cannot be empty",
            reason="An empty string was provided for the search parameter, which would match nothing.",
            suggestion="Provide a non-empty search string to locate text in the document.",
            example={
                "format_match": "format_matching_text(document_id='...', text_to_find='target text', bold=True)"
            }
        )

    @staticmethod
    def search_text_not_found(
        search_text: str,
        occurrence: int,
        occurrences_found: int
    ) -> StructuredError:
        """Error when the requested occurrence of the search text does not exist."""
        if occurrences_found == 0:
            return StructuredError(
                code=ErrorCode.SEARCH_TEXT_NOT_FOUND.value,
                message=f"Could not find '{search_text}' in the document",
                reason="The exact text was not found in the document content.",
                suggestion="Check spelling and try a shorter, unique phrase. Matching is case-sensitive.",
                context=ErrorContext(
                    received={"text_to_find": search_text, "match_instance": occurrence},
                    occurrences_found=0
                )
            )
        return StructuredError(
            code=ErrorCode.INVALID_OCCURRENCE.value,
            message=(
                f"Could not find instance {occurrence} of '{search_text}'. "
                f"Only {occurrences_found} instance(s) were found."
            ),
            reason=(
                f"The document contains {occurrences_found} non-overlapping instance(s) "
                f"of the search text, but instance {occurrence} was requested."
            ),
            suggestion=f"Use match_instance between 1 and {occurrences_found}.",
            context=ErrorContext(
                received={"text_to_find": search_text, "match_instance": occurrence},
                expected={"match_instance": f"1 to {occurrences_found}"},
                occurrences_found=occurrences_found
            )
        )

    @staticmethod
    def empty_document(document_id: str) -> StructuredError:
        """Error when a document body has no readable content."""
        return StructuredError(
            code=ErrorCode.EMPTY_DOCUMENT.value,
            message=f"Document body is empty or inaccessible for document {document_id}",
            reason="The document returned no body content to search.",
            suggestion="Check that the document contains text and that you have access to it.",
            context=ErrorContext(received={"document_id": document_id})
        )

    @staticmethod
    def invalid_table_dimensions(rows: int, columns: int) -> StructuredError:
        """Error when a table would have no rows or columns."""
        return StructuredError(
            code=ErrorCode.INVALID_TABLE_DIMENSIONS.value,
            message=f"Invalid table dimensions: {rows}x{columns}",
            reason="Tables need at least one row and one column.",
            suggestion="Use rows >= 1 and columns >= 1.",
            context=ErrorContext(received={"rows": rows, "columns": columns})
        )

    @staticmethod
    def missing_required_param(
        param_name: str,
        context_description: str
    ) -> StructuredError:
        """Error when a required parameter is missing or blank."""
        return StructuredError(
            code=ErrorCode.MISSING_REQUIRED_PARAM.value,
            message=f"'{param_name}' is required {context_description}",
            reason=f"The operation needs a value for '{param_name}'.",
            suggestion=f"Provide a non-empty '{param_name}'.",
            context=ErrorContext(received={param_name: None})
        )

    @staticmethod
    def invalid_param_value(
        param_name: str,
        received_value: Any,
        valid_values: List[str]
    ) -> StructuredError:
        """Error when a parameter has an invalid value."""
        return StructuredError(
            code=ErrorCode.INVALID_PARAM_VALUE.value,
            message=f"Invalid value for '{param_name}': '{received_value}'",
            reason=f"'{param_name}' must be one of the supported values.",
            suggestion=f"Use one of: {', '.join(valid_values)}",
            context=ErrorContext(
                received={param_name: received_value},
                expected={param_name: valid_values}
            )
        )

    @staticmethod
    def document_not_found(document_id: str) -> StructuredError:
        """Error when a document does not exist or is not accessible."""
        return StructuredError(
            code=ErrorCode.DOCUMENT_NOT_FOUND.value,
            message=f"Document '{document_id}' was not found",
            reason="The document ID may be incorrect or you may not have access to this document.",
            suggestion=(
                "Verify the document ID is correct. You can find the ID in the document's URL: "
                "docs.google.com/document/d/{document_id}/edit"
            ),
            context=ErrorContext(
                received={"document_id": document_id},
                possible_causes=[
                    "Document ID is incorrect",
                    "Document was deleted",
                    "You don't have permission to access this document",
                    "Document ID includes extra characters (quotes, spaces)",
                ]
            )
        )


def format_error(error: StructuredError) -> str:
    """
    Format a StructuredError for return to the user.

    Returns a JSON string that can be parsed by both humans and AI agents.
    """
    return error.to_json()


def simple_error(code: ErrorCode, message: str, suggestion: str = "") -> str:
    """
    Create a simple error message without full context.

    Useful for quick validation errors where full context isn't needed.
    """
    error = StructuredError(
        code=code.value,
        message=message,
        suggestion=suggestion
    )
    return error.to_json()


# =============================================================================
# Exceptions raised by the style, search and dispatch helpers
# =============================================================================


class DocsToolError(Exception):
    """Base class for local, non-retryable failures detected before any API call."""

    def to_structured_error(self) -> StructuredError:
        return StructuredError(
            code=ErrorCode.INVALID_PARAM_VALUE.value,
            message=str(self),
        )


class InvalidRangeError(DocsToolError):
    """Raised when an index range is empty, reversed or starts before index 1."""

    def __init__(self, start_index: int, end_index: int):
        self.start_index = start_index
        self.end_index = end_index
        if start_index < 1:
            detail = f"startIndex must be 1 or greater (got {start_index})"
        else:
            detail = "startIndex must be less than endIndex"
        super().__init__(f"Invalid range [{start_index}, {end_index}): {detail}.")

    def to_structured_error(self) -> StructuredError:
        return DocsErrorBuilder.invalid_index_range(self.start_index, self.end_index)


class EmptyIntentError(DocsToolError):
    """Raised when a styling call carries no attribute at all."""

    def __init__(self, style_kind: str, attributes: List[str]):
        self.style_kind = style_kind
        self.attributes = list(attributes)
        super().__init__(f"At least one {style_kind} styling property must be provided.")

    def to_structured_error(self) -> StructuredError:
        return DocsErrorBuilder.empty_style(self.style_kind, self.attributes)


class InvalidColorFormatError(DocsToolError):
    """Raised when a color attribute is not a valid hex literal."""

    def __init__(self, attribute: str, raw_value: Any, api_field: Optional[str] = None):
        self.attribute = attribute
        self.api_field = api_field
        self.raw_value = raw_value
        super().__init__(f"Invalid {attribute} hex color: {raw_value!r}")

    def to_structured_error(self) -> StructuredError:
        return DocsErrorBuilder.invalid_color_format(
            str(self.raw_value), self.attribute, self.api_field
        )


class InvalidFontSizeError(DocsToolError):
    """Raised when font_size is not a positive number."""

    def __init__(self, font_size: Any):
        self.font_size = font_size
        super().__init__(f"font_size must be a positive number of points (got {font_size!r})")

    def to_structured_error(self) -> StructuredError:
        return DocsErrorBuilder.invalid_font_size(self.font_size)


class InvalidStyleValueError(DocsToolError):
    """Raised when an enumerated paragraph style value is unknown."""

    def __init__(self, attribute: str, value: Any, allowed: List[str]):
        self.attribute = attribute
        self.value = value
        self.allowed = list(allowed)
        super().__init__(f"Invalid {attribute}: {value!r}. Expected one of {', '.join(allowed)}")

    def to_structured_error(self) -> StructuredError:
        return DocsErrorBuilder.invalid_style_value(self.attribute, self.value, self.allowed)


class TextNotFoundError(DocsToolError):
    """Raised when fewer non-overlapping matches exist than the requested occurrence."""

    def __init__(self, needle: str, occurrences_found: int, occurrence: int = 1):
        self.needle = needle
        self.occurrences_found = occurrences_found
        self.occurrence = occurrence
        super().__init__(
            f'Could not find instance {occurrence} of "{needle}". '
            f"Only {occurrences_found} instance(s) were found."
        )

    def to_structured_error(self) -> StructuredError:
        return DocsErrorBuilder.search_text_not_found(
            self.needle, self.occurrence, self.occurrences_found
        )


class DocumentApiError(Exception):
    """
    A Google Docs API failure, tagged with the document it was issued against.

    The original HttpError is kept as ``cause`` (and chained as ``__cause__``)
    so callers can still inspect its status code.
    """

    def __init__(self, document_id: str, cause: Exception):
        self.document_id = document_id
        self.cause = cause
        super().__init__(f"Google Docs API error for document {document_id}: {cause}")

    @property
    def status(self) -> Optional[int]:
        resp = getattr(self.cause, "resp", None)
        return getattr(resp, "status", None)
