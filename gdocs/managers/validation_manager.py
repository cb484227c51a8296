"""
Validation Manager

This module provides centralized validation logic for Google Docs operations,
extracting validation patterns from individual tool functions.
"""
import logging
import re
from typing import Dict, Any, Tuple, Optional

from gdocs.errors import (
    DocsErrorBuilder,
    ErrorCode,
    format_error,
    simple_error,
)

logger = logging.getLogger(__name__)


class ValidationManager:
    """
    Centralized validation manager for Google Docs operations.

    Every check runs before any API call. The *_structured methods return
    (is_valid, structured_error_json or None) so tool functions can return
    the error directly.
    """

    def __init__(self):
        """Initialize the validation manager."""
        self.validation_rules = self._setup_validation_rules()

    def _setup_validation_rules(self) -> Dict[str, Any]:
        """Setup validation rules and constraints."""
        return {
            'table_max_rows': 1000,
            'table_max_columns': 20,
            'document_id_pattern': r'^[a-zA-Z0-9-_]+$',
            'max_text_length': 1000000,  # 1MB text limit
            'valid_read_formats': ["text", "json"],
        }

    def validate_document_id(self, document_id: str) -> Tuple[bool, str]:
        """
        Validate Google Docs document ID format.

        Args:
            document_id: Document ID to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not document_id:
            return False, "Document ID cannot be empty"

        if not isinstance(document_id, str):
            return False, f"Document ID must be a string, got {type(document_id).__name__}"

        if not re.match(self.validation_rules['document_id_pattern'], document_id):
            return False, f"Document ID '{document_id}' contains invalid characters"

        return True, ""

    def validate_index(self, index: int, context: str = "Index") -> Tuple[bool, str]:
        """
        Validate a single document index.

        Args:
            index: Index to validate
            context: Context description for error messages

        Returns:
            Tuple of (is_valid, error_message)
        """
        if isinstance(index, bool) or not isinstance(index, int):
            return False, f"{context} must be an integer, got {type(index).__name__}"

        if index < 1:
            return False, f"{context} must be 1 or greater, got {index}"

        return True, ""

    def validate_text_content(self, text: str, max_length: Optional[int] = None) -> Tuple[bool, str]:
        """
        Validate text content for insertion.

        Args:
            text: Text to validate
            max_length: Maximum allowed length

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not isinstance(text, str):
            return False, f"Text must be a string, got {type(text).__name__}"

        if not text:
            return False, "Text cannot be empty"

        max_len = max_length or self.validation_rules['max_text_length']
        if len(text) > max_len:
            return False, f"Text too long ({len(text)} characters). Maximum: {max_len}"

        return True, ""

    # ============================================================
    # Structured Error Methods
    # ============================================================
    # These methods return structured JSON errors for better debugging

    def validate_document_id_structured(self, document_id: str) -> Tuple[bool, Optional[str]]:
        """
        Validate document ID and return structured error if invalid.

        Returns:
            Tuple of (is_valid, structured_error_json or None)
        """
        is_valid, message = self.validate_document_id(document_id)
        if not is_valid:
            return False, simple_error(
                ErrorCode.INVALID_DOCUMENT_ID,
                message,
                "Copy the ID from the document URL: docs.google.com/document/d/{document_id}/edit",
            )
        return True, None

    def validate_index_structured(self, index: int, index_name: str = "index") -> Tuple[bool, Optional[str]]:
        """
        Validate an insertion index and return structured error if invalid.

        Returns:
            Tuple of (is_valid, structured_error_json or None)
        """
        is_valid, message = self.validate_index(index, index_name)
        if is_valid:
            return True, None
        if isinstance(index, int) and not isinstance(index, bool):
            return False, format_error(DocsErrorBuilder.index_out_of_bounds(index_name, index))
        return False, simple_error(ErrorCode.INVALID_PARAM_VALUE, message)

    def validate_index_range_structured(
        self,
        start_index: int,
        end_index: int
    ) -> Tuple[bool, Optional[str]]:
        """
        Validate a half-open [start_index, end_index) range.

        Returns:
            Tuple of (is_valid, structured_error_json or None)
        """
        for name, value in (("start_index", start_index), ("end_index", end_index)):
            if isinstance(value, bool) or not isinstance(value, int):
                return False, simple_error(
                    ErrorCode.INVALID_PARAM_VALUE,
                    f"{name} must be an integer, got {type(value).__name__}",
                )

        if start_index < 1 or end_index <= start_index:
            return False, format_error(DocsErrorBuilder.invalid_index_range(start_index, end_index))

        return True, None

    def validate_search_structured(
        self,
        search_text: str,
        occurrence: int
    ) -> Tuple[bool, Optional[str]]:
        """
        Validate a search string and its 1-based occurrence number.

        Returns:
            Tuple of (is_valid, structured_error_json or None)
        """
        if not search_text:
            return False, format_error(DocsErrorBuilder.empty_search_text())

        if isinstance(occurrence, bool) or not isinstance(occurrence, int) or occurrence < 1:
            return False, simple_error(
                ErrorCode.INVALID_OCCURRENCE,
                f"match_instance must be an integer of 1 or greater, got {occurrence!r}",
                "Use 1 for the first match, 2 for the second, and so on.",
            )

        return True, None

    def validate_table_dimensions_structured(
        self,
        rows: int,
        columns: int
    ) -> Tuple[bool, Optional[str]]:
        """
        Validate table dimensions and return structured error if invalid.

        Returns:
            Tuple of (is_valid, structured_error_json or None)
        """
        for value in (rows, columns):
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                return False, format_error(DocsErrorBuilder.invalid_table_dimensions(rows, columns))

        if rows > self.validation_rules['table_max_rows']:
            return False, simple_error(
                ErrorCode.INVALID_TABLE_DIMENSIONS,
                f"Too many rows ({rows}). Maximum allowed: {self.validation_rules['table_max_rows']}",
            )

        if columns > self.validation_rules['table_max_columns']:
            return False, simple_error(
                ErrorCode.INVALID_TABLE_DIMENSIONS,
                f"Too many columns ({columns}). Maximum allowed: {self.validation_rules['table_max_columns']}",
            )

        return True, None

    def validate_text_content_structured(self, text: str, param_name: str = "text") -> Tuple[bool, Optional[str]]:
        """
        Validate text to insert and return structured error if invalid.

        Returns:
            Tuple of (is_valid, structured_error_json or None)
        """
        is_valid, message = self.validate_text_content(text)
        if is_valid:
            return True, None
        if not text:
            return False, format_error(
                DocsErrorBuilder.missing_required_param(param_name, "and cannot be empty")
            )
        return False, simple_error(ErrorCode.INVALID_PARAM_VALUE, message)

    def validate_read_format_structured(self, output_format: str) -> Tuple[bool, Optional[str]]:
        """
        Validate the output format requested from read_google_doc.

        Returns:
            Tuple of (is_valid, structured_error_json or None)
        """
        valid_formats = self.validation_rules['valid_read_formats']
        if output_format not in valid_formats:
            return False, format_error(
                DocsErrorBuilder.invalid_param_value("format", output_format, valid_formats)
            )
        return True, None
