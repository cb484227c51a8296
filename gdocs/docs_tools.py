"""
Google Docs MCP Tools

This module provides MCP tools for reading, editing and styling Google Docs.

Every tool follows the same shape: validate arguments locally, build the
Docs API requests, then send them in one batchUpdate call. Validation failures
come back as structured JSON errors and never reach the API.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

from googleapiclient.errors import HttpError

from auth.services import GoogleServices
from core.utils import handle_http_errors
from gdocs.docs_helpers import (
    END_INDEX_FIELDS,
    TEXT_RUN_FIELDS,
    IndexRange,
    calculate_append_index,
    create_delete_range_request,
    create_insert_page_break_request,
    create_insert_table_request,
    create_insert_text_request,
    extract_document_text,
    locate_occurrence,
    truncate_text,
)
from gdocs.docs_styles import (
    ParagraphStyleIntent,
    TextStyleIntent,
    build_paragraph_style_requests,
    build_text_style_requests,
)
from gdocs.errors import (
    DocsErrorBuilder,
    DocumentApiError,
    EmptyIntentError,
    format_error,
)
from gdocs.managers import BatchOperationManager, ValidationManager

logger = logging.getLogger(__name__)

READ_TEXT_LIMIT = 4000


async def _get_document(docs_service, document_id: str, fields: str) -> Dict[str, Any]:
    """Fetch a document, tagging API failures with its ID."""
    try:
        return await asyncio.to_thread(
            docs_service.documents().get(documentId=document_id, fields=fields).execute
        )
    except HttpError as error:
        raise DocumentApiError(document_id, error) from error


def _text_style_summary(requests) -> str:
    return requests[0]['updateTextStyle']['fields'].replace(',', ', ')


async def _read_google_doc_impl(docs_service, document_id: str, output_format: str = "text") -> str:
    """Implementation for reading a document as plain text or raw JSON."""
    logger.info(f"[read_google_doc] Invoked. Document ID: '{document_id}', format: {output_format}")

    validator = ValidationManager()
    is_valid, error = validator.validate_document_id_structured(document_id)
    if not is_valid:
        return error
    is_valid, error = validator.validate_read_format_structured(output_format)
    if not is_valid:
        return error

    if output_format == "json":
        doc = await _get_document(docs_service, document_id, "*")
        return json.dumps(doc, indent=2)

    doc = await _get_document(docs_service, document_id, TEXT_RUN_FIELDS)
    text_content = extract_document_text(doc)
    if not text_content.strip():
        return "Document found, but appears empty."

    return f"Content:\n---\n{truncate_text(text_content, READ_TEXT_LIMIT)}"


async def _append_to_google_doc_impl(docs_service, document_id: str, text_to_append: str) -> str:
    """Implementation for appending text at the end of a document body."""
    logger.info(f"[append_to_google_doc] Invoked. Document ID: '{document_id}'")

    validator = ValidationManager()
    is_valid, error = validator.validate_document_id_structured(document_id)
    if not is_valid:
        return error
    is_valid, error = validator.validate_text_content_structured(text_to_append, "text_to_append")
    if not is_valid:
        return error

    doc = await _get_document(docs_service, document_id, END_INDEX_FIELDS)
    index = calculate_append_index(doc)
    text = ("\n" if index > 1 else "") + text_to_append

    await BatchOperationManager(docs_service).apply_updates(
        document_id, [create_insert_text_request(index, text)]
    )
    return f"Successfully appended text to document {document_id}."


async def _insert_text_impl(docs_service, document_id: str, text: str, index: int) -> str:
    """Implementation for inserting text at an index."""
    logger.info(f"[insert_text] Invoked. Document ID: '{document_id}', index: {index}")

    validator = ValidationManager()
    is_valid, error = validator.validate_document_id_structured(document_id)
    if not is_valid:
        return error
    is_valid, error = validator.validate_index_structured(index)
    if not is_valid:
        return error
    is_valid, error = validator.validate_text_content_structured(text)
    if not is_valid:
        return error

    await BatchOperationManager(docs_service).apply_updates(
        document_id, [create_insert_text_request(index, text)]
    )
    return f"Successfully inserted text into document {document_id} at index {index}."


async def _delete_content_range_impl(
    docs_service, document_id: str, start_index: int, end_index: int
) -> str:
    """Implementation for deleting a range of content."""
    logger.info(
        f"[delete_content_range] Invoked. Document ID: '{document_id}', range: {start_index}-{end_index}"
    )

    validator = ValidationManager()
    is_valid, error = validator.validate_document_id_structured(document_id)
    if not is_valid:
        return error
    is_valid, error = validator.validate_index_range_structured(start_index, end_index)
    if not is_valid:
        return error

    await BatchOperationManager(docs_service).apply_updates(
        document_id, [create_delete_range_request(start_index, end_index)]
    )
    return (
        f"Successfully deleted content from document {document_id} "
        f"between {start_index} and {end_index}."
    )


async def _apply_text_style_impl(
    docs_service,
    document_id: str,
    start_index: int,
    end_index: int,
    intent: TextStyleIntent,
) -> str:
    """
    Implementation for styling characters in an explicit range.

    Raises:
        EmptyIntentError: If no styling attribute is set
        InvalidColorFormatError, InvalidFontSizeError, InvalidStyleValueError:
            If an attribute value cannot be translated
    """
    logger.info(
        f"[apply_text_style] Invoked. Document ID: '{document_id}', range: {start_index}-{end_index}, "
        f"attributes: {intent.populated_attributes()}"
    )

    validator = ValidationManager()
    is_valid, error = validator.validate_document_id_structured(document_id)
    if not is_valid:
        return error
    is_valid, error = validator.validate_index_range_structured(start_index, end_index)
    if not is_valid:
        return error
    if intent.is_empty():
        raise EmptyIntentError("text", TextStyleIntent.attribute_names())

    requests = build_text_style_requests(intent, IndexRange(start_index, end_index))
    await BatchOperationManager(docs_service).apply_updates(document_id, requests)
    return (
        f"Successfully applied text style ({_text_style_summary(requests)}) "
        f"to range {start_index}-{end_index} in document {document_id}."
    )


async def _format_matching_text_impl(
    docs_service,
    document_id: str,
    text_to_find: str,
    match_instance: int,
    intent: TextStyleIntent,
) -> str:
    """
    Implementation for styling the Nth occurrence of a piece of text.

    Raises:
        EmptyIntentError: If no styling attribute is set
        TextNotFoundError: If the document has fewer than match_instance matches
    """
    logger.info(
        f"[format_matching_text] Invoked. Document ID: '{document_id}', "
        f"text: '{text_to_find}', instance: {match_instance}"
    )

    validator = ValidationManager()
    is_valid, error = validator.validate_document_id_structured(document_id)
    if not is_valid:
        return error
    if intent.is_empty():
        raise EmptyIntentError("text", TextStyleIntent.attribute_names())
    is_valid, error = validator.validate_search_structured(text_to_find, match_instance)
    if not is_valid:
        return error

    doc = await _get_document(docs_service, document_id, TEXT_RUN_FIELDS)
    if not doc.get('body', {}).get('content'):
        return format_error(DocsErrorBuilder.empty_document(document_id))

    text_range = locate_occurrence(extract_document_text(doc), text_to_find, match_instance)
    requests = build_text_style_requests(intent, text_range)
    await BatchOperationManager(docs_service).apply_updates(document_id, requests)
    return (
        f'Successfully formatted instance {match_instance} of "{text_to_find}" '
        f"(range {text_range.start_index}-{text_range.end_index}) in document {document_id}."
    )


async def _apply_paragraph_style_impl(
    docs_service,
    document_id: str,
    start_index: int,
    end_index: int,
    intent: ParagraphStyleIntent,
) -> str:
    """Implementation for setting alignment or named style on the paragraphs in a range."""
    logger.info(
        f"[apply_paragraph_style] Invoked. Document ID: '{document_id}', range: {start_index}-{end_index}, "
        f"attributes: {intent.populated_attributes()}"
    )

    validator = ValidationManager()
    is_valid, error = validator.validate_document_id_structured(document_id)
    if not is_valid:
        return error
    is_valid, error = validator.validate_index_range_structured(start_index, end_index)
    if not is_valid:
        return error
    if intent.is_empty():
        raise EmptyIntentError("paragraph", ParagraphStyleIntent.attribute_names())

    requests = build_paragraph_style_requests(intent, IndexRange(start_index, end_index))
    await BatchOperationManager(docs_service).apply_updates(document_id, requests)
    return (
        f"Successfully applied paragraph style to range {start_index}-{end_index} "
        f"in document {document_id}."
    )


async def _insert_table_impl(
    docs_service, document_id: str, rows: int, columns: int, index: int
) -> str:
    """Implementation for inserting an empty table."""
    logger.info(
        f"[insert_table] Invoked. Document ID: '{document_id}', {rows}x{columns} at index {index}"
    )

    validator = ValidationManager()
    is_valid, error = validator.validate_document_id_structured(document_id)
    if not is_valid:
        return error
    is_valid, error = validator.validate_table_dimensions_structured(rows, columns)
    if not is_valid:
        return error
    is_valid, error = validator.validate_index_structured(index)
    if not is_valid:
        return error

    await BatchOperationManager(docs_service).apply_updates(
        document_id, [create_insert_table_request(index, rows, columns)]
    )
    return f"Successfully inserted a {rows}x{columns} table in document {document_id}."


async def _insert_page_break_impl(docs_service, document_id: str, index: int) -> str:
    """Implementation for inserting a page break."""
    logger.info(f"[insert_page_break] Invoked. Document ID: '{document_id}', index: {index}")

    validator = ValidationManager()
    is_valid, error = validator.validate_document_id_structured(document_id)
    if not is_valid:
        return error
    is_valid, error = validator.validate_index_structured(index)
    if not is_valid:
        return error

    await BatchOperationManager(docs_service).apply_updates(
        document_id, [create_insert_page_break_request(index)]
    )
    return f"Successfully inserted page break in document {document_id}."


def register_docs_tools(server, services: GoogleServices) -> Dict[str, Any]:
    """
    Register the Google Docs tools on a FastMCP server.

    Args:
        server: FastMCP server instance
        services: Authorized Google API clients

    Returns:
        Dict of the registered tool functions, keyed by tool name
    """
    docs_service = services.docs

    @handle_http_errors("read_google_doc", service_type="docs")
    async def read_google_doc(document_id: str, format: str = "text") -> str:
        """
        Reads the content of a Google Document.

        Args:
            document_id: The ID of the Google Document (from its URL).
            format: "text" for plain text (truncated to 4000 characters) or "json" for the raw document structure.

        Returns:
            str: The document text, or its JSON structure.
        """
        return await _read_google_doc_impl(docs_service, document_id, format)

    @handle_http_errors("append_to_google_doc", service_type="docs")
    async def append_to_google_doc(document_id: str, text_to_append: str) -> str:
        """
        Appends text to the very end of a Google Document.

        Args:
            document_id: The ID of the Google Document.
            text_to_append: The text to add. A newline is inserted first unless the document is empty.
        """
        return await _append_to_google_doc_impl(docs_service, document_id, text_to_append)

    @handle_http_errors("insert_text", service_type="docs")
    async def insert_text(document_id: str, text: str, index: int) -> str:
        """
        Inserts text at a specific index in a Google Document.

        Args:
            document_id: The ID of the Google Document.
            text: The text to insert.
            index: The 1-based index at which to insert (1 is the start of the body).
        """
        return await _insert_text_impl(docs_service, document_id, text, index)

    @handle_http_errors("delete_content_range", service_type="docs")
    async def delete_content_range(document_id: str, start_index: int, end_index: int) -> str:
        """
        Deletes content between two indices in a Google Document.

        Args:
            document_id: The ID of the Google Document.
            start_index: Start of the range (inclusive, 1-based).
            end_index: End of the range (exclusive).
        """
        return await _delete_content_range_impl(docs_service, document_id, start_index, end_index)

    @handle_http_errors("apply_text_style", service_type="docs")
    async def apply_text_style(
        document_id: str,
        start_index: int,
        end_index: int,
        bold: Optional[bool] = None,
        italic: Optional[bool] = None,
        underline: Optional[bool] = None,
        strikethrough: Optional[bool] = None,
        font_size: Optional[float] = None,
        font_family: Optional[str] = None,
        foreground_color: Optional[str] = None,
        background_color: Optional[str] = None,
        link_url: Optional[str] = None,
    ) -> str:
        """
        Applies character formatting to a range of a Google Document.

        Only the attributes you pass are changed; everything else is left as is.
        Passing false (e.g. bold=false) explicitly turns a style off.

        Args:
            document_id: The ID of the Google Document.
            start_index: Start of the range (inclusive, 1-based).
            end_index: End of the range (exclusive).
            bold, italic, underline, strikethrough: Turn the style on (true) or off (false).
            font_size: Font size in points.
            font_family: Font family name, e.g. "Arial".
            foreground_color: Text color as hex, e.g. "#FF0000" or "F00".
            background_color: Highlight color as hex.
            link_url: URL to link the text to.
        """
        intent = TextStyleIntent.from_arguments(
            bold=bold, italic=italic, underline=underline, strikethrough=strikethrough,
            font_size=font_size, font_family=font_family,
            foreground_color=foreground_color, background_color=background_color,
            link_url=link_url,
        )
        return await _apply_text_style_impl(docs_service, document_id, start_index, end_index, intent)

    @handle_http_errors("format_matching_text", service_type="docs")
    async def format_matching_text(
        document_id: str,
        text_to_find: str,
        match_instance: int = 1,
        bold: Optional[bool] = None,
        italic: Optional[bool] = None,
        underline: Optional[bool] = None,
        strikethrough: Optional[bool] = None,
        font_size: Optional[float] = None,
        font_family: Optional[str] = None,
        foreground_color: Optional[str] = None,
        background_color: Optional[str] = None,
        link_url: Optional[str] = None,
    ) -> str:
        """
        Finds a specific occurrence of text in a Google Document and formats it.

        Matching is case-sensitive and counts non-overlapping occurrences from the start.

        Args:
            document_id: The ID of the Google Document.
            text_to_find: The exact text to format.
            match_instance: Which occurrence to format (1 for the first).
            bold, italic, underline, strikethrough: Turn the style on (true) or off (false).
            font_size: Font size in points.
            font_family: Font family name.
            foreground_color: Text color as hex.
            background_color: Highlight color as hex.
            link_url: URL to link the text to.
        """
        intent = TextStyleIntent.from_arguments(
            bold=bold, italic=italic, underline=underline, strikethrough=strikethrough,
            font_size=font_size, font_family=font_family,
            foreground_color=foreground_color, background_color=background_color,
            link_url=link_url,
        )
        return await _format_matching_text_impl(
            docs_service, document_id, text_to_find, match_instance, intent
        )

    @handle_http_errors("apply_paragraph_style", service_type="docs")
    async def apply_paragraph_style(
        document_id: str,
        start_index: int,
        end_index: int,
        alignment: Optional[str] = None,
        named_style_type: Optional[str] = None,
    ) -> str:
        """
        Applies paragraph formatting to every paragraph overlapping a range.

        Args:
            document_id: The ID of the Google Document.
            start_index: Start of the range (inclusive, 1-based).
            end_index: End of the range (exclusive).
            alignment: START, CENTER, END or JUSTIFIED.
            named_style_type: NORMAL_TEXT, TITLE, SUBTITLE or HEADING_1 through HEADING_6.
        """
        intent = ParagraphStyleIntent.from_arguments(
            alignment=alignment, named_style_type=named_style_type
        )
        return await _apply_paragraph_style_impl(
            docs_service, document_id, start_index, end_index, intent
        )

    @handle_http_errors("insert_table", service_type="docs")
    async def insert_table(document_id: str, rows: int, columns: int, index: int) -> str:
        """
        Inserts an empty table into a Google Document.

        Args:
            document_id: The ID of the Google Document.
            rows: Number of rows (1 or more).
            columns: Number of columns (1 or more).
            index: The 1-based index at which to insert the table.
        """
        return await _insert_table_impl(docs_service, document_id, rows, columns, index)

    @handle_http_errors("insert_page_break", service_type="docs")
    async def insert_page_break(document_id: str, index: int) -> str:
        """
        Inserts a page break into a Google Document.

        Args:
            document_id: The ID of the Google Document.
            index: The 1-based index at which to insert the page break.
        """
        return await _insert_page_break_impl(docs_service, document_id, index)

    tools = {
        "read_google_doc": read_google_doc,
        "append_to_google_doc": append_to_google_doc,
        "insert_text": insert_text,
        "delete_content_range": delete_content_range,
        "apply_text_style": apply_text_style,
        "format_matching_text": format_matching_text,
        "apply_paragraph_style": apply_paragraph_style,
        "insert_table": insert_table,
        "insert_page_break": insert_page_break,
    }
    for tool in tools.values():
        server.tool()(tool)
    return tools
