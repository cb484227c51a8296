"""
Unit tests for the Google Docs tools.

The *_impl functions are tested against a MagicMock Docs service. The
registered tool functions are tested too, since they own argument handling
and the conversion of local failures into structured errors.
"""
import json

import pytest
from unittest.mock import MagicMock

from googleapiclient.errors import HttpError

from auth.services import GoogleServices
from gdocs.docs_styles import ParagraphStyleIntent, TextStyleIntent
from gdocs.docs_tools import (
    _append_to_google_doc_impl,
    _apply_paragraph_style_impl,
    _apply_text_style_impl,
    _delete_content_range_impl,
    _format_matching_text_impl,
    _insert_page_break_impl,
    _insert_table_impl,
    _insert_text_impl,
    _read_google_doc_impl,
    register_docs_tools,
)
from gdocs.errors import EmptyIntentError, TextNotFoundError


def _http_error(status, message="boom"):
    resp = MagicMock()
    resp.status = status
    resp.reason = message
    return HttpError(resp, json.dumps({"error": {"message": message}}).encode())


def _docs_service(doc=None):
    service = MagicMock()
    service.documents.return_value.get.return_value.execute.return_value = doc or {}
    service.documents.return_value.batchUpdate.return_value.execute.return_value = {'replies': [{}]}
    return service


def _text_doc(*runs):
    return {
        'body': {
            'content': [
                {'paragraph': {'elements': [{'textRun': {'content': run}}]}}
                for run in runs
            ]
        }
    }


def _sent_requests(service):
    """Requests passed to the single batchUpdate call."""
    batch_update = service.documents.return_value.batchUpdate
    batch_update.assert_called_once()
    return batch_update.call_args.kwargs['body']['requests']


def _tools(docs_service):
    return register_docs_tools(MagicMock(), GoogleServices(docs=docs_service, drive=MagicMock()))


class TestReadGoogleDoc:
    """Tests for _read_google_doc_impl."""

    @pytest.mark.asyncio
    async def test_text_format(self):
        service = _docs_service(_text_doc("Hello\n", "World\n"))

        result = await _read_google_doc_impl(service, "doc123")

        assert result == "Content:\n---\nHello\nWorld\n"

    @pytest.mark.asyncio
    async def test_empty_document(self):
        service = _docs_service(_text_doc("\n"))

        result = await _read_google_doc_impl(service, "doc123")

        assert result == "Document found, but appears empty."

    @pytest.mark.asyncio
    async def test_long_document_truncated(self):
        service = _docs_service(_text_doc("x" * 5000))

        result = await _read_google_doc_impl(service, "doc123")

        assert result.endswith("... [truncated 5000 chars]")
        assert result.count("x") == 4000

    @pytest.mark.asyncio
    async def test_json_format(self):
        doc = {'documentId': 'doc123', 'title': 'Notes'}
        service = _docs_service(doc)

        result = await _read_google_doc_impl(service, "doc123", "json")

        assert json.loads(result) == doc
        service.documents.return_value.get.assert_called_once_with(documentId="doc123", fields="*")

    @pytest.mark.asyncio
    async def test_unknown_format(self):
        service = _docs_service()

        result = await _read_google_doc_impl(service, "doc123", "markdown")

        assert json.loads(result)["code"] == "INVALID_PARAM_VALUE"
        service.documents.return_value.get.assert_not_called()


class TestAppendToGoogleDoc:
    """Tests for _append_to_google_doc_impl."""

    @pytest.mark.asyncio
    async def test_appends_before_final_newline(self):
        """Insertion index is the last endIndex minus one, with a leading newline."""
        service = _docs_service({'body': {'content': [{'endIndex': 1}, {'endIndex': 30}]}})

        result = await _append_to_google_doc_impl(service, "doc123", "More text")

        assert result == "Successfully appended text to document doc123."
        assert _sent_requests(service) == [
            {'insertText': {'location': {'index': 29}, 'text': '\nMore text'}}
        ]

    @pytest.mark.asyncio
    async def test_empty_document_inserts_at_one(self):
        """An empty body gets no leading newline."""
        service = _docs_service({'body': {'content': []}})

        await _append_to_google_doc_impl(service, "doc123", "First")

        assert _sent_requests(service) == [
            {'insertText': {'location': {'index': 1}, 'text': 'First'}}
        ]

    @pytest.mark.asyncio
    async def test_empty_text_rejected(self):
        service = _docs_service()

        result = await _append_to_google_doc_impl(service, "doc123", "")

        assert json.loads(result)["code"] == "MISSING_REQUIRED_PARAM"
        service.documents.return_value.batchUpdate.assert_not_called()


class TestSimpleEdits:
    """Tests for insert, delete, table and page break tools."""

    @pytest.mark.asyncio
    async def test_insert_text(self):
        service = _docs_service()

        result = await _insert_text_impl(service, "doc123", "Hi", 5)

        assert "at index 5" in result
        assert _sent_requests(service) == [{'insertText': {'location': {'index': 5}, 'text': 'Hi'}}]

    @pytest.mark.asyncio
    async def test_insert_text_index_zero(self):
        service = _docs_service()

        result = await _insert_text_impl(service, "doc123", "Hi", 0)

        assert json.loads(result)["code"] == "INDEX_OUT_OF_BOUNDS"
        service.documents.return_value.batchUpdate.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_content_range(self):
        service = _docs_service()

        result = await _delete_content_range_impl(service, "doc123", 3, 9)

        assert result == "Successfully deleted content from document doc123 between 3 and 9."
        assert _sent_requests(service) == [
            {'deleteContentRange': {'range': {'startIndex': 3, 'endIndex': 9}}}
        ]

    @pytest.mark.asyncio
    async def test_delete_reversed_range(self):
        service = _docs_service()

        result = await _delete_content_range_impl(service, "doc123", 9, 3)

        assert json.loads(result)["code"] == "INVALID_INDEX_RANGE"
        service.documents.return_value.batchUpdate.assert_not_called()

    @pytest.mark.asyncio
    async def test_insert_table(self):
        service = _docs_service()

        result = await _insert_table_impl(service, "doc123", 2, 3, 1)

        assert result == "Successfully inserted a 2x3 table in document doc123."
        assert _sent_requests(service) == [
            {'insertTable': {'location': {'index': 1}, 'rows': 2, 'columns': 3}}
        ]

    @pytest.mark.asyncio
    async def test_insert_table_zero_rows(self):
        service = _docs_service()

        result = await _insert_table_impl(service, "doc123", 0, 3, 1)

        assert json.loads(result)["code"] == "INVALID_TABLE_DIMENSIONS"

    @pytest.mark.asyncio
    async def test_insert_page_break(self):
        service = _docs_service()

        result = await _insert_page_break_impl(service, "doc123", 4)

        assert result == "Successfully inserted page break in document doc123."
        assert _sent_requests(service) == [{'insertPageBreak': {'location': {'index': 4}}}]


class TestApplyTextStyle:
    """Tests for _apply_text_style_impl."""

    @pytest.mark.asyncio
    async def test_bold_and_color_request(self):
        service = _docs_service()
        intent = TextStyleIntent(bold=True, foreground_color="#FF0000")

        result = await _apply_text_style_impl(service, "doc123", 5, 10, intent)

        assert result == (
            "Successfully applied text style (bold, foregroundColor) "
            "to range 5-10 in document doc123."
        )
        assert _sent_requests(service) == [{
            'updateTextStyle': {
                'range': {'startIndex': 5, 'endIndex': 10},
                'textStyle': {
                    'bold': True,
                    'foregroundColor': {'color': {'rgbColor': {'red': 1.0, 'green': 0.0, 'blue': 0.0}}},
                },
                'fields': 'bold,foregroundColor',
            }
        }]

    @pytest.mark.asyncio
    async def test_empty_intent_raises(self):
        service = _docs_service()

        with pytest.raises(EmptyIntentError):
            await _apply_text_style_impl(service, "doc123", 5, 10, TextStyleIntent())

        service.documents.return_value.batchUpdate.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_range_checked_first(self):
        service = _docs_service()

        result = await _apply_text_style_impl(service, "doc123", 0, 10, TextStyleIntent(bold=True))

        assert json.loads(result)["code"] == "INVALID_INDEX_RANGE"


class TestFormatMatchingText:
    """Tests for _format_matching_text_impl."""

    @pytest.mark.asyncio
    async def test_styles_second_match(self):
        service = _docs_service(_text_doc("ababab"))

        result = await _format_matching_text_impl(
            service, "doc123", "ab", 2, TextStyleIntent(italic=True)
        )

        assert 'instance 2 of "ab"' in result
        requests = _sent_requests(service)
        assert requests[0]['updateTextStyle']['range'] == {'startIndex': 3, 'endIndex': 5}
        assert requests[0]['updateTextStyle']['fields'] == 'italic'

    @pytest.mark.asyncio
    async def test_reads_flattened_text_fields(self):
        service = _docs_service(_text_doc("abc"))

        await _format_matching_text_impl(service, "doc123", "b", 1, TextStyleIntent(bold=True))

        service.documents.return_value.get.assert_called_once_with(
            documentId="doc123",
            fields="body(content(paragraph(elements(startIndex,endIndex,textRun(content)))))",
        )

    @pytest.mark.asyncio
    async def test_too_few_matches(self):
        service = _docs_service(_text_doc("aaa"))

        with pytest.raises(TextNotFoundError) as exc_info:
            await _format_matching_text_impl(service, "doc123", "aa", 2, TextStyleIntent(bold=True))

        assert exc_info.value.occurrences_found == 1
        service.documents.return_value.batchUpdate.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_body(self):
        service = _docs_service({'body': {}})

        result = await _format_matching_text_impl(
            service, "doc123", "a", 1, TextStyleIntent(bold=True)
        )

        assert json.loads(result)["code"] == "EMPTY_DOCUMENT"

    @pytest.mark.asyncio
    async def test_empty_needle(self):
        service = _docs_service()

        result = await _format_matching_text_impl(service, "doc123", "", 1, TextStyleIntent(bold=True))

        assert json.loads(result)["code"] == "EMPTY_SEARCH_TEXT"
        service.documents.return_value.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_intent_checked_before_fetch(self):
        service = _docs_service()

        with pytest.raises(EmptyIntentError):
            await _format_matching_text_impl(service, "doc123", "a", 1, TextStyleIntent())

        service.documents.return_value.get.assert_not_called()


class TestApplyParagraphStyle:
    """Tests for _apply_paragraph_style_impl."""

    @pytest.mark.asyncio
    async def test_alignment_and_heading(self):
        service = _docs_service()
        intent = ParagraphStyleIntent(alignment="CENTER", named_style_type="HEADING_2")

        result = await _apply_paragraph_style_impl(service, "doc123", 1, 12, intent)

        assert result == "Successfully applied paragraph style to range 1-12 in document doc123."
        assert _sent_requests(service) == [{
            'updateParagraphStyle': {
                'range': {'startIndex': 1, 'endIndex': 12},
                'paragraphStyle': {'alignment': 'CENTER', 'namedStyleType': 'HEADING_2'},
                'fields': 'alignment,namedStyleType',
            }
        }]


class TestRegisteredDocsTools:
    """Tests for the tool functions returned by register_docs_tools."""

    def test_all_tools_registered(self):
        server = MagicMock()

        tools = register_docs_tools(server, GoogleServices(docs=MagicMock(), drive=MagicMock()))

        assert set(tools) == {
            "read_google_doc", "append_to_google_doc", "insert_text", "delete_content_range",
            "apply_text_style", "format_matching_text", "apply_paragraph_style",
            "insert_table", "insert_page_break",
        }
        assert server.tool.call_count == len(tools)

    @pytest.mark.asyncio
    async def test_none_arguments_are_absent(self):
        """Only the attributes actually passed reach the field mask."""
        service = _docs_service()
        tools = _tools(service)

        await tools["apply_text_style"](
            document_id="doc123", start_index=1, end_index=4, bold=False, italic=None, font_size=None
        )

        update = _sent_requests(service)[0]['updateTextStyle']
        assert update['fields'] == 'bold'
        assert update['textStyle'] == {'bold': False}

    @pytest.mark.asyncio
    async def test_empty_style_returns_structured_error(self):
        service = _docs_service()
        tools = _tools(service)

        result = await tools["apply_text_style"](document_id="doc123", start_index=1, end_index=4)

        assert json.loads(result)["code"] == "EMPTY_STYLE"
        service.documents.return_value.batchUpdate.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_color_returns_structured_error(self):
        service = _docs_service()
        tools = _tools(service)

        result = await tools["apply_text_style"](
            document_id="doc123", start_index=1, end_index=4, bold=True, background_color="#GGG"
        )

        parsed = json.loads(result)
        assert parsed["code"] == "INVALID_COLOR_FORMAT"
        assert parsed["context"]["received"] == {"background_color": "#GGG"}
        service.documents.return_value.batchUpdate.assert_not_called()

    @pytest.mark.asyncio
    async def test_match_not_found_returns_structured_error(self):
        service = _docs_service(_text_doc("abc"))
        tools = _tools(service)

        result = await tools["format_matching_text"](
            document_id="doc123", text_to_find="xyz", bold=True
        )

        parsed = json.loads(result)
        assert parsed["code"] == "SEARCH_TEXT_NOT_FOUND"
        assert parsed["context"]["occurrences_found"] == 0

    @pytest.mark.asyncio
    async def test_invalid_alignment_returns_structured_error(self):
        service = _docs_service()
        tools = _tools(service)

        result = await tools["apply_paragraph_style"](
            document_id="doc123", start_index=1, end_index=4, alignment="LEFT"
        )

        assert json.loads(result)["code"] == "INVALID_STYLE_VALUE"

    @pytest.mark.asyncio
    async def test_missing_document_returns_not_found(self):
        service = _docs_service()
        service.documents.return_value.get.return_value.execute.side_effect = _http_error(404)
        tools = _tools(service)

        result = await tools["read_google_doc"](document_id="gone123")

        parsed = json.loads(result)
        assert parsed["code"] == "DOCUMENT_NOT_FOUND"
        assert parsed["context"]["received"] == {"document_id": "gone123"}

    @pytest.mark.asyncio
    async def test_api_failure_raises_with_tool_name(self):
        service = _docs_service()
        service.documents.return_value.batchUpdate.return_value.execute.side_effect = _http_error(500)
        tools = _tools(service)

        with pytest.raises(Exception) as exc_info:
            await tools["insert_text"](document_id="doc123", text="Hi", index=1)

        assert "API error in insert_text" in str(exc_info.value)
        assert "doc123" in str(exc_info.value)
