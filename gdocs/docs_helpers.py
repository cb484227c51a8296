"""
Google Docs Helper Functions

This module provides utility functions for common Google Docs operations
to simplify the implementation of document editing tools.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Any, List

from gdocs.errors import InvalidRangeError, TextNotFoundError

logger = logging.getLogger(__name__)

# Fields requested when only the flattened body text is needed.
TEXT_RUN_FIELDS = "body(content(paragraph(elements(startIndex,endIndex,textRun(content)))))"
# Fields requested when only the structural end indices are needed.
END_INDEX_FIELDS = "body(content(endIndex))"


@dataclass(frozen=True)
class IndexRange:
    """
    Half-open range [start_index, end_index) over a document's 1-based index space.

    Index 0 is reserved by Google Docs, so a valid range satisfies
    1 <= start_index < end_index.
    """
    start_index: int
    end_index: int

    def __post_init__(self):
        if self.start_index < 1 or self.start_index >= self.end_index:
            raise InvalidRangeError(self.start_index, self.end_index)

    def __len__(self) -> int:
        return self.end_index - self.start_index

    def to_dict(self) -> Dict[str, int]:
        """Convert to the Docs API Range shape."""
        return {'startIndex': self.start_index, 'endIndex': self.end_index}


def extract_document_text(doc_data: Dict[str, Any]) -> str:
    """
    Flatten a document body into the concatenation of its paragraph text runs.

    Only top-level paragraphs contribute; tables and other structural elements
    are skipped, matching the text that read_google_doc returns.

    Args:
        doc_data: Raw document data from Google Docs API

    Returns:
        The document text, possibly empty
    """
    parts: List[str] = []
    for element in doc_data.get('body', {}).get('content', []):
        paragraph = element.get('paragraph')
        if not paragraph:
            continue
        for para_element in paragraph.get('elements', []):
            parts.append(para_element.get('textRun', {}).get('content', ''))
    return ''.join(parts)


def utf16_length(text: str) -> int:
    """Length of text in UTF-16 code units; astral characters count twice."""
    return len(text.encode("utf-16-le")) // 2


def locate_occurrence(full_text: str, needle: str, occurrence: int = 1) -> IndexRange:
    """
    Find the Nth non-overlapping occurrence of needle and return its document range.

    The scan resumes at the end of each match, so overlapping candidates are
    never counted: "aa" occurs once in "aaa". The scan works on code points,
    but the returned range is measured in UTF-16 code units, which is how the
    Docs API indexes text, and shifted by one to its 1-based convention.

    Args:
        full_text: Flattened document text (see extract_document_text)
        needle: Non-empty text to search for (case-sensitive)
        occurrence: Which match to return, 1 for the first

    Returns:
        IndexRange covering the match

    Raises:
        ValueError: If needle is empty or occurrence is below 1
        TextNotFoundError: If fewer than `occurrence` matches exist
    """
    if not needle:
        raise ValueError("needle must be a non-empty string")
    if occurrence < 1:
        raise ValueError(f"occurrence must be 1 or greater (got {occurrence})")

    found_count = 0
    search_pos = 0
    while found_count < occurrence:
        match_pos = full_text.find(needle, search_pos)
        if match_pos == -1:
            raise TextNotFoundError(needle, found_count, occurrence)
        found_count += 1
        search_pos = match_pos + len(needle)

    start_index = utf16_length(full_text[:match_pos]) + 1
    return IndexRange(start_index, start_index + utf16_length(needle))


def calculate_append_index(doc_data: Dict[str, Any]) -> int:
    """
    Compute the insertion index for appending text at the end of a document.

    Google Docs terminates every body with an implicit newline, so the last
    insertable position is one before the final structural element's endIndex.
    An empty or unreadable body falls back to index 1.

    Args:
        doc_data: Document data fetched with END_INDEX_FIELDS

    Returns:
        Index at which appended text should be inserted
    """
    content = doc_data.get('body', {}).get('content', [])
    if content:
        last_end = content[-1].get('endIndex')
        if last_end:
            return last_end - 1
    return 1


def create_insert_text_request(index: int, text: str) -> Dict[str, Any]:
    """
    Create an insertText request for Google Docs API.

    Args:
        index: Position to insert text
        text: Text to insert

    Returns:
        Dictionary representing the insertText request
    """
    return {
        'insertText': {
            'location': {'index': index},
            'text': text
        }
    }


def create_delete_range_request(start_index: int, end_index: int) -> Dict[str, Any]:
    """
    Create a deleteContentRange request for Google Docs API.

    Args:
        start_index: Start position of content to delete
        end_index: End position of content to delete

    Returns:
        Dictionary representing the deleteContentRange request
    """
    return {
        'deleteContentRange': {
            'range': {
                'startIndex': start_index,
                'endIndex': end_index
            }
        }
    }


def create_insert_table_request(index: int, rows: int, columns: int) -> Dict[str, Any]:
    """
    Create an insertTable request for Google Docs API.

    Args:
        index: Position to insert table
        rows: Number of rows
        columns: Number of columns

    Returns:
        Dictionary representing the insertTable request
    """
    return {
        'insertTable': {
            'location': {'index': index},
            'rows': rows,
            'columns': columns
        }
    }


def create_insert_page_break_request(index: int) -> Dict[str, Any]:
    """
    Create an insertPageBreak request for Google Docs API.

    Args:
        index: Position to insert page break

    Returns:
        Dictionary representing the insertPageBreak request
    """
    return {
        'insertPageBreak': {
            'location': {'index': index}
        }
    }


def truncate_text(text: str, max_length: int = 4000) -> str:
    """Cut text to max_length characters, noting the original size when truncated."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + f"... [truncated {len(text)} chars]"
