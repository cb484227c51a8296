"""
Google Docs Style Requests

Translates sparse styling intents into updateTextStyle / updateParagraphStyle
requests. A request's payload and its field mask are always built together:
every populated payload key is named in the mask and nothing else is.

An attribute left at UNSET means "leave unchanged". Any other value, including
False, means "set to this value".
"""
import logging
import math
import re
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from gdocs.docs_helpers import IndexRange
from gdocs.errors import (
    InvalidColorFormatError,
    InvalidFontSizeError,
    InvalidStyleValueError,
)

logger = logging.getLogger(__name__)

_HEX_COLOR_RE = re.compile(r"[0-9A-Fa-f]{3}|[0-9A-Fa-f]{6}")


class _Unset(Enum):
    UNSET = "UNSET"

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset.UNSET


class Alignment(str, Enum):
    """Paragraph alignment values accepted by the Docs API."""
    START = "START"
    CENTER = "CENTER"
    END = "END"
    JUSTIFIED = "JUSTIFIED"


class NamedStyleType(str, Enum):
    """Named paragraph styles accepted by the Docs API."""
    NORMAL_TEXT = "NORMAL_TEXT"
    TITLE = "TITLE"
    SUBTITLE = "SUBTITLE"
    HEADING_1 = "HEADING_1"
    HEADING_2 = "HEADING_2"
    HEADING_3 = "HEADING_3"
    HEADING_4 = "HEADING_4"
    HEADING_5 = "HEADING_5"
    HEADING_6 = "HEADING_6"


@dataclass(frozen=True)
class RgbColor:
    """An RGB color with each channel in [0.0, 1.0]."""
    red: float
    green: float
    blue: float

    def to_dict(self) -> Dict[str, float]:
        return {'red': self.red, 'green': self.green, 'blue': self.blue}


def hex_to_rgb_color(hex_color: str) -> Optional[RgbColor]:
    """
    Convert a hex color literal to an RgbColor.

    Accepts "#FF0000", "FF0000", "#F00" and "F00". Three-digit forms are
    expanded by doubling each digit.

    Args:
        hex_color: The hex color string

    Returns:
        RgbColor, or None if the value is not a valid hex color
    """
    if not isinstance(hex_color, str):
        return None
    hex_clean = hex_color[1:] if hex_color.startswith('#') else hex_color
    if not _HEX_COLOR_RE.fullmatch(hex_clean):
        return None
    if len(hex_clean) == 3:
        hex_clean = ''.join(c * 2 for c in hex_clean)

    value = int(hex_clean, 16)
    return RgbColor(
        red=((value >> 16) & 255) / 255,
        green=((value >> 8) & 255) / 255,
        blue=(value & 255) / 255,
    )


class _SparseIntent:
    """Shared behaviour for intents whose fields default to UNSET."""

    @classmethod
    def from_arguments(cls, **kwargs: Any):
        """
        Build an intent from tool arguments.

        None stands for an omitted argument and leaves the attribute UNSET;
        MCP clients send JSON null and omission the same way.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise TypeError(f"Unknown {cls.__name__} attribute(s): {', '.join(unknown)}")
        return cls(**{k: v for k, v in kwargs.items() if v is not None})

    def is_set(self, attribute: str) -> bool:
        return getattr(self, attribute) is not UNSET

    def populated_attributes(self) -> List[str]:
        """Names of the attributes that carry a value, in declaration order."""
        return [f.name for f in fields(self) if self.is_set(f.name)]

    def is_empty(self) -> bool:
        return not self.populated_attributes()

    @classmethod
    def attribute_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]


@dataclass(frozen=True)
class TextStyleIntent(_SparseIntent):
    """Requested character-level styling. UNSET attributes are left unchanged."""
    bold: Union[bool, _Unset] = UNSET
    italic: Union[bool, _Unset] = UNSET
    underline: Union[bool, _Unset] = UNSET
    strikethrough: Union[bool, _Unset] = UNSET
    font_size: Union[float, _Unset] = UNSET
    font_family: Union[str, _Unset] = UNSET
    foreground_color: Union[str, _Unset] = UNSET
    background_color: Union[str, _Unset] = UNSET
    link_url: Union[str, _Unset] = UNSET


@dataclass(frozen=True)
class ParagraphStyleIntent(_SparseIntent):
    """Requested paragraph-level styling. UNSET attributes are left unchanged."""
    alignment: Union[Alignment, str, _Unset] = UNSET
    named_style_type: Union[NamedStyleType, str, _Unset] = UNSET


# --- attribute converters -------------------------------------------------


def _boolean(attribute: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise InvalidStyleValueError(attribute, value, ["true", "false"])
    return value


def _font_size(attribute: str, value: Any) -> Dict[str, Any]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidFontSizeError(value)
    try:
        as_float = float(value)
    except OverflowError:
        raise InvalidFontSizeError(value) from None
    if math.isnan(as_float) or math.isinf(as_float) or as_float <= 0:
        raise InvalidFontSizeError(value)
    return {'magnitude': value, 'unit': 'PT'}


def _font_family(attribute: str, value: Any) -> Dict[str, str]:
    if not isinstance(value, str) or not value.strip():
        raise InvalidStyleValueError(attribute, value, ["non-empty font family name"])
    return {'fontFamily': value}


_COLOR_API_FIELDS = {
    "foreground_color": "foregroundColor",
    "background_color": "backgroundColor",
}


def _color(attribute: str, value: Any) -> Dict[str, Any]:
    rgb_color = hex_to_rgb_color(value)
    if rgb_color is None:
        raise InvalidColorFormatError(attribute, value, _COLOR_API_FIELDS.get(attribute))
    return {'color': {'rgbColor': rgb_color.to_dict()}}


def _link(attribute: str, value: Any) -> Dict[str, str]:
    return {'url': value}


def _enum_value(enum_cls: type) -> Callable[[str, Any], str]:
    def convert(attribute: str, value: Any) -> str:
        try:
            return enum_cls(value).value
        except (ValueError, TypeError):
            raise InvalidStyleValueError(attribute, value, [m.value for m in enum_cls]) from None
    return convert


# (intent attribute, Docs API field, converter), in field-mask order.
TEXT_STYLE_FIELDS: Tuple[Tuple[str, str, Callable[[str, Any], Any]], ...] = (
    ("bold", "bold", _boolean),
    ("italic", "italic", _boolean),
    ("underline", "underline", _boolean),
    ("strikethrough", "strikethrough", _boolean),
    ("font_size", "fontSize", _font_size),
    ("font_family", "weightedFontFamily", _font_family),
    ("foreground_color", "foregroundColor", _color),
    ("background_color", "backgroundColor", _color),
    ("link_url", "link", _link),
)

PARAGRAPH_STYLE_FIELDS: Tuple[Tuple[str, str, Callable[[str, Any], Any]], ...] = (
    ("alignment", "alignment", _enum_value(Alignment)),
    ("named_style_type", "namedStyleType", _enum_value(NamedStyleType)),
)


def _build_style(intent: _SparseIntent, field_table) -> Tuple[Dict[str, Any], List[str]]:
    style: Dict[str, Any] = {}
    field_names: List[str] = []
    for attribute, api_field, convert in field_table:
        value = getattr(intent, attribute)
        if value is UNSET:
            continue
        style[api_field] = convert(attribute, value)
        field_names.append(api_field)
    return style, field_names


def build_text_style(intent: TextStyleIntent) -> Tuple[Dict[str, Any], List[str]]:
    """
    Build the Docs API TextStyle payload for an intent.

    Returns:
        Tuple of (text_style_dict, list_of_field_names)

    Raises:
        InvalidColorFormatError: If a color attribute is not a hex color
        InvalidFontSizeError: If font_size is not a positive number
        InvalidStyleValueError: If a flag is not a boolean or font_family is blank
    """
    return _build_style(intent, TEXT_STYLE_FIELDS)


def build_paragraph_style(intent: ParagraphStyleIntent) -> Tuple[Dict[str, Any], List[str]]:
    """Build the Docs API ParagraphStyle payload and field names for an intent."""
    return _build_style(intent, PARAGRAPH_STYLE_FIELDS)


def build_text_style_requests(
    intent: TextStyleIntent,
    text_range: IndexRange
) -> List[Dict[str, Any]]:
    """
    Build the updateTextStyle requests for applying an intent to a range.

    All attributes go into a single request so the update is atomic for the
    whole field mask.

    Args:
        intent: Sparse text styling intent
        text_range: Range of text to style

    Returns:
        A one-element list, or an empty list when the intent has no attributes
    """
    text_style, field_names = build_text_style(intent)
    if not field_names:
        return []

    logger.debug(f"Built updateTextStyle for {text_range.to_dict()} with fields {field_names}")
    return [{
        'updateTextStyle': {
            'range': text_range.to_dict(),
            'textStyle': text_style,
            'fields': ','.join(field_names),
        }
    }]


def build_paragraph_style_requests(
    intent: ParagraphStyleIntent,
    text_range: IndexRange
) -> List[Dict[str, Any]]:
    """
    Build the updateParagraphStyle requests for applying an intent to a range.

    Args:
        intent: Sparse paragraph styling intent
        text_range: Range covering the paragraphs to style

    Returns:
        A one-element list, or an empty list when the intent has no attributes
    """
    paragraph_style, field_names = build_paragraph_style(intent)
    if not field_names:
        return []

    return [{
        'updateParagraphStyle': {
            'range': text_range.to_dict(),
            'paragraphStyle': paragraph_style,
            'fields': ','.join(field_names),
        }
    }]
