"""
Unit tests for the hex color codec and the style request builders.

These tests verify:
- Hex parsing (long and short forms, optional '#', rejection of anything else)
- Field mask ordering and payload/mask correspondence
- Sparse intents: explicit False is sent, UNSET is not
- Validation failures raised by the builders
"""
import pytest

from gdocs.docs_helpers import IndexRange
from gdocs.docs_styles import (
    UNSET,
    Alignment,
    NamedStyleType,
    ParagraphStyleIntent,
    RgbColor,
    TextStyleIntent,
    build_paragraph_style_requests,
    build_text_style,
    build_text_style_requests,
    hex_to_rgb_color,
)
from gdocs.errors import (
    InvalidColorFormatError,
    InvalidFontSizeError,
    InvalidStyleValueError,
)


class TestHexToRgbColor:
    """Tests for hex_to_rgb_color."""

    def test_six_digit_with_hash(self):
        """#FF0000 is pure red."""
        assert hex_to_rgb_color("#FF0000") == RgbColor(1.0, 0.0, 0.0)

    def test_three_digit_matches_six_digit(self):
        """Shorthand doubles each digit."""
        assert hex_to_rgb_color("#0F0") == hex_to_rgb_color("00FF00")
        assert hex_to_rgb_color("#0F0") == RgbColor(0.0, 1.0, 0.0)

    def test_hash_is_optional(self):
        """Leading '#' does not change the result."""
        assert hex_to_rgb_color("1a2B3c") == hex_to_rgb_color("#1a2B3c")

    def test_channels_divided_by_255(self):
        """Each channel is the byte value over 255."""
        color = hex_to_rgb_color("#336699")
        assert color.red == pytest.approx(0x33 / 255)
        assert color.green == pytest.approx(0x66 / 255)
        assert color.blue == pytest.approx(0x99 / 255)

    @pytest.mark.parametrize("value", ["", "#", "#FF00", "#FF00000", "GGGGGG", "#12345G", "##FFF", " FFF", "FFF "])
    def test_invalid_values_return_none(self, value):
        """Any other length or a non-hex character is rejected."""
        assert hex_to_rgb_color(value) is None

    def test_non_string_returns_none(self):
        """The codec never raises."""
        assert hex_to_rgb_color(None) is None
        assert hex_to_rgb_color(0xFF0000) is None

    def test_channels_in_unit_interval(self):
        """All channels stay within [0, 1]."""
        for value in ("000", "FFF", "#808080", "#abcdef"):
            color = hex_to_rgb_color(value)
            for channel in (color.red, color.green, color.blue):
                assert 0.0 <= channel <= 1.0

    def test_to_dict(self):
        """RgbColor serializes to the Docs API shape."""
        assert RgbColor(1.0, 0.5, 0.0).to_dict() == {'red': 1.0, 'green': 0.5, 'blue': 0.0}


class TestTextStyleIntent:
    """Tests for TextStyleIntent construction."""

    def test_defaults_are_unset(self):
        """A new intent carries nothing."""
        intent = TextStyleIntent()
        assert intent.bold is UNSET
        assert intent.is_empty()

    def test_from_arguments_drops_none(self):
        """None means omitted."""
        intent = TextStyleIntent.from_arguments(bold=None, italic=False)
        assert intent.bold is UNSET
        assert intent.italic is False
        assert intent.populated_attributes() == ["italic"]

    def test_from_arguments_rejects_unknown_attribute(self):
        """Unknown attribute names are a programming error."""
        with pytest.raises(TypeError):
            TextStyleIntent.from_arguments(blink=True)


class TestBuildTextStyleRequests:
    """Tests for build_text_style_requests."""

    def setup_method(self):
        self.text_range = IndexRange(5, 10)

    def test_bold_and_color(self):
        """Payload and mask carry exactly the two attributes."""
        intent = TextStyleIntent(bold=True, foreground_color="#FF0000")

        requests = build_text_style_requests(intent, self.text_range)

        assert requests == [{
            'updateTextStyle': {
                'range': {'startIndex': 5, 'endIndex': 10},
                'textStyle': {
                    'bold': True,
                    'foregroundColor': {'color': {'rgbColor': {'red': 1.0, 'green': 0.0, 'blue': 0.0}}},
                },
                'fields': 'bold,foregroundColor',
            }
        }]

    def test_explicit_false_is_sent(self):
        """False turns a style off and is part of the mask."""
        requests = build_text_style_requests(TextStyleIntent(bold=False), self.text_range)

        update = requests[0]['updateTextStyle']
        assert update['textStyle'] == {'bold': False}
        assert update['fields'] == 'bold'

    def test_empty_intent_builds_nothing(self):
        """An intent with no attributes yields no request."""
        assert build_text_style_requests(TextStyleIntent(), self.text_range) == []

    def test_all_attributes_in_declaration_order(self):
        """The field mask follows the fixed declaration order."""
        intent = TextStyleIntent(
            link_url="https://example.com",
            background_color="#00F",
            foreground_color="#F00",
            font_family="Arial",
            font_size=12,
            strikethrough=True,
            underline=True,
            italic=True,
            bold=True,
        )

        update = build_text_style_requests(intent, self.text_range)[0]['updateTextStyle']

        assert update['fields'] == (
            'bold,italic,underline,strikethrough,fontSize,weightedFontFamily,'
            'foregroundColor,backgroundColor,link'
        )
        assert update['textStyle']['fontSize'] == {'magnitude': 12, 'unit': 'PT'}
        assert update['textStyle']['weightedFontFamily'] == {'fontFamily': 'Arial'}
        assert update['textStyle']['link'] == {'url': 'https://example.com'}
        assert update['textStyle']['backgroundColor'] == {
            'color': {'rgbColor': {'red': 0.0, 'green': 0.0, 'blue': 1.0}}
        }

    def test_mask_matches_payload_keys(self):
        """Every payload key is in the mask and nothing else is."""
        intent = TextStyleIntent(italic=True, font_size=9.5, link_url="https://a.b")

        style, field_names = build_text_style(intent)

        assert set(style) == set(field_names)
        assert len(field_names) == len(intent.populated_attributes())

    def test_order_independent_of_argument_order(self):
        """Keyword order does not affect the mask."""
        first = TextStyleIntent.from_arguments(underline=True, bold=True)
        second = TextStyleIntent.from_arguments(bold=True, underline=True)

        assert build_text_style_requests(first, self.text_range) == \
            build_text_style_requests(second, self.text_range)

    def test_invalid_color_names_attribute(self):
        """A bad color raises with the attribute and raw value."""
        with pytest.raises(InvalidColorFormatError) as exc_info:
            build_text_style_requests(TextStyleIntent(foreground_color="#GGG"), self.text_range)

        assert exc_info.value.attribute == "foreground_color"
        assert exc_info.value.api_field == "foregroundColor"
        assert exc_info.value.raw_value == "#GGG"

    def test_invalid_background_color(self):
        """Background colors go through the same codec."""
        with pytest.raises(InvalidColorFormatError) as exc_info:
            build_text_style_requests(TextStyleIntent(background_color="red"), self.text_range)

        assert exc_info.value.attribute == "background_color"
        assert exc_info.value.api_field == "backgroundColor"

    @pytest.mark.parametrize("size", [0, -3, float("nan"), float("inf"), 10 ** 400, True, "12"])
    def test_invalid_font_size(self, size):
        """Font size must be a positive finite number."""
        with pytest.raises(InvalidFontSizeError):
            build_text_style_requests(TextStyleIntent(font_size=size), self.text_range)

    def test_non_boolean_flag_rejected(self):
        """Flags must be real booleans."""
        with pytest.raises(InvalidStyleValueError):
            build_text_style_requests(TextStyleIntent(bold="yes"), self.text_range)

    def test_blank_font_family_rejected(self):
        """A blank font family is not sent."""
        with pytest.raises(InvalidStyleValueError):
            build_text_style_requests(TextStyleIntent(font_family="  "), self.text_range)


class TestBuildParagraphStyleRequests:
    """Tests for build_paragraph_style_requests."""

    def setup_method(self):
        self.text_range = IndexRange(1, 20)

    def test_alignment_then_named_style(self):
        """Paragraph fields follow declaration order."""
        intent = ParagraphStyleIntent(named_style_type="HEADING_1", alignment="CENTER")

        requests = build_paragraph_style_requests(intent, self.text_range)

        assert requests == [{
            'updateParagraphStyle': {
                'range': {'startIndex': 1, 'endIndex': 20},
                'paragraphStyle': {'alignment': 'CENTER', 'namedStyleType': 'HEADING_1'},
                'fields': 'alignment,namedStyleType',
            }
        }]

    def test_enum_members_accepted(self):
        """Enum members serialize to their API value."""
        intent = ParagraphStyleIntent(alignment=Alignment.JUSTIFIED)

        update = build_paragraph_style_requests(intent, self.text_range)[0]['updateParagraphStyle']

        assert update['paragraphStyle'] == {'alignment': 'JUSTIFIED'}
        assert update['fields'] == 'alignment'

    def test_named_style_only(self):
        """A named style alone is a single-field mask."""
        intent = ParagraphStyleIntent(named_style_type=NamedStyleType.TITLE)

        update = build_paragraph_style_requests(intent, self.text_range)[0]['updateParagraphStyle']

        assert update['fields'] == 'namedStyleType'

    def test_empty_intent_builds_nothing(self):
        """No attributes, no request."""
        assert build_paragraph_style_requests(ParagraphStyleIntent(), self.text_range) == []

    def test_unknown_alignment_rejected(self):
        """Only the four alignments are accepted."""
        with pytest.raises(InvalidStyleValueError) as exc_info:
            build_paragraph_style_requests(ParagraphStyleIntent(alignment="LEFT"), self.text_range)

        assert exc_info.value.attribute == "alignment"
        assert "START" in exc_info.value.allowed

    def test_unknown_named_style_rejected(self):
        """HEADING_7 does not exist."""
        with pytest.raises(InvalidStyleValueError):
            build_paragraph_style_requests(
                ParagraphStyleIntent(named_style_type="HEADING_7"), self.text_range
            )
