"""Tests for style/tokens.py"""

from termmux.style.tokens import (
    Attribute,
    StyleToken,
    TokenKind,
    classify,
    extract,
    parse,
    serialize,
    split_codes,
    strip_escapes,
)


class TestExtract:
    """Tests for extract()."""

    def test_extracts_in_order(self):
        """Parameter strings come back in order of appearance."""
        text = "\x1b[1;31mred\x1b[0m plain \x1b[38;5;190mlime"
        assert extract(text) == ["1;31", "0", "38;5;190"]

    def test_no_escapes(self):
        assert extract("plain text") == []

    def test_empty_parameters(self):
        """ESC[m has an empty parameter string."""
        assert extract("\x1b[m") == [""]

    def test_ignores_non_sgr_sequences(self):
        """Cursor movement is not an SGR code."""
        assert extract("\x1b[2K\x1b[3A\x1b[32mx") == ["32"]


class TestSplitCodes:
    """Tests for split_codes()."""

    def test_simple_split(self):
        assert split_codes("1;4;31") == ["1", "4", "31"]

    def test_extended_foreground_is_atomic(self):
        assert split_codes("1;38;5;190;4") == ["1", "38;5;190", "4"]

    def test_extended_background_is_atomic(self):
        assert split_codes("48;5;17") == ["48;5;17"]

    def test_truecolor_is_atomic(self):
        assert split_codes("38;2;10;20;30;1") == ["38;2;10;20;30", "1"]

    def test_underline_color_is_atomic(self):
        """58;5;N must not leak a '5' (blink) token."""
        assert split_codes("58;5;3") == ["58;5;3"]

    def test_truncated_extended_color(self):
        """38;5 without the color number stays one opaque code."""
        assert split_codes("38;5") == ["38;5"]
        assert split_codes("1;48;2;10;20") == ["1", "48;2;10;20"]
        assert split_codes("4;38") == ["4", "38"]

    def test_unsupported_color_mode_takes_the_rest(self):
        """The numbers after an unknown mode are never read as attributes."""
        assert split_codes("38;7;1;4") == ["38;7;1;4"]

    def test_absent_numbers_behave_like_zero(self):
        assert split_codes("") == ["0"]
        assert split_codes(";31") == ["0", "31"]
        assert split_codes("1;;4") == ["1", "0", "4"]


class TestClassify:
    """Tests for classify()."""

    def test_reset(self):
        token = classify("0")
        assert token.kind is TokenKind.RESET
        assert token.is_reset_family

    def test_leading_zeros_are_normalized(self):
        assert classify("00") == classify("0")
        assert classify("031").code == "31"

    def test_basic_colors(self):
        assert classify("31").kind is TokenKind.FOREGROUND
        assert classify("95").kind is TokenKind.FOREGROUND
        assert classify("42").kind is TokenKind.BACKGROUND
        assert classify("104").kind is TokenKind.BACKGROUND

    def test_default_colors(self):
        fg = classify("39")
        bg = classify("49")
        assert fg.kind is TokenKind.FOREGROUND and fg.is_default
        assert bg.kind is TokenKind.BACKGROUND and bg.is_default
        assert fg.is_reset_family and bg.is_reset_family

    def test_extended_colors(self):
        fg = classify("38;5;190")
        bg = classify("48;2;1;2;3")
        assert fg.kind is TokenKind.FOREGROUND and fg.extended
        assert bg.kind is TokenKind.BACKGROUND and bg.extended
        assert not fg.is_reset_family

    def test_extended_color_out_of_range_is_unknown(self):
        assert classify("38;5;300").kind is TokenKind.UNKNOWN

    def test_incomplete_extended_color_is_unknown(self):
        for code in ("38;5", "48;2;1;2", "38;7;1"):
            token = classify(code)
            assert token.kind is TokenKind.UNKNOWN, code
            assert token.code == code

    def test_attribute_on(self):
        token = classify("1")
        assert token.kind is TokenKind.ATTRIBUTE_ON
        assert token.attributes == {Attribute.BOLD}

    def test_attribute_off(self):
        token = classify("24")
        assert token.kind is TokenKind.ATTRIBUTE_OFF
        assert token.attributes == {Attribute.UNDERLINE}
        assert token.is_reset_family

    def test_normal_intensity_ends_bold_and_dim(self):
        assert classify("22").attributes == {Attribute.BOLD, Attribute.DIM}

    def test_unknown_codes(self):
        """Codes outside the model stay opaque."""
        for code in ("20", "53", "58;5;3", "38", "999"):
            token = classify(code)
            assert token.kind is TokenKind.UNKNOWN, code
            assert not token.is_reset_family

    def test_unknown_code_is_kept_verbatim(self):
        assert classify("53").code == "53"


class TestParseAndSerialize:
    """Tests for parse() / serialize()."""

    def test_parse(self):
        tokens = parse("\x1b[1;38;5;12mhi\x1b[m")
        assert [t.code for t in tokens] == ["1", "38;5;12", "0"]

    def test_serialize_joins_codes(self):
        tokens = [classify("1"), classify("38;5;12")]
        assert serialize(tokens) == "\x1b[1;38;5;12m"

    def test_unknown_codes_get_their_own_sequence(self):
        """An unknown code cannot merge with the codes after it."""
        tokens = parse("\x1b[38;5m\x1b[1;4m")
        assert serialize(tokens) == "\x1b[38;5m\x1b[1;4m"

    def test_unknown_code_between_known_codes(self):
        tokens = [classify("31"), classify("53"), classify("1"), classify("4")]
        assert serialize(tokens) == "\x1b[31m\x1b[53m\x1b[1;4m"

    def test_serialize_empty(self):
        """No tokens means no bytes."""
        assert serialize([]) == ""

    def test_token_escape(self):
        assert StyleToken(TokenKind.FOREGROUND, "31").escape == "\x1b[31m"
        assert str(classify("4")) == "<4>"


class TestStripEscapes:
    """Tests for strip_escapes()."""

    def test_strip(self):
        assert strip_escapes("\x1b[31mred\x1b[0m \x1b[2Kdone") == "red done"
