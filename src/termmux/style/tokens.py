"""SGR style tokens

Parses, classifies and serializes SGR ("Select Graphic Rendition") escape
codes. Every numeric sub-code of an escape sequence becomes its own token,
except extended colors (``38;5;N``, ``48;2;R;G;B``, ...) which are kept as one
indivisible token because their leading numbers mean nothing on their own.

Codes the model does not understand are classified as ``UNKNOWN`` and are
never collapsed by the canonicalizer.
"""

import re
from dataclasses import dataclass
from enum import Enum

# SGR escape sequence: ESC [ params m
SGR_PATTERN = re.compile(r"\x1b\[([0-9;]*)m")

# Any CSI escape sequence (SGR included); zero visible width
ESCAPE_PATTERN = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]")

RESET_SEQUENCE = "\x1b[0m"

_EXTENDED_COLOR_LEADS = {"38", "48", "58"}

# extended-color mode -> number of parts including lead and mode (38;5;N, 38;2;R;G;B)
_EXTENDED_COLOR_SIZES = {"5": 3, "2": 5}


class TokenKind(Enum):
    """Token category"""

    RESET = "reset"
    FOREGROUND = "foreground"
    BACKGROUND = "background"
    ATTRIBUTE_ON = "attribute_on"
    ATTRIBUTE_OFF = "attribute_off"
    UNKNOWN = "unknown"


class Attribute(Enum):
    """Toggleable text attribute, valued by its "on" code."""

    BOLD = 1
    DIM = 2
    ITALIC = 3
    UNDERLINE = 4
    BLINK = 5
    RAPID_BLINK = 6
    REVERSE = 7
    CONCEAL = 8
    STRIKE = 9


# "off" code -> attributes it switches off
_OFF_CODES: dict[int, frozenset[Attribute]] = {
    21: frozenset({Attribute.BOLD}),
    22: frozenset({Attribute.BOLD, Attribute.DIM}),
    23: frozenset({Attribute.ITALIC}),
    24: frozenset({Attribute.UNDERLINE}),
    25: frozenset({Attribute.BLINK, Attribute.RAPID_BLINK}),
    26: frozenset({Attribute.RAPID_BLINK}),
    27: frozenset({Attribute.REVERSE}),
    28: frozenset({Attribute.CONCEAL}),
    29: frozenset({Attribute.STRIKE}),
}

_FOREGROUND_CODES = frozenset(range(30, 38)) | frozenset(range(90, 98))
_BACKGROUND_CODES = frozenset(range(40, 48)) | frozenset(range(100, 108))
_DEFAULT_FOREGROUND = 39
_DEFAULT_BACKGROUND = 49


@dataclass(frozen=True)
class StyleToken:
    """One classified SGR code.

    Attributes:
        kind: token category
        code: the code as it is serialized (e.g. "1", "38;5;190")
        attributes: attributes toggled by ATTRIBUTE_ON / ATTRIBUTE_OFF tokens
        extended: True for 256-color / truecolor forms
        is_default: True for the default-color codes 39 and 49
    """

    kind: TokenKind
    code: str
    attributes: frozenset[Attribute] = frozenset()
    extended: bool = False
    is_default: bool = False

    @property
    def is_color(self) -> bool:
        return self.kind in (TokenKind.FOREGROUND, TokenKind.BACKGROUND)

    @property
    def is_toggle(self) -> bool:
        return self.kind in (TokenKind.ATTRIBUTE_ON, TokenKind.ATTRIBUTE_OFF)

    @property
    def is_reset_family(self) -> bool:
        """Reset, attribute-off and default-color codes (0, 21-29, 39, 49)"""
        return (
            self.kind in (TokenKind.RESET, TokenKind.ATTRIBUTE_OFF)
            or self.is_default
        )

    @property
    def escape(self) -> str:
        return f"\x1b[{self.code}m"

    def __str__(self) -> str:
        return f"<{self.code}>"


def extract(text: str) -> list[str]:
    """Return the parameter string of every SGR sequence in ``text``, in order.

    ``"\\x1b[1;31mhi\\x1b[0m"`` -> ``["1;31", "0"]``
    """
    return SGR_PATTERN.findall(text)


def split_codes(params: str) -> list[str]:
    """Split one SGR parameter string into independent codes.

    An absent number (empty parameter string, leading/trailing or doubled
    ``;``) behaves like ``0``. Extended color sequences stay in one piece; an
    extended-color lead without a complete argument list takes the rest of the
    parameter string with it as one opaque code.
    """
    parts = [part or "0" for part in params.split(";")]
    codes: list[str] = []
    i = 0
    while i < len(parts):
        lead = parts[i]
        if lead.lstrip("0") not in _EXTENDED_COLOR_LEADS:
            codes.append(lead)
            i += 1
            continue

        mode = parts[i + 1] if i + 1 < len(parts) else None
        size = _EXTENDED_COLOR_SIZES.get(mode)
        if size is None or i + size > len(parts):
            codes.append(";".join(parts[i:]))
            break
        codes.append(";".join(parts[i : i + size]))
        i += size
    return codes


def _classify_extended(code: str) -> StyleToken:
    parts = code.split(";")
    lead = parts[0].lstrip("0")
    mode = parts[1] if len(parts) > 1 else None
    if lead not in _EXTENDED_COLOR_LEADS or len(parts) != _EXTENDED_COLOR_SIZES.get(mode):
        return StyleToken(TokenKind.UNKNOWN, code)
    try:
        values = [int(p) for p in parts[2:]]
    except ValueError:
        return StyleToken(TokenKind.UNKNOWN, code)
    if lead == "58" or not all(0 <= v <= 255 for v in values):
        return StyleToken(TokenKind.UNKNOWN, code)
    kind = TokenKind.FOREGROUND if lead == "38" else TokenKind.BACKGROUND
    normalized = ";".join([lead, mode, *map(str, values)])
    return StyleToken(kind, normalized, extended=True)


def classify(code: str) -> StyleToken:
    """Classify a single SGR code (as produced by :func:`split_codes`)."""
    if ";" in code:
        return _classify_extended(code)
    if code == "":
        return StyleToken(TokenKind.RESET, "0")
    if not code.isdigit():
        return StyleToken(TokenKind.UNKNOWN, code)

    number = int(code)
    normalized = str(number)
    if number == 0:
        return StyleToken(TokenKind.RESET, normalized)
    if 1 <= number <= 9:
        return StyleToken(
            TokenKind.ATTRIBUTE_ON, normalized, attributes=frozenset({Attribute(number)})
        )
    if number in _OFF_CODES:
        return StyleToken(TokenKind.ATTRIBUTE_OFF, normalized, attributes=_OFF_CODES[number])
    if number in _FOREGROUND_CODES:
        return StyleToken(TokenKind.FOREGROUND, normalized)
    if number in _BACKGROUND_CODES:
        return StyleToken(TokenKind.BACKGROUND, normalized)
    if number == _DEFAULT_FOREGROUND:
        return StyleToken(TokenKind.FOREGROUND, normalized, is_default=True)
    if number == _DEFAULT_BACKGROUND:
        return StyleToken(TokenKind.BACKGROUND, normalized, is_default=True)
    return StyleToken(TokenKind.UNKNOWN, code)


def parse(text: str) -> list[StyleToken]:
    """Extract and classify every SGR code found in ``text``."""
    return [classify(code) for params in extract(text) for code in split_codes(params)]


def serialize(tokens) -> str:
    """Serialize tokens as SGR sequences; no tokens -> empty string.

    Known codes share one sequence. Every unknown code gets a sequence of its
    own, so it cannot run into its neighbours and be read back as a different
    code (``38;5`` followed by ``1`` is not ``38;5;1``).
    """
    groups: list[list[str]] = []
    known: list[str] = []
    for token in tokens:
        if token.kind is TokenKind.UNKNOWN:
            if known:
                groups.append(known)
                known = []
            groups.append([token.code])
        else:
            known.append(token.code)
    if known:
        groups.append(known)
    return "".join(f"\x1b[{';'.join(codes)}m" for codes in groups)


def strip_escapes(text: str) -> str:
    """Remove every CSI escape sequence from ``text``."""
    return ESCAPE_PATTERN.sub("", text)
