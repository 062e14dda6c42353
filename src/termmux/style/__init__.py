"""SGR style model and canonicalization."""

from .canonical import (
    CanonicalizationError,
    EffectiveStyle,
    StyleState,
    canonicalize,
    effective_style,
    maybe_canonicalize,
    needs_canonicalization,
)
from .tokens import (
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

__all__ = [
    "Attribute",
    "StyleToken",
    "TokenKind",
    "classify",
    "extract",
    "parse",
    "serialize",
    "split_codes",
    "strip_escapes",
    "CanonicalizationError",
    "EffectiveStyle",
    "StyleState",
    "canonicalize",
    "effective_style",
    "maybe_canonicalize",
    "needs_canonicalization",
]
