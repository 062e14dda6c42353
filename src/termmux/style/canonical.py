"""Style canonicalizer

Reduces an ordered token history to the minimal token sequence with the same
net effect when replayed on a blank terminal. Reduction rules are applied as
passes until a fixed point is reached:

1. reset dominance: nothing before the last reset survives, nor the reset
2. category override: only the last foreground / background color matters;
   a trailing default color (39 / 49) then disappears as well
3. toggle cancellation: only the last toggle of an attribute matters; an
   attribute that ends up "off" needs no code at all
4. duplicate suppression: identical codes collapse to their last occurrence

Surviving tokens keep their relative order. Unknown codes are only ever
removed by a later reset or by an identical later code.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .. import config
from ..telemetry import get_logger, metrics
from .tokens import Attribute, StyleToken, TokenKind

logger = get_logger(__name__)

StyleState = tuple[StyleToken, ...]


class CanonicalizationError(RuntimeError):
    """Reduction did not reach a fixed point within the iteration ceiling."""


def _reset_dominance(tokens: StyleState) -> StyleState:
    for i in range(len(tokens) - 1, -1, -1):
        if tokens[i].kind is TokenKind.RESET:
            return tokens[i + 1 :]
    return tokens


def _category_override(tokens: StyleState) -> StyleState:
    last: dict[TokenKind, int] = {}
    for i, token in enumerate(tokens):
        if token.is_color:
            last[token.kind] = i
    return tuple(
        token
        for i, token in enumerate(tokens)
        if not token.is_color or (last[token.kind] == i and not token.is_default)
    )


def _toggle_cancellation(tokens: StyleState) -> StyleState:
    last: dict[Attribute, int] = {}
    for i, token in enumerate(tokens):
        if token.is_toggle:
            for attribute in token.attributes:
                last[attribute] = i

    kept = []
    for i, token in enumerate(tokens):
        if not token.is_toggle:
            kept.append(token)
        elif token.kind is TokenKind.ATTRIBUTE_ON and any(
            last[attribute] == i for attribute in token.attributes
        ):
            kept.append(token)
        # every "off" that is still the last toggle of its attribute is a no-op
        # here: all earlier toggles of that attribute are dropped in this pass
    return tuple(kept)


def _duplicate_suppression(tokens: StyleState) -> StyleState:
    last = {token.code: i for i, token in enumerate(tokens)}
    return tuple(token for i, token in enumerate(tokens) if last[token.code] == i)


_RULES = (
    _reset_dominance,
    _category_override,
    _toggle_cancellation,
    _duplicate_suppression,
)


def canonicalize(tokens: Iterable[StyleToken], max_iterations: int | None = None) -> StyleState:
    """Return the canonical (minimal, equivalent) form of a token history.

    Raises:
        CanonicalizationError: the rules did not converge within
            ``max_iterations`` passes
    """
    max_iterations = max_iterations or config.CANONICALIZE_MAX_ITERATIONS
    current = tuple(tokens)
    metrics.inc("style.canonicalize")

    for _ in range(max_iterations):
        reduced = current
        for rule in _RULES:
            reduced = rule(reduced)
        if reduced == current:
            return current
        current = reduced

    logger.error(f"[Canonicalizer] No fixed point after {max_iterations} passes: {current}")
    raise CanonicalizationError(
        f"style reduction did not converge after {max_iterations} iterations"
    )


def needs_canonicalization(tokens: Sequence[StyleToken], threshold: int | None = None) -> bool:
    """Carried state contains a reset-family code or has grown past the threshold."""
    threshold = threshold or config.CANONICALIZE_TOKEN_THRESHOLD
    return len(tokens) >= threshold or any(token.is_reset_family for token in tokens)


def maybe_canonicalize(tokens: Sequence[StyleToken], threshold: int | None = None) -> StyleState:
    """Canonicalize only when :func:`needs_canonicalization` says so."""
    if needs_canonicalization(tokens, threshold):
        return canonicalize(tokens)
    return tuple(tokens)


@dataclass(frozen=True)
class EffectiveStyle:
    """Active attribute set after replaying tokens on a blank terminal."""

    foreground: str | None = None
    background: str | None = None
    attributes: frozenset[Attribute] = frozenset()
    opaque: tuple[str, ...] = ()

    @property
    def is_plain(self) -> bool:
        return self == EffectiveStyle()


def effective_style(tokens: Iterable[StyleToken]) -> EffectiveStyle:
    """Replay ``tokens`` on a blank terminal and return what is active."""
    foreground: str | None = None
    background: str | None = None
    attributes: set[Attribute] = set()
    opaque: list[str] = []

    for token in tokens:
        if token.kind is TokenKind.RESET:
            foreground = background = None
            attributes.clear()
            opaque.clear()
        elif token.kind is TokenKind.FOREGROUND:
            foreground = None if token.is_default else token.code
        elif token.kind is TokenKind.BACKGROUND:
            background = None if token.is_default else token.code
        elif token.kind is TokenKind.ATTRIBUTE_ON:
            attributes |= token.attributes
        elif token.kind is TokenKind.ATTRIBUTE_OFF:
            attributes -= token.attributes
        else:
            if token.code in opaque:
                opaque.remove(token.code)
            opaque.append(token.code)

    return EffectiveStyle(foreground, background, frozenset(attributes), tuple(opaque))
