"""Width-aware line wrapper.

Splits one line of text into chunks of at most ``width`` visible cells.
Escape sequences have zero width and stick to the printable character that
follows them (or, at the end of the line, to the one before). Each chunk is
prefixed with the style that was active when it started, so a colored line
stays colored after being wrapped and re-indented.
"""

import re

from rich.cells import get_character_cell_size

from termmux import config
from termmux.style.canonical import StyleState, maybe_canonicalize
from termmux.style.tokens import ESCAPE_PATTERN, parse, strip_escapes

from .types import Chunk, WrapResult

# A run of adjacent escape sequences, or one character
_SEGMENT_PATTERN = re.compile(f"(?P<escapes>(?:{ESCAPE_PATTERN.pattern})+)|(?P<char>.)", re.DOTALL)


def split_line(line: str, width: int) -> list[str]:
    """Split ``line`` into raw pieces of at most ``width`` visible cells.

    A character wider than ``width`` is put on a piece of its own. Tabs are
    expanded to spaces up to the next tab stop of the line; other control and
    combining characters are charged one cell each. The result is never
    empty: an empty line gives one empty piece.
    """
    if width < 1:
        raise ValueError(f"width must be positive, got {width}")

    pieces: list[str] = []
    current: list[str] = []
    cells = 0
    line_cells = 0
    pending_escapes = ""

    for match in _SEGMENT_PATTERN.finditer(line):
        escapes = match.group("escapes")
        if escapes is not None:
            pending_escapes += escapes
            continue

        char = match.group("char")
        if char == "\t":
            glyphs = " " * (config.TAB_SIZE - line_cells % config.TAB_SIZE)
        else:
            glyphs = char

        for glyph in glyphs:
            glyph_cells = max(1, get_character_cell_size(glyph))
            if cells and cells + glyph_cells > width:
                pieces.append("".join(current))
                current, cells = [], 0
            current.append(pending_escapes + glyph)
            pending_escapes = ""
            cells += glyph_cells
            line_cells += glyph_cells

    current.append(pending_escapes)
    pieces.append("".join(current))
    return pieces


def wrap_and_indent(
    line: str,
    width: int,
    indent: str = "",
    style_state: StyleState = (),
    reset_at_end: bool = True,
    threshold: int | None = None,
) -> WrapResult:
    """Wrap one line into indented, style-prefixed chunks.

    Args:
        line: raw line without trailing newline, may contain escape codes
        width: visible columns per chunk
        indent: indentation emitted before every chunk
        style_state: style carried in from earlier output of the same stream
        reset_at_end: end every styled chunk with an explicit reset
        threshold: carried-state size that triggers canonicalization

    Returns:
        WrapResult with the chunks and the style carried out of this line
        (not necessarily canonical)
    """
    state = tuple(style_state)
    chunks: list[Chunk] = []

    for piece in split_line(line, width):
        prefix = maybe_canonicalize(state, threshold)
        state = prefix + tuple(parse(piece))
        chunks.append(
            Chunk(
                indent=indent,
                prefix=prefix,
                raw_text=piece,
                visible_text=strip_escapes(piece),
                state_after=state,
                reset_at_end=reset_at_end,
            )
        )

    return WrapResult(chunks=chunks, style_state=state)
