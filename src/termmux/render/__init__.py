"""Column rendering: width-aware wrapping of styled lines."""

from .types import Chunk, WrapResult
from .wrapper import split_line, wrap_and_indent

__all__ = [
    "Chunk",
    "WrapResult",
    "split_line",
    "wrap_and_indent",
]
