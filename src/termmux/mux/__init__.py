"""Stream multiplexing: round-robin scheduling over command output streams."""

from .scheduler import StreamMultiplexer
from .types import ReadOutcome, Stream, StreamSource, StreamStatus

__all__ = [
    "StreamMultiplexer",
    "Stream",
    "StreamSource",
    "StreamStatus",
    "ReadOutcome",
]
