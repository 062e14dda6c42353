"""Stream Multiplexer

Round-robin scheduler over the output streams of concurrently running
commands. Each round visits every active stream in index order and drains at
most ``max_lines_per_turn`` wrapped lines from it; a read that produces no
line within ``read_timeout`` seconds ends that stream's turn without retiring
it. A stream is retired on end-of-stream or on a read error.

Reading and rendering happen on a single task, so stream state and the
output sink need no locking.
"""

import asyncio
import sys
from typing import TextIO

from termmux import config
from termmux.render import wrap_and_indent
from termmux.style.canonical import canonicalize
from termmux.telemetry import format_stream_log, get_logger, metrics

from .types import ReadOutcome, Stream, StreamStatus

logger = get_logger(__name__)


class StreamMultiplexer:
    """Round-robin output multiplexer

    Data flow per line:
        read (bounded wait) → wrap_and_indent() → write chunks → carry style
    """

    def __init__(
        self,
        streams: list[Stream],
        column_width: int,
        max_lines_per_turn: int,
        output: TextIO | None = None,
        read_timeout: float | None = None,
        debug_styles: bool | None = None,
    ):
        """Initialize the multiplexer.

        Args:
            streams: Streams in index order
            column_width: Visible columns per output line
            max_lines_per_turn: Wrapped lines a stream may emit per round
            output: Shared output sink (default: stdout)
            read_timeout: Bounded wait per line read, in seconds
            debug_styles: Also emit a repr() debug copy of every chunk
        """
        if max_lines_per_turn < 1:
            raise ValueError(f"max_lines_per_turn must be positive, got {max_lines_per_turn}")
        self.streams = streams
        self._column_width = column_width
        self._max_lines_per_turn = max_lines_per_turn
        self._output = output or sys.stdout
        self._read_timeout = read_timeout if read_timeout is not None else config.READ_TIMEOUT_SECONDS
        self._debug_styles = config.DEBUG_STYLES if debug_styles is None else debug_styles
        self.rounds = 0

    @property
    def active_count(self) -> int:
        return sum(1 for stream in self.streams if stream.status is StreamStatus.ACTIVE)

    async def run(self) -> int:
        """Drive rounds until every stream is retired.

        Returns:
            The multiplexer's own completion status (0)
        """
        logger.info(f"[Scheduler] Started with {len(self.streams)} streams")
        while self.active_count > 0:
            await self.run_round()
        logger.info(f"[Scheduler] All streams retired after {self.rounds} rounds")
        return 0

    async def run_round(self) -> None:
        """One pass over all active streams, in stable index order."""
        self.rounds += 1
        for stream in self.streams:
            if stream.status is StreamStatus.ACTIVE:
                await self.drain(stream)
        metrics.gauge("streams.active", self.active_count)

    async def drain(self, stream: Stream) -> int:
        """Give one stream its turn.

        Returns:
            Number of wrapped lines written during this turn
        """
        written = 0
        while written < self._max_lines_per_turn:
            outcome, data = await self._read(stream)
            if outcome is ReadOutcome.TIMEOUT:
                metrics.inc("stream.timeouts")
                break
            if outcome is ReadOutcome.END:
                remainder = stream.flush()
                if remainder:
                    written += self._emit(stream, remainder)
                stream.retire()
                metrics.inc("stream.retired")
                logger.debug(format_stream_log("Scheduler", stream.index, "retired"))
                break
            written += self._emit(stream, stream.decode(data))

        if stream.style_state:
            stream.style_state = canonicalize(stream.style_state)
        return written

    async def _read(self, stream: Stream) -> tuple[ReadOutcome, bytes]:
        """Read one line, waiting at most ``read_timeout`` seconds."""
        try:
            data = await asyncio.wait_for(stream.source.readline(), timeout=self._read_timeout)
        except asyncio.TimeoutError:
            return ReadOutcome.TIMEOUT, b""
        except (OSError, ValueError, asyncio.IncompleteReadError) as e:
            metrics.inc("stream.read_errors")
            logger.warning(format_stream_log("Scheduler", stream.index, f"read error: {e!r}"))
            return ReadOutcome.END, b""

        if not data:
            return ReadOutcome.END, b""
        return ReadOutcome.DATA, data

    def _emit(self, stream: Stream, line: str) -> int:
        """Wrap one line, write its chunks and carry the stream's style forward."""
        result = wrap_and_indent(
            line,
            self._column_width,
            indent=stream.indent,
            style_state=stream.style_state,
        )
        for chunk in result.chunks:
            self._output.write(chunk.render() + "\n")
            if self._debug_styles:
                self._output.write(chunk.render_debug() + "\n")
        self._output.flush()

        stream.style_state = result.style_state
        stream.lines_read += 1
        metrics.inc("stream.lines")
        metrics.inc("stream.chunks", value=result.lines_written)
        return result.lines_written
