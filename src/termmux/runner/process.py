"""Command subprocess stream.

Runs one command text through the configured shell with stderr merged into
stdout and exposes the combined output line by line. The stream opens with an
"Executing command" banner and, once the process has exited, closes with a
status banner before reporting end-of-stream.
"""

import asyncio
import time
from collections import deque
from collections.abc import Callable

from termmux import config
from termmux.mux.types import StreamSource
from termmux.telemetry import get_logger, truncate_command

logger = get_logger(__name__)

# Exit status reported when the shell itself could not be started
SPAWN_FAILED_STATUS = 127

_GREEN = "\x1b[32m"
_BRIGHT_GREEN = "\x1b[92m"
_RED = "\x1b[31m"
_CYAN = "\x1b[36m"
_RESET = "\x1b[0m"
_RULE_CHAR = "═"


class CommandStream(StreamSource):
    """Merged stdout/stderr of one command, as a line stream.

    Provides:
    - Spawning the command via ``[shell, "-c", command]``
    - Cancellation-safe ``readline()`` with a bounded line length
    - Exit status capture and a completion callback
    """

    def __init__(
        self,
        command: str,
        position: int,
        total: int,
        column_width: int,
        shell: str | None = None,
        on_exit: Callable[["CommandStream"], None] | None = None,
    ):
        """Initialize CommandStream.

        Args:
            command: Shell command text
            position: 1-based position among all commands
            total: Number of commands in the run
            column_width: Width of the banner rules
            shell: Shell used to run the command (default from config)
            on_exit: Called once after the process has exited
        """
        self.command = command
        self.position = position
        self.total = total
        self._column_width = column_width
        self._shell = shell or config.COMMAND_SHELL
        self._on_exit = on_exit

        self.exit_status: int | None = None
        self._process: asyncio.subprocess.Process | None = None
        self._pending: deque[bytes] = deque()
        self._output_done = False
        self._finished = False
        self._started_at = 0.0

    @property
    def description(self) -> str:
        return f"command {self.position}/{self.total}"

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process else None

    async def start(self) -> None:
        """Spawn the command and queue the opening banner."""
        self._started_at = time.monotonic()
        self._queue(
            f"{_BRIGHT_GREEN}Executing command {self.position}/{self.total}:",
            f"  {_CYAN}{self.command}{_RESET}",
            _RULE_CHAR * self._column_width,
        )
        try:
            self._process = await asyncio.create_subprocess_exec(
                self._shell,
                "-c",
                self.command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                limit=config.MAX_LINE_BYTES,
            )
        except OSError as e:
            logger.error(f"[CommandStream] Failed to start {self.description}: {e}")
            self._queue(f"{_RED}Failed to start: {e}{_RESET}")
            self._output_done = True
            return

        logger.debug(
            f"[CommandStream] Started {self.description} pid={self._process.pid}: "
            f"{truncate_command(self.command)}"
        )

    async def readline(self) -> bytes:
        if self._pending:
            return self._pending.popleft()

        if not self._output_done:
            line = await self._read_output_line()
            if line:
                return line
            self._output_done = True

        if not self._finished:
            if self._process is None:
                self.exit_status = SPAWN_FAILED_STATUS
            elif self.exit_status is None:
                self.exit_status = await self._process.wait()
            self._finish()
            if self._pending:
                return self._pending.popleft()

        return b""

    async def _read_output_line(self) -> bytes:
        """Read the next output line, or a piece of an over-long line."""
        assert self._process is not None and self._process.stdout is not None
        reader = self._process.stdout
        try:
            return await reader.readuntil(b"\n")
        except asyncio.IncompleteReadError as e:
            # EOF: whatever is left is an unterminated last line
            return e.partial
        except asyncio.LimitOverrunError:
            return await reader.read(config.MAX_LINE_BYTES)

    def _finish(self) -> None:
        """Queue the closing banner and report completion."""
        self._finished = True
        elapsed = int(time.monotonic() - self._started_at)
        color = _GREEN if self.exit_status == 0 else _RED
        self._queue(
            _RESET,
            color + _RULE_CHAR * self._column_width,
            f"Command {self.position}/{self.total} exited with status code "
            f"{self.exit_status} after {elapsed} seconds.",
        )
        logger.info(f"[CommandStream] {self.description} exited with {self.exit_status}")
        if self._on_exit:
            self._on_exit(self)

    def _queue(self, *lines: str) -> None:
        for line in lines:
            self._pending.append(f"{line}\n".encode())
