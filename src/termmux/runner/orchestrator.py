"""Run Orchestrator

Spawns one command stream per input command, drives the multiplexer until
every stream has retired, then records its own status and prints the sorted
exit-code report.
"""

import asyncio
import sys
import time
from dataclasses import dataclass, field
from typing import TextIO

from rich.console import Console
from rich.text import Text

from termmux import config
from termmux.layout import LayoutSettings
from termmux.mux import Stream, StreamMultiplexer
from termmux.style import CanonicalizationError
from termmux.telemetry import get_logger, metrics

from .exit_log import ExitCodeLog, format_entry
from .process import CommandStream

logger = get_logger(__name__)


@dataclass
class CommandResult:
    """One finished command (or the multiplexer itself)"""

    description: str
    exit_status: int
    command: str

    @property
    def entry(self) -> str:
        return format_entry(self.description, self.exit_status, self.command)


@dataclass
class RunResult:
    """Append-only collection of finished commands"""

    results: list[CommandResult] = field(default_factory=list)

    def add(self, description: str, exit_status: int, command: str) -> CommandResult:
        result = CommandResult(description, exit_status, command)
        self.results.append(result)
        return result

    def sorted_results(self) -> list[CommandResult]:
        return sorted(self.results, key=lambda result: result.entry)

    def get(self, description: str) -> CommandResult | None:
        for result in self.results:
            if result.description == description:
                return result
        return None


class RunOrchestrator:
    """Runs a list of commands side by side.

    Data flow:
        start() → spawn streams → StreamMultiplexer.run() → record monitor → report
    """

    def __init__(
        self,
        commands: list[str],
        layout: LayoutSettings,
        output: TextIO | None = None,
        exit_log: ExitCodeLog | None = None,
        shell: str | None = None,
        read_timeout: float | None = None,
    ):
        """Initialize the orchestrator.

        Args:
            commands: Shell command texts, one stream each
            layout: Validated run geometry
            output: Terminal output sink (default: stdout)
            exit_log: Persisted exit-code log (default: timestamped file)
            shell: Shell used to run commands (default from config)
            read_timeout: Bounded wait per line read, in seconds
        """
        self.commands = commands
        self.layout = layout
        self._output = output or sys.stdout
        self.exit_log = exit_log or ExitCodeLog()
        self._shell = shell
        self._read_timeout = read_timeout

        self.result = RunResult()
        self.streams: list[CommandStream] = []
        self._started_at = time.monotonic()
        self._reported = False

    async def run(self) -> int:
        """Run every command to completion.

        Returns:
            The multiplexer's own exit status
        """
        self._started_at = time.monotonic()
        metrics.reset()
        self.exit_log.open()
        self._write_line(f"Look for the exit codes in {self.exit_log.path}")

        multiplexer = StreamMultiplexer(
            await self._spawn_all(),
            column_width=self.layout.column_width,
            max_lines_per_turn=self.layout.max_lines_per_turn,
            output=self._output,
            read_timeout=self._read_timeout,
        )

        try:
            monitor_status = await multiplexer.run()
        except CanonicalizationError as e:
            logger.error(f"[Orchestrator] Multiplexer failed: {e}")
            monitor_status = config.INTERNAL_ERROR_EXIT_STATUS

        logger.info(f"[Orchestrator] Run metrics: {metrics.summary()}")
        self._record(config.MONITOR_DESCRIPTION, monitor_status, config.MONITOR_COMMAND_TEXT)
        self.print_report()
        return monitor_status

    async def _spawn_all(self) -> list[Stream]:
        """Spawn every command and wrap it as an indented stream."""
        total = len(self.commands)
        streams: list[Stream] = []
        for index, command in enumerate(self.commands):
            command_stream = CommandStream(
                command,
                position=index + 1,
                total=total,
                column_width=self.layout.column_width,
                shell=self._shell,
                on_exit=self._on_command_exit,
            )
            await command_stream.start()
            self.streams.append(command_stream)
            streams.append(
                Stream(index=index, source=command_stream, indent=self.layout.indent_for(index))
            )
        logger.info(f"[Orchestrator] Spawned {total} commands")
        return streams

    def _on_command_exit(self, command_stream: CommandStream) -> None:
        assert command_stream.exit_status is not None
        self._record(
            command_stream.description, command_stream.exit_status, command_stream.command
        )

    def _record(self, description: str, exit_status: int, command: str) -> None:
        self.result.add(description, exit_status, command)
        self.exit_log.append(description, exit_status, command)

    def print_report(self, interrupted: bool = False) -> None:
        """Print the sorted exit-code report (once)."""
        if self._reported:
            return
        self._reported = True

        console = Console(file=self._output, highlight=False, soft_wrap=True)
        if interrupted:
            console.print("Interrupted.")
        elapsed = int(time.monotonic() - self._started_at)
        console.print()
        console.print(f"Multi-script ran for {elapsed} seconds.")
        console.print("The exit codes of the different commands were:")
        for result in self.result.sorted_results():
            console.print(self._report_line(result))

    @staticmethod
    def _report_line(result: CommandResult) -> Text:
        line = Text(result.entry)
        style = "green" if result.exit_status == 0 else "red"
        start = result.entry.index(" = ") + 3
        line.stylize(style, start, start + config.EXIT_CODE_STATUS_WIDTH)
        return line

    def _write_line(self, text: str) -> None:
        self._output.write(text + "\n")
        self._output.flush()


def run_commands(
    commands: list[str],
    layout: LayoutSettings,
    output: TextIO | None = None,
    exit_log: ExitCodeLog | None = None,
) -> int:
    """Run commands on a fresh event loop; an interrupt prints a partial report.

    Returns:
        The multiplexer's exit status, or INTERRUPTED_EXIT_STATUS
    """
    orchestrator = RunOrchestrator(commands, layout, output=output, exit_log=exit_log)
    try:
        return asyncio.run(orchestrator.run())
    except KeyboardInterrupt:
        logger.warning("[Orchestrator] Interrupted, abandoning remaining streams")
        orchestrator.print_report(interrupted=True)
        return config.INTERRUPTED_EXIT_STATUS
