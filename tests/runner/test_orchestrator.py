"""Tests for runner/orchestrator.py"""

import io
import logging
from unittest.mock import AsyncMock, patch

import pytest

from termmux.layout import LayoutSettings
from termmux.runner.exit_log import ExitCodeLog
from termmux.runner.orchestrator import RunOrchestrator, RunResult, run_commands
from termmux.style import CanonicalizationError
from termmux.style.tokens import strip_escapes
from termmux.telemetry import metrics


def make_layout(stream_count=2):
    return LayoutSettings(
        total_width=40, column_width=20, max_lines_per_turn=5, stream_count=stream_count
    )


def visible_lines(output: io.StringIO) -> list[str]:
    return [strip_escapes(line) for line in output.getvalue().splitlines()]


class TestRunResult:
    """Tests for RunResult dataclass."""

    def test_sorted_by_entry_text(self):
        result = RunResult()
        result.add("monitor", 0, "(internal command)")
        result.add("command 2/2", 1, "false")
        result.add("command 1/2", 0, "true")

        assert [r.description for r in result.sorted_results()] == [
            "command 1/2",
            "command 2/2",
            "monitor",
        ]

    def test_get(self):
        result = RunResult()
        result.add("command 1/1", 4, "exit 4")
        assert result.get("command 1/1").exit_status == 4
        assert result.get("monitor") is None


class TestRunOrchestrator:
    """Tests for RunOrchestrator class."""

    @pytest.mark.asyncio
    async def test_end_to_end(self, tmp_path, caplog):
        """Two commands side by side, exit codes logged and reported."""
        caplog.set_level(logging.INFO, logger="termmux.runner.orchestrator")
        output = io.StringIO()
        log = ExitCodeLog(tmp_path / "codes")
        orchestrator = RunOrchestrator(
            ["printf 'AAAA\\n'", "printf 'BBBB\\n'; exit 7"],
            make_layout(),
            output=output,
            exit_log=log,
            shell="sh",
            read_timeout=0.05,
        )

        status = await orchestrator.run()

        assert status == 0
        lines = visible_lines(output)
        assert lines[0] == f"Look for the exit codes in {log.path}"
        assert "AAAA" in lines
        assert " " * 20 + "BBBB" in lines
        assert " " * 20 + "Executing command 2/" in lines

        assert orchestrator.result.get("command 1/2").exit_status == 0
        assert orchestrator.result.get("command 2/2").exit_status == 7
        assert orchestrator.result.get("monitor").exit_status == 0

        logged = log.path.read_text().splitlines()
        assert len(logged) == 3
        assert "Exit code for monitor      =   0  # (internal command)" in logged

        report = lines[lines.index("The exit codes of the different commands were:") + 1 :]
        assert report == [
            "Exit code for command 1/2  =   0  # printf 'AAAA\\n'",
            "Exit code for command 2/2  =   7  # printf 'BBBB\\n'; exit 7",
            "Exit code for monitor      =   0  # (internal command)",
        ]
        assert any(line.startswith("Multi-script ran for ") for line in lines)
        assert "Run metrics: lines=" in caplog.text
        assert metrics.get_counter("stream.retired") == 2

    @pytest.mark.asyncio
    async def test_canonicalization_failure_sets_monitor_status(self, tmp_path):
        output = io.StringIO()
        orchestrator = RunOrchestrator(
            [], make_layout(1), output=output, exit_log=ExitCodeLog(tmp_path / "codes")
        )

        with patch(
            "termmux.runner.orchestrator.StreamMultiplexer.run",
            new_callable=AsyncMock,
            side_effect=CanonicalizationError("no fixed point"),
        ):
            status = await orchestrator.run()

        assert status == 1
        assert orchestrator.result.get("monitor").exit_status == 1

    def test_report_printed_once(self, tmp_path):
        output = io.StringIO()
        orchestrator = RunOrchestrator(
            [], make_layout(1), output=output, exit_log=ExitCodeLog(tmp_path / "codes")
        )

        orchestrator.print_report()
        orchestrator.print_report(interrupted=True)

        assert output.getvalue().count("The exit codes of the different commands were:") == 1
        assert "Interrupted." not in output.getvalue()


class TestRunCommands:
    """Tests for run_commands()."""

    def test_interrupt_prints_partial_report(self, tmp_path):
        output = io.StringIO()

        def interrupted_run(coro):
            coro.close()
            raise KeyboardInterrupt

        with patch("termmux.runner.orchestrator.asyncio.run", side_effect=interrupted_run):
            status = run_commands(
                ["sleep 60"],
                make_layout(1),
                output=output,
                exit_log=ExitCodeLog(tmp_path / "codes"),
            )

        assert status == 130
        lines = visible_lines(output)
        assert "Interrupted." in lines
        assert "The exit codes of the different commands were:" in lines
