"""Command execution: subprocess streams, exit-code log and run orchestration."""

from .exit_log import ExitCodeLog, format_entry
from .orchestrator import CommandResult, RunOrchestrator, RunResult, run_commands
from .process import CommandStream

__all__ = [
    "CommandStream",
    "CommandResult",
    "ExitCodeLog",
    "RunOrchestrator",
    "RunResult",
    "format_entry",
    "run_commands",
]
