"""termmux 命令行入口

用法:
    termmux TOTAL_WIDTH COLUMN_WIDTH MAX_LINES < command-list.txt

stdin 每行一条命令；空行忽略。
"""

import argparse
import sys
from typing import TextIO

from pydantic import ValidationError

from . import config
from .layout import LayoutSettings
from .runner import run_commands
from .telemetry import configure_logging, get_logger, truncate_command

logger = get_logger(__name__)

_EPILOG = """\
example:
  termmux auto auto 10 <<'EOF'
  python -m termmux.runner.loadgen  0  800 color 'ABCDEFGHIJKLMNOPQRSTUVWXYZ'
  python -m termmux.runner.loadgen  0 3000 plain 'ABCDEFGHIJKLMNOPQRSTUVWXYZ'
  python -m termmux.runner.loadgen 11 3000 color 'ABCDEFGHIJKLMNOPQRSTUVWXYZ'
  EOF
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="termmux",
        description=(
            "Run the commands read from stdin (one per line) concurrently and "
            "show their output side by side."
        ),
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "total_width",
        help="total width to use; 'auto' detects the terminal width",
    )
    parser.add_argument(
        "column_width",
        help="width of each command's column; 'auto' means no overlap (total / commands)",
    )
    parser.add_argument(
        "max_lines",
        help="lines to show from one command before moving on to the next",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help=f"logging level for stderr diagnostics (default: {config.LOG_LEVEL})",
    )
    return parser


def read_commands(stream: TextIO) -> list[str]:
    """每行一条命令，去除首尾空白，忽略空行"""
    return [line.strip() for line in stream if line.strip()]


def main(argv: list[str] | None = None, stdin: TextIO | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    commands = read_commands(stdin or sys.stdin)
    if not commands:
        parser.print_usage(sys.stderr)
        print("termmux: error: no commands on stdin", file=sys.stderr)
        return 2

    try:
        layout = LayoutSettings(
            total_width=args.total_width,
            column_width=args.column_width,
            max_lines_per_turn=args.max_lines,
            stream_count=len(commands),
        )
    except ValidationError as e:
        parser.print_usage(sys.stderr)
        print(f"termmux: error: invalid arguments:\n{e}", file=sys.stderr)
        return 2

    for index, command in enumerate(commands, start=1):
        logger.info(f"[CLI] Command {index}: {truncate_command(command)}")

    return run_commands(commands, layout)
