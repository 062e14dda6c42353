"""Synthetic load generator

Produces colored, bursty, interleaved stdout/stderr traffic for exercising
the multiplexer:

    python -m termmux.runner.loadgen 0 800 color 'ABCDEFGHIJKLMNOPQRSTUVWXYZ'

Writes the text repeatedly in bursts, sometimes preceded by a random SGR
code and sometimes followed by a line break, sleeping between bursts until
``max_chars`` characters were written; then exits with ``exit_status``.
"""

import argparse
import random
import sys
import time
from collections.abc import Callable
from typing import TextIO

_BANNER = "████████ Executing: test_command █████████"
_FOOTER = "████████████████████████████████"
_FOREGROUNDS = [30, 31, 32, 33, 34, 35, 36, 37, 90, 91, 92, 93, 94, 95, 96, 97]
_BACKGROUNDS = [40, 41, 42, 43, 44, 45, 46, 47, 100, 101, 102, 103, 104, 105, 106, 107]
_TOGGLES = {1: 1, 4: 4, 5: 5, 7: 7, 8: 8}
_MAX_DEPTH = 8


def random_style_codes(rng: random.Random, depth: int = 0) -> list[str]:
    """Pick random SGR parameter(s); about 40% of the time combine two picks."""
    roll = rng.randrange(35)
    if roll in _TOGGLES:
        on = _TOGGLES[roll]
        return [str(on if rng.randrange(2) == 0 else 20 + on)]
    if roll == 9:
        return ["39"]
    if roll in (10, 11, 12):
        return ["49"]
    if roll in (13, 14, 15):
        return [f"38;5;{rng.randrange(256)}"]
    if roll in (16, 17, 18):
        return [str(rng.choice(_FOREGROUNDS))]
    if roll in (19, 20, 21):
        return [str(rng.choice(_BACKGROUNDS))]
    if roll in (25, 26):
        return ["0"]
    if roll == 27:
        return [""]
    if depth >= _MAX_DEPTH:
        return []
    return random_style_codes(rng, depth + 1) + random_style_codes(rng, depth + 1)


def random_style(rng: random.Random) -> str:
    """A random SGR escape sequence (possibly empty)."""
    codes = random_style_codes(rng)
    if not codes:
        return ""
    return f"\x1b[{';'.join(codes)}m"


def generate(
    exit_status: int,
    max_chars: int,
    colors: bool,
    text: str,
    rng: random.Random,
    out: TextIO,
    err: TextIO,
    sleep: Callable[[float], None] = time.sleep,
    sleep_scale: float = 1.0,
) -> int:
    """Write bursts of ``text`` until ``max_chars`` characters were written.

    Returns:
        ``exit_status``
    """
    started = time.monotonic()
    out.write(_BANNER + "\n")
    out.flush()

    written = 0
    while written < max_chars:
        pause = rng.randrange(3)
        for _ in range(rng.randrange(10) * 50):
            escape = random_style(rng) if colors and rng.randrange(40) == 0 else ""
            maybe_newline = "█\n█" if rng.randrange(20) == 0 else ""
            target = err if rng.randrange(2) == 0 else out
            target.write(f"{escape}{text}{maybe_newline}")
            target.flush()
            written += len(text)
            if written >= max_chars:
                break
        else:
            sleep(pause * sleep_scale)
            if not text:
                break

    out.write(f"\n{_FOOTER}\n")
    out.write(f"Done after {int(time.monotonic() - started)} seconds\n")
    out.flush()
    sleep(sleep_scale)
    return exit_status


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="termmux-loadgen",
        description="Produce bursty, optionally colored test output.",
    )
    parser.add_argument("exit_status", type=int, help="status to exit with")
    parser.add_argument("max_chars", type=int, help="characters to write before stopping")
    parser.add_argument("colors", choices=["color", "plain"], help="emit random SGR codes or not")
    parser.add_argument("text", help="text written in each burst")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument(
        "--sleep-scale", type=float, default=1.0, help="multiplier for pauses between bursts"
    )
    args = parser.parse_args(argv)

    return generate(
        args.exit_status,
        args.max_chars,
        args.colors == "color",
        args.text,
        random.Random(args.seed),
        sys.stdout,
        sys.stderr,
        sleep_scale=args.sleep_scale,
    )


if __name__ == "__main__":
    sys.exit(main())
