"""Operator console for a running Evaluator.

Also provides the ``merge-core`` CLI entry point via ``main()``.
"""

from __future__ import annotations

import argparse
import json
import logging
import math
import sys
import threading
from typing import IO

from .config import get_settings
from .errors import ConfigurationError, MergeCoreError
from .evaluator import Evaluator
from .observability import setup_logging
from .transport import MemoryBus, StreamSink

logger = logging.getLogger(__name__)

HELP_LINES = [
    "Merge module configuration options",
    "  help                  Displays this message",
    "  info                  Prints the parsed format",
    "  freq f                Sampling frequency in Hertz",
    "  stats                 Prints tick counters",
    "  tick                  Runs a single tick",
    "  set name value        Publishes a JSON value on a local source",
]


# ---------------------------------------------------------------------------
# MergeConsole (command / response)
# ---------------------------------------------------------------------------

class MergeConsole:
    """Answers operator commands with a list of reply lines.

    Usage::

        console = MergeConsole(evaluator)
        console.respond("info")
        console.respond("freq 20")
    """

    def __init__(self, evaluator: Evaluator, bus: MemoryBus | None = None) -> None:
        self.evaluator = evaluator
        self.bus = bus

    def respond(self, line: str) -> list[str]:
        parts = line.strip().split(maxsplit=1)
        if not parts:
            return []
        cmd, arg = parts[0], (parts[1] if len(parts) > 1 else "")
        try:
            if cmd == "help":
                return list(HELP_LINES)
            if cmd == "info":
                return self.evaluator.info().splitlines()
            if cmd == "freq":
                return self._freq(arg)
            if cmd == "stats":
                s = self.evaluator.stats
                return [f"ticks {s.ticks}  emitted {s.emitted}  failed {s.failed}  skipped {s.skipped}"]
            if cmd == "tick":
                record = self.evaluator.tick()
                return ["no output"] if record is None else ["ok"]
            if cmd == "set":
                return self._set(arg)
        except (MergeCoreError, ValueError) as exc:
            return [f"Error: {exc}"]
        return [f"Error: unknown command '{cmd}'"]

    def _freq(self, arg: str) -> list[str]:
        try:
            frequency = float(arg)
        except ValueError:
            return [f"Error: invalid frequency '{arg}'"]
        self.evaluator.set_frequency(frequency)
        return [f"period {self.evaluator.period:g} s"]

    def _set(self, arg: str) -> list[str]:
        if self.bus is None:
            return ["Error: no local sources"]
        name, _, raw = arg.partition(" ")
        if not name or not raw:
            return ["Error: usage: set name value"]
        try:
            value = json.loads(raw)
        except json.JSONDecodeError as exc:
            return [f"Error: invalid JSON value: {exc.msg}"]
        self.bus.publish(name, value)
        return [f"published {name}"]


# ---------------------------------------------------------------------------
# CLI helpers
# ---------------------------------------------------------------------------

def replay(evaluator: Evaluator, bus: MemoryBus, src: IO[str]) -> int:
    """Publish one ``{source: value}`` JSON object per line and tick after each."""
    count = 0
    for lineno, line in enumerate(src, 1):
        line = line.strip()
        if not line:
            continue
        try:
            snapshot = json.loads(line)
        except json.JSONDecodeError as exc:
            logger.error("line %d: invalid JSON: %s", lineno, exc.msg)
            continue
        if not isinstance(snapshot, dict):
            logger.error("line %d: expected an object of source values", lineno)
            continue
        for name, value in snapshot.items():
            bus.publish(name, value)
        evaluator.tick()
        count += 1
    return count


def _interactive(console: MergeConsole, dest: IO[str]) -> None:
    print("merge console  (quit to exit  |  help for commands)", file=dest)
    while True:
        try:
            line = input("merge> ").strip()
        except EOFError:
            print(file=dest)
            break
        except KeyboardInterrupt:
            print(file=dest)
            continue
        if line in ("quit", "exit"):
            break
        for reply in console.respond(line):
            print(reply, file=dest)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="merge-core",
        description="Merge data from several named sources into one record per tick",
    )
    parser.add_argument("--format", help="format for the output, e.g. '(/a:o[1-3] /b:o)'")
    parser.add_argument("--frequency", type=float, help="sampling frequency in Hz")
    parser.add_argument("--port", help="prefix for registering local ports")
    parser.add_argument("--info", action="store_true", help="print the parsed format and exit")
    parser.add_argument("--replay", metavar="FILE",
                        help="JSON lines of {source: value} snapshots ('-' for stdin)")
    parser.add_argument("--log-level", help="logging level")
    parser.add_argument("--log-format", choices=("text", "json"), help="logging format")
    return parser


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """``merge-core`` / ``python -m merge_core``."""
    args = build_arg_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(args.log_level or settings.log_level, args.log_format or settings.log_format)

    spec = args.format or settings.format
    if not spec:
        print("Error: please supply a format (--format or MERGE_FORMAT)", file=sys.stderr)
        return 1
    frequency = args.frequency if args.frequency is not None else settings.frequency
    if not math.isfinite(frequency) or frequency <= 0:
        print("Error: frequency must be a finite number larger than 0", file=sys.stderr)
        return 1
    prefix = (args.port or settings.port_prefix) + "/source"

    bus = MemoryBus(autocreate=True)
    try:
        evaluator = Evaluator.configure(
            spec, bus, StreamSink(sys.stdout), period=1.0 / frequency, port_prefix=prefix
        )
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        if args.info:
            print(evaluator.info(), end="")
        elif args.replay:
            if args.replay == "-":
                replay(evaluator, bus, sys.stdin)
            else:
                with open(args.replay, encoding="utf-8") as fh:
                    replay(evaluator, bus, fh)
        else:
            runner = threading.Thread(target=evaluator.run, name="merge-run", daemon=True)
            runner.start()
            try:
                _interactive(MergeConsole(evaluator, bus), sys.stdout)
            finally:
                evaluator.stop()
                runner.join()
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        evaluator.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
