"""Command-file runner for SlotLab tables."""

from __future__ import annotations

import logging
import sys
from collections import Counter
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from slotlab.config import AppConfig
from slotlab.contracts.error import IOErrorEnvelope, TableFullError
from slotlab.core.contract import TableBase

logger = logging.getLogger(__name__)

VERBS = ("insert", "delete", "search", "print")
VERBOSE_RESULTS = 1
VERBOSE_COMMANDS = 5


@dataclass(frozen=True)
class Command:
    verb: str
    key: int | None
    raw: str
    line_no: int


@dataclass
class RunReport:
    counts: Counter[str] = field(default_factory=Counter)
    skipped: list[int] = field(default_factory=list)
    unknown: list[int] = field(default_factory=list)
    table_full_events: int = 0
    grows: int = 0

    @property
    def processed(self) -> int:
        return sum(self.counts.values())

    def to_dict(self) -> dict[str, object]:
        return {
            "processed": self.processed,
            "counts": dict(self.counts),
            "skipped_lines": list(self.skipped),
            "unknown_lines": list(self.unknown),
            "table_full_events": self.table_full_events,
            "grows": self.grows,
        }


def parse_command(line: str, line_no: int) -> Command | None:
    """Parse one command line; ``None`` for blank lines or an unparsable key."""

    parts = line.split()
    if not parts:
        return None
    verb = parts[0].lower()
    key: int | None = None
    if len(parts) > 1:
        try:
            key = int(parts[1])
        except ValueError:
            logger.warning("Line %d: invalid number format for command: %s", line_no, line.strip())
            return None
    return Command(verb=verb, key=key, raw=line.rstrip("\n"), line_no=line_no)


def read_commands(path: Path) -> Iterator[Command]:
    try:
        handle = path.open(encoding="utf-8")
    except OSError as exc:
        raise IOErrorEnvelope(f"Failed to read commands from {path}: {exc}") from exc
    with handle:
        for line_no, line in enumerate(handle, start=1):
            command = parse_command(line, line_no)
            if command is not None:
                yield command


def _insert(table: TableBase, key: int, report: RunReport, grow_on_full: bool) -> bool:
    try:
        return table.insert(key)
    except TableFullError:
        report.table_full_events += 1
        if not grow_on_full:
            raise
        table.grow()
        report.grows += 1
        return table.insert(key)


def run_commands(
    table: TableBase,
    commands: Iterable[Command],
    *,
    verbose: int = 0,
    out: TextIO | None = None,
    grow_on_full: bool = False,
) -> RunReport:
    """Apply ``commands`` to ``table`` in order.

    Outcome lines are written to ``out`` when ``verbose`` exceeds 1. A command
    missing its key is skipped with a warning. Table-full conditions propagate
    unless ``grow_on_full`` is set, in which case the table grows once and the
    insert is retried.
    """

    stream = out if out is not None else sys.stdout
    report = RunReport()
    table.set_verbose(verbose)
    for command in commands:
        if verbose > VERBOSE_COMMANDS:
            stream.write(f"Processing command: {command.verb}\n")
        if command.verb not in VERBS:
            logger.warning("Line %d: unknown command: %s", command.line_no, command.verb)
            report.unknown.append(command.line_no)
            continue
        if command.verb == "print":
            table.print(stream)
            report.counts["print"] += 1
            continue
        if command.key is None:
            logger.warning("Line %d: %s requires a key", command.line_no, command.verb)
            report.skipped.append(command.line_no)
            continue

        key = command.key
        if command.verb == "insert":
            ok = _insert(table, key, report, grow_on_full)
            message = f"Insert {key}" + ("" if ok else " failed")
        elif command.verb == "delete":
            ok = table.delete(key)
            message = f"Delete {key}" + ("" if ok else " failed")
        else:
            ok = table.find(key) is not None
            message = f"Search {key}" + (" found" if ok else " failed")
        report.counts[command.verb] += 1
        if verbose > VERBOSE_RESULTS:
            stream.write(message + "\n")

    logger.info(
        "Processed %d commands (%d skipped, %d unknown, %d grows)",
        report.processed,
        len(report.skipped),
        len(report.unknown),
        report.grows,
    )
    return report


def format_settings(config: AppConfig, table: TableBase, argv: Iterable[str] | None = None) -> str:
    lines = ["", "Settings:"]
    if argv is not None:
        lines.append("\tCommand line:            " + " ".join(argv))
    lines.append(f"\tCommand file name:       {config.run.commands_path()}")
    lines.append(f"\tHash function:           {table.hash_name}")
    lines.append(f"\tHash size:               {table.capacity}")
    lines.append(f"\tTable style:             {config.table.resolved_strategy().value}")
    lines.append(f"\tVerbose level :          {config.table.verbose}")
    return "\n".join(lines)


__all__ = [
    "Command",
    "RunReport",
    "format_settings",
    "parse_command",
    "read_commands",
    "run_commands",
]
