"""CLI command registration and handlers for SlotLab."""

from __future__ import annotations

import argparse
import io
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from slotlab.analysis import (
    format_matrix_tsv,
    format_simulation,
    format_trace_lines,
    render_board,
    run_matrix,
    simulate,
    trace_probe_find,
    trace_probe_insert,
)
from slotlab.batch.runner import format_settings, read_commands, run_commands
from slotlab.config import AppConfig
from slotlab.contracts.error import BadInputError, Exit, IOErrorEnvelope
from slotlab.core.contract import TableBase
from slotlab.core.factory import Strategy
from slotlab.core.hash_functions import HASH_NAMES
from slotlab.workloads import PATTERNS

_STRATEGY_CHOICES = [strategy.value for strategy in Strategy]


@dataclass(frozen=True)
class CLIContext:
    """Runtime hooks supplied by the top-level CLI entrypoint."""

    emit_success: Callable[..., None]
    build_table: Callable[..., TableBase]
    app_config: Callable[[], AppConfig]
    logger: logging.Logger
    json_enabled: Callable[[], bool]
    guard: Callable[[Callable[[argparse.Namespace], int]], Callable[[argparse.Namespace], int]]


def register_subcommands(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    ctx: CLIContext,
) -> Dict[str, Callable[[argparse.Namespace], int]]:
    """Define CLI subcommands and return their handlers."""

    handlers: Dict[str, Callable[[argparse.Namespace], int]] = {}

    def _register(
        name: str,
        help_text: Optional[str],
        configure: Callable[[argparse.ArgumentParser], Callable[[argparse.Namespace], int]],
    ) -> None:
        parser = subparsers.add_parser(name, help=help_text)
        handler = configure(parser)
        handlers[name] = ctx.guard(handler)

    _register(
        "run",
        "Apply an insert/delete/search/print command file to a table.",
        lambda parser: _configure_run(parser, ctx),
    )
    _register(
        "simulate",
        "Generate keys, insert and delete them, and summarise the table.",
        lambda parser: _configure_simulate(parser, ctx),
    )
    _register(
        "experiment",
        "Compare probe strategies across hash functions and key patterns (TSV).",
        lambda parser: _configure_experiment(parser, ctx),
    )
    _register(
        "probe",
        "Trace the probe path of a find or insert (text/JSON).",
        lambda parser: _configure_probe(parser, ctx),
    )
    _register(
        "tui",
        "Launch the Textual slot-board viewer.",
        lambda parser: _configure_tui(parser, ctx),
    )
    return handlers


def _add_table_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--capacity", type=int, default=None, help="Slot count m (default: config)")
    parser.add_argument(
        "--strategy",
        default=None,
        help=f"Table strategy: {', '.join(_STRATEGY_CHOICES)} (default: config)",
    )
    parser.add_argument(
        "--hash",
        dest="hash_function",
        default=None,
        help="Hash function name or code, e.g. division, i, folding (default: config)",
    )


def _write_json(path_text: str, payload: Any) -> Path:
    path = Path(path_text).expanduser().resolve()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    except OSError as exc:
        raise IOErrorEnvelope(f"Failed to write {path}: {exc}") from exc
    return path


def _configure_run(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument("--commands", default=None, help="Command file (default: config run.commands_file)")
    _add_table_arguments(parser)
    parser.add_argument("--verbose", type=int, default=None, help="Verbosity level (default: config)")
    parser.add_argument(
        "--grow-on-full",
        action="store_true",
        default=None,
        help="Grow to 2m+1 and retry when an insert finds no slot",
    )
    parser.add_argument("--no-settings", action="store_true", help="Skip the settings block")

    def handler(args: argparse.Namespace) -> int:
        cfg = ctx.app_config()
        if args.commands:
            cfg.run.commands_file = args.commands
        if args.verbose is not None:
            cfg.table.verbose = args.verbose
        if args.capacity is not None:
            cfg.table.capacity = args.capacity
        if args.strategy is not None:
            cfg.table.strategy = args.strategy
        if args.hash_function is not None:
            cfg.table.hash_function = args.hash_function
        cfg.validate()
        grow = cfg.run.grow_on_full if args.grow_on_full is None else args.grow_on_full

        buffer = io.StringIO()
        table = ctx.build_table(
            cfg.table.capacity,
            cfg.table.strategy,
            cfg.table.hash_function,
            verbose=cfg.table.verbose,
            out=buffer,
        )
        path = cfg.run.commands_path()
        if not path.exists():
            raise IOErrorEnvelope(f"Command file not found: {path}", hint="Pass --commands FILE")
        ctx.logger.info("Running commands from %s", path)
        report = run_commands(
            table,
            read_commands(path),
            verbose=cfg.table.verbose,
            out=buffer,
            grow_on_full=grow,
        )
        if not args.no_settings:
            buffer.write(format_settings(cfg, table) + "\n")

        ctx.emit_success(
            "run",
            text=buffer.getvalue().rstrip("\n"),
            data={
                "commands_file": str(path),
                "report": report.to_dict(),
                "stats": table.stats().to_dict(),
            },
        )
        return int(Exit.OK)

    return handler


def _configure_simulate(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    _add_table_arguments(parser)
    parser.add_argument("--ops", type=int, default=100, help="Number of generated keys")
    parser.add_argument(
        "--insert-pct", type=int, default=100, help="Share of ops that are inserts (0-100)"
    )
    parser.add_argument("--pattern", default="uniform", choices=list(PATTERNS), help="Key pattern")
    parser.add_argument("--lo", type=int, default=0, help="Lowest key (inclusive)")
    parser.add_argument("--hi", type=int, default=100, help="Highest key (inclusive)")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed for reproducible keys")
    parser.add_argument("--board", action="store_true", help="Print the full slot board")
    parser.add_argument("--export-json", default=None, help="Write the summary JSON to a file")

    def handler(args: argparse.Namespace) -> int:
        table = ctx.build_table(args.capacity, args.strategy, args.hash_function)
        result = simulate(
            table.capacity,
            args.strategy or ctx.app_config().table.strategy,
            n_ops=args.ops,
            insert_pct=args.insert_pct,
            pattern=args.pattern,
            lo=args.lo,
            hi=args.hi,
            seed=args.seed,
            table=table,
        )
        payload = result.to_dict()
        text = format_simulation(result)
        if args.board:
            text += "\n\nBoard:\n" + "\n".join(render_board(result.slot_states, result.occupancy))
        data: Dict[str, Any] = {"summary": payload}
        if args.export_json:
            export_path = _write_json(args.export_json, payload)
            text += f"\nSummary JSON written to: {export_path}"
            data["export_json"] = str(export_path)
        ctx.emit_success("simulate", text=text, data=data)
        return int(Exit.OK)

    return handler


def _configure_experiment(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument("--capacity", type=int, default=101, help="Table size (default: %(default)s)")
    parser.add_argument("--keys", type=int, default=500, help="Keys per pattern (default: %(default)s)")
    parser.add_argument("--seed", type=int, default=42, help="RNG seed (default: %(default)s)")
    parser.add_argument(
        "--hash",
        dest="hash_codes",
        action="append",
        default=None,
        help="Hash code to include (repeatable, default: i m r s o)",
    )
    parser.add_argument("--out", default=None, help="Also write the TSV to this file")

    def handler(args: argparse.Namespace) -> int:
        if args.capacity < 1:
            raise BadInputError("--capacity must be >= 1")
        codes = args.hash_codes or ["i", "m", "r", "s", "o"]
        unknown = [code for code in codes if code not in HASH_NAMES]
        if unknown:
            raise BadInputError(f"Unknown hash code(s): {', '.join(unknown)}")
        rows = run_matrix(args.capacity, args.keys, args.seed, hash_codes=codes)
        tsv = format_matrix_tsv(rows)
        data: Dict[str, Any] = {"rows": [row.to_dict() for row in rows]}
        if args.out:
            out_path = Path(args.out).expanduser().resolve()
            try:
                out_path.write_text(tsv + "\n", encoding="utf-8")
            except OSError as exc:
                raise IOErrorEnvelope(f"Failed to write {out_path}: {exc}") from exc
            ctx.logger.info("Experiment TSV written to %s", out_path)
            data["out"] = str(out_path)
        ctx.emit_success("experiment", text=tsv, data=data)
        return int(Exit.OK)

    return handler


def _configure_probe(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument(
        "--operation",
        choices=["find", "insert"],
        required=True,
        help="Operation to trace",
    )
    parser.add_argument("--key", type=int, required=True, help="Key to probe")
    _add_table_arguments(parser)
    parser.add_argument(
        "--seed",
        action="append",
        type=int,
        default=[],
        metavar="KEY",
        help="Insert KEY before tracing (repeatable)",
    )
    parser.add_argument(
        "--delete",
        action="append",
        type=int,
        default=[],
        metavar="KEY",
        help="Delete KEY after seeding, leaving a tombstone (repeatable)",
    )
    parser.add_argument(
        "--export-json",
        help="Write the trace payload to a JSON file (indent=2)",
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Apply the operation to the table after tracing",
    )

    def handler(args: argparse.Namespace) -> int:
        table = ctx.build_table(args.capacity, args.strategy, args.hash_function, verbose=0)
        _seed_table(table, args.seed, args.delete)

        if args.operation == "find":
            trace = trace_probe_find(table, args.key)
            if args.apply:
                table.find(args.key)
        else:
            trace = trace_probe_insert(table, args.key)
            if args.apply:
                table.insert(args.key)

        payload: Dict[str, Any] = {"trace": trace}
        if args.seed:
            payload["seed_entries"] = list(args.seed)

        export_path: Optional[Path] = None
        if args.export_json:
            export_path = _write_json(args.export_json, payload)
            payload["export_json"] = str(export_path)

        text_output = "\n".join(format_trace_lines(trace, seeds=args.seed, export_path=export_path))
        ctx.emit_success("probe", text=text_output, data=payload)
        return int(Exit.OK)

    return handler


def _seed_table(table: TableBase, seeds: List[int], deletes: List[int]) -> None:
    for key in seeds:
        table.insert(key)
    for key in deletes:
        table.delete(key)


def _configure_tui(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument("--board-json", default=None, help="Simulation summary JSON to display")
    parser.add_argument("--probe-json", default=None, help="Probe trace JSON to display")

    def handler(args: argparse.Namespace) -> int:
        from slotlab.tui.app import run_tui

        run_tui(board_json=args.board_json, probe_json=args.probe_json)
        return int(Exit.OK)

    return handler


__all__ = ["CLIContext", "register_subcommands"]
