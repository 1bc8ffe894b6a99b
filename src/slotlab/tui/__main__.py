"""CLI entry point for the SlotLab Textual viewer."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

from .app import run_tui


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Terminal viewer for exported SlotLab boards and probe traces.",
    )
    parser.add_argument(
        "--board-json",
        default=None,
        help="Simulation summary JSON written by `slotlab simulate --export-json`.",
    )
    parser.add_argument(
        "--probe-json",
        default=None,
        help="Probe trace JSON written by `slotlab probe --export-json`.",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    run_tui(board_json=args.board_json, probe_json=args.probe_json)


if __name__ == "__main__":
    main()
