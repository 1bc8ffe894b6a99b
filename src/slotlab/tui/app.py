"""Textual viewer for exported SlotLab boards and probe traces."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, cast

from slotlab.analysis import SIMULATION_SCHEMA, format_trace_lines, render_board

logger = logging.getLogger(__name__)

_TEXTUAL_ERR: Exception | None = None
if TYPE_CHECKING:  # pragma: no cover - only for static analysis
    from textual.app import App as AppBase
    from textual.app import ComposeResult
    from textual.binding import Binding
    from textual.widgets import Footer, Header, Static
else:  # pragma: no cover - guarded runtime import
    try:
        from textual.app import App as AppBase  # type: ignore[import-not-found]
        from textual.app import ComposeResult
        from textual.binding import Binding  # type: ignore[import-not-found]
        from textual.widgets import Footer, Header, Static  # type: ignore[import-not-found]
    except Exception as exc:  # pragma: no cover  # noqa: BLE001
        _TEXTUAL_ERR = exc
        AppBase = cast(Any, object)
        ComposeResult = cast(Any, object)
        Binding = cast(Any, object)
        Footer = cast(Any, object)
        Header = cast(Any, object)
        Static = cast(Any, object)


def _read_json(path: Path) -> tuple[Any, str | None]:
    try:
        return json.loads(path.read_text(encoding="utf-8")), None
    except (OSError, json.JSONDecodeError) as exc:
        return None, str(exc)


def _format_summary(summary: dict[str, Any]) -> str:
    stats = summary.get("stats") if isinstance(summary.get("stats"), dict) else {}
    lines = [
        f"Strategy: {summary.get('strategy', '?')}  Hash: {summary.get('hash_function', '?')}  "
        f"m={summary.get('capacity', '?')}",
        str(summary.get("summary", "")),
    ]
    if stats:
        lines.append(
            "Size: {size}  Deletions: {deletions}  Load: {load:.3f}  Avg probes: {avg:.3f}".format(
                size=stats.get("size", 0),
                deletions=stats.get("deletions", 0),
                load=float(stats.get("load_factor", 0.0)),
                avg=float(stats.get("average_probes", 1.0)),
            )
        )
    return "\n".join(lines)


def _format_board(summary: dict[str, Any], cols: int = 32) -> str:
    states = summary.get("slot_states")
    occupancy = summary.get("occupancy")
    if not isinstance(states, list) or not isinstance(occupancy, list):
        return "Summary has no slot board; re-export with `slotlab simulate --export-json`."
    rows = render_board(states, occupancy, cols=cols)
    legend = "Legend: . empty  # occupied  x tombstone  digits = chain length"
    return "\n".join([*rows, "", legend])


def _load_board(path: Path | None) -> str:
    if path is None:
        return "No board loaded. Launch with `--board-json summary.json`."
    data, error = _read_json(path)
    if error is not None:
        return f"Failed to load board: {error}"
    if isinstance(data, dict) and isinstance(data.get("summary"), dict):
        data = data["summary"]
    if not isinstance(data, dict):
        return "Board JSON must contain a simulation summary object"
    if data.get("schema") not in {None, SIMULATION_SCHEMA}:
        return f"Unsupported schema: {data.get('schema')}"
    return f"Board file: {path}\n{_format_summary(data)}\n\n{_format_board(data)}"


def _load_probe_trace(path: Path | None) -> str:
    if path is None:
        return (
            "Probe trace inactive. Export one with `slotlab probe --export-json` "
            "and launch with `--probe-json /path/to/trace.json`."
        )
    data, error = _read_json(path)
    if error is not None:
        return f"Failed to load probe trace: {error}"
    seeds = None
    export_path = None
    trace: dict[str, Any] | None
    if isinstance(data, dict) and isinstance(data.get("trace"), dict):
        trace = data["trace"]
        if isinstance(data.get("seed_entries"), list):
            seeds = data["seed_entries"]
        if isinstance(data.get("export_json"), str):
            export_path = data["export_json"]
    elif isinstance(data, dict):
        trace = data
    else:
        trace = None
    if trace is None:
        return 'Probe trace JSON must contain an object or {"trace": {...}}'
    lines = format_trace_lines(trace, seeds=seeds, export_path=export_path)
    return "\n".join([f"Trace file: {path}", *lines])


if _TEXTUAL_ERR is None:

    class SlotBoardApp(AppBase[None]):
        """Static viewer for a simulation board and an optional probe trace."""

        CSS = """
        Screen { layout: vertical; }
        #status { padding: 1 2; background: #1f2937; color: #e5e7eb; }
        #board { padding: 1 2; }
        #probe { padding: 1 2; color: #94a3b8; }
        """

        BINDINGS = [
            Binding("r", "reload", "Reload"),
            Binding("q", "quit", "Quit"),
        ]

        def __init__(self, board_json: str | None = None, probe_json: str | None = None) -> None:
            super().__init__()
            self._board_path = Path(board_json).expanduser().resolve() if board_json else None
            self._probe_path = Path(probe_json).expanduser().resolve() if probe_json else None

        def compose(self) -> ComposeResult:
            yield Header(show_clock=True)
            yield Static("Loading…", id="status")
            yield Static("", id="board")
            yield Static("", id="probe")
            yield Footer()

        async def on_mount(self) -> None:
            self._status = self.query_one("#status", Static)
            self._board = self.query_one("#board", Static)
            self._probe = self.query_one("#probe", Static)
            await self.action_reload()

        async def action_reload(self) -> None:  # noqa: D401 - Textual action signature
            board_text = await asyncio.to_thread(_load_board, self._board_path)
            probe_text = await asyncio.to_thread(_load_probe_trace, self._probe_path)
            self._board.update(board_text)
            self._probe.update(probe_text)
            self._status.update("Press r to reload, q to quit.")

else:  # pragma: no cover - exercised only when Textual is absent

    class SlotBoardApp:  # type: ignore[no-redef]
        def __init__(self, *_args: Any, **_kwargs: Any) -> None:
            raise ImportError(
                "The Textual TUI requires the 'textual' extra. Install with `pip install .[ui]`."
            ) from _TEXTUAL_ERR


def run_tui(board_json: str | None = None, probe_json: str | None = None) -> None:
    """Launch the Textual viewer."""

    logger.info("Starting TUI (board=%s, probe=%s)", board_json, probe_json)
    app = SlotBoardApp(board_json=board_json, probe_json=probe_json)
    app.run()


__all__ = ["SlotBoardApp", "run_tui"]
