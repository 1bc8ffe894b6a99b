"""Probe-path tracing and occupancy views for SlotLab tables.

Traces are plain JSON-friendly dictionaries and never mutate the table.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from slotlab.core.chaining import SeparateChainingHashTable
from slotlab.core.contract import TableBase
from slotlab.core.probing import ProbingHashTable, SlotState
from slotlab.core.simple import SimpleHashTable

ProbeTrace = Dict[str, Any]


def _base_trace(table: TableBase, operation: str, key: int) -> ProbeTrace:
    return {
        "table": type(table).__name__,
        "operation": operation,
        "key": key,
        "capacity": table.capacity,
        "hash": table.hash_name,
    }


def trace_probing_find(table: ProbingHashTable, key: int) -> ProbeTrace:
    home = table.home_index(key)
    path: List[Dict[str, Any]] = []
    found = False
    terminal = "exhausted"
    for step, idx in enumerate(table.probe_sequence(key)):
        state = table.slot_state(idx)
        entry: Dict[str, Any] = {"step": step, "slot": idx, "state": state.value}
        if state is SlotState.EMPTY:
            path.append(entry)
            terminal = "empty"
            break
        if state is SlotState.TOMBSTONE:
            entry["action"] = "skip"
            path.append(entry)
            continue
        occupant = table.slot_key(idx)
        matches = occupant == key
        entry.update({"occupant": occupant, "matches": matches})
        path.append(entry)
        if matches:
            found = True
            terminal = "match"
            break
    trace = _base_trace(table, "find", key)
    trace.update(
        {
            "probe_type": table.probe_type.value,
            "home_slot": home,
            "step_size": table.step_size(key),
            "found": found,
            "terminal": terminal,
            "path": path,
        }
    )
    return trace


def trace_probing_insert(table: ProbingHashTable, key: int) -> ProbeTrace:
    home = table.home_index(key)
    path: List[Dict[str, Any]] = []
    target: Optional[int] = None
    target_state: Optional[SlotState] = None
    terminal = "full"
    collisions = 0
    for step, idx in enumerate(table.probe_sequence(key)):
        state = table.slot_state(idx)
        entry: Dict[str, Any] = {"step": step, "slot": idx, "state": state.value}
        if state is SlotState.OCCUPIED:
            occupant = table.slot_key(idx)
            entry["occupant"] = occupant
            if occupant == key:
                entry["action"] = "duplicate"
                path.append(entry)
                terminal = "duplicate"
                target = None
                break
            if target is None:
                collisions += 1
                entry["action"] = "collide"
            else:
                entry["action"] = "scan"
            path.append(entry)
            continue
        if target is None:
            target = idx
            target_state = state
        if state is SlotState.TOMBSTONE:
            entry["action"] = "remember" if target == idx else "scan"
            path.append(entry)
            continue
        entry["action"] = "stop"
        path.append(entry)
        break
    if target is not None:
        terminal = "reuse-tombstone" if target_state is SlotState.TOMBSTONE else "insert"
    trace = _base_trace(table, "insert", key)
    trace.update(
        {
            "probe_type": table.probe_type.value,
            "home_slot": home,
            "step_size": table.step_size(key),
            "target_slot": target,
            "collisions": collisions,
            "terminal": terminal,
            "path": path,
        }
    )
    return trace


def trace_chaining(table: SeparateChainingHashTable, key: int, operation: str) -> ProbeTrace:
    idx = table.home_index(key)
    members = table.bucket(idx)
    path = [
        {"position": pos, "occupant": member, "matches": member == key}
        for pos, member in enumerate(members)
    ]
    found = key in members
    trace = _base_trace(table, operation, key)
    trace.update({"bucket": idx, "bucket_size": len(members), "found": found, "path": path})
    if operation == "insert":
        trace["terminal"] = "duplicate" if found else "prepend"
        trace["collisions"] = 0 if found or not members else 1
    else:
        trace["terminal"] = "match" if found else "absent"
    return trace


def trace_simple(table: SimpleHashTable, key: int, operation: str) -> ProbeTrace:
    home = table.home_index(key)
    path: List[Dict[str, Any]] = []
    found_at: Optional[int] = None
    for step in range(table.capacity):
        idx = (home + step) % table.capacity
        occupant = table.slot_key(idx)
        matches = occupant is not None and occupant == key
        path.append(
            {
                "step": step,
                "slot": idx,
                "state": "empty" if occupant is None else "occupied",
                "occupant": occupant,
                "matches": matches,
            }
        )
        if matches:
            found_at = idx
            break
    trace = _base_trace(table, operation, key)
    trace.update(
        {
            "home_slot": home,
            "found": found_at is not None,
            "terminal": "match" if found_at is not None else "exhausted",
            "path": path,
        }
    )
    return trace


def trace_simple_insert(table: SimpleHashTable, key: int) -> ProbeTrace:
    """Duplicate scan first, then a linear walk to the first empty slot."""

    scan = trace_simple(table, key, "insert")
    home = scan["home_slot"]
    path: List[Dict[str, Any]] = []
    target: Optional[int] = None
    collisions = 0
    if scan["found"]:
        path = scan["path"]
        path[-1]["action"] = "duplicate"
        terminal = "duplicate"
    else:
        terminal = "full"
        for step in range(table.capacity):
            idx = (home + step) % table.capacity
            occupant = table.slot_key(idx)
            if occupant is None:
                path.append({"step": step, "slot": idx, "state": "empty", "action": "stop"})
                target = idx
                terminal = "insert"
                break
            collisions += 1
            path.append(
                {"step": step, "slot": idx, "state": "occupied", "occupant": occupant, "action": "collide"}
            )
    trace = _base_trace(table, "insert", key)
    trace.update(
        {
            "home_slot": home,
            "target_slot": target,
            "collisions": collisions,
            "terminal": terminal,
            "path": path,
        }
    )
    return trace


def trace_probe_find(table: TableBase, key: int) -> ProbeTrace:
    if isinstance(table, ProbingHashTable):
        return trace_probing_find(table, key)
    if isinstance(table, SeparateChainingHashTable):
        return trace_chaining(table, key, "find")
    if isinstance(table, SimpleHashTable):
        return trace_simple(table, key, "find")
    raise TypeError(f"Unsupported table type: {type(table)!r}")


def trace_probe_insert(table: TableBase, key: int) -> ProbeTrace:
    if isinstance(table, ProbingHashTable):
        return trace_probing_insert(table, key)
    if isinstance(table, SeparateChainingHashTable):
        return trace_chaining(table, key, "insert")
    if isinstance(table, SimpleHashTable):
        return trace_simple_insert(table, key)
    raise TypeError(f"Unsupported table type: {type(table)!r}")


def format_trace_lines(
    trace: Dict[str, Any],
    *,
    seeds: Optional[Sequence[int]] = None,
    export_path: Optional[Union[str, Path]] = None,
) -> List[str]:
    """Return a human-friendly rendering of a probe trace."""

    lines: List[str] = []
    table = trace.get("table", "?")
    operation = str(trace.get("operation", "?"))
    lines.append(f"Probe trace [{table}] {operation.upper()} key={trace.get('key', '?')}")
    summary = f"Terminal: {trace.get('terminal')}"
    if "found" in trace:
        summary = f"Found: {trace.get('found')} | " + summary
    lines.append(summary)
    details = [f"Capacity: {trace.get('capacity')}", f"Hash: {trace.get('hash')}"]
    if "probe_type" in trace:
        details.append(f"Probe: {trace['probe_type']}")
    if "home_slot" in trace:
        details.append(f"Home: {trace['home_slot']}")
    if "bucket" in trace:
        details.append(f"Bucket: {trace['bucket']}")
    lines.append(" | ".join(details))
    if seeds:
        lines.append("Seed keys: " + ", ".join(str(seed) for seed in seeds))
    lines.append("Steps:")
    path = trace.get("path")
    if not isinstance(path, list) or not path:
        lines.append("  (no path recorded)")
    else:
        for item in path:
            if not isinstance(item, dict):
                lines.append(f"  {item!r}")
                continue
            if "step" in item:
                prefix = f"  Step {item['step']}: "
            elif "position" in item:
                prefix = f"  Entry {item['position']}: "
            else:
                prefix = "  Item: "
            attrs: List[str] = []
            for key in ("slot", "state", "action", "occupant", "matches"):
                if key in item and item[key] is not None:
                    value = item[key]
                    if isinstance(value, bool):
                        value = str(value).lower()
                    attrs.append(f"{key}={value}")
            lines.append(prefix + ", ".join(attrs))
    if export_path:
        lines.append(f"Trace JSON written to: {export_path}")
    return lines


def collect_slot_states(table: TableBase) -> List[str]:
    """Per-slot state labels: ``empty``, ``occupied``, ``tombstone`` or ``chain``."""

    if isinstance(table, ProbingHashTable):
        return [table.slot_state(idx).value for idx in range(table.capacity)]
    if isinstance(table, SeparateChainingHashTable):
        return ["chain" if size else "empty" for size in table.bucket_sizes()]
    if isinstance(table, SimpleHashTable):
        return ["empty" if table.slot_key(idx) is None else "occupied" for idx in range(table.capacity)]
    raise TypeError(f"Unsupported table type: {type(table)!r}")


def collect_slot_occupancy(table: TableBase) -> List[int]:
    """Live keys per slot (0/1 for open addressing, bucket length for chaining)."""

    if isinstance(table, SeparateChainingHashTable):
        return table.bucket_sizes()
    return [1 if state == "occupied" else 0 for state in collect_slot_states(table)]


def collect_occupancy_heatmap(table: TableBase, target_cols: int = 32, max_cells: int = 512) -> Dict[str, Any]:
    base_counts = collect_slot_occupancy(table)
    original_slots = len(base_counts)
    total = sum(base_counts)
    target_cells = max(1, max_cells)
    group_width = max(1, math.ceil(original_slots / target_cells))
    aggregated: List[int] = []
    for idx in range(0, original_slots, group_width):
        aggregated.append(sum(base_counts[idx : idx + group_width]))

    cols = max(1, min(target_cols, len(aggregated)))
    rows = math.ceil(len(aggregated) / cols)
    padded_length = rows * cols
    if len(aggregated) < padded_length:
        aggregated.extend([0] * (padded_length - len(aggregated)))
    matrix = [aggregated[r * cols : (r + 1) * cols] for r in range(rows)]

    return {
        "rows": rows,
        "cols": cols,
        "matrix": matrix,
        "max": max(aggregated) if aggregated else 0,
        "total": total,
        "slot_span": group_width,
        "original_slots": original_slots,
    }


_BOARD_GLYPHS = {"empty": ".", "occupied": "#", "tombstone": "x"}


def render_board(states: Sequence[str], occupancy: Sequence[int], cols: int = 32) -> List[str]:
    """Render a slot board as text rows: ``.`` empty, ``#`` occupied, ``x`` tombstone.

    Chaining buckets show their length (``+`` above nine).
    """

    glyphs: List[str] = []
    for state, count in zip(states, occupancy):
        if state == "chain":
            glyphs.append(str(count) if count < 10 else "+")
        else:
            glyphs.append(_BOARD_GLYPHS.get(state, "?"))
    width = max(1, cols)
    return ["".join(glyphs[start : start + width]) for start in range(0, len(glyphs), width)]


__all__ = [
    "collect_occupancy_heatmap",
    "collect_slot_occupancy",
    "collect_slot_states",
    "format_trace_lines",
    "render_board",
    "trace_chaining",
    "trace_probe_find",
    "trace_probe_insert",
    "trace_probing_find",
    "trace_probing_insert",
    "trace_simple",
    "trace_simple_insert",
]
