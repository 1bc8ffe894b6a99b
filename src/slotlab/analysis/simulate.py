"""Headless simulation runs: generate keys, insert, delete, summarise."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from slotlab.analysis.probe import (
    collect_occupancy_heatmap,
    collect_slot_occupancy,
    collect_slot_states,
)
from slotlab.contracts.error import BadInputError, TableFullError
from slotlab.core.contract import TableBase, TableStats
from slotlab.core.factory import create_table, normalize_strategy
from slotlab.workloads.patterns import generate_keys

logger = logging.getLogger(__name__)

SIMULATION_SCHEMA = "slotlab.simulation.v1"
KEY_PREVIEW = 25
SLOT_PREVIEW = 15


@dataclass
class SimulationResult:
    capacity: int
    strategy: str
    hash_function: str
    pattern: str
    n_ops: int
    n_insert: int
    n_delete: int
    inserts_attempted: int
    deletes_performed: int
    table_full: bool
    stats: TableStats
    keys_preview: List[int] = field(default_factory=list)
    slot_preview: List[str] = field(default_factory=list)
    slot_states: List[str] = field(default_factory=list)
    occupancy: List[int] = field(default_factory=list)
    heatmap: Dict[str, Any] = field(default_factory=dict)

    def summary_line(self) -> str:
        stats = self.stats
        if self.table_full:
            return (
                f"TABLE FULL after {stats.size} inserts "
                f"(m={self.capacity}, load={stats.load_factor:.3f})"
            )
        return (
            f"Collisions: {stats.collisions}   Inserts: {stats.insertions}   "
            f"Duplicates: {stats.duplicates}   Rate: {stats.collision_rate:.2f}%"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema": SIMULATION_SCHEMA,
            "capacity": self.capacity,
            "strategy": self.strategy,
            "hash_function": self.hash_function,
            "pattern": self.pattern,
            "n_ops": self.n_ops,
            "n_insert": self.n_insert,
            "n_delete": self.n_delete,
            "inserts_attempted": self.inserts_attempted,
            "deletes_performed": self.deletes_performed,
            "table_full": self.table_full,
            "stats": self.stats.to_dict(),
            "summary": self.summary_line(),
            "keys_preview": list(self.keys_preview),
            "slot_preview": list(self.slot_preview),
            "slot_states": list(self.slot_states),
            "occupancy": list(self.occupancy),
            "heatmap": dict(self.heatmap),
        }


def _slot_preview(table: TableBase, limit: int) -> List[str]:
    lines = table.render()[1 : 1 + min(limit, table.capacity)]
    return [line.strip() for line in lines]


def simulate(
    capacity: int,
    strategy: str = "chaining",
    hash_code: Optional[str] = None,
    *,
    n_ops: int = 100,
    insert_pct: int = 100,
    pattern: str = "uniform",
    lo: int = 0,
    hi: int = 100,
    seed: Optional[int] = None,
    table: Optional[TableBase] = None,
) -> SimulationResult:
    """Run one insert-then-delete pass over generated keys.

    Inserts stop at the first table-full condition; the delete phase is then
    skipped so the saturated board is reported as-is. Deletes target the
    earliest generated keys and never exceed the live size.
    """

    if n_ops < 0:
        raise BadInputError(f"n_ops must be >= 0 (got {n_ops})")
    if not 0 <= insert_pct <= 100:
        raise BadInputError(f"insert_pct must be within [0, 100] (got {insert_pct})")

    tbl = table if table is not None else create_table(capacity, strategy, hash_code)
    n_insert = round(n_ops * (insert_pct / 100.0))
    n_delete = n_ops - n_insert
    keys = generate_keys(pattern, n_ops, lo, hi, random.Random(seed))

    attempted = 0
    table_full = False
    try:
        for key in keys[:n_insert]:
            attempted += 1
            tbl.insert(key)
    except TableFullError as exc:
        table_full = True
        logger.warning("Simulation stopped: %s", exc)

    deleted = 0
    if not table_full:
        for key in keys[: min(n_delete, tbl.size())]:
            if tbl.delete(key):
                deleted += 1

    return SimulationResult(
        capacity=tbl.capacity,
        strategy=normalize_strategy(strategy).value,
        hash_function=tbl.hash_name,
        pattern=pattern,
        n_ops=n_ops,
        n_insert=n_insert,
        n_delete=n_delete,
        inserts_attempted=attempted,
        deletes_performed=deleted,
        table_full=table_full,
        stats=tbl.stats(),
        keys_preview=keys[:KEY_PREVIEW],
        slot_preview=_slot_preview(tbl, SLOT_PREVIEW),
        slot_states=collect_slot_states(tbl),
        occupancy=collect_slot_occupancy(tbl),
        heatmap=collect_occupancy_heatmap(tbl),
    )


def format_simulation(result: SimulationResult) -> str:
    stats = result.stats
    lines = [
        "Generated keys (first %d): %s" % (KEY_PREVIEW, result.keys_preview),
        result.summary_line(),
        f"m={result.capacity}  size={stats.size}  load={stats.load_factor:.3f}  "
        f"avg probes={stats.average_probes:.3f}",
        "",
        f"First {len(result.slot_preview)} buckets:",
    ]
    lines.extend(result.slot_preview)
    return "\n".join(lines)


__all__ = ["SIMULATION_SCHEMA", "SimulationResult", "format_simulation", "simulate"]
