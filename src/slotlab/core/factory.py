"""Build a table from ``(capacity, strategy, hash code)``."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Optional, TextIO

from slotlab.core.chaining import SeparateChainingHashTable
from slotlab.core.contract import TableBase
from slotlab.core.probing import ProbeType, ProbingHashTable
from slotlab.core.simple import SimpleHashTable

logger = logging.getLogger(__name__)


class Strategy(str, Enum):
    CHAINING = "chaining"
    LINEAR = "linear"
    QUADRATIC = "quadratic"
    DOUBLE_HASHING = "double-hashing"
    BASELINE = "baseline"


_STRATEGY_ALIASES: Dict[str, Strategy] = {
    "chain": Strategy.CHAINING,
    "chaining": Strategy.CHAINING,
    "separate-chaining": Strategy.CHAINING,
    "separate chaining": Strategy.CHAINING,
    "linear": Strategy.LINEAR,
    "quad": Strategy.QUADRATIC,
    "quadratic": Strategy.QUADRATIC,
    "double": Strategy.DOUBLE_HASHING,
    "double-hash": Strategy.DOUBLE_HASHING,
    "double hash": Strategy.DOUBLE_HASHING,
    "double-hashing": Strategy.DOUBLE_HASHING,
    "double_hashing": Strategy.DOUBLE_HASHING,
    "baseline": Strategy.BASELINE,
    "simple": Strategy.BASELINE,
}

_PROBE_TYPES: Dict[Strategy, ProbeType] = {
    Strategy.LINEAR: ProbeType.LINEAR,
    Strategy.QUADRATIC: ProbeType.QUADRATIC,
    Strategy.DOUBLE_HASHING: ProbeType.DOUBLE_HASHING,
}


def normalize_strategy(value: Optional[str]) -> Strategy:
    """Resolve a strategy name or alias; unknown names select the baseline table."""

    if isinstance(value, Strategy):
        return value
    if value is None or not str(value).strip():
        return Strategy.CHAINING
    strategy = _STRATEGY_ALIASES.get(str(value).strip().lower())
    if strategy is None:
        logger.warning("Unknown table strategy %r; using baseline linear probing", value)
        return Strategy.BASELINE
    return strategy


def create_table(
    capacity: int,
    strategy: Optional[str] = Strategy.CHAINING,
    hash_code: Optional[str] = None,
    *,
    verbose: int = 0,
    out: Optional[TextIO] = None,
) -> TableBase:
    resolved = normalize_strategy(strategy)
    table: TableBase
    if resolved is Strategy.CHAINING:
        table = SeparateChainingHashTable(capacity, hash_code, out=out)
    elif resolved is Strategy.BASELINE:
        table = SimpleHashTable(capacity, hash_code, out=out)
    else:
        table = ProbingHashTable(capacity, _PROBE_TYPES[resolved], hash_code, out=out)
    table.set_verbose(verbose)
    logger.debug(
        "Created %s (strategy=%s, m=%d, hash=%s)",
        type(table).__name__,
        resolved.value,
        capacity,
        table.hash_name,
    )
    return table


__all__ = ["Strategy", "create_table", "normalize_strategy"]
