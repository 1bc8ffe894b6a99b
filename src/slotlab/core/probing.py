"""Open-addressing table with linear, quadratic or double-hash probing.

Deletions leave tombstones so that a later search walking the same probe
sequence is not cut short. Only a never-occupied slot ends a search.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterator, List, Optional, TextIO

from slotlab.contracts.error import TableFullError
from slotlab.core.contract import VERBOSE_OPS, VERBOSE_SEARCH, TableBase
from slotlab.core.hash_functions import second_hash

logger = logging.getLogger(__name__)


class ProbeType(str, Enum):
    LINEAR = "linear"
    QUADRATIC = "quadratic"
    DOUBLE_HASHING = "double-hashing"


class SlotState(str, Enum):
    EMPTY = "empty"
    OCCUPIED = "occupied"
    TOMBSTONE = "tombstone"


class ProbingHashTable(TableBase):
    """Flat slot array; the probe type decides the walk after a collision."""

    title = "ProbingHashTable"

    def __init__(
        self,
        capacity: int,
        probe_type: ProbeType | str = ProbeType.LINEAR,
        hash_code: Optional[str] = None,
        *,
        out: Optional[TextIO] = None,
    ) -> None:
        self.probe_type = ProbeType(probe_type)
        self._table: List[Optional[int]] = []
        self._tombstone: List[bool] = []
        super().__init__(capacity, hash_code, out=out)

    def _allocate(self, capacity: int) -> None:
        self._table = [None] * capacity
        self._tombstone = [False] * capacity

    # ------------------------------------------------------------------
    # probe arithmetic

    def step_size(self, key: int) -> int:
        if self.probe_type is ProbeType.DOUBLE_HASHING:
            return second_hash(key, self._capacity)
        return 1

    def probe_index(self, home: int, step: int, attempt: int) -> int:
        m = self._capacity
        if self.probe_type is ProbeType.LINEAR:
            return (home + attempt) % m
        if self.probe_type is ProbeType.QUADRATIC:
            return (home + attempt * attempt) % m
        return (home + attempt * step) % m

    def probe_sequence(self, key: int) -> Iterator[int]:
        """Yield the ``m`` candidate slots for ``key`` in probe order."""

        home = self._hash(key)
        step = self.step_size(key)
        for attempt in range(self._capacity):
            yield self.probe_index(home, step, attempt)

    # ------------------------------------------------------------------
    # slot inspection

    def slot_state(self, idx: int) -> SlotState:
        if self._table[idx] is not None:
            return SlotState.OCCUPIED
        if self._tombstone[idx]:
            return SlotState.TOMBSTONE
        return SlotState.EMPTY

    def slot_key(self, idx: int) -> Optional[int]:
        return self._table[idx]

    def slots(self) -> tuple[Optional[int], ...]:
        """Read-only copy of the slot array; tombstones and empties both show as ``None``."""

        return tuple(self._table)

    def keys(self) -> Iterator[int]:
        for slot in self._table:
            if slot is not None:
                yield slot

    def tombstone_count(self) -> int:
        return sum(1 for flag in self._tombstone if flag)

    # ------------------------------------------------------------------
    # operations

    def insert(self, key: int) -> bool:
        target: Optional[int] = None
        for attempt, idx in enumerate(self.probe_sequence(key)):
            slot = self._table[idx]
            if slot is None:
                if target is None:
                    target = idx
                if not self._tombstone[idx]:
                    break
                # a live copy may still sit past the tombstone
                continue
            if slot == key:
                self.duplicates += 1
                self._trace(VERBOSE_OPS, f"Duplicate [{idx:3d}] : {key:4d}")
                return False
            if target is None:
                self.collisions += 1
                self._trace(VERBOSE_OPS, f"Collision [{idx:3d}] : {key:4d} : attempt = {attempt:4d}")
        if target is None:
            logger.debug("Insert of %d exhausted all %d slots", key, self._capacity)
            raise TableFullError(
                f"Hash table full: no free slot for key {key} after {self._capacity} probes",
                capacity=self._capacity,
                hint="grow() the table or choose a larger capacity",
            )
        self._table[target] = key
        self._tombstone[target] = False
        self.insertions += 1
        self._trace(VERBOSE_OPS, f"Insertion [{target:3d}] = {key:4d}")
        return True

    def _find_slot(self, key: int) -> int:
        for idx in self.probe_sequence(key):
            slot = self._table[idx]
            if slot is None:
                if not self._tombstone[idx]:
                    return -1
                continue
            if slot == key:
                return idx
        return -1

    def find(self, key: int) -> Optional[int]:
        idx = self._find_slot(key)
        found = idx >= 0
        self._trace(VERBOSE_SEARCH, f"Search {key:<5d} : {'found' if found else 'not found'}")
        return self._table[idx] if found else None

    def delete(self, key: int) -> bool:
        idx = self._find_slot(key)
        if idx < 0:
            self._trace(VERBOSE_OPS, f"Delete {key:<5d} : not found")
            return False
        self._table[idx] = None
        self._tombstone[idx] = True
        self.deletions += 1
        self._trace(VERBOSE_OPS, f"Delete {key:<5d} : OK (slot {idx})")
        return True

    def _slot_lines(self) -> List[str]:
        lines: List[str] = []
        for idx in range(self._capacity):
            state = self.slot_state(idx)
            shown = str(self._table[idx]) if state is SlotState.OCCUPIED else state.value
            lines.append(f"{idx:3d}: {shown}")
        return lines

    def render(self) -> List[str]:
        lines = super().render()
        lines[0] = f"--- {self.title} ({self.probe_type.value}, m={self._capacity}, hash={self.hash_name}) ---"
        return lines


class LinearProbingHashTable(ProbingHashTable):
    def __init__(self, capacity: int, hash_code: Optional[str] = None, *, out: Optional[TextIO] = None) -> None:
        super().__init__(capacity, ProbeType.LINEAR, hash_code, out=out)


class QuadraticProbingHashTable(ProbingHashTable):
    def __init__(self, capacity: int, hash_code: Optional[str] = None, *, out: Optional[TextIO] = None) -> None:
        super().__init__(capacity, ProbeType.QUADRATIC, hash_code, out=out)


class DoubleHashingHashTable(ProbingHashTable):
    def __init__(self, capacity: int, hash_code: Optional[str] = None, *, out: Optional[TextIO] = None) -> None:
        super().__init__(capacity, ProbeType.DOUBLE_HASHING, hash_code, out=out)


__all__ = [
    "DoubleHashingHashTable",
    "LinearProbingHashTable",
    "ProbeType",
    "ProbingHashTable",
    "QuadraticProbingHashTable",
    "SlotState",
]
