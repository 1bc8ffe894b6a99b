"""Baseline linear-probing table without tombstones.

Used when a caller asks for a strategy the factory does not know. Deleting
clears the slot outright, so lookups cannot stop early and scan all ``m``
slots instead. The hash code is accepted for signature compatibility and
ignored: the home slot is always ``|key| mod m``.
"""

from __future__ import annotations

from typing import Iterator, List, Optional, TextIO

from slotlab.contracts.error import TableFullError
from slotlab.core.contract import VERBOSE_OPS, VERBOSE_SEARCH, TableBase


class SimpleHashTable(TableBase):
    title = "SimpleHashTable"

    def __init__(self, capacity: int, hash_code: Optional[str] = None, *, out: Optional[TextIO] = None) -> None:
        self._table: List[Optional[int]] = []
        super().__init__(capacity, None, out=out)
        self.requested_hash_code = hash_code

    def _allocate(self, capacity: int) -> None:
        self._table = [None] * capacity

    def home_index(self, key: int) -> int:
        return abs(key) % self._capacity

    @property
    def hash_name(self) -> str:
        return "abs-division"

    def keys(self) -> Iterator[int]:
        for slot in self._table:
            if slot is not None:
                yield slot

    def slot_key(self, idx: int) -> Optional[int]:
        return self._table[idx]

    def slots(self) -> tuple[Optional[int], ...]:
        return tuple(self._table)

    def _scan(self, key: int) -> int:
        home = self.home_index(key)
        for attempt in range(self._capacity):
            idx = (home + attempt) % self._capacity
            if self._table[idx] == key:
                return idx
        return -1

    def insert(self, key: int) -> bool:
        existing = self._scan(key)
        if existing >= 0:
            self.duplicates += 1
            self._trace(VERBOSE_OPS, f"Duplicate [{existing:3d}] : {key:4d}")
            return False
        home = self.home_index(key)
        for attempt in range(self._capacity):
            idx = (home + attempt) % self._capacity
            if self._table[idx] is None:
                self._table[idx] = key
                self.insertions += 1
                self._trace(VERBOSE_OPS, f"Insertion [{idx:3d}] = {key:4d}")
                return True
            self.collisions += 1
            self._trace(VERBOSE_OPS, f"Collision [{idx:3d}] : {key:4d} : attempt = {attempt:4d}")
        raise TableFullError(
            f"Hash table full: no free slot for key {key} after {self._capacity} probes",
            capacity=self._capacity,
        )

    def delete(self, key: int) -> bool:
        idx = self._scan(key)
        if idx < 0:
            return False
        self._table[idx] = None
        self.deletions += 1
        self._trace(VERBOSE_OPS, f"Delete {key:<5d} : OK (slot {idx})")
        return True

    def find(self, key: int) -> Optional[int]:
        found = self._scan(key) >= 0
        self._trace(VERBOSE_SEARCH, f"Search {key:<5d} : {'found' if found else 'not found'}")
        return key if found else None

    def _slot_lines(self) -> List[str]:
        return [
            f"Slot {idx}: {'empty' if slot is None else slot}" for idx, slot in enumerate(self._table)
        ]


__all__ = ["SimpleHashTable"]
