"""Separate-chaining table: one unordered key collection per bucket."""

from __future__ import annotations

from collections import deque
from typing import Deque, Iterator, List, Optional, TextIO

from slotlab.core.contract import VERBOSE_OPS, VERBOSE_SEARCH, TableBase


class SeparateChainingHashTable(TableBase):
    """Buckets hold distinct keys, most recent first.

    A collision is charged once per insert that lands in a non-empty bucket,
    regardless of how many keys the bucket already holds.
    """

    title = "SeparateChainingHashTable"

    def __init__(self, capacity: int, hash_code: Optional[str] = None, *, out: Optional[TextIO] = None) -> None:
        self._buckets: List[Deque[int]] = []
        super().__init__(capacity, hash_code, out=out)

    def _allocate(self, capacity: int) -> None:
        self._buckets = [deque() for _ in range(capacity)]

    def bucket(self, idx: int) -> tuple[int, ...]:
        return tuple(self._buckets[idx])

    def slots(self) -> tuple[tuple[int, ...], ...]:
        return tuple(tuple(bucket) for bucket in self._buckets)

    def bucket_sizes(self) -> List[int]:
        return [len(bucket) for bucket in self._buckets]

    def max_bucket_len(self) -> int:
        return max(self.bucket_sizes(), default=0)

    def keys(self) -> Iterator[int]:
        for bucket in self._buckets:
            yield from bucket

    def insert(self, key: int) -> bool:
        idx = self._hash(key)
        bucket = self._buckets[idx]
        if key in bucket:
            self.duplicates += 1
            self._trace(VERBOSE_OPS, f"Duplicate {key:<5d} -> slot {idx:<3d}")
            return False
        if bucket:
            self.collisions += 1
        bucket.appendleft(key)
        self.insertions += 1
        self._trace(VERBOSE_OPS, f"Insert {key:<5d} -> slot {idx:<3d}  (bucket size {len(bucket)})")
        return True

    def delete(self, key: int) -> bool:
        idx = self._hash(key)
        bucket = self._buckets[idx]
        removed = key in bucket
        if removed:
            bucket.remove(key)
            self.deletions += 1
        self._trace(VERBOSE_OPS, f"Delete {key:<5d} : {'OK' if removed else 'not found'}")
        return removed

    def find(self, key: int) -> Optional[int]:
        found = key in self._buckets[self._hash(key)]
        self._trace(VERBOSE_SEARCH, f"Search {key:<5d} : {'found' if found else 'not found'}")
        return key if found else None

    def _slot_lines(self) -> List[str]:
        return [
            f"Slot {idx:2d}: {list(bucket) if bucket else 'empty'}"
            for idx, bucket in enumerate(self._buckets)
        ]


__all__ = ["SeparateChainingHashTable"]
