"""Operation set shared by every table variant, plus common bookkeeping."""

from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, TextIO

from slotlab.contracts.error import BadInputError, TableFullError
from slotlab.core.hash_functions import hash_name, normalize_hash_code, resolve_hash_function

logger = logging.getLogger(__name__)

VERBOSE_OPS = 1
VERBOSE_SEARCH = 2
GROW_ATTEMPTS = 4


@dataclass(frozen=True)
class TableStats:
    capacity: int
    insertions: int
    collisions: int
    deletions: int
    duplicates: int

    @property
    def size(self) -> int:
        return self.insertions - self.deletions

    @property
    def average_probes(self) -> float:
        if self.insertions == 0:
            return 1.0
        return 1.0 + self.collisions / self.insertions

    @property
    def collision_rate(self) -> float:
        """Collisions per successful insert, as a percentage."""

        if self.insertions == 0:
            return 0.0
        return 100.0 * self.collisions / self.insertions

    @property
    def load_factor(self) -> float:
        return self.size / self.capacity if self.capacity else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "capacity": self.capacity,
            "size": self.size,
            "insertions": self.insertions,
            "collisions": self.collisions,
            "deletions": self.deletions,
            "duplicates": self.duplicates,
            "load_factor": self.load_factor,
            "average_probes": self.average_probes,
            "collision_rate": self.collision_rate,
        }


class HashTable(ABC):
    """Contract consumed by drivers and visualisers."""

    @abstractmethod
    def insert(self, key: int) -> bool:
        """Add ``key``; ``False`` for a duplicate."""

    @abstractmethod
    def delete(self, key: int) -> bool: ...

    @abstractmethod
    def find(self, key: int) -> Optional[int]: ...

    @abstractmethod
    def print(self, out: Optional[TextIO] = None) -> None:
        """Write the table contents and statistics to ``out``."""

    @abstractmethod
    def set_verbose(self, level: int) -> None: ...

    @abstractmethod
    def get_collisions(self) -> int: ...

    @abstractmethod
    def get_insertions(self) -> int: ...

    def get_duplicates(self) -> int:
        """Rejected duplicate inserts. Variants that do not track them report 0."""

        return 0

    @abstractmethod
    def size(self) -> int: ...

    @abstractmethod
    def average_probes(self) -> float: ...


class TableBase(HashTable):
    """Counters, verbosity and rendering shared by the concrete tables."""

    title = "HashTable"

    def __init__(self, capacity: int, hash_code: Optional[str] = None, *, out: Optional[TextIO] = None) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise BadInputError(f"capacity must be a positive integer (got {capacity!r})")
        self.hash_code = normalize_hash_code(hash_code)
        self.verbose = 0
        self._out = out
        self._reset(capacity)

    def _reset(self, capacity: int) -> None:
        self._capacity = capacity
        self._hash = resolve_hash_function(self.hash_code, capacity)
        self.insertions = 0
        self.collisions = 0
        self.deletions = 0
        self.duplicates = 0
        self._allocate(capacity)

    @abstractmethod
    def _allocate(self, capacity: int) -> None: ...

    @abstractmethod
    def _slot_lines(self) -> List[str]: ...

    @abstractmethod
    def keys(self) -> Iterator[int]:
        """Yield every live key."""

    @abstractmethod
    def slots(self) -> tuple[Any, ...]:
        """Read-only per-slot view for visualisers."""

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def hash_name(self) -> str:
        return hash_name(self.hash_code)

    def home_index(self, key: int) -> int:
        return self._hash(key)

    def size(self) -> int:
        return self.insertions - self.deletions

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, int) and self.find(key) is not None

    def average_probes(self) -> float:
        return self.stats().average_probes

    def load_factor(self) -> float:
        return self.size() / self._capacity

    def get_collisions(self) -> int:
        return self.collisions

    def get_insertions(self) -> int:
        return self.insertions

    def get_deletions(self) -> int:
        return self.deletions

    def get_duplicates(self) -> int:
        return self.duplicates

    def set_verbose(self, level: int) -> None:
        self.verbose = int(level)

    def stats(self) -> TableStats:
        return TableStats(
            capacity=self._capacity,
            insertions=self.insertions,
            collisions=self.collisions,
            deletions=self.deletions,
            duplicates=self.duplicates,
        )

    def grow(self) -> int:
        """Rebuild into ``2m + 1`` slots, reset counters and reinsert live keys.

        When a reinsert runs out of probes (quadratic walks reach only part of
        some capacities) the rebuild moves on to the next ``2m + 1``. After
        ``GROW_ATTEMPTS`` failed rebuilds the table is restored untouched and
        ``TableFullError`` is raised.
        """

        live = list(self.keys())
        old_capacity = self._capacity
        saved = dict(self.__dict__)
        new_capacity = old_capacity
        for _ in range(GROW_ATTEMPTS):
            new_capacity = new_capacity * 2 + 1
            self._reset(new_capacity)
            try:
                for key in live:
                    self.insert(key)
            except TableFullError:
                logger.debug("%s rebuild at m=%d could not place every key", self.title, new_capacity)
                continue
            logger.info(
                "%s grown from m=%d to m=%d (%d live keys reinserted)",
                self.title,
                old_capacity,
                new_capacity,
                len(live),
            )
            return new_capacity
        self.__dict__.update(saved)
        raise TableFullError(
            f"Could not rebuild {self.title} beyond m={old_capacity} with {len(live)} keys",
            capacity=old_capacity,
            hint="choose a larger capacity or a different probe strategy",
        )

    def render(self) -> List[str]:
        stats = self.stats()
        lines = [f"--- {self.title} (m={self._capacity}, hash={self.hash_name}) ---"]
        lines.extend(self._slot_lines())
        lines.append(f"insertions  : {stats.insertions}")
        lines.append(f"collisions  : {stats.collisions}")
        lines.append(f"deletions   : {stats.deletions}")
        lines.append(f"duplicates  : {stats.duplicates}")
        lines.append(f"collision%  : {stats.collision_rate:.2f}")
        return lines

    def print(self, out: Optional[TextIO] = None) -> None:
        stream = out or self._stream()
        stream.write("\n".join(self.render()) + "\n")

    def _stream(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    def _trace(self, level: int, message: str) -> None:
        if self.verbose >= level:
            self._stream().write(message + "\n")


__all__ = ["HashTable", "TableBase", "TableStats", "VERBOSE_OPS", "VERBOSE_SEARCH"]
