"""Probe-strategy experiment matrix.

Fills an open-addressing table with each combination of hash function, key
pattern and probe type until it saturates, then records collisions, rejected
duplicates and the average probe cost.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from slotlab.contracts.error import TableFullError
from slotlab.core.probing import ProbeType, ProbingHashTable

DEFAULT_CAPACITY = 101
DEFAULT_KEYS = 500
DEFAULT_SEED = 42
DEFAULT_HASH_CODES = ("i", "m", "r", "s", "o")
DEFAULT_PROBES = (ProbeType.LINEAR, ProbeType.QUADRATIC, ProbeType.DOUBLE_HASHING)
TSV_HEADER = "Hash\tPattern\tProbe\tCollisions\tDuplicates\tAvgProbes"


@dataclass(frozen=True)
class MatrixRow:
    hash_code: str
    pattern: str
    probe: ProbeType
    collisions: int
    duplicates: int
    insertions: int
    average_probes: float
    saturated: bool

    def to_tsv(self) -> str:
        return (
            f"{self.hash_code}\t{self.pattern}\t{self.probe.name}\t"
            f"{self.collisions}\t{self.duplicates}\t{self.average_probes:.3f}"
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "hash": self.hash_code,
            "pattern": self.pattern,
            "probe": self.probe.value,
            "collisions": self.collisions,
            "duplicates": self.duplicates,
            "insertions": self.insertions,
            "average_probes": self.average_probes,
            "saturated": self.saturated,
        }


def build_key_sets(n: int = DEFAULT_KEYS, seed: int = DEFAULT_SEED) -> Dict[str, List[int]]:
    rng = random.Random(seed)
    uniform = [rng.randrange(50_000) for _ in range(n)]
    clustered = [rng.randrange(500) for _ in range(n // 2)]
    clustered += [8_000 + rng.randrange(500) for _ in range(n // 2)]
    return {"Uniform": uniform, "Clustered": clustered}


def run_cell(capacity: int, probe: ProbeType, hash_code: str, keys: Iterable[int]) -> ProbingHashTable:
    table = ProbingHashTable(capacity, probe, hash_code)
    for key in keys:
        try:
            table.insert(key)
        except TableFullError:
            break
    return table


def run_matrix(
    capacity: int = DEFAULT_CAPACITY,
    n_keys: int = DEFAULT_KEYS,
    seed: int = DEFAULT_SEED,
    hash_codes: Sequence[str] = DEFAULT_HASH_CODES,
    probes: Sequence[ProbeType] = DEFAULT_PROBES,
) -> List[MatrixRow]:
    key_sets = build_key_sets(n_keys, seed)
    rows: List[MatrixRow] = []
    for code in hash_codes:
        for pattern, keys in key_sets.items():
            for probe in probes:
                table = run_cell(capacity, probe, code, keys)
                rows.append(
                    MatrixRow(
                        hash_code=code,
                        pattern=pattern,
                        probe=probe,
                        collisions=table.get_collisions(),
                        duplicates=table.get_duplicates(),
                        insertions=table.get_insertions(),
                        average_probes=table.average_probes(),
                        saturated=table.size() == capacity,
                    )
                )
    return rows


def format_matrix_tsv(rows: Iterable[MatrixRow]) -> str:
    return "\n".join([TSV_HEADER, *(row.to_tsv() for row in rows)])


__all__ = [
    "MatrixRow",
    "TSV_HEADER",
    "build_key_sets",
    "format_matrix_tsv",
    "run_cell",
    "run_matrix",
]
