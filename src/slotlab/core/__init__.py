from .chaining import SeparateChainingHashTable
from .contract import HashTable, TableBase, TableStats
from .factory import Strategy, create_table, normalize_strategy
from .hash_functions import (
    HASH_FUNCTIONS,
    HASH_NAMES,
    RandomBucketHash,
    normalize_hash_code,
    resolve_hash_function,
    second_hash,
)
from .probing import (
    DoubleHashingHashTable,
    LinearProbingHashTable,
    ProbeType,
    ProbingHashTable,
    QuadraticProbingHashTable,
    SlotState,
)
from .simple import SimpleHashTable

__all__ = [
    "DoubleHashingHashTable",
    "HASH_FUNCTIONS",
    "HASH_NAMES",
    "HashTable",
    "LinearProbingHashTable",
    "ProbeType",
    "ProbingHashTable",
    "QuadraticProbingHashTable",
    "RandomBucketHash",
    "SeparateChainingHashTable",
    "SimpleHashTable",
    "SlotState",
    "Strategy",
    "TableBase",
    "TableStats",
    "create_table",
    "normalize_hash_code",
    "normalize_strategy",
    "resolve_hash_function",
    "second_hash",
]
