"""Integer hash functions mapping ``(key, m)`` to a bucket index in ``[0, m)``.

Every table resolves its primary hash once, at construction, through
:func:`resolve_hash_function`. Codes are single characters; full names are
accepted too and normalised by :func:`normalize_hash_code`.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Callable, Dict, Optional

from slotlab.contracts.error import BadInputError

logger = logging.getLogger(__name__)

HashFn = Callable[[int, int], int]
KeyHash = Callable[[int], int]

_U32_MASK = 0xFFFFFFFF
_U64_MASK = (1 << 64) - 1
_KNUTH_A: float = (math.sqrt(5) - 1) / 2
_PHI: float = (1 + math.sqrt(5)) / 2

RANDOM_SEED = 123456789
RANDOM_CODE = "r"
DEFAULT_CODE = "i"


def _int32(key: int) -> int:
    """Wrap ``key`` to a signed 32-bit value before float arithmetic."""

    key &= _U32_MASK
    return key - (1 << 32) if key & 0x80000000 else key


def division(key: int, m: int) -> int:
    return key % m


def multiplication(key: int, m: int) -> int:
    """Knuth's multiplicative method with ``A = (sqrt(5) - 1) / 2``."""

    product = _int32(key) * _KNUTH_A
    frac = product - math.floor(product)
    return min(int(m * frac), m - 1)


def _fold(key: int, m: int, block: int) -> int:
    total = 0
    n = abs(key)
    while n > 0:
        total += n % block
        n //= block
    return total % m


def folding(key: int, m: int) -> int:
    """Sum the 3-digit groups of ``|key|``."""

    return _fold(key, m, 1000)


def folding_four(key: int, m: int) -> int:
    """Sum the 4-digit groups of ``|key|``."""

    return _fold(key, m, 10_000)


def mid_square(key: int, m: int) -> int:
    """Take the middle bits of the 64-bit square of ``key``.

    The window is wide enough to cover ``m - 1`` and is centred in the 64-bit
    word before the final reduction modulo ``m``.
    """

    square = (key * key) & _U64_MASK
    needed_bits = (m - 1).bit_length()
    shift = (64 - needed_bits) // 2
    mask = (1 << needed_bits) - 1
    return ((square >> shift) & mask) % m


def fibonacci(key: int, m: int) -> int:
    """Golden-ratio hashing: ``floor(m * ((key * (phi - 1)) mod 1))``."""

    frac = (_int32(key) * (_PHI - 1)) % 1.0
    # float modulo can round a tiny negative product up to exactly 1.0
    return min(int(math.floor(m * frac)), m - 1)


def custom(key: int, m: int) -> int:
    """XOR-shift bit mixer over the low 32 bits of ``key``."""

    h = key & _U32_MASK
    h ^= (h >> 20) ^ (h >> 12)
    h ^= (h >> 7) ^ (h >> 4)
    if h & 0x80000000:
        h -= 1 << 32
    return h % m


def alternate(key: int, m: int) -> int:
    """Secondary mixer slot; currently the same bit mixer as :func:`custom`."""

    return custom(key, m)


def second_hash(key: int, m: int) -> int:
    """Step size for double hashing.

    Always in ``[1, m - 1]`` for ``m > 2`` and bumped to the next value coprime
    with ``m`` so repeated steps visit every slot before repeating.
    """

    if m <= 2:
        return 1
    step = 1 + mid_square(key, m - 2) % (m - 1)
    while math.gcd(step, m) != 1:
        step += 1
    return step


class RandomBucketHash:
    """Memoised random assignment of keys to buckets for one capacity.

    The first lookup of a key draws a bucket from a fixed-seed generator; later
    lookups replay it. The memo belongs to a single capacity, so a table that
    grows resolves a fresh instance instead of replaying stale buckets.
    """

    __slots__ = ("capacity", "_rng", "_memo")

    def __init__(self, capacity: int, seed: int = RANDOM_SEED) -> None:
        if capacity < 1:
            raise BadInputError(f"capacity must be >= 1 (got {capacity})")
        self.capacity = capacity
        self._rng = random.Random(seed)
        self._memo: Dict[int, int] = {}

    def __call__(self, key: int) -> int:
        bucket = self._memo.get(key)
        if bucket is None:
            bucket = self._rng.randrange(self.capacity)
            self._memo[key] = bucket
        return bucket

    def __len__(self) -> int:
        return len(self._memo)


HASH_FUNCTIONS: Dict[str, HashFn] = {
    "i": division,
    "m": multiplication,
    "s": mid_square,
    "o": folding,
    "4": folding_four,
    "f": fibonacci,
    "c": custom,
    "d": alternate,
}

HASH_NAMES: Dict[str, str] = {
    "i": "division",
    "m": "multiplication",
    "s": "mid-square",
    "o": "folding",
    "4": "folding-four",
    "f": "fibonacci",
    "r": "random",
    "c": "custom",
    "d": "alternate",
}

_NAME_ALIASES: Dict[str, str] = {
    "div": "i",
    "mod": "i",
    "mult": "m",
    "midsquare": "s",
    "mid_square": "s",
    "fold": "o",
    "folding_four": "4",
    "foldingfour": "4",
    "fib": "f",
    "golden": "f",
    "rand": "r",
    "mix": "c",
    "custom-mix": "c",
}
_NAME_TO_CODE: Dict[str, str] = {name: code for code, name in HASH_NAMES.items()}
_NAME_TO_CODE.update(_NAME_ALIASES)


def normalize_hash_code(value: Optional[str]) -> str:
    """Return the code letter for ``value``; unknown values fall back to division."""

    if value is None:
        return DEFAULT_CODE
    text = str(value).strip()
    if text in HASH_NAMES:
        return text
    lowered = text.lower()
    if lowered in HASH_NAMES:
        return lowered
    code = _NAME_TO_CODE.get(lowered)
    if code is None:
        logger.debug("Unknown hash function %r; falling back to division", value)
        return DEFAULT_CODE
    return code


def hash_name(code: Optional[str]) -> str:
    return HASH_NAMES[normalize_hash_code(code)]


def resolve_hash_function(code: Optional[str], m: int) -> KeyHash:
    """Bind the hash function selected by ``code`` to capacity ``m``."""

    if m < 1:
        raise BadInputError(f"capacity must be >= 1 (got {m})")
    resolved = normalize_hash_code(code)
    if resolved == RANDOM_CODE:
        return RandomBucketHash(m)
    fn = HASH_FUNCTIONS[resolved]

    def bound(key: int) -> int:
        return fn(key, m)

    bound.__name__ = HASH_NAMES[resolved]
    return bound


__all__ = [
    "HASH_FUNCTIONS",
    "HASH_NAMES",
    "RANDOM_SEED",
    "RandomBucketHash",
    "alternate",
    "custom",
    "division",
    "fibonacci",
    "folding",
    "folding_four",
    "hash_name",
    "mid_square",
    "multiplication",
    "normalize_hash_code",
    "resolve_hash_function",
    "second_hash",
]
