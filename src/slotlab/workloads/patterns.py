"""Synthetic key patterns for simulations and experiments.

All generators draw inclusive ranges from a caller-supplied ``random.Random``
so runs are reproducible when seeded.
"""

from __future__ import annotations

import random
from typing import Callable, Dict, List, Optional

from slotlab.contracts.error import BadInputError

PATTERNS = ("uniform", "left-skewed", "right-skewed", "clustered", "bimodal")


def uniform(n: int, lo: int, hi: int, rng: random.Random) -> List[int]:
    return [rng.randint(lo, hi) for _ in range(n)]


def skewed(n: int, lo: int, hi: int, rng: random.Random, *, left: bool) -> List[int]:
    """Draw from the lower (``left``) or upper half of ``[lo, hi]``."""

    mid = lo + (hi - lo) // 2
    start, stop = (lo, mid) if left else (mid, hi)
    return uniform(n, start, stop, rng)


def clustered(n: int, lo: int, hi: int, rng: random.Random) -> List[int]:
    """Draw from a window spanning 10% of the range at a random base."""

    span = max(1, (hi - lo) // 10)
    base = rng.randint(lo, max(lo, hi - span))
    return uniform(n, base, base + span, rng)


def bimodal(n: int, lo: int, hi: int, rng: random.Random) -> List[int]:
    half = n // 2
    return skewed(half, lo, hi, rng, left=True) + skewed(n - half, lo, hi, rng, left=False)


_GENERATORS: Dict[str, Callable[[int, int, int, random.Random], List[int]]] = {
    "uniform": uniform,
    "left-skewed": lambda n, lo, hi, rng: skewed(n, lo, hi, rng, left=True),
    "right-skewed": lambda n, lo, hi, rng: skewed(n, lo, hi, rng, left=False),
    "clustered": clustered,
    "bimodal": bimodal,
}


def generate_keys(
    pattern: str,
    n: int,
    lo: int,
    hi: int,
    rng: Optional[random.Random] = None,
) -> List[int]:
    """Generate ``n`` keys in ``[lo, hi]``; unknown patterns fall back to uniform."""

    if n < 0:
        raise BadInputError(f"key count must be >= 0 (got {n})")
    if lo >= hi:
        raise BadInputError(
            f"minimum key must be less than maximum key (got {lo} >= {hi})",
            hint="widen the key range",
        )
    normalized = (pattern or "uniform").strip().lower().replace("_", "-").replace(" ", "-")
    generator = _GENERATORS.get(normalized, uniform)
    return generator(n, lo, hi, rng or random.Random())


__all__ = ["PATTERNS", "bimodal", "clustered", "generate_keys", "skewed", "uniform"]
