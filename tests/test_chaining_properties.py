from __future__ import annotations

import io
from typing import List, Tuple

from hypothesis import given, settings, strategies as st

from slotlab.core.chaining import SeparateChainingHashTable


def test_duplicate_insert_is_rejected() -> None:
    table = SeparateChainingHashTable(10, "i")
    assert table.insert(7) is True
    assert table.get_insertions() == 1

    assert table.insert(7) is False
    assert table.get_duplicates() == 1
    assert table.get_insertions() == 1
    assert table.size() == 1


def test_one_collision_per_insert_into_busy_bucket() -> None:
    table = SeparateChainingHashTable(10, "i")
    for key in (0, 10, 20, 30):
        table.insert(key)

    assert table.get_collisions() == 3
    assert table.bucket(0) == (30, 20, 10, 0)
    assert table.max_bucket_len() == 4
    assert table.average_probes() == 1.75


def test_delete_and_find() -> None:
    table = SeparateChainingHashTable(4, "i")
    table.insert(1)
    table.insert(5)
    assert table.find(5) == 5
    assert table.delete(5) is True
    assert table.delete(5) is False
    assert table.find(5) is None
    assert table.get_deletions() == 1
    assert table.bucket(1) == (1,)


def test_chaining_never_fills() -> None:
    table = SeparateChainingHashTable(1, "i")
    for key in range(100):
        assert table.insert(key) is True
    assert table.size() == 100
    assert table.load_factor() == 100.0
    assert table.get_collisions() == 99


def test_render_lists_buckets() -> None:
    table = SeparateChainingHashTable(3, "i")
    table.insert(0)
    table.insert(3)
    out = io.StringIO()
    table.print(out)
    lines = out.getvalue().splitlines()

    assert lines[0] == "--- SeparateChainingHashTable (m=3, hash=division) ---"
    assert lines[1] == "Slot  0: [3, 0]"
    assert lines[2] == "Slot  1: empty"
    assert "collision%  : 50.00" in lines


def test_grow_keeps_keys() -> None:
    table = SeparateChainingHashTable(2, "m")
    for key in range(10):
        table.insert(key)
    assert table.grow() == 5
    assert sorted(table.keys()) == list(range(10))
    assert sum(table.bucket_sizes()) == 10


def _operation_strategy() -> st.SearchStrategy[Tuple[str, int]]:
    return st.tuples(st.sampled_from(["insert", "delete", "find"]), st.integers(-30, 30))


@settings(max_examples=150, deadline=None)
@given(
    capacity=st.integers(1, 13),
    code=st.sampled_from(["i", "m", "s", "o", "4", "f", "r", "c", "d"]),
    operations=st.lists(_operation_strategy(), min_size=1, max_size=120),
)
def test_chaining_behaves_like_set(capacity: int, code: str, operations: List[Tuple[str, int]]) -> None:
    table = SeparateChainingHashTable(capacity, code)
    model: set[int] = set()
    duplicates = 0
    for op, key in operations:
        if op == "insert":
            if key in model:
                duplicates += 1
            assert table.insert(key) is (key not in model)
            model.add(key)
        elif op == "delete":
            assert table.delete(key) is (key in model)
            model.discard(key)
        else:
            assert (table.find(key) == key) is (key in model)

    assert sorted(table.keys()) == sorted(model)
    assert table.size() == len(model)
    assert table.get_duplicates() == duplicates
    assert all(key == table.find(key) for key in model)
    assert sum(table.bucket_sizes()) == len(model)
