from __future__ import annotations

import io
from typing import Iterator, List, Tuple

import pytest
from hypothesis import given, settings, strategies as st

from slotlab.contracts.error import TableFullError
from slotlab.core import contract
from slotlab.core.factory import create_table
from slotlab.core.probing import (
    DoubleHashingHashTable,
    LinearProbingHashTable,
    ProbeType,
    ProbingHashTable,
    QuadraticProbingHashTable,
    SlotState,
)


def test_linear_cluster_collisions_and_slots() -> None:
    table = LinearProbingHashTable(5, "i")
    assert [table.insert(key) for key in (0, 5, 10, 1)] == [True] * 4

    assert [table.slot_key(idx) for idx in range(5)] == [0, 5, 10, 1, None]
    assert table.get_insertions() == 4
    # 5 -> slot 0; 10 -> slots 0, 1; 1 -> slots 1, 2
    assert table.get_collisions() == 5
    assert table.size() == 4
    assert table.average_probes() == pytest.approx(1 + 5 / 4)


@pytest.mark.parametrize("strategy", ["linear", "quadratic", "double-hashing", "baseline"])
def test_two_slot_table_reports_full(strategy: str) -> None:
    table = create_table(2, strategy, "i")
    assert table.insert(7) is True
    assert table.insert(9) is True
    with pytest.raises(TableFullError) as excinfo:
        table.insert(11)
    assert excinfo.value.capacity == 2
    assert table.size() == 2
    assert table.find(7) == 7
    assert table.find(9) == 9


def test_full_table_still_rejects_duplicates() -> None:
    table = LinearProbingHashTable(2, "i")
    table.insert(7)
    table.insert(9)
    assert table.insert(9) is False
    assert table.get_duplicates() == 1


def test_search_walks_past_tombstones() -> None:
    table = LinearProbingHashTable(5, "i")
    table.insert(0)
    table.insert(5)
    assert table.delete(0) is True

    assert table.slot_state(0) is SlotState.TOMBSTONE
    assert table.find(5) == 5
    assert table.find(0) is None
    assert 0 not in table
    assert 5 in table


def test_insert_reuses_first_tombstone() -> None:
    table = LinearProbingHashTable(5, "i")
    table.insert(0)
    table.insert(5)
    table.delete(0)
    collisions_before = table.get_collisions()

    assert table.insert(10) is True
    assert table.slot_key(0) == 10
    assert table.slot_state(2) is SlotState.EMPTY
    assert table.get_collisions() == collisions_before
    assert table.tombstone_count() == 0


def test_duplicate_behind_tombstone_is_detected() -> None:
    table = LinearProbingHashTable(5, "i")
    table.insert(0)
    table.insert(5)
    table.delete(0)

    assert table.insert(5) is False
    assert table.get_duplicates() == 1
    assert table.size() == 1
    assert list(table.keys()) == [5]


def test_tombstone_makes_room_in_full_table() -> None:
    table = QuadraticProbingHashTable(2, "i")
    table.insert(7)
    table.insert(9)
    table.delete(7)
    assert table.insert(11) is True
    assert table.size() == 2


def test_delete_absent_key_leaves_counters() -> None:
    table = DoubleHashingHashTable(7, "i")
    table.insert(3)
    assert table.delete(4) is False
    assert table.get_deletions() == 0
    assert table.size() == 1


def _count_walk(table: ProbingHashTable, monkeypatch: pytest.MonkeyPatch) -> List[int]:
    visited: List[int] = []
    walk = table.probe_sequence

    def counting(key: int) -> Iterator[int]:
        for idx in walk(key):
            visited.append(idx)
            yield idx

    monkeypatch.setattr(table, "probe_sequence", counting)
    return visited


def test_find_stops_at_first_empty_slot(monkeypatch: pytest.MonkeyPatch) -> None:
    table = LinearProbingHashTable(7, "i")
    for key in (0, 7, 14):
        table.insert(key)
    table.delete(7)
    visited = _count_walk(table, monkeypatch)

    assert table.find(21) is None
    assert visited == [0, 1, 2, 3]

    visited.clear()
    assert table.delete(28) is False
    assert visited == [0, 1, 2, 3]


def test_find_on_full_table_is_bounded() -> None:
    table = LinearProbingHashTable(3, "i")
    for key in (0, 1, 2):
        table.insert(key)
    assert table.find(3) is None


def test_quadratic_can_report_full_with_free_slots() -> None:
    table = QuadraticProbingHashTable(4, "i")
    table.insert(0)
    table.insert(4)
    with pytest.raises(TableFullError):
        table.insert(8)
    assert table.slot_state(2) is SlotState.EMPTY
    assert table.slot_state(3) is SlotState.EMPTY


def test_grow_rebuilds_into_larger_table() -> None:
    table = LinearProbingHashTable(2, "i")
    table.insert(7)
    table.insert(9)
    table.delete(7)
    table.insert(11)

    assert table.grow() == 5
    assert table.capacity == 5
    assert sorted(table.keys()) == [9, 11]
    assert table.get_insertions() == 2
    assert table.get_deletions() == 0
    assert table.tombstone_count() == 0
    assert table.insert(7) is True


def test_grow_moves_past_a_capacity_quadratic_walks_cannot_fill() -> None:
    # all keys share slot 0 at m=15, where quadratic steps reach only 6 slots
    keys = [0, 15, 30, 45, 60, 75, 90]
    table = QuadraticProbingHashTable(7, "i")
    for key in keys:
        table.insert(key)

    assert table.grow() == 31
    assert table.capacity == 31
    assert sorted(table.keys()) == keys
    assert table.get_insertions() == len(keys)
    assert all(key in table for key in keys)


def test_failed_grow_leaves_table_untouched(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(contract, "GROW_ATTEMPTS", 1)
    keys = [0, 15, 30, 45, 60, 75, 90]
    table = QuadraticProbingHashTable(7, "i")
    for key in keys:
        table.insert(key)
    before = table.stats()
    slots_before = table.slots()

    with pytest.raises(TableFullError) as excinfo:
        table.grow()

    assert excinfo.value.capacity == 7
    assert table.capacity == 7
    assert table.stats() == before
    assert table.slots() == slots_before
    assert all(table.find(key) == key for key in keys)


def test_subclasses_fix_probe_type() -> None:
    assert LinearProbingHashTable(3).probe_type is ProbeType.LINEAR
    assert QuadraticProbingHashTable(3).probe_type is ProbeType.QUADRATIC
    assert DoubleHashingHashTable(3).probe_type is ProbeType.DOUBLE_HASHING
    assert ProbingHashTable(3, "double-hashing").probe_type is ProbeType.DOUBLE_HASHING


def test_print_renders_slots_and_counters() -> None:
    table = LinearProbingHashTable(3, "i")
    table.insert(4)
    table.insert(1)
    table.delete(4)
    out = io.StringIO()
    table.print(out)
    text = out.getvalue()

    assert text.startswith("--- ProbingHashTable (linear, m=3, hash=division) ---")
    assert "  1: tombstone" in text
    assert "  2: 1" in text
    assert "  0: empty" in text
    assert "insertions  : 2" in text
    assert "collisions  : 1" in text
    assert "deletions   : 1" in text


def test_verbose_output_goes_to_stream() -> None:
    out = io.StringIO()
    table = LinearProbingHashTable(5, "i", out=out)
    table.insert(0)
    assert out.getvalue() == ""

    table.set_verbose(1)
    table.insert(5)
    table.insert(5)
    lines = out.getvalue().splitlines()
    assert lines[0].startswith("Collision [  0]")
    assert lines[1].startswith("Insertion [  1]")
    assert lines[2].startswith("Collision [  0]")
    assert lines[3].startswith("Duplicate [  1]")

    table.set_verbose(2)
    table.find(42)
    assert out.getvalue().splitlines()[-1].startswith("Search 42")


_OPS = st.lists(
    st.tuples(st.sampled_from(["insert", "delete", "find"]), st.integers(-25, 25)),
    min_size=1,
    max_size=80,
)


@settings(max_examples=100, deadline=None)
@given(
    probe=st.sampled_from(list(ProbeType)),
    code=st.sampled_from(["i", "m", "s", "o", "f", "r", "c"]),
    capacity=st.integers(1, 23),
    operations=_OPS,
)
def test_probing_table_behaves_like_set(
    probe: ProbeType, code: str, capacity: int, operations: List[Tuple[str, int]]
) -> None:
    table = ProbingHashTable(capacity, probe, code)
    model: set[int] = set()
    for op, key in operations:
        if op == "insert":
            try:
                added = table.insert(key)
            except TableFullError:
                assert key not in model
                continue
            assert added is (key not in model)
            model.add(key)
        elif op == "delete":
            assert table.delete(key) is (key in model)
            model.discard(key)
        else:
            assert (table.find(key) is not None) is (key in model)
        assert table.size() == len(model)
        assert table.get_insertions() - table.get_deletions() == len(model)
        assert sorted(table.keys()) == sorted(model)
        assert len(list(table.probe_sequence(key))) == capacity
