from __future__ import annotations

import io
import logging

import pytest

from slotlab.contracts.error import BadInputError
from slotlab.core.chaining import SeparateChainingHashTable
from slotlab.core.contract import TableBase, TableStats
from slotlab.core.factory import Strategy, create_table, normalize_strategy
from slotlab.core.probing import ProbeType, ProbingHashTable
from slotlab.core.simple import SimpleHashTable


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, Strategy.CHAINING),
        ("", Strategy.CHAINING),
        ("chain", Strategy.CHAINING),
        ("Linear", Strategy.LINEAR),
        ("quad", Strategy.QUADRATIC),
        ("double", Strategy.DOUBLE_HASHING),
        ("double_hashing", Strategy.DOUBLE_HASHING),
        ("simple", Strategy.BASELINE),
    ],
)
def test_normalize_strategy_aliases(raw: str | None, expected: Strategy) -> None:
    assert normalize_strategy(raw) is expected


def test_unknown_strategy_falls_back_to_baseline(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="slotlab.core.factory"):
        table = create_table(5, "cuckoo", "m")
    assert isinstance(table, SimpleHashTable)
    assert "cuckoo" in caplog.text


def test_create_table_builds_each_variant() -> None:
    assert isinstance(create_table(5), SeparateChainingHashTable)
    linear = create_table(5, "linear", "o", verbose=2)
    assert isinstance(linear, ProbingHashTable)
    assert linear.probe_type is ProbeType.LINEAR
    assert linear.hash_name == "folding"
    assert linear.verbose == 2
    double = create_table(5, Strategy.DOUBLE_HASHING)
    assert isinstance(double, ProbingHashTable)
    assert double.probe_type is ProbeType.DOUBLE_HASHING


@pytest.mark.parametrize("capacity", [0, -1, True, "5", 2.5])
def test_invalid_capacity_is_rejected(capacity: object) -> None:
    with pytest.raises(BadInputError):
        create_table(capacity, "linear")  # type: ignore[arg-type]


def test_baseline_ignores_hash_choice_and_uses_absolute_key() -> None:
    table = SimpleHashTable(5, "m")
    assert table.hash_name == "abs-division"
    assert table.requested_hash_code == "m"
    table.insert(-3)
    assert table.slot_key(3) == -3
    assert table.insert(-3) is False
    assert table.get_duplicates() == 1


def test_baseline_delete_clears_slot_and_full_scan_still_finds() -> None:
    table = SimpleHashTable(5)
    table.insert(0)
    table.insert(5)
    table.insert(10)
    assert table.delete(5) is True
    assert table.slot_key(1) is None
    assert table.find(10) == 10
    assert table.delete(5) is False
    assert table.size() == 2


def test_stats_for_empty_table() -> None:
    stats = TableStats(capacity=4, insertions=0, collisions=0, deletions=0, duplicates=0)
    assert stats.average_probes == 1.0
    assert stats.collision_rate == 0.0
    assert stats.load_factor == 0.0
    assert stats.to_dict()["size"] == 0


def test_stats_snapshot_matches_accessors() -> None:
    table = create_table(7, "quadratic")
    for key in (1, 8, 15, 3):
        table.insert(key)
    table.delete(8)
    stats = table.stats()
    assert stats.size == table.size() == 3
    assert stats.collisions == table.get_collisions()
    assert stats.load_factor == pytest.approx(3 / 7)


def test_slots_views_are_read_only_copies() -> None:
    linear = create_table(3, "linear", "i")
    linear.insert(4)
    linear.insert(5)
    linear.delete(4)
    assert linear.slots() == (None, None, 5)

    chained = create_table(2, "chaining", "i")
    chained.insert(1)
    chained.insert(3)
    view = chained.slots()
    assert view == ((), (3, 1))
    chained.delete(3)
    assert view == ((), (3, 1))

    baseline = create_table(2, "baseline")
    baseline.insert(-1)
    assert baseline.slots() == (None, -1)


def _replay(table: TableBase) -> list[object]:
    results: list[object] = []
    for key in (3, 13, 23, 3, 8):
        results.append(table.insert(key))
    results.append(table.delete(13))
    results.append(table.delete(99))
    results.append(table.find(23))
    results.append(table.find(13))
    results.append(table.insert(33))
    return results


@pytest.mark.parametrize("strategy", ["chaining", "linear", "quadratic", "double-hashing", "baseline"])
def test_verbosity_never_changes_results_or_counters(strategy: str) -> None:
    quiet = create_table(10, strategy, "i")
    out = io.StringIO()
    chatty = create_table(10, strategy, "i", verbose=2, out=out)

    assert _replay(quiet) == _replay(chatty)
    assert quiet.stats() == chatty.stats()
    assert quiet.slots() == chatty.slots()
    assert "Search 23" in out.getvalue()
