from __future__ import annotations

import json
from importlib import resources

import pytest
from jsonschema import Draft202012Validator

from slotlab.analysis.simulate import SIMULATION_SCHEMA, format_simulation, simulate
from slotlab.contracts.error import BadInputError

SCHEMA = json.loads(
    resources.files("slotlab.contracts").joinpath("summary_schema.json").read_text(encoding="utf-8")
)
VALIDATOR = Draft202012Validator(SCHEMA)


@pytest.mark.parametrize("strategy", ["chaining", "linear", "quadratic", "double-hashing", "baseline"])
def test_summary_matches_schema(strategy: str) -> None:
    result = simulate(31, strategy, "m", n_ops=40, insert_pct=75, lo=0, hi=500, seed=11)
    payload = result.to_dict()
    VALIDATOR.validate(payload)
    assert payload["schema"] == SIMULATION_SCHEMA
    assert payload["strategy"] == strategy
    assert len(payload["slot_states"]) == 31


def test_insert_phase_counts_every_key() -> None:
    result = simulate(17, "chaining", "i", n_ops=30, insert_pct=100, lo=0, hi=20, seed=3)
    stats = result.stats
    assert result.n_insert == 30
    assert result.n_delete == 0
    assert result.inserts_attempted == 30
    assert stats.insertions + stats.duplicates == 30
    assert result.table_full is False
    assert result.summary_line().startswith("Collisions: ")


def test_delete_phase_is_bounded_by_size() -> None:
    result = simulate(50, "linear", "i", n_ops=10, insert_pct=20, lo=0, hi=10_000, seed=5)
    assert result.n_insert == 2
    assert result.n_delete == 8
    assert result.deletes_performed == 2
    assert result.stats.size == 0


@pytest.mark.parametrize("seed", range(12))
def test_deletes_performed_counts_only_removed_keys(seed: int) -> None:
    # two possible key values, so repeated keys sit in the delete prefix
    result = simulate(11, "linear", "i", n_ops=8, insert_pct=50, lo=0, hi=1, seed=seed)
    assert result.deletes_performed == result.stats.deletions


def test_table_full_stops_inserts_and_skips_deletes() -> None:
    result = simulate(3, "linear", "i", n_ops=50, insert_pct=80, lo=0, hi=1000, seed=1)
    assert result.table_full is True
    assert result.stats.size == 3
    assert result.deletes_performed == 0
    assert result.inserts_attempted < result.n_insert
    assert result.summary_line().startswith("TABLE FULL after 3 inserts (m=3")
    VALIDATOR.validate(result.to_dict())


def test_heatmap_and_occupancy_agree() -> None:
    result = simulate(64, "double-hashing", "c", n_ops=40, lo=0, hi=5000, seed=8)
    assert sum(result.occupancy) == result.stats.size
    assert result.heatmap["total"] == result.stats.size
    assert result.heatmap["original_slots"] == 64


def test_format_simulation_lists_preview() -> None:
    result = simulate(20, "chaining", "i", n_ops=5, lo=0, hi=50, seed=2)
    text = format_simulation(result)
    assert text.splitlines()[0].startswith("Generated keys (first 25): ")
    assert "First 15 buckets:" in text
    assert "Slot  0:" in text


@pytest.mark.parametrize(("n_ops", "insert_pct"), [(-1, 50), (10, 101), (10, -5)])
def test_invalid_simulation_arguments(n_ops: int, insert_pct: int) -> None:
    with pytest.raises(BadInputError):
        simulate(10, n_ops=n_ops, insert_pct=insert_pct)


def test_schema_rejects_unknown_strategy() -> None:
    payload = simulate(7, "linear", n_ops=3, seed=1).to_dict()
    payload["strategy"] = "cuckoo"
    errors = list(VALIDATOR.iter_errors(payload))
    assert errors and any("cuckoo" in err.message for err in errors)
