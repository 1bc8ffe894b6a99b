from __future__ import annotations

from slotlab.analysis.experiment import (
    TSV_HEADER,
    build_key_sets,
    format_matrix_tsv,
    run_cell,
    run_matrix,
)
from slotlab.core.probing import ProbeType


def test_key_sets_are_seeded_and_bounded() -> None:
    first = build_key_sets(500, 42)
    assert first == build_key_sets(500, 42)
    assert list(first) == ["Uniform", "Clustered"]
    assert len(first["Uniform"]) == 500
    assert all(0 <= key < 50_000 for key in first["Uniform"])
    clustered = first["Clustered"]
    assert all(0 <= key < 500 for key in clustered[:250])
    assert all(8_000 <= key < 8_500 for key in clustered[250:])


def test_default_matrix_shape() -> None:
    rows = run_matrix()
    assert len(rows) == 5 * 2 * 3
    assert {row.hash_code for row in rows} == {"i", "m", "r", "s", "o"}
    for row in rows:
        assert row.average_probes >= 1.0
        assert row.insertions <= 101
        if row.probe is not ProbeType.QUADRATIC:
            # linear and coprime double-hash walks reach every slot
            assert row.saturated
            assert row.insertions == 101


def test_tsv_rendering() -> None:
    rows = run_matrix(capacity=11, n_keys=40, hash_codes=("i",))
    lines = format_matrix_tsv(rows).splitlines()
    assert lines[0] == TSV_HEADER
    assert len(lines) == 7
    hash_code, pattern, probe, collisions, duplicates, avg = lines[1].split("\t")
    assert (hash_code, pattern, probe) == ("i", "Uniform", "LINEAR")
    assert int(collisions) >= 0
    assert int(duplicates) >= 0
    assert float(avg) >= 1.0


def test_run_cell_stops_at_first_full() -> None:
    table = run_cell(3, ProbeType.LINEAR, "i", [0, 1, 2, 3, 4])
    assert table.size() == 3
    assert sorted(table.keys()) == [0, 1, 2]
