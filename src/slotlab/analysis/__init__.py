"""Analysis helpers: probe tracing, occupancy views, simulations, experiments."""

from .experiment import MatrixRow, format_matrix_tsv, run_matrix
from .probe import (
    collect_occupancy_heatmap,
    collect_slot_occupancy,
    collect_slot_states,
    format_trace_lines,
    render_board,
    trace_probe_find,
    trace_probe_insert,
)
from .simulate import SIMULATION_SCHEMA, SimulationResult, format_simulation, simulate

__all__ = [
    "MatrixRow",
    "SIMULATION_SCHEMA",
    "SimulationResult",
    "collect_occupancy_heatmap",
    "collect_slot_occupancy",
    "collect_slot_states",
    "format_matrix_tsv",
    "format_simulation",
    "format_trace_lines",
    "render_board",
    "run_matrix",
    "simulate",
    "trace_probe_find",
    "trace_probe_insert",
]
