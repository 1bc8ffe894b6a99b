"""SlotLab hash-table engine package."""

from . import analysis, batch, contracts, core, workloads

__all__ = [
    "analysis",
    "batch",
    "contracts",
    "core",
    "workloads",
]
