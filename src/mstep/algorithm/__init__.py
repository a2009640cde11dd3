"""Algorithm module - Reverse-Delete with step-by-step traces."""

from mstep.algorithm.reverse_delete import (
    Step,
    StepKind,
    final_tree,
    mst_edges,
    mst_weight,
    run_reverse_delete,
)

__all__ = [
    "Step",
    "StepKind",
    "run_reverse_delete",
    "final_tree",
    "mst_edges",
    "mst_weight",
]
