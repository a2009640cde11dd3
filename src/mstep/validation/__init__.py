"""Validation module - Structural graph checks.

Provides the validation battery that gates whether the Reverse-Delete
algorithm may run on a graph.
"""

from mstep.validation.rules import (
    ErrorKind,
    ValidationError,
    is_valid_graph,
    validate_graph,
)

__all__ = [
    "ErrorKind",
    "ValidationError",
    "validate_graph",
    "is_valid_graph",
]
