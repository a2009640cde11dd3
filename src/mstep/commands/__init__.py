"""
mstep.commands - CLI command implementations
"""

__all__ = [
    "serve",
    "trace",
    "validate",
]
