"""
Enumerations for search run bookkeeping.
"""

from enum import Enum


class RunState(str, Enum):
    """Lifecycle of one orchestrated run."""
    PENDING = "PENDING"
    FETCHING = "FETCHING"
    DONE = "DONE"
    FAILED = "FAILED"


class QueryState(str, Enum):
    """How a single query inside a run ended."""
    ACCUMULATING = "ACCUMULATING"
    RATE_LIMITED = "RATE_LIMITED"
    SKIPPED = "SKIPPED"
