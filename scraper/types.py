"""
Record and outcome types shared by the runner, orchestrator and facade.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from models.enums import QueryState, RunState
from .errors import SearchError


@dataclass(frozen=True)
class SearchRecord:
    """Single normalized search hit."""

    title: str
    url: str
    description: str = ""


@dataclass(frozen=True)
class Candidate:
    """Raw extraction result, before the link is resolved."""

    title: str
    raw_link: str
    description: str = ""


@dataclass(frozen=True)
class QueryReport:
    """Provenance record for one query inside a run."""

    query: str
    state: QueryState
    record_count: int = 0
    message: str = ""


@dataclass(frozen=True)
class SearchOutcome:
    """
    Complete result of one orchestrated run.

    ``error`` is None on success. On failure ``records`` is normally empty.
    """

    query: str
    records: Tuple[SearchRecord, ...] = ()
    error: Optional[SearchError] = None
    state: RunState = RunState.DONE
    reports: Tuple[QueryReport, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.error is None


def run_label(queries: Sequence[str]) -> str:
    """Label an outcome with the query (or queries) that produced it."""
    return " | ".join(queries)
