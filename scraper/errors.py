"""
Error taxonomy for search runs.

Per-query failures (QueryError and subclasses) are absorbed by the
orchestrator; RateLimited and NoResultsAcrossRun end a run.
"""

from typing import Optional


class SearchError(Exception):
    """Base class for all search failures."""


class QueryError(SearchError):
    """A single query failed; the run may continue."""

    def __init__(self, message: str, query: str = ""):
        super().__init__(message)
        self.query = query


class FetchError(QueryError):
    """Transport failure or non-2xx response from the search endpoint."""

    def __init__(
        self,
        message: str,
        query: str = "",
        status_code: Optional[int] = None,
    ):
        super().__init__(message, query)
        self.status_code = status_code


class ExtractionError(QueryError):
    """The fetched markup could not be parsed."""


class MalformedResponse(QueryError):
    """A JSON body did not match the expected schema."""


class RateLimited(SearchError):
    """Upstream signalled throttling or served a bot challenge."""

    def __init__(
        self,
        message: str = "rate limit",
        query: str = "",
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.query = query
        self.status_code = status_code


class NoResultsAcrossRun(SearchError):
    """Every query in a run yielded zero usable records."""
