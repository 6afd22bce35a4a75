"""
Scraper Module — search-engine HTML results fetched, parsed and reconciled
across queries into a bounded, ordered set of records.
"""

from .config import ScraperConfig, load_config
from .errors import (
    SearchError,
    QueryError,
    FetchError,
    ExtractionError,
    MalformedResponse,
    RateLimited,
    NoResultsAcrossRun,
)
from .types import SearchRecord, SearchOutcome, QueryReport, Candidate
from .text import normalize_text
from .redirect import resolve_redirect
from .extractor import MarkupExtractor, FieldStrategy
from .rate_limit import LimitRule, DomainRateLimiter, get_limiter
from .runner import SearchRunner, QueryRunner, build_search_url
from .orchestrator import SearchOrchestrator
from .facade import AsyncSearcher, search_async

__all__ = [
    "ScraperConfig",
    "load_config",
    "SearchError",
    "QueryError",
    "FetchError",
    "ExtractionError",
    "MalformedResponse",
    "RateLimited",
    "NoResultsAcrossRun",
    "SearchRecord",
    "SearchOutcome",
    "QueryReport",
    "Candidate",
    "normalize_text",
    "resolve_redirect",
    "MarkupExtractor",
    "FieldStrategy",
    "LimitRule",
    "DomainRateLimiter",
    "get_limiter",
    "SearchRunner",
    "QueryRunner",
    "build_search_url",
    "SearchOrchestrator",
    "AsyncSearcher",
    "search_async",
]
