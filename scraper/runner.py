"""
Query Runner — one search term, one HTTP request, one batch of records.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List, Optional
from urllib.parse import urlencode

import httpx

from .config import ScraperConfig
from .errors import ExtractionError, FetchError, RateLimited
from .extractor import MarkupExtractor
from .rate_limit import DomainRateLimiter, LimitRule, get_limiter
from .types import SearchRecord

logger = logging.getLogger(__name__)

# Markers of DuckDuckGo's bot-challenge page
CHALLENGE_MARKERS = (
    "anomaly-modal",
    "challenge-form",
    "bots use duckduckgo too",
)


def build_search_url(query: str, base_url: str = "https://duckduckgo.com/html/") -> str:
    """Search URL for ``query``, fixed to a single web results page."""
    params = {"q": query, "t": "h_", "ia": "web"}
    return f"{base_url}?{urlencode(params)}"


def is_challenge_page(status_code: int, body: str) -> bool:
    """True when the response is a throttle or bot-defence page."""
    if status_code == 429:
        return True
    lowered = body[:20000].lower() if body else ""
    return any(marker in lowered for marker in CHALLENGE_MARKERS)


class SearchRunner(ABC):
    """Anything that turns one query into a batch of records."""

    @abstractmethod
    def run(self, query: str) -> List[SearchRecord]:
        """Run one query; raise a SearchError subclass on failure."""
        ...

    def close(self) -> None:
        """Release resources held by the runner."""


class QueryRunner(SearchRunner):
    """
    Fetch and extract one results page per query.

    Owns its httpx client unless one is injected; the rate limiter is the
    process-wide one for the configured domain rule.

    Usage:
        with QueryRunner(ScraperConfig()) as runner:
            records = runner.run("golang programming")
    """

    def __init__(
        self,
        config: Optional[ScraperConfig] = None,
        extractor: Optional[MarkupExtractor] = None,
        http_client: Optional[httpx.Client] = None,
        limiter: Optional[DomainRateLimiter] = None,
    ):
        self._config = config or ScraperConfig()
        self._extractor = extractor or MarkupExtractor()
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            headers={"User-Agent": self._config.user_agent},
            follow_redirects=True,
            timeout=self._config.fetch_timeout,
        )
        self._limiter = limiter or get_limiter(
            LimitRule(
                domain_glob=self._config.domain_glob,
                parallelism=self._config.parallelism,
                delay=self._config.request_delay,
            )
        )

    def __enter__(self) -> QueryRunner:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def run(self, query: str) -> List[SearchRecord]:
        """
        Search one term.

        Raises:
            RateLimited: upstream throttled or served a bot challenge
            FetchError: transport failure or non-2xx status
            ExtractionError: markup could not be parsed
        """
        url = build_search_url(query, self._config.search_url)
        logger.info("Searching URL: %s", url)

        with self._limiter.slot(url):
            try:
                resp = self._client.get(url)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                raise FetchError(
                    f"failed to visit search URL: {e}", query=query
                ) from e

        logger.info("Response status: %d for URL: %s", resp.status_code, url)
        body = resp.text

        if is_challenge_page(resp.status_code, body):
            raise RateLimited(
                f"search engine throttled query '{query}' (status {resp.status_code})",
                query=query,
                status_code=resp.status_code,
            )

        if not resp.is_success:
            raise FetchError(
                f"search returned HTTP {resp.status_code}",
                query=query,
                status_code=resp.status_code,
            )

        try:
            records = self._extractor.extract_records(body)
        except ExtractionError as e:
            e.query = query
            raise

        return records[: self._config.per_query_limit]
