"""
Scraper configuration.

Built once per process and passed to each run; runs derive their own
HTTP client from it instead of mutating shared state.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Optional

from dotenv import load_dotenv


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class ScraperConfig:
    """HTML search scraper configuration."""

    search_url: str = "https://duckduckgo.com/html/"
    user_agent: str = DEFAULT_USER_AGENT

    # Rate policy for the search engine's domain
    domain_glob: str = "*duckduckgo*"
    parallelism: int = 1
    request_delay: float = 2.0

    # Orchestration
    query_delay: float = 2.0
    per_query_limit: int = 10
    max_results: int = 10
    dedupe_urls: bool = True
    keep_partial_on_rate_limit: bool = False

    fetch_timeout: float = 30.0

    @classmethod
    def from_env(cls) -> ScraperConfig:
        """Load configuration from environment variables."""
        defaults = cls()
        return cls(
            search_url=os.getenv("SCRAPER_SEARCH_URL", defaults.search_url),
            user_agent=os.getenv("SCRAPER_USER_AGENT", defaults.user_agent),
            domain_glob=os.getenv("SCRAPER_DOMAIN_GLOB", defaults.domain_glob),
            parallelism=int(os.getenv("SCRAPER_PARALLELISM", str(defaults.parallelism))),
            request_delay=float(os.getenv("SCRAPER_REQUEST_DELAY", str(defaults.request_delay))),
            query_delay=float(os.getenv("SCRAPER_QUERY_DELAY", str(defaults.query_delay))),
            per_query_limit=int(os.getenv("SCRAPER_PER_QUERY_LIMIT", str(defaults.per_query_limit))),
            max_results=int(os.getenv("SCRAPER_MAX_RESULTS", str(defaults.max_results))),
            dedupe_urls=_env_bool("SCRAPER_DEDUPE_URLS", "true"),
            keep_partial_on_rate_limit=_env_bool("SCRAPER_KEEP_PARTIAL", "false"),
            fetch_timeout=float(os.getenv("SCRAPER_FETCH_TIMEOUT", str(defaults.fetch_timeout))),
        )

    def with_overrides(self, **kwargs) -> ScraperConfig:
        """Derive a copy with some fields replaced."""
        return replace(self, **kwargs)


def load_config(env_file: Optional[str] = None) -> ScraperConfig:
    """Read a .env file (if any) into the environment, then build the config."""
    load_dotenv(env_file)
    return ScraperConfig.from_env()
