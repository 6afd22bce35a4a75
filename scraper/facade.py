"""
Async Facade — run a search off the caller's thread.

Each submission gets a concurrent.futures.Future that resolves exactly
once with the SearchOutcome, or with the exception that stopped the run
from starting. Runs cannot be cancelled once submitted.

Usage:
    with AsyncSearcher(config) as searcher:
        future = searcher.submit(["golang programming"])
        ...
        outcome = future.result()
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional, Sequence

from .config import ScraperConfig
from .orchestrator import SearchOrchestrator
from .runner import QueryRunner, SearchRunner
from .types import SearchOutcome

logger = logging.getLogger(__name__)

RunnerFactory = Callable[[ScraperConfig], SearchRunner]


def default_runner_factory(config: ScraperConfig) -> SearchRunner:
    """Fresh HTML runner (and HTTP client) per run."""
    return QueryRunner(config)


class AsyncSearcher:
    """Executes orchestrated runs on a worker pool."""

    def __init__(
        self,
        config: Optional[ScraperConfig] = None,
        runner_factory: Optional[RunnerFactory] = None,
        max_workers: int = 4,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._config = config or ScraperConfig()
        self._runner_factory = runner_factory or default_runner_factory
        self._sleep = sleep
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="search-run"
        )

    def __enter__(self) -> AsyncSearcher:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def submit(self, queries: Sequence[str]) -> Future:
        """Start a run and return its single-shot completion future."""
        future: Future = Future()
        # Running futures refuse cancel(), so the run always completes.
        future.set_running_or_notify_cancel()

        queries = list(queries)
        logger.info("Starting search for: %s", queries)
        try:
            self._executor.submit(self._run, queries, future)
        except RuntimeError as e:
            future.set_exception(e)
        return future

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------

    def _run(self, queries: Sequence[str], future: Future) -> None:
        try:
            outcome = self._execute(queries)
        except Exception as e:
            logger.error("Search run could not complete: %s", e)
            future.set_exception(e)
        else:
            logger.info(
                "Completed search for: %s, found %d records",
                outcome.query,
                len(outcome.records),
            )
            future.set_result(outcome)

    def _execute(self, queries: Sequence[str]) -> SearchOutcome:
        runner = self._runner_factory(self._config)
        try:
            orchestrator = SearchOrchestrator(runner, self._config, sleep=self._sleep)
            return orchestrator.search(queries)
        finally:
            runner.close()


def search_async(
    queries: Sequence[str],
    config: Optional[ScraperConfig] = None,
) -> Future:
    """One-off background search; the worker exits once the run finishes."""
    searcher = AsyncSearcher(config, max_workers=1)
    future = searcher.submit(queries)
    searcher.shutdown(wait=False)
    return future
