"""
Search Orchestrator.

Runs a SearchRunner over an ordered list of queries, one at a time, and
reconciles the batches into a single bounded SearchOutcome:

  1. Stop issuing queries once the global cap is reached
  2. Deduplicate records by URL (first seen wins)
  3. Abort the whole run on a rate-limit signal
  4. Treat any other per-query failure as "zero results" and move on
  5. Pause between queries to respect upstream load limits
"""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Sequence, Set

from models.enums import QueryState, RunState

from .config import ScraperConfig
from .errors import NoResultsAcrossRun, QueryError, RateLimited
from .runner import SearchRunner
from .types import QueryReport, SearchOutcome, SearchRecord, run_label

logger = logging.getLogger(__name__)


class SearchOrchestrator:
    """
    Sequential multi-query search.

    Usage:
        with QueryRunner(config) as runner:
            outcome = SearchOrchestrator(runner, config).search(
                ["golang programming", "rust async"]
            )
    """

    def __init__(
        self,
        runner: SearchRunner,
        config: Optional[ScraperConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._runner = runner
        self._config = config or ScraperConfig()
        self._sleep = sleep
        self.state = RunState.PENDING

    def search(self, queries: Sequence[str]) -> SearchOutcome:
        """Run every query in order and return the reconciled outcome."""
        queries = list(queries)
        label = run_label(queries)
        cap = self._config.max_results

        records: List[SearchRecord] = []
        seen_urls: Set[str] = set()
        reports: List[QueryReport] = []

        for index, query in enumerate(queries):
            if len(records) >= cap:
                logger.info("Result cap of %d reached; skipping remaining queries", cap)
                break

            self.state = RunState.FETCHING
            logger.info("Searching for: %s", query)

            try:
                batch = self._runner.run(query)
            except RateLimited as e:
                logger.warning("Rate limit reached on '%s'; aborting run: %s", query, e)
                reports.append(
                    QueryReport(query=query, state=QueryState.RATE_LIMITED, message=str(e))
                )
                kept = tuple(records) if self._config.keep_partial_on_rate_limit else ()
                return self._finish(label, kept, e, reports)
            except QueryError as e:
                logger.warning("Search query failed: '%s': %s", query, e)
                reports.append(
                    QueryReport(query=query, state=QueryState.SKIPPED, message=str(e))
                )
            else:
                added = self._accumulate(batch, records, seen_urls, cap)
                if added:
                    logger.info("Found %d results for '%s'", added, query)
                    reports.append(
                        QueryReport(
                            query=query,
                            state=QueryState.ACCUMULATING,
                            record_count=added,
                        )
                    )
                else:
                    logger.info("No results found for: %s", query)
                    reports.append(
                        QueryReport(
                            query=query,
                            state=QueryState.SKIPPED,
                            message="no results" if not batch else "duplicates only",
                        )
                    )

            if index < len(queries) - 1 and len(records) < cap:
                self._sleep(self._config.query_delay)

        if not records:
            error = NoResultsAcrossRun(f"no results found for: {label}")
            return self._finish(label, (), error, reports)

        logger.info("Total results found: %d", len(records))
        return self._finish(label, tuple(records), None, reports)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _accumulate(
        self,
        batch: Sequence[SearchRecord],
        records: List[SearchRecord],
        seen_urls: Set[str],
        cap: int,
    ) -> int:
        """Append new records up to ``cap``; return how many were added."""
        added = 0
        for record in batch:
            if len(records) >= cap:
                break
            if self._config.dedupe_urls:
                if record.url in seen_urls:
                    continue
                seen_urls.add(record.url)
            records.append(record)
            added += 1
        return added

    def _finish(self, label, records, error, reports) -> SearchOutcome:
        self.state = RunState.DONE if error is None else RunState.FAILED
        return SearchOutcome(
            query=label,
            records=tuple(records),
            error=error,
            state=self.state,
            reports=tuple(reports),
        )
