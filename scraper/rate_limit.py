"""
Per-domain rate policy.

A LimitRule caps concurrent requests to matching domains and enforces a
minimum gap between the end of one request and the start of the next.
Limiters live in a process-wide registry keyed by rule, so separate runs
hitting the same domain share (and serialize on) one limiter.
"""

from __future__ import annotations

import fnmatch
import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LimitRule:
    """Concurrency and delay applied to domains matching ``domain_glob``."""

    domain_glob: str = "*"
    parallelism: int = 1
    delay: float = 0.0


class DomainRateLimiter:
    """Enforces one LimitRule across threads."""

    def __init__(
        self,
        rule: LimitRule,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if rule.parallelism < 1:
            raise ValueError("parallelism must be at least 1")
        self.rule = rule
        self._clock = clock
        self._sleep = sleep
        self._semaphore = threading.BoundedSemaphore(rule.parallelism)
        self._lock = threading.Lock()
        self._next_start: Optional[float] = None

    def matches(self, url: str) -> bool:
        host = (urlsplit(url).hostname or "").lower()
        return bool(host) and fnmatch.fnmatch(host, self.rule.domain_glob)

    @contextmanager
    def slot(self, url: str) -> Iterator[None]:
        """Hold a request slot for ``url``; waits for capacity and delay."""
        if not self.matches(url):
            yield
            return

        with self._semaphore:
            with self._lock:
                wait = 0.0 if self._next_start is None else self._next_start - self._clock()

            if wait > 0:
                logger.debug("Rate limit: waiting %.2fs before %s", wait, url)
                self._sleep(wait)
            try:
                yield
            finally:
                with self._lock:
                    self._next_start = self._clock() + self.rule.delay


_registry: Dict[LimitRule, DomainRateLimiter] = {}
_registry_lock = threading.Lock()


def get_limiter(rule: LimitRule) -> DomainRateLimiter:
    """Return the process-wide limiter for ``rule``, creating it on first use."""
    with _registry_lock:
        limiter = _registry.get(rule)
        if limiter is None:
            limiter = DomainRateLimiter(rule)
            _registry[rule] = limiter
        return limiter


def reset_limiters() -> None:
    """Forget all registered limiters."""
    with _registry_lock:
        _registry.clear()
