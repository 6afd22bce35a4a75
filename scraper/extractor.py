"""
Markup Extractor — parse search-engine HTML into result records.

Rules:
  - DOM selectors only, never regex over raw bytes.
  - Each field is read through an ordered list of strategies; the first
    non-empty value wins, so a new markup variant is one more list entry.
  - Candidates without a title or usable link are dropped silently.
  - Output keeps document order of the result containers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from selectolax.parser import HTMLParser, Node

from .errors import ExtractionError
from .redirect import resolve_redirect
from .text import normalize_text
from .types import Candidate, SearchRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldStrategy:
    """Read one field from a result container: text, or an attribute."""

    selector: str
    attribute: Optional[str] = None

    def read(self, container: Node) -> Optional[str]:
        node = container.css_first(self.selector)
        if node is None:
            return None
        if self.attribute:
            value = node.attributes.get(self.attribute)
            return value.strip() if value else None
        return normalize_text(node.text()) or None


def first_match(container: Node, strategies: Sequence[FieldStrategy]) -> str:
    """Try each strategy in order and return the first non-empty value."""
    for strategy in strategies:
        value = strategy.read(container)
        if value:
            return value
    return ""


# ------------------------------------------------------------------
# Known DuckDuckGo markup variants
# ------------------------------------------------------------------

CONTAINER_SELECTORS: List[str] = [
    ".result",
    "[data-testid='result']",
]

TITLE_STRATEGIES: List[FieldStrategy] = [
    FieldStrategy(".result__title a"),
    FieldStrategy("a[data-testid='result-title-a']"),
]

LINK_STRATEGIES: List[FieldStrategy] = [
    FieldStrategy(".result__title a", attribute="href"),
    FieldStrategy("a[data-testid='result-title-a']", attribute="href"),
]

DESCRIPTION_STRATEGIES: List[FieldStrategy] = [
    FieldStrategy(".result__snippet"),
    FieldStrategy("[data-testid='result-snippet']"),
]


class MarkupExtractor:
    """
    Extract search results from an HTML results page.

    Strategy lists default to the two known DuckDuckGo layouts and can be
    replaced per instance.
    """

    def __init__(
        self,
        container_selectors: Optional[Sequence[str]] = None,
        title_strategies: Optional[Sequence[FieldStrategy]] = None,
        link_strategies: Optional[Sequence[FieldStrategy]] = None,
        description_strategies: Optional[Sequence[FieldStrategy]] = None,
    ):
        self._containers = list(container_selectors or CONTAINER_SELECTORS)
        self._title = list(title_strategies or TITLE_STRATEGIES)
        self._link = list(link_strategies or LINK_STRATEGIES)
        self._description = list(description_strategies or DESCRIPTION_STRATEGIES)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def extract(self, html: str) -> List[Candidate]:
        """Return raw candidates (title, link, description) in document order."""
        if not html:
            return []
        tree = self._parse(html)

        candidates: List[Candidate] = []
        for container in self._find_containers(tree):
            title = first_match(container, self._title)
            link = first_match(container, self._link)
            if not title or not link:
                logger.debug("Dropping result block without title or link")
                continue

            candidates.append(
                Candidate(
                    title=title,
                    raw_link=link,
                    description=first_match(container, self._description),
                )
            )

        return candidates

    def extract_records(self, html: str) -> List[SearchRecord]:
        """Extract candidates, resolve their links, drop the unusable ones."""
        records: List[SearchRecord] = []
        for candidate in self.extract(html):
            url = resolve_redirect(candidate.raw_link)
            if not url:
                logger.debug("Unusable link dropped: %s", candidate.raw_link)
                continue
            records.append(
                SearchRecord(
                    title=normalize_text(candidate.title),
                    url=url,
                    description=normalize_text(candidate.description),
                )
            )
        return records

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _parse(html: str) -> HTMLParser:
        if not isinstance(html, (str, bytes)):
            raise ExtractionError(
                f"Could not parse result markup: expected text, got {type(html).__name__}"
            )
        return HTMLParser(html)

    def _find_containers(self, tree: HTMLParser) -> List[Node]:
        for selector in self._containers:
            nodes = tree.css(selector)
            if nodes:
                return nodes
        return []
