"""
Tests for the HTML search pipeline: normalizer, redirect resolver,
markup extractor, rate policy and query runner.
"""

from unittest.mock import MagicMock

import httpx
import pytest

from scraper.config import ScraperConfig
from scraper.errors import ExtractionError, FetchError, RateLimited
from scraper.extractor import FieldStrategy, MarkupExtractor
from scraper.rate_limit import DomainRateLimiter, LimitRule, get_limiter, reset_limiters
from scraper.redirect import resolve_redirect
from scraper.runner import QueryRunner, build_search_url, is_challenge_page
from scraper.text import normalize_text
from scraper.types import SearchRecord


CLASSIC_HTML = """
<html><body>
<div class="results">
  <div class="result results_links results_links_deep web-result">
    <h2 class="result__title">
      <a class="result__a" href="//duckduckgo.com/l/?uddg=https%3A%2F%2Fgo.dev%2F&amp;rut=abc123">The Go
         Programming   Language</a>
    </h2>
    <a class="result__snippet" href="#">Go is an open source
       programming language that makes it simple to build software.</a>
  </div>
  <div class="result results_links">
    <h2 class="result__title">
      <a class="result__a" href="https://en.wikipedia.org/wiki/Go_(programming_language)">Go (programming language)</a>
    </h2>
  </div>
  <div class="result">
    <h2 class="result__title"><a class="result__a" href="/relative/path">Internal link</a></h2>
    <a class="result__snippet">Should be dropped</a>
  </div>
  <div class="result">
    <h2 class="result__title"><a class="result__a" href="https://example.com/no-title"></a></h2>
  </div>
  <div class="result">
    <a data-testid="result-title-a" href="https://example.org/variant">Variant
       title</a>
    <div data-testid="result-snippet">Variant   snippet</div>
  </div>
</div>
</body></html>
"""

TESTID_HTML = """
<html><body>
<article data-testid="result">
  <h2><a data-testid="result-title-a" href="https://example.org/a">First</a></h2>
  <div data-testid="result-snippet">Snippet A</div>
</article>
<article data-testid="result">
  <h2><a data-testid="result-title-a" href="/l/?uddg=https%3A%2F%2Fexample.org%2Fb">Second</a></h2>
</article>
</body></html>
"""


def _results_page(count: int) -> str:
    blocks = "".join(
        f'<div class="result"><h2 class="result__title">'
        f'<a href="https://example.com/{i}">Result {i}</a></h2>'
        f'<a class="result__snippet">Snippet {i}</a></div>'
        for i in range(count)
    )
    return f"<html><body>{blocks}</body></html>"


# ===================================================================
# Text Normalizer
# ===================================================================


class TestNormalizeText:
    """Tests for normalize_text."""

    def test_collapses_mixed_whitespace(self):
        assert normalize_text("  a\n\tb   c ") == "a b c"

    def test_idempotent(self):
        for sample in ["  a\n\tb   c ", "", "x", " spaced  out\r\n"]:
            once = normalize_text(sample)
            assert normalize_text(once) == once

    def test_none_is_empty(self):
        assert normalize_text(None) == ""

    def test_only_whitespace(self):
        assert normalize_text(" \n\t ") == ""


# ===================================================================
# Redirect Resolver
# ===================================================================


class TestResolveRedirect:
    """Tests for resolve_redirect."""

    def test_decodes_uddg(self):
        assert resolve_redirect("/l/?uddg=https%3A%2F%2Fexample.com") == "https://example.com"

    def test_absolute_passthrough(self):
        assert resolve_redirect("https://example.com/page") == "https://example.com/page"

    def test_relative_is_unusable(self):
        assert resolve_redirect("/relative/path") == ""

    def test_empty(self):
        assert resolve_redirect("") == ""

    def test_protocol_relative_redirect(self):
        link = "//duckduckgo.com/l/?uddg=https%3A%2F%2Fgo.dev%2Fdoc%2F&rut=abc"
        assert resolve_redirect(link) == "https://go.dev/doc/"

    def test_absolute_engine_redirect(self):
        link = "https://duckduckgo.com/l/?kh=-1&uddg=https%3A%2F%2Fexample.com%2F%3Fa%3D1%26b%3D2"
        assert resolve_redirect(link) == "https://example.com/?a=1&b=2"

    def test_missing_parameter_keeps_absolute_tracking_link(self):
        assert resolve_redirect("/l/?rut=abc") == "https://duckduckgo.com/l/?rut=abc"
        assert resolve_redirect("//duckduckgo.com/l/?rut=abc") == "https://duckduckgo.com/l/?rut=abc"

    def test_fragment_not_part_of_target(self):
        assert resolve_redirect("/l/?uddg=https%3A%2F%2Fexample.com#frag") == "https://example.com"

    def test_undecodable_value_falls_back_to_raw(self):
        assert resolve_redirect("/l/?uddg=https%3A%2F%2Fex.com%2F%FF") == "https%3A%2F%2Fex.com%2F%FF"

    def test_other_scheme_is_unusable(self):
        assert resolve_redirect("javascript:void(0)") == ""

    def test_redirect_path_on_other_host_passes_through(self):
        assert resolve_redirect("https://example.com/l/?uddg=x") == "https://example.com/l/?uddg=x"


# ===================================================================
# Markup Extractor
# ===================================================================


class TestMarkupExtractor:
    """Tests for MarkupExtractor."""

    def setup_method(self):
        self.extractor = MarkupExtractor()

    def test_no_containers_returns_empty(self):
        assert self.extractor.extract("<html><body><p>nothing</p></body></html>") == []
        assert self.extractor.extract_records("<html></html>") == []

    def test_empty_document(self):
        assert self.extractor.extract("") == []

    def test_non_text_body_raises(self):
        with pytest.raises(ExtractionError):
            self.extractor.extract(123)

    def test_tracking_link_without_destination_kept(self):
        html = (
            '<div class="result"><h2 class="result__title">'
            '<a href="/l/?rut=abc">Tracked</a></h2></div>'
        )
        records = self.extractor.extract_records(html)
        assert [r.url for r in records] == ["https://duckduckgo.com/l/?rut=abc"]

    def test_candidates_in_document_order(self):
        candidates = self.extractor.extract(CLASSIC_HTML)
        titles = [c.title for c in candidates]
        assert titles == [
            "The Go Programming Language",
            "Go (programming language)",
            "Internal link",
            "Variant title",
        ]

    def test_candidate_without_title_dropped(self):
        candidates = self.extractor.extract(CLASSIC_HTML)
        assert all(c.raw_link != "https://example.com/no-title" for c in candidates)

    def test_records_resolve_and_normalize(self):
        records = self.extractor.extract_records(CLASSIC_HTML)
        assert records[0] == SearchRecord(
            title="The Go Programming Language",
            url="https://go.dev/",
            description=(
                "Go is an open source programming language that makes it "
                "simple to build software."
            ),
        )
        assert records[1].description == ""

    def test_unusable_link_dropped(self):
        records = self.extractor.extract_records(CLASSIC_HTML)
        urls = [r.url for r in records]
        assert "" not in urls
        assert all(r.title != "Internal link" for r in records)
        assert len(records) <= len(self.extractor.extract(CLASSIC_HTML))

    def test_fallback_selectors_inside_container(self):
        records = self.extractor.extract_records(CLASSIC_HTML)
        assert records[-1] == SearchRecord(
            title="Variant title",
            url="https://example.org/variant",
            description="Variant snippet",
        )

    def test_fallback_container_selector(self):
        records = self.extractor.extract_records(TESTID_HTML)
        assert [r.url for r in records] == [
            "https://example.org/a",
            "https://example.org/b",
        ]
        assert records[0].description == "Snippet A"

    def test_custom_strategy_list(self):
        extractor = MarkupExtractor(
            container_selectors=["li.hit"],
            title_strategies=[FieldStrategy("span.name")],
            link_strategies=[FieldStrategy("a", attribute="data-href")],
            description_strategies=[FieldStrategy("p")],
        )
        html = '<ul><li class="hit"><span class="name">Hit</span><a data-href="https://x.io">x</a></li></ul>'
        assert extractor.extract_records(html) == [
            SearchRecord(title="Hit", url="https://x.io", description="")
        ]


# ===================================================================
# Rate policy
# ===================================================================


class FakeClock:
    def __init__(self, start: float = 100.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class TestDomainRateLimiter:
    """Tests for DomainRateLimiter and the limiter registry."""

    def setup_method(self):
        self.clock = FakeClock()
        self.limiter = DomainRateLimiter(
            LimitRule(domain_glob="*duckduckgo*", parallelism=1, delay=2.0),
            clock=self.clock,
            sleep=self.clock.sleep,
        )

    def test_first_visit_does_not_wait(self):
        with self.limiter.slot("https://duckduckgo.com/html/?q=a"):
            pass
        assert self.clock.sleeps == []

    def test_repeat_visit_waits_for_delay(self):
        with self.limiter.slot("https://duckduckgo.com/html/?q=a"):
            pass
        with self.limiter.slot("https://html.duckduckgo.com/html/?q=b"):
            pass
        assert self.clock.sleeps == [2.0]

    def test_elapsed_time_counts_toward_delay(self):
        with self.limiter.slot("https://duckduckgo.com/html/?q=a"):
            pass
        self.clock.now += 1.5
        with self.limiter.slot("https://duckduckgo.com/html/?q=b"):
            pass
        assert self.clock.sleeps == [pytest.approx(0.5)]

    def test_delay_counts_from_end_of_request(self):
        with self.limiter.slot("https://duckduckgo.com/html/?q=a"):
            self.clock.now += 5.0
        with self.limiter.slot("https://duckduckgo.com/html/?q=b"):
            pass
        assert self.clock.sleeps == [2.0]

    def test_other_domains_not_throttled(self):
        with self.limiter.slot("https://duckduckgo.com/html/?q=a"):
            pass
        with self.limiter.slot("https://example.com/"):
            pass
        assert self.clock.sleeps == []

    def test_invalid_parallelism(self):
        with pytest.raises(ValueError):
            DomainRateLimiter(LimitRule(parallelism=0))

    def test_registry_shares_limiter_per_rule(self):
        reset_limiters()
        rule = LimitRule(domain_glob="*duckduckgo*", parallelism=1, delay=2.0)
        assert get_limiter(rule) is get_limiter(LimitRule("*duckduckgo*", 1, 2.0))
        assert get_limiter(rule) is not get_limiter(LimitRule("*bing*", 1, 2.0))
        reset_limiters()


# ===================================================================
# Query Runner
# ===================================================================


class TestQueryRunner:
    """Query runner against a stubbed transport."""

    def setup_method(self):
        self.config = ScraperConfig(request_delay=0.0, query_delay=0.0)
        self.requests = []
        self.limiter = DomainRateLimiter(LimitRule("*duckduckgo*", 1, 0.0))

    def _runner(self, handler) -> QueryRunner:
        def recording(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        client = httpx.Client(transport=httpx.MockTransport(recording))
        return QueryRunner(self.config, http_client=client, limiter=self.limiter)

    def test_build_search_url(self):
        assert build_search_url("golang programming") == (
            "https://duckduckgo.com/html/?q=golang+programming&t=h_&ia=web"
        )

    def test_build_search_url_encodes_operators(self):
        url = build_search_url("from:github -is:retweet")
        assert "q=from%3Agithub+-is%3Aretweet" in url

    def test_success_returns_records(self):
        runner = self._runner(lambda r: httpx.Response(200, text=CLASSIC_HTML))
        records = runner.run("golang programming")

        assert len(self.requests) == 1
        request = self.requests[0]
        assert request.url.host == "duckduckgo.com"
        assert request.url.path == "/html/"
        assert request.url.params["q"] == "golang programming"
        assert request.url.params["t"] == "h_"
        assert request.url.params["ia"] == "web"
        assert [r.url for r in records] == [
            "https://go.dev/",
            "https://en.wikipedia.org/wiki/Go_(programming_language)",
            "https://example.org/variant",
        ]

    def test_truncates_to_page_limit(self):
        runner = self._runner(lambda r: httpx.Response(200, text=_results_page(15)))
        records = runner.run("many")
        assert len(records) == 10
        assert records[0].url == "https://example.com/0"
        assert records[-1].url == "https://example.com/9"

    def test_empty_page(self):
        runner = self._runner(lambda r: httpx.Response(200, text="<html></html>"))
        assert runner.run("nothing") == []

    def test_429_is_rate_limited(self):
        runner = self._runner(lambda r: httpx.Response(429, text="slow down"))
        with pytest.raises(RateLimited) as exc_info:
            runner.run("q")
        assert exc_info.value.status_code == 429
        assert exc_info.value.query == "q"

    def test_challenge_page_is_rate_limited(self):
        body = '<html><div class="anomaly-modal__title">Unfortunately, bots use DuckDuckGo too.</div></html>'
        runner = self._runner(lambda r: httpx.Response(202, text=body))
        with pytest.raises(RateLimited):
            runner.run("q")

    def test_server_error_is_fetch_error(self):
        runner = self._runner(lambda r: httpx.Response(503, text="down"))
        with pytest.raises(FetchError) as exc_info:
            runner.run("q")
        assert exc_info.value.status_code == 503

    def test_transport_error_is_fetch_error(self):
        def boom(request):
            raise httpx.ConnectError("connection refused", request=request)

        runner = self._runner(boom)
        with pytest.raises(FetchError):
            runner.run("q")

    def test_owned_client_uses_configured_user_agent(self):
        runner = QueryRunner(ScraperConfig(user_agent="TestAgent/1.0"))
        try:
            assert runner._client.headers["User-Agent"] == "TestAgent/1.0"
        finally:
            runner.close()

    def test_is_challenge_page(self):
        assert is_challenge_page(429, "")
        assert is_challenge_page(200, '<form id="challenge-form">')
        assert not is_challenge_page(200, CLASSIC_HTML)

    def test_extraction_error_carries_query(self):
        extractor = MagicMock()
        extractor.extract_records.side_effect = ExtractionError("bad markup")
        client = httpx.Client(
            transport=httpx.MockTransport(lambda r: httpx.Response(200, text=CLASSIC_HTML))
        )
        runner = QueryRunner(self.config, extractor=extractor, http_client=client, limiter=self.limiter)
        with pytest.raises(ExtractionError) as exc_info:
            runner.run("q")
        assert exc_info.value.query == "q"

    def test_consecutive_runs_wait_on_limiter(self):
        clock = FakeClock()
        self.limiter = DomainRateLimiter(
            LimitRule("*duckduckgo*", 1, 2.0), clock=clock, sleep=clock.sleep
        )
        runner = self._runner(lambda r: httpx.Response(200, text=CLASSIC_HTML))
        runner.run("first")
        runner.run("second")
        assert len(self.requests) == 2
        assert clock.sleeps == [2.0]
