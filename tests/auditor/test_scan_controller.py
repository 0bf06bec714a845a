# tests/auditor/test_scan_controller.py
import asyncio
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from auditor.controllers.scan_controller import ScanController
from auditor.model import CHECKS_PERFORMED, IssueType, ScanMode
from crawler.errors import ErrorKind, ScanError
from crawler.model import CrawlSettings, FetchedPage

SEED = "https://site.test/"


class FakeFetcher:
    """
    Nep-fetcher: levert pagina's uit een dict, gooit een ScanError voor
    de rest en onthoudt welke URL's zijn opgevraagd.
    """

    def __init__(self, pages: Dict[str, str], errors: Optional[Dict[str, Exception]] = None,
                 redirects: Optional[Dict[str, str]] = None, delays: Optional[Dict[str, float]] = None):
        self.pages = pages
        self.errors = errors or {}
        self.redirects = redirects or {}
        self.delays = delays or {}
        self.requested: List[str] = []

    async def fetch_page(self, url: str) -> FetchedPage:
        self.requested.append(url)
        await asyncio.sleep(self.delays.get(url, 0))
        if url in self.errors:
            raise self.errors[url]
        final_url = self.redirects.get(url, url)
        if final_url not in self.pages:
            raise ScanError(ErrorKind.HTTP_ERROR, "HTTP error: 404 Not Found", url=url)
        return FetchedPage(url=url, final_url=final_url, status_code=200,
                           content_type="text/html", content=self.pages[final_url])


def make_controller(fetcher, **settings) -> ScanController:
    return ScanController(settings=CrawlSettings(**settings), fetcher=fetcher)


def run(coro):
    return asyncio.run(coro)


# --- Single mode ---

def test_single_page_scan():
    fetcher = FakeFetcher({SEED: '<h1>Hi</h1><img src="a.png"><a href="/next">Next</a>'})
    result = run(make_controller(fetcher).scan(SEED))

    assert fetcher.requested == [SEED]
    assert result.scan_mode == ScanMode.SINGLE
    assert result.pages_scanned == 1
    assert [issue.type for issue in result.issues] == [IssueType.MISSING_ALT_TEXT]
    assert result.passed_checks == CHECKS_PERFORMED - 1
    assert result.page_results is None


def test_mode_given_as_string():
    fetcher = FakeFetcher({SEED: "<h1>Hi</h1>"})
    assert run(make_controller(fetcher).scan(SEED, "single")).issues == []


def test_unknown_mode_is_internal_error():
    with pytest.raises(ScanError) as exc_info:
        run(make_controller(FakeFetcher({})).scan(SEED, "deep"))
    assert exc_info.value.kind == ErrorKind.INTERNAL


@pytest.mark.parametrize("url", ["", "site.test", "ftp://site.test/", "https://", "https://exa mple.com"])
def test_invalid_url_never_reaches_fetcher(url):
    fetcher = FakeFetcher({})
    with pytest.raises(ScanError) as exc_info:
        run(make_controller(fetcher).scan(url))

    assert exc_info.value.kind == ErrorKind.INVALID_URL
    assert exc_info.value.retryable is False
    assert fetcher.requested == []


def test_fetch_error_propagates_with_kind():
    fetcher = FakeFetcher({}, errors={SEED: ScanError(ErrorKind.BLOCKED, url=SEED)})
    with pytest.raises(ScanError) as exc_info:
        run(make_controller(fetcher).scan(SEED))
    assert exc_info.value.kind == ErrorKind.BLOCKED


def test_unexpected_exception_becomes_internal():
    fetcher = FakeFetcher({}, errors={SEED: RuntimeError("boom")})
    with pytest.raises(ScanError) as exc_info:
        run(make_controller(fetcher).scan(SEED))
    assert exc_info.value.kind == ErrorKind.INTERNAL


def test_scan_html_runs_without_network():
    controller = make_controller(FakeFetcher({}))
    page = controller.scan_html(SEED, '<a href="/x"></a>')
    assert page.url == SEED
    assert page.error_count == 1


# --- Full mode ---

def _site(link_count: int) -> Dict[str, str]:
    links = "".join(f'<a href="/p{i}">Page {i}</a>' for i in range(link_count))
    pages = {SEED: f"<h1>Home</h1>{links}"}
    for i in range(link_count):
        pages[f"https://site.test/p{i}"] = f"<h1>Page {i}</h1>"
    return pages


def test_full_scan_is_capped_at_max_pages():
    """Een seed met 15 interne links leidt tot precies 9 extra fetches."""
    fetcher = FakeFetcher(_site(15))
    result = run(make_controller(fetcher).scan(SEED, ScanMode.FULL))

    assert len(fetcher.requested) == 10
    assert fetcher.requested[0] == SEED
    assert result.pages_scanned == 10
    assert [page.url for page in result.page_results] == [SEED] + [f"https://site.test/p{i}" for i in range(9)]


def test_full_scan_keeps_discovery_order():
    pages = _site(3)
    delays = {"https://site.test/p0": 0.05, "https://site.test/p1": 0.02, "https://site.test/p2": 0}
    pages["https://site.test/p0"] = '<img src="slow.png">'
    pages["https://site.test/p2"] = '<a href="/x"></a>'
    fetcher = FakeFetcher(pages, delays=delays)

    result = run(make_controller(fetcher).scan(SEED, ScanMode.FULL))

    assert [page.url for page in result.page_results] == [
        SEED, "https://site.test/p0", "https://site.test/p1", "https://site.test/p2"
    ]
    assert [issue.type for issue in result.issues] == [IssueType.MISSING_ALT_TEXT, IssueType.EMPTY_LINK]


def test_full_scan_aggregates_totals():
    pages = _site(2)
    pages["https://site.test/p0"] = '<h1>A</h1><img src="a.png">'
    pages["https://site.test/p1"] = '<h1>B</h1><h3>C</h3><img src="b.png">'
    result = run(make_controller(FakeFetcher(pages)).scan(SEED, ScanMode.FULL))

    assert result.total_issues == sum(page.total_issues for page in result.page_results) == 3
    assert result.error_count == 2
    assert result.warning_count == 1
    assert result.passed_checks == CHECKS_PERFORMED - 2


def test_failing_page_becomes_empty_result():
    pages = _site(2)
    fetcher = FakeFetcher(pages, errors={"https://site.test/p0": ScanError(ErrorKind.TIMEOUT)})

    result = run(make_controller(fetcher).scan(SEED, ScanMode.FULL))

    assert result.pages_scanned == 3
    failed = result.page_results[1]
    assert failed.url == "https://site.test/p0"
    assert failed.total_issues == 0


def test_failing_seed_fails_full_scan():
    fetcher = FakeFetcher(_site(3), errors={SEED: ScanError(ErrorKind.UNREACHABLE_HOST)})
    with pytest.raises(ScanError) as exc_info:
        run(make_controller(fetcher).scan(SEED, ScanMode.FULL))

    assert exc_info.value.kind == ErrorKind.UNREACHABLE_HOST
    assert fetcher.requested == [SEED]


def test_full_scan_with_no_links_has_one_page():
    result = run(make_controller(FakeFetcher({SEED: "<h1>Alone</h1>"})).scan(SEED, ScanMode.FULL))
    assert result.pages_scanned == 1
    assert result.page_results is None


def test_discovery_uses_final_url_after_redirect():
    """Links worden opgelost tegen de URL waar de seed uiteindelijk terechtkwam."""
    pages = {
        "https://www.site.test/": '<a href="/about">About</a><a href="https://site.test/other">Other</a>',
        "https://www.site.test/about": "<h1>About</h1>",
    }
    fetcher = FakeFetcher(pages, redirects={SEED: "https://www.site.test/"})

    result = run(make_controller(fetcher).scan(SEED, ScanMode.FULL))

    assert fetcher.requested == [SEED, "https://www.site.test/about"]
    assert result.page_results[0].url == SEED


def test_full_scan_skips_offsite_and_non_page_links():
    pages = {
        SEED: (
            '<a href="https://other.test/">Off</a><a href="/doc.pdf">PDF</a>'
            '<a href="mailto:x@site.test">Mail</a><a href="#top">Top</a>'
            '<a href="/a">A</a><a href="/a#frag">A again</a><a href="/">Home</a>'
        ),
        "https://site.test/a": "<h1>A</h1>",
    }
    fetcher = FakeFetcher(pages)
    run(make_controller(fetcher).scan(SEED, ScanMode.FULL))

    assert fetcher.requested == [SEED, "https://site.test/a"]


def test_max_pages_setting():
    fetcher = FakeFetcher(_site(5))
    result = run(make_controller(fetcher, max_pages=3).scan(SEED, ScanMode.FULL))
    assert result.pages_scanned == 3


class InFlightFetcher(FakeFetcher):
    """Telt hoeveel pagina-fetches tegelijk lopen en onthoudt de piek."""

    def __init__(self, pages: Dict[str, str]):
        super().__init__(pages)
        self.in_flight = 0
        self.peak = 0

    async def fetch_page(self, url: str) -> FetchedPage:
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(0.02)
            return await super().fetch_page(url)
        finally:
            self.in_flight -= 1


def test_full_scan_fetches_pages_concurrently_within_limit():
    fetcher = InFlightFetcher(_site(12))
    result = run(make_controller(fetcher, concurrency=4, max_pages=11).scan(SEED, ScanMode.FULL))

    assert result.pages_scanned == 11
    assert 1 < fetcher.peak <= 4


def test_full_scan_with_concurrency_one_is_sequential():
    fetcher = InFlightFetcher(_site(5))
    run(make_controller(fetcher, concurrency=1).scan(SEED, ScanMode.FULL))

    assert len(fetcher.requested) == 6
    assert fetcher.peak == 1


# --- Broken-link check ---

def test_link_checker_only_runs_when_enabled():
    checker = MagicMock()
    checker.check_all = AsyncMock(return_value={"https://site.test/gone": 404})
    fetcher = FakeFetcher({SEED: '<h1>Hi</h1><a href="/gone">Old</a>'})

    disabled = ScanController(settings=CrawlSettings(), fetcher=fetcher, link_checker=checker)
    assert run(disabled.scan(SEED)).issues == []
    checker.check_all.assert_not_called()

    enabled = ScanController(settings=CrawlSettings(check_broken_links=True), fetcher=fetcher, link_checker=checker)
    result = run(enabled.scan(SEED))

    checker.check_all.assert_awaited_once_with(["https://site.test/gone"])
    assert [issue.type for issue in result.issues] == [IssueType.BROKEN_LINK]
    assert result.passed_checks == CHECKS_PERFORMED
