import asyncio
import logging
import time
from contextlib import AsyncExitStack
from typing import List, Optional, Tuple, Union, Dict

from tqdm.asyncio import tqdm as tqdm_asyncio

from auditor.dom.builder import DOMBuilder
from auditor.dom.models import ExtractedDocument
from auditor.dom.qngine import QNGINE
from auditor.model import PageResult, ScanMode, ScanResult
from crawler.errors import ErrorKind, ScanError
from crawler.model import CrawlSettings, FetchedPage
from crawler.services.async_page_fetcher_service import PageFetcher
from crawler.services.generate_default_user_agent_service import generate_default_user_agent
from crawler.services.http_request_service import HttpRequestService
from crawler.services.link_processor_service import LinkProcessorService
from crawler.services.link_status_service import LinkStatusService
from crawler.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)


class ScanController:
    """
    Orchestrates a scan: fetch -> extract -> audit -> aggregate.

    Single mode audits one page. Full mode audits the seed page plus up to
    `max_pages - 1` same-site pages linked from it, fetched concurrently under
    a bounded fan-out. Every scan builds its own documents and issue lists;
    the controller keeps no state between scans.
    """

    def __init__(
            self,
            settings: Optional[CrawlSettings] = None,
            fetcher: Optional[PageFetcher] = None,
            link_checker: Optional[LinkStatusService] = None,
            show_progress: bool = False,
    ):
        """
        Args:
            settings: Crawl settings; loaded from settings.json when omitted.
            fetcher: Page fetcher to use instead of a fresh PageFetcher per scan.
            link_checker: Link status service to use when the broken-link check is on.
            show_progress: Show a tqdm progress bar for the pages of a full-site scan.
        """
        self.settings = settings or CrawlSettings.from_config()
        self.fetcher = fetcher
        self.link_checker = link_checker
        self.show_progress = show_progress

        self.builder = DOMBuilder()
        self.engine = QNGINE()
        self.link_processor = LinkProcessorService()
        self.url_utils = UrlUtils()

    # --- Synchronous pipeline ---

    def audit_document(self, doc: ExtractedDocument) -> PageResult:
        return PageResult.build(doc.url, self.engine.run_audit(doc))

    def scan_html(self, url: str, html: str) -> PageResult:
        """Extracts and audits markup that has already been retrieved."""
        return self.audit_document(self.builder.parse_doc(url, html))

    # --- Async entry point ---

    async def scan(self, url: str, mode: Union[ScanMode, str] = ScanMode.SINGLE) -> ScanResult:
        """
        Scans a URL and returns the aggregated report.

        Raises:
            ScanError: on invalid input, on failure to fetch the (seed) page, or
                       with kind 'internal' for any unexpected failure.
        """
        try:
            mode = ScanMode(mode)
        except ValueError:
            raise ScanError(ErrorKind.INTERNAL, f"Unknown scan mode: {mode!r}", url=url)

        if not self.url_utils.is_valid_absolute_url(url):
            raise ScanError(ErrorKind.INVALID_URL, url=url)

        logger.info(f"Starting {mode.value} scan of {url}")
        start_time = time.perf_counter()

        try:
            async with AsyncExitStack() as stack:
                fetcher = self.fetcher or await stack.enter_async_context(self._create_fetcher())
                link_checker = await self._open_link_checker(stack)

                if mode == ScanMode.SINGLE:
                    page = await fetcher.fetch_page(url)
                    seed_result, _ = await self._audit_page(page, link_checker)
                    pages = [seed_result]
                else:
                    pages = await self._scan_site(fetcher, link_checker, url)
        except ScanError:
            raise
        except Exception as e:
            logger.error(f"Scan of {url} failed unexpectedly: {e}", exc_info=True)
            raise ScanError(ErrorKind.INTERNAL, url=url) from e

        result = ScanResult.from_pages(url, mode, pages)
        logger.info(
            f"Scan of {url} finished in {time.perf_counter() - start_time:.2f}s: "
            f"{result.pages_scanned} page(s), {result.total_issues} issue(s) "
            f"({result.error_count} errors, {result.warning_count} warnings)"
        )
        return result

    # --- Internals ---

    def _create_fetcher(self) -> PageFetcher:
        return PageFetcher(
            user_agent=generate_default_user_agent(),
            timeout=self.settings.timeout,
            concurrency=self.settings.concurrency,
            max_redirects=self.settings.max_redirects,
        )

    async def _open_link_checker(self, stack: AsyncExitStack) -> Optional[LinkStatusService]:
        if not self.settings.check_broken_links:
            return None
        if self.link_checker:
            return self.link_checker

        http_service = HttpRequestService(
            user_agent=generate_default_user_agent(),
            timeout=self.settings.link_check_timeout,
            concurrency=self.settings.link_check_concurrency,
            max_redirects=self.settings.max_redirects,
        )
        await stack.enter_async_context(http_service)
        return LinkStatusService(http_service)

    async def _audit_page(
            self, page: FetchedPage, link_checker: Optional[LinkStatusService]
    ) -> Tuple[PageResult, ExtractedDocument]:
        """Extracts and audits one fetched page. Link statuses are gathered first when enabled."""
        doc = self.builder.parse_doc(page.final_url, page.content)

        if link_checker and doc.links:
            targets = self.link_processor.collect_link_targets(
                doc.links, page.final_url, limit=self.settings.link_check_max_links
            )
            statuses: Dict[str, int] = await link_checker.check_all(targets)
            doc = doc.model_copy(update={"link_status": statuses})

        issues = self.engine.run_audit(doc)
        return PageResult.build(page.url, issues), doc

    async def _scan_site(
            self, fetcher: PageFetcher, link_checker: Optional[LinkStatusService], url: str
    ) -> List[PageResult]:
        """
        Full-site mode. A failing seed fails the scan; any other page that
        cannot be fetched becomes a zero-issue result. The returned order is
        discovery order, whatever order the fetches complete in.
        """
        seed_page = await fetcher.fetch_page(url)
        seed_result, seed_doc = await self._audit_page(seed_page, link_checker)

        targets = self.link_processor.discover_pages(
            seed_doc.links,
            seed_page.final_url,
            limit=self.settings.max_pages - 1,
            exclude=[url],
        )
        logger.info(f"Discovered {len(targets)} additional page(s) to scan from {url}")

        semaphore = asyncio.Semaphore(self.settings.concurrency)

        async def scan_one(target: str) -> PageResult:
            async with semaphore:
                try:
                    page = await fetcher.fetch_page(target)
                except ScanError as e:
                    logger.warning(f"Skipping {target}: {e.kind.value} ({e.message})")
                    return PageResult.build(target, [])
                result, _ = await self._audit_page(page, link_checker)
                return result

        results = await tqdm_asyncio.gather(
            *(scan_one(target) for target in targets),
            total=len(targets),
            desc="Scanning",
            unit="page",
            disable=not self.show_progress,
        )
        return [seed_result, *results]
