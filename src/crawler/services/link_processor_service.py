# src/crawler/services/link_processor_service.py

import logging
from typing import List, Iterable, Optional

from auditor.dom.core import ElementRecord
from auditor.dom.elements.link import resolve_href
from crawler.utils.url_utils import UrlUtils

# Initialize a module-level logger.
logger = logging.getLogger(__name__)


class LinkProcessorService:
    """
    A stateless service that turns the link records of a page into URLs:
    the same-site pages a full-site scan visits next, and the link targets
    the broken-link check probes.
    """

    def __init__(self):
        self.utils = UrlUtils()

    def discover_pages(
            self,
            links: Iterable[ElementRecord],
            page_url: str,
            limit: Optional[int] = None,
            exclude: Iterable[str] = ()
    ) -> List[str]:
        """
        Collects same-origin page URLs from anchor records.

        Args:
            links: Link records of the page, in document order.
            page_url: The (final, post-redirect) URL of the page the links were found on.
            limit: Maximum number of URLs to return.
            exclude: Already-known URLs (e.g. the pre-redirect seed) that must not be returned.

        Returns:
            Normalized, de-duplicated URLs in first-seen order. The page itself is never included.
        """
        base_url = self.utils.get_base_url(page_url)
        if not base_url:
            logger.warning(f"Could not extract base_url from {page_url}. Cannot process links.")
            return []

        seen = {self.utils.normalize_url(page_url, url) for url in (page_url, *exclude)}
        targets: List[str] = []

        for link in links:
            if limit is not None and len(targets) >= limit:
                break

            # Skips fragments, mailto:, tel:, javascript: and malformed hrefs
            target = resolve_href(link, page_url)
            if not target or target in seen:
                continue
            if not self.utils.is_same_origin(target, base_url):
                continue
            if not self.utils.is_allowed_extension(target):
                continue

            seen.add(target)
            targets.append(target)

        logger.debug(f"Discovered {len(targets)} same-site page(s) on {page_url}")
        return targets

    def collect_link_targets(
            self, links: Iterable[ElementRecord], page_url: str, limit: Optional[int] = None
    ) -> List[str]:
        """All distinct http(s) link targets of a page, internal and external."""
        targets: List[str] = []
        for link in links:
            if limit is not None and len(targets) >= limit:
                break
            target = resolve_href(link, page_url)
            if target and target not in targets:
                targets.append(target)
        return targets
