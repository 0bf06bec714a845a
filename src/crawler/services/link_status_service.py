# src/crawler/services/link_status_service.py
import asyncio
import logging
from typing import Dict, List

from crawler.services.http_request_service import HttpRequestService

logger = logging.getLogger(__name__)


class LinkStatusService:
    """
    Probes link targets for the broken-link check.
    HEAD first, GET when the server refuses HEAD (405); a few retries with
    exponential backoff on 429/503.
    """

    def __init__(self, http_service: HttpRequestService, max_retries: int = 2, backoff_factor: float = 2.0):
        self.http_service = http_service
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor

    async def check_link(self, url: str) -> int:
        """Status code of the target, or a negative code when it could not be reached."""
        status = -1
        for attempt in range(self.max_retries + 1):
            if attempt:
                await asyncio.sleep(0.5 * (self.backoff_factor ** (attempt - 1)))

            result = await self.http_service.perform_request(url, method="HEAD")
            status = result.get("status", -2)

            if status == 405:
                result = await self.http_service.perform_request(url, method="GET")
                status = result.get("status", -2)

            if status in (429, 503) and attempt < self.max_retries:
                logger.debug("Url %s returned status %i, retrying.", url, status)
                continue

            if status < 0:
                logger.debug("Url %s unreachable: %s", url, result.get("error"))
            return status

        return status

    async def check_all(self, urls: List[str]) -> Dict[str, int]:
        """Checks all URLs concurrently (bounded by the service semaphore)."""
        statuses = await asyncio.gather(*(self.check_link(url) for url in urls))
        return dict(zip(urls, statuses))
