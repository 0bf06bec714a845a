import asyncio
import logging
import ssl
import time
from typing import Optional

import aiohttp

from crawler.errors import ErrorKind, ScanError
from crawler.model import FetchedPage
from crawler.services.http_request_service import HttpRequestService

logger = logging.getLogger(__name__)

HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")
# Statuses a site uses to turn away automated clients
BLOCKED_STATUSES = (403, 429, 451)


class PageFetcher(HttpRequestService):
    """
    Retrieves HTML pages for a scan.

    Every fetch is bounded by the session's total timeout. Failures are raised
    as ScanError with a distinct ErrorKind; nothing is retried here.
    """

    async def fetch_page(self, url_to_fetch: str) -> FetchedPage:
        start_total_time = time.perf_counter()

        if not self.session or self.session.closed:
            await self.initialize()

        try:
            async with self.semaphore:
                async with self.session.get(
                        url_to_fetch,
                        allow_redirects=True,
                        max_redirects=self.max_redirects,
                ) as response:
                    status = response.status
                    final_url = str(response.url)
                    self._check_status(url_to_fetch, status, response.reason)

                    content_type = response.headers.get("Content-Type", "").lower()
                    if not any(t in content_type for t in HTML_CONTENT_TYPES):
                        logger.debug("Non-HTML content for %s (%s)", url_to_fetch, content_type)
                        raise ScanError(
                            ErrorKind.NOT_HTML,
                            f"The URL does not point to an HTML page ({content_type or 'no content type'}).",
                            url=url_to_fetch
                        )

                    content = await self._read_content(response)

        except ScanError:
            raise
        except (aiohttp.ClientSSLError, ssl.SSLError) as e:
            raise ScanError(ErrorKind.TLS_ERROR, url=url_to_fetch) from e
        except asyncio.TimeoutError as e:
            raise ScanError(
                ErrorKind.TIMEOUT,
                "Request timeout: The website took too long to respond.",
                url=url_to_fetch
            ) from e
        except aiohttp.InvalidURL as e:
            raise ScanError(ErrorKind.INVALID_URL, url=url_to_fetch) from e
        except aiohttp.TooManyRedirects as e:
            raise ScanError(
                ErrorKind.HTTP_ERROR,
                f"Too many redirects (more than {self.max_redirects}).",
                url=url_to_fetch
            ) from e
        except aiohttp.ClientConnectionError as e:
            raise ScanError(ErrorKind.UNREACHABLE_HOST, url=url_to_fetch) from e
        except aiohttp.ClientError as e:
            logger.error(f"Unexpected client error for {url_to_fetch}: {e}", exc_info=True)
            raise ScanError(ErrorKind.INTERNAL, str(e) or None, url=url_to_fetch) from e

        elapsed = round(time.perf_counter() - start_total_time, 4)
        logger.debug("Fetched %s (%d) in %.2fs", url_to_fetch, status, elapsed)

        return FetchedPage(
            url=url_to_fetch,
            final_url=final_url,
            status_code=status,
            content_type=content_type,
            content=content,
            elapsed_time=elapsed,
        )

    @staticmethod
    def _check_status(url: str, status: int, reason: Optional[str]) -> None:
        if 200 <= status < 300:
            return
        if status in BLOCKED_STATUSES:
            raise ScanError(
                ErrorKind.BLOCKED,
                f"This website blocks automated scanning (HTTP {status}).",
                url=url
            )
        raise ScanError(ErrorKind.HTTP_ERROR, f"HTTP error: {status} {reason or ''}".strip(), url=url)

    @staticmethod
    async def _read_content(response: aiohttp.ClientResponse) -> str:
        try:
            return await response.text()
        except UnicodeDecodeError:
            # Fallback decoding
            content_bytes = await response.read()
            return content_bytes.decode('utf-8', errors='replace')
