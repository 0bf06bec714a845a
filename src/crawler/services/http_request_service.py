# src/crawler/services/http_request_service.py
import asyncio
import logging
import time
from typing import Optional

import aiohttp

logger = logging.getLogger(__name__)

DEFAULT_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


class HttpRequestService:
    """
    Central service for executing HTTP requests (GET/HEAD).
    Manages the aiohttp session, concurrency (semaphore), and error handling.

    One instance belongs to one scan; it is never shared between scans.
    """

    def __init__(
            self,
            user_agent: str,
            timeout: float = 15.0,
            concurrency: int = 4,
            max_redirects: int = 10
    ):
        self.user_agent = user_agent
        self.timeout = float(timeout)
        self.max_concurrency = int(concurrency)
        self.max_redirects = int(max_redirects)

        self.semaphore = asyncio.Semaphore(self.max_concurrency)
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def initialize(self):
        if not self.session or self.session.closed:
            timeout_obj = aiohttp.ClientTimeout(total=self.timeout)
            default_headers = {
                'Accept': DEFAULT_ACCEPT,
                'Accept-Language': 'en-US,en;q=0.5',
                'Accept-Encoding': 'gzip, deflate',
                'User-Agent': self.user_agent
            }
            self.session = aiohttp.ClientSession(
                timeout=timeout_obj, headers=default_headers
            )
            logger.debug("%s: Session initialized.", type(self).__name__)

    async def close(self):
        if self.session and not self.session.closed:
            await self.session.close()
            logger.debug("%s: Session closed.", type(self).__name__)

    async def perform_request(self, url: str, method: str = "HEAD") -> dict:
        """
        Lightweight status probe: no body is read.
        Failures are reported in-band with negative status codes
        (-1 network/timeout, -2 anything else) instead of raising.
        """
        start_time = time.perf_counter()

        if not self.session or self.session.closed:
            await self.initialize()

        if method.upper() not in ("GET", "HEAD"):
            return {"status": -2, "error": f"Method {method} not supported"}

        try:
            async with self.semaphore:
                async with self.session.request(
                        method.upper(),
                        url,
                        allow_redirects=True,
                        max_redirects=self.max_redirects,
                ) as response:
                    response_data = {"status": response.status, "final_url": str(response.url)}
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            response_data = {"status": -1, "error": str(e) or type(e).__name__}
        except ValueError as e:
            response_data = {"status": -2, "error": str(e)}

        response_data["elapsed_time"] = round((time.perf_counter() - start_time), 4)
        return response_data
