# csp_scout/crawler/fetcher.py
"""
Fetcher module: downloads a fixed list of pages through a bounded pool of
asyncio workers. Every URL is attempted exactly once, no retries.
"""
from __future__ import annotations

import asyncio
import time
from typing import Dict, Final, Optional, Sequence

from aiohttp import ClientError, ClientResponse, ClientSession, ClientTimeout

from csp_scout.crawler.models import FetchResult
from csp_scout.logger import logger
from csp_scout.utils import describe_error

__all__ = ("ACCEPT_HEADER", "ConcurrentFetcher", "fetch_all")

ACCEPT_HEADER: Final[str] = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
_MAX_CONNECT_TIMEOUT: Final[float] = 10.0


class ConcurrentFetcher:
    """GET a list of URLs with at most ``concurrency`` requests in flight."""

    def __init__(self, concurrency: int, timeout: float, user_agent: str) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        if timeout <= 0:
            raise ValueError("timeout must be > 0")
        self.concurrency = concurrency
        self.timeout = timeout
        self.user_agent = user_agent
        self.session: Optional[ClientSession] = None

    async def __aenter__(self) -> ConcurrentFetcher:
        timeout = ClientTimeout(
            total=self.timeout,
            connect=min(_MAX_CONNECT_TIMEOUT, self.timeout),
        )
        self.session = ClientSession(
            timeout=timeout,
            headers={"User-Agent": self.user_agent, "Accept": ACCEPT_HEADER},
            raise_for_status=False,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def fetch_all(self, urls: Sequence[str]) -> Dict[str, FetchResult]:
        """
        Fetch every URL once; returns results keyed by URL.

        Completion order is unspecified, callers that need page order must
        iterate their own ``urls`` sequence.
        """
        logger.info("Старт загрузки: %d URL, concurrency=%d, timeout=%ss", len(urls), self.concurrency, self.timeout)
        start = time.monotonic()
        queue: asyncio.Queue[str] = asyncio.Queue()
        for url in urls:
            queue.put_nowait(url)
        results: Dict[str, FetchResult] = {}
        workers = [
            asyncio.create_task(self._worker(queue, results))
            for _ in range(min(self.concurrency, len(urls)))
        ]
        await queue.join()
        for w in workers:
            w.cancel()
        await asyncio.gather(*workers, return_exceptions=True)

        duration = time.monotonic() - start
        failed = sum(1 for r in results.values() if not r.ok)
        logger.info("Загрузка завершена: %d URL за %.2f с, ошибок: %d", len(results), duration, failed)
        return results

    async def _worker(self, queue: asyncio.Queue[str], results: Dict[str, FetchResult]) -> None:
        while True:
            url = await queue.get()
            try:
                results[url] = await self.fetch(url)
            except Exception as exc:
                error = describe_error(exc)
                logger.warning("Unexpected error on %s: %s", url, error)
                results[url] = FetchResult(url=url, status=0, body=None, error=error)
            finally:
                queue.task_done()

    async def fetch(self, url: str) -> FetchResult:
        """Single GET; transport errors and timeouts become a FetchResult with status 0."""
        if not self.session:
            raise RuntimeError("Session not initialized")
        try:
            async with self.session.get(url, allow_redirects=True) as resp:
                body = await _read_text(resp)
                logger.debug("GET %s -> HTTP %s (%d chars)", url, resp.status, len(body))
                return FetchResult(url=url, status=resp.status, body=body)
        except (ClientError, asyncio.TimeoutError) as exc:
            error = describe_error(exc)
            logger.warning("Failed %s: %s", url, error)
            return FetchResult(url=url, status=0, body=None, error=error)


async def _read_text(resp: ClientResponse) -> str:
    # charset из заголовка может оказаться не текстовым кодеком (base64, hex)
    try:
        return await resp.text(errors="replace")
    except (LookupError, UnicodeError):
        raw = await resp.read()
        return raw.decode("utf-8", errors="replace")


async def fetch_all(
    urls: Sequence[str], concurrency: int, timeout: float, user_agent: str
) -> Dict[str, FetchResult]:
    """Open a :class:`ConcurrentFetcher`, fetch *urls* and close the session."""
    async with ConcurrentFetcher(concurrency, timeout, user_agent) as fetcher:
        return await fetcher.fetch_all(urls)
