# csp_scout/crawler/sitemap.py
"""
Sitemap resolver: loads a sitemap from HTTP(S) or a local file and flattens
nested sitemap indexes into an ordered, deduplicated list of page URLs.
"""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional, Set

from aiohttp import ClientError, ClientSession, ClientTimeout

from csp_scout.exceptions import SitemapFetchError
from csp_scout.logger import logger
from csp_scout.parser.sitemap_parser import parse_sitemap
from csp_scout.utils import describe_error, is_http_url, remove_duplicates

__all__ = ("SitemapResolver", "resolve_sitemap")


class SitemapResolver:
    """Recursive sitemap reader; nested sitemaps are fetched one after another."""

    def __init__(self, user_agent: Optional[str] = None, timeout: float = 30.0) -> None:
        self.user_agent = user_agent
        self.timeout = timeout
        self.session: Optional[ClientSession] = None

    async def __aenter__(self) -> SitemapResolver:
        headers = {"User-Agent": self.user_agent} if self.user_agent else None
        self.session = ClientSession(
            timeout=ClientTimeout(total=self.timeout),
            headers=headers,
            raise_for_status=False,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def resolve(self, location: str) -> List[str]:
        """
        Return page URLs listed by *location* in first-seen order.

        Raises SitemapFetchError / SitemapParseError; either aborts the run.
        """
        urls = await self._resolve(location, set())
        logger.info("Sitemap %s: %d URLs", location, len(urls))
        return urls

    async def _resolve(self, location: str, visited: Set[str]) -> List[str]:
        if location in visited:
            logger.warning("Sitemap %s already visited, skipping nested reference", location)
            return []
        visited.add(location)

        document = parse_sitemap(await self._load(location))
        if not document.is_index:
            return remove_duplicates(document.locations)

        urls: List[str] = []
        for child in document.locations:
            logger.debug("Descending into nested sitemap %s", child)
            urls.extend(await self._resolve(child, visited))
        return remove_duplicates(urls)

    async def _load(self, location: str) -> bytes:
        if is_http_url(location):
            return await self._fetch(location)
        try:
            return Path(location).read_bytes()
        except OSError as exc:
            raise SitemapFetchError(f"Failed to read sitemap file: {location} ({exc})") from exc

    async def _fetch(self, url: str) -> bytes:
        if not self.session:
            raise RuntimeError("Session not initialized")
        try:
            async with self.session.get(url, allow_redirects=True) as resp:
                if resp.status >= 400:
                    raise SitemapFetchError(f"Failed to fetch sitemap URL {url}: HTTP={resp.status}")
                return await resp.read()
        except (ClientError, asyncio.TimeoutError) as exc:
            raise SitemapFetchError(f"Failed to fetch sitemap URL {url}: {describe_error(exc)}") from exc


async def resolve_sitemap(
    location: str, user_agent: Optional[str] = None, timeout: float = 30.0
) -> List[str]:
    """Короткий вызов: открыть resolver, разобрать *location* и закрыть сессию."""
    async with SitemapResolver(user_agent=user_agent, timeout=timeout) as resolver:
        return await resolver.resolve(location)
