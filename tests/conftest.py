# File: tests/conftest.py
from collections.abc import AsyncIterator, Awaitable, Callable
from pathlib import Path

import pytest
import pytest_asyncio
from aiohttp import web

from csp_scout.config import ScannerConfig
from csp_scout.crawler.models import FetchResult

URLSET_TEMPLATE = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{entries}</urlset>'
)
INDEX_TEMPLATE = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{entries}</sitemapindex>'
)


def urlset(*locs: str) -> str:
    """Build a <urlset> document with one <url><loc> per argument."""
    return URLSET_TEMPLATE.format(entries="".join(f"<url><loc>{loc}</loc></url>" for loc in locs))


def sitemap_index(*locs: str) -> str:
    """Build a <sitemapindex> document with one <sitemap><loc> per argument."""
    return INDEX_TEMPLATE.format(
        entries="".join(f"<sitemap><loc>{loc}</loc></sitemap>" for loc in locs)
    )


@pytest.fixture()
def make_urlset() -> Callable[..., str]:
    return urlset


@pytest.fixture()
def make_index() -> Callable[..., str]:
    return sitemap_index


@pytest.fixture()
def write_sitemap(tmp_path) -> Callable[[str, str], Path]:
    """Write sitemap XML into tmp_path and return the file path."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def basic_config(tmp_path) -> ScannerConfig:
    """
    Return a basic valid ScannerConfig for engine tests.
    """
    return ScannerConfig(
        sitemap=str(tmp_path / "sitemap.xml"),
        out_dir=tmp_path / "out",
        concurrency=2,
        timeout=2,
        user_agent="TestAgent/1.0",
    )


@pytest.fixture()
def ok_page() -> Callable[..., FetchResult]:
    """Factory for successful FetchResult objects."""

    def _make(url: str, html: str, status: int = 200) -> FetchResult:
        return FetchResult(url=url, status=status, body=html)

    return _make


@pytest_asyncio.fixture
async def serve(unused_tcp_port_factory) -> AsyncIterator[Callable[[web.Application], Awaitable[str]]]:
    """Start aiohttp applications on free ports; yields a starter returning the base URL."""
    runners: list[web.AppRunner] = []

    async def _start(app: web.Application) -> str:
        runner = web.AppRunner(app)
        await runner.setup()
        port = unused_tcp_port_factory()
        site = web.TCPSite(runner, "localhost", port)
        await site.start()
        runners.append(runner)
        return f"http://localhost:{port}"

    try:
        yield _start
    finally:
        for runner in runners:
            await runner.cleanup()
