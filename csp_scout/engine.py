# File: csp_scout/engine.py
"""csp_scout.engine: Orchestration layer – sitemap → fetch → extraction → aggregation."""

from __future__ import annotations

import asyncio
from typing import List, Optional

from csp_scout.aggregator import Aggregator, CspReport
from csp_scout.config import ScannerConfig, load_config
from csp_scout.crawler.fetcher import fetch_all
from csp_scout.crawler.sitemap import resolve_sitemap
from csp_scout.logger import logger

__all__ = ["Engine", "start_scan", "crawl_urls"]


async def crawl_urls(cfg: ScannerConfig, urls: List[str]) -> Aggregator:
    """Загружает *urls* и агрегирует результаты в порядке списка."""
    results = await fetch_all(urls, cfg.concurrency, cfg.timeout, cfg.user_agent)
    aggregator = Aggregator(sample_limit=cfg.sample_pages)
    for url in urls:
        result = results.get(url)
        if result is not None and url not in aggregator.page_findings:
            aggregator.add_result(result)
    return aggregator


async def start_scan(cfg: ScannerConfig) -> CspReport:
    """
    Полный прогон: читает sitemap, применяет limit, обходит страницы и
    возвращает CspReport. Ошибки sitemap (SitemapError) пробрасываются.
    """
    urls = await resolve_sitemap(cfg.sitemap, user_agent=cfg.user_agent, timeout=cfg.sitemap_timeout)
    total = len(urls)
    urls = cfg.apply_limit(urls)
    logger.info("URLs loaded: %d (of %d in sitemap)", len(urls), total)
    logger.info("Crawling with concurrency=%d timeout=%ss", cfg.concurrency, cfg.timeout)

    aggregator = await crawl_urls(cfg, urls)
    report = aggregator.build_report(sitemap=cfg.sitemap, total_urls=len(urls))
    logger.info(
        "Inventory ready: %d pages, %d directives",
        len(report.page_findings),
        len(report.domain_summary),
    )
    return report


class Engine:
    """Фасад для CLI и тестов: загрузка конфига и синхронный запуск сканирования."""

    @staticmethod
    def load_config(path: str) -> ScannerConfig:
        """Загружает конфиг из YAML/JSON."""
        return load_config(path)

    def __init__(self, config: ScannerConfig) -> None:
        self.config = config

    def start_scan(self, scan_timeout: Optional[float] = None) -> CspReport:
        """Запускает сканирование в новом event loop; *scan_timeout* ограничивает весь прогон."""
        logger.info("Starting scan of %s", self.config.sitemap)
        try:
            if scan_timeout:
                return asyncio.run(asyncio.wait_for(start_scan(self.config), timeout=scan_timeout))
            return asyncio.run(start_scan(self.config))
        except asyncio.TimeoutError:
            logger.error("Scanning did not finish within %s seconds", scan_timeout)
            raise
        except Exception as exc:
            logger.error("Scanning failed: %s", exc)
            raise
