# File: csp_scout/aggregator.py
"""csp_scout.aggregator: Агрегация результатов обхода в постраничный и доменный CSP-отчёт."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from csp_scout.crawler.models import FetchResult, ResolvedReference
from csp_scout.logger import logger
from csp_scout.parser.html_parser import extract_resources
from csp_scout.policy import classify, is_external
from csp_scout.utils import BLOB_TOKEN, DATA_TOKEN, host_token

__all__ = (
    "SAMPLE_PAGES_LIMIT",
    "STATUS_OK",
    "STATUS_ERROR",
    "PageFinding",
    "DomainSummaryEntry",
    "CspReport",
    "Aggregator",
)

SAMPLE_PAGES_LIMIT = 5
STATUS_OK = "ok"
STATUS_ERROR = "error"

Extractor = Callable[[str, str], List[ResolvedReference]]


@dataclass(slots=True)
class PageFinding:
    """Итог по одной странице: статус загрузки и внешние домены по директивам."""

    page_url: str
    status: str
    http_code: int
    error: Optional[str] = None
    directive_domains: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    def add(self, directive: str, token: str) -> None:
        tokens = self.directive_domains.setdefault(directive, [])
        if token not in tokens:
            tokens.append(token)

    def to_dict(self) -> Dict[str, Any]:
        fetch: Dict[str, Any] = {"status": self.status, "http_code": self.http_code}
        if not self.ok:
            fetch["error"] = self.error
        return {"_fetch": fetch, **{d: list(t) for d, t in self.directive_domains.items()}}


@dataclass(slots=True)
class DomainSummaryEntry:
    """Счётчик ссылок на источник в рамках директивы и примеры страниц."""

    directive: str
    token: str
    count: int = 0
    sample_pages: List[str] = field(default_factory=list)

    @property
    def source_type(self) -> str:
        return "scheme" if self.token in (DATA_TOKEN, BLOB_TOKEN) else "domain"

    def to_dict(self) -> Dict[str, Any]:
        return {"count": self.count, "pages": list(self.sample_pages)}


@dataclass(slots=True)
class CspReport:
    """Итоговый отчёт, передаваемый генераторам JSON/CSV/HTML."""

    sitemap: str
    total_urls: int
    generated_at: str
    page_findings: Dict[str, PageFinding] = field(default_factory=dict)
    domain_summary: Dict[str, Dict[str, DomainSummaryEntry]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated_at": self.generated_at,
            "sitemap": self.sitemap,
            "total_urls": self.total_urls,
            "domain_summary": {
                directive: {token: entry.to_dict() for token, entry in entries.items()}
                for directive, entries in self.domain_summary.items()
            },
            "page_findings": {url: f.to_dict() for url, f in self.page_findings.items()},
        }

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление отчёта."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)

    def sorted_summary(self, directive: str) -> List[DomainSummaryEntry]:
        """Записи директивы по убыванию count (при равенстве – в порядке появления)."""
        return sorted(self.domain_summary.get(directive, {}).values(), key=lambda e: -e.count)


class Aggregator:
    """
    Накопитель результатов обхода.

    Страницы добавляются по одной; единственный писатель – вызывающий код,
    поэтому блокировки не нужны.
    """

    def __init__(self, sample_limit: int = SAMPLE_PAGES_LIMIT, extractor: Extractor = extract_resources) -> None:
        if sample_limit < 1:
            raise ValueError("sample_limit must be >= 1")
        self.sample_limit = sample_limit
        self._extract = extractor
        self.page_findings: Dict[str, PageFinding] = {}
        self.domain_summary: Dict[str, Dict[str, DomainSummaryEntry]] = {}

    def add_result(self, result: FetchResult) -> PageFinding:
        """Учитывает результат загрузки; при успехе извлекает ресурсы из тела страницы."""
        if not result.ok:
            finding = PageFinding(
                page_url=result.url,
                status=STATUS_ERROR,
                http_code=result.status,
                error=result.error,
            )
            self.page_findings[result.url] = finding
            logger.debug("Page %s recorded as error (HTTP %s)", result.url, result.status)
            return finding
        return self.add_references(result, self._extract(result.url, result.body or ""))

    def add_references(self, result: FetchResult, references: Sequence[ResolvedReference]) -> PageFinding:
        """Учитывает уже извлечённые ссылки успешно загруженной страницы."""
        page_url = result.url
        finding = PageFinding(page_url=page_url, status=STATUS_OK, http_code=result.status)
        for ref in references:
            token = host_token(ref.url)
            if not is_external(page_url, ref.url, token):
                continue
            directive = classify(ref.category)
            finding.add(directive, token)
            self._count(directive, token, page_url)
        self.page_findings[page_url] = finding
        return finding

    def _count(self, directive: str, token: str, page_url: str) -> None:
        entries = self.domain_summary.setdefault(directive, {})
        entry = entries.get(token)
        if entry is None:
            entry = entries[token] = DomainSummaryEntry(directive=directive, token=token)
        entry.count += 1
        if len(entry.sample_pages) < self.sample_limit and page_url not in entry.sample_pages:
            entry.sample_pages.append(page_url)

    def build_report(self, sitemap: str, total_urls: int, generated_at: Optional[str] = None) -> CspReport:
        """Фиксирует накопленное состояние в :class:`CspReport`."""
        return CspReport(
            sitemap=sitemap,
            total_urls=total_urls,
            generated_at=generated_at or datetime.now().astimezone().isoformat(timespec="seconds"),
            page_findings=self.page_findings,
            domain_summary=self.domain_summary,
        )
