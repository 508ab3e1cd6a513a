# csp_scout/crawler/models.py
"""
Data models shared by the fetcher, the resource extractor and the aggregator.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from csp_scout.policy import ResourceCategory


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Outcome of a single GET: status 0 and ``error`` set on transport failure."""

    url: str
    status: int
    body: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 400 and bool(self.body)


@dataclass(frozen=True, slots=True)
class ResourceReference:
    """Raw attribute value found on a DOM node, before normalization."""

    category: ResourceCategory
    raw_url: str


@dataclass(frozen=True, slots=True)
class ResolvedReference:
    """Reference resolved against the page URL."""

    category: ResourceCategory
    url: str
