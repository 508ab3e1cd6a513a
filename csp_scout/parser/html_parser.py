# === FILE: csp_scout/parser/html_parser.py ===
"""HTML resource extraction for CSP Scout.

:func:`extract_resources` walks a parsed page and returns every reference to
a resource the browser would load from markup alone, tagged with the
:class:`~csp_scout.policy.ResourceCategory` that later decides the CSP
directive:

* ``<script src>``, ``<link href>`` (by ``rel`` and ``as="font"``),
* ``<img src>`` and every ``srcset`` candidate,
* ``<iframe src>``, ``<audio>/<video>/<source src>``,
* ``<object data>`` and ``<embed src>``.

Values are resolved against the page URL right away; values that cannot be
resolved are dropped. Nothing is deduplicated here, the aggregator counts
every reference.

Markup from the open web is often broken, so parsing never raises: if
BeautifulSoup rejects a document the page simply yields no references.
"""
from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any

from bs4 import BeautifulSoup, ParserRejectedMarkup
from bs4.element import Tag

from csp_scout.crawler.models import ResolvedReference, ResourceReference
from csp_scout.logger import logger
from csp_scout.policy import ResourceCategory
from csp_scout.utils import normalize_url

__all__: Sequence[str] = ("extract_resources", "iter_references", "srcset_urls")

_MEDIA_TAGS = ["audio", "video", "source"]


def _attr(tag: Any, name: str) -> str:
    """Attribute value as a plain string (multi-valued attributes are joined)."""
    if not isinstance(tag, Tag):
        return ""
    value = tag.get(name)
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(value)
    return str(value)


def srcset_urls(srcset: str) -> list[str]:
    """URL part of each comma-separated ``srcset`` candidate."""
    urls: list[str] = []
    for candidate in srcset.split(","):
        parts = candidate.split()
        urls.append(parts[0] if parts else "")
    return urls


def _link_category(rel: str) -> ResourceCategory:
    if "stylesheet" in rel:
        return ResourceCategory.STYLE
    if "manifest" in rel:
        return ResourceCategory.MANIFEST
    return ResourceCategory.LINK_OTHER


def iter_references(soup: BeautifulSoup) -> Iterator[ResourceReference]:
    """Yield raw references in a fixed selector order (scripts first, fonts last)."""
    for tag in soup.find_all("script", src=True):
        yield ResourceReference(ResourceCategory.SCRIPT, _attr(tag, "src"))

    for tag in soup.find_all("link", href=True):
        rel = _attr(tag, "rel").strip().lower()
        yield ResourceReference(_link_category(rel), _attr(tag, "href"))

    for tag in soup.find_all("img", src=True):
        yield ResourceReference(ResourceCategory.IMG, _attr(tag, "src"))
    for tag in soup.find_all("img", srcset=True):
        for url in srcset_urls(_attr(tag, "srcset")):
            yield ResourceReference(ResourceCategory.IMG, url)

    for tag in soup.find_all("iframe", src=True):
        yield ResourceReference(ResourceCategory.FRAME, _attr(tag, "src"))

    for tag in soup.find_all(_MEDIA_TAGS, src=True):
        yield ResourceReference(ResourceCategory.MEDIA, _attr(tag, "src"))

    for tag in soup.find_all("object", data=True):
        yield ResourceReference(ResourceCategory.OBJECT, _attr(tag, "data"))
    for tag in soup.find_all("embed", src=True):
        yield ResourceReference(ResourceCategory.OBJECT, _attr(tag, "src"))

    # <link rel="preload" as="font"> also counts towards font-src
    for tag in soup.find_all("link", href=True):
        if _attr(tag, "as").strip().lower() == "font":
            yield ResourceReference(ResourceCategory.FONT, _attr(tag, "href"))


def extract_resources(page_url: str, html: str) -> list[ResolvedReference]:
    """Parse *html* fetched from *page_url* and return resolved references.

    Parameters
    ----------
    page_url
        URL the page was requested from; relative values resolve against it.
    html
        Raw markup. Malformed documents give partial or empty results.
    """
    try:
        soup = BeautifulSoup(html, "html.parser")
    except ParserRejectedMarkup as exc:
        logger.debug("Markup of %s rejected by parser: %s", page_url, exc)
        return []

    resolved: list[ResolvedReference] = []
    for ref in iter_references(soup):
        url = normalize_url(page_url, ref.raw_url)
        if url is not None:
            resolved.append(ResolvedReference(ref.category, url))
    logger.debug("Extracted %d references from %s", len(resolved), page_url)
    return resolved
