# File: csp_scout/parser/sitemap_parser.py
"""csp_scout.parser.sitemap_parser: Модуль для парсинга sitemap.xml и извлечения <loc>."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Union

from lxml import etree

from csp_scout.exceptions import SitemapParseError

__all__ = ("URLSET", "SITEMAPINDEX", "SitemapDocument", "parse_sitemap")

URLSET = "urlset"
SITEMAPINDEX = "sitemapindex"

# Дочерний элемент, содержащий <loc>, для каждого типа корня.
_ENTRY_TAGS = {URLSET: "url", SITEMAPINDEX: "sitemap"}


@dataclass(slots=True)
class SitemapDocument:
    """Разобранный sitemap: тип корня и значения <loc> в порядке следования."""

    kind: str
    locations: List[str]

    @property
    def is_index(self) -> bool:
        return self.kind == SITEMAPINDEX


def parse_sitemap(xml_content: Union[str, bytes]) -> SitemapDocument:
    """Разбирает XML sitemap и возвращает :class:`SitemapDocument`.

    Args:
        xml_content: содержимое sitemap.xml (str или bytes).

    Raises:
        SitemapParseError: XML некорректен или корень не ``urlset``/``sitemapindex``.

    Пример:
    ```python
    from csp_scout.parser.sitemap_parser import parse_sitemap

    with open('sitemap.xml', 'rb') as f:
        doc = parse_sitemap(f.read())
    print(doc.kind, doc.locations)
    ```
    """
    if isinstance(xml_content, str):
        xml_content = xml_content.encode("utf-8")

    parser = etree.XMLParser(ns_clean=True, resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(xml_content, parser=parser)
    except (etree.XMLSyntaxError, ValueError) as exc:
        raise SitemapParseError(f"Invalid sitemap XML: {exc}") from exc
    if root is None:
        raise SitemapParseError("Invalid sitemap XML: empty document")

    kind = etree.QName(root).localname
    if kind not in _ENTRY_TAGS:
        raise SitemapParseError(f"Unexpected sitemap root element <{kind}>")

    locs = root.findall(f"{{*}}{_ENTRY_TAGS[kind]}/{{*}}loc")
    locations = [loc.text.strip() for loc in locs if loc.text and loc.text.strip()]
    return SitemapDocument(kind=kind, locations=locations)
