# File: site_harvest/parser/sitemap_parser.py
"""site_harvest.parser.sitemap_parser: parsing of sitemap.xml and sitemap index documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from lxml import etree

from site_harvest.utils import same_host


@dataclass
class SitemapEntries:
    """Leaf page URLs and nested sitemap URLs of one sitemap document."""

    urls: List[str] = field(default_factory=list)
    nested_sitemaps: List[str] = field(default_factory=list)


def _locs(root: etree._Element, parent: str) -> List[str]:
    return [
        loc.text.strip()
        for loc in root.iterfind(f".//{{*}}{parent}/{{*}}loc")
        if loc.text and loc.text.strip()
    ]


def parse_sitemap(xml_content: str, domain: str) -> SitemapEntries:
    """Parse a sitemap or sitemap index and keep only entries on *domain*'s host.

    Args:
        xml_content: content of the sitemap document.
        domain: ``scheme://host`` of the crawl session.

    Returns:
        SitemapEntries with ``<url><loc>`` values in ``urls`` and
        ``<sitemap><loc>`` values in ``nested_sitemaps``. Unparseable content
        yields empty entries.

    Example:
    ```python
    from site_harvest.parser.sitemap_parser import parse_sitemap

    entries = parse_sitemap(xml_text, "https://example.com")
    print(entries.urls, entries.nested_sitemaps)
    ```
    """
    parser = etree.XMLParser(ns_clean=True, recover=True, resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(xml_content.encode("utf-8"), parser=parser)
    except etree.XMLSyntaxError:
        return SitemapEntries()
    if root is None:
        return SitemapEntries()

    return SitemapEntries(
        urls=[u for u in _locs(root, "url") if same_host(u, domain)],
        nested_sitemaps=[u for u in _locs(root, "sitemap") if same_host(u, domain)],
    )
