# site_harvest/crawler/link_extractor.py
"""
Internal-link harvesting from an extracted page.
"""
from __future__ import annotations

from typing import Iterable, List

from site_harvest.crawler.models import Link
from site_harvest.utils import remove_duplicates, same_host


def extract_internal_links(links: Iterable[Link], domain: str) -> List[str]:
    """
    Return the URLs of *links* that live on *domain*'s host, deduplicated.

    No further filtering: assets linked through ``<a>`` are eligible too.
    """
    return remove_duplicates(link.url for link in links if same_host(link.url, domain))
