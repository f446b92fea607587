# site_harvest/crawler/discovery.py
"""
URL discovery strategies: nested sitemap traversal, robots.txt and internal
links of the root page.

Every strategy returns same-host :class:`DiscoveredURL` records tagged with
their source, in discovery order, skipping URLs whose
key is in the caller's *exclude* set (the session's scraped-URL set). A
failing sitemap or robots.txt request only makes its strategy come back
empty.
"""
from __future__ import annotations

from typing import AbstractSet, Dict, Iterable, List, Optional, Set

from site_harvest.config import CrawlerConfig
from site_harvest.crawler.errors import FetchError
from site_harvest.crawler.fetcher import PageFetcher
from site_harvest.crawler.link_extractor import extract_internal_links
from site_harvest.crawler.models import DiscoveredURL, Link, UrlSource
from site_harvest.logger import logger
from site_harvest.parser.robots_parser import parse_robots
from site_harvest.parser.sitemap_parser import parse_sitemap
from site_harvest.utils import url_key


class _Collector:
    """Ordered, deduplicated URL accumulator of one discovery call."""

    def __init__(self, exclude: AbstractSet[str], limit: int, source: UrlSource) -> None:
        self._exclude = exclude
        self._urls: Dict[str, DiscoveredURL] = {}
        self.limit = limit
        self.source = source

    def add_all(self, urls: Iterable[str]) -> None:
        for url in urls:
            key = url_key(url)
            if key not in self._exclude and key not in self._urls:
                self._urls[key] = DiscoveredURL(url, self.source)

    @property
    def full(self) -> bool:
        return len(self._urls) >= self.limit

    def __len__(self) -> int:
        return len(self._urls)

    def discovered(self) -> List[DiscoveredURL]:
        return list(self._urls.values())


class UrlDiscovery:
    """Candidate additional URLs for one crawl session."""

    def __init__(self, fetcher: PageFetcher, config: CrawlerConfig) -> None:
        self.fetcher = fetcher
        self.config = config

    # ------------------------------------------------------------------ #
    # Strategy 1: sitemaps                                               #
    # ------------------------------------------------------------------ #

    async def sitemap_urls(self, domain: str, exclude: AbstractSet[str] = frozenset()) -> List[DiscoveredURL]:
        """Probe the well-known sitemap locations and traverse nested indexes.

        Probing stops at the first location that yields URLs.
        """
        collector = _Collector(exclude, self.config.max_additional_urls, UrlSource.SITEMAP)
        seen: Set[str] = set()
        for path in self.config.sitemap_paths:
            sitemap_url = f"{domain}{path}"
            await self._traverse(sitemap_url, domain, 0, collector, seen)
            if len(collector):
                break
        found = collector.discovered()
        logger.info("Sitemaps of %s: %d unique URLs", domain, len(found))
        return found

    async def _traverse(
        self,
        sitemap_url: str,
        domain: str,
        depth: int,
        collector: _Collector,
        seen: Set[str],
    ) -> None:
        key = url_key(sitemap_url)
        if depth > self.config.sitemap_max_depth or key in seen:
            return
        seen.add(key)

        logger.debug("Checking sitemap (depth %d): %s", depth, sitemap_url)
        text = await self._fetch_document(sitemap_url)
        if text is None:
            return

        entries = parse_sitemap(text, domain)
        collector.add_all(entries.urls)
        logger.debug(
            "Parsed sitemap %s: %d URLs, %d nested sitemaps",
            sitemap_url,
            len(entries.urls),
            len(entries.nested_sitemaps),
        )

        if depth >= self.config.sitemap_max_depth:
            if entries.nested_sitemaps:
                logger.info("Max sitemap depth (%d) reached at %s", self.config.sitemap_max_depth, sitemap_url)
            return
        for nested in entries.nested_sitemaps:
            if collector.full:
                logger.info("Reached URL limit (%d), stopping sitemap traversal", collector.limit)
                break
            await self._traverse(nested, domain, depth + 1, collector, seen)

    # ------------------------------------------------------------------ #
    # Strategy 2: robots.txt                                             #
    # ------------------------------------------------------------------ #

    async def robots_urls(
        self,
        domain: str,
        exclude: AbstractSet[str] = frozenset(),
        follow_sitemaps: bool = True,
    ) -> List[DiscoveredURL]:
        """``Allow:`` URLs of robots.txt, then URLs of its ``Sitemap:`` entries.

        Sitemaps announced in robots.txt are traversed only when
        *follow_sitemaps* is set.
        """
        robots_url = f"{domain}/robots.txt"
        text = await self._fetch_document(robots_url)
        if text is None:
            logger.info("robots.txt not found or not accessible: %s", robots_url)
            return []

        directives = parse_robots(text, domain)
        collector = _Collector(exclude, self.config.max_additional_urls, UrlSource.ROBOTS)
        collector.add_all(directives.allowed_urls)
        logger.info("robots.txt of %s: %d Allow URLs, %d sitemaps", domain, len(collector), len(directives.sitemaps))

        if follow_sitemaps:
            seen: Set[str] = set()
            for sitemap_url in directives.sitemaps:
                if collector.full:
                    logger.info("Reached URL limit (%d) from robots.txt sitemaps", collector.limit)
                    break
                await self._traverse(sitemap_url, domain, 0, collector, seen)
        return collector.discovered()

    # ------------------------------------------------------------------ #
    # Strategy 3: internal links                                         #
    # ------------------------------------------------------------------ #

    @staticmethod
    def internal_links(links: Iterable[Link], domain: str) -> List[DiscoveredURL]:
        """Same-host URLs among the root page's links."""
        return [DiscoveredURL(url, UrlSource.INTERNAL_LINKS) for url in extract_internal_links(links, domain)]

    async def _fetch_document(self, url: str) -> Optional[str]:
        try:
            return await self.fetcher.fetch_resource(url)
        except FetchError as exc:
            logger.debug("Discovery request failed: %s", exc)
            return None
