# === FILE: site_harvest/crawler/crawler.py ===
from __future__ import annotations

import asyncio
from enum import Enum
from typing import List, Optional, Set

from aiohttp import ClientSession

from site_harvest.aggregator import CombinedDocument
from site_harvest.config import CrawlerConfig
from site_harvest.crawler.discovery import UrlDiscovery
from site_harvest.crawler.errors import CrawlError, FetchError
from site_harvest.crawler.fetcher import PageFetcher
from site_harvest.crawler.models import DiscoveredURL, PageRecord
from site_harvest.logger import logger
from site_harvest.parser.html_parser import extract_page
from site_harvest.theme.extractor import ThemeExtractor
from site_harvest.utils import domain_root, same_host, url_key

__all__ = ("CrawlState", "CrawlOrchestrator")


class CrawlState(str, Enum):
    INIT = "init"
    FETCH_ROOT = "fetch_root"
    FAILED = "failed"
    DISCOVER = "discover"
    FETCH_ADDITIONAL = "fetch_additional"
    DONE = "done"


class CrawlOrchestrator:
    """
    One crawl session at a time: root page, theme, discovery and merging of
    additional same-host pages into a CombinedDocument.

    Fetches run one after another. The scraped-URL set belongs to the
    instance and is reset at the start of every :meth:`crawl`.
    """

    def __init__(self, config: Optional[CrawlerConfig] = None) -> None:
        self.config = config or CrawlerConfig()
        self.session: Optional[ClientSession] = None
        self.fetcher: Optional[PageFetcher] = None
        self.discovery: Optional[UrlDiscovery] = None
        self.theme_extractor = ThemeExtractor.from_config(self.config)
        self.state = CrawlState.INIT
        self.root_url: Optional[str] = None
        self.scraped: Set[str] = set()

    async def __aenter__(self) -> CrawlOrchestrator:
        self.session = ClientSession(raise_for_status=False)
        self.fetcher = PageFetcher(self.session, self.config)
        self.discovery = UrlDiscovery(self.fetcher, self.config)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def crawl(self, root_url: str) -> CombinedDocument:
        """Crawl *root_url* and the additional pages discovered for its host.

        Raises:
            CrawlError: the root page could not be fetched or parsed.
        """
        if self.fetcher is None or self.discovery is None:
            raise RuntimeError("Session not initialized")

        self.state = CrawlState.INIT
        self.scraped = set()
        self.root_url = root_url
        logger.info("Crawl started: %s", root_url)

        self.state = CrawlState.FETCH_ROOT
        try:
            raw = await self.fetcher.fetch(root_url)
            root = self._extract(raw.content, root_url)
        except FetchError as exc:
            self.state = CrawlState.FAILED
            logger.error("Root page failed: %s", exc)
            raise CrawlError.from_fetch_error(exc) from exc
        self.scraped.add(url_key(root_url))

        theme = self.theme_extractor.extract_theme(raw.content, base_url=root_url)
        domain = domain_root(root_url)
        internal = self.discovery.internal_links(root.links, domain)
        document = CombinedDocument.from_root(root, theme=theme, internal_links=[d.url for d in internal])

        await self._discover_and_fetch(document, domain, internal)

        self.state = CrawlState.DONE
        logger.info(
            "Crawl finished: %s, %d URLs scraped, %d internal links found",
            root_url,
            document.total_urls_scraped,
            document.internal_links_found,
        )
        return document

    async def _discover_and_fetch(
        self, document: CombinedDocument, domain: str, internal: List[DiscoveredURL]
    ) -> None:
        """Sitemaps first, topped up by robots.txt and then by internal links."""
        if self.discovery is None:
            raise RuntimeError("Session not initialized")
        target = self.config.max_additional_urls

        self.state = CrawlState.DISCOVER
        sitemap = await self.discovery.sitemap_urls(domain, exclude=self.scraped)
        if sitemap:
            await self._scrape_additional(document, sitemap, target)
        if len(document.additional_urls) >= target:
            return

        self.state = CrawlState.DISCOVER
        robots = await self.discovery.robots_urls(domain, exclude=self.scraped, follow_sitemaps=not sitemap)
        if robots:
            await self._scrape_additional(document, robots, target)
        if len(document.additional_urls) >= target:
            return

        if internal:
            logger.info("Topping up with %d internal links", len(internal))
            await self._scrape_additional(document, internal, target)

    async def _scrape_additional(
        self,
        document: CombinedDocument,
        candidates: List[DiscoveredURL],
        target: int,
    ) -> None:
        """Fetch and merge *candidates* until the document holds *target* additional pages.

        Each URL is attempted at most once per session. Failed pages are
        logged and do not count towards *target*.
        """
        if self.fetcher is None or self.root_url is None:
            raise RuntimeError("Session not initialized")
        self.state = CrawlState.FETCH_ADDITIONAL
        merged = 0
        for candidate in candidates:
            if len(document.additional_urls) >= target:
                break
            url = candidate.url
            key = url_key(url)
            if key in self.scraped or not same_host(url, self.root_url):
                continue
            self.scraped.add(key)
            try:
                raw = await self.fetcher.fetch(url)
                page = self._extract(raw.content, url)
            except FetchError as exc:
                logger.warning("Skipping %s: %s", url, exc)
                continue
            document.merge(page, candidate.source)
            merged += 1
            logger.debug("Merged %s (%s)", url, candidate.source.value)
            if self.config.courtesy_delay > 0:
                await asyncio.sleep(self.config.courtesy_delay)
        logger.info("Merged %d of %d discovered pages", merged, len(candidates))

    def _extract(self, markup: str, url: str) -> PageRecord:
        return extract_page(
            markup,
            url,
            min_paragraph_length=self.config.min_paragraph_length,
            max_paragraphs=self.config.max_paragraphs,
        )
