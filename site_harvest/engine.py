# File: site_harvest/engine.py
"""site_harvest.engine: session runner with timeout, notification and storage."""

from __future__ import annotations

import asyncio
from typing import Optional

from aiohttp import ClientSession

from site_harvest.aggregator import CombinedDocument
from site_harvest.collaborators import (
    DocumentStorage,
    FailureSummary,
    Notifier,
    StoredDocument,
    SuccessSummary,
)
from site_harvest.config import CrawlerConfig
from site_harvest.crawler.crawler import CrawlOrchestrator
from site_harvest.crawler.errors import CrawlError, FetchError, FetchErrorKind
from site_harvest.crawler.fetcher import PageFetcher
from site_harvest.crawler.models import ThemeRecord
from site_harvest.logger import logger
from site_harvest.theme.extractor import ThemeExtractor
from site_harvest.utils import utc_timestamp

__all__ = ["Engine", "run_crawl", "fetch_theme"]


class Engine:
    """Facade for the CLI and library callers: one crawl session per call."""

    def __init__(
        self,
        config: Optional[CrawlerConfig] = None,
        notifier: Optional[Notifier] = None,
        storage: Optional[DocumentStorage] = None,
    ) -> None:
        self.config = config or CrawlerConfig()
        self.notifier = notifier
        self.storage = storage

    async def run(self, root_url: str) -> CombinedDocument:
        """Crawl *root_url*, bounded by ``session_timeout`` when configured.

        The notifier is called exactly once per session.

        Raises:
            CrawlError: the root page failed or the session timed out.
        """
        try:
            document = await self._run_session(root_url)
        except CrawlError as exc:
            self._notify_failure(root_url, str(exc))
            raise
        self._notify_success(document)
        return document

    def start_crawl(self, root_url: str) -> CombinedDocument:
        """Synchronous wrapper around :meth:`run`."""
        return asyncio.run(self.run(root_url))

    def store(self, document: CombinedDocument, owner_id: str) -> Optional[StoredDocument]:
        """Hand *document* to the storage collaborator, if one is configured."""
        if self.storage is None:
            return None
        stored = self.storage.save(document, owner_id)
        logger.info("Stored %s as %s (%s)", document.url, stored.document_id, stored.display_name)
        return stored

    async def _run_session(self, root_url: str) -> CombinedDocument:
        async def _runner() -> CombinedDocument:
            async with CrawlOrchestrator(self.config) as orchestrator:
                return await orchestrator.crawl(root_url)

        timeout = self.config.session_timeout
        if timeout is None:
            return await _runner()
        try:
            return await asyncio.wait_for(_runner(), timeout=timeout)
        except asyncio.TimeoutError as exc:
            logger.error("Crawl of %s did not finish within %s seconds", root_url, timeout)
            raise CrawlError(
                FetchErrorKind.TIMEOUT,
                root_url,
                f"Crawl of {root_url} did not finish within {timeout} seconds",
            ) from exc

    def _notify_success(self, document: CombinedDocument) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify_success(SuccessSummary.from_document(document))
        except Exception as exc:  # noqa: BLE001
            logger.warning("Notifier failed for %s: %s", document.url, exc)

    def _notify_failure(self, root_url: str, error: str) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify_failure(FailureSummary(url=root_url, error=error, timestamp=utc_timestamp()))
        except Exception as exc:  # noqa: BLE001
            logger.warning("Notifier failed for %s: %s", root_url, exc)


async def run_crawl(
    root_url: str,
    config: Optional[CrawlerConfig] = None,
    notifier: Optional[Notifier] = None,
) -> CombinedDocument:
    """Library entry point: crawl *root_url* and return the combined document.

    Raises:
        CrawlError: the root page failed or the session timed out.
    """
    return await Engine(config, notifier=notifier).run(root_url)


async def fetch_theme(root_url: str, config: Optional[CrawlerConfig] = None) -> ThemeRecord:
    """Fetch only *root_url* and extract its theme.

    Raises:
        CrawlError: the page could not be fetched.
    """
    config = config or CrawlerConfig()
    async with ClientSession(raise_for_status=False) as session:
        try:
            raw = await PageFetcher(session, config).fetch(root_url)
        except FetchError as exc:
            raise CrawlError.from_fetch_error(exc) from exc
    return ThemeExtractor.from_config(config).extract_theme(raw.content, base_url=root_url)
