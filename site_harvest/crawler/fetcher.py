# site_harvest/crawler/fetcher.py
"""
Fetcher module: one HTTP GET per page with politeness delay, header fallback,
429 backoff and classified errors.
"""
from __future__ import annotations

import asyncio
import random
from typing import Mapping, Optional, Tuple

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_harvest.config import CrawlerConfig
from site_harvest.crawler.errors import FetchError, FetchErrorKind, classify_exception, classify_status
from site_harvest.crawler.models import RawPage
from site_harvest.logger import logger
from site_harvest.utils import is_http_url

_HEADER_FALLBACK_STATUS = (400, 403)


async def _pause(seconds: float) -> None:
    if seconds > 0:
        await asyncio.sleep(seconds)


def _is_success(status: int) -> bool:
    return 200 <= status < 400


class PageFetcher:
    """Fetches pages of one crawl session over a shared aiohttp session."""

    def __init__(self, session: ClientSession, config: CrawlerConfig) -> None:
        self.session = session
        self.config = config
        self._browser_headers = {"User-Agent": config.user_agent, "Accept": config.accept}
        self._timeout = ClientTimeout(total=config.request_timeout)

    async def fetch(self, url: str) -> RawPage:
        """
        Fetch *url* as a page.

        Returns RawPage on a final status in [200, 400), raises FetchError otherwise.
        """
        if not is_http_url(url):
            raise FetchError(FetchErrorKind.INVALID_URL, url)

        await self._politeness_delay()

        status, body = await self._get(url, self._browser_headers)
        if status == 429:
            logger.warning("Rate limited (429) on %s, backing off", url)
            await self._rate_limit_backoff()
            status, body = await self._get(url, self._browser_headers)
        elif status in _HEADER_FALLBACK_STATUS:
            logger.info("Browser headers rejected (%d) by %s, retrying without them", status, url)
            status, body = await self._get(url, {})

        if not _is_success(status) or body is None:
            raise FetchError(classify_status(status), url, status=status)
        logger.debug("Fetched %s (HTTP %d, %d chars)", url, status, len(body))
        return RawPage(url=url, status=status, content=body)

    async def fetch_resource(self, url: str) -> str:
        """
        Plain GET of a discovery document (sitemap, robots.txt).

        No politeness delay and no retries; anything but HTTP 200 raises FetchError.
        """
        if not is_http_url(url):
            raise FetchError(FetchErrorKind.INVALID_URL, url)
        status, body = await self._get(url, {"User-Agent": self.config.resource_user_agent})
        if status != 200 or body is None:
            raise FetchError(classify_status(status), url, status=status)
        return body

    async def _get(self, url: str, headers: Mapping[str, str]) -> Tuple[int, Optional[str]]:
        try:
            async with self.session.get(
                url,
                headers=dict(headers),
                timeout=self._timeout,
                allow_redirects=True,
                max_redirects=self.config.max_redirects,
                raise_for_status=False,
            ) as resp:
                if not _is_success(resp.status):
                    return resp.status, None
                return resp.status, await resp.text(errors="replace")
        except (ClientError, asyncio.TimeoutError) as exc:
            kind = classify_exception(exc)
            logger.debug("GET %s failed: %r", url, exc)
            raise FetchError(kind, url, detail=str(exc) or type(exc).__name__) from exc

    async def _politeness_delay(self) -> None:
        delay = random.uniform(self.config.politeness_delay_min, self.config.politeness_delay_max)
        logger.debug("Request delay: waiting %.2f s", delay)
        await _pause(delay)

    async def _rate_limit_backoff(self) -> None:
        delay = random.uniform(self.config.rate_limit_backoff_min, self.config.rate_limit_backoff_max)
        logger.info("Rate limit backoff: waiting %.2f s", delay)
        await _pause(delay)
