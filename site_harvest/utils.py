# File: site_harvest/utils.py
"""site_harvest.utils: URL helpers shared by the fetcher, discovery and the orchestrator."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence
from urllib.parse import urlparse, urlunparse

from site_harvest.logger import logger

__all__: Sequence[str] = (
    "url_key",
    "is_http_url",
    "same_host",
    "extract_host",
    "domain_root",
    "remove_duplicates",
    "utc_timestamp",
)


def url_key(url: str) -> str:
    """Membership key of a URL: lowercase scheme/host, no fragment, ``/`` for an empty path."""
    parsed = urlparse(url.strip())
    path = parsed.path or "/"
    return urlunparse((parsed.scheme.lower(), parsed.netloc.lower(), path, parsed.params, parsed.query, ""))


def is_http_url(url: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def extract_host(url: str) -> Optional[str]:
    """Lowercase ``host[:port]`` of *url*, or None when it cannot be parsed."""
    try:
        netloc = urlparse(url).netloc
    except ValueError:
        return None
    return netloc.lower() or None


def same_host(url: str, reference: str) -> bool:
    """True when *url* is an http(s) URL on the same host as *reference*."""
    if not is_http_url(url):
        return False
    host = extract_host(url)
    return host is not None and host == extract_host(reference)


def domain_root(url: str) -> str:
    """``scheme://host`` of *url*; sitemap and robots.txt locations hang off it."""
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


def remove_duplicates(urls: Iterable[str]) -> List[str]:
    """Drop duplicate URLs (by :func:`url_key`), keeping first occurrences in order."""
    seen: set[str] = set()
    unique: List[str] = []
    total = 0
    for url in urls:
        total += 1
        key = url_key(url)
        if key in seen:
            continue
        seen.add(key)
        unique.append(url)
    removed = total - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat()
