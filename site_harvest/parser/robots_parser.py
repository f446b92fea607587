# File: site_harvest/parser/robots_parser.py
"""site_harvest.parser.robots_parser: candidate URLs and sitemaps announced by robots.txt."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple
from urllib.parse import urljoin

from site_harvest.utils import same_host


@dataclass
class RobotsDirectives:
    """URLs worth crawling that robots.txt reveals."""

    allowed_urls: List[str] = field(default_factory=list)
    sitemaps: List[str] = field(default_factory=list)


def parse_robots(text: str, domain: str) -> RobotsDirectives:
    """Collect ``Allow:`` paths and ``Sitemap:`` URLs of *domain*'s robots.txt.

    ``Allow: /`` and wildcard patterns are skipped, allowed paths are resolved
    against *domain*, and only same-host URLs are kept. Directives are read
    regardless of the user-agent group they appear in.
    """
    directives = RobotsDirectives()
    for key, value in _prepare_lines(text):
        if key == "sitemap":
            if value and same_host(value, domain):
                directives.sitemaps.append(value)
        elif key == "allow":
            if not value or value == "/" or "*" in value:
                continue
            url = urljoin(domain + "/", value)
            if same_host(url, domain):
                directives.allowed_urls.append(url)
    return directives


def _prepare_lines(text: str) -> List[Tuple[str, str]]:
    """Strip comments and split lines into (directive, value) pairs."""
    lines: List[Tuple[str, str]] = []
    for raw in text.splitlines():
        line = raw.split("#", 1)[0].strip()
        if not line or ":" not in line:
            continue
        key, val = (part.strip() for part in line.split(":", 1))
        lines.append((key.lower(), val))
    return lines
