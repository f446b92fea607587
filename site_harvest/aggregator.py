# File: site_harvest/aggregator.py
"""site_harvest.aggregator: the combined document of one crawl session."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from site_harvest.crawler.models import (
    CONTENT_FIELDS,
    Article,
    Form,
    Heading,
    Link,
    ListBlock,
    PageRecord,
    Section,
    Span,
    Table,
    ThemeRecord,
    UrlSource,
)
from site_harvest.utils import url_key, utc_timestamp

SCRAPING_METHOD = "enhanced"


@dataclass(frozen=True, slots=True)
class AdditionalUrl:
    """Provenance of one merged additional page."""

    url: str
    source: UrlSource
    title: str
    timestamp: str


@dataclass(slots=True)
class CombinedDocument:
    """Root page fields with content lists extended by merged additional pages.

    Scalars (``url``, ``title``, ``description``, ...) always come from the
    root page. Merges only append, in the order they happen.
    """

    url: str
    title: str
    description: str = ""
    keywords: str = ""
    author: str = ""

    headings: List[Heading] = field(default_factory=list)
    paragraphs: List[str] = field(default_factory=list)
    lists: List[ListBlock] = field(default_factory=list)
    tables: List[Table] = field(default_factory=list)
    links: List[Link] = field(default_factory=list)
    articles: List[Article] = field(default_factory=list)
    sections: List[Section] = field(default_factory=list)
    spans: List[Span] = field(default_factory=list)
    forms: List[Form] = field(default_factory=list)

    additional_urls: List[AdditionalUrl] = field(default_factory=list)
    internal_links_found: int = 0
    stored_internal_links: List[str] = field(default_factory=list)
    theme: Optional[ThemeRecord] = None
    scraping_method: str = SCRAPING_METHOD
    timestamp: str = ""

    @property
    def total_urls_scraped(self) -> int:
        return 1 + len(self.additional_urls)

    @classmethod
    def from_root(
        cls,
        page: PageRecord,
        *,
        theme: Optional[ThemeRecord] = None,
        internal_links: Iterable[str] = (),
        timestamp: Optional[str] = None,
    ) -> "CombinedDocument":
        stored = list(internal_links)
        doc = cls(
            url=page.url,
            title=page.title,
            description=page.description,
            keywords=page.keywords,
            author=page.author,
            internal_links_found=len(stored),
            stored_internal_links=stored,
            theme=theme,
            timestamp=timestamp or utc_timestamp(),
        )
        for name in CONTENT_FIELDS:
            getattr(doc, name).extend(getattr(page, name))
        return doc

    def merged_keys(self) -> Set[str]:
        """Keys of the root URL and every merged additional URL."""
        return {url_key(self.url), *(url_key(a.url) for a in self.additional_urls)}

    def merge(self, page: PageRecord, source: UrlSource, timestamp: Optional[str] = None) -> AdditionalUrl:
        """Append *page*'s content lists and record its provenance.

        Raises:
            ValueError: *page* is the root page or was already merged.
        """
        if url_key(page.url) in self.merged_keys():
            raise ValueError(f"{page.url} is already part of the document")
        for name in CONTENT_FIELDS:
            getattr(self, name).extend(getattr(page, name))
        entry = AdditionalUrl(
            url=page.url,
            source=UrlSource(source),
            title=page.title,
            timestamp=timestamp or utc_timestamp(),
        )
        self.additional_urls.append(entry)
        return entry

    def content_counts(self) -> Dict[str, int]:
        return {name: len(getattr(self, name)) for name in CONTENT_FIELDS}

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["additional_urls"] = [
            {**entry, "source": UrlSource(entry["source"]).value} for entry in data["additional_urls"]
        ]
        data["total_urls_scraped"] = self.total_urls_scraped
        return data

    def json(self, *, pretty: bool = False) -> str:
        """JSON representation of the document."""
        return json.dumps(self.as_dict(), ensure_ascii=False, indent=2 if pretty else None)
