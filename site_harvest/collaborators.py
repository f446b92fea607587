# File: site_harvest/collaborators.py
"""site_harvest.collaborators: notifier and storage interfaces used by the engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol, runtime_checkable

from site_harvest.aggregator import CombinedDocument
from site_harvest.crawler.models import ThemeRecord
from site_harvest.logger import logger
from site_harvest.utils import utc_timestamp

__all__ = [
    "SuccessSummary",
    "FailureSummary",
    "StoredDocument",
    "Notifier",
    "DocumentStorage",
    "LoggingNotifier",
]

_SUMMARY_COUNTS = ("headings", "paragraphs", "links", "lists", "tables", "articles", "sections")


@dataclass(frozen=True, slots=True)
class SuccessSummary:
    """Outcome of a successful crawl session."""

    url: str
    title: str
    timestamp: str
    counts: Dict[str, int] = field(default_factory=dict)
    total_urls_scraped: int = 1
    scraping_method: str = "enhanced"
    theme: Optional[ThemeRecord] = None

    @classmethod
    def from_document(cls, document: CombinedDocument) -> "SuccessSummary":
        return cls(
            url=document.url,
            title=document.title,
            timestamp=utc_timestamp(),
            counts={name: len(getattr(document, name)) for name in _SUMMARY_COUNTS},
            total_urls_scraped=document.total_urls_scraped,
            scraping_method=document.scraping_method,
            theme=document.theme,
        )


@dataclass(frozen=True, slots=True)
class FailureSummary:
    url: str
    error: str
    timestamp: str


@dataclass(frozen=True, slots=True)
class StoredDocument:
    document_id: str
    display_name: str


@runtime_checkable
class Notifier(Protocol):
    def notify_success(self, summary: SuccessSummary) -> None: ...

    def notify_failure(self, summary: FailureSummary) -> None: ...


@runtime_checkable
class DocumentStorage(Protocol):
    def save(self, document: CombinedDocument, owner_id: str) -> StoredDocument: ...


class LoggingNotifier:
    """Notifier that writes session outcomes to the project logger."""

    def notify_success(self, summary: SuccessSummary) -> None:
        counts = ", ".join(f"{k}={v}" for k, v in summary.counts.items())
        logger.info(
            "Crawl succeeded: %s (%s), %d URLs scraped [%s]",
            summary.url,
            summary.title,
            summary.total_urls_scraped,
            counts,
        )

    def notify_failure(self, summary: FailureSummary) -> None:
        logger.error("Crawl failed: %s: %s", summary.url, summary.error)
