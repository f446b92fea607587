# File: tests/test_aggregator.py
import json

import pytest

from site_harvest.aggregator import CombinedDocument
from site_harvest.crawler.models import Heading, Link, PageRecord, ThemeRecord, UrlSource


def make_page(url: str, title: str, paragraph: str) -> PageRecord:
    return PageRecord(
        url=url,
        title=title,
        description=f"{title} description",
        headings=(Heading("h1", title),),
        paragraphs=(paragraph,),
        links=(Link(f"{url}#top", "Top"),),
    )


@pytest.fixture()
def document() -> CombinedDocument:
    root = make_page("https://example.com/", "Home", "Root paragraph with some text.")
    return CombinedDocument.from_root(
        root,
        theme=ThemeRecord(),
        internal_links=["https://example.com/a", "https://example.com/b"],
        timestamp="2024-01-01T00:00:00+00:00",
    )


def test_from_root(document):
    assert document.url == "https://example.com/"
    assert document.title == "Home"
    assert document.total_urls_scraped == 1
    assert document.internal_links_found == 2
    assert document.stored_internal_links == ["https://example.com/a", "https://example.com/b"]
    assert document.scraping_method == "enhanced"
    assert document.timestamp == "2024-01-01T00:00:00+00:00"


def test_merge_appends_and_keeps_root_scalars(document):
    extra = make_page("https://example.com/a", "Page A", "Paragraph from page A.")
    entry = document.merge(extra, UrlSource.SITEMAP, timestamp="t1")

    assert entry.url == "https://example.com/a"
    assert entry.source is UrlSource.SITEMAP
    assert entry.title == "Page A"
    assert document.title == "Home"
    assert document.description == "Home description"
    assert document.paragraphs == ["Root paragraph with some text.", "Paragraph from page A."]
    assert [h.text for h in document.headings] == ["Home", "Page A"]
    assert document.total_urls_scraped == 1 + len(document.additional_urls) == 2


def test_merge_rejects_root_and_duplicates(document):
    with pytest.raises(ValueError):
        document.merge(make_page("https://EXAMPLE.com", "Root again", "x"), UrlSource.INTERNAL_LINKS)
    document.merge(make_page("https://example.com/a", "A", "x"), UrlSource.ROBOTS)
    with pytest.raises(ValueError):
        document.merge(make_page("https://example.com/a#frag", "A", "x"), UrlSource.ROBOTS)
    assert document.total_urls_scraped == 2


def test_json_output(document):
    document.merge(make_page("https://example.com/b", "B", "Paragraph B."), UrlSource.INTERNAL_LINKS, "t2")
    data = json.loads(document.json(pretty=True))
    assert data["total_urls_scraped"] == 2
    assert data["additional_urls"] == [
        {"url": "https://example.com/b", "source": "internal links", "title": "B", "timestamp": "t2"}
    ]
    assert data["theme"]["extracted"] is False
    assert data["headings"][1] == {"level": "h1", "text": "B", "id": None}


def test_content_counts(document):
    counts = document.content_counts()
    assert counts["paragraphs"] == 1
    assert counts["links"] == 1
    assert counts["tables"] == 0
