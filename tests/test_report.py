# File: tests/test_report.py
import json

import pytest

from site_harvest.aggregator import CombinedDocument
from site_harvest.crawler.models import (
    DEFAULT_PALETTE,
    Article,
    Heading,
    Link,
    ListBlock,
    PageRecord,
    Section,
    Table,
    TableCell,
    ThemeColors,
    ThemeRecord,
    UrlSource,
)
from site_harvest.report.context import build_context, question_keywords, relevant_content
from site_harvest.report.html_report import render_html, report_colors
from site_harvest.report.json_report import JsonFileStorage, render_json


@pytest.fixture()
def document() -> CombinedDocument:
    root = PageRecord(
        url="https://shop.example/",
        title="Shop",
        description="Garden tools shop",
        author="Shop Team",
        headings=(Heading("h1", "Welcome"), Heading("h2", "Offers")),
        paragraphs=("We sell garden tools and seeds for every season.",),
        lists=(ListBlock("ul", ("Free delivery over 50", "Returns within 30 days")),),
        tables=(
            Table(
                headers=("Product", "Price"),
                rows=((TableCell("Rake"), TableCell("12")), (TableCell("Shovel"), TableCell("20"))),
                caption="Prices",
            ),
        ),
        links=(Link("https://shop.example/delivery", "Delivery", "Delivery terms"),),
        articles=(Article("Spring news", "New seeds arrived for the spring season."),),
        sections=(Section("About", "Family business since 1990."),),
    )
    doc = CombinedDocument.from_root(
        root,
        theme=ThemeRecord(colors=ThemeColors(primary="#2e7d32", link="#2e7d32"), extracted=True),
        timestamp="2024-05-01T10:00:00+00:00",
    )
    doc.merge(
        PageRecord(url="https://shop.example/delivery", title="Delivery", paragraphs=("Delivery takes two days.",)),
        UrlSource.INTERNAL_LINKS,
        "2024-05-01T10:00:05+00:00",
    )
    return doc


def test_build_context_sections(document):
    text = build_context(document)

    assert text.startswith("Website URL: https://shop.example/\n")
    assert "Page Title: Shop" in text
    assert "Description: Garden tools shop" in text
    assert "Author: Shop Team" in text
    assert "Keywords:" not in text
    assert "Article 1: Spring news" in text
    assert "Section: About" in text
    assert "H1: Welcome\nH2: Offers\n" in text
    assert "Caption: Prices\nHeaders: Product | Price\nRake | 12\nShovel | 20\n" in text
    assert "UL List 1:\n- Free delivery over 50\n" in text
    assert "Delivery takes two days." in text
    assert "- [Delivery](https://shop.example/delivery) (Delivery terms)" in text
    assert "Question:" not in text
    assert text.index("Articles:") < text.index("Page Structure") < text.index("Tables:") < text.index("Page Content:")


def test_build_context_with_question(document):
    text = build_context(document, "Where is delivery?")
    assert text.endswith("Question: Where is delivery?\n")


def test_question_keywords():
    assert question_keywords("What is the price of a rake?") == ["price"]
    assert question_keywords("How long does delivery take") == ["long", "delivery", "take"]


def test_relevant_content_ranks_by_keyword_hits(document):
    snippets = relevant_content(document, "seeds for the spring season")

    assert snippets[0] == "Spring news: New seeds arrived for the spring season."
    assert "We sell garden tools and seeds for every season." in snippets
    assert all("Rake" not in s for s in snippets)


def test_relevant_content_includes_tables_and_lists(document):
    snippets = relevant_content(document, "shovel delivery")
    assert "Table data: Shovel 20" in snippets
    assert "ul item: Free delivery over 50" in snippets
    assert relevant_content(document, "shovel delivery", limit=1) == snippets[:1]


def test_report_colors_fallback(document):
    assert report_colors(document).background is None
    colors = report_colors(document, DEFAULT_PALETTE)
    assert colors.primary == "#2e7d32"
    assert colors.background == "#ffffff"


def test_render_html_packaged_template(document, tmp_path):
    path = render_html(document, output_path=tmp_path / "out" / "report.html")

    html = path.read_text(encoding="utf-8")
    assert path.exists()
    assert "<h1>Shop</h1>" in html
    assert "#2e7d32" in html
    assert "https://shop.example/delivery" in html
    assert "internal links" in html
    assert "Shovel" in html


def test_render_html_escapes_content(tmp_path):
    doc = CombinedDocument.from_root(PageRecord(url="https://x.example/", title="<script>alert(1)</script>"))
    html = render_html(doc, output_path=tmp_path / "r.html").read_text(encoding="utf-8")
    assert "<script>alert(1)</script>" not in html
    assert "No brand colours extracted." in html


def test_render_html_custom_template(document, tmp_path):
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "report.html.j2").write_text(
        "{{ document.title }}|{{ total_urls_scraped }}|{{ colors.background }}", encoding="utf-8"
    )

    path = render_html(document, templates, tmp_path / "custom.html", fallback_palette={"background": "#fafafa"})

    assert path.read_text(encoding="utf-8") == "Shop|2|#fafafa"


def test_render_json(document, tmp_path):
    path = render_json(document, tmp_path / "nested" / "doc.json", pretty=False)
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["url"] == "https://shop.example/"
    assert data["total_urls_scraped"] == 2
    assert data["additional_urls"][0]["source"] == "internal links"
    assert data["theme"]["colors"]["primary"] == "#2e7d32"


def test_json_file_storage_display_name(document, tmp_path):
    stored = JsonFileStorage(tmp_path).save(document, "owner-7")
    assert stored.display_name == "Shop"
    payload = json.loads((tmp_path / f"{stored.document_id}.json").read_text(encoding="utf-8"))
    assert payload["document_id"] == stored.document_id
    assert payload["document"]["title"] == "Shop"
