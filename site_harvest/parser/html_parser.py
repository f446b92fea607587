# === FILE: site_harvest/parser/html_parser.py ===
"""HTML content extraction for SiteHarvest.

:func:`extract_page` turns delivered markup into a frozen
:class:`~site_harvest.crawler.models.PageRecord`:

* metadata from ``<title>`` and the description/keywords/author meta tags;
* headings, paragraphs, lists, tables, links, forms;
* articles and sections, titled by their first heading;
* inline text spans (emphasis, code, marks, ...).

Scripts, styles and ad/popup/modal containers are removed first. Extraction
follows document order and uses no randomness, so the same markup always
yields an identical record.
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from bs4.element import Tag

from site_harvest.crawler.errors import FetchError, FetchErrorKind
from site_harvest.crawler.models import (
    Article,
    Form,
    FormField,
    Heading,
    Link,
    ListBlock,
    PageRecord,
    Section,
    Span,
    Table,
    TableCell,
)

__all__: Sequence[str] = ("extract_page", "DEFAULT_MIN_PARAGRAPH_LENGTH", "DEFAULT_MAX_PARAGRAPHS")

DEFAULT_MIN_PARAGRAPH_LENGTH = 20
DEFAULT_MAX_PARAGRAPHS = 100

_NOISE_SELECTOR = ".ad, .advertisement, .popup, .modal"
_PARAGRAPH_SELECTOR = "p, article, section, main, .content, .article-content, .post-content, blockquote"
_TABLE_SELECTOR = 'table, .table, .data-table, [role="table"]'
_TABLE_HEADER_SELECTOR = "thead tr th, thead tr td, tr:first-child th, tbody tr:first-child th"
_SPAN_SELECTOR = "span, em, strong, b, i, u, small, mark, del, ins, sub, sup, code, kbd, var, samp"
_HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _text(el: Tag) -> str:
    return el.get_text().strip()


def _attr(el: Tag, name: str) -> str:
    value = el.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def _span(value: str) -> int:
    value = value.strip()
    return int(value) if value.isdigit() and int(value) > 0 else 1


def _strip_noise(soup: BeautifulSoup) -> None:
    for el in [*soup(["script", "style"]), *soup.select(_NOISE_SELECTOR)]:
        if not el.decomposed:
            el.decompose()


def _meta(soup: BeautifulSoup, name: str) -> str:
    tag = soup.find("meta", attrs={"name": name})
    return _attr(tag, "content") if isinstance(tag, Tag) else ""


# ---------------------------------------------------------------------------
# Section extractors
# ---------------------------------------------------------------------------


def _extract_headings(soup: BeautifulSoup) -> List[Heading]:
    headings: List[Heading] = []
    for el in soup.find_all(_HEADING_TAGS):
        text = _text(el)
        if text:
            headings.append(Heading(level=el.name.lower(), text=text, id=el.get("id") or None))
    return headings


def _extract_paragraphs(soup: BeautifulSoup, min_length: int, limit: int) -> List[str]:
    texts = (_text(el) for el in soup.select(_PARAGRAPH_SELECTOR))
    unique = dict.fromkeys(t for t in texts if t and len(t) >= min_length)
    return list(unique)[:limit]


def _extract_lists(soup: BeautifulSoup) -> List[ListBlock]:
    lists: List[ListBlock] = []
    for el in soup.find_all(["ul", "ol", "dl"]):
        items = tuple(t for t in (_text(li) for li in el.find_all(["li", "dt", "dd"])) if t)
        if items:
            lists.append(ListBlock(kind=el.name.lower(), items=items))
    return lists


def _grid_rows(el: Tag) -> List[tuple[TableCell, ...]]:
    rows = []
    for row in el.select('.row, [role="row"]'):
        cells = tuple(
            TableCell(text=text)
            for text in (_text(c) for c in row.select('.cell, [role="cell"], .column'))
            if text
        )
        if cells:
            rows.append(cells)
    return rows


def _extract_tables(soup: BeautifulSoup) -> List[Table]:
    tables: List[Table] = []
    for el in soup.select(_TABLE_SELECTOR):
        headers = tuple(t for t in (_text(h) for h in el.select(_TABLE_HEADER_SELECTOR)) if t)

        rows: List[tuple[TableCell, ...]] = []
        for row in el.find_all("tr"):
            cells = tuple(
                TableCell(
                    text=_text(cell),
                    colspan=_span(_attr(cell, "colspan")),
                    rowspan=_span(_attr(cell, "rowspan")),
                )
                for cell in row.find_all(["td", "th"])
            )
            if cells:
                rows.append(cells)

        if "table" in (el.get("class") or []) or el.get("role") == "table":
            rows.extend(_grid_rows(el))

        if headers or rows:
            caption = el.find("caption")
            tables.append(
                Table(
                    headers=headers,
                    rows=tuple(rows),
                    caption=_text(caption) if isinstance(caption, Tag) else "",
                    class_name=_attr(el, "class"),
                )
            )
    return tables


def _absolute(base_url: str, href: str) -> Optional[str]:
    try:
        absolute = urljoin(base_url, href)
        parsed = urlparse(absolute)
    except ValueError:
        return None
    if not parsed.scheme:
        return None
    return absolute


def _extract_links(soup: BeautifulSoup, base_url: str) -> List[Link]:
    links: List[Link] = []
    for el in soup.find_all("a", href=True):
        href = _attr(el, "href").strip()
        if not href:
            continue
        absolute = _absolute(base_url, href)
        if absolute is None:
            continue
        links.append(Link(url=absolute, text=_text(el) or href, title=_attr(el, "title")))
    return links


def _extract_forms(soup: BeautifulSoup) -> List[Form]:
    forms: List[Form] = []
    for el in soup.find_all("form"):
        fields = tuple(
            FormField(
                type=_attr(field, "type") or field.name.lower(),
                name=_attr(field, "name"),
                placeholder=_attr(field, "placeholder"),
                value=_attr(field, "value") or _text(field),
            )
            for field in el.find_all(["input", "textarea", "select", "button"])
        )
        if fields:
            forms.append(Form(action=_attr(el, "action"), method=_attr(el, "method") or "get", fields=fields))
    return forms


def _extract_articles(soup: BeautifulSoup) -> List[Article]:
    articles: List[Article] = []
    for i, el in enumerate(soup.find_all("article")):
        content = _text(el)
        if not content:
            continue
        heading = el.select_one("h1, h2, h3")
        title = _text(heading) if heading is not None else ""
        articles.append(Article(title=title or f"Article {i + 1}", content=content))
    return articles


def _extract_sections(soup: BeautifulSoup) -> List[Section]:
    sections: List[Section] = []
    for i, el in enumerate(soup.find_all("section")):
        content = _text(el)
        if not content:
            continue
        heading_el = el.select_one("h1, h2, h3, h4, h5, h6")
        heading = _text(heading_el) if heading_el is not None else ""
        sections.append(Section(heading=heading or f"Section {i + 1}", content=content))
    return sections


def _extract_spans(soup: BeautifulSoup) -> List[Span]:
    spans: List[Span] = []
    for el in soup.select(_SPAN_SELECTOR):
        content = _text(el)
        class_name = _attr(el, "class")
        el_id = _attr(el, "id")
        if content or class_name or el_id:
            spans.append(Span(content=content, class_name=class_name, id=el_id, tag=el.name.lower()))
    return spans


# ---------------------------------------------------------------------------
# Public function
# ---------------------------------------------------------------------------


def extract_page(
    markup: str,
    url: str,
    *,
    min_paragraph_length: int = DEFAULT_MIN_PARAGRAPH_LENGTH,
    max_paragraphs: int = DEFAULT_MAX_PARAGRAPHS,
) -> PageRecord:
    """Parse *markup* fetched from *url* into a :class:`PageRecord`.

    Relative links are resolved against *url*. Raises
    :class:`~site_harvest.crawler.errors.FetchError` with kind
    ``PARSE_FAILURE`` when the markup cannot be parsed.
    """
    try:
        soup = BeautifulSoup(markup, "html.parser")
        _strip_noise(soup)

        title_tag = soup.find("title")
        title = _text(title_tag) if isinstance(title_tag, Tag) else ""

        return PageRecord(
            url=url,
            title=title or "No title found",
            description=_meta(soup, "description"),
            keywords=_meta(soup, "keywords"),
            author=_meta(soup, "author"),
            headings=tuple(_extract_headings(soup)),
            paragraphs=tuple(_extract_paragraphs(soup, min_paragraph_length, max_paragraphs)),
            lists=tuple(_extract_lists(soup)),
            tables=tuple(_extract_tables(soup)),
            links=tuple(_extract_links(soup, url)),
            forms=tuple(_extract_forms(soup)),
            articles=tuple(_extract_articles(soup)),
            sections=tuple(_extract_sections(soup)),
            spans=tuple(_extract_spans(soup)),
        )
    except (ParserRejectedMarkup, RecursionError, AssertionError) as exc:
        raise FetchError(FetchErrorKind.PARSE_FAILURE, url, detail=str(exc) or type(exc).__name__) from exc
