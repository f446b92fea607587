# site_harvest/crawler/models.py
"""
Data models for the SiteHarvest crawler.

Page-level records are frozen: a :class:`PageRecord` is created once per
successful fetch and never changes afterwards. Optional values are ``None``
rather than missing keys.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Dict, Mapping, Optional, Tuple


class UrlSource(str, Enum):
    """Discovery strategy that produced an additional URL."""

    SITEMAP = "sitemap.xml"
    ROBOTS = "robots.txt"
    INTERNAL_LINKS = "internal links"


@dataclass(frozen=True, slots=True)
class RawPage:
    """Markup delivered by one successful GET."""

    url: str
    status: int
    content: str


@dataclass(frozen=True, slots=True)
class DiscoveredURL:
    url: str
    source: UrlSource


# --------------------------------------------------------------------------- #
# Page content                                                                #
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class Heading:
    level: str
    text: str
    id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ListBlock:
    kind: str
    items: Tuple[str, ...]


@dataclass(frozen=True, slots=True)
class TableCell:
    text: str
    colspan: int = 1
    rowspan: int = 1


@dataclass(frozen=True, slots=True)
class Table:
    headers: Tuple[str, ...]
    rows: Tuple[Tuple[TableCell, ...], ...]
    caption: str = ""
    class_name: str = ""


@dataclass(frozen=True, slots=True)
class Link:
    url: str
    text: str
    title: str = ""


@dataclass(frozen=True, slots=True)
class FormField:
    type: str
    name: str = ""
    placeholder: str = ""
    value: str = ""


@dataclass(frozen=True, slots=True)
class Form:
    action: str
    method: str
    fields: Tuple[FormField, ...]


@dataclass(frozen=True, slots=True)
class Article:
    title: str
    content: str


@dataclass(frozen=True, slots=True)
class Section:
    heading: str
    content: str


@dataclass(frozen=True, slots=True)
class Span:
    content: str
    class_name: str = ""
    id: str = ""
    tag: str = "span"


@dataclass(frozen=True, slots=True)
class PageRecord:
    """One fetched-and-parsed page."""

    url: str
    title: str
    description: str = ""
    keywords: str = ""
    author: str = ""
    headings: Tuple[Heading, ...] = ()
    paragraphs: Tuple[str, ...] = ()
    lists: Tuple[ListBlock, ...] = ()
    tables: Tuple[Table, ...] = ()
    links: Tuple[Link, ...] = ()
    forms: Tuple[Form, ...] = ()
    articles: Tuple[Article, ...] = ()
    sections: Tuple[Section, ...] = ()
    spans: Tuple[Span, ...] = ()


#: Content sequences appended by the merger, in merge order.
CONTENT_FIELDS: Tuple[str, ...] = (
    "headings",
    "paragraphs",
    "lists",
    "tables",
    "links",
    "articles",
    "sections",
    "spans",
    "forms",
)


# --------------------------------------------------------------------------- #
# Theme                                                                       #
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class ThemeColors:
    primary: Optional[str] = None
    secondary: Optional[str] = None
    accent: Optional[str] = None
    background: Optional[str] = None
    text: Optional[str] = None
    border: Optional[str] = None
    button: Optional[str] = None
    link: Optional[str] = None

    def any(self) -> bool:
        """True when at least one colour was assigned."""
        return any(getattr(self, f.name) for f in fields(self))

    def with_fallback(self, palette: Mapping[str, str]) -> ThemeColors:
        """Fill unassigned slots from a caller-supplied *palette*."""
        updates = {
            f.name: palette[f.name]
            for f in fields(self)
            if getattr(self, f.name) is None and palette.get(f.name)
        }
        return replace(self, **updates) if updates else self


#: Generic palette a caller may apply with :meth:`ThemeColors.with_fallback`.
DEFAULT_PALETTE: Dict[str, str] = {
    "primary": "#007bff",
    "secondary": "#6c757d",
    "accent": "#007bff",
    "background": "#ffffff",
    "text": "#333333",
    "border": "#dee2e6",
    "button": "#007bff",
    "link": "#007bff",
}


@dataclass(frozen=True, slots=True)
class Typography:
    primary_font: Optional[str] = None
    secondary_font: Optional[str] = None
    heading_font: Optional[str] = None
    body_font: Optional[str] = None
    font_size: Optional[str] = None
    font_weight: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Layout:
    border_radius: Optional[str] = None
    box_shadow: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Branding:
    logo_url: Optional[str] = None
    favicon_url: Optional[str] = None
    brand_name: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ThemeRecord:
    """Best-effort brand theme of the root page."""

    colors: ThemeColors = field(default_factory=ThemeColors)
    typography: Typography = field(default_factory=Typography)
    layout: Layout = field(default_factory=Layout)
    branding: Branding = field(default_factory=Branding)
    extracted: bool = False
    timestamp: str = ""
