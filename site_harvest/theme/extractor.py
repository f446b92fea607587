# === FILE: site_harvest/theme/extractor.py ===
"""Brand theme extraction for the root page.

Colours come from frequency analysis over the raw markup: every enabled
signal contributes weighted observations, candidates failing the brand
colour filter are dropped, and the rest are ranked by frequency and then
vibrance. Typography, layout and branding come from a separate parse of the
same markup and are each best-effort.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence
from urllib.parse import unquote_plus, urljoin

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from bs4.element import Tag

from site_harvest.crawler.models import Branding, Layout, ThemeColors, ThemeRecord, Typography
from site_harvest.logger import logger
from site_harvest.theme.colors import is_valid_brand_color, vibrance
from site_harvest.theme.signals import DEFAULT_SIGNALS, SIGNAL_REGISTRY, ColorSignal
from site_harvest.utils import utc_timestamp

if TYPE_CHECKING:
    from site_harvest.config import CrawlerConfig

__all__: Sequence[str] = ("ColorCandidate", "ThemeExtractor", "assign_colors")

PRIMARY_MIN_VIBRANCE = 50
SECONDARY_MIN_VIBRANCE = 30
DEFAULT_MAX_CANDIDATES = 15

_RADIUS_SELECTOR = "button, .button, .btn, .card, .modal, input, .form-control"
_SHADOW_SELECTOR = ".card, .modal, .dropdown, .tooltip, button, .button"
_LOGO_SELECTORS = (
    'img[alt*="logo" i]',
    'img[src*="logo" i]',
    ".logo img",
    "#logo img",
    ".brand img",
    ".branding img",
)
_FAVICON_RELS = ("icon", "shortcut icon", "apple-touch-icon")
_GOOGLE_FONTS_RE = re.compile(r"fonts\.googleapis\.com|fonts\.google\.com")
_FAMILY_RE = re.compile(r"family=([^&:]+)")


@dataclass(frozen=True, slots=True)
class ColorCandidate:
    color: str
    frequency: int
    vibrance: float


def assign_colors(candidates: Sequence[ColorCandidate]) -> ThemeColors:
    """Map ranked candidates onto theme slots.

    Primary is the top-ranked candidate, and only when its vibrance is above
    50. Secondary is the next-ranked candidate after the top one with
    vibrance above 30. Accent, button and link follow primary. Background,
    text and border stay unassigned.
    """
    if not candidates:
        return ThemeColors()
    top = candidates[0]
    primary = top.color if top.vibrance > PRIMARY_MIN_VIBRANCE else None
    secondary = next(
        (c.color for c in candidates[1:] if c.color != top.color and c.vibrance > SECONDARY_MIN_VIBRANCE),
        None,
    )
    return ThemeColors(primary=primary, secondary=secondary, accent=primary, button=primary, link=primary)


def _style_value(el: Optional[Tag], prop: str) -> Optional[str]:
    if el is None:
        return None
    style = el.get("style")
    if not style:
        return None
    m = re.search(rf"(?:^|;)\s*{re.escape(prop)}\s*:\s*([^;]+)", str(style), re.IGNORECASE)
    return m.group(1).strip() if m else None


def _first_style(soup: BeautifulSoup, selector: str, prop: str) -> Optional[str]:
    for el in soup.select(selector):
        value = _style_value(el, prop)
        if value:
            return value
    return None


def _resolve(base_url: Optional[str], ref: Optional[str]) -> Optional[str]:
    if not ref:
        return None
    return urljoin(base_url, ref) if base_url else ref


class ThemeExtractor:
    """Extract a :class:`ThemeRecord` from root page markup."""

    def __init__(
        self,
        signals: Optional[Iterable[str]] = None,
        max_candidates: int = DEFAULT_MAX_CANDIDATES,
    ) -> None:
        names = list(signals) if signals is not None else list(DEFAULT_SIGNALS)
        unknown = [n for n in names if n not in SIGNAL_REGISTRY]
        if unknown:
            raise ValueError(f"Unknown colour signals: {', '.join(unknown)}")
        self.signals: List[ColorSignal] = [SIGNAL_REGISTRY[n]() for n in names]
        self.max_candidates = max_candidates

    @classmethod
    def from_config(cls, config: "CrawlerConfig") -> "ThemeExtractor":
        return cls(signals=config.color_signals, max_candidates=config.max_color_candidates)

    # ------------------------------------------------------------------ #
    # Colours                                                            #
    # ------------------------------------------------------------------ #

    def rank_colors(self, markup: str) -> List[ColorCandidate]:
        """Valid candidates ordered by frequency, then vibrance, both descending."""
        counts: Dict[str, int] = {}
        for signal in self.signals:
            for obs in signal.observe(markup):
                counts[obs.color] = counts.get(obs.color, 0) + obs.weight

        candidates = [
            ColorCandidate(color, freq, vibrance(color))
            for color, freq in counts.items()
            if is_valid_brand_color(color)
        ]
        candidates.sort(key=lambda c: (-c.frequency, -c.vibrance))
        return candidates[: self.max_candidates]

    # ------------------------------------------------------------------ #
    # Typography / layout / branding                                     #
    # ------------------------------------------------------------------ #

    @staticmethod
    def _typography(soup: BeautifulSoup) -> Typography:
        body_font = _style_value(soup.body, "font-family")
        heading_font = _first_style(soup, "h1, h2, h3", "font-family")

        web_fonts: List[str] = []
        for link in soup.find_all("link", href=True):
            href = str(link["href"])
            if not _GOOGLE_FONTS_RE.search(href):
                continue
            m = _FAMILY_RE.search(href)
            if m:
                web_fonts.append(unquote_plus(m.group(1)).strip())

        primary_font = body_font or next(iter(web_fonts), None)
        # first font in use other than the primary one
        secondary_font = next(
            (f for f in (heading_font, *web_fonts) if f and f != primary_font),
            None,
        )
        return Typography(
            primary_font=primary_font,
            secondary_font=secondary_font,
            heading_font=heading_font,
            body_font=body_font,
            font_size=_style_value(soup.body, "font-size"),
            font_weight=_style_value(soup.body, "font-weight"),
        )

    @staticmethod
    def _layout(soup: BeautifulSoup) -> Layout:
        return Layout(
            border_radius=_first_style(soup, _RADIUS_SELECTOR, "border-radius"),
            box_shadow=_first_style(soup, _SHADOW_SELECTOR, "box-shadow"),
        )

    @staticmethod
    def _branding(soup: BeautifulSoup, base_url: Optional[str]) -> Branding:
        logo = None
        for selector in _LOGO_SELECTORS:
            img = soup.select_one(selector)
            if img is not None and img.get("src"):
                logo = str(img["src"])
                break

        favicon = None
        for link in soup.find_all("link", href=True):
            rel = link.get("rel") or []
            rel_value = " ".join(rel).lower() if isinstance(rel, list) else str(rel).lower()
            if rel_value in _FAVICON_RELS:
                favicon = str(link["href"])
                break

        brand_name = None
        for attrs in ({"property": "og:site_name"}, {"name": "application-name"}):
            meta = soup.find("meta", attrs=attrs)
            if meta is not None and meta.get("content"):
                brand_name = str(meta["content"]).strip() or None
                if brand_name:
                    break
        if brand_name is None and soup.title is not None:
            title = soup.title.get_text().strip()
            brand_name = re.split(r" - | \| ", title)[0].strip() or None

        return Branding(
            logo_url=_resolve(base_url, logo),
            favicon_url=_resolve(base_url, favicon),
            brand_name=brand_name,
        )

    # ------------------------------------------------------------------ #
    # Entry point                                                        #
    # ------------------------------------------------------------------ #

    def extract_theme(self, markup: str, base_url: Optional[str] = None) -> ThemeRecord:
        """Best-effort theme of *markup*; never raises.

        ``extracted`` is True iff at least one colour slot was assigned.
        """
        try:
            colors = assign_colors(self.rank_colors(markup))
        except Exception as exc:  # noqa: BLE001
            logger.error("Theme colour extraction failed: %s", exc)
            return ThemeRecord(timestamp=utc_timestamp())

        typography, layout, branding = Typography(), Layout(), Branding()
        try:
            soup = BeautifulSoup(markup, "html.parser")
            typography = self._typography(soup)
            layout = self._layout(soup)
            branding = self._branding(soup, base_url)
        except (ParserRejectedMarkup, RecursionError, AssertionError) as exc:
            logger.warning("Theme markup could not be parsed: %s", exc)

        logger.debug("Theme colours: primary=%s secondary=%s", colors.primary, colors.secondary)
        return ThemeRecord(
            colors=colors,
            typography=typography,
            layout=layout,
            branding=branding,
            extracted=colors.any(),
            timestamp=utc_timestamp(),
        )
