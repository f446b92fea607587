# File: site_harvest/report/html_report.py
"""site_harvest.report.html_report: HTML report rendered with Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from site_harvest.aggregator import CombinedDocument
from site_harvest.crawler.models import ThemeColors

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "report.html.j2"


def report_colors(document: CombinedDocument, fallback_palette: Optional[Mapping[str, str]] = None) -> ThemeColors:
    """Extracted theme colours, with unassigned slots taken from *fallback_palette*."""
    colors = document.theme.colors if document.theme is not None else ThemeColors()
    return colors.with_fallback(fallback_palette) if fallback_palette else colors


def render_html(
    document: CombinedDocument,
    template_dir: Union[Path, str, None] = None,
    output_path: Union[Path, str] = "report.html",
    *,
    fallback_palette: Optional[Mapping[str, str]] = None,
) -> Path:
    """Render the HTML report of *document* and save it.

    Args:
        document: combined document of a crawl session.
        template_dir: directory holding ``report.html.j2``; the packaged
            template is used when None.
        output_path: path of the resulting HTML file.
        fallback_palette: colours for theme slots left unassigned.

    Returns:
        Path of the saved HTML file.

    Example:
    ```python
    from site_harvest.report.html_report import render_html
    html_path = render_html(document, output_path='reports/report.html')
    ```
    """
    template_dir = Path(template_dir) if template_dir is not None else DEFAULT_TEMPLATE_DIR
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    template = env.get_template(TEMPLATE_NAME)

    context: dict[str, Any] = {
        "document": document,
        "colors": report_colors(document, fallback_palette),
        "theme": document.theme,
        "additional_urls": document.additional_urls,
        "total_urls_scraped": document.total_urls_scraped,
    }

    output_path.write_text(template.render(**context), encoding="utf-8")
    return output_path
