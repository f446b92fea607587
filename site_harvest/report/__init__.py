# File: site_harvest/report/__init__.py
"""site_harvest.report: JSON and HTML reports and the textual context of a combined document."""

from __future__ import annotations

from site_harvest.report.context import build_context
from site_harvest.report.html_report import render_html
from site_harvest.report.json_report import JsonFileStorage, render_json

__all__ = ["render_json", "render_html", "build_context", "JsonFileStorage"]
