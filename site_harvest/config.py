# === FILE: site_harvest/config.py ===
"""
Loading and validation of the SiteHarvest crawler configuration.
Pydantic describes the schema and checks the data.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from site_harvest.theme.signals import DEFAULT_SIGNALS, SIGNAL_REGISTRY

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
RESOURCE_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
BROWSER_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"

_PALETTE_KEYS = frozenset(
    {"primary", "secondary", "accent", "background", "text", "border", "button", "link"}
)


class CrawlerConfig(BaseModel):
    """Configuration of one crawl session."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    request_timeout: float = Field(30.0, gt=0, description="Timeout of a single request (seconds).")
    max_redirects: int = Field(10, ge=0, description="Redirects followed per request.")
    user_agent: str = Field(BROWSER_USER_AGENT, min_length=1, description="Browser-like User-Agent.")
    accept: str = Field(BROWSER_ACCEPT, min_length=1, description="Accept header of page fetches.")
    resource_user_agent: str = Field(
        RESOURCE_USER_AGENT, min_length=1, description="User-Agent for sitemap/robots.txt requests."
    )

    politeness_delay_min: float = Field(2.0, ge=0, description="Lower bound of the pre-request jitter.")
    politeness_delay_max: float = Field(5.0, ge=0, description="Upper bound of the pre-request jitter.")
    rate_limit_backoff_min: float = Field(10.0, ge=0, description="Lower bound of the 429 backoff.")
    rate_limit_backoff_max: float = Field(25.0, ge=0, description="Upper bound of the 429 backoff.")
    courtesy_delay: float = Field(1.0, ge=0, description="Pause after every merged additional page.")

    max_additional_urls: int = Field(50, ge=0, description="Budget of additional pages per session.")
    sitemap_max_depth: int = Field(3, ge=0, description="Nesting limit of sitemap indexes.")
    sitemap_paths: List[str] = Field(
        default_factory=lambda: ["/sitemap.xml", "/sitemap_index.xml", "/sitemap/index"],
        description="Sitemap locations probed under the root domain.",
    )

    min_paragraph_length: int = Field(20, ge=0, description="Shortest paragraph kept.")
    max_paragraphs: int = Field(100, ge=1, description="Paragraph cap per page.")

    color_signals: List[str] = Field(
        default_factory=lambda: list(DEFAULT_SIGNALS),
        description="Colour signal sources feeding the frequency table.",
    )
    max_color_candidates: int = Field(15, ge=1, description="Ranked colour candidates kept.")
    fallback_palette: Optional[Dict[str, str]] = Field(
        None, description="Palette used by reports where no colour was extracted."
    )

    session_timeout: Optional[float] = Field(
        None, gt=0, description="Caller-level timeout of the whole crawl session."
    )

    @field_validator("sitemap_paths", mode="after")
    def _leading_slash(cls, v: List[str]) -> List[str]:
        return [p if p.startswith("/") else f"/{p}" for p in v]

    @field_validator("color_signals", mode="after")
    def _known_signals(cls, v: List[str]) -> List[str]:
        unknown = [name for name in v if name not in SIGNAL_REGISTRY]
        if unknown:
            raise ValueError(f"unknown colour signal(s): {', '.join(unknown)}")
        return v

    @field_validator("fallback_palette", mode="after")
    def _palette_keys(cls, v: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
        if v is not None:
            extra = set(v) - _PALETTE_KEYS
            if extra:
                raise ValueError(f"unknown palette key(s): {', '.join(sorted(extra))}")
        return v

    @model_validator(mode="after")
    def _check_ranges(self) -> CrawlerConfig:
        if self.politeness_delay_min > self.politeness_delay_max:
            raise ValueError("politeness_delay_min must not exceed politeness_delay_max")
        if self.rate_limit_backoff_min > self.rate_limit_backoff_max:
            raise ValueError("rate_limit_backoff_min must not exceed rate_limit_backoff_max")
        return self


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_mapping(path: Path) -> dict[str, Any]:
    """Top-level mapping of a YAML (``.yaml``/``.yml``) or JSON config file."""
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix in (".yaml", ".yml"):
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    elif suffix == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    else:
        raise ValueError(f"Unsupported config format: {suffix}")
    data = data or {}
    if not isinstance(data, dict):
        raise TypeError(f"Config {path.name} must hold a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> CrawlerConfig:
    """
    Read YAML or JSON and return a validated CrawlerConfig.

    Without a path the default ``configs/default.yaml`` is used when present,
    otherwise the built-in defaults. An explicit path that does not exist
    raises FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return CrawlerConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    return CrawlerConfig(**_read_mapping(path_obj))
