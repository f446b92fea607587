# site_harvest/__init__.py
"""
SiteHarvest package initializer.
Defines the package version and exposes the library entry point and the CLI.
"""
__version__ = "0.1.0"

from site_harvest.engine import Engine, run_crawl
from site_harvest.cli import cli

__all__ = ["__version__", "Engine", "run_crawl", "cli"]
