# === FILE: site_harvest/logger.py ===
"""Logging setup of SiteHarvest.

All modules log through one project logger::

    from site_harvest.logger import logger
    logger.info("Crawl started: %s", url)

Records go to stderr, so the JSON that ``site-harvest crawl`` prints on
stdout stays machine-readable. A rotating log file can be added with
:func:`configure`.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Iterable, List, Union

LOGGER_NAME: Final[str] = "SiteHarvest"
DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Libraries whose own loggers are kept at WARNING unless asked otherwise.
_LIBRARY_LOGGERS: Final[tuple[str, ...]] = ("aiohttp.client", "aiohttp.access", "asyncio")

_MAX_LOG_BYTES: Final[int] = 5 * 1024 * 1024
_LOG_BACKUPS: Final[int] = 3

LevelT = Union[int, str]


def _handlers(log_file: Path | str | None, fmt: str) -> List[logging.Handler]:
    formatter = logging.Formatter(fmt)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(str(log_file), maxBytes=_MAX_LOG_BYTES, backupCount=_LOG_BACKUPS, encoding="utf-8")
        )
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def _quiet_libraries(names: Iterable[str], level: LevelT) -> None:
    for name in names:
        logging.getLogger(name).setLevel(level)


def configure(
    *,
    level: LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
    library_level: LevelT = "WARNING",
) -> logging.Logger:
    """Set up the ``SiteHarvest`` logger and return it.

    Parameters
    ----------
    level
        Level of the project logger, numeric or by name.
    log_file
        Optional rotating log file in addition to stderr.
    log_format
        :class:`logging.Formatter` format string.
    replace_handlers
        Drop handlers installed by an earlier call first.
    library_level
        Level applied to the aiohttp and asyncio loggers.
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    if replace_handlers:
        for old in list(lg.handlers):
            lg.removeHandler(old)
            old.close()
    for handler in _handlers(log_file, log_format):
        lg.addHandler(handler)
    lg.propagate = False
    _quiet_libraries(_LIBRARY_LOGGERS, library_level)
    return lg


def init_logging(
    level: LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """CLI entry: fresh handlers, libraries follow *level* only in DEBUG."""
    library_level = level if str(level).upper() == "DEBUG" or level == logging.DEBUG else "WARNING"
    return configure(level=level, log_file=log_file, log_format=log_format, library_level=library_level)


logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging", "LOGGER_NAME"]
