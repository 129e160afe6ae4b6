"""Logging setup for **ShotCrawl**.

Every module logs through the "ShotCrawl" logger::

      from shotcrawl.logger import logger
      logger.info("Crawl started")

The CLI calls :func:`init_logging` once it knows the level and log file.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "ShotCrawl"

_LevelT = Union[int, str]


def _handler_for(log_file: Path | str | None) -> logging.Handler:
    if log_file is None:
        return logging.StreamHandler(sys.stdout)
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        filename=str(log_file),
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Replace the handlers of the project logger.

    Output always goes to stdout; *log_file* adds a rotating file copy.
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    for handler in list(lg.handlers):
        handler.close()
    lg.handlers.clear()

    formatter = logging.Formatter(log_format)
    targets = [None] if log_file is None else [None, log_file]
    for target in targets:
        handler = _handler_for(target)
        handler.setFormatter(formatter)
        lg.addHandler(handler)

    lg.propagate = False
    return lg


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    return configure(level=level, log_file=log_file, log_format=log_format)


logger: logging.Logger = configure()

__all__ = ["logger", "configure", "init_logging", "LOGGER_NAME", "DEFAULT_FORMAT"]
