"""Exception hierarchy shared by the crawl controller and its collaborators."""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

__all__ = ["ShotCrawlError", "ConfigError", "RenderError", "PersistError"]


class ShotCrawlError(Exception):
    """Base class for all ShotCrawl errors."""


class ConfigError(ShotCrawlError, ValueError):
    """Invalid run configuration. Raised before the seed is claimed."""


class RenderError(ShotCrawlError):
    """Navigation, timeout or network failure while rendering one URL."""

    def __init__(self, url: str, reason: Union[str, BaseException]) -> None:
        self.url = url
        self.reason = str(reason) or type(reason).__name__
        super().__init__(f"Failed to render {url}: {self.reason}")


class PersistError(ShotCrawlError):
    """I/O failure while saving a captured artifact."""

    def __init__(
        self,
        url: str,
        reason: Union[str, BaseException],
        path: Optional[Path] = None,
    ) -> None:
        self.url = url
        self.path = path
        self.reason = str(reason) or type(reason).__name__
        target = f" to {path}" if path is not None else ""
        super().__init__(f"Failed to save capture of {url}{target}: {self.reason}")
