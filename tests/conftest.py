# File: tests/conftest.py
import asyncio
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence

import pytest

from shotcrawl.config import CrawlConfig, Resolution
from shotcrawl.crawler.models import RenderResult
from shotcrawl.exceptions import PersistError, RenderError
from shotcrawl.logger import configure


class FakeRenderer:
    """
    In-memory renderer: *site* maps a URL to the links found on it.
    URLs in *fail* raise RenderError, URLs in *hang* never finish.
    """

    def __init__(
        self,
        site: Optional[Dict[str, Sequence[str]]] = None,
        *,
        fail: Iterable[str] = (),
        hang: Iterable[str] = (),
        delay: float = 0.0,
    ) -> None:
        self.site = dict(site or {})
        self.fail = set(fail)
        self.hang = set(hang)
        self.delay = delay
        self.calls: List[str] = []
        self.resolutions: List[Resolution] = []
        self.active = 0
        self.max_active = 0

    async def render(self, url: str, resolution: Resolution) -> RenderResult:
        self.calls.append(url)
        self.resolutions.append(resolution)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if url in self.hang:
                await asyncio.sleep(3600)
            if url in self.fail:
                raise RenderError(url, "net::ERR_NAME_NOT_RESOLVED")
            return RenderResult(url=url, artifact=f"capture:{url}".encode(), links=tuple(self.site.get(url, ())))
        finally:
            self.active -= 1


class RecordingPersister:
    """Persist callable that remembers what it was given instead of writing files."""

    def __init__(self, fail: Iterable[str] = ()) -> None:
        self.fail = set(fail)
        self.saved: List[str] = []

    def __call__(self, artifact: bytes, url: str) -> Path:
        if url in self.fail:
            raise PersistError(url, "No space left on device")
        self.saved.append(url)
        return Path("/captures") / f"{len(self.saved)}.png"


@pytest.fixture(autouse=True)
def reset_logging():
    """CLI tests swap stdout; give every test a fresh project logger."""
    yield
    configure(level="INFO")


@pytest.fixture()
def make_config(tmp_path) -> Callable[..., CrawlConfig]:
    """
    Return a factory for CrawlConfig with test-friendly defaults.
    """
    def _make(url: str = "https://a.test/", **kwargs) -> CrawlConfig:
        kwargs.setdefault("output_dir", tmp_path / "shots")
        kwargs.setdefault("render_timeout", 2.0)
        return CrawlConfig(url=url, **kwargs)

    return _make


@pytest.fixture()
def persister() -> RecordingPersister:
    return RecordingPersister()
