"""
Renderer: loads a URL in headless Chromium and returns a snapshot plus the
links found in the rendered DOM.
"""
from __future__ import annotations

import io
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Protocol

from PIL import Image
from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from shotcrawl.config import CrawlConfig, Resolution
from shotcrawl.crawler.links import extract_links
from shotcrawl.crawler.models import RenderResult
from shotcrawl.exceptions import RenderError
from shotcrawl.logger import LOGGER_NAME

__all__ = ("Renderer", "PlaywrightRenderer")


class Renderer(Protocol):
    """Anything able to turn a URL into a :class:`RenderResult`."""

    async def render(self, url: str, resolution: Resolution) -> RenderResult:
        ...


class PlaywrightRenderer:
    """Headless Chromium renderer.

    One browser process lives for the duration of the ``async with`` block;
    every :meth:`render` call gets its own isolated browser context which is
    closed on every exit path.
    """

    def __init__(
        self,
        file_type: str = "png",
        *,
        wait_until: str = "networkidle",
        timeout: float = 30.0,
        full_page: bool = False,
        user_agent: Optional[str] = None,
    ) -> None:
        self.file_type = file_type
        self.wait_until = wait_until
        self.timeout_ms = timeout * 1000
        self.full_page = full_page
        self.user_agent = user_agent
        self.logger = logging.getLogger(LOGGER_NAME)
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    @classmethod
    def from_config(cls, config: CrawlConfig) -> PlaywrightRenderer:
        return cls(
            config.file_type,
            wait_until=config.wait_until,
            timeout=config.render_timeout,
            full_page=config.full_page,
            user_agent=config.user_agent,
        )

    async def __aenter__(self) -> PlaywrightRenderer:
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(headless=True)
        except BaseException:
            await self._playwright.stop()
            self._playwright = None
            raise
        self.logger.debug("Chromium launched")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if self._browser is not None:
                await self._browser.close()
        finally:
            self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None

    @asynccontextmanager
    async def _page(self, resolution: Resolution) -> AsyncIterator[Page]:
        if self._browser is None:
            raise RuntimeError("Renderer used outside of 'async with'")
        context = await self._browser.new_context(
            viewport=resolution.as_viewport(),
            user_agent=self.user_agent,
        )
        try:
            page = await context.new_page()
            page.set_default_timeout(self.timeout_ms)
            yield page
        finally:
            await context.close()

    async def render(self, url: str, resolution: Resolution) -> RenderResult:
        try:
            async with self._page(resolution) as page:
                await page.goto(url, wait_until=self.wait_until, timeout=self.timeout_ms)
                artifact = await self._capture(page)
                html = await page.content()
                final_url = page.url
        except PlaywrightError as exc:
            raise RenderError(url, exc.message) from exc
        links = tuple(dict.fromkeys(extract_links(html, final_url)))
        return RenderResult(url=final_url, artifact=artifact, links=links)

    async def _capture(self, page: Page) -> bytes:
        if self.file_type == "pdf":
            return await page.pdf(format="A4", print_background=True)
        if self.file_type == "webp":
            png = await page.screenshot(type="png", full_page=self.full_page)
            return _png_to_webp(png)
        return await page.screenshot(type=self.file_type, full_page=self.full_page)


def _png_to_webp(data: bytes) -> bytes:
    """Playwright only encodes PNG/JPEG; convert for WebP output."""
    with Image.open(io.BytesIO(data)) as image:
        out = io.BytesIO()
        image.save(out, format="WEBP")
        return out.getvalue()
