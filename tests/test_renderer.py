# File: tests/test_renderer.py
# Browser integration tests: a local aiohttp site rendered by headless Chromium.
# Skipped when Playwright's Chromium is not installed.
from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp import web

from shotcrawl.config import CrawlConfig, Resolution
from shotcrawl.crawler.renderer import PlaywrightRenderer
from shotcrawl.engine import start_crawl
from shotcrawl.exceptions import RenderError

VIEWPORT = Resolution(640, 480)


async def _serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()


async def _open(renderer: PlaywrightRenderer) -> PlaywrightRenderer:
    try:
        return await renderer.__aenter__()
    except Exception as exc:
        pytest.skip(f"Chromium is not available: {exc}")


@pytest_asyncio.fixture
async def site(unused_tcp_port: int) -> AsyncIterator[str]:
    app = web.Application()

    async def root(_):
        return web.Response(
            text=(
                "<html><body><h1>Home</h1>"
                '<a href="/a">A</a> <a href="/b#top">B</a> '
                '<a href="mailto:me@example.com">Mail</a> '
                '<a href="https://external.example/">Out</a>'
                "<script>document.body.insertAdjacentHTML('beforeend', '<a href=\"/js\">JS</a>')</script>"
                "</body></html>"
            ),
            content_type="text/html",
        )

    async def page(request):
        return web.Response(
            text=f"<html><body><h1>{request.path}</h1><a href='/'>home</a></body></html>",
            content_type="text/html",
        )

    app.router.add_get("/", root)
    for path in ("/a", "/b", "/js"):
        app.router.add_get(path, page)

    async for url in _serve_app(app, unused_tcp_port):
        yield url


@pytest.mark.asyncio()
async def test_png_capture_and_rendered_links(site):
    renderer = await _open(PlaywrightRenderer("png", wait_until="load", timeout=10))
    try:
        result = await renderer.render(f"{site}/", VIEWPORT)
    finally:
        await renderer.__aexit__(None, None, None)

    assert result.artifact.startswith(b"\x89PNG")
    assert f"{site}/a" in result.links
    assert f"{site}/b#top" in result.links
    assert f"{site}/js" in result.links  # inserted by script
    assert "https://external.example/" in result.links
    assert not any(link.startswith("mailto:") for link in result.links)


@pytest.mark.asyncio()
@pytest.mark.parametrize("file_type,magic", [("pdf", b"%PDF"), ("webp", b"RIFF"), ("jpeg", b"\xff\xd8")])
async def test_other_formats(site, file_type, magic):
    renderer = await _open(PlaywrightRenderer(file_type, wait_until="load", timeout=10))
    try:
        result = await renderer.render(f"{site}/a", VIEWPORT)
    finally:
        await renderer.__aexit__(None, None, None)

    assert result.artifact.startswith(magic)


@pytest.mark.asyncio()
async def test_unreachable_url_raises_render_error(unused_tcp_port):
    renderer = await _open(PlaywrightRenderer("png", wait_until="load", timeout=5))
    try:
        with pytest.raises(RenderError):
            await renderer.render(f"http://localhost:{unused_tcp_port}/", VIEWPORT)
    finally:
        await renderer.__aexit__(None, None, None)


@pytest.mark.asyncio()
async def test_render_outside_context_is_an_error():
    renderer = PlaywrightRenderer()
    with pytest.raises(RuntimeError):
        await renderer.render("http://localhost/", VIEWPORT)


def test_from_config_carries_render_settings(tmp_path):
    config = CrawlConfig(
        url="https://a.test/",
        file_type="webp",
        wait_until="domcontentloaded",
        render_timeout=7.5,
        full_page=True,
        user_agent="ShotCrawlTest/1.0",
        output_dir=tmp_path,
    )
    renderer = PlaywrightRenderer.from_config(config)

    assert renderer.file_type == "webp"
    assert renderer.wait_until == "domcontentloaded"
    assert renderer.timeout_ms == 7500
    assert renderer.full_page is True
    assert renderer.user_agent == "ShotCrawlTest/1.0"


@pytest.mark.asyncio()
async def test_end_to_end_crawl_writes_files(site, tmp_path):
    probe = await _open(PlaywrightRenderer())
    await probe.__aexit__(None, None, None)

    config = CrawlConfig(
        url=f"{site}/",
        max_depth=2,
        max_pages=10,
        output_dir=tmp_path / "shots",
        wait_until="load",
        render_timeout=15,
    )
    report = await start_crawl(config)

    captured = {c.url for c in report.captures}
    assert captured == {f"{site}/", f"{site}/a", f"{site}/b", f"{site}/js"}
    assert report.failures == []
    assert len(list((tmp_path / "shots").glob("*.png"))) == 4
