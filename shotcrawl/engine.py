"""shotcrawl.engine: orchestration layer wiring config, renderer, storage and the crawl controller."""

from __future__ import annotations

from typing import Optional

from shotcrawl.config import CrawlConfig
from shotcrawl.crawler.crawler import CrawlController
from shotcrawl.crawler.models import CrawlReport
from shotcrawl.crawler.renderer import PlaywrightRenderer, Renderer
from shotcrawl.logger import logger
from shotcrawl.storage import Persister

__all__ = ["start_crawl"]


async def start_crawl(config: CrawlConfig, renderer: Optional[Renderer] = None) -> CrawlReport:
    """Run one crawl and return its report.

    Without *renderer* a headless Chromium is launched for the run and
    closed afterwards, also when the crawl is cancelled.
    """
    persister = Persister(config.file_type, config.output_dir)
    logger.info("Capturing %s into %s", config.seed, config.output_dir)
    if renderer is not None:
        return await CrawlController(config, renderer, persister).crawl()
    async with PlaywrightRenderer.from_config(config) as browser:
        return await CrawlController(config, browser, persister).crawl()
