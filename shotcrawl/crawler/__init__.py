"""Crawl controller: visited tracker, link policy, renderer and traversal."""
from shotcrawl.crawler.crawler import CrawlController
from shotcrawl.crawler.models import CrawlReport, CrawlTask, RenderResult, TaskOutcome
from shotcrawl.crawler.tracker import VisitedTracker

__all__ = [
    "CrawlController",
    "CrawlReport",
    "CrawlTask",
    "RenderResult",
    "TaskOutcome",
    "VisitedTracker",
]
