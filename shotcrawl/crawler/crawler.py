from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from shotcrawl.config import CrawlConfig
from shotcrawl.crawler.links import filter_links, normalize_url
from shotcrawl.crawler.models import (
    CaptureRecord,
    CrawlReport,
    CrawlTask,
    FailureRecord,
    TaskOutcome,
)
from shotcrawl.crawler.renderer import Renderer
from shotcrawl.crawler.tracker import VisitedTracker
from shotcrawl.exceptions import PersistError, RenderError
from shotcrawl.logger import LOGGER_NAME

__all__ = ("CrawlController", "PersistFn")

PersistFn = Callable[[bytes, str], Path]


class CrawlController:
    """Depth-bounded, page-capped crawl from a single seed URL.

    Tasks live in an explicit work queue served by ``config.concurrency``
    workers. Depth-first order uses a LIFO queue, breadth-first a FIFO one.
    """

    def __init__(
        self,
        config: CrawlConfig,
        renderer: Renderer,
        persist: PersistFn,
        tracker: Optional[VisitedTracker] = None,
    ) -> None:
        self.config = config
        self.renderer = renderer
        self.persist = persist
        self.tracker = tracker if tracker is not None else VisitedTracker(config.max_pages)
        self.logger = logging.getLogger(LOGGER_NAME)
        self.seed = normalize_url(config.seed, strip_fragment=config.strip_fragments)
        self.report = CrawlReport(seed=self.seed)

    async def crawl(self) -> CrawlReport:
        self.logger.info(
            "Starting crawl: %s (depth=%d, max pages=%d, external=%s)",
            self.seed,
            self.config.max_depth,
            self.config.max_pages,
            self.config.follow_external,
        )
        start = time.monotonic()
        queue: asyncio.Queue[CrawlTask] = (
            asyncio.LifoQueue() if self.config.traversal == "depth" else asyncio.Queue()
        )
        queue.put_nowait(CrawlTask(self.seed, 1))
        workers = [
            asyncio.create_task(self._worker(queue), name=f"shotcrawl-worker-{i}")
            for i in range(self.config.concurrency)
        ]
        try:
            await queue.join()
        finally:
            for w in workers:
                w.cancel()
            await asyncio.gather(*workers, return_exceptions=True)
            self.report.visited = len(self.tracker)
            self.report.duration = time.monotonic() - start

        self.logger.info(
            "Finished: %d captured, %d failed, %d discarded in %.2f s",
            len(self.report.captures),
            len(self.report.failures),
            self.report.discarded,
            self.report.duration,
        )
        return self.report

    async def _worker(self, queue: asyncio.Queue[CrawlTask]) -> None:
        lifo = isinstance(queue, asyncio.LifoQueue)
        while True:
            try:
                task = await queue.get()
            except asyncio.CancelledError:
                break
            try:
                _, children = await self.process(task)
                # reversed on a stack so children pop in document order
                for child in reversed(children) if lifo else children:
                    queue.put_nowait(child)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                self.logger.exception("Unexpected error while processing %s", task.url)
                self._record_failure(task, exc)
            finally:
                queue.task_done()

    async def process(self, task: CrawlTask) -> Tuple[TaskOutcome, List[CrawlTask]]:
        """Run one task through claim, render, persist and expansion.

        Returns the terminal outcome and the child tasks to schedule.
        """
        if task.depth > self.config.max_depth or not self.tracker.try_claim(task.url):
            self.report.discarded += 1
            self.logger.debug("Discarded %s (depth %d)", task.url, task.depth)
            return TaskOutcome.DISCARDED, []

        try:
            result = await asyncio.wait_for(
                self.renderer.render(task.url, self.config.resolution),
                timeout=self.config.render_timeout,
            )
        except asyncio.TimeoutError:
            err = RenderError(task.url, f"timed out after {self.config.render_timeout:g} s")
            self._fail(task, err)
            return TaskOutcome.FAILED, []
        except RenderError as err:
            self._fail(task, err)
            return TaskOutcome.FAILED, []

        try:
            path = self.persist(result.artifact, task.url)
        except PersistError as err:
            self._fail(task, err)
            return TaskOutcome.FAILED, []

        self.report.captures.append(CaptureRecord(task.url, task.depth, str(path)))
        self.logger.info("Captured %s -> %s", task.url, path)

        if task.depth >= self.config.max_depth:
            return TaskOutcome.LEAF, []

        urls = filter_links(
            task.url,
            result.links,
            self.config.follow_external,
            strip_fragments=self.config.strip_fragments,
        )
        self.logger.debug("%s: %d of %d links eligible", task.url, len(urls), len(result.links))
        return TaskOutcome.EXPANDED, [task.child(u) for u in urls]

    def _fail(self, task: CrawlTask, err: Exception) -> None:
        self.logger.warning("Error processing %s: %s", task.url, err)
        self._record_failure(task, err)

    def _record_failure(self, task: CrawlTask, err: BaseException) -> None:
        self.report.failures.append(FailureRecord(task.url, task.depth, str(err)))
