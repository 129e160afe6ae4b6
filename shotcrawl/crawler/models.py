"""
Data models for the ShotCrawl crawl controller.
"""
from __future__ import annotations

import enum
import json
from dataclasses import asdict, dataclass, field
from typing import List, Tuple


@dataclass(frozen=True, slots=True)
class CrawlTask:
    """One pending unit of work: a URL proposed at a given depth (seed is 1)."""

    url: str
    depth: int = 1

    def __post_init__(self) -> None:
        if self.depth < 1:
            raise ValueError(f"task depth must be >= 1, got {self.depth}")

    def child(self, url: str) -> CrawlTask:
        return CrawlTask(url, self.depth + 1)


@dataclass(frozen=True, slots=True)
class RenderResult:
    """What the renderer hands back for one page: the artifact and its links."""

    url: str
    artifact: bytes
    links: Tuple[str, ...] = ()


class TaskOutcome(str, enum.Enum):
    """Terminal state of a processed task."""

    DISCARDED = "discarded"  # duplicate or over the page cap
    FAILED = "failed"
    LEAF = "leaf"  # stored at max depth
    EXPANDED = "expanded"


@dataclass(slots=True)
class CaptureRecord:
    url: str
    depth: int
    path: str


@dataclass(slots=True)
class FailureRecord:
    url: str
    depth: int
    error: str


@dataclass(slots=True)
class CrawlReport:
    """Summary of one crawl run."""

    seed: str
    captures: List[CaptureRecord] = field(default_factory=list)
    failures: List[FailureRecord] = field(default_factory=list)
    discarded: int = 0
    visited: int = 0
    duration: float = 0.0

    def json(self, *, pretty: bool = False) -> str:
        """Return the report as a JSON document."""
        return json.dumps(asdict(self), ensure_ascii=False, indent=2 if pretty else None)
