"""
Visited-URL tracker: the single source of truth for "already claimed" and
"budget left" during one crawl run.
"""
from __future__ import annotations

import threading
from typing import FrozenSet, Set

__all__ = ("VisitedTracker",)


class VisitedTracker:
    """Grow-only set of claimed URLs bounded by ``max_pages``.

    :meth:`try_claim` is the only mutating operation. It never awaits, so
    under asyncio it cannot be interleaved with another worker; the lock
    additionally keeps it indivisible when called from threads.
    """

    def __init__(self, max_pages: int) -> None:
        if max_pages < 1:
            raise ValueError("max_pages must be >= 1")
        self.max_pages = max_pages
        self._visited: Set[str] = set()
        self._lock = threading.Lock()

    def try_claim(self, url: str) -> bool:
        """Insert *url* unless it is already claimed or the cap is reached."""
        with self._lock:
            if url in self._visited or len(self._visited) >= self.max_pages:
                return False
            self._visited.add(url)
            return True

    def __contains__(self, url: object) -> bool:
        return url in self._visited

    def __len__(self) -> int:
        return len(self._visited)

    @property
    def visited(self) -> FrozenSet[str]:
        return frozenset(self._visited)

    @property
    def remaining(self) -> int:
        return self.max_pages - len(self._visited)

    @property
    def exhausted(self) -> bool:
        return len(self._visited) >= self.max_pages
