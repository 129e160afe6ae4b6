"""shotcrawl.storage: naming and atomic writing of captured artifacts."""

from __future__ import annotations

import os
import re
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote, urlparse

from shotcrawl.exceptions import PersistError
from shotcrawl.logger import logger

__all__ = ["filename_for", "persist", "Persister"]

_UNSAFE_RE = re.compile(r"[^A-Za-z0-9._-]+")
_MAX_STEM = 180


def _timestamp(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    # 2024-05-01T12:30:00.123Z -> 2024-05-01T12-30-00-123Z
    iso = now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return re.sub(r"[:.]", "-", iso)


def filename_for(url: str, file_type: str, now: Optional[datetime] = None) -> str:
    """Build ``<host>[-<path>]_<timestamp>.<ext>`` for *url*."""
    parsed = urlparse(url)
    host = parsed.hostname or "page"
    path = unquote(parsed.path).strip("/").replace("/", "-")
    stem = f"{host}-{path}" if path else host
    stem = _UNSAFE_RE.sub("_", stem)[:_MAX_STEM].strip("._-") or "page"
    return f"{stem}_{_timestamp(now)}.{file_type}"


def _unique(path: Path) -> Path:
    if not path.exists():
        return path
    n = 1
    while True:
        candidate = path.with_name(f"{path.stem}-{n}{path.suffix}")
        if not candidate.exists():
            return candidate
        n += 1


def persist(
    artifact: bytes,
    url: str,
    file_type: str,
    output_dir: Union[str, Path],
    now: Optional[datetime] = None,
) -> Path:
    """Write *artifact* under *output_dir* and return the final path.

    Data goes to a temporary sibling first and is moved into place with
    :func:`os.replace`, so an interrupted write never leaves a partial file.
    """
    directory = Path(output_dir)
    target: Optional[Path] = None
    try:
        directory.mkdir(parents=True, exist_ok=True)
        target = _unique(directory / filename_for(url, file_type, now))
        fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=".partial-", suffix=f".{file_type}")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(artifact)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        raise PersistError(url, exc, target) from exc
    logger.debug("Wrote %d bytes to %s", len(artifact), target)
    return target


class Persister:
    """Binds file type and output directory so the controller only passes data."""

    def __init__(self, file_type: str, output_dir: Union[str, Path]) -> None:
        self.file_type = file_type
        self.output_dir = Path(output_dir)

    def __call__(self, artifact: bytes, url: str) -> Path:
        return persist(artifact, url, self.file_type, self.output_dir)
