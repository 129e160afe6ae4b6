"""
JSON manifest of a crawl run: every capture with its file path,
every failed URL with the reason, and the run counters.
"""
from __future__ import annotations

from pathlib import Path
from typing import Union

from shotcrawl.crawler.models import CrawlReport


def render_json(report: CrawlReport, output_path: Union[Path, str], *, pretty: bool = True) -> Path:
    """
    Save *report* as JSON at *output_path* and return the path.

    Example::

        from shotcrawl.report import render_json
        path = render_json(report, "screenshots/manifest.json")
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(report.json(pretty=pretty), encoding="utf-8")
    return output
