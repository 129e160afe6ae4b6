"""shotcrawl.report: run manifest written by the CLI."""

from shotcrawl.report.json_report import render_json

__all__ = ["render_json"]
