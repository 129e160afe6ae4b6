#!/usr/bin/env python3
"""
Command-line entry point for ShotCrawl.

Captures a screenshot (or PDF) of the seed page and, up to ``--depth``
levels deep, of every page it links to.

Example:
  shotcrawl -u https://example.com -d 2 -m 20 -t webp -o shots --report shots/manifest.json
"""
import asyncio
import sys
from pathlib import Path

import click
from click.core import ParameterSource

from shotcrawl import __version__
from shotcrawl.config import FILE_TYPES, build_config, load_config
from shotcrawl.engine import start_crawl
from shotcrawl.exceptions import ConfigError
from shotcrawl.logger import DEFAULT_FORMAT, init_logging
from shotcrawl.report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"], max_content_width=100)


def print_error(message: str, code: int = 1):
    click.secho(message, fg='red', err=True)
    sys.exit(code)


def _explicit(ctx: click.Context, name: str, value):
    """Return *value* only if it was given on the command line (or env), else None."""
    if ctx.get_parameter_source(name) in (None, ParameterSource.DEFAULT):
        return None
    return value


@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='ShotCrawl, version %(version)s')
@click.option('--url', '-u', 'url', default=None, help='URL of the webpage to capture.')
@click.option(
    '--resolution', '-r', 'resolution',
    default='1920x1080', show_default=True,
    help='Screen resolution as WIDTHxHEIGHT.'
)
@click.option(
    '--output', '-o', 'output_dir',
    default='./screenshots', show_default=True,
    type=click.Path(file_okay=False, path_type=Path),
    help='Directory to save screenshots or PDFs.'
)
@click.option(
    '--type', '-t', 'file_type',
    default='png', show_default=True,
    type=click.Choice(FILE_TYPES, case_sensitive=False),
    help='Output file type.'
)
@click.option(
    '--depth', '-d', 'max_depth',
    type=int, default=1, show_default=True,
    help='Recursion depth for following links; 1 captures the seed only.'
)
@click.option(
    '--max-pages', '-m', 'max_pages',
    type=int, default=10, show_default=True,
    help='Maximum number of pages to capture.'
)
@click.option(
    '--follow-external/--no-follow-external', 'follow_external',
    default=False, show_default=True,
    help='Follow links that leave the origin of the page they appear on.'
)
@click.option(
    '--concurrency', '-c', 'concurrency',
    type=int, default=1, show_default=True,
    help='Pages rendered in parallel.'
)
@click.option(
    '--timeout', 'render_timeout',
    type=float, default=30.0, show_default=True,
    help='Timeout for rendering one page (seconds).'
)
@click.option(
    '--wait-until', 'wait_until',
    type=click.Choice(['load', 'domcontentloaded', 'networkidle']),
    default='networkidle', show_default=True,
    help='Navigation event to wait for before capturing.'
)
@click.option(
    '--full-page/--no-full-page', 'full_page',
    default=False, show_default=True,
    help='Capture the whole scrollable page instead of the viewport.'
)
@click.option(
    '--breadth-first/--depth-first', 'breadth_first',
    default=False, show_default=True,
    help='Visit pages level by level instead of branch by branch.'
)
@click.option(
    '--keep-fragments/--strip-fragments', 'keep_fragments',
    default=False, show_default=True,
    help='Treat #fragment variants as distinct pages.'
)
@click.option('--user-agent', 'user_agent', default=None, help='User-Agent header for the browser.')
@click.option(
    '--config', 'config_path',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='YAML/JSON file with base settings; command-line options win.'
)
@click.option(
    '--report', 'report_path',
    default=None,
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help='Write a JSON manifest of the run to this file.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file (stdout only if omitted)'
)
@click.pass_context
def cli(ctx, url, resolution, output_dir, file_type, max_depth, max_pages, follow_external,
        concurrency, render_timeout, wait_until, full_page, breadth_first, keep_fragments,
        user_agent, config_path, report_path, log_level, log_file):
    """Capture rendered screenshots of a page and the pages it links to."""
    init_logging(level=log_level.upper(), log_file=log_file, log_format=DEFAULT_FORMAT)

    base = {}
    if config_path is not None:
        try:
            base = load_config(config_path)
        except ConfigError as e:
            print_error(f'Error loading configuration: {e}')

    if url is None and not base.get('url'):
        click.echo(ctx.get_help())
        ctx.exit(0)

    overrides = {
        'url': url,
        'resolution': _explicit(ctx, 'resolution', resolution),
        'output_dir': _explicit(ctx, 'output_dir', output_dir),
        'file_type': _explicit(ctx, 'file_type', file_type.lower()),
        'max_depth': _explicit(ctx, 'max_depth', max_depth),
        'max_pages': _explicit(ctx, 'max_pages', max_pages),
        'follow_external': _explicit(ctx, 'follow_external', follow_external),
        'concurrency': _explicit(ctx, 'concurrency', concurrency),
        'render_timeout': _explicit(ctx, 'render_timeout', render_timeout),
        'wait_until': _explicit(ctx, 'wait_until', wait_until),
        'full_page': _explicit(ctx, 'full_page', full_page),
        'traversal': _explicit(ctx, 'breadth_first', 'breadth' if breadth_first else 'depth'),
        'strip_fragments': _explicit(ctx, 'keep_fragments', not keep_fragments),
        'user_agent': user_agent,
    }
    try:
        cfg = build_config(base, **overrides)
    except ConfigError as e:
        print_error(str(e))

    try:
        report = asyncio.run(start_crawl(cfg))
    except KeyboardInterrupt:
        print_error('Interrupted, capture stopped.', code=130)
    except Exception as e:
        print_error(f'Error during screenshot capture: {e}')

    if report_path is not None:
        try:
            saved = render_json(report, report_path)
            click.echo(f'Report: {saved}')
        except OSError as e:
            print_error(f'Error saving report: {e}')

    click.echo(
        f'Completed capturing screenshots. '
        f'{len(report.captures)} captured, {len(report.failures)} failed.'
    )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
