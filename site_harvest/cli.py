# === FILE: site_harvest/cli.py ===
#!/usr/bin/env python3
"""
Command line entry point of SiteHarvest.

Commands:
  crawl URL   Crawl a site and print or save the combined document
  theme URL   Extract the brand theme of a single page
  config      Show the effective configuration

Common options:
  --config PATH       YAML/JSON config (default: configs/default.yaml if present)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stderr only when omitted)
  --log-format FORMAT Logging format string

crawl options:
  --json PATH             Save the JSON report
  --html PATH             Save the HTML report
  --template DIR          Directory with report.html.j2
  --pretty                Indent JSON output
  --session-timeout SEC   Timeout of the whole session
  --max-urls INT          Budget of additional pages (override max_additional_urls)
  --store-dir DIR         Also store the document through JsonFileStorage
  --owner ID              Owner id used with --store-dir
  --context               Print the plain-text context instead of JSON
  --question TEXT         Question appended to --context output

Example:
  site-harvest crawl https://example.com --json report.json --pretty --max-urls 20
"""
import asyncio
import json
import sys
from dataclasses import asdict
from pathlib import Path

import click

from site_harvest import __version__
from site_harvest.collaborators import LoggingNotifier
from site_harvest.config import load_config
from site_harvest.crawler.errors import CrawlError
from site_harvest.crawler.models import DEFAULT_PALETTE
from site_harvest.engine import fetch_theme, run_crawl
from site_harvest.logger import init_logging
from site_harvest.report.context import build_context
from site_harvest.report.html_report import render_html
from site_harvest.report.json_report import JsonFileStorage, render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteHarvest, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to a YAML or JSON config file.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file (stderr only when omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Logging format string'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """SiteHarvest command group."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Failed to load config: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save the JSON report'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save the HTML report'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Directory with report.html.j2 (packaged template by default)'
)
@click.option('--pretty', is_flag=True, help='Indent JSON output')
@click.option('--session-timeout', 'session_timeout', type=float, default=None, help='Timeout of the whole session (seconds)')
@click.option('--max-urls', 'max_urls', type=click.IntRange(min=0), default=None, help='Budget of additional pages')
@click.option(
    '--store-dir', 'store_dir',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Store the document as JSON in this directory'
)
@click.option('--owner', 'owner_id', default='cli', show_default=True, help='Owner id used with --store-dir')
@click.option('--context', 'as_context', is_flag=True, help='Print the plain-text context instead of JSON')
@click.option('--question', default=None, help='Question appended to the --context output')
@click.pass_context
def crawl(ctx, url, json_output, html_output, template_dir, pretty, session_timeout, max_urls,
          store_dir, owner_id, as_context, question):
    """Crawl URL and the additional pages discovered for its host."""
    cfg = ctx.obj['config']
    overrides = {}
    if session_timeout is not None:
        overrides['session_timeout'] = session_timeout
    if max_urls is not None:
        overrides['max_additional_urls'] = max_urls
    if overrides:
        cfg = cfg.model_copy(update=overrides)

    try:
        document = asyncio.run(run_crawl(url, cfg, notifier=LoggingNotifier()))
    except CrawlError as e:
        print_error(f'Crawl failed: {e}')

    if store_dir:
        try:
            stored = JsonFileStorage(store_dir).save(document, owner_id)
            click.echo(f'Stored: {stored.document_id} ({stored.display_name})', err=True)
        except OSError as e:
            print_error(f'Failed to store document: {e}')

    if as_context:
        click.echo(build_context(document, question))
        return

    if not json_output and not html_output:
        click.echo(document.json(pretty=pretty))
        return

    if json_output:
        try:
            saved_json = render_json(document, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved_json}')
        except OSError as e:
            print_error(f'Failed to save JSON: {e}')

    if html_output:
        try:
            saved_html = render_html(document, template_dir, html_output, fallback_palette=cfg.fallback_palette)
            click.echo(f'HTML report: {saved_html}')
        except Exception as e:
            print_error(f'Failed to save HTML: {e}')


@cli.command('theme', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--fallback', is_flag=True, help='Fill unassigned colours from the fallback palette')
@click.pass_context
def theme(ctx, url, fallback):
    """Extract the brand theme of URL only."""
    cfg = ctx.obj['config']
    try:
        record = asyncio.run(fetch_theme(url, cfg))
    except CrawlError as e:
        print_error(f'Theme extraction failed: {e}')

    data = asdict(record)
    if fallback:
        palette = cfg.fallback_palette or DEFAULT_PALETTE
        data['colors'] = asdict(record.colors.with_fallback(palette))
    click.echo(json.dumps(data, ensure_ascii=False, indent=2))


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the effective configuration as JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
