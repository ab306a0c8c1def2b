"""Command-line interface using Click."""
from __future__ import annotations

import dataclasses
import sys
from pathlib import Path

import click
import requests

from lrcfetch.core.commands import FAILURE, DownloadOutcome, client_for, download_lyrics_batch
from lrcfetch.core.errors import LrcFetchError
from lrcfetch.core.log import setup_logging
from lrcfetch.db.database import get_config, initialize_database, set_config

DB_ENV = "LRCFETCH_DB"


@click.group()
@click.option('--db', 'db_path', envvar=DB_ENV, required=True, type=click.Path(dir_okay=False),
              help=f'Catalog database (defaults to ${DB_ENV})')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--log-file', type=click.Path(), help='Log to file')
@click.pass_context
def cli(ctx, db_path, verbose, log_file):
    """lrcfetch - download LRCLIB lyrics for a local music catalog."""
    ctx.ensure_object(dict)
    setup_logging(
        level="DEBUG" if verbose else None,
        log_file=Path(log_file) if log_file else None,
        verbose=verbose,
    )
    db = initialize_database(db_path)
    ctx.call_on_close(db.close)
    ctx.obj['db'] = db


@cli.command()
@click.argument('track_ids', nargs=-1, type=int, required=True)
@click.option('--workers', type=int, default=4, show_default=True, help='Concurrent lookups')
@click.pass_context
def download(ctx, track_ids, workers):
    """Download lyrics for the given track ids."""
    def on_progress(outcome: DownloadOutcome) -> None:
        source = f" ({outcome.source.value})" if outcome.source else ""
        click.echo(f"[{outcome.status}] track {outcome.track_id}: {outcome.message}{source}")

    outcomes = download_lyrics_batch(ctx.obj['db'], track_ids, max_workers=workers, on_progress=on_progress)
    if any(o.status == FAILURE for o in outcomes):
        sys.exit(1)


@cli.command()
@click.option('--title', default='', help='Track name')
@click.option('--album', default='', help='Album name')
@click.option('--artist', default='', help='Artist name')
@click.option('-q', '--query', default='', help='Free-text query')
@click.pass_context
def search(ctx, title, album, artist, query):
    """Search LRCLIB and list the candidates."""
    client = client_for(get_config(ctx.obj['db']))
    try:
        results = client.search(title, album, artist, query)
    except (LrcFetchError, requests.RequestException) as e:
        click.echo(f"Search failed: {e}", err=True)
        sys.exit(1)

    for item in results:
        kind = "synced" if item.synced_lyrics else "plain" if item.plain_lyrics else \
            "instrumental" if item.instrumental else "none"
        duration = f"{item.duration:.0f}s" if item.duration is not None else "?"
        click.echo(f"{item.id}\t{item.artist_name} - {item.name} [{item.album_name}] {duration} {kind}")


@cli.group()
def config():
    """Show or change preferences."""
    pass


@config.command('show')
@click.pass_context
def config_show(ctx):
    """Print the current preferences."""
    for key, value in dataclasses.asdict(get_config(ctx.obj['db'])).items():
        click.echo(f"{key}: {value}")


@config.command('set')
@click.option('--instance', help='LRCLIB base URL')
@click.option('--embed/--no-embed', default=None, help='Embed lyrics into MP3/FLAC tags')
@click.option('--tolerance', type=float, help='Duration tolerance in seconds (0 disables fallbacks)')
@click.option('--fuzzy/--no-fuzzy', default=None, help='Free-text fallback search')
@click.pass_context
def config_set(ctx, instance, embed, tolerance, fuzzy):
    """Change preferences."""
    db = ctx.obj['db']
    changes = {
        "lrclib_instance": instance,
        "try_embed_lyrics": embed,
        "duration_tolerance": tolerance,
        "fuzzy_search_enabled": fuzzy,
    }
    current = get_config(db)
    set_config(db, dataclasses.replace(current, **{k: v for k, v in changes.items() if v is not None}))
    click.echo("Configuration saved")


def main():
    cli()


if __name__ == '__main__':
    main()
