# core/commands.py
"""
Entry points used by the UI workers and the CLI.

Each command reads what it needs from the catalog, runs the lyrics core and
writes the outcome back, returning a message meant for the user.
"""
from __future__ import annotations

import logging
import sqlite3
from concurrent.futures import Executor, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Optional

import requests

from lrcfetch.core.challenge import make_publish_token, solve_challenge_off_thread
from lrcfetch.core.errors import LrcFetchError, LyricsNotFoundError
from lrcfetch.core.lrclib_client import LrcLibClient
from lrcfetch.core.lyrics_writer import apply_lyrics_for_track, apply_string_lyrics_for_track
from lrcfetch.core.models import (
    Instrumental,
    LyricsResult,
    MatchSource,
    NoLyrics,
    RawLyrics,
    SyncedLyrics,
    UnsyncedLyrics,
)
from lrcfetch.core.resolver import download_lyrics_for_track
from lrcfetch.core.utils import is_instrumental_lrc
from lrcfetch.db.database import (
    get_config,
    get_track_by_id,
    update_track_instrumental,
    update_track_null_lyrics,
    update_track_plain_lyrics,
    update_track_synced_lyrics,
)
from lrcfetch.db.models import Config, Track

logger = logging.getLogger(__name__)

PENDING = "Pending"
IN_PROGRESS = "In Progress"
DONE = "Done"

SUCCESS = "success"
SKIPPED = "skipped"
FAILURE = "failure"


@dataclass(frozen=True)
class PublishProgress:
    request_challenge: str = PENDING
    solve_challenge: str = PENDING
    publish_lyrics: str = PENDING


@dataclass(frozen=True)
class FlagProgress:
    request_challenge: str = PENDING
    solve_challenge: str = PENDING
    flag_lyrics: str = PENDING


@dataclass(frozen=True)
class DownloadOutcome:
    track_id: int
    status: str  # success | skipped | failure
    message: str
    source: Optional[MatchSource] = None


def client_for(config: Config) -> LrcLibClient:
    return LrcLibClient(base_url=config.lrclib_instance)


def _skip_reason(track: Track, config: Config) -> Optional[str]:
    """Tracks with real synced lyrics are never looked up again."""
    if track.has_synced_lyrics:
        return "Skipped: already has synced lyrics"
    if config.skip_tracks_with_plain_lyrics and track.txt_lyrics:
        return "Skipped: already has plain lyrics"
    return None


def _record_lyrics(db: sqlite3.Connection, track: Track, lyrics: LyricsResult, downloaded: bool) -> tuple[str, str]:
    """Store an applied result in the catalog; returns (status, message)."""
    if isinstance(lyrics, SyncedLyrics):
        update_track_synced_lyrics(db, track.id, lyrics.synced, lyrics.plain)
        return SUCCESS, "Synced lyrics downloaded"
    if isinstance(lyrics, UnsyncedLyrics):
        if downloaded and track.txt_lyrics:
            return SKIPPED, "Skipped: already has plain lyrics, no synced available"
        update_track_plain_lyrics(db, track.id, lyrics.plain)
        return SUCCESS, "Plain lyrics downloaded"
    if isinstance(lyrics, Instrumental):
        update_track_instrumental(db, track.id)
        return SUCCESS, "Marked track as instrumental"
    if isinstance(lyrics, NoLyrics):
        raise LyricsNotFoundError()
    raise TypeError(f"Unexpected lyrics result: {lyrics!r}")


def download_lyrics(db: sqlite3.Connection, track_id: int, client: Optional[LrcLibClient] = None) -> str:
    """Resolve lyrics for one track. Raises LyricsNotFoundError when nothing matched."""
    track = get_track_by_id(db, track_id)
    config = get_config(db)

    skip = _skip_reason(track, config)
    if skip:
        return skip

    lyrics, source = download_lyrics_for_track(
        track, config, client or client_for(config), keep_plain=bool(track.txt_lyrics)
    )
    logger.info("Track %s resolved via %s", track_id, source.value)
    _, message = _record_lyrics(db, track, lyrics, downloaded=True)
    return message


def download_lyrics_batch(
    db: sqlite3.Connection,
    track_ids: Iterable[int],
    client: Optional[LrcLibClient] = None,
    max_workers: int = 4,
    on_progress: Optional[Callable[[DownloadOutcome], None]] = None,
) -> list[DownloadOutcome]:
    """
    Resolve many tracks concurrently.

    Network lookups and file writes run on a thread pool sharing one client;
    catalog reads and writes stay on the calling thread since sqlite
    connections are bound to the thread that opened them. A failing track is
    reported and the batch moves on.
    """
    config = get_config(db)
    client = client or client_for(config)
    outcomes: list[DownloadOutcome] = []

    def report(outcome: DownloadOutcome) -> None:
        outcomes.append(outcome)
        if on_progress:
            on_progress(outcome)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {}
        for track_id in track_ids:
            try:
                track = get_track_by_id(db, track_id)
            except LrcFetchError as e:
                report(DownloadOutcome(track_id, FAILURE, str(e)))
                continue

            skip = _skip_reason(track, config)
            if skip:
                report(DownloadOutcome(track_id, SKIPPED, skip))
                continue

            future = executor.submit(
                download_lyrics_for_track, track, config, client, keep_plain=bool(track.txt_lyrics)
            )
            futures[future] = track

        for future in as_completed(futures):
            track = futures[future]
            try:
                lyrics, source = future.result()
                status, message = _record_lyrics(db, track, lyrics, downloaded=True)
                report(DownloadOutcome(track.id, status, message, source))
            except (LrcFetchError, requests.RequestException, OSError) as e:
                logger.warning("Lyrics download failed for track %s: %s", track.id, e)
                report(DownloadOutcome(track.id, FAILURE, str(e), MatchSource.NONE))

    return outcomes


def apply_lyrics(db: sqlite3.Connection, track_id: int, raw: RawLyrics) -> str:
    """Apply a result the user picked from a preview or search list."""
    track = get_track_by_id(db, track_id)
    config = get_config(db)

    lyrics = apply_lyrics_for_track(track, raw.to_result(), config.try_embed_lyrics)
    _, message = _record_lyrics(db, track, lyrics, downloaded=False)
    return message


def save_lyrics(db: sqlite3.Connection, track_id: int, plain_lyrics: str, synced_lyrics: str) -> str:
    """Persist lyrics edited by hand."""
    track = get_track_by_id(db, track_id)
    config = get_config(db)

    apply_string_lyrics_for_track(track, plain_lyrics, synced_lyrics, config.try_embed_lyrics)

    if is_instrumental_lrc(synced_lyrics):
        update_track_instrumental(db, track.id)
    elif synced_lyrics:
        update_track_synced_lyrics(db, track.id, synced_lyrics, plain_lyrics)
    elif plain_lyrics:
        update_track_plain_lyrics(db, track.id, plain_lyrics)
    else:
        update_track_null_lyrics(db, track.id)

    return "Lyrics saved successfully"


def publish_lyrics(
    client: LrcLibClient,
    title: str,
    album_name: str,
    artist_name: str,
    duration: float,
    plain_lyrics: str,
    synced_lyrics: str,
    on_progress: Optional[Callable[[PublishProgress], None]] = None,
    executor: Optional[Executor] = None,
) -> None:
    emit = on_progress or (lambda _progress: None)

    progress = PublishProgress(request_challenge=IN_PROGRESS)
    emit(progress)
    challenge = client.request_challenge()

    progress = replace(progress, request_challenge=DONE, solve_challenge=IN_PROGRESS)
    emit(progress)
    nonce = solve_challenge_off_thread(challenge.prefix, challenge.target, executor)

    progress = replace(progress, solve_challenge=DONE, publish_lyrics=IN_PROGRESS)
    emit(progress)
    client.publish(
        title, album_name, artist_name, duration,
        plain_lyrics, synced_lyrics,
        make_publish_token(challenge, nonce),
    )

    emit(replace(progress, publish_lyrics=DONE))


def flag_lyrics(
    client: LrcLibClient,
    track_id: int,
    flag_reason: str,
    on_progress: Optional[Callable[[FlagProgress], None]] = None,
    executor: Optional[Executor] = None,
) -> None:
    emit = on_progress or (lambda _progress: None)

    progress = FlagProgress(request_challenge=IN_PROGRESS)
    emit(progress)
    challenge = client.request_challenge()

    progress = replace(progress, request_challenge=DONE, solve_challenge=IN_PROGRESS)
    emit(progress)
    nonce = solve_challenge_off_thread(challenge.prefix, challenge.target, executor)

    progress = replace(progress, solve_challenge=DONE, flag_lyrics=IN_PROGRESS)
    emit(progress)
    client.flag(track_id, flag_reason, make_publish_token(challenge, nonce))

    emit(replace(progress, flag_lyrics=DONE))
