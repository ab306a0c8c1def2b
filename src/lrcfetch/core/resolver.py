# core/resolver.py
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import requests

from lrcfetch.core.errors import LrcFetchError
from lrcfetch.core.lrclib_client import LrcLibClient
from lrcfetch.core.lyrics_writer import apply_lyrics_for_track
from lrcfetch.core.matching import MIN_TITLE_SIMILARITY, pick_best_match, text_similarity
from lrcfetch.core.models import LyricsResult, MatchSource, NoLyrics, UnsyncedLyrics

if TYPE_CHECKING:
    from lrcfetch.db.models import Config, Track

logger = logging.getLogger(__name__)


def download_lyrics_for_track(
    track: "Track",
    config: "Config",
    client: LrcLibClient,
    keep_plain: bool = False,
) -> tuple[LyricsResult, MatchSource]:
    """
    Find lyrics for a track and write them to disk.

    Tiers, in order, stopping at the first hit:
      1) /api/get with the exact title/album/artist/duration
      2) field search, keeping results within the duration tolerance
      3) free-text search "title artist", keeping results whose title is
         similar enough, then the same duration ranking

    Tolerance <= 0 disables 2) and 3); fuzzy_search_enabled gates 3).
    Errors from 1) and 2) propagate to the caller, including search
    failures in the duration tier. Only 3) is best effort.

    With keep_plain set, an unsynced result is returned without touching
    the files, so a track that already has plain lyrics keeps them.
    """
    embed = config.try_embed_lyrics
    tolerance = config.duration_tolerance

    def apply(lyrics: LyricsResult) -> LyricsResult:
        if keep_plain and isinstance(lyrics, UnsyncedLyrics):
            logger.debug("Track %s already has plain lyrics, leaving files as they are", track.id)
            return lyrics
        return apply_lyrics_for_track(track, lyrics, embed)

    lyrics = client.get_lyrics(track.title, track.album_name, track.artist_name, track.duration)
    if not isinstance(lyrics, NoLyrics):
        logger.info("Exact match for track %s", track.id)
        return apply(lyrics), MatchSource.EXACT

    if tolerance <= 0:
        return apply_lyrics_for_track(track, NoLyrics(), embed), MatchSource.NONE

    lyrics = search_with_duration_tolerance(
        client, track.title, track.album_name, track.artist_name, track.duration, tolerance
    )
    if not isinstance(lyrics, NoLyrics):
        logger.info("Duration fallback match for track %s", track.id)
        return apply(lyrics), MatchSource.DURATION_FALLBACK

    if not config.fuzzy_search_enabled:
        return apply_lyrics_for_track(track, NoLyrics(), embed), MatchSource.NONE

    try:
        lyrics = search_fuzzy_fallback(client, track.title, track.artist_name, track.duration, tolerance)
    except (LrcFetchError, requests.RequestException) as e:
        logger.warning("Fuzzy search failed for track %s: %s", track.id, e)
        lyrics = NoLyrics()

    source = MatchSource.NONE if isinstance(lyrics, NoLyrics) else MatchSource.FUZZY_FALLBACK
    if source is MatchSource.FUZZY_FALLBACK:
        logger.info("Fuzzy fallback match for track %s", track.id)
    return apply(lyrics), source


def search_with_duration_tolerance(
    client: LrcLibClient,
    title: str,
    album_name: str,
    artist_name: str,
    duration: float,
    duration_tolerance: float,
) -> LyricsResult:
    results = client.search(title, album_name, artist_name, "")
    best = pick_best_match(results, duration, duration_tolerance)
    return best.to_result() if best is not None else NoLyrics()


def search_fuzzy_fallback(
    client: LrcLibClient,
    title: str,
    artist_name: str,
    duration: float,
    duration_tolerance: float,
) -> LyricsResult:
    q = f"{title} {artist_name}"
    results = client.search("", "", "", q)

    candidates = [
        item for item in results
        if item.name is not None and text_similarity(title, item.name) >= MIN_TITLE_SIMILARITY
    ]
    logger.debug("Fuzzy search %r: %d of %d results similar enough", q, len(candidates), len(results))

    best = pick_best_match(candidates, duration, duration_tolerance)
    return best.to_result() if best is not None else NoLyrics()
