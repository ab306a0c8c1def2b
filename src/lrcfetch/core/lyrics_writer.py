# core/lyrics_writer.py
"""
Writes lyrics next to the audio file (.txt / .lrc sidecars) and, when asked,
into the file's own tags.

Only one of the two sidecars exists at a time. Embedding is best effort:
the sidecars are written first and stay as they are if embedding fails.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from lrcfetch.core.embed_lyrics import embed_lyrics
from lrcfetch.core.models import Instrumental, LyricsResult, NoLyrics, SyncedLyrics, UnsyncedLyrics
from lrcfetch.core.utils import INSTRUMENTAL_MARKER

if TYPE_CHECKING:
    from lrcfetch.db.models import Track

logger = logging.getLogger(__name__)


def build_txt_path(track_path: str) -> Path:
    return Path(track_path).with_suffix(".txt")


def build_lrc_path(track_path: str) -> Path:
    return Path(track_path).with_suffix(".lrc")


def _write(path: Path, text: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)


def save_plain_lyrics(track_path: str, lyrics: str) -> None:
    build_lrc_path(track_path).unlink(missing_ok=True)

    txt_path = build_txt_path(track_path)
    if lyrics:
        _write(txt_path, lyrics)
    else:
        txt_path.unlink(missing_ok=True)


def save_synced_lyrics(track_path: str, lyrics: str) -> None:
    lrc_path = build_lrc_path(track_path)
    if lyrics:
        build_txt_path(track_path).unlink(missing_ok=True)
        _write(lrc_path, lyrics)
    else:
        lrc_path.unlink(missing_ok=True)


def save_instrumental(track_path: str) -> None:
    build_txt_path(track_path).unlink(missing_ok=True)
    build_lrc_path(track_path).unlink(missing_ok=True)
    _write(build_lrc_path(track_path), INSTRUMENTAL_MARKER)


def clear_lyrics(track_path: str) -> None:
    build_txt_path(track_path).unlink(missing_ok=True)
    build_lrc_path(track_path).unlink(missing_ok=True)


def apply_lyrics_for_track(track: "Track", lyrics: LyricsResult, is_try_embed_lyrics: bool) -> LyricsResult:
    """
    Persist a downloaded result. NoLyrics leaves whatever is on disk alone,
    so a failed lookup never wipes lyrics the user already has.
    """
    path = track.file_path
    if isinstance(lyrics, SyncedLyrics):
        save_synced_lyrics(path, lyrics.synced)
        if is_try_embed_lyrics:
            embed_lyrics(path, lyrics.plain, lyrics.synced)
    elif isinstance(lyrics, UnsyncedLyrics):
        save_plain_lyrics(path, lyrics.plain)
        if is_try_embed_lyrics:
            embed_lyrics(path, lyrics.plain, "")
    elif isinstance(lyrics, Instrumental):
        save_instrumental(path)
    elif isinstance(lyrics, NoLyrics):
        logger.debug("Nothing to write for %s", path)
    else:
        raise TypeError(f"Unexpected lyrics result: {lyrics!r}")
    return lyrics


def apply_string_lyrics_for_track(
    track: "Track",
    plain_lyrics: str,
    synced_lyrics: str,
    is_try_embed_lyrics: bool,
) -> None:
    """Persist user-edited lyrics. Two empty strings clear both sidecars."""
    if not plain_lyrics and not synced_lyrics:
        clear_lyrics(track.file_path)
    else:
        save_plain_lyrics(track.file_path, plain_lyrics)
        save_synced_lyrics(track.file_path, synced_lyrics)

    if is_try_embed_lyrics:
        embed_lyrics(track.file_path, plain_lyrics, synced_lyrics)
