# core/embed_lyrics.py
from __future__ import annotations

import logging
import os
from typing import Optional, Protocol

from mutagen.flac import FLAC
from mutagen.id3 import ID3, SYLT, USLT, ID3NoHeaderError

from lrcfetch.core.lrc import parse_lrc

logger = logging.getLogger(__name__)

# Convention:
#   - Synced LRC goes into:   LYRICS
#   - Unsynced (plain) goes into: UNSYNCEDLYRICS
VORBIS_SYNCED_KEY = "LYRICS"
VORBIS_PLAIN_KEY = "UNSYNCEDLYRICS"

ID3_LANG = "XXX"
ID3_UTF8 = 3
SYLT_FORMAT_MS = 2
SYLT_TYPE_LYRICS = 1


class LyricsEmbedder(Protocol):
    def embed(self, path: str, plain: Optional[str], synced: Optional[str]) -> None:
        ...


class Mp3LyricsEmbedder:
    """ID3v2: USLT holds the plain text, SYLT the timed lines."""

    def embed(self, path: str, plain: Optional[str], synced: Optional[str]) -> None:
        try:
            tags = ID3(path)
        except ID3NoHeaderError:
            tags = ID3()

        tags.delall("USLT")
        if plain:
            tags.add(USLT(encoding=ID3_UTF8, lang=ID3_LANG, desc="", text=plain))

        tags.delall("SYLT")
        if synced:
            tags.add(
                SYLT(
                    encoding=ID3_UTF8,
                    lang=ID3_LANG,
                    format=SYLT_FORMAT_MS,
                    type=SYLT_TYPE_LYRICS,
                    desc="",
                    text=sylt_lines(synced),
                )
            )

        tags.save(path)


class FlacLyricsEmbedder:
    """Vorbis comments inside the FLAC metadata block."""

    def embed(self, path: str, plain: Optional[str], synced: Optional[str]) -> None:
        audio = FLAC(path)
        if audio.tags is None:
            audio.add_tags()

        if plain:
            audio[VORBIS_PLAIN_KEY] = [plain]
        elif VORBIS_PLAIN_KEY in audio:
            del audio[VORBIS_PLAIN_KEY]

        if synced:
            audio[VORBIS_SYNCED_KEY] = [synced]
        elif VORBIS_SYNCED_KEY in audio:
            del audio[VORBIS_SYNCED_KEY]

        audio.save()


EMBEDDERS: dict[str, LyricsEmbedder] = {
    ".mp3": Mp3LyricsEmbedder(),
    ".flac": FlacLyricsEmbedder(),
}


def sylt_lines(synced: str) -> list[tuple[str, int]]:
    """LRC text -> mutagen SYLT payload: (text, milliseconds) pairs."""
    return [(text, ms) for ms, text in parse_lrc(synced, keep_empty=True)]


def embed_lyrics(path: str, plain: Optional[str], synced: Optional[str]) -> bool:
    """
    Embed lyrics depending on file extension (.mp3 / .flac).

    Sidecar files are the record that counts, so a failure here is logged
    and reported through the return value instead of being raised.
    """
    ext = os.path.splitext(path)[1].lower()
    embedder = EMBEDDERS.get(ext)
    if embedder is None:
        logger.debug("No lyrics embedder for %s", path)
        return False

    try:
        embedder.embed(path, plain, synced)
    except Exception:
        logger.exception("Error embedding lyrics in %s", path)
        return False
    return True
