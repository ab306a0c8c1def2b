# core/models.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from lrcfetch.core.utils import strip_timestamp


# ---- Lyrics result (exactly one variant is active) ----
@dataclass(frozen=True)
class SyncedLyrics:
    synced: str
    plain: str


@dataclass(frozen=True)
class UnsyncedLyrics:
    plain: str


@dataclass(frozen=True)
class Instrumental:
    pass


@dataclass(frozen=True)
class NoLyrics:
    pass


LyricsResult = Union[SyncedLyrics, UnsyncedLyrics, Instrumental, NoLyrics]


class MatchSource(str, Enum):
    EXACT = "exact"
    DURATION_FALLBACK = "duration_fallback"
    FUZZY_FALLBACK = "fuzzy_fallback"
    NONE = "none"


def lyrics_from_fields(
    synced: Optional[str],
    plain: Optional[str],
    instrumental: bool,
) -> LyricsResult:
    """Synced beats plain beats instrumental; nothing at all means NoLyrics."""
    if synced is not None:
        if plain is None:
            plain = strip_timestamp(synced)
        return SyncedLyrics(synced=synced, plain=plain)
    if plain is not None:
        return UnsyncedLyrics(plain=plain)
    if instrumental:
        return Instrumental()
    return NoLyrics()


# ---- LRCLIB payloads ----
@dataclass(frozen=True)
class RawLyrics:
    """Body of /api/get and /api/get/{id}."""
    id: Optional[int]
    name: Optional[str]
    artist_name: Optional[str]
    album_name: Optional[str]
    duration: Optional[float]
    instrumental: bool
    plain_lyrics: Optional[str]
    synced_lyrics: Optional[str]

    @staticmethod
    def from_json(data: dict[str, Any]) -> "RawLyrics":
        return RawLyrics(
            id=data.get("id"),
            name=data.get("trackName", data.get("name")),
            artist_name=data.get("artistName"),
            album_name=data.get("albumName"),
            duration=data.get("duration"),
            instrumental=bool(data.get("instrumental", False)),
            plain_lyrics=data.get("plainLyrics"),
            synced_lyrics=data.get("syncedLyrics"),
        )

    def is_empty(self) -> bool:
        return self.synced_lyrics is None and self.plain_lyrics is None and not self.instrumental

    def to_result(self) -> LyricsResult:
        return lyrics_from_fields(self.synced_lyrics, self.plain_lyrics, self.instrumental)


@dataclass(frozen=True)
class SearchCandidate:
    """One item of /api/search."""
    id: int
    name: Optional[str]
    artist_name: Optional[str]
    album_name: Optional[str]
    duration: Optional[float]
    instrumental: bool
    plain_lyrics: Optional[str]
    synced_lyrics: Optional[str]

    @staticmethod
    def from_json(data: dict[str, Any]) -> "SearchCandidate":
        return SearchCandidate(
            id=data["id"],
            name=data.get("trackName", data.get("name")),
            artist_name=data.get("artistName"),
            album_name=data.get("albumName"),
            duration=data.get("duration"),
            instrumental=bool(data.get("instrumental", False)),
            plain_lyrics=data.get("plainLyrics"),
            synced_lyrics=data.get("syncedLyrics"),
        )

    def to_result(self) -> LyricsResult:
        return lyrics_from_fields(self.synced_lyrics, self.plain_lyrics, self.instrumental)


@dataclass(frozen=True)
class Challenge:
    prefix: str
    target: str
