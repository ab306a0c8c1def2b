from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional
import sqlite3

from lrcfetch.core.utils import is_instrumental_lrc


class LyricsStatus(str, Enum):
    MISSING = "missing"
    PLAIN = "plain"
    SYNCED = "synced"
    INSTRUMENTAL = "instrumental"


@dataclass
class Track:
    id: int
    file_path: str
    file_name: str
    title: str
    album_name: str
    album_artist_name: Optional[str]
    artist_name: str
    duration: float
    txt_lyrics: Optional[str] = None
    lrc_lyrics: Optional[str] = None
    instrumental: bool = False

    @property
    def has_synced_lyrics(self) -> bool:
        return bool(self.lrc_lyrics) and not is_instrumental_lrc(self.lrc_lyrics)

    @property
    def lyrics_status(self) -> LyricsStatus:
        if self.instrumental:
            return LyricsStatus.INSTRUMENTAL
        if self.has_synced_lyrics:
            return LyricsStatus.SYNCED
        if self.txt_lyrics:
            return LyricsStatus.PLAIN
        return LyricsStatus.MISSING

    @staticmethod
    def from_row(row: sqlite3.Row) -> "Track":
        return Track(
            id=row["id"],
            file_path=row["file_path"],
            file_name=row["file_name"],
            title=row["title"],
            artist_name=row["artist_name"],
            album_name=row["album_name"],
            album_artist_name=row["album_artist_name"],
            duration=row["duration"],
            txt_lyrics=row["txt_lyrics"],
            lrc_lyrics=row["lrc_lyrics"],
            instrumental=bool(row["instrumental"]),
        )


@dataclass
class Config:
    lrclib_instance: str = "https://lrclib.net"
    try_embed_lyrics: bool = False
    duration_tolerance: float = 3.0
    fuzzy_search_enabled: bool = True
    skip_tracks_with_plain_lyrics: bool = False
