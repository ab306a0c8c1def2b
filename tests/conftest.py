"""Test configuration and fixtures.

Provides reusable fixtures for:
- Fake HTTP session/responses standing in for requests.Session
- A fake LRCLIB client for resolver and command tests
- A temporary catalog database with a track on disk; the scanner that
  normally fills the catalog is not part of lrcfetch, so insert_track
  writes the rows directly
- A Qt core application for the worker tests
"""

import logging
import os
import sqlite3
from pathlib import Path
from typing import Optional

import pytest

from lrcfetch.core.models import NoLyrics
from lrcfetch.core.utils import is_instrumental_lrc
from lrcfetch.db.database import initialize_database
from lrcfetch.db.models import Track

_NO_JSON = object()


# =============================================================================
# HTTP fakes
# =============================================================================


class FakeResponse:
    def __init__(self, status_code=200, payload=_NO_JSON, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is _NO_JSON:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """Hands out queued responses in order; queued exceptions are raised instead."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []
        self.headers = {}

    def _next(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def get(self, url, params=None, timeout=None):
        return self._next("GET", url, params=params, timeout=timeout)

    def post(self, url, json=None, headers=None, timeout=None):
        return self._next("POST", url, json=json, headers=headers, timeout=timeout)


class FakeClient:
    """Scripted LrcLibClient: exact lookup, field search and free-text search."""

    def __init__(self, exact=None, field_results=(), fuzzy_results=(), fuzzy_error: Optional[Exception] = None):
        self.exact = exact if exact is not None else NoLyrics()
        self.field_results = list(field_results)
        self.fuzzy_results = list(fuzzy_results)
        self.fuzzy_error = fuzzy_error
        self.get_calls = []
        self.search_calls = []

    def get_lyrics(self, title, album, artist, duration):
        self.get_calls.append((title, album, artist, duration))
        return self.exact

    def search(self, title, album, artist, q):
        self.search_calls.append((title, album, artist, q))
        if q:
            if self.fuzzy_error is not None:
                raise self.fuzzy_error
            return self.fuzzy_results
        return self.field_results


# =============================================================================
# Catalog fixtures
# =============================================================================


def insert_track(
    db: sqlite3.Connection,
    file_path,
    title: str = "Song",
    album: str = "Album",
    artist: str = "Artist",
    duration: float = 200.0,
    txt_lyrics: Optional[str] = None,
    lrc_lyrics: Optional[str] = None,
) -> int:
    artist_id = db.execute("INSERT INTO artists (name) VALUES (?)", (artist,)).lastrowid
    album_id = db.execute(
        "INSERT INTO albums (name, album_artist_name) VALUES (?, ?)", (album, artist)
    ).lastrowid
    track_id = db.execute(
        """
        INSERT INTO tracks (
            file_path, file_name, title, album_id, artist_id,
            duration, txt_lyrics, lrc_lyrics, instrumental
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            str(file_path), os.path.basename(file_path), title, album_id, artist_id,
            duration, txt_lyrics, lrc_lyrics, is_instrumental_lrc(lrc_lyrics),
        ),
    ).lastrowid
    db.commit()
    return track_id


@pytest.fixture
def audio_path(tmp_path) -> Path:
    path = tmp_path / "Artist - Song.mp3"
    path.write_bytes(b"fake audio data")
    return path


@pytest.fixture
def track(audio_path) -> Track:
    return Track(
        id=1,
        file_path=str(audio_path),
        file_name=audio_path.name,
        title="Song",
        album_name="Album",
        album_artist_name="Artist",
        artist_name="Artist",
        duration=200.0,
    )


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "catalog" / "db.sqlite3")


@pytest.fixture
def db(db_path):
    conn = initialize_database(db_path)
    yield conn
    conn.close()


@pytest.fixture
def track_id(db, audio_path) -> int:
    return insert_track(db, audio_path)


# =============================================================================
# Qt
# =============================================================================


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtCore import QCoreApplication

    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture(autouse=True)
def reset_lrcfetch_logger():
    """setup_logging binds handlers to the current stderr; drop them between tests."""
    yield
    logging.getLogger("lrcfetch").handlers.clear()
