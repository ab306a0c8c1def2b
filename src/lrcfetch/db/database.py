import logging
import os
import sqlite3

from lrcfetch.core.errors import TrackNotFoundError
from lrcfetch.core.utils import INSTRUMENTAL_MARKER
from lrcfetch.db.models import Config, Track
from lrcfetch.db.schema import DEFAULT_CONFIG_SQL, SCHEMA_SQL, SCHEMA_VERSION

logger = logging.getLogger(__name__)


def connect(db_path: str) -> sqlite3.Connection:
    db = sqlite3.connect(db_path)
    db.row_factory = sqlite3.Row
    return db


def initialize_database(db_path: str) -> sqlite3.Connection:
    parent = os.path.dirname(db_path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    logger.info("Database file path: %s", db_path)

    db = connect(db_path)
    existing_version = db.execute("PRAGMA user_version").fetchone()[0]
    if existing_version < SCHEMA_VERSION:
        db.execute("PRAGMA journal_mode=WAL")
        db.executescript(SCHEMA_SQL)
        db.execute(DEFAULT_CONFIG_SQL)
        db.execute(f"PRAGMA user_version={SCHEMA_VERSION}")
        db.commit()
    return db

# -------------------------------
# CONFIG
# -------------------------------
def get_config(db: sqlite3.Connection) -> Config:
    row = db.execute("""
        SELECT skip_tracks_with_plain_lyrics,
               try_embed_lyrics,
               lrclib_instance,
               duration_tolerance,
               fuzzy_search_enabled
        FROM config_data
        LIMIT 1
    """).fetchone()
    return Config(
        skip_tracks_with_plain_lyrics=bool(row["skip_tracks_with_plain_lyrics"]),
        try_embed_lyrics=bool(row["try_embed_lyrics"]),
        lrclib_instance=row["lrclib_instance"],
        duration_tolerance=float(row["duration_tolerance"]),
        fuzzy_search_enabled=bool(row["fuzzy_search_enabled"]),
    )


def set_config(db: sqlite3.Connection, config: Config):
    db.execute("""
        UPDATE config_data
        SET skip_tracks_with_plain_lyrics = ?,
            try_embed_lyrics = ?,
            lrclib_instance = ?,
            duration_tolerance = ?,
            fuzzy_search_enabled = ?
        WHERE 1
    """, (
        config.skip_tracks_with_plain_lyrics,
        config.try_embed_lyrics,
        config.lrclib_instance,
        config.duration_tolerance,
        config.fuzzy_search_enabled,
    ))
    db.commit()

# -------------------------------
# TRACKS
# -------------------------------
_TRACK_SELECT = """
    SELECT
        tracks.id,
        file_path,
        file_name,
        title,
        artists.name AS artist_name,
        albums.name AS album_name,
        albums.album_artist_name,
        duration,
        txt_lyrics,
        lrc_lyrics,
        instrumental
    FROM tracks
    JOIN albums ON tracks.album_id = albums.id
    JOIN artists ON tracks.artist_id = artists.id
"""


def get_track_by_id(db: sqlite3.Connection, track_id: int) -> Track:
    row = db.execute(_TRACK_SELECT + " WHERE tracks.id = ? LIMIT 1", (track_id,)).fetchone()
    if row is None:
        raise TrackNotFoundError(f"Track not found: {track_id}")
    return Track.from_row(row)

# -------------------------------
# UPDATE TRACKS
# -------------------------------
def update_track_synced_lyrics(db: sqlite3.Connection, track_id: int, synced_lyrics: str, plain_lyrics: str) -> Track:
    synced_lyrics = (synced_lyrics or "").strip() or None
    plain_lyrics = (plain_lyrics or "").strip() or None

    db.execute("""
        UPDATE tracks
        SET lrc_lyrics = ?, txt_lyrics = ?, instrumental = 0
        WHERE id = ?
    """, (synced_lyrics, plain_lyrics, track_id))
    db.commit()
    return get_track_by_id(db, track_id)


def update_track_plain_lyrics(db: sqlite3.Connection, track_id: int, plain_lyrics: str) -> Track:
    plain_lyrics = (plain_lyrics or "").strip() or None
    db.execute("""
        UPDATE tracks
        SET txt_lyrics = ?, lrc_lyrics = NULL, instrumental = 0
        WHERE id = ?
    """, (plain_lyrics, track_id))
    db.commit()
    return get_track_by_id(db, track_id)


def update_track_null_lyrics(db: sqlite3.Connection, track_id: int) -> Track:
    db.execute("""
        UPDATE tracks
        SET txt_lyrics = NULL, lrc_lyrics = NULL, instrumental = 0
        WHERE id = ?
    """, (track_id,))
    db.commit()
    return get_track_by_id(db, track_id)


def update_track_instrumental(db: sqlite3.Connection, track_id: int) -> Track:
    db.execute("""
        UPDATE tracks
        SET txt_lyrics = NULL, lrc_lyrics = ?, instrumental = 1
        WHERE id = ?
    """, (INSTRUMENTAL_MARKER, track_id))
    db.commit()
    return get_track_by_id(db, track_id)
