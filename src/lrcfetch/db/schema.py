from __future__ import annotations

SCHEMA_VERSION = 1

# The catalog is owned by the library scanner; this is the subset of its
# tables the lyrics commands read and update.
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS config_data (
    id INTEGER PRIMARY KEY,
    skip_tracks_with_plain_lyrics BOOLEAN DEFAULT 0,
    try_embed_lyrics BOOLEAN DEFAULT 0,
    lrclib_instance TEXT DEFAULT 'https://lrclib.net',
    duration_tolerance REAL DEFAULT 3.0,
    fuzzy_search_enabled BOOLEAN DEFAULT 1
);

CREATE TABLE IF NOT EXISTS artists (
    id INTEGER PRIMARY KEY,
    name TEXT
);

CREATE TABLE IF NOT EXISTS albums (
    id INTEGER PRIMARY KEY,
    name TEXT,
    album_artist_name TEXT
);

CREATE TABLE IF NOT EXISTS tracks (
    id INTEGER PRIMARY KEY,
    file_path TEXT,
    file_name TEXT,
    title TEXT,
    album_id INTEGER,
    artist_id INTEGER,
    duration FLOAT,
    txt_lyrics TEXT,
    lrc_lyrics TEXT,
    instrumental BOOLEAN DEFAULT 0,
    FOREIGN KEY(artist_id) REFERENCES artists(id),
    FOREIGN KEY(album_id) REFERENCES albums(id)
);
"""

DEFAULT_CONFIG_SQL = "INSERT INTO config_data (id) VALUES (1)"
