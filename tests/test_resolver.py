import os

import pytest
import requests

from conftest import FakeClient
from lrcfetch.core.errors import NetworkError
from lrcfetch.core.models import (
    Instrumental,
    MatchSource,
    NoLyrics,
    SearchCandidate,
    SyncedLyrics,
    UnsyncedLyrics,
)
from lrcfetch.core.resolver import (
    download_lyrics_for_track,
    search_fuzzy_fallback,
    search_with_duration_tolerance,
)
from lrcfetch.db.models import Config


def candidate(id, name, duration, synced=None, plain=None):
    return SearchCandidate(
        id=id,
        name=name,
        artist_name="Artist",
        album_name="Album",
        duration=duration,
        instrumental=False,
        plain_lyrics=plain,
        synced_lyrics=synced,
    )


def sidecars(track):
    base = track.file_path.rsplit(".", 1)[0]
    return base + ".txt", base + ".lrc"


def test_exact_match_writes_lrc(track):
    txt, lrc = sidecars(track)
    with open(txt, "w") as f:
        f.write("old plain")

    client = FakeClient(exact=SyncedLyrics(synced="[00:01.00]la", plain="la"))
    result, source = download_lyrics_for_track(track, Config(), client)

    assert result == SyncedLyrics(synced="[00:01.00]la", plain="la")
    assert source is MatchSource.EXACT
    assert open(lrc, encoding="utf-8").read() == "[00:01.00]la"
    assert not os.path.exists(txt)
    assert client.get_calls == [("Song", "Album", "Artist", 200.0)]
    assert client.search_calls == []


def test_duration_fallback_plain(track):
    client = FakeClient(field_results=[candidate(5, "Song", 202.0, plain="la la")])
    result, source = download_lyrics_for_track(track, Config(duration_tolerance=3.0), client)

    assert result == UnsyncedLyrics(plain="la la")
    assert source is MatchSource.DURATION_FALLBACK
    txt, lrc = sidecars(track)
    assert open(txt, encoding="utf-8").read() == "la la"
    assert client.search_calls == [("Song", "Album", "Artist", "")]


def test_fuzzy_candidate_below_similarity_threshold(track):
    client = FakeClient(fuzzy_results=[candidate(9, "Song Remix Live Edit", 200.0, synced="[00:01.00]x")])
    result, source = download_lyrics_for_track(track, Config(duration_tolerance=3.0), client)

    assert result == NoLyrics()
    assert source is MatchSource.NONE
    assert client.search_calls == [("Song", "Album", "Artist", ""), ("", "", "", "Song Artist")]


def test_fuzzy_fallback_match(track):
    client = FakeClient(fuzzy_results=[
        candidate(1, "Totally Different", 200.0, synced="[00:01.00]no"),
        candidate(2, "Song (Remastered)", 201.0, synced="[00:01.00]yes"),
    ])
    result, source = download_lyrics_for_track(track, Config(duration_tolerance=3.0), client)

    assert source is MatchSource.FUZZY_FALLBACK
    assert result == SyncedLyrics(synced="[00:01.00]yes", plain="yes")


def test_zero_tolerance_skips_fallbacks(track):
    client = FakeClient(field_results=[candidate(5, "Song", 200.0, plain="x")])
    result, source = download_lyrics_for_track(track, Config(duration_tolerance=0.0), client)

    assert result == NoLyrics()
    assert source is MatchSource.NONE
    assert client.search_calls == []


def test_fuzzy_disabled(track):
    client = FakeClient(fuzzy_results=[candidate(2, "Song", 200.0, plain="x")])
    result, source = download_lyrics_for_track(
        track, Config(duration_tolerance=3.0, fuzzy_search_enabled=False), client
    )
    assert source is MatchSource.NONE
    assert len(client.search_calls) == 1


@pytest.mark.parametrize("error", [NetworkError("down"), requests.ConnectionError("reset")])
def test_fuzzy_errors_degrade_to_no_lyrics(track, error, caplog):
    client = FakeClient(fuzzy_error=error)
    result, source = download_lyrics_for_track(track, Config(duration_tolerance=3.0), client)

    assert result == NoLyrics()
    assert source is MatchSource.NONE
    assert "Fuzzy search failed" in caplog.text


def test_field_search_errors_propagate(track):
    class FailingClient(FakeClient):
        def search(self, title, album, artist, q):
            raise NetworkError("down")

    with pytest.raises(NetworkError):
        download_lyrics_for_track(track, Config(duration_tolerance=3.0), FailingClient())


def test_keep_plain_leaves_files_alone(track):
    txt, lrc = sidecars(track)
    with open(txt, "w") as f:
        f.write("mine")

    client = FakeClient(exact=UnsyncedLyrics(plain="theirs"))
    result, source = download_lyrics_for_track(track, Config(try_embed_lyrics=True), client, keep_plain=True)

    assert result == UnsyncedLyrics(plain="theirs")
    assert source is MatchSource.EXACT
    assert open(txt).read() == "mine"
    assert not os.path.exists(lrc)


def test_keep_plain_still_writes_synced(track):
    client = FakeClient(exact=SyncedLyrics(synced="[00:01.00]la", plain="la"))
    download_lyrics_for_track(track, Config(), client, keep_plain=True)
    assert open(sidecars(track)[1]).read() == "[00:01.00]la"


def test_no_lyrics_leaves_existing_sidecar(track):
    _, lrc = sidecars(track)
    with open(lrc, "w") as f:
        f.write("[00:01.00]mine")

    download_lyrics_for_track(track, Config(duration_tolerance=0.0), FakeClient())
    assert open(lrc).read() == "[00:01.00]mine"


def test_exact_instrumental(track):
    result, source = download_lyrics_for_track(track, Config(), FakeClient(exact=Instrumental()))
    assert result == Instrumental()
    assert open(sidecars(track)[1]).read() == "[au: instrumental]"


def test_search_with_duration_tolerance_prefers_synced():
    client = FakeClient(field_results=[
        candidate(1, "Song", 200.0, plain="p"),
        candidate(2, "Song", 198.0, synced="[00:01.00]s"),
        candidate(3, "Song", 250.0, synced="[00:01.00]far"),
    ])
    result = search_with_duration_tolerance(client, "Song", "Album", "Artist", 200.0, 3.0)
    assert result == SyncedLyrics(synced="[00:01.00]s", plain="s")


def test_search_fuzzy_fallback_skips_untitled_results():
    client = FakeClient(fuzzy_results=[candidate(1, None, 200.0, plain="p")])
    assert search_fuzzy_fallback(client, "Song", "Artist", 200.0, 3.0) == NoLyrics()
