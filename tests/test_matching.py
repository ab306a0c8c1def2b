import pytest

from lrcfetch.core.matching import (
    completeness_score,
    normalize_text,
    pick_best_match,
    text_similarity,
)
from lrcfetch.core.models import SearchCandidate


def candidate(id, duration, synced=None, plain=None, instrumental=False, name="Song"):
    return SearchCandidate(
        id=id,
        name=name,
        artist_name="Artist",
        album_name="Album",
        duration=duration,
        instrumental=instrumental,
        plain_lyrics=plain,
        synced_lyrics=synced,
    )


def test_normalize_text_drops_punctuation_and_case():
    assert normalize_text("  Hello,   WORLD!! ") == "hello world"


def test_normalize_text_keeps_unicode_letters():
    assert normalize_text("Café  Ünïcode") == "café ünïcode"


@pytest.mark.parametrize("a,b", [
    ("Hello World", "world hello"),
    ("Song (Live)", "song live!"),
    ("", "   "),
])
def test_similarity_identical_word_sets(a, b):
    assert text_similarity(a, b) == 1.0


def test_similarity_one_side_empty():
    assert text_similarity("Song", "") == 0.0
    assert text_similarity("!!!", "Song") == 0.0


def test_similarity_quarter_overlap():
    assert text_similarity("Song", "Song Remix Live Edit") == pytest.approx(0.25)


def test_similarity_symmetric_and_bounded():
    pairs = [("a b c", "b c d e"), ("Love Song", "Song of Love"), ("x", "y")]
    for a, b in pairs:
        score = text_similarity(a, b)
        assert score == text_similarity(b, a)
        assert 0.0 <= score <= 1.0


def test_completeness_order():
    assert completeness_score(candidate(1, 200, synced="[00:01.00]a", plain="a")) == 0
    assert completeness_score(candidate(2, 200, plain="a")) == 1
    assert completeness_score(candidate(3, 200, instrumental=True)) == 2
    assert completeness_score(candidate(4, 200)) == 3


def test_pick_best_match_filters_by_tolerance():
    results = [candidate(1, 210, synced="x"), candidate(2, None, synced="x")]
    assert pick_best_match(results, 200.0, 3.0) is None


def test_pick_best_match_tolerance_is_inclusive():
    best = pick_best_match([candidate(1, 203.0, plain="x")], 200.0, 3.0)
    assert best.id == 1


def test_synced_beats_plain_even_when_further_away():
    results = [candidate(1, 200.0, plain="x"), candidate(2, 202.9, synced="[00:01.00]x")]
    assert pick_best_match(results, 200.0, 3.0).id == 2


def test_closest_duration_breaks_ties():
    results = [candidate(1, 202.0, plain="x"), candidate(2, 199.5, plain="x"), candidate(3, 197.5, plain="x")]
    assert pick_best_match(results, 200.0, 3.0).id == 2


def test_full_tie_keeps_first_candidate():
    results = [candidate(7, 201.0, plain="x"), candidate(3, 199.0, plain="x")]
    assert pick_best_match(results, 200.0, 3.0).id == 7


def test_empty_results():
    assert pick_best_match([], 200.0, 3.0) is None
