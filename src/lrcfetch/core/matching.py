# core/matching.py
from __future__ import annotations

from typing import Iterable, Optional

from lrcfetch.core.models import SearchCandidate

MIN_TITLE_SIMILARITY = 0.3


def normalize_text(s: str) -> str:
    """Lowercase, keep only alphanumerics and whitespace, collapse whitespace."""
    kept = "".join(c for c in s.lower() if c.isalnum() or c.isspace())
    return " ".join(kept.split())


def text_similarity(a: str, b: str) -> float:
    """Jaccard index of the word sets of both strings, in [0.0, 1.0]."""
    a_norm = normalize_text(a)
    b_norm = normalize_text(b)

    if not a_norm and not b_norm:
        return 1.0
    if not a_norm or not b_norm:
        return 0.0

    a_words = set(a_norm.split())
    b_words = set(b_norm.split())
    return len(a_words & b_words) / len(a_words | b_words)


def completeness_score(item: SearchCandidate) -> int:
    """Lower is better: synced, then plain, then instrumental."""
    if item.synced_lyrics is not None:
        return 0
    if item.plain_lyrics is not None:
        return 1
    if item.instrumental:
        return 2
    return 3


def within_tolerance(item: SearchCandidate, duration: float, tolerance: float) -> bool:
    return item.duration is not None and abs(item.duration - duration) <= tolerance


def pick_best_match(
    results: Iterable[SearchCandidate],
    duration: float,
    duration_tolerance: float,
) -> Optional[SearchCandidate]:
    """
    Keep candidates whose duration is within the tolerance, then take the one
    with the most complete lyrics, closest duration second.
    On a full tie the first candidate in LRCLIB's order wins.
    """
    candidates = [item for item in results if within_tolerance(item, duration, duration_tolerance)]
    if not candidates:
        return None
    # min() returns the first of several equal keys
    return min(candidates, key=lambda item: (completeness_score(item), abs(item.duration - duration)))
