"""Fuzzy text similarity used to flag likely-duplicate records.

The distance is positional: characters are compared index by index and
any length difference counts as extra mismatches. Insertions that shift
alignment are not recognised, so this is not Levenshtein. Thresholds in
``settings.duplicates`` were tuned against this exact behaviour.
"""
from __future__ import annotations

from rapidfuzz.distance import Hamming

from portal.pipelines.normalization import normalize_whitespace

CONTAINMENT_SCORE = 0.9
NEAR_MATCH_FLOOR = 0.85
NEAR_MATCH_MAX_DISTANCE = 2


def normalize_for_match(text: str | None) -> str:
    """Trim, lowercase and collapse whitespace. Non-strings become ``""``."""
    if not text or not isinstance(text, str):
        return ""
    return normalize_whitespace(text.lower())


def positional_distance(s1: str, s2: str) -> int:
    """Mismatches over the shorter string plus the length difference."""
    return Hamming.distance(s1, s2, pad=True)


def similarity(a: str | None, b: str | None) -> float:
    """Similarity score in ``[0.0, 1.0]`` between two free-text values.

    Symmetric, and ``similarity(s, s) == 1.0``.
    """
    s1 = normalize_for_match(a)
    s2 = normalize_for_match(b)

    if s1 == s2:
        return 1.0
    if s1 in s2 or s2 in s1:
        return CONTAINMENT_SCORE

    max_len = max(len(s1), len(s2))
    if max_len == 0:
        return 1.0

    distance = positional_distance(s1, s2)
    score = 1 - distance / max_len

    # A couple of typos in an otherwise identical string still reads as a duplicate
    if distance <= NEAR_MATCH_MAX_DISTANCE and max_len > 2:
        return max(score, NEAR_MATCH_FLOOR)
    return score
