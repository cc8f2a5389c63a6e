"""matching.fuzzy unit tests (pure functions)."""

from __future__ import annotations

import pytest

from matching.fuzzy import normalize_for_match, positional_distance, similarity

PAIRS = [
    ("ABC Industries", "abc industries"),
    ("Steel Corp", "Steel Corporation"),
    ("Mumbai", "Delhi"),
    ("Tata Steel", "Tata Steal"),
    ("W-Beam", "Thrie-Beam"),
    ("", "Pune"),
]


def test_normalize_for_match() -> None:
    assert normalize_for_match("  ABC \t  Steel\n Works ") == "abc steel works"
    assert normalize_for_match(None) == ""
    assert normalize_for_match(42) == ""


@pytest.mark.parametrize("text", ["ABC Steel", "x", "Hot Thermoplastic Paint"])
def test_reflexive(text: str) -> None:
    assert similarity(text, text) == 1.0


@pytest.mark.parametrize("a,b", PAIRS)
def test_symmetric(a: str, b: str) -> None:
    assert similarity(a, b) == similarity(b, a)


def test_case_and_whitespace_are_ignored() -> None:
    assert similarity("ABC Industries", "abc industries") == 1.0
    assert similarity("ABC   Industries ", "abc industries") == 1.0


def test_containment_scores_point_nine() -> None:
    assert similarity("Steel Corp", "Steel Corporation") >= 0.9
    assert similarity("Steel Corp", "Steel Corporation") == pytest.approx(0.9)


def test_dissimilar_strings_fall_below_threshold() -> None:
    assert similarity("Mumbai", "Delhi") < 0.85


def test_small_distance_is_boosted() -> None:
    # two substitutions out of four characters would score 0.5
    assert similarity("abcd", "abxy") == pytest.approx(0.85)
    assert similarity("Tata Steel", "Tata Steal") == pytest.approx(0.9)


def test_no_boost_for_very_short_strings() -> None:
    assert similarity("ab", "xy") == 0.0


def test_distance_is_positional_not_levenshtein() -> None:
    # a single inserted letter shifts every following character
    assert positional_distance("agarwal steel", "aggarwal steel") == 11
    assert similarity("Agarwal Steel", "Aggarwal Steel") < 0.85


def test_empty_inputs() -> None:
    assert similarity(None, None) == 1.0
    assert similarity("", "   ") == 1.0
    assert similarity("Pune", None) == pytest.approx(0.9)


def test_score_is_bounded() -> None:
    for a, b in PAIRS:
        assert 0.0 <= similarity(a, b) <= 1.0
