"""Tests for edit-distance matching."""

import pytest

from fhirnav.services.similarity import best_match, levenshtein_distance, similarity


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ("cat", "bat", 1),
        ("name", "names", 1),
        ("", "abc", 3),
        ("abc", "", 3),
        ("kitten", "sitting", 3),
        ("flaw", "lawn", 2),
        ("same", "same", 0),
    ],
)
def test_levenshtein_distance(a, b, expected):
    assert levenshtein_distance(a, b) == expected
    assert levenshtein_distance(b, a) == expected


def test_similarity_of_identical_strings_is_one():
    assert similarity("given", "given") == 1.0
    assert similarity("", "") == 1.0


def test_similarity_is_normalized_by_longest_string():
    assert similarity("name", "names") == pytest.approx(0.8)
    assert similarity("abc", "xyz") == 0.0


def test_best_match_picks_closest_candidate():
    assert best_match("activ", ["name", "active", "address"]) == "active"


def test_best_match_is_case_insensitive():
    assert best_match("NAME", ["gender", "name"]) == "name"


def test_best_match_respects_threshold():
    assert best_match("zzzzzz", ["name", "active"]) is None
    assert best_match("nam", ["name"], threshold=0.9) is None


def test_best_match_prefers_first_candidate_on_tie():
    assert best_match("cat", ["bat", "hat"]) == "bat"


def test_best_match_with_no_candidates():
    assert best_match("anything", []) is None
