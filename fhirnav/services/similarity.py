"""
Edit-distance based fuzzy matching for "did you mean" suggestions.

Pure functions, no shared state.
"""

from __future__ import annotations

from typing import Iterable

DEFAULT_THRESHOLD = 0.6


def levenshtein_distance(a: str, b: str) -> int:
    """
    Wagner-Fischer edit distance; insertion, deletion and substitution
    all cost 1. Keeps a single rolling row sized to the shorter string.
    """
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    row = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        diagonal, row[0] = row[0], i
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            diagonal, row[j] = row[j], min(
                row[j] + 1,  # deletion
                row[j - 1] + 1,  # insertion
                diagonal + cost,  # substitution
            )
    return row[-1]


def similarity(a: str, b: str) -> float:
    """Normalized similarity in [0, 1]; two empty strings are identical."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - levenshtein_distance(a, b)) / longest


def best_match(
    target: str,
    candidates: Iterable[str],
    threshold: float = DEFAULT_THRESHOLD,
) -> str | None:
    """
    Return the candidate most similar to ``target`` (case-insensitive),
    or None if nothing reaches ``threshold``. Earlier candidates win ties.
    """
    best: str | None = None
    best_score = threshold
    needle = target.lower()
    for candidate in candidates:
        score = similarity(needle, candidate.lower())
        if score > best_score or (best is None and score >= best_score):
            best, best_score = candidate, score
    return best
