from __future__ import annotations

from collections import Counter

"""Approximate file name matching (bigram Dice coefficient).

``compare_strings`` scores two strings in [0, 1]: spaces are removed, a few
degenerate inputs are answered directly, otherwise the adjacent-character
bigrams of both strings are intersected as multisets.

    >>> compare_strings("night", "nacht")
    0.25
    >>> compare_strings("report_2024.csv", "report_2024.csv")
    1.0
"""

__all__ = [
    "compare_strings",
    "bigrams",
]


def bigrams(text: str) -> list[str]:
    return [text[i:i + 2] for i in range(len(text) - 1)]


def _short_circuit(first: str, second: str) -> float | None:
    """Score for inputs too short to have bigrams in common (None otherwise)."""
    # both empty
    if not first and not second:
        return 1.0
    # only one empty
    if not first or not second:
        return 0.0
    if first == second:
        return 1.0
    # both 1-letter
    if len(first) == 1 and len(second) == 1:
        return 0.0
    if len(first) < 2 or len(second) < 2:
        return 0.0
    return None


def compare_strings(first: str, second: str) -> float:
    """Dice coefficient over the bigram multisets of two strings.

    Each bigram of ``first`` can be matched at most once: walking ``second``
    left to right consumes one occurrence from ``first``'s pool per hit.
    Lengths in the denominator are character counts after space removal.
    """
    first = first.replace(" ", "")
    second = second.replace(" ", "")

    early = _short_circuit(first, second)
    if early is not None:
        return early

    pool = Counter(bigrams(first))
    intersection = 0
    for bigram in bigrams(second):
        if pool[bigram] > 0:
            pool[bigram] -= 1
            intersection += 1

    return (2.0 * intersection) / (len(first) + len(second) - 2)
