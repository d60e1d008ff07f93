"""Trigram similarity of transaction descriptions.

Same definition as PostgreSQL's pg_trgm ``similarity()``: the text is
lower-cased and split into alphanumeric words, each word is padded with two
leading blanks and one trailing blank, and the score is the Jaccard index of
the two sets of three-character windows.
"""

import re
from typing import Optional

_WORD = re.compile(r"[^\W_]+")


def trigrams(text: Optional[str]) -> frozenset[str]:
    """Return the pg_trgm trigram set of a string."""
    if not text:
        return frozenset()
    grams = set()
    for word in _WORD.findall(text.lower()):
        padded = f"  {word} "
        grams.update(padded[i : i + 3] for i in range(len(padded) - 2))
    return frozenset(grams)


def similarity(left: Optional[str], right: Optional[str]) -> float:
    """Return the trigram similarity of two strings, between 0.0 and 1.0.

    Either side empty (or without any alphanumeric word) scores 0.0.
    """
    a = trigrams(left)
    b = trigrams(right)
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)
