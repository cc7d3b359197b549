"""
Text feature helpers shared by the free-text rubric scorer, the writing
analyzer and the pre-enrolment review.

Marker phrases match case-insensitively on whole words, so "as" does not
match inside "was" and "reason" does not match "treason".
"""

import re
from functools import lru_cache
from typing import Iterable, List, Pattern


def words(text: str) -> List[str]:
    """Whitespace-delimited tokens."""
    return (text or "").split()


def word_count(text: str) -> int:
    return len(words(text))


@lru_cache(maxsize=512)
def _phrase_pattern(phrase: str) -> Pattern[str]:
    return re.compile(r"\b" + re.escape(phrase.lower()) + r"\b")


def find_markers(text: str, markers: Iterable[str]) -> List[str]:
    """Return the markers present in text, in the order given."""
    lowered = (text or "").lower()
    return [m for m in markers if _phrase_pattern(m).search(lowered)]


def has_marker(text: str, markers: Iterable[str]) -> bool:
    lowered = (text or "").lower()
    return any(_phrase_pattern(m).search(lowered) for m in markers)


def count_occurrences(text: str, markers: Iterable[str]) -> int:
    """Total occurrences of all markers, counting repeats."""
    lowered = (text or "").lower()
    return sum(len(_phrase_pattern(m).findall(lowered)) for m in markers)


_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")
_SENTENCE_SPLIT = re.compile(r"[.!?]+")


def paragraphs(text: str) -> List[str]:
    """Blank-line separated blocks that contain text."""
    return [p for p in _PARAGRAPH_SPLIT.split(text or "") if p.strip()]


def paragraph_count(text: str) -> int:
    """Number of paragraphs; never less than 1."""
    return len(paragraphs(text)) or 1


def sentences(text: str) -> List[str]:
    return [s for s in _SENTENCE_SPLIT.split(text or "") if s.strip()]
