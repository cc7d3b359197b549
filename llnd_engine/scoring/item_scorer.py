"""
Objective Item Scorer
llnd_engine/scoring/item_scorer.py

Grades multiple-choice and numeric responses against the answer key.

    mcq      trimmed, case-insensitive exact match
    numeric  |answer − expected| ≤ tolerance (default 0.01)

A match awards the question's max_score; anything else, including a
blank or unparsable answer, awards zero. Nothing here raises for bad
learner input.
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import List, Optional

import structlog

from llnd_engine.config import settings
from llnd_engine.models.enumerations import DifficultyTag, Domain, ResponseType
from llnd_engine.models.question import Question

logger = structlog.get_logger(__name__)

# Leading numeric prefix, after currency symbols and thousands separators
# are removed ("$1,250.50 total" -> 1250.50).
_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


@dataclass
class ItemScore:
    """Score awarded for one question. Recomputed every run."""
    question_id: str
    domain: Domain
    level: int                    # ACSF sub-level of the question
    difficulty: DifficultyTag
    response_type: ResponseType
    score: Decimal                # Awarded points
    max_score: Decimal
    is_correct: bool
    weight: Decimal = Decimal("1")
    rationale: str = ""
    matched_markers: List[str] = field(default_factory=list)


def parse_number(value: Optional[str]) -> Optional[Decimal]:
    """Parse a numeric answer; None when nothing numeric leads the text."""
    if value is None:
        return None
    cleaned = value.strip().replace(",", "").lstrip("$")
    match = _NUMBER_RE.match(cleaned)
    if not match:
        return None
    try:
        return Decimal(match.group(0))
    except InvalidOperation:
        return None


class ItemScorer:
    """Grade mcq and numeric questions."""

    def __init__(self, numeric_tolerance: Optional[float] = None):
        tol = settings.NUMERIC_TOLERANCE if numeric_tolerance is None else numeric_tolerance
        self.tolerance = Decimal(str(tol))

    def score(self, question: Question, answer: Optional[str]) -> ItemScore:
        if question.response_type == ResponseType.NUMERIC:
            correct = self._numeric_match(answer, question.expected_answer)
        elif question.response_type == ResponseType.MCQ:
            correct = self._mcq_match(answer, question.expected_answer)
        else:
            raise ValueError(
                f"ItemScorer handles mcq/numeric questions, got {question.response_type.value} "
                f"for question {question.id}"
            )

        max_score = Decimal(str(question.max_score))
        result = ItemScore(
            question_id=question.id,
            domain=question.domain,
            level=question.level,
            difficulty=question.difficulty,
            response_type=question.response_type,
            score=max_score if correct else Decimal("0"),
            max_score=max_score,
            is_correct=correct,
            weight=Decimal(str(question.weight)),
            rationale="Matches answer key" if correct else "Does not match answer key",
        )

        logger.debug(
            "item_scored",
            question_id=question.id,
            response_type=question.response_type.value,
            is_correct=correct,
            score=float(result.score),
        )
        return result

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _mcq_match(answer: Optional[str], expected: Optional[str]) -> bool:
        if not answer or not answer.strip() or expected is None:
            return False
        return answer.strip().lower() == expected.strip().lower()

    def _numeric_match(self, answer: Optional[str], expected: Optional[str]) -> bool:
        a = parse_number(answer)
        e = parse_number(expected)
        if a is None or e is None:
            return False
        return abs(a - e) <= self.tolerance
