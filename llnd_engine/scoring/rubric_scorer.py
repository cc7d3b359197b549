"""
Free-Text Rubric Scorer
llnd_engine/scoring/rubric_scorer.py

Grades short constructed responses with deterministic lexical and
structural heuristics. The benchmark's writing scale (3-6) sets the
highest level a response can reach.

Ladder (each level requires every level below it):
  L1  at least 3 words
  L2  minimum word count for the sub-level + basic sentence structure
  L3  task-appropriate marker:
        stretch item          cause AND impact
        core, sub-level >= 3  request OR cause
        otherwise             cause OR 1.5x minimum words
  L4  (scale >= 4) reasoning marker + 1.5x minimum words
  L5  (scale >= 5) analytical marker + cause AND impact
  L6  (scale 6)    2+ distinct reasoning markers + 3x minimum words

Score = highest level reached, clamped to min(scale, question max_score).

Usage:
    scorer = RubricScorer()
    result = scorer.score(question, "The delivery was delayed because ...", scale=3)
    # result.score = Decimal("3"), result.level = FreeTextLevel.L3
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional

import structlog

from llnd_engine.models.enumerations import DifficultyTag
from llnd_engine.models.question import Question
from llnd_engine.scoring.item_scorer import ItemScore
from llnd_engine.scoring.text_features import find_markers, has_marker, word_count

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Levels
# ---------------------------------------------------------------------------

class FreeTextLevel(Enum):
    L0 = (0, "No response")
    L1 = (1, "Minimal")
    L2 = (2, "Basic")
    L3 = (3, "Functional")
    L4 = (4, "Reasoned")
    L5 = (5, "Analytical")
    L6 = (6, "Extended")

    @property
    def points(self) -> int:
        return self.value[0]

    @property
    def label(self) -> str:
        return self.value[1]


_LADDER = [
    FreeTextLevel.L1, FreeTextLevel.L2, FreeTextLevel.L3,
    FreeTextLevel.L4, FreeTextLevel.L5, FreeTextLevel.L6,
]


# ---------------------------------------------------------------------------
# Marker vocabularies
# ---------------------------------------------------------------------------

MIN_WORDS_BY_SUB_LEVEL: Dict[int, int] = {1: 5, 2: 8, 3: 20, 4: 30}
MIN_WORDS_UPPER = 40   # sub-level 5 and above

STRUCTURE_CONNECTIVES = ["and", "but", "so", "then", "because", "however"]
CAUSE_MARKERS = ["because", "due to", "as", "since", "reason"]
IMPACT_MARKERS = [
    "affected", "delayed", "could not", "resulted in", "so that",
    "impact", "consequence",
]
REQUEST_MARKERS = [
    "please", "can you", "could you", "clarify", "confirm", "would you",
]
REASONING_MARKERS = [
    "therefore", "as a result", "which means", "consequently",
    "this shows", "because",
]
ANALYTICAL_MARKERS = [
    "however", "although", "whereas", "in contrast", "on the other hand",
    "evaluate", "suggests",
]


@dataclass
class RubricResult:
    """Result of free-text rubric scoring."""
    score: Decimal
    level: FreeTextLevel
    word_count: int
    min_words: int
    matched_markers: List[str] = field(default_factory=list)
    rationale: str = ""


def min_words_for(sub_level: int) -> int:
    return MIN_WORDS_BY_SUB_LEVEL.get(sub_level, MIN_WORDS_UPPER)


# ---------------------------------------------------------------------------
# RubricScorer
# ---------------------------------------------------------------------------

class RubricScorer:
    """Score short_text responses on the configured writing scale."""

    def score(
        self,
        question: Question,
        answer: Optional[str],
        scale: int,
    ) -> RubricResult:
        text = (answer or "").strip()
        wc = word_count(text)
        min_words = min_words_for(question.level)

        cause = find_markers(text, CAUSE_MARKERS)
        impact = find_markers(text, IMPACT_MARKERS)
        request = find_markers(text, REQUEST_MARKERS)
        reasoning = find_markers(text, REASONING_MARKERS)
        analytical = find_markers(text, ANALYTICAL_MARKERS)
        has_structure = (
            "." in text or "\n" in text or has_marker(text, STRUCTURE_CONNECTIVES)
        )

        if question.difficulty == DifficultyTag.STRETCH:
            task_marker = bool(cause) and bool(impact)
        elif question.level >= 3:
            task_marker = bool(request) or bool(cause)
        else:
            task_marker = bool(cause) or wc >= 1.5 * min_words

        criteria = {
            FreeTextLevel.L1: wc >= 3,
            FreeTextLevel.L2: wc >= min_words and has_structure,
            FreeTextLevel.L3: task_marker,
            FreeTextLevel.L4: bool(reasoning) and wc >= 1.5 * min_words,
            FreeTextLevel.L5: bool(analytical) and bool(cause) and bool(impact),
            FreeTextLevel.L6: len(reasoning) >= 2 and wc >= 3 * min_words,
        }

        ceiling = min(scale, int(question.max_score))
        reached = FreeTextLevel.L0
        for level in _LADDER:
            if level.points > ceiling or not criteria[level]:
                break
            reached = level

        matched = sorted(set(cause + impact + request + reasoning + analytical))
        rationale = (
            f"{reached.label} ({reached.points}/{ceiling}): {wc} words, "
            f"minimum {min_words}"
        )
        if matched:
            rationale += f"; markers: {', '.join(matched[:5])}"

        logger.debug(
            "free_text_scored",
            question_id=question.id,
            word_count=wc,
            level=reached.points,
            ceiling=ceiling,
        )

        return RubricResult(
            score=Decimal(reached.points),
            level=reached,
            word_count=wc,
            min_words=min_words,
            matched_markers=matched,
            rationale=rationale,
        )

    def score_item(
        self,
        question: Question,
        answer: Optional[str],
        scale: int,
    ) -> ItemScore:
        """Score a short_text question as an ItemScore."""
        result = self.score(question, answer, scale)
        max_score = Decimal(str(question.max_score))
        return ItemScore(
            question_id=question.id,
            domain=question.domain,
            level=question.level,
            difficulty=question.difficulty,
            response_type=question.response_type,
            score=result.score,
            max_score=max_score,
            is_correct=result.score == max_score,
            weight=Decimal(str(question.weight)),
            rationale=result.rationale,
            matched_markers=result.matched_markers,
        )
