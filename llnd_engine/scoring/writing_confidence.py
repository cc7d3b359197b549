"""
Writing Layer 5 - Confidence
llnd_engine/scoring/writing_confidence.py

Starts at 100 and subtracts:
    per domain |rule − external| ≥ 3        −15
    per domain |rule − external| = 2        −5
    external scores unavailable             −20
    similarity > high / > review            −20 / −10
    AI probability > high / > review        −15 / −5
    per flag containing DIVERGENCE          −5
    per flag containing TIME_ANOMALY        −10
Result clamped to [0, 100].

Thresholds come from Settings (SIMILARITY_*_THRESHOLD,
AI_PROBABILITY_*_THRESHOLD).
"""

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

import structlog

from llnd_engine.config import Settings, settings as default_settings
from llnd_engine.models.enumerations import WritingDomain

logger = structlog.get_logger(__name__)


@dataclass
class ConfidenceResult:
    """Output of WritingConfidenceCalculator.calculate()."""
    confidence: int               # 0-100
    agreement_penalty: int
    availability_penalty: int
    similarity_penalty: int
    ai_penalty: int
    flag_penalty: int


class WritingConfidenceCalculator:
    """Confidence in a reconciled writing score."""

    MAJOR_DIVERGENCE_PENALTY = 15
    MINOR_DIVERGENCE_PENALTY = 5
    UNAVAILABLE_PENALTY = 20
    SIMILARITY_HIGH_PENALTY = 20
    SIMILARITY_REVIEW_PENALTY = 10
    AI_HIGH_PENALTY = 15
    AI_REVIEW_PENALTY = 5
    DIVERGENCE_FLAG_PENALTY = 5
    TIME_ANOMALY_FLAG_PENALTY = 10

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings

    def calculate(
        self,
        differences: Optional[Mapping[WritingDomain, int]],
        similarity: float = 0.0,
        ai_probability: float = 0.0,
        flags: Iterable[str] = (),
    ) -> ConfidenceResult:
        """
        Args:
            differences: |rule − external| per domain, or None when the
                         external rubric was unavailable.
            similarity: Text-similarity percentage (0-100).
            ai_probability: AI-generation likelihood (0-1).
            flags: Every flag raised so far, upstream and divergence alike.
        """
        s = self.settings

        agreement = 0
        availability = 0
        if differences is None:
            availability = self.UNAVAILABLE_PENALTY
        else:
            for diff in differences.values():
                if diff >= 3:
                    agreement += self.MAJOR_DIVERGENCE_PENALTY
                elif diff == 2:
                    agreement += self.MINOR_DIVERGENCE_PENALTY

        if similarity > s.SIMILARITY_HIGH_THRESHOLD:
            sim_penalty = self.SIMILARITY_HIGH_PENALTY
        elif similarity > s.SIMILARITY_REVIEW_THRESHOLD:
            sim_penalty = self.SIMILARITY_REVIEW_PENALTY
        else:
            sim_penalty = 0

        if ai_probability > s.AI_PROBABILITY_HIGH_THRESHOLD:
            ai_penalty = self.AI_HIGH_PENALTY
        elif ai_probability > s.AI_PROBABILITY_REVIEW_THRESHOLD:
            ai_penalty = self.AI_REVIEW_PENALTY
        else:
            ai_penalty = 0

        flag_penalty = 0
        for flag in flags:
            if "DIVERGENCE" in flag:
                flag_penalty += self.DIVERGENCE_FLAG_PENALTY
            if "TIME_ANOMALY" in flag:
                flag_penalty += self.TIME_ANOMALY_FLAG_PENALTY

        raw = 100 - agreement - availability - sim_penalty - ai_penalty - flag_penalty
        confidence = max(0, min(100, raw))

        logger.info(
            "writing_confidence_calculated",
            confidence=confidence,
            agreement_penalty=agreement,
            availability_penalty=availability,
            similarity_penalty=sim_penalty,
            ai_penalty=ai_penalty,
            flag_penalty=flag_penalty,
        )

        return ConfidenceResult(
            confidence=confidence,
            agreement_penalty=agreement,
            availability_penalty=availability,
            similarity_penalty=sim_penalty,
            ai_penalty=ai_penalty,
            flag_penalty=flag_penalty,
        )
