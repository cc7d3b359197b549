"""
Writing Submission Analyzer
llnd_engine/scoring/writing_analyzer.py

Five-layer pipeline for one writing task:
  1. Structural compliance         writing_structure.check_structure
  2. Rule metrics + rule scores    writing_metrics.compute_metrics / score_from_rules
  3. External rubric scores        rubric_model (optional, caller-supplied)
  4. Reconciliation                reconciliation.reconcile
  5. Confidence + review flags     writing_confidence.WritingConfidenceCalculator

Totals:
    raw_total    = Σ four final domain scores (0-20)
    scaled_total = raw_total × 1.5 for task2, raw_total for task1
    CEFR / ACSF  = ≤6 A2/2, ≤10 B1/3, ≤14 B2/4, else C1/5

Review is required when any divergence flag fired, similarity exceeds the
high threshold, or confidence falls below LOW_CONFIDENCE_THRESHOLD.

Usage:
    analyzer = WritingAnalyzer()
    result = analyzer.analyze(submission, prompt, external=raw_reply_text)
    item = analyzer.to_item_score(result, question_id="W1", target_level=3)
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Dict, List, Mapping, Optional, Tuple, Union

import structlog

from llnd_engine.config import Settings, settings as default_settings
from llnd_engine.models.enumerations import (
    CEFRBand,
    DifficultyTag,
    Domain,
    ResponseType,
    TaskType,
)
from llnd_engine.models.writing import (
    ExternalRubricResponse,
    WritingDomainScores,
    WritingPromptContext,
    WritingSubmission,
)
from llnd_engine.scoring.item_scorer import ItemScore
from llnd_engine.scoring.reconciliation import reconcile
from llnd_engine.scoring.rubric_model import parse_rubric_response
from llnd_engine.scoring.text_features import paragraph_count, word_count
from llnd_engine.scoring.writing_confidence import WritingConfidenceCalculator
from llnd_engine.scoring.writing_metrics import RuleMetrics, compute_metrics, score_from_rules
from llnd_engine.scoring.writing_structure import check_structure

logger = structlog.get_logger(__name__)

TASK_MAX_RAW = 20
EXTENDED_TASK_MULTIPLIER = Decimal("1.5")

SIMILARITY_HIGH_FLAG = "SIMILARITY_HIGH"
SIMILARITY_REVIEW_FLAG = "SIMILARITY_REVIEW"
LOW_CONFIDENCE_FLAG = "LOW_CONFIDENCE"
HUMAN_REVIEWED_FLAG = "HUMAN_REVIEWED"
REVIEW_REASON_FLAGGED = "flagged"

# (upper bound of raw total, CEFR band, ACSF level)
_TASK_BANDS: List[Tuple[int, CEFRBand, int]] = [
    (6, CEFRBand.A2, 2),
    (10, CEFRBand.B1, 3),
    (14, CEFRBand.B2, 4),
]

# Combined two-task raw total (0-40)
_COMBINED_BANDS: List[Tuple[int, CEFRBand]] = [
    (12, CEFRBand.A2),
    (20, CEFRBand.B1),
    (28, CEFRBand.B2),
]


def task_estimates(raw_total: int) -> Tuple[CEFRBand, int]:
    """CEFR band and ACSF level estimated from one task's raw total."""
    for upper, band, acsf in _TASK_BANDS:
        if raw_total <= upper:
            return band, acsf
    return CEFRBand.C1, 5


def writing_cefr_from_raw_total(raw_total: int) -> CEFRBand:
    """CEFR band for the combined task1 + task2 raw total."""
    for upper, band in _COMBINED_BANDS:
        if raw_total <= upper:
            return band
    return CEFRBand.C1


def scaled_total(raw_total: int, task_type: TaskType) -> Decimal:
    raw = Decimal(raw_total)
    return raw * EXTENDED_TASK_MULTIPLIER if task_type == TaskType.TASK2 else raw


@dataclass
class WritingScoringResult:
    """Output of WritingAnalyzer.analyze()."""
    task_type: TaskType
    rule_metrics: RuleMetrics
    rule_scores: WritingDomainScores
    external_scores: Optional[WritingDomainScores]
    external_justifications: Optional[Dict[str, str]]
    final_scores: WritingDomainScores
    raw_total: int                    # 0-20
    scaled_total: Decimal             # 0-20 task1, 0-30 task2
    cefr_estimate: CEFRBand
    acsf_estimate: int
    confidence_score: int             # 0-100
    flags: List[str] = field(default_factory=list)
    needs_human_review: bool = False
    review_reason: Optional[str] = None
    engine_version: str = ""
    reviewer_notes: Optional[str] = None


class WritingAnalyzer:
    """Run the five-layer writing pipeline for one task."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.confidence_calculator = WritingConfidenceCalculator(self.settings)

    # ------------------------------------------------------------------
    # Layers 1-2
    # ------------------------------------------------------------------

    def run_rule_based(
        self,
        submission: WritingSubmission,
        prompt: WritingPromptContext,
    ) -> Tuple[WritingDomainScores, RuleMetrics]:
        text = submission.response_text
        structural = check_structure(
            text,
            submission.task_type,
            word_count(text),
            paragraph_count(text),
            prompt.requirements,
        )
        metrics = compute_metrics(text, structural)
        return score_from_rules(metrics, submission.task_type), metrics

    # ------------------------------------------------------------------
    # Full pipeline
    # ------------------------------------------------------------------

    def analyze(
        self,
        submission: WritingSubmission,
        prompt: WritingPromptContext,
        external: Union[ExternalRubricResponse, str, None] = None,
    ) -> WritingScoringResult:
        """
        Args:
            submission: Candidate response plus integrity signals.
            prompt: Prompt context the response was written against.
            external: Validated external rubric reply, its raw text, or None
                      when the service was unavailable.
        """
        if isinstance(external, str):
            external = parse_rubric_response(external)

        rule_scores, metrics = self.run_rule_based(submission, prompt)
        external_scores = external.domain_scores if external is not None else None

        # Layer 4
        reconciliation = reconcile(rule_scores, external_scores)
        flags = list(submission.existing_flags) + reconciliation.flags

        # Layer 5
        similarity = submission.similarity_score or 0.0
        confidence = self.confidence_calculator.calculate(
            reconciliation.differences if external_scores is not None else None,
            similarity=similarity,
            ai_probability=submission.ai_probability or 0.0,
            flags=flags,
        ).confidence

        needs_review, reason, review_flags = self._review_decision(
            reconciliation.divergent, similarity, confidence
        )
        flags.extend(review_flags)

        raw_total = reconciliation.final_scores.total
        cefr, acsf = task_estimates(raw_total)

        result = WritingScoringResult(
            task_type=submission.task_type,
            rule_metrics=metrics,
            rule_scores=rule_scores,
            external_scores=external_scores,
            external_justifications=dict(external.justifications) if external else None,
            final_scores=reconciliation.final_scores,
            raw_total=raw_total,
            scaled_total=scaled_total(raw_total, submission.task_type),
            cefr_estimate=cefr,
            acsf_estimate=acsf,
            confidence_score=confidence,
            flags=flags,
            needs_human_review=needs_review,
            review_reason=reason,
            engine_version=self.settings.WRITING_ENGINE_VERSION,
        )

        logger.info(
            "writing_scored",
            task_type=submission.task_type.value,
            word_count=metrics.word_count,
            rule_total=rule_scores.total,
            external_total=external_scores.total if external_scores else None,
            raw_total=raw_total,
            confidence=confidence,
            flags=flags,
            needs_human_review=needs_review,
        )
        return result

    # ------------------------------------------------------------------
    # Downstream conversions
    # ------------------------------------------------------------------

    def to_item_score(
        self,
        result: WritingScoringResult,
        question_id: str,
        target_level: int,
    ) -> ItemScore:
        """
        Feed a writing task into domain aggregation.

        task1 counts as a core item out of 20; task2 as a stretch item out
        of 30 (20 × 1.5).
        """
        extended = result.task_type == TaskType.TASK2
        max_score = Decimal(TASK_MAX_RAW) * (EXTENDED_TASK_MULTIPLIER if extended else 1)
        return ItemScore(
            question_id=question_id,
            domain=Domain.WRITING,
            level=target_level,
            difficulty=DifficultyTag.STRETCH if extended else DifficultyTag.CORE,
            response_type=ResponseType.SHORT_TEXT,
            score=result.scaled_total,
            max_score=max_score,
            is_correct=result.scaled_total == max_score,
            rationale=(
                f"Writing {result.task_type.value}: {result.raw_total}/20 "
                f"({result.cefr_estimate.value}), confidence {result.confidence_score}"
            ),
        )

    def apply_human_review(
        self,
        result: WritingScoringResult,
        scores: Union[WritingDomainScores, Mapping[str, int]],
        notes: Optional[str] = None,
    ) -> WritingScoringResult:
        """
        Replace final scores with a reviewer's scores (each 0-5).

        Totals and estimates are recomputed and the review flag cleared.
        Raises pydantic.ValidationError for out-of-range scores.
        """
        if not isinstance(scores, WritingDomainScores):
            scores = WritingDomainScores(**scores)

        raw_total = scores.total
        cefr, acsf = task_estimates(raw_total)
        reviewed = replace(
            result,
            final_scores=scores,
            raw_total=raw_total,
            scaled_total=scaled_total(raw_total, result.task_type),
            cefr_estimate=cefr,
            acsf_estimate=acsf,
            flags=list(result.flags) + [HUMAN_REVIEWED_FLAG],
            needs_human_review=False,
            reviewer_notes=notes,
        )
        logger.info(
            "writing_human_review_applied",
            task_type=result.task_type.value,
            previous_total=result.raw_total,
            reviewed_total=raw_total,
        )
        return reviewed

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _review_decision(
        self,
        divergent: bool,
        similarity: float,
        confidence: int,
    ) -> Tuple[bool, Optional[str], List[str]]:
        s = self.settings
        needs_review = False
        flags: List[str] = []

        if divergent:
            needs_review = True
        if similarity > s.SIMILARITY_HIGH_THRESHOLD:
            needs_review = True
            flags.append(SIMILARITY_HIGH_FLAG)
        elif similarity > s.SIMILARITY_REVIEW_THRESHOLD:
            flags.append(SIMILARITY_REVIEW_FLAG)
        if confidence < s.LOW_CONFIDENCE_THRESHOLD:
            needs_review = True
            flags.append(LOW_CONFIDENCE_FLAG)

        return needs_review, REVIEW_REASON_FLAGGED if needs_review else None, flags
