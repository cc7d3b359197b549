"""
scoring/integration_service.py

Full pipeline: questions + responses + benchmark config → LLND result.

Class: ScoringEngine
Method: score_attempt(questions, responses, config) → ScoringResult

Pipeline steps:
  1. Resolve benchmark config (level string or snapshot)
  2. Score objective items (ItemScorer) and free-text items (RubricScorer)
  3. Add writing-task results as Writing items
  4. DomainAggregator → per-domain scores
  5. OverallClassifier → total, outcome, overrides
  6. Risk flags attached to domain scores
  7. Overall narrative

The engine holds no state between calls; identical inputs give identical
results.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import structlog

from llnd_engine.config import settings
from llnd_engine.models.benchmark import BenchmarkConfig
from llnd_engine.models.enumerations import Domain, Outcome, ResponseType
from llnd_engine.models.question import Question, Response
from llnd_engine.scoring.classifier import OverallClassifier
from llnd_engine.scoring.config_resolver import ConfigResolver, level_name
from llnd_engine.scoring.domain_aggregator import DomainAggregator, DomainScore
from llnd_engine.scoring.item_scorer import ItemScore, ItemScorer
from llnd_engine.scoring.narrative import select_overall_narrative
from llnd_engine.scoring.override_evaluator import OverrideEvaluator, OverrideResult, RiskFlag
from llnd_engine.scoring.rubric_scorer import RubricScorer
from llnd_engine.scoring.writing_analyzer import WritingAnalyzer, WritingScoringResult

logger = structlog.get_logger(__name__)


@dataclass
class ScoringResult:
    """Output of ScoringEngine.score_attempt()."""
    level: str
    level_name: str
    config_version: str
    engine_version: str
    total_score: Decimal
    baseline_outcome: Outcome
    outcome: Outcome
    label: str
    override: OverrideResult
    domain_scores: Dict[Domain, DomainScore]
    item_scores: List[ItemScore]
    risk_flags: List[RiskFlag] = field(default_factory=list)
    alignment_statement: str = ""
    suitability_statement: str = ""

    @property
    def override_triggered(self) -> bool:
        return self.override.override_triggered


class ScoringEngine:
    """Full pipeline from learner responses to an LLND classification."""

    def __init__(self, resolver: Optional[ConfigResolver] = None):
        self.resolver = resolver or ConfigResolver()

        # Initialize all sub-calculators
        self.item_scorer = ItemScorer()
        self.rubric_scorer = RubricScorer()
        self.writing_analyzer = WritingAnalyzer()
        self.aggregator = DomainAggregator()
        self.override_evaluator = OverrideEvaluator()
        self.classifier = OverallClassifier(self.override_evaluator)

    # ------------------------------------------------------------------
    # Main pipeline
    # ------------------------------------------------------------------

    def score_attempt(
        self,
        questions: Iterable[Question],
        responses: Iterable[Response],
        config: Union[BenchmarkConfig, str],
        writing_results: Optional[Mapping[str, WritingScoringResult]] = None,
    ) -> ScoringResult:
        """
        Score one assessment attempt.

        Args:
            questions: Question set of the attempt.
            responses: Learner answers; unanswered questions score 0.
            config: Benchmark snapshot, or an AQF level to resolve.
            writing_results: Writing-task results keyed by item id.

        Returns:
            ScoringResult with item, domain and overall results.

        Raises:
            ConfigurationNotFoundException: no config for the level.
        """
        # 1. Config
        if not isinstance(config, BenchmarkConfig):
            config = self.resolver.resolve(config)
        name = level_name(config.level)

        # 2. Item scores
        answers = self._answers_by_question(responses)
        questions = list(questions)
        known = {q.id for q in questions}
        unknown = sorted(set(answers) - known)
        if unknown:
            logger.warning("responses_without_question", question_ids=unknown)

        item_scores = [self._score_question(q, answers.get(q.id), config) for q in questions]

        # 3. Writing tasks
        target = config.acsf_thresholds.target_level
        for item_id, writing in (writing_results or {}).items():
            item_scores.append(self.writing_analyzer.to_item_score(writing, item_id, target))

        # 4. Domain aggregation
        domain_scores = self.aggregator.aggregate(item_scores, config, name)

        # 5. Classification
        classification = self.classifier.classify(domain_scores, config)

        # 6. Risk flags
        percentages = {d: ds.percentage for d, ds in domain_scores.items()}
        risk_flags = self.override_evaluator.risk_flags(percentages, config)
        for flag in risk_flags:
            domain_scores[flag.domain].risk_flag = True
            domain_scores[flag.domain].risk_detail = flag.detail

        # 7. Narrative
        alignment, suitability = select_overall_narrative(classification.outcome, name)

        logger.info(
            "attempt_scored",
            level=config.level,
            config_version=config.version,
            items=len(item_scores),
            total_score=float(classification.total_score),
            outcome=classification.outcome.value,
            override_triggered=classification.override.override_triggered,
        )

        return ScoringResult(
            level=config.level,
            level_name=name,
            config_version=config.version,
            engine_version=settings.ENGINE_VERSION,
            total_score=classification.total_score,
            baseline_outcome=classification.baseline_outcome,
            outcome=classification.outcome,
            label=classification.label,
            override=classification.override,
            domain_scores=domain_scores,
            item_scores=item_scores,
            risk_flags=risk_flags,
            alignment_statement=alignment,
            suitability_statement=suitability,
        )

    # ------------------------------------------------------------------
    # Helper methods
    # ------------------------------------------------------------------

    @staticmethod
    def _answers_by_question(responses: Iterable[Response]) -> Dict[str, Optional[str]]:
        # Last answer wins when a question was answered twice
        return {r.question_id: r.answer for r in responses}

    def _score_question(
        self,
        question: Question,
        answer: Optional[str],
        config: BenchmarkConfig,
    ) -> ItemScore:
        if question.response_type == ResponseType.SHORT_TEXT:
            return self.rubric_scorer.score_item(question, answer, config.writing_scale)
        return self.item_scorer.score(question, answer)


# ---------------------------------------------------------------------------
# Report assembly
# ---------------------------------------------------------------------------

def key_flags(result: ScoringResult) -> List[str]:
    """Domains below benchmark, then risk-flag details."""
    flags = [
        f"{domain.value} below benchmark"
        for domain, ds in result.domain_scores.items()
        if ds.outcome == Outcome.SUPPORT_REQUIRED
    ]
    flags.extend(f.detail for f in result.risk_flags)
    return flags


def build_report(
    result: ScoringResult,
    student: Mapping[str, Any],
    assessment: Mapping[str, Any],
    generated_at: str,
) -> Dict[str, Any]:
    """
    JSON-ready report for a scored attempt.

    Args:
        result: Output of ScoringEngine.score_attempt().
        student: Student identity (e.g. {"id": ..., "name": ...}).
        assessment: Attempt metadata; attempt_id, context and submitted_at
                    are copied through.
        generated_at: Caller-supplied timestamp, so the report is reproducible.
    """
    return {
        "version": result.config_version,
        "engine_version": result.engine_version,
        "generated_at": generated_at,
        "student": dict(student),
        "assessment": {
            "attempt_id": assessment.get("attempt_id"),
            "level": result.level,
            "level_name": result.level_name,
            "context": assessment.get("context"),
            "submitted_at": assessment.get("submitted_at"),
        },
        "overall": {
            "score": float(result.total_score),
            "outcome_code": result.outcome.value,
            "outcome_label": result.label,
            "baseline_outcome": result.baseline_outcome.value,
            "override_triggered": result.override_triggered,
            "override_rule": result.override.triggering_rule,
            "caps_fired": list(result.override.caps_fired),
            "key_flags": key_flags(result),
            "alignment_statement": result.alignment_statement,
            "suitability_statement": result.suitability_statement,
        },
        "domains": [
            {
                "name": ds.domain.value,
                "percentage": float(ds.percentage),
                "raw_score": float(ds.raw_score),
                "max_score": float(ds.max_score),
                "weighted_contribution": float(ds.weighted_contribution),
                "outcome": ds.outcome.value,
                "estimated_band": ds.estimated_band,
                "acsf_breakdown": {
                    "foundation_percent": float(ds.foundation_percent),
                    "core_percent": float(ds.core_percent),
                    "stretch_percent": float(ds.stretch_percent),
                },
                "risk_flag": ds.risk_flag,
                "risk_detail": ds.risk_detail,
                "justification": ds.justification,
                "strategies": list(ds.strategies),
            }
            for ds in result.domain_scores.values()
        ],
    }
