"""
Overall Classifier
llnd_engine/scoring/classifier.py

Formula:
    total    = Σ (domain percentage × domain weight)
    baseline = strong ≥ t1 -> exceeds; ≥ t2 -> meets; ≥ t3 -> monitor;
               else support_required
    final    = OverrideEvaluator applied to baseline

Outcome codes are level-independent; labels come from CLASSIFICATION_LABELS.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Mapping, Optional

import structlog

from llnd_engine.models.benchmark import BenchmarkConfig
from llnd_engine.models.enumerations import Domain, Outcome
from llnd_engine.scoring.domain_aggregator import DomainScore
from llnd_engine.scoring.override_evaluator import OverrideEvaluator, OverrideResult
from llnd_engine.scoring.utils import weighted_sum

logger = structlog.get_logger(__name__)

CLASSIFICATION_LABELS: Dict[str, Dict[Outcome, str]] = {
    "3": {
        Outcome.EXCEEDS: "Exceeds Entry Benchmark",
        Outcome.MEETS: "Meets Entry Benchmark",
        Outcome.MONITOR: "Borderline – Monitor",
        Outcome.SUPPORT_REQUIRED: "Support Required",
    },
    "4": {
        Outcome.EXCEEDS: "Strong Capability",
        Outcome.MEETS: "Meets Benchmark",
        Outcome.MONITOR: "Monitor",
        Outcome.SUPPORT_REQUIRED: "Support Required",
    },
    "5": {
        Outcome.EXCEEDS: "Strong Diploma Readiness",
        Outcome.MEETS: "Meets Diploma Benchmark",
        Outcome.MONITOR: "Monitor",
        Outcome.SUPPORT_REQUIRED: "Support Required",
    },
    "6": {
        Outcome.EXCEEDS: "Advanced Capability",
        Outcome.MEETS: "Meets Advanced Diploma Benchmark",
        Outcome.MONITOR: "Monitor",
        Outcome.SUPPORT_REQUIRED: "Support Required",
    },
    "8-9": {
        Outcome.EXCEEDS: "Postgraduate Readiness – Strong",
        Outcome.MEETS: "Meets Postgraduate Benchmark",
        Outcome.MONITOR: "Monitor",
        Outcome.SUPPORT_REQUIRED: "Support Required",
    },
}

# Levels without their own label set
_DEFAULT_LABELS = CLASSIFICATION_LABELS["4"]


def classification_label(level: str, outcome: Outcome) -> str:
    return CLASSIFICATION_LABELS.get(level, _DEFAULT_LABELS)[outcome]


@dataclass
class ClassificationResult:
    """Output of OverallClassifier.classify()."""
    total_score: Decimal          # 0-100, quantized to 0.1
    baseline_outcome: Outcome     # from thresholds alone
    outcome: Outcome              # after overrides
    label: str
    override: OverrideResult


class OverallClassifier:
    """Combine weighted domain percentages with override results."""

    def __init__(self, override_evaluator: Optional[OverrideEvaluator] = None):
        self.override_evaluator = override_evaluator or OverrideEvaluator()

    def total_score(
        self,
        domain_scores: Mapping[Domain, DomainScore],
        config: BenchmarkConfig,
    ) -> Decimal:
        domains = list(domain_scores)
        return weighted_sum(
            [domain_scores[d].percentage for d in domains],
            [Decimal(str(config.weight_for(d))) for d in domains],
        )

    def classify(
        self,
        domain_scores: Mapping[Domain, DomainScore],
        config: BenchmarkConfig,
    ) -> ClassificationResult:
        total = self.total_score(domain_scores, config)
        baseline = config.thresholds.classify(total)

        percentages = {d: ds.percentage for d, ds in domain_scores.items()}
        override = self.override_evaluator.evaluate(percentages, baseline, config)
        outcome = override.final_outcome
        label = classification_label(config.level, outcome)

        logger.info(
            "classification_completed",
            level=config.level,
            config_version=config.version,
            total_score=float(total),
            baseline=baseline.value,
            outcome=outcome.value,
            override_triggered=override.override_triggered,
        )

        return ClassificationResult(
            total_score=total,
            baseline_outcome=baseline,
            outcome=outcome,
            label=label,
            override=override,
        )
