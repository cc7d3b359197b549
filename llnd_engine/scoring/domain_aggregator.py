"""
Domain Aggregator
llnd_engine/scoring/domain_aggregator.py

Rolls item scores up into one DomainScore per domain that has at least
one scored item.

Formula:
    raw        = Σ awarded score
    max        = Σ max score
    percentage = raw / max × 100      (0.0 when max is 0)
    weighted   = percentage × domain weight

ACSF sub-percentages partition the items against the config's target
sub-level t:
    foundation  items below t
    core        core items at t or above
    stretch     stretch items

Band inference (thresholds from config.acsf_thresholds):
    core ≥ core_meets and stretch ≥ stretch_meets   -> "ACSF t (confident)"
    core ≥ core_meets                               -> "ACSF t (monitor)"
    foundation < foundation_fail                    -> "Below ACSF t-1"
    otherwise                                       -> "ACSF t-1-t (borderline)"
A partition with no items scores 0.0, so a failing core with no
foundation items still lands below t-1.
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

import structlog

from llnd_engine.models.benchmark import ACSFThresholds, BenchmarkConfig
from llnd_engine.models.enumerations import DifficultyTag, Domain, Outcome
from llnd_engine.scoring.item_scorer import ItemScore
from llnd_engine.scoring.narrative import select_domain_narrative
from llnd_engine.scoring.utils import TWO_PLACES, percentage

logger = structlog.get_logger(__name__)


@dataclass
class DomainScore:
    """Aggregated result for one domain. Recomputed every run."""
    domain: Domain
    raw_score: Decimal
    max_score: Decimal
    percentage: Decimal                  # 0-100, quantized to 0.1
    weight: Decimal
    weighted_contribution: Decimal       # percentage × weight, quantized to 0.01
    foundation_percent: Decimal
    core_percent: Decimal
    stretch_percent: Decimal
    estimated_band: str
    outcome: Outcome
    item_count: int
    justification: str = ""
    strategies: List[str] = field(default_factory=list)
    risk_flag: bool = False
    risk_detail: Optional[str] = None


def _partition_percent(items: List[ItemScore]) -> Decimal:
    return percentage(
        sum((i.score for i in items), Decimal("0")),
        sum((i.max_score for i in items), Decimal("0")),
    )


def _meets(value: Decimal, threshold: float) -> bool:
    return value >= Decimal(str(threshold))


def estimate_band(
    foundation: Decimal,
    core: Decimal,
    stretch: Decimal,
    acsf: ACSFThresholds,
) -> str:
    t = acsf.target_level
    if _meets(core, acsf.core_meets):
        if _meets(stretch, acsf.stretch_meets):
            return f"ACSF {t} (confident)"
        return f"ACSF {t} (monitor)"
    if not _meets(foundation, acsf.foundation_fail):
        return f"Below ACSF {t - 1}"
    return f"ACSF {t - 1}-{t} (borderline)"


class DomainAggregator:
    """Aggregate item scores into per-domain scores."""

    def aggregate(
        self,
        item_scores: List[ItemScore],
        config: BenchmarkConfig,
        level_name: str,
    ) -> Dict[Domain, DomainScore]:
        """
        Args:
            item_scores: Scored items, objective, free-text and writing-task alike.
            config: Benchmark snapshot supplying weights and thresholds.
            level_name: Qualification name substituted into justifications.

        Returns:
            Dict of Domain -> DomainScore in Domain declaration order.
            Domains without items are omitted.
        """
        by_domain: Dict[Domain, List[ItemScore]] = {d: [] for d in Domain}
        for item in item_scores:
            by_domain[item.domain].append(item)

        target = config.acsf_thresholds.target_level
        results: Dict[Domain, DomainScore] = {}

        for domain, items in by_domain.items():
            if not items:
                continue

            raw = sum((i.score for i in items), Decimal("0"))
            max_score = sum((i.max_score for i in items), Decimal("0"))
            pct = percentage(raw, max_score)
            weight = Decimal(str(config.weight_for(domain)))
            weighted = (pct * weight).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)

            foundation = _partition_percent([i for i in items if i.level < target])
            core = _partition_percent([
                i for i in items
                if i.level >= target and i.difficulty == DifficultyTag.CORE
            ])
            stretch = _partition_percent([
                i for i in items if i.difficulty == DifficultyTag.STRETCH
            ])

            outcome = config.thresholds.classify(pct)
            justification, strategies = select_domain_narrative(domain, outcome, level_name)

            results[domain] = DomainScore(
                domain=domain,
                raw_score=raw,
                max_score=max_score,
                percentage=pct,
                weight=weight,
                weighted_contribution=weighted,
                foundation_percent=foundation,
                core_percent=core,
                stretch_percent=stretch,
                estimated_band=estimate_band(foundation, core, stretch, config.acsf_thresholds),
                outcome=outcome,
                item_count=len(items),
                justification=justification,
                strategies=strategies,
            )

            logger.info(
                "domain_aggregated",
                domain=domain.value,
                raw_score=float(raw),
                max_score=float(max_score),
                percentage=float(pct),
                weighted_contribution=float(weighted),
                estimated_band=results[domain].estimated_band,
                outcome=outcome.value,
            )

        return results
