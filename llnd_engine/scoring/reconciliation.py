"""
Writing Layer 4 - Score Reconciliation
llnd_engine/scoring/reconciliation.py

Per domain, with d = |rule − external|:
    d ≤ 1   final = external
    d = 2   final = round_half_up((rule + external) / 2)
    d ≥ 3   same average, plus RULE_LLM_DIVERGENCE_<DOMAIN>

No external scores: final = rule scores, flag LLM_UNAVAILABLE.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import structlog

from llnd_engine.models.enumerations import WritingDomain
from llnd_engine.models.writing import WritingDomainScores
from llnd_engine.scoring.utils import round_half_up

logger = structlog.get_logger(__name__)

EXTERNAL_UNAVAILABLE_FLAG = "LLM_UNAVAILABLE"
DIVERGENCE_FLAG_PREFIX = "RULE_LLM_DIVERGENCE_"


def divergence_flag(domain: WritingDomain) -> str:
    return f"{DIVERGENCE_FLAG_PREFIX}{domain.value.upper()}"


@dataclass
class ReconciliationResult:
    final_scores: WritingDomainScores
    flags: List[str] = field(default_factory=list)
    differences: Dict[WritingDomain, int] = field(default_factory=dict)   # empty when no external

    @property
    def divergent(self) -> bool:
        return any(f.startswith(DIVERGENCE_FLAG_PREFIX) for f in self.flags)


def reconcile_domain(rule: int, external: int) -> int:
    if abs(rule - external) <= 1:
        return external
    return round_half_up((rule + external) / 2)


def reconcile(
    rule_scores: WritingDomainScores,
    external_scores: Optional[WritingDomainScores],
) -> ReconciliationResult:
    if external_scores is None:
        logger.info("writing_reconciled", external_available=False)
        return ReconciliationResult(
            final_scores=rule_scores,
            flags=[EXTERNAL_UNAVAILABLE_FLAG],
        )

    final: Dict[str, int] = {}
    flags: List[str] = []
    differences: Dict[WritingDomain, int] = {}

    for domain in WritingDomain:
        rule = rule_scores.get(domain)
        external = external_scores.get(domain)
        diff = abs(rule - external)
        differences[domain] = diff
        final[domain.value] = reconcile_domain(rule, external)
        if diff >= 3:
            flags.append(divergence_flag(domain))

    logger.info(
        "writing_reconciled",
        external_available=True,
        differences={d.value: v for d, v in differences.items()},
        flags=flags,
    )
    return ReconciliationResult(
        final_scores=WritingDomainScores(**final),
        flags=flags,
        differences=differences,
    )
