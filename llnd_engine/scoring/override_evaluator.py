"""
Override & Risk-Flag Evaluator
llnd_engine/scoring/override_evaluator.py

Applies the configured rule set to domain percentages.

Order of evaluation:
    1. Critical-domain rule (implicit OR over critical_domains at
       critical_fail_threshold)
    2. Configured auto_support rules, in order
       -> first satisfied rule forces "support_required"; nothing else runs
    3. Monitor caps (configured monitor_cap rules, then one single_below
       cap per monitor_triggers entry)
       -> any satisfied cap lowers exceeds/meets to "monitor"; never raises

Risk flags are independent and advisory: a domain below its own
risk_thresholds entry is flagged with the gap, classification unchanged.

A rule naming a domain that has no scored items treats that domain as
not below threshold.

Rule shapes are dispatched on their ``condition`` tag through
AUTO_SUPPORT_EVALUATORS / MONITOR_CAP_EVALUATORS, so a new shape is one
model plus one function.
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, List, Mapping, Optional

import structlog

from llnd_engine.models.benchmark import (
    AndRule,
    AnyTwoCoreRule,
    BenchmarkConfig,
    DomainThreshold,
    MultiBelowCap,
    OrRule,
    SingleBelowCap,
    SingleRule,
)
from llnd_engine.models.enumerations import Domain, Outcome
from llnd_engine.scoring.utils import ONE_PLACE

logger = structlog.get_logger(__name__)

Percentages = Mapping[Domain, Decimal]


@dataclass
class RiskFlag:
    """Advisory flag for a domain below its risk threshold."""
    domain: Domain
    percentage: Decimal
    threshold: Decimal
    delta: Decimal          # threshold − percentage, > 0
    detail: str


@dataclass
class OverrideResult:
    """Output of OverrideEvaluator.evaluate()."""
    baseline_outcome: Outcome
    final_outcome: Outcome
    auto_support_triggered: bool
    triggering_rule: Optional[str]         # description of the auto-support rule that fired
    caps_fired: List[str] = field(default_factory=list)
    capped: bool = False                   # a cap actually lowered the outcome

    @property
    def override_triggered(self) -> bool:
        return self.auto_support_triggered or self.capped


# ---------------------------------------------------------------------------
# Rule evaluators
# ---------------------------------------------------------------------------

def _below(pcts: Percentages, domain: Domain, threshold: float) -> bool:
    pct = pcts.get(domain)
    return pct is not None and pct < Decimal(str(threshold))


def _any_below(rules: List[DomainThreshold], pcts: Percentages) -> bool:
    return any(_below(pcts, r.domain, r.threshold) for r in rules)


def _eval_or(rule: OrRule, pcts: Percentages) -> bool:
    return _any_below(rule.rules, pcts)


def _eval_and(rule: AndRule, pcts: Percentages) -> bool:
    return all(_below(pcts, r.domain, r.threshold) for r in rule.rules)


def _eval_single(rule: SingleRule, pcts: Percentages) -> bool:
    r = rule.rules[0]
    return _below(pcts, r.domain, r.threshold)


def _eval_any_two_core(rule: AnyTwoCoreRule, pcts: Percentages) -> bool:
    below = sum(1 for d in rule.core_domains if _below(pcts, d, rule.threshold))
    return below >= 2


def _eval_single_below(rule: SingleBelowCap, pcts: Percentages) -> bool:
    return _below(pcts, rule.domain, rule.threshold)


def _eval_multi_below(rule: MultiBelowCap, pcts: Percentages) -> bool:
    scope = rule.domains if rule.domains else list(pcts)
    below = sum(1 for d in scope if _below(pcts, d, rule.threshold))
    return below >= rule.count


AUTO_SUPPORT_EVALUATORS: Dict[str, Callable] = {
    "OR": _eval_or,
    "AND": _eval_and,
    "SINGLE": _eval_single,
    "ANY_2_CORE": _eval_any_two_core,
}

MONITOR_CAP_EVALUATORS: Dict[str, Callable] = {
    "single_below": _eval_single_below,
    "multi_below": _eval_multi_below,
}


# ---------------------------------------------------------------------------
# OverrideEvaluator
# ---------------------------------------------------------------------------

class OverrideEvaluator:
    """Evaluate auto-support, monitor-cap and risk rules."""

    def evaluate(
        self,
        percentages: Percentages,
        baseline: Outcome,
        config: BenchmarkConfig,
    ) -> OverrideResult:
        for rule in self._auto_support_rules(config):
            if AUTO_SUPPORT_EVALUATORS[rule.condition](rule, percentages):
                result = OverrideResult(
                    baseline_outcome=baseline,
                    final_outcome=Outcome.SUPPORT_REQUIRED,
                    auto_support_triggered=True,
                    triggering_rule=rule.describe(),
                )
                logger.info(
                    "override_evaluated",
                    baseline=baseline.value,
                    final=result.final_outcome.value,
                    auto_support_rule=result.triggering_rule,
                )
                return result

        fired = [
            rule.describe()
            for rule in self._monitor_cap_rules(config)
            if MONITOR_CAP_EVALUATORS[rule.condition](rule, percentages)
        ]

        final = baseline
        if fired and baseline.rank > Outcome.MONITOR.rank:
            final = Outcome.MONITOR

        result = OverrideResult(
            baseline_outcome=baseline,
            final_outcome=final,
            auto_support_triggered=False,
            triggering_rule=None,
            caps_fired=fired,
            capped=final != baseline,
        )
        logger.info(
            "override_evaluated",
            baseline=baseline.value,
            final=final.value,
            caps_fired=fired,
        )
        return result

    def risk_flags(
        self,
        percentages: Percentages,
        config: BenchmarkConfig,
    ) -> List[RiskFlag]:
        """Flag every scored domain below its configured risk threshold."""
        flags: List[RiskFlag] = []
        for domain in Domain:
            pct = percentages.get(domain)
            threshold = config.risk_thresholds.get(domain)
            if pct is None or threshold is None:
                continue
            thr = Decimal(str(threshold))
            if pct < thr:
                delta = (thr - pct).quantize(ONE_PLACE, rounding=ROUND_HALF_UP)
                flags.append(RiskFlag(
                    domain=domain,
                    percentage=pct,
                    threshold=thr,
                    delta=delta,
                    detail=(
                        f"{domain.value} {pct}% is {delta} points below the "
                        f"risk threshold of {threshold:g}%"
                    ),
                ))
        if flags:
            logger.info(
                "risk_flags_raised",
                domains=[f.domain.value for f in flags],
            )
        return flags

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _auto_support_rules(config: BenchmarkConfig) -> list:
        rules: list = []
        if config.critical_domains:
            rules.append(OrRule(rules=[
                DomainThreshold(domain=d, threshold=config.critical_fail_threshold)
                for d in config.critical_domains
            ]))
        rules.extend(config.override_rules.auto_support)
        return rules

    @staticmethod
    def _monitor_cap_rules(config: BenchmarkConfig) -> list:
        rules: list = list(config.override_rules.monitor_cap)
        rules.extend(
            SingleBelowCap(domain=d, threshold=t)
            for d, t in config.monitor_triggers.items()
        )
        seen = set()
        unique = []
        for rule in rules:
            key = rule.describe()
            if key not in seen:
                seen.add(key)
                unique.append(rule)
        return unique
