"""
Course Benchmark Traffic-Light Evaluator
llnd_engine/scoring/traffic_light.py

Selects the course benchmark rule for a (course_code, delivery_type) pair
and grades the candidate's placement bands GREEN / AMBER / RED.

Rule selection:
    patterns use glob '*'; specificity = number of '*' across both patterns;
    the lowest count wins, ties go to the rule listed first.
    No match → config defaults, rule id "DEFAULTS".

Status:
    GREEN  all CEFR minima met and IELTS delta ≤ 0
    AMBER  any configured amber condition holds
    RED    otherwise
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal
from functools import lru_cache
from typing import Dict, List, Optional

import structlog

from llnd_engine.models.enumerations import CEFRBand, TrafficLight
from llnd_engine.models.placement import (
    BenchmarkRule,
    BenchmarkThresholds,
    CourseBenchmarkConfig,
    IELTSBelowBy,
    OneThresholdMissedByOneBand,
    TrafficLightActions,
    WritingBelowMinOnly,
)
from llnd_engine.scoring.item_scorer import parse_number

logger = structlog.get_logger(__name__)

DEFAULTS_RULE_ID = "DEFAULTS"
DEFAULTS_RULE_NAME = "Defaults"
UNPARSABLE_IELTS_DELTA = Decimal("999")
UNKNOWN_BAND_INDEX = -999


@dataclass
class ThresholdMiss:
    field: str           # overall_cefr | reading_cefr | writing_cefr
    drop: int            # bands below the minimum


@dataclass
class BenchmarkResult:
    status: TrafficLight
    rule_id: str
    rule_name: str
    actions: List[str]
    thresholds: BenchmarkThresholds
    misses: List[ThresholdMiss] = field(default_factory=list)
    ielts_delta: Decimal = Decimal("0")
    reasons: List[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def band_index(band: Optional[str]) -> int:
    """Ordinal position of a CEFR band; UNKNOWN_BAND_INDEX for None/unknown."""
    if not band:
        return UNKNOWN_BAND_INDEX
    try:
        return CEFRBand(band).order
    except ValueError:
        return UNKNOWN_BAND_INDEX


def band_drop(actual: Optional[str], required: str) -> int:
    return max(0, band_index(required) - band_index(actual))


def parse_ielts(value: Optional[str]) -> Optional[Decimal]:
    """Leading number of the value: "6.5+" and "6.5abc" → Decimal("6.5"); None when none."""
    return parse_number(value)


def ielts_delta(actual: Optional[str], required: Optional[str]) -> Decimal:
    """required − actual; 0 without a requirement, 999 when unparsable."""
    if not required:
        return Decimal("0")
    a, r = parse_ielts(actual), parse_ielts(required)
    if a is None or r is None or not a.is_finite() or not r.is_finite():
        return UNPARSABLE_IELTS_DELTA
    return r - a


@lru_cache(maxsize=256)
def _wildcard_regex(pattern: str) -> "re.Pattern[str]":
    return re.compile("^" + ".*".join(re.escape(part) for part in pattern.split("*")) + "$")


def wildcard_match(pattern: Optional[str], text: Optional[str]) -> bool:
    if not pattern or pattern == "*":
        return True
    return _wildcard_regex(pattern).match(text or "") is not None


def specificity(rule: BenchmarkRule) -> int:
    """Wildcard count across both patterns; lower is more specific."""
    course = rule.applies_to.course_code or "*"
    delivery = rule.applies_to.delivery_type or "*"
    return course.count("*") + delivery.count("*")


def select_rule(
    rules: List[BenchmarkRule],
    course_code: str,
    delivery_type: str,
) -> Optional[BenchmarkRule]:
    candidates = [
        rule for rule in rules
        if wildcard_match(rule.applies_to.course_code, course_code)
        and wildcard_match(rule.applies_to.delivery_type, delivery_type)
    ]
    if not candidates:
        return None
    # min() keeps the first of equal keys
    return min(candidates, key=specificity)


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------

class TrafficLightEvaluator:
    """Grade placement bands against the course benchmark rules."""

    def evaluate(
        self,
        config: CourseBenchmarkConfig,
        overall_cefr: str,
        reading_cefr: str,
        writing_cefr: str,
        ielts_indicative: Optional[str],
        course_code: Optional[str] = None,
        delivery_type: Optional[str] = None,
    ) -> BenchmarkResult:
        course_code = course_code or "*"
        delivery_type = delivery_type or "*"

        rule = select_rule(config.rules, course_code, delivery_type)
        thresholds = rule.thresholds if rule else config.defaults
        actions = rule.actions if rule else TrafficLightActions()
        conditions = rule.amber_conditions if rule else []

        candidate: Dict[str, str] = {
            "overall_cefr": overall_cefr,
            "reading_cefr": reading_cefr,
            "writing_cefr": writing_cefr,
        }
        required: Dict[str, Optional[CEFRBand]] = {
            "overall_cefr": thresholds.overall_cefr_min,
            "reading_cefr": thresholds.reading_cefr_min,
            "writing_cefr": thresholds.writing_cefr_min,
        }

        # Step 1: Threshold checks
        misses: List[ThresholdMiss] = []
        met: Dict[str, bool] = {}
        for name, minimum in required.items():
            met[name] = minimum is None or band_index(candidate[name]) >= minimum.order
            if not met[name]:
                misses.append(ThresholdMiss(name, band_drop(candidate[name], minimum.value)))

        ielts_required = bool(thresholds.ielts_indicative_min)
        delta = Decimal("0")
        met_ielts = True
        if ielts_required:
            delta = ielts_delta(ielts_indicative, thresholds.ielts_indicative_min)
            met_ielts = delta <= 0

        def build(status: TrafficLight, action_list: List[str], reasons=None) -> BenchmarkResult:
            result = BenchmarkResult(
                status=status,
                rule_id=rule.rule_id if rule else DEFAULTS_RULE_ID,
                rule_name=rule.name if rule else DEFAULTS_RULE_NAME,
                actions=list(action_list),
                thresholds=thresholds,
                misses=misses,
                ielts_delta=delta,
                reasons=reasons or [],
            )
            logger.info(
                "traffic_light_evaluated",
                status=status.value,
                rule_id=result.rule_id,
                course_code=course_code,
                delivery_type=delivery_type,
                misses=[m.field for m in misses],
            )
            return result

        # Step 2: GREEN
        if not misses and met_ielts:
            return build(TrafficLight.GREEN, actions.green)

        # Step 3: AMBER
        reasons: List[str] = []
        for cond in conditions:
            if isinstance(cond, OneThresholdMissedByOneBand):
                nominated = [m for m in misses if m.field in cond.fields]
                if len(nominated) == 1 and nominated[0].drop == 1:
                    reasons.append(f"One CEFR threshold missed by one band: {nominated[0].field}")

            elif isinstance(cond, WritingBelowMinOnly):
                if not met["writing_cefr"] and met["reading_cefr"] and met["overall_cefr"]:
                    drop = band_drop(writing_cefr, required["writing_cefr"].value)
                    if 1 <= drop <= cond.max_band_drop:
                        reasons.append(f"Writing below minimum only (drop {drop})")

            elif isinstance(cond, IELTSBelowBy):
                if ielts_required and 0 < delta <= Decimal(str(cond.max_delta)):
                    reasons.append(f"IELTS indicative below requirement by {delta}")

        if reasons:
            return build(TrafficLight.AMBER, actions.amber, reasons)

        # Step 4: RED
        return build(TrafficLight.RED, actions.red)
