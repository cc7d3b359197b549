"""
Placement Band Mapper
llnd_engine/scoring/band_mapper.py

Turns placement section results into CEFR / IELTS-indicative / ACSF bands.

Section scores:
    grammar   = correct × 1.0                         (0-20)
    reading   = correct × 1.5                         (0-30)
    task1     = Σ task1 domain scores                 (0-20)
    task2     = Σ task2 domain scores × 1.5           (0-30)
    writing   = task1 raw + task2 raw                 (0-40)
    composite = grammar + reading + task1 + task2     (0-100)

Skill floor (when enabled):
    overall_final = min(overall_pre, reading_band, writing_band)
    The floor can only lower the overall band, never raise it.

IELTS indicative:
    p = (composite - row.min) / (row.max - row.min) inside the composite's
    overall row; p < 0.33 → low, p ≤ 0.66 → mid, else high. The value is
    read from the mapping of the final (post-floor) band.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, TypeVar

import structlog

from llnd_engine.config import settings
from llnd_engine.core.exceptions import BandLookupException
from llnd_engine.models.enumerations import CEFRBand
from llnd_engine.models.placement import (
    BandRow,
    BandTable,
    IELTSIndicative,
    PlacementInput,
    PlacementScoringConfig,
)
from llnd_engine.scoring.utils import to_decimal

logger = structlog.get_logger(__name__)

BandT = TypeVar("BandT")

IELTS_LOW_CUTOFF = Decimal("0.33")
IELTS_MID_CUTOFF = Decimal("0.66")


# ---------------------------------------------------------------------------
# Default placement configuration
# ---------------------------------------------------------------------------

def _table(name: str, min_score: float, max_score: float, cuts: List[tuple]) -> Dict[str, Any]:
    """Build a table payload from (min, max, band) tuples."""
    return {
        "name": name,
        "min_score": min_score,
        "max_score": max_score,
        "rows": [{"min": lo, "max": hi, "band": band} for lo, hi, band in cuts],
    }


DEFAULT_PLACEMENT_CONFIG = PlacementScoringConfig.model_validate({
    "version": "v1.0-pilot",
    "skill_floor_enabled": True,
    "cutoffs_overall": _table("overall", 0, 100, [
        (0, 40, "A2"), (40, 60, "B1"), (60, 80, "B2"), (80, 100, "C1"),
    ]),
    "cutoffs_reading": _table("reading", 0, 30, [
        (0, 12, "A2"), (12, 18, "B1"), (18, 24, "B2"), (24, 30, "C1"),
    ]),
    "cutoffs_writing": _table("writing", 0, 40, [
        (0, 13, "A2"), (13, 21, "B1"), (21, 29, "B2"), (29, 40, "C1"),
    ]),
    "ielts_mapping": {
        "A2": {"low": "4.0", "mid": "4.0", "high": "4.5"},
        "B1": {"low": "4.5", "mid": "5.0", "high": "5.5"},
        "B2": {"low": "5.5", "mid": "6.0", "high": "6.5"},
        "C1": {"low": "7.0", "mid": "7.0", "high": "7.5+"},
    },
    "acsf_reading": _table("acsf_reading", 0, 30, [
        (0, 6, 1), (6, 12, 2), (12, 18, 3), (18, 24, 4), (24, 30, 5),
    ]),
    "acsf_writing": _table("acsf_writing", 0, 40, [
        (0, 7, 1), (7, 13, 2), (13, 21, 3), (21, 29, 4), (29, 40, 5),
    ]),
})


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass
class PlacementResult:
    """Output of PlacementScorer.score()."""
    grammar_score: Decimal
    reading_score: Decimal
    writing_task1_score: Decimal
    writing_task2_score: Decimal
    writing_raw_total: int
    composite_score: Decimal
    reading_cefr: CEFRBand
    writing_cefr: CEFRBand
    overall_cefr_pre_floor: CEFRBand
    overall_cefr_final: CEFRBand
    skill_floor_applied: bool
    skill_floor_reason: Optional[str]
    ielts_indicative: str
    reading_acsf: int
    writing_acsf: int
    config_version: str
    engine_version: str
    audit_log: List[Dict[str, Any]] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def lookup_band(score: Decimal, table: BandTable[BandT], version: str) -> BandRow[BandT]:
    """Row containing score; raises BandLookupException on a miss."""
    row = table.find_row(float(score))
    if row is None:
        raise BandLookupException(score=score, table=table.name, version=version)
    return row


def apply_skill_floor(
    overall: CEFRBand,
    reading: CEFRBand,
    writing: CEFRBand,
) -> tuple:
    """
    Returns (final_band, reason). reason is None when the floor did not
    change the band, else "Capped by Reading", "Capped by Writing" or
    "Capped by Reading and Writing".
    """
    final = min((overall, reading, writing), key=lambda b: b.order)
    if final == overall:
        return overall, None
    causes = [
        name for name, band in (("Reading", reading), ("Writing", writing))
        if band.order < overall.order
    ]
    return final, f"Capped by {' and '.join(causes)}"


def ielts_position(score: Decimal, row: BandRow) -> str:
    lo, hi = Decimal(str(row.min)), Decimal(str(row.max))
    p = Decimal("1") if hi == lo else (score - lo) / (hi - lo)
    if p < IELTS_LOW_CUTOFF:
        return "low"
    if p <= IELTS_MID_CUTOFF:
        return "mid"
    return "high"


def ielts_for(mapping: IELTSIndicative, position: str) -> str:
    return getattr(mapping, position)


# ---------------------------------------------------------------------------
# Scorer
# ---------------------------------------------------------------------------

class PlacementScorer:
    """Compute placement bands from section results and a config snapshot."""

    def __init__(self, config: Optional[PlacementScoringConfig] = None):
        self.config = config or DEFAULT_PLACEMENT_CONFIG

    def score(
        self,
        data: PlacementInput,
        config: Optional[PlacementScoringConfig] = None,
    ) -> PlacementResult:
        cfg = config or self.config
        audit: List[Dict[str, Any]] = []

        # Step 1: Section scores
        t1_raw = data.task1.total
        t2_raw = data.task2.total
        grammar = Decimal(data.grammar_correct) * to_decimal(cfg.grammar_multiplier, 2)
        reading = Decimal(data.reading_correct) * to_decimal(cfg.reading_multiplier, 2)
        task1 = Decimal(t1_raw)
        task2 = Decimal(t2_raw) * to_decimal(cfg.extended_task_multiplier, 2)
        writing_raw = t1_raw + t2_raw
        composite = grammar + reading + task1 + task2

        audit.append({
            "step": "section_scores",
            "grammar_score": str(grammar),
            "reading_score": str(reading),
            "writing_task1_score": str(task1),
            "writing_task2_score": str(task2),
            "writing_raw_total": writing_raw,
            "composite_score": str(composite),
        })

        # Step 2: CEFR bands
        reading_cefr = lookup_band(reading, cfg.cutoffs_reading, cfg.version).band
        writing_cefr = lookup_band(Decimal(writing_raw), cfg.cutoffs_writing, cfg.version).band
        overall_row = lookup_band(composite, cfg.cutoffs_overall, cfg.version)
        overall_pre = overall_row.band

        audit.append({
            "step": "cefr_pre_floor",
            "reading_cefr": reading_cefr.value,
            "writing_cefr": writing_cefr.value,
            "overall_pre": overall_pre.value,
        })

        # Step 3: Skill floor
        overall_final, reason = overall_pre, None
        if cfg.skill_floor_enabled:
            overall_final, reason = apply_skill_floor(overall_pre, reading_cefr, writing_cefr)
        floor_applied = overall_final != overall_pre

        audit.append({
            "step": "skill_floor",
            "overall_final": overall_final.value,
            "skill_floor_applied": floor_applied,
            "skill_floor_reason": reason,
        })

        # Step 4: IELTS indicative
        position = ielts_position(composite, overall_row)
        ielts = ielts_for(cfg.ielts_mapping[overall_final], position)

        audit.append({"step": "ielts", "position": position, "ielts_indicative": ielts})

        # Step 5: ACSF
        reading_acsf = lookup_band(reading, cfg.acsf_reading, cfg.version).band
        writing_acsf = lookup_band(Decimal(writing_raw), cfg.acsf_writing, cfg.version).band

        audit.append({"step": "acsf", "reading_acsf": reading_acsf, "writing_acsf": writing_acsf})

        logger.info(
            "placement_scored",
            config_version=cfg.version,
            composite=str(composite),
            overall_pre=overall_pre.value,
            overall_final=overall_final.value,
            skill_floor_applied=floor_applied,
        )

        return PlacementResult(
            grammar_score=grammar,
            reading_score=reading,
            writing_task1_score=task1,
            writing_task2_score=task2,
            writing_raw_total=writing_raw,
            composite_score=composite,
            reading_cefr=reading_cefr,
            writing_cefr=writing_cefr,
            overall_cefr_pre_floor=overall_pre,
            overall_cefr_final=overall_final,
            skill_floor_applied=floor_applied,
            skill_floor_reason=reason,
            ielts_indicative=ielts,
            reading_acsf=reading_acsf,
            writing_acsf=writing_acsf,
            config_version=cfg.version,
            engine_version=settings.PLACEMENT_ENGINE_VERSION,
            audit_log=audit,
        )
