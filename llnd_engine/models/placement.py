"""
Placement scoring and course benchmark records.

Band tables are validated eagerly on load: rows must be contiguous
half-open ranges [min, max) covering the documented score domain, with
the final row closed at the domain maximum. A table that loads is
exhaustive, so a lookup miss at scoring time means a score outside the
domain itself.
"""

from typing import Dict, Generic, List, Literal, Optional, TypeVar, Union, Annotated

from pydantic import BaseModel, ConfigDict, Field, model_validator

from llnd_engine.models.enumerations import CEFRBand
from llnd_engine.models.writing import WritingDomainScores


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


BandT = TypeVar("BandT")


class BandRow(_Frozen, Generic[BandT]):
    min: float
    max: float
    band: BandT


class BandTable(_Frozen, Generic[BandT]):
    """Ordered, non-overlapping cutoff rows over [min_score, max_score]."""

    name: str
    min_score: float
    max_score: float
    rows: List[BandRow[BandT]] = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_coverage(self):
        if self.rows[0].min != self.min_score:
            raise ValueError(
                f"Table '{self.name}' starts at {self.rows[0].min}, expected {self.min_score}"
            )
        for prev, row in zip(self.rows, self.rows[1:]):
            if row.min != prev.max:
                kind = "gap" if row.min > prev.max else "overlap"
                raise ValueError(
                    f"Table '{self.name}' has a {kind} between {prev.max} and {row.min}"
                )
        for row in self.rows:
            if row.max <= row.min:
                raise ValueError(f"Table '{self.name}' has an empty row at {row.min}")
        if self.rows[-1].max != self.max_score:
            raise ValueError(
                f"Table '{self.name}' ends at {self.rows[-1].max}, expected {self.max_score}"
            )
        return self

    def find_row(self, score: float) -> Optional[BandRow[BandT]]:
        last = len(self.rows) - 1
        for i, row in enumerate(self.rows):
            if row.min <= score < row.max or (i == last and score == row.max):
                return row
        return None


class IELTSIndicative(_Frozen):
    low: str
    mid: str
    high: str


class PlacementScoringConfig(_Frozen):
    """Versioned placement scoring configuration."""

    version: str = Field(..., min_length=1)
    skill_floor_enabled: bool = True
    grammar_multiplier: float = Field(default=1.0, gt=0)
    reading_multiplier: float = Field(default=1.5, gt=0)
    extended_task_multiplier: float = Field(default=1.5, gt=0)
    cutoffs_overall: BandTable[CEFRBand]
    cutoffs_reading: BandTable[CEFRBand]
    cutoffs_writing: BandTable[CEFRBand]
    ielts_mapping: Dict[CEFRBand, IELTSIndicative]
    acsf_reading: BandTable[int]
    acsf_writing: BandTable[int]

    @model_validator(mode="after")
    def validate_ielts_mapping(self):
        missing = [b.value for b in CEFRBand if b not in self.ielts_mapping]
        if missing:
            raise ValueError(f"IELTS mapping missing bands: {', '.join(missing)}")
        return self


# ---------------------------------------------------------------------------
# Course benchmark (traffic-light) rules
# ---------------------------------------------------------------------------

class AppliesTo(_Frozen):
    course_code: str = "*"
    delivery_type: str = "*"


class BenchmarkThresholds(_Frozen):
    overall_cefr_min: Optional[CEFRBand] = None
    reading_cefr_min: Optional[CEFRBand] = None
    writing_cefr_min: Optional[CEFRBand] = None
    ielts_indicative_min: Optional[str] = None


class OneThresholdMissedByOneBand(_Frozen):
    type: Literal["one_threshold_missed_by_one_band"] = "one_threshold_missed_by_one_band"
    fields: List[str] = Field(
        default_factory=lambda: ["reading_cefr", "writing_cefr", "overall_cefr"]
    )


class WritingBelowMinOnly(_Frozen):
    type: Literal["writing_below_min_only"] = "writing_below_min_only"
    max_band_drop: int = Field(default=1, ge=1)


class IELTSBelowBy(_Frozen):
    type: Literal["ielts_below_by"] = "ielts_below_by"
    max_delta: float = Field(default=0.5, gt=0)


AmberCondition = Annotated[
    Union[OneThresholdMissedByOneBand, WritingBelowMinOnly, IELTSBelowBy],
    Field(discriminator="type"),
]


class TrafficLightActions(_Frozen):
    green: List[str] = Field(default_factory=lambda: ["Proceed"])
    amber: List[str] = Field(default_factory=lambda: ["Manual review recommended"])
    red: List[str] = Field(default_factory=lambda: ["Not recommended"])


class BenchmarkRule(_Frozen):
    rule_id: str
    name: str
    applies_to: AppliesTo = Field(default_factory=AppliesTo)
    thresholds: BenchmarkThresholds = Field(default_factory=BenchmarkThresholds)
    amber_conditions: List[AmberCondition] = Field(default_factory=list)
    actions: TrafficLightActions = Field(default_factory=TrafficLightActions)


class CourseBenchmarkConfig(_Frozen):
    version: str
    defaults: BenchmarkThresholds = Field(default_factory=BenchmarkThresholds)
    rules: List[BenchmarkRule] = Field(default_factory=list)


class PlacementInput(_Frozen):
    """Raw section results for one placement attempt."""
    grammar_correct: int = Field(..., ge=0, le=20)
    reading_correct: int = Field(..., ge=0, le=20)
    task1: WritingDomainScores
    task2: WritingDomainScores
