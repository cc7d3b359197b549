from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SelfAssessmentDomain(str, Enum):
    READING = "Reading"
    WRITING = "Writing"
    NUMERACY = "Numeracy"
    LEARNING = "Learning"
    DIGITAL = "Digital"


class ProgressionPathway(str, Enum):
    DIRECT = "Direct progression"
    SKILL_UPGRADE = "Skill upgrade"
    CAREER_CHANGE = "Career change"


class SectionAResponses(BaseModel):
    """
    Course-suitability answers (Section A).

    Free-text answers are graded on depth only; content is never inspected.
    A10-A12 apply to international applicants.
    """

    model_config = ConfigDict(frozen=True)

    course_motivation: str = Field(default="", description="A1 course selection motivation")
    provider_rationale: str = Field(default="", description="A2 provider selection rationale")
    academic_progression: str = Field(default="", description="A3 academic progression")
    progression_pathway: Optional[ProgressionPathway] = Field(
        default=None,
        description="A3 pathway selection"
    )
    employment_outcomes: str = Field(default="", description="A4 expected employment outcomes")
    career_goals: str = Field(default="", description="A5 long-term career goals")
    study_commitments: List[str] = Field(
        default_factory=list,
        description="A6 study commitment confirmations ticked"
    )
    study_plan: str = Field(default="", description="A7 study management plan")
    english_background: str = Field(default="", description="A8 English study background")
    previous_withdrawal: bool = Field(default=False, description="A9 withdrew from a course before")
    withdrawal_explanation: Optional[str] = Field(default=None, description="A9 explanation")
    funding_source: Optional[str] = Field(default=None, description="A10 funding source")
    funding_explanation: Optional[str] = Field(default=None, description="A10 explanation")
    cost_of_living_aware: Optional[bool] = Field(default=None, description="A11 cost-of-living awareness")
    cost_of_living_estimate: Optional[str] = Field(default=None, description="A11 estimate")
    post_qualification_plans: Optional[str] = Field(default=None, description="A12 plans")


class SelfAssessmentItem(BaseModel):
    """One Section B self-assessment answer: 2 confident, 1 somewhat, 0 may need support."""

    model_config = ConfigDict(frozen=True)

    domain: SelfAssessmentDomain
    item_id: str
    value: int = Field(..., ge=0, le=2)


class PreEnrolmentThresholds(BaseModel):
    """Word-count and self-assessment thresholds for the pre-enrolment review."""

    model_config = ConfigDict(frozen=True)

    motivation_required_min: int = 120
    motivation_low_threshold: int = 80
    provider_required_min: int = 100
    provider_low_threshold: int = 70
    progression_required_min: int = 100
    progression_low_threshold: int = 70
    goals_required_min: int = 120
    goals_low_threshold: int = 80
    study_plan_required_min: int = 100
    study_plan_low_threshold: int = 70
    withdrawal_explanation_min: int = 80
    funding_explanation_min: int = 50
    post_qualification_required_min: int = 100
    required_commitments: int = 4

    domain_high_min_percent: float = 75
    domain_moderate_min_percent: float = 50
    overall_mns_risk_threshold: int = 5
    domain_mns_threshold: int = 3

    @model_validator(mode="after")
    def validate_order(self):
        pairs = [
            ("motivation", self.motivation_low_threshold, self.motivation_required_min),
            ("provider", self.provider_low_threshold, self.provider_required_min),
            ("progression", self.progression_low_threshold, self.progression_required_min),
            ("goals", self.goals_low_threshold, self.goals_required_min),
            ("study_plan", self.study_plan_low_threshold, self.study_plan_required_min),
        ]
        for name, low, required in pairs:
            if low > required:
                raise ValueError(f"{name}: low threshold {low} exceeds required minimum {required}")
        if self.domain_moderate_min_percent > self.domain_high_min_percent:
            raise ValueError("domain_moderate_min_percent exceeds domain_high_min_percent")
        return self
