from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional

from llnd_engine.models.enumerations import TaskType, WritingDomain


class WritingPromptContext(BaseModel):
    """
    Prompt a writing task was answered against.
    """

    model_config = ConfigDict(frozen=True)

    prompt_text: str = Field(default="", description="Prompt shown to the candidate")
    requirement_1: Optional[str] = Field(default=None, description="First named requirement")
    requirement_2: Optional[str] = Field(default=None, description="Second named requirement")
    requirement_3: Optional[str] = Field(default=None, description="Third named requirement")
    target_level: str = Field(default="B1", description="Target CEFR level of the prompt")

    @property
    def requirements(self) -> List[str]:
        return [
            r for r in (self.requirement_1, self.requirement_2, self.requirement_3)
            if r
        ]


class WritingSubmission(BaseModel):
    """
    One candidate writing response plus caller-supplied integrity signals.
    """

    model_config = ConfigDict(frozen=True)

    task_type: TaskType = Field(..., description="task1 (functional) or task2 (extended)")

    response_text: str = Field(default="", description="Candidate's response")

    similarity_score: Optional[float] = Field(
        default=None,
        ge=0,
        le=100,
        description="Text-similarity percentage from the caller's matcher"
    )

    ai_probability: Optional[float] = Field(
        default=None,
        ge=0,
        le=1,
        description="AI-generation likelihood from the caller's detector"
    )

    existing_flags: List[str] = Field(
        default_factory=list,
        description="Flags already raised upstream (e.g. TIME_ANOMALY)"
    )


class WritingDomainScores(BaseModel):
    """Four writing domain scores, each 0-5."""

    model_config = ConfigDict(frozen=True)

    task_achievement: int = Field(..., ge=0, le=5)
    coherence_cohesion: int = Field(..., ge=0, le=5)
    lexical_resource: int = Field(..., ge=0, le=5)
    grammar_range_accuracy: int = Field(..., ge=0, le=5)

    def get(self, domain: WritingDomain) -> int:
        return getattr(self, domain.value)

    @property
    def total(self) -> int:
        return (
            self.task_achievement
            + self.coherence_cohesion
            + self.lexical_resource
            + self.grammar_range_accuracy
        )

    def as_dict(self) -> Dict[str, int]:
        return {d.value: self.get(d) for d in WritingDomain}


class ExternalRubricResponse(BaseModel):
    """Validated reply from the external rubric-scoring service."""

    model_config = ConfigDict(frozen=True)

    domain_scores: WritingDomainScores
    justifications: Dict[str, str] = Field(default_factory=dict)
    cefr_band_estimate: Optional[str] = None
