from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

from llnd_engine.models.enumerations import Domain, DifficultyTag, ResponseType


class Question(BaseModel):
    """
    A single assessment item. Immutable; belongs to a versioned question set.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Question identifier, unique within the question set"
    )

    domain: Domain = Field(
        ...,
        description="Assessed domain (Reading, Writing, Numeracy, Oral, Digital)"
    )

    level: int = Field(
        ...,
        ge=1,
        le=6,
        description="ACSF proficiency sub-level the item targets"
    )

    difficulty: DifficultyTag = Field(
        default=DifficultyTag.CORE,
        description="Difficulty tag (core / stretch)"
    )

    response_type: ResponseType = Field(
        ...,
        description="Response type (mcq, numeric, short_text)"
    )

    expected_answer: Optional[str] = Field(
        default=None,
        description="Answer key; unused for short_text items"
    )

    max_score: float = Field(
        default=1.0,
        ge=0,
        description="Maximum points awarded for the item"
    )

    weight: float = Field(
        default=1.0,
        ge=0,
        description="Item weight, echoed on the item score"
    )


class Response(BaseModel):
    """
    A learner's raw answer to one question. Transient input.
    """

    model_config = ConfigDict(frozen=True)

    question_id: str = Field(..., description="Question answered")

    answer: Optional[str] = Field(
        default=None,
        description="Raw answer text; None or blank means unanswered"
    )
