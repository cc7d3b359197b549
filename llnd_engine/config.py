"""Engine configuration with validation."""
from typing import Literal
from functools import lru_cache
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings for the scoring engine.

    Benchmark configurations are versioned data records, not settings;
    see llnd_engine/models/benchmark.py.
    """

    model_config = SettingsConfigDict(
        env_prefix="LLND_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    ENGINE_VERSION: str = "llnd-score-v1.0"
    WRITING_ENGINE_VERSION: str = "hybrid-v1.0"
    PLACEMENT_ENGINE_VERSION: str = "placement-score-v1.0"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"

    # Item scoring
    NUMERIC_TOLERANCE: float = Field(default=0.01, ge=0, le=1)

    # Benchmark configuration authoring
    WEIGHT_SUM_TOLERANCE: float = Field(default=0.01, ge=0, le=0.1)

    # Writing integrity policy
    SIMILARITY_REVIEW_THRESHOLD: float = Field(default=10.0, ge=0, le=100)
    SIMILARITY_HIGH_THRESHOLD: float = Field(default=25.0, ge=0, le=100)
    AI_PROBABILITY_REVIEW_THRESHOLD: float = Field(default=0.5, ge=0, le=1)
    AI_PROBABILITY_HIGH_THRESHOLD: float = Field(default=0.8, ge=0, le=1)
    LOW_CONFIDENCE_THRESHOLD: int = Field(default=65, ge=0, le=100)

    @model_validator(mode="after")
    def validate_threshold_order(self):
        """Review thresholds must sit below their high counterparts."""
        if self.SIMILARITY_REVIEW_THRESHOLD >= self.SIMILARITY_HIGH_THRESHOLD:
            raise ValueError(
                "SIMILARITY_REVIEW_THRESHOLD must be below SIMILARITY_HIGH_THRESHOLD"
            )
        if self.AI_PROBABILITY_REVIEW_THRESHOLD >= self.AI_PROBABILITY_HIGH_THRESHOLD:
            raise ValueError(
                "AI_PROBABILITY_REVIEW_THRESHOLD must be below AI_PROBABILITY_HIGH_THRESHOLD"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
