"""
Custom Exceptions - LLND Scoring Engine
llnd_engine/core/exceptions.py

Exceptions raised for configuration defects. Scoring itself never raises
for bad learner input: missing or unparsable answers score zero.
"""

from typing import Optional


class ScoringException(Exception):
    """Base exception for scoring engine failures."""

    pass


class ConfigurationNotFoundException(ScoringException):
    """No persisted or built-in configuration exists for a level."""

    def __init__(self, level: str):
        self.level = level
        super().__init__(f"No benchmark configuration found for AQF level: {level}")


class ConfigurationValidationException(ScoringException):
    """A configuration record failed authoring-time validation."""

    def __init__(
        self,
        message: str,
        level: Optional[str] = None,
        version: Optional[str] = None,
    ):
        self.message = message
        self.level = level
        self.version = version
        context = []
        if level is not None:
            context.append(f"level={level}")
        if version is not None:
            context.append(f"version={version}")
        suffix = f" ({', '.join(context)})" if context else ""
        super().__init__(f"{message}{suffix}")


class BandLookupException(ScoringException):
    """A score fell outside every row of a band table."""

    def __init__(self, score: float, table: str, version: str):
        self.score = score
        self.table = table
        self.version = version
        super().__init__(
            f"Score {score} falls outside every band in table '{table}' "
            f"(config version {version})"
        )
