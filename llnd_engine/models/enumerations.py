from enum import Enum

class Domain(str, Enum):
    READING = "Reading"
    WRITING = "Writing"
    NUMERACY = "Numeracy"
    ORAL = "Oral"
    DIGITAL = "Digital"

class ResponseType(str, Enum):
    MCQ = "mcq"
    NUMERIC = "numeric"
    SHORT_TEXT = "short_text"

class DifficultyTag(str, Enum):
    CORE = "core"
    STRETCH = "stretch"

class Outcome(str, Enum):
    EXCEEDS = "exceeds"
    MEETS = "meets"
    MONITOR = "monitor"
    SUPPORT_REQUIRED = "support_required"

    @property
    def rank(self) -> int:
        """Higher rank = stronger outcome."""
        return _OUTCOME_RANK[self]

_OUTCOME_RANK = {
    Outcome.SUPPORT_REQUIRED: 0,
    Outcome.MONITOR: 1,
    Outcome.MEETS: 2,
    Outcome.EXCEEDS: 3,
}

class TaskType(str, Enum):
    TASK1 = "task1"   # Short functional task
    TASK2 = "task2"   # Extended essay task, weighted 1.5x

class WritingDomain(str, Enum):
    TASK_ACHIEVEMENT = "task_achievement"
    COHERENCE_COHESION = "coherence_cohesion"
    LEXICAL_RESOURCE = "lexical_resource"
    GRAMMAR_RANGE_ACCURACY = "grammar_range_accuracy"

class CEFRBand(str, Enum):
    A2 = "A2"
    B1 = "B1"
    B2 = "B2"
    C1 = "C1"

    @property
    def order(self) -> int:
        return _CEFR_ORDER[self]

_CEFR_ORDER = {
    CEFRBand.A2: 1,
    CEFRBand.B1: 2,
    CEFRBand.B2: 3,
    CEFRBand.C1: 4,
}

class TrafficLight(str, Enum):
    GREEN = "GREEN"
    AMBER = "AMBER"
    RED = "RED"
