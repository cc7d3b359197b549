# tests/conftest.py

"""
Pytest Fixtures - Shared configurations, questions and builders for the
scoring engine tests.

FALLBACK LEVELS:
- "3"   Certificate III  (writing scale 3, thresholds 80/65/50)
- "4"   Certificate IV   (writing scale 4, thresholds 85/70/55)
- "5"   Diploma
- "6"   Advanced Diploma
- "8-9" Graduate Diploma
"""

from decimal import Decimal
from typing import Dict, Optional

import pytest

from llnd_engine.models.enumerations import (
    DifficultyTag,
    Domain,
    Outcome,
    ResponseType,
)
from llnd_engine.models.question import Question, Response
from llnd_engine.models.writing import WritingDomainScores
from llnd_engine.scoring.config_resolver import ConfigResolver
from llnd_engine.scoring.domain_aggregator import DomainScore
from llnd_engine.scoring.item_scorer import ItemScore


# =============================================================================
# BENCHMARK CONFIG FIXTURES
# =============================================================================

@pytest.fixture
def resolver():
    """Resolver with no persistence collaborator (fallback snapshots only)."""
    return ConfigResolver()


@pytest.fixture
def level3_config(resolver):
    """Certificate III fallback snapshot."""
    return resolver.resolve("3")


@pytest.fixture
def level4_config(resolver):
    """Certificate IV fallback snapshot."""
    return resolver.resolve("4")


@pytest.fixture
def custom_config_data():
    """Nested config record with no critical domains and a single ANY_2_CORE rule."""
    return {
        "level": "5",
        "version": "test-1",
        "weights": {"Reading": 0.2, "Writing": 0.2, "Numeracy": 0.2, "Digital": 0.2, "Oral": 0.2},
        "writing_scale": 4,
        "thresholds": {"strong": 85, "meets": 70, "monitor": 60},
        "override_rules": {
            "auto_support": [
                {"condition": "ANY_2_CORE", "core_domains": ["Reading", "Writing", "Numeracy"],
                 "threshold": 60},
            ],
            "monitor_cap": [],
        },
    }


# =============================================================================
# BUILDERS
# =============================================================================

def make_question(
    qid: str = "Q1",
    domain: Domain = Domain.READING,
    level: int = 3,
    response_type: ResponseType = ResponseType.MCQ,
    expected: Optional[str] = "B",
    difficulty: DifficultyTag = DifficultyTag.CORE,
    max_score: float = 1.0,
) -> Question:
    return Question(
        id=qid,
        domain=domain,
        level=level,
        difficulty=difficulty,
        response_type=response_type,
        expected_answer=expected,
        max_score=max_score,
    )


def make_item(
    domain: Domain = Domain.READING,
    level: int = 3,
    score: float = 1,
    max_score: float = 1,
    difficulty: DifficultyTag = DifficultyTag.CORE,
    qid: str = "Q",
) -> ItemScore:
    return ItemScore(
        question_id=qid,
        domain=domain,
        level=level,
        difficulty=difficulty,
        response_type=ResponseType.MCQ,
        score=Decimal(str(score)),
        max_score=Decimal(str(max_score)),
        is_correct=score == max_score,
    )


def make_domain_score(domain: Domain, pct: float, weight: float = 0.2) -> DomainScore:
    """DomainScore with only the fields classification reads filled in."""
    p = Decimal(str(pct)).quantize(Decimal("0.1"))
    return DomainScore(
        domain=domain,
        raw_score=p,
        max_score=Decimal("100"),
        percentage=p,
        weight=Decimal(str(weight)),
        weighted_contribution=Decimal("0"),
        foundation_percent=Decimal("0.0"),
        core_percent=Decimal("0.0"),
        stretch_percent=Decimal("0.0"),
        estimated_band="",
        outcome=Outcome.MEETS,
        item_count=1,
    )


def domain_scores(pcts: Dict[Domain, float]) -> Dict[Domain, DomainScore]:
    return {d: make_domain_score(d, p) for d, p in pcts.items()}


def make_text(n: int, word: str = "word") -> str:
    return " ".join([word] * n)


def uniform_scores(value: int) -> WritingDomainScores:
    return WritingDomainScores(
        task_achievement=value,
        coherence_cohesion=value,
        lexical_resource=value,
        grammar_range_accuracy=value,
    )


# =============================================================================
# QUESTION SET FIXTURES
# =============================================================================

@pytest.fixture
def full_question_set():
    """Two mcq questions per domain, answer key "B"."""
    questions = []
    for domain in Domain:
        for i in (1, 2):
            questions.append(make_question(qid=f"{domain.value[:1]}{i}", domain=domain))
    return questions


@pytest.fixture
def all_correct_responses(full_question_set):
    return [Response(question_id=q.id, answer="b") for q in full_question_set]
