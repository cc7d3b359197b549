"""
Writing Layer 2 - Rule-Based Linguistic Metrics
llnd_engine/scoring/writing_metrics.py

Surface metrics:
    avg_sentence_length = words / sentences                     (0.1)
    type_token_ratio    = unique normalised words / words       (0.01)
    repetition_index    = top-10 content-word counts / content words (0.01)
    complex_ratio       = sentences with a subordinator / sentences (0.01)
    error_rate_100      = estimated errors / words × 100        (0.1)

Estimated errors are surface heuristics only: runs of 2+ spaces,
lower-case letter after a full stop, and an immediately repeated word.

Banded thresholds map the metrics onto four 0-5 domain scores.
"""

import re
from collections import Counter
from dataclasses import asdict, dataclass
from typing import Any, Dict

from llnd_engine.models.enumerations import TaskType
from llnd_engine.models.writing import WritingDomainScores
from llnd_engine.scoring.text_features import (
    count_occurrences,
    has_marker,
    paragraph_count,
    sentences,
    words,
)
from llnd_engine.scoring.utils import to_decimal
from llnd_engine.scoring.writing_structure import (
    TASK1_FAIL_WORDS,
    TASK2_FAIL_WORDS,
    TASK2_MIN_PARAGRAPHS,
    StructuralResult,
)

CONNECTORS = [
    "however", "therefore", "although", "furthermore", "moreover",
    "nevertheless", "consequently", "in addition", "for example",
    "for instance", "as a result", "in contrast", "on the other hand",
    "similarly", "meanwhile", "in conclusion", "to sum up",
]

COMPLEX_MARKERS = [
    "because", "although", "which", "that", "if", "when", "while",
    "since", "unless", "where", "whereas", "who", "whom",
]

STOPWORDS = frozenset([
    "the", "a", "an", "is", "are", "was", "were", "to", "of", "in", "and",
    "or", "for", "on", "it", "that", "this", "with", "as", "at", "by",
    "not", "be", "i",
])

TASK1_TARGET_RANGE = (110, 170)

_NON_WORD = re.compile(r"[^a-z']")
_DOUBLE_SPACE = re.compile(r" {2,}")
_MISSED_CAPITAL = re.compile(r"\.\s+[a-z]")
_REPEATED_WORD = re.compile(r"\b(\w+)\s+\1\b", re.IGNORECASE)


@dataclass
class RuleMetrics:
    """Surface metrics for one writing response."""
    word_count: int
    sentence_count: int
    avg_sentence_length: float
    paragraph_count: int
    connector_count: int
    type_token_ratio: float
    repetition_index: float
    complex_sentence_ratio: float
    error_rate_100: float
    prompt_coverage: int
    structural_pass: bool
    structural_notes: str

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _r(value: float, places: int) -> float:
    return float(to_decimal(value, places))


def compute_metrics(text: str, structural: StructuralResult) -> RuleMetrics:
    text = text or ""
    tokens = words(text)
    wc = len(tokens)
    sents = sentences(text)
    sc = len(sents)

    normalised = [_NON_WORD.sub("", w.lower()) for w in tokens]
    ttr = len(set(normalised)) / wc if wc else 0.0

    content = Counter(w for w in normalised if len(w) > 2 and w not in STOPWORDS)
    content_total = sum(content.values())
    top10 = sum(count for _, count in content.most_common(10))
    repetition = top10 / content_total if content_total else 0.0

    complex_count = sum(1 for s in sents if has_marker(s, COMPLEX_MARKERS))
    complex_ratio = complex_count / sc if sc else 0.0

    errors = (
        len(_DOUBLE_SPACE.findall(text))
        + len(_MISSED_CAPITAL.findall(text))
        + len(_REPEATED_WORD.findall(text))
    )
    error_rate = errors / wc * 100 if wc else 0.0

    return RuleMetrics(
        word_count=wc,
        sentence_count=sc,
        avg_sentence_length=_r(wc / sc, 1) if sc else 0.0,
        paragraph_count=paragraph_count(text),
        connector_count=count_occurrences(text, CONNECTORS),
        type_token_ratio=_r(ttr, 2),
        repetition_index=_r(repetition, 2),
        complex_sentence_ratio=_r(complex_ratio, 2),
        error_rate_100=_r(error_rate, 1),
        prompt_coverage=structural.prompt_coverage,
        structural_pass=structural.passed,
        structural_notes=structural.notes,
    )


# ---------------------------------------------------------------------------
# Banded domain scores
# ---------------------------------------------------------------------------

def _task_achievement(m: RuleMetrics, task_type: TaskType) -> int:
    if task_type == TaskType.TASK1:
        lo, hi = TASK1_TARGET_RANGE
        if m.word_count < TASK1_FAIL_WORDS:
            ta = 0 if m.word_count < 30 else 1
        elif not m.structural_pass and m.prompt_coverage <= 1:
            ta = 1
        elif m.prompt_coverage == 1:
            ta = 2
        elif m.prompt_coverage == 2:
            ta = 3
        elif m.prompt_coverage >= 3 and lo <= m.word_count <= hi:
            ta = 4
        else:
            ta = 3
        # structural fail caps task achievement
        if not m.structural_pass:
            ta = min(ta, 2)
        return ta

    if m.word_count < TASK2_FAIL_WORDS or m.paragraph_count < TASK2_MIN_PARAGRAPHS:
        return 1
    return min(2 + m.prompt_coverage, 5)


def _coherence(m: RuleMetrics) -> int:
    p, c = m.paragraph_count, m.connector_count
    if p <= 1:
        return 1
    if p == 2 and c < 2:
        return 2
    if p >= 2 and 2 <= c <= 4:
        return 3
    if p >= 3 and 4 <= c <= 7:
        return 4
    if p >= 3 and c >= 8:
        return 5
    return 3


def _lexical(m: RuleMetrics) -> int:
    ttr, rep = m.type_token_ratio, m.repetition_index
    if ttr < 0.32 or rep > 0.55:
        return 1
    if ttr < 0.38 and rep > 0.45:
        return 2
    if ttr < 0.45 and rep > 0.35:
        return 3
    if ttr < 0.52 and rep > 0.28:
        return 4
    if ttr >= 0.52 and rep < 0.28:
        return 5
    return 3


def _grammar(m: RuleMetrics) -> int:
    rate = m.error_rate_100
    if rate > 14:
        gra = 1
    elif rate >= 10:
        gra = 2
    elif rate >= 6:
        gra = 3
    elif rate >= 3:
        gra = 4
    else:
        gra = 5
    # range adjustment
    if m.complex_sentence_ratio < 0.15 and gra >= 4:
        gra -= 1
    if m.complex_sentence_ratio > 0.35 and rate <= 5 and gra < 5:
        gra += 1
    return gra


def _bounded(score: int) -> int:
    return max(0, min(5, score))


def score_from_rules(metrics: RuleMetrics, task_type: TaskType) -> WritingDomainScores:
    return WritingDomainScores(
        task_achievement=_bounded(_task_achievement(metrics, task_type)),
        coherence_cohesion=_bounded(_coherence(metrics)),
        lexical_resource=_bounded(_lexical(metrics)),
        grammar_range_accuracy=_bounded(_grammar(metrics)),
    )
