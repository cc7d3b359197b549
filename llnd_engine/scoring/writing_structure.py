"""
Writing Layer 1 - Structural Compliance
llnd_engine/scoring/writing_structure.py

task1 (functional, 120-150 words):
    < 80 words   -> fail
    < 110 words  -> note
    coverage     = named requirements with any keyword (> 4 chars) in the text

task2 (extended, ~250 words):
    < 150 words      -> fail
    < 220 words      -> note
    < 2 paragraphs   -> note
    coverage         = +1 each for a position, contrast and conclusion marker
"""

import re
from dataclasses import dataclass
from typing import List

from llnd_engine.models.enumerations import TaskType
from llnd_engine.scoring.text_features import has_marker

TASK1_FAIL_WORDS = 80
TASK1_NOTE_WORDS = 110
TASK2_FAIL_WORDS = 150
TASK2_NOTE_WORDS = 220
TASK2_MIN_PARAGRAPHS = 2

POSITION_MARKERS = [
    "i believe", "in my opinion", "i think", "i agree", "i disagree",
    "my view", "i would argue",
]
CONTRAST_MARKERS = [
    "however", "on the other hand", "although", "while", "conversely",
    "opponents", "some people", "others",
]
CONCLUSION_MARKERS = [
    "in conclusion", "to sum up", "overall", "in summary", "to conclude",
]

PASSED_NOTE = "Structural checks passed"


@dataclass
class StructuralResult:
    passed: bool
    notes: str
    prompt_coverage: int


def requirement_keywords(requirement: str) -> List[str]:
    """Lower-cased words longer than four letters, punctuation stripped."""
    cleaned = (re.sub(r"[^\w\s'-]", " ", w.lower()) for w in requirement.split())
    return [w.strip() for w in cleaned if len(w.strip()) > 4]


def check_structure(
    text: str,
    task_type: TaskType,
    word_count: int,
    paragraph_count: int,
    requirements: List[str],
) -> StructuralResult:
    notes: List[str] = []
    passed = True
    coverage = 0

    if task_type == TaskType.TASK1:
        if word_count < TASK1_FAIL_WORDS:
            passed = False
            notes.append(f"Severely under word count (< {TASK1_FAIL_WORDS} words)")
        elif word_count < TASK1_NOTE_WORDS:
            notes.append(f"Below recommended word count (< {TASK1_NOTE_WORDS} words)")

        lowered = (text or "").lower()
        for requirement in requirements:
            if any(kw in lowered for kw in requirement_keywords(requirement)):
                coverage += 1
    else:
        if word_count < TASK2_FAIL_WORDS:
            passed = False
            notes.append(f"Severely under word count (< {TASK2_FAIL_WORDS} words)")
        elif word_count < TASK2_NOTE_WORDS:
            notes.append(f"Below recommended word count (< {TASK2_NOTE_WORDS} words)")

        if paragraph_count < TASK2_MIN_PARAGRAPHS:
            notes.append(f"Insufficient paragraphing (< {TASK2_MIN_PARAGRAPHS} paragraphs)")

        for markers in (POSITION_MARKERS, CONTRAST_MARKERS, CONCLUSION_MARKERS):
            if has_marker(text, markers):
                coverage += 1

    return StructuralResult(
        passed=passed,
        notes="; ".join(notes) or PASSED_NOTE,
        prompt_coverage=coverage,
    )
