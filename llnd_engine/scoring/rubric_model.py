"""
Writing Layer 3 - External Rubric Scoring (boundary)
llnd_engine/scoring/rubric_model.py

The external text-rubric service is a collaborator owned by the caller.
This module only builds its prompts and validates its reply; the call
itself, with its timeout and cancellation policy, happens outside the
engine.

parse_rubric_response() never raises. Anything malformed returns None,
which reconciliation treats exactly like an unavailable service.
"""

import json
import re
from typing import Any, Mapping, Optional

import structlog
from pydantic import ValidationError

from llnd_engine.models.enumerations import TaskType, WritingDomain
from llnd_engine.models.writing import (
    ExternalRubricResponse,
    WritingDomainScores,
    WritingPromptContext,
)
from llnd_engine.scoring.utils import round_half_up
from llnd_engine.scoring.writing_metrics import RuleMetrics

logger = structlog.get_logger(__name__)

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*")
_FENCE_CLOSE = re.compile(r"\s*```$")

_SCHEMA = """{{
  "task_type": "{task_type}",
  "prompt_id": "{target_level}",
  "domain_scores": {{
    "task_achievement": <int 0-5>,
    "coherence_cohesion": <int 0-5>,
    "lexical_resource": <int 0-5>,
    "grammar_range_accuracy": <int 0-5>
  }},
  "justifications": {{
    "task_achievement": "<string>",
    "coherence_cohesion": "<string>",
    "lexical_resource": "<string>",
    "grammar_range_accuracy": "<string>"
  }},
  "cefr_band_estimate": "<A2|B1|B2|C1>"
}}"""

_TASK_CONTEXT = {
    TaskType.TASK1: (
        "- Task 1 (Functional Writing), target level range: B1-B2\n"
        "- Word count target: 120-150 (tolerance 110-170)\n"
        "- Score using the rubric only."
    ),
    TaskType.TASK2: (
        "- Task 2 (Extended Writing), target level range: B2-C1\n"
        "- Word count target: ~250 (tolerance 220-320)\n"
        "- Score using the rubric only."
    ),
}

SYSTEM_PROMPT = """You are an assessment marker for an English placement assessment.
You must score a candidate's writing using the analytic rubric across four domains:
1) Task Achievement
2) Coherence & Cohesion
3) Lexical Resource
4) Grammatical Range & Accuracy

Scoring scale for each domain: integer 0 to 5 only.

You must follow these rules:
- Output MUST be valid JSON only (no markdown, no extra text).
- Use the exact JSON schema provided in the user prompt.
- Scores must be integers from 0 to 5.
- Justifications must be brief and specific (1-2 sentences per domain).
- Do not reference any external tests or brands.
- Do not invent facts about the candidate.
- If the response is off-topic, incomplete, or fails core task requirements, Task Achievement must be 0-2 accordingly.
- Prefer cautious scoring. If uncertain between two scores, choose the lower score.

CEFR guidance (anchor expectations):
- B1: connected simple text; basic organisation; errors present but meaning generally clear.
- B2: clear, detailed writing; logical paragraphing; good vocabulary range; mostly controlled grammar.
- C1: well-structured argument; flexible cohesive devices; precise vocabulary; high grammatical control with rare slips."""


def build_system_prompt() -> str:
    return SYSTEM_PROMPT


def build_user_prompt(
    task_type: TaskType,
    prompt: WritingPromptContext,
    candidate_text: str,
    metrics: RuleMetrics,
) -> str:
    """Deterministic user prompt; task1 lists the named requirements."""
    sections = [
        "Return JSON only using this schema:",
        _SCHEMA.format(task_type=task_type.value, target_level=prompt.target_level),
        "",
        "Task context:",
        _TASK_CONTEXT[task_type],
        "",
        "Prompt:",
        prompt.prompt_text,
    ]
    if task_type == TaskType.TASK1:
        sections += [
            "",
            "Requirements:",
            f"1) {prompt.requirement_1 or 'N/A'}",
            f"2) {prompt.requirement_2 or 'N/A'}",
            f"3) {prompt.requirement_3 or 'N/A'}",
        ]
    sections += [
        "",
        "Candidate response:",
        candidate_text,
        "",
        "Structural checks (from system):",
        f"- word_count: {metrics.word_count}",
        f"- paragraph_count: {metrics.paragraph_count}",
        f"- structural_pass: {str(metrics.structural_pass).lower()}",
        f'- structural_notes: "{metrics.structural_notes}"',
    ]
    return "\n".join(sections)


def _coerce_score(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("boolean is not a score")
    return max(0, min(5, round_half_up(float(value))))


def parse_rubric_payload(payload: Mapping[str, Any]) -> Optional[ExternalRubricResponse]:
    """Validate an already-decoded reply."""
    scores = payload.get("domain_scores") if isinstance(payload, Mapping) else None
    if not isinstance(scores, Mapping):
        return None
    try:
        domain_scores = WritingDomainScores(**{
            d.value: _coerce_score(scores[d.value]) for d in WritingDomain
        })
        justifications = payload.get("justifications") or {}
        if not isinstance(justifications, Mapping):
            justifications = {}
        return ExternalRubricResponse(
            domain_scores=domain_scores,
            justifications={str(k): str(v) for k, v in justifications.items()},
            cefr_band_estimate=payload.get("cefr_band_estimate"),
        )
    except (KeyError, TypeError, ValueError, ArithmeticError, ValidationError) as e:
        logger.warning("rubric_response_invalid", error=str(e))
        return None


def parse_rubric_response(raw: Optional[str]) -> Optional[ExternalRubricResponse]:
    """Parse the service's raw text reply, tolerating markdown code fences."""
    if not raw:
        return None
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", cleaned))
    try:
        payload = json.loads(cleaned)
    except ValueError as e:
        logger.warning("rubric_response_unparsable", error=str(e))
        return None
    return parse_rubric_payload(payload)
