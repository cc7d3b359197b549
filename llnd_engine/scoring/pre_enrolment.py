"""
Pre-Enrolment Review
llnd_engine/scoring/pre_enrolment.py

Section A (course suitability):
    Each free-text answer is graded on depth by word count:
        words ≥ required_min → Strong, ≥ low_threshold → Moderate, else Weak
    Career clarity = weakest of motivation (A1) and career goals (A5)
    Course alignment = weakest of motivation and academic progression
    A career change explained in fewer than progression_required_min words
    makes academic progression Weak.

    Interview recommended when career clarity or progression is Weak,
    financial preparedness needs review, or 3+ flags were raised.

Section B (self-assessment, items valued 0/1/2):
    domain % = Σ values / (items × 2) × 100
    High ≥ 75, Moderate ≥ 50, else Low; support flag when below Moderate
    High digital risk when the upload and virtual-class items are both 0
    Overall self risk when total "may need support" ≥ 5 or any domain ≥ 3

The narrative is assembled from fixed templates only.
"""

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

import structlog

from llnd_engine.models.pre_enrolment import (
    PreEnrolmentThresholds,
    ProgressionPathway,
    SectionAResponses,
    SelfAssessmentDomain,
    SelfAssessmentItem,
)
from llnd_engine.scoring.utils import percentage

logger = structlog.get_logger(__name__)

REPORT_MODULE = "pre_enrolment_review"
REPORT_VERSION = "2.0"

STRONG, MODERATE, WEAK = "Strong", "Moderate", "Weak"
HIGH, LOW = "High", "Low"
REVIEW_REQUIRED = "Review Required"

NO_PRIOR_ENGLISH = "No prior English"
UPLOAD_ITEM_IDS = ("B5_upload", "B5_4")
VIRTUAL_CLASS_ITEM_IDS = ("B5_virtual", "B5_3")

_DEPTH_ORDER = {WEAK: 0, MODERATE: 1, STRONG: 2}
_ALIGNMENT_LABEL = {WEAK: "Weak", MODERATE: "Partial", STRONG: "Aligned"}


# ---------------------------------------------------------------------------
# Narrative templates
# ---------------------------------------------------------------------------

CAREER_CLARITY_TEMPLATES = {
    WEAK: (
        "The student's responses indicate limited clarity regarding how the course "
        "aligns with their stated career goals. Further discussion is recommended to "
        "confirm suitability."
    ),
    MODERATE: (
        "The student has outlined career intentions; however, further clarification "
        "may assist in confirming alignment with the selected qualification."
    ),
    STRONG: (
        "The student has demonstrated clear and structured alignment between their "
        "career goals and the selected qualification."
    ),
}

PROGRESSION_TEMPLATES = {
    WEAK: (
        "The progression between previous study or work experience and the selected "
        "course requires further review to confirm suitability."
    ),
    MODERATE: (
        "The student shows some progression alignment, though additional context may "
        "strengthen the suitability evidence."
    ),
    STRONG: (
        "The selected course demonstrates logical progression from the student's "
        "previous study or work background."
    ),
}

DIGITAL_HIGH_RISK_TEMPLATE = (
    "The student has indicated limited confidence in core digital learning tasks, "
    "including online participation and assignment submission. Immediate LMS "
    "orientation support is recommended."
)
DIGITAL_SUPPORT_TEMPLATE = (
    "The student may benefit from additional digital learning support during course "
    "commencement."
)
SELF_RISK_TEMPLATES = {
    True: (
        "Based on the student's self-assessment responses, early LLND support may be "
        "required. A structured LLND benchmark assessment during orientation is "
        "recommended."
    ),
    False: (
        "The student's self-assessment responses indicate adequate confidence across "
        "core skill areas."
    ),
}
INTERVIEW_TEMPLATE = (
    "An enrolment interview is recommended to confirm readiness and support planning."
)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass
class SectionAResult:
    career_clarity: str                       # Strong | Moderate | Weak
    course_alignment: str                     # Aligned | Partial | Weak
    academic_progression: str                 # Strong | Moderate | Weak
    study_readiness: str                      # Confirmed | Review Required
    english_preparedness: str                 # Adequate | Review Required
    financial_preparedness: Optional[str]     # Sufficient | Review Required | None
    interview_recommended: bool
    flags: List[str] = field(default_factory=list)
    word_counts: Dict[str, int] = field(default_factory=dict)


@dataclass
class SelfAssessmentDomainResult:
    domain: SelfAssessmentDomain
    confidence_level: str                     # High | Moderate | Low
    percentage: Decimal
    may_need_support_count: int
    total_items: int
    support_flag: bool


@dataclass
class SectionBResult:
    domain_results: List[SelfAssessmentDomainResult]
    overall_self_risk: bool
    high_digital_risk: bool
    total_may_need_support: int

    def support_flag(self, domain: SelfAssessmentDomain) -> bool:
        return any(r.support_flag for r in self.domain_results if r.domain == domain)

    @property
    def support_domains(self) -> List[SelfAssessmentDomain]:
        return [r.domain for r in self.domain_results if r.support_flag]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def count_words(text: Optional[str]) -> int:
    """Whitespace-delimited word count; 0 for None or blank text."""
    return len(text.split()) if text else 0


def response_depth(text: Optional[str], required_min: int, low_threshold: int) -> str:
    words = count_words(text)
    if words >= required_min:
        return STRONG
    if words >= low_threshold:
        return MODERATE
    return WEAK


def weakest(*grades: str) -> str:
    return min(grades, key=_DEPTH_ORDER.__getitem__)


# ---------------------------------------------------------------------------
# Reviewer
# ---------------------------------------------------------------------------

class PreEnrolmentReviewer:
    """Grade Section A and Section B and assemble the review report."""

    def __init__(self, thresholds: Optional[PreEnrolmentThresholds] = None):
        self.thresholds = thresholds or PreEnrolmentThresholds()

    def review_section_a(
        self,
        responses: SectionAResponses,
        is_international: bool = False,
    ) -> SectionAResult:
        t = self.thresholds
        flags: List[str] = []

        word_counts = {
            "A1": count_words(responses.course_motivation),
            "A2": count_words(responses.provider_rationale),
            "A3": count_words(responses.academic_progression),
            "A4": count_words(responses.employment_outcomes),
            "A5": count_words(responses.career_goals),
            "A7": count_words(responses.study_plan),
        }
        optional_text = {
            "A9_explanation": responses.withdrawal_explanation,
            "A10_explanation": responses.funding_explanation,
            "A12": responses.post_qualification_plans,
        }
        word_counts.update({k: count_words(v) for k, v in optional_text.items() if v})

        motivation = response_depth(
            responses.course_motivation, t.motivation_required_min, t.motivation_low_threshold
        )
        if motivation == WEAK:
            flags.append("Low Response Depth - Course Motivation")

        if response_depth(
            responses.provider_rationale, t.provider_required_min, t.provider_low_threshold
        ) == WEAK:
            flags.append("Provider Rationale Weak")

        progression = response_depth(
            responses.academic_progression, t.progression_required_min, t.progression_low_threshold
        )
        if (
            responses.progression_pathway == ProgressionPathway.CAREER_CHANGE
            and word_counts["A3"] < t.progression_required_min
        ):
            progression = WEAK
            flags.append("Unexplained Career Change")

        goals = response_depth(responses.career_goals, t.goals_required_min, t.goals_low_threshold)
        career_clarity = weakest(motivation, goals)
        course_alignment = _ALIGNMENT_LABEL[weakest(motivation, progression)]

        if len(responses.study_commitments) >= t.required_commitments:
            study_readiness = "Confirmed"
        else:
            study_readiness = REVIEW_REQUIRED
            flags.append("Study Commitment Incomplete")

        if response_depth(
            responses.study_plan, t.study_plan_required_min, t.study_plan_low_threshold
        ) == WEAK:
            flags.append("No Realistic Study Plan")

        if responses.english_background == NO_PRIOR_ENGLISH:
            english = REVIEW_REQUIRED
            flags.append("Limited English Background")
        else:
            english = "Adequate"

        if responses.previous_withdrawal and (
            count_words(responses.withdrawal_explanation) < t.withdrawal_explanation_min
        ):
            flags.append("Previous Withdrawal - Insufficient Explanation")

        financial: Optional[str] = None
        if is_international:
            if responses.funding_source:
                financial = "Sufficient"
            else:
                financial = REVIEW_REQUIRED
                flags.append("Funding Source Not Specified")

            if not responses.cost_of_living_aware:
                financial = REVIEW_REQUIRED
                flags.append("Cost of Living Awareness Gap")

            plans = responses.post_qualification_plans
            if plans and count_words(plans) < t.post_qualification_required_min:
                flags.append("Weak Post-Qualification Plans")

        interview = (
            career_clarity == WEAK
            or progression == WEAK
            or financial == REVIEW_REQUIRED
            or len(flags) >= 3
        )
        if interview:
            flags.append("Interview Recommended")

        return SectionAResult(
            career_clarity=career_clarity,
            course_alignment=course_alignment,
            academic_progression=progression,
            study_readiness=study_readiness,
            english_preparedness=english,
            financial_preparedness=financial,
            interview_recommended=interview,
            flags=flags,
            word_counts=word_counts,
        )

    def review_section_b(self, items: Iterable[SelfAssessmentItem]) -> SectionBResult:
        t = self.thresholds
        items = list(items)
        results: List[SelfAssessmentDomainResult] = []

        for domain in SelfAssessmentDomain:
            domain_items = [i for i in items if i.domain == domain]
            pct = percentage(sum(i.value for i in domain_items), len(domain_items) * 2)
            if pct >= Decimal(str(t.domain_high_min_percent)):
                level = HIGH
            elif pct >= Decimal(str(t.domain_moderate_min_percent)):
                level = MODERATE
            else:
                level = LOW
            results.append(SelfAssessmentDomainResult(
                domain=domain,
                confidence_level=level,
                percentage=pct,
                may_need_support_count=sum(1 for i in domain_items if i.value == 0),
                total_items=len(domain_items),
                support_flag=level == LOW,
            ))

        total_mns = sum(r.may_need_support_count for r in results)
        overall_risk = total_mns >= t.overall_mns_risk_threshold or any(
            r.may_need_support_count >= t.domain_mns_threshold for r in results
        )

        return SectionBResult(
            domain_results=results,
            overall_self_risk=overall_risk,
            high_digital_risk=(
                self._item_value(items, UPLOAD_ITEM_IDS) == 0
                and self._item_value(items, VIRTUAL_CLASS_ITEM_IDS) == 0
            ),
            total_may_need_support=total_mns,
        )

    @staticmethod
    def _item_value(items: List[SelfAssessmentItem], ids: Iterable[str]) -> Optional[int]:
        for item in items:
            if item.item_id in ids:
                return item.value
        return None

    # ------------------------------------------------------------------
    # Narrative + report
    # ------------------------------------------------------------------

    @staticmethod
    def narrative(section_a: SectionAResult, section_b: SectionBResult) -> str:
        parts = [
            CAREER_CLARITY_TEMPLATES[section_a.career_clarity],
            PROGRESSION_TEMPLATES[section_a.academic_progression],
        ]
        if section_b.high_digital_risk:
            parts.append(DIGITAL_HIGH_RISK_TEMPLATE)
        elif section_b.support_flag(SelfAssessmentDomain.DIGITAL):
            parts.append(DIGITAL_SUPPORT_TEMPLATE)

        parts.append(SELF_RISK_TEMPLATES[section_b.overall_self_risk])

        support = section_b.support_domains
        if support:
            parts.append(
                "Potential support needs identified in: "
                + ", ".join(d.value for d in support) + "."
            )
        if section_a.interview_recommended:
            parts.append(INTERVIEW_TEMPLATE)
        return " ".join(parts)

    def review(
        self,
        section_a: SectionAResponses,
        items: Iterable[SelfAssessmentItem],
        student_id: str,
        application_id: str,
        provider_id: str,
        submitted_at: str,
        is_international: bool = False,
    ) -> Dict[str, Any]:
        """Run both sections and return the JSON-ready review report."""
        a = self.review_section_a(section_a, is_international)
        b = self.review_section_b(items)

        domain_confidence = {r.domain.value.lower(): r.confidence_level for r in b.domain_results}
        item_counts = {"total_may_need_support": b.total_may_need_support}
        item_counts.update({
            f"{r.domain.value.lower()}_mns": r.may_need_support_count for r in b.domain_results
        })
        risk_flags = {
            "overall_llnd_self_risk": b.overall_self_risk,
            "high_digital_risk_flag": b.high_digital_risk,
            "total_may_need_support": b.total_may_need_support,
        }
        risk_flags.update({
            f"{d.value.lower()}_support_flag": b.support_flag(d) for d in SelfAssessmentDomain
        })

        logger.info(
            "pre_enrolment_reviewed",
            application_id=application_id,
            interview_recommended=a.interview_recommended,
            flag_count=len(a.flags),
            overall_self_risk=b.overall_self_risk,
        )

        return {
            "module": REPORT_MODULE,
            "version": REPORT_VERSION,
            "student_id": student_id,
            "application_id": application_id,
            "provider_id": provider_id,
            "submitted_at": submitted_at,
            "section_a": asdict(a),
            "section_b": {
                "domain_confidence": domain_confidence,
                "risk_flags": risk_flags,
                "item_counts": item_counts,
                "domain_results": [
                    {
                        "domain": r.domain.value,
                        "confidence_level": r.confidence_level,
                        "percentage": float(r.percentage),
                        "may_need_support_count": r.may_need_support_count,
                        "total_items": r.total_items,
                        "support_flag": r.support_flag,
                    }
                    for r in b.domain_results
                ],
            },
            "narrative": self.narrative(a, b),
            "admin": {
                "decision_status": "Pending",
                "decision_notes": "",
                "reviewed_by": None,
                "reviewed_at": None,
            },
        }
