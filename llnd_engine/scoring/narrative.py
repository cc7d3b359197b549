"""
Narrative / Strategy Selector
llnd_engine/scoring/narrative.py

Pure template lookup: (domain, outcome) -> justification text + strategy
list, and outcome -> overall alignment / suitability statements. No text
is generated; the only substitution is the qualification name.

Templates are static, versioned data (TEMPLATE_VERSION). Callers get
copies of the strategy lists, so the tables are never mutated.
"""

from typing import Dict, List, Tuple

from llnd_engine.models.enumerations import Domain, Outcome

TEMPLATE_VERSION = "templates-v1"


# ---------------------------------------------------------------------------
# Domain justifications
# ---------------------------------------------------------------------------

JUSTIFICATION_TEMPLATES: Dict[Domain, Dict[Outcome, str]] = {
    Domain.READING: {
        Outcome.EXCEEDS: (
            "The learner demonstrates strong reading comprehension above the level expected "
            "for {level_name} study. They interpret complex workplace and study texts "
            "independently and extract key information accurately."
        ),
        Outcome.MEETS: (
            "The learner demonstrates solid reading comprehension skills at the expected level "
            "for {level_name} qualifications. They can interpret workplace documents, follow "
            "multi-step procedures, and identify key information from various text types."
        ),
        Outcome.MONITOR: (
            "The learner shows developing reading skills but may benefit from additional "
            "scaffolding when engaging with complex workplace texts. Early monitoring during "
            "initial training modules is recommended."
        ),
        Outcome.SUPPORT_REQUIRED: (
            "Gap identified in Reading. The learner requires targeted literacy intervention to "
            "build foundational comprehension skills before engaging with complex training "
            "materials. OS25-aligned support is recommended."
        ),
    },
    Domain.WRITING: {
        Outcome.EXCEEDS: (
            "The learner demonstrates strong written communication above the level expected "
            "for {level_name} study, with well-organised responses that explain reasons and "
            "consequences clearly."
        ),
        Outcome.MEETS: (
            "The learner demonstrates functional writing skills appropriate for {level_name} "
            "requirements. They can produce clear explanations, confirmations, and requests "
            "relevant to workplace contexts."
        ),
        Outcome.MONITOR: (
            "The learner shows emerging writing skills but may need support with structuring "
            "longer responses or expressing cause-and-effect relationships clearly."
        ),
        Outcome.SUPPORT_REQUIRED: (
            "Gap identified in Writing. The learner requires targeted literacy support to "
            "develop workplace writing skills. Consider providing templates and guided "
            "practice activities."
        ),
    },
    Domain.NUMERACY: {
        Outcome.EXCEEDS: (
            "The learner demonstrates strong numeracy above the level expected for "
            "{level_name} study, applying calculations and data interpretation confidently "
            "to unfamiliar problems."
        ),
        Outcome.MEETS: (
            "The learner demonstrates competent numeracy skills at the expected level. They can "
            "perform calculations, interpret data, and apply mathematical reasoning to "
            "workplace scenarios."
        ),
        Outcome.MONITOR: (
            "The learner shows functional numeracy skills but may benefit from additional "
            "practice with multi-step calculations or percentage-based problems."
        ),
        Outcome.SUPPORT_REQUIRED: (
            "Gap identified in Numeracy. The learner requires targeted numeracy intervention, "
            "particularly in time calculations, percentages, or data interpretation. "
            "OS25-aligned support is recommended."
        ),
    },
    Domain.ORAL: {
        Outcome.EXCEEDS: (
            "The learner demonstrates strong oral communication comprehension, identifying "
            "key messages and appropriate responses in complex spoken scenarios."
        ),
        Outcome.MEETS: (
            "The learner demonstrates effective oral communication comprehension skills. They "
            "can follow spoken instructions, identify key messages, and determine appropriate "
            "responses in workplace scenarios."
        ),
        Outcome.MONITOR: (
            "The learner shows adequate oral communication skills but may benefit from "
            "practice with clarification techniques and prioritisation in dynamic situations."
        ),
        Outcome.SUPPORT_REQUIRED: (
            "Gap identified in Oral Communication. The learner may need support with "
            "understanding spoken instructions and formulating appropriate responses. "
            "Consider paired practice activities."
        ),
    },
    Domain.DIGITAL: {
        Outcome.EXCEEDS: (
            "The learner demonstrates strong digital literacy, working confidently with "
            "digital workflows, file management, and security practices."
        ),
        Outcome.MEETS: (
            "The learner demonstrates competent digital literacy skills. They understand basic "
            "digital workflows, file management, and digital safety practices required in "
            "modern workplaces."
        ),
        Outcome.MONITOR: (
            "The learner shows developing digital skills but may benefit from additional "
            "orientation to workplace digital systems and security practices."
        ),
        Outcome.SUPPORT_REQUIRED: (
            "Gap identified in Digital Literacy. The learner requires foundational digital "
            "skills training before engaging with workplace technology systems."
        ),
    },
}


# ---------------------------------------------------------------------------
# Support strategies
# ---------------------------------------------------------------------------

SUPPORT_STRATEGIES: Dict[Domain, Dict[Outcome, List[str]]] = {
    Domain.READING: {
        Outcome.EXCEEDS: ["Continue with standard training delivery", "Offer extension reading materials"],
        Outcome.MEETS: ["Continue with standard training delivery", "Provide extension reading materials if interested"],
        Outcome.MONITOR: [
            "Pre-teach key vocabulary before each unit",
            "Provide reading guides and glossaries",
            "Check comprehension regularly during training",
        ],
        Outcome.SUPPORT_REQUIRED: [
            "Implement 1:1 or small group literacy support",
            "Use simplified texts initially with gradual complexity increase",
            "Provide visual aids and graphic organisers",
            "Schedule regular progress reviews",
        ],
    },
    Domain.WRITING: {
        Outcome.EXCEEDS: ["Continue with standard assessment tasks", "Offer extended writing challenges"],
        Outcome.MEETS: ["Continue with standard assessment tasks", "Encourage reflective writing practice"],
        Outcome.MONITOR: [
            "Provide writing templates and scaffolds",
            "Offer formative feedback on drafts",
            "Use sentence starters for complex responses",
        ],
        Outcome.SUPPORT_REQUIRED: [
            "Implement structured writing support program",
            "Provide extensive modelling and templates",
            "Consider alternative demonstration methods initially",
            "Build writing skills progressively",
        ],
    },
    Domain.NUMERACY: {
        Outcome.EXCEEDS: ["Continue with standard numeracy requirements", "Offer applied problem-solving extension tasks"],
        Outcome.MEETS: ["Continue with standard numeracy requirements", "Provide calculator access as standard"],
        Outcome.MONITOR: [
            "Pre-teach mathematical concepts before application",
            "Provide step-by-step worked examples",
            "Allow additional time for numeracy-based tasks",
        ],
        Outcome.SUPPORT_REQUIRED: [
            "Implement targeted numeracy intervention",
            "Use concrete materials and visual representations",
            "Break multi-step problems into smaller components",
            "Provide extensive practice opportunities",
        ],
    },
    Domain.ORAL: {
        Outcome.EXCEEDS: ["Continue with standard verbal instruction methods", "Invite the learner to lead group discussions"],
        Outcome.MEETS: ["Continue with standard verbal instruction methods", "Include group discussion activities"],
        Outcome.MONITOR: [
            "Repeat and rephrase key instructions",
            "Check understanding before proceeding",
            "Encourage questions and clarification",
        ],
        Outcome.SUPPORT_REQUIRED: [
            "Provide written backup for all verbal instructions",
            "Use visual aids to support spoken content",
            "Allow processing time after instructions",
            "Practice clarification techniques",
        ],
    },
    Domain.DIGITAL: {
        Outcome.EXCEEDS: ["Continue with standard digital tool requirements", "Introduce advanced features early"],
        Outcome.MEETS: ["Continue with standard digital tool requirements", "Introduce advanced features progressively"],
        Outcome.MONITOR: [
            "Provide step-by-step digital guides",
            "Offer additional practice time with systems",
            "Pair with confident digital user initially",
        ],
        Outcome.SUPPORT_REQUIRED: [
            "Implement basic digital skills orientation",
            "Provide extensive hands-on practice",
            "Use simplified interfaces where possible",
            "Consider alternative submission methods initially",
        ],
    },
}


# ---------------------------------------------------------------------------
# Overall statements
# ---------------------------------------------------------------------------

ALIGNMENT_TEMPLATES: Dict[Outcome, str] = {
    Outcome.EXCEEDS: "LLND results exceed the entry benchmark for {level_name}.",
    Outcome.MEETS: "LLND results meet the entry benchmark for {level_name}.",
    Outcome.MONITOR: (
        "LLND results are borderline for {level_name}; progress should be monitored "
        "during the first study period."
    ),
    Outcome.SUPPORT_REQUIRED: (
        "LLND results are below the entry benchmark for {level_name}; targeted support "
        "is required."
    ),
}

SUITABILITY_TEMPLATES: Dict[Outcome, str] = {
    Outcome.EXCEEDS: "Suitable for enrolment without additional LLND support.",
    Outcome.MEETS: "Suitable for enrolment with standard learner support.",
    Outcome.MONITOR: "Suitable for enrolment with a documented monitoring plan.",
    Outcome.SUPPORT_REQUIRED: (
        "Enrolment should proceed only with an LLND support plan in place before "
        "training commences."
    ),
}


def select_domain_narrative(
    domain: Domain,
    outcome: Outcome,
    level_name: str,
) -> Tuple[str, List[str]]:
    """Justification text and a copy of the strategy list for a domain outcome."""
    justification = JUSTIFICATION_TEMPLATES[domain][outcome].format(level_name=level_name)
    strategies = list(SUPPORT_STRATEGIES[domain][outcome])
    return justification, strategies


def select_overall_narrative(outcome: Outcome, level_name: str) -> Tuple[str, str]:
    """Alignment and suitability statements for an overall outcome."""
    return (
        ALIGNMENT_TEMPLATES[outcome].format(level_name=level_name),
        SUITABILITY_TEMPLATES[outcome].format(level_name=level_name),
    )
