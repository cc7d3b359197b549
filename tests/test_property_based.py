# tests/test_property_based.py
"""
Property-Based Tests - Hypothesis checks over the scoring pipeline

Covers:
  - classification determinism and override direction
  - critical-domain forcing at Certificate III
  - writing reconciliation and confidence bounds
  - placement band-table exhaustiveness and the skill floor
"""

from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from llnd_engine.models.enumerations import CEFRBand, Domain, Outcome, WritingDomain
from llnd_engine.models.placement import PlacementInput
from llnd_engine.models.writing import WritingDomainScores
from llnd_engine.scoring.band_mapper import DEFAULT_PLACEMENT_CONFIG, PlacementScorer, apply_skill_floor
from llnd_engine.scoring.classifier import OverallClassifier
from llnd_engine.scoring.config_resolver import FALLBACK_CONFIGS
from llnd_engine.scoring.reconciliation import reconcile, reconcile_domain
from llnd_engine.scoring.writing_confidence import WritingConfidenceCalculator

from tests.conftest import domain_scores

# ---------------------------------------------------------------------------
# Shared strategies
# ---------------------------------------------------------------------------

pct_st = st.decimals(min_value=0, max_value=100, places=1, allow_nan=False, allow_infinity=False)
band_score_st = st.integers(min_value=0, max_value=5)
cefr_st = st.sampled_from(list(CEFRBand))


@st.composite
def domain_pcts(draw):
    """Draw a percentage for every LLND domain."""
    return {d: float(draw(pct_st)) for d in Domain}


@st.composite
def writing_scores(draw):
    return WritingDomainScores(**{d.value: draw(band_score_st) for d in WritingDomain})


CLASSIFIER = OverallClassifier()
PLACEMENT = PlacementScorer()
CONFIDENCE = WritingConfidenceCalculator()


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

class TestClassificationProperties:

    @given(pcts=domain_pcts(), level=st.sampled_from(sorted(FALLBACK_CONFIGS)))
    @settings(max_examples=200, deadline=None)
    def test_deterministic(self, pcts, level):
        config = FALLBACK_CONFIGS[level]
        assert CLASSIFIER.classify(domain_scores(pcts), config) == \
            CLASSIFIER.classify(domain_scores(pcts), config)

    @given(pcts=domain_pcts(), level=st.sampled_from(sorted(FALLBACK_CONFIGS)))
    @settings(max_examples=300, deadline=None)
    def test_overrides_never_raise_outcome(self, pcts, level):
        result = CLASSIFIER.classify(domain_scores(pcts), FALLBACK_CONFIGS[level])
        assert result.outcome.rank <= result.baseline_outcome.rank

    @given(pcts=domain_pcts())
    @settings(max_examples=300, deadline=None)
    def test_total_within_bounds(self, pcts):
        total = CLASSIFIER.total_score(domain_scores(pcts), FALLBACK_CONFIGS["4"])
        assert Decimal("0") <= total <= Decimal("100")

    @given(pcts=domain_pcts(), reading=st.decimals(min_value=0, max_value="59.9", places=1))
    @settings(max_examples=300, deadline=None)
    def test_certificate_iii_reading_below_sixty_forces_support(self, pcts, reading):
        pcts[Domain.READING] = float(reading)
        result = CLASSIFIER.classify(domain_scores(pcts), FALLBACK_CONFIGS["3"])
        assert result.outcome == Outcome.SUPPORT_REQUIRED


# ---------------------------------------------------------------------------
# Writing reconciliation + confidence
# ---------------------------------------------------------------------------

class TestWritingProperties:

    @given(rule=band_score_st, external=band_score_st)
    @settings(max_examples=100)
    def test_reconciled_between_inputs(self, rule, external):
        final = reconcile_domain(rule, external)
        assert min(rule, external) <= final <= max(rule, external)

    @given(rule=writing_scores(), external=writing_scores())
    @settings(max_examples=300)
    def test_reconcile_stays_in_range(self, rule, external):
        result = reconcile(rule, external)
        for domain in WritingDomain:
            assert 0 <= result.final_scores.get(domain) <= 5

    @given(
        diffs=st.lists(st.integers(min_value=0, max_value=5), min_size=4, max_size=4),
        similarity=st.floats(min_value=0, max_value=100, allow_nan=False),
        ai=st.floats(min_value=0, max_value=1, allow_nan=False),
        flags=st.lists(st.sampled_from(
            ["TASK_ACHIEVEMENT_DIVERGENCE", "TIME_ANOMALY", "SIMILARITY_HIGH", "OTHER"]
        ), max_size=8),
        available=st.booleans(),
    )
    @settings(max_examples=500)
    def test_confidence_bounded(self, diffs, similarity, ai, flags, available):
        differences = dict(zip(WritingDomain, diffs)) if available else None
        result = CONFIDENCE.calculate(differences, similarity, ai, flags)
        assert 0 <= result.confidence <= 100


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------

class TestPlacementProperties:

    @given(score=st.decimals(min_value=0, max_value=100, places=2))
    @settings(max_examples=300)
    def test_overall_table_exhaustive(self, score):
        assert DEFAULT_PLACEMENT_CONFIG.cutoffs_overall.find_row(float(score)) is not None

    @given(
        grammar=st.integers(min_value=0, max_value=20),
        reading=st.integers(min_value=0, max_value=20),
        task1=writing_scores(),
        task2=writing_scores(),
    )
    @settings(max_examples=300, deadline=None)
    def test_floor_only_lowers(self, grammar, reading, task1, task2):
        result = PLACEMENT.score(PlacementInput(
            grammar_correct=grammar, reading_correct=reading, task1=task1, task2=task2,
        ))
        assert result.overall_cefr_final.order <= result.overall_cefr_pre_floor.order
        assert result.overall_cefr_final.order <= result.reading_cefr.order
        assert result.overall_cefr_final.order <= result.writing_cefr.order
        assert Decimal("0") <= result.composite_score <= Decimal("100")

    @given(overall=cefr_st, reading=cefr_st, writing=cefr_st)
    @settings(max_examples=100)
    def test_skill_floor_reason_iff_changed(self, overall, reading, writing):
        final, reason = apply_skill_floor(overall, reading, writing)
        assert (reason is None) == (final == overall)
