# tests/test_integration_service.py
"""End-to-end attempt scoring through ScoringEngine and report assembly."""

from decimal import Decimal

import pytest

from llnd_engine.core.exceptions import ConfigurationNotFoundException
from llnd_engine.models.enumerations import Domain, Outcome, ResponseType, TaskType
from llnd_engine.models.question import Response
from llnd_engine.models.writing import WritingPromptContext, WritingSubmission
from llnd_engine.scoring.integration_service import ScoringEngine, build_report, key_flags

from tests.conftest import make_question, uniform_scores


@pytest.fixture
def engine():
    return ScoringEngine()


def with_reading_wrong(questions):
    return [
        Response(question_id=q.id, answer="A" if q.domain == Domain.READING else "B")
        for q in questions
    ]


class TestScoreAttempt:

    def test_all_correct_exceeds(self, engine, full_question_set, all_correct_responses, level3_config):
        result = engine.score_attempt(full_question_set, all_correct_responses, level3_config)

        assert result.total_score == Decimal("100.0")
        assert result.outcome == Outcome.EXCEEDS
        assert result.baseline_outcome == Outcome.EXCEEDS
        assert result.override_triggered is False
        assert result.risk_flags == []
        assert result.level_name == "Certificate III"
        assert len(result.item_scores) == len(full_question_set)

    def test_level_string_resolved(self, engine, full_question_set, all_correct_responses):
        result = engine.score_attempt(full_question_set, all_correct_responses, "3")
        assert result.level == "3"
        assert result.config_version == "1"

    def test_unknown_level_raises(self, engine, full_question_set, all_correct_responses):
        with pytest.raises(ConfigurationNotFoundException):
            engine.score_attempt(full_question_set, all_correct_responses, "7")

    def test_critical_reading_failure(self, engine, full_question_set, level3_config):
        result = engine.score_attempt(
            full_question_set, with_reading_wrong(full_question_set), level3_config
        )

        assert result.total_score == Decimal("70.0")
        assert result.baseline_outcome == Outcome.MEETS
        assert result.outcome == Outcome.SUPPORT_REQUIRED
        assert result.override_triggered is True

        reading = result.domain_scores[Domain.READING]
        assert reading.percentage == Decimal("0.0")
        assert reading.risk_flag is True
        assert reading.risk_detail == result.risk_flags[0].detail

        flags = key_flags(result)
        assert flags[0] == "Reading below benchmark"
        assert flags[1].startswith("Reading 0.0% is 70.0 points below")

    def test_unanswered_scores_zero(self, engine, full_question_set, level3_config):
        result = engine.score_attempt(full_question_set, [], level3_config)
        assert result.total_score == Decimal("0.0")
        assert result.outcome == Outcome.SUPPORT_REQUIRED

    def test_last_answer_wins(self, engine, level3_config):
        questions = [make_question("R1")]
        responses = [Response(question_id="R1", answer="A"), Response(question_id="R1", answer="B")]
        result = engine.score_attempt(questions, responses, level3_config)
        assert result.item_scores[0].score == Decimal("1")

    def test_unknown_response_ignored(self, engine, level3_config):
        questions = [make_question("R1")]
        responses = [Response(question_id="R1", answer="B"), Response(question_id="ZZ", answer="B")]
        result = engine.score_attempt(questions, responses, level3_config)
        assert [i.question_id for i in result.item_scores] == ["R1"]

    def test_short_text_routed_to_rubric(self, engine, level3_config):
        question = make_question(
            "W1", domain=Domain.WRITING, response_type=ResponseType.SHORT_TEXT,
            expected=None, max_score=3,
        )
        result = engine.score_attempt([question], [Response(question_id="W1", answer="")], level3_config)
        item = result.item_scores[0]
        assert item.response_type == ResponseType.SHORT_TEXT
        assert item.score == Decimal("0")

    def test_writing_results_join_writing_domain(
        self, engine, full_question_set, all_correct_responses, level3_config
    ):
        analyzer = engine.writing_analyzer
        submission = WritingSubmission(
            task_type=TaskType.TASK1,
            response_text="Please confirm the new delivery date. " * 10,
        )
        scored = analyzer.analyze(submission, WritingPromptContext(prompt_text="Delivery"))
        reviewed = analyzer.apply_human_review(scored, uniform_scores(4))

        result = engine.score_attempt(
            full_question_set, all_correct_responses, level3_config,
            writing_results={"WT1": reviewed},
        )
        writing = result.domain_scores[Domain.WRITING]
        assert writing.raw_score == Decimal("18")
        assert writing.max_score == Decimal("22")
        assert writing.item_count == 3
        assert result.item_scores[-1].question_id == "WT1"

    def test_deterministic(self, engine, full_question_set, level3_config):
        responses = with_reading_wrong(full_question_set)
        a = engine.score_attempt(full_question_set, responses, level3_config)
        b = engine.score_attempt(full_question_set, responses, level3_config)
        assert a == b


class TestBuildReport:

    def test_report_shape(self, engine, full_question_set, level3_config):
        result = engine.score_attempt(
            full_question_set, with_reading_wrong(full_question_set), level3_config
        )
        report = build_report(
            result,
            student={"id": "S-1", "name": "Test Learner"},
            assessment={"attempt_id": "ATT-7", "context": "enrolment", "submitted_at": "2026-03-01"},
            generated_at="2026-03-02T09:00:00Z",
        )

        assert report["version"] == "1"
        assert report["engine_version"] == result.engine_version
        assert report["generated_at"] == "2026-03-02T09:00:00Z"
        assert report["student"]["id"] == "S-1"
        assert report["assessment"]["attempt_id"] == "ATT-7"
        assert report["assessment"]["level_name"] == "Certificate III"

        overall = report["overall"]
        assert overall["score"] == 70.0
        assert overall["outcome_code"] == "support_required"
        assert overall["baseline_outcome"] == "meets"
        assert overall["override_triggered"] is True
        assert "Reading below benchmark" in overall["key_flags"]

        names = [d["name"] for d in report["domains"]]
        assert "Reading" in names
        reading = next(d for d in report["domains"] if d["name"] == "Reading")
        assert reading["risk_flag"] is True
        assert set(reading["acsf_breakdown"]) == {"foundation_percent", "core_percent", "stretch_percent"}

    def test_report_is_reproducible(self, engine, full_question_set, all_correct_responses, level3_config):
        result = engine.score_attempt(full_question_set, all_correct_responses, level3_config)
        args = ({"id": "S"}, {"attempt_id": "A"}, "t")
        assert build_report(result, *args) == build_report(result, *args)
