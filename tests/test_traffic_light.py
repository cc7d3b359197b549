# tests/test_traffic_light.py
"""Course benchmark rule selection and GREEN / AMBER / RED grading."""

from decimal import Decimal

import pytest

from llnd_engine.models.enumerations import TrafficLight
from llnd_engine.models.placement import CourseBenchmarkConfig
from llnd_engine.scoring.traffic_light import (
    TrafficLightEvaluator,
    ielts_delta,
    parse_ielts,
    select_rule,
    wildcard_match,
)

ALL_AMBER = [
    {"type": "one_threshold_missed_by_one_band"},
    {"type": "writing_below_min_only", "max_band_drop": 1},
    {"type": "ielts_below_by", "max_delta": 0.5},
]


@pytest.fixture
def benchmark_config():
    return CourseBenchmarkConfig.model_validate({
        "version": "cb-1",
        "defaults": {"overall_cefr_min": "B1"},
        "rules": [
            {
                "rule_id": "GEN",
                "name": "General entry",
                "thresholds": {
                    "overall_cefr_min": "B2", "reading_cefr_min": "B1",
                    "writing_cefr_min": "B2", "ielts_indicative_min": "6.0",
                },
                "amber_conditions": ALL_AMBER,
            },
            {
                "rule_id": "DIP-F2F",
                "name": "Diplomas face to face",
                "applies_to": {"course_code": "BSB5*", "delivery_type": "face_to_face"},
                "thresholds": {"overall_cefr_min": "B1"},
            },
            {
                "rule_id": "BSB50120-ONLINE",
                "name": "Diploma of Business online",
                "applies_to": {"course_code": "BSB50120", "delivery_type": "online"},
                "thresholds": {"overall_cefr_min": "C1"},
            },
        ],
    })


@pytest.fixture
def evaluator():
    return TrafficLightEvaluator()


def evaluate(evaluator, config, overall, reading, writing, ielts, course="ANY100", delivery="online"):
    return evaluator.evaluate(config, overall, reading, writing, ielts, course, delivery)


class TestRuleSelection:

    def test_exact_rule_wins(self, benchmark_config):
        rule = select_rule(benchmark_config.rules, "BSB50120", "online")
        assert rule.rule_id == "BSB50120-ONLINE"

    def test_fewer_wildcards_win(self, benchmark_config):
        rule = select_rule(benchmark_config.rules, "BSB50420", "face_to_face")
        assert rule.rule_id == "DIP-F2F"

    def test_catch_all(self, benchmark_config):
        assert select_rule(benchmark_config.rules, "CHC30121", "online").rule_id == "GEN"

    def test_tie_goes_to_first_listed(self):
        config = CourseBenchmarkConfig.model_validate({
            "version": "t",
            "rules": [
                {"rule_id": "FIRST", "name": "first"},
                {"rule_id": "SECOND", "name": "second"},
            ],
        })
        assert select_rule(config.rules, "X", "Y").rule_id == "FIRST"

    def test_no_match_uses_defaults(self, evaluator):
        config = CourseBenchmarkConfig.model_validate({
            "version": "t",
            "defaults": {"overall_cefr_min": "B1"},
            "rules": [{"rule_id": "ONLY", "name": "only",
                       "applies_to": {"course_code": "BSB50120"}}],
        })
        result = evaluator.evaluate(config, "A2", "B1", "B1", "5.0", "XYZ", "online")
        assert result.rule_id == "DEFAULTS"
        assert result.rule_name == "Defaults"
        assert result.status == TrafficLight.RED
        assert result.actions == ["Not recommended"]


class TestGrading:

    def test_green(self, evaluator, benchmark_config):
        result = evaluate(evaluator, benchmark_config, "B2", "B1", "B2", "6.0")
        assert result.status == TrafficLight.GREEN
        assert result.actions == ["Proceed"]
        assert result.misses == []
        assert result.ielts_delta == Decimal("0.0")

    def test_one_band_miss_is_amber(self, evaluator, benchmark_config):
        result = evaluate(evaluator, benchmark_config, "B1", "B1", "B2", "6.5")
        assert result.status == TrafficLight.AMBER
        assert [(m.field, m.drop) for m in result.misses] == [("overall_cefr", 1)]
        assert result.reasons == ["One CEFR threshold missed by one band: overall_cefr"]

    def test_writing_only_miss(self, evaluator, benchmark_config):
        result = evaluate(evaluator, benchmark_config, "B2", "B1", "B1", "6.0")
        assert result.status == TrafficLight.AMBER
        assert "Writing below minimum only (drop 1)" in result.reasons

    def test_ielts_within_delta(self, evaluator, benchmark_config):
        result = evaluate(evaluator, benchmark_config, "B2", "B2", "B2", "5.5")
        assert result.status == TrafficLight.AMBER
        assert result.ielts_delta == Decimal("0.5")
        assert result.reasons == ["IELTS indicative below requirement by 0.5"]

    def test_two_band_miss_is_red(self, evaluator, benchmark_config):
        result = evaluate(evaluator, benchmark_config, "A2", "B1", "B2", "5.0")
        assert result.status == TrafficLight.RED
        assert result.misses[0].drop == 2
        assert result.actions == ["Not recommended"]

    def test_two_misses_not_amber(self, evaluator, benchmark_config):
        result = evaluate(evaluator, benchmark_config, "B1", "A2", "B2", "6.0")
        assert result.status == TrafficLight.RED

    def test_unparsable_ielts(self, evaluator, benchmark_config):
        result = evaluate(evaluator, benchmark_config, "B2", "B1", "B2", "N/A")
        assert result.ielts_delta == Decimal("999")
        assert result.status == TrafficLight.RED


class TestHelpers:

    @pytest.mark.parametrize("pattern,text,expected", [
        ("*", "anything", True),
        ("BSB5*", "BSB50120", True),
        ("BSB5*", "CHC50121", False),
        ("A.B", "AxB", False),
        ("A.B", "A.B", True),
        ("", "x", True),
    ])
    def test_wildcard_match(self, pattern, text, expected):
        assert wildcard_match(pattern, text) is expected

    def test_parse_ielts_plus(self):
        assert parse_ielts("7.5+") == Decimal("7.5")
        assert parse_ielts("N/A") is None

    def test_delta_without_requirement(self):
        assert ielts_delta("5.0", None) == Decimal("0")

    def test_leading_number_read_from_noisy_value(self):
        assert parse_ielts("6.5abc") == Decimal("6.5")
        assert ielts_delta("6.5abc", "6.5") == Decimal("0")
        assert ielts_delta("5.5 (est.)", "6.0+") == Decimal("0.5")
