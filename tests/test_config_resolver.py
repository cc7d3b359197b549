# tests/test_config_resolver.py
"""Config resolution, fallback snapshots and record validation."""

import json

import pytest

from llnd_engine.core.exceptions import (
    ConfigurationNotFoundException,
    ConfigurationValidationException,
)
from llnd_engine.models.enumerations import Domain
from llnd_engine.scoring.config_resolver import (
    FALLBACK_CONFIGS,
    ConfigResolver,
    level_name,
)


def flat_row(**overrides):
    row = {
        "config_id": "bench_aqf4_v2",
        "aqf_level": 4,
        "version": "2",
        "is_active": 1,
        "reading_weight": 0.25,
        "writing_weight": 0.20,
        "numeracy_weight": 0.25,
        "digital_weight": 0.20,
        "oral_weight": 0.10,
        "writing_scale_max": 4,
        "threshold_strong": 85,
        "threshold_meets": 70,
        "threshold_monitor": 55,
        "override_rules": json.dumps({
            "auto_support": [
                {"condition": "SINGLE", "rules": [{"domain": "Writing", "threshold": 50}]},
            ],
            "monitor_cap": [{"condition": "single_below", "domain": "Digital", "threshold": 55}],
        }),
        "risk_thresholds": json.dumps({"Reading": 70}),
        "critical_domains": json.dumps(["Reading"]),
        "critical_fail_threshold": 60,
    }
    row.update(overrides)
    return row


class TestFallbacks:

    @pytest.mark.parametrize("level,scale", [("3", 3), ("4", 4), ("5", 4), ("6", 5), ("8-9", 6)])
    def test_writing_scale(self, resolver, level, scale):
        assert resolver.resolve(level).writing_scale == scale

    @pytest.mark.parametrize("level", list(FALLBACK_CONFIGS))
    def test_weights_sum_to_one(self, level):
        assert sum(FALLBACK_CONFIGS[level].weights.values()) == pytest.approx(1.0)

    def test_available_levels(self, resolver):
        assert resolver.available_levels() == ["3", "4", "5", "6", "8-9"]

    def test_unknown_level_raises(self, resolver):
        with pytest.raises(ConfigurationNotFoundException) as exc:
            resolver.resolve("7")
        assert "7" in str(exc.value)

    def test_level_is_stripped(self, resolver):
        assert resolver.resolve(" 3 ").level == "3"

    def test_level_names(self):
        assert level_name("3") == "Certificate III"
        assert level_name("7") == "AQF 7"


class TestPersistedStore:

    def test_store_record_preferred(self):
        resolver = ConfigResolver(store=lambda level: flat_row())
        config = resolver.resolve("4")
        assert config.version == "2"
        assert config.config_id == "bench_aqf4_v2"
        assert config.critical_domains == [Domain.READING]
        assert config.override_rules.monitor_cap[0].domain == Domain.DIGITAL

    def test_store_miss_falls_back(self):
        resolver = ConfigResolver(store=lambda level: None)
        assert resolver.resolve("3").config_id == "bench_aqf3_v1"

    def test_nested_record(self, custom_config_data):
        resolver = ConfigResolver(store=lambda level: custom_config_data)
        assert resolver.resolve("5").version == "test-1"

    def test_bad_weights_wrapped(self):
        resolver = ConfigResolver(store=lambda level: flat_row(oral_weight=0.5))
        with pytest.raises(ConfigurationValidationException) as exc:
            resolver.resolve("4")
        assert exc.value.level == "4"
        assert exc.value.version == "2"

    def test_thresholds_out_of_order_wrapped(self):
        resolver = ConfigResolver(store=lambda level: flat_row(threshold_meets=90))
        with pytest.raises(ConfigurationValidationException):
            resolver.resolve("4")

    def test_unknown_rule_shape_wrapped(self):
        rules = json.dumps({"auto_support": [{"condition": "XOR", "rules": []}]})
        resolver = ConfigResolver(store=lambda level: flat_row(override_rules=rules))
        with pytest.raises(ConfigurationValidationException):
            resolver.resolve("4")

    def test_missing_column_wrapped(self):
        row = flat_row()
        del row["threshold_strong"]
        with pytest.raises(ConfigurationValidationException):
            ConfigResolver.validate(row, level="4")
