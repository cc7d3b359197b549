"""
Config Resolver
llnd_engine/scoring/config_resolver.py

Resolves the active BenchmarkConfig for an AQF level.

Lookup order:
    1. Persisted configuration from the injected store callable
    2. Built-in fallback snapshot (FALLBACK_CONFIGS)
    3. ConfigurationNotFoundException

The store is any callable ``level -> BenchmarkConfig | Mapping | None``.
Mappings may be nested config dicts or flat persisted rows (JSON columns
as strings); both are validated before use.

Usage:
    resolver = ConfigResolver(store=repo.load_active_config)
    config = resolver.resolve("4")
"""

from typing import Any, Callable, Dict, List, Mapping, Optional, Union

import structlog
from pydantic import ValidationError

from llnd_engine.core.exceptions import (
    ConfigurationNotFoundException,
    ConfigurationValidationException,
)
from llnd_engine.models.benchmark import BenchmarkConfig

logger = structlog.get_logger(__name__)

ConfigStore = Callable[[str], Union[BenchmarkConfig, Mapping[str, Any], None]]


# ---------------------------------------------------------------------------
# Level display names
# ---------------------------------------------------------------------------

AQF_LEVEL_NAMES: Dict[str, str] = {
    "3": "Certificate III",
    "4": "Certificate IV",
    "5": "Diploma",
    "6": "Advanced Diploma",
    "8-9": "Graduate Diploma",
}


def level_name(level: str) -> str:
    return AQF_LEVEL_NAMES.get(level, f"AQF {level}")


# ---------------------------------------------------------------------------
# Built-in fallback snapshots (version "1")
# ---------------------------------------------------------------------------

_FALLBACK_DATA: Dict[str, Dict[str, Any]] = {
    "3": {
        "config_id": "bench_aqf3_v1",
        "weights": {"Reading": 0.30, "Writing": 0.15, "Numeracy": 0.30, "Digital": 0.15, "Oral": 0.10},
        "writing_scale": 3,
        "writing_max_points": 15,
        "thresholds": {"strong": 80, "meets": 65, "monitor": 50},
        "override_rules": {
            "auto_support": [
                {"condition": "OR", "rules": [
                    {"domain": "Reading", "threshold": 60},
                    {"domain": "Numeracy", "threshold": 60},
                ]},
            ],
            "monitor_cap": [],
        },
        "risk_thresholds": {"Reading": 70, "Writing": 60, "Numeracy": 70, "Digital": 60},
        "monitor_triggers": {"Writing": 50, "Digital": 50},
        "acsf_thresholds": {"target_level": 3},
        "critical_domains": ["Reading", "Numeracy"],
        "critical_fail_threshold": 60,
    },
    "4": {
        "config_id": "bench_aqf4_v1",
        "weights": {"Reading": 0.25, "Writing": 0.20, "Numeracy": 0.25, "Digital": 0.20, "Oral": 0.10},
        "writing_scale": 4,
        "writing_max_points": 20,
        "thresholds": {"strong": 85, "meets": 70, "monitor": 55},
        "override_rules": {
            "auto_support": [
                {"condition": "AND", "rules": [
                    {"domain": "Reading", "threshold": 60},
                    {"domain": "Numeracy", "threshold": 60},
                ]},
                {"condition": "SINGLE", "rules": [{"domain": "Writing", "threshold": 50}]},
            ],
            "monitor_cap": [
                {"condition": "multi_below", "threshold": 65, "count": 2},
            ],
        },
        "risk_thresholds": {"Reading": 70, "Writing": 65, "Numeracy": 70, "Digital": 65},
        "monitor_triggers": {"Writing": 50, "Digital": 50},
        "acsf_thresholds": {"target_level": 3},
        "critical_domains": ["Reading", "Numeracy"],
        "critical_fail_threshold": 60,
    },
    "5": {
        "config_id": "bench_aqf5_v1",
        "weights": {"Reading": 0.25, "Writing": 0.25, "Numeracy": 0.20, "Digital": 0.20, "Oral": 0.10},
        "writing_scale": 4,
        "writing_max_points": 20,
        "thresholds": {"strong": 85, "meets": 70, "monitor": 60},
        "override_rules": {
            "auto_support": [
                {"condition": "ANY_2_CORE", "core_domains": ["Reading", "Writing", "Numeracy"], "threshold": 60},
                {"condition": "SINGLE", "rules": [{"domain": "Writing", "threshold": 55}]},
            ],
            "monitor_cap": [
                {"condition": "single_below", "domain": "Digital", "threshold": 60},
            ],
        },
        "risk_thresholds": {"Reading": 70, "Writing": 70, "Numeracy": 70, "Digital": 65},
        "monitor_triggers": {"Digital": 60},
        "acsf_thresholds": {"target_level": 4},
        "critical_domains": ["Reading", "Writing", "Numeracy"],
        "critical_fail_threshold": 60,
    },
    "6": {
        "config_id": "bench_aqf6_v1",
        "weights": {"Reading": 0.20, "Writing": 0.30, "Numeracy": 0.20, "Digital": 0.20, "Oral": 0.10},
        "writing_scale": 5,
        "writing_max_points": 25,
        "thresholds": {"strong": 90, "meets": 75, "monitor": 65},
        "override_rules": {
            "auto_support": [
                {"condition": "SINGLE", "rules": [{"domain": "Writing", "threshold": 60}]},
                {"condition": "SINGLE", "rules": [{"domain": "Reading", "threshold": 65}]},
            ],
            "monitor_cap": [
                {"condition": "multi_below", "threshold": 70, "count": 2},
                {"condition": "single_below", "domain": "Digital", "threshold": 65},
            ],
        },
        "risk_thresholds": {"Reading": 70, "Writing": 70, "Numeracy": 70, "Digital": 70},
        "monitor_triggers": {"Digital": 65},
        "acsf_thresholds": {"target_level": 4},
        "critical_domains": ["Reading", "Writing"],
        "critical_fail_threshold": 65,
    },
    "8-9": {
        "config_id": "bench_aqf89_v1",
        "weights": {"Reading": 0.25, "Writing": 0.35, "Numeracy": 0.15, "Digital": 0.15, "Oral": 0.10},
        "writing_scale": 6,
        "writing_max_points": 30,
        "thresholds": {"strong": 90, "meets": 80, "monitor": 70},
        "override_rules": {
            "auto_support": [
                {"condition": "SINGLE", "rules": [{"domain": "Writing", "threshold": 70}]},
                {"condition": "SINGLE", "rules": [{"domain": "Reading", "threshold": 65}]},
            ],
            "monitor_cap": [
                {"condition": "multi_below", "threshold": 70, "count": 2},
                {"condition": "single_below", "domain": "Digital", "threshold": 65},
            ],
        },
        "risk_thresholds": {"Reading": 75, "Writing": 75, "Numeracy": 65, "Digital": 70},
        "monitor_triggers": {"Digital": 65},
        "acsf_thresholds": {"target_level": 5},
        "critical_domains": ["Reading", "Writing"],
        "critical_fail_threshold": 65,
    },
}

FALLBACK_CONFIGS: Dict[str, BenchmarkConfig] = {
    level: BenchmarkConfig.model_validate({"level": level, "version": "1", **data})
    for level, data in _FALLBACK_DATA.items()
}


# ---------------------------------------------------------------------------
# ConfigResolver
# ---------------------------------------------------------------------------

class ConfigResolver:
    """Resolve the benchmark configuration for a level."""

    def __init__(self, store: Optional[ConfigStore] = None):
        self.store = store

    def resolve(self, level: str) -> BenchmarkConfig:
        level = str(level).strip()

        persisted = self.store(level) if self.store is not None else None
        if persisted is not None:
            config = self.validate(persisted, level=level)
            logger.info(
                "config_resolved",
                level=level,
                version=config.version,
                source="persisted",
            )
            return config

        fallback = FALLBACK_CONFIGS.get(level)
        if fallback is None:
            logger.error("config_not_found", level=level)
            raise ConfigurationNotFoundException(level)

        logger.info(
            "config_resolved",
            level=level,
            version=fallback.version,
            source="fallback",
        )
        return fallback

    @staticmethod
    def validate(
        data: Union[BenchmarkConfig, Mapping[str, Any]],
        level: Optional[str] = None,
    ) -> BenchmarkConfig:
        """
        Validate a configuration record.

        Raises ConfigurationValidationException with the level and version
        attached so a bad record can be traced to its source.
        """
        if isinstance(data, BenchmarkConfig):
            return data
        version = data.get("version")
        try:
            if "reading_weight" in data:
                return BenchmarkConfig.from_row(data)
            return BenchmarkConfig.model_validate(data)
        except (ValidationError, KeyError, ValueError) as e:
            raise ConfigurationValidationException(
                f"Invalid benchmark configuration: {e}",
                level=level,
                version=str(version) if version is not None else None,
            ) from e

    @staticmethod
    def available_levels() -> List[str]:
        return list(FALLBACK_CONFIGS)
