"""
Benchmark configuration records.

A BenchmarkConfig is a read-only, versioned snapshot for one AQF level.
Validation here runs at authoring / load time, never during scoring.
"""

import json
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from llnd_engine.config import settings
from llnd_engine.models.enumerations import Domain, Outcome


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Override rules
# ---------------------------------------------------------------------------

class DomainThreshold(_Frozen):
    domain: Domain
    threshold: float = Field(..., ge=0, le=100)


class OrRule(_Frozen):
    """Any listed domain below its threshold."""
    condition: Literal["OR"] = "OR"
    rules: List[DomainThreshold] = Field(..., min_length=1)

    def describe(self) -> str:
        parts = " or ".join(f"{r.domain.value} < {r.threshold:g}" for r in self.rules)
        return f"OR: {parts}"


class AndRule(_Frozen):
    """All listed domains below their thresholds."""
    condition: Literal["AND"] = "AND"
    rules: List[DomainThreshold] = Field(..., min_length=1)

    def describe(self) -> str:
        parts = " and ".join(f"{r.domain.value} < {r.threshold:g}" for r in self.rules)
        return f"AND: {parts}"


class SingleRule(_Frozen):
    """One named domain below its threshold."""
    condition: Literal["SINGLE"] = "SINGLE"
    rules: List[DomainThreshold] = Field(..., min_length=1, max_length=1)

    def describe(self) -> str:
        r = self.rules[0]
        return f"SINGLE: {r.domain.value} < {r.threshold:g}"


class AnyTwoCoreRule(_Frozen):
    """At least two of the core domains below a shared threshold."""
    condition: Literal["ANY_2_CORE"] = "ANY_2_CORE"
    core_domains: List[Domain] = Field(..., min_length=2)
    threshold: float = Field(..., ge=0, le=100)

    def describe(self) -> str:
        names = ", ".join(d.value for d in self.core_domains)
        return f"ANY_2_CORE: 2+ of [{names}] < {self.threshold:g}"


AutoSupportRule = Annotated[
    Union[OrRule, AndRule, SingleRule, AnyTwoCoreRule],
    Field(discriminator="condition"),
]


class SingleBelowCap(_Frozen):
    condition: Literal["single_below"] = "single_below"
    domain: Domain
    threshold: float = Field(..., ge=0, le=100)

    def describe(self) -> str:
        return f"single_below: {self.domain.value} < {self.threshold:g}"


class MultiBelowCap(_Frozen):
    """`count` or more domains below threshold; all scored domains unless listed."""
    condition: Literal["multi_below"] = "multi_below"
    threshold: float = Field(..., ge=0, le=100)
    count: int = Field(default=2, ge=1)
    domains: Optional[List[Domain]] = None

    def describe(self) -> str:
        scope = ", ".join(d.value for d in self.domains) if self.domains else "any domain"
        return f"multi_below: {self.count}+ of [{scope}] < {self.threshold:g}"


MonitorCapRule = Annotated[
    Union[SingleBelowCap, MultiBelowCap],
    Field(discriminator="condition"),
]


class OverrideRules(_Frozen):
    auto_support: List[AutoSupportRule] = Field(default_factory=list)
    monitor_cap: List[MonitorCapRule] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Thresholds
# ---------------------------------------------------------------------------

class Thresholds(_Frozen):
    """Three-tier overall classification thresholds (percent)."""
    strong: float = Field(..., ge=0, le=100)
    meets: float = Field(..., ge=0, le=100)
    monitor: float = Field(..., ge=0, le=100)

    @model_validator(mode="after")
    def validate_order(self):
        if not (self.strong >= self.meets >= self.monitor):
            raise ValueError(
                f"Thresholds must satisfy strong >= meets >= monitor, got "
                f"{self.strong}/{self.meets}/{self.monitor}"
            )
        return self

    def classify(self, value: float) -> Outcome:
        """Tier a percentage: strong -> exceeds, meets -> meets, monitor -> monitor."""
        if value >= self.strong:
            return Outcome.EXCEEDS
        if value >= self.meets:
            return Outcome.MEETS
        if value >= self.monitor:
            return Outcome.MONITOR
        return Outcome.SUPPORT_REQUIRED


class ACSFThresholds(_Frozen):
    """ACSF sub-band inference thresholds (percent)."""
    core_meets: float = Field(default=70, ge=0, le=100)
    stretch_meets: float = Field(default=50, ge=0, le=100)
    foundation_meets: float = Field(default=70, ge=0, le=100)
    foundation_fail: float = Field(default=60, ge=0, le=100)
    target_level: int = Field(default=3, ge=2, le=6)


# ---------------------------------------------------------------------------
# BenchmarkConfig
# ---------------------------------------------------------------------------

class BenchmarkConfig(_Frozen):
    """Versioned benchmark snapshot for one AQF level."""

    level: str = Field(..., min_length=1, description="AQF level key, e.g. '3' or '8-9'")
    version: str = Field(..., min_length=1)
    config_id: Optional[str] = None
    is_active: bool = True

    weights: Dict[Domain, float]
    writing_scale: int = Field(..., ge=3, le=6, description="Free-text rubric ceiling")
    writing_max_points: int = Field(default=15, ge=1)
    thresholds: Thresholds
    override_rules: OverrideRules = Field(default_factory=OverrideRules)
    risk_thresholds: Dict[Domain, float] = Field(default_factory=dict)
    monitor_triggers: Dict[Domain, float] = Field(default_factory=dict)
    acsf_thresholds: ACSFThresholds = Field(default_factory=ACSFThresholds)
    critical_domains: List[Domain] = Field(default_factory=list)
    critical_fail_threshold: float = Field(default=60, ge=0, le=100)

    @field_validator("weights")
    @classmethod
    def validate_weights(cls, v: Dict[Domain, float]) -> Dict[Domain, float]:
        missing = [d.value for d in Domain if d not in v]
        if missing:
            raise ValueError(f"Missing weights for domains: {', '.join(missing)}")
        if any(w < 0 for w in v.values()):
            raise ValueError("Domain weights must be non-negative")
        total = sum(v.values())
        if abs(total - 1.0) > settings.WEIGHT_SUM_TOLERANCE:
            raise ValueError(f"Domain weights must sum to 1.0, got {total:.4f}")
        return v

    def weight_for(self, domain: Domain) -> float:
        return self.weights.get(domain, 0.0)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "BenchmarkConfig":
        """Build a config from a flat persisted row (JSON columns as strings)."""

        def _json(key: str, default: Any) -> Any:
            raw = row.get(key)
            if raw is None or raw == "":
                return default
            return json.loads(raw) if isinstance(raw, str) else raw

        override = _json("override_rules", {})
        return cls.model_validate({
            "level": str(row["aqf_level"]),
            "version": str(row["version"]),
            "config_id": row.get("config_id"),
            "is_active": bool(row.get("is_active", 1)),
            "weights": {
                "Reading": row["reading_weight"],
                "Writing": row["writing_weight"],
                "Numeracy": row["numeracy_weight"],
                "Digital": row["digital_weight"],
                "Oral": row["oral_weight"],
            },
            "writing_scale": row["writing_scale_max"],
            "writing_max_points": row.get("writing_max_points", 15),
            "thresholds": {
                "strong": row["threshold_strong"],
                "meets": row["threshold_meets"],
                "monitor": row["threshold_monitor"],
            },
            "override_rules": {
                "auto_support": override.get("auto_support", []),
                "monitor_cap": override.get("monitor_cap", []),
            },
            "risk_thresholds": _json("risk_thresholds", {}),
            "monitor_triggers": _json("monitor_triggers", {}),
            "acsf_thresholds": {
                "core_meets": row.get("acsf_core_meets", 70),
                "stretch_meets": row.get("acsf_stretch_meets", 50),
                "foundation_meets": row.get("acsf2_meets", 70),
                "foundation_fail": row.get("acsf2_fail", 60),
                "target_level": row.get("acsf_target_level", 3),
            },
            "critical_domains": _json("critical_domains", []),
            "critical_fail_threshold": row.get("critical_fail_threshold", 60),
        })
