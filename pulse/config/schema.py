"""Pydantic models for pulse.yaml validation."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator

from pulse.config.defaults import (
    ALERT_DEFAULTS,
    COMPONENT_WEIGHTS,
    DATABASE_DEFAULTS,
    FALLBACK_SCORE,
    FLAGGED_ISSUE_PENALTY,
    RISK_PENALTIES,
    SIGNAL_WINDOW,
    STATUS_THRESHOLDS,
    SUB_SCORE_DEFAULTS,
)


# ---------------------------------------------------------------------------
# Scoring Configs
# ---------------------------------------------------------------------------

class ComponentWeightsConfig(BaseModel):
    satisfaction: float = COMPONENT_WEIGHTS["satisfaction"]
    confidence: float = COMPONENT_WEIGHTS["confidence"]
    schedule: float = COMPONENT_WEIGHTS["schedule"]
    risk: float = COMPONENT_WEIGHTS["risk"]

    @model_validator(mode="after")
    def weights_sum_to_one(self) -> "ComponentWeightsConfig":
        total = self.satisfaction + self.confidence + self.schedule + self.risk
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"Component weights must sum to 1.0, got {total:.4f}")
        for name, value in self.as_dict().items():
            if value < 0:
                raise ValueError(f"Component weight {name} must be >= 0, got {value}")
        return self

    def as_dict(self) -> dict[str, float]:
        return {
            "satisfaction": self.satisfaction,
            "confidence": self.confidence,
            "schedule": self.schedule,
            "risk": self.risk,
        }


class RiskPenaltiesConfig(BaseModel):
    HIGH: int = RISK_PENALTIES["HIGH"]
    MEDIUM: int = RISK_PENALTIES["MEDIUM"]
    LOW: int = RISK_PENALTIES["LOW"]

    @model_validator(mode="after")
    def penalties_non_negative(self) -> "RiskPenaltiesConfig":
        if min(self.HIGH, self.MEDIUM, self.LOW) < 0:
            raise ValueError("Risk penalties must be >= 0")
        return self


class SubScoreDefaultsConfig(BaseModel):
    satisfaction: float = Field(SUB_SCORE_DEFAULTS["satisfaction"], ge=0, le=100)
    confidence: float = Field(SUB_SCORE_DEFAULTS["confidence"], ge=0, le=100)
    schedule: float = Field(SUB_SCORE_DEFAULTS["schedule"], ge=0, le=100)
    risk: float = Field(SUB_SCORE_DEFAULTS["risk"], ge=0, le=100)


class ScoringWeights(BaseModel):
    """The tunable weighting scheme for the health score.

    Bundles everything that differed between historical variants of the
    engine: component weights, per-severity penalties, the flagged-issue
    penalty, the signal window and the neutral defaults.
    """

    weights: ComponentWeightsConfig = Field(default_factory=ComponentWeightsConfig)
    risk_penalties: RiskPenaltiesConfig = Field(default_factory=RiskPenaltiesConfig)
    flagged_issue_penalty: int = Field(FLAGGED_ISSUE_PENALTY, ge=0)
    signal_window: int = Field(SIGNAL_WINDOW, ge=1)
    defaults: SubScoreDefaultsConfig = Field(default_factory=SubScoreDefaultsConfig)
    fallback_score: int = Field(FALLBACK_SCORE, ge=0, le=100)


class StatusThresholdsConfig(BaseModel):
    on_track: int = STATUS_THRESHOLDS["on_track"]
    at_risk: int = STATUS_THRESHOLDS["at_risk"]

    @model_validator(mode="after")
    def thresholds_ordered(self) -> "StatusThresholdsConfig":
        if not 0 <= self.at_risk <= self.on_track <= 100:
            raise ValueError(
                f"Status thresholds must satisfy 0 <= at_risk <= on_track <= 100, "
                f"got at_risk={self.at_risk}, on_track={self.on_track}"
            )
        return self


# ---------------------------------------------------------------------------
# Alert Config
# ---------------------------------------------------------------------------

class AlertsConfig(BaseModel):
    low_confidence_max: int = Field(ALERT_DEFAULTS["low_confidence_max"], ge=1, le=5)
    notify_low_confidence: bool = ALERT_DEFAULTS["notify_low_confidence"]
    notify_flagged_issue: bool = ALERT_DEFAULTS["notify_flagged_issue"]
    notify_high_risk: bool = ALERT_DEFAULTS["notify_high_risk"]


# ---------------------------------------------------------------------------
# Database Config
# ---------------------------------------------------------------------------

class DatabaseConfig(BaseModel):
    path: str = DATABASE_DEFAULTS["path"]
    busy_timeout_ms: int = DATABASE_DEFAULTS["busy_timeout_ms"]


# ---------------------------------------------------------------------------
# Top-Level Config
# ---------------------------------------------------------------------------

class PulseConfig(BaseModel):
    """Root configuration model for ProjectPulse."""

    version: int = 1
    scoring: ScoringWeights = Field(default_factory=ScoringWeights)
    thresholds: StatusThresholdsConfig = Field(default_factory=StatusThresholdsConfig)
    alerts: AlertsConfig = Field(default_factory=AlertsConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    @model_validator(mode="before")
    @classmethod
    def coerce_none_to_defaults(cls, data: Any) -> Any:
        """YAML parses empty keys as None. Drop them so defaults apply."""
        if isinstance(data, dict):
            for key in ("scoring", "thresholds", "alerts", "database"):
                if key in data and data[key] is None:
                    del data[key]
        return data
