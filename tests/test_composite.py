"""Tests for health score composition and status classification."""

from __future__ import annotations

import logging
import math

import pytest

from pulse.config.schema import ScoringWeights, StatusThresholdsConfig
from pulse.engine.composite import classify_status, compose_health_score, round_half_up
from pulse.models import ProjectStatus

DEFAULTS = {"satisfaction": 60, "confidence": 60, "schedule": 50, "risk": 100}


class TestRoundHalfUp:
    @pytest.mark.parametrize("value,expected", [
        (65.5, 66), (60.9, 61), (62.5, 63), (62.4999, 62), (0.5, 1), (99.5, 100), (0.0, 0),
    ])
    def test_rounding(self, value, expected):
        assert round_half_up(value) == expected

    def test_float_noise(self):
        assert round_half_up(65.49999999999999) == 66


class TestComposeHealthScore:
    def test_all_defaults_is_66(self):
        assert compose_health_score(DEFAULTS) == 66

    def test_perfect(self):
        perfect = {k: 100 for k in DEFAULTS}
        assert compose_health_score(perfect) == 100

    def test_zero(self):
        assert compose_health_score({k: 0 for k in DEFAULTS}) == 0

    def test_high_risk_drop(self):
        assert compose_health_score({**DEFAULTS, "risk": 85}) == 63

    def test_returns_int(self):
        assert isinstance(compose_health_score(DEFAULTS), int)

    def test_nan_falls_back(self, caplog):
        with caplog.at_level(logging.ERROR, logger="pulse.engine.composite"):
            score = compose_health_score({**DEFAULTS, "risk": math.nan}, project_id=7)
        assert score == 100
        assert "project 7" in caplog.text

    def test_missing_component_falls_back(self):
        assert compose_health_score({"satisfaction": 50}) == 100

    def test_custom_fallback(self):
        weights = ScoringWeights(fallback_score=50)
        assert compose_health_score({**DEFAULTS, "schedule": math.inf}, weights) == 50

    def test_custom_weights(self):
        weights = ScoringWeights(weights={"satisfaction": 1.0, "confidence": 0.0,
                                          "schedule": 0.0, "risk": 0.0})
        assert compose_health_score(DEFAULTS, weights) == 60


class TestClassifyStatus:
    @pytest.mark.parametrize("score,expected", [
        (100, ProjectStatus.ON_TRACK),
        (80, ProjectStatus.ON_TRACK),
        (79, ProjectStatus.AT_RISK),
        (60, ProjectStatus.AT_RISK),
        (59, ProjectStatus.CRITICAL),
        (0, ProjectStatus.CRITICAL),
    ])
    def test_default_thresholds(self, score, expected):
        assert classify_status(score) is expected

    def test_custom_thresholds(self):
        thresholds = StatusThresholdsConfig(on_track=90, at_risk=70)
        assert classify_status(85, thresholds) is ProjectStatus.AT_RISK
        assert classify_status(65, thresholds) is ProjectStatus.CRITICAL
