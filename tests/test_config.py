"""Tests for the configuration system."""

from __future__ import annotations

import pytest
import yaml
from pydantic import ValidationError

from pulse.config.defaults import (
    COMPONENT_WEIGHTS,
    RISK_PENALTIES,
    SIGNAL_WINDOW,
    STATUS_THRESHOLDS,
    SUB_SCORE_DEFAULTS,
)
from pulse.config.loader import _expand_env_vars, load_config
from pulse.config.schema import PulseConfig, ScoringWeights, StatusThresholdsConfig


class TestDefaults:
    """Verify the calibrated defaults."""

    def test_component_weights_sum_to_1(self):
        assert abs(sum(COMPONENT_WEIGHTS.values()) - 1.0) < 1e-9

    def test_risk_penalties_ordered(self):
        assert RISK_PENALTIES["HIGH"] > RISK_PENALTIES["MEDIUM"] > RISK_PENALTIES["LOW"] > 0

    def test_status_thresholds_ordered(self):
        assert STATUS_THRESHOLDS["on_track"] > STATUS_THRESHOLDS["at_risk"]

    def test_signal_window(self):
        assert SIGNAL_WINDOW == 4

    def test_sub_score_defaults(self):
        assert SUB_SCORE_DEFAULTS == {
            "satisfaction": 60, "confidence": 60, "schedule": 50, "risk": 100,
        }


class TestSchema:
    """Test pydantic validation."""

    def test_empty_config_uses_defaults(self):
        config = PulseConfig()
        assert config.scoring.signal_window == 4
        assert config.scoring.weights.satisfaction == 0.30
        assert config.thresholds.on_track == 80
        assert config.alerts.low_confidence_max == 2

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValidationError, match="sum to 1.0"):
            ScoringWeights(weights={"satisfaction": 0.5, "confidence": 0.5,
                                    "schedule": 0.5, "risk": 0.5})

    def test_negative_weight_rejected(self):
        with pytest.raises(ValidationError):
            ScoringWeights(weights={"satisfaction": 1.2, "confidence": -0.2,
                                    "schedule": 0.0, "risk": 0.0})

    def test_window_must_be_positive(self):
        with pytest.raises(ValidationError):
            ScoringWeights(signal_window=0)

    def test_thresholds_must_be_ordered(self):
        with pytest.raises(ValidationError):
            StatusThresholdsConfig(on_track=50, at_risk=70)

    def test_negative_penalty_rejected(self):
        with pytest.raises(ValidationError):
            ScoringWeights(risk_penalties={"HIGH": -1})

    def test_none_sections_use_defaults(self):
        config = PulseConfig.model_validate({"scoring": None, "alerts": None})
        assert config.scoring.signal_window == 4
        assert config.alerts.notify_high_risk is True

    def test_alternate_scheme(self):
        config = PulseConfig.model_validate({
            "scoring": {"signal_window": 10, "risk_penalties": {"HIGH": 20}},
        })
        assert config.scoring.signal_window == 10
        assert config.scoring.risk_penalties.HIGH == 20
        assert config.scoring.risk_penalties.MEDIUM == 8


class TestEnvExpansion:
    def test_simple(self, monkeypatch):
        monkeypatch.setenv("PULSE_DB", "/tmp/pulse.db")
        assert _expand_env_vars("${PULSE_DB}") == "/tmp/pulse.db"

    def test_nested(self, monkeypatch):
        monkeypatch.setenv("PULSE_HOME", "/srv")
        data = {"database": {"path": "${PULSE_HOME}/pulse.db"}, "tags": ["${PULSE_HOME}"]}
        assert _expand_env_vars(data) == {
            "database": {"path": "/srv/pulse.db"}, "tags": ["/srv"],
        }

    def test_missing_var_is_empty(self, monkeypatch):
        monkeypatch.delenv("PULSE_NOT_SET", raising=False)
        assert _expand_env_vars("a${PULSE_NOT_SET}b") == "ab"

    def test_non_strings_untouched(self):
        assert _expand_env_vars(42) == 42

    def test_fallback(self, monkeypatch):
        monkeypatch.delenv("PULSE_NOT_SET", raising=False)
        monkeypatch.setenv("PULSE_SET", "x")
        assert _expand_env_vars("${PULSE_NOT_SET:-/var/pulse}") == "/var/pulse"
        assert _expand_env_vars("${PULSE_SET:-/var/pulse}") == "x"


class TestLoader:
    def test_load_from_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PULSE_TEST_DIR", str(tmp_path))
        path = tmp_path / "pulse.yaml"
        path.write_text(yaml.safe_dump({
            "version": 1,
            "thresholds": {"on_track": 85, "at_risk": 65},
            "database": {"path": "${PULSE_TEST_DIR}/x.db"},
        }))
        config = load_config(path)
        assert config.thresholds.on_track == 85
        assert config.database.path == f"{tmp_path}/x.db"

    def test_missing_explicit_file_uses_defaults(self, tmp_path):
        config = load_config(tmp_path / "nope.yaml")
        assert config == PulseConfig()

    def test_empty_file(self, tmp_path):
        path = tmp_path / "pulse.yaml"
        path.write_text("")
        assert load_config(path).scoring.signal_window == 4

    def test_invalid_file_raises(self, tmp_path):
        path = tmp_path / "pulse.yaml"
        path.write_text(yaml.safe_dump({"thresholds": {"on_track": 10, "at_risk": 90}}))
        with pytest.raises(ValidationError):
            load_config(path)

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "pulse.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config(path)

    def test_overrides_merge(self, tmp_path):
        path = tmp_path / "pulse.yaml"
        path.write_text(yaml.safe_dump({"scoring": {"signal_window": 6}}))
        config = load_config(path, overrides={"scoring": {"fallback_score": 90}})
        assert config.scoring.signal_window == 6
        assert config.scoring.fallback_score == 90

    def test_db_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PULSE_DB", str(tmp_path / "env.db"))
        config = load_config(tmp_path / "nope.yaml")
        assert config.database.path == str(tmp_path / "env.db")

    def test_pulse_home_search(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        home = tmp_path / "home"
        home.mkdir()
        (home / "config.yaml").write_text(yaml.safe_dump({"thresholds": {"on_track": 90}}))
        monkeypatch.setenv("PULSE_HOME", str(home))
        assert load_config().thresholds.on_track == 90
