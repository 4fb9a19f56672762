"""Configuration loading, validation, and defaults."""

from pulse.config.loader import load_config
from pulse.config.schema import PulseConfig, ScoringWeights

__all__ = ["load_config", "PulseConfig", "ScoringWeights"]
