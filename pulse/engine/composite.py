"""Health score composition and status classification.

Functions:
  round_half_up         -- Integer rounding with .5 always rounding up
  compose_health_score  -- Weighted sum of the 4 sub-scores -> int in [0, 100]
  classify_status       -- Score -> ON_TRACK / AT_RISK / CRITICAL
"""

from __future__ import annotations

import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Mapping

import numpy as np

from pulse.config.schema import ScoringWeights, StatusThresholdsConfig
from pulse.models import ProjectStatus

logger = logging.getLogger(__name__)

_COMPONENTS = ("satisfaction", "confidence", "schedule", "risk")


# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------

def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero.

    Trims binary noise first so that 65.49999999999999 (a float artefact of
    65.5) still rounds to 66.
    """
    return int(Decimal(repr(round(value, 6))).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Health Score Composition
# ---------------------------------------------------------------------------

def compose_health_score(
    sub_scores: Mapping[str, float],
    weights: ScoringWeights | None = None,
    project_id: Any = None,
) -> int:
    """Compute the final health score from weighted sub-scores.

    sub_scores: {"satisfaction": 60, "confidence": 60, "schedule": 50, "risk": 100}
    weights: component weights 0.30 / 0.25 / 0.25 / 0.20 by default

    Returns an int in [0, 100].  A non-finite result falls back to the
    configured fallback score (100) and is logged; it is never raised.
    """
    weights = weights or ScoringWeights()
    w = weights.weights.as_dict()

    values = np.array([sub_scores.get(k, np.nan) for k in _COMPONENTS], dtype=float)
    coefs = np.array([w[k] for k in _COMPONENTS], dtype=float)
    raw = float(np.dot(values, coefs))

    if not math.isfinite(raw):
        logger.error(
            "Health score for project %s evaluated to %r; falling back to %d. Components: %s",
            project_id, raw, weights.fallback_score, dict(sub_scores),
        )
        return weights.fallback_score

    return max(0, min(100, round_half_up(raw)))


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------

def classify_status(
    score: float,
    thresholds: StatusThresholdsConfig | None = None,
) -> ProjectStatus:
    """Classify a health score into a project status.

    Default thresholds:
      >= 80: ON_TRACK
      >= 60: AT_RISK
      <  60: CRITICAL

    COMPLETED is never produced here; only explicit completion sets it.
    """
    thresholds = thresholds or StatusThresholdsConfig()

    if score >= thresholds.on_track:
        return ProjectStatus.ON_TRACK
    if score >= thresholds.at_risk:
        return ProjectStatus.AT_RISK
    return ProjectStatus.CRITICAL
