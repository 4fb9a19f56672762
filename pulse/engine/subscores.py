"""Health sub-score calculators.

Four sub-scores, each on a 0-100 scale, compose the project health score:
  - satisfaction: Client satisfaction from recent feedback (30%)
  - confidence:   Employee confidence from recent check-ins (25%)
  - schedule:     Reported completion vs linear timeline (25%)
  - risk:         Open risks and flagged issues (20%)

Every calculator returns its configured neutral default when it has no
input, and never returns NaN or a value outside [0, 100].
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, time
from typing import Sequence, TypedDict

import numpy as np

from pulse.config.defaults import RATING_RESCALE_FACTOR, RATING_SCALE
from pulse.config.schema import ScoringWeights
from pulse.models import CheckIn, Feedback, Risk, RiskSeverity

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Type definitions
# ---------------------------------------------------------------------------

class SubScores(TypedDict):
    """The four component scores, 0-100 each."""
    satisfaction: float
    confidence: float
    schedule: float
    risk: float


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamp to [low, high]. NaN passes through for the caller to replace."""
    if math.isnan(value):
        return value
    return max(low, min(high, value))


def rescale_rating(avg_rating: float) -> float:
    """Map an average 1-5 rating onto 0-100: (avg - 1) * 25."""
    return clamp((avg_rating - RATING_SCALE["min"]) * RATING_RESCALE_FACTOR)


def _finite_or_default(name: str, value: float, default: float) -> float:
    """Substitute ``default`` for a NaN/infinite sub-score and log it."""
    if math.isfinite(value):
        return value
    logger.warning("Sub-score %s evaluated to %r; using default %.1f", name, value, default)
    return default


def _as_datetime(value: date | datetime) -> datetime:
    """Date-only values are taken as midnight."""
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


# ---------------------------------------------------------------------------
# Client satisfaction (30%)
# ---------------------------------------------------------------------------

def calc_client_satisfaction(
    feedback: Sequence[Feedback],
    weights: ScoringWeights | None = None,
) -> float:
    """Mean satisfaction rating of recent feedback, rescaled to 0-100.

    Returns the satisfaction default (60) when there is no feedback.
    """
    weights = weights or ScoringWeights()
    default = weights.defaults.satisfaction
    if not feedback:
        return default

    avg = float(np.mean([fb.satisfaction_rating for fb in feedback]))
    return _finite_or_default("satisfaction", rescale_rating(avg), default)


# ---------------------------------------------------------------------------
# Employee confidence (25%)
# ---------------------------------------------------------------------------

def calc_employee_confidence(
    check_ins: Sequence[CheckIn],
    weights: ScoringWeights | None = None,
) -> float:
    """Mean confidence level of recent check-ins, rescaled to 0-100.

    Returns the confidence default (60) when there are no check-ins.
    """
    weights = weights or ScoringWeights()
    default = weights.defaults.confidence
    if not check_ins:
        return default

    avg = float(np.mean([ci.confidence_level for ci in check_ins]))
    return _finite_or_default("confidence", rescale_rating(avg), default)


# ---------------------------------------------------------------------------
# Schedule adherence (25%)
# ---------------------------------------------------------------------------

def calc_expected_progress(
    start_date: date | datetime,
    end_date: date | datetime,
    now: date | datetime,
) -> float:
    """Expected completion percent from linear time elapsed.

    ``clamp(elapsed / total * 100, 0, 100)`` measured in seconds, with
    date-only bounds at midnight.  A project with no positive duration is
    expected to be complete (100).
    """
    start = _as_datetime(start_date)
    total = (_as_datetime(end_date) - start).total_seconds()
    if total <= 0:
        return 100.0
    elapsed = (_as_datetime(now) - start).total_seconds()
    return clamp(elapsed / total * 100)


def calc_schedule_adherence(
    latest_check_in: CheckIn | None,
    start_date: date | datetime,
    end_date: date | datetime,
    now: date | datetime | None = None,
    weights: ScoringWeights | None = None,
) -> float:
    """Compare reported completion against the linear-timeline expectation.

    On or ahead of schedule scores 100; each point behind costs one point,
    floored at 0.  Returns the schedule default (50) without a check-in.
    """
    weights = weights or ScoringWeights()
    default = weights.defaults.schedule
    if latest_check_in is None:
        return default

    expected = calc_expected_progress(start_date, end_date, now or datetime.now())
    actual = float(latest_check_in.completion_percent)
    shortfall = clamp(expected - actual)
    return _finite_or_default("schedule", 100.0 - shortfall, default)


# ---------------------------------------------------------------------------
# Risk exposure (20%)
# ---------------------------------------------------------------------------

def calc_risk_exposure(
    open_risks: Sequence[Risk],
    feedback: Sequence[Feedback],
    weights: ScoringWeights | None = None,
) -> float:
    """Start at 100, subtract severity penalties and flagged-issue penalties.

    ``open_risks`` is already filtered to OPEN by the store.  Defaults:
    HIGH -15, MEDIUM -8, LOW -3 per risk; -10 per flagged recent feedback.
    Floored at 0.
    """
    weights = weights or ScoringWeights()
    penalties = {
        RiskSeverity.HIGH: weights.risk_penalties.HIGH,
        RiskSeverity.MEDIUM: weights.risk_penalties.MEDIUM,
        RiskSeverity.LOW: weights.risk_penalties.LOW,
    }

    score = 100.0
    for risk in open_risks:
        score -= penalties.get(RiskSeverity(risk.severity), 0)

    flagged = sum(1 for fb in feedback if fb.flagged_issue)
    score -= flagged * weights.flagged_issue_penalty

    return _finite_or_default("risk", max(0.0, score), weights.defaults.risk)


# ---------------------------------------------------------------------------
# All four
# ---------------------------------------------------------------------------

def calc_sub_scores(
    feedback: Sequence[Feedback],
    check_ins: Sequence[CheckIn],
    open_risks: Sequence[Risk],
    start_date: date | datetime,
    end_date: date | datetime,
    now: date | datetime | None = None,
    weights: ScoringWeights | None = None,
) -> SubScores:
    """Compute all four sub-scores. ``check_ins`` must be most-recent-first."""
    weights = weights or ScoringWeights()
    latest = check_ins[0] if check_ins else None
    return SubScores(
        satisfaction=calc_client_satisfaction(feedback, weights),
        confidence=calc_employee_confidence(check_ins, weights),
        schedule=calc_schedule_adherence(latest, start_date, end_date, now, weights),
        risk=calc_risk_exposure(open_risks, feedback, weights),
    )
