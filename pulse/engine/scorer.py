"""recalculate_health_score() -- central orchestrator for one project.

Recomputes a project's health score by:
  1. Reading recent feedback, recent check-ins and open risks
  2. Computing the 4 sub-scores (satisfaction, confidence, schedule, risk)
  3. Composing the weighted integer score (NaN-safe)
  4. Classifying the status (COMPLETED is sticky)
  5. Persisting score/status plus transition side effects

Steps 1-5 run inside a single ``store.transaction()``.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import TypedDict

from pulse.config.schema import PulseConfig
from pulse.engine.composite import compose_health_score
from pulse.engine.context import HealthStore
from pulse.engine.readers import read_project_signals
from pulse.engine.subscores import SubScores, calc_sub_scores
from pulse.engine.transitions import apply_health_update, plan_transition
from pulse.errors import PersistenceError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Type definitions
# ---------------------------------------------------------------------------

class HealthResult(TypedDict, total=False):
    """Return type for score_project()."""
    project_id: int
    found: bool
    health_score: int
    sub_scores: SubScores
    previous_status: str
    status: str
    status_changed: bool


# ---------------------------------------------------------------------------
# Main scoring functions
# ---------------------------------------------------------------------------

def score_project(
    store: HealthStore,
    project_id: int,
    config: PulseConfig | None = None,
    now: date | datetime | None = None,
) -> HealthResult:
    """Recalculate and persist a project's health, returning the breakdown.

    Parameters:
        store: Injected data-access interface.
        project_id: Project to recalculate.
        config: PulseConfig (optional). When None, uses defaults.
        now: Reference time for schedule adherence. Defaults to today.

    A missing project is a tolerated no-op: ``found=False`` with the
    fallback score and no writes.

    Raises PersistenceError if anything inside the transaction fails; the
    transaction is rolled back first.
    """
    config = config or PulseConfig()
    weights = config.scoring

    try:
        with store.transaction():
            signals = read_project_signals(store, project_id, weights.signal_window)
            if signals is None:
                return HealthResult(
                    project_id=project_id,
                    found=False,
                    health_score=weights.fallback_score,
                    status_changed=False,
                )

            project = signals.project
            sub_scores = calc_sub_scores(
                signals.feedback,
                signals.check_ins,
                signals.open_risks,
                project.start_date,
                project.end_date,
                now=now,
                weights=weights,
            )
            score = compose_health_score(sub_scores, weights, project_id=project_id)
            update = plan_transition(project, score, config.thresholds)
            apply_health_update(store, update)
    except PersistenceError:
        raise
    except Exception as e:
        logger.error("Health recalculation for project %s failed: %s", project_id, e)
        raise PersistenceError(project_id, e) from e

    logger.debug("Project %s sub-scores: %s -> %d", project_id, dict(sub_scores), score)
    return HealthResult(
        project_id=project_id,
        found=True,
        health_score=score,
        sub_scores=sub_scores,
        previous_status=update.previous_status.value,
        status=update.new_status.value,
        status_changed=update.status_changed,
    )


def recalculate_health_score(
    store: HealthStore,
    project_id: int,
    config: PulseConfig | None = None,
    now: date | datetime | None = None,
) -> int:
    """Recalculate a project's health score. Returns an int in [0, 100].

    Call after check-in creation, feedback creation, and risk creation,
    update or deletion.
    """
    return score_project(store, project_id, config, now)["health_score"]
