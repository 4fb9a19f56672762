"""Signal readers: fetch the records one recalculation needs."""

from __future__ import annotations

import logging

from pulse.engine.context import HealthStore, ProjectSignals

logger = logging.getLogger(__name__)


def read_project_signals(
    store: HealthStore,
    project_id: int,
    window: int,
) -> ProjectSignals | None:
    """Read the project, its recent feedback/check-ins and its open risks.

    The store owns the window limit and the OPEN filter.  Returns None
    when the project does not exist.
    """
    project = store.get_project(project_id)
    if project is None:
        logger.warning("Project %s not found; skipping signal read", project_id)
        return None

    feedback = store.recent_feedback(project_id, window)
    check_ins = store.recent_check_ins(project_id, window)
    risks = store.open_risks(project_id)

    logger.debug(
        "Project %s signals: %d feedback, %d check-ins, %d open risks",
        project_id, len(feedback), len(check_ins), len(risks),
    )
    return ProjectSignals(
        project=project,
        feedback=feedback,
        check_ins=check_ins,
        open_risks=risks,
    )
