"""Status transitions and their side effects.

The status state machine has four states; ON_TRACK, AT_RISK and CRITICAL are
derived from the score on every recalculation, COMPLETED is terminal and is
only entered through an explicit completion action.

A transition produces exactly one activity-log entry and one notification
for the project's administrator.  ``apply_health_update`` writes them with
the score/status update; the caller owns the surrounding transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pulse.config.schema import StatusThresholdsConfig
from pulse.engine.composite import classify_status
from pulse.engine.context import HealthStore
from pulse.models import (
    ActivityEntry,
    ActivityType,
    NotificationRecord,
    NotificationType,
    Project,
    ProjectStatus,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HealthUpdate:
    """The writes one recalculation will make."""

    project_id: int
    health_score: int
    previous_status: ProjectStatus
    new_status: ProjectStatus
    activity: ActivityEntry | None = None
    notification: NotificationRecord | None = None

    @property
    def status_changed(self) -> bool:
        return self.new_status != self.previous_status


def project_link(project_id: int) -> str:
    return f"/admin/projects/{project_id}"


def make_status_change_activity(
    project: Project, old: ProjectStatus, new: ProjectStatus, score: int
) -> ActivityEntry:
    return ActivityEntry(
        project_id=project.id,
        user_id=project.admin_id,
        type=ActivityType.PROJECT_STATUS_CHANGED,
        title=f"Status changed to {new.value}",
        description=(
            f"Health score: {score}. Status automatically updated "
            f"from {old.value} to {new.value}."
        ),
    )


def make_status_change_notification(
    project: Project, old: ProjectStatus, new: ProjectStatus, score: int
) -> NotificationRecord:
    return NotificationRecord(
        user_id=project.admin_id,
        title="Project Status Changed",
        message=(
            f'Project "{project.name}" status changed from {old.value} '
            f"to {new.value} (health score {score})"
        ),
        type=NotificationType.STATUS_CHANGE,
        link=project_link(project.id),
    )


def plan_transition(
    project: Project,
    health_score: int,
    thresholds: StatusThresholdsConfig | None = None,
) -> HealthUpdate:
    """Decide what a new score means for the project's status.

    COMPLETED projects keep their status; only the score is updated.
    """
    current = ProjectStatus(project.status)
    if current is ProjectStatus.COMPLETED:
        return HealthUpdate(project.id, health_score, current, current)

    new = classify_status(health_score, thresholds)
    if new is current:
        return HealthUpdate(project.id, health_score, current, current)

    return HealthUpdate(
        project_id=project.id,
        health_score=health_score,
        previous_status=current,
        new_status=new,
        activity=make_status_change_activity(project, current, new, health_score),
        notification=make_status_change_notification(project, current, new, health_score),
    )


def apply_health_update(store: HealthStore, update: HealthUpdate) -> None:
    """Persist the score, and on a transition the status plus side effects.

    Must run inside ``store.transaction()``.
    """
    if not update.status_changed:
        store.update_project_health(update.project_id, update.health_score)
        logger.debug(
            "Project %s score=%d, status unchanged (%s)",
            update.project_id, update.health_score, update.new_status.value,
        )
        return

    store.update_project_health(
        update.project_id, update.health_score, update.new_status.value
    )
    if update.activity is not None:
        store.append_activity(update.activity)
    if update.notification is not None:
        store.append_notification(update.notification)
    logger.info(
        "Project %s status %s -> %s (score=%d)",
        update.project_id, update.previous_status.value,
        update.new_status.value, update.health_score,
    )
