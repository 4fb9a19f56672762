"""Business events that feed the health engine.

Each handler validates its input, commits the event (record + activity log
+ any alert notification) in its own transaction, and then recalculates the
project's health.  A failed recalculation is logged and reported on the
returned ``EventOutcome``; the committed event is never rolled back.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from pulse.config.schema import PulseConfig
from pulse.engine.scorer import HealthResult, score_project
from pulse.engine.transitions import project_link
from pulse.errors import (
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from pulse.models import (
    ActivityType,
    NotificationType,
    ProjectStatus,
    RiskSeverity,
    RiskStatus,
)
from pulse.storage import queries
from pulse.storage.database import Database
from pulse.storage.store import SqliteHealthStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------

@dataclass
class EventOutcome:
    """Result of an event handler."""

    record_id: int
    health: HealthResult | None = None
    recalc_error: str | None = None

    @property
    def health_score(self) -> int | None:
        return self.health["health_score"] if self.health else None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def current_week(now: date | datetime | None = None) -> tuple[int, int]:
    """ISO (week_number, year) for ``now``; weekly uniqueness keys on this."""
    today = now.date() if isinstance(now, datetime) else (now or date.today())
    iso = today.isocalendar()
    return iso[1], iso[0]


def _require_range(field: str, value: Any, low: int, high: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise ValidationError(
            f"{field.replace('_', ' ').capitalize()} must be between {low} and {high}",
            details={field: value},
        )
    return value


def _require_text(field: str, value: str | None) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field.replace('_', ' ').capitalize()} is required",
                              details={field: value})
    return str(value).strip()


def _require_choice(field: str, value: Any, enum_cls: type) -> str:
    try:
        return enum_cls(str(value).upper()).value
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(
            f"{field.replace('_', ' ').capitalize()} must be one of {allowed}",
            details={field: value},
        ) from None


def _require_project(db: Database, project_id: int) -> dict[str, Any]:
    project = queries.get_project(db, project_id)
    if project is None:
        raise NotFoundError("Project", project_id)
    return project


def _user_name(db: Database, user_id: int) -> str:
    user = queries.get_user(db, user_id)
    return user["name"] if user else f"User {user_id}"


def _recalculate(
    db: Database,
    project_id: int,
    event: str,
    config: PulseConfig | None,
    now: date | datetime | None,
) -> tuple[HealthResult | None, str | None]:
    """Run the engine after an event; report rather than raise failures."""
    try:
        return score_project(SqliteHealthStore(db), project_id, config, now), None
    except PersistenceError as e:
        logger.error("Recalculation after %s on project %s failed: %s", event, project_id, e)
        return None, str(e)


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

def create_project(
    db: Database,
    name: str,
    start_date: date,
    end_date: date,
    admin_id: int,
    *,
    client_id: int | None = None,
    description: str | None = None,
    employee_ids: list[int] | None = None,
) -> int:
    """Create a project at full health (100, ON_TRACK). Returns its ID."""
    name = _require_text("name", name)
    if end_date < start_date:
        raise ValidationError(
            "End date must not be before start date",
            details={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
        )

    with db.transaction():
        project_id = queries.insert_project(
            db, name, start_date, end_date, admin_id,
            client_id=client_id, description=description,
        )
        for employee_id in employee_ids or []:
            queries.assign_employee(db, project_id, employee_id)
        queries.insert_activity(
            db, project_id, admin_id, ActivityType.PROJECT_CREATED.value,
            f"Project created: {name}",
            f"Runs {start_date.isoformat()} to {end_date.isoformat()}",
        )
    logger.info("Created project %s (%s)", project_id, name)
    return project_id


def complete_project(db: Database, project_id: int, user_id: int | None = None) -> bool:
    """Mark a project COMPLETED. Returns False if it already was.

    COMPLETED is terminal: later recalculations update the score only.
    """
    project = _require_project(db, project_id)
    if project["status"] == ProjectStatus.COMPLETED.value:
        return False

    with db.transaction():
        queries.set_project_status(db, project_id, ProjectStatus.COMPLETED.value)
        queries.insert_activity(
            db, project_id, user_id or project["admin_id"],
            ActivityType.PROJECT_COMPLETED.value,
            "Project completed",
            f"Status changed from {project['status']} to COMPLETED "
            f"with health score {project['health_score']}.",
        )
    logger.info("Project %s marked COMPLETED", project_id)
    return True


# ---------------------------------------------------------------------------
# Check-ins
# ---------------------------------------------------------------------------

def submit_check_in(
    db: Database,
    project_id: int,
    employee_id: int,
    confidence_level: int,
    completion_percent: int,
    progress_summary: str,
    blockers: str | None = None,
    config: PulseConfig | None = None,
    now: date | datetime | None = None,
) -> EventOutcome:
    """Record an employee's weekly check-in, then recalculate health.

    Raises ValidationError for out-of-range input, NotFoundError for an
    unknown project, ConflictError for a second check-in in the same week.
    """
    config = config or PulseConfig()
    progress_summary = _require_text("progress_summary", progress_summary)
    _require_range("confidence_level", confidence_level, 1, 5)
    _require_range("completion_percent", completion_percent, 0, 100)
    project = _require_project(db, project_id)
    week_number, year = current_week(now)

    try:
        with db.transaction(immediate=True):
            if queries.find_check_in_for_week(db, project_id, employee_id, week_number, year):
                raise ConflictError("CheckIn", "week", f"{year}-W{week_number:02d}")
            check_in_id = queries.insert_check_in(
                db, project_id, employee_id, week_number, year,
                confidence_level, completion_percent, progress_summary, blockers,
            )
            queries.insert_activity(
                db, project_id, employee_id, ActivityType.CHECK_IN_SUBMITTED.value,
                f"{_user_name(db, employee_id)} submitted a check-in",
                f"Confidence: {confidence_level}/5, Completion: {completion_percent}%",
            )
            alerts = config.alerts
            if alerts.notify_low_confidence and confidence_level <= alerts.low_confidence_max:
                queries.insert_notification(
                    db, project["admin_id"], "Low Confidence Alert",
                    f"Low confidence ({confidence_level}/5) reported on {project['name']}",
                    NotificationType.LOW_CONFIDENCE.value, project_link(project_id),
                )
    except sqlite3.IntegrityError as e:
        if "UNIQUE" not in str(e):
            raise
        raise ConflictError("CheckIn", "week", f"{year}-W{week_number:02d}") from e

    health, error = _recalculate(db, project_id, "check-in", config, now)
    return EventOutcome(check_in_id, health, error)


# ---------------------------------------------------------------------------
# Feedback
# ---------------------------------------------------------------------------

def submit_feedback(
    db: Database,
    project_id: int,
    client_id: int,
    satisfaction_rating: int,
    communication_clarity: int,
    comments: str | None = None,
    flagged_issue: bool = False,
    config: PulseConfig | None = None,
    now: date | datetime | None = None,
) -> EventOutcome:
    """Record a client's weekly feedback, then recalculate health."""
    config = config or PulseConfig()
    _require_range("satisfaction_rating", satisfaction_rating, 1, 5)
    _require_range("communication_clarity", communication_clarity, 1, 5)
    project = _require_project(db, project_id)
    week_number, year = current_week(now)

    try:
        with db.transaction(immediate=True):
            if queries.find_feedback_for_week(db, project_id, client_id, week_number, year):
                raise ConflictError("Feedback", "week", f"{year}-W{week_number:02d}")
            feedback_id = queries.insert_feedback(
                db, project_id, client_id, week_number, year,
                satisfaction_rating, communication_clarity, comments, bool(flagged_issue),
            )
            queries.insert_activity(
                db, project_id, client_id, ActivityType.FEEDBACK_SUBMITTED.value,
                "Client feedback submitted",
                f"Satisfaction: {satisfaction_rating}/5, "
                f"Communication: {communication_clarity}/5",
            )
            if flagged_issue and config.alerts.notify_flagged_issue:
                queries.insert_notification(
                    db, project["admin_id"], "Issue Flagged",
                    f"Issue flagged on {project['name']}",
                    NotificationType.ISSUE_FLAGGED.value, project_link(project_id),
                )
    except sqlite3.IntegrityError as e:
        if "UNIQUE" not in str(e):
            raise
        raise ConflictError("Feedback", "week", f"{year}-W{week_number:02d}") from e

    health, error = _recalculate(db, project_id, "feedback", config, now)
    return EventOutcome(feedback_id, health, error)


# ---------------------------------------------------------------------------
# Risks
# ---------------------------------------------------------------------------

def create_risk(
    db: Database,
    project_id: int,
    title: str,
    severity: str,
    *,
    created_by_id: int | None = None,
    description: str | None = None,
    mitigation_plan: str | None = None,
    status: str = RiskStatus.OPEN.value,
    config: PulseConfig | None = None,
    now: date | datetime | None = None,
) -> EventOutcome:
    """Record a new risk, then recalculate health."""
    config = config or PulseConfig()
    title = _require_text("title", title)
    severity = _require_choice("severity", severity, RiskSeverity)
    status = _require_choice("status", status, RiskStatus)
    project = _require_project(db, project_id)
    author_id = created_by_id or project["admin_id"]

    with db.transaction():
        risk_id = queries.insert_risk(
            db, project_id, title, severity,
            created_by_id=created_by_id, description=description,
            mitigation_plan=mitigation_plan, status=status,
        )
        queries.insert_activity(
            db, project_id, author_id, ActivityType.RISK_CREATED.value,
            f"Risk created: {title}", f"Severity: {severity}",
        )
        if severity == RiskSeverity.HIGH.value and config.alerts.notify_high_risk:
            queries.insert_notification(
                db, project["admin_id"], "High Severity Risk",
                f"High severity risk created on {project['name']}: {title}",
                NotificationType.HIGH_RISK.value, project_link(project_id),
            )

    health, error = _recalculate(db, project_id, "risk creation", config, now)
    return EventOutcome(risk_id, health, error)


def update_risk(
    db: Database,
    project_id: int,
    risk_id: int,
    *,
    user_id: int | None = None,
    title: str | None = None,
    description: str | None = None,
    severity: str | None = None,
    mitigation_plan: str | None = None,
    status: str | None = None,
    config: PulseConfig | None = None,
    now: date | datetime | None = None,
) -> EventOutcome:
    """Update a risk's fields, then recalculate health.

    Resolving stamps ``resolved_at``; reopening clears it.
    """
    current = queries.get_risk(db, risk_id)
    if current is None or current["project_id"] != project_id:
        raise NotFoundError("Risk", risk_id)

    fields: dict[str, Any] = {}
    if title is not None:
        fields["title"] = _require_text("title", title)
    if description is not None:
        fields["description"] = description
    if severity is not None:
        fields["severity"] = _require_choice("severity", severity, RiskSeverity)
    if mitigation_plan is not None:
        fields["mitigation_plan"] = mitigation_plan

    newly_resolved = False
    if status is not None:
        fields["status"] = _require_choice("status", status, RiskStatus)
        if fields["status"] == RiskStatus.RESOLVED.value and current["status"] != RiskStatus.RESOLVED.value:
            stamp = now if isinstance(now, datetime) else datetime.now()
            fields["resolved_at"] = stamp.isoformat(timespec="seconds")
            newly_resolved = True
        elif fields["status"] == RiskStatus.OPEN.value:
            fields["resolved_at"] = None

    with db.transaction():
        queries.update_risk(db, risk_id, **fields)
        if newly_resolved:
            project = _require_project(db, project_id)
            queries.insert_activity(
                db, project_id, user_id or project["admin_id"],
                ActivityType.RISK_RESOLVED.value,
                f"Risk resolved: {fields.get('title', current['title'])}",
                "Risk was marked as resolved",
            )

    health, error = _recalculate(db, project_id, "risk update", config, now)
    return EventOutcome(risk_id, health, error)


def delete_risk(
    db: Database,
    project_id: int,
    risk_id: int,
    config: PulseConfig | None = None,
    now: date | datetime | None = None,
) -> EventOutcome:
    """Delete a risk, then recalculate health."""
    current = queries.get_risk(db, risk_id)
    if current is None or current["project_id"] != project_id:
        raise NotFoundError("Risk", risk_id)

    with db.transaction():
        queries.delete_risk(db, risk_id)

    health, error = _recalculate(db, project_id, "risk deletion", config, now)
    return EventOutcome(risk_id, health, error)
