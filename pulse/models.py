"""Domain records shared by the engine, the store and the event handlers.

Rows come back from SQLite as ``sqlite3.Row``; the ``from_row`` helpers turn
them into these dataclasses so the engine never touches storage types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ProjectStatus(str, Enum):
    """Project status. COMPLETED is terminal and never derived from a score."""
    ON_TRACK = "ON_TRACK"
    AT_RISK = "AT_RISK"
    CRITICAL = "CRITICAL"
    COMPLETED = "COMPLETED"


class RiskSeverity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class RiskStatus(str, Enum):
    OPEN = "OPEN"
    RESOLVED = "RESOLVED"


class Role(str, Enum):
    ADMIN = "ADMIN"
    EMPLOYEE = "EMPLOYEE"
    CLIENT = "CLIENT"


class ActivityType(str, Enum):
    CHECK_IN_SUBMITTED = "CHECK_IN_SUBMITTED"
    FEEDBACK_SUBMITTED = "FEEDBACK_SUBMITTED"
    RISK_CREATED = "RISK_CREATED"
    RISK_RESOLVED = "RISK_RESOLVED"
    PROJECT_STATUS_CHANGED = "PROJECT_STATUS_CHANGED"
    PROJECT_CREATED = "PROJECT_CREATED"
    PROJECT_COMPLETED = "PROJECT_COMPLETED"


class NotificationType(str, Enum):
    STATUS_CHANGE = "STATUS_CHANGE"
    LOW_CONFIDENCE = "LOW_CONFIDENCE"
    ISSUE_FLAGGED = "ISSUE_FLAGGED"
    HIGH_RISK = "HIGH_RISK"


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass
class Project:
    """A tracked project. Only ``status`` and ``health_score`` are engine-owned."""

    id: int
    name: str
    status: ProjectStatus
    health_score: int
    start_date: date
    end_date: date
    admin_id: int
    client_id: int | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Project:
        return cls(
            id=row["id"],
            name=row["name"],
            status=ProjectStatus(row["status"]),
            health_score=int(row["health_score"]),
            start_date=_parse_date(row["start_date"]),
            end_date=_parse_date(row["end_date"]),
            admin_id=row["admin_id"],
            client_id=row["client_id"],
        )


@dataclass(frozen=True)
class CheckIn:
    """Weekly employee check-in. Immutable once created."""

    project_id: int
    employee_id: int
    confidence_level: int  # 1-5
    completion_percent: int  # 0-100
    week_number: int = 0
    year: int = 0
    progress_summary: str = ""
    blockers: str | None = None
    created_at: datetime | None = None
    id: int | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> CheckIn:
        return cls(
            id=row["id"],
            project_id=row["project_id"],
            employee_id=row["employee_id"],
            confidence_level=row["confidence_level"],
            completion_percent=row["completion_percent"],
            week_number=row["week_number"],
            year=row["year"],
            progress_summary=row["progress_summary"],
            blockers=row["blockers"],
            created_at=_parse_datetime(row["created_at"]),
        )


@dataclass(frozen=True)
class Feedback:
    """Weekly client feedback. Immutable once created."""

    project_id: int
    client_id: int
    satisfaction_rating: int  # 1-5
    flagged_issue: bool = False
    communication_clarity: int = 3
    week_number: int = 0
    year: int = 0
    comments: str | None = None
    created_at: datetime | None = None
    id: int | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Feedback:
        return cls(
            id=row["id"],
            project_id=row["project_id"],
            client_id=row["client_id"],
            satisfaction_rating=row["satisfaction_rating"],
            flagged_issue=bool(row["flagged_issue"]),
            communication_clarity=row["communication_clarity"],
            week_number=row["week_number"],
            year=row["year"],
            comments=row["comments"],
            created_at=_parse_datetime(row["created_at"]),
        )


@dataclass
class Risk:
    """Project risk. Severity and status change over its lifetime."""

    project_id: int
    title: str
    severity: RiskSeverity
    status: RiskStatus = RiskStatus.OPEN
    created_by_id: int | None = None
    description: str | None = None
    mitigation_plan: str | None = None
    resolved_at: datetime | None = None
    created_at: datetime | None = None
    id: int | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Risk:
        return cls(
            id=row["id"],
            project_id=row["project_id"],
            title=row["title"],
            severity=RiskSeverity(row["severity"]),
            status=RiskStatus(row["status"]),
            created_by_id=row["created_by_id"],
            description=row["description"],
            mitigation_plan=row["mitigation_plan"],
            resolved_at=_parse_datetime(row["resolved_at"]),
            created_at=_parse_datetime(row["created_at"]),
        )


@dataclass(frozen=True)
class ActivityEntry:
    """Append-only audit record."""

    project_id: int
    user_id: int
    type: ActivityType
    title: str
    description: str = ""


@dataclass(frozen=True)
class NotificationRecord:
    """Append-only notification addressed to one user."""

    user_id: int
    title: str
    message: str
    type: NotificationType
    link: str | None = None
