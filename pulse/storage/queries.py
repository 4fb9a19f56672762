"""Named query functions for database operations.

Write functions do not commit. Callers group them inside
``Database.transaction()`` so that an event, or a health update with its
side effects, lands atomically.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pulse.storage.database import Database

# Most-recent-first; id breaks ties between rows written in the same instant.
_RECENT_FIRST = "ORDER BY created_at DESC, id DESC"


def _now() -> str:
    return datetime.now().isoformat(timespec="milliseconds")


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

def insert_user(db: Database, name: str, email: str, role: str) -> int:
    """Insert a user. Returns the user ID."""
    cursor = db.execute(
        "INSERT INTO users (name, email, role) VALUES (?, ?, ?)",
        (name, email, role),
    )
    return cursor.lastrowid or 0


def get_user(db: Database, user_id: int) -> dict[str, Any] | None:
    row = db.fetchone("SELECT * FROM users WHERE id = ?", (user_id,))
    return dict(row) if row else None


def list_users(db: Database, role: str | None = None) -> list[dict[str, Any]]:
    """List users, optionally filtered by role."""
    if role is not None:
        rows = db.fetchall("SELECT * FROM users WHERE role = ? ORDER BY name", (role,))
    else:
        rows = db.fetchall("SELECT * FROM users ORDER BY name")
    return [dict(r) for r in rows]


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

def insert_project(
    db: Database,
    name: str,
    start_date: date,
    end_date: date,
    admin_id: int,
    *,
    client_id: int | None = None,
    description: str | None = None,
    status: str = "ON_TRACK",
    health_score: int = 100,
) -> int:
    """Insert a project. Returns the project ID."""
    cursor = db.execute(
        """INSERT INTO projects (name, description, status, health_score,
            start_date, end_date, admin_id, client_id)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            name, description, status, health_score,
            start_date.isoformat(), end_date.isoformat(), admin_id, client_id,
        ),
    )
    return cursor.lastrowid or 0


def get_project(db: Database, project_id: int) -> dict[str, Any] | None:
    """Get a single project row."""
    row = db.fetchone("SELECT * FROM projects WHERE id = ?", (project_id,))
    return dict(row) if row else None


def list_projects(db: Database, status: str | None = None) -> list[dict[str, Any]]:
    """List projects, optionally filtered by status."""
    if status is not None:
        rows = db.fetchall(
            "SELECT * FROM projects WHERE status = ? ORDER BY name", (status,)
        )
    else:
        rows = db.fetchall("SELECT * FROM projects ORDER BY name")
    return [dict(r) for r in rows]


def update_project_health(
    db: Database,
    project_id: int,
    health_score: int,
    status: str | None = None,
) -> int:
    """Write the derived score, and the status when given. Returns rowcount."""
    if status is None:
        cursor = db.execute(
            "UPDATE projects SET health_score = ?, updated_at = ? WHERE id = ?",
            (health_score, _now(), project_id),
        )
    else:
        cursor = db.execute(
            "UPDATE projects SET health_score = ?, status = ?, updated_at = ? WHERE id = ?",
            (health_score, status, _now(), project_id),
        )
    return cursor.rowcount


def set_project_status(db: Database, project_id: int, status: str) -> int:
    cursor = db.execute(
        "UPDATE projects SET status = ?, updated_at = ? WHERE id = ?",
        (status, _now(), project_id),
    )
    return cursor.rowcount


def assign_employee(db: Database, project_id: int, employee_id: int) -> None:
    db.execute(
        """INSERT INTO project_employees (project_id, employee_id) VALUES (?, ?)
        ON CONFLICT(project_id, employee_id) DO NOTHING""",
        (project_id, employee_id),
    )


# ---------------------------------------------------------------------------
# Check-ins
# ---------------------------------------------------------------------------

def insert_check_in(
    db: Database,
    project_id: int,
    employee_id: int,
    week_number: int,
    year: int,
    confidence_level: int,
    completion_percent: int,
    progress_summary: str,
    blockers: str | None = None,
) -> int:
    """Insert a check-in. Returns the check-in ID."""
    cursor = db.execute(
        """INSERT INTO check_ins (project_id, employee_id, week_number, year,
            progress_summary, blockers, confidence_level, completion_percent, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            project_id, employee_id, week_number, year, progress_summary,
            blockers, confidence_level, completion_percent, _now(),
        ),
    )
    return cursor.lastrowid or 0


def find_check_in_for_week(
    db: Database, project_id: int, employee_id: int, week_number: int, year: int
) -> dict[str, Any] | None:
    row = db.fetchone(
        """SELECT * FROM check_ins
        WHERE project_id = ? AND employee_id = ? AND week_number = ? AND year = ?""",
        (project_id, employee_id, week_number, year),
    )
    return dict(row) if row else None


def list_recent_check_ins(
    db: Database, project_id: int, limit: int | None = None
) -> list[dict[str, Any]]:
    """Check-ins for a project, most recent first."""
    sql = f"SELECT * FROM check_ins WHERE project_id = ? {_RECENT_FIRST}"
    params: tuple = (project_id,)
    if limit is not None:
        sql += " LIMIT ?"
        params = (project_id, limit)
    return [dict(r) for r in db.fetchall(sql, params)]


# ---------------------------------------------------------------------------
# Feedback
# ---------------------------------------------------------------------------

def insert_feedback(
    db: Database,
    project_id: int,
    client_id: int,
    week_number: int,
    year: int,
    satisfaction_rating: int,
    communication_clarity: int,
    comments: str | None = None,
    flagged_issue: bool = False,
) -> int:
    """Insert a feedback record. Returns the feedback ID."""
    cursor = db.execute(
        """INSERT INTO feedback (project_id, client_id, week_number, year,
            satisfaction_rating, communication_clarity, comments, flagged_issue, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            project_id, client_id, week_number, year, satisfaction_rating,
            communication_clarity, comments, int(flagged_issue), _now(),
        ),
    )
    return cursor.lastrowid or 0


def find_feedback_for_week(
    db: Database, project_id: int, client_id: int, week_number: int, year: int
) -> dict[str, Any] | None:
    row = db.fetchone(
        """SELECT * FROM feedback
        WHERE project_id = ? AND client_id = ? AND week_number = ? AND year = ?""",
        (project_id, client_id, week_number, year),
    )
    return dict(row) if row else None


def list_recent_feedback(
    db: Database, project_id: int, limit: int | None = None
) -> list[dict[str, Any]]:
    """Feedback for a project, most recent first."""
    sql = f"SELECT * FROM feedback WHERE project_id = ? {_RECENT_FIRST}"
    params: tuple = (project_id,)
    if limit is not None:
        sql += " LIMIT ?"
        params = (project_id, limit)
    return [dict(r) for r in db.fetchall(sql, params)]


# ---------------------------------------------------------------------------
# Risks
# ---------------------------------------------------------------------------

def insert_risk(
    db: Database,
    project_id: int,
    title: str,
    severity: str,
    *,
    created_by_id: int | None = None,
    description: str | None = None,
    mitigation_plan: str | None = None,
    status: str = "OPEN",
) -> int:
    """Insert a risk. Returns the risk ID."""
    cursor = db.execute(
        """INSERT INTO risks (project_id, created_by_id, title, description,
            severity, status, mitigation_plan, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            project_id, created_by_id, title, description, severity,
            status, mitigation_plan, _now(), _now(),
        ),
    )
    return cursor.lastrowid or 0


def get_risk(db: Database, risk_id: int) -> dict[str, Any] | None:
    row = db.fetchone("SELECT * FROM risks WHERE id = ?", (risk_id,))
    return dict(row) if row else None


def update_risk(db: Database, risk_id: int, **fields: Any) -> int:
    """Update arbitrary risk columns. Returns rowcount."""
    if not fields:
        return 0
    fields["updated_at"] = _now()
    sets = ", ".join(f"{k} = ?" for k in fields)
    values = list(fields.values()) + [risk_id]
    cursor = db.execute(f"UPDATE risks SET {sets} WHERE id = ?", tuple(values))
    return cursor.rowcount


def delete_risk(db: Database, risk_id: int) -> bool:
    """Delete a risk. Returns True if a row was deleted."""
    cursor = db.execute("DELETE FROM risks WHERE id = ?", (risk_id,))
    return cursor.rowcount > 0


def list_open_risks(db: Database, project_id: int) -> list[dict[str, Any]]:
    """All OPEN risks for a project, most recent first."""
    rows = db.fetchall(
        f"SELECT * FROM risks WHERE project_id = ? AND status = 'OPEN' {_RECENT_FIRST}",
        (project_id,),
    )
    return [dict(r) for r in rows]


def list_risks(db: Database, project_id: int) -> list[dict[str, Any]]:
    rows = db.fetchall(
        f"SELECT * FROM risks WHERE project_id = ? {_RECENT_FIRST}", (project_id,)
    )
    return [dict(r) for r in rows]


# ---------------------------------------------------------------------------
# Activity Log
# ---------------------------------------------------------------------------

def insert_activity(
    db: Database,
    project_id: int,
    user_id: int,
    type: str,
    title: str,
    description: str | None = None,
) -> int:
    """Append an activity-log entry. Returns the entry ID."""
    cursor = db.execute(
        """INSERT INTO activity_log (project_id, user_id, type, title, description, created_at)
        VALUES (?, ?, ?, ?, ?, ?)""",
        (project_id, user_id, type, title, description, _now()),
    )
    return cursor.lastrowid or 0


def list_activity(db: Database, project_id: int, limit: int = 50) -> list[dict[str, Any]]:
    """Activity for a project, most recent first."""
    rows = db.fetchall(
        f"SELECT * FROM activity_log WHERE project_id = ? {_RECENT_FIRST} LIMIT ?",
        (project_id, limit),
    )
    return [dict(r) for r in rows]


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

def insert_notification(
    db: Database,
    user_id: int,
    title: str,
    message: str,
    type: str,
    link: str | None = None,
) -> int:
    """Append a notification. Returns the notification ID."""
    cursor = db.execute(
        """INSERT INTO notifications (user_id, title, message, type, link, created_at)
        VALUES (?, ?, ?, ?, ?, ?)""",
        (user_id, title, message, type, link, _now()),
    )
    return cursor.lastrowid or 0


def list_notifications(
    db: Database, user_id: int, *, unread_only: bool = False, limit: int = 50
) -> list[dict[str, Any]]:
    """Notifications for a user, most recent first."""
    where = "user_id = ?" + (" AND is_read = 0" if unread_only else "")
    rows = db.fetchall(
        f"SELECT * FROM notifications WHERE {where} {_RECENT_FIRST} LIMIT ?",
        (user_id, limit),
    )
    return [dict(r) for r in rows]


def count_unread_notifications(db: Database, user_id: int) -> int:
    row = db.fetchone(
        "SELECT COUNT(*) as cnt FROM notifications WHERE user_id = ? AND is_read = 0",
        (user_id,),
    )
    return row["cnt"] if row else 0


def mark_notification_read(db: Database, notification_id: int, user_id: int) -> bool:
    """Mark one of the user's notifications read. Returns True if it exists."""
    cursor = db.execute(
        "UPDATE notifications SET is_read = 1 WHERE id = ? AND user_id = ?",
        (notification_id, user_id),
    )
    return cursor.rowcount > 0


def mark_all_notifications_read(db: Database, user_id: int) -> int:
    """Mark every unread notification for a user read. Returns the count."""
    cursor = db.execute(
        "UPDATE notifications SET is_read = 1 WHERE user_id = ? AND is_read = 0",
        (user_id,),
    )
    return cursor.rowcount
