"""SqliteHealthStore -- HealthStore implementation over the SQLite database."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator

from pulse.models import (
    ActivityEntry,
    CheckIn,
    Feedback,
    NotificationRecord,
    Project,
    Risk,
)
from pulse.storage import queries
from pulse.storage.database import Database


class SqliteHealthStore:
    """Adapts the named queries in ``pulse.storage.queries`` to ``HealthStore``.

    ``transaction()`` opens ``BEGIN IMMEDIATE`` so the project row is
    effectively locked from the first read to the final write.
    """

    def __init__(self, db: Database):
        self.db = db

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        with self.db.transaction(immediate=True):
            yield

    # -- reads --

    def get_project(self, project_id: int) -> Project | None:
        row = queries.get_project(self.db, project_id)
        return Project.from_row(row) if row else None

    def recent_feedback(self, project_id: int, limit: int) -> list[Feedback]:
        rows = queries.list_recent_feedback(self.db, project_id, limit)
        return [Feedback.from_row(r) for r in rows]

    def recent_check_ins(self, project_id: int, limit: int) -> list[CheckIn]:
        rows = queries.list_recent_check_ins(self.db, project_id, limit)
        return [CheckIn.from_row(r) for r in rows]

    def open_risks(self, project_id: int) -> list[Risk]:
        return [Risk.from_row(r) for r in queries.list_open_risks(self.db, project_id)]

    # -- writes (inside transaction()) --

    def update_project_health(
        self, project_id: int, health_score: int, status: str | None = None
    ) -> None:
        updated = queries.update_project_health(self.db, project_id, health_score, status)
        if updated != 1:
            raise LookupError(f"Project {project_id} disappeared during health update")

    def append_activity(self, entry: ActivityEntry) -> int:
        return queries.insert_activity(
            self.db,
            project_id=entry.project_id,
            user_id=entry.user_id,
            type=entry.type.value,
            title=entry.title,
            description=entry.description,
        )

    def append_notification(self, notification: NotificationRecord) -> int:
        return queries.insert_notification(
            self.db,
            user_id=notification.user_id,
            title=notification.title,
            message=notification.message,
            type=notification.type.value,
            link=notification.link,
        )
