"""HealthStore and ProjectSignals -- the engine's view of the data store.

The engine never opens a database itself.  Callers inject a ``HealthStore``
(``pulse.storage.store.SqliteHealthStore`` in production, an in-memory fake
in tests) and the engine reads one ``ProjectSignals`` bundle per
recalculation from it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ContextManager, Protocol

from pulse.models import (
    ActivityEntry,
    CheckIn,
    Feedback,
    NotificationRecord,
    Project,
    Risk,
)


class HealthStore(Protocol):
    """Data-access interface consumed by the recalculation engine.

    ``transaction()`` must make everything executed inside it atomic and,
    for a shared store, serialize concurrent recalculations of a project.
    """

    def transaction(self) -> ContextManager[None]: ...

    def get_project(self, project_id: int) -> Project | None: ...

    def recent_feedback(self, project_id: int, limit: int) -> list[Feedback]:
        """At most ``limit`` feedback records, most recent first."""
        ...

    def recent_check_ins(self, project_id: int, limit: int) -> list[CheckIn]: ...

    def open_risks(self, project_id: int) -> list[Risk]:
        """Risks whose status is OPEN; no other status is returned."""
        ...

    def update_project_health(
        self, project_id: int, health_score: int, status: str | None = None
    ) -> None: ...

    def append_activity(self, entry: ActivityEntry) -> int: ...

    def append_notification(self, notification: NotificationRecord) -> int: ...


@dataclass
class ProjectSignals:
    """Everything one recalculation reads, captured at a single point in time.

    Usage::

        signals = read_project_signals(store, project_id, window=4)
        if signals is None:
            return FALLBACK_SCORE
        latest = signals.latest_check_in
    """

    project: Project
    """The project row, including its current status and score."""

    feedback: list[Feedback] = field(default_factory=list)
    """Most recent feedback records (most recent first, at most ``window``)."""

    check_ins: list[CheckIn] = field(default_factory=list)
    """Most recent check-ins (most recent first, at most ``window``)."""

    open_risks: list[Risk] = field(default_factory=list)
    """All OPEN risks."""

    @property
    def latest_check_in(self) -> CheckIn | None:
        return self.check_ins[0] if self.check_ins else None

    @property
    def flagged_issue_count(self) -> int:
        return sum(1 for fb in self.feedback if fb.flagged_issue)
