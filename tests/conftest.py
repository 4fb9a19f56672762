"""Shared test fixtures for ProjectPulse.

Provides databases (temp-file and in-memory), a default config, an
in-memory HealthStore fake and record builders across all test modules.
"""

from __future__ import annotations

import copy
from contextlib import contextmanager
from datetime import date
from pathlib import Path

import pytest
from hypothesis import HealthCheck, settings

from pulse.config.schema import PulseConfig
from pulse.models import (
    ActivityEntry,
    CheckIn,
    Feedback,
    NotificationRecord,
    Project,
    ProjectStatus,
    Risk,
    RiskSeverity,
    RiskStatus,
)
from pulse.storage import queries
from pulse.storage.database import Database
from pulse.storage.migrations import ensure_schema

# Midpoint of the default project's schedule (2026-01-01 .. 2026-01-31).
PROJECT_START = date(2026, 1, 1)
PROJECT_END = date(2026, 1, 31)
MIDPOINT = date(2026, 1, 16)

# The autouse env fixture below is safe to share across generated examples.
settings.register_profile("pulse", suppress_health_check=[HealthCheck.function_scoped_fixture])
settings.load_profile("pulse")


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def make_project(
    project_id: int = 1,
    status: ProjectStatus = ProjectStatus.ON_TRACK,
    health_score: int = 100,
    start_date: date = PROJECT_START,
    end_date: date = PROJECT_END,
    admin_id: int = 1,
    name: str = "Apollo",
) -> Project:
    return Project(
        id=project_id,
        name=name,
        status=status,
        health_score=health_score,
        start_date=start_date,
        end_date=end_date,
        admin_id=admin_id,
        client_id=3,
    )


def make_feedback(rating: int = 3, flagged: bool = False, project_id: int = 1) -> Feedback:
    return Feedback(
        project_id=project_id,
        client_id=3,
        satisfaction_rating=rating,
        flagged_issue=flagged,
    )


def make_check_in(confidence: int = 3, completion: int = 50, project_id: int = 1) -> CheckIn:
    return CheckIn(
        project_id=project_id,
        employee_id=2,
        confidence_level=confidence,
        completion_percent=completion,
    )


def make_risk(
    severity: RiskSeverity = RiskSeverity.HIGH,
    status: RiskStatus = RiskStatus.OPEN,
    project_id: int = 1,
) -> Risk:
    return Risk(project_id=project_id, title=f"{severity.value} risk", severity=severity, status=status)


# ---------------------------------------------------------------------------
# In-memory HealthStore
# ---------------------------------------------------------------------------

class FakeHealthStore:
    """Dict-backed HealthStore.

    ``transaction()`` snapshots the state and restores it if the block
    raises, so atomicity can be asserted without SQLite.  Set
    ``fail_on`` to a method name to make that write raise.
    """

    def __init__(self) -> None:
        self.projects: dict[int, Project] = {}
        self.feedback: list[Feedback] = []
        self.check_ins: list[CheckIn] = []
        self.risks: list[Risk] = []
        self.activity: list[ActivityEntry] = []
        self.notifications: list[NotificationRecord] = []
        self.fail_on: str | None = None
        self.transactions = 0

    # -- test setup --

    def add_project(self, project: Project) -> Project:
        self.projects[project.id] = project
        return project

    def _state(self) -> tuple:
        return (self.projects, self.feedback, self.check_ins, self.risks,
                self.activity, self.notifications)

    def _maybe_fail(self, name: str) -> None:
        if self.fail_on == name:
            raise RuntimeError(f"injected failure in {name}")

    # -- HealthStore --

    @contextmanager
    def transaction(self):
        snapshot = copy.deepcopy(self._state())
        self.transactions += 1
        try:
            yield
        except Exception:
            (self.projects, self.feedback, self.check_ins, self.risks,
             self.activity, self.notifications) = snapshot
            raise

    def get_project(self, project_id: int) -> Project | None:
        return self.projects.get(project_id)

    def recent_feedback(self, project_id: int, limit: int) -> list[Feedback]:
        rows = [fb for fb in reversed(self.feedback) if fb.project_id == project_id]
        return rows[:limit]

    def recent_check_ins(self, project_id: int, limit: int) -> list[CheckIn]:
        rows = [ci for ci in reversed(self.check_ins) if ci.project_id == project_id]
        return rows[:limit]

    def open_risks(self, project_id: int) -> list[Risk]:
        return [r for r in self.risks
                if r.project_id == project_id and r.status == RiskStatus.OPEN]

    def update_project_health(
        self, project_id: int, health_score: int, status: str | None = None
    ) -> None:
        self._maybe_fail("update_project_health")
        project = self.projects[project_id]
        project.health_score = health_score
        if status is not None:
            project.status = ProjectStatus(status)

    def append_activity(self, entry: ActivityEntry) -> int:
        self._maybe_fail("append_activity")
        self.activity.append(entry)
        return len(self.activity)

    def append_notification(self, notification: NotificationRecord) -> int:
        self._maybe_fail("append_notification")
        self.notifications.append(notification)
        return len(self.notifications)


# ---------------------------------------------------------------------------
# Core infrastructure
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Keep the developer's PULSE_* environment out of config resolution."""
    for var in ("PULSE_DB", "PULSE_HOME", "PULSE_CONFIG"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def test_config(tmp_path: Path) -> PulseConfig:
    """Default config with temp database path."""
    return PulseConfig(database={"path": str(tmp_path / "test.db")})


@pytest.fixture
def test_db(tmp_path: Path) -> Database:
    """Database with schema applied, using temp file."""
    db = Database(tmp_path / "test.db")
    ensure_schema(db)
    yield db
    db.close()


@pytest.fixture
def memory_db() -> Database:
    """In-memory database for fast unit tests."""
    db = Database(":memory:")
    ensure_schema(db)
    yield db
    db.close()


@pytest.fixture
def store() -> FakeHealthStore:
    """Fake store holding one ON_TRACK project (id=1) at score 100."""
    fake = FakeHealthStore()
    fake.add_project(make_project())
    return fake


@pytest.fixture
def seeded_db(memory_db: Database) -> Database:
    """In-memory database with admin (1), employee (2), client (3) and project 1."""
    with memory_db.transaction():
        queries.insert_user(memory_db, "Ada Admin", "ada@example.com", "ADMIN")
        queries.insert_user(memory_db, "Eve Employee", "eve@example.com", "EMPLOYEE")
        queries.insert_user(memory_db, "Carl Client", "carl@example.com", "CLIENT")
        queries.insert_user(memory_db, "Emil Employee", "emil@example.com", "EMPLOYEE")
        queries.insert_project(
            memory_db, "Apollo", PROJECT_START, PROJECT_END, admin_id=1, client_id=3,
        )
    return memory_db
