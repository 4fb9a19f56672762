"""Schema migration runner.

Migrations are SQL files in pulse/migrations/ named NNN_description.sql.
Each file is applied once; the runner records its version in
``_schema_version`` so the SQL files only carry DDL.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from pulse.storage.database import Database

logger = logging.getLogger(__name__)

MIGRATION_DIR = Path(__file__).parent.parent / "migrations"
MIGRATION_PATTERN = re.compile(r"^(\d{3})_(.*)\.sql$")

_VERSION_TABLE = """CREATE TABLE IF NOT EXISTS _schema_version (
    version INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);"""


@dataclass(frozen=True)
class Migration:
    version: int
    name: str
    sql: str


def discover_migrations(migration_dir: Path = MIGRATION_DIR) -> list[Migration]:
    """Find all migration files, ordered by version."""
    if not migration_dir.exists():
        logger.warning("Migration directory not found: %s", migration_dir)
        return []

    found = []
    for sql_file in sorted(migration_dir.glob("*.sql")):
        match = MIGRATION_PATTERN.match(sql_file.name)
        if match:
            found.append(Migration(int(match.group(1)), match.group(2), sql_file.read_text()))
    return found


def pending_migrations(db: Database) -> list[Migration]:
    """Migrations newer than the database's schema version."""
    current = db.schema_version()
    return [m for m in discover_migrations() if m.version > current]


def ensure_schema(db: Database) -> int:
    """Apply all pending migrations. Returns the resulting schema version."""
    db.executescript(_VERSION_TABLE)
    current = db.schema_version()

    for migration in pending_migrations(db):
        logger.info(
            "Applying migration %03d_%s (v%d -> v%d)",
            migration.version, migration.name, current, migration.version,
        )
        try:
            # executescript commits on entry; the version row shares its script.
            db.executescript(
                "BEGIN;\n"
                f"{migration.sql}\n"
                "INSERT INTO _schema_version (version, name) "
                f"VALUES ({migration.version}, '{migration.name}');\n"
                "COMMIT;"
            )
        except Exception as e:
            if db.conn.in_transaction:
                db.conn.rollback()
            logger.error("Migration %03d_%s failed: %s", migration.version, migration.name, e)
            raise RuntimeError(f"Migration {migration.name} failed: {e}") from e
        current = migration.version

    logger.debug("Schema at version %d", current)
    return current
