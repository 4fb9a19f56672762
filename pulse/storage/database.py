"""SQLite connection manager for the ProjectPulse store."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

logger = logging.getLogger(__name__)

MEMORY = ":memory:"


class Database:
    """One lazily opened SQLite connection.

    File databases run in WAL mode. Foreign keys are always enforced and
    writers wait up to ``busy_timeout_ms`` for a competing lock before
    failing with ``sqlite3.OperationalError``.
    """

    def __init__(self, path: str | Path, busy_timeout_ms: int = 5000):
        self.is_memory = str(path) == MEMORY
        self.path = Path(path) if self.is_memory else Path(path).expanduser().resolve()
        self.busy_timeout_ms = busy_timeout_ms
        self._conn: sqlite3.Connection | None = None
        self._in_transaction = False

    def _pragmas(self) -> list[str]:
        pragmas = ["foreign_keys = ON", f"busy_timeout = {int(self.busy_timeout_ms)}"]
        if not self.is_memory:
            pragmas.insert(0, "journal_mode = WAL")
        return pragmas

    def connect(self) -> sqlite3.Connection:
        if self._conn is None:
            if not self.is_memory:
                self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.path))
            conn.row_factory = sqlite3.Row
            for pragma in self._pragmas():
                conn.execute(f"PRAGMA {pragma}")
            self._conn = conn
            logger.debug("Opened %s", self)
        return self._conn

    @property
    def conn(self) -> sqlite3.Connection:
        return self.connect()

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        logger.debug("Closed %s", self)

    @contextmanager
    def transaction(self, immediate: bool = False) -> Generator[sqlite3.Cursor, None, None]:
        """Run the block as one explicit transaction.

        ``immediate=True`` issues ``BEGIN IMMEDIATE``: the write lock is
        taken before the first read, so two read-modify-write blocks on the
        same file serialize. Commits on success, rolls back and re-raises
        on any exception.

        Blocks do not nest: opening one inside another raises RuntimeError,
        which rolls back the outer block.
        """
        if self._in_transaction:
            raise RuntimeError(f"{self} already has an open transaction(); nesting is not supported")
        conn = self.connect()
        if conn.in_transaction:
            # An implicit transaction left open by an earlier write.
            conn.commit()
        conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
        cursor = conn.cursor()
        self._in_transaction = True
        try:
            yield cursor
        except BaseException:
            conn.rollback()
            raise
        else:
            conn.commit()
        finally:
            self._in_transaction = False
            cursor.close()

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        return self.conn.execute(sql, params)

    def executescript(self, sql: str) -> None:
        self.conn.executescript(sql)

    def fetchone(self, sql: str, params: tuple = ()) -> sqlite3.Row | None:
        return self.conn.execute(sql, params).fetchone()

    def fetchall(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        return self.conn.execute(sql, params).fetchall()

    def schema_version(self) -> int:
        """Highest applied migration, 0 for a fresh database."""
        try:
            row = self.fetchone("SELECT MAX(version) AS v FROM _schema_version")
        except sqlite3.OperationalError:
            return 0
        return (row["v"] or 0) if row else 0

    def __enter__(self) -> "Database":
        self.connect()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Database({self.path})"
