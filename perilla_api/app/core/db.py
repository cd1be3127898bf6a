"""
SQLite storage and a simple migration system.

``Database`` wraps one SQLite file.  It hands out short lived
connections (one per operation) through the ``cursor`` context
manager, applies the ordered ``MIGRATIONS`` on ``init`` and refuses
further work once ``close`` was called.  Driver errors are re-raised
as :class:`~perilla_api.app.core.errors.StoreError` so the REST layer
can report them through the regular failure envelope.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .errors import StoreError

logger = logging.getLogger(__name__)


MIGRATIONS: List[Tuple[int, str]] = [
    # Migration 1: entries and their relations
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS entries (
            id TEXT PRIMARY KEY,
            email TEXT,
            description TEXT,
            type INTEGER NOT NULL DEFAULT 0,
            hash TEXT,
            created TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        -- One row per (from_id, to_id).  The UNIQUE constraint is the
        -- target of the upsert in EntryMapService.upsert_map.
        CREATE TABLE IF NOT EXISTS entrymaps (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            from_id TEXT NOT NULL,
            to_id TEXT NOT NULL,
            admin INTEGER NOT NULL DEFAULT 0,
            created TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            UNIQUE(from_id, to_id),
            FOREIGN KEY(from_id) REFERENCES entries(id) ON DELETE CASCADE,
            FOREIGN KEY(to_id) REFERENCES entries(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS systemmaps (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user TEXT NOT NULL UNIQUE,
            created TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY(user) REFERENCES entries(id) ON DELETE CASCADE
        );

        CREATE INDEX IF NOT EXISTS idx_entrymaps_to_id ON entrymaps(to_id);
        """,
    ),
    # Migration 2: solutions
    (
        2,
        """
        CREATE TABLE IF NOT EXISTS solutions (
            rid INTEGER PRIMARY KEY AUTOINCREMENT,
            id INTEGER NOT NULL,
            owner TEXT NOT NULL,
            creator TEXT,
            problem INTEGER,
            status TEXT NOT NULL DEFAULT 'pending',
            score INTEGER NOT NULL DEFAULT 0,
            public INTEGER NOT NULL DEFAULT 0,
            details TEXT,
            created TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            UNIQUE(owner, id),
            FOREIGN KEY(owner) REFERENCES entries(id) ON DELETE CASCADE
        );

        CREATE INDEX IF NOT EXISTS idx_solutions_public ON solutions(public);
        """,
    ),
]


class Database:
    """Handle on the SQLite database of one installation."""

    def __init__(self, path: str, options: Optional[Dict[str, Any]] = None):
        self.path = path
        self.options = dict(options or {})
        self.closed = False

    def connect(self) -> sqlite3.Connection:
        """Open a new connection.

        Rows are returned as ``sqlite3.Row`` so columns can be read by
        name, and foreign keys are enforced for the lifetime of the
        connection (SQLite disables them by default).
        """
        if self.closed:
            raise StoreError("Database is closed")
        try:
            conn = sqlite3.connect(self.path, **self.options)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        return conn

    @contextmanager
    def cursor(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor; commit on success, roll back on error."""
        conn = self.connect()
        try:
            yield conn.cursor()
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.exception("Database operation failed")
            raise StoreError(str(e)) from e
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

    def init(self) -> int:
        """Create the schema and apply pending migrations.

        Returns the schema version after the call.
        """
        with self.cursor() as cursor:
            cursor.execute(
                "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
            )
            row = cursor.execute("SELECT MAX(version) AS version FROM migrations").fetchone()
            current_version = row["version"] if row and row["version"] is not None else 0

            for version, sql in MIGRATIONS:
                if version > current_version:
                    cursor.executescript(sql)
                    cursor.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
                    logger.info("Applied migration %s", version)
                    current_version = version
        return current_version

    def close(self) -> None:
        self.closed = True
        logger.info("Database %s closed", self.path)

    def drop(self) -> None:
        """Delete the database file (``perilla init`` reinstall)."""
        if self.path != ":memory:" and os.path.exists(self.path):
            os.remove(self.path)
            logger.info("Database %s dropped", self.path)
