"""SQLite-backed entry store.

One table of log entries keyed by an autoincrement id. AUTOINCREMENT keeps
ids strictly increasing even after the newest row is deleted.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Generator, Optional

from .errors import PersistenceError
from .models import LogEntry, format_timestamp, utc_now

logger = logging.getLogger(__name__)


class EntryStore:
    """Durable, ordered collection of log entries."""

    SCHEMA_VERSION = 1

    def __init__(self, db_path: Path, clock: Callable[[], datetime] = utc_now):
        """Initialize the entry store.

        Args:
            db_path: Path to the sqlite database file
            clock: Source of creation timestamps
        """
        self.db_path = db_path
        self.clock = clock
        self._connection: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()
        with self._guard():
            self._ensure_schema()

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create the database connection."""
        if self._connection is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            # Shared across the API threadpool; access is serialized by self._lock
            self._connection = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._connection.row_factory = sqlite3.Row
            self._connection.execute("PRAGMA journal_mode = WAL")
        return self._connection

    @contextmanager
    def _guard(self) -> Generator[sqlite3.Connection, None, None]:
        """Serialize access and turn sqlite failures into PersistenceError."""
        with self._lock:
            try:
                conn = self._get_connection()
                yield conn
            except sqlite3.Error as e:
                if self._connection is not None:
                    self._connection.rollback()
                logger.error("Store operation failed on %s: %s", self.db_path, e)
                raise PersistenceError(str(e)) from e

    def _ensure_schema(self) -> None:
        """Create the database schema if it doesn't exist."""
        conn = self._get_connection()

        cursor = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_version'"
        )
        if cursor.fetchone() is None:
            self._init_schema(conn)
        else:
            cursor = conn.execute("SELECT version FROM schema_version")
            row = cursor.fetchone()
            if row is None or row[0] < self.SCHEMA_VERSION:
                self._migrate_schema(conn, row[0] if row else 0)

    def _init_schema(self, conn: sqlite3.Connection) -> None:
        """Initialize the database schema."""
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY
            );
            INSERT INTO schema_version (version) VALUES (1);

            CREATE TABLE IF NOT EXISTS logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                content TEXT NOT NULL DEFAULT '',
                tags TEXT NOT NULL DEFAULT '[]',    -- JSON array
                created_at TEXT NOT NULL            -- ISO 8601, UTC
            );

            CREATE INDEX IF NOT EXISTS idx_logs_created ON logs(created_at, id);
        """)
        conn.commit()
        logger.debug("Initialized schema in %s", self.db_path)

    def _migrate_schema(self, conn: sqlite3.Connection, from_version: int) -> None:
        """Migrate schema from an older version."""
        # Only version 1 exists so far
        if from_version < 1:
            self._init_schema(conn)

    def close(self) -> None:
        """Close the database connection, folding the WAL back into the main file."""
        with self._lock:
            if self._connection is not None:
                try:
                    self._connection.execute("PRAGMA wal_checkpoint(TRUNCATE)")
                except sqlite3.Error as e:
                    logger.warning("WAL checkpoint failed on close: %s", e)
                self._connection.close()
                self._connection = None

    def insert(self, title: str, content: str = "", tags: Optional[list[str]] = None) -> LogEntry:
        """Insert a new entry, assigning its id and creation time.

        Args:
            title: Entry title
            content: Body text
            tags: Ordered tag list

        Returns:
            The stored entry
        """
        with self._guard() as conn:
            created_at = format_timestamp(self.clock())
            cursor = conn.execute(
                "INSERT INTO logs (title, content, tags, created_at) VALUES (?, ?, ?, ?)",
                (title, content, json.dumps(tags or []), created_at),
            )
            conn.commit()
            entry_id = cursor.lastrowid
        logger.debug("Inserted log #%s", entry_id)
        return LogEntry(
            id=entry_id,
            title=title,
            content=content,
            tags=list(tags or []),
            created_at=created_at,
        )

    def get_by_id(self, entry_id: int) -> Optional[LogEntry]:
        """Get a single entry by id.

        Returns:
            The entry or None if not found
        """
        with self._guard() as conn:
            row = conn.execute("SELECT * FROM logs WHERE id = ?", (entry_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_entry(row)

    def list_all(self, search: Optional[str] = None, limit: Optional[int] = None) -> list[LogEntry]:
        """List entries in ascending creation order, ties broken by id.

        Args:
            search: Only return entries whose title contains this text (case-sensitive)
            limit: Keep only the first N entries of that order

        Returns:
            List of matching entries
        """
        conditions = []
        params: list[Any] = []

        if search:
            # instr() is case-sensitive, unlike LIKE
            conditions.append("instr(title, ?) > 0")
            params.append(search)

        where_clause = ""
        if conditions:
            where_clause = "WHERE " + " AND ".join(conditions)

        query = f"SELECT * FROM logs {where_clause} ORDER BY created_at ASC, id ASC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        with self._guard() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def update(
        self,
        entry_id: int,
        title: str,
        content: Optional[str] = None,
        tags: Optional[list[str]] = None,
    ) -> Optional[LogEntry]:
        """Update an existing entry. None for content or tags keeps the current value.

        Returns:
            The updated entry or None if not found
        """
        assignments = ["title = ?"]
        params: list[Any] = [title]
        if content is not None:
            assignments.append("content = ?")
            params.append(content)
        if tags is not None:
            assignments.append("tags = ?")
            params.append(json.dumps(tags))
        params.append(entry_id)

        with self._guard() as conn:
            cursor = conn.execute(
                f"UPDATE logs SET {', '.join(assignments)} WHERE id = ?", params
            )
            conn.commit()
            if cursor.rowcount == 0:
                return None
            row = conn.execute("SELECT * FROM logs WHERE id = ?", (entry_id,)).fetchone()
        logger.debug("Updated log #%s", entry_id)
        return self._row_to_entry(row)

    def delete(self, entry_id: int) -> Optional[LogEntry]:
        """Delete an entry.

        Returns:
            The deleted entry or None if not found
        """
        with self._guard() as conn:
            row = conn.execute("SELECT * FROM logs WHERE id = ?", (entry_id,)).fetchone()
            if row is None:
                return None
            conn.execute("DELETE FROM logs WHERE id = ?", (entry_id,))
            conn.commit()
        logger.debug("Deleted log #%s", entry_id)
        return self._row_to_entry(row)

    def count(self) -> int:
        """Number of stored entries."""
        with self._guard() as conn:
            return conn.execute("SELECT COUNT(*) FROM logs").fetchone()[0]

    def _row_to_entry(self, row: sqlite3.Row) -> LogEntry:
        """Convert a database row to a LogEntry."""
        try:
            tags = json.loads(row["tags"]) if row["tags"] else []
        except json.JSONDecodeError:
            tags = None
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            logger.warning("Log #%s has unreadable tags %r; reading them as empty", row["id"], row["tags"])
            tags = []
        return LogEntry(
            id=row["id"],
            title=row["title"],
            content=row["content"] or "",
            tags=tags,
            created_at=row["created_at"],
        )
