"""
SQLite-based storage for call logs and objection exchanges.

Only create operations are used by the relay itself; the read helpers
back the log viewer and the tests.
"""

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from .models import CallLog, Objection


class RelayStore:
    """
    SQLite-backed persistence adapter.

    Usage:
        store = RelayStore("data/relay.db")

        # Log a routed call (same id overwrites)
        store.insert_call_log(CallLog(id="CA123", phone_number="+15551234567", status="initiated"))

        # Record an objection exchange
        store.insert_objection(Objection(message="too expensive", response="..."))

    Each operation opens its own connection, so a single store can be shared
    by worker threads.
    """

    def __init__(self, db_path: Union[str, Path]):
        """Initialize the store and create tables if needed."""
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Create tables if they don't exist."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS call_logs (
                    id TEXT PRIMARY KEY,
                    phone_number TEXT NOT NULL,
                    status TEXT NOT NULL,
                    duration_seconds REAL,
                    created_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS objections (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    message TEXT NOT NULL,
                    response TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_call_logs_created ON call_logs(created_at)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_objections_created ON objections(created_at)")
            conn.commit()

    @contextmanager
    def _get_connection(self):
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    # =========================================================================
    # Call logs
    # =========================================================================

    def insert_call_log(self, record: CallLog) -> str:
        """
        Save a call log, replacing any earlier row with the same id.

        Twilio may deliver the same webhook more than once; keying on the
        Call SID keeps one row per call.

        Returns:
            The call id
        """
        with self._get_connection() as conn:
            conn.execute("""
                INSERT OR REPLACE INTO call_logs (
                    id, phone_number, status, duration_seconds, created_at
                ) VALUES (?, ?, ?, ?, ?)
            """, (
                record.id,
                record.phone_number,
                record.status,
                record.duration_seconds,
                record.created_at.isoformat(),
            ))
            conn.commit()
        return record.id

    def get_call_log(self, call_id: str) -> Optional[CallLog]:
        """Retrieve a call log by id, or None if not found."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM call_logs WHERE id = ?",
                (call_id,)
            ).fetchone()
        return self._row_to_call_log(row) if row else None

    def list_call_logs(self, limit: int = 100, offset: int = 0) -> list[CallLog]:
        """List call logs, newest first."""
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT * FROM call_logs ORDER BY created_at DESC LIMIT ? OFFSET ?",
                (limit, offset)
            ).fetchall()
        return [self._row_to_call_log(row) for row in rows]

    def count_call_logs(self) -> int:
        with self._get_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM call_logs").fetchone()[0]

    # =========================================================================
    # Objections
    # =========================================================================

    def insert_objection(self, record: Objection) -> int:
        """
        Save an objection and its generated response.

        Returns:
            The row id assigned to the record
        """
        with self._get_connection() as conn:
            cursor = conn.execute(
                "INSERT INTO objections (message, response, created_at) VALUES (?, ?, ?)",
                (record.message, record.response, record.created_at.isoformat())
            )
            conn.commit()
            return cursor.lastrowid

    def list_objections(self, limit: int = 100, offset: int = 0) -> list[Objection]:
        """List objection exchanges, newest first."""
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT * FROM objections ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?",
                (limit, offset)
            ).fetchall()
        return [self._row_to_objection(row) for row in rows]

    def count_objections(self) -> int:
        with self._get_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM objections").fetchone()[0]

    # =========================================================================
    # Row conversion
    # =========================================================================

    @staticmethod
    def _row_to_call_log(row: sqlite3.Row) -> CallLog:
        return CallLog(
            id=row["id"],
            phone_number=row["phone_number"],
            status=row["status"],
            duration_seconds=row["duration_seconds"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    @staticmethod
    def _row_to_objection(row: sqlite3.Row) -> Objection:
        return Objection(
            id=row["id"],
            message=row["message"],
            response=row["response"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
