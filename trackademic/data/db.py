"""
Trackademic Reminders — Assignment Database.

SQLite storage for users and their assignments. Deadlines are stored as
fixed-width UTC ISO strings so range filters can compare them as text.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path

from trackademic.data.models import (
    PRIORITIES,
    THRESHOLDS,
    Assignment,
    Threshold,
    User,
    as_utc,
)

logger = logging.getLogger(__name__)

_FLAG_COLUMNS = frozenset(t.flag_field for t in THRESHOLDS)


def _to_db_time(value: datetime) -> str:
    return as_utc(value).isoformat(timespec="microseconds")


def _from_db_time(raw: str | None) -> datetime | None:
    if raw is None:
        return None
    return as_utc(datetime.fromisoformat(raw))


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class AssignmentDB:
    """SQLite-backed storage for students and their assignments."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from trackademic.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _init_db(self) -> None:
        """Create the users and assignments tables if they don't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id         TEXT PRIMARY KEY,
                    email      TEXT NOT NULL UNIQUE,
                    name       TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS assignments (
                    id                TEXT    PRIMARY KEY,
                    title             TEXT    NOT NULL,
                    description       TEXT,
                    course            TEXT    NOT NULL,
                    deadline          TEXT    NOT NULL,
                    priority          TEXT    NOT NULL DEFAULT 'medium',
                    is_completed      INTEGER NOT NULL DEFAULT 0,
                    completed_at      TEXT,
                    reminder_24h_sent INTEGER NOT NULL DEFAULT 0,
                    reminder_1h_sent  INTEGER NOT NULL DEFAULT 0,
                    user_id           TEXT    NOT NULL
                                      REFERENCES users(id) ON DELETE CASCADE,
                    created_at        TEXT    NOT NULL
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_assignments_pending_deadline "
                "ON assignments (is_completed, deadline)"
            )
        logger.debug("Assignment tables initialized at %s", self._db_path)

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            email=row["email"],
            name=row["name"],
            created_at=row["created_at"],
        )

    @staticmethod
    def _row_to_assignment(row: sqlite3.Row) -> Assignment:
        keys = row.keys()
        return Assignment(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            course=row["course"],
            deadline=_from_db_time(row["deadline"]),
            priority=row["priority"],
            is_completed=bool(row["is_completed"]),
            completed_at=_from_db_time(row["completed_at"]),
            reminder_24h_sent=bool(row["reminder_24h_sent"]),
            reminder_1h_sent=bool(row["reminder_1h_sent"]),
            user_id=row["user_id"],
            user_email=row["user_email"] if "user_email" in keys else None,
            user_name=row["user_name"] if "user_name" in keys else None,
        )

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def add_user(self, email: str, name: str) -> User:
        """Insert a new user. Emails are stored lowercased and must be unique."""
        user = User(
            id=str(uuid.uuid4()),
            email=email.strip().lower(),
            name=name.strip(),
            created_at=_to_db_time(_now_utc()),
        )
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO users (id, email, name, created_at) VALUES (?, ?, ?, ?)",
                (user.id, user.email, user.name, user.created_at),
            )
        logger.info("User added: %s <%s>", user.id, user.email)
        return user

    def get_user(self, user_id: str) -> User | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def delete_user(self, user_id: str) -> bool:
        """Delete a user together with all of their assignments."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("User %s deleted", user_id)
        return deleted

    # ------------------------------------------------------------------
    # Assignments
    # ------------------------------------------------------------------

    def add_assignment(
        self,
        user_id: str,
        title: str,
        course: str,
        deadline: datetime,
        priority: str = "medium",
        description: str | None = None,
    ) -> Assignment:
        """Insert a new assignment with both reminder flags unset."""
        priority = priority.lower()
        if priority not in PRIORITIES:
            raise ValueError(f"Unknown priority {priority!r}, expected one of {PRIORITIES}")

        assignment = Assignment(
            id=str(uuid.uuid4()),
            title=title.strip(),
            description=description or None,
            course=course.strip(),
            deadline=as_utc(deadline),
            priority=priority,
            user_id=user_id,
        )
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO assignments
                    (id, title, description, course, deadline, priority,
                     is_completed, completed_at,
                     reminder_24h_sent, reminder_1h_sent, user_id, created_at)
                VALUES (?, ?, ?, ?, ?, ?, 0, NULL, 0, 0, ?, ?)
                """,
                (
                    assignment.id, assignment.title, assignment.description,
                    assignment.course, _to_db_time(assignment.deadline),
                    assignment.priority, user_id, _to_db_time(_now_utc()),
                ),
            )
        logger.info(
            "Assignment added: %s '%s' due %s",
            assignment.id, assignment.title, assignment.deadline.isoformat(),
        )
        return assignment

    def get_assignment(self, assignment_id: str) -> Assignment | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM assignments WHERE id = ?", (assignment_id,)
            ).fetchone()
        if row is None:
            return None
        return self._row_to_assignment(row)

    def list_assignments(
        self,
        user_id: str,
        status: str | None = None,
        now: datetime | None = None,
    ) -> list[Assignment]:
        """List a user's assignments by deadline.

        status: None (all), "completed", "pending" (open, not yet due)
        or "overdue" (open, past due).
        """
        query = "SELECT * FROM assignments WHERE user_id = ?"
        params: list = [user_id]
        now_str = _to_db_time(now or _now_utc())

        if status == "completed":
            query += " AND is_completed = 1"
        elif status == "pending":
            query += " AND is_completed = 0 AND deadline >= ?"
            params.append(now_str)
        elif status == "overdue":
            query += " AND is_completed = 0 AND deadline < ?"
            params.append(now_str)
        elif status is not None:
            raise ValueError(f"Unknown status filter {status!r}")
        query += " ORDER BY deadline"

        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_assignment(r) for r in rows]

    def update_deadline(self, assignment_id: str, deadline: datetime) -> Assignment:
        """Move an assignment's deadline. Reminder flags are left as they are."""
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE assignments SET deadline = ? WHERE id = ?",
                (_to_db_time(deadline), assignment_id),
            )
        if cursor.rowcount == 0:
            raise ValueError(f"Assignment {assignment_id} not found")
        logger.info("Assignment %s deadline moved to %s", assignment_id, as_utc(deadline).isoformat())
        return self.get_assignment(assignment_id)

    def set_completed(self, assignment_id: str, completed: bool = True) -> Assignment:
        """Mark an assignment complete (or reopen it). Flags are never touched."""
        completed_at = _to_db_time(_now_utc()) if completed else None
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE assignments SET is_completed = ?, completed_at = ? WHERE id = ?",
                (int(completed), completed_at, assignment_id),
            )
        if cursor.rowcount == 0:
            raise ValueError(f"Assignment {assignment_id} not found")
        logger.info(
            "Assignment %s marked %s", assignment_id,
            "complete" if completed else "open",
        )
        return self.get_assignment(assignment_id)

    def toggle_complete(self, assignment_id: str) -> Assignment:
        current = self.get_assignment(assignment_id)
        if current is None:
            raise ValueError(f"Assignment {assignment_id} not found")
        return self.set_completed(assignment_id, not current.is_completed)

    def delete_assignment(self, assignment_id: str) -> bool:
        """Permanently delete an assignment and its reminder flags."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM assignments WHERE id = ?", (assignment_id,))
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Assignment %s deleted", assignment_id)
        return deleted

    # ------------------------------------------------------------------
    # Reminder bookkeeping
    # ------------------------------------------------------------------

    @staticmethod
    def _flag_column(threshold: Threshold) -> str:
        if threshold.flag_field not in _FLAG_COLUMNS:
            raise ValueError(f"No reminder flag column {threshold.flag_field!r}")
        return threshold.flag_field

    def find_reminder_candidates(
        self, threshold: Threshold, now: datetime,
    ) -> list[Assignment]:
        """Open assignments with the threshold's flag unset and
        now < deadline <= now + window, joined with their owner's contact."""
        column = self._flag_column(threshold)
        now = as_utc(now)
        with self._connect() as conn:
            rows = conn.execute(
                f"""
                SELECT a.*, u.email AS user_email, u.name AS user_name
                FROM assignments a
                JOIN users u ON u.id = a.user_id
                WHERE a.is_completed = 0
                  AND a.{column} = 0
                  AND a.deadline > ?
                  AND a.deadline <= ?
                ORDER BY a.deadline
                """,
                (_to_db_time(now), _to_db_time(now + threshold.window)),
            ).fetchall()
        return [self._row_to_assignment(r) for r in rows]

    def set_reminder_flag(self, assignment_id: str, threshold: Threshold) -> bool:
        """Set the threshold's flag. Safe to repeat; False if the row is gone."""
        column = self._flag_column(threshold)
        with self._connect() as conn:
            cursor = conn.execute(
                f"UPDATE assignments SET {column} = 1 WHERE id = ?",
                (assignment_id,),
            )
        return cursor.rowcount > 0
