"""
Trackademic Reminders — Data Models.

Assignments and their owners persist in SQLite. The reminder flags on each
assignment are the only record of which reminders have already gone out.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

PRIORITIES = ("low", "medium", "high")


def as_utc(value: datetime) -> datetime:
    """Return *value* as an aware UTC datetime. Naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class User:
    """A registered student. Reminders are addressed to their email."""

    id: str
    email: str
    name: str
    created_at: str = ""


@dataclass
class Assignment:
    """A tracked assignment with a deadline.

    user_email and user_name are only filled on rows returned for
    reminder scans (joined from the users table).
    """

    id: str
    title: str
    course: str
    deadline: datetime                    # aware, UTC
    user_id: str
    priority: str = "medium"
    description: str | None = None
    is_completed: bool = False
    completed_at: datetime | None = None
    reminder_24h_sent: bool = False
    reminder_1h_sent: bool = False
    user_email: str | None = None
    user_name: str | None = None


@dataclass(frozen=True)
class Threshold:
    """A reminder lead time and the assignment flag that records it."""

    name: str
    window_hours: float
    flag_field: str

    def __post_init__(self) -> None:
        if self.window_hours <= 0:
            raise ValueError(f"window_hours must be positive, got {self.window_hours}")

    @property
    def window(self) -> timedelta:
        return timedelta(hours=self.window_hours)

    def is_sent(self, assignment: Assignment) -> bool:
        return bool(getattr(assignment, self.flag_field))


REMINDER_24H = Threshold(name="24h", window_hours=24, flag_field="reminder_24h_sent")
REMINDER_1H = Threshold(name="1h", window_hours=1, flag_field="reminder_1h_sent")

# Scan order within a cycle
THRESHOLDS = (REMINDER_24H, REMINDER_1H)
