"""Notification port — abstract interface for delivering deadline reminders.

Core modules depend on this protocol, never on a specific mail provider.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class NotificationError(Exception):
    """Raised when a reminder could not be delivered."""


class NotificationPort(Protocol):
    """Abstract notification interface used by the reminder dispatcher.

    Returning normally means the provider accepted the message; every
    failure must raise NotificationError.
    """

    async def send_deadline_reminder(
        self,
        *,
        to: str,
        student_name: str,
        assignment_title: str,
        course: str,
        deadline: datetime,
        hours_remaining: float,
    ) -> None: ...
