"""Console email adapter — logs reminders instead of sending them.

Used in development when no SendGrid API key is configured.
"""

from __future__ import annotations

import logging
from datetime import datetime

from trackademic.core.reminder_message import build_subject, check_timezone, format_deadline

logger = logging.getLogger(__name__)


class ConsoleNotifier:
    """Logging implementation of NotificationPort. Always succeeds."""

    def __init__(self, tz_name: str = "UTC") -> None:
        self._tz_name = check_timezone(tz_name)

    async def send_deadline_reminder(
        self,
        *,
        to: str,
        student_name: str,
        assignment_title: str,
        course: str,
        deadline: datetime,
        hours_remaining: float,
    ) -> None:
        logger.info(
            "[DEV] Email would be sent:\n"
            "   To: %s\n"
            "   Subject: %s\n"
            "   Assignment: %s (%s)\n"
            "   Deadline: %s",
            to,
            build_subject(assignment_title, hours_remaining),
            assignment_title,
            course,
            format_deadline(deadline, self._tz_name),
        )
