"""SendGrid email adapter — implements NotificationPort.

Posts reminder emails to the SendGrid v3 Mail Send endpoint. Any transport
error, timeout or non-2xx response is raised as NotificationError so the
dispatcher can retry on the next cycle.
"""

from __future__ import annotations

import logging
from datetime import datetime

import httpx

from trackademic.core.reminder_message import build_reminder_email, check_timezone
from trackademic.ports.notification_port import NotificationError

logger = logging.getLogger(__name__)

_SENDGRID_SEND_URL = "https://api.sendgrid.com/v3/mail/send"
_TIMEOUT_SECONDS = 10


class SendGridNotifier:
    """SendGrid implementation of NotificationPort."""

    def __init__(
        self,
        api_key: str,
        from_email: str,
        from_name: str = "Trackademic",
        timeout: float = _TIMEOUT_SECONDS,
        tz_name: str = "UTC",
    ) -> None:
        if not api_key:
            raise ValueError("SendGrid API key is required")
        self._api_key = api_key
        self._from_email = from_email
        self._from_name = from_name
        self._timeout = timeout
        self._tz_name = check_timezone(tz_name)

    def _build_payload(self, to: str, subject: str, text: str, html: str) -> dict:
        return {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": self._from_email, "name": self._from_name},
            "subject": subject,
            "content": [
                {"type": "text/plain", "value": text},
                {"type": "text/html", "value": html},
            ],
        }

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
        email = build_reminder_email(
            student_name, assignment_title, course, deadline, hours_remaining,
            tz_name=self._tz_name,
        )
        payload = self._build_payload(to, email.subject, email.text, email.html)

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    _SENDGRID_SEND_URL,
                    json=payload,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Failed to send email to %s: %s", to, exc)
            raise NotificationError(f"SendGrid rejected email to {to}: {exc}") from exc

        logger.info("Reminder sent to %s for '%s'", to, assignment_title)
