"""Notifier factory — picks the email adapter based on config."""

from __future__ import annotations

import logging

from trackademic.config import settings
from trackademic.ports.notification_port import NotificationPort

logger = logging.getLogger(__name__)


def create_notifier() -> NotificationPort:
    """Return a SendGrid notifier when an API key is set, else the console one."""
    if settings.SENDGRID_API_KEY:
        from trackademic.adapters.sendgrid_notifier import SendGridNotifier

        return SendGridNotifier(
            api_key=settings.SENDGRID_API_KEY,
            from_email=settings.SENDGRID_FROM_EMAIL,
            from_name=settings.SENDGRID_FROM_NAME,
            timeout=settings.EMAIL_TIMEOUT_SECONDS,
            tz_name=settings.TIMEZONE,
        )

    from trackademic.adapters.console_notifier import ConsoleNotifier

    logger.warning("SENDGRID_API_KEY not set, reminder emails will only be logged")
    return ConsoleNotifier(tz_name=settings.TIMEZONE)
