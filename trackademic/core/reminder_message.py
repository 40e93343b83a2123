"""Deadline reminder email content — pure formatting.

Builds the subject, HTML body and plain-text body for a reminder.
Anything under an hour left is flagged URGENT.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from html import escape
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from trackademic.data.models import as_utc

_URGENT_COLOR = "#e53e3e"
_UPCOMING_COLOR = "#d69e2e"
_UPCOMING_BORDER = "#ecc94b"


@dataclass
class ReminderEmail:
    subject: str
    html: str
    text: str


def is_urgent(hours_remaining: float) -> bool:
    return hours_remaining <= 1


def round_hours(hours_remaining: float) -> int:
    """Round to the nearest whole hour, halves rounding up."""
    return math.floor(hours_remaining + 0.5)


def check_timezone(tz_name: str) -> str:
    """Return *tz_name* if it names a known IANA zone, else raise ValueError."""
    try:
        ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone {tz_name!r}") from exc
    return tz_name


def format_deadline(deadline: datetime, tz_name: str = "UTC") -> str:
    """e.g. 'Wednesday, January 15, 2025 at 09:00 AM UTC'."""
    local = as_utc(deadline).astimezone(ZoneInfo(tz_name))
    return local.strftime("%A, %B %d, %Y at %I:%M %p %Z")


def _remaining_phrase(hours_remaining: float) -> str:
    if is_urgent(hours_remaining):
        return "Less than 1 hour remaining!"
    return f"About {round_hours(hours_remaining)} hours remaining"


def build_subject(assignment_title: str, hours_remaining: float) -> str:
    if is_urgent(hours_remaining):
        return f'[URGENT] "{assignment_title}" is due in less than 1 hour'
    return f'[Upcoming] "{assignment_title}" is due in {round_hours(hours_remaining)} hours'


def build_reminder_email(
    student_name: str,
    assignment_title: str,
    course: str,
    deadline: datetime,
    hours_remaining: float,
    tz_name: str = "UTC",
) -> ReminderEmail:
    """Render a full reminder email for one assignment."""
    deadline_str = format_deadline(deadline, tz_name)
    remaining = _remaining_phrase(hours_remaining)
    urgent = is_urgent(hours_remaining)
    border = _URGENT_COLOR if urgent else _UPCOMING_BORDER
    accent = _URGENT_COLOR if urgent else _UPCOMING_COLOR
    greeting_name = student_name or "there"

    html = f"""
      <div style="font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
        <div style="background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); padding: 30px; border-radius: 12px 12px 0 0;">
          <h1 style="color: white; margin: 0; font-size: 24px;">Trackademic Reminder</h1>
        </div>
        <div style="background: #ffffff; padding: 30px; border: 1px solid #e2e8f0; border-top: none; border-radius: 0 0 12px 12px;">
          <p style="color: #4a5568; font-size: 16px; margin-top: 0;">Hi <strong>{escape(greeting_name)}</strong>,</p>
          <p style="color: #4a5568; font-size: 16px;">This is a reminder that your assignment is due soon:</p>
          <div style="background: #f7fafc; border-left: 4px solid {border}; padding: 16px; margin: 20px 0; border-radius: 0 8px 8px 0;">
            <h2 style="color: #2d3748; margin: 0 0 8px 0; font-size: 18px;">{escape(assignment_title)}</h2>
            <p style="color: #718096; margin: 4px 0;"><strong>Course:</strong> {escape(course)}</p>
            <p style="color: #718096; margin: 4px 0;"><strong>Deadline:</strong> {escape(deadline_str)}</p>
            <p style="color: {accent}; margin: 4px 0; font-weight: bold;">{remaining}</p>
          </div>
          <p style="color: #718096; font-size: 14px; margin-top: 24px;">The Trackademic Team</p>
        </div>
      </div>
    """

    text = "\n".join([
        f"Hi {greeting_name},",
        "",
        "This is a reminder that your assignment is due soon:",
        "",
        f"  {assignment_title}",
        f"  Course: {course}",
        f"  Deadline: {deadline_str}",
        f"  {remaining}",
        "",
        "The Trackademic Team",
    ])

    return ReminderEmail(
        subject=build_subject(assignment_title, hours_remaining),
        html=html,
        text=text,
    )
