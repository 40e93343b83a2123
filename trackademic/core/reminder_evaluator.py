"""Reminder evaluator — pure eligibility logic.

Decides which assignments fall inside a reminder threshold's window and
have not been reminded for it yet, and how many hours they have left.

No I/O: this module only transforms data.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

from trackademic.data.models import Assignment, Threshold, as_utc

_HOUR = timedelta(hours=1)


@dataclass(frozen=True)
class EligibleReminder:
    """An assignment due for a reminder at a given threshold."""

    assignment: Assignment
    threshold: Threshold
    hours_remaining: float


def hours_until(deadline: datetime, now: datetime) -> float:
    """Hours from *now* to *deadline* (negative once the deadline has passed)."""
    return (as_utc(deadline) - as_utc(now)) / _HOUR


def is_in_window(deadline: datetime, now: datetime, window_hours: float) -> bool:
    """True when now < deadline <= now + window_hours.

    The lower bound is strict: a deadline that has already passed (or is
    exactly now) never falls inside a forward-looking window.
    """
    deadline = as_utc(deadline)
    now = as_utc(now)
    return now < deadline <= now + timedelta(hours=window_hours)


def is_eligible(assignment: Assignment, threshold: Threshold, now: datetime) -> bool:
    if assignment.is_completed:
        return False
    if threshold.is_sent(assignment):
        return False
    return is_in_window(assignment.deadline, now, threshold.window_hours)


def select_eligible(
    now: datetime,
    threshold: Threshold,
    candidates: Iterable[Assignment],
) -> list[EligibleReminder]:
    """Return the candidates due a *threshold* reminder at *now*, in input order.

    Completed assignments, assignments already reminded for this threshold
    and deadlines outside (now, now + window] are dropped. Each result
    carries hours_remaining in (0, window_hours].
    """
    return [
        EligibleReminder(
            assignment=a,
            threshold=threshold,
            hours_remaining=hours_until(a.deadline, now),
        )
        for a in candidates
        if is_eligible(a, threshold, now)
    ]
