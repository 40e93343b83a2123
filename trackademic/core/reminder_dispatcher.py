"""
Trackademic Reminders — Reminder Dispatcher.

One cycle scans the assignment store for each reminder threshold (24h,
then 1h), sends the due reminders and records each one as sent only after
the mail provider has accepted it.

Failure handling:
- Candidate query fails -> that threshold is skipped this cycle, no flags change
- Send fails or times out -> flag stays unset, retried next cycle
- Flag write fails after a send -> logged; the reminder may go out again

This module is provider-agnostic: it depends on AssignmentStorePort and
NotificationPort protocols, not on specific implementations.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Sequence

from trackademic.core.reminder_evaluator import EligibleReminder, select_eligible
from trackademic.data.models import THRESHOLDS, Threshold
from trackademic.ports.notification_port import NotificationError

if TYPE_CHECKING:
    from trackademic.ports.assignment_store_port import AssignmentStorePort
    from trackademic.ports.notification_port import NotificationPort

logger = logging.getLogger(__name__)

_DEFAULT_SEND_TIMEOUT = 10.0
_DEFAULT_MAX_CONCURRENCY = 5


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ThresholdOutcome:
    """Counts for one threshold's scan within a cycle."""

    threshold: str
    candidates: int = 0
    sent: int = 0
    failed: int = 0
    unrecorded: int = 0       # delivered, but the flag could not be saved
    error: str | None = None  # set when the candidate query failed


@dataclass
class CycleReport:
    started_at: datetime
    outcomes: list[ThresholdOutcome] = field(default_factory=list)

    @property
    def total_sent(self) -> int:
        return sum(o.sent for o in self.outcomes)

    @property
    def total_failed(self) -> int:
        return sum(o.failed for o in self.outcomes)


class ReminderDispatcher:
    """Runs scan-and-notify cycles against a store and a notifier."""

    def __init__(
        self,
        store: AssignmentStorePort,
        notifier: NotificationPort,
        clock: Callable[[], datetime] | None = None,
        send_timeout: float = _DEFAULT_SEND_TIMEOUT,
        max_concurrency: int = _DEFAULT_MAX_CONCURRENCY,
        thresholds: Sequence[Threshold] = THRESHOLDS,
    ) -> None:
        if send_timeout <= 0:
            raise ValueError("send_timeout must be positive")
        if max_concurrency <= 0:
            raise ValueError("max_concurrency must be positive")

        self._store = store
        self._notifier = notifier
        self._clock = clock or _utc_now
        self._send_timeout = send_timeout
        self._max_concurrency = max_concurrency
        self._thresholds = tuple(thresholds)
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def run_cycle(self) -> CycleReport | None:
        """Run one cycle across all thresholds.

        Returns None without doing anything if a cycle is already running.
        Never raises: every failure is logged and counted in the report.
        """
        if self._lock.locked():
            logger.warning("Reminder cycle still running, skipping this tick")
            return None

        async with self._lock:
            now = self._clock()
            report = CycleReport(started_at=now)
            logger.debug("Running deadline reminder check at %s", now.isoformat())

            for threshold in self._thresholds:
                report.outcomes.append(await self._run_threshold(threshold, now))

            if report.total_sent > 0:
                logger.info("Sent %d reminder(s)", report.total_sent)
            if report.total_failed > 0:
                logger.warning(
                    "%d reminder(s) failed and will be retried next cycle",
                    report.total_failed,
                )
            return report

    async def _run_threshold(self, threshold: Threshold, now: datetime) -> ThresholdOutcome:
        outcome = ThresholdOutcome(threshold=threshold.name)

        try:
            candidates = self._store.find_reminder_candidates(threshold, now)
        except Exception as exc:
            logger.exception("Reminder scan for %s threshold failed", threshold.name)
            outcome.error = str(exc) or type(exc).__name__
            return outcome

        eligible = select_eligible(now, threshold, candidates)
        outcome.candidates = len(eligible)
        if not eligible:
            return outcome

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _bounded(item: EligibleReminder) -> None:
            async with semaphore:
                await self._process(item, outcome)

        await asyncio.gather(*(_bounded(item) for item in eligible))
        return outcome

    async def _process(self, item: EligibleReminder, outcome: ThresholdOutcome) -> None:
        """Send one reminder and record it. Never raises."""
        assignment = item.assignment
        label = item.threshold.name

        if not assignment.user_email:
            logger.warning(
                "No recipient for %s reminder of '%s' (%s), skipping",
                label, assignment.title, assignment.id,
            )
            outcome.failed += 1
            return

        try:
            await asyncio.wait_for(
                self._notifier.send_deadline_reminder(
                    to=assignment.user_email,
                    student_name=assignment.user_name or "",
                    assignment_title=assignment.title,
                    course=assignment.course,
                    deadline=assignment.deadline,
                    hours_remaining=item.hours_remaining,
                ),
                timeout=self._send_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Timed out sending %s reminder for '%s' after %.1fs",
                label, assignment.title, self._send_timeout,
            )
            outcome.failed += 1
            return
        except NotificationError as exc:
            logger.warning("Failed to send %s reminder for '%s': %s", label, assignment.title, exc)
            outcome.failed += 1
            return
        except Exception:
            logger.exception("Unexpected error sending %s reminder for '%s'", label, assignment.title)
            outcome.failed += 1
            return

        outcome.sent += 1

        try:
            recorded = self._store.set_reminder_flag(assignment.id, item.threshold)
        except Exception as exc:
            logger.warning(
                "%s reminder for '%s' was sent but could not be recorded: %s",
                label, assignment.title, exc,
            )
            outcome.unrecorded += 1
            return

        if not recorded:
            logger.warning(
                "%s reminder for '%s' was sent but assignment %s no longer exists",
                label, assignment.title, assignment.id,
            )
            outcome.unrecorded += 1
