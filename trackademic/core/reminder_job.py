"""
Trackademic Reminders — Recurring Reminder Job.

Owns the interval timer that drives ReminderDispatcher cycles. The job is
an explicit object with start/shutdown so the host process controls its
lifetime and tests can step it with run_once().
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from trackademic.core.reminder_dispatcher import CycleReport, ReminderDispatcher

if TYPE_CHECKING:
    from trackademic.ports.assignment_store_port import AssignmentStorePort
    from trackademic.ports.notification_port import NotificationPort

logger = logging.getLogger(__name__)

JOB_ID = "send_deadline_reminders"
_DEFAULT_INTERVAL_MINUTES = 15

# The job started by start_reminder_job(); prevents a second timer in one process
_active_job: ReminderJob | None = None


class ReminderJob:
    """Runs the dispatcher on a fixed interval, one cycle at a time."""

    def __init__(
        self,
        dispatcher: ReminderDispatcher,
        interval_minutes: int = _DEFAULT_INTERVAL_MINUTES,
        scheduler: AsyncIOScheduler | None = None,
    ) -> None:
        if interval_minutes <= 0:
            raise ValueError("interval_minutes must be positive")
        self._dispatcher = dispatcher
        self._interval_minutes = interval_minutes
        self._scheduler = scheduler or AsyncIOScheduler(timezone=timezone.utc)
        self._started = False
        self._stopped = False

    @property
    def running(self) -> bool:
        # AsyncIOScheduler may defer shutdown to the next loop iteration,
        # so the job tracks its own state
        return self._started

    @property
    def scheduler(self) -> AsyncIOScheduler:
        return self._scheduler

    def start(self, run_immediately: bool = False) -> None:
        """Schedule the cycle and start the timer. Must run inside an event loop.

        A second call on a running job does nothing. A job that has been shut
        down cannot be started again.
        """
        if self._stopped:
            raise RuntimeError("Reminder job has been shut down; create a new one")
        if self._started:
            logger.info("Reminder job already running, skipping start")
            return

        job_kwargs = {}
        if run_immediately:
            job_kwargs["next_run_time"] = datetime.now(timezone.utc)

        self._scheduler.add_job(
            self._dispatcher.run_cycle,
            trigger="interval",
            minutes=self._interval_minutes,
            id=JOB_ID,
            replace_existing=True,
            max_instances=1,      # no overlapping cycles
            coalesce=True,        # collapse ticks missed while busy or asleep
            **job_kwargs,
        )
        self._scheduler.start()
        self._started = True

        logger.info(
            "Deadline reminder job started (runs every %d minutes)",
            self._interval_minutes,
        )

    def shutdown(self) -> None:
        """Stop the timer. An in-flight cycle is abandoned, not awaited."""
        global _active_job

        if not self._started:
            return
        self._started = False
        self._stopped = True
        if _active_job is self:
            _active_job = None
        self._scheduler.shutdown(wait=False)
        logger.info("Deadline reminder job stopped")

    async def run_once(self) -> CycleReport | None:
        """Run a single cycle now, outside the timer."""
        return await self._dispatcher.run_cycle()


def build_dispatcher(
    store: AssignmentStorePort | None = None,
    notifier: NotificationPort | None = None,
) -> ReminderDispatcher:
    """Create a dispatcher, filling in the configured store and notifier."""
    from trackademic.config import settings

    if store is None:
        from trackademic.data.db import AssignmentDB

        store = AssignmentDB()
    if notifier is None:
        from trackademic.adapters.notifier_factory import create_notifier

        notifier = create_notifier()

    return ReminderDispatcher(
        store,
        notifier,
        send_timeout=settings.EMAIL_TIMEOUT_SECONDS,
        max_concurrency=settings.REMINDER_MAX_CONCURRENCY,
    )


def start_reminder_job(
    store: AssignmentStorePort | None = None,
    notifier: NotificationPort | None = None,
) -> ReminderJob:
    """Build and start the reminder job, from inside the running event loop.

    While a job started here is running, further calls return that same job
    and ignore their arguments.
    """
    global _active_job
    from trackademic.config import settings

    if _active_job is not None and _active_job.running:
        logger.info("Reminder job already running, reusing it")
        return _active_job

    job = ReminderJob(
        build_dispatcher(store, notifier),
        interval_minutes=settings.REMINDER_INTERVAL_MINUTES,
    )
    job.start()
    _active_job = job
    return job
