"""
Trackademic Reminders — Service runner.

Starts the deadline reminder job and keeps it alive until the process
receives SIGINT or SIGTERM.
"""

from __future__ import annotations

import asyncio
import logging
import signal

from trackademic.config import settings
from trackademic.core.reminder_job import start_reminder_job

logger = logging.getLogger(__name__)


async def serve(stop_event: asyncio.Event | None = None) -> None:
    """Run the reminder job until *stop_event* is set (or a stop signal arrives)."""
    if stop_event is None:
        stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
            installed.append(sig)
        except (NotImplementedError, RuntimeError):
            # Ctrl+C still raises KeyboardInterrupt where handlers are unsupported
            logger.debug("Signal handler for %s unavailable", sig.name)

    job = None
    try:
        job = start_reminder_job()
        await stop_event.wait()
    finally:
        if job is not None:
            job.shutdown()
        for sig in installed:
            loop.remove_signal_handler(sig)


def main() -> None:
    """Entry point: configure logging and run until stopped."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info("Starting Trackademic reminder service...")
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        pass
    logger.info("Trackademic reminder service stopped")


if __name__ == "__main__":
    main()
