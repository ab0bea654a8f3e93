"""
Reminder worker: polls for due reminders and emails them.

Can run as:
  1. FastAPI background task (same process, when RUN_REMINDER_WORKER is set)
  2. Standalone worker (separate service): python -m app.worker
"""
import asyncio
from typing import Optional

from app.config import get_settings
from app.database import AsyncSessionLocal
from app.services.email_service import process_due_reminders
from app.utils.logger import logger


async def run_once() -> int:
    """One polling pass. Returns the number of reminders sent."""
    async with AsyncSessionLocal() as db:
        processed = await process_due_reminders(db)
    return len(processed)


async def worker_loop(
    poll_interval: Optional[float] = None,
    max_idle_interval: Optional[float] = None,
    stop_event: Optional[asyncio.Event] = None,
) -> None:
    """
    Poll for due reminders until stop_event is set.

    Uses adaptive polling: starts at poll_interval, backs off to max_idle_interval
    while nothing is due, resets once a reminder goes out.
    """
    settings = get_settings()
    poll_interval = poll_interval or settings.reminder_poll_interval
    max_idle_interval = max_idle_interval or settings.reminder_max_idle_interval
    stop_event = stop_event or asyncio.Event()

    current_interval = poll_interval
    logger.info("worker.started", extra={"poll_interval": poll_interval})

    while not stop_event.is_set():
        try:
            sent = await run_once()
            if sent:
                current_interval = poll_interval
            else:
                current_interval = min(current_interval * 1.5, max_idle_interval)
        except Exception as exc:
            logger.error("worker.poll_error", extra={"error": str(exc)[:500], "error_type": type(exc).__name__})
            current_interval = max_idle_interval

        try:
            await asyncio.wait_for(stop_event.wait(), timeout=current_interval)
        except asyncio.TimeoutError:
            pass

    logger.info("worker.stopped")


async def main() -> None:
    """Run worker as standalone process."""
    from app.database import init_db
    await init_db()
    await worker_loop()


if __name__ == "__main__":
    asyncio.run(main())
