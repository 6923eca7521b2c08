"""Dedicated APScheduler worker process for the weekly reminder push."""
from __future__ import annotations

import logging
import signal
import threading

from apscheduler.schedulers.background import BackgroundScheduler

from practice_log.core.config import settings
from practice_log.core.context import bound_request_id, new_request_id
from practice_log.core.logging import configure_logging
from practice_log.db.session import SessionLocal
from practice_log.services.notifications.dispatcher import dispatch_reminders


logger = logging.getLogger(__name__)


def main() -> None:
    configure_logging(log_level=settings.log_level, access_log=False)
    logger.info("Scheduler worker starting (enabled=%s)", settings.scheduler_enabled)

    scheduler = BackgroundScheduler(timezone=settings.scheduler_timezone)

    if settings.scheduler_enabled:
        register_jobs(scheduler)
        scheduler.start()
        if settings.jobs_run_on_startup:
            logger.info("Running reminder job once on startup")
            run_reminder_job()
    else:
        logger.warning("Scheduler disabled via config; worker will idle")

    stop_event = threading.Event()

    def shutdown(signum, frame):  # pragma: no cover - signal handler
        logger.info("Scheduler worker shutting down (signal=%s)", signum)
        if scheduler.running:
            scheduler.shutdown(wait=False)
        stop_event.set()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    try:
        stop_event.wait()
    except KeyboardInterrupt:  # pragma: no cover - manual stop
        shutdown(signal.SIGINT, None)


def register_jobs(scheduler: BackgroundScheduler) -> None:
    scheduler.add_job(
        run_reminder_job,
        trigger="cron",
        day_of_week=settings.reminder_job_day,
        hour=settings.reminder_job_hour,
        minute=settings.reminder_job_minute,
        id="reminder_job",
        replace_existing=True,
    )
    logger.info(
        "Registered reminder job (day=%s, time=%02d:%02d %s)",
        settings.reminder_job_day,
        settings.reminder_job_hour,
        settings.reminder_job_minute,
        settings.scheduler_timezone,
    )


def run_reminder_job() -> None:
    session = SessionLocal()
    try:
        with bound_request_id(new_request_id("job-")) as request_id:
            result = dispatch_reminders(session, request_id=request_id)
        logger.info("Reminder job complete: sent=%s, failed=%s", result.sent, result.failed)
    except Exception:  # pragma: no cover - keep the worker alive between runs
        logger.exception("Reminder job failed")
    finally:
        session.close()


if __name__ == "__main__":  # pragma: no cover - manual launch
    main()
