"""Dedicated APScheduler worker process."""
from __future__ import annotations

import logging
import signal
import threading

from apscheduler.schedulers.background import BackgroundScheduler

from lifepilot.core.config import settings
from lifepilot.core.logging import configure_logging
from lifepilot.db.session import new_session
from lifepilot.services.job_runner import expire_stale_tickets

logger = logging.getLogger(__name__)

TICKET_SWEEP_JOB_ID = "ticket_sweep_job"


def main() -> None:
    configure_logging(log_level=settings.log_level)
    logger.info("Scheduler worker starting (enabled=%s)", settings.scheduler_enabled)

    scheduler = BackgroundScheduler(timezone=settings.scheduler_timezone)

    if settings.scheduler_enabled:
        register_jobs(scheduler)
        scheduler.start()
        if settings.jobs_run_on_startup:
            logger.info("Running ticket sweep once on startup")
            run_ticket_sweep_job()
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
        run_ticket_sweep_job,
        trigger="interval",
        minutes=settings.ticket_sweep_interval_minutes,
        id=TICKET_SWEEP_JOB_ID,
        replace_existing=True,
    )
    logger.info(
        "Registered ticket sweep every %s min (ttl=%ss, tz=%s)",
        settings.ticket_sweep_interval_minutes,
        settings.generation_ticket_ttl_seconds,
        settings.scheduler_timezone,
    )


def run_ticket_sweep_job() -> None:
    session = new_session()
    try:
        result = expire_stale_tickets(session)
        logger.info(
            "Ticket sweep complete: checked=%s, expired=%s",
            result.tickets_checked,
            result.tickets_expired,
        )
    except Exception:  # pragma: no cover - keep the worker alive
        logger.exception("Ticket sweep failed")
    finally:
        session.close()


if __name__ == "__main__":  # pragma: no cover - manual launch
    main()
