"""Worker process that re-plans drifting goals once a day."""
from __future__ import annotations

import logging
import signal
import threading

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_MISSED, JobExecutionEvent
from apscheduler.schedulers.background import BackgroundScheduler

from app.core.config import settings
from app.core.logging import configure_logging
from app.db.session import SessionLocal
from app.observability.metrics import log_metric
from app.services.adjustment_sweep import SweepResult, run_adjustment_sweep

logger = logging.getLogger(__name__)

ADJUSTMENT_JOB_ID = "adjustment_sweep_job"


def main() -> None:
    configure_logging(log_level=settings.log_level)
    logger.info("Adjustment worker starting (enabled=%s)", settings.scheduler_enabled)

    scheduler = build_scheduler()
    if settings.scheduler_enabled:
        register_jobs(scheduler)
        scheduler.start()
        job = scheduler.get_job(ADJUSTMENT_JOB_ID)
        if job is not None:
            logger.info("Next adjustment sweep at %s", job.next_run_time)
        if settings.jobs_run_on_startup:
            logger.info("Running adjustment sweep once on startup")
            run_adjustment_job()
    else:
        logger.warning("SCHEDULER_ENABLED is false; adjustment worker will idle")

    stop_event = threading.Event()

    def shutdown(signum, frame):  # pragma: no cover - signal handler
        logger.info("Adjustment worker shutting down (signal=%s)", signum)
        if scheduler.running:
            scheduler.shutdown(wait=False)
        stop_event.set()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    try:
        stop_event.wait()
    except KeyboardInterrupt:  # pragma: no cover - manual stop
        shutdown(signal.SIGINT, None)


def build_scheduler() -> BackgroundScheduler:
    scheduler = BackgroundScheduler(
        timezone=settings.scheduler_timezone,
        job_defaults={"coalesce": True, "max_instances": 1},
    )
    scheduler.add_listener(_on_job_problem, EVENT_JOB_ERROR | EVENT_JOB_MISSED)
    return scheduler


def register_jobs(scheduler: BackgroundScheduler) -> None:
    """Schedule the daily sweep; a run missed by under an hour still fires."""
    scheduler.add_job(
        run_adjustment_job,
        trigger="cron",
        hour=settings.adjustment_job_hour,
        minute=settings.adjustment_job_minute,
        id=ADJUSTMENT_JOB_ID,
        replace_existing=True,
        misfire_grace_time=3600,
    )
    logger.info(
        "Registered adjustment sweep (daily at %02d:%02d %s)",
        settings.adjustment_job_hour,
        settings.adjustment_job_minute,
        settings.scheduler_timezone,
    )


def run_adjustment_job() -> SweepResult:
    session = SessionLocal()
    try:
        result = run_adjustment_sweep(session)
    finally:
        session.close()
    logger.info(
        "Adjustment sweep complete: checked=%s, adjusted=%s, failures=%s",
        result.goals_checked,
        result.goals_adjusted,
        result.failures,
    )
    return result


def _on_job_problem(event: JobExecutionEvent) -> None:
    if event.code == EVENT_JOB_MISSED:
        logger.warning("Job %s missed its run at %s", event.job_id, event.scheduled_run_time)
        log_metric("jobs.missed", 1, metadata={"job": event.job_id})
        return
    logger.error("Job %s failed", event.job_id, exc_info=event.exception)
    log_metric("jobs.failed", 1, metadata={"job": event.job_id, "error": type(event.exception).__name__})


if __name__ == "__main__":  # pragma: no cover - manual launch
    main()
