# eventvax/scheduler.py
"""
Optional periodic re-sync of the blockchain mirror.

Uses APScheduler to re-run the reconciliation pass every
SYNC_INTERVAL_SECONDS. Disabled when the interval is 0. The runner's own
lock still prevents a scheduled pass from overlapping a manual one.
"""

import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_MISSED

from eventvax.services.chain_sync import ChainSyncRunner

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = None


def _on_job_error(event):
    """Log scheduler job errors with full context."""
    exc = event.exception
    logger.error(
        "Scheduled job FAILED: job_id=%s error=%s",
        event.job_id, exc,
        exc_info=(type(exc), exc, None) if exc else None,
    )
    if event.traceback:
        logger.error("Traceback for job %s:\n%s", event.job_id, event.traceback)


def _on_job_missed(event):
    """Log when a scheduled job misses its execution window."""
    logger.warning(
        "Scheduled job MISSED: job_id=%s scheduled_run_time=%s",
        event.job_id,
        event.scheduled_run_time,
    )


def init_scheduler(runner: ChainSyncRunner, interval_seconds: int):
    """
    Start the background scheduler with the periodic blockchain sync job.

    Returns None when the interval is not positive.
    """
    global scheduler

    if interval_seconds <= 0:
        logger.info("Periodic blockchain sync disabled")
        return None

    if scheduler is not None:
        logger.warning("Scheduler already initialized")
        return scheduler

    scheduler = BackgroundScheduler(
        timezone="UTC",
        job_defaults={
            'coalesce': True,  # Combine missed executions
            'max_instances': 1,  # Only one instance of each job at a time
            'misfire_grace_time': 60
        }
    )

    scheduler.add_job(
        func=runner.run_once,
        trigger=IntervalTrigger(seconds=interval_seconds),
        id='sync_events_from_blockchain',
        name='Sync Events From Blockchain',
        replace_existing=True
    )
    logger.info(f"Scheduled job: sync_events_from_blockchain (every {interval_seconds}s)")

    scheduler.add_listener(_on_job_error, EVENT_JOB_ERROR)
    scheduler.add_listener(_on_job_missed, EVENT_JOB_MISSED)

    scheduler.start()
    logger.info("Background scheduler started successfully")

    return scheduler


def shutdown_scheduler():
    """Gracefully shutdown the scheduler."""
    global scheduler

    if scheduler is not None:
        scheduler.shutdown(wait=True)
        logger.info("Background scheduler shutdown complete")
        scheduler = None


def get_scheduler_status():
    """
    Get the current status of all scheduled jobs.

    Returns:
        Dict with scheduler status and job details
    """
    if scheduler is None:
        return {"status": "not_initialized", "jobs": []}

    jobs = []
    for job in scheduler.get_jobs():
        jobs.append({
            "id": job.id,
            "name": job.name,
            "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
            "trigger": str(job.trigger)
        })

    return {
        "status": "running" if scheduler.running else "stopped",
        "jobs": jobs
    }
