# autopayout/workers/scheduler.py
"""
Scheduler:
  - payout_job: check the balance and queue a payout, on a cron schedule.

Config via .env:
  PAYOUT_CRON (default "0 0 * * *"), PAYOUT_TIMEZONE (default America/New_York)
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

import pytz
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from settings import settings

log = logging.getLogger("autopayout.scheduler")

_PAYOUT_JOB_ID = "payout_job_v1"
_scheduler: Optional[BackgroundScheduler] = None


def build_trigger(cron: Optional[str] = None, tz_name: Optional[str] = None) -> CronTrigger:
    """Raises ValueError (bad expression) or UnknownTimeZoneError."""
    tz = pytz.timezone(tz_name or settings.PAYOUT_TIMEZONE)
    return CronTrigger.from_crontab(cron or settings.PAYOUT_CRON, timezone=tz)


def _run_job(job: Callable[[], object]) -> None:
    log.info("Running payout job...")
    try:
        job()
    except Exception:
        log.exception("Payout job failed")


def start_scheduler(
    job: Callable[[], object],
    *,
    cron: Optional[str] = None,
    tz_name: Optional[str] = None,
) -> BackgroundScheduler:
    global _scheduler
    if _scheduler is not None:
        log.info("Scheduler already running.")
        return _scheduler

    trigger = build_trigger(cron, tz_name)
    scheduler = BackgroundScheduler(timezone=trigger.timezone)
    scheduler.add_job(
        func=_run_job,
        args=[job],
        trigger=trigger,
        id=_PAYOUT_JOB_ID,
        name="check balance and queue payout",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    _scheduler = scheduler

    log.info(
        "Scheduler started: payout job cron=%r tz=%s next_run=%s",
        cron or settings.PAYOUT_CRON,
        trigger.timezone,
        get_scheduler_status()["jobs"][0]["next_run_time"],
    )
    return scheduler


def stop_scheduler() -> None:
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        _scheduler = None
        log.info("Scheduler stopped.")


def get_scheduler_status() -> dict:
    status = {"running": False, "jobs": []}
    if _scheduler is None:
        return status
    status["running"] = True
    for job in _scheduler.get_jobs():
        status["jobs"].append({
            "id": job.id,
            "name": job.name,
            "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
            "max_instances": job.max_instances,
        })
    return status
