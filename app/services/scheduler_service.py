"""Scheduled repair of employer statistics."""

import logging
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.services.stats_service import EmployerStatsService

logger = logging.getLogger(__name__)

RESYNC_JOB_ID = "employer_stats_resync"


class SchedulerService:
    """Runs the daily employer stats resync.

    Counter increments are best-effort, so this periodic recount is what keeps
    them trustworthy over time.
    """

    _instance: "SchedulerService | None" = None
    _scheduler: AsyncIOScheduler | None = None

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, stats: EmployerStatsService | None = None):
        if self._initialized:
            return
        self._initialized = True
        self._scheduler = None
        self.stats = stats or EmployerStatsService()
        self.last_run_at: datetime | None = None
        self.last_run_repaired: int | None = None
        self.last_run_status: str | None = None

    @property
    def scheduler(self) -> AsyncIOScheduler | None:
        return self._scheduler

    async def start(self):
        """Start the scheduler and register the resync job."""
        if self._scheduler is not None and self._scheduler.running:
            logger.info("Scheduler already running")
            return

        self._scheduler = AsyncIOScheduler(timezone=settings.scheduler_timezone)
        self._scheduler.start()

        trigger = CronTrigger(
            hour=settings.stats_resync_hour,
            minute=settings.stats_resync_minute,
            timezone=settings.scheduler_timezone,
        )
        self._scheduler.add_job(
            self.run_resync,
            trigger=trigger,
            id=RESYNC_JOB_ID,
            replace_existing=True,
            misfire_grace_time=3600,
            coalesce=True,
        )

        job = self._scheduler.get_job(RESYNC_JOB_ID)
        logger.info(
            f"Scheduled employer stats resync at "
            f"{settings.stats_resync_hour}:{settings.stats_resync_minute:02d} "
            f"({settings.scheduler_timezone}), next run: {job.next_run_time if job else None}"
        )

    async def stop(self):
        """Stop the scheduler."""
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Scheduler stopped")

    async def run_resync(self) -> int | None:
        """Resync every employer now; failures are logged, not raised."""
        self.last_run_at = datetime.now(UTC).replace(tzinfo=None)
        try:
            repaired = await self.stats.resync_all()
        except SQLAlchemyError as e:
            self.last_run_status = "failed"
            logger.error(f"Scheduled stats resync failed: {e}")
            return None

        self.last_run_status = "success"
        self.last_run_repaired = repaired
        return repaired

    def get_status(self) -> dict:
        """Get scheduler status."""
        if self._scheduler is None:
            return {"scheduler_running": False, "jobs_count": 0}

        jobs = self._scheduler.get_jobs()
        next_run = None
        next_runs = [j.next_run_time for j in jobs if j.next_run_time]
        if next_runs:
            next_run = min(next_runs).astimezone(ZoneInfo(settings.scheduler_timezone))

        return {
            "scheduler_running": self._scheduler.running,
            "jobs_count": len(jobs),
            "next_scheduled_run": next_run,
            "last_run_at": self.last_run_at,
            "last_run_status": self.last_run_status,
            "last_run_repaired": self.last_run_repaired,
        }


# Global scheduler service instance
scheduler_service = SchedulerService()
