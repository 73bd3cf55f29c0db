"""
Campaign Completion Scheduler

Runs CampaignService.complete_expired_campaigns on a cron cadence
(APScheduler AsyncIOScheduler, daily at midnight UTC by default).
"""

import asyncio
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from .models import CompletionRunSummary

if TYPE_CHECKING:
    from .campaign_service import CampaignService

logger = logging.getLogger(__name__)


class CompletionScheduler:
    """
    Owns the scheduled completion job.

    At most one run is in flight at a time: APScheduler is told so with
    max_instances=1, and manual run_once() calls share the same lock.
    shutdown() stops new runs and waits for the in-flight one to finish.
    """

    JOB_ID = "campaign_completion_job"

    def __init__(
        self,
        service: "CampaignService",
        cron: str = "0 0 * * *",
        timezone: str = "UTC",
    ):
        self.service = service
        self.cron = cron
        self.timezone = timezone
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    @property
    def next_run_time(self) -> Optional[datetime]:
        if not self.running:
            return None
        job = self._scheduler.get_job(self.JOB_ID)
        return job.next_run_time if job else None

    def start(self) -> None:
        """
        Register the cron job and start the scheduler.

        Must be called with a running event loop.

        Raises:
            ValueError: if the cron expression or timezone is invalid
        """
        if self.running:
            return

        trigger = CronTrigger.from_crontab(self.cron, timezone=self.timezone)

        self._scheduler = AsyncIOScheduler(timezone=self.timezone)
        self._scheduler.add_job(
            self.run_once,
            trigger,
            id=self.JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        logger.info(f"Completion scheduler started (cron '{self.cron}' {self.timezone}), next run at {self.next_run_time}")

    async def run_once(self) -> CompletionRunSummary:
        """Run one completion pass now"""
        async with self._lock:
            logger.info("Running campaign completion job")
            return await self.service.complete_expired_campaigns()

    async def shutdown(self) -> None:
        """Stop triggering new runs, then wait for an in-flight run"""
        if self._scheduler is not None:
            if self._scheduler.running:
                self._scheduler.shutdown(wait=False)
            self._scheduler = None

        async with self._lock:
            pass
        logger.info("Completion scheduler stopped")


__all__ = ["CompletionScheduler"]
