import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from iptv_directory.services.keepalive_service import KeepalivePinger
from iptv_directory.services.refresh_service import DirectoryRefresher


logger = logging.getLogger(__name__)

REFRESH_JOB_ID = 'directory_refresh'
KEEPALIVE_JOB_ID = 'self_ping'


class DirectoryScheduler:
    """Scheduler for the directory refresh and the optional self-ping"""

    def __init__(
        self,
        refresher: DirectoryRefresher,
        refresh_interval_sec: int,
        pinger: KeepalivePinger | None = None,
        ping_interval_sec: int = 120,
    ):
        self.refresher = refresher
        self.refresh_interval_sec = refresh_interval_sec
        self.pinger = pinger
        self.ping_interval_sec = ping_interval_sec
        self.scheduler: AsyncIOScheduler | None = None

    async def _refresh_job(self) -> None:
        """Background job that refreshes the directory"""
        logger.info("Scheduled directory refresh triggered")
        try:
            result = await self.refresher.refresh()
            if result.get("status") == "failed":
                logger.error("Scheduled refresh failed: %s", result.get('error') or result.get('feeds'))
        except Exception as e:
            logger.error("Exception in scheduled refresh: %s", e, exc_info=True)

    async def _keepalive_job(self) -> None:
        if self.pinger is None:
            return
        try:
            await self.pinger.ping()
        except Exception as e:
            logger.error("Exception in self-ping: %s", e, exc_info=True)

    def start(self) -> None:
        """Start the scheduler; the first refresh runs immediately"""
        if self.scheduler and self.scheduler.running:
            logger.warning("Scheduler already running")
            return

        self.scheduler = AsyncIOScheduler(timezone='UTC')
        self.scheduler.add_job(
            self._refresh_job,
            trigger=IntervalTrigger(seconds=self.refresh_interval_sec, timezone='UTC'),
            id=REFRESH_JOB_ID,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=self.refresh_interval_sec,
            next_run_time=datetime.now(timezone.utc),
        )

        if self.pinger is not None:
            self.scheduler.add_job(
                self._keepalive_job,
                trigger=IntervalTrigger(seconds=self.ping_interval_sec, timezone='UTC'),
                id=KEEPALIVE_JOB_ID,
                max_instances=1,
                coalesce=True,
            )
            logger.info("Self-ping scheduled every %ss", self.ping_interval_sec)

        self.scheduler.start()
        logger.info(
            "Scheduler started. Refresh every %ss, first run now",
            self.refresh_interval_sec,
        )

    def shutdown(self) -> None:
        """Shutdown the scheduler"""
        if self.scheduler and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")
        self.scheduler = None

    def is_running(self) -> bool:
        return bool(self.scheduler and self.scheduler.running)

    def get_next_run_time(self) -> datetime | None:
        """Get next scheduled refresh time"""
        if not self.scheduler:
            return None
        job = self.scheduler.get_job(REFRESH_JOB_ID)
        return job.next_run_time if job else None
