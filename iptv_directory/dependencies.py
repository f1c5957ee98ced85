"""
Dependency Wiring

Builds the process-wide service instances from settings and exposes them to
FastAPI routes through `Depends`, so tests can override or reset them.
"""
import logging

from iptv_directory.config import settings
from iptv_directory.services.feed_reader import FeedReader
from iptv_directory.services.keepalive_service import KeepalivePinger
from iptv_directory.services.query_service import DirectoryQueryService
from iptv_directory.services.refresh_service import DirectoryRefresher
from iptv_directory.services.scheduler_service import DirectoryScheduler
from iptv_directory.services.snapshot_store import SnapshotStore


logger = logging.getLogger(__name__)

_store: SnapshotStore | None = None
_refresher: DirectoryRefresher | None = None
_query_service: DirectoryQueryService | None = None
_scheduler: DirectoryScheduler | None = None


def get_snapshot_store() -> SnapshotStore:
    global _store
    if _store is None:
        _store = SnapshotStore()
    return _store


def get_refresher() -> DirectoryRefresher:
    """
    Get or create the refresher bound to the configured feeds.

    Returns:
        The global DirectoryRefresher instance
    """
    global _refresher
    if _refresher is None:
        _refresher = DirectoryRefresher(
            get_snapshot_store(),
            FeedReader(
                timeout=settings.fetch_timeout_sec,
                max_retries=settings.fetch_max_retries,
                backoff_factor=settings.fetch_backoff_factor,
            ),
            playlist_url=settings.m3u_url,
            guide_url=settings.epg_url,
            parse_timeout_seconds=settings.guide_parse_timeout_sec,
        )
        logger.debug("Created directory refresher")
    return _refresher


def get_query_service() -> DirectoryQueryService:
    global _query_service
    if _query_service is None:
        _query_service = DirectoryQueryService(get_snapshot_store())
    return _query_service


def get_scheduler() -> DirectoryScheduler:
    """Get or create the scheduler running refresh and self-ping jobs."""
    global _scheduler
    if _scheduler is None:
        pinger = (
            KeepalivePinger(settings.self_ping_url, timeout=settings.fetch_timeout_sec)
            if settings.self_ping_url
            else None
        )
        _scheduler = DirectoryScheduler(
            get_refresher(),
            refresh_interval_sec=settings.refresh_interval_sec,
            pinger=pinger,
            ping_interval_sec=settings.self_ping_interval_sec,
        )
    return _scheduler


def reset_dependencies() -> None:
    """
    Drop all wired instances (mainly for testing).

    WARNING: Only use this in test environments!
    """
    global _store, _refresher, _query_service, _scheduler
    if _scheduler is not None:
        _scheduler.shutdown()
    _store = None
    _refresher = None
    _query_service = None
    _scheduler = None
    logger.debug("Dependencies reset")
