"""Tests for background jobs: scheduled refresh and self-ping."""
from unittest.mock import AsyncMock

import httpx
import pytest

from iptv_directory.services.keepalive_service import KeepalivePinger
from iptv_directory.services.scheduler_service import (
    KEEPALIVE_JOB_ID,
    REFRESH_JOB_ID,
    DirectoryScheduler,
)

pytestmark = pytest.mark.anyio


async def test_start_registers_jobs_and_shutdown_stops():
    refresher = AsyncMock()
    pinger = KeepalivePinger("http://self.example/manifest.json")
    scheduler = DirectoryScheduler(refresher, refresh_interval_sec=600, pinger=pinger, ping_interval_sec=60)

    scheduler.start()
    try:
        assert scheduler.is_running()
        assert scheduler.scheduler.get_job(REFRESH_JOB_ID) is not None
        assert scheduler.scheduler.get_job(KEEPALIVE_JOB_ID) is not None
        assert scheduler.get_next_run_time() is not None
    finally:
        scheduler.shutdown()

    assert not scheduler.is_running()
    assert scheduler.get_next_run_time() is None


async def test_no_keepalive_job_without_url():
    scheduler = DirectoryScheduler(AsyncMock(), refresh_interval_sec=600)
    scheduler.start()
    try:
        assert scheduler.scheduler.get_job(KEEPALIVE_JOB_ID) is None
    finally:
        scheduler.shutdown()


async def test_refresh_job_swallows_errors():
    refresher = AsyncMock()
    refresher.refresh.side_effect = RuntimeError("unexpected")
    scheduler = DirectoryScheduler(refresher, refresh_interval_sec=600)

    await scheduler._refresh_job()

    refresher.refresh.assert_awaited_once()


async def test_keepalive_ping_success():
    pinger = KeepalivePinger(
        "http://self.example/manifest.json",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})),
    )
    assert await pinger.ping() is True


async def test_keepalive_ping_failure_is_logged_not_raised():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    pinger = KeepalivePinger("http://self.example/manifest.json", transport=httpx.MockTransport(handler))
    assert await pinger.ping() is False
