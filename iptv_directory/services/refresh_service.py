"""
Directory Refresh Service

Coordinates fetching, ingesting and publishing of both feeds.

Each feed is processed independently: a feed that fails (or is not
configured) keeps its part of the previously published snapshot, so a
working playlist still refreshes the channel list while stale guide data is
kept rather than dropped.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Literal

from iptv_directory.exceptions import FeedError
from iptv_directory.models import Snapshot
from iptv_directory.services.feed_reader import FeedReader
from iptv_directory.services.ingest_service import ingest_guide, ingest_playlist
from iptv_directory.services.playlist_parser_service import PLAYLIST_FEED
from iptv_directory.services.snapshot_store import SnapshotStore
from iptv_directory.services.xmltv_parser_service import GUIDE_FEED
from iptv_directory.utils.logging_helpers import (
    log_refresh_end,
    log_refresh_start,
    sanitize_url_for_logging,
)


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FeedSummary:
    feed: str
    sanitized_url: str
    started_at: datetime
    completed_at: datetime
    status: Literal["success", "failed", "skipped"]
    items_parsed: int = 0
    error: str | None = None
    data: Any = None

    @property
    def duration_seconds(self) -> float:
        return max(0.0, (self.completed_at - self.started_at).total_seconds())

    def to_dict(self) -> dict:
        payload = {
            "feed": self.feed,
            "sanitized_url": self.sanitized_url,
            "status": self.status,
            "items_parsed": self.items_parsed,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat(),
            "duration_seconds": self.duration_seconds,
        }
        if self.error:
            payload["error"] = self.error
        return payload


class DirectoryRefresher:
    """
    Refreshes the directory from the playlist and guide feeds.

    Only one refresh runs at a time; a call made while another refresh is in
    flight returns a "skipped" result immediately.
    """

    def __init__(
        self,
        store: SnapshotStore,
        reader: FeedReader,
        *,
        playlist_url: str | None,
        guide_url: str | None,
        parse_timeout_seconds: int | None = None,
    ) -> None:
        self.store = store
        self.reader = reader
        self.playlist_url = playlist_url
        self.guide_url = guide_url
        self._parse_timeout = parse_timeout_seconds
        self._refresh_lock = asyncio.Lock()
        self.last_result: dict | None = None

    def is_refreshing(self) -> bool:
        return self._refresh_lock.locked()

    async def refresh(self) -> dict:
        """
        Run one refresh cycle. Never raises.

        Returns:
            Dictionary with per-feed statistics, or a skip message.
        """
        if self._refresh_lock.locked():
            logger.warning("Directory refresh already in progress, skipping this request")
            return {
                "status": "skipped",
                "message": "Directory refresh already in progress",
            }

        async with self._refresh_lock:
            log_refresh_start(logger)
            started_at = datetime.now(timezone.utc)
            try:
                result = await self._run(started_at)
            except Exception as exc:  # Catch-all so the scheduler loop survives
                logger.error("Unexpected error during directory refresh: %s", exc, exc_info=True)
                result = {
                    "status": "failed",
                    "error": str(exc),
                    "started_at": started_at.isoformat(),
                }
            self.last_result = result
            return result

    async def _run(self, started_at: datetime) -> dict:
        playlist_summary, guide_summary = await asyncio.gather(
            self._process_feed(PLAYLIST_FEED, self.playlist_url, self._load_playlist),
            self._process_feed(GUIDE_FEED, self.guide_url, self._load_guide),
        )

        published = False
        previous = self.store.current()
        if playlist_summary.status == "success" or guide_summary.status == "success":
            snapshot = self._build_snapshot(previous, playlist_summary, guide_summary)
            self.store.publish(snapshot)
            published = True
        else:
            logger.warning("No feed refreshed successfully - keeping previous snapshot")

        current = self.store.current()
        log_refresh_end(logger, len(current.channels), current.programme_count)

        summaries = [playlist_summary, guide_summary]
        failures = sum(1 for summary in summaries if summary.status == "failed")
        return {
            "status": "success" if failures == 0 else ("partial" if published else "failed"),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "published": published,
            "channels": len(current.channels),
            "categories": len(current.categories),
            "programmes": current.programme_count,
            "feeds": [summary.to_dict() for summary in summaries],
            "started_at": started_at.isoformat(),
        }

    async def _process_feed(
        self,
        feed: str,
        url: str | None,
        loader: Callable[[bytes], Awaitable[tuple[Any, int]]],
    ) -> FeedSummary:
        sanitized_url = sanitize_url_for_logging(url)
        started_at = datetime.now(timezone.utc)

        if not url:
            logger.warning("[%s] Feed URL not configured - skipping", feed)
            return FeedSummary(
                feed=feed,
                sanitized_url=sanitized_url,
                started_at=started_at,
                completed_at=started_at,
                status="skipped",
            )

        try:
            content = await self.reader.read(url, feed)
            data, count = await loader(content)
        except FeedError as exc:
            logger.error("[%s] Refresh failed for %s: %s", feed, sanitized_url, exc)
            return self._failed(feed, sanitized_url, started_at, exc)
        except Exception as exc:
            logger.error(
                "[%s] Unexpected error while refreshing %s: %s",
                feed,
                sanitized_url,
                exc,
                exc_info=True,
            )
            return self._failed(feed, sanitized_url, started_at, exc)

        completed_at = datetime.now(timezone.utc)
        logger.info("[%s] Refreshed %s items from %s", feed, count, sanitized_url)
        return FeedSummary(
            feed=feed,
            sanitized_url=sanitized_url,
            started_at=started_at,
            completed_at=completed_at,
            status="success",
            items_parsed=count,
            data=data,
        )

    @staticmethod
    def _failed(feed: str, sanitized_url: str, started_at: datetime, exc: Exception) -> FeedSummary:
        return FeedSummary(
            feed=feed,
            sanitized_url=sanitized_url,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
            status="failed",
            error=str(exc),
        )

    async def _load_playlist(self, content: bytes) -> tuple[Any, int]:
        channels, categories = ingest_playlist(content)
        return (channels, categories), len(channels)

    async def _load_guide(self, content: bytes) -> tuple[Any, int]:
        guide = await ingest_guide(content, parse_timeout_seconds=self._parse_timeout)
        return guide, sum(len(entries) for entries in guide.values())

    @staticmethod
    def _build_snapshot(
        previous: Snapshot,
        playlist_summary: FeedSummary,
        guide_summary: FeedSummary,
    ) -> Snapshot:
        """Combine freshly ingested parts with last-known-good parts of `previous`."""
        if playlist_summary.status == "success":
            channels, categories = playlist_summary.data
        else:
            channels, categories = previous.channels, previous.categories

        guide = guide_summary.data if guide_summary.status == "success" else previous.guide

        return Snapshot.build(
            channels,
            categories,
            guide,
            fetched_at=datetime.now(timezone.utc),
        )
