"""
pytest configuration and shared fixtures.

Async tests use the anyio plugin:

    pytestmark = pytest.mark.anyio
"""
from datetime import datetime, timedelta, timezone

import pytest

from iptv_directory.models import Channel, ProgramEntry, Snapshot
from iptv_directory.services.snapshot_store import SnapshotStore


T0 = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def at(seconds: int) -> datetime:
    """Instant `seconds` after the fixed test epoch"""
    return T0 + timedelta(seconds=seconds)


PLAYLIST = b"""#EXTM3U
#EXTINF:-1 tvg-id="news.us" tvg-logo="http://logo.example/news.png" group-title="News",News 24
http://streams.example/news/index.m3u8
#EXTINF:-1 tvg-id="movies.us" group-title=" Movies ",Movie Channel
http://streams.example/movies/feature.mp4
#EXTINF:-1 tvg-id="sport.uk" group-title="Sports",Sport One
http://streams.example/sport/live.ts
#EXTINF:-1,Community TV
http://streams.example/community
"""

GUIDE = b"""<?xml version="1.0" encoding="UTF-8"?>
<tv generator-info-name="test">
  <channel id="news.us"><display-name>News 24</display-name></channel>
  <programme channel="news.us" start="20250101110000 +0000" stop="20250101120000 +0000">
    <title>Morning Bulletin</title>
    <desc>Headlines</desc>
  </programme>
  <programme channel="news.us" start="20250101120000 +0000" stop="20250101130000 +0000">
    <title>Midday News</title>
  </programme>
  <programme channel="news.us" start="20250101130000 +0000" stop="20250101140000 +0000">
    <title>Afternoon Report</title>
  </programme>
  <programme channel="sport.uk" start="20250101130000 +0100" stop="20250101150000 +0100">
    <title>Match of the Day</title>
  </programme>
</tv>
"""


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def channels() -> tuple[Channel, ...]:
    return (
        Channel(
            id="channel-0",
            display_name="News 24",
            stream_url="http://streams.example/news/index.m3u8",
            category="News",
            logo_url="http://logo.example/news.png",
            guide_channel_id="G",
        ),
        Channel(
            id="channel-1",
            display_name="Movie Channel",
            stream_url="http://streams.example/movies/feature.mp4",
            category="Movies",
            guide_channel_id="missing",
        ),
        Channel(
            id="channel-2",
            display_name="Sport One",
            stream_url="http://streams.example/sport/live.ts",
            category="Sports",
        ),
        Channel(
            id="channel-3",
            display_name="Breaking News",
            stream_url="http://streams.example/breaking",
            category="News",
        ),
    )


@pytest.fixture
def guide() -> dict[str, tuple[ProgramEntry, ...]]:
    return {
        "G": (
            ProgramEntry(start=at(100), end=at(200), title="A"),
            ProgramEntry(start=at(200), end=at(300), title="B"),
        ),
    }


@pytest.fixture
def snapshot(channels, guide) -> Snapshot:
    return Snapshot.build(
        channels,
        {channel.category for channel in channels},
        guide,
        fetched_at=T0,
    )


@pytest.fixture
def store(snapshot) -> SnapshotStore:
    return SnapshotStore(snapshot)
