"""
Directory Query Service

Read operations consumed by the add-on routes. Every call reads the current
snapshot once and never mutates it; unknown ids produce "not found" values
rather than errors.
"""
from datetime import datetime, timezone
from urllib.parse import quote, urlsplit
import logging

from iptv_directory.models import Channel
from iptv_directory.schemas import (
    BehaviorHints,
    CatalogResponse,
    Meta,
    MetaPreview,
    MetaResponse,
    ProxyHeaders,
    Stream,
    StreamResponse,
)
from iptv_directory.services.now_next import resolve_now_next
from iptv_directory.services.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)

ALL_GENRES = "All"
UNKNOWN_CHANNEL_NAME = "Unknown"
NO_EPG_DESCRIPTION = "No EPG"

MIME_HLS = "application/vnd.apple.mpegurl"
MIME_MP4 = "video/mp4"
MIME_MPEG_TS = "video/mp2t"

# Some origins reject requests from bare HTTP clients
STREAM_REQUEST_HEADERS = {
    "User-Agent": "Mozilla/5.0",
    "Accept": "*/*",
    "Accept-Encoding": "gzip, deflate, br",
    "Accept-Language": "en-US,en;q=0.9",
    "Range": "bytes=0-",
}


def classify_stream(url: str) -> str:
    """
    Pick the stream MIME type from the URL suffix

    The path suffix is checked first so `index.m3u8?token=...` is HLS; then
    the whole URL, for players like `play.php?file=live.m3u8`.
    """
    lowered = url.lower()
    for candidate in (urlsplit(lowered).path, lowered):
        if candidate.endswith(".m3u8"):
            return MIME_HLS
        if candidate.endswith(".mp4"):
            return MIME_MP4
    return MIME_MPEG_TS


def category_image(category: str | None) -> str:
    return f"https://source.unsplash.com/1600x900/?{quote(category or 'tv', safe='')}"


class DirectoryQueryService:
    """Answers catalog, stream and meta queries against the live snapshot"""

    def __init__(self, store: SnapshotStore) -> None:
        self.store = store

    def genres(self) -> list[str]:
        """Genre options for the catalog: "All" followed by the known categories"""
        return [ALL_GENRES, *sorted(self.store.current().categories)]

    def list_channels(self, genre: str | None = None) -> CatalogResponse:
        """
        List channels, optionally restricted to one category

        Args:
            genre: Exact, case-sensitive category; None or "All" means every channel

        Returns:
            Catalog entries in snapshot order
        """
        snapshot = self.store.current()
        if genre is None or genre == ALL_GENRES:
            channels = snapshot.channels
        else:
            channels = tuple(channel for channel in snapshot.channels if channel.category == genre)

        logger.debug("Catalog request genre=%r: %d channels", genre, len(channels))
        return CatalogResponse(metas=[self._to_preview(channel) for channel in channels])

    def describe_stream(self, channel_id: str) -> StreamResponse:
        channel = self.store.current().get_channel(channel_id)
        if channel is None:
            logger.debug("Stream request for unknown channel %s", channel_id)
            return StreamResponse(streams=[])

        return StreamResponse(streams=[
            Stream(
                title=channel.display_name,
                url=channel.stream_url,
                media_type=classify_stream(channel.stream_url),
                behavior_hints=BehaviorHints(
                    not_web_ready=False,
                    proxy_headers=ProxyHeaders(request=dict(STREAM_REQUEST_HEADERS)),
                ),
            )
        ])

    def describe_channel(self, channel_id: str, now: datetime | None = None) -> MetaResponse:
        """
        Describe a channel with its current and next programme

        Args:
            channel_id: Channel id
            now: Reference instant (defaults to the current UTC time)
        """
        snapshot = self.store.current()
        channel = snapshot.get_channel(channel_id)
        if channel is None:
            logger.debug("Meta request for unknown channel %s", channel_id)
            return MetaResponse(meta=Meta(id=channel_id, name=UNKNOWN_CHANNEL_NAME))

        at = now or datetime.now(timezone.utc)
        now_next = resolve_now_next(snapshot.guide, channel.guide_channel_id, at)

        titles = [program.title for program in (now_next.current, now_next.next) if program is not None]
        description = " → ".join(titles) if titles else NO_EPG_DESCRIPTION

        image = category_image(channel.category)
        return MetaResponse(meta=Meta(
            id=channel.id,
            name=channel.display_name,
            logo=channel.logo_url,
            poster=image,
            background=image,
            description=description,
        ))

    @staticmethod
    def _to_preview(channel: Channel) -> MetaPreview:
        image = category_image(channel.category)
        return MetaPreview(
            id=channel.id,
            name=channel.display_name,
            logo=channel.logo_url,
            poster=image,
            background=image,
            description=f"Category: {channel.category}",
        )
