"""
In-memory data model for the channel directory

Ingestion-boundary records (PlaylistEntry, ProgramRecord) and the immutable
directory types (Channel, ProgramEntry, Snapshot) published to readers.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType


UNCATEGORIZED = "Uncategorized"
NO_TITLE = "No Title"


@dataclass(frozen=True, slots=True)
class PlaylistEntry:
    """A single #EXTINF entry as read from the playlist feed."""
    name: str
    url: str
    logo: str | None = None
    group_title: str | None = None
    tvg_id: str | None = None


@dataclass(frozen=True, slots=True)
class ProgramRecord:
    """A single <programme> element as read from the guide feed."""
    channel_id: str
    start: datetime
    stop: datetime
    title: str = NO_TITLE
    description: str = ""


@dataclass(frozen=True, slots=True)
class Channel:
    id: str
    display_name: str
    stream_url: str
    category: str = UNCATEGORIZED
    logo_url: str | None = None
    guide_channel_id: str | None = None


@dataclass(frozen=True, slots=True)
class ProgramEntry:
    start: datetime
    end: datetime
    title: str
    description: str = ""


Guide = Mapping[str, tuple[ProgramEntry, ...]]


@dataclass(frozen=True, slots=True)
class NowNext:
    current: ProgramEntry | None = None
    next: ProgramEntry | None = None


@dataclass(frozen=True, slots=True)
class Snapshot:
    """
    One internally consistent view of the directory.

    Never mutated after construction; a refresh builds a new Snapshot and
    publishes it in place of the old one.
    """
    channels: tuple[Channel, ...]
    channel_index: Mapping[str, Channel]
    categories: frozenset[str]
    guide: Guide
    fetched_at: datetime | None = None
    programme_count: int = field(default=0, compare=False)

    @classmethod
    def empty(cls) -> Snapshot:
        return cls.build((), frozenset(), {}, fetched_at=None)

    @classmethod
    def build(
        cls,
        channels: Iterable[Channel],
        categories: Iterable[str],
        guide: Mapping[str, Iterable[ProgramEntry]],
        *,
        fetched_at: datetime | None = None,
    ) -> Snapshot:
        """Freeze the given parts into a new snapshot."""
        frozen_channels = tuple(channels)
        frozen_guide = {channel_id: tuple(entries) for channel_id, entries in guide.items()}
        return cls(
            channels=frozen_channels,
            channel_index=MappingProxyType({channel.id: channel for channel in frozen_channels}),
            categories=frozenset(categories),
            guide=MappingProxyType(frozen_guide),
            fetched_at=fetched_at,
            programme_count=sum(len(entries) for entries in frozen_guide.values()),
        )

    def get_channel(self, channel_id: str) -> Channel | None:
        return self.channel_index.get(channel_id)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


__all__ = [
    "Channel",
    "Guide",
    "NO_TITLE",
    "NowNext",
    "PlaylistEntry",
    "ProgramEntry",
    "ProgramRecord",
    "Snapshot",
    "UNCATEGORIZED",
    "utc_now",
]
