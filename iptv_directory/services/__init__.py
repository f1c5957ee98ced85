"""
Services package for the IPTV Directory Service

This package contains all business logic and service layer components.
"""
from iptv_directory.services.feed_reader import FeedReader
from iptv_directory.services.ingest_service import ingest_guide, ingest_playlist
from iptv_directory.services.now_next import resolve_now_next
from iptv_directory.services.query_service import DirectoryQueryService
from iptv_directory.services.refresh_service import DirectoryRefresher
from iptv_directory.services.scheduler_service import DirectoryScheduler
from iptv_directory.services.snapshot_store import SnapshotStore

__all__ = [
    'FeedReader',
    'ingest_guide',
    'ingest_playlist',
    'resolve_now_next',
    'DirectoryQueryService',
    'DirectoryRefresher',
    'DirectoryScheduler',
    'SnapshotStore',
]
