"""Tests for catalog, stream and meta queries."""
import pytest

from conftest import at

from iptv_directory.models import Snapshot
from iptv_directory.services.query_service import (
    MIME_HLS,
    MIME_MP4,
    MIME_MPEG_TS,
    STREAM_REQUEST_HEADERS,
    DirectoryQueryService,
    classify_stream,
)
from iptv_directory.services.snapshot_store import SnapshotStore


@pytest.fixture
def service(store) -> DirectoryQueryService:
    return DirectoryQueryService(store)


class TestListChannels:

    @pytest.mark.parametrize("genre", [None, "All"])
    def test_all_channels_in_snapshot_order(self, service, genre):
        metas = service.list_channels(genre).metas
        assert [meta.id for meta in metas] == ["channel-0", "channel-1", "channel-2", "channel-3"]

    def test_filter_is_exact_and_order_preserving(self, service):
        metas = service.list_channels("News").metas
        assert [meta.id for meta in metas] == ["channel-0", "channel-3"]

    def test_filter_is_case_sensitive(self, service):
        assert service.list_channels("news").metas == []

    def test_absent_category_is_empty(self, service):
        assert service.list_channels("Cooking").metas == []

    def test_preview_fields(self, service):
        meta = service.list_channels("Movies").metas[0]
        assert meta.name == "Movie Channel"
        assert meta.type == "tv"
        assert meta.description == "Category: Movies"
        assert meta.poster == "https://source.unsplash.com/1600x900/?Movies"
        assert meta.background == meta.poster

    def test_repeated_reads_are_identical(self, service, store):
        before = store.current()
        first = service.list_channels("All").model_dump()
        second = service.list_channels("All").model_dump()
        assert first == second
        assert store.current() is before

    def test_empty_directory(self):
        service = DirectoryQueryService(SnapshotStore())
        assert service.list_channels().metas == []
        assert service.genres() == ["All"]

    def test_genres_sorted_after_all(self, service):
        assert service.genres() == ["All", "Movies", "News", "Sports"]


class TestDescribeStream:

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("http://s.example/live/index.m3u8", MIME_HLS),
            ("http://s.example/vod/film.mp4", MIME_MP4),
            ("http://s.example/live/stream.ts", MIME_MPEG_TS),
            ("http://s.example/live/12345", MIME_MPEG_TS),
            ("http://s.example/live/INDEX.M3U8", MIME_HLS),
            ("http://s.example/live/index.m3u8?token=abc", MIME_HLS),
            ("http://cdn.example/play.php?file=live.m3u8", MIME_HLS),
            ("http://cdn.example/vod?name=film.mp4", MIME_MP4),
            ("http://cdn.example/play.php?file=live.ts", MIME_MPEG_TS),
        ],
    )
    def test_classify_stream(self, url, expected):
        assert classify_stream(url) == expected

    def test_known_channel(self, service):
        [stream] = service.describe_stream("channel-0").streams
        assert stream.title == "News 24"
        assert stream.url == "http://streams.example/news/index.m3u8"
        assert stream.media_type == MIME_HLS
        assert stream.request_headers == STREAM_REQUEST_HEADERS
        assert stream.request_headers["Range"] == "bytes=0-"

    def test_wire_format_uses_addon_field_names(self, service):
        payload = service.describe_stream("channel-1").model_dump(by_alias=True)
        stream = payload["streams"][0]
        assert stream["mimetype"] == MIME_MP4
        assert stream["behaviorHints"]["notWebReady"] is False
        assert stream["behaviorHints"]["proxyHeaders"]["request"]["User-Agent"] == "Mozilla/5.0"

    def test_unknown_channel_is_empty(self, service):
        assert service.describe_stream("channel-42").streams == []


class TestDescribeChannel:

    def test_current_and_next(self, service):
        meta = service.describe_channel("channel-0", now=at(150)).meta
        assert meta.id == "channel-0"
        assert meta.name == "News 24"
        assert meta.logo == "http://logo.example/news.png"
        assert meta.description == "A → B"

    def test_current_without_next(self, service):
        assert service.describe_channel("channel-0", now=at(250)).meta.description == "B"

    def test_nothing_airing(self, service):
        assert service.describe_channel("channel-0", now=at(200)).meta.description == "No EPG"

    def test_channel_without_guide_data(self, service):
        assert service.describe_channel("channel-1", now=at(150)).meta.description == "No EPG"
        assert service.describe_channel("channel-2", now=at(150)).meta.description == "No EPG"

    def test_unknown_channel(self, service):
        meta = service.describe_channel("channel-42").meta
        assert meta.id == "channel-42"
        assert meta.name == "Unknown"
        assert meta.description is None

    def test_reads_latest_snapshot(self, service, store):
        store.publish(Snapshot.empty())
        assert service.describe_channel("channel-0", now=at(150)).meta.name == "Unknown"
