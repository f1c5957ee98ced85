"""Tests for XMLTV parsing and guide ingestion."""
from datetime import datetime, timezone

import pytest

from conftest import GUIDE

from iptv_directory.exceptions import ParseError
from iptv_directory.models import NO_TITLE
from iptv_directory.services.ingest_service import build_guide, ingest_guide
from iptv_directory.services.xmltv_parser_service import parse_xmltv_document
from iptv_directory.utils.timezone import DateFormatError, parse_xmltv_time


class TestParseXmltvTime:

    def test_offset_converted_to_utc(self):
        assert parse_xmltv_time("20080715003000 -0600") == datetime(2008, 7, 15, 6, 30, tzinfo=timezone.utc)

    def test_missing_offset_means_utc(self):
        assert parse_xmltv_time("20250101120000") == datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", ["", "2025-01-01", "20250101120000 0100", "20250101120000 +01"])
    def test_malformed_raises(self, value):
        with pytest.raises(DateFormatError):
            parse_xmltv_time(value)


class TestParseXmltvDocument:

    def test_programmes_in_source_order(self):
        records = parse_xmltv_document(GUIDE)

        assert [record.title for record in records] == [
            "Morning Bulletin",
            "Midday News",
            "Afternoon Report",
            "Match of the Day",
        ]
        assert records[3].start == datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_defaults_for_missing_title_and_description(self):
        content = b"""<tv>
          <programme channel="c1" start="20250101120000 +0000" stop="20250101130000 +0000"/>
        </tv>"""
        [record] = parse_xmltv_document(content)
        assert record.title == NO_TITLE
        assert record.description == ""

    def test_skips_programmes_with_bad_or_missing_fields(self):
        content = b"""<tv>
          <programme start="20250101120000 +0000" stop="20250101130000 +0000"><title>No channel</title></programme>
          <programme channel="c1" stop="20250101130000 +0000"><title>No start</title></programme>
          <programme channel="c1" start="yesterday" stop="20250101130000 +0000"><title>Bad start</title></programme>
          <programme channel="c1" start="20250101120000 +0000" stop="20250101130000 +0000"><title>Good</title></programme>
        </tv>"""
        records = parse_xmltv_document(content)
        assert [record.title for record in records] == ["Good"]

    def test_malformed_xml_raises(self):
        with pytest.raises(ParseError, match="Malformed XML"):
            parse_xmltv_document(b"<tv><programme></tv>")

    def test_unexpected_root_raises(self):
        with pytest.raises(ParseError, match="root element"):
            parse_xmltv_document(b"<html><body>Not a guide</body></html>")


class TestBuildGuide:

    def test_groups_by_channel(self):
        guide = build_guide(GUIDE)

        assert set(guide) == {"news.us", "sport.uk"}
        assert [entry.title for entry in guide["news.us"]] == [
            "Morning Bulletin",
            "Midday News",
            "Afternoon Report",
        ]
        assert guide["news.us"][0].description == "Headlines"
        assert guide["news.us"][1].description == ""

    def test_source_order_is_not_resorted(self):
        content = b"""<tv>
          <programme channel="c1" start="20250101140000 +0000" stop="20250101150000 +0000"><title>Later</title></programme>
          <programme channel="c1" start="20250101120000 +0000" stop="20250101130000 +0000"><title>Earlier</title></programme>
        </tv>"""
        guide = build_guide(content)
        assert [entry.title for entry in guide["c1"]] == ["Later", "Earlier"]


class TestIngestGuide:
    pytestmark = pytest.mark.anyio

    async def test_ingest_guide_runs_off_loop(self):
        guide = await ingest_guide(GUIDE, parse_timeout_seconds=30)
        assert len(guide["news.us"]) == 3

    async def test_ingest_guide_without_timeout(self):
        guide = await ingest_guide(GUIDE, parse_timeout_seconds=0)
        assert len(guide["sport.uk"]) == 1

    async def test_parse_error_propagates(self):
        with pytest.raises(ParseError):
            await ingest_guide(b"not xml at all")
