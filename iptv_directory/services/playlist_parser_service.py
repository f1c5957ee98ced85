import logging
import re

from iptv_directory.exceptions import ParseError
from iptv_directory.models import PlaylistEntry

logger = logging.getLogger(__name__)

PLAYLIST_FEED = "playlist"

_EXTINF_RE = re.compile(r'^#EXTINF:\s*(-?\d+(?:\.\d+)?)?(?P<rest>.*)$')
_ATTRIBUTE_RE = re.compile(r'([A-Za-z0-9_-]+)="([^"]*)"')


def parse_m3u_playlist(text: str) -> list[PlaylistEntry]:
    """
    Parse an extended M3U playlist into playlist entries

    Lines look like:

        #EXTINF:-1 tvg-id="bbc1.uk" tvg-logo="http://logo/bbc1.png" group-title="UK",BBC One
        http://example.com/bbc1.m3u8

    Args:
        text: Playlist document

    Returns:
        Entries in source order

    Raises:
        ParseError: If the document is not an extended M3U playlist
    """
    lines = [line.strip() for line in text.splitlines()]
    first = next((line for line in lines if line), None)
    if first is None:
        raise ParseError(PLAYLIST_FEED, "Playlist is empty")
    if not first.startswith("#EXTM3U"):
        raise ParseError(PLAYLIST_FEED, f"Missing #EXTM3U header (got {first[:40]!r})")

    entries: list[PlaylistEntry] = []
    pending: dict[str, str] | None = None
    skipped = 0

    for line in lines:
        if not line or line.startswith("#EXTM3U"):
            continue

        if line.startswith("#EXTINF"):
            if pending is not None:
                skipped += 1
                logger.debug("Dropping #EXTINF entry without stream URL: %s", pending.get("name"))
            pending = _parse_extinf(line)

        elif line.startswith("#EXTGRP:"):
            if pending is not None and not pending.get("group-title"):
                pending["group-title"] = line.split(":", 1)[1].strip()

        elif line.startswith("#"):
            # #EXTVLCOPT and friends
            continue

        elif pending is not None:
            entries.append(_build_entry(pending, line))
            pending = None

        else:
            skipped += 1
            logger.debug("Ignoring URL without #EXTINF header: %s", line[:80])

    if pending is not None:
        skipped += 1

    if skipped:
        logger.debug("Skipped %s incomplete playlist entries", skipped)

    return entries


def _parse_extinf(line: str) -> dict[str, str]:
    """Extract attributes and display name from an #EXTINF line"""
    match = _EXTINF_RE.match(line)
    rest = match.group("rest") if match else line.split(":", 1)[-1]

    attributes = {key.lower(): value.strip() for key, value in _ATTRIBUTE_RE.findall(rest)}

    # Display name follows the first comma outside quoted attribute values
    remainder = _ATTRIBUTE_RE.sub("", rest)
    name = remainder.split(",", 1)[1].strip() if "," in remainder else ""
    attributes["name"] = name or attributes.get("tvg-name", "")

    return attributes


def _build_entry(attributes: dict[str, str], url: str) -> PlaylistEntry:
    return PlaylistEntry(
        name=attributes.get("name") or url,
        url=url,
        logo=attributes.get("tvg-logo") or None,
        group_title=attributes.get("group-title") or None,
        tvg_id=attributes.get("tvg-id") or None,
    )
