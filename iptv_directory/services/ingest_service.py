"""
Feed Ingestion Service

Turns raw feed content into directory structures: the channel list and
category set from the playlist, and the per-channel programme guide from the
XMLTV document. Nothing here publishes; the refresh pipeline decides that.
"""
import asyncio
import logging

from iptv_directory.exceptions import ParseError
from iptv_directory.models import UNCATEGORIZED, Channel, Guide, ProgramEntry
from iptv_directory.services.playlist_parser_service import PLAYLIST_FEED, parse_m3u_playlist
from iptv_directory.services.xmltv_parser_service import GUIDE_FEED, parse_xmltv_document


logger = logging.getLogger(__name__)


def ingest_playlist(content: bytes) -> tuple[tuple[Channel, ...], frozenset[str]]:
    """
    Build the channel list and category set from a playlist feed

    Args:
        content: Raw playlist bytes

    Returns:
        Tuple of (channels in source order, distinct categories)

    Raises:
        ParseError: If the playlist cannot be decoded or parsed
    """
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseError(PLAYLIST_FEED, f"Playlist is not valid UTF-8: {e}") from e

    entries = parse_m3u_playlist(text)

    channels: list[Channel] = []
    categories: set[str] = set()
    for index, entry in enumerate(entries):
        category = (entry.group_title or "").strip() or UNCATEGORIZED
        categories.add(category)
        channels.append(Channel(
            id=f"channel-{index}",
            display_name=entry.name,
            stream_url=entry.url,
            category=category,
            logo_url=entry.logo,
            guide_channel_id=entry.tvg_id,
        ))

    logger.info("Playlist ingested: %d channels in %d categories", len(channels), len(categories))
    return tuple(channels), frozenset(categories)


def build_guide(content: bytes) -> Guide:
    """
    Group XMLTV programmes by channel id, keeping source order per channel

    Raises:
        ParseError: If the document is malformed
    """
    guide: dict[str, list[ProgramEntry]] = {}
    for record in parse_xmltv_document(content):
        guide.setdefault(record.channel_id, []).append(ProgramEntry(
            start=record.start,
            end=record.stop,
            title=record.title,
            description=record.description,
        ))
    return {channel_id: tuple(entries) for channel_id, entries in guide.items()}


async def ingest_guide(content: bytes, *, parse_timeout_seconds: int | None = None) -> Guide:
    """
    Parse an XMLTV guide asynchronously with timeout protection.

    Parsing is offloaded to the default thread pool so large guides do not
    block the event loop while queries are being served.

    Keyword Args:
        parse_timeout_seconds: Timeout in seconds for parsing (0/None disables timeout)

    Raises:
        ParseError: If the document is malformed or parsing times out
    """
    effective_timeout = parse_timeout_seconds if parse_timeout_seconds and parse_timeout_seconds > 0 else None
    timeout_display = f"{effective_timeout}s" if effective_timeout else "disabled"

    loop = asyncio.get_running_loop()
    logger.debug("Offloading XMLTV parsing to thread pool executor (timeout: %s)...", timeout_display)
    parse_task = loop.run_in_executor(None, build_guide, content)

    try:
        if effective_timeout:
            guide = await asyncio.wait_for(parse_task, timeout=effective_timeout)
        else:
            guide = await parse_task
    except asyncio.TimeoutError as e:
        logger.error("XMLTV parsing timed out after %s", timeout_display)
        raise ParseError(GUIDE_FEED, "XML parsing timed out - document may be too large or malformed") from e

    logger.info(
        "Guide ingested: %d programmes for %d channels",
        sum(len(entries) for entries in guide.values()),
        len(guide),
    )
    return guide
