from typing import Optional
import logging

from lxml import etree # type: ignore

from iptv_directory.exceptions import ParseError
from iptv_directory.models import NO_TITLE, ProgramRecord
from iptv_directory.utils.timezone import DateFormatError, parse_xmltv_time

logger = logging.getLogger(__name__)

GUIDE_FEED = "guide"


def parse_xmltv_document(content: bytes) -> list[ProgramRecord]:
    """
    Parse an XMLTV document and return its programmes in source order

    Args:
        content: Raw XMLTV bytes

    Returns:
        List of programme records; malformed programmes are skipped

    Raises:
        ParseError: If XML is malformed or the root element is not <tv>
    """
    logger.debug("Parsing XMLTV document (%s bytes)", len(content))

    try:
        logger.debug("  Loading XML document...")
        parser = etree.XMLParser(huge_tree=True, resolve_entities=False, no_network=True)
        root = etree.fromstring(content, parser=parser)
    except etree.XMLSyntaxError as e:
        logger.error("  XML parsing error: %s", e)
        raise ParseError(GUIDE_FEED, f"Malformed XML: {e}") from e

    if root is None or root.tag != 'tv':
        raise ParseError(GUIDE_FEED, f"Unexpected root element: {getattr(root, 'tag', None)!r}")

    logger.debug("  Extracting programmes...")
    programs = _parse_programs(root)
    logger.info("XMLTV parsing complete: %d programmes", len(programs))

    return programs


def _parse_programs(root: etree._Element) -> list[ProgramRecord]:
    """Extract programmes from XMLTV root element"""
    programs = []
    skipped = 0

    for programme in root.iter('programme'):
        program = _parse_single_program(programme)
        if program:
            programs.append(program)
        else:
            skipped += 1

    if skipped:
        logger.debug("    Skipped %d malformed programmes", skipped)

    return programs


def _parse_single_program(programme: etree._Element) -> Optional[ProgramRecord]:
    """Parse single programme element"""
    # Required fields
    channel_id = programme.get('channel')
    start_str = programme.get('start')
    stop_str = programme.get('stop')

    if not channel_id or not start_str or not stop_str:
        return None

    # Parse times (skip invalid formats)
    try:
        start_time = parse_xmltv_time(start_str)
        stop_time = parse_xmltv_time(stop_str)
    except DateFormatError:
        logger.debug("Skipping programme on %s with invalid time: %s / %s", channel_id, start_str, stop_str)
        return None

    return ProgramRecord(
        channel_id=channel_id,
        start=start_time,
        stop=stop_time,
        title=_get_text(programme, 'title', default=NO_TITLE),
        description=_get_text(programme, 'desc', default=""),
    )


def _get_text(element: etree._Element, tag: str, default: str) -> str:
    """Safely extract text from XML element"""
    child = element.find(tag)
    if child is None or not child.text or not child.text.strip():
        return default
    return child.text.strip()
