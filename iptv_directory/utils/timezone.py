"""
Date and Time utilities

Centralizes XMLTV timestamp parsing so every guide entry is stored as a
timezone-aware UTC datetime.
"""
from datetime import datetime, timedelta, timezone
import logging

logger = logging.getLogger(__name__)


class DateFormatError(ValueError):
    """Raised when date format is invalid"""
    pass


def parse_xmltv_time(time_str: str) -> datetime:
    """
    Convert XMLTV time format to a UTC datetime

    Args:
        time_str: XMLTV time like '20080715003000 -0600' (offset optional)

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        DateFormatError: If the timestamp or its offset is malformed
    """
    try:
        # Split time and timezone
        parts = time_str.strip().split()
        time_part = parts[0]  # YYYYMMDDHHMMSS
        tz_part = parts[1] if len(parts) > 1 else '+0000'

        dt = datetime.strptime(time_part, '%Y%m%d%H%M%S')

        # Parse timezone offset (+HHMM / -HHMM)
        if len(tz_part) != 5 or tz_part[0] not in '+-' or not tz_part[1:].isdigit():
            raise ValueError(f"bad offset {tz_part!r}")
        tz_sign = 1 if tz_part[0] == '+' else -1
        tz_hours = int(tz_part[1:3])
        tz_mins = int(tz_part[3:5])
        tz_offset_minutes = tz_sign * (tz_hours * 60 + tz_mins)
    except (ValueError, IndexError, AttributeError) as e:
        raise DateFormatError(f"Invalid XMLTV timestamp: '{time_str}'") from e

    # Convert to UTC
    dt_utc = dt - timedelta(minutes=tz_offset_minutes)

    return dt_utc.replace(tzinfo=timezone.utc)
