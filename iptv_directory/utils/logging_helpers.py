"""
Logging helpers shared by the feed refresh pipeline.
"""
import logging
from datetime import datetime, timezone


def sanitize_url_for_logging(url: str | None) -> str:
    """Remove credentials from URL for safe logging."""
    if not url:
        return "<not configured>"
    if "://" not in url:
        return url
    try:
        protocol, rest = url.split("://", 1)
        if "@" in rest:
            rest = rest.split("@", 1)[1]
            return f"{protocol}://***:***@{rest}"
        return url
    except (ValueError, IndexError):
        return url


def log_refresh_start(logger: logging.Logger) -> None:
    """Log directory refresh start."""
    logger.info("Directory refresh started at %s", datetime.now(timezone.utc).isoformat())


def log_refresh_end(logger: logging.Logger, channels_count: int, programmes_count: int) -> None:
    """
    Log directory refresh end with the size of the published snapshot.

    Args:
        logger: Logger instance
        channels_count: Channels in the live snapshot
        programmes_count: Programmes in the live snapshot
    """
    logger.info(
        "Directory refresh completed at %s - Channels: %d, Programmes: %d",
        datetime.now(timezone.utc).isoformat(),
        channels_count,
        programmes_count,
    )
