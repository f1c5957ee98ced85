import logging
from datetime import datetime, timezone

import httpx

from iptv_directory.utils.logging_helpers import sanitize_url_for_logging


logger = logging.getLogger(__name__)


class KeepalivePinger:
    """Periodically requests the service's own public URL so hosting platforms keep it awake"""

    def __init__(
        self,
        url: str,
        timeout: float = 15.0,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def ping(self) -> bool:
        """Send one ping. Failures are logged, never raised."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Self-ping to %s failed: %s", sanitize_url_for_logging(self.url), e)
            return False

        logger.info("Self-ping sent at %s", datetime.now(timezone.utc).strftime("%H:%M:%S"))
        return True
