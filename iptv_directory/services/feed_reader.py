"""
Feed Reader

Downloads raw feed content with a bounded timeout and retry logic.
No interpretation of the content happens here.
"""
import asyncio
import gzip
import logging

import httpx

from iptv_directory.exceptions import FetchError
from iptv_directory.utils.logging_helpers import sanitize_url_for_logging


logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"


class FeedReader:
    """
    Fetches raw bytes from a feed URL.

    Each attempt is bounded by `timeout` as a whole, not only per connect or
    read step, so a slow-dripping upstream cannot hold a refresh open.
    Retries on transient network errors (timeouts, connection errors, 5xx).
    Does NOT retry on 4xx HTTP errors (client errors).
    """

    def __init__(
        self,
        timeout: float = 15.0,
        max_retries: int = 3,
        backoff_factor: float = 2.0,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.backoff_factor = backoff_factor
        self._transport = transport

    async def read(self, url: str, feed: str = "feed") -> bytes:
        """
        Download a feed with exponential backoff retry logic

        Args:
            url: URL to download from
            feed: Feed name used in logs and errors

        Returns:
            Raw response body (gzip payloads are decompressed)

        Raises:
            FetchError: If download fails after all retries
        """
        safe_url = sanitize_url_for_logging(url)
        logger.info("[%s] Downloading %s...", feed, safe_url)

        last_error: Exception | None = None

        for attempt in range(self.max_retries):
            try:
                response = await asyncio.wait_for(self._download(url), timeout=self.timeout)
                content = _maybe_decompress(response.content)
                logger.info("[%s] Downloaded %.1f KB", feed, len(content) / 1024)
                return content

            except (httpx.RequestError, asyncio.TimeoutError) as e:
                # Transient network errors or the attempt ran out of time - retry
                last_error = e
                if attempt < self.max_retries - 1:
                    wait_time = self.backoff_factor ** attempt
                    logger.warning(
                        "[%s] Download attempt %d/%d failed (transient error): %s. Retrying in %.1fs...",
                        feed, attempt + 1, self.max_retries, type(e).__name__, wait_time,
                    )
                    await asyncio.sleep(wait_time)
                else:
                    logger.error(
                        "[%s] Download failed after %d attempts (transient error)", feed, self.max_retries
                    )

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                if 400 <= status < 500:
                    logger.error("[%s] HTTP %d (client error) from %s", feed, status, safe_url)
                    raise FetchError(feed, f"HTTP {status} from {safe_url}") from e

                # 5xx server error - retry
                last_error = e
                if attempt < self.max_retries - 1:
                    wait_time = self.backoff_factor ** attempt
                    logger.warning(
                        "[%s] Download attempt %d/%d failed (HTTP %d server error). Retrying in %.1fs...",
                        feed, attempt + 1, self.max_retries, status, wait_time,
                    )
                    await asyncio.sleep(wait_time)
                else:
                    logger.error(
                        "[%s] Download failed after %d attempts (HTTP %d)", feed, self.max_retries, status
                    )

        raise FetchError(
            feed,
            f"Failed to download {safe_url} after {self.max_retries} attempts: "
            f"{type(last_error).__name__ if last_error else 'unknown error'}",
        ) from last_error

    async def _download(self, url: str) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response


def _maybe_decompress(content: bytes) -> bytes:
    """Inflate gzip payloads served without a Content-Encoding header (e.g. guide.xml.gz)."""
    if not content.startswith(GZIP_MAGIC):
        return content
    try:
        return gzip.decompress(content)
    except (OSError, EOFError) as e:
        logger.warning("Payload looked gzip-compressed but could not be inflated: %s", e)
        return content
