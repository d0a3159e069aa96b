"""
PDF download handler with retry logic.
"""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse
import httpx
import structlog

from config import settings
from highlighting.exceptions import DocumentLoadError

logger = structlog.get_logger()


@dataclass
class DownloadResult:
    """Result of a PDF download operation."""
    success: bool
    url: str
    content: Optional[bytes] = None
    content_type: Optional[str] = None
    error: Optional[str] = None
    retries_used: int = 0


def is_remote(source: str) -> bool:
    """True if source is an http(s) URL rather than a local path."""
    return urlparse(source).scheme in ("http", "https")


class PDFDownloader:
    """
    Fetches PDF bytes from URLs or local paths, retrying transient failures.
    """

    DEFAULT_MAX_RETRIES = 3
    RETRY_DELAY = 2.0  # seconds

    # Headers to mimic a browser request
    DEFAULT_HEADERS = {
        "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        "Accept": "application/pdf,*/*",
        "Accept-Language": "en-US,en;q=0.9",
    }

    def __init__(
        self,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        headers: Optional[dict] = None,
        retry_delay: float = RETRY_DELAY,
    ):
        """
        Initialize PDF downloader.

        Args:
            timeout: Request timeout in seconds
            max_retries: Maximum number of retry attempts
            headers: Custom headers to use
            retry_delay: Base delay between attempts in seconds
        """
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT
        self.max_retries = max_retries if max_retries is not None else settings.DOWNLOAD_MAX_RETRIES
        self.headers = headers or self.DEFAULT_HEADERS.copy()
        self.retry_delay = retry_delay

    def fetch(self, source: str) -> bytes:
        """
        Return the bytes of a PDF given by URL or filesystem path.

        Raises:
            DocumentLoadError: If the document cannot be read
        """
        if not is_remote(source):
            path = Path(source)
            if not path.is_file():
                raise DocumentLoadError(f"File not found: {source}")
            return path.read_bytes()

        result = self.download(source)
        if not result.success:
            raise DocumentLoadError(f"Failed to download {source}: {result.error}")
        return result.content

    def download(self, url: str) -> DownloadResult:
        """
        Download a PDF into memory.

        Args:
            url: URL to download from

        Returns:
            DownloadResult with the content or the last error
        """
        logger.info("Starting PDF download", url=url)

        last_error = None
        retries_used = 0

        for attempt in range(self.max_retries + 1):
            try:
                result = self._download_attempt(url)
                result.retries_used = retries_used
                return result

            except httpx.TimeoutException as e:
                last_error = f"Timeout: {str(e)}"
                logger.warning(
                    "Download timeout",
                    url=url,
                    attempt=attempt + 1,
                    max_retries=self.max_retries
                )

            except httpx.HTTPStatusError as e:
                last_error = f"HTTP {e.response.status_code}: {str(e)}"
                # Don't retry on client errors (4xx)
                if 400 <= e.response.status_code < 500:
                    logger.error("Client error, not retrying", url=url, status=e.response.status_code)
                    break
                logger.warning(
                    "HTTP error",
                    url=url,
                    status=e.response.status_code,
                    attempt=attempt + 1
                )

            except httpx.HTTPError as e:
                last_error = str(e)
                logger.warning(
                    "Download error",
                    url=url,
                    error=str(e),
                    attempt=attempt + 1
                )

            if attempt < self.max_retries:
                retries_used += 1
                delay = self.retry_delay * (attempt + 1)
                logger.info("Retrying download", url=url, delay=delay)
                time.sleep(delay)

        logger.error("Download failed after all retries", url=url, error=last_error)
        return DownloadResult(
            success=False,
            url=url,
            error=last_error,
            retries_used=retries_used
        )

    def _download_attempt(self, url: str) -> DownloadResult:
        """Single download attempt."""
        with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
            response = client.get(url, headers=self.headers)
            response.raise_for_status()

            content_type = response.headers.get("content-type", "")
            logger.info(
                "PDF downloaded to memory",
                url=url,
                size=len(response.content),
                content_type=content_type
            )

            return DownloadResult(
                success=True,
                url=url,
                content=response.content,
                content_type=content_type
            )
