"""
Client for the PDF-to-image conversion endpoint.
"""

from typing import Optional
import httpx
import structlog

from config import settings
from highlighting.exceptions import ImageConversionError

logger = structlog.get_logger()


class ImageConversionClient:
    """
    Asks the conversion service to rasterize a PDF.

    One POST per document with body {"pdfUrl": ...}; the service answers
    with a JSON array holding one image per page, in page order.
    """

    def __init__(
        self,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize conversion client.

        Args:
            endpoint: Conversion endpoint URL
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.endpoint = endpoint or settings.CONVERT_IMAGE_URL
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT
        self.transport = transport

    async def convert(self, pdf_url: str) -> list:
        """
        Convert a PDF into page images.

        Args:
            pdf_url: URL of the PDF to convert

        Returns:
            List of image representations, one per page

        Raises:
            ImageConversionError: On HTTP errors or an unexpected payload
        """
        logger.info("Requesting image conversion", endpoint=self.endpoint, pdf_url=pdf_url)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(self.endpoint, json={"pdfUrl": pdf_url})
            except httpx.HTTPError as e:
                logger.error("Image conversion request failed", error=str(e))
                raise ImageConversionError(f"Conversion request failed: {e}") from e

        if response.is_error:
            message = self._error_message(response)
            logger.error(
                "Image conversion failed",
                status=response.status_code,
                error=message
            )
            raise ImageConversionError(message, status_code=response.status_code)

        try:
            images = response.json()
        except ValueError as e:
            raise ImageConversionError("Conversion response is not JSON") from e

        if not isinstance(images, list):
            raise ImageConversionError("Conversion response is not a list of images")

        logger.info("Image conversion completed", images=len(images))
        return images

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return f"HTTP {response.status_code}"
        if isinstance(body, dict):
            message = body.get("error") or f"HTTP {response.status_code}"
            if body.get("details"):
                message = f"{message}: {body['details']}"
            return message
        return f"HTTP {response.status_code}"
