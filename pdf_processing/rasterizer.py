"""
Rasterization of PDF pages into images for OCR.

Backs the image conversion endpoint: every page is rendered with
pdfplumber and returned as a base64 PNG data URL, in page order.
"""

import base64
import io
from typing import Optional
import pdfplumber
import structlog

from config import settings
from fetcher.pdf_downloader import PDFDownloader

logger = structlog.get_logger()

PNG_DATA_URL_PREFIX = "data:image/png;base64,"


class PageRasterizer:
    """Renders PDF pages to PNG images."""

    def __init__(
        self,
        resolution: Optional[int] = None,
        downloader: Optional[PDFDownloader] = None,
    ):
        """
        Initialize rasterizer.

        Args:
            resolution: Render resolution in DPI
            downloader: Downloader used for remote PDFs
        """
        self.resolution = resolution or settings.IMAGE_RESOLUTION
        self.downloader = downloader or PDFDownloader()

    def convert(self, source: str) -> list[str]:
        """
        Render every page of a PDF.

        Args:
            source: http(s) URL or filesystem path

        Returns:
            PNG data URLs, one per page, in page order
        """
        data = self.downloader.fetch(source)
        images = []

        with pdfplumber.open(io.BytesIO(data)) as pdf:
            for page in pdf.pages:
                page_image = page.to_image(resolution=self.resolution)
                buffer = io.BytesIO()
                page_image.original.save(buffer, format="PNG")
                encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
                images.append(PNG_DATA_URL_PREFIX + encoded)

        logger.info(
            "PDF converted to images",
            source=source,
            pages=len(images),
            resolution=self.resolution
        )
        return images
