"""
Positioned text extraction from PDFs using pdfplumber.

pdfplumber exposes individual characters; consecutive characters that
share a baseline, font and size and sit next to each other are merged into
text runs, which is the granularity the highlighting pipeline works with.

pdfminer reports character positions after shifting the page by its
mediabox origin and applying /Rotate. Runs are built in the page's own
user space instead, so the page viewport is the only place rotation and
offset are applied.
"""

import asyncio
import io
from dataclasses import dataclass, field
from typing import Optional
import pdfplumber
from pdfminer.pdfparser import PDFSyntaxError
import structlog

from fetcher.pdf_downloader import PDFDownloader
from highlighting.exceptions import DocumentLoadError
from highlighting.models import TextRun, Viewport

logger = structlog.get_logger()

IDENTITY = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)


@dataclass
class PageContent:
    """Text runs and viewport of one page."""
    page_number: int
    viewport: Viewport
    text_runs: list[TextRun] = field(default_factory=list)


def user_space_matrix(mediabox, rotation: int = 0) -> tuple:
    """
    Inverse of the page transform pdfminer applies to character positions.

    Args:
        mediabox: (x0, y0, x1, y1) page box in PDF units
        rotation: /Rotate value of the page

    Returns:
        Affine matrix (a, b, c, d, e, f) from pdfminer device space back
        to PDF user space
    """
    x0, y0, x1, y1 = (float(v) for v in mediabox)
    rotation = rotation % 360
    if rotation == 90:
        return (0.0, 1.0, -1.0, 0.0, x1, y0)
    if rotation == 180:
        return (-1.0, 0.0, 0.0, -1.0, x1, y1)
    if rotation == 270:
        return (0.0, -1.0, 1.0, 0.0, x0, y1)
    return (1.0, 0.0, 0.0, 1.0, x0, y0)


def _apply(matrix: tuple, x: float, y: float) -> tuple[float, float]:
    a, b, c, d, e, f = matrix
    return (a * x + c * y + e, b * x + d * y + f)


def _char_origin(char: dict) -> tuple[float, float]:
    """Baseline origin of a character in pdfminer device space."""
    matrix = char.get("matrix")
    if matrix and len(matrix) == 6:
        return float(matrix[4]), float(matrix[5])
    return float(char["x0"]), float(char["y0"])


def chars_to_runs(
    chars: list[dict],
    gap_tolerance: float = 0.5,
    to_user_space: tuple = IDENTITY,
) -> list[TextRun]:
    """
    Merge pdfplumber characters into text runs.

    Positions and extents are first mapped through to_user_space. A run
    breaks when the baseline, font name or font size changes, or when the
    horizontal gap to the previous character exceeds gap_tolerance times
    the font size.

    Args:
        chars: pdfplumber character dicts in content-stream order
        gap_tolerance: Allowed gap, as a fraction of the font size
        to_user_space: Matrix from device space to PDF user space

    Returns:
        List of TextRun
    """
    runs = []
    current = None

    for char in chars:
        origin_x, origin_y = _apply(to_user_space, *_char_origin(char))
        left, bottom = _apply(to_user_space, float(char["x0"]), float(char["y0"]))
        right, top = _apply(to_user_space, float(char["x1"]), float(char["y1"]))
        x0, x1 = min(left, right), max(left, right)
        size = abs(top - bottom)
        font = char.get("fontname")

        if current is not None:
            same_style = current["font"] == font and current["size"] == size
            adjacent = -gap_tolerance * size <= x0 - current["x1"] <= gap_tolerance * size
            if not (same_style and adjacent and current["origin_y"] == origin_y):
                runs.append(_finish_run(current))
                current = None

        if current is None:
            current = {
                "text": "",
                "origin_x": origin_x,
                "origin_y": origin_y,
                "x0": x0,
                "x1": x1,
                "font": font,
                "size": size,
            }

        current["text"] += char.get("text", "")
        current["x1"] = max(current["x1"], x1)

    if current is not None:
        runs.append(_finish_run(current))

    return runs


def _finish_run(state: dict) -> TextRun:
    return TextRun(
        text=state["text"],
        origin_x=state["origin_x"],
        origin_y=state["origin_y"],
        width=max(state["x1"] - state["x0"], 0.0),
        height=state["size"],
    )


class PDFDocument:
    """
    An open PDF with async per-page access.

    pdfplumber is synchronous; page work runs in a worker thread so the
    search loop suspends at each page.
    """

    def __init__(self, pdf: "pdfplumber.PDF", source: str = ""):
        self._pdf = pdf
        self.source = source

    @property
    def page_count(self) -> int:
        return len(self._pdf.pages)

    def _page(self, page_number: int):
        if not 1 <= page_number <= self.page_count:
            raise IndexError(f"Page {page_number} out of range 1..{self.page_count}")
        return self._pdf.pages[page_number - 1]

    def _viewport(self, page_number: int, scale: float) -> Viewport:
        page = self._page(page_number)
        return Viewport.for_page(page.mediabox, scale=scale, rotation=page.rotation or 0)

    def _read_page(self, page_number: int, scale: float) -> PageContent:
        page = self._page(page_number)
        viewport = self._viewport(page_number, scale)
        # Same box and rotation pdfminer used to lay the page out
        to_user_space = user_space_matrix(page.page_obj.mediabox, page.page_obj.rotate)
        runs = chars_to_runs(page.chars, to_user_space=to_user_space)
        logger.debug("Page text extracted", page=page_number, runs=len(runs))
        return PageContent(page_number=page_number, viewport=viewport, text_runs=runs)

    async def get_page(self, page_number: int, scale: float = 1.0) -> PageContent:
        """Extract the text runs and viewport of a page (1-indexed)."""
        return await asyncio.to_thread(self._read_page, page_number, scale)

    async def get_viewport(self, page_number: int, scale: float = 1.0) -> Viewport:
        """Viewport of a page (1-indexed) at the given scale."""
        return await asyncio.to_thread(self._viewport, page_number, scale)

    def close(self) -> None:
        self._pdf.close()


class DocumentLoader:
    """Opens PDFs from URLs or local paths."""

    def __init__(self, downloader: Optional[PDFDownloader] = None):
        self.downloader = downloader or PDFDownloader()

    async def open(self, source: str) -> PDFDocument:
        """
        Load and parse a PDF.

        Args:
            source: http(s) URL or filesystem path

        Returns:
            PDFDocument

        Raises:
            DocumentLoadError: If the PDF cannot be fetched or parsed
        """
        logger.info("Loading document", source=source)
        data = await asyncio.to_thread(self.downloader.fetch, source)
        return await asyncio.to_thread(self._parse, data, source)

    @staticmethod
    def _parse(data: bytes, source: str) -> PDFDocument:
        pdf = None
        try:
            pdf = pdfplumber.open(io.BytesIO(data))
            page_count = len(pdf.pages)
        except PDFSyntaxError as e:
            logger.warning("PDF syntax error", source=source, error=str(e))
            if pdf is not None:
                pdf.close()
            raise DocumentLoadError(f"PDF syntax error: {str(e)}") from e
        except Exception as e:
            logger.warning("PDF parsing failed", source=source, error=str(e))
            if pdf is not None:
                pdf.close()
            raise DocumentLoadError(str(e)) from e

        logger.info("Document loaded", source=source, pages=page_count)
        return PDFDocument(pdf, source)
