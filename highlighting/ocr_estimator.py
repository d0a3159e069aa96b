"""
Approximate highlight geometry for OCR text.

Recognized text carries no glyph positions, so match rectangles are
estimated from where the match sits proportionally: the line index picks
the vertical position, the character offsets pick the horizontal span.
The result is a coarse approximation that only lines up well with evenly
spaced, full-width text; it exists so scanned documents can be
highlighted at all.
"""

from typing import Callable, Optional

from config import settings
from highlighting.ids import UuidIdGenerator
from highlighting.matcher import KeywordMatcher
from highlighting.models import Highlight, Rect, Viewport


class OcrFallbackEstimator:
    """Builds proportional highlights from one page of recognized text."""

    def __init__(
        self,
        id_generator: Optional[Callable[[], str]] = None,
        line_height: Optional[float] = None,
    ):
        self.id_generator = id_generator or UuidIdGenerator()
        self.line_height = line_height if line_height is not None else settings.OCR_LINE_HEIGHT

    def estimate(
        self,
        text: str,
        matcher: KeywordMatcher,
        viewport: Viewport,
        page_number: int,
    ) -> list[Highlight]:
        """
        Estimate highlights for every keyword match in a page's OCR text.

        Args:
            text: Recognized text of the page
            matcher: Keyword matcher for this search
            viewport: Viewport of the page
            page_number: 1-indexed page number

        Returns:
            Highlights ordered by keyword, then line, then position
        """
        lines = text.split("\n")
        total_lines = len(lines)
        highlights = []

        for keyword, pattern in matcher.patterns:
            for line_index, line in enumerate(lines):
                for match in matcher.find_keyword(keyword, pattern, line):
                    y1 = viewport.height * (line_index / total_lines)
                    y2 = y1 + self.line_height

                    line_length = len(line)
                    x1 = viewport.width * (match.start_offset / line_length)
                    x2 = viewport.width * (match.end_offset / line_length)

                    rect = Rect(
                        x1=x1,
                        y1=y1,
                        x2=x2,
                        y2=y2,
                        width=viewport.width,
                        height=viewport.height,
                        page_number=page_number,
                    )
                    highlights.append(
                        Highlight.from_rect(self.id_generator(), rect, match.matched_text)
                    )

        return highlights
