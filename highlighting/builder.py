"""
Conversion of keyword matches on a reconstructed line into highlights.
"""

from typing import Callable, Optional

from highlighting.coordinates import CoordinateMapper
from highlighting.ids import UuidIdGenerator
from highlighting.models import Highlight, Line, Match, TextRun, Viewport


class HighlightBuilder:
    """
    Builds one highlight per match using the geometry of the line's runs.

    The box spans from the origin of the run containing the first matched
    character to the right edge of the run containing the last one. Its
    height is the tallest run on the line rather than the matched glyphs,
    so highlights on one line share a height.
    """

    def __init__(
        self,
        id_generator: Optional[Callable[[], str]] = None,
        mapper: Optional[CoordinateMapper] = None,
    ):
        self.id_generator = id_generator or UuidIdGenerator()
        self.mapper = mapper or CoordinateMapper()

    @staticmethod
    def locate_runs(line: Line, match: Match) -> tuple[TextRun, TextRun]:
        """
        Find the runs covering the start and end offsets of a match.

        Returns:
            (start_run, end_run); falls back to the first and last runs
        """
        start_run = None
        end_run = None
        consumed = 0

        for run in line.runs:
            run_end = consumed + len(run.text)
            if start_run is None and run_end > match.start_offset:
                start_run = run
            if run_end >= match.end_offset:
                end_run = run
                break
            consumed = run_end

        return start_run or line.runs[0], end_run or line.runs[-1]

    def page_box(self, line: Line, match: Match) -> tuple[float, float, float, float]:
        """Document-space box (x1, y1, x2, y2) of a match before projection."""
        start_run, end_run = self.locate_runs(line, match)

        x1 = start_run.origin_x
        y1 = start_run.origin_y
        x2 = end_run.origin_x + end_run.width
        y2 = y1 + line.max_height
        return x1, y1, x2, y2

    def build(
        self,
        line: Line,
        match: Match,
        viewport: Viewport,
        page_number: int,
    ) -> Highlight:
        """Create the highlight for one match on one line."""
        x1, y1, x2, y2 = self.page_box(line, match)
        rect = self.mapper.map_box(viewport, x1, y1, x2, y2, page_number)
        return Highlight.from_rect(self.id_generator(), rect, match.matched_text)
