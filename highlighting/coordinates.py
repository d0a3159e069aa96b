"""
Mapping between document space and the renderer's viewport space.

Document coordinates have a bottom-left origin with y increasing upward;
the rendering layer expects a top-left origin. Points are projected
through the viewport and then flipped vertically.
"""

from highlighting.models import Rect, Viewport


class CoordinateMapper:
    """Projects document-space points and boxes into viewport space."""

    @staticmethod
    def to_viewport_point(viewport: Viewport, x: float, y: float) -> tuple[float, float]:
        """Project a point and flip it to a top-down y coordinate."""
        projected_x, projected_y = viewport.project(x, y)
        return projected_x, viewport.height - projected_y

    @classmethod
    def map_box(
        cls,
        viewport: Viewport,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        page_number: int,
    ) -> Rect:
        """
        Map a document-space box given by two opposite corners.

        Each corner is transformed on its own. Since the flip can swap
        which corner ends up on top, the y values are reordered so the
        resulting rectangle always has y1 <= y2.

        Args:
            viewport: Page viewport
            x1, y1: First corner in document space
            x2, y2: Opposite corner in document space
            page_number: 1-indexed page number

        Returns:
            Rect in viewport space
        """
        tx1, flipped_y1 = cls.to_viewport_point(viewport, x1, y1)
        tx2, flipped_y2 = cls.to_viewport_point(viewport, x2, y2)

        return Rect(
            x1=tx1,
            y1=min(flipped_y1, flipped_y2),
            x2=tx2,
            y2=max(flipped_y1, flipped_y2),
            width=viewport.width,
            height=viewport.height,
            page_number=page_number,
        )
