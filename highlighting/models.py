"""
Value types for the text-to-geometry pipeline.

Geometry is validated on construction so that malformed extraction output
fails at the boundary instead of producing NaN rectangles downstream.
"""

import math
from dataclasses import dataclass, field
from typing import Optional

from highlighting.exceptions import MalformedGeometryError

COMMENT_EMOJI = "\U0001F50D"


def _require_finite(owner: str, name: str, value) -> float:
    """Return value as float or raise MalformedGeometryError."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedGeometryError(f"{owner}.{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise MalformedGeometryError(f"{owner}.{name} must be finite, got {value!r}")
    return float(value)


@dataclass(frozen=True)
class TextRun:
    """One positioned piece of text as emitted by the extraction layer.

    origin_x/origin_y are in the document's native space (bottom-left
    origin, y increasing upward).
    """
    text: str
    origin_x: float
    origin_y: float
    width: float
    height: float

    def __post_init__(self):
        if not isinstance(self.text, str):
            raise MalformedGeometryError(f"TextRun.text must be a string, got {self.text!r}")
        for name in ("origin_x", "origin_y", "width", "height"):
            value = _require_finite("TextRun", name, getattr(self, name))
            object.__setattr__(self, name, value)
        if self.width < 0 or self.height < 0:
            raise MalformedGeometryError(
                f"TextRun width/height must be non-negative, got {self.width}x{self.height}"
            )


@dataclass
class Line:
    """A reading-order line: runs sharing one baseline."""
    text: str = ""
    runs: list[TextRun] = field(default_factory=list)

    def append(self, run: TextRun) -> None:
        self.text += run.text
        self.runs.append(run)

    @property
    def max_height(self) -> float:
        return max((run.height for run in self.runs), default=0.0)


@dataclass(frozen=True)
class Viewport:
    """
    Coordinate frame of one rendered page.

    transform is the affine matrix [a, b, c, d, e, f] mapping document
    space into viewport units. The projection keeps the document's
    bottom-up orientation; CoordinateMapper flips it for the renderer.
    """
    scale: float
    width: float
    height: float
    transform: tuple = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

    def __post_init__(self):
        for name in ("scale", "width", "height"):
            value = _require_finite("Viewport", name, getattr(self, name))
            object.__setattr__(self, name, value)
        if self.scale <= 0:
            raise MalformedGeometryError(f"Viewport.scale must be positive, got {self.scale}")
        if self.width < 0 or self.height < 0:
            raise MalformedGeometryError("Viewport width/height must be non-negative")
        if len(self.transform) != 6:
            raise MalformedGeometryError("Viewport.transform must have 6 elements")
        matrix = tuple(
            _require_finite("Viewport", f"transform[{i}]", v)
            for i, v in enumerate(self.transform)
        )
        object.__setattr__(self, "transform", matrix)

    def project(self, x: float, y: float) -> tuple[float, float]:
        """Apply the document-to-viewport transform to a point."""
        a, b, c, d, e, f = self.transform
        return (a * x + c * y + e, b * x + d * y + f)

    @classmethod
    def identity(cls, width: float, height: float, scale: float = 1.0) -> "Viewport":
        """Viewport whose projection only scales, without any axis flip."""
        return cls(scale=scale, width=width, height=height,
                   transform=(scale, 0.0, 0.0, scale, 0.0, 0.0))

    @classmethod
    def for_page(
        cls,
        mediabox: tuple,
        scale: float = 1.0,
        rotation: int = 0,
    ) -> "Viewport":
        """
        Build the standard viewport of a PDF page.

        Args:
            mediabox: (x0, y0, x1, y1) page box in PDF units
            scale: Zoom factor
            rotation: Page rotation in degrees (multiple of 90)

        Returns:
            Viewport whose projection is bottom-up in viewport units
        """
        x0, y0, x1, y1 = (float(v) for v in mediabox)
        center_x = (x0 + x1) / 2
        center_y = (y0 + y1) / 2

        rotation = rotation % 360
        if rotation == 90:
            rotate_a, rotate_b, rotate_c, rotate_d = 0, 1, 1, 0
        elif rotation == 180:
            rotate_a, rotate_b, rotate_c, rotate_d = -1, 0, 0, 1
        elif rotation == 270:
            rotate_a, rotate_b, rotate_c, rotate_d = 0, -1, -1, 0
        elif rotation == 0:
            rotate_a, rotate_b, rotate_c, rotate_d = 1, 0, 0, -1
        else:
            raise MalformedGeometryError(f"Page rotation must be a multiple of 90, got {rotation}")

        if rotate_a == 0:
            offset_x = abs(center_y - y0) * scale
            offset_y = abs(center_x - x0) * scale
            width = abs(y1 - y0) * scale
            height = abs(x1 - x0) * scale
        else:
            offset_x = abs(center_x - x0) * scale
            offset_y = abs(center_y - y0) * scale
            width = abs(x1 - x0) * scale
            height = abs(y1 - y0) * scale

        # Top-down page matrix, as a PDF renderer would draw it
        a = rotate_a * scale
        b = rotate_b * scale
        c = rotate_c * scale
        d = rotate_d * scale
        e = offset_x - rotate_a * scale * center_x - rotate_c * scale * center_y
        f = offset_y - rotate_b * scale * center_x - rotate_d * scale * center_y

        # Mirror the y axis back so projected points stay bottom-up
        transform = (a, -b, c, -d, e, height - f)
        return cls(scale=scale, width=width, height=height, transform=transform)


@dataclass(frozen=True)
class Match:
    """A keyword occurrence; offsets index into the line text."""
    keyword: str
    start_offset: int
    end_offset: int
    matched_text: str


@dataclass(frozen=True)
class Rect:
    """
    A highlight rectangle in viewport space.

    width/height are the dimensions of the viewport the coordinates are
    expressed in, which the rendering layer uses to rescale them.
    """
    x1: float
    y1: float
    x2: float
    y2: float
    width: float
    height: float
    page_number: int

    def __post_init__(self):
        for name in ("x1", "y1", "x2", "y2", "width", "height"):
            value = _require_finite("Rect", name, getattr(self, name))
            object.__setattr__(self, name, value)
        if self.y1 > self.y2:
            raise MalformedGeometryError(f"Rect requires y1 <= y2, got {self.y1} > {self.y2}")

    def to_dict(self) -> dict:
        return {
            "x1": self.x1,
            "y1": self.y1,
            "x2": self.x2,
            "y2": self.y2,
            "width": self.width,
            "height": self.height,
            "pageNumber": self.page_number,
        }


@dataclass(frozen=True)
class Highlight:
    """One highlight region handed to the rendering layer."""
    id: str
    page_number: int
    bounding_rect: Rect
    rects: tuple[Rect, ...]
    content_text: str
    comment_text: str = ""
    comment_emoji: str = COMMENT_EMOJI

    @classmethod
    def from_rect(
        cls,
        highlight_id: str,
        rect: Rect,
        matched_text: str,
        comment_text: Optional[str] = None,
    ) -> "Highlight":
        """Create a single-rectangle highlight for a matched text."""
        return cls(
            id=highlight_id,
            page_number=rect.page_number,
            bounding_rect=rect,
            rects=(rect,),
            content_text=matched_text,
            comment_text=comment_text if comment_text is not None else f'Found "{matched_text}"',
        )

    def to_dict(self) -> dict:
        """Serialize to the IHighlight shape used by react-pdf-highlighter."""
        return {
            "content": {"text": self.content_text},
            "position": {
                "boundingRect": self.bounding_rect.to_dict(),
                "rects": [rect.to_dict() for rect in self.rects],
                "pageNumber": self.page_number,
            },
            "comment": {"text": self.comment_text, "emoji": self.comment_emoji},
            "id": self.id,
        }
