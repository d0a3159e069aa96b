"""
Pydantic schemas for API request/response models.

Field names follow the highlight shape the PDF viewer consumes, hence
camelCase.
"""

from typing import Optional
from pydantic import BaseModel, Field


class ConvertRequest(BaseModel):
    """Schema for an image conversion request."""
    pdfUrl: Optional[str] = None


class ErrorResponse(BaseModel):
    """Schema for error responses."""
    error: str
    details: Optional[str] = None


class SearchRequest(BaseModel):
    """Schema for a keyword search request."""
    keywords: list[str] = Field(default_factory=list)
    pdfUrl: Optional[str] = None
    zoom: Optional[float] = Field(default=None, gt=0)
    literal: bool = False


class RectSchema(BaseModel):
    """Schema for one highlight rectangle."""
    x1: float
    y1: float
    x2: float
    y2: float
    width: float
    height: float
    pageNumber: int


class PositionSchema(BaseModel):
    """Schema for a highlight position."""
    boundingRect: RectSchema
    rects: list[RectSchema]
    pageNumber: int


class ContentSchema(BaseModel):
    text: str


class CommentSchema(BaseModel):
    text: str
    emoji: str


class HighlightSchema(BaseModel):
    """Schema for one highlight."""
    content: ContentSchema
    position: PositionSchema
    comment: CommentSchema
    id: str
