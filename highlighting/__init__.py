"""
Keyword highlighting for PDFs.

Use as a library:

    from highlighting.search import search_pdf

    highlights = search_pdf(["invoice", "total"], "https://example.com/doc.pdf")
    payload = [h.to_dict() for h in highlights]

Or async:

    from highlighting.search import run_search

    highlights = await run_search(["invoice"], "/path/to/doc.pdf", zoom=1.5)

The package root only exports value types so that the document and OCR
adapters can depend on them without importing the orchestrator.
"""

from highlighting.models import Highlight, Line, Match, Rect, TextRun, Viewport
from highlighting.matcher import KeywordMatcher, MatchMode

__all__ = [
    "Highlight",
    "Line",
    "Match",
    "Rect",
    "TextRun",
    "Viewport",
    "KeywordMatcher",
    "MatchMode",
]
