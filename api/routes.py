"""
FastAPI routes for PDF Keyword Highlighter.

Thin routes that delegate to the service layer.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
import structlog

from api.schemas import ConvertRequest, ErrorResponse, HighlightSchema, SearchRequest
from highlighting.matcher import MatchMode
from highlighting.search import HighlightSearch
from pdf_processing.rasterizer import PageRasterizer

logger = structlog.get_logger()

router = APIRouter(prefix="/api")


# Initialize services
_rasterizer = None
_highlight_search = None


def get_rasterizer() -> PageRasterizer:
    """Dependency that provides the page rasterizer."""
    global _rasterizer
    if _rasterizer is None:
        _rasterizer = PageRasterizer()
    return _rasterizer


def get_highlight_search() -> HighlightSearch:
    """Dependency that provides the highlight search service."""
    global _highlight_search
    if _highlight_search is None:
        _highlight_search = HighlightSearch()
    return _highlight_search


@router.post(
    "/convertToImage",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def convert_to_image(
    request: ConvertRequest,
    rasterizer: PageRasterizer = Depends(get_rasterizer),
):
    """
    Convert a PDF into one PNG data URL per page.

    Returns 400 when pdfUrl is missing and 500 when conversion fails.
    """
    if not request.pdfUrl:
        return JSONResponse(
            status_code=400,
            content={"error": "pdfUrl is required in the request body"}
        )

    try:
        images = rasterizer.convert(request.pdfUrl)
    except Exception as e:
        logger.error("Error converting PDF to images", pdf_url=request.pdfUrl, error=str(e))
        return JSONResponse(
            status_code=500,
            content={
                "error": "Failed to convert PDF to images",
                "details": str(e),
            }
        )

    return JSONResponse(status_code=200, content=images)


@router.post(
    "/search",
    response_model=list[HighlightSchema],
    responses={400: {"model": ErrorResponse}},
)
async def search_document(
    request: SearchRequest,
    searcher: HighlightSearch = Depends(get_highlight_search),
):
    """
    Search a PDF for keywords and return highlight regions.

    Failures during the search yield a partial (possibly empty) list,
    never an error status.
    """
    if not request.pdfUrl:
        return JSONResponse(
            status_code=400,
            content={"error": "pdfUrl is required in the request body"}
        )

    mode = MatchMode.LITERAL if request.literal else None
    highlights = await searcher.search(request.keywords, request.pdfUrl, request.zoom, mode)
    return [highlight.to_dict() for highlight in highlights]
