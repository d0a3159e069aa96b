"""Search orchestration: load a PDF, find keywords, return highlight regions."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Optional

import structlog

from config import settings
from fetcher.image_converter import ImageConversionClient
from highlighting.builder import HighlightBuilder
from highlighting.ids import UuidIdGenerator
from highlighting.lines import reconstruct_lines
from highlighting.matcher import KeywordMatcher, MatchMode
from highlighting.models import Highlight
from highlighting.ocr_estimator import OcrFallbackEstimator
from pdf_processing.ocr_fallback import OCREngine, get_ocr_engine
from pdf_processing.text_extractor import DocumentLoader, PageContent

logger = structlog.get_logger()

PATH_TEXT_LAYER = "text_layer"
PATH_OCR = "ocr"


class SearchState(str, Enum):
    """Stages of one search call."""
    LOAD_DOCUMENT = "load_document"
    PROBE_TEXT_LAYER = "probe_text_layer"
    TEXT_LAYER_PATH = "text_layer_path"
    OCR_PATH = "ocr_path"
    PER_PAGE_PROCESS = "per_page_process"
    DONE = "done"
    FAILED = "failed"


@dataclass
class SearchRun:
    """Mutable state for one search call."""

    keywords: list[str]
    document_url: str
    zoom: float
    state: SearchState = SearchState.LOAD_DOCUMENT
    path: Optional[str] = None
    page_count: int = 0
    pages_processed: int = 0
    highlights: list[Highlight] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.state == SearchState.FAILED


class HighlightSearch:
    """
    Finds keyword occurrences in a PDF and turns them into highlights.

    Only page 1 is probed for a text layer and the outcome decides the
    path for the whole document: documents whose first page is a scan are
    OCR'd entirely even if later pages have text, and vice versa.

    Pages are processed one at a time in ascending order and highlights
    are appended as each page completes, so the result order is page,
    then position on the page. Any failure ends the call but keeps the
    highlights gathered so far; search() never raises.
    """

    def __init__(
        self,
        loader: Optional[DocumentLoader] = None,
        converter: Optional[ImageConversionClient] = None,
        ocr_engine: Optional[OCREngine] = None,
        id_generator: Optional[Callable[[], str]] = None,
        match_mode: Optional[MatchMode] = None,
        ocr_language: Optional[str] = None,
        ocr_line_height: Optional[float] = None,
    ):
        self.loader = loader or DocumentLoader()
        self.converter = converter or ImageConversionClient()
        self._ocr_engine = ocr_engine
        self.match_mode = match_mode
        self.ocr_language = ocr_language or settings.OCR_LANGUAGE

        id_generator = id_generator or UuidIdGenerator()
        self.builder = HighlightBuilder(id_generator)
        self.estimator = OcrFallbackEstimator(id_generator, line_height=ocr_line_height)

    @property
    def ocr_engine(self) -> OCREngine:
        """OCR engine, created on first use."""
        if self._ocr_engine is None:
            self._ocr_engine = get_ocr_engine()
        return self._ocr_engine

    async def search(
        self,
        keywords: Iterable[str],
        document_url: str,
        zoom: Optional[float] = None,
        match_mode: Optional[MatchMode] = None,
    ) -> list[Highlight]:
        """Search a document and return its highlights (possibly partial)."""
        run = await self.run(keywords, document_url, zoom, match_mode)
        return run.highlights

    async def run(
        self,
        keywords: Iterable[str],
        document_url: str,
        zoom: Optional[float] = None,
        match_mode: Optional[MatchMode] = None,
    ) -> SearchRun:
        """
        Execute one search and return its full run state.

        Args:
            keywords: Keywords in priority order
            document_url: URL or path of the PDF
            zoom: Viewport scale (default from settings)
            match_mode: Overrides the matching mode for this call

        Returns:
            SearchRun with highlights, final state and error if any
        """
        run = SearchRun(
            keywords=list(keywords),
            document_url=document_url,
            zoom=zoom if zoom is not None else settings.DEFAULT_ZOOM,
        )

        if not any(run.keywords):
            logger.info("No keywords supplied, skipping search", document_url=document_url)
            run.state = SearchState.DONE
            return run

        document = None
        try:
            matcher = KeywordMatcher(run.keywords, match_mode or self.match_mode)

            self._transition(run, SearchState.LOAD_DOCUMENT)
            document = await self.loader.open(document_url)
            run.page_count = document.page_count

            self._transition(run, SearchState.PROBE_TEXT_LAYER)
            first_page = await document.get_page(1, run.zoom)

            if first_page.text_runs:
                self._transition(run, SearchState.TEXT_LAYER_PATH)
                run.path = PATH_TEXT_LAYER
                await self._search_text_layer(document, matcher, run, first_page)
            else:
                self._transition(run, SearchState.OCR_PATH)
                run.path = PATH_OCR
                await self._search_ocr(document, matcher, run)

            self._transition(run, SearchState.DONE)

        except Exception as e:
            run.error = str(e)
            logger.error(
                "Error searching PDF",
                document_url=document_url,
                state=run.state.value,
                pages_processed=run.pages_processed,
                highlights=len(run.highlights),
                error=str(e),
                error_type=type(e).__name__
            )
            run.state = SearchState.FAILED

        finally:
            if document is not None:
                document.close()

        logger.info(
            "Search finished",
            document_url=document_url,
            path=run.path,
            state=run.state.value,
            highlights=len(run.highlights)
        )
        return run

    async def _search_text_layer(
        self,
        document,
        matcher: KeywordMatcher,
        run: SearchRun,
        first_page: PageContent,
    ) -> None:
        self._transition(run, SearchState.PER_PAGE_PROCESS)

        for page_number in range(1, document.page_count + 1):
            if page_number == 1:
                page = first_page
            else:
                page = await document.get_page(page_number, run.zoom)

            for line in reconstruct_lines(page.text_runs):
                for match in matcher.find_matches(line.text):
                    run.highlights.append(
                        self.builder.build(line, match, page.viewport, page_number)
                    )

            run.pages_processed += 1

    async def _search_ocr(self, document, matcher: KeywordMatcher, run: SearchRun) -> None:
        images = await self.converter.convert(run.document_url)

        page_texts = []
        for index, image in enumerate(images):
            text = await asyncio.to_thread(self.ocr_engine.recognize, image, self.ocr_language)
            logger.debug("Page recognized", page=index + 1, chars=len(text))
            page_texts.append(text)

        self._transition(run, SearchState.PER_PAGE_PROCESS)

        for page_number in range(1, document.page_count + 1):
            if page_number > len(page_texts):
                logger.warning(
                    "No OCR text for page",
                    page=page_number,
                    images=len(page_texts)
                )
                continue

            viewport = await document.get_viewport(page_number, run.zoom)
            run.highlights.extend(
                self.estimator.estimate(page_texts[page_number - 1], matcher, viewport, page_number)
            )
            run.pages_processed += 1

    @staticmethod
    def _transition(run: SearchRun, state: SearchState) -> None:
        logger.debug("Search state", document_url=run.document_url, state=state.value)
        run.state = state


async def run_search(
    keywords: Iterable[str],
    document_url: str,
    zoom: Optional[float] = None,
    *,
    match_mode: Optional[MatchMode] = None,
) -> list[Highlight]:
    """Search a PDF for keywords with default collaborators."""
    return await HighlightSearch(match_mode=match_mode).search(keywords, document_url, zoom)


def search_pdf(
    keywords: Iterable[str],
    document_url: str,
    zoom: Optional[float] = None,
    *,
    match_mode: Optional[MatchMode] = None,
) -> list[Highlight]:
    """Synchronous wrapper for run_search. Use from scripts or non-async code."""
    return asyncio.run(run_search(keywords, document_url, zoom, match_mode=match_mode))
