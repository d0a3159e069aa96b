"""PDF processing module for text extraction, rasterization and OCR."""

from pdf_processing.text_extractor import DocumentLoader, PDFDocument, PageContent
from pdf_processing.rasterizer import PageRasterizer
from pdf_processing.ocr_fallback import OCREngine, TesseractOCR, TextractOCR, get_ocr_engine

__all__ = [
    "DocumentLoader",
    "PDFDocument",
    "PageContent",
    "PageRasterizer",
    "OCREngine",
    "TesseractOCR",
    "TextractOCR",
    "get_ocr_engine",
]
