"""Fetcher module for downloading PDFs and requesting page images."""

from fetcher.pdf_downloader import PDFDownloader, DownloadResult
from fetcher.image_converter import ImageConversionClient

__all__ = ["PDFDownloader", "DownloadResult", "ImageConversionClient"]
