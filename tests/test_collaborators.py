"""
Tests for document, image conversion and OCR adapters.
"""

import asyncio
import base64
import io
import pytest
from unittest.mock import patch, MagicMock

import httpx

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def png_bytes(size=(4, 4)):
    from PIL import Image
    buffer = io.BytesIO()
    Image.new("RGB", size, "white").save(buffer, format="PNG")
    return buffer.getvalue()


def char(text, x0, y, size=12.0, font="Helvetica", advance=6.0):
    return {
        "text": text,
        "x0": x0,
        "x1": x0 + advance,
        "y0": y - 2,
        "y1": y - 2 + size,
        "size": size,
        "fontname": font,
        "matrix": (size, 0, 0, size, x0, y),
    }


class TestCharsToRuns:
    """Tests for merging pdfplumber characters into runs."""

    def test_adjacent_chars_merge(self):
        """Test contiguous characters with one style form one run."""
        from pdf_processing.text_extractor import chars_to_runs

        runs = chars_to_runs([char("c", 30, 100), char("a", 36, 100), char("t", 42, 100)])

        assert len(runs) == 1
        assert runs[0].text == "cat"
        assert runs[0].origin_x == 30
        assert runs[0].origin_y == 100
        assert runs[0].width == 18
        assert runs[0].height == 12

    def test_font_change_splits(self):
        """Test a font change starts a new run."""
        from pdf_processing.text_extractor import chars_to_runs

        runs = chars_to_runs([char("a", 0, 100), char("b", 6, 100, font="Helvetica-Bold")])

        assert [run.text for run in runs] == ["a", "b"]

    def test_baseline_change_splits(self):
        """Test a different baseline starts a new run."""
        from pdf_processing.text_extractor import chars_to_runs

        runs = chars_to_runs([char("a", 0, 100), char("b", 6, 88)])

        assert [run.origin_y for run in runs] == [100, 88]

    def test_large_gap_splits(self):
        """Test a gap wider than the tolerance starts a new run."""
        from pdf_processing.text_extractor import chars_to_runs

        runs = chars_to_runs([char("a", 0, 100), char("b", 200, 100)])

        assert len(runs) == 2

    def test_rotated_page_maps_back_to_user_space(self):
        """Test characters on a /Rotate 90 page form one run at their user-space origin."""
        from pdf_processing.text_extractor import chars_to_runs, user_space_matrix

        # pdfminer places user-space (x, y) at device (y - y0, x1 - x) on a 90 degree page
        def rotated(text, x, y, advance=6.0, size=12.0):
            return {
                "text": text,
                "x0": y - 2,
                "x1": y - 2 + size,
                "y0": 612 - x - advance,
                "y1": 612 - x,
                "fontname": "Helvetica",
                "matrix": (0, -1, 1, 0, y, 612 - x),
            }

        runs = chars_to_runs(
            [rotated("c", 100, 700), rotated("a", 106, 700), rotated("t", 112, 700)],
            to_user_space=user_space_matrix((0, 0, 612, 792), 90),
        )

        assert [run.text for run in runs] == ["cat"]
        assert (runs[0].origin_x, runs[0].origin_y) == (100, 700)
        assert runs[0].width == 18
        assert runs[0].height == 12

    def test_mediabox_offset_is_added_back(self):
        """Test an offset mediabox shifts device positions back to user space."""
        from pdf_processing.text_extractor import chars_to_runs, user_space_matrix

        runs = chars_to_runs(
            [char("c", 50, 650)],
            to_user_space=user_space_matrix((50, 50, 662, 842), 0),
        )

        assert (runs[0].origin_x, runs[0].origin_y) == (100, 700)

    def test_no_chars(self):
        """Test an image-only page yields no runs."""
        from pdf_processing.text_extractor import chars_to_runs

        assert chars_to_runs([]) == []


class TestPDFDownloader:
    """Tests for fetching document bytes."""

    def test_reads_local_file(self, tmp_path):
        """Test local paths are read from disk."""
        from fetcher.pdf_downloader import PDFDownloader

        path = tmp_path / "doc.pdf"
        path.write_bytes(b"%PDF-1.4 test")

        assert PDFDownloader().fetch(str(path)) == b"%PDF-1.4 test"

    def test_missing_local_file(self, tmp_path):
        """Test a missing path raises DocumentLoadError."""
        from fetcher.pdf_downloader import PDFDownloader
        from highlighting.exceptions import DocumentLoadError

        with pytest.raises(DocumentLoadError):
            PDFDownloader().fetch(str(tmp_path / "missing.pdf"))

    def test_client_error_not_retried(self):
        """Test a 404 fails without retrying."""
        from fetcher.pdf_downloader import PDFDownloader

        downloader = PDFDownloader(max_retries=3, retry_delay=0)
        request = httpx.Request("GET", "https://example.com/doc.pdf")
        error = httpx.HTTPStatusError(
            "not found", request=request, response=httpx.Response(404, request=request)
        )

        with patch.object(downloader, "_download_attempt", side_effect=error) as attempt:
            result = downloader.download("https://example.com/doc.pdf")

        assert not result.success
        assert attempt.call_count == 1
        assert "HTTP 404" in result.error

    def test_timeout_retried(self):
        """Test timeouts are retried up to max_retries."""
        from fetcher.pdf_downloader import PDFDownloader

        downloader = PDFDownloader(max_retries=2, retry_delay=0)

        with patch.object(downloader, "_download_attempt", side_effect=httpx.ReadTimeout("slow")) as attempt:
            result = downloader.download("https://example.com/doc.pdf")

        assert attempt.call_count == 3
        assert result.retries_used == 2


class TestImageConversionClient:
    """Tests for the conversion endpoint client."""

    def test_success_returns_images(self):
        """Test the JSON array is returned and the body carries pdfUrl."""
        from fetcher.image_converter import ImageConversionClient

        seen = {}

        def handler(request):
            seen["body"] = request.content
            return httpx.Response(200, json=["img1", "img2"])

        client = ImageConversionClient(
            endpoint="http://converter/api/convertToImage",
            transport=httpx.MockTransport(handler),
        )

        images = asyncio.run(client.convert("https://example.com/scan.pdf"))

        assert images == ["img1", "img2"]
        assert b'"pdfUrl"' in seen["body"]

    def test_server_error_raises(self):
        """Test an error status raises with the server's message."""
        from fetcher.image_converter import ImageConversionClient
        from highlighting.exceptions import ImageConversionError

        def handler(request):
            return httpx.Response(500, json={"error": "Failed to convert PDF to images", "details": "boom"})

        client = ImageConversionClient(endpoint="http://converter/x", transport=httpx.MockTransport(handler))

        with pytest.raises(ImageConversionError) as excinfo:
            asyncio.run(client.convert("https://example.com/scan.pdf"))

        assert excinfo.value.status_code == 500
        assert "Failed to convert PDF to images" in str(excinfo.value)

    def test_non_list_payload_raises(self):
        """Test an unexpected payload is rejected."""
        from fetcher.image_converter import ImageConversionClient
        from highlighting.exceptions import ImageConversionError

        client = ImageConversionClient(
            endpoint="http://converter/x",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"images": []})),
        )

        with pytest.raises(ImageConversionError):
            asyncio.run(client.convert("https://example.com/scan.pdf"))


class TestOCREngines:
    """Tests for OCR engines."""

    def test_decode_data_url(self):
        """Test data URLs and plain base64 decode to the same bytes."""
        from pdf_processing.ocr_fallback import decode_image

        raw = png_bytes()
        encoded = base64.b64encode(raw).decode("ascii")

        assert decode_image("data:image/png;base64," + encoded) == raw
        assert decode_image(encoded) == raw
        assert decode_image(raw) == raw

    def test_decode_invalid_base64(self):
        """Test garbage input raises OCRError."""
        from pdf_processing.ocr_fallback import decode_image
        from highlighting.exceptions import OCRError

        with pytest.raises(OCRError):
            decode_image("not base64!!")

    def test_tesseract_uses_language(self):
        """Test Tesseract receives the configured language code."""
        from pdf_processing.ocr_fallback import TesseractOCR

        with patch("pdf_processing.ocr_fallback.pytesseract.image_to_string", return_value="hello\nworld") as ocr:
            text = TesseractOCR().recognize(png_bytes(), "eng")

        assert text == "hello\nworld"
        assert ocr.call_args.kwargs["lang"] == "eng"

    def test_textract_joins_lines(self):
        """Test Textract LINE blocks are joined with newlines."""
        from pdf_processing.ocr_fallback import TextractOCR

        engine = TextractOCR(aws_access_key="key", aws_secret_key="secret", aws_region="us-east-1")
        engine._client = MagicMock()
        engine._client.detect_document_text.return_value = {
            "Blocks": [
                {"BlockType": "PAGE"},
                {"BlockType": "LINE", "Text": "hello"},
                {"BlockType": "WORD", "Text": "hello"},
                {"BlockType": "LINE", "Text": "world"},
            ]
        }

        assert engine.recognize(png_bytes()) == "hello\nworld"

    def test_textract_without_credentials(self):
        """Test Textract refuses to run without credentials."""
        from pdf_processing.ocr_fallback import TextractOCR
        from highlighting.exceptions import OCRError

        engine = TextractOCR(aws_access_key="", aws_secret_key="")
        engine.aws_access_key = ""
        engine.aws_secret_key = ""

        with pytest.raises(OCRError):
            engine.recognize(png_bytes())

    def test_unknown_engine(self):
        """Test an unknown engine name is rejected."""
        from pdf_processing.ocr_fallback import get_ocr_engine

        with pytest.raises(ValueError):
            get_ocr_engine("abbyy")


class TestPageRasterizer:
    """Tests for rendering pages to data URLs."""

    def test_one_data_url_per_page(self):
        """Test each page becomes a PNG data URL in order."""
        from PIL import Image
        from pdf_processing.rasterizer import PageRasterizer

        downloader = MagicMock()
        downloader.fetch.return_value = b"%PDF"

        pages = []
        for _ in range(2):
            page = MagicMock()
            page.to_image.return_value.original = Image.new("RGB", (4, 4), "white")
            pages.append(page)

        pdf = MagicMock()
        pdf.pages = pages
        pdf.__enter__.return_value = pdf

        with patch("pdf_processing.rasterizer.pdfplumber.open", return_value=pdf):
            images = PageRasterizer(resolution=72, downloader=downloader).convert("doc.pdf")

        assert len(images) == 2
        assert all(image.startswith("data:image/png;base64,") for image in images)
        pages[0].to_image.assert_called_once_with(resolution=72)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
