"""
Tests for loading real PDFs and searching their text layer.

Expected rectangles are the page viewport coordinates a PDF viewer draws
for text at (100, 700) in PDF user space.
"""

import asyncio
import pytest
from unittest.mock import MagicMock, PropertyMock, patch

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fakes import FakeConverter, FakeOCR, write_pdf

CAT = b"BT /F1 12 Tf 100 700 Td (cat) Tj ET"

# Helvetica advance widths for "cat" at 12pt: (500 + 556 + 278) * 12 / 1000
CAT_WIDTH = 16.008


def open_page(path, page_number=1):
    from pdf_processing.text_extractor import DocumentLoader

    async def load():
        document = await DocumentLoader().open(str(path))
        try:
            return document.page_count, await document.get_page(page_number, 1.0)
        finally:
            document.close()

    return asyncio.run(load())


def search_cat(path):
    from highlighting.ids import SequentialIdGenerator
    from highlighting.search import HighlightSearch
    from pdf_processing.text_extractor import DocumentLoader

    search = HighlightSearch(
        loader=DocumentLoader(),
        converter=FakeConverter(),
        ocr_engine=FakeOCR({}),
        id_generator=SequentialIdGenerator(),
    )
    return asyncio.run(search.run(["cat"], str(path), zoom=1.0))


class TestDocumentLoader:
    """Tests for DocumentLoader and PDFDocument on real files."""

    def test_unrotated_page(self, tmp_path):
        """Test one run at the text origin with the page's viewport size."""
        path = write_pdf(tmp_path / "plain.pdf", CAT)

        page_count, page = open_page(path)

        assert page_count == 1
        assert [run.text for run in page.text_runs] == ["cat"]
        run = page.text_runs[0]
        assert (run.origin_x, run.origin_y) == pytest.approx((100, 700))
        assert run.width == pytest.approx(CAT_WIDTH, abs=0.01)
        assert run.height == pytest.approx(12)
        assert (page.viewport.width, page.viewport.height) == (612, 792)

    def test_rotated_page_keeps_one_run(self, tmp_path):
        """Test a /Rotate 90 page still yields one run in user space."""
        path = write_pdf(tmp_path / "rotated.pdf", CAT, rotate=90)

        _, page = open_page(path)

        assert [run.text for run in page.text_runs] == ["cat"]
        run = page.text_runs[0]
        assert (run.origin_x, run.origin_y) == pytest.approx((100, 700))
        assert run.width == pytest.approx(CAT_WIDTH, abs=0.01)
        assert run.height == pytest.approx(12)
        assert (page.viewport.width, page.viewport.height) == (792, 612)

    def test_offset_mediabox(self, tmp_path):
        """Test a mediabox not anchored at the origin leaves user-space positions intact."""
        path = write_pdf(tmp_path / "offset.pdf", CAT, mediabox=(50, 50, 662, 842))

        _, page = open_page(path)

        run = page.text_runs[0]
        assert (run.origin_x, run.origin_y) == pytest.approx((100, 700))

    def test_image_only_page_has_no_runs(self, tmp_path):
        """Test a page without text produces no runs."""
        path = write_pdf(tmp_path / "blank.pdf", b"0 0 m 10 10 l S")

        _, page = open_page(path)

        assert page.text_runs == []

    def test_invalid_pdf(self, tmp_path):
        """Test bytes that are not a PDF raise DocumentLoadError."""
        from highlighting.exceptions import DocumentLoadError
        from pdf_processing.text_extractor import DocumentLoader

        path = tmp_path / "broken.pdf"
        path.write_bytes(b"this is not a pdf")

        with pytest.raises(DocumentLoadError):
            asyncio.run(DocumentLoader().open(str(path)))

    def test_closes_pdf_when_page_tree_fails(self):
        """Test an opened PDF is closed if reading its pages fails."""
        from highlighting.exceptions import DocumentLoadError
        from pdf_processing.text_extractor import DocumentLoader

        pdf = MagicMock()
        type(pdf).pages = PropertyMock(side_effect=RuntimeError("broken page tree"))

        with patch("pdf_processing.text_extractor.pdfplumber.open", return_value=pdf):
            with pytest.raises(DocumentLoadError, match="broken page tree"):
                DocumentLoader._parse(b"%PDF", "doc.pdf")

        pdf.close.assert_called_once()


class TestSearchRealDocuments:
    """Tests for the text-layer search against real page geometry."""

    def test_unrotated_page(self, tmp_path):
        """Test the highlight sits 80 to 92 units from the top of the page."""
        run = search_cat(write_pdf(tmp_path / "plain.pdf", CAT))

        assert run.path == "text_layer"
        rect = run.highlights[0].bounding_rect
        assert rect.x1 == pytest.approx(100)
        assert rect.x2 == pytest.approx(100 + CAT_WIDTH, abs=0.01)
        assert (rect.y1, rect.y2) == pytest.approx((80, 92))
        assert (rect.width, rect.height) == (612, 792)

    def test_rotated_page(self, tmp_path):
        """Test a /Rotate 90 page puts the highlight where the rotated page shows it."""
        run = search_cat(write_pdf(tmp_path / "rotated.pdf", CAT, rotate=90))

        assert len(run.highlights) == 1
        rect = run.highlights[0].bounding_rect
        assert (rect.x1, rect.x2) == pytest.approx((700, 712))
        assert rect.y1 == pytest.approx(100)
        assert rect.y2 == pytest.approx(100 + CAT_WIDTH, abs=0.01)
        assert (rect.width, rect.height) == (792, 612)

    def test_offset_mediabox(self, tmp_path):
        """Test the mediabox origin is subtracted exactly once."""
        run = search_cat(write_pdf(tmp_path / "offset.pdf", CAT, mediabox=(50, 50, 662, 842)))

        rect = run.highlights[0].bounding_rect
        assert rect.x1 == pytest.approx(50)
        assert rect.x2 == pytest.approx(50 + CAT_WIDTH, abs=0.01)
        assert (rect.y1, rect.y2) == pytest.approx((130, 142))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
