"""
Unit tests for measurelab.app_io.document.

Tests:
- Raster images load as a single page
- PDF pages render through PyMuPDF at the requested zoom
"""

import pymupdf as fitz
import pytest
from PIL import Image

from measurelab.app_io.document import document_page_count, load_document_page


@pytest.fixture
def png_path(tmp_path):
    path = tmp_path / "plan.png"
    Image.new('RGB', (120, 80), 'white').save(path)
    return path


@pytest.fixture
def pdf_path(tmp_path):
    """Two-page PDF, 200x100 points each."""
    path = tmp_path / "plan.pdf"
    doc = fitz.open()
    for _ in range(2):
        page = doc.new_page(width=200, height=100)
        page.draw_line((10, 10), (190, 90))
    doc.save(str(path))
    doc.close()
    return path


class TestRaster:
    """Tests for raster documents."""

    def test_size_is_document_space(self, png_path):
        page = load_document_page(png_path)
        assert page.size == (120, 80)
        assert page.page_count == 1
        assert page.image.mode == 'RGB'

    def test_only_first_page(self, png_path):
        with pytest.raises(ValueError):
            load_document_page(png_path, 1)
        assert document_page_count(png_path) == 1


class TestPdf:
    """Tests for PDF documents."""

    def test_render_with_zoom(self, pdf_path):
        page = load_document_page(pdf_path, 1, zoom=2.0)
        assert page.size == (400, 200)
        assert page.page_number == 1
        assert page.page_count == 2

    def test_page_count(self, pdf_path):
        assert document_page_count(pdf_path) == 2

    @pytest.mark.parametrize("page_number", [-1, 2])
    def test_invalid_page(self, pdf_path, page_number):
        with pytest.raises(ValueError, match="Invalid page number"):
            load_document_page(pdf_path, page_number)
