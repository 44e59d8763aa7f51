from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import pymupdf as fitz
from PIL import Image

logger = logging.getLogger(__name__)

PDF_SUFFIXES = ('.pdf',)
# PDF pages are rendered at 72 dpi * zoom
DEFAULT_PDF_ZOOM = 2.0


@dataclass
class DocumentPage:
    image: Image.Image
    page_number: int
    page_count: int

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> tuple:
        return (self.image.width, self.image.height)


def _is_pdf(path: Path) -> bool:
    return path.suffix.lower() in PDF_SUFFIXES


def _pdf_page_to_image(pdf_path: Path, page_number: int, zoom: float) -> DocumentPage:
    """Render the specified page of a PDF and convert it to a PIL Image."""
    with open(pdf_path, 'rb') as f:
        doc = fitz.open(stream=f.read(), filetype='pdf')
    try:
        page_count = len(doc)
        if page_number < 0 or page_number >= page_count:
            raise ValueError(f"Invalid page number {page_number} for PDF with {page_count} pages")
        page = doc.load_page(page_number)
        pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom))
        mode = 'RGB' if pix.alpha == 0 else 'RGBA'
        img = Image.frombytes(mode, [pix.width, pix.height], pix.samples)
    finally:
        doc.close()
    return DocumentPage(image=img, page_number=page_number, page_count=page_count)


def _raster_to_image(image_path: Path, page_number: int) -> DocumentPage:
    if page_number != 0:
        raise ValueError(f"Invalid page number {page_number} for single-page image")
    with Image.open(image_path) as src:
        img = src.convert('RGBA' if 'A' in src.getbands() else 'RGB')
    return DocumentPage(image=img, page_number=0, page_count=1)


def load_document_page(path: Union[str, Path], page_number: int = 0,
                       zoom: float = DEFAULT_PDF_ZOOM) -> DocumentPage:
    """Load one page of a PDF or a raster image; its pixel size is the document space."""
    path = Path(path)
    if _is_pdf(path):
        page = _pdf_page_to_image(path, page_number, zoom)
    else:
        page = _raster_to_image(path, page_number)
    logger.info("Loaded %s page %d/%d (%dx%d)", path.name, page.page_number + 1,
                page.page_count, page.width, page.height)
    return page


def document_page_count(path: Union[str, Path]) -> int:
    path = Path(path)
    if not _is_pdf(path):
        return 1
    with fitz.open(path) as doc:
        return len(doc)
