"""
PDF page source backed by pdfplumber.

A page source answers two questions per page: what digital text does it
carry, and what does it look like as a bitmap (for OCR). pdfplumber calls are
blocking, so they run in a worker thread.
"""

import asyncio
from pathlib import Path
from typing import IO, Optional, Protocol, Union

import pdfplumber
from PIL import Image

from .config import logger

PdfInput = Union[str, Path, IO[bytes]]

# pdfplumber renders at 72 dpi for scale 1.0
_BASE_RESOLUTION = 72


class PdfSourceError(ValueError):
    """Raised when a document cannot be opened or parsed."""


class PageSource(Protocol):
    """Interface the pipeline needs from a document."""

    page_count: int

    async def get_page_text(self, page_index: int) -> str:
        ...

    async def render_page(self, page_index: int, scale: float) -> Image.Image:
        ...


class PdfPlumberSource:
    """
    Page source over a PDF opened with pdfplumber.

    Use as a context manager so the underlying file is closed:

        with PdfPlumberSource.open(path) as source:
            text = await source.get_page_text(0)
    """

    def __init__(self, pdf: "pdfplumber.PDF", name: str = "document.pdf"):
        self._pdf = pdf
        self.name = name
        self.page_count = len(pdf.pages)

    @classmethod
    def open(cls, pdf_input: PdfInput, name: Optional[str] = None) -> "PdfPlumberSource":
        """
        Open a PDF from a path or a binary stream.

        Raises:
            PdfSourceError: If the document cannot be opened or parsed
        """
        if name is None:
            name = Path(pdf_input).name if isinstance(pdf_input, (str, Path)) else "document.pdf"

        try:
            pdf = pdfplumber.open(pdf_input)
        except Exception as e:
            logger.error(f"Error opening PDF {name}: {e}")
            raise PdfSourceError(f"Could not open PDF {name}: {e}") from e

        try:
            return cls(pdf, name)
        except Exception as e:
            pdf.close()
            logger.error(f"Error reading pages of {name}: {e}")
            raise PdfSourceError(f"Could not read pages of PDF {name}: {e}") from e

    async def get_page_text(self, page_index: int) -> str:
        """Digital text layer of a page ("" if the page has none)."""
        page = self._pdf.pages[page_index]
        try:
            text = await asyncio.to_thread(page.extract_text)
        except Exception as e:
            raise PdfSourceError(f"Could not read text of page {page_index + 1} in {self.name}: {e}") from e
        return text or ""

    async def render_page(self, page_index: int, scale: float) -> Image.Image:
        """Render a page to a PIL image at 72 * scale dpi."""
        page = self._pdf.pages[page_index]
        try:
            page_image = await asyncio.to_thread(
                page.to_image, resolution=int(_BASE_RESOLUTION * scale)
            )
        except Exception as e:
            raise PdfSourceError(f"Could not render page {page_index + 1} of {self.name}: {e}") from e
        return page_image.original.convert("RGB")

    def close(self) -> None:
        self._pdf.close()

    def __enter__(self) -> "PdfPlumberSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
