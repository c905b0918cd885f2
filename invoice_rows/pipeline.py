"""
Conversion pipeline from pages or pasted text to export rows.

Every entry point folds its chunks, one at a time and in document order,
through a single InvoiceAccumulator, then finalizes the invoices and projects
them into rows. The PDF path may wait on two things per page: reading the
digital text layer and, when that text is missing or too short, OCR.
"""

from collections.abc import Iterable
from typing import Optional

from .accumulator import InvoiceAccumulator
from .config import TEXT_PREVIEW_LENGTH, logger
from .layouts import get_layout
from .normalizer import normalize_text, split_segments
from .ocr import TesseractOcrEngine, get_ocr_engine
from .projector import column_headers, project_rows
from .schemas import ExtractionOptions, ExtractionResult, ExtractionStatus
from .sources import PageSource, PdfInput, PdfPlumberSource

NO_LINE_ITEMS_MESSAGE = "No line items were found. Try forcing OCR."


def _preview(raw_text: str) -> str:
    if len(raw_text) <= TEXT_PREVIEW_LENGTH:
        return raw_text
    return raw_text[:TEXT_PREVIEW_LENGTH] + "…"


def _build_result(
    accumulator: InvoiceAccumulator,
    options: ExtractionOptions,
    raw_text: str,
    page_count: int = 0,
) -> ExtractionResult:
    """Finalize accumulated invoices and project them into an ExtractionResult."""
    layout = accumulator.layout
    invoices = accumulator.finalize(options.default_currency)
    rows = project_rows(invoices, layout, options)

    if accumulator.line_item_count == 0:
        logger.warning("No line items found in document")
        status = ExtractionStatus.NO_LINE_ITEMS
        message = NO_LINE_ITEMS_MESSAGE
    else:
        status = ExtractionStatus.OK
        message = f"Parsed {len(rows)} line item row(s) from {len(invoices)} invoice(s)."
        logger.info(message)

    return ExtractionResult(
        status=status,
        message=message,
        layout=layout.variant,
        headers=column_headers(layout),
        rows=rows,
        invoices=invoices,
        page_count=page_count,
        text_preview=_preview(raw_text),
    )


# ============================================================================
# Text Entry Points
# ============================================================================

def extract_rows_from_text(
    text: str,
    options: Optional[ExtractionOptions] = None,
) -> ExtractionResult:
    """
    Convert pasted invoice text into export rows.

    The text is split into segments at "Tax Invoice" and
    "Invoice Amount Summary"; each segment is one chunk.
    """
    options = options or ExtractionOptions()
    accumulator = InvoiceAccumulator(get_layout(options.layout))

    for segment in split_segments(text):
        accumulator.add_chunk(segment)

    return _build_result(accumulator, options, text.strip())


def extract_rows_from_pages(
    pages: Iterable[str],
    options: Optional[ExtractionOptions] = None,
) -> ExtractionResult:
    """Convert already-extracted page texts, in page order, into export rows."""
    options = options or ExtractionOptions()
    accumulator = InvoiceAccumulator(get_layout(options.layout))

    raw_parts = []
    page_count = 0
    for page_count, page_text in enumerate(pages, start=1):
        raw_parts.append(f"--- Page {page_count} ---\n{page_text}")
        accumulator.add_chunk(normalize_text(page_text))

    return _build_result(accumulator, options, "\n\n".join(raw_parts), page_count)


# ============================================================================
# PDF Entry Points
# ============================================================================

async def read_page_text(
    source: PageSource,
    page_index: int,
    options: ExtractionOptions,
    ocr: Optional[TesseractOcrEngine] = None,
) -> str:
    """
    Get the text of one page, falling back to OCR.

    OCR is used when forced, or when the digital text is empty or shorter
    than the configured minimum after normalization.
    """
    page_text = ""
    if not options.force_ocr:
        page_text = await source.get_page_text(page_index)

    normalized_length = len(normalize_text(page_text))
    needs_ocr = (
        options.force_ocr
        or normalized_length == 0
        or normalized_length < options.minimum_digital_text_length
    )
    if needs_ocr:
        logger.info(f"Running OCR on page {page_index + 1}")
        engine = ocr or get_ocr_engine()
        image = await source.render_page(page_index, options.ocr_scale)
        page_text = await engine.recognize(image)

    return page_text


async def extract_rows_from_source(
    source: PageSource,
    options: Optional[ExtractionOptions] = None,
    ocr: Optional[TesseractOcrEngine] = None,
) -> ExtractionResult:
    """
    Convert every page of a source into export rows.

    Pages are processed strictly one after another. Any error raised while
    reading a page aborts the whole run.
    """
    options = options or ExtractionOptions()
    accumulator = InvoiceAccumulator(get_layout(options.layout))

    raw_parts = []
    for page_index in range(source.page_count):
        logger.info(f"Processing page {page_index + 1} of {source.page_count}")
        page_text = await read_page_text(source, page_index, options, ocr)
        raw_parts.append(f"--- Page {page_index + 1} ---\n{page_text}")
        accumulator.add_chunk(normalize_text(page_text))

    return _build_result(accumulator, options, "\n\n".join(raw_parts), source.page_count)


async def extract_rows_from_pdf(
    pdf_input: PdfInput,
    options: Optional[ExtractionOptions] = None,
    ocr: Optional[TesseractOcrEngine] = None,
    name: Optional[str] = None,
) -> ExtractionResult:
    """
    Convert a PDF (path or binary stream) into export rows.

    Raises:
        PdfSourceError: If the document cannot be opened or parsed
    """
    with PdfPlumberSource.open(pdf_input, name) as source:
        logger.info(f"Converting {source.name} ({source.page_count} page(s))")
        return await extract_rows_from_source(source, options, ocr)
