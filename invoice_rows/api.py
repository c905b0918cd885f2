"""
FastAPI application for the invoice-to-rows converter.

Provides REST API endpoints for:
- Health check
- PDF conversion to rows (JSON)
- Pasted-text conversion to rows (JSON)
- PDF conversion to an Excel download
"""

import io
from typing import Optional

from fastapi import Depends, FastAPI, File, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, Field

from .config import (
    API_HOST,
    API_PORT,
    DEFAULT_LAYOUT,
    EXCLUDE_DRAFT_DEFAULT,
    MAX_UPLOAD_SIZE_MB,
    NORMALIZE_CURRENCY_TO,
    LayoutVariant,
    logger,
)
from .layouts import get_layout
from .pipeline import extract_rows_from_pdf, extract_rows_from_text
from .schemas import ExtractionOptions, ExtractionResult, ExtractionStatus
from .sources import PdfSourceError
from .writer import default_output_name, workbook_bytes

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# ============================================================================
# FastAPI App Configuration
# ============================================================================

app = FastAPI(
    title="Invoice Rows API",
    description="""
    Convert invoice PDFs or pasted invoice text into spreadsheet rows.

    ## Features

    - **Extract PDF**: Upload an invoice PDF and receive one row per line item
    - **Extract Text**: Submit pasted invoice text, possibly several invoices
    - **Export PDF**: Upload an invoice PDF and download an Excel workbook
    """,
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Request/Response Models
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


class ExtractTextRequest(BaseModel):
    """Request body for the text extraction endpoint."""
    text: str = Field(..., min_length=1, description="Pasted invoice text")
    options: ExtractionOptions = Field(default_factory=ExtractionOptions)

    model_config = {
        "json_schema_extra": {
            "examples": [{
                "text": "Tax Invoice Invoice No: INV-001 ... Invoice Amount Summary ...",
                "options": {"exclude_draft_invoices": True, "layout": "standard"},
            }]
        }
    }


def upload_options(
    force_ocr: bool = Query(False, description="OCR every page"),
    exclude_draft: bool = Query(EXCLUDE_DRAFT_DEFAULT, description="Skip draft invoices"),
    layout: LayoutVariant = Query(DEFAULT_LAYOUT, description="Line-item layout variant"),
    currency_code: Optional[str] = Query(
        NORMALIZE_CURRENCY_TO,
        description="Currency code written over every extracted currency",
    ),
) -> ExtractionOptions:
    """Collect run options from query parameters."""
    return ExtractionOptions(
        force_ocr=force_ocr,
        exclude_draft_invoices=exclude_draft,
        layout=layout,
        normalize_currency_to=currency_code,
    )


async def _read_pdf_upload(file: UploadFile) -> bytes:
    """Validate an upload and return its content."""
    if not file.filename or not file.filename.lower().endswith('.pdf'):
        raise HTTPException(status_code=400, detail=f"{file.filename}: Not a PDF file")

    content = await file.read()
    if len(content) > MAX_UPLOAD_SIZE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"{file.filename}: File too large (max {MAX_UPLOAD_SIZE_MB}MB)",
        )
    return content


async def _convert_upload(file: UploadFile, options: ExtractionOptions) -> ExtractionResult:
    content = await _read_pdf_upload(file)
    try:
        return await extract_rows_from_pdf(io.BytesIO(content), options, name=file.filename)
    except PdfSourceError as e:
        logger.error(f"Failed to convert {file.filename}: {e}")
        raise HTTPException(status_code=422, detail=str(e))


# ============================================================================
# API Endpoints
# ============================================================================

@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Returns the service status and version information.
    """
    from . import __version__
    return HealthResponse(status="ok", version=__version__)


@app.post(
    "/extract/pdf",
    response_model=ExtractionResult,
    tags=["Extraction"],
    summary="Convert an invoice PDF to rows",
)
async def extract_pdf(
    file: UploadFile = File(..., description="Invoice PDF"),
    options: ExtractionOptions = Depends(upload_options),
) -> ExtractionResult:
    """
    Convert an uploaded invoice PDF into export rows.

    A document without line items is not an error: the response has status
    `no_line_items`, and retrying with `force_ocr=true` may help.
    """
    logger.info(f"Received PDF for extraction: {file.filename}")
    return await _convert_upload(file, options)


@app.post(
    "/extract/text",
    response_model=ExtractionResult,
    tags=["Extraction"],
    summary="Convert pasted invoice text to rows",
)
async def extract_text(request: ExtractTextRequest) -> ExtractionResult:
    """
    Convert pasted invoice text into export rows.

    Several invoices may be concatenated; they are split at "Tax Invoice"
    and "Invoice Amount Summary".
    """
    return extract_rows_from_text(request.text, request.options)


@app.post(
    "/export/pdf",
    tags=["Export"],
    summary="Convert an invoice PDF to an Excel workbook",
    responses={200: {"content": {XLSX_MEDIA_TYPE: {}}}},
)
async def export_pdf(
    file: UploadFile = File(..., description="Invoice PDF"),
    options: ExtractionOptions = Depends(upload_options),
) -> StreamingResponse:
    """Convert an uploaded invoice PDF and return the rows as an .xlsx download."""
    result = await _convert_upload(file, options)
    if result.status == ExtractionStatus.NO_LINE_ITEMS:
        raise HTTPException(status_code=422, detail=result.message)

    layout = get_layout(result.layout)
    content = workbook_bytes(result.headers, result.rows, layout.column_widths)
    output_name = default_output_name(file.filename)

    return StreamingResponse(
        io.BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{output_name}"'},
    )


# ============================================================================
# Error Handlers
# ============================================================================

@app.exception_handler(Exception)
async def generic_exception_handler(request, exc):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# ============================================================================
# Main Entry Point
# ============================================================================

def run_server():
    """Run the API server using uvicorn."""
    import uvicorn
    uvicorn.run(app, host=API_HOST, port=API_PORT)


if __name__ == "__main__":
    run_server()
