"""
OCR engine using Tesseract via pytesseract.

The engine is a shared, lazily initialized resource: the first recognize()
call checks the Tesseract installation, later calls reuse it. Initialization
is guarded by a lock so concurrent first calls do not initialize twice.
"""

import asyncio
import os
from collections.abc import Callable
from typing import Optional

import pytesseract
from PIL import Image

from .config import OCR_LANGUAGE, logger

# Receives a status label and a fraction between 0 and 1
ProgressCallback = Callable[[str, float], None]


class TesseractOcrEngine:
    """
    Asynchronous wrapper around pytesseract.

    Args:
        language: Tesseract language code
        tesseract_cmd: Path to the tesseract binary; defaults to $TESSERACT_CMD
        progress: Optional callback for status reporting
    """

    def __init__(
        self,
        language: str = OCR_LANGUAGE,
        tesseract_cmd: Optional[str] = None,
        progress: Optional[ProgressCallback] = None,
    ):
        self.language = language
        self.tesseract_cmd = tesseract_cmd or os.getenv("TESSERACT_CMD")
        self.progress = progress
        self._ready = False
        self._lock = asyncio.Lock()

    @property
    def ready(self) -> bool:
        return self._ready

    def _report(self, status: str, fraction: float) -> None:
        if self.progress is not None:
            self.progress(status, fraction)

    def _initialize(self) -> None:
        if self.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.tesseract_cmd
        version = pytesseract.get_tesseract_version()
        logger.info(f"Tesseract {version} ready (language: {self.language})")

    async def ensure_ready(self) -> None:
        """Initialize the engine once; later calls return immediately."""
        if self._ready:
            return
        async with self._lock:
            if self._ready:
                return
            self._report("initializing tesseract", 0.0)
            await asyncio.to_thread(self._initialize)
            self._ready = True
            self._report("initializing tesseract", 1.0)

    async def recognize(self, image: Image.Image) -> str:
        """Recognize the text in an image."""
        await self.ensure_ready()
        self._report("recognizing text", 0.0)
        text = await asyncio.to_thread(pytesseract.image_to_string, image, lang=self.language)
        self._report("recognizing text", 1.0)
        return text or ""


_shared_engine: Optional[TesseractOcrEngine] = None


def get_ocr_engine() -> TesseractOcrEngine:
    """Return the process-wide OCR engine, creating it on first use."""
    global _shared_engine
    if _shared_engine is None:
        _shared_engine = TesseractOcrEngine()
    return _shared_engine
