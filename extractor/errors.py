"""
Error types for the extraction and reconstruction flows.

Every failure is classified at the point where it happens, so the request
boundary can pick a status code and message from `kind` instead of
inspecting free-text messages.
"""

from enum import Enum
from typing import Optional


class FailureKind(Enum):
    """Why an extraction request could not produce usable text."""
    INVALID_PDF = "invalid_pdf"            # Input could not be parsed or rendered
    UNREADABLE_TEXT = "unreadable_text"    # Parsed fine, but no usable text after OCR
    OCR_ADAPTER = "ocr_adapter"            # Rasterizer or Tesseract crashed

    @property
    def is_input_error(self) -> bool:
        return self is not FailureKind.OCR_ADAPTER


class PDFAssistantError(Exception):
    """Base class for all errors raised by this project."""


class UploadRejected(PDFAssistantError):
    """Input is not a PDF or exceeds the size ceiling."""


class OcrAdapterError(PDFAssistantError):
    """
    A single page failed to rasterize or recognize.

    The pipeline never lets this escape: it is always chained as the cause
    of an ExtractionFailed for the whole request.
    """

    def __init__(
        self,
        message: str,
        page_number: Optional[int] = None,
        bad_input: bool = False
    ):
        super().__init__(message)
        self.page_number = page_number
        self.bad_input = bad_input


class ExtractionFailed(PDFAssistantError):
    """Neither native extraction nor OCR produced usable text."""

    def __init__(
        self,
        message: str,
        kind: FailureKind = FailureKind.UNREADABLE_TEXT,
        page_number: Optional[int] = None
    ):
        super().__init__(message)
        self.kind = kind
        self.page_number = page_number

    @property
    def is_input_error(self) -> bool:
        """True for bad/unreadable documents, False for infrastructure failures."""
        return self.kind.is_input_error
