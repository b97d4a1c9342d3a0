"""
Extractor Package

This package recovers plain text from PDF bytes. Native text-layer
extraction is tried first; documents whose text layer is missing or too
short are rasterized and run through OCR page by page.

The extractor package exposes:
- TextExtractionPipeline: the native-then-OCR state machine
- NativeTextExtractor: pdfplumber / PyMuPDF text-layer extraction
- RasterOcrAdapter: pdf2image rasterization + Tesseract recognition

Usage:
    from extractor import TextExtractionPipeline, PipelineConfig

    pipeline = TextExtractionPipeline(PipelineConfig(ocr_language='eng'))
    result = pipeline.extract(pdf_bytes)
    print(result.text)
    print(result.source)   # ExtractionSource.NATIVE or ExtractionSource.OCR
"""

from .config import PipelineConfig, DEFAULT_CONFIG_PATH
from .errors import (
    PDFAssistantError,
    UploadRejected,
    OcrAdapterError,
    ExtractionFailed,
    FailureKind,
)
from .pdf_text import NativeTextExtractor
from .ocr import RasterOcrAdapter, check_tesseract_installed
from .pipeline import TextExtractionPipeline, raster_workspace
from .utils import (
    ExtractionResult,
    ExtractionSource,
    NativeText,
    normalize_text,
    is_usable_text,
    inspect_pdf_bytes,
)

__all__ = [
    # Pipeline
    'TextExtractionPipeline',
    'PipelineConfig',
    'DEFAULT_CONFIG_PATH',
    'raster_workspace',

    # Strategies
    'NativeTextExtractor',
    'RasterOcrAdapter',

    # Data structures
    'ExtractionResult',
    'ExtractionSource',
    'NativeText',

    # Errors
    'PDFAssistantError',
    'UploadRejected',
    'OcrAdapterError',
    'ExtractionFailed',
    'FailureKind',

    # Utility functions
    'normalize_text',
    'is_usable_text',
    'inspect_pdf_bytes',
    'check_tesseract_installed',
]
