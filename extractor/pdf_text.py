"""
PDF Text Layer Extraction Module

This module handles extraction of text from the native text layer of PDFs.
It uses a two-library approach for maximum compatibility:
1. pdfplumber (primary) - preserves reading order well
2. PyMuPDF/fitz (fallback) - faster, tolerates some broken files

Why multiple libraries?
Real-world PDFs are created by dozens of different tools (Word, InDesign,
LaTeX, scanners, etc.), each embedding text differently. No single library
handles all cases well. If pdfplumber raises or finds nothing we give
PyMuPDF a chance before the pipeline falls back to OCR.

Everything works from in-memory bytes; nothing is written to disk here.
"""

import io

import fitz  # PyMuPDF
import pdfplumber
from loguru import logger

from .utils import NativeText, normalize_text


class NativeTextExtractor:
    """
    Extracts text from PDF text layers using multiple backends.

    Usage:
        extractor = NativeTextExtractor()
        native = extractor.extract(pdf_bytes)
        print(native.text, native.page_count)
    """

    def __init__(self, primary_backend: str = "pdfplumber", normalize: bool = True):
        """
        Initialize the text extractor.

        Args:
            primary_backend: Which library to try first ("pdfplumber" or "pymupdf")
            normalize: Whether to normalize the extracted text
        """
        if primary_backend not in ("pdfplumber", "pymupdf"):
            raise ValueError(f"Unknown backend: {primary_backend}")
        self.primary_backend = primary_backend
        self.normalize = normalize

    def extract(self, pdf_bytes: bytes) -> NativeText:
        """
        Extract text from PDF bytes.

        Raises the last backend error if no backend could open the document.
        An empty text layer is not an error: it comes back as empty text.
        """
        backends = [self._extract_with_pdfplumber, self._extract_with_pymupdf]
        if self.primary_backend == "pymupdf":
            backends.reverse()

        result = None
        last_error = None

        for backend in backends:
            try:
                result = backend(pdf_bytes)
            except Exception as e:
                logger.warning(f"{backend.__name__} failed: {e}")
                last_error = e
                continue

            if result.text.strip():
                break
            logger.debug(f"{result.backend} returned empty text, trying next backend")

        if result is None:
            raise last_error

        if self.normalize and result.text:
            result = NativeText(
                text=normalize_text(result.text),
                page_count=result.page_count,
                backend=result.backend,
            )

        return result

    def _extract_with_pdfplumber(self, pdf_bytes: bytes) -> NativeText:
        """Extract text using pdfplumber."""
        texts = []

        with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
            page_count = len(pdf.pages)

            for i, page in enumerate(pdf.pages, start=1):
                try:
                    text = page.extract_text(x_tolerance=3, y_tolerance=3)
                except Exception as e:
                    logger.warning(f"Failed to extract page {i}: {e}")
                    continue
                if text:
                    texts.append(text)

        return NativeText(
            text="\n\n".join(texts),
            page_count=page_count,
            backend="pdfplumber",
        )

    def _extract_with_pymupdf(self, pdf_bytes: bytes) -> NativeText:
        """Extract text using PyMuPDF (fitz)."""
        texts = []

        with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
            page_count = len(doc)

            for i, page in enumerate(doc, start=1):
                try:
                    text = page.get_text("text")
                except Exception as e:
                    logger.warning(f"Failed to extract page {i}: {e}")
                    continue
                if text and text.strip():
                    texts.append(text)

        return NativeText(
            text="\n\n".join(texts),
            page_count=page_count,
            backend="pymupdf",
        )
