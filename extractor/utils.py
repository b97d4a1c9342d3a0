"""
Utility functions and data structures shared across the extraction pipeline.

This module provides:
- The result types returned by native extraction and the pipeline
- Text normalization for native text layers
- The readability check that gates OCR fallback
- A lightweight header/size check for incoming PDF bytes

Why normalization exists:
Real-world PDFs have inconsistent encoding, ligatures and odd space
characters. A non-breaking space between "Rs." and the amount is enough
to make currency patterns miss, so native text is cleaned up once here.
"""

import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ExtractionSource(Enum):
    """Which strategy produced the accepted text."""
    NATIVE = "native"    # Direct text-layer extraction
    OCR = "ocr"          # Rasterized pages run through Tesseract


@dataclass(frozen=True)
class ExtractionResult:
    """
    Text recovered from one PDF.

    Produced once per request by TextExtractionPipeline and never
    modified afterwards. `text` is guaranteed to be readable.
    """
    text: str
    page_count: int
    source: ExtractionSource
    warnings: tuple = ()


@dataclass(frozen=True)
class NativeText:
    """Output of a native (text-layer) extraction pass."""
    text: str
    page_count: int
    backend: str


LIGATURES = {
    'ﬁ': 'fi',
    'ﬂ': 'fl',
    'ﬀ': 'ff',
    'ﬃ': 'ffi',
    'ﬄ': 'ffl',
    'ﬅ': 'st',
    'ﬆ': 'st',
}

SPACE_CHARS = {
    '\u00a0': ' ',       # Non-breaking space
    '\u2002': ' ',       # En space
    '\u2003': ' ',       # Em space
    '\u2009': ' ',       # Thin space
    '\u202f': ' ',       # Narrow no-break space
}


def normalize_text(text: str) -> str:
    """
    Normalize extracted text for consistent processing.

    Args:
        text: Raw extracted text

    Returns:
        Normalized text suitable for pattern matching
    """
    if not text:
        return ""

    # Composed form, so "e + combining acute" becomes a single character
    text = unicodedata.normalize('NFC', text)

    for ligature, replacement in LIGATURES.items():
        text = text.replace(ligature, replacement)

    for char, replacement in SPACE_CHARS.items():
        text = text.replace(char, replacement)

    return text


def is_usable_text(text: str, min_length: int = 10) -> bool:
    """Text is usable when its trimmed length reaches the readability threshold."""
    return bool(text) and len(text.strip()) >= min_length


def inspect_pdf_bytes(data: bytes) -> dict[str, Any]:
    """
    Cheap validity check for uploaded PDF content.

    This doesn't parse the document, it only looks at the size and the
    `%PDF` header. Used at the boundary before the pipeline sees the bytes.
    """
    info = {
        'size_bytes': len(data) if data else 0,
        'readable': False,
    }
    info['size_mb'] = round(info['size_bytes'] / (1024 * 1024), 2)

    if not data:
        info['error'] = 'File is empty'
    elif not data[:1024].lstrip().startswith(b'%PDF'):
        info['error'] = 'File does not appear to be a valid PDF'
    else:
        info['readable'] = True

    return info
