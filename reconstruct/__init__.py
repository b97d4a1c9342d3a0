"""
Reconstruct Package

Regenerates a PDF from edited plain text: fixed letter-size pages,
Noto Sans 12pt, greedy word-wrap, one page per text chunk.

Usage:
    from reconstruct import DocumentReconstructor

    result = DocumentReconstructor().reconstruct(edited_text)
    Path("edited.pdf").write_bytes(result.pdf_bytes)
"""

from .pdf_writer import (
    DocumentReconstructor,
    ReconstructionResult,
    split_into_chunks,
    wrap_text,
    measure_text,
    CHUNK_SIZE,
    LINES_PER_PAGE,
    MAX_LINE_WIDTH,
)

__all__ = [
    'DocumentReconstructor',
    'ReconstructionResult',
    'split_into_chunks',
    'wrap_text',
    'measure_text',
    'CHUNK_SIZE',
    'LINES_PER_PAGE',
    'MAX_LINE_WIDTH',
]
