"""
PDF Reconstruction Module

Lays edited plain text out onto letter-size pages and serializes the
result as a new PDF with PyMuPDF.

Layout rules:
- The text is cut into fixed-size character chunks; each chunk gets
  exactly one page. Chunk boundaries are positional and may split words.
- Each source line (split on '\\n') is greedy word-wrapped against the
  content width using the metrics of the font it is drawn with.
- Lines whose baseline would fall below the bottom margin are not drawn
  and no extra page is added. They are returned in `dropped_lines` so the
  caller can see what didn't fit.

Text is drawn with Noto Sans (shipped by pymupdf-fonts) rather than the
Base-14 Helvetica, whose single-byte encoding has no glyphs for symbols
such as € or ₹ and would silently replace them.

Coordinates below are PDF points measured from the bottom of the page,
the way the layout is specified; they are flipped when drawing because
PyMuPDF measures from the top.
"""

from dataclasses import dataclass, field
from typing import Callable, Iterator

import fitz  # PyMuPDF
from loguru import logger


PAGE_WIDTH = 612            # US letter
PAGE_HEIGHT = 792
LEFT_MARGIN = 50
TOP_BASELINE = 750          # First baseline, from the bottom edge
BOTTOM_MARGIN = 50
LINE_HEIGHT = 15
MAX_LINE_WIDTH = 500
FONT_NAME = "notos"         # Noto Sans, from pymupdf-fonts
FONT_SIZE = 12
CHUNK_SIZE = 3000           # Characters of source text per page

# Number of lines that fit on one page
LINES_PER_PAGE = (TOP_BASELINE - BOTTOM_MARGIN) // LINE_HEIGHT + 1

FONT = fitz.Font(FONT_NAME)


@dataclass
class ReconstructionResult:
    """Serialized PDF plus what couldn't be placed on it."""
    pdf_bytes: bytes
    page_count: int
    dropped_lines: list[str] = field(default_factory=list)

    @property
    def dropped_line_count(self) -> int:
        return len(self.dropped_lines)


def measure_text(text: str) -> float:
    """Rendered width of text at the page font and size, in points."""
    return FONT.text_length(text, fontsize=FONT_SIZE)


def split_into_chunks(text: str, chunk_size: int = CHUNK_SIZE) -> list[str]:
    """Cut text into consecutive slices of at most chunk_size characters."""
    return [text[i:i + chunk_size] for i in range(0, len(text), chunk_size)]


def wrap_text(
    text: str,
    max_width: float = MAX_LINE_WIDTH,
    measure: Callable[[str], float] = measure_text
) -> Iterator[str]:
    """
    Greedy word-wrap.

    Words are added to the current line until the measured width would
    exceed max_width; the overflowing word starts the next line. A single
    word wider than max_width still gets a line of its own. Source lines
    without words produce nothing.
    """
    for source_line in text.split("\n"):
        current = ""

        for word in source_line.rstrip("\r").split(" "):
            candidate = f"{current} {word}" if current else word
            if current and measure(candidate) > max_width:
                yield current
                current = word
            else:
                current = candidate

        if current:
            yield current


class DocumentReconstructor:
    """
    Renders edited text into a fresh multi-page PDF.

    Usage:
        result = DocumentReconstructor().reconstruct(edited_text)
        Path("edited.pdf").write_bytes(result.pdf_bytes)
        if result.dropped_line_count:
            print(f"{result.dropped_line_count} lines did not fit")
    """

    def reconstruct(self, edited_text: str) -> ReconstructionResult:
        """
        Lay out text one chunk per page and serialize the document.

        Always produces at least one page; empty input gives a blank page.
        """
        chunks = split_into_chunks(edited_text) or [""]
        dropped = []

        with fitz.open() as doc:
            for page_number, chunk in enumerate(chunks, start=1):
                page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
                page_dropped = self._render_chunk(page, chunk)

                if page_dropped:
                    logger.warning(
                        f"Page {page_number}: {len(page_dropped)} lines did not fit "
                        f"below the bottom margin and were not rendered"
                    )
                    dropped.extend(page_dropped)

            pdf_bytes = doc.tobytes(garbage=3, deflate=True)

        logger.info(f"Reconstructed PDF with {len(chunks)} pages ({len(pdf_bytes)} bytes)")
        return ReconstructionResult(
            pdf_bytes=pdf_bytes,
            page_count=len(chunks),
            dropped_lines=dropped,
        )

    def _render_chunk(self, page, chunk: str) -> list[str]:
        """Draw wrapped lines top-down; return the ones below the margin."""
        writer = fitz.TextWriter(page.rect, color=(0, 0, 0))
        y = TOP_BASELINE
        drawn = 0
        dropped = []

        for line in wrap_text(chunk):
            if y < BOTTOM_MARGIN:
                dropped.append(line)
                continue

            writer.append((LEFT_MARGIN, PAGE_HEIGHT - y), line, font=FONT, fontsize=FONT_SIZE)
            drawn += 1
            y -= LINE_HEIGHT

        if drawn:
            writer.write_text(page)
        return dropped
