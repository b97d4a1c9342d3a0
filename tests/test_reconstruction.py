"""
Tests for PDF reconstruction from edited text.

Run with: pytest tests/ -v
"""

import sys
from pathlib import Path

import fitz
import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from reconstruct import (
    DocumentReconstructor,
    split_into_chunks,
    wrap_text,
    measure_text,
    CHUNK_SIZE,
    LINES_PER_PAGE,
    MAX_LINE_WIDTH,
)
from reconstruct.pdf_writer import FONT, PAGE_WIDTH, PAGE_HEIGHT


PARAGRAPH = (
    "The quarterly statement lists every invoice issued to the client along "
    "with the amount due, the date of issue and the payment terms agreed in "
    "the master services agreement signed at the start of the engagement"
)


def page_words(pdf_bytes: bytes) -> list[list[str]]:
    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        return [page.get_text().split() for page in doc]


class TestDocumentReconstructor:
    """Tests for the page layout and serialization."""

    def setup_method(self):
        self.reconstructor = DocumentReconstructor()

    def test_short_text_single_page(self):
        result = self.reconstructor.reconstruct("Hello edited world")

        assert result.page_count == 1
        assert result.dropped_lines == []
        assert page_words(result.pdf_bytes) == [["Hello", "edited", "world"]]

    def test_page_size_is_letter(self):
        result = self.reconstructor.reconstruct("Hello")

        with fitz.open(stream=result.pdf_bytes, filetype="pdf") as doc:
            assert doc[0].rect.width == PAGE_WIDTH
            assert doc[0].rect.height == PAGE_HEIGHT

    def test_empty_text_gives_blank_page(self):
        result = self.reconstructor.reconstruct("")

        assert result.page_count == 1
        assert page_words(result.pdf_bytes) == [[]]

    def test_one_page_per_chunk(self):
        text = "word " * 1400

        result = self.reconstructor.reconstruct(text)

        assert result.page_count == 3
        assert result.dropped_line_count == 0
        words = page_words(result.pdf_bytes)
        assert len(words) == 3
        assert sum(len(w) for w in words) == 1400

    def test_overflow_lines_are_dropped_and_reported(self):
        lines = [f"line{i:02d}" for i in range(1, 61)]

        result = self.reconstructor.reconstruct("\n".join(lines))

        assert result.page_count == 1
        assert result.dropped_lines == lines[LINES_PER_PAGE:]
        assert page_words(result.pdf_bytes) == [lines[:LINES_PER_PAGE]]

    def test_exactly_one_page_of_lines_fits(self):
        lines = [f"row{i}" for i in range(LINES_PER_PAGE)]

        result = self.reconstructor.reconstruct("\n".join(lines))

        assert result.dropped_lines == []
        assert page_words(result.pdf_bytes) == [lines]

    def test_currency_symbols_survive(self):
        text = "Visa fee ₹3,500 and hotel €845 and Tokyo ¥12,000 and Zürich £20"

        result = self.reconstructor.reconstruct(text)

        assert result.dropped_lines == []
        assert page_words(result.pdf_bytes) == [text.split()]

    def test_font_has_currency_glyphs(self):
        for symbol in "$€£₹¥":
            assert FONT.has_glyph(ord(symbol)), symbol

    def test_lines_per_page(self):
        assert LINES_PER_PAGE == 47

    def test_output_is_deterministic_in_content(self):
        first = self.reconstructor.reconstruct(PARAGRAPH)
        second = self.reconstructor.reconstruct(PARAGRAPH)
        assert page_words(first.pdf_bytes) == page_words(second.pdf_bytes)


class TestWrapText:
    """Tests for greedy word-wrap."""

    def test_wraps_at_width(self):
        assert list(wrap_text("aaa bbb ccc dd", max_width=10, measure=len)) == ["aaa bbb", "ccc dd"]

    def test_long_word_gets_own_line(self):
        lines = list(wrap_text("a verylongwordhere b", max_width=5, measure=len))
        assert lines == ["a", "verylongwordhere", "b"]

    def test_blank_lines_produce_nothing(self):
        assert list(wrap_text("one\n\n   \ntwo", max_width=100, measure=len)) == ["one", "two"]

    def test_source_lines_never_merge(self):
        assert list(wrap_text("a\nb", max_width=100, measure=len)) == ["a", "b"]

    def test_crlf_line_endings(self):
        assert list(wrap_text("one\r\ntwo\r\n", max_width=100, measure=len)) == ["one", "two"]

    def test_only_newline_breaks_lines(self):
        text = "page\x0cbreak and separator"
        assert list(wrap_text(text, max_width=100, measure=len)) == [text]

    def test_real_font_metrics(self):
        lines = list(wrap_text(PARAGRAPH))

        assert len(lines) > 1
        assert all(measure_text(line) <= MAX_LINE_WIDTH for line in lines)
        assert " ".join(lines) == PARAGRAPH

    def test_measure_text_grows_with_length(self):
        assert 0 < measure_text("abc") < measure_text("abcdef")


class TestSplitIntoChunks:
    """Tests for positional chunking."""

    def test_empty(self):
        assert split_into_chunks("") == []

    @pytest.mark.parametrize("length,expected", [
        (1, 1),
        (CHUNK_SIZE, 1),
        (CHUNK_SIZE + 1, 2),
        (CHUNK_SIZE * 3, 3),
    ])
    def test_chunk_count(self, length, expected):
        chunks = split_into_chunks("x" * length)
        assert len(chunks) == expected
        assert "".join(chunks) == "x" * length

    def test_custom_size_may_split_words(self):
        assert split_into_chunks("hello world", chunk_size=4) == ["hell", "o wo", "rld"]


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
