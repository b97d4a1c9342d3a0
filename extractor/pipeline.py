"""
Text Extraction Pipeline

Layered strategy for getting readable text out of an arbitrary PDF:

    Start -> NativeAttempt -> Accepted(NATIVE)
                  |
                  v  (too short, or the text layer could not be parsed)
              OcrAttempt  -> Accepted(OCR)
                  |
                  v  (still too short, or a page failed)
               Failed (ExtractionFailed)

OCR works on files: every page is rasterized into a directory that belongs
to the current request only, each image is deleted as soon as it has been
read, and the directory itself is removed whichever way the attempt ends.
"""

import shutil
import tempfile
import uuid
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from loguru import logger

from .config import PipelineConfig
from .errors import ExtractionFailed, FailureKind, OcrAdapterError
from .ocr import RasterOcrAdapter
from .pdf_text import NativeTextExtractor
from .utils import ExtractionResult, ExtractionSource, is_usable_text


@contextmanager
def raster_workspace(root: Path, request_id: str) -> Iterator[Path]:
    """
    Create `<root>/raster-<request_id>` and remove it on exit.

    The directory is unique per request, so concurrent OCR fallbacks never
    see or delete each other's images. A directory that has already
    disappeared is not an error.
    """
    workdir = Path(root) / f"raster-{request_id}"
    workdir.mkdir(parents=True)
    logger.debug(f"Created raster workspace {workdir}")

    try:
        yield workdir
    finally:
        try:
            shutil.rmtree(workdir)
        except FileNotFoundError:
            pass
        else:
            logger.debug(f"Removed raster workspace {workdir}")


class TextExtractionPipeline:
    """
    Native extraction with a quality gate and page-by-page OCR fallback.

    Usage:
        pipeline = TextExtractionPipeline(PipelineConfig(ocr_language='eng'))
        result = pipeline.extract(pdf_bytes)
        print(result.source, result.page_count)
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        native: Optional[NativeTextExtractor] = None,
        ocr: Optional[RasterOcrAdapter] = None
    ):
        """
        Args:
            config: Pipeline configuration (defaults if None)
            native: Text-layer extractor (NativeTextExtractor if None)
            ocr: OCR adapter (built from config on first use if None)
        """
        self.config = config or PipelineConfig()
        self.native = native or NativeTextExtractor()
        self._ocr = ocr

    @property
    def ocr(self) -> RasterOcrAdapter:
        if self._ocr is None:
            self._ocr = RasterOcrAdapter(
                language=self.config.ocr_language,
                dpi=self.config.ocr_dpi,
                preprocess=self.config.ocr_preprocess,
                page_timeout=self.config.ocr_page_timeout,
                tesseract_cmd=self.config.tesseract_cmd,
            )
        return self._ocr

    def extract(self, pdf_bytes: bytes, request_id: Optional[str] = None) -> ExtractionResult:
        """
        Extract readable text from PDF bytes.

        Args:
            pdf_bytes: Raw PDF content
            request_id: Identifier used to scope temporary files (random if None)

        Returns:
            ExtractionResult with non-empty text

        Raises:
            ExtractionFailed: if neither strategy yields usable text
        """
        request_id = request_id or uuid.uuid4().hex
        min_length = self.config.min_text_length
        warnings = []
        native_pages = None
        native_error = None

        try:
            native = self.native.extract(pdf_bytes)
        except Exception as e:
            logger.warning(f"[{request_id}] Native extraction failed: {e}")
            warnings.append(f"Native extraction failed: {e}")
            native_error = e
        else:
            native_pages = native.page_count
            if is_usable_text(native.text, min_length):
                logger.info(
                    f"[{request_id}] Accepted native text "
                    f"({len(native.text)} chars, {native.page_count} pages)"
                )
                return ExtractionResult(
                    text=native.text,
                    page_count=max(1, native.page_count),
                    source=ExtractionSource.NATIVE,
                    warnings=tuple(warnings),
                )
            warnings.append(
                f"Native text layer too short ({len(native.text.strip())} chars)"
            )

        if not self.config.enable_ocr:
            kind = FailureKind.INVALID_PDF if native_error else FailureKind.UNREADABLE_TEXT
            raise ExtractionFailed(
                "Unable to extract readable text from PDF and OCR is disabled.",
                kind=kind,
            ) from native_error

        logger.info(f"[{request_id}] Low text extracted, applying OCR fallback...")
        text, rasterized_pages = self._extract_with_ocr(pdf_bytes, request_id)

        if not is_usable_text(text, min_length):
            raise ExtractionFailed(
                "Unable to extract readable text from PDF even after OCR fallback.",
                kind=FailureKind.UNREADABLE_TEXT,
            )

        logger.info(f"[{request_id}] Accepted OCR text ({len(text)} chars)")
        return ExtractionResult(
            text=text,
            page_count=max(1, native_pages or rasterized_pages),
            source=ExtractionSource.OCR,
            warnings=tuple(warnings),
        )

    def _extract_with_ocr(self, pdf_bytes: bytes, request_id: str) -> tuple[str, int]:
        """
        Rasterize and recognize every page inside a private workspace.

        Returns:
            (page texts joined by blank lines, number of rasterized pages)
        """
        ocr = self.ocr
        root = self.config.temp_dir or Path(tempfile.gettempdir())

        try:
            with raster_workspace(root, request_id) as workdir:
                images = ocr.rasterize(pdf_bytes, workdir)
                texts = self._recognize_pages(ocr, images, request_id)
        except OcrAdapterError as e:
            logger.error(f"[{request_id}] {e}")
            kind = FailureKind.INVALID_PDF if e.bad_input else FailureKind.OCR_ADAPTER
            raise ExtractionFailed(str(e), kind=kind, page_number=e.page_number) from e
        except Exception as e:
            logger.exception(f"[{request_id}] OCR fallback crashed")
            raise ExtractionFailed(
                f"OCR fallback failed: {e}", kind=FailureKind.OCR_ADAPTER
            ) from e

        return "\n\n".join(texts), len(images)

    def _recognize_pages(self, ocr: RasterOcrAdapter, images: list[Path], request_id: str) -> list[str]:
        """
        OCR each image and delete it right after, returning texts in page order.

        With more than one worker, pages are recognized concurrently but the
        result list is still indexed by page, never by completion order.
        """
        total = len(images)

        def consume(page: tuple[int, Path]) -> str:
            page_number, image_path = page
            logger.debug(f"[{request_id}] OCR page {page_number}/{total}")
            try:
                return ocr.recognize(image_path, page_number=page_number)
            finally:
                image_path.unlink(missing_ok=True)

        pages = list(enumerate(images, start=1))

        if self.config.ocr_workers == 1:
            return [consume(page) for page in pages]

        pool = ThreadPoolExecutor(max_workers=self.config.ocr_workers)
        try:
            return list(pool.map(consume, pages))
        finally:
            pool.shutdown(wait=True, cancel_futures=True)
