"""
OCR (Optical Character Recognition) Module

This module turns PDF pages into images and images into text:
- Rasterization with pdf2image (poppler's pdftoppm), one PNG per page
- Recognition with Tesseract through pytesseract, one image at a time

The adapter never decides where its files live or when they are removed.
The caller hands it a directory and owns the cleanup, which is what lets
the pipeline guarantee that nothing is left behind on any exit path.

IMPORTANT: Tesseract and poppler must be installed separately:
- Linux: apt-get install tesseract-ocr poppler-utils
- macOS: brew install tesseract poppler
"""

from pathlib import Path
from typing import Optional, Union

import cv2
import numpy as np
import pytesseract
from loguru import logger
from pdf2image import convert_from_bytes
from pdf2image.exceptions import PDFPageCountError, PDFSyntaxError
from PIL import Image

from .errors import OcrAdapterError


class RasterOcrAdapter:
    """
    Rasterizes PDFs and runs Tesseract on single page images.

    Usage:
        ocr = RasterOcrAdapter(language='eng')
        images = ocr.rasterize(pdf_bytes, workdir)
        text = ocr.recognize(images[0], page_number=1)
    """

    def __init__(
        self,
        language: str = 'eng',
        dpi: int = 300,
        preprocess: bool = True,
        page_timeout: float = 0,
        tesseract_cmd: Optional[str] = None
    ):
        """
        Initialize the OCR adapter.

        Args:
            language: Tesseract language code (e.g., 'eng', 'fra', 'eng+fra')
            dpi: Rasterization resolution (higher = better quality but slower)
            preprocess: Whether to clean up images before recognition
            page_timeout: Seconds allowed per Tesseract call, 0 = no limit
            tesseract_cmd: Path to tesseract executable (auto-detected if None)
        """
        self.language = language
        self.dpi = dpi
        self.preprocess = preprocess
        self.page_timeout = page_timeout

        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    def rasterize(self, pdf_bytes: bytes, output_dir: Path) -> list[Path]:
        """
        Render every page of a PDF to a PNG inside output_dir.

        Returns:
            Image paths in page order
        """
        try:
            paths = convert_from_bytes(
                pdf_bytes,
                dpi=self.dpi,
                output_folder=str(output_dir),
                fmt='png',
                paths_only=True,
            )
        except (PDFPageCountError, PDFSyntaxError) as e:
            raise OcrAdapterError(f"Could not render PDF: {e}", bad_input=True) from e
        except Exception as e:
            raise OcrAdapterError(f"Rasterization failed: {e}") from e

        logger.debug(f"Rasterized {len(paths)} pages at {self.dpi} DPI into {output_dir}")
        return [Path(p) for p in paths]

    def recognize(self, image_path: Union[Path, str], page_number: Optional[int] = None) -> str:
        """
        Run OCR on one page image.

        Raises:
            OcrAdapterError: if the image can't be read or Tesseract fails
        """
        try:
            with Image.open(image_path) as image:
                processed = self.preprocess_image(image) if self.preprocess else image
                # PSM 3 = fully automatic page segmentation
                return pytesseract.image_to_string(
                    processed,
                    lang=self.language,
                    config='--psm 3 --oem 3',
                    timeout=self.page_timeout,
                )
        except Exception as e:
            raise OcrAdapterError(
                f"OCR failed for page {page_number}: {e}",
                page_number=page_number,
            ) from e

    def preprocess_image(self, image: Image.Image) -> Image.Image:
        """
        Preprocess an image to improve OCR accuracy.

        Steps applied:
        1. Convert to grayscale
        2. Upscale if too small (Tesseract wants text at least ~12px tall)
        3. Edge-preserving denoise
        4. Otsu binarization
        """
        gray = np.array(image.convert('L'))

        height = gray.shape[0]
        if height < 1000:
            scale = 1000 / height
            gray = cv2.resize(gray, None, fx=scale, fy=scale, interpolation=cv2.INTER_CUBIC)

        denoised = cv2.bilateralFilter(gray, 9, 75, 75)
        _, binary = cv2.threshold(denoised, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)

        return Image.fromarray(binary)


def check_tesseract_installed() -> bool:
    """Quick check if Tesseract is installed and accessible."""
    try:
        pytesseract.get_tesseract_version()
        return True
    except Exception:
        return False
