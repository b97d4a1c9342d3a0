"""
Runtime configuration for the extraction pipeline.

Settings are read from the `settings:` section of a YAML file
(config/settings.yaml by default). Anything missing falls back to the
dataclass defaults, and CLI flags override both.
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml
from loguru import logger


DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "settings.yaml"


@dataclass
class PipelineConfig:
    """Configuration for text extraction and OCR fallback."""

    # OCR settings
    enable_ocr: bool = True
    ocr_language: str = "eng"
    ocr_dpi: int = 300
    ocr_preprocess: bool = True
    ocr_workers: int = 1              # 1 = strictly sequential
    ocr_page_timeout: float = 0       # Seconds per page, 0 = no limit

    # Minimum trimmed length for text to count as readable
    min_text_length: int = 10

    # Root under which per-request raster directories are created.
    # None = the system temp directory.
    temp_dir: Optional[Path] = None

    # Path to the tesseract executable. None = look it up on PATH.
    tesseract_cmd: Optional[str] = None

    # Boundary check applied by PDFAssistant (100 MiB)
    max_upload_bytes: int = 100 * 1024 * 1024

    def __post_init__(self):
        if self.temp_dir is not None:
            self.temp_dir = Path(self.temp_dir)
        if self.ocr_workers < 1:
            raise ValueError(f"ocr_workers must be >= 1, got {self.ocr_workers}")
        if self.min_text_length < 1:
            raise ValueError(f"min_text_length must be >= 1, got {self.min_text_length}")

    @classmethod
    def from_dict(cls, data: dict) -> 'PipelineConfig':
        """Build a config from a settings dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown settings: {', '.join(sorted(unknown))}")
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def load(cls, config_path: Path) -> 'PipelineConfig':
        """
        Load configuration from a YAML file.

        Args:
            config_path: Path to YAML config file

        Returns:
            PipelineConfig populated from the file's `settings` section
        """
        logger.info(f"Loading configuration from: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f) or {}
        except Exception as e:
            logger.error(f"Failed to load config: {e}")
            raise

        return cls.from_dict(config.get('settings', {}) or {})

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'enable_ocr': self.enable_ocr,
            'ocr_language': self.ocr_language,
            'ocr_dpi': self.ocr_dpi,
            'ocr_preprocess': self.ocr_preprocess,
            'ocr_workers': self.ocr_workers,
            'ocr_page_timeout': self.ocr_page_timeout,
            'min_text_length': self.min_text_length,
            'tesseract_cmd': self.tesseract_cmd,
            'temp_dir': str(self.temp_dir) if self.temp_dir else None,
            'max_upload_bytes': self.max_upload_bytes,
        }
