"""
PDF Assistant - Main Entry Point

This is the orchestration module that ties together text extraction,
currency analysis and PDF reconstruction. It provides both a CLI
interface and a programmatic API.

Architecture Overview:
┌─────────────┐
│  PDF bytes  │
└──────┬──────┘
       │
       ▼
┌──────────────────────────────────────────────────────────────┐
│                     EXTRACTION LAYER                          │
│  ┌─────────────┐   too short /    ┌─────────────────────┐    │
│  │ Text Layer  │──── failed ─────▶│ OCR, page by page   │    │
│  │ (pdfplumber)│                  │ (pdf2image+Tesseract)│    │
│  └──────┬──────┘                  └──────────┬──────────┘    │
│         └──────────────┬─────────────────────┘               │
│                        ▼                                     │
│                ┌──────────────┐                              │
│                │  Plain text  │                              │
│                └──────┬───────┘                              │
└───────────────────────┼──────────────────────────────────────┘
           ┌────────────┴─────────────┐
           ▼                          ▼
┌─────────────────────┐    ┌──────────────────────────┐
│  Currency tables    │    │ external editor (LLM)    │
│  (financial)        │    │   -> edited text         │
└─────────────────────┘    └────────────┬─────────────┘
                                        ▼
                           ┌──────────────────────────┐
                           │ PDF reconstruction       │
                           │ (reconstruct, PyMuPDF)   │
                           └──────────────────────────┘
"""

import json
import sys
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

import click
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from extractor import (
    DEFAULT_CONFIG_PATH,
    ExtractionFailed,
    PipelineConfig,
    TextExtractionPipeline,
    UploadRejected,
    inspect_pdf_bytes,
    check_tesseract_installed,
)
from financial import CurrencyExtractor, CurrencyTable
from reconstruct import DocumentReconstructor, ReconstructionResult


# The external text editor: (original_text, instructions) -> edited_text
TextEditor = Callable[[str, str], str]


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None):
    """Configure loguru logging."""
    # Remove default handler
    logger.remove()

    # Console logging
    log_level = "DEBUG" if verbose else "INFO"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{message}</cyan>",
        level=log_level,
        colorize=True
    )

    # File logging
    if log_file:
        logger.add(
            log_file,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
            level="DEBUG",
            rotation="10 MB"
        )


@dataclass
class AnalysisReport:
    """Everything the caller needs to render one analyzed PDF."""

    filename: str
    extracted_text: str
    page_count: int
    source: str
    currency_tables: list[CurrencyTable] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    processing_time_ms: int = 0

    def to_dict(self) -> dict:
        """Convert report to the response dictionary."""
        return {
            'filename': self.filename,
            'extractedText': self.extracted_text,
            'pageCount': self.page_count,
            'source': self.source,
            'currencyTables': [t.to_dict() for t in self.currency_tables],
            'warnings': self.warnings,
            'processingTime': self.processing_time_ms,
        }


class PDFAssistant:
    """
    Main orchestrator for the analyze, edit and rebuild flows.

    Usage:
        assistant = PDFAssistant()
        report = assistant.analyze(Path("invoice.pdf").read_bytes(), "invoice.pdf")
        print(report.to_dict()['currencyTables'])
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        pipeline: Optional[TextExtractionPipeline] = None
    ):
        self.config = config or PipelineConfig()
        self.pipeline = pipeline or TextExtractionPipeline(self.config)
        self.currency_extractor = CurrencyExtractor()
        self.reconstructor = DocumentReconstructor()

    def check_upload(self, pdf_bytes: bytes):
        """
        Reject input that is not a PDF or is over the size ceiling.

        Raises:
            UploadRejected
        """
        info = inspect_pdf_bytes(pdf_bytes)
        if not info['readable']:
            raise UploadRejected(info['error'])
        if info['size_bytes'] > self.config.max_upload_bytes:
            raise UploadRejected(
                f"File is {info['size_mb']} MB, limit is "
                f"{self.config.max_upload_bytes // (1024 * 1024)} MB"
            )

    def analyze(self, pdf_bytes: bytes, filename: str = "document.pdf") -> AnalysisReport:
        """
        Extract text and currency tables from one PDF.

        Raises:
            UploadRejected: input is not an acceptable PDF
            ExtractionFailed: no readable text could be recovered
        """
        start_time = time.monotonic()
        self.check_upload(pdf_bytes)

        request_id = uuid.uuid4().hex
        logger.info(f"[{request_id}] Processing: {filename} ({len(pdf_bytes)} bytes)")

        result = self.pipeline.extract(pdf_bytes, request_id=request_id)
        tables = self.currency_extractor.extract(result.text)

        return AnalysisReport(
            filename=filename,
            extracted_text=result.text,
            page_count=result.page_count,
            source=result.source.value,
            currency_tables=tables,
            warnings=list(result.warnings),
            processing_time_ms=int((time.monotonic() - start_time) * 1000),
        )

    def edit(self, pdf_bytes: bytes, instructions: str, editor: TextEditor) -> ReconstructionResult:
        """
        Apply editing instructions to a PDF's text and rebuild the document.

        The editor is an external text-in/text-out service; it receives the
        extracted text and the instructions and returns the full edited text.
        """
        if not instructions or not instructions.strip():
            raise ValueError("No editing instructions provided")

        self.check_upload(pdf_bytes)
        original = self.pipeline.extract(pdf_bytes)
        edited_text = editor(original.text, instructions)
        return self.rebuild(edited_text)

    def rebuild(self, edited_text: str) -> ReconstructionResult:
        """Render edited text into a new PDF."""
        return self.reconstructor.reconstruct(edited_text)


def print_report(report: AnalysisReport, console: Console):
    """Print extracted currency tables and a short summary."""
    console.print(
        f"[bold]Pages:[/] {report.page_count}   "
        f"[bold]Source:[/] {report.source}   "
        f"[bold]Characters:[/] {len(report.extracted_text)}   "
        f"[bold]Time:[/] {report.processing_time_ms} ms"
    )

    if not report.currency_tables:
        console.print("[yellow]No currency amounts found[/]")
        return

    for currency_table in report.currency_tables:
        table = Table(title=f"{currency_table.currency} (total {currency_table.total})")
        table.add_column("Description", style="cyan")
        table.add_column("Amount", justify="right")

        for item in currency_table.items:
            description = item.description
            if len(description) > 60:
                description = description[:57] + "..."
            table.add_row(escape(description), str(item.amount))

        console.print()
        console.print(table)


def load_config(config_path: Optional[Path]) -> PipelineConfig:
    """Load the given config file, the default one if present, or defaults."""
    if config_path is not None:
        return PipelineConfig.load(config_path)
    if DEFAULT_CONFIG_PATH.exists():
        return PipelineConfig.load(DEFAULT_CONFIG_PATH)
    logger.warning(f"Config file not found: {DEFAULT_CONFIG_PATH}, using built-in defaults")
    return PipelineConfig()


# CLI Interface
@click.group()
def cli():
    """PDF Assistant - extract text and money tables from PDFs, rebuild edited PDFs."""


@cli.command()
@click.option(
    '--input', '-i',
    'input_path',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help='Input PDF file'
)
@click.option(
    '--output', '-o',
    'output_path',
    type=click.Path(path_type=Path),
    default=None,
    help='Write the JSON report to this file'
)
@click.option(
    '--config', '-c',
    'config_path',
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help='Path to settings.yaml configuration file'
)
@click.option(
    '--ocr/--no-ocr',
    'enable_ocr',
    default=None,
    help='Enable/disable OCR fallback for scanned pages'
)
@click.option(
    '--ocr-language',
    default=None,
    help='Tesseract language code (e.g., eng, fra, deu)'
)
@click.option(
    '--verbose', '-v',
    is_flag=True,
    help='Enable verbose logging'
)
@click.option(
    '--log-file',
    type=click.Path(path_type=Path),
    default=None,
    help='Write logs to file'
)
def extract(
    input_path: Path,
    output_path: Optional[Path],
    config_path: Optional[Path],
    enable_ocr: Optional[bool],
    ocr_language: Optional[str],
    verbose: bool,
    log_file: Optional[Path]
):
    """
    Extract text and currency tables from a PDF.

    Examples:

        # Print currency tables
        python main.py extract -i invoice.pdf

        # Save the full JSON report, OCR in German
        python main.py extract -i scan.pdf -o report.json --ocr-language deu
    """
    setup_logging(verbose=verbose, log_file=log_file)
    console = Console()

    try:
        config = load_config(config_path)
    except Exception as e:
        console.print(f"[bold red]Invalid configuration: {escape(str(e))}[/]")
        raise SystemExit(1)

    if enable_ocr is not None:
        config.enable_ocr = enable_ocr
    if ocr_language:
        config.ocr_language = ocr_language
    logger.debug(f"Settings: {config.to_dict()}")

    assistant = PDFAssistant(config)

    try:
        report = assistant.analyze(input_path.read_bytes(), input_path.name)
    except UploadRejected as e:
        console.print(f"[bold red]Rejected {input_path.name}: {escape(str(e))}[/]")
        raise SystemExit(1)
    except ExtractionFailed as e:
        if e.is_input_error:
            console.print(f"[bold red]Could not read {input_path.name}: {escape(str(e))}[/]")
        else:
            console.print(f"[bold red]OCR engine failure while processing {input_path.name}: {escape(str(e))}[/]")
            if check_tesseract_installed():
                console.print("Tesseract is installed; check that poppler is installed and on PATH.")
            else:
                console.print("Tesseract was not found. Install it or set tesseract_cmd in settings.yaml.")
        if verbose:
            logger.exception("Full traceback:")
        raise SystemExit(1)

    print_report(report, console)

    if output_path:
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(report.to_dict(), f, indent=2, ensure_ascii=False)
        console.print(f"[green]✓ Report written to: {output_path}[/]")


@cli.command()
@click.option(
    '--input', '-i',
    'input_path',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help='Edited text file (UTF-8)'
)
@click.option(
    '--output', '-o',
    'output_path',
    type=click.Path(path_type=Path),
    required=True,
    help='Output PDF file path'
)
@click.option(
    '--verbose', '-v',
    is_flag=True,
    help='Enable verbose logging'
)
def rebuild(input_path: Path, output_path: Path, verbose: bool):
    """
    Render an edited text file into a new PDF.

    Example:

        python main.py rebuild -i edited.txt -o edited.pdf
    """
    setup_logging(verbose=verbose)
    console = Console()

    try:
        edited_text = input_path.read_text(encoding='utf-8')
    except UnicodeDecodeError as e:
        console.print(f"[bold red]{input_path.name} is not UTF-8 text: {escape(str(e))}[/]")
        raise SystemExit(1)

    result = PDFAssistant().rebuild(edited_text)
    output_path.write_bytes(result.pdf_bytes)

    console.print(f"[green]✓ {result.page_count} page(s) written to: {output_path}[/]")
    if result.dropped_line_count:
        console.print(
            f"[yellow]Warning: {result.dropped_line_count} line(s) did not fit "
            f"on their page and were left out[/]"
        )


if __name__ == "__main__":
    cli()
