"""Routing entrypoint that turns an uploaded document into plain text.

Dispatch is by declared media kind:

* text: the buffer is decoded, nothing else runs;
* image: the whole image goes through OCR;
* PDF: embedded text is extracted page by page; if it is too sparse for the
  page count the document is treated as scanned, the structural text is
  discarded, and every page is rendered and OCR'd concurrently.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from quizforge.extraction.config import ExtractionSettings
from quizforge.extraction.errors import (
    EmptyExtraction,
    ExtractionError,
    PdfParseFailure,
    RasterUnavailable,
    UnsupportedFormat,
)
from quizforge.extraction.heuristics import is_scanned
from quizforge.extraction.models import MediaKind, ProgressReporter, SourceDocument, null_reporter, to_percent
from quizforge.extraction.ocr import EngineFactory, recognize, tesseract_factory
from quizforge.extraction.pdf_reader import PARSE_FAILURE_MESSAGE, PdfDocumentReader
from quizforge.extraction.sources import decode_text


logger = logging.getLogger(__name__)

UNSUPPORTED_MESSAGE = "Unsupported file type. Please upload a PDF, image, .txt, or .md file."
EMPTY_MESSAGE = "The file appears to be empty or we could not extract any text. Please try another file."

PdfOpener = Callable[[bytes], PdfDocumentReader]


def require_text(text: str) -> str:
    """Reject trimmed-empty extraction output; the extractor itself never does."""
    if not text.strip():
        raise EmptyExtraction(EMPTY_MESSAGE)
    return text


class TextExtractor:
    """Resolve the extraction strategy for a document and run it."""

    def __init__(
        self,
        settings: ExtractionSettings | None = None,
        *,
        engine_factory: EngineFactory | None = None,
        pdf_opener: PdfOpener | None = None,
    ) -> None:
        self._settings = settings or ExtractionSettings()
        self._engine_factory = engine_factory or tesseract_factory(self._settings.ocr_language)
        self._pdf_opener = pdf_opener or self._open_pdf

    def _open_pdf(self, data: bytes) -> PdfDocumentReader:
        return PdfDocumentReader.open(data, dpi=self._settings.render_dpi)

    async def extract_text(self, document: SourceDocument, report: ProgressReporter = null_reporter) -> str:
        """Return the document's text. Empty output is returned, not rejected."""
        report("Preparing file...")
        kind = document.kind

        if kind is MediaKind.IMAGE:
            report("Starting OCR on image...")
            return await recognize(document.data, engine_factory=self._engine_factory, report=report)

        if kind is MediaKind.PDF:
            return await self._extract_pdf(document.data, report)

        if kind is MediaKind.TEXT:
            return decode_text(document.data)

        raise UnsupportedFormat(UNSUPPORTED_MESSAGE, media_type=document.media_type)

    async def _extract_pdf(self, data: bytes, report: ProgressReporter) -> str:
        reader = self._pdf_opener(data)
        try:
            report("Attempting to extract text from PDF...")
            structural_text = await self._structural_text(reader)

            if not is_scanned(
                structural_text,
                reader.page_count,
                min_chars_per_page=self._settings.min_chars_per_page,
            ):
                logger.info("PDF has embedded text: %s pages, %s chars", reader.page_count, len(structural_text))
                return structural_text

            logger.info("PDF classified as scanned (%s chars over %s pages)", len(structural_text.strip()), reader.page_count)
            report("PDF appears to be scanned, switching to parallel OCR...")
            return await self._ocr_pages(reader, report)
        except ExtractionError:
            raise
        except Exception as exc:
            raise PdfParseFailure(PARSE_FAILURE_MESSAGE) from exc
        finally:
            reader.close()

    async def _structural_text(self, reader: PdfDocumentReader) -> str:
        page_texts: list[str] = []
        for page_number in range(1, reader.page_count + 1):
            runs = await reader.text_runs(page_number)
            page_texts.append(" ".join(runs))
        return " ".join(page_texts)

    async def _ocr_pages(self, reader: PdfDocumentReader, report: ProgressReporter) -> str:
        total = reader.page_count
        processed = 0

        async def _process(page_number: int) -> str:
            nonlocal processed
            try:
                raster = await reader.rasterize(page_number)
            except RasterUnavailable as exc:
                logger.warning("No drawable surface for page %s, using empty text: %s", page_number, exc)
                text = ""
            else:
                text = await recognize(raster, engine_factory=self._engine_factory)

            # Mutated only on the event loop thread.
            processed += 1
            report(f"Processing page OCR... {to_percent(processed, total)}%")
            return text

        results = await asyncio.gather(
            *(_process(page_number) for page_number in range(1, total + 1)),
            return_exceptions=True,
        )

        page_texts: list[str] = []
        for result in results:
            if isinstance(result, BaseException):
                raise result
            page_texts.append(result)
        return "\n".join(page_texts)


async def extract_text(
    document: SourceDocument,
    report: ProgressReporter = null_reporter,
    *,
    settings: ExtractionSettings | None = None,
) -> str:
    """Extract text from *document* with a default-configured extractor."""
    return await TextExtractor(settings).extract_text(document, report)
