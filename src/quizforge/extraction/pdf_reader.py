"""PDF access via PyMuPDF: embedded text runs and page rasterization."""

from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
import logging
from typing import Any, Callable, TypeVar

import pymupdf

from quizforge.extraction.errors import PdfParseFailure, RasterUnavailable
from quizforge.extraction.models import PDF_BASE_DPI, TARGET_DPI, RasterImage


logger = logging.getLogger(__name__)

PARSE_FAILURE_MESSAGE = "Could not parse the PDF file. It might be corrupted or protected."

_T = TypeVar("_T")


def _iter_span_texts(payload: dict[str, Any]) -> list[str]:
    runs: list[str] = []
    for block in payload.get("blocks", []):
        # type 1 blocks are images and carry no spans
        if block.get("type") != 0:
            continue
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                runs.append(str(span.get("text", "")))
    return runs


class PdfDocumentReader:
    """Open a PDF byte buffer and expose page-level text and raster access.

    A ``pymupdf.Document`` must not be used from several threads at once, so
    every page operation runs on a single-worker executor owned by the reader.
    Callers await those operations without blocking the event loop.
    """

    def __init__(self, document: pymupdf.Document, *, dpi: int = TARGET_DPI) -> None:
        self._document = document
        self._dpi = dpi
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pdf-reader")

    @classmethod
    def open(cls, data: bytes, *, dpi: int = TARGET_DPI) -> "PdfDocumentReader":
        try:
            document = pymupdf.open(stream=data, filetype="pdf")
        except Exception as exc:
            raise PdfParseFailure(PARSE_FAILURE_MESSAGE) from exc

        if document.needs_pass:
            document.close()
            raise PdfParseFailure(PARSE_FAILURE_MESSAGE)
        return cls(document, dpi=dpi)

    @property
    def page_count(self) -> int:
        return self._document.page_count

    @property
    def scale(self) -> float:
        return self._dpi / PDF_BASE_DPI

    def close(self) -> None:
        # Callers close only after every page task has finished, so this does not block.
        self._executor.shutdown(wait=True)
        self._document.close()

    def __enter__(self) -> "PdfDocumentReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    async def _run(self, func: Callable[..., _T], *args: Any) -> _T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, func, *args)

    def _load_page(self, page_number: int) -> pymupdf.Page:
        if not 1 <= page_number <= self.page_count:
            raise PdfParseFailure(f"Page {page_number} is out of range (1-{self.page_count})")
        try:
            return self._document.load_page(page_number - 1)
        except Exception as exc:
            raise PdfParseFailure(f"{PARSE_FAILURE_MESSAGE} Page {page_number} failed to load.") from exc

    def _text_runs(self, page_number: int) -> list[str]:
        page = self._load_page(page_number)
        try:
            payload = page.get_text("dict")
        except Exception as exc:
            raise PdfParseFailure(f"{PARSE_FAILURE_MESSAGE} Page {page_number} has unreadable text.") from exc
        return _iter_span_texts(payload)

    def _rasterize(self, page_number: int) -> RasterImage:
        page = self._load_page(page_number)
        scale = self.scale
        rect = page.rect
        if int(rect.width * scale) <= 0 or int(rect.height * scale) <= 0:
            raise RasterUnavailable(f"Page {page_number} has an empty viewport", page_number=page_number)

        try:
            pixmap = page.get_pixmap(
                matrix=pymupdf.Matrix(scale, scale),
                colorspace=pymupdf.csRGB,
                alpha=False,
            )
        except (pymupdf.mupdf.FzErrorBase, RuntimeError, MemoryError, ValueError) as exc:
            raise RasterUnavailable(
                f"Could not render page {page_number}: {exc}",
                page_number=page_number,
            ) from exc

        return RasterImage(
            page_number=page_number,
            width=pixmap.width,
            height=pixmap.height,
            samples=bytes(pixmap.samples),
        )

    async def text_runs(self, page_number: int) -> list[str]:
        """Return the embedded text spans of a 1-based page, in content order."""
        return await self._run(self._text_runs, page_number)

    async def rasterize(self, page_number: int) -> RasterImage:
        """Render a 1-based page to an RGB buffer at the reader's DPI."""
        return await self._run(self._rasterize, page_number)
