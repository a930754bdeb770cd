"""Tests for routing, the scanned-PDF fallback and progress reporting."""

from __future__ import annotations

import io
import time
from typing import Any

from PIL import Image
import pymupdf
import pytest

from quizforge.extraction.config import ExtractionSettings
from quizforge.extraction.errors import (
    EmptyExtraction,
    OcrFailure,
    PdfParseFailure,
    RasterUnavailable,
    UnsupportedFormat,
)
from quizforge.extraction.extractor import TextExtractor, require_text
from quizforge.extraction.models import RasterImage, SourceDocument
from quizforge.extraction.pdf_reader import PdfDocumentReader


STRUCTURAL_LINE_ONE = "Photosynthesis converts light energy into chemical energy."
STRUCTURAL_LINE_TWO = "Chlorophyll absorbs mostly blue and red wavelengths of light."


class _PageEngine:
    """Fake engine that answers ``p<N>`` for rendered pages and sleeps longer for earlier pages."""

    def __init__(self, registry: list["_PageEngine"], *, delays: dict[int, float] | None = None) -> None:
        self.delays = delays or {}
        self.closed = False
        registry.append(self)

    def recognize(self, image: Any, on_progress=None) -> str:
        assert isinstance(image, RasterImage)
        time.sleep(self.delays.get(image.page_number, 0.0))
        return f"p{image.page_number}"

    def close(self) -> None:
        self.closed = True


class _StaticEngine:
    def __init__(self, text: str = "", *, error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.closed = False

    def recognize(self, image: Any, on_progress=None) -> str:
        if on_progress is not None:
            on_progress("recognizing text", 1.0)
        if self.error is not None:
            raise self.error
        return self.text

    def close(self) -> None:
        self.closed = True


def _forbidden_factory():
    raise AssertionError("OCR must not run for this document")


def _pdf_bytes(page_texts: list[str]) -> bytes:
    doc = pymupdf.open()
    for text in page_texts:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def _pdf(page_texts: list[str]) -> SourceDocument:
    return SourceDocument(data=_pdf_bytes(page_texts), media_type="application/pdf", name="doc.pdf")


def _png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (10, 10), "white").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.mark.asyncio
async def test_text_document_is_decoded_without_ocr() -> None:
    extractor = TextExtractor(engine_factory=_forbidden_factory)
    messages: list[str] = []

    text = await extractor.extract_text(
        SourceDocument(data="Hello world\nSecond line".encode("utf-8"), media_type="text/plain"),
        messages.append,
    )

    assert text == "Hello world\nSecond line"
    assert messages == ["Preparing file..."]


@pytest.mark.asyncio
async def test_markdown_is_returned_unchanged() -> None:
    extractor = TextExtractor(engine_factory=_forbidden_factory)
    source = "# Cells\n\n* nucleus\n* mitochondria\n"

    text = await extractor.extract_text(SourceDocument(data=source.encode("utf-8"), media_type="text/markdown"))

    assert text == source


@pytest.mark.asyncio
async def test_unsupported_media_type_raises_without_touching_ocr() -> None:
    extractor = TextExtractor(engine_factory=_forbidden_factory)

    with pytest.raises(UnsupportedFormat) as exc_info:
        await extractor.extract_text(SourceDocument(data=b"PK\x03\x04", media_type="application/zip"))

    assert exc_info.value.media_type == "application/zip"


@pytest.mark.asyncio
async def test_blank_image_returns_empty_text_not_an_error() -> None:
    engine = _StaticEngine("")
    extractor = TextExtractor(engine_factory=lambda: engine)
    messages: list[str] = []

    text = await extractor.extract_text(SourceDocument(data=_png_bytes(), media_type="image/png"), messages.append)

    assert text == ""
    assert engine.closed is True
    assert messages == ["Preparing file...", "Starting OCR on image...", "Recognizing text... 100%"]


@pytest.mark.asyncio
async def test_image_ocr_failure_raises_ocr_failure() -> None:
    engine = _StaticEngine(error=RuntimeError("bad image"))
    extractor = TextExtractor(engine_factory=lambda: engine)

    with pytest.raises(OcrFailure):
        await extractor.extract_text(SourceDocument(data=b"\x89PNG", media_type="image/png"))

    assert engine.closed is True


@pytest.mark.asyncio
async def test_structural_pdf_skips_ocr() -> None:
    extractor = TextExtractor(engine_factory=_forbidden_factory)
    messages: list[str] = []

    text = await extractor.extract_text(_pdf([STRUCTURAL_LINE_ONE, STRUCTURAL_LINE_TWO]), messages.append)

    assert STRUCTURAL_LINE_ONE in text
    assert STRUCTURAL_LINE_TWO in text
    assert text.index(STRUCTURAL_LINE_ONE) < text.index(STRUCTURAL_LINE_TWO)
    assert messages == ["Preparing file...", "Attempting to extract text from PDF..."]


@pytest.mark.asyncio
async def test_structural_text_joins_runs_and_pages_with_single_spaces() -> None:
    doc = pymupdf.open()
    for first, second in (("x" * 40, "y" * 40), ("z" * 40, "w" * 40)):
        page = doc.new_page()
        page.insert_text((72, 72), first)
        page.insert_text((72, 120), second)
    data = doc.tobytes()
    doc.close()
    extractor = TextExtractor(engine_factory=_forbidden_factory)

    text = await extractor.extract_text(SourceDocument(data=data, media_type="application/pdf"))

    assert text == "x" * 40 + " " + "y" * 40 + " " + "z" * 40 + " " + "w" * 40


@pytest.mark.asyncio
async def test_scanned_pdf_ocr_keeps_page_order_despite_completion_order() -> None:
    engines: list[_PageEngine] = []
    delays = {1: 0.15, 2: 0.05, 3: 0.0}
    extractor = TextExtractor(engine_factory=lambda: _PageEngine(engines, delays=delays))
    messages: list[str] = []

    text = await extractor.extract_text(_pdf(["", "", ""]), messages.append)

    assert text == "p1\np2\np3"
    assert len(engines) == 3
    assert all(engine.closed for engine in engines)
    assert messages == [
        "Preparing file...",
        "Attempting to extract text from PDF...",
        "PDF appears to be scanned, switching to parallel OCR...",
        "Processing page OCR... 33%",
        "Processing page OCR... 67%",
        "Processing page OCR... 100%",
    ]


@pytest.mark.asyncio
async def test_sparse_structural_text_is_discarded_for_ocr() -> None:
    engines: list[_PageEngine] = []
    extractor = TextExtractor(engine_factory=lambda: _PageEngine(engines))

    text = await extractor.extract_text(_pdf(["Page 1", ""]))

    assert text == "p1\np2"
    assert "Page 1" not in text


@pytest.mark.asyncio
async def test_threshold_comes_from_settings() -> None:
    extractor = TextExtractor(
        ExtractionSettings(min_chars_per_page=5),
        engine_factory=_forbidden_factory,
    )

    text = await extractor.extract_text(_pdf(["Page 1", "Page 2"]))

    assert text == "Page 1 Page 2"


@pytest.mark.asyncio
async def test_page_without_drawable_surface_contributes_empty_text(monkeypatch: pytest.MonkeyPatch) -> None:
    original_rasterize = PdfDocumentReader.rasterize

    async def _rasterize(self: PdfDocumentReader, page_number: int) -> RasterImage:
        if page_number == 2:
            raise RasterUnavailable("no surface", page_number=2)
        return await original_rasterize(self, page_number)

    monkeypatch.setattr(PdfDocumentReader, "rasterize", _rasterize)
    engines: list[_PageEngine] = []
    extractor = TextExtractor(engine_factory=lambda: _PageEngine(engines))
    messages: list[str] = []

    text = await extractor.extract_text(_pdf(["", "", ""]), messages.append)

    assert text == "p1\n\np3"
    assert len(engines) == 2
    assert messages[-1] == "Processing page OCR... 100%"


@pytest.mark.asyncio
async def test_mupdf_render_failure_on_one_page_keeps_the_rest(monkeypatch: pytest.MonkeyPatch) -> None:
    original_get_pixmap = pymupdf.Page.get_pixmap

    def _get_pixmap(self, *args, **kwargs):
        if self.number == 1:
            raise pymupdf.mupdf.FzErrorLimit("pixmap too large")
        return original_get_pixmap(self, *args, **kwargs)

    monkeypatch.setattr(pymupdf.Page, "get_pixmap", _get_pixmap)
    engines: list[_PageEngine] = []
    extractor = TextExtractor(engine_factory=lambda: _PageEngine(engines))

    text = await extractor.extract_text(_pdf(["", "", ""]))

    assert text == "p1\n\np3"
    assert len(engines) == 2


@pytest.mark.asyncio
async def test_page_ocr_failure_fails_the_whole_document() -> None:
    class _FailOnSecondPage(_PageEngine):
        def recognize(self, image: Any, on_progress=None) -> str:
            if image.page_number == 2:
                raise RuntimeError("engine crashed on page 2")
            return super().recognize(image, on_progress)

    engines: list[_PageEngine] = []
    extractor = TextExtractor(engine_factory=lambda: _FailOnSecondPage(engines))

    with pytest.raises(OcrFailure, match="engine crashed on page 2"):
        await extractor.extract_text(_pdf(["", "", ""]))

    assert all(engine.closed for engine in engines)


@pytest.mark.asyncio
async def test_corrupt_pdf_raises_parse_failure() -> None:
    extractor = TextExtractor(engine_factory=_forbidden_factory)

    with pytest.raises(PdfParseFailure):
        await extractor.extract_text(SourceDocument(data=b"this is definitely not a pdf", media_type="application/pdf"))


@pytest.mark.asyncio
async def test_unexpected_reader_error_is_wrapped_and_reader_closed() -> None:
    closed: list[bool] = []

    class _BrokenReader:
        page_count = 1

        async def text_runs(self, page_number: int) -> list[str]:
            raise KeyError("bad xref")

        def close(self) -> None:
            closed.append(True)

    extractor = TextExtractor(engine_factory=_forbidden_factory, pdf_opener=lambda data: _BrokenReader())

    with pytest.raises(PdfParseFailure):
        await extractor.extract_text(SourceDocument(data=b"%PDF", media_type="application/pdf"))

    assert closed == [True]


@pytest.mark.asyncio
async def test_extraction_is_repeatable() -> None:
    engines: list[_PageEngine] = []
    extractor = TextExtractor(engine_factory=lambda: _PageEngine(engines))
    document = _pdf(["", ""])

    first = await extractor.extract_text(document)
    second = await extractor.extract_text(document)

    assert first == second == "p1\np2"


def test_require_text_rejects_whitespace_only_output() -> None:
    assert require_text(" text ") == " text "
    with pytest.raises(EmptyExtraction, match="appears to be empty"):
        require_text("  \n\t ")
