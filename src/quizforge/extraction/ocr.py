"""Tesseract OCR integration with per-call engine lifecycle.

pytesseract and Pillow are imported only inside ``TesseractEngine`` so that
text and structural-PDF extraction keep working on hosts without Tesseract.
Each ``recognize()`` call acquires a fresh engine from a factory and closes
it on every exit path.
"""

from __future__ import annotations

import asyncio
from contextlib import closing
import io
import logging
from typing import Any, Callable, Protocol

from quizforge.extraction.errors import OcrFailure
from quizforge.extraction.models import ProgressReporter, RasterImage, to_percent


logger = logging.getLogger(__name__)

RECOGNIZING_STATUS = "recognizing text"

EngineProgress = Callable[[str, float], None]


class OcrEngine(Protocol):
    def recognize(self, image: Any, on_progress: EngineProgress | None = None) -> str: ...

    def close(self) -> None: ...


EngineFactory = Callable[[], OcrEngine]


def _is_tesseract_not_found(exc: Exception) -> bool:
    """Return True when *exc* indicates that the Tesseract binary is missing."""
    # Checked by class name so pytesseract stays a lazy import.
    if "TesseractNotFoundError" in type(exc).__name__:
        return True
    msg = str(exc).lower()
    return "tesseract is not installed" in msg or "tesseract is not in your path" in msg


class TesseractEngine:
    """Recognize text in raw image bytes, Pillow images or rendered pages."""

    def __init__(self, language: str = "eng", *, config: str = "--oem 3 --psm 3") -> None:
        self._language = language
        self._config = config
        self._opened: list[Any] = []

    def _to_pil(self, image: Any) -> Any:
        from PIL import Image

        if isinstance(image, RasterImage):
            pil_image = image.to_pil()
        elif isinstance(image, (bytes, bytearray)):
            pil_image = Image.open(io.BytesIO(bytes(image)))
        else:
            return image
        self._opened.append(pil_image)
        return pil_image

    def recognize(self, image: Any, on_progress: EngineProgress | None = None) -> str:
        import pytesseract

        pil_image = self._to_pil(image)
        if on_progress is not None:
            on_progress(RECOGNIZING_STATUS, 0.0)
        text = pytesseract.image_to_string(pil_image, lang=self._language, config=self._config)
        if on_progress is not None:
            on_progress(RECOGNIZING_STATUS, 1.0)
        return text or ""

    def close(self) -> None:
        while self._opened:
            self._opened.pop().close()


def tesseract_factory(language: str = "eng") -> EngineFactory:
    def _build() -> OcrEngine:
        return TesseractEngine(language)

    return _build


def _describe_failure(exc: Exception) -> str:
    if _is_tesseract_not_found(exc):
        return "OCR engine is not available: install Tesseract and make sure it is on PATH"
    return f"Failed to extract text using OCR: {exc}"


async def recognize(
    image: Any,
    *,
    engine_factory: EngineFactory,
    report: ProgressReporter | None = None,
) -> str:
    """Run OCR on *image* with a freshly acquired engine.

    When *report* is given, engine progress is forwarded as
    ``"Recognizing text... N%"``. Reports are delivered on the event loop even
    though recognition itself runs in a worker thread.
    """
    loop = asyncio.get_running_loop()
    on_progress: EngineProgress | None = None

    if report is not None:
        progress_sink = report

        def _forward(status: str, fraction: float) -> None:
            if status != RECOGNIZING_STATUS:
                return
            message = f"Recognizing text... {to_percent(fraction, 1.0)}%"
            loop.call_soon_threadsafe(progress_sink, message)

        on_progress = _forward

    try:
        engine = engine_factory()
    except Exception as exc:
        raise OcrFailure(_describe_failure(exc)) from exc

    with closing(engine):
        try:
            return await asyncio.to_thread(engine.recognize, image, on_progress)
        except Exception as exc:
            logger.warning("OCR engine failed: %s", exc)
            raise OcrFailure(_describe_failure(exc)) from exc
