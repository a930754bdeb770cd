"""Runtime configuration for the text extraction pipeline."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping

from quizforge.extraction.heuristics import DEFAULT_MIN_CHARS_PER_PAGE
from quizforge.extraction.models import TARGET_DPI


DEFAULT_OCR_LANGUAGE = "eng"


def _parse_int(*, name: str, raw_value: str, minimum: int) -> int:
    value = int(raw_value)
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


@dataclass(frozen=True, slots=True)
class ExtractionSettings:
    """Validated extraction settings."""

    min_chars_per_page: int = DEFAULT_MIN_CHARS_PER_PAGE
    ocr_language: str = DEFAULT_OCR_LANGUAGE
    render_dpi: int = TARGET_DPI

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ExtractionSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        min_chars_raw = source.get("QUIZFORGE_MIN_CHARS_PER_PAGE", str(DEFAULT_MIN_CHARS_PER_PAGE)).strip()
        language = source.get("QUIZFORGE_OCR_LANG", DEFAULT_OCR_LANGUAGE).strip()
        dpi_raw = source.get("QUIZFORGE_RENDER_DPI", str(TARGET_DPI)).strip()

        if not min_chars_raw:
            raise ValueError("QUIZFORGE_MIN_CHARS_PER_PAGE cannot be empty")
        if not language:
            raise ValueError("QUIZFORGE_OCR_LANG cannot be empty")
        if not dpi_raw:
            raise ValueError("QUIZFORGE_RENDER_DPI cannot be empty")

        return cls(
            min_chars_per_page=_parse_int(name="QUIZFORGE_MIN_CHARS_PER_PAGE", raw_value=min_chars_raw, minimum=0),
            ocr_language=language,
            render_dpi=_parse_int(name="QUIZFORGE_RENDER_DPI", raw_value=dpi_raw, minimum=72),
        )
