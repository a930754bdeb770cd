"""Typed failures surfaced by the text extraction pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class ExtractionError(Exception):
    """Base class for extraction failures. Never retried by the pipeline."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class UnsupportedFormat(ExtractionError):
    """Declared media type is not text, PDF or image."""

    media_type: str = ""

    def __str__(self) -> str:
        return f"{self.message} (media_type={self.media_type or 'unknown'})"


@dataclass
class PdfParseFailure(ExtractionError):
    """The PDF is corrupt, protected, or one of its pages failed to load."""


@dataclass
class OcrFailure(ExtractionError):
    """The recognition engine itself failed."""


@dataclass
class ReadFailure(ExtractionError):
    """The source payload could not be read from disk."""

    path: Path | None = None

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.message} (path={self.path})"


@dataclass
class EmptyExtraction(ExtractionError):
    """Raised by callers (not the extractor) when no usable text came back."""


@dataclass
class RasterUnavailable(ExtractionError):
    """A page could not be rendered to a drawable surface.

    Page-local: the OCR fallback treats it as an empty page instead of
    aborting the batch.
    """

    page_number: int = 0
