"""Data structures shared by the extraction stages."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from PIL import Image


ProgressReporter = Callable[[str], None]

# Render resolution for OCR input; PDF page coordinates are 72 DPI.
TARGET_DPI = 300
PDF_BASE_DPI = 72


def null_reporter(message: str) -> None:
    del message


def to_percent(done: float, total: float) -> int:
    """Round a completion ratio to a whole percentage, halves rounding up."""
    if total <= 0:
        return 100
    return int(done / total * 100 + 0.5)


class MediaKind(Enum):
    TEXT = "text"
    PDF = "pdf"
    IMAGE = "image"
    UNSUPPORTED = "unsupported"


def resolve_media_kind(media_type: str) -> MediaKind:
    """Map a declared media type string to the extraction strategy it selects."""
    normalized = media_type.split(";", 1)[0].strip().lower()
    if normalized.startswith("image/"):
        return MediaKind.IMAGE
    if normalized == "application/pdf":
        return MediaKind.PDF
    if normalized.startswith("text/"):
        return MediaKind.TEXT
    return MediaKind.UNSUPPORTED


@dataclass(frozen=True, slots=True)
class SourceDocument:
    """Raw uploaded payload plus the media type it was declared with."""

    data: bytes
    media_type: str
    name: str | None = None

    @property
    def kind(self) -> MediaKind:
        return resolve_media_kind(self.media_type)


@dataclass(frozen=True, slots=True)
class RasterImage:
    """RGB pixel buffer rendered from one PDF page."""

    page_number: int
    width: int
    height: int
    samples: bytes

    def to_pil(self) -> "Image.Image":
        from PIL import Image

        return Image.frombytes("RGB", (self.width, self.height), self.samples)
