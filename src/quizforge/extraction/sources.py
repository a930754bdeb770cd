"""Loading uploaded files into ``SourceDocument`` payloads and decoding text."""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path

from charset_normalizer import from_bytes

from quizforge.extraction.errors import ReadFailure
from quizforge.extraction.models import SourceDocument


logger = logging.getLogger(__name__)

FALLBACK_MEDIA_TYPE = "application/octet-stream"
SUPPORTED_EXTENSIONS = {".pdf", ".txt", ".md", ".png", ".jpg", ".jpeg"}

# Platform mimetypes tables disagree on these.
_EXTENSION_MEDIA_TYPES = {
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".txt": "text/plain",
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}


def is_supported_extension(file_name: str) -> bool:
    return Path(file_name).suffix.lower() in SUPPORTED_EXTENSIONS


def guess_media_type(file_name: str) -> str:
    suffix = Path(file_name).suffix.lower()
    if suffix in _EXTENSION_MEDIA_TYPES:
        return _EXTENSION_MEDIA_TYPES[suffix]
    guessed, _ = mimetypes.guess_type(file_name)
    return guessed or FALLBACK_MEDIA_TYPE


def load_source_document(path: str | Path, media_type: str | None = None) -> SourceDocument:
    """Read *path* into memory, resolving its media type from the extension when not given."""
    source = Path(path)
    try:
        data = source.read_bytes()
    except OSError as exc:
        raise ReadFailure(f"Failed to read source file: {exc}", path=source) from exc

    resolved = media_type or guess_media_type(source.name)
    logger.debug("Loaded %s (%s bytes, %s)", source, len(data), resolved)
    return SourceDocument(data=data, media_type=resolved, name=source.name)


def decode_text(raw: bytes) -> str:
    """Decode a text upload. UTF-8 is tried first, then charset detection."""
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        pass

    best = from_bytes(raw).best()
    if best and best.encoding:
        return raw.decode(best.encoding)

    try:
        return raw.decode("cp1251")
    except UnicodeDecodeError as exc:
        raise ReadFailure("Could not detect text encoding") from exc
