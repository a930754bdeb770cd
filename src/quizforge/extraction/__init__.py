"""Document-to-text extraction interfaces."""

from .errors import (
    EmptyExtraction,
    ExtractionError,
    OcrFailure,
    PdfParseFailure,
    ReadFailure,
    UnsupportedFormat,
)
from .extractor import TextExtractor, extract_text, require_text
from .models import MediaKind, ProgressReporter, SourceDocument
from .sources import load_source_document

__all__ = [
    "EmptyExtraction",
    "ExtractionError",
    "MediaKind",
    "OcrFailure",
    "PdfParseFailure",
    "ProgressReporter",
    "ReadFailure",
    "SourceDocument",
    "TextExtractor",
    "UnsupportedFormat",
    "extract_text",
    "load_source_document",
    "require_text",
]
