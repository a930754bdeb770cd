"""Scanned-document detection for PDFs after the structural text pass."""

from __future__ import annotations

# Digitally authored pages carry well over this many characters each; a
# lower average means the pages are most likely raster-only scans.
DEFAULT_MIN_CHARS_PER_PAGE = 50


def is_scanned(text: str, page_count: int, *, min_chars_per_page: int = DEFAULT_MIN_CHARS_PER_PAGE) -> bool:
    """Return True when the structural text is too sparse for *page_count* pages."""
    if page_count < 0:
        raise ValueError("page_count cannot be negative")
    if min_chars_per_page < 0:
        raise ValueError("min_chars_per_page cannot be negative")
    return len(text.strip()) < min_chars_per_page * page_count
