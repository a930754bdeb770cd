"""CLI command that extracts text from a document and prints it as JSON."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
import sys

from quizforge.extraction.config import ExtractionSettings
from quizforge.extraction.errors import ExtractionError
from quizforge.extraction.extractor import TextExtractor
from quizforge.extraction.models import ProgressReporter, null_reporter
from quizforge.extraction.sources import load_source_document


def _stderr_reporter(message: str) -> None:
    print(message, file=sys.stderr, flush=True)


async def _extract(
    path: Path,
    media_type: str | None,
    settings: ExtractionSettings,
    report: ProgressReporter,
) -> dict[str, object]:
    document = load_source_document(path, media_type=media_type)
    text = await TextExtractor(settings).extract_text(document, report)
    return {
        "source_path": str(path),
        "media_type": document.media_type,
        "char_count": len(text),
        "text": text,
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Extract text from a PDF, image, text or markdown file")
    parser.add_argument("--path", required=True, help="Source file")
    parser.add_argument("--media-type", default=None, help="Override the media type guessed from the extension")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output on stderr")
    args = parser.parse_args(argv)

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.WARNING if args.quiet else logging.INFO,
    )

    try:
        settings = ExtractionSettings.from_env()
    except ValueError as exc:
        print(json.dumps({"source_path": args.path, "error": f"Configuration error: {exc}"}), file=sys.stderr)
        return 2

    report = null_reporter if args.quiet else _stderr_reporter
    try:
        payload = asyncio.run(_extract(Path(args.path), args.media_type, settings, report))
    except ExtractionError as exc:
        print(json.dumps({"source_path": args.path, "error": str(exc)}, ensure_ascii=True, indent=2))
        return 1

    print(json.dumps(payload, ensure_ascii=True, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
