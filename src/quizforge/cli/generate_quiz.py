"""CLI command that builds a quiz from a document and writes the JSON export."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
import sys

from dotenv import load_dotenv

from quizforge.extraction.config import ExtractionSettings
from quizforge.extraction.errors import ExtractionError
from quizforge.extraction.extractor import TextExtractor
from quizforge.extraction.sources import load_source_document
from quizforge.quiz.config import GeneratorSettings
from quizforge.quiz.models import (
    DEFAULT_NUM_QUESTIONS,
    DEFAULT_TIME_LIMIT_MINUTES,
    DEFAULT_TOTAL_POINTS,
    EXPORT_FILENAME,
    Difficulty,
    QuizConfig,
)
from quizforge.quiz.openrouter import QuizGenerationError, QuizGenerator
from quizforge.service import QuizRunResult, generate_quiz_from_document


logger = logging.getLogger(__name__)


def _stderr_reporter(message: str) -> None:
    print(message, file=sys.stderr, flush=True)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate a quiz contest from a document")
    parser.add_argument("--path", required=True, help="Source PDF, image, .txt or .md file")
    parser.add_argument("--num-questions", type=int, default=DEFAULT_NUM_QUESTIONS)
    parser.add_argument(
        "--difficulty",
        default=Difficulty.MEDIUM.value,
        choices=[member.value for member in Difficulty],
    )
    parser.add_argument("--time-limit", type=int, default=DEFAULT_TIME_LIMIT_MINUTES, help="Minutes")
    parser.add_argument("--total-points", type=int, default=DEFAULT_TOTAL_POINTS)
    parser.add_argument("--output", default=EXPORT_FILENAME, help="Where to write the quiz JSON export")
    return parser


async def _run(
    path: Path,
    config: QuizConfig,
    generator: QuizGenerator,
    extraction_settings: ExtractionSettings,
) -> QuizRunResult:
    document = load_source_document(path)
    return await generate_quiz_from_document(
        document,
        config,
        generator=generator,
        extractor=TextExtractor(extraction_settings),
        report=_stderr_reporter,
    )


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )

    try:
        config = QuizConfig(
            num_questions=args.num_questions,
            difficulty=Difficulty.parse(args.difficulty),
            time_limit=args.time_limit,
            total_points=args.total_points,
        )
        generator = QuizGenerator(GeneratorSettings.from_env())
        extraction_settings = ExtractionSettings.from_env()
    except (ValueError, QuizGenerationError) as exc:
        logger.error("Configuration error: %s", exc)
        return 2

    try:
        result = asyncio.run(_run(Path(args.path), config, generator, extraction_settings))
    except (ExtractionError, QuizGenerationError) as exc:
        print(json.dumps({"source_path": args.path, "error": str(exc)}, ensure_ascii=True, indent=2))
        return 1

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(result.quiz.to_export_payload(), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )

    summary = {
        "source_path": args.path,
        "output": str(output_path),
        "question_count": len(result.quiz.questions),
        "text_length": result.text_length,
        "elapsed_seconds": round(result.elapsed_seconds, 2),
    }
    print(json.dumps(summary, ensure_ascii=True, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
