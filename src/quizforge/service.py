"""End-to-end flow shared by the CLI and the bot: document in, quiz out."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
import time
from typing import Protocol

from quizforge.extraction.extractor import TextExtractor, require_text
from quizforge.extraction.models import ProgressReporter, SourceDocument, null_reporter
from quizforge.quiz.models import Quiz, QuizConfig


logger = logging.getLogger(__name__)


class QuizSource(Protocol):
    def generate_quiz(self, context: str, config: QuizConfig) -> Quiz: ...


@dataclass(frozen=True, slots=True)
class QuizRunResult:
    quiz: Quiz
    text_length: int
    elapsed_seconds: float


async def generate_quiz_from_document(
    document: SourceDocument,
    config: QuizConfig,
    *,
    generator: QuizSource,
    extractor: TextExtractor | None = None,
    report: ProgressReporter = null_reporter,
) -> QuizRunResult:
    """Extract text, reject empty output, then ask the generator for a quiz."""
    started = time.perf_counter()
    active_extractor = extractor or TextExtractor()

    text = require_text(await active_extractor.extract_text(document, report))
    logger.info("Extracted %s chars from %s", len(text), document.name or document.media_type)

    report("Generating questions with AI...")
    quiz = await asyncio.to_thread(generator.generate_quiz, text, config)

    elapsed = time.perf_counter() - started
    logger.info("Quiz ready in %.2fs (%s questions)", elapsed, len(quiz.questions))
    return QuizRunResult(quiz=quiz, text_length=len(text), elapsed_seconds=elapsed)
