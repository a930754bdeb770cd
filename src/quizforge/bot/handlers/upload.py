"""Telegram document and photo upload handler that turns files into quizzes."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import json
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable

from telegram import Poll, Update
from telegram.error import NetworkError, TelegramError, TimedOut
from telegram.ext import ContextTypes, MessageHandler, filters

from quizforge.bot.handlers.common import (
    ConfigError,
    _resolve_extractor,
    _resolve_generator,
    _resolve_max_file_bytes,
    _resolve_progress_interval,
    get_user_quiz_config,
)
from quizforge.bot.handlers.renderers import render_quiz_header, render_quiz_polls
from quizforge.bot.progress import StatusMessageReporter
from quizforge.extraction.errors import EmptyExtraction, ExtractionError
from quizforge.extraction.models import SourceDocument
from quizforge.extraction.sources import guess_media_type, is_supported_extension
from quizforge.quiz.models import EXPORT_FILENAME, Quiz
from quizforge.quiz.openrouter import QuizGenerationError
from quizforge.service import generate_quiz_from_document


logger = logging.getLogger(__name__)

PHOTO_FILE_NAME = "photo.jpg"
INITIAL_STATUS = "Preparing file..."
UNSUPPORTED_MESSAGE = "Unsupported file type. Please upload a PDF, image, .txt, or .md file."
GENERIC_FAILURE_MESSAGE = "Could not process the file. Please try again later."
NETWORK_FAILURE_MESSAGE = "Network error while downloading the file. Please try again later."
DELIVERY_FAILURE_MESSAGE = "The quiz was generated but could not be sent. Please try again."
DOWNLOAD_RETRY_DELAY_SECONDS = 2.0


@dataclass(frozen=True, slots=True)
class IncomingUpload:
    file_name: str
    file_size: int | None
    media_type: str
    get_file: Callable[[], Awaitable[Any]]


def _resolve_upload(message: Any) -> IncomingUpload | None:
    document = getattr(message, "document", None)
    if document is not None:
        safe_name = Path(document.file_name or "").name
        return IncomingUpload(
            file_name=safe_name,
            file_size=document.file_size,
            media_type=guess_media_type(safe_name) if safe_name else (document.mime_type or ""),
            get_file=document.get_file,
        )

    photos = getattr(message, "photo", None) or ()
    if photos:
        largest = photos[-1]
        return IncomingUpload(
            file_name=PHOTO_FILE_NAME,
            file_size=largest.file_size,
            media_type="image/jpeg",
            get_file=largest.get_file,
        )
    return None


def _format_size_limit(max_file_bytes: int) -> str:
    return f"{max_file_bytes // (1024 * 1024)} MB"


async def _fetch(upload: IncomingUpload) -> bytes:
    telegram_file = await upload.get_file()
    return bytes(await telegram_file.download_as_bytearray())


async def _download(upload: IncomingUpload) -> bytes:
    try:
        return await _fetch(upload)
    except (NetworkError, TimedOut) as error:
        logger.warning("Network error during download of %s, retrying once: %s", upload.file_name, error)
        await asyncio.sleep(DOWNLOAD_RETRY_DELAY_SECONDS)
        return await _fetch(upload)


def _build_failure_message(error: Exception) -> str:
    if isinstance(error, EmptyExtraction):
        return str(error)
    return f"Failed to generate quiz. {error} Please try again with a different file."


async def _send_quiz(message: Any, quiz: Quiz, *, elapsed_seconds: float) -> None:
    await message.reply_text(render_quiz_header(quiz, elapsed_seconds=elapsed_seconds))
    for poll in render_quiz_polls(quiz):
        await message.reply_poll(
            question=poll.question,
            options=poll.options,
            type=Poll.QUIZ,
            correct_option_id=poll.correct_option_id,
            explanation=poll.explanation,
            is_anonymous=False,
        )

    export_bytes = json.dumps(quiz.to_export_payload(), ensure_ascii=False, indent=2).encode("utf-8")
    await message.reply_document(document=export_bytes, filename=EXPORT_FILENAME, caption="Quiz export (JSON)")


async def handle_quiz_upload(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Validate, download, extract, and turn a user upload into a quiz."""
    message = update.message
    if message is None:
        return

    upload = _resolve_upload(message)
    if upload is None:
        return

    try:
        max_file_bytes = _resolve_max_file_bytes(context)
        extractor = _resolve_extractor(context)
        generator = _resolve_generator(context)
    except ConfigError as error:
        logger.error("Upload rejected due to configuration error: %s", error)
        await message.reply_text(GENERIC_FAILURE_MESSAGE)
        return

    if upload.file_size is not None and upload.file_size > max_file_bytes:
        await message.reply_text(f"File is too large. Maximum size: {_format_size_limit(max_file_bytes)}")
        return

    if not is_supported_extension(upload.file_name):
        await message.reply_text(UNSUPPORTED_MESSAGE)
        return

    status_msg = await message.reply_text(INITIAL_STATUS)
    reporter = StatusMessageReporter(
        status_msg,
        min_interval_seconds=_resolve_progress_interval(context),
        current_text=INITIAL_STATUS,
    )

    try:
        data = await _download(upload)
        document = SourceDocument(data=data, media_type=upload.media_type, name=upload.file_name)
        result = await generate_quiz_from_document(
            document,
            get_user_quiz_config(context),
            generator=generator,
            extractor=extractor,
            report=reporter,
        )
    except (ExtractionError, QuizGenerationError) as error:
        logger.info("Quiz generation failed for %s: %s", upload.file_name, error)
        await reporter.flush()
        await status_msg.edit_text(_build_failure_message(error))
        return
    except (NetworkError, TimedOut):
        await reporter.flush()
        await status_msg.edit_text(NETWORK_FAILURE_MESSAGE)
        return
    except Exception:
        logger.exception("Unexpected error while handling upload: %s", upload.file_name)
        await reporter.flush()
        await status_msg.edit_text(GENERIC_FAILURE_MESSAGE)
        return

    await reporter.flush()
    await status_msg.edit_text(f"Quiz ready: {len(result.quiz.questions)} questions.")
    try:
        await _send_quiz(message, result.quiz, elapsed_seconds=result.elapsed_seconds)
    except TelegramError as error:
        logger.warning("Could not deliver quiz for %s: %s", upload.file_name, error)
        await status_msg.edit_text(DELIVERY_FAILURE_MESSAGE)


def build_upload_handler() -> MessageHandler:
    """Build document/photo upload message handler."""
    upload_filter = filters.PHOTO | filters.Document.ALL
    return MessageHandler(upload_filter, handle_quiz_upload)
