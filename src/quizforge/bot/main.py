"""Production Telegram bot entrypoint with handler registration and polling."""

from __future__ import annotations

import asyncio
import logging
import sys

from dotenv import load_dotenv
from telegram.ext import Application

load_dotenv()

from quizforge.bot.config import BotSettings
from quizforge.bot.handlers import build_command_handlers, build_settings_handler, build_upload_handler
from quizforge.extraction.config import ExtractionSettings
from quizforge.extraction.extractor import TextExtractor
from quizforge.quiz.config import GeneratorSettings
from quizforge.quiz.openrouter import QuizGenerationError, QuizGenerator
from quizforge.service import QuizSource


logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
# httpx logs every Bot API request at INFO, including each status edit.
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def build_application(
    settings: BotSettings,
    *,
    generator: QuizSource,
    extractor: TextExtractor,
) -> Application:
    """Build PTB Application with all handlers registered."""
    application = Application.builder().token(settings.token).build()

    application.bot_data["generator"] = generator
    application.bot_data["extractor"] = extractor
    application.bot_data["max_file_bytes"] = settings.max_file_bytes
    application.bot_data["progress_interval_seconds"] = settings.progress_interval_seconds

    application.add_handler(build_settings_handler())
    for handler in build_command_handlers():
        application.add_handler(handler)
    application.add_handler(build_upload_handler())

    logger.info("Registered all handlers: settings, commands, upload")
    return application


async def run_bot(application: Application) -> None:
    """Run bot with polling and graceful shutdown."""
    await application.initialize()
    logger.info("Bot initialized. Starting polling...")

    await application.start()
    updater = application.updater
    if updater is None:
        raise RuntimeError("Bot updater is not initialized")

    await updater.start_polling(allowed_updates=["message"])
    logger.info("Bot polling started. Press Ctrl+C to stop.")

    try:
        await asyncio.Event().wait()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Received stop signal. Shutting down...")

    await updater.stop()
    await application.stop()
    await application.shutdown()
    logger.info("Bot stopped cleanly.")


def main() -> None:
    """Main entrypoint for Telegram bot."""
    try:
        settings = BotSettings.from_env()
        generator = QuizGenerator(GeneratorSettings.from_env())
        extraction_settings = ExtractionSettings.from_env()
    except (ValueError, QuizGenerationError) as e:
        logger.error("Configuration error: %s", e)
        sys.exit(1)

    logger.info(
        "Loaded bot config: model=%s, max_file=%sMB, ocr_lang=%s",
        generator.model,
        settings.max_file_mb,
        extraction_settings.ocr_language,
    )
    application = build_application(
        settings,
        generator=generator,
        extractor=TextExtractor(extraction_settings),
    )

    try:
        asyncio.run(run_bot(application))
    except KeyboardInterrupt:
        logger.info("Bot interrupted by user.")
        sys.exit(0)


if __name__ == "__main__":
    main()
