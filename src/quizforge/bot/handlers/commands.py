"""Command handlers for /start and /help."""

from __future__ import annotations

from telegram import Update
from telegram.ext import CommandHandler, ContextTypes

from quizforge.bot.handlers.common import get_user_quiz_config
from quizforge.bot.handlers.renderers import render_quiz_config


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command with usage instructions."""
    if update.message is None:
        return

    text = (
        "Quiz Contest Creator\n\n"
        "Upload a document, chapter, or even a picture, and I will create a quiz contest from it.\n\n"
        "Supported: text-based PDFs, scanned PDFs, images (.png, .jpg), .txt and .md files. "
        "Scanned documents are processed with OCR.\n\n"
        f"{render_quiz_config(get_user_quiz_config(context))}\n\n"
        "Use /settings to change them and /help for details."
    )
    await update.message.reply_text(text)


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command with detailed usage guidance."""
    del context
    if update.message is None:
        return

    text = (
        "Commands:\n\n"
        "/start - introduction and current settings\n"
        "/settings - show quiz settings\n"
        "/settings questions=8 difficulty=Hard time=15 points=50 - change them\n"
        "/help - this message\n\n"
        "Send a file or a photo to generate a quiz. Each question arrives as a quiz poll, "
        "followed by a JSON export of the whole quiz."
    )
    await update.message.reply_text(text)


def build_command_handlers() -> list[CommandHandler]:
    return [
        CommandHandler("start", start_command),
        CommandHandler("help", help_command),
    ]
