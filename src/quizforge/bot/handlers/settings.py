"""/settings command for the per-user quiz configuration."""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import Sequence

from telegram import Update
from telegram.ext import CommandHandler, ContextTypes

from quizforge.bot.handlers.common import ConfigError, get_user_quiz_config, set_user_quiz_config
from quizforge.bot.handlers.renderers import render_quiz_config
from quizforge.quiz.models import MAX_NUM_QUESTIONS, Difficulty, QuizConfig


logger = logging.getLogger(__name__)

SETTINGS_USAGE = (
    "Usage: /settings questions=6 difficulty=Medium time=10 points=100\n"
    f"questions: 1-{MAX_NUM_QUESTIONS}, difficulty: Easy/Medium/Hard, "
    "time: minutes >= 1, points: >= 1"
)

_FIELD_ALIASES = {
    "questions": "num_questions",
    "num_questions": "num_questions",
    "difficulty": "difficulty",
    "time": "time_limit",
    "time_limit": "time_limit",
    "points": "total_points",
    "total_points": "total_points",
}


def parse_settings_args(args: Sequence[str], current: QuizConfig) -> QuizConfig:
    """Apply ``key=value`` tokens to *current*; raises ValueError on bad input."""
    changes: dict[str, object] = {}
    for token in args:
        if "=" not in token:
            raise ValueError(f"Expected key=value, got {token!r}")
        key, raw_value = token.split("=", 1)
        field = _FIELD_ALIASES.get(key.strip().casefold())
        if field is None:
            raise ValueError(f"Unknown setting: {key.strip()!r}")
        value = raw_value.strip()
        if field == "difficulty":
            changes[field] = Difficulty.parse(value)
        else:
            try:
                changes[field] = int(value)
            except ValueError as exc:
                raise ValueError(f"{key.strip()} must be an integer") from exc
    return replace(current, **changes)


async def settings_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Show or update the quiz settings used for the next upload."""
    if update.message is None:
        logger.warning("/settings skipped: missing message update")
        return

    current = get_user_quiz_config(context)
    args = list(context.args or [])
    if not args:
        await update.message.reply_text(f"{render_quiz_config(current)}\n\n{SETTINGS_USAGE}")
        return

    try:
        updated = parse_settings_args(args, current)
    except ValueError as error:
        await update.message.reply_text(f"Settings not changed: {error}\n\n{SETTINGS_USAGE}")
        return

    try:
        set_user_quiz_config(context, updated)
    except ConfigError as error:
        logger.error("/settings failed due to configuration error: %s", error)
        await update.message.reply_text("Settings are temporarily unavailable. Please try again later.")
        return

    await update.message.reply_text(f"Saved.\n\n{render_quiz_config(updated)}")


def build_settings_handler() -> CommandHandler:
    return CommandHandler("settings", settings_command)
