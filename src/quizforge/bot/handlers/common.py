"""Shared bot handler context resolvers."""

from __future__ import annotations

from telegram.ext import ContextTypes

from quizforge.extraction.extractor import TextExtractor
from quizforge.quiz.models import QuizConfig
from quizforge.service import QuizSource


USER_CONFIG_KEY = "quiz_config"


class ConfigError(RuntimeError):
    """Raised when required handler configuration is missing or invalid."""


def _resolve_required(context: ContextTypes.DEFAULT_TYPE, key: str) -> object:
    value = context.bot_data.get(key)
    if value is None:
        raise ConfigError(f"{key} missing from context.bot_data['{key}']")
    return value


def _resolve_generator(context: ContextTypes.DEFAULT_TYPE) -> QuizSource:
    generator = _resolve_required(context, "generator")
    if not callable(getattr(generator, "generate_quiz", None)):
        raise ConfigError("context.bot_data['generator'] must provide generate_quiz()")
    return generator  # type: ignore[return-value]


def _resolve_extractor(context: ContextTypes.DEFAULT_TYPE) -> TextExtractor:
    extractor = _resolve_required(context, "extractor")
    if not isinstance(extractor, TextExtractor):
        raise ConfigError("context.bot_data['extractor'] must be a TextExtractor")
    return extractor


def _resolve_max_file_bytes(context: ContextTypes.DEFAULT_TYPE) -> int:
    return int(_resolve_required(context, "max_file_bytes"))


def _resolve_progress_interval(context: ContextTypes.DEFAULT_TYPE) -> float:
    return float(context.bot_data.get("progress_interval_seconds", 1.0))


def get_user_quiz_config(context: ContextTypes.DEFAULT_TYPE) -> QuizConfig:
    user_data = context.user_data
    if user_data is None:
        return QuizConfig()
    config = user_data.get(USER_CONFIG_KEY)
    if isinstance(config, QuizConfig):
        return config
    return QuizConfig()


def set_user_quiz_config(context: ContextTypes.DEFAULT_TYPE, config: QuizConfig) -> None:
    if context.user_data is None:
        raise ConfigError("user_data is unavailable for this update")
    context.user_data[USER_CONFIG_KEY] = config
