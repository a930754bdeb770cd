"""Runtime configuration for Telegram bot modules."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping


DEFAULT_MAX_FILE_MB = 20
DEFAULT_PROGRESS_INTERVAL_SECONDS = 1.0
# Bot API refuses downloads above this size.
TELEGRAM_DOWNLOAD_LIMIT_MB = 20


def _parse_positive_int(*, name: str, raw_value: str, minimum: int = 1, maximum: int | None = None) -> int:
    value = int(raw_value)
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    if maximum is not None and value > maximum:
        raise ValueError(f"{name} must be <= {maximum}")
    return value


def _parse_non_negative_float(*, name: str, raw_value: str) -> float:
    value = float(raw_value)
    if value < 0:
        raise ValueError(f"{name} cannot be negative")
    return value


@dataclass(frozen=True, slots=True)
class BotSettings:
    """Validated Telegram bot runtime settings."""

    token: str
    max_file_mb: int = DEFAULT_MAX_FILE_MB
    progress_interval_seconds: float = DEFAULT_PROGRESS_INTERVAL_SECONDS

    @property
    def max_file_bytes(self) -> int:
        return self.max_file_mb * 1024 * 1024

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "BotSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        token = source.get("TELEGRAM_BOT_TOKEN", "").strip()
        if not token:
            raise ValueError("Missing required bot environment variable: TELEGRAM_BOT_TOKEN")

        max_file_raw = source.get("QUIZFORGE_MAX_FILE_MB", str(DEFAULT_MAX_FILE_MB)).strip()
        interval_raw = source.get(
            "QUIZFORGE_PROGRESS_INTERVAL_SECONDS", str(DEFAULT_PROGRESS_INTERVAL_SECONDS)
        ).strip()

        if not max_file_raw:
            raise ValueError("QUIZFORGE_MAX_FILE_MB cannot be empty")
        if not interval_raw:
            raise ValueError("QUIZFORGE_PROGRESS_INTERVAL_SECONDS cannot be empty")

        return cls(
            token=token,
            max_file_mb=_parse_positive_int(
                name="QUIZFORGE_MAX_FILE_MB",
                raw_value=max_file_raw,
                minimum=1,
                maximum=TELEGRAM_DOWNLOAD_LIMIT_MB,
            ),
            progress_interval_seconds=_parse_non_negative_float(
                name="QUIZFORGE_PROGRESS_INTERVAL_SECONDS",
                raw_value=interval_raw,
            ),
        )
