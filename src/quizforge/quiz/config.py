"""Runtime configuration for the quiz generator."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping


DEFAULT_OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_OPENROUTER_CHAT_MODEL = "openai/gpt-4o-mini"
DEFAULT_MAX_CONTEXT_CHARS = 60000


@dataclass(frozen=True, slots=True)
class GeneratorSettings:
    """Validated OpenRouter settings used by the quiz generator."""

    api_key: str
    model: str = DEFAULT_OPENROUTER_CHAT_MODEL
    base_url: str = DEFAULT_OPENROUTER_BASE_URL
    max_context_chars: int = DEFAULT_MAX_CONTEXT_CHARS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "GeneratorSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        api_key = source.get("OPENROUTER_API_KEY", "").strip()
        model = source.get("OPENROUTER_CHAT_MODEL", DEFAULT_OPENROUTER_CHAT_MODEL).strip()
        base_url = source.get("OPENROUTER_BASE_URL", DEFAULT_OPENROUTER_BASE_URL).strip()
        max_context_raw = source.get("QUIZFORGE_MAX_CONTEXT_CHARS", str(DEFAULT_MAX_CONTEXT_CHARS)).strip()

        if not api_key:
            raise ValueError("Missing required generator environment variable: OPENROUTER_API_KEY")
        if not model:
            raise ValueError("OPENROUTER_CHAT_MODEL cannot be empty")
        if not base_url:
            raise ValueError("OPENROUTER_BASE_URL cannot be empty")
        if not (base_url.startswith("http://") or base_url.startswith("https://")):
            raise ValueError("OPENROUTER_BASE_URL must start with http:// or https://")

        max_context_chars = int(max_context_raw)
        if max_context_chars < 1000:
            raise ValueError("QUIZFORGE_MAX_CONTEXT_CHARS must be >= 1000")

        return cls(
            api_key=api_key,
            model=model,
            base_url=base_url.rstrip("/"),
            max_context_chars=max_context_chars,
        )
