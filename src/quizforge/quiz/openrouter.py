"""OpenRouter chat client that turns extracted text into a quiz."""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
import time
from typing import Any, Callable

from quizforge.quiz.config import GeneratorSettings
from quizforge.quiz.models import Quiz, QuizConfig, QuizFormatError
from quizforge.quiz.prompt import SYSTEM_PROMPT, build_quiz_prompt


logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


@dataclass(slots=True)
class QuizGenerationError(RuntimeError):
    """Domain error raised for failed quiz generation requests or invalid quizzes."""

    model: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} (model={self.model})"


def _build_default_client(settings: GeneratorSettings) -> Any:
    try:
        from openai import OpenAI
    except Exception as exc:  # pragma: no cover - environment-dependent
        raise QuizGenerationError(
            model=settings.model,
            message=f"OpenAI SDK unavailable for OpenRouter client: {exc}",
        ) from exc

    return OpenAI(api_key=settings.api_key, base_url=settings.base_url)


def _is_retryable(exc: Exception) -> bool:
    status_code = getattr(exc, "status_code", None)
    if status_code in _RETRYABLE_STATUS_CODES:
        return True

    if isinstance(exc, (TimeoutError, ConnectionError)):
        return True

    return type(exc).__name__ in {
        "RateLimitError",
        "APITimeoutError",
        "APIConnectionError",
        "InternalServerError",
    }


def _extract_content(response: Any, *, model: str) -> str:
    choices = getattr(response, "choices", None)
    if not isinstance(choices, list) or not choices:
        raise QuizGenerationError(model=model, message="Generation response missing choices")

    first = choices[0]
    message = getattr(first, "message", None)
    content = getattr(message, "content", None) if message is not None else None
    if content is None and isinstance(first, dict):
        message_dict = first.get("message", {})
        if isinstance(message_dict, dict):
            content = message_dict.get("content")

    if isinstance(content, list):
        content = "".join(str(part.get("text", "")) for part in content if isinstance(part, dict))

    text = str(content or "").strip()
    if not text:
        raise QuizGenerationError(model=model, message="Generation response returned empty text")
    return text


def _strip_code_fence(text: str) -> str:
    # Some models wrap JSON in ```json fences despite response_format.
    if not text.startswith("```"):
        return text
    body = text.split("\n", 1)[1] if "\n" in text else ""
    if body.rstrip().endswith("```"):
        body = body.rstrip()[:-3]
    return body.strip()


class QuizGenerator:
    """OpenRouter quiz generation wrapper with response validation and retries."""

    def __init__(
        self,
        settings: GeneratorSettings,
        *,
        client: Any | None = None,
        max_retries: int = 2,
        retry_base_seconds: float = 0.25,
        temperature: float = 0.4,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries cannot be negative")
        if retry_base_seconds < 0:
            raise ValueError("retry_base_seconds cannot be negative")

        self._settings = settings
        self._client = client or _build_default_client(settings)
        self._max_retries = max_retries
        self._retry_base_seconds = retry_base_seconds
        self._temperature = temperature
        self._sleep = sleep

    @property
    def model(self) -> str:
        return self._settings.model

    def generate_quiz(self, context: str, config: QuizConfig) -> Quiz:
        prompt = build_quiz_prompt(context, config, max_context_chars=self._settings.max_context_chars)
        response = self._request_generation(prompt)
        content = _strip_code_fence(_extract_content(response, model=self.model))

        try:
            payload = json.loads(content)
        except json.JSONDecodeError as exc:
            raise QuizGenerationError(
                model=self.model,
                message="Failed to parse or receive valid data from the AI model.",
            ) from exc

        try:
            quiz = Quiz.from_payload(payload, config=config)
        except QuizFormatError as exc:
            raise QuizGenerationError(
                model=self.model,
                message=f"API did not return a valid quiz object: {exc}",
            ) from exc

        logger.info("Generated quiz with %s questions (model=%s)", len(quiz.questions), self.model)
        return quiz

    def _request_generation(self, prompt: str) -> Any:
        attempts = self._max_retries + 1
        last_error: Exception | None = None

        for attempt in range(attempts):
            try:
                return self._client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": prompt},
                    ],
                    temperature=self._temperature,
                    response_format={"type": "json_object"},
                )
            except Exception as exc:  # pragma: no cover - covered via tests with stubs
                last_error = exc
                should_retry = attempt < self._max_retries and _is_retryable(exc)
                if not should_retry:
                    break
                delay = self._retry_base_seconds * (2**attempt)
                logger.warning("Quiz generation attempt %s failed, retrying in %.2fs: %s", attempt + 1, delay, exc)
                self._sleep(delay)

        detail = str(last_error) if last_error is not None else "unknown OpenRouter error"
        raise QuizGenerationError(
            model=self.model,
            message=f"Generation request failed after {attempts} attempt(s): {detail}",
        ) from last_error
