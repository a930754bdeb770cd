"""Quiz configuration and the quiz document returned by the generator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


DEFAULT_NUM_QUESTIONS = 6
DEFAULT_TIME_LIMIT_MINUTES = 10
DEFAULT_TOTAL_POINTS = 100
MAX_NUM_QUESTIONS = 20
EXPORT_TITLE = "Generated Quiz Contest"
EXPORT_FILENAME = "quiz-contest.json"

TRUE_FALSE_OPTIONS = ("True", "False")


class QuizFormatError(ValueError):
    """Raised when a quiz payload does not have the expected shape."""


class QuestionType(Enum):
    MULTIPLE_CHOICE = "multiple-choice"
    TRUE_FALSE = "true-false"


class Difficulty(Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @classmethod
    def parse(cls, raw: str) -> "Difficulty":
        value = raw.strip().casefold()
        for member in cls:
            if member.value.casefold() == value:
                return member
        allowed = ", ".join(member.value for member in cls)
        raise ValueError(f"difficulty must be one of: {allowed}")


@dataclass(frozen=True, slots=True)
class QuizConfig:
    """User-selected quiz parameters sent alongside the extracted text."""

    num_questions: int = DEFAULT_NUM_QUESTIONS
    difficulty: Difficulty = Difficulty.MEDIUM
    time_limit: int = DEFAULT_TIME_LIMIT_MINUTES
    total_points: int = DEFAULT_TOTAL_POINTS

    def __post_init__(self) -> None:
        if not 1 <= self.num_questions <= MAX_NUM_QUESTIONS:
            raise ValueError(f"num_questions must be between 1 and {MAX_NUM_QUESTIONS}")
        if self.time_limit < 1:
            raise ValueError("time_limit must be >= 1")
        if self.total_points < 1:
            raise ValueError("total_points must be >= 1")
        if not isinstance(self.difficulty, Difficulty):
            raise ValueError("difficulty must be a Difficulty")


def _normalize_true_false(answer: str) -> str:
    lowered = answer.strip().casefold()
    for option in TRUE_FALSE_OPTIONS:
        if lowered == option.casefold():
            return option
    raise QuizFormatError(f"true/false answer must be True or False, got {answer!r}")


@dataclass(slots=True)
class Question:
    type: QuestionType
    question: str
    answer: str
    explanation: str
    options: list[str] = field(default_factory=list)

    @property
    def choices(self) -> list[str]:
        """Options presented to the quiz taker."""
        if self.type is QuestionType.TRUE_FALSE:
            return list(TRUE_FALSE_OPTIONS)
        return list(self.options)

    @classmethod
    def from_payload(cls, payload: Any) -> "Question":
        if not isinstance(payload, dict):
            raise QuizFormatError("question entry must be an object")

        try:
            question_type = QuestionType(str(payload.get("type", "")).strip())
        except ValueError as exc:
            raise QuizFormatError(f"unknown question type: {payload.get('type')!r}") from exc

        text = str(payload.get("question") or "").strip()
        answer = str(payload.get("answer") or "").strip()
        explanation = str(payload.get("explanation") or "").strip()
        if not text:
            raise QuizFormatError("question text is missing")
        if not answer:
            raise QuizFormatError("question answer is missing")

        options: list[str] = []
        if question_type is QuestionType.MULTIPLE_CHOICE:
            raw_options = payload.get("options")
            if not isinstance(raw_options, list):
                raise QuizFormatError("multiple-choice question needs a list of options")
            options = [choice for choice in (str(option).strip() for option in raw_options) if choice]
            if len(options) < 2:
                raise QuizFormatError("multiple-choice question needs at least two non-empty options")
            if answer not in options:
                raise QuizFormatError(f"answer {answer!r} is not one of the options")
        else:
            answer = _normalize_true_false(answer)

        return cls(type=question_type, question=text, answer=answer, explanation=explanation, options=options)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.type.value, "question": self.question}
        if self.type is QuestionType.MULTIPLE_CHOICE:
            payload["options"] = list(self.options)
        payload["answer"] = self.answer
        payload["explanation"] = self.explanation
        return payload


@dataclass(slots=True)
class Quiz:
    questions: list[Question]
    time_limit: int
    total_points: int
    difficulty: str

    @classmethod
    def from_payload(cls, payload: Any, *, config: QuizConfig | None = None) -> "Quiz":
        """Build a quiz from the generator's JSON object.

        Missing echo fields fall back to *config* when one is given.
        """
        if not isinstance(payload, dict):
            raise QuizFormatError("quiz payload must be an object")
        raw_questions = payload.get("questions")
        if not isinstance(raw_questions, list):
            raise QuizFormatError("quiz payload missing list 'questions'")
        if not raw_questions:
            raise QuizFormatError("quiz payload has no questions")

        questions = [Question.from_payload(item) for item in raw_questions]

        def _echo_int(key: str, fallback: int | None) -> int:
            raw = payload.get(key, fallback)
            try:
                return int(raw)
            except (TypeError, ValueError) as exc:
                raise QuizFormatError(f"quiz payload has invalid {key!r}") from exc

        difficulty = payload.get("difficulty") or (config.difficulty.value if config else None)
        if not difficulty:
            raise QuizFormatError("quiz payload missing 'difficulty'")

        return cls(
            questions=questions,
            time_limit=_echo_int("timeLimit", config.time_limit if config else None),
            total_points=_echo_int("totalPoints", config.total_points if config else None),
            difficulty=str(difficulty),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "questions": [question.to_payload() for question in self.questions],
            "timeLimit": self.time_limit,
            "totalPoints": self.total_points,
            "difficulty": self.difficulty,
        }

    def to_export_payload(self) -> dict[str, Any]:
        return {"title": EXPORT_TITLE, **self.to_payload()}
