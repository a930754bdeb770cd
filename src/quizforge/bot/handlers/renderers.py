"""Rendering helpers that fit quizzes into Telegram message and poll limits."""

from __future__ import annotations

from dataclasses import dataclass

from quizforge.quiz.models import Quiz, QuizConfig


# Bot API limits for quiz polls.
MAX_POLL_QUESTION_CHARS = 300
MAX_POLL_OPTION_CHARS = 100
MAX_POLL_EXPLANATION_CHARS = 200
MAX_POLL_OPTIONS = 10


@dataclass(frozen=True, slots=True)
class QuizPoll:
    question: str
    options: list[str]
    correct_option_id: int
    explanation: str | None


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1].rstrip() + "…"


def render_quiz_polls(quiz: Quiz) -> list[QuizPoll]:
    polls: list[QuizPoll] = []
    total = len(quiz.questions)

    for idx, question in enumerate(quiz.questions, 1):
        choices = question.choices
        correct = choices.index(question.answer)
        if len(choices) > MAX_POLL_OPTIONS:
            kept = choices[:MAX_POLL_OPTIONS]
            if correct >= MAX_POLL_OPTIONS:
                kept[-1] = question.answer
                correct = MAX_POLL_OPTIONS - 1
            choices = kept

        explanation = question.explanation.strip()
        polls.append(
            QuizPoll(
                question=_truncate(f"{idx}/{total}. {question.question}", MAX_POLL_QUESTION_CHARS),
                options=[_truncate(choice, MAX_POLL_OPTION_CHARS) for choice in choices],
                correct_option_id=correct,
                explanation=_truncate(explanation, MAX_POLL_EXPLANATION_CHARS) if explanation else None,
            )
        )
    return polls


def render_quiz_header(quiz: Quiz, *, elapsed_seconds: float | None = None) -> str:
    lines = [
        "Quiz Contest",
        "",
        f"Questions: {len(quiz.questions)}",
        f"Time limit: {quiz.time_limit} min",
        f"Total points: {quiz.total_points}",
        f"Difficulty: {quiz.difficulty}",
    ]
    if elapsed_seconds is not None:
        lines.append(f"Generated in {elapsed_seconds:.0f}s")
    return "\n".join(lines)


def render_quiz_config(config: QuizConfig) -> str:
    return "\n".join(
        [
            "Quiz settings:",
            f"• questions={config.num_questions}",
            f"• difficulty={config.difficulty.value}",
            f"• time={config.time_limit} (minutes)",
            f"• points={config.total_points}",
        ]
    )
