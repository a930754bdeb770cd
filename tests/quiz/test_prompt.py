from __future__ import annotations

import pytest

from quizforge.quiz.models import Difficulty, QuizConfig
from quizforge.quiz.prompt import build_quiz_prompt


def test_prompt_includes_config_and_context() -> None:
    prompt = build_quiz_prompt(
        "  Mitochondria produce ATP.  ",
        QuizConfig(num_questions=8, difficulty=Difficulty.HARD, time_limit=15, total_points=50),
    )

    assert "- Number of Questions: 8" in prompt
    assert "- Difficulty Level: Hard" in prompt
    assert "The total time limit should be 15 minutes." in prompt
    assert "The total points for the entire quiz should be 50." in prompt
    assert "---\nMitochondria produce ATP.\n---" in prompt
    assert '"timeLimit"' in prompt
    assert "OCR process" in prompt


def test_prompt_truncates_long_context() -> None:
    prompt = build_quiz_prompt("a" * 50 + "b" * 50, QuizConfig(), max_context_chars=50)

    assert "a" * 50 in prompt
    assert "b" not in prompt.split("---")[1]


def test_prompt_rejects_empty_context() -> None:
    with pytest.raises(ValueError, match="context cannot be empty"):
        build_quiz_prompt(" \n ", QuizConfig())
