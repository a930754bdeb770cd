"""Prompt construction for quiz generation."""

from __future__ import annotations

from quizforge.quiz.models import QuizConfig


SYSTEM_PROMPT = "You are an expert educator and quiz creator. Always answer with a single JSON object."

RESPONSE_SHAPE = """{
  "questions": [
    {
      "type": "multiple-choice" | "true-false",
      "question": "The question text.",
      "options": ["Only for multiple-choice questions"],
      "answer": "The correct answer.",
      "explanation": "A brief explanation for why the answer is correct."
    }
  ],
  "timeLimit": <total time limit in minutes>,
  "totalPoints": <total points the quiz is worth>,
  "difficulty": "<difficulty level>"
}"""


def build_quiz_prompt(context: str, config: QuizConfig, *, max_context_chars: int | None = None) -> str:
    """Return the user prompt asking for a quiz over *context*."""
    text = context.strip()
    if not text:
        raise ValueError("context cannot be empty")
    if max_context_chars is not None and len(text) > max_context_chars:
        text = text[:max_context_chars]

    return "\n".join(
        [
            "Based on the following text, please generate a quiz with the following specifications:",
            f"- Number of Questions: {config.num_questions}",
            f"- Difficulty Level: {config.difficulty.value}",
            "- The quiz should contain a mix of multiple-choice and true/false questions.",
            f"- The total time limit should be {config.time_limit} minutes.",
            f"- The total points for the entire quiz should be {config.total_points}.",
            "",
            "For each question, provide the question text, the options (for multiple-choice), "
            "the correct answer, and a short explanation for the answer.",
            "The questions should test the key concepts and facts presented in the text. "
            "Ensure the answer is one of the provided options for multiple-choice questions.",
            "The provided text may be from an OCR process and could contain small errors or "
            "formatting issues; please interpret it as best as you can.",
            "",
            "Here is the text:",
            "---",
            text,
            "---",
            "",
            "Respond with JSON only, using exactly this shape:",
            RESPONSE_SHAPE,
        ]
    )
