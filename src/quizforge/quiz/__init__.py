"""Quiz models and the LLM-backed quiz generator."""

from .models import Difficulty, Question, QuestionType, Quiz, QuizConfig, QuizFormatError

__all__ = ["Difficulty", "Question", "QuestionType", "Quiz", "QuizConfig", "QuizFormatError"]
