"""Tests for command handlers (/start, /help)."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest

from quizforge.bot.handlers.commands import build_command_handlers, help_command, start_command
from quizforge.quiz.models import QuizConfig


class DummyMessage:
    def __init__(self) -> None:
        self.replies: list[str] = []

    async def reply_text(self, text: str, reply_markup: Any = None) -> None:
        self.replies.append(text)


@pytest.mark.asyncio
async def test_start_shows_intro_and_user_settings() -> None:
    message = DummyMessage()
    context = SimpleNamespace(bot_data={}, user_data={"quiz_config": QuizConfig(num_questions=9)}, args=[])

    await start_command(SimpleNamespace(message=message), context)

    assert message.replies[0].startswith("Quiz Contest Creator")
    assert "• questions=9" in message.replies[0]


@pytest.mark.asyncio
async def test_help_lists_commands() -> None:
    message = DummyMessage()

    await help_command(SimpleNamespace(message=message), SimpleNamespace(bot_data={}, user_data={}))

    assert "/settings" in message.replies[0]
    assert "/start" in message.replies[0]


@pytest.mark.asyncio
async def test_commands_ignore_updates_without_message() -> None:
    await start_command(SimpleNamespace(message=None), SimpleNamespace(bot_data={}, user_data={}))
    await help_command(SimpleNamespace(message=None), SimpleNamespace(bot_data={}, user_data={}))


def test_build_command_handlers() -> None:
    handlers = build_command_handlers()

    assert [set(handler.commands) for handler in handlers] == [{"start"}, {"help"}]
