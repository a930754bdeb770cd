"""Telegram handler builders."""

from .commands import build_command_handlers
from .settings import build_settings_handler
from .upload import build_upload_handler

__all__ = ["build_command_handlers", "build_settings_handler", "build_upload_handler"]
