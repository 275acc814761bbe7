"""Runtime logging helpers.

Every record carries the id of the chat turn being processed in
`record["extra"]["chat_id"]`; outside a turn it is `-`.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Literal

import loguru
from loguru import logger
from rich import get_console
from rich.logging import RichHandler

LogProfile = Literal["default", "chat"]

DEFAULT_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<6} | {name}:{function}:{line} | chat={extra[chat_id]} | {message}"
)
NO_CHAT = "-"

_chat_id: ContextVar[str] = ContextVar("chatwright_chat_id", default=NO_CHAT)
_active_config: tuple[LogProfile, str] | None = None


def current_chat_id() -> str:
    return _chat_id.get()


@contextmanager
def chat_context(chat_id: str) -> Iterator[None]:
    """Tag log records emitted inside the block with `chat_id`."""

    token = _chat_id.set(chat_id)
    try:
        yield
    finally:
        _chat_id.reset(token)


def _tag_chat(record: loguru.Record) -> None:
    record["extra"].setdefault("chat_id", current_chat_id())


def _sink_options(profile: LogProfile) -> dict[str, Any]:
    if profile == "chat":
        # Rich renders level and markup itself.
        handler = RichHandler(
            console=get_console(),
            show_time=False,
            show_path=False,
            markup=False,
            rich_tracebacks=False,
        )
        return {"sink": handler, "format": "[{extra[chat_id]}] {message}"}
    return {"sink": sys.stderr, "format": DEFAULT_FORMAT}


def configure_logging(*, profile: LogProfile = "default", level: str | None = None) -> None:
    """Install a single loguru sink for `profile`; repeating the same profile and level is a no-op."""

    global _active_config
    resolved_level = (level or os.getenv("CHATWRIGHT_LOG_LEVEL") or "INFO").upper()
    if _active_config == (profile, resolved_level):
        return

    logger.remove()
    logger.configure(patcher=_tag_chat)
    logger.add(level=resolved_level, backtrace=False, diagnose=False, **_sink_options(profile))
    _active_config = (profile, resolved_level)
    logger.debug("logging.configured profile={} level={}", profile, resolved_level)
