"""Republic integration helpers."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

from loguru import logger
from republic import LLM

from chatwright.config import Settings
from chatwright.core.types import CompletionOptions, Message
from chatwright.errors import CompletionServiceError


def build_llm(settings: Settings, model: str | None = None) -> LLM:
    """Build a Republic LLM client for one model."""

    return LLM(
        model or settings.require_model(),
        api_key=settings.api_key,
        api_base=settings.api_base,
    )


def extract_text(response: Any) -> str:
    if isinstance(response, str):
        return response
    choices = getattr(response, "choices", None)
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    if message is None:
        return ""
    return getattr(message, "content", "") or ""


class RepublicCompletionService:
    """Completion service backed by Republic's chat API."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._clients: dict[str, LLM] = {}

    def _client(self, model: str | None) -> LLM:
        resolved = model or self._settings.require_model()
        client = self._clients.get(resolved)
        if client is None:
            client = build_llm(self._settings, resolved)
            self._clients[resolved] = client
        return client

    async def complete(self, messages: Sequence[Message], options: CompletionOptions) -> str:
        llm = self._client(options.model)
        kwargs: dict[str, Any] = {
            "messages": [message.to_dict() for message in messages],
            "max_tokens": options.max_tokens or self._settings.max_tokens,
        }
        if options.temperature is not None:
            kwargs["temperature"] = options.temperature
        try:
            response = await asyncio.to_thread(llm.chat.raw, **kwargs)
        except Exception as exc:
            logger.exception("completion.call.error model={}", options.model)
            raise CompletionServiceError(f"completion_call_error: {exc!s}") from exc
        return extract_text(response)
