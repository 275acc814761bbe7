"""Intent classification of chat messages."""

from __future__ import annotations

import asyncio

from loguru import logger

from chatwright.core.placeholders import shorten_string
from chatwright.core.types import Classification, CompletionOptions, CompletionService, Message
from chatwright.errors import ClassificationError

CLASSIFIER_SYSTEM_PROMPT = """\
You are a message classification assistant.

Classify the user's message into one of two categories:

"function": The user wants to perform an action.
"knowledge": The user is asking a knowledge question to get help about the app or a specific task.
Respond with only one word: "function" or "knowledge" (in English), regardless of the input language.
Do not provide any additional text.

Examples
User: "Add a new event to my calendar."
Assistant: function

User: "How do I reset my password?"
Assistant: knowledge

User: "Delete all my data."
Assistant: function

User: "What features does this app have?"
Assistant: knowledge

User: "Starte ein neues Projekt."
Assistant: function

User: "Wie kann ich neue Daten eintragen?"
Assistant: knowledge
"""


def parse_classification(text: str | None) -> Classification:
    """Only an exact `function` label selects the function path."""

    if text is not None and text.strip() == "function":
        return "function"
    return "knowledge"


class MessageClassifier:
    """Labels a message as a function request or a knowledge question."""

    def __init__(
        self,
        completion: CompletionService,
        *,
        model: str | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self._completion = completion
        self._model = model
        self._timeout_seconds = timeout_seconds

    async def classify(self, message: str) -> Classification:
        messages = [
            Message(role="system", content=CLASSIFIER_SYSTEM_PROMPT),
            Message(role="user", content=message),
        ]
        options = CompletionOptions(model=self._model, max_tokens=1, temperature=0)
        try:
            async with asyncio.timeout(self._timeout_seconds):
                raw = await self._completion.complete(messages, options)
        except TimeoutError as exc:
            raise ClassificationError(
                f"classifier_timeout: no response within {self._timeout_seconds}s"
            ) from exc
        except Exception as exc:
            logger.exception("classifier.call.error")
            raise ClassificationError(f"classifier_unavailable: {exc!s}") from exc

        label = parse_classification(raw)
        logger.info("classifier.result label={} message={}", label, shorten_string(message, 60))
        return label
