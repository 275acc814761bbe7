"""Extraction of a proposed function call from a user message."""

from __future__ import annotations

import asyncio
import json
import re
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from chatwright.core.types import CompletionOptions, CompletionService, Message
from chatwright.errors import CompletionServiceError
from chatwright.functions.registry import FunctionRegistry

UNKNOWN_FUNCTION = "unknown"
CODE_FENCE_RE = re.compile(r"```(?:json)?\s*(?P<body>[\s\S]*?)```")

PROPOSAL_SYSTEM_PROMPT = """\
Identify the function the user intends to execute and extract the necessary parameters from the user's input.
If any required parameters are missing, list them clearly. Always return the result in JSON format.

# Steps

1. **Identify the Function**: Parse the user's message and identify the relevant function from the list below.
2. **Extract Parameters**: Extract all known parameters for the identified function. Infer string, number or
   null types from the input.
3. **Check for Missing Parameters**: List every required parameter the user has not supplied.
4. **Output in JSON Format**: Return a single JSON object. If no function is detected, use "unknown".

# Output Format

```json
{
  "functionName": "string",
  "missingFields": ["string"],
  "knownFields": {"parameterName": "string | number | null"}
}
```

# Functions

"""


class FunctionProposal(BaseModel):
    """The model's reading of which function to call with which arguments."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    function_name: str = UNKNOWN_FUNCTION
    missing_fields: list[str] = Field(default_factory=list)
    known_fields: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_unknown(self) -> bool:
        return not self.function_name or self.function_name == UNKNOWN_FUNCTION


def build_proposal_system_prompt(registry: FunctionRegistry) -> str:
    blocks = [PROPOSAL_SYSTEM_PROMPT + json.dumps(registry.tool_specs(), ensure_ascii=False, indent=2)]
    examples = registry.qa_examples()
    if examples:
        blocks.append("# Examples")
        blocks.extend(
            f"### User Input:\n{example.q}\n\n### Expected Output:\n{example.a.strip()}" for example in examples
        )
    return "\n\n".join(blocks)


def parse_function_proposal(text: str | None) -> FunctionProposal | None:
    """Parse a JSON proposal, optionally wrapped in a code fence; `None` when malformed."""

    if not text:
        return None
    fenced = CODE_FENCE_RE.search(text)
    body = fenced.group("body") if fenced is not None else text
    try:
        data = json.loads(body.strip())
    except json.JSONDecodeError:
        logger.warning("proposal.parse.invalid_json text={}", body[:120])
        return None
    if not isinstance(data, dict):
        return None
    try:
        return FunctionProposal.model_validate(data)
    except ValidationError:
        logger.warning("proposal.parse.invalid_shape text={}", body[:120])
        return None


class FunctionProposer:
    """Asks the completion service which registered function a message calls."""

    def __init__(
        self,
        completion: CompletionService,
        registry: FunctionRegistry,
        *,
        model: str | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self._completion = completion
        self._registry = registry
        self._model = model
        self._timeout_seconds = timeout_seconds

    async def propose(self, message: str) -> FunctionProposal | None:
        messages = [
            Message(role="system", content=build_proposal_system_prompt(self._registry)),
            Message(role="user", content=message),
        ]
        options = CompletionOptions(model=self._model, temperature=0)
        try:
            async with asyncio.timeout(self._timeout_seconds):
                raw = await self._completion.complete(messages, options)
        except TimeoutError as exc:
            raise CompletionServiceError(
                f"proposal_timeout: no response within {self._timeout_seconds}s"
            ) from exc
        except Exception as exc:
            logger.exception("proposal.call.error")
            raise CompletionServiceError(f"proposal_unavailable: {exc!s}") from exc
        return parse_function_proposal(raw)
