"""Prompt template splitting.

A template is split into blocks by `{{#break ...}}` markers and each block into
messages by `{{#role=<role>}}...{{/role}}` sections:

    {{#role=system}}You are a helpful assistant.{{/role}}
    {{#role=user}}Summarize {{input_text}}{{/role}}
    {{#break output=summary forget=true output_type=json}}
    {{#role=user}}Translate {{summary}}{{/role}}

Every block has an output variable (default `output`), an optional `forget`
flag that discards earlier messages and an output type (`text` or `json`).
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal, Protocol

from loguru import logger

from chatwright.core.arguments import split_argument_tokens
from chatwright.core.placeholders import PlaceholderData, build_message
from chatwright.core.types import Message
from chatwright.errors import TemplateError

OutputType = Literal["text", "json"]

BREAK_RE = re.compile(r"\{\{#break(?P<args>[^}]*)\}\}")
ROLE_BLOCK_RE = re.compile(r"\{\{#role=(?P<role>\w+)\}\}(?P<content>[\s\S]*?)\{\{/role\}\}")
DEFAULT_OUTPUT = "output"


@dataclass(frozen=True)
class RawBlock:
    template: str
    output_var_name: str = DEFAULT_OUTPUT
    forget: bool = False
    output_type: OutputType = "text"


@dataclass(frozen=True)
class MessageBlock:
    messages: list[Message]
    output_var_name: str = DEFAULT_OUTPUT
    forget: bool = False
    output_type: OutputType = "text"


@dataclass(frozen=True)
class TemplatePlaceholder:
    name: str
    default_value: str | None = None
    required_by_user: bool = False


@dataclass(frozen=True)
class PromptTemplate:
    """A stored prompt template and the placeholders it declares."""

    template: str
    placeholders: list[TemplatePlaceholder] = field(default_factory=list)
    name: str | None = None


class TemplateStore(Protocol):
    """Lookup for stored prompt templates by id or by name and category."""

    async def get_template(
        self,
        *,
        prompt_id: str | None = None,
        prompt_name: str | None = None,
        prompt_category: str | None = None,
    ) -> PromptTemplate: ...


def _parse_break_args(raw: str) -> tuple[str, bool, OutputType]:
    values = {token.key: token.value for token in split_argument_tokens(raw)}
    output = values.get("output") or DEFAULT_OUTPUT
    forget = values.get("forget") in {"true", "1"}
    output_type: OutputType = "json" if values.get("output_type") == "json" else "text"
    return output, forget, output_type


def get_blocks_from_template(template: str) -> list[RawBlock]:
    blocks: list[RawBlock] = []
    used: set[str] = set()
    last_index = 0

    for match in BREAK_RE.finditer(template):
        output, forget, output_type = _parse_break_args(match.group("args"))
        logger.debug("template.break output={}", output)
        if output in used:
            raise TemplateError(f"Duplicate output variable name {output} was found in Template.")
        used.add(output)
        blocks.append(
            RawBlock(
                template=template[last_index : match.start()],
                output_var_name=output,
                forget=forget,
                output_type=output_type,
            )
        )
        last_index = match.end()

    if last_index < len(template):
        if DEFAULT_OUTPUT in used:
            raise TemplateError(f"Last-Block: Duplicate output variable name {DEFAULT_OUTPUT} was found in Template.")
        blocks.append(RawBlock(template=template[last_index:]))

    if not blocks:
        blocks.append(RawBlock(template=template))
    return blocks


def generate_message_blocks(
    template: str,
    whitelist: list[str],
    user_data: PlaceholderData,
    default_data: PlaceholderData,
) -> list[MessageBlock]:
    blocks: list[MessageBlock] = []
    for raw in get_blocks_from_template(template):
        messages = [
            build_message(match.group("role"), match.group("content").strip(), whitelist, user_data, default_data)
            for match in ROLE_BLOCK_RE.finditer(raw.template)
        ]
        if not messages:
            messages.append(build_message("user", raw.template.strip(), whitelist, user_data, default_data))
        blocks.append(
            MessageBlock(
                messages=messages,
                output_var_name=raw.output_var_name,
                forget=raw.forget,
                output_type=raw.output_type,
            )
        )
    return blocks


def build_dialog(prompt: PromptTemplate, user_data: Mapping[str, object]) -> list[MessageBlock]:
    """Check required fields and build the message blocks of a stored template."""

    for placeholder in prompt.placeholders:
        if placeholder.required_by_user and placeholder.name not in user_data:
            raise TemplateError(
                f"The field {placeholder.name} is required by the prompt template but was not provided."
            )

    whitelist = [placeholder.name for placeholder in prompt.placeholders]
    defaults = {
        placeholder.name: placeholder.default_value
        for placeholder in prompt.placeholders
        if placeholder.default_value is not None
    }
    return generate_message_blocks(prompt.template, whitelist, user_data, defaults)
