"""Shared core dataclasses."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Literal, Protocol

from chatwright.core.arguments import ArgumentMap, parse_arguments

Role = Literal["system", "user", "assistant"]
Classification = Literal["function", "knowledge"]


@dataclass(frozen=True)
class Message:
    """One chat message with a normalized role."""

    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class DirectiveOccurrence:
    """One directive found in a template."""

    name: str
    raw_args: str
    full_match: str
    span: tuple[int, int]
    commented: bool = False
    comment: str | None = None

    @property
    def args(self) -> ArgumentMap:
        return parse_arguments(self.raw_args)


class FileSourceType(str, Enum):
    DB = "db"
    LOCAL = "local"


@dataclass(frozen=True)
class UrlQuery:
    full_match: str
    url: str
    comment: str | None = None


@dataclass(frozen=True)
class KnowledgebaseQuery:
    full_match: str
    id: list[str] | None = None
    category1: list[str] | None = None
    category2: list[str] | None = None
    category3: list[str] | None = None
    names: list[str] | None = None


@dataclass(frozen=True)
class SimilarToQuery:
    full_match: str
    search_for: list[str] | None = None
    search_for_variable: str | None = None
    id: list[str] | None = None
    category1: list[str] | None = None
    category2: list[str] | None = None
    category3: list[str] | None = None
    names: list[str] | None = None
    count: int | None = None
    before: int | None = None
    after: int | None = None


@dataclass(frozen=True)
class FileQuery:
    full_match: str
    id: str
    file_source: FileSourceType = FileSourceType.DB
    bucket: str = "default"


@dataclass(frozen=True)
class CompletionOptions:
    """Per-call options for the completion service."""

    model: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None


class CompletionService(Protocol):
    """Opaque text-completion collaborator."""

    async def complete(self, messages: Sequence[Message], options: CompletionOptions) -> str: ...
