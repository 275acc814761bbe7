"""Directive resolver interfaces."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol

from chatwright.core.types import FileSourceType, KnowledgebaseQuery, SimilarToQuery
from chatwright.errors import ResolverError

SourceType = Literal["knowledge-entry", "knowledge-chunk", "file", "url"]


@dataclass(frozen=True)
class Source:
    """Where a piece of resolved context came from, for citation in the UI."""

    type: SourceType
    id: str
    label: str
    external: bool = False

    def as_dict(self) -> dict[str, object]:
        return {"type": self.type, "id": self.id, "label": self.label, "external": self.external}


@dataclass(frozen=True)
class ResolvedContent:
    """Resolved text together with the sources it was built from."""

    text: str
    sources: tuple[Source, ...] = ()


ResolverOutput = str | bytes | ResolvedContent


def as_resolved_content(output: object, default_sources: tuple[Source, ...] = ()) -> ResolvedContent:
    """Normalize whatever a resolver returned; anything but text, bytes or `ResolvedContent` is a resolver error."""

    if isinstance(output, ResolvedContent):
        return output if output.sources else ResolvedContent(output.text, default_sources)
    if isinstance(output, str):
        return ResolvedContent(output, default_sources)
    if isinstance(output, bytes):
        return ResolvedContent(output.decode("utf-8", errors="replace"), default_sources)
    raise ResolverError(f"resolver returned {type(output).__name__}")


class UrlResolver(Protocol):
    async def fetch(self, url: str) -> str | ResolvedContent: ...


class KnowledgeBaseResolver(Protocol):
    async def lookup(self, query: KnowledgebaseQuery) -> str | ResolvedContent: ...


class SimilarityResolver(Protocol):
    async def search(self, query: SimilarToQuery, search_text: str) -> str | ResolvedContent: ...


class FileResolver(Protocol):
    async def fetch(self, id: str, source: FileSourceType, bucket: str) -> ResolverOutput: ...


@dataclass(frozen=True)
class DirectiveResolvers:
    """The resolver back ends available to one orchestrator; any may be absent."""

    url: UrlResolver | None = None
    knowledgebase: KnowledgeBaseResolver | None = None
    similar_to: SimilarityResolver | None = None
    file: FileResolver | None = None
