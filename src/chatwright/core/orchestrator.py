"""Response orchestration for one chat turn."""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from loguru import logger

from chatwright.config import Settings
from chatwright.contracts import ChatTurnInput, ChatTurnOutput
from chatwright.core.classifier import MessageClassifier
from chatwright.core.directives import (
    DIRECTIVE_FAMILIES,
    file_query_of,
    knowledgebase_query_of,
    scan_all_directives,
    similar_to_query_of,
    url_of,
)
from chatwright.core.placeholders import shorten_string, substitute
from chatwright.core.templates import TemplateStore, build_dialog
from chatwright.core.types import CompletionOptions, CompletionService, DirectiveOccurrence, Message
from chatwright.errors import CompletionServiceError, ResolverError
from chatwright.functions.proposal import FunctionProposer
from chatwright.functions.registry import FunctionRegistry, PartialCallResult
from chatwright.logging_utils import chat_context
from chatwright.render import MarkdownRender, form_from_schema
from chatwright.resolvers.base import DirectiveResolvers, ResolvedContent, Source, as_resolved_content

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant. Answer the user's question using the context in their message. "
    "If a part of the context is marked as unresolved, say that the information was not available."
)
DEFAULT_SEARCH_VARIABLE = "user_input"


@dataclass(frozen=True)
class DirectiveResolution:
    """Resolved text for one directive occurrence, or the reason it failed."""

    occurrence: DirectiveOccurrence
    text: str | None = None
    error: str | None = None
    sources: tuple[Source, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None

    def replacement(self) -> str:
        if self.error is not None:
            return f"[unresolved {self.occurrence.name}: {self.error}]"
        return self.text or ""


def splice_resolutions(content: str, resolutions: Iterable[DirectiveResolution]) -> str:
    """Replace each occurrence span with its resolved text, left to right."""

    parts: list[str] = []
    cursor = 0
    for resolution in sorted(resolutions, key=lambda item: item.occurrence.span[0]):
        start, end = resolution.occurrence.span
        parts.append(content[cursor:start])
        parts.append(resolution.replacement())
        cursor = end
    parts.append(content[cursor:])
    return "".join(parts)


class ResponseOrchestrator:
    """Drives a message through resolution, classification and dispatch or synthesis."""

    def __init__(
        self,
        completion: CompletionService,
        registry: FunctionRegistry,
        resolvers: DirectiveResolvers | None = None,
        *,
        model: str | None = None,
        classifier_model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        resolver_timeout_seconds: float | None = None,
        completion_timeout_seconds: float | None = None,
        template_store: TemplateStore | None = None,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ) -> None:
        self._completion = completion
        self._registry = registry
        self._resolvers = resolvers or DirectiveResolvers()
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._resolver_timeout_seconds = resolver_timeout_seconds
        self._completion_timeout_seconds = completion_timeout_seconds
        self._template_store = template_store
        self._system_prompt = system_prompt.strip()
        self._classifier = MessageClassifier(
            completion,
            model=classifier_model or model,
            timeout_seconds=completion_timeout_seconds,
        )
        self._proposer = FunctionProposer(
            completion,
            registry,
            model=model,
            timeout_seconds=completion_timeout_seconds,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        completion: CompletionService,
        registry: FunctionRegistry,
        resolvers: DirectiveResolvers | None = None,
        *,
        template_store: TemplateStore | None = None,
    ) -> ResponseOrchestrator:
        return cls(
            completion,
            registry,
            resolvers,
            model=settings.model,
            classifier_model=settings.classifier_model,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
            resolver_timeout_seconds=settings.resolver_timeout_seconds,
            completion_timeout_seconds=settings.completion_timeout_seconds,
            template_store=template_store,
        )

    async def respond_to(self, message: str, turn: ChatTurnInput | None = None) -> ChatTurnOutput:
        turn = turn or ChatTurnInput(user_message=message)
        chat_id = turn.chat_id or uuid.uuid4().hex
        with chat_context(chat_id):
            logger.info("orchestrator.turn.start message={}", shorten_string(message, 60))
            content = substitute(message, turn.variables.keys(), turn.variables, {})

            occurrences = scan_all_directives(content, DIRECTIVE_FAMILIES)
            logger.info("orchestrator.scan directives={}", len(occurrences))
            resolutions = await self.resolve_all(occurrences, turn.variables)
            content = splice_resolutions(content, resolutions)

            label = await self._classifier.classify(content)
            meta: dict[str, Any] = {
                "classification": label,
                "directives": {
                    "resolved": [item.occurrence.name for item in resolutions if item.ok],
                    "failed": [
                        {"name": item.occurrence.name, "reason": item.error} for item in resolutions if not item.ok
                    ],
                },
            }
            sources = [source.as_dict() for item in resolutions for source in item.sources]
            if sources:
                meta["sources"] = sources
            if turn.trigger is not None:
                meta["trigger"] = turn.trigger.model_dump()

            if label == "function":
                output = await self._dispatch(chat_id, content, meta)
                if output is not None:
                    return output
            return await self._synthesize(chat_id, content, turn, meta)

    async def resolve_all(
        self,
        occurrences: Sequence[DirectiveOccurrence],
        variables: Mapping[str, object] | None = None,
    ) -> list[DirectiveResolution]:
        """Resolve every occurrence concurrently; failures become part of the result."""

        variables = variables or {}
        return list(await asyncio.gather(*(self._resolve(occurrence, variables) for occurrence in occurrences)))

    async def _resolve(self, occurrence: DirectiveOccurrence, variables: Mapping[str, object]) -> DirectiveResolution:
        try:
            async with asyncio.timeout(self._resolver_timeout_seconds):
                content = await self._resolve_occurrence(occurrence, variables)
        except TimeoutError:
            logger.warning("resolver.timeout name={} after={}s", occurrence.name, self._resolver_timeout_seconds)
            return DirectiveResolution(occurrence, error=f"timeout after {self._resolver_timeout_seconds}s")
        except ResolverError as exc:
            logger.warning("resolver.failed name={} reason={}", occurrence.name, exc)
            return DirectiveResolution(occurrence, error=str(exc))
        except Exception as exc:
            logger.exception("resolver.error name={}", occurrence.name)
            return DirectiveResolution(occurrence, error=f"{type(exc).__name__}: {exc!s}")
        logger.info(
            "resolver.done name={} chars={} sources={}", occurrence.name, len(content.text), len(content.sources)
        )
        return DirectiveResolution(occurrence, text=content.text, sources=content.sources)

    async def _resolve_occurrence(
        self,
        occurrence: DirectiveOccurrence,
        variables: Mapping[str, object],
    ) -> ResolvedContent:
        resolvers = self._resolvers
        if occurrence.name == "url":
            url = url_of(occurrence)
            if url is None:
                raise ResolverError("missing url")
            if resolvers.url is None:
                raise ResolverError("no url resolver configured")
            return as_resolved_content(await resolvers.url.fetch(url))

        if occurrence.name == "knowledgebase":
            kb_query = knowledgebase_query_of(occurrence)
            if kb_query is None:
                raise ResolverError("empty knowledgebase query")
            if resolvers.knowledgebase is None:
                raise ResolverError("no knowledgebase resolver configured")
            return as_resolved_content(await resolvers.knowledgebase.lookup(kb_query))

        if occurrence.name == "similar_to":
            similar_query = similar_to_query_of(occurrence)
            if similar_query is None:
                raise ResolverError("empty similar_to query")
            if similar_query.search_for:
                search_text = " ".join(similar_query.search_for)
            else:
                value = variables.get(similar_query.search_for_variable or DEFAULT_SEARCH_VARIABLE)
                search_text = "" if value is None else str(value)
            if not search_text:
                raise ResolverError("no search text")
            if resolvers.similar_to is None:
                raise ResolverError("no similar_to resolver configured")
            return as_resolved_content(await resolvers.similar_to.search(similar_query, search_text))

        if occurrence.name == "file":
            file_query = file_query_of(occurrence)
            if file_query is None:
                raise ResolverError("missing file id")
            if resolvers.file is None:
                raise ResolverError("no file resolver configured")
            data = await resolvers.file.fetch(file_query.id, file_query.file_source, file_query.bucket)
            return as_resolved_content(
                data,
                default_sources=(Source(type="file", id=file_query.id, label=file_query.id),),
            )

        raise ResolverError(f"unknown directive: {occurrence.name}")

    async def _dispatch(self, chat_id: str, content: str, meta: dict[str, Any]) -> ChatTurnOutput | None:
        proposal = await self._proposer.propose(content)
        if proposal is None or proposal.is_unknown:
            logger.info("orchestrator.dispatch.fallback reason={}", "unparsed" if proposal is None else "unknown")
            meta["function"] = None
            return None

        result = await self._registry.dispatch(proposal.function_name, proposal.known_fields)
        if isinstance(result, PartialCallResult):
            definition = self._registry.get(result.function_name)
            schema = definition.json_schema if definition is not None else {}
            meta["function"] = {
                "name": result.function_name,
                "missingFields": list(result.missing_fields),
                "knownFields": result.known_fields,
            }
            return ChatTurnOutput(
                chat_id=chat_id,
                message=(
                    f"To run {result.function_name} I still need: {', '.join(result.missing_fields)}. "
                    "Please provide the missing values."
                ),
                meta=meta,
                finished=False,
                render=form_from_schema(schema, result.missing_fields, result.known_fields),
            )

        payload = result.as_dict()
        meta["function"] = {"name": result.function_name, "result": payload}
        output = result.output
        if isinstance(output, Mapping) and isinstance(output.get("message"), str):
            text = output["message"]
        else:
            text = f"{result.function_name} completed."
        return ChatTurnOutput(
            chat_id=chat_id,
            message=text,
            meta=meta,
            finished=True,
            render=result.ui_response,
        )

    async def _system_messages(self, turn: ChatTurnInput) -> list[Message]:
        initiate = turn.initiate_template
        if initiate is None or self._template_store is None:
            return [Message(role="system", content=self._system_prompt)]
        prompt = await self._template_store.get_template(
            prompt_id=initiate.prompt_id,
            prompt_name=initiate.prompt_name,
            prompt_category=initiate.prompt_category,
        )
        blocks = build_dialog(prompt, turn.variables)
        messages = [message for block in blocks for message in block.messages if message.role == "system"]
        logger.debug("orchestrator.template name={} system_messages={}", prompt.name, len(messages))
        return messages or [Message(role="system", content=self._system_prompt)]

    async def _synthesize(
        self,
        chat_id: str,
        content: str,
        turn: ChatTurnInput,
        meta: dict[str, Any],
    ) -> ChatTurnOutput:
        messages = [*await self._system_messages(turn), Message(role="user", content=content)]
        llm_options = turn.llm_options
        options = CompletionOptions(
            model=(llm_options.model if llm_options else None) or self._model,
            max_tokens=(llm_options.max_tokens if llm_options else None) or self._max_tokens,
            temperature=(
                llm_options.temperature
                if llm_options is not None and llm_options.temperature is not None
                else self._temperature
            ),
        )
        try:
            async with asyncio.timeout(self._completion_timeout_seconds):
                answer = await self._completion.complete(messages, options)
        except TimeoutError as exc:
            raise CompletionServiceError(
                f"completion_timeout: no response within {self._completion_timeout_seconds}s"
            ) from exc
        except CompletionServiceError:
            raise
        except Exception as exc:
            logger.exception("orchestrator.synthesize.error")
            raise CompletionServiceError(f"completion_unavailable: {exc!s}") from exc

        logger.info("orchestrator.turn.done classification={} chars={}", meta["classification"], len(answer))
        return ChatTurnOutput(
            chat_id=chat_id,
            message=answer,
            meta=meta,
            finished=True,
            render=MarkdownRender(content=answer),
        )
