"""Function registry and dispatcher."""

from __future__ import annotations

import builtins
import inspect
import json
import time
import uuid
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from loguru import logger
from pydantic import BaseModel, ConfigDict, ValidationError, create_model

from chatwright.core.arguments import to_camel_case
from chatwright.core.placeholders import shorten_string
from chatwright.errors import FunctionExecutionError, UnknownFunctionError
from chatwright.render import RenderDescriptor

FunctionAction = Callable[[dict[str, Any]], Any | Awaitable[Any]]

JSON_TYPES: dict[str, Any] = {
    "string": str,
    "number": float,
    "integer": int,
    "boolean": bool,
    "object": dict[str, Any],
}


@dataclass(frozen=True)
class QAExample:
    """Few-shot sample showing the expected call shape for a user request."""

    q: str
    a: str


@dataclass(frozen=True)
class FunctionDefinition:
    """A named action described by a JSON object schema."""

    name: str
    json_schema: dict[str, Any]
    action: FunctionAction
    description: str = ""
    ui_response: RenderDescriptor | None = None
    qa_examples: tuple[QAExample, ...] = ()

    @property
    def required(self) -> list[str]:
        return list(self.json_schema.get("required", []))

    @property
    def properties(self) -> dict[str, Any]:
        return dict(self.json_schema.get("properties", {}))

    def tool_spec(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.json_schema,
            },
        }


@dataclass(frozen=True)
class PartialCallResult:
    """A call that lacks required arguments; not an error."""

    function_name: str
    missing_fields: tuple[str, ...]
    known_fields: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of a fully satisfied call."""

    id: str
    function_name: str
    output: Any
    ui_response: RenderDescriptor | None = None

    def as_dict(self) -> dict[str, Any]:
        if isinstance(self.output, Mapping):
            return {"id": self.id, **self.output}
        return {"id": self.id, "output": self.output}


def _python_type(prop: Mapping[str, Any]) -> Any:
    if "enum" in prop:
        return Literal[tuple(prop["enum"])]
    json_type = prop.get("type")
    if json_type == "array":
        item_type = _python_type(prop.get("items", {})) if prop.get("items") else Any
        return list[item_type]
    return JSON_TYPES.get(json_type, Any)


def build_arguments_model(name: str, json_schema: Mapping[str, Any]) -> type[BaseModel]:
    """Build a pydantic model mirroring an object schema's properties."""

    required = set(json_schema.get("required", []))
    fields: dict[str, Any] = {}
    for key, prop in json_schema.get("properties", {}).items():
        python_type = _python_type(prop)
        if key in required:
            fields[key] = (python_type, ...)
        else:
            fields[key] = (python_type | None, None)
    return create_model(
        f"{name}_arguments",
        __config__=ConfigDict(extra="ignore"),
        **fields,
    )


@dataclass(frozen=True)
class _Entry:
    definition: FunctionDefinition
    arguments_model: type[BaseModel]
    key_index: dict[str, str]


class FunctionRegistry:
    """Registry of callable functions; populated once at startup."""

    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}

    def register(self, definition: FunctionDefinition) -> FunctionDefinition:
        if definition.name in self._entries:
            raise ValueError(f"Duplicate function name: {definition.name}")
        key_index: dict[str, str] = {}
        for key in definition.properties:
            key_index[key] = key
            key_index.setdefault(to_camel_case(key), key)
        self._entries[definition.name] = _Entry(
            definition=definition,
            arguments_model=build_arguments_model(definition.name, definition.json_schema),
            key_index=key_index,
        )
        logger.debug("function.register name={}", definition.name)
        return definition

    def has(self, name: str) -> bool:
        return name in self._entries

    def get(self, name: str) -> FunctionDefinition | None:
        entry = self._entries.get(name)
        return entry.definition if entry is not None else None

    def definitions(self) -> builtins.list[FunctionDefinition]:
        return sorted((entry.definition for entry in self._entries.values()), key=lambda item: item.name)

    def tool_specs(self) -> builtins.list[dict[str, Any]]:
        return [definition.tool_spec() for definition in self.definitions()]

    def qa_examples(self) -> builtins.list[QAExample]:
        return [example for definition in self.definitions() for example in definition.qa_examples]

    def validate(self, name: str, raw_args: Mapping[str, Any]) -> PartialCallResult | dict[str, Any]:
        """Return validated arguments, or a partial call naming what is missing."""

        entry = self._entries.get(name)
        if entry is None:
            raise UnknownFunctionError(name)

        args: dict[str, Any] = {}
        for key, value in raw_args.items():
            schema_key = entry.key_index.get(key)
            if schema_key is None:
                logger.warning("function.args.dropped name={} key={}", name, key)
                continue
            if value is None:
                continue
            args[schema_key] = value

        try:
            validated = entry.arguments_model.model_validate(args)
        except ValidationError as exc:
            invalid = {str(error["loc"][0]) for error in exc.errors() if error["loc"]}
            for error in exc.errors():
                if error["type"] != "missing":
                    logger.warning("function.args.invalid name={} loc={} msg={}", name, error["loc"], error["msg"])
            known = {key: value for key, value in args.items() if key not in invalid}
            missing = [key for key in entry.definition.required if key not in known]
            missing += [key for key in invalid if key not in missing]
            return PartialCallResult(function_name=name, missing_fields=tuple(missing), known_fields=known)
        return validated.model_dump(exclude_unset=True)

    async def dispatch(self, name: str, raw_args: Mapping[str, Any]) -> DispatchResult | PartialCallResult:
        validated = self.validate(name, raw_args)
        if isinstance(validated, PartialCallResult):
            logger.info(
                "function.call.partial name={} missing={}",
                name,
                ",".join(validated.missing_fields),
            )
            return validated

        definition = self._entries[name].definition
        self._log_call(name, validated)
        start = time.monotonic()
        try:
            output = definition.action(validated)
            if inspect.isawaitable(output):
                output = await output
        except Exception as exc:
            logger.exception("function.call.error name={}", name)
            raise FunctionExecutionError(name, exc) from exc
        finally:
            duration = time.monotonic() - start
            logger.info("function.call.end name={} duration={:.3f}ms", name, duration * 1000)

        return DispatchResult(
            id=uuid.uuid4().hex,
            function_name=name,
            output=output,
            ui_response=definition.ui_response,
        )

    def _log_call(self, name: str, kwargs: Mapping[str, Any]) -> None:
        params: list[str] = []
        for key, value in kwargs.items():
            try:
                rendered = json.dumps(value, ensure_ascii=False)
            except TypeError:
                rendered = repr(value)
            params.append(f"{key}={shorten_string(rendered, 30)}")
        logger.info("function.call.start name={} {{ {} }}", name, ", ".join(params))
