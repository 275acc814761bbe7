"""Render descriptors handed to the UI layer."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

Severity = Literal["info", "warning", "error"]
FormFieldType = Literal["text", "textarea", "number", "checkbox", "select", "multi-select", "date"]


class _RenderBase(BaseModel):
    model_config = ConfigDict(frozen=True)


class TextRender(_RenderBase):
    type: Literal["text"] = "text"
    content: str


class ImageRender(_RenderBase):
    type: Literal["image"] = "image"
    url: str


class BoxRender(_RenderBase):
    type: Literal["box"] = "box"
    severity: Severity = "info"
    content: str = ""


class MarkdownRender(_RenderBase):
    type: Literal["markdown"] = "markdown"
    content: str


class FormField(_RenderBase):
    key: str
    label: str
    type: FormFieldType = "text"
    required: bool = False
    tooltip: str | None = None
    options: list[Any] | None = None


class FormRender(_RenderBase):
    type: Literal["form"] = "form"
    definition: list[FormField] = Field(default_factory=list)
    data: dict[str, Any] = Field(default_factory=dict)


RenderDescriptor = Annotated[
    TextRender | ImageRender | BoxRender | MarkdownRender | FormRender,
    Field(discriminator="type"),
]
_RENDER_ADAPTER: TypeAdapter[RenderDescriptor] = TypeAdapter(RenderDescriptor)


def parse_render(data: Mapping[str, Any]) -> RenderDescriptor:
    """Validate a plain dict (e.g. from a function definition) into a descriptor."""

    return _RENDER_ADAPTER.validate_python(dict(data))


def _field_type(prop: Mapping[str, Any]) -> FormFieldType:
    if "enum" in prop:
        return "select"
    json_type = prop.get("type")
    if json_type in {"number", "integer"}:
        return "number"
    if json_type == "boolean":
        return "checkbox"
    if json_type == "array":
        return "multi-select"
    if prop.get("format") == "date":
        return "date"
    return "text"


def _label(key: str) -> str:
    return key.replace("_", " ").strip().capitalize()


def form_from_schema(
    json_schema: Mapping[str, Any],
    fields: Iterable[str],
    data: Mapping[str, Any] | None = None,
) -> FormRender:
    """Build a form for `fields` of an object schema, pre-filled with `data`."""

    properties: Mapping[str, Any] = json_schema.get("properties", {})
    required = set(json_schema.get("required", []))
    definition: list[FormField] = []
    for key in fields:
        prop = properties.get(key, {})
        definition.append(
            FormField(
                key=key,
                label=_label(key),
                type=_field_type(prop),
                required=key in required,
                tooltip=prop.get("description"),
                options=list(prop["enum"]) if "enum" in prop else None,
            )
        )
    return FormRender(definition=definition, data=dict(data or {}))
