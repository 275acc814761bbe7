"""Chat session boundary contracts."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from chatwright.errors import InvalidPayloadError
from chatwright.render import RenderDescriptor

VariableValue = str | int | float | bool
ModelT = TypeVar("ModelT", bound=BaseModel)


class _Contract(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class InitiateTemplate(_Contract):
    prompt_id: str | None = None
    prompt_name: str | None = None
    prompt_category: str | None = None
    organisation_id: str | None = None


class Trigger(_Contract):
    next: bool
    skip: bool


class LLMOptions(_Contract):
    model: str | None = None
    max_tokens: int | None = Field(default=None, ge=1)
    temperature: float | None = Field(default=None, ge=0, le=2)


class ChatTurnInput(_Contract):
    """One incoming chat turn."""

    chat_id: str | None = None
    chat_session_group_id: str | None = None
    initiate_template: InitiateTemplate | None = None
    trigger: Trigger | None = None
    user_message: str | None = None
    variables: dict[str, VariableValue] = Field(default_factory=dict)
    llm_options: LLMOptions | None = None


class ChatInitInput(ChatTurnInput):
    """Payload that opens a chat session."""

    user_id: str
    organisation_id: str


class ChatTurnOutput(_Contract):
    chat_id: str
    message: str
    meta: dict[str, Any] = Field(default_factory=dict)
    finished: bool | None = None
    render: RenderDescriptor | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


def _validate(model: type[ModelT], payload: Any) -> ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise InvalidPayloadError(
            f"invalid {model.__name__} payload: {exc.error_count()} error(s)",
            errors=[dict(error) for error in exc.errors(include_url=False)],
        ) from exc


def validate_turn_input(payload: Any) -> ChatTurnInput:
    return _validate(ChatTurnInput, payload)


def validate_init_input(payload: Any) -> ChatInitInput:
    return _validate(ChatInitInput, payload)
