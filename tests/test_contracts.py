import pytest

from chatwright.contracts import ChatTurnOutput, validate_init_input, validate_turn_input
from chatwright.errors import InvalidPayloadError
from chatwright.functions import ADD_PRODUCT
from chatwright.render import BoxRender, FormRender, form_from_schema, parse_render

INIT_PAYLOAD = {
    "userId": "u-1",
    "organisationId": "org-1",
    "chatId": "c-1",
    "chatSessionGroupId": "g-1",
    "initiateTemplate": {"promptId": "p-1", "promptCategory": "support"},
    "trigger": {"next": True, "skip": False},
    "userMessage": "Hello",
    "variables": {"user_input": "Hello", "count": 2, "vip": True},
    "llmOptions": {"model": "openai:gpt-4o", "maxTokens": 256, "temperature": 0.3},
}


def test_validate_init_input_reads_camel_case_payload() -> None:
    init = validate_init_input(INIT_PAYLOAD)

    assert init.user_id == "u-1"
    assert init.organisation_id == "org-1"
    assert init.initiate_template is not None
    assert init.initiate_template.prompt_id == "p-1"
    assert init.trigger is not None and init.trigger.next is True
    assert init.variables == {"user_input": "Hello", "count": 2, "vip": True}
    assert init.llm_options is not None and init.llm_options.max_tokens == 256


def test_validate_init_input_requires_user_and_organisation() -> None:
    payload = {key: value for key, value in INIT_PAYLOAD.items() if key != "userId"}

    with pytest.raises(InvalidPayloadError) as exc_info:
        validate_init_input(payload)
    assert exc_info.value.errors[0]["loc"] == ("userId",)


def test_validate_turn_input_rejects_bad_llm_options() -> None:
    with pytest.raises(InvalidPayloadError, match="ChatTurnInput"):
        validate_turn_input({"userMessage": "hi", "llmOptions": {"maxTokens": 0}})


def test_validate_turn_input_accepts_minimal_payload() -> None:
    turn = validate_turn_input({"userMessage": "hi"})
    assert turn.user_message == "hi"
    assert turn.variables == {}


def test_chat_turn_output_payload_uses_aliases() -> None:
    output = ChatTurnOutput(
        chat_id="c-1",
        message="Need more",
        meta={"classification": "function"},
        finished=False,
        render=form_from_schema(ADD_PRODUCT.json_schema, ["price"], {"name": "Hat"}),
    )

    payload = output.to_payload()

    assert payload["chatId"] == "c-1"
    assert payload["finished"] is False
    assert payload["render"]["type"] == "form"
    assert payload["render"]["definition"][0]["key"] == "price"
    assert payload["render"]["definition"][0]["type"] == "number"
    assert payload["render"]["data"] == {"name": "Hat"}


def test_chat_turn_output_omits_absent_render() -> None:
    payload = ChatTurnOutput(chat_id="c", message="m").to_payload()
    assert "render" not in payload
    assert "finished" not in payload


def test_parse_render_dispatches_on_type() -> None:
    assert parse_render({"type": "box", "severity": "warning", "content": "careful"}) == BoxRender(
        severity="warning", content="careful"
    )
    form = parse_render({"type": "form", "definition": [{"key": "a", "label": "A"}]})
    assert isinstance(form, FormRender)
    assert form.definition[0].type == "text"
