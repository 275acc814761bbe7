from chatwright.core.placeholders import build_message, normalize_role, shorten_string, substitute


def test_build_message_user_data_overrides_default_per_key() -> None:
    message = build_message(
        "user",
        "Hello {{name}}, your age is {{age}}",
        ["name", "age"],
        {"name": "John"},
        {"age": "25"},
    )
    assert message.role == "user"
    assert message.content == "Hello John, your age is 25"


def test_build_message_invalid_role_becomes_user() -> None:
    assert build_message("invalid_role", "hi", [], {}, {}).role == "user"
    assert build_message(None, "hi", [], {}, {}).role == "user"
    assert build_message("assistant", "hi", [], {}, {}).role == "assistant"


def test_missing_key_is_left_verbatim() -> None:
    message = build_message("user", "Hello {{name}}", ["name"], {}, {})
    assert message.content == "Hello {{name}}"


def test_key_outside_whitelist_is_not_substituted() -> None:
    assert substitute("{{secret}} {{name}}", ["name"], {"secret": "x", "name": "Ann"}, {}) == "{{secret}} Ann"


def test_substitute_tolerates_inner_whitespace() -> None:
    assert substitute("Hi {{ name }}!", ["name"], {"name": "Bo"}, {}) == "Hi Bo!"


def test_substitute_is_not_recursive() -> None:
    result = substitute("{{a}}", ["a", "b"], {"a": "{{b}}", "b": "nested"}, {})
    assert result == "{{b}}"


def test_substitute_renders_scalars() -> None:
    data = {"flag": True, "count": 3, "empty": None}
    assert substitute("{{flag}} {{count}} [{{empty}}]", data.keys(), data, {}) == "true 3 []"


def test_directives_are_not_placeholders() -> None:
    template = '{{#url="https://a.com"}} {{name}}'
    assert substitute(template, ["name", "url"], {"name": "x"}, {}) == '{{#url="https://a.com"}} x'


def test_normalize_role() -> None:
    assert normalize_role("system") == "system"
    assert normalize_role("SYSTEM") == "user"


def test_shorten_string_flattens_newlines() -> None:
    assert shorten_string("line one\nline two", 100) == "line one line two"
    assert shorten_string("abcdef", 3) == "abc..."
