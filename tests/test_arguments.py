import pytest

from chatwright.core.arguments import (
    filter_arguments,
    get_boolean_argument,
    get_number_argument,
    get_string_argument,
    get_string_array_argument,
    parse_arguments,
    split_argument_tokens,
    to_camel_case,
)


def test_parse_arguments_types_booleans_exactly() -> None:
    assert parse_arguments("k1=true k2=false") == {"k1": True, "k2": False}


def test_parse_arguments_keeps_numeric_types() -> None:
    args = parse_arguments("num1=42 num2=3.14 neg=-7")
    assert args == {"num1": 42, "num2": 3.14, "neg": -7}
    assert isinstance(args["num1"], int)
    assert isinstance(args["num2"], float)


def test_parse_arguments_strips_both_quote_styles() -> None:
    assert parse_arguments("str1='hello' str2=\"world\"") == {"str1": "hello", "str2": "world"}


def test_parse_arguments_quoted_values_keep_spaces() -> None:
    args = parse_arguments("title=\"hello big world\" empty=''")
    assert args == {"title": "hello big world", "empty": ""}


def test_parse_arguments_types_quoted_booleans_and_numbers() -> None:
    assert parse_arguments("flag='true' n=\"42\" ratio='0.5'") == {"flag": True, "n": 42, "ratio": 0.5}


@pytest.mark.parametrize("arg_string", ["", "invalid", "   ", "=nokey", "a b c"])
def test_parse_arguments_never_raises_on_garbage(arg_string: str) -> None:
    assert parse_arguments(arg_string) == {}


def test_parse_arguments_drops_unquoted_words() -> None:
    assert parse_arguments("mode=fast count=3") == {"count": 3}


def test_parse_arguments_camel_cases_snake_keys_idempotently() -> None:
    assert parse_arguments("snake_case_key='value'") == {"snakeCaseKey": "value"}
    assert parse_arguments("snakeCaseKey='value'") == {"snakeCaseKey": "value"}


def test_parse_arguments_keeps_quoted_keys_verbatim() -> None:
    assert parse_arguments("'filter:brand_name'=true") == {"filter:brand_name": True}


def test_parse_arguments_last_duplicate_wins() -> None:
    assert parse_arguments("a=1 a=2") == {"a": 2}


def test_split_argument_tokens_reports_quoting() -> None:
    tokens = split_argument_tokens("a=1 b='x y'")
    assert [(token.key, token.value, token.quoted_value) for token in tokens] == [
        ("a", "1", False),
        ("b", "x y", True),
    ]


def test_to_camel_case() -> None:
    assert to_camel_case("search_for_variable") == "searchForVariable"
    assert to_camel_case("alreadyCamel") == "alreadyCamel"


def test_typed_getters_read_snake_or_camel_keys() -> None:
    args = parse_arguments("max_count=5 enabled=true names='a, b,,c' label='x'")

    assert get_number_argument(args, "max_count") == 5
    assert get_number_argument(args, "missing", 1.5) == 1.5
    assert get_boolean_argument(args, "enabled") is True
    assert get_boolean_argument(args, "missing") is False
    assert get_string_argument(args, "label") == "x"
    assert get_string_argument(args, "enabled") == "true"
    assert get_string_array_argument(args, "names") == ["a", "b", "c"]
    assert get_string_array_argument(args, "missing") is None


def test_get_number_argument_reads_numeric_strings() -> None:
    args = parse_arguments("price='9.5' name='shirt'")
    assert get_number_argument(args, "price") == 9.5
    assert get_number_argument(args, "name") is None


def test_filter_arguments_collects_prefixed_keys() -> None:
    args = parse_arguments("'filter:color'='red,blue' other='x'")
    assert filter_arguments(args) == {"color": ["red", "blue"]}
