"""Directive argument parsing helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass

ArgumentValue = bool | int | float | str
ArgumentMap = dict[str, ArgumentValue]

TOKEN_RE = re.compile(r"""(?:[^\s"']+|"[^"]*"|'[^']*')+""")
ASSIGNMENT_RE = re.compile(r"^(?P<key>'[^']+'|\w+)=(?P<value>.*)$", re.DOTALL)
NUMBER_RE = re.compile(r"^-?\d+(?:\.\d+)?$")
SNAKE_SEGMENT_RE = re.compile(r"_([a-z])")
FILTER_PREFIX = "filter:"


@dataclass(frozen=True)
class ArgumentToken:
    """One raw `key=value` token, quotes stripped but value untyped."""

    key: str
    value: str
    quoted_key: bool = False
    quoted_value: bool = False


def to_camel_case(key: str) -> str:
    """Rewrite snake_case to camelCase; camelCase input is returned unchanged."""

    return SNAKE_SEGMENT_RE.sub(lambda match: match.group(1).upper(), key)


def _unquote(text: str) -> tuple[str, bool]:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in {'"', "'"}:
        return text[1:-1], True
    return text, False


def split_argument_tokens(arg_string: str) -> list[ArgumentToken]:
    """Split an argument string on whitespace outside quotes into key/value tokens."""

    tokens: list[ArgumentToken] = []
    for match in TOKEN_RE.finditer(arg_string or ""):
        assignment = ASSIGNMENT_RE.match(match.group(0))
        if assignment is None:
            continue
        key, quoted_key = _unquote(assignment.group("key"))
        value, quoted_value = _unquote(assignment.group("value"))
        tokens.append(ArgumentToken(key=key, value=value, quoted_key=quoted_key, quoted_value=quoted_value))
    return tokens


def _type_value(token: ArgumentToken) -> ArgumentValue | None:
    if token.value in {"true", "false"}:
        return token.value == "true"
    if NUMBER_RE.match(token.value):
        return float(token.value) if "." in token.value else int(token.value)
    if token.quoted_value:
        return token.value
    return None


def parse_arguments(arg_string: str) -> ArgumentMap:
    """Parse `key=value ...` into a typed argument map.

    Values are typed once, after their quotes are stripped: `true`/`false`
    become booleans, integer or decimal literals become numbers and any other
    quoted span stays a string. Unquoted words are dropped. Unquoted keys are rewritten from
    snake_case to camelCase; keys written in single quotes are kept verbatim.
    Never raises; the worst case is an empty map.
    """

    args: ArgumentMap = {}
    for token in split_argument_tokens(arg_string):
        value = _type_value(token)
        if value is None:
            continue
        key = token.key if token.quoted_key else to_camel_case(token.key)
        args[key] = value
    return args


def _lookup(args: ArgumentMap, key: str) -> ArgumentValue | None:
    if key in args:
        return args[key]
    return args.get(to_camel_case(key))


def get_string_argument(args: ArgumentMap, key: str, default: str | None = None) -> str | None:
    value = _lookup(args, key)
    if value is None:
        return default
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def get_number_argument(args: ArgumentMap, key: str, default: float | None = None) -> float | None:
    value = _lookup(args, key)
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int | float):
        return value
    if NUMBER_RE.match(value.strip()):
        return float(value) if "." in value else int(value)
    return default


def get_boolean_argument(args: ArgumentMap, key: str, default: bool = False) -> bool:
    value = _lookup(args, key)
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value in {"true", "false"}:
        return value == "true"
    return default


def get_string_array_argument(args: ArgumentMap, key: str) -> list[str] | None:
    value = get_string_argument(args, key)
    if value is None:
        return None
    items = [item.strip() for item in value.split(",")]
    return [item for item in items if item] or None


def filter_arguments(args: ArgumentMap) -> dict[str, list[str]]:
    """Collect `'filter:<name>'=a,b` arguments into `{name: [a, b]}`."""

    filters: dict[str, list[str]] = {}
    for key, value in args.items():
        if not key.startswith(FILTER_PREFIX):
            continue
        filters[key[len(FILTER_PREFIX) :]] = str(value).split(",")
    return filters
