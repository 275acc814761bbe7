"""Placeholder substitution and message construction."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from loguru import logger

from chatwright.core.types import Message, Role

PLACEHOLDER_RE = re.compile(r"\{\{\s*(?P<key>\w+)\s*\}\}")
VALID_ROLES: frozenset[str] = frozenset({"system", "user", "assistant"})
NEWLINES_RE = re.compile(r"[\r\n]+")

PlaceholderData = Mapping[str, object]


def shorten_string(value: object, max_length: int) -> str:
    """Flatten newlines and cut `value` to `max_length` characters plus an ellipsis."""

    if isinstance(value, bool):
        text = "true" if value else "false"
    elif value is None:
        text = "null"
    else:
        text = str(value)
    text = NEWLINES_RE.sub(" ", text).strip()
    if len(text) > max_length:
        return text[:max_length] + "..."
    return text


def _render_value(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def substitute(
    content: str,
    whitelist: Iterable[str],
    user_data: PlaceholderData,
    default_data: PlaceholderData,
) -> str:
    """Replace whitelisted `{{key}}` tokens; user data wins over default data.

    Tokens whose key is not whitelisted, or present in neither source, are
    left untouched. Substituted values are not scanned again.
    """

    allowed = set(whitelist)

    def _replace(match: re.Match[str]) -> str:
        key = match.group("key")
        if key not in allowed:
            return match.group(0)
        if key in user_data:
            value = user_data[key]
        elif key in default_data:
            value = default_data[key]
        else:
            logger.debug("placeholder.unresolved key={}", key)
            return match.group(0)
        logger.debug("placeholder.replace key={} value={}", key, shorten_string(value, 50))
        return _render_value(value)

    return PLACEHOLDER_RE.sub(_replace, content)


def normalize_role(role: object) -> Role:
    if isinstance(role, str) and role in VALID_ROLES:
        return role  # type: ignore[return-value]
    return "user"


def build_message(
    role: object,
    content: str,
    whitelist: Iterable[str],
    user_data: PlaceholderData,
    default_data: PlaceholderData,
) -> Message:
    return Message(
        role=normalize_role(role),
        content=substitute(content, whitelist, user_data, default_data),
    )
