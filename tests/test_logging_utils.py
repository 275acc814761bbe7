from dataclasses import dataclass, field
from typing import Any

import pytest

from chatwright import logging_utils
from chatwright.logging_utils import chat_context, configure_logging, current_chat_id


@dataclass
class RecordingLogger:
    added: list[dict[str, Any]] = field(default_factory=list)

    def remove(self) -> None:
        return None

    def configure(self, **kwargs: Any) -> None:
        return None

    def add(self, **kwargs: Any) -> int:
        self.added.append(kwargs)
        return len(self.added)

    def debug(self, message: str, *args: Any) -> None:
        return None


def test_chat_context_binds_and_restores_chat_id() -> None:
    assert current_chat_id() == "-"
    with chat_context("c-1"):
        assert current_chat_id() == "c-1"
        with chat_context("c-2"):
            assert current_chat_id() == "c-2"
        assert current_chat_id() == "c-1"
    assert current_chat_id() == "-"


def test_configure_logging_reinstalls_sink_when_level_changes(monkeypatch: pytest.MonkeyPatch) -> None:
    recording = RecordingLogger()
    monkeypatch.setattr(logging_utils, "logger", recording)
    monkeypatch.setattr(logging_utils, "_active_config", None)
    monkeypatch.delenv("CHATWRIGHT_LOG_LEVEL", raising=False)

    configure_logging(profile="default")
    configure_logging(profile="default")
    configure_logging(profile="default", level="debug")

    assert [options["level"] for options in recording.added] == ["INFO", "DEBUG"]
