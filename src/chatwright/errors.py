"""Application-level exception types for chatwright."""

from __future__ import annotations


class ChatwrightError(Exception):
    """Base exception for chatwright."""


class ConfigurationError(ChatwrightError):
    """Base exception for configuration and startup validation errors."""


class ModelNotConfiguredError(ConfigurationError):
    """Raised when model configuration is missing."""


class ResolverError(ChatwrightError):
    """Raised by a directive resolver; recovered as a substitution marker."""


class CompletionServiceError(ChatwrightError):
    """Raised when the completion service fails or times out."""


class ClassificationError(CompletionServiceError):
    """Raised when the message classifier cannot reach the completion service."""


class UnknownFunctionError(ChatwrightError):
    """Raised when a dispatch targets a function that is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"function not found: {name}")
        self.name = name


class FunctionExecutionError(ChatwrightError):
    """Raised when a registered function action fails."""

    def __init__(self, name: str, cause: BaseException) -> None:
        super().__init__(f"function {name} failed: {cause!s}")
        self.name = name


class TemplateError(ChatwrightError):
    """Raised for invalid prompt templates or missing required template fields."""


class InvalidPayloadError(ChatwrightError):
    """Raised when a chat payload fails validation."""

    def __init__(self, message: str, errors: list[dict[str, object]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []
