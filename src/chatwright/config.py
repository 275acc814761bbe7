"""Configuration management for chatwright."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ModelNotConfiguredError

MODEL_NOT_CONFIGURED_ERROR = "Model not configured. Set CHATWRIGHT_MODEL (e.g., 'openai:gpt-4o-mini')."


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="CHATWRIGHT_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API Configuration
    model: str | None = Field(None, description="Model in provider:model form, e.g. 'openai:gpt-4o'")
    classifier_model: str | None = Field(None, description="Fast model used for intent classification")
    api_key: str | None = Field(None, description="API key for the LLM provider")
    api_base: str | None = Field(None, description="Optional API base URL")
    max_tokens: int = Field(default=2048, description="Maximum tokens for synthesized answers")
    temperature: float = Field(default=0.2, description="Sampling temperature for synthesized answers")

    # Engine Configuration
    resolver_timeout_seconds: float = Field(default=20.0, description="Timeout for one directive resolution")
    completion_timeout_seconds: float = Field(default=60.0, description="Timeout for one completion call")
    fetch_max_bytes: int = Field(default=1_000_000, description="Byte cap for URL directive fetches")
    files_root: Path | None = Field(None, description="Base directory for {{#file source=local}} lookups")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")

    def require_model(self) -> str:
        if not self.model:
            raise ModelNotConfiguredError(MODEL_NOT_CONFIGURED_ERROR)
        return self.model

    @property
    def resolved_classifier_model(self) -> str:
        return self.classifier_model or self.require_model()


def load_settings(**overrides: Any) -> Settings:
    """Load settings from environment and .env, applying non-empty overrides."""

    settings = Settings()
    updates = {key: value for key, value in overrides.items() if value is not None}
    if updates:
        settings = settings.model_copy(update=updates)
    return settings
