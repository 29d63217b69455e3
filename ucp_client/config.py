"""Configuration management for the UCP client."""

from __future__ import annotations

import os
from typing import Any, Literal, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .version import __version__

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Client settings loaded from environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="UCP_",
        extra="ignore",
        frozen=True,
    )

    base_url: str = Field("http://localhost:3001", description="UCP server base URL")
    api_key: Optional[str] = Field(None, description="Bearer credential")
    timeout: int = Field(30, ge=1, description="Per-request timeout in seconds")
    retry_enabled: bool = Field(False, description="Retry transient failures; off unless requested")
    max_retries: int = Field(3, ge=0, description="Extra attempts when retries are enabled")
    retry_backoff: float = Field(0.5, ge=0, description="Exponential backoff multiplier in seconds")
    user_agent: str = Field(f"ucp-client/{__version__}", description="User-Agent header")
    log_level: LogLevel = Field("INFO", description="Logging verbosity")

    def __init__(self, **values: Any) -> None:
        try:
            super().__init__(**values)
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return value

    @field_validator("api_key")
    @classmethod
    def _check_api_key(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        if not value:
            raise ValueError("Invalid API key format: key is empty")
        # header values must be visible ASCII
        if any(not (0x20 <= ord(ch) < 0x7F) for ch in value):
            raise ValueError("Invalid API key format")
        return value

    @classmethod
    def load(cls, **overrides) -> "Settings":
        """Load settings using optional env file from ``UCP_CONFIG_FILE``.

        ``None`` overrides are ignored so unset CLI options fall through to
        the environment.
        """
        env_file = os.getenv("UCP_CONFIG_FILE")
        kwargs = {"_env_file": env_file} if env_file else {}
        kwargs.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**kwargs)


__all__ = ["Settings", "LogLevel"]
