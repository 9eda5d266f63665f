"""Application configuration."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BOT_API_URL = "https://api.telegram.org"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class Settings(BaseSettings):
    """Environment-driven settings validated at startup."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    bot_token: str = Field(..., alias="TELEGRAM_BOT_TOKEN", min_length=1)
    # Empty means the public Bot API endpoint.
    bot_url: str = Field(default="", alias="TELEGRAM_BOT_URL")

    webhook_listen_network: str = Field(default="tcp", alias="TELEGRAM_BOT_WEBHOOK_LISTEN_NETWORK")
    webhook_listen_address: str = Field(default=":8080", alias="TELEGRAM_BOT_WEBHOOK_LISTEN_ADDRESS")
    webhook_listen_owner: str = Field(default="", alias="TELEGRAM_BOT_WEBHOOK_LISTEN_OWNER")
    webhook_listen_group: str = Field(default="", alias="TELEGRAM_BOT_WEBHOOK_LISTEN_GROUP")
    # Octal file mode for a unix socket listener, e.g. 0660.
    webhook_listen_mode: str = Field(default="", alias="TELEGRAM_BOT_WEBHOOK_LISTEN_MODE")
    webhook_secret_token: str = Field(default="", alias="TELEGRAM_BOT_WEBHOOK_SECRET_TOKEN")
    webhook_url: str = Field(default="", alias="TELEGRAM_BOT_WEBHOOK_URL")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_no_color: bool = Field(default=False, alias="LOG_NO_COLOR")
    log_no_time: bool = Field(default=False, alias="LOG_NO_TIME")

    request_timeout_seconds: float = Field(default=30.0, alias="REQUEST_TIMEOUT_SECONDS")
    poll_timeout_seconds: int = Field(default=50, alias="POLL_TIMEOUT_SECONDS")
    startup_retry_seconds: float = Field(default=30.0, alias="STARTUP_RETRY_SECONDS")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level == "WARN":
            level = "WARNING"
        if level not in LOG_LEVELS:
            raise ValueError(f"log level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("webhook_listen_network")
    @classmethod
    def _check_network(cls, value: str) -> str:
        network = value.strip().lower()
        if network not in ("tcp", "tcp4", "tcp6", "unix"):
            raise ValueError("webhook listen network must be tcp, tcp4, tcp6 or unix")
        return network

    @property
    def api_base_url(self) -> str:
        return (self.bot_url or DEFAULT_BOT_API_URL).rstrip("/")

    @property
    def use_webhook(self) -> bool:
        return bool(self.webhook_url)


def load_settings(overrides: dict[str, Any] | None = None) -> Settings:
    """Load and validate settings.

    Overrides are keyed by environment variable name and take precedence over
    the environment and the .env file.
    """

    return Settings(**(overrides or {}))
