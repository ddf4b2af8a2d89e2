"""Configuration for the workflow console.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class ConsoleSettings(BaseSettings):
    """Settings shared by the CLI and the console API.

    Environment variables:
    - WORKFLOW_STORE_URL              (optional)
    - WORKFLOW_STORE_TIMEOUT_SECONDS  (optional)
    - WORKFLOW_STORE_PAGE_SIZE        (optional)
    - WORKFLOW_STORE_MAX_PAGES        (optional)
    - LOG_LEVEL                       (optional)

    Notes:
        Tests can point at a different env file via
        `ConsoleSettings(_env_file=path_to_env)`.
    """

    store_base_url: str = Field(
        default="http://localhost:8080/api",
        validation_alias="WORKFLOW_STORE_URL",
        description="Base URL of the remote workflow store REST API",
    )
    store_timeout_seconds: float = Field(
        default=10.0,
        validation_alias="WORKFLOW_STORE_TIMEOUT_SECONDS",
        description="Per-request timeout for store calls",
        gt=0,
    )
    page_size: int = Field(
        default=20,
        validation_alias="WORKFLOW_STORE_PAGE_SIZE",
        description="Page size used when reloading paged listings",
        ge=1,
        le=1000,
    )
    max_reload_pages: int = Field(
        default=50,
        validation_alias="WORKFLOW_STORE_MAX_PAGES",
        description="Upper bound on pages fetched by one full reload",
        ge=1,
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("store_base_url")
    @classmethod
    def _require_http_url(cls, value: str) -> str:
        url = value.strip().rstrip("/")
        if not url.startswith(("http://", "https://")):
            raise ValueError("WORKFLOW_STORE_URL must be an http(s) URL")
        return url

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}")
        return level
