"""Configuration for the console REST server."""

from __future__ import annotations

from pydantic import Field

from workflow_console.config import ConsoleSettings


class ServerSettings(ConsoleSettings):
    """Console settings plus the HTTP binding and CORS policy of the API."""

    host: str = Field(default="127.0.0.1", validation_alias="WORKFLOW_CONSOLE_HOST")
    port: int = Field(default=8000, validation_alias="WORKFLOW_CONSOLE_PORT", ge=1, le=65535)

    # Dev-friendly CORS for a local UI. Override via WORKFLOW_CONSOLE_CORS_ORIGINS=...
    cors_origins: str = Field(
        default="http://localhost:3000",
        validation_alias="WORKFLOW_CONSOLE_CORS_ORIGINS",
        description="Comma-separated list of allowed CORS origins.",
    )

    def parsed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
