"""Configuration for the workflow engine.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Nothing here is required: the defaults are enough to run the server and CLI
against a local `data/` directory.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Settings shared by the REST server and the CLI.

    Environment variables:
    - WORKFLOW_DATA_PATH     (optional)
    - LOG_LEVEL              (optional)
    - WORKFLOW_CORS_ORIGINS  (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `EngineSettings(_env_file=path_to_env)`.
    """

    data_path: Path = Field(
        default=Path("data"),
        validation_alias="WORKFLOW_DATA_PATH",
        description="Directory where definitions and instances are persisted",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    cors_origins: str = Field(
        default="*",
        validation_alias="WORKFLOW_CORS_ORIGINS",
        description="Comma-separated list of allowed CORS origins.",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @property
    def definitions_file(self) -> Path:
        """Path where workflow definitions are persisted."""

        return self.data_path / "definitions.json"

    @property
    def instances_file(self) -> Path:
        """Path where workflow instances are persisted."""

        return self.data_path / "instances.json"

    def parsed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
