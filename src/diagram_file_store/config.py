"""Centralized configuration for diagram-file-store using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from ``DIAGRAM_STORE_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DIAGRAM_STORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Storage
    trash_dir: Path = Field(
        default=Path("~/.bpmn-studio/trash"),
        description="Directory that receives soft-deleted diagrams; must already exist",
    )
    file_encoding: str = Field(default="utf-8", min_length=1, description="Text encoding of diagram files")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON log lines")

    # Tracing
    service_name: str = Field(default="diagram-file-store", description="OpenTelemetry service.name")

    @field_validator("trash_dir", mode="after")
    @classmethod
    def _expand_trash_dir(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in {"debug", "info", "warning", "error", "critical"}:
            raise ValueError(f"Unsupported log level: {value}")
        return normalized


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()
