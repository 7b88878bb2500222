"""Configuration models and YAML loader for applicant tracking."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_RESUME_MIME_TYPES = [
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
]


class DatabaseConfig(BaseModel):
    """Record store configuration."""

    path: str = "data/startupconnect.db"
    timeout_seconds: float = Field(default=5.0, gt=0)


class ResumeConfig(BaseModel):
    """Limits applied to resume attachments on submission."""

    max_bytes: int = Field(default=5 * 1024 * 1024, ge=1)
    allowed_mime_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_RESUME_MIME_TYPES),
    )

    @field_validator("allowed_mime_types")
    @classmethod
    def mime_types_not_empty(cls, v: list[str]) -> list[str]:
        cleaned = [m.strip().lower() for m in v if m.strip()]
        if not cleaned:
            msg = "at least one resume mime type must be allowed"
            raise ValueError(msg)
        return cleaned


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    resume: ResumeConfig = Field(default_factory=ResumeConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
