"""Pydantic configuration models for profile-commits."""

import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


def default_home() -> Path:
    """Base data directory; PROFILE_COMMITS_HOME overrides ~/profile-commits."""
    return Path(os.environ.get("PROFILE_COMMITS_HOME", Path.home() / "profile-commits"))


class PathsConfig(BaseModel):
    """File paths configuration."""

    db_path: Path = Field(default_factory=lambda: default_home() / "profile.db")
    users_db: Path = Field(default_factory=lambda: default_home() / "users.db")
    log_file: Path = Field(default_factory=lambda: default_home() / "profile-commits.log")

    @model_validator(mode="after")
    def expand_paths(self):
        """Expand ~ in all paths."""
        self.db_path = self.db_path.expanduser()
        self.users_db = self.users_db.expanduser()
        self.log_file = self.log_file.expanduser()
        return self


class StoreConfig(BaseModel):
    """SQLite access settings."""

    timeout_seconds: float = 5.0

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {v}")
        return v


class ExtractionConfig(BaseModel):
    """How analyzed text is staged for review."""

    default_mode: Literal["auto", "manual"] = "auto"
    snippet_words: int = Field(10, ge=1, le=100)


class ResponseConfig(BaseModel):
    """Reflective response generation."""

    seed: Optional[int] = None  # None = nondeterministic question choice


VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    json_mode: bool = Field(False, alias="json")

    model_config = {"populate_by_name": True}

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of {VALID_LOG_LEVELS}")
        return v_upper


class WebConfig(BaseModel):
    """Web API settings."""

    frontend_origin: str = Field(
        default_factory=lambda: os.getenv("FRONTEND_ORIGIN", "http://localhost:3000")
    )


class CLIConfig(BaseModel):
    """Single-user CLI settings."""

    user_id: str = "local"


class AppConfig(BaseModel):
    """Main configuration model."""

    paths: PathsConfig = Field(default_factory=PathsConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    response: ResponseConfig = Field(default_factory=ResponseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    web: WebConfig = Field(default_factory=WebConfig)
    cli: CLIConfig = Field(default_factory=CLIConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "AppConfig":
        """Create config from dict, accepting string paths."""
        if "paths" in data and isinstance(data["paths"], dict):
            for key in ["db_path", "users_db", "log_file"]:
                if key in data["paths"] and isinstance(data["paths"][key], str):
                    data["paths"][key] = Path(data["paths"][key])
        return cls.model_validate(data)

    def to_dict(self) -> dict:
        return self.model_dump(mode="python")
