"""Configuration loading: YAML file -> validated AppConfig."""

import os
from pathlib import Path
from typing import Optional

import yaml

from .config_models import AppConfig, default_home

DEFAULT_CONFIG = AppConfig().to_dict()


def find_config() -> Optional[Path]:
    """First existing config file: $PROFILE_COMMITS_CONFIG, ./config.yaml, then the data home."""
    explicit = os.environ.get("PROFILE_COMMITS_CONFIG")
    if explicit:
        return Path(explicit).expanduser()

    for candidate in (
        Path.cwd() / "config.yaml",
        Path.home() / ".profile-commits" / "config.yaml",
        default_home() / "config.yaml",
    ):
        if candidate.exists():
            return candidate
    return None


def load_config(config_path: Optional[Path] = None) -> dict:
    """Plain-dict form of load_config_model()."""
    return load_config_model(config_path).to_dict()


def load_config_model(config_path: Optional[Path] = None) -> AppConfig:
    """Read and validate the config; a missing file means all defaults.

    Raises ValueError for unreadable YAML or values that fail validation.
    """
    path = config_path or find_config()
    raw: dict = {}
    if path is not None and path.exists():
        try:
            raw = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}")
        if not isinstance(raw, dict):
            raise ValueError(f"Config in {path} must be a mapping, got {type(raw).__name__}")

    try:
        return AppConfig.from_dict(raw)
    except Exception as e:
        raise ValueError(f"Config validation failed: {e}")


def get_paths(config: dict) -> dict:
    """Expanded store and log paths from a config dict."""
    paths = config.get("paths") or DEFAULT_CONFIG["paths"]
    return {key: Path(paths[key]).expanduser() for key in ("db_path", "users_db", "log_file")}
