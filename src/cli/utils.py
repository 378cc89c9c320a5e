"""Shared CLI utilities."""

from pathlib import Path
from typing import Optional

import structlog
from rich.console import Console

console = Console()
logger = structlog.get_logger()

STATUS_STYLES = {
    "pending": "yellow",
    "approved": "cyan",
    "rejected": "red",
    "committed": "green",
}


def get_components(config_path: Optional[Path] = None) -> dict:
    """Initialize stores and the review service from config."""
    from cli.config import get_paths, load_config_model
    from commits import CommitStore, ReviewService
    from events import EventBroadcaster
    from profiles import EntityResolver, ProfileStore

    config_model = load_config_model(config_path)
    config = config_model.to_dict()
    paths = get_paths(config)
    timeout = config_model.store.timeout_seconds

    profile_store = ProfileStore(paths["db_path"], timeout=timeout)
    commit_store = CommitStore(paths["db_path"], timeout=timeout)
    resolver = EntityResolver(profile_store)
    service = ReviewService(
        commit_store,
        resolver,
        EventBroadcaster(),
        snippet_words=config_model.extraction.snippet_words,
    )

    return {
        "config": config,
        "config_model": config_model,
        "paths": paths,
        "user_id": config_model.cli.user_id,
        "profile_store": profile_store,
        "commit_store": commit_store,
        "resolver": resolver,
        "service": service,
    }


def styled_status(status: str) -> str:
    style = STATUS_STYLES.get(status)
    return f"[{style}]{status}[/]" if style else status
