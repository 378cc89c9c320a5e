"""Dependency injection for FastAPI routes."""

from functools import lru_cache

import structlog

from cli.config import get_paths, load_config_model
from commits import CommitStore, ReviewService
from events import EventBroadcaster, RoomPublisher
from profiles import EntityResolver, ProfileStore

logger = structlog.get_logger()

# One publisher per process so every request and every stream share rooms
_publisher = RoomPublisher()


@lru_cache
def get_config():
    """Load shared config from ~/profile-commits/config.yaml."""
    return load_config_model()


def get_store_paths() -> dict:
    """Get expanded paths dict."""
    return get_paths(get_config().to_dict())


def get_publisher() -> RoomPublisher:
    return _publisher


@lru_cache
def _build_service(db_path: str, timeout: float, snippet_words: int) -> ReviewService:
    profile_store = ProfileStore(db_path, timeout=timeout)
    logger.info("web.service_ready", db_path=db_path)
    return ReviewService(
        CommitStore(db_path, timeout=timeout),
        EntityResolver(profile_store),
        EventBroadcaster(get_publisher()),
        snippet_words=snippet_words,
    )


def get_service() -> ReviewService:
    """Review service bound to the configured database, built once per path."""
    config = get_config()
    return _build_service(
        str(get_store_paths()["db_path"]),
        config.store.timeout_seconds,
        config.extraction.snippet_words,
    )


def get_profile_store() -> ProfileStore:
    return get_service().resolver.store
