"""Graph-mirror collaborator: receives committed facts as idempotent upserts.

The mirror is never authoritative; the profile store is the record.
"""

from typing import Protocol

import structlog

logger = structlog.get_logger()


class GraphMirror(Protocol):
    def upsert_node(self, label: str, key: str, properties: dict) -> None: ...

    def upsert_relationship(
        self, source: tuple[str, str], rel_type: str, target: tuple[str, str], properties: dict
    ) -> None: ...


class NullGraphMirror:
    """Mirror that drops everything."""

    def upsert_node(self, label: str, key: str, properties: dict) -> None:
        pass

    def upsert_relationship(self, source, rel_type, target, properties) -> None:
        pass


class InMemoryGraphMirror:
    """Create-if-absent node and edge sets, keyed by (label, key)."""

    def __init__(self):
        self.nodes: dict[tuple[str, str], dict] = {}
        self.relationships: dict[tuple[tuple[str, str], str, tuple[str, str]], dict] = {}

    def upsert_node(self, label: str, key: str, properties: dict) -> None:
        self.nodes.setdefault((label, key), dict(properties))

    def upsert_relationship(self, source, rel_type, target, properties) -> None:
        self.relationships.setdefault((source, rel_type, target), dict(properties))
