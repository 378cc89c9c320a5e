"""Shared test fixtures for profile-commits."""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from commits import CommitStore, ReviewService  # noqa: E402
from events import EventBroadcaster  # noqa: E402
from profiles import EntityResolver, ProfileStore  # noqa: E402
from profiles.graph import InMemoryGraphMirror  # noqa: E402


class RecordingPublisher:
    """Publisher that keeps every event it is handed, per user."""

    def __init__(self):
        self.events: list[tuple[str, dict]] = []

    def publish(self, user_id: str, event: dict) -> None:
        self.events.append((user_id, event))

    def types(self, user_id: str | None = None) -> list[str]:
        return [e["type"] for uid, e in self.events if user_id is None or uid == user_id]


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "profile.db"


@pytest.fixture
def profile_store(db_path):
    return ProfileStore(db_path)


@pytest.fixture
def commit_store(db_path):
    return CommitStore(db_path)


@pytest.fixture
def graph():
    return InMemoryGraphMirror()


@pytest.fixture
def resolver(profile_store, graph):
    return EntityResolver(profile_store, graph)


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def service(commit_store, resolver, publisher):
    return ReviewService(commit_store, resolver, EventBroadcaster(publisher))


@pytest.fixture
def sample_text():
    return (
        "I'm skilled in Python and Docker. "
        "I work at Stripe as a backend engineer. "
        "I graduated from MIT. "
        "My goal is to become a staff engineer by the end of the year."
    )
