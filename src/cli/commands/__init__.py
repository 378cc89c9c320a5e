"""CLI command modules."""

from .commits import batches, commits
from .conversation import analyze, confirm
from .profile import profile

__all__ = [
    "analyze",
    "confirm",
    "commits",
    "batches",
    "profile",
]
