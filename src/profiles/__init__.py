"""Profile facts: storage and find-or-create resolution."""

from .resolver import EntityResolver, ResolutionResult
from .store import ProfileStore, ProfileStoreError

__all__ = ["EntityResolver", "ProfileStore", "ProfileStoreError", "ResolutionResult"]
