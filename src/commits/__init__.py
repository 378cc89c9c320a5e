"""Review lifecycle of extracted actions."""

from .models import (
    BatchNotFoundError,
    Commit,
    CommitNotFoundError,
    ConversationBatch,
    InvalidTransitionError,
    ProcessReport,
)
from .service import ReviewService
from .store import CommitStore, CommitStoreError

__all__ = [
    "BatchNotFoundError",
    "Commit",
    "CommitNotFoundError",
    "CommitStore",
    "CommitStoreError",
    "ConversationBatch",
    "InvalidTransitionError",
    "ProcessReport",
    "ReviewService",
]
