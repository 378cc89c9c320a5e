"""Review records, the status state machine and commit derivation rules."""

from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel, Field

from extraction.models import ConversationAction
from shared_types import ActionType, BatchStatus, BatchType, CommitStatus, TargetLayer

ALLOWED_TRANSITIONS: dict[CommitStatus, frozenset[CommitStatus]] = {
    CommitStatus.PENDING: frozenset({CommitStatus.APPROVED, CommitStatus.REJECTED}),
    CommitStatus.APPROVED: frozenset({CommitStatus.COMMITTED}),
    CommitStatus.REJECTED: frozenset(),
    CommitStatus.COMMITTED: frozenset(),
}

# Statuses a reviewer may set directly; committed is reserved for processing
REVIEW_STATUSES = frozenset({CommitStatus.APPROVED, CommitStatus.REJECTED})

BATCH_TRANSITIONS: dict[BatchStatus, frozenset[BatchStatus]] = {
    BatchStatus.ACTIVE: frozenset({BatchStatus.COMPLETED, BatchStatus.ARCHIVED}),
    BatchStatus.COMPLETED: frozenset({BatchStatus.ARCHIVED}),
    BatchStatus.ARCHIVED: frozenset(),
}


class InvalidTransitionError(Exception):
    def __init__(self, current: str, target: str):
        self.current = str(current)
        self.target = str(target)
        super().__init__(f"invalid transition: {self.current} -> {self.target}")


class CommitNotFoundError(KeyError):
    pass


class BatchNotFoundError(KeyError):
    pass


def can_transition(current: CommitStatus, target: CommitStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


class Commit(BaseModel):
    id: str
    batch_id: str
    user_id: str
    extraction_type: ActionType
    status: CommitStatus = CommitStatus.PENDING
    confidence: float = Field(..., ge=0.0, le=1.0)
    ai_summary: str
    original_text: str
    extracted_data: dict
    suggested_edits: Optional[dict] = None
    commit_message: Optional[str] = None
    review_notes: Optional[str] = None
    target_layer: TargetLayer
    created_at: str
    reviewed_at: Optional[str] = None
    committed_at: Optional[str] = None

    def to_action(self) -> ConversationAction:
        """The staged action with any reviewer edits applied."""
        return ConversationAction.model_validate(self.extracted_data).with_edits(self.suggested_edits)


class ConversationBatch(BaseModel):
    id: str
    user_id: str
    batch_title: str
    batch_type: BatchType = BatchType.LIVE_CONVERSATION
    session_summary: Optional[str] = None
    batch_status: BatchStatus = BatchStatus.ACTIVE
    created_at: str
    completed_at: Optional[str] = None
    total_commits: int = 0
    pending_commits: int = 0
    approved_commits: int = 0
    rejected_commits: int = 0
    committed_commits: int = 0


@dataclass
class ProcessReport:
    """Per-commit outcome of one processing run."""

    committed: list[str] = field(default_factory=list)
    duplicates: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    uncommitted: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    results: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "committed": self.committed,
            "duplicates": self.duplicates,
            "failed": self.failed,
            "uncommitted": self.uncommitted,
            "skipped": self.skipped,
            "results": self.results,
            "summary": {
                "committed": len(self.committed),
                "duplicates": len(self.duplicates),
                "failed": len(self.failed),
                "uncommitted": len(self.uncommitted),
                "skipped": len(self.skipped),
            },
        }


# --- derivation of a commit from an action ---

SURFACE_TYPES = frozenset({ActionType.SKILL, ActionType.COMPANY, ActionType.EDUCATION})
RELIABLE_TYPES = frozenset({ActionType.SKILL, ActionType.COMPANY})


def target_layer(action_type: ActionType) -> TargetLayer:
    return TargetLayer.SURFACE if action_type in SURFACE_TYPES else TargetLayer.PERSONAL


def confidence(action: ConversationAction) -> float:
    score = 0.7 + min(0.05 * len(action.details.populated()), 0.2)
    if len(action.entity) > 10:
        score += 0.05
    if action.type in RELIABLE_TYPES:
        score += 0.05
    return round(min(score, 0.95), 2)


def ai_summary(action: ConversationAction) -> str:
    d = action.details
    if action.type == ActionType.SKILL:
        return f"Add skill: {action.entity} ({d.proficiency} level, {d.experience}+ years)"
    if action.type == ActionType.COMPANY:
        industry = f" ({d.industry})" if d.industry else ""
        return f"Add work experience: {d.role or 'Position'} at {action.entity}{industry}"
    if action.type == ActionType.EDUCATION:
        field_of_study = f" in {d.field_of_study}" if d.field_of_study else ""
        return f"Add education: {d.degree or 'Degree'} from {action.entity}{field_of_study}"
    if action.type == ActionType.OBJECTIVE:
        return f"Add objective: {action.entity} ({d.category}, {d.priority} priority)"
    if action.type == ActionType.KEY_RESULT:
        if d.target_value is None:
            return f"Add key result: {action.entity}"
        target = f"{d.target_value:g} {d.unit}" if d.unit else f"{d.target_value:g}"
        return f"Add key result: {action.entity} (target: {target})"
    return f"Add {action.type.value}: {action.entity}"


def snippet(text: str, entity: str, radius: int = 10) -> str:
    """Words around the first mention of ``entity``, with ellipses where cut."""
    words = text.split()
    needle = entity.lower()
    index = next(
        (
            i
            for i, word in enumerate(words)
            if needle in word.lower() or (len(word) > 2 and word.lower() in needle)
        ),
        None,
    )
    if index is None:
        return text[:200] + ("..." if len(text) > 200 else "")

    start = max(0, index - radius)
    end = min(len(words), index + radius)
    return ("..." if start > 0 else "") + " ".join(words[start:end]) + ("..." if end < len(words) else "")
