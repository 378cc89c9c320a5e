"""Review workflow: stage extracted actions, take review decisions, commit."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

import structlog

from events import EventBroadcaster
from extraction.engine import ExtractionEngine
from extraction.models import ConversationAction
from insights.aggregator import ConversationAnalysis, analyze_with_insights
from insights.analyzer import CommitmentAnalyzer
from profiles import EntityResolver, ProfileStoreError
from shared_types import ActionType, BatchType, CommitStatus, ExtractionMode

from .models import (
    REVIEW_STATUSES,
    Commit,
    CommitNotFoundError,
    ConversationBatch,
    InvalidTransitionError,
    ProcessReport,
    ai_summary,
    confidence,
    snippet,
    target_layer,
)
from .store import CommitStore, CommitStoreError

logger = structlog.get_logger()

DEFAULT_BATCH_TITLE = "Conversation Session"


@dataclass
class AnalysisOutcome:
    analysis: ConversationAnalysis
    batch: Optional[ConversationBatch] = None
    commits: list[Commit] = field(default_factory=list)


def build_commit(
    user_id: str, batch_id: str, action: ConversationAction, text: str, snippet_words: int = 10
) -> Commit:
    return Commit(
        id=uuid.uuid4().hex[:12],
        batch_id=batch_id,
        user_id=user_id,
        extraction_type=action.type,
        confidence=confidence(action),
        ai_summary=ai_summary(action),
        original_text=snippet(text, action.entity, snippet_words),
        extracted_data=action.model_dump(mode="json", exclude={"commitment_insight"}),
        target_layer=target_layer(action.type),
        created_at=datetime.now().isoformat(),
    )


class ReviewService:
    """Ties extraction, review state and profile resolution together."""

    def __init__(
        self,
        commits: CommitStore,
        resolver: EntityResolver,
        broadcaster: Optional[EventBroadcaster] = None,
        engine: Optional[ExtractionEngine] = None,
        analyzer: Optional[CommitmentAnalyzer] = None,
        snippet_words: int = 10,
    ):
        self.commits = commits
        self.resolver = resolver
        self.broadcaster = broadcaster or EventBroadcaster()
        self.engine = engine or ExtractionEngine()
        self.analyzer = analyzer or CommitmentAnalyzer()
        self.snippet_words = snippet_words

    def analyze(
        self,
        user_id: str,
        text: str,
        mode: ExtractionMode = ExtractionMode.AUTO,
        batch_id: Optional[str] = None,
        batch_title: Optional[str] = None,
        batch_type: BatchType = BatchType.LIVE_CONVERSATION,
        target_types: Optional[Iterable[ActionType]] = None,
    ) -> AnalysisOutcome:
        """Analyze text; in auto mode the actions are staged as pending commits."""
        analysis = analyze_with_insights(text, self.engine, self.analyzer)
        if ExtractionMode(mode) == ExtractionMode.MANUAL:
            return AnalysisOutcome(analysis=analysis)

        batch, staged = self.stage(
            user_id, text, analysis.actions, batch_id, batch_title, batch_type, target_types
        )
        return AnalysisOutcome(analysis=analysis, batch=batch, commits=staged)

    def confirm(
        self,
        user_id: str,
        text: str,
        batch_id: Optional[str] = None,
        batch_title: Optional[str] = None,
        batch_type: BatchType = BatchType.LIVE_CONVERSATION,
        target_types: Optional[Iterable[ActionType]] = None,
    ) -> tuple[Optional[ConversationBatch], list[Commit]]:
        """The manual-mode trigger: extract and stage in one step."""
        return self.stage(
            user_id, text, self.engine.extract(text), batch_id, batch_title, batch_type, target_types
        )

    def stage(
        self,
        user_id: str,
        text: str,
        actions: list[ConversationAction],
        batch_id: Optional[str] = None,
        batch_title: Optional[str] = None,
        batch_type: BatchType = BatchType.LIVE_CONVERSATION,
        target_types: Optional[Iterable[ActionType]] = None,
    ) -> tuple[Optional[ConversationBatch], list[Commit]]:
        wanted = {ActionType(t) for t in target_types} if target_types else None
        actions = [
            a for a in actions
            if a.type != ActionType.NONE and (wanted is None or a.type in wanted)
        ]
        if not actions:
            return (self.commits.get_batch(user_id, batch_id) if batch_id else None), []

        if batch_id is None:
            batch_id = self.commits.create_batch(
                user_id, batch_title or DEFAULT_BATCH_TITLE, batch_type
            ).id
        staged = [
            build_commit(user_id, batch_id, action, text, self.snippet_words) for action in actions
        ]
        self.commits.add_commits(user_id, batch_id, staged)
        return self.commits.get_batch(user_id, batch_id), staged

    def set_status(
        self,
        user_id: str,
        commit_id: str,
        status: CommitStatus,
        review_notes: Optional[str] = None,
        commit_message: Optional[str] = None,
        suggested_edits: Optional[dict] = None,
    ) -> Commit:
        """Record a review decision; only approved and rejected are accepted."""
        status = CommitStatus(status)
        current = self.commits.get_commit(user_id, commit_id)
        if status not in REVIEW_STATUSES:
            raise InvalidTransitionError(current.status.value, status.value)
        if suggested_edits:
            # Edits must still describe a valid action of the same type
            current.model_copy(update={"suggested_edits": suggested_edits}).to_action()
        return self.commits.transition(
            user_id, commit_id, status, review_notes, commit_message, suggested_edits
        )

    def process_approved(
        self,
        user_id: str,
        commit_ids: Optional[list[str]] = None,
        batch_id: Optional[str] = None,
    ) -> ProcessReport:
        """Resolve approved commits into the profile.

        Anything not currently approved is skipped. A duplicate leaves the
        commit approved; a failure is recorded and the rest continue. A
        commit whose link was written but whose status update failed is
        reported as uncommitted and finished by the next run.
        """
        ids = commit_ids if commit_ids is not None else self.commits.approved_ids(user_id, batch_id)
        report = ProcessReport()

        for commit_id in ids:
            try:
                self._process_one(user_id, commit_id, report)
            except (CommitStoreError, ProfileStoreError) as e:
                report.failed.append(commit_id)
                report.results.append({"commit_id": commit_id, "outcome": "failed", "error": str(e)})
                logger.warning("commits.process_failed", commit_id=commit_id, error=str(e))

        logger.info(
            "commits.processed",
            user_id=user_id,
            committed=len(report.committed),
            duplicates=len(report.duplicates),
            failed=len(report.failed),
            uncommitted=len(report.uncommitted),
            skipped=len(report.skipped),
        )
        return report

    def _process_one(self, user_id: str, commit_id: str, report: ProcessReport) -> None:
        try:
            commit = self.commits.get_commit(user_id, commit_id)
        except CommitNotFoundError:
            report.skipped.append(commit_id)
            return
        if commit.status != CommitStatus.APPROVED:
            report.skipped.append(commit_id)
            return

        try:
            action = commit.to_action()
        except ValueError as e:
            report.failed.append(commit_id)
            report.results.append({"commit_id": commit_id, "outcome": "failed", "error": str(e)})
            logger.warning("commits.invalid_payload", commit_id=commit_id, error=str(e))
            return

        applied = self.resolver.store.find_applied(user_id, commit_id)
        if applied:
            # Link written by an earlier run whose status update was lost
            entity_id = applied["entity_id"]
            entry = {
                "commit_id": commit_id, "type": action.type.value, "entity": action.entity,
                "success": True, "id": applied["link_id"], "entity_id": entity_id,
                "outcome": "recovered",
            }
        else:
            result = self.resolver.apply(user_id, action, commit_id=commit_id)
            entity_id = result.entity_id
            entry = {"commit_id": commit_id, **result.to_dict()}
            if result.outcome == "duplicate":
                report.results.append(entry)
                report.duplicates.append(commit_id)
                return
            if result.outcome == "failed":
                report.results.append(entry)
                report.failed.append(commit_id)
                return

        try:
            self.commits.transition(user_id, commit_id, CommitStatus.COMMITTED)
        except InvalidTransitionError:
            # Another processor committed it between our read and write
            report.results.append(entry)
            report.skipped.append(commit_id)
            return
        except CommitStoreError as e:
            report.results.append({**entry, "outcome": "uncommitted", "error": str(e)})
            report.uncommitted.append(commit_id)
            logger.warning("commits.status_write_failed", commit_id=commit_id, error=str(e))
            return
        report.results.append(entry)
        report.committed.append(commit_id)
        self.broadcaster.action_committed(user_id, action, entity_id)
