"""SQLite persistence for review batches and commits.

Batch counters are never stored: every read derives them from the commit
rows with a GROUP BY in the same query, so they cannot drift.
"""

import json
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

import structlog

from db import DEFAULT_TIMEOUT, begin_immediate, wal_connect
from shared_types import BatchStatus, BatchType, CommitStatus

from .models import (
    BATCH_TRANSITIONS,
    BatchNotFoundError,
    Commit,
    CommitNotFoundError,
    ConversationBatch,
    InvalidTransitionError,
    can_transition,
)

logger = structlog.get_logger()

_BATCH_SELECT = """
    SELECT b.*,
           COUNT(c.id) AS total_commits,
           COALESCE(SUM(c.status = 'pending'), 0) AS pending_commits,
           COALESCE(SUM(c.status = 'approved'), 0) AS approved_commits,
           COALESCE(SUM(c.status = 'rejected'), 0) AS rejected_commits,
           COALESCE(SUM(c.status = 'committed'), 0) AS committed_commits
    FROM commit_batches b
    LEFT JOIN conversation_commits c ON c.batch_id = b.id
"""


class CommitStoreError(Exception):
    """The commit store is unavailable or timed out; safe to retry."""


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


def _now() -> str:
    return datetime.now().isoformat()


def _row_to_commit(row: sqlite3.Row) -> Commit:
    data = dict(row)
    data["extracted_data"] = json.loads(data["extracted_data"])
    data["suggested_edits"] = json.loads(data["suggested_edits"]) if data["suggested_edits"] else None
    return Commit(**data)


class CommitStore:
    def __init__(self, db_path: str | Path, timeout: float = DEFAULT_TIMEOUT):
        self.db_path = Path(db_path).expanduser()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.timeout = timeout
        self._init_db()

    def _init_db(self):
        with wal_connect(self.db_path, timeout=self.timeout) as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS commit_batches (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    batch_title TEXT NOT NULL,
                    batch_type TEXT NOT NULL,
                    session_summary TEXT,
                    batch_status TEXT NOT NULL DEFAULT 'active'
                        CHECK(batch_status IN ('active','completed','archived')),
                    created_at TIMESTAMP NOT NULL,
                    completed_at TIMESTAMP
                );
                CREATE INDEX IF NOT EXISTS idx_batches_user ON commit_batches(user_id, created_at);

                CREATE TABLE IF NOT EXISTS conversation_commits (
                    id TEXT PRIMARY KEY,
                    batch_id TEXT NOT NULL REFERENCES commit_batches(id),
                    user_id TEXT NOT NULL,
                    extraction_type TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'pending'
                        CHECK(status IN ('pending','approved','rejected','committed')),
                    confidence REAL NOT NULL,
                    ai_summary TEXT NOT NULL,
                    original_text TEXT NOT NULL,
                    extracted_data TEXT NOT NULL,
                    suggested_edits TEXT,
                    commit_message TEXT,
                    review_notes TEXT,
                    target_layer TEXT NOT NULL,
                    created_at TIMESTAMP NOT NULL,
                    reviewed_at TIMESTAMP,
                    committed_at TIMESTAMP
                );
                CREATE INDEX IF NOT EXISTS idx_commits_batch ON conversation_commits(batch_id, status);
                CREATE INDEX IF NOT EXISTS idx_commits_user ON conversation_commits(user_id, status);
            """)

    @contextmanager
    def _connect(self, write: bool = False) -> Iterator[sqlite3.Connection]:
        try:
            conn = wal_connect(self.db_path, row_factory=True, timeout=self.timeout)
        except sqlite3.Error as e:
            raise CommitStoreError(str(e)) from e
        try:
            if write:
                begin_immediate(conn)
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise CommitStoreError(str(e)) from e
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

    # --- batches ---

    def _get_batch(self, conn, user_id: str, batch_id: str) -> ConversationBatch:
        row = conn.execute(
            _BATCH_SELECT + " WHERE b.id = ? AND b.user_id = ? GROUP BY b.id", (batch_id, user_id)
        ).fetchone()
        if row is None:
            raise BatchNotFoundError(batch_id)
        return ConversationBatch(**dict(row))

    def create_batch(
        self,
        user_id: str,
        batch_title: str,
        batch_type: BatchType = BatchType.LIVE_CONVERSATION,
        session_summary: Optional[str] = None,
    ) -> ConversationBatch:
        batch_id = _new_id()
        with self._connect(write=True) as conn:
            conn.execute(
                """INSERT INTO commit_batches
                   (id, user_id, batch_title, batch_type, session_summary, created_at)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (batch_id, user_id, batch_title, BatchType(batch_type).value, session_summary, _now()),
            )
            batch = self._get_batch(conn, user_id, batch_id)
        logger.info("commits.batch_created", user_id=user_id, batch_id=batch_id)
        return batch

    def get_batch(self, user_id: str, batch_id: str) -> ConversationBatch:
        with self._connect() as conn:
            return self._get_batch(conn, user_id, batch_id)

    def list_batches(
        self, user_id: str, status: Optional[BatchStatus] = None, limit: int = 50
    ) -> list[ConversationBatch]:
        query = _BATCH_SELECT + " WHERE b.user_id = ?"
        params: list = [user_id]
        if status:
            query += " AND b.batch_status = ?"
            params.append(BatchStatus(status).value)
        query += " GROUP BY b.id ORDER BY b.created_at DESC, b.rowid DESC LIMIT ?"
        params.append(limit)
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [ConversationBatch(**dict(r)) for r in rows]

    def update_batch(
        self,
        user_id: str,
        batch_id: str,
        status: Optional[BatchStatus] = None,
        session_summary: Optional[str] = None,
    ) -> ConversationBatch:
        with self._connect(write=True) as conn:
            batch = self._get_batch(conn, user_id, batch_id)
            if status is not None and BatchStatus(status) != batch.batch_status:
                target = BatchStatus(status)
                if target not in BATCH_TRANSITIONS[batch.batch_status]:
                    raise InvalidTransitionError(batch.batch_status.value, target.value)
                conn.execute(
                    "UPDATE commit_batches SET batch_status = ?, completed_at = ? WHERE id = ?",
                    (
                        target.value,
                        _now() if target == BatchStatus.COMPLETED else batch.completed_at,
                        batch_id,
                    ),
                )
            if session_summary is not None:
                conn.execute(
                    "UPDATE commit_batches SET session_summary = ? WHERE id = ?",
                    (session_summary, batch_id),
                )
            return self._get_batch(conn, user_id, batch_id)

    # --- commits ---

    def add_commits(self, user_id: str, batch_id: str, commits: list[Commit]) -> list[Commit]:
        """Insert staged commits into a batch in one transaction."""
        with self._connect(write=True) as conn:
            self._get_batch(conn, user_id, batch_id)
            conn.executemany(
                """INSERT INTO conversation_commits
                   (id, batch_id, user_id, extraction_type, status, confidence, ai_summary,
                    original_text, extracted_data, suggested_edits, target_layer, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                [
                    (
                        c.id, batch_id, user_id, c.extraction_type.value, c.status.value,
                        c.confidence, c.ai_summary, c.original_text, json.dumps(c.extracted_data),
                        json.dumps(c.suggested_edits) if c.suggested_edits else None,
                        c.target_layer.value, c.created_at,
                    )
                    for c in commits
                ],
            )
        logger.info("commits.staged", user_id=user_id, batch_id=batch_id, count=len(commits))
        return commits

    def _get_commit(self, conn, user_id: str, commit_id: str) -> Commit:
        row = conn.execute(
            "SELECT * FROM conversation_commits WHERE id = ? AND user_id = ?", (commit_id, user_id)
        ).fetchone()
        if row is None:
            raise CommitNotFoundError(commit_id)
        return _row_to_commit(row)

    def get_commit(self, user_id: str, commit_id: str) -> Commit:
        with self._connect() as conn:
            return self._get_commit(conn, user_id, commit_id)

    def list_commits(
        self,
        user_id: str,
        status: Optional[CommitStatus] = None,
        batch_id: Optional[str] = None,
        extraction_type: Optional[str] = None,
        limit: int = 100,
    ) -> list[Commit]:
        query = "SELECT * FROM conversation_commits WHERE user_id = ?"
        params: list = [user_id]
        if status:
            query += " AND status = ?"
            params.append(CommitStatus(status).value)
        if batch_id:
            query += " AND batch_id = ?"
            params.append(batch_id)
        if extraction_type:
            query += " AND extraction_type = ?"
            params.append(extraction_type)
        query += " ORDER BY created_at DESC, rowid DESC LIMIT ?"
        params.append(limit)
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [_row_to_commit(r) for r in rows]

    def approved_ids(self, user_id: str, batch_id: Optional[str] = None) -> list[str]:
        query = "SELECT id FROM conversation_commits WHERE user_id = ? AND status = 'approved'"
        params: list = [user_id]
        if batch_id:
            query += " AND batch_id = ?"
            params.append(batch_id)
        with self._connect() as conn:
            return [r["id"] for r in conn.execute(query + " ORDER BY created_at, rowid", params)]

    def transition(
        self,
        user_id: str,
        commit_id: str,
        target: CommitStatus,
        review_notes: Optional[str] = None,
        commit_message: Optional[str] = None,
        suggested_edits: Optional[dict] = None,
    ) -> Commit:
        """Move a commit to ``target`` if the state machine allows it.

        The update is a compare-and-set on the status read in the same
        transaction, so a concurrent reviewer can never be overwritten.
        """
        target = CommitStatus(target)
        with self._connect(write=True) as conn:
            current = self._get_commit(conn, user_id, commit_id)
            if not can_transition(current.status, target):
                raise InvalidTransitionError(current.status.value, target.value)

            now = _now()
            cursor = conn.execute(
                """UPDATE conversation_commits
                   SET status = ?,
                       review_notes = COALESCE(?, review_notes),
                       commit_message = COALESCE(?, commit_message),
                       suggested_edits = COALESCE(?, suggested_edits),
                       reviewed_at = CASE WHEN ? IN ('approved', 'rejected') THEN ? ELSE reviewed_at END,
                       committed_at = CASE WHEN ? = 'committed' THEN ? ELSE committed_at END
                   WHERE id = ? AND user_id = ? AND status = ?""",
                (
                    target.value,
                    review_notes,
                    commit_message,
                    json.dumps(suggested_edits) if suggested_edits else None,
                    target.value, now,
                    target.value, now,
                    commit_id, user_id, current.status.value,
                ),
            )
            if cursor.rowcount != 1:
                raise InvalidTransitionError(current.status.value, target.value)
            updated = self._get_commit(conn, user_id, commit_id)

        logger.info(
            "commits.transitioned",
            user_id=user_id,
            commit_id=commit_id,
            from_status=current.status.value,
            to_status=target.value,
        )
        return updated
