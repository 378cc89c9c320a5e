"""Reviewer registry and review-activity log for the web API.

Reviewers are registered from their JWT claims the first time they call the
API. Activity rows record what each reviewer did (analyze, confirm, review,
process) so usage can be summarised per event type.
"""

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import structlog

from cli.config_models import default_home
from db import wal_connect

logger = structlog.get_logger()

_DEFAULT_DB_PATH = default_home() / "users.db"

_SCHEMA = """
    CREATE TABLE IF NOT EXISTS reviewers (
        id           TEXT PRIMARY KEY,
        email        TEXT,
        name         TEXT,
        created_at   TEXT NOT NULL,
        last_seen_at TEXT NOT NULL
    );

    CREATE TABLE IF NOT EXISTS review_activity (
        id         INTEGER PRIMARY KEY AUTOINCREMENT,
        event      TEXT NOT NULL,
        user_id    TEXT,
        metadata   TEXT,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    );
    CREATE INDEX IF NOT EXISTS idx_activity_user ON review_activity(user_id, created_at DESC);
"""


def _open(db_path: Optional[Path] = None) -> sqlite3.Connection:
    path = db_path or _DEFAULT_DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    return wal_connect(path, row_factory=True)


def init_db(db_path: Optional[Path] = None) -> None:
    conn = _open(db_path)
    try:
        conn.executescript(_SCHEMA)
    finally:
        conn.close()


def get_or_create_user(
    user_id: str,
    email: Optional[str] = None,
    name: Optional[str] = None,
    db_path: Optional[Path] = None,
) -> dict[str, Any]:
    """Register the reviewer on first sight, refresh claims and last-seen after that."""
    now = datetime.now(timezone.utc).isoformat()
    conn = _open(db_path)
    try:
        with conn:
            created = conn.execute(
                "INSERT OR IGNORE INTO reviewers (id, email, name, created_at, last_seen_at)"
                " VALUES (?, ?, ?, ?, ?)",
                (user_id, email, name, now, now),
            ).rowcount
            if not created:
                conn.execute(
                    "UPDATE reviewers SET email = COALESCE(?, email), name = COALESCE(?, name),"
                    " last_seen_at = ? WHERE id = ?",
                    (email, name, now, user_id),
                )
        row = conn.execute("SELECT * FROM reviewers WHERE id = ?", (user_id,)).fetchone()
    finally:
        conn.close()

    if created:
        logger.info("reviewers.registered", user_id=user_id)
    return dict(row)


def log_event(
    event: str,
    user_id: Optional[str] = None,
    metadata: Optional[dict] = None,
    db_path: Optional[Path] = None,
) -> None:
    """Append an activity row. Never raises; a lost row only costs analytics."""
    try:
        conn = _open(db_path)
        try:
            with conn:
                conn.execute(
                    "INSERT INTO review_activity (event, user_id, metadata) VALUES (?, ?, ?)",
                    (event, user_id, json.dumps(metadata) if metadata else None),
                )
        finally:
            conn.close()
    except (sqlite3.Error, OSError) as e:
        logger.debug("reviewers.activity_dropped", activity=event, error=str(e))


def get_event_counts(
    days: int = 30, user_id: Optional[str] = None, db_path: Optional[Path] = None
) -> dict[str, int]:
    """Activity totals per event over the last ``days``, optionally for one reviewer."""
    query = (
        "SELECT event, COUNT(*) AS n FROM review_activity"
        " WHERE created_at >= datetime('now', ?)"
    )
    params: list = [f"-{days} days"]
    if user_id:
        query += " AND user_id = ?"
        params.append(user_id)
    conn = _open(db_path)
    try:
        rows = conn.execute(query + " GROUP BY event", params).fetchall()
    finally:
        conn.close()
    return {r["event"]: r["n"] for r in rows}


def get_recent_activity(user_id: str, limit: int = 20, db_path: Optional[Path] = None) -> list[dict]:
    conn = _open(db_path)
    try:
        rows = conn.execute(
            "SELECT event, metadata, created_at FROM review_activity"
            " WHERE user_id = ? ORDER BY id DESC LIMIT ?",
            (user_id, limit),
        ).fetchall()
    finally:
        conn.close()
    return [
        {**dict(r), "metadata": json.loads(r["metadata"]) if r["metadata"] else None} for r in rows
    ]
