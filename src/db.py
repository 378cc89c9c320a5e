"""Shared SQLite helpers: WAL mode, busy timeout, row_factory defaults."""

import sqlite3
from pathlib import Path

DEFAULT_TIMEOUT = 5.0


def wal_connect(
    db_path: str | Path, row_factory: bool = False, timeout: float = DEFAULT_TIMEOUT
) -> sqlite3.Connection:
    """Open SQLite connection with WAL journal mode and foreign keys on.

    Args:
        db_path: Path to database file.
        row_factory: If True, set conn.row_factory = sqlite3.Row.
        timeout: Seconds to wait on a locked database before failing.
    """
    conn = sqlite3.connect(str(db_path), timeout=timeout)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    if row_factory:
        conn.row_factory = sqlite3.Row
    return conn


def begin_immediate(conn: sqlite3.Connection) -> None:
    """Take the write lock up front for a read-then-write sequence."""
    if not conn.in_transaction:
        conn.execute("BEGIN IMMEDIATE")
