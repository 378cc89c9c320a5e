"""SQLite persistence for committed profile facts.

Catalog tables (skills, companies, institutions) are shared across users;
link tables carry one row per (user, catalog entry), enforced by UNIQUE
constraints so a duplicate link can never be stored twice.
"""

import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

import structlog

from db import DEFAULT_TIMEOUT, begin_immediate, wal_connect

logger = structlog.get_logger()


class ProfileStoreError(Exception):
    """The profile store is unavailable or timed out; safe to retry."""


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


def _now() -> str:
    return datetime.now().isoformat()


class ProfileStore:
    def __init__(self, db_path: str | Path, timeout: float = DEFAULT_TIMEOUT):
        self.db_path = Path(db_path).expanduser()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.timeout = timeout
        self._init_db()

    def _init_db(self):
        with wal_connect(self.db_path, timeout=self.timeout) as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS skills (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    category TEXT NOT NULL DEFAULT 'Technical',
                    difficulty TEXT NOT NULL DEFAULT 'intermediate',
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );
                CREATE TABLE IF NOT EXISTS companies (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    industry TEXT,
                    website TEXT,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );
                CREATE TABLE IF NOT EXISTS institutions (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    type TEXT NOT NULL DEFAULT 'University',
                    country TEXT,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );
                CREATE TABLE IF NOT EXISTS user_skills (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    skill_id TEXT NOT NULL REFERENCES skills(id),
                    proficiency TEXT NOT NULL,
                    years_experience INTEGER NOT NULL DEFAULT 0,
                    showcase INTEGER NOT NULL DEFAULT 1,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    UNIQUE(user_id, skill_id)
                );
                CREATE TABLE IF NOT EXISTS work_experiences (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    company_id TEXT NOT NULL REFERENCES companies(id),
                    title TEXT NOT NULL,
                    start_date TEXT,
                    end_date TEXT,
                    is_current INTEGER NOT NULL DEFAULT 1,
                    description TEXT,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    UNIQUE(user_id, company_id)
                );
                CREATE TABLE IF NOT EXISTS user_educations (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    institution_id TEXT NOT NULL REFERENCES institutions(id),
                    degree TEXT,
                    field_of_study TEXT,
                    start_date TEXT,
                    end_date TEXT,
                    grade TEXT,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    UNIQUE(user_id, institution_id)
                );
                CREATE TABLE IF NOT EXISTS objectives (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    category TEXT NOT NULL,
                    priority TEXT NOT NULL,
                    timeframe TEXT NOT NULL,
                    target_date TEXT,
                    description TEXT,
                    status TEXT NOT NULL DEFAULT 'active'
                        CHECK(status IN ('active','completed','paused','cancelled')),
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );
                CREATE UNIQUE INDEX IF NOT EXISTS idx_objectives_title
                    ON objectives(user_id, title COLLATE NOCASE);
                CREATE TABLE IF NOT EXISTS key_results (
                    id TEXT PRIMARY KEY,
                    objective_id TEXT NOT NULL REFERENCES objectives(id),
                    title TEXT NOT NULL,
                    measurement_type TEXT NOT NULL,
                    target_value REAL,
                    current_value REAL NOT NULL DEFAULT 0,
                    unit TEXT,
                    due_date TEXT,
                    status TEXT NOT NULL DEFAULT 'active',
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );
                CREATE UNIQUE INDEX IF NOT EXISTS idx_key_results_title
                    ON key_results(objective_id, title COLLATE NOCASE);
                CREATE TABLE IF NOT EXISTS applied_commits (
                    commit_id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    action_type TEXT NOT NULL,
                    link_id TEXT,
                    entity_id TEXT,
                    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );
            """)

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """One write transaction holding the lock from its first read.

        Lock timeouts and I/O failures surface as ProfileStoreError;
        constraint violations propagate as sqlite3.IntegrityError.
        """
        try:
            conn = wal_connect(self.db_path, row_factory=True, timeout=self.timeout)
        except sqlite3.Error as e:
            raise ProfileStoreError(str(e)) from e
        try:
            begin_immediate(conn)
            yield conn
            conn.commit()
        except sqlite3.IntegrityError:
            conn.rollback()
            raise
        except sqlite3.Error as e:
            conn.rollback()
            raise ProfileStoreError(str(e)) from e
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

    # --- catalog: case-insensitive containment, exact name first ---

    def _find_by_name(self, conn: sqlite3.Connection, table: str, name: str) -> Optional[sqlite3.Row]:
        return conn.execute(
            f"""SELECT * FROM {table}
                WHERE instr(lower(name), lower(?)) > 0
                ORDER BY lower(name) = lower(?) DESC, length(name)
                LIMIT 1""",
            (name, name),
        ).fetchone()

    def find_skill(self, conn, name: str) -> Optional[sqlite3.Row]:
        return self._find_by_name(conn, "skills", name)

    def create_skill(self, conn, name: str, category: str, difficulty: str) -> str:
        skill_id = _new_id()
        conn.execute(
            "INSERT INTO skills (id, name, category, difficulty, created_at) VALUES (?, ?, ?, ?, ?)",
            (skill_id, name, category, difficulty, _now()),
        )
        return skill_id

    def find_company(self, conn, name: str) -> Optional[sqlite3.Row]:
        return self._find_by_name(conn, "companies", name)

    def create_company(self, conn, name: str, industry: str, website: str) -> str:
        company_id = _new_id()
        conn.execute(
            "INSERT INTO companies (id, name, industry, website, created_at) VALUES (?, ?, ?, ?, ?)",
            (company_id, name, industry, website, _now()),
        )
        return company_id

    def find_institution(self, conn, name: str) -> Optional[sqlite3.Row]:
        return self._find_by_name(conn, "institutions", name)

    def create_institution(self, conn, name: str, type_: str, country: str) -> str:
        institution_id = _new_id()
        conn.execute(
            "INSERT INTO institutions (id, name, type, country, created_at) VALUES (?, ?, ?, ?, ?)",
            (institution_id, name, type_, country, _now()),
        )
        return institution_id

    # --- per-user links ---

    def find_user_skill(self, conn, user_id: str, skill_id: str) -> Optional[sqlite3.Row]:
        return conn.execute(
            "SELECT * FROM user_skills WHERE user_id = ? AND skill_id = ?", (user_id, skill_id)
        ).fetchone()

    def create_user_skill(
        self, conn, user_id: str, skill_id: str, proficiency: str, years: int, showcase: bool = True
    ) -> str:
        link_id = _new_id()
        conn.execute(
            """INSERT INTO user_skills
               (id, user_id, skill_id, proficiency, years_experience, showcase, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (link_id, user_id, skill_id, proficiency, years, int(showcase), _now()),
        )
        return link_id

    def find_work_experience(self, conn, user_id: str, company_id: str) -> Optional[sqlite3.Row]:
        return conn.execute(
            "SELECT * FROM work_experiences WHERE user_id = ? AND company_id = ?",
            (user_id, company_id),
        ).fetchone()

    def create_work_experience(
        self,
        conn,
        user_id: str,
        company_id: str,
        title: str,
        start_date: Optional[str],
        end_date: Optional[str],
        description: str,
    ) -> str:
        link_id = _new_id()
        conn.execute(
            """INSERT INTO work_experiences
               (id, user_id, company_id, title, start_date, end_date, is_current, description, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                link_id, user_id, company_id, title, start_date, end_date,
                int(end_date is None), description, _now(),
            ),
        )
        return link_id

    def find_user_education(self, conn, user_id: str, institution_id: str) -> Optional[sqlite3.Row]:
        return conn.execute(
            "SELECT * FROM user_educations WHERE user_id = ? AND institution_id = ?",
            (user_id, institution_id),
        ).fetchone()

    def create_user_education(
        self,
        conn,
        user_id: str,
        institution_id: str,
        degree: str,
        field_of_study: str,
        start_date: str,
        end_date: str,
        grade: Optional[str] = None,
    ) -> str:
        link_id = _new_id()
        conn.execute(
            """INSERT INTO user_educations
               (id, user_id, institution_id, degree, field_of_study, start_date, end_date, grade, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (link_id, user_id, institution_id, degree, field_of_study, start_date, end_date, grade, _now()),
        )
        return link_id

    # --- goals ---

    def find_objective(self, conn, user_id: str, title: str) -> Optional[sqlite3.Row]:
        return conn.execute(
            "SELECT * FROM objectives WHERE user_id = ? AND lower(title) = lower(?)",
            (user_id, title),
        ).fetchone()

    def get_objective(self, conn, user_id: str, objective_id: str) -> Optional[sqlite3.Row]:
        return conn.execute(
            "SELECT * FROM objectives WHERE user_id = ? AND id = ?", (user_id, objective_id)
        ).fetchone()

    def latest_active_objective(self, conn, user_id: str) -> Optional[sqlite3.Row]:
        return conn.execute(
            """SELECT * FROM objectives WHERE user_id = ? AND status = 'active'
               ORDER BY created_at DESC, rowid DESC LIMIT 1""",
            (user_id,),
        ).fetchone()

    def create_objective(self, conn, user_id: str, title: str, **fields) -> str:
        objective_id = _new_id()
        conn.execute(
            """INSERT INTO objectives
               (id, user_id, title, category, priority, timeframe, target_date, description, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                objective_id, user_id, title,
                fields["category"], fields["priority"], fields["timeframe"],
                fields.get("target_date"), fields.get("description"), _now(),
            ),
        )
        return objective_id

    def find_key_result(self, conn, objective_id: str, title: str) -> Optional[sqlite3.Row]:
        return conn.execute(
            "SELECT * FROM key_results WHERE objective_id = ? AND lower(title) = lower(?)",
            (objective_id, title),
        ).fetchone()

    def create_key_result(self, conn, objective_id: str, title: str, **fields) -> str:
        key_result_id = _new_id()
        conn.execute(
            """INSERT INTO key_results
               (id, objective_id, title, measurement_type, target_value, unit, due_date, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                key_result_id, objective_id, title,
                fields["measurement_type"], fields.get("target_value"),
                fields.get("unit"), fields.get("due_date"), _now(),
            ),
        )
        return key_result_id

    # --- applied-commit journal ---

    def record_applied(
        self, conn, user_id: str, commit_id: str, action_type: str,
        link_id: Optional[str], entity_id: Optional[str],
    ) -> None:
        """Written in the same transaction as the link it describes."""
        conn.execute(
            """INSERT INTO applied_commits (commit_id, user_id, action_type, link_id, entity_id)
               VALUES (?, ?, ?, ?, ?)""",
            (commit_id, user_id, action_type, link_id, entity_id),
        )

    def find_applied(self, user_id: str, commit_id: str) -> Optional[dict]:
        """The journal row for a commit whose link was already written, if any."""
        try:
            with wal_connect(self.db_path, row_factory=True, timeout=self.timeout) as conn:
                row = conn.execute(
                    "SELECT * FROM applied_commits WHERE commit_id = ? AND user_id = ?",
                    (commit_id, user_id),
                ).fetchone()
        except sqlite3.Error as e:
            raise ProfileStoreError(str(e)) from e
        return dict(row) if row else None

    # --- read side ---

    def get_profile(self, user_id: str) -> dict:
        """Everything linked to a user, for display."""
        try:
            with wal_connect(self.db_path, row_factory=True, timeout=self.timeout) as conn:
                skills = conn.execute(
                    """SELECT s.name, s.category, us.proficiency, us.years_experience
                       FROM user_skills us JOIN skills s ON s.id = us.skill_id
                       WHERE us.user_id = ? ORDER BY s.name""",
                    (user_id,),
                ).fetchall()
                work = conn.execute(
                    """SELECT c.name AS company, c.industry, w.title, w.start_date, w.end_date, w.is_current
                       FROM work_experiences w JOIN companies c ON c.id = w.company_id
                       WHERE w.user_id = ? ORDER BY w.start_date DESC""",
                    (user_id,),
                ).fetchall()
                education = conn.execute(
                    """SELECT i.name AS institution, e.degree, e.field_of_study, e.start_date, e.end_date
                       FROM user_educations e JOIN institutions i ON i.id = e.institution_id
                       WHERE e.user_id = ? ORDER BY e.end_date DESC""",
                    (user_id,),
                ).fetchall()
                objectives = conn.execute(
                    """SELECT id, title, category, priority, timeframe, target_date, status
                       FROM objectives WHERE user_id = ? ORDER BY created_at""",
                    (user_id,),
                ).fetchall()
                key_results = conn.execute(
                    """SELECT k.id, k.objective_id, k.title, k.measurement_type, k.target_value,
                              k.current_value, k.unit, k.due_date
                       FROM key_results k JOIN objectives o ON o.id = k.objective_id
                       WHERE o.user_id = ? ORDER BY k.created_at""",
                    (user_id,),
                ).fetchall()
        except sqlite3.Error as e:
            raise ProfileStoreError(str(e)) from e

        return {
            "skills": [dict(r) for r in skills],
            "work_experiences": [dict(r) for r in work],
            "educations": [dict(r) for r in education],
            "objectives": [dict(r) for r in objectives],
            "key_results": [dict(r) for r in key_results],
        }

    def count_links(self, table: str, user_id: str) -> int:
        if table not in ("user_skills", "work_experiences", "user_educations", "objectives"):
            raise ValueError(f"Unknown link table: {table}")
        with wal_connect(self.db_path, timeout=self.timeout) as conn:
            return conn.execute(
                f"SELECT COUNT(*) FROM {table} WHERE user_id = ?", (user_id,)
            ).fetchone()[0]
