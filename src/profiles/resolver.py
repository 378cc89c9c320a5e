"""Applies approved actions to a user's profile with find-or-create semantics.

Every action is safe to apply twice: the second application finds the
existing link and reports "already exists" instead of writing.
"""

import re
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Iterator, Optional

import structlog

from extraction.models import ConversationAction
from shared_types import ActionType

from .graph import GraphMirror, NullGraphMirror
from .store import ProfileStore, ProfileStoreError

logger = structlog.get_logger()

SKILL_CATEGORIES: dict[str, tuple[str, ...]] = {
    "Programming": ("javascript", "typescript", "python", "java", "c++", "c#", "go", "rust", "php"),
    "Frontend": ("react", "vue", "angular", "html", "css", "sass", "tailwind"),
    "Backend": ("node.js", "express", "django", "spring", "laravel", "rails"),
    "Cloud": ("aws", "azure", "gcp", "docker", "kubernetes", "terraform"),
    "Database": ("postgresql", "mysql", "mongodb", "redis", "elasticsearch"),
}
DEFAULT_SKILL_CATEGORY = "Technical"

DEFAULT_INDUSTRY = "Technology"
DEFAULT_ROLE = "Software Engineer"
DEFAULT_INSTITUTION_TYPE = "University"
DEFAULT_COUNTRY = "United States"
DEFAULT_DEGREE = "Bachelor of Science"
DEFAULT_FIELD = "Computer Science"

DUPLICATE_MESSAGES = {
    ActionType.SKILL: "Skill already exists",
    ActionType.COMPANY: "Work experience already exists",
    ActionType.EDUCATION: "Education already exists",
    ActionType.OBJECTIVE: "Objective already exists",
    ActionType.KEY_RESULT: "Key result already exists",
}


def skill_category(name: str) -> str:
    lowered = name.lower()
    for category, names in SKILL_CATEGORIES.items():
        if lowered in names:
            return category
    return DEFAULT_SKILL_CATEGORY


def placeholder_website(name: str) -> str:
    host = re.sub(r"\s+", "", name.lower())
    return f"https://{host}.com"


def _years_ago(years: int) -> str:
    return (datetime.now() - timedelta(days=365 * years)).date().isoformat()


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of applying one action.

    success=True: a link was created. success=False with no error: the fact
    already existed. success=False with an error: the write failed.
    """

    type: ActionType
    entity: str
    success: bool
    id: Optional[str] = None
    entity_id: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None

    @property
    def outcome(self) -> str:
        if self.success:
            return "created"
        return "failed" if self.error else "duplicate"

    def to_dict(self) -> dict:
        return {**asdict(self), "type": self.type.value, "outcome": self.outcome}


class EntityResolver:
    """Resolves actions against one user's existing facts.

    Applications for the same user are serialized by a per-user lock, and
    each find-then-link runs inside a single write transaction.
    """

    def __init__(self, store: ProfileStore, graph: Optional[GraphMirror] = None):
        self.store = store
        self.graph = graph or NullGraphMirror()
        self._locks: dict[str, threading.Lock] = {}
        self._lock_users: dict[str, int] = {}
        self._locks_guard = threading.Lock()
        self._handlers = {
            ActionType.SKILL: self._apply_skill,
            ActionType.COMPANY: self._apply_company,
            ActionType.EDUCATION: self._apply_education,
            ActionType.OBJECTIVE: self._apply_objective,
            ActionType.KEY_RESULT: self._apply_key_result,
        }

    @contextmanager
    def _user_lock(self, user_id: str) -> Iterator[None]:
        # Entries live only while some caller holds or waits on them
        with self._locks_guard:
            lock = self._locks.setdefault(user_id, threading.Lock())
            self._lock_users[user_id] = self._lock_users.get(user_id, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._locks_guard:
                self._lock_users[user_id] -= 1
                if not self._lock_users[user_id]:
                    del self._lock_users[user_id]
                    del self._locks[user_id]

    def apply(
        self, user_id: str, action: ConversationAction, commit_id: Optional[str] = None
    ) -> ResolutionResult:
        """Apply one action. With a commit_id, a created link is journaled in the same transaction."""
        handler = self._handlers.get(action.type)
        if handler is None:
            return ResolutionResult(
                action.type, action.entity, success=False,
                error=f"Unsupported action type: {action.type.value}",
            )

        with self._user_lock(user_id):
            try:
                with self.store.transaction() as conn:
                    result = handler(conn, user_id, action)
                    if result.success and commit_id:
                        self.store.record_applied(
                            conn, user_id, commit_id, action.type.value, result.id, result.entity_id
                        )
            except sqlite3.IntegrityError:
                # A concurrent writer created the link first
                result = self._duplicate(action)
            except ProfileStoreError as e:
                logger.warning(
                    "resolver.apply_failed",
                    user_id=user_id,
                    action_type=action.type.value,
                    error=str(e),
                )
                result = ResolutionResult(action.type, action.entity, success=False, error=str(e))

        if result.success:
            self._mirror(user_id, action)
        logger.info(
            "resolver.applied",
            user_id=user_id,
            action_type=action.type.value,
            outcome=result.outcome,
        )
        return result

    def apply_all(self, user_id: str, actions: list[ConversationAction]) -> list[ResolutionResult]:
        """Apply each action; one failure never stops the rest."""
        return [self.apply(user_id, action) for action in actions]

    def _duplicate(self, action: ConversationAction) -> ResolutionResult:
        return ResolutionResult(
            action.type, action.entity, success=False, message=DUPLICATE_MESSAGES[action.type]
        )

    def _created(
        self, action: ConversationAction, link_id: str, entity_id: Optional[str] = None
    ) -> ResolutionResult:
        return ResolutionResult(
            action.type, action.entity, success=True, id=link_id, entity_id=entity_id or link_id
        )

    # --- handlers, each runs inside one transaction ---

    def _apply_skill(self, conn, user_id: str, action: ConversationAction) -> ResolutionResult:
        d = action.details
        skill = self.store.find_skill(conn, action.entity)
        skill_id = (
            skill["id"]
            if skill
            else self.store.create_skill(conn, action.entity, skill_category(action.entity), d.proficiency)
        )
        if self.store.find_user_skill(conn, user_id, skill_id):
            return self._duplicate(action)
        link_id = self.store.create_user_skill(conn, user_id, skill_id, d.proficiency, d.experience)
        return self._created(action, link_id, skill_id)

    def _apply_company(self, conn, user_id: str, action: ConversationAction) -> ResolutionResult:
        d = action.details
        company = self.store.find_company(conn, action.entity)
        company_id = (
            company["id"]
            if company
            else self.store.create_company(
                conn,
                action.entity,
                (d.industry or DEFAULT_INDUSTRY).title(),
                placeholder_website(action.entity),
            )
        )
        if self.store.find_work_experience(conn, user_id, company_id):
            return self._duplicate(action)
        role = d.role or DEFAULT_ROLE
        link_id = self.store.create_work_experience(
            conn,
            user_id,
            company_id,
            title=role,
            start_date=d.start_date or _years_ago(1),
            end_date=d.end_date,
            description=f"{role} at {action.entity}",
        )
        return self._created(action, link_id, company_id)

    def _apply_education(self, conn, user_id: str, action: ConversationAction) -> ResolutionResult:
        d = action.details
        institution = self.store.find_institution(conn, action.entity)
        institution_id = (
            institution["id"]
            if institution
            else self.store.create_institution(
                conn, action.entity, DEFAULT_INSTITUTION_TYPE, DEFAULT_COUNTRY
            )
        )
        if self.store.find_user_education(conn, user_id, institution_id):
            return self._duplicate(action)
        link_id = self.store.create_user_education(
            conn,
            user_id,
            institution_id,
            degree=d.degree or DEFAULT_DEGREE,
            field_of_study=d.field_of_study or DEFAULT_FIELD,
            start_date=d.start_date or _years_ago(4),
            end_date=d.end_date or _years_ago(1),
            grade=d.grade,
        )
        return self._created(action, link_id, institution_id)

    def _apply_objective(self, conn, user_id: str, action: ConversationAction) -> ResolutionResult:
        if self.store.find_objective(conn, user_id, action.entity):
            return self._duplicate(action)
        d = action.details
        objective_id = self.store.create_objective(
            conn,
            user_id,
            action.entity,
            category=d.category,
            priority=d.priority,
            timeframe=d.timeframe,
            target_date=d.target_date,
            description=d.description,
        )
        return self._created(action, objective_id)

    def _apply_key_result(self, conn, user_id: str, action: ConversationAction) -> ResolutionResult:
        d = action.details
        objective = (
            self.store.get_objective(conn, user_id, d.objective_id)
            if d.objective_id
            else self.store.latest_active_objective(conn, user_id)
        )
        if objective is None:
            return ResolutionResult(
                action.type, action.entity, success=False, error="Objective not found"
            )
        if self.store.find_key_result(conn, objective["id"], action.entity):
            return self._duplicate(action)
        key_result_id = self.store.create_key_result(
            conn,
            objective["id"],
            action.entity,
            measurement_type=d.measurement_type,
            target_value=d.target_value,
            unit=d.unit,
            due_date=d.target_date,
        )
        return self._created(action, key_result_id)

    # --- graph mirror ---

    def _mirror(self, user_id: str, action: ConversationAction) -> None:
        d = action.details
        user = ("User", user_id)
        try:
            if action.type == ActionType.SKILL:
                self.graph.upsert_node("Skill", action.entity, {"category": skill_category(action.entity)})
                self.graph.upsert_relationship(
                    user, "HAS_SKILL", ("Skill", action.entity),
                    {"proficiency": d.proficiency, "years": d.experience},
                )
            elif action.type == ActionType.COMPANY:
                self.graph.upsert_node("Company", action.entity, {"industry": d.industry})
                self.graph.upsert_relationship(
                    user, "WORKS_AT", ("Company", action.entity), {"role": d.role or DEFAULT_ROLE}
                )
            elif action.type == ActionType.EDUCATION:
                self.graph.upsert_node("Institution", action.entity, {"type": DEFAULT_INSTITUTION_TYPE})
                self.graph.upsert_relationship(
                    user, "STUDIED_AT", ("Institution", action.entity),
                    {"degree": d.degree, "field_of_study": d.field_of_study},
                )
            elif action.type == ActionType.OBJECTIVE:
                self.graph.upsert_node("Objective", action.entity, {"category": d.category})
                self.graph.upsert_relationship(
                    user, "PURSUES", ("Objective", action.entity), {"priority": d.priority}
                )
        except Exception as e:
            logger.warning(
                "resolver.mirror_failed",
                user_id=user_id,
                action_type=action.type.value,
                error=str(e),
            )
