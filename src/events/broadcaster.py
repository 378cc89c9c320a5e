"""Best-effort fan-out of profile changes to a user's live sessions.

Publishing never raises into the caller: a missing subscriber is normal,
and a transport failure is logged and dropped.
"""

import asyncio
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Optional, Protocol

import structlog

from extraction.models import ConversationAction
from shared_types import ActionType

from .models import (
    ConversationUpdate,
    ConversationUpdateEvent,
    GraphNode,
    GraphRelationship,
    NodeAddedEvent,
    RelationshipAddedEvent,
)

logger = structlog.get_logger()

SKILL_COLOR = "#8b5cf6"
COMPANY_COLOR = "#10b981"
INSTITUTION_COLOR = "#f59e0b"
OBJECTIVE_COLOR = "#3b82f6"


class Publisher(Protocol):
    def publish(self, user_id: str, event: dict) -> None: ...


class NullPublisher:
    def publish(self, user_id: str, event: dict) -> None:
        pass


@dataclass(eq=False)
class Subscription:
    user_id: str
    loop: asyncio.AbstractEventLoop
    queue: asyncio.Queue = field(default_factory=lambda: asyncio.Queue(maxsize=100))

    def deliver(self, event: dict) -> None:
        try:
            self.queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning("events.queue_full", user_id=self.user_id, event_type=event.get("type"))


class RoomPublisher:
    """In-process rooms keyed by user id, one queue per live subscriber.

    ``publish`` may be called from any thread; events are handed to each
    subscriber's loop in call order, so one user's stream keeps its order.
    """

    def __init__(self):
        self._rooms: dict[str, set[Subscription]] = defaultdict(set)
        self._lock = threading.Lock()

    def subscribe(self, user_id: str, loop: Optional[asyncio.AbstractEventLoop] = None) -> Subscription:
        sub = Subscription(user_id=user_id, loop=loop or asyncio.get_running_loop())
        with self._lock:
            self._rooms[user_id].add(sub)
        logger.debug("events.subscribed", user_id=user_id)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            room = self._rooms.get(sub.user_id)
            if room is not None:
                room.discard(sub)
                if not room:
                    del self._rooms[sub.user_id]

    def subscriber_count(self, user_id: str) -> int:
        with self._lock:
            return len(self._rooms.get(user_id, ()))

    def publish(self, user_id: str, event: dict) -> None:
        with self._lock:
            subs = list(self._rooms.get(user_id, ()))
        for sub in subs:
            try:
                sub.loop.call_soon_threadsafe(sub.deliver, event)
            except RuntimeError:
                # The subscriber's loop has closed without unsubscribing
                self.unsubscribe(sub)
                logger.warning("events.subscriber_dropped", user_id=user_id, event_type=event.get("type"))


class EventBroadcaster:
    def __init__(self, publisher: Optional[Publisher] = None):
        self.publisher = publisher or NullPublisher()

    def broadcast(self, user_id: str, event) -> bool:
        """Send one event; returns False (after logging) if the transport failed."""
        try:
            self.publisher.publish(user_id, event.model_dump(mode="json"))
            return True
        except Exception as e:
            logger.warning(
                "events.broadcast_failed", user_id=user_id, event_type=event.type, error=str(e)
            )
            return False

    def node_added(self, user_id: str, node: GraphNode) -> bool:
        return self.broadcast(user_id, NodeAddedEvent(user_id=user_id, data=node))

    def relationship_added(self, user_id: str, relationship: GraphRelationship) -> bool:
        return self.broadcast(user_id, RelationshipAddedEvent(user_id=user_id, data=relationship))

    def conversation_update(
        self, user_id: str, action: ActionType, entity: str, details: Optional[dict] = None
    ) -> bool:
        return self.broadcast(
            user_id,
            ConversationUpdateEvent(
                user_id=user_id,
                data=ConversationUpdate(action=action, entity=entity, details=details),
            ),
        )

    # --- helpers for committed facts ---

    def _graph_pair(
        self, user_id: str, node: GraphNode, rel_type: str, strength: float, metadata: dict
    ) -> None:
        self.node_added(user_id, node)
        self.relationship_added(
            user_id,
            GraphRelationship(
                id=f"{user_id}-{rel_type.lower().replace('_', '-')}-{node.id}",
                source=user_id,
                target=node.id,
                relationship_type=rel_type,
                strength=strength,
                metadata=metadata,
            ),
        )

    def skill_added(self, user_id: str, name: str, skill_id: str, proficiency: str, experience: int):
        meta = {"proficiency": proficiency, "experience": experience}
        node = GraphNode(
            id=skill_id, name=name, type="skill", color=SKILL_COLOR, size=10 + experience, metadata=meta
        )
        self._graph_pair(user_id, node, "HAS_SKILL", min(experience / 5, 3), meta)

    def company_added(
        self, user_id: str, name: str, company_id: str, role: str, industry: Optional[str] = None
    ):
        node = GraphNode(
            id=company_id, name=name, type="company", color=COMPANY_COLOR, size=15,
            metadata={"industry": industry},
        )
        self._graph_pair(user_id, node, "WORKS_AT", 2, {"role": role, "industry": industry})

    def education_added(
        self,
        user_id: str,
        name: str,
        institution_id: str,
        degree: Optional[str],
        field_of_study: Optional[str],
    ):
        meta = {"degree": degree, "field_of_study": field_of_study}
        node = GraphNode(
            id=institution_id, name=name, type="institution", color=INSTITUTION_COLOR, size=12,
            metadata=meta,
        )
        self._graph_pair(user_id, node, "STUDIED_AT", 2, meta)

    def objective_added(self, user_id: str, title: str, objective_id: str, category: str, priority: str):
        meta = {"category": category, "priority": priority}
        node = GraphNode(
            id=objective_id, name=title, type="objective", color=OBJECTIVE_COLOR, size=12,
            metadata=meta,
        )
        self._graph_pair(user_id, node, "PURSUES", 1, meta)

    def action_committed(self, user_id: str, action: ConversationAction, entity_id: str) -> None:
        """Graph events for a newly committed fact, then the conversation update."""
        d = action.details
        if action.type == ActionType.SKILL:
            self.skill_added(user_id, action.entity, entity_id, d.proficiency, d.experience)
        elif action.type == ActionType.COMPANY:
            self.company_added(user_id, action.entity, entity_id, d.role or "Software Engineer", d.industry)
        elif action.type == ActionType.EDUCATION:
            self.education_added(user_id, action.entity, entity_id, d.degree, d.field_of_study)
        elif action.type == ActionType.OBJECTIVE:
            self.objective_added(user_id, action.entity, entity_id, d.category, d.priority)
        self.conversation_update(user_id, action.type, action.entity, d.populated())
