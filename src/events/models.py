"""Event payloads pushed to a user's live sessions."""

from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from shared_types import ActionType


class _Event(BaseModel):
    user_id: str
    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())


class GraphNode(BaseModel):
    id: str
    name: str
    type: Literal["user", "company", "skill", "institution", "objective"]
    color: str
    size: float
    metadata: dict = Field(default_factory=dict)


class GraphRelationship(BaseModel):
    id: str
    source: str
    target: str
    relationship_type: str
    strength: float
    metadata: dict = Field(default_factory=dict)


class NodeAddedEvent(_Event):
    type: Literal["node_added"] = "node_added"
    data: GraphNode


class RelationshipAddedEvent(_Event):
    type: Literal["relationship_added"] = "relationship_added"
    data: GraphRelationship


class ConversationUpdate(BaseModel):
    action: ActionType
    entity: str
    details: Optional[dict] = None


class ConversationUpdateEvent(_Event):
    type: Literal["conversation_update"] = "conversation_update"
    data: ConversationUpdate


ProfileEvent = Annotated[
    Union[NodeAddedEvent, RelationshipAddedEvent, ConversationUpdateEvent],
    Field(discriminator="type"),
]
