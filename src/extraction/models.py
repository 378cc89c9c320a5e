"""Data models for candidate profile facts extracted from narrated text."""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from insights.models import CommitInsight
from shared_types import ActionType

Proficiency = Literal["beginner", "intermediate", "advanced", "expert"]
ObjectiveCategory = Literal["learning", "professional", "health", "personal"]
Priority = Literal["high", "medium", "low"]
GoalTimeframe = Literal["month", "quarter", "year", "ongoing"]
MeasurementType = Literal["percentage", "currency", "number", "boolean"]


class _Details(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    def populated(self) -> dict:
        """Detail fields that carry a value (the tag excluded)."""
        return self.model_dump(exclude={"kind"}, exclude_none=True)


class SkillDetails(_Details):
    kind: Literal["skill"] = "skill"
    proficiency: Proficiency = "intermediate"
    experience: int = Field(2, ge=0)


class CompanyDetails(_Details):
    kind: Literal["company"] = "company"
    role: Optional[str] = None
    industry: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class EducationDetails(_Details):
    kind: Literal["education"] = "education"
    degree: Optional[str] = None
    field_of_study: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    grade: Optional[str] = None


class ObjectiveDetails(_Details):
    kind: Literal["objective"] = "objective"
    category: ObjectiveCategory = "professional"
    priority: Priority = "medium"
    timeframe: GoalTimeframe = "quarter"
    target_date: Optional[str] = None
    description: Optional[str] = None


class KeyResultDetails(_Details):
    kind: Literal["key_result"] = "key_result"
    category: ObjectiveCategory = "professional"
    priority: Priority = "medium"
    timeframe: GoalTimeframe = "quarter"
    target_date: Optional[str] = None
    target_value: Optional[float] = None
    unit: Optional[str] = None
    measurement_type: MeasurementType = "number"
    objective_id: Optional[str] = None


class NoneDetails(_Details):
    kind: Literal["none"] = "none"


ActionDetails = Annotated[
    Union[
        SkillDetails,
        CompanyDetails,
        EducationDetails,
        ObjectiveDetails,
        KeyResultDetails,
        NoneDetails,
    ],
    Field(discriminator="kind"),
]

DETAILS_BY_TYPE: dict[ActionType, type[_Details]] = {
    ActionType.SKILL: SkillDetails,
    ActionType.COMPANY: CompanyDetails,
    ActionType.EDUCATION: EducationDetails,
    ActionType.OBJECTIVE: ObjectiveDetails,
    ActionType.KEY_RESULT: KeyResultDetails,
    ActionType.NONE: NoneDetails,
}


class ConversationAction(BaseModel):
    """An unconfirmed candidate fact awaiting human review.

    ``details`` is tagged by ``kind`` and must agree with ``type``; the
    optional ``commitment_insight`` is a reference set by the aggregator.
    """

    model_config = ConfigDict(frozen=True)

    type: ActionType
    entity: str
    details: ActionDetails
    commitment_insight: Optional[CommitInsight] = None

    @field_validator("entity")
    @classmethod
    def strip_entity(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("entity must not be empty")
        return v

    @model_validator(mode="after")
    def details_match_type(self):
        if self.details.kind != self.type.value:
            raise ValueError(
                f"details of kind {self.details.kind!r} do not match action type {self.type.value!r}"
            )
        return self

    @classmethod
    def build(cls, action_type: ActionType, entity: str, **details) -> "ConversationAction":
        """Construct an action with details of the right variant for ``action_type``."""
        return cls(type=action_type, entity=entity, details=DETAILS_BY_TYPE[action_type](**details))

    def with_edits(self, edits: dict | None) -> "ConversationAction":
        """Return a copy with reviewer edits merged over the details (and entity)."""
        if not edits:
            return self
        edits = dict(edits)
        entity = edits.pop("entity", self.entity)
        merged = {**self.details.model_dump(), **edits, "kind": self.details.kind}
        return ConversationAction(
            type=self.type,
            entity=entity,
            details=merged,
            commitment_insight=self.commitment_insight,
        )
