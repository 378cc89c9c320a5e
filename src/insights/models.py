"""Data models for commitment insights."""

from pydantic import BaseModel, ConfigDict, Field

from shared_types import InsightType, Intensity, Timeframe

INTENSITY_WEIGHTS: dict[Intensity, int] = {
    Intensity.LOW: 1,
    Intensity.MEDIUM: 2,
    Intensity.HIGH: 3,
    Intensity.LIFE_CHANGING: 4,
}

# Tie-break order for the dominant commitment type
INSIGHT_TYPE_ORDER: tuple[InsightType, ...] = (
    InsightType.LIFE_COMMITMENT,
    InsightType.PROFESSIONAL_COMMITMENT,
    InsightType.PERSONAL_GROWTH,
    InsightType.RELATIONSHIP_COMMITMENT,
    InsightType.SKILL_COMMITMENT,
)


class CommitInsight(BaseModel):
    """A classified statement of personal intent found in narrated text."""

    model_config = ConfigDict(frozen=True)

    type: InsightType
    intensity: Intensity
    timeframe: Timeframe
    category: str
    entity: str = Field(..., min_length=1)
    commitment_statement: str
    philosophical_significance: str
    actionable_steps: list[str] = Field(default_factory=list)
    commitment_indicators: list[str] = Field(default_factory=list)
    risk_factors: list[str] = Field(default_factory=list)
    success_metrics: list[str] = Field(default_factory=list)

    @property
    def weight(self) -> int:
        return INTENSITY_WEIGHTS[self.intensity]

    @property
    def is_strong(self) -> bool:
        return self.intensity in (Intensity.HIGH, Intensity.LIFE_CHANGING)
