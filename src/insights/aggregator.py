"""One-pass analysis: extraction plus commitment insights, scored and linked."""

import random
from collections import Counter
from typing import Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field

from extraction.engine import ExtractionEngine
from extraction.models import ConversationAction

from . import templates
from .analyzer import CommitmentAnalyzer
from .models import INSIGHT_TYPE_ORDER, CommitInsight

logger = structlog.get_logger()

RandomSource = Union[random.Random, int, None]


class ConversationAnalysis(BaseModel):
    """Derived view over one input; recomputed on every call, never stored."""

    model_config = ConfigDict(frozen=True)

    actions: list[ConversationAction] = Field(default_factory=list)
    commitment_insights: list[CommitInsight] = Field(default_factory=list)
    philosophical_reflection: str = ""
    commitment_score: int = Field(0, ge=0, le=100)
    dominant_commitment_type: str = "none"


def commitment_score(insights: list[CommitInsight]) -> int:
    """Mean intensity weight scaled to 0-100, rounded half up."""
    if not insights:
        return 0
    total = sum(i.weight for i in insights)
    return int(100 * total / (4 * len(insights)) + 0.5)


def dominant_commitment_type(insights: list[CommitInsight]) -> str:
    if not insights:
        return "none"
    counts = Counter(i.type for i in insights)
    # max() keeps the first of equal counts, so ties follow the type order
    return max(INSIGHT_TYPE_ORDER, key=lambda t: counts[t]).value


def link_insights(
    actions: list[ConversationAction], insights: list[CommitInsight]
) -> list[ConversationAction]:
    """Attach to each action the first insight whose entity overlaps its own."""
    linked = []
    for action in actions:
        entity = action.entity.lower()
        match = next(
            (i for i in insights if i.entity.lower() in entity or entity in i.entity.lower()),
            None,
        )
        linked.append(action.model_copy(update={"commitment_insight": match}) if match else action)
    return linked


def generate_commitment_reflection(insights: list[CommitInsight]) -> str:
    if not insights:
        return templates.NO_INSIGHT_REFLECTION

    strong = sum(1 for i in insights if i.is_strong)
    reflection = templates.REFLECTION_OPENING
    if strong:
        reflection += templates.REFLECTION_HIGH_INTENSITY.format(count=strong)
    if len({i.type for i in insights}) > 2:
        reflection += templates.REFLECTION_DIVERSITY
    return reflection + templates.REFLECTION_CLOSING


def analyze_with_insights(
    text: str,
    engine: Optional[ExtractionEngine] = None,
    analyzer: Optional[CommitmentAnalyzer] = None,
) -> ConversationAnalysis:
    engine = engine or ExtractionEngine()
    analyzer = analyzer or CommitmentAnalyzer()

    insights = analyzer.analyze(text)
    actions = link_insights(engine.extract(text), insights)
    analysis = ConversationAnalysis(
        actions=actions,
        commitment_insights=insights,
        philosophical_reflection=generate_commitment_reflection(insights),
        commitment_score=commitment_score(insights),
        dominant_commitment_type=dominant_commitment_type(insights),
    )
    logger.info(
        "analysis.done",
        actions=len(actions),
        insights=len(insights),
        score=analysis.commitment_score,
        dominant=analysis.dominant_commitment_type,
    )
    return analysis


def _tone(score: int) -> str:
    if score >= 80:
        return "your words carry deep conviction"
    if score >= 60:
        return "there's good commitment energy here"
    return "I sense some hesitation"


def _rng(source: RandomSource) -> random.Random:
    if isinstance(source, random.Random):
        return source
    return random.Random(source)


def generate_commitment_response(analysis: ConversationAnalysis, rng: RandomSource = None) -> str:
    """Short acknowledgment of the commitments found.

    ``rng`` may be a ``random.Random`` or an integer seed; it only drives the
    choice of reflective question, which is asked when any insight is
    high-intensity.
    """
    insights = analysis.commitment_insights
    if not insights:
        return templates.NO_INSIGHT_RESPONSE

    count = len(insights)
    noun = "commitment" if count == 1 else "commitments"
    dominant = analysis.dominant_commitment_type.replace("_", " ")
    response = (
        f"I noticed {count} {noun} in what you shared, and {_tone(analysis.commitment_score)}. "
        f"The strongest theme is {dominant}."
    )

    if any(i.is_strong for i in insights):
        top = max(insights, key=lambda i: i.weight)
        question = _rng(rng).choice(templates.REFLECTIVE_QUESTIONS[top.type])
        response += " " + question.format(entity=top.entity)
    return response


REFLECTION_THRESHOLD = 70


def compose_reply(analysis: ConversationAnalysis, rng: RandomSource = None) -> str:
    """The acknowledgment, followed by the reflection when commitment runs high."""
    reply = generate_commitment_response(analysis, rng)
    if analysis.commitment_score >= REFLECTION_THRESHOLD:
        reply += "\n\n" + analysis.philosophical_reflection
    return reply
