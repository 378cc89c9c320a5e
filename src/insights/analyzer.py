"""Detects commitment language and classifies it into insights."""

import re
from typing import Optional

import structlog

from shared_types import InsightType, Intensity, Timeframe

from . import templates
from .models import CommitInsight

logger = structlog.get_logger()

CONTEXT_RADIUS = 50

# Tiers are checked in order; the first tier with a hit wins
INTENSITY_TIERS: tuple[tuple[Intensity, re.Pattern], ...] = (
    (
        Intensity.LIFE_CHANGING,
        re.compile(
            r"\b(?:never|always|forever|completely|absolutely|totally|life-changing|transformative)\b",
            re.IGNORECASE,
        ),
    ),
    (
        Intensity.HIGH,
        re.compile(r"\b(?:will|must|need to|committed|dedicated|determined)\b", re.IGNORECASE),
    ),
    (Intensity.MEDIUM, re.compile(r"will|commit", re.IGNORECASE)),
)

TIMEFRAME_TIERS: tuple[tuple[Timeframe, tuple[str, ...]], ...] = (
    (Timeframe.LIFELONG, ("forever", "always", "life")),
    (Timeframe.LONG_TERM, ("years", "long-term", "career")),
    (Timeframe.SHORT_TERM, ("months", "short-term")),
)

_ENTITY_RE = re.compile(r"\s*([^.!?;,\n]+)")


def _phrase_pattern(phrase: str) -> re.Pattern:
    return re.compile(rf"\b{re.escape(phrase)}\b", re.IGNORECASE)


def classify_intensity(context: str) -> Intensity:
    for intensity, pattern in INTENSITY_TIERS:
        if pattern.search(context):
            return intensity
    return Intensity.LOW


def classify_timeframe(context: str) -> Timeframe:
    lowered = context.lower()
    for timeframe, cues in TIMEFRAME_TIERS:
        if any(cue in lowered for cue in cues):
            return timeframe
    return Timeframe.IMMEDIATE


def commitment_indicators(context: str) -> list[str]:
    lowered = context.lower()
    found = [
        label for label, cues in templates.INDICATOR_RULES if any(cue in lowered for cue in cues)
    ]
    return found or [templates.DEFAULT_INDICATOR]


class CommitmentAnalyzer:
    """Scans text for commitment phrasing, one insight per phrase occurrence."""

    def __init__(self, phrases: dict[InsightType, tuple[str, ...]] = templates.COMMITMENT_PHRASES):
        self._families = [
            (insight_type, [_phrase_pattern(p) for p in family])
            for insight_type, family in phrases.items()
        ]

    def analyze(self, text: str) -> list[CommitInsight]:
        if not isinstance(text, str) or not text.strip():
            return []

        text = text.replace("’", "'")
        insights = []
        for insight_type, patterns in self._families:
            for pattern in patterns:
                for match in pattern.finditer(text):
                    insight = self._build(text, match, insight_type)
                    if insight is not None:
                        insights.append(insight)

        logger.debug("insights.analyzed", text_length=len(text), insights=len(insights))
        return insights

    def _build(self, text: str, match: re.Match, insight_type: InsightType) -> Optional[CommitInsight]:
        entity_match = _ENTITY_RE.match(text, match.end())
        if not entity_match or not entity_match.group(1).strip():
            return None
        entity = entity_match.group(1).strip()

        context = text[max(0, match.start() - CONTEXT_RADIUS) : match.end() + CONTEXT_RADIUS]
        return CommitInsight(
            type=insight_type,
            intensity=classify_intensity(context),
            timeframe=classify_timeframe(context),
            category=templates.CATEGORIES[insight_type],
            entity=entity,
            commitment_statement=f"{match.group(0)} {entity}",
            philosophical_significance=templates.SIGNIFICANCE[insight_type].format(entity=entity),
            actionable_steps=[s.format(entity=entity) for s in templates.ACTIONABLE_STEPS[insight_type]],
            commitment_indicators=commitment_indicators(context),
            risk_factors=list(templates.RISK_FACTORS[insight_type]),
            success_metrics=list(templates.SUCCESS_METRICS[insight_type]),
        )


_default_analyzer = CommitmentAnalyzer()


def analyze(text: str) -> list[CommitInsight]:
    return _default_analyzer.analyze(text)
