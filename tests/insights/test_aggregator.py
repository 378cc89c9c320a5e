"""Tests for the analysis aggregator and commitment response."""

import random

import pytest

from insights import templates
from insights.aggregator import (
    ConversationAnalysis,
    analyze_with_insights,
    commitment_score,
    compose_reply,
    dominant_commitment_type,
    generate_commitment_reflection,
    generate_commitment_response,
)
from insights.models import CommitInsight
from shared_types import ActionType, InsightType, Intensity, Timeframe


def _insight(
    intensity: Intensity = Intensity.LOW,
    insight_type: InsightType = InsightType.SKILL_COMMITMENT,
    entity: str = "Rust",
) -> CommitInsight:
    return CommitInsight(
        type=insight_type,
        intensity=intensity,
        timeframe=Timeframe.IMMEDIATE,
        category="test",
        entity=entity,
        commitment_statement=f"i will practice {entity}",
        philosophical_significance="",
    )


class TestScore:
    def test_empty_is_zero(self):
        assert commitment_score([]) == 0

    def test_single_life_changing_is_full(self):
        assert commitment_score([_insight(Intensity.LIFE_CHANGING)]) == 100

    def test_mean_weight(self):
        assert commitment_score([_insight(Intensity.HIGH), _insight(Intensity.LOW)]) == 50

    def test_rounds_to_nearest(self):
        insights = [_insight(Intensity.LOW), _insight(Intensity.MEDIUM), _insight(Intensity.MEDIUM)]
        assert commitment_score(insights) == 42

    def test_half_rounds_up(self):
        insights = [_insight(Intensity.LIFE_CHANGING)] * 4 + [_insight(Intensity.LOW)] * 4
        assert commitment_score(insights) == 63

    @pytest.mark.parametrize("intensity", list(Intensity))
    def test_bounds(self, intensity):
        assert 0 <= commitment_score([_insight(intensity)] * 3) <= 100


class TestDominantType:
    def test_none_when_empty(self):
        assert dominant_commitment_type([]) == "none"

    def test_most_frequent(self):
        insights = [
            _insight(insight_type=InsightType.SKILL_COMMITMENT),
            _insight(insight_type=InsightType.SKILL_COMMITMENT),
            _insight(insight_type=InsightType.LIFE_COMMITMENT),
        ]
        assert dominant_commitment_type(insights) == "skill_commitment"

    def test_tie_follows_type_order(self):
        insights = [
            _insight(insight_type=InsightType.SKILL_COMMITMENT),
            _insight(insight_type=InsightType.PERSONAL_GROWTH),
        ]
        assert dominant_commitment_type(insights) == "personal_growth"


class TestReflection:
    def test_no_insights(self):
        assert generate_commitment_reflection([]) == templates.NO_INSIGHT_REFLECTION

    def test_high_intensity_count(self):
        reflection = generate_commitment_reflection(
            [_insight(Intensity.HIGH), _insight(Intensity.LIFE_CHANGING), _insight(Intensity.LOW)]
        )
        assert reflection.startswith(templates.REFLECTION_OPENING)
        assert "2 high-intensity commitments" in reflection
        assert templates.REFLECTION_DIVERSITY not in reflection

    def test_diversity_needs_three_types(self):
        insights = [
            _insight(insight_type=InsightType.SKILL_COMMITMENT),
            _insight(insight_type=InsightType.PERSONAL_GROWTH),
            _insight(insight_type=InsightType.LIFE_COMMITMENT),
        ]
        assert templates.REFLECTION_DIVERSITY in generate_commitment_reflection(insights)


class TestAnalyzeWithInsights:
    def test_links_matching_entities(self):
        analysis = analyze_with_insights("I will learn Python. I'm skilled in Python.")
        skills = [a for a in analysis.actions if a.type == ActionType.SKILL]
        assert len(skills) == 1
        assert skills[0].commitment_insight is not None
        assert skills[0].commitment_insight.entity == "Python"

    def test_unrelated_action_not_linked(self):
        analysis = analyze_with_insights("I will learn Spanish. I work at Google.")
        google = next(a for a in analysis.actions if a.type == ActionType.COMPANY)
        assert google.commitment_insight is None

    def test_no_commitments(self):
        analysis = analyze_with_insights("I know Python")
        assert analysis.commitment_insights == []
        assert analysis.commitment_score == 0
        assert analysis.dominant_commitment_type == "none"
        assert analysis.philosophical_reflection == templates.NO_INSIGHT_REFLECTION
        assert len(analysis.actions) == 1

    def test_empty_input(self):
        analysis = analyze_with_insights("")
        assert analysis == ConversationAnalysis(
            philosophical_reflection=templates.NO_INSIGHT_REFLECTION
        )

    def test_scored(self):
        analysis = analyze_with_insights("I will never give up on becoming a senior engineer")
        assert analysis.commitment_score > 0
        assert analysis.dominant_commitment_type == "life_commitment"


class TestResponse:
    def test_no_insights(self):
        assert generate_commitment_response(ConversationAnalysis()) == templates.NO_INSIGHT_RESPONSE

    def test_low_intensity_has_no_question(self):
        analysis = analyze_with_insights("I care about my friends")
        response = generate_commitment_response(analysis, rng=1)
        assert response == (
            "I noticed 1 commitment in what you shared, and I sense some hesitation. "
            "The strongest theme is relationship commitment."
        )

    def test_strong_commitment_asks_about_top_entity(self):
        analysis = analyze_with_insights("I will never give up on becoming a senior engineer")
        response = generate_commitment_response(analysis, rng=7)
        assert "deep conviction" in response
        assert '"becoming a senior engineer"' in response

    def test_seed_is_deterministic(self):
        analysis = analyze_with_insights("I will never give up on becoming a senior engineer")
        assert generate_commitment_response(analysis, rng=3) == generate_commitment_response(
            analysis, rng=random.Random(3)
        )


class TestComposeReply:
    def test_reflection_appended_at_high_score(self):
        insights = [_insight(Intensity.LIFE_CHANGING)]
        analysis = ConversationAnalysis(
            commitment_insights=insights,
            philosophical_reflection=generate_commitment_reflection(insights),
            commitment_score=commitment_score(insights),
            dominant_commitment_type="skill_commitment",
        )
        reply = compose_reply(analysis, rng=1)
        assert reply.startswith(generate_commitment_response(analysis, rng=1))
        assert reply.endswith(analysis.philosophical_reflection)

    def test_no_reflection_below_threshold(self):
        insights = [_insight(Intensity.LOW)]
        analysis = ConversationAnalysis(
            commitment_insights=insights,
            philosophical_reflection=generate_commitment_reflection(insights),
            commitment_score=commitment_score(insights),
            dominant_commitment_type="skill_commitment",
        )
        assert compose_reply(analysis) == generate_commitment_response(analysis)
