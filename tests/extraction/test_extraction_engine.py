"""Tests for the pattern extraction engine."""

import pytest

from extraction import ConversationAction, ExtractionEngine, extract
from extraction.engine import normalize
from extraction.patterns import FAMILIES, PatternFamily, PatternRule
from shared_types import ActionType


def _of_type(actions, action_type):
    return [a for a in actions if a.type == action_type]


class TestSkills:
    def test_skill_list_with_connector(self):
        actions = extract("I'm skilled in JavaScript and React")
        assert [a.entity for a in actions] == ["JavaScript", "React"]
        for a in actions:
            assert a.type == ActionType.SKILL
            assert a.details.proficiency == "intermediate"
            assert a.details.experience == 2

    def test_years_of_experience(self):
        actions = extract("I have 5 years of experience with Python")
        assert len(actions) == 1
        assert actions[0].entity == "Python"
        assert actions[0].details.experience == 5

    def test_years_after_skill(self):
        actions = extract("I've worked with React for 3 years.")
        assert [a.entity for a in actions] == ["React"]
        assert actions[0].details.experience == 3

    def test_comma_separated_skills(self):
        actions = extract("My skills include Python, SQL and Tableau.")
        assert [a.entity for a in actions] == ["Python", "SQL", "Tableau"]

    def test_expert_proficiency(self):
        actions = extract("I'm an expert in Rust")
        assert len(actions) == 1
        assert actions[0].entity == "Rust"
        assert actions[0].details.proficiency == "expert"

    def test_stop_word_is_not_a_skill(self):
        assert extract("I know it") == []

    def test_curly_apostrophe(self):
        actions = extract("I’m skilled in Go")
        assert [a.entity for a in actions] == ["Go"]


class TestCompanies:
    def test_employer_with_role_and_industry(self):
        actions = extract("I work at Google as a software engineer.")
        companies = _of_type(actions, ActionType.COMPANY)
        assert len(companies) == 1
        google = companies[0]
        assert google.entity == "Google"
        assert google.details.role == "software engineer"
        assert google.details.industry == "technology"

    def test_role_before_employer(self):
        actions = extract("I'm a data scientist at Netflix.")
        assert len(actions) == 1
        assert actions[0].type == ActionType.COMPANY
        assert actions[0].entity == "Netflix"
        assert actions[0].details.role == "data scientist"

    def test_date_span(self):
        actions = extract("I worked at Acme Corp from 2018 to 2021.")
        acme = _of_type(actions, ActionType.COMPANY)[0]
        assert acme.entity == "Acme Corp"
        assert acme.details.start_date == "2018"
        assert acme.details.end_date == "2021"

    def test_capitalised_name_is_not_cut(self):
        companies = _of_type(extract("I work at AT&T"), ActionType.COMPANY)
        assert [c.entity for c in companies] == ["AT&T"]

    def test_role_after_duration(self):
        companies = _of_type(
            extract("I worked at Google for 3 years as a Software Engineer"), ActionType.COMPANY
        )
        assert [c.entity for c in companies] == ["Google"]
        assert companies[0].details.role == "Software Engineer"

    @pytest.mark.parametrize(
        "text",
        ["I'm a regular at the gym", "I joined the team last year", "I work at a startup"],
    )
    def test_generic_place_is_not_a_company(self, text):
        assert _of_type(extract(text), ActionType.COMPANY) == []


class TestEducation:
    def test_graduated_from(self):
        actions = extract("I graduated from Stanford University in 2019.")
        assert len(actions) == 1
        edu = actions[0]
        assert edu.type == ActionType.EDUCATION
        assert edu.entity == "Stanford University"
        assert edu.details.end_date == "2019"

    def test_degree_and_field(self):
        actions = extract("I have a Bachelor's in Computer Science from Berkeley.")
        assert len(actions) == 1
        edu = actions[0]
        assert edu.entity == "Berkeley"
        assert edu.details.degree == "Bachelor's"
        assert edu.details.field_of_study == "Computer Science"

    def test_two_institutions_in_one_sentence(self):
        actions = extract("I studied Computer Science at MIT and got my Masters from Stanford")
        education = {a.entity: a for a in _of_type(actions, ActionType.EDUCATION)}
        assert set(education) == {"MIT", "Stanford"}
        assert education["MIT"].details.field_of_study == "Computer Science"
        assert education["Stanford"].details.degree == "Masters"


class TestGoals:
    def test_objective_with_target_date(self):
        actions = extract("I want to run a marathon by next year.")
        assert len(actions) == 1
        goal = actions[0]
        assert goal.type == ActionType.OBJECTIVE
        assert goal.entity == "run a marathon"
        assert goal.details.category == "health"
        assert goal.details.priority == "medium"
        assert goal.details.timeframe == "year"
        assert goal.details.target_date == "next year"

    def test_labelled_goal(self):
        actions = extract("Goal: launch my side project")
        assert [a.entity for a in actions] == ["launch my side project"]
        assert actions[0].details.category == "professional"

    def test_currency_key_result(self):
        actions = extract("Increase revenue to $50k this quarter.")
        assert len(actions) == 1
        kr = actions[0]
        assert kr.type == ActionType.KEY_RESULT
        assert kr.entity == "Increase revenue to $50k"
        assert kr.details.target_value == 50_000
        assert kr.details.unit == "USD"
        assert kr.details.measurement_type == "currency"
        assert kr.details.timeframe == "quarter"


class TestEngine:
    @pytest.mark.parametrize("text", ["", "   \n\t", None, 42])
    def test_empty_or_non_text_yields_nothing(self, text):
        assert extract(text) == []

    def test_no_matches(self):
        assert extract("The weather was lovely today.") == []

    def test_mixed_input(self, sample_text):
        actions = extract(sample_text)
        types = {a.type for a in actions}
        assert {ActionType.SKILL, ActionType.COMPANY, ActionType.EDUCATION, ActionType.OBJECTIVE} <= types
        assert {a.entity for a in _of_type(actions, ActionType.SKILL)} == {"Python", "Docker"}

    def test_every_action_is_well_formed(self, sample_text):
        for a in extract(sample_text):
            assert a.entity == a.entity.strip() and a.entity
            assert a.details.kind == a.type.value
            assert a.commitment_insight is None

    def test_rule_value_error_is_skipped(self):
        def broken(match, ctx):
            raise ValueError("bad match")

        rule = PatternRule("broken", FAMILIES[0].rules[0].pattern, broken)
        engine = ExtractionEngine(families=(PatternFamily(ActionType.SKILL, (rule,)), *FAMILIES[1:]))
        actions = engine.extract("I know Python. I work at Google.")
        assert [a.type for a in actions] == [ActionType.COMPANY]

    def test_rule_runs_alone(self):
        rule = FAMILIES[0].rules[0]
        actions = rule.apply("I know Python")
        assert [a.entity for a in actions] == ["Python"]

    def test_normalize_folds_quotes(self):
        assert normalize("I’m “good”") == 'I\'m "good"'


class TestConversationAction:
    def test_details_must_match_type(self):
        with pytest.raises(ValueError):
            ConversationAction(type=ActionType.SKILL, entity="Python", details={"kind": "company"})

    def test_blank_entity_rejected(self):
        with pytest.raises(ValueError):
            ConversationAction.build(ActionType.SKILL, "   ")

    def test_with_edits(self):
        action = ConversationAction.build(ActionType.SKILL, "Pyhton", proficiency="beginner")
        edited = action.with_edits({"entity": "Python", "proficiency": "advanced"})
        assert edited.entity == "Python"
        assert edited.details.proficiency == "advanced"
        assert action.entity == "Pyhton"

    def test_with_unknown_edit_field_rejected(self):
        action = ConversationAction.build(ActionType.SKILL, "Python")
        with pytest.raises(ValueError):
            action.with_edits({"role": "engineer"})
