"""Tests for the keyword classifiers."""

import pytest

from extraction.classifiers import (
    infer_date_span,
    infer_experience,
    infer_goal_timeframe,
    infer_graduation_year,
    infer_industry,
    infer_objective_category,
    infer_priority,
    infer_proficiency,
    infer_target_date,
    is_unit_word,
    parse_target,
)


class TestProficiency:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("I'm an expert in Python", "expert"),
            ("I have mastered python", "expert"),
            ("I'm advanced in Python", "advanced"),
            ("I'm new to Python", "beginner"),
            ("I'm comfortable with Python", "intermediate"),
            ("I use Python", "intermediate"),
        ],
    )
    def test_levels(self, text, expected):
        assert infer_proficiency(text, "Python") == expected


class TestExperience:
    def test_years_before_skill(self):
        assert infer_experience("I have 5 years of experience with Python", "Python") == 5

    def test_years_after_skill(self):
        assert infer_experience("I used Go for 4 yrs at work", "Go") == 4

    def test_default(self):
        assert infer_experience("I know Python", "Python") == 2

    def test_number_in_other_sentence_ignored(self):
        assert infer_experience("I have 3 kids. I know Python.", "Python") == 2


class TestIndustry:
    def test_from_context(self):
        assert infer_industry("I work at Acme, a fintech startup", "Acme") == "finance"

    def test_from_name(self):
        assert infer_industry("I joined them last week", "City Hospital") == "healthcare"

    def test_unknown(self):
        assert infer_industry("I work at Acme", "Acme") is None


class TestGoalClassifiers:
    @pytest.mark.parametrize(
        "title,expected",
        [
            ("learn Spanish", "learning"),
            ("get promoted", "professional"),
            ("sleep better", "health"),
            ("spend time with family", "personal"),
            ("launch the thing", "professional"),
        ],
    )
    def test_category(self, title, expected):
        assert infer_objective_category(title) == expected

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("This is urgent", "high"),
            ("maybe someday", "low"),
            ("a regular plan", "medium"),
        ],
    )
    def test_priority(self, text, expected):
        assert infer_priority(text) == expected

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("in 3 months", "quarter"),
            ("over the next year", "year"),
            ("in two weeks", "month"),
            ("every day", "ongoing"),
            ("soon", "quarter"),
        ],
    )
    def test_timeframe(self, text, expected):
        assert infer_goal_timeframe(text) == expected

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("ship it by March 2025", "March 2025"),
            ("finish within 6 months", "6 months"),
            ("done by the end of the year", "the end of the year"),
            ("done by 2026-01-31", "2026-01-31"),
            ("no deadline here", None),
        ],
    )
    def test_target_date(self, text, expected):
        assert infer_target_date(text) == expected


class TestTargets:
    def test_percentage(self):
        assert parse_target("15", None, None, "%") == (15.0, "%", "percentage")

    def test_currency_symbol_with_magnitude(self):
        assert parse_target("50", "k", "$", None) == (50_000.0, "USD", "currency")

    def test_currency_word(self):
        assert parse_target("2", "m", None, "dollars") == (2_000_000.0, "USD", "currency")

    def test_plain_number_with_unit(self):
        assert parse_target("1,200", None, None, "users") == (1200.0, "users", "number")

    def test_non_unit_word_dropped(self):
        assert parse_target("10", None, None, "by") == (10.0, None, "number")

    def test_no_number_is_boolean(self):
        assert parse_target(None) == (None, None, "boolean")

    def test_is_unit_word(self):
        assert is_unit_word("customers")
        assert not is_unit_word("the")
        assert not is_unit_word(None)


class TestDates:
    def test_span(self):
        assert infer_date_span("from 2018 to 2021") == ("2018", "2021")

    def test_span_to_present(self):
        assert infer_date_span("from 2019 to present") == ("2019", None)

    def test_since(self):
        assert infer_date_span("since 2020") == ("2020", None)

    def test_none(self):
        assert infer_date_span("a while ago") == (None, None)

    def test_graduation_year(self):
        assert infer_graduation_year("graduated in 2015") == "2015"
        assert infer_graduation_year("class of 2012") == "2012"
        assert infer_graduation_year("graduated recently") is None
