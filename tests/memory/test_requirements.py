"""Tests for requirement rules, prompts and passport validity."""

from datetime import date

import pytest

from visabud.memory import NeedHints, UserProfile, build_prompt, missing_fields, passport_is_valid
from visabud.memory.requirements import add_months, human_join


class TestMissingFields:
    """Tests for missing_fields."""

    def test_roadmap_with_empty_profile(self):
        assert missing_fields("roadmap", UserProfile()) == [
            "destination country",
            "visa goal (study, work, immigration, tourist)",
            "nationality",
            "education or work years",
        ]

    def test_hints_satisfy_destination_and_goal(self):
        missing = missing_fields("roadmap", UserProfile(nationality="India"), NeedHints(destination="Canada", goal="study"))
        assert missing == ["education or work years"]

    def test_profile_goal_counts(self):
        profile = UserProfile(nationality="India", selected_goals=["work"], work_years=0)
        assert missing_fields("roadmap", profile, NeedHints(destination="Canada")) == []

    def test_passport_needs_expiry_or_true(self):
        hints = NeedHints(destination="Canada", goal="work")
        base = UserProfile(nationality="India")
        assert "passport validity" in missing_fields("eligibility check", base, hints)
        assert "passport validity" in missing_fields("eligibility check", UserProfile(nationality="India", passport_valid=False), hints)
        assert missing_fields("eligibility check", UserProfile(nationality="India", passport_valid=True), hints) == []
        assert missing_fields("eligibility check", UserProfile(nationality="India", passport_expiry="2030-01-01"), hints) == []

    def test_untargeted_rules(self):
        assert missing_fields(None, UserProfile()) == [
            "nationality",
            "passport validity",
            "occupation",
            "financial capacity",
            "purpose of travel",
        ]

    def test_unknown_context_uses_general(self):
        assert missing_fields("something else", UserProfile()) == []
        assert missing_fields("comparison", UserProfile()) == []


class TestBuildPrompt:
    """Tests for build_prompt."""

    def test_roadmap_prompt_lists_every_missing_field(self):
        missing = missing_fields("roadmap", UserProfile())
        assert build_prompt("roadmap", missing) == (
            "To generate a useful roadmap, could you share your destination country, "
            "visa goal (study, work, immigration, tourist), nationality and education or work years?"
        )

    def test_nothing_missing(self):
        assert build_prompt("roadmap", []) is None

    def test_destination_named_in_opener(self):
        prompt = build_prompt("checklist", ["nationality"], "Canada")
        assert prompt == "To prepare your checklist for Canada, could you share your nationality?"

    def test_roadmap_opener_ignores_destination(self):
        assert build_prompt("roadmap", ["nationality"], "Canada").startswith("To generate a useful roadmap,")

    def test_passport_only_question(self):
        prompt = build_prompt("eligibility check", ["passport validity"], "Canada")
        assert prompt == "To check your eligibility for Canada, do you currently have a valid passport?"

    def test_human_join(self):
        assert human_join([]) == ""
        assert human_join(["a"]) == "a"
        assert human_join(["a", "b"]) == "a and b"
        assert human_join(["a", "b", "c"]) == "a, b and c"


class TestPassportValidity:
    """Tests for the six-month passport rule."""

    def test_exactly_six_months_is_valid(self):
        assert passport_is_valid("2025-12-01", date(2025, 6, 1)) is True

    def test_one_day_short_is_invalid(self):
        assert passport_is_valid("2025-11-30", date(2025, 6, 1)) is False

    def test_past_expiry(self):
        assert passport_is_valid("2024-01-01", date(2025, 6, 1)) is False

    def test_missing_or_bad_expiry(self):
        assert passport_is_valid(None, date(2025, 6, 1)) is False
        assert passport_is_valid("next year", date(2025, 6, 1)) is False

    def test_custom_months(self):
        assert passport_is_valid("2025-09-01", date(2025, 6, 1), months=3) is True

    @pytest.mark.parametrize(
        "day,months,expected",
        [
            (date(2025, 8, 31), 6, date(2026, 2, 28)),
            (date(2024, 8, 31), 6, date(2025, 2, 28)),
            (date(2023, 8, 31), 6, date(2024, 2, 29)),
            (date(2025, 1, 15), 12, date(2026, 1, 15)),
        ],
    )
    def test_add_months_clamps(self, day, months, expected):
        assert add_months(day, months) == expected
