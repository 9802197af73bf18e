"""Tests for heuristic profile extraction."""

import pytest

from visabud.memory import extract_from_chat, normalize_date
from visabud.memory.extractor import (
    detect_education,
    detect_finances,
    detect_nationality,
    detect_occupation,
    detect_passport_expiry,
    detect_passport_valid,
    detect_residence,
    detect_work_years,
    extract_message,
)


class TestNormalizeDate:
    """Tests for normalize_date."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2027-03-12", "2027-03-12"),
            ("25/12/2026", "2026-12-25"),
            ("03/04/2026", "2026-03-04"),
            ("12 March 2027", "2027-03-12"),
            ("March 12, 2027", "2027-03-12"),
            ("March 2027", "2027-03-01"),
        ],
    )
    def test_formats(self, value, expected):
        assert normalize_date(value) == expected

    def test_invalid(self):
        assert normalize_date("31/02/2026") is None
        assert normalize_date("soon") is None
        assert normalize_date(None) is None


class TestDetectors:
    """Tests for the single-field detectors."""

    def test_nationality_variants(self):
        assert detect_nationality("I'm from Nigeria") == "Nigeria"
        assert detect_nationality("I am an Indian citizen") == "India"
        assert detect_nationality("I hold a British passport") == "United Kingdom"
        assert detect_nationality("I'm Kenyan") == "Kenya"

    def test_nationality_none(self):
        assert detect_nationality("I'm excited about this") is None

    def test_residence(self):
        assert detect_residence("I live in Dubai") == "Dubai"
        assert detect_residence("I'm based in the UK") == "United Kingdom"

    def test_passport(self):
        assert detect_passport_expiry("My passport expires on 12 March 2027") == "2027-03-12"
        assert detect_passport_valid("I have a valid passport") is True
        assert detect_passport_valid("my passport expired last year") is False
        assert detect_passport_valid("hello") is None

    def test_occupation(self):
        assert detect_occupation("I work as a software engineer at a bank") == "software engineer"
        assert detect_occupation("I'm a nurse") == "nurse"

    def test_finances_low_wins(self):
        assert detect_finances("I have limited funds but some savings") == "low"
        assert detect_finances("I have sufficient funds") == "medium"

    def test_education_and_years(self):
        assert detect_education("I have a Master's in biology") == "master's degree"
        assert detect_work_years("5 years of experience in IT") == 5
        assert detect_work_years("I worked for 3 years") == 3


class TestExtractMessage:
    def test_collects_goals_and_destination(self):
        update = extract_message("I'm from India and want to study in Canada")
        assert update.nationality == "India"
        assert update.selected_goals == ["study"]
        assert update.preferred_destinations == ["Canada"]


class TestExtractFromChat:
    """Tests for weighting across a conversation."""

    def test_user_outweighs_assistant(self):
        history = [
            {"role": "user", "content": "I'm from Kenya"},
            {"role": "assistant", "content": "Great, I'm from Nigeria originally"},
        ]
        assert extract_from_chat(history).nationality == "Kenya"

    def test_later_user_value_wins(self):
        history = [
            {"role": "user", "content": "I'm from Kenya"},
            {"role": "user", "content": "Sorry, I'm a citizen of Nigeria"},
        ]
        assert extract_from_chat(history).nationality == "Nigeria"

    def test_assistant_fills_unknown_fields(self):
        history = [
            {"role": "user", "content": "I'm from Kenya"},
            {"role": "assistant", "content": "Noted. I'm a nurse too, so I know the process."},
        ]
        update = extract_from_chat(history)
        assert update.nationality == "Kenya"
        assert update.occupation == "nurse"

    def test_lists_only_from_user(self):
        history = [
            {"role": "assistant", "content": "Do you want to study or work?"},
            {"role": "user", "content": "I want to work, I speak English and French"},
        ]
        update = extract_from_chat(history)
        assert update.selected_goals == ["work"]
        assert update.languages == ["English", "French"]

    def test_ignores_other_roles_and_blank(self):
        history = [{"role": "system", "content": "I'm from Kenya"}, {"role": "user", "content": "  "}]
        assert extract_from_chat(history).is_empty()
