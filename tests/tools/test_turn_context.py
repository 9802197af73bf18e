"""Tests for per-turn context extraction."""

from visabud.memory import UserProfile
from visabud.tools import TurnContext, build_turn_context
from visabud.tools.context import (
    detect_paid_work,
    extract_duration_days,
    extract_duration_months,
    extract_purpose,
    extract_visa_type_id,
)


class TestBuildTurnContext:
    """Tests for build_turn_context."""

    def test_destination_goal_and_duration(self):
        ctx = build_turn_context("I want to study in Canada for 18 months")

        assert ctx.destination == "CA"
        assert ctx.destination_name == "Canada"
        assert ctx.goal == "study"
        assert ctx.duration_months == 18
        assert ctx.duration_days == 540

    def test_origin_is_not_destination(self):
        ctx = build_turn_context("I'm from India and want to work in Germany")
        assert ctx.destination == "DE"
        assert ctx.countries == ["IN", "DE"]

    def test_falls_back_to_earlier_user_messages(self):
        history = [
            {"role": "user", "content": "I want to work in Germany"},
            {"role": "assistant", "content": "Maybe try Canada instead"},
        ]
        ctx = build_turn_context("give me a roadmap", history)
        assert ctx.destination == "DE"
        assert ctx.goal == "work"

    def test_falls_back_to_profile(self):
        profile = UserProfile(preferred_destinations=["Japan"], selected_goals=["study", "tourist"])
        ctx = build_turn_context("give me a checklist", profile=profile)
        assert ctx.destination == "JP"
        assert ctx.goal == "tourist"

    def test_message_beats_history_and_profile(self):
        history = [{"role": "user", "content": "I want to work in Germany"}]
        profile = UserProfile(preferred_destinations=["Japan"])
        assert build_turn_context("what about Australia?", history, profile).destination == "AU"

    def test_city(self):
        assert build_turn_context("nearest embassy, I'm in New Delhi").city == "New Delhi"

    def test_nothing_known(self):
        ctx = build_turn_context("hello")
        assert ctx == TurnContext(text="hello")


class TestExtractors:
    """Tests for the individual extractors."""

    def test_durations(self):
        assert extract_duration_months("for 2 years") == 24
        assert extract_duration_months("5 years of experience") is None
        assert extract_duration_months("if I stay 20 years") == 120
        assert extract_duration_days("a 10 day trip") == 10
        assert extract_duration_days("3 weeks in Japan") == 21
        assert extract_duration_days("no dates yet") is None

    def test_purpose(self):
        assert extract_purpose("attending a conference in Berlin") == "conference"
        assert extract_purpose("a client meeting") == "business"
        assert extract_purpose("I want to study") == "study"
        assert extract_purpose("just curious") is None

    def test_paid_work(self):
        assert detect_paid_work("they will pay a salary") is True
        assert detect_paid_work("it's an unpaid talk, I won't get paid") is False
        assert detect_paid_work("giving a talk") is None

    def test_visa_type_id(self):
        assert extract_visa_type_id("cost of the AUS-500 visa") == "AUS-500"
        assert extract_visa_type_id("h1b fees") == "H1B"
        assert extract_visa_type_id("UK-SW please") == "UK-SW"
        assert extract_visa_type_id("a work visa") is None
