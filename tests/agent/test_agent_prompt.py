"""Tests for canned replies and the generic-answer prompt."""

import pytest

from visabud.agent.prompt import DISCLAIMER, build_system_preamble, heuristic_summary, is_greeting
from visabud.index import RetrievedFact


def fact(statement: str, country: str = "Canada", site: str = "https://www.canada.ca") -> RetrievedFact:
    return RetrievedFact(statement=statement, code="CA", country=country, site=site, score=0.9)


class TestIsGreeting:
    @pytest.mark.parametrize("text", ["hi", "Hi!", "  hello ", "HEY.", "good morning", "Good evening!"])
    def test_greetings(self, text):
        assert is_greeting(text)

    @pytest.mark.parametrize("text", ["hi there", "hello, I need a visa", "hiking in Canada", "", "good night"])
    def test_not_greetings(self, text):
        assert not is_greeting(text)


class TestBuildSystemPreamble:
    """Tests for build_system_preamble."""

    def test_includes_profile_and_facts(self):
        preamble = build_system_preamble("<profile>\nNationality: Kenya\n</profile>", [fact("Biometrics are required.")])

        assert "Nationality: Kenya" in preamble
        assert "- Canada: Biometrics are required. (source: https://www.canada.ca)" in preamble
        assert "Do not invent fees" in preamble

    def test_no_facts(self):
        assert "- (none)" in build_system_preamble("<profile>\n</profile>", [])


class TestHeuristicSummary:
    def test_bullets(self):
        summary = heuristic_summary([fact("A"), fact("B", country="United Kingdom")])
        assert summary == "Here are verified points relevant to your question:\n- [Canada] A\n- [United Kingdom] B"


class TestDisclaimer:
    def test_mentions_verification(self):
        assert DISCLAIMER.startswith("\n\nNote:")
        assert "verify on official sites" in DISCLAIMER
