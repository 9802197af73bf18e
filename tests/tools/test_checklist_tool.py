"""Tests for ChecklistTool."""

from unittest.mock import AsyncMock

import pytest

from conftest import make_request
from visabud.facts import FactStore
from visabud.memory import TravelEvent, UserProfile
from visabud.storage import ArtifactStore
from visabud.tools import ChecklistTool
from visabud.tools.checklist import normalize_visa_type

CA_SITE = "https://www.canada.ca/en/immigration-refugees-citizenship.html"


def study_request(**profile) -> object:
    profile.setdefault("nationality", "India")
    return make_request(UserProfile(**profile), destination="CA", goal="study")


class TestChecklistGate:
    @pytest.mark.asyncio
    async def test_asks_for_nationality(self, small_facts: FactStore):
        result = await ChecklistTool(small_facts).execute(make_request(destination="CA", goal="study"))
        assert result.prompt == "To prepare your checklist for Canada, could you share your nationality?"


class TestChecklistGenerate:
    """Tests for checklist generation."""

    @pytest.mark.asyncio
    async def test_heuristic_study_checklist(self, small_facts: FactStore):
        result = await ChecklistTool(small_facts).execute(study_request())
        checklist = result.payload

        assert result.source == "heuristic"
        assert checklist.visa_type == "study"
        assert checklist.required_documents[0] == "Valid passport"
        assert "Offer or admission letter" in checklist.required_documents
        assert checklist.official_site == CA_SITE
        assert result.citations == [CA_SITE]
        assert "Official: " + CA_SITE in result.text

    @pytest.mark.asyncio
    async def test_profile_warnings(self, small_facts: FactStore):
        request = study_request(finances="low")
        request.passport_valid = False
        result = await ChecklistTool(small_facts).execute(request)

        assert result.warnings == [
            "Passport may expire within ~6 months of travel. Renew if needed.",
            "Financial status marked low: consider a sponsor letter or additional funds.",
        ]

    @pytest.mark.asyncio
    async def test_travel_history_adds_optional_document(self, small_facts: FactStore):
        result = await ChecklistTool(small_facts).execute(study_request(travel_history=[TravelEvent("France")]))
        assert "Previous visas and passport pages" in result.payload.optional_documents

    @pytest.mark.asyncio
    async def test_model_checklist(self, small_facts: FactStore):
        llm = AsyncMock()
        llm.complete.return_value = '{"requiredDocuments": ["Passport", "CAQ"], "optionalDocuments": ["Photos"]}'
        result = await ChecklistTool(small_facts, llm=llm).execute(study_request(finances="low"))

        assert result.source == "model"
        assert result.payload.required_documents == ["Passport", "CAQ"]
        assert result.payload.optional_documents == ["Photos"]
        assert result.warnings == ["Financial status marked low: consider a sponsor letter or additional funds."]

    @pytest.mark.asyncio
    async def test_model_without_documents_falls_back(self, small_facts: FactStore):
        llm = AsyncMock()
        llm.complete.return_value = '{"requiredDocuments": []}'
        result = await ChecklistTool(small_facts, llm=llm).execute(study_request())
        assert result.source == "heuristic"

    @pytest.mark.asyncio
    async def test_unknown_destination_has_no_site(self, small_facts: FactStore):
        request = make_request(UserProfile(nationality="India"), destination="JP", goal="tourist")
        result = await ChecklistTool(small_facts).execute(request)
        assert result.payload.official_site == ""
        assert result.citations == []

    @pytest.mark.asyncio
    async def test_saved_to_artifact_store(self, small_facts: FactStore):
        artifacts = ArtifactStore(None)
        await ChecklistTool(small_facts, artifacts=artifacts).execute(study_request())

        saved = artifacts.list("checklist")
        assert len(saved) == 1
        assert saved[0]["payload"]["destination"] == "CA"
        assert saved[0]["payload"]["required_documents"][0] == "Valid passport"


class TestNormalizeVisaType:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("Tourist", "tourist"),
            ("visitor visa", "tourist"),
            ("student", "study"),
            ("work permit", "work"),
            ("permanent residence", "immigration"),
            ("pr", "immigration"),
            ("", "generic"),
            (None, "generic"),
        ],
    )
    def test_values(self, value, expected):
        assert normalize_visa_type(value) == expected
