"""Tests for the country facts tool."""

import pytest

from conftest import KeywordEmbedder, make_request
from visabud.facts import FactStore
from visabud.index import EmbeddingIndex, Retriever
from visabud.tools import CountryFactsTool

CA_SITE = "https://www.canada.ca/en/immigration-refugees-citizenship.html"


class TestCountryFactsTool:
    """Tests for CountryFactsTool."""

    @pytest.mark.asyncio
    async def test_gate(self, small_facts: FactStore):
        result = await CountryFactsTool(small_facts).execute(make_request(text="do I need a visa?"))
        assert result.prompt == "To look up visa facts, could you share your destination country?"

    @pytest.mark.asyncio
    async def test_catalogue_entry_without_retriever(self, small_facts: FactStore):
        result = await CountryFactsTool(small_facts).execute(make_request(text="Canada?", destination="CA"))
        payload = result.payload

        assert payload.country == "Canada"
        assert payload.visa_types == ["Visitor visa", "Study permit"]
        assert payload.statements == list(small_facts.get("CA").statements)
        assert result.citations == [CA_SITE]
        assert f"Official: {CA_SITE}" in result.text

    @pytest.mark.asyncio
    async def test_retrieved_statements(self, small_facts: FactStore, embedder: KeywordEmbedder):
        retriever = Retriever(EmbeddingIndex(), small_facts, embedder)
        retriever.ensure_persisted()
        tool = CountryFactsTool(small_facts, retriever)

        result = await tool.execute(make_request(text="study permit in canada", destination="CA"))
        assert result.payload.statements == ["A study permit is required for most programs longer than six months."]
        assert result.citations == [CA_SITE]

    @pytest.mark.asyncio
    async def test_unknown_destination(self, small_facts: FactStore):
        result = await CountryFactsTool(small_facts).execute(make_request(text="Japan?", destination="JP"))
        assert result.text == "I don't have local facts for Japan yet. Check its official immigration site."
        assert result.citations == []
