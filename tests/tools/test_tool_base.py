"""Tests for ToolResult and the Tool gate."""

from dataclasses import dataclass
from enum import Enum
from unittest.mock import AsyncMock

import pytest

from conftest import make_request
from visabud.intent import Intent
from visabud.memory import UserProfile
from visabud.tools import Tool, ToolRequest, ToolResult
from visabud.tools.base import payload_to_dict


class Colour(Enum):
    RED = "red"


@dataclass
class Payload:
    colour: Colour
    items: list


class EchoTool(Tool):
    """Minimal tool that records whether generate ran."""

    intent = Intent.VISA_TYPE

    def __init__(self, llm=None):
        super().__init__(llm=llm)
        self.generated = 0

    @property
    def name(self) -> str:
        return "echo"

    @property
    def description(self) -> str:
        return "Echo the destination"

    async def generate(self, request: ToolRequest) -> ToolResult:
        self.generated += 1
        return ToolResult.executed(self.name, "ok", {"destination": request.context.destination})


class TestToolResult:
    """Tests for gated/executed exclusivity."""

    def test_prompt_and_payload_rejected(self):
        with pytest.raises(ValueError):
            ToolResult(tool="x", prompt="Which country?", payload={"a": 1})

    def test_executed_needs_payload(self):
        with pytest.raises(ValueError):
            ToolResult.executed("x", "text", None)

    def test_gated(self):
        result = ToolResult.gated("x", "Which country?", ["destination country"])
        assert result.is_gated
        assert result.payload is None
        assert result.text == "Which country?"
        assert result.missing == ["destination country"]

    def test_executed(self):
        result = ToolResult.executed("x", "done", {"a": 1}, citations=["https://a"], source="model")
        assert not result.is_gated
        assert result.prompt is None
        assert result.source == "model"

    def test_payload_to_dict_converts_enums(self):
        result = ToolResult.executed("x", "t", Payload(Colour.RED, [Colour.RED, {"c": Colour.RED}]))
        assert payload_to_dict(result.payload) == {"colour": "red", "items": ["red", {"c": "red"}]}

    def test_payload_to_dict_of_gated(self):
        assert payload_to_dict(ToolResult.gated("x", "p", []).payload) is None


class TestToolGate:
    """Tests for Tool.execute."""

    @pytest.mark.asyncio
    async def test_missing_inputs_skip_generate(self):
        tool = EchoTool()
        result = await tool.execute(make_request())

        assert result.is_gated
        assert result.prompt == "To suggest the right visa type, could you share your destination country and purpose of travel?"
        assert tool.generated == 0

    @pytest.mark.asyncio
    async def test_complete_inputs_generate(self):
        tool = EchoTool()
        result = await tool.execute(make_request(destination="CA", goal="tourist"))

        assert not result.is_gated
        assert result.payload == {"destination": "CA"}
        assert tool.generated == 1

    @pytest.mark.asyncio
    async def test_profile_goal_satisfies_purpose(self):
        tool = EchoTool()
        request = make_request(UserProfile(selected_goals=["work"]), destination="CA")
        assert tool.missing_inputs(request) == []

    def test_needed_for(self):
        assert EchoTool().needed_for == "visa type suggestion"


class TestModelJson:
    """Tests for Tool.model_json."""

    @pytest.mark.asyncio
    async def test_without_client(self):
        assert await EchoTool().model_json("s", "p") is None

    @pytest.mark.asyncio
    async def test_parses_fenced_output(self):
        llm = AsyncMock()
        llm.complete.return_value = '```json\n{"ok": true}\n```'
        assert await EchoTool(llm).model_json("s", "p") == {"ok": True}
        llm.complete.assert_awaited_once_with("s", "p")

    @pytest.mark.asyncio
    async def test_client_error_is_none(self):
        llm = AsyncMock()
        llm.complete.side_effect = RuntimeError("rate limited")
        assert await EchoTool(llm).model_json("s", "p") is None
