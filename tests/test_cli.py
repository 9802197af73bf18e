"""Tests for CLI."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from conftest import KeywordEmbedder
from visabud.agent import AgentReply, EngineContext, Orchestrator
from visabud.cli import CLI, build_engine
from visabud.collaborators import Collaborators, LocalFileExporter
from visabud.config import EngineConfig
from visabud.facts import FactStore
from visabud.llm import GroqLLMClient
from visabud.memory import ProfileUpdate


@pytest.fixture
def engine(small_facts: FactStore, embedder: KeywordEmbedder) -> EngineContext:
    engine = EngineContext.in_memory(embedder=embedder, facts=small_facts)
    engine.prepare()
    return engine


@pytest.fixture
def cli(engine: EngineContext) -> CLI:
    return CLI(Orchestrator(engine))


def test_new_thread_id(cli: CLI) -> None:
    """Test thread ID generation."""
    assert cli.thread_id.startswith("cli-")
    assert len(cli.thread_id) == 12  # "cli-" + 8 hex chars


@pytest.mark.asyncio
async def test_handle_command_exit(cli: CLI) -> None:
    """Test exit commands return False."""
    assert await cli._handle_command("/exit") is False
    assert await cli._handle_command("quit") is False


@pytest.mark.asyncio
async def test_handle_command_help(cli: CLI, capsys) -> None:
    """Test help command returns True."""
    assert await cli._handle_command("/help") is True
    out = capsys.readouterr().out
    assert "/ingest <path>" in out
    assert "/review <path>" in out


@pytest.mark.asyncio
async def test_unknown_command_continues(cli: CLI) -> None:
    assert await cli._handle_command("/whatever") is True


@pytest.mark.asyncio
async def test_reset_clears_profile_and_thread(cli: CLI, engine: EngineContext) -> None:
    """Test reset forgets the profile and starts a new thread."""
    engine.profiles.apply(ProfileUpdate(nationality="Kenya"))
    await cli._process_message("give me a roadmap")
    old_id = cli.thread_id

    assert await cli._handle_command("/reset") is True

    assert cli.thread_id != old_id
    assert cli.last_reply is None
    assert engine.profiles.get_or_create().nationality is None
    assert engine.chats.history(old_id) == []


@pytest.mark.asyncio
async def test_profile_command(cli: CLI, engine: EngineContext, capsys) -> None:
    engine.profiles.apply(ProfileUpdate(nationality="Kenya"))
    await cli._handle_command("/profile")
    assert "Nationality: Kenya" in capsys.readouterr().out


def test_format_response_plain(cli: CLI) -> None:
    """Test response formatting without extras."""
    output = cli._format_response(AgentReply(reply_text="Hello!"))
    assert "Hello!" in output
    assert "Sources" not in output
    assert "⚠" not in output


def test_format_response_with_sources_and_warnings(cli: CLI) -> None:
    reply = AgentReply(
        reply_text="Checklist",
        citations=["https://www.gov.uk", "https://www.canada.ca"],
        warnings=["Passport may expire soon."],
    )
    output = cli._format_response(reply)

    assert "⚠ Passport may expire soon." in output
    assert "Sources: https://www.gov.uk, https://www.canada.ca" in output


@pytest.mark.asyncio
async def test_process_message_keeps_last_reply(cli: CLI, capsys) -> None:
    await cli._process_message("hi")
    assert cli.last_reply.tool_used == "chat"
    assert "VisaBud" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_export_without_reply(cli: CLI, capsys) -> None:
    await cli._handle_command("/export")
    assert "Nothing to export yet." in capsys.readouterr().out


@pytest.mark.asyncio
async def test_export_unavailable(cli: CLI, capsys) -> None:
    cli.last_reply = AgentReply(reply_text="Hello")
    await cli._handle_command("/export")
    assert "Export is unavailable." in capsys.readouterr().out


@pytest.mark.asyncio
async def test_export_saves_file(cli: CLI, engine: EngineContext, tmp_path: Path, capsys) -> None:
    engine.collaborators = Collaborators(exporter=LocalFileExporter(tmp_path))
    cli.last_reply = AgentReply(reply_text="Hello")

    await cli._handle_command("/export")

    assert "✓ Saved to" in capsys.readouterr().out
    assert len(list(tmp_path.glob("*_reply.txt"))) == 1


@pytest.mark.asyncio
async def test_ingest_usage(cli: CLI, capsys) -> None:
    await cli._handle_command("/ingest")
    assert "Usage: /ingest <path>" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_ingest_document(cli: CLI, tmp_path: Path, capsys) -> None:
    path = tmp_path / "notes.txt"
    path.write_text("My nationality is Kenya")

    await cli._handle_command(f"/ingest {path}")

    out = capsys.readouterr().out
    assert "✓ Profile updated" in out
    assert "Nationality: Kenya" in out


@pytest.mark.asyncio
async def test_review_usage(cli: CLI, capsys) -> None:
    await cli._handle_command("/review")
    assert "Usage: /review <path>" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_review_document(cli: CLI, tmp_path: Path, capsys) -> None:
    path = tmp_path / "bank_statement.txt"
    path.write_text("Account Number: 12345678\nClosing balance: $9,000.00")

    await cli._handle_command(f"/review {path}")

    out = capsys.readouterr().out
    assert "✅ Document looks OK." in out
    assert "Balance: 9,000.00 USD" in out


class TestBuildEngine:
    """Tests for engine wiring from configuration."""

    def test_without_api_key_or_embedder(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.delenv("GROQ_API_KEY", raising=False)
        with patch("visabud.cli.importlib.util.find_spec", return_value=None):
            engine = build_engine(EngineConfig(data_dir=tmp_path))

        assert engine.llm is None
        assert engine.embedder is None
        assert engine.events.log_dir == tmp_path / "logs"

    def test_with_api_key(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("GROQ_API_KEY", "test-key")
        with patch("visabud.cli.AsyncGroq", MagicMock()), patch(
            "visabud.cli.importlib.util.find_spec", return_value=None
        ):
            engine = build_engine(EngineConfig(data_dir=tmp_path, model="test-model"))

        assert isinstance(engine.llm, GroqLLMClient)
        assert engine.llm.model == "test-model"
