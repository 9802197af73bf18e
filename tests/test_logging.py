"""Tests for JSONL logging."""

import json
import tempfile
from pathlib import Path

import pytest

from visabud import logging as visabud_logging
from visabud.logging import JSONLLogger, LogEntry, configure_logger, get_logger


@pytest.fixture
def temp_log_dir():
    """Create a temporary directory for logs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def logger(temp_log_dir: Path) -> JSONLLogger:
    return JSONLLogger(log_dir=temp_log_dir)


def read_entries(logger: JSONLLogger) -> list[dict]:
    with open(logger.log_path) as f:
        return [json.loads(line) for line in f]


def test_log_entry_to_dict():
    """Test LogEntry excludes None values."""
    entry = LogEntry(timestamp="2024-01-01T00:00:00Z", event="test")
    data = entry.to_dict()

    assert "timestamp" in data
    assert "event" in data
    assert "thread_id" not in data  # None excluded
    assert "extra" not in data  # Empty dict excluded


def test_log_creates_file(logger: JSONLLogger):
    """Test that logging creates the log file."""
    logger.log("test_event")

    assert logger.log_path.exists()
    assert logger.log_path.name == "events.jsonl"


def test_log_writes_jsonl(logger: JSONLLogger):
    """Test that logs are written in JSONL format."""
    logger.log("event1", thread_id="123")
    logger.log("event2", thread_id="456")

    entries = read_entries(logger)

    assert len(entries) == 2
    assert entries[0]["event"] == "event1"
    assert entries[0]["thread_id"] == "123"
    assert entries[1]["event"] == "event2"


def test_log_gated(logger: JSONLLogger):
    """Test logging a turn that stopped on a question."""
    logger.log_gated("t1", "roadmap", "roadmap", ["destination country", "nationality"])

    entry = read_entries(logger)[0]
    assert entry["event"] == "turn_gated"
    assert entry["intent"] == "roadmap"
    assert entry["extra"]["missing"] == ["destination country", "nationality"]


def test_log_tool_executed(logger: JSONLLogger):
    """Test logging a tool result."""
    logger.log_tool_executed("t1", "cost", "cost", duration_ms=12.5, source="heuristic")

    entry = read_entries(logger)[0]
    assert entry["event"] == "tool_executed"
    assert entry["tool"] == "cost"
    assert entry["duration_ms"] == 12.5
    assert entry["extra"]["source"] == "heuristic"


def test_log_greeted_and_generic(logger: JSONLLogger):
    logger.log_greeted("t1")
    logger.log_generic_answered("t1", 3, "model")

    greeted, generic = read_entries(logger)
    assert greeted["tool"] == "chat"
    assert generic["intent"] == "generic"
    assert generic["extra"] == {"facts": 3, "source": "model"}


def test_log_persistence_failed(logger: JSONLLogger):
    logger.log_persistence_failed("chat", thread_id="t1", error="disk full")

    entry = read_entries(logger)[0]
    assert entry["error"] == "disk full"
    assert entry["extra"]["store"] == "chat"


def test_rotation(temp_log_dir: Path):
    """Test log rotation when max size is exceeded."""
    logger = JSONLLogger(log_dir=temp_log_dir, max_size_mb=0.001)  # ~1KB

    # Write enough to trigger rotation
    for i in range(100):
        logger.log(f"event_{i}", data="x" * 100)

    log_files = list(temp_log_dir.glob("events*.jsonl"))
    assert len(log_files) >= 2


def test_extra_fields(logger: JSONLLogger):
    """Test that extra fields are included."""
    logger.log("custom", custom_field="value", another=123)

    entry = read_entries(logger)[0]
    assert entry["extra"]["custom_field"] == "value"
    assert entry["extra"]["another"] == 123


def test_configure_logger_replaces_global(temp_log_dir: Path, monkeypatch):
    monkeypatch.setattr(visabud_logging, "_logger", None)

    configured = configure_logger(temp_log_dir / "logs")

    assert get_logger() is configured
    assert configured.log_dir == temp_log_dir / "logs"
    assert configured.log_dir.is_dir()
