"""JSONL logging for observability."""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


@dataclass
class LogEntry:
    """A single log entry."""

    timestamp: str
    event: str
    thread_id: str | None = None
    intent: str | None = None
    tool: str | None = None
    duration_ms: float | None = None
    error: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict, excluding None values."""
        data = asdict(self)
        return {k: v for k, v in data.items() if v is not None and v != {} and v != []}


class JSONLLogger:
    """Logger that writes structured logs in JSONL format."""

    def __init__(
        self,
        log_dir: str | Path | None = None,
        filename: str = "events.jsonl",
        max_size_mb: float = 10.0,
    ) -> None:
        if log_dir is None:
            log_dir = Path.home() / ".visabud" / "logs"
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.filename = filename
        self.max_size_bytes = int(max_size_mb * 1024 * 1024)

    @property
    def log_path(self) -> Path:
        """Current log file path."""
        return self.log_dir / self.filename

    def _rotate_if_needed(self) -> None:
        """Rotate log file if it exceeds max size."""
        if not self.log_path.exists():
            return

        if self.log_path.stat().st_size >= self.max_size_bytes:
            timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
            rotated_name = f"{self.log_path.stem}_{timestamp}.jsonl"
            self.log_path.rename(self.log_dir / rotated_name)

    def _write(self, entry: LogEntry) -> None:
        """Write a log entry to the file."""
        self._rotate_if_needed()

        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry.to_dict(), default=str) + "\n")

    def log(
        self,
        event: str,
        *,
        thread_id: str | None = None,
        intent: str | None = None,
        tool: str | None = None,
        duration_ms: float | None = None,
        error: str | None = None,
        **extra: Any,
    ) -> None:
        """Log an event."""
        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            event=event,
            thread_id=thread_id,
            intent=intent,
            tool=tool,
            duration_ms=duration_ms,
            error=error,
            extra=extra if extra else {},
        )
        self._write(entry)

    def log_turn_received(self, thread_id: str, length: int) -> None:
        self.log("turn_received", thread_id=thread_id, length=length)

    def log_greeted(self, thread_id: str) -> None:
        self.log("turn_greeted", thread_id=thread_id, tool="chat")

    def log_gated(self, thread_id: str, intent: str, tool: str, missing: list[str]) -> None:
        """Log a turn that stopped on a missing-information prompt."""
        self.log("turn_gated", thread_id=thread_id, intent=intent, tool=tool, missing=missing)

    def log_tool_executed(
        self,
        thread_id: str,
        intent: str,
        tool: str,
        *,
        duration_ms: float | None = None,
        source: str | None = None,
    ) -> None:
        """Log a tool that produced a result."""
        self.log(
            "tool_executed",
            thread_id=thread_id,
            intent=intent,
            tool=tool,
            duration_ms=duration_ms,
            source=source,
        )

    def log_generic_answered(self, thread_id: str, facts: int, source: str) -> None:
        self.log("generic_answered", thread_id=thread_id, intent="generic", facts=facts, source=source)

    def log_persistence_failed(self, store: str, *, thread_id: str | None = None, error: str | None = None) -> None:
        self.log("persistence_failed", thread_id=thread_id, error=error, store=store)


# Global logger instance
_logger: JSONLLogger | None = None


def get_logger() -> JSONLLogger:
    """Get the global logger instance."""
    global _logger
    if _logger is None:
        _logger = JSONLLogger()
    return _logger


def configure_logger(log_dir: str | Path | None = None, max_size_mb: float = 10.0) -> JSONLLogger:
    """Configure and return the global logger."""
    global _logger
    _logger = JSONLLogger(log_dir=log_dir, max_size_mb=max_size_mb)
    return _logger
