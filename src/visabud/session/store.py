"""Chat history persistence, one JSON document per thread."""

import re
import threading
import time
import uuid
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from ..storage import JsonDocument, PersistenceError

ROLES = ("user", "assistant")


@dataclass(frozen=True)
class ChatTurn:
    """A single message in a thread."""

    thread_id: str
    role: str
    content: str
    timestamp: float
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])

    def as_message(self) -> dict[str, str]:
        """Role/content dict as used by extraction and model prompts."""
        return {"role": self.role, "content": self.content}


@dataclass
class ThreadState:
    """Persisted state for one thread."""

    thread_id: str
    created_at: float = field(default_factory=time.time)
    turns: list[ChatTurn] = field(default_factory=list)
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ThreadState":
        """Create from dictionary."""
        return cls(
            thread_id=str(data["thread_id"]),
            created_at=float(data.get("created_at", time.time())),
            turns=[ChatTurn(**turn) for turn in data.get("turns", [])],
            context=dict(data.get("context") or {}),
        )


class ChatStore:
    """Append-only chat history with a small per-thread context map.

    Timestamps within a thread never go backwards: a turn stamped earlier
    than the previous one is moved just after it.
    """

    def __init__(self, chats_dir: Path | None = None) -> None:
        self.chats_dir = chats_dir
        self._lock = threading.Lock()
        self._threads: dict[str, ThreadState] = {}
        self._docs: dict[str, JsonDocument] = {}

    def _doc(self, thread_id: str) -> JsonDocument:
        if thread_id not in self._docs:
            path = None
            if self.chats_dir is not None:
                safe = re.sub(r"[^A-Za-z0-9_.-]", "_", thread_id)
                path = self.chats_dir / f"{safe}.json"
            self._docs[thread_id] = JsonDocument(path, lock=self._lock)
        return self._docs[thread_id]

    def _state(self, thread_id: str) -> ThreadState:
        """Cached thread state, loaded from disk on first use. Caller holds the lock."""
        if thread_id in self._threads:
            return self._threads[thread_id]

        state: ThreadState | None = None
        data = self._doc(thread_id).read()
        if isinstance(data, dict):
            try:
                state = ThreadState.from_dict(data)
            except (KeyError, TypeError, ValueError):
                state = None
        if state is None:
            state = ThreadState(thread_id=thread_id)
        self._threads[thread_id] = state
        return state

    def _save(self, state: ThreadState) -> None:
        if not self._doc(state.thread_id).write(state.to_dict()):
            raise PersistenceError(f"Could not save thread {state.thread_id}")

    def add_message(
        self,
        thread_id: str,
        role: str,
        content: str,
        timestamp: float | None = None,
    ) -> ChatTurn:
        """Append a turn and persist the thread.

        Raises:
            PersistenceError: The turn was kept in memory but not written.
        """
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role}")

        with self._lock:
            state = self._state(thread_id)
            stamp = time.time() if timestamp is None else timestamp
            if state.turns and stamp <= state.turns[-1].timestamp:
                stamp = state.turns[-1].timestamp + 1e-6
            turn = ChatTurn(thread_id=thread_id, role=role, content=content, timestamp=stamp)
            state.turns.append(turn)
            self._save(state)
            return turn

    def list_messages(self, thread_id: str, limit: int | None = None) -> list[ChatTurn]:
        """Turns ordered by timestamp; ``limit`` keeps the most recent ones."""
        with self._lock:
            turns = sorted(self._state(thread_id).turns, key=lambda t: t.timestamp)
        if limit is not None:
            return turns[-limit:] if limit > 0 else []
        return turns

    def history(self, thread_id: str, limit: int | None = None) -> list[dict[str, str]]:
        """Turns as role/content dicts."""
        return [turn.as_message() for turn in self.list_messages(thread_id, limit)]

    def get_context(self, thread_id: str, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._state(thread_id).context.get(key, default)

    def set_context(self, thread_id: str, key: str, value: Any) -> None:
        """Set (or with None, remove) a context value and persist the thread.

        Raises:
            PersistenceError: The value was kept in memory but not written.
        """
        with self._lock:
            state = self._state(thread_id)
            if value is None:
                state.context.pop(key, None)
            else:
                state.context[key] = value
            self._save(state)

    def clear_thread(self, thread_id: str) -> None:
        """Forget every turn and context value of a thread."""
        with self._lock:
            self._threads[thread_id] = ThreadState(thread_id=thread_id)
            self._doc(thread_id).delete()
