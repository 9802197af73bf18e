"""Chat thread persistence."""

from .store import ChatStore, ChatTurn, ThreadState

__all__ = ["ChatStore", "ChatTurn", "ThreadState"]
