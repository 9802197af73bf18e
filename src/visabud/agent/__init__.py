"""Turn orchestration over an explicit engine context."""

from .engine import EngineContext
from .orchestrator import AgentReply, Orchestrator
from .prompt import DISCLAIMER, FALLBACK_NO_DATA, GREETING, is_greeting

__all__ = [
    "DISCLAIMER",
    "FALLBACK_NO_DATA",
    "GREETING",
    "AgentReply",
    "EngineContext",
    "Orchestrator",
    "is_greeting",
]
