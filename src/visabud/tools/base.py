"""Base tool interface: gate on missing inputs, then generate."""

import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field, is_dataclass
from enum import Enum
from typing import Any

from ..index.retriever import RetrievedFact, Retriever, citations
from ..intent import NEEDED_FOR, Intent
from ..llm.client import CompletionClient
from ..memory.models import UserProfile
from ..memory.requirements import NeedHints, build_prompt, missing_fields
from .context import TurnContext
from .parsing import parse_json_payload

logger = logging.getLogger(__name__)

DEFAULT_FACTS_TOP_K = 4


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def payload_to_dict(payload: Any) -> dict[str, Any] | None:
    """Dataclass payload as JSON-ready data (enums become their values)."""
    if payload is None:
        return None
    data = asdict(payload) if is_dataclass(payload) else dict(payload)
    return _plain(data)


@dataclass
class ToolRequest:
    """Everything a tool may read for one turn."""

    profile: UserProfile
    context: TurnContext
    passport_valid: bool | None = None


@dataclass
class ToolResult:
    """Either a gate (``prompt`` set) or a generated result (``payload`` set).

    Use :meth:`gated` or :meth:`executed` to build one; a result carrying
    both a prompt and a payload is rejected.
    """

    tool: str
    text: str = ""
    prompt: str | None = None
    missing: list[str] = field(default_factory=list)
    payload: Any = None
    citations: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    source: str = "heuristic"

    def __post_init__(self) -> None:
        if self.prompt is not None and self.payload is not None:
            raise ValueError("A gated result cannot carry a payload")

    @property
    def is_gated(self) -> bool:
        return self.prompt is not None

    @classmethod
    def gated(cls, tool: str, prompt: str, missing: list[str]) -> "ToolResult":
        return cls(tool=tool, text=prompt, prompt=prompt, missing=list(missing))

    @classmethod
    def executed(
        cls,
        tool: str,
        text: str,
        payload: Any,
        citations: list[str] | None = None,
        warnings: list[str] | None = None,
        source: str = "heuristic",
    ) -> "ToolResult":
        if payload is None:
            raise ValueError("An executed result needs a payload")
        return cls(
            tool=tool,
            text=text,
            payload=payload,
            citations=list(citations or []),
            warnings=list(warnings or []),
            source=source,
        )


class Tool(ABC):
    """One generator per intent.

    ``execute`` first checks :meth:`missing_inputs`; if anything is missing
    it returns a gated result with a single question and never calls
    :meth:`generate`.
    """

    intent: Intent = Intent.GENERIC

    def __init__(
        self,
        retriever: Retriever | None = None,
        llm: CompletionClient | None = None,
        top_k: int = DEFAULT_FACTS_TOP_K,
    ) -> None:
        self.retriever = retriever
        self.llm = llm
        self.top_k = top_k

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique tool name, reported as ``tool_used``."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        ...

    @property
    def needed_for(self) -> str:
        """Requirement context for the profile rules."""
        return NEEDED_FOR[self.intent]

    def hints(self, request: ToolRequest) -> NeedHints:
        return NeedHints(destination=request.context.destination_name, goal=request.context.goal)

    def missing_inputs(self, request: ToolRequest) -> list[str]:
        """Labels of required inputs not yet known."""
        return missing_fields(self.needed_for, request.profile, self.hints(request))

    def gate_prompt(self, request: ToolRequest, missing: list[str]) -> str:
        prompt = build_prompt(self.needed_for, missing, request.context.destination_name)
        assert prompt is not None
        return prompt

    @abstractmethod
    async def generate(self, request: ToolRequest) -> ToolResult:
        """Produce the result; only called once the gate is clear."""
        ...

    async def execute(self, request: ToolRequest) -> ToolResult:
        missing = self.missing_inputs(request)
        if missing:
            return ToolResult.gated(self.name, self.gate_prompt(request, missing), missing)
        return await self.generate(request)

    def retrieve_facts(self, query: str, country: str | None = None, top_k: int | None = None) -> list[RetrievedFact]:
        """Facts for the query; ``top_k`` defaults to the tool's own setting."""
        if self.retriever is None:
            return []
        return self.retriever.retrieve(query, top_k=top_k or self.top_k, country=country)

    @staticmethod
    def citations_for(facts: list[RetrievedFact], extra: str | None = None) -> list[str]:
        sites = citations(facts)
        if extra and extra not in sites:
            sites.append(extra)
        return sites

    async def model_json(self, system: str, prompt: str) -> Any | None:
        """Ask the completion client for JSON; None if unavailable or unparseable."""
        if self.llm is None:
            return None
        try:
            raw = await self.llm.complete(system, prompt)
        except Exception as e:
            logger.warning(f"{self.name}: model call failed: {e}")
            return None
        return parse_json_payload(raw)
