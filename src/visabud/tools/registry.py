"""Tool registry: one generator per intent."""

import logging

from ..collaborators import Collaborators
from ..facts import FactStore
from ..index.retriever import Retriever
from ..intent import Intent
from ..llm.client import CompletionClient
from ..storage import ArtifactStore
from .base import DEFAULT_FACTS_TOP_K, Tool, ToolRequest, ToolResult
from .checklist import ChecklistTool
from .compare import CompareTool
from .cost import CostTool, FeeTable
from .eligibility import EligibilityTool
from .embassy import EmbassyTool
from .facts import CountryFactsTool
from .roadmap import RoadmapTool
from .visa_type import VisaTypeTool

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Registry for available tools, addressable by name or intent."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}
        self._by_intent: dict[Intent, Tool] = {}

    def register(self, tool: Tool) -> None:
        """Register a tool."""
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' already registered")
        if tool.intent in self._by_intent:
            raise ValueError(f"Intent '{tool.intent.value}' already has a tool")
        self._tools[tool.name] = tool
        self._by_intent[tool.intent] = tool

    def get(self, name: str) -> Tool | None:
        """Get a tool by name."""
        return self._tools.get(name)

    def for_intent(self, intent: Intent) -> Tool | None:
        return self._by_intent.get(intent)

    def list_tools(self) -> list[str]:
        """List all registered tool names."""
        return list(self._tools.keys())

    async def dispatch(self, intent: Intent, request: ToolRequest) -> ToolResult | None:
        """Run the tool for ``intent``; None when no tool handles it."""
        tool = self._by_intent.get(intent)
        if tool is None:
            return None
        return await tool.execute(request)


def build_default_registry(
    facts: FactStore,
    retriever: Retriever | None = None,
    llm: CompletionClient | None = None,
    artifacts: ArtifactStore | None = None,
    collaborators: Collaborators | None = None,
    fee_table: FeeTable | None = None,
    facts_top_k: int = DEFAULT_FACTS_TOP_K,
) -> ToolRegistry:
    """Registry with every built-in generator wired to the given stores.

    ``facts_top_k`` is how many facts each tool retrieves per call.
    """
    fees = fee_table or FeeTable.bundled()
    registry = ToolRegistry()
    registry.register(ChecklistTool(facts, retriever, llm, artifacts, top_k=facts_top_k))
    registry.register(RoadmapTool(retriever, llm, artifacts, top_k=facts_top_k))
    registry.register(CostTool(facts, retriever, fees, top_k=facts_top_k))
    registry.register(EmbassyTool(facts, collaborators))
    registry.register(VisaTypeTool(facts, retriever, top_k=facts_top_k))
    registry.register(CompareTool(facts, retriever, fees))
    registry.register(EligibilityTool(facts, retriever, top_k=facts_top_k))
    registry.register(CountryFactsTool(facts, retriever, top_k=facts_top_k))
    logger.debug("Registered tools: %s", ", ".join(registry.list_tools()))
    return registry
