"""Tool registry and the per-intent generators."""

from .base import Tool, ToolRequest, ToolResult
from .checklist import ChecklistTool
from .compare import CompareTool
from .context import TurnContext, build_turn_context
from .cost import CostTool, FeeTable
from .eligibility import EligibilityStatus, EligibilityTool
from .embassy import EmbassyTool
from .facts import CountryFactsTool
from .registry import ToolRegistry, build_default_registry
from .roadmap import RoadmapTool
from .visa_type import VisaTypeTool

__all__ = [
    "ChecklistTool",
    "CompareTool",
    "CostTool",
    "CountryFactsTool",
    "EligibilityStatus",
    "EligibilityTool",
    "EmbassyTool",
    "FeeTable",
    "RoadmapTool",
    "Tool",
    "ToolRegistry",
    "ToolRequest",
    "ToolResult",
    "TurnContext",
    "VisaTypeTool",
    "build_default_registry",
]
