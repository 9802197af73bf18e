"""Visa type suggestion from destination and purpose of travel."""

from dataclasses import dataclass, field

from ..facts import SCHENGEN_CODES, FactStore
from ..facts.countries import country_name
from ..index.retriever import Retriever
from ..intent import Intent
from ..memory.requirements import NeedHints
from .base import DEFAULT_FACTS_TOP_K, Tool, ToolRequest, ToolResult

VISITOR_PURPOSES = ("tourist", "business", "conference", "medical")

# purpose -> (visa name, fee table id or None)
VisaMap = dict[str, tuple[str, str | None]]

VISA_MAPS: dict[str, VisaMap] = {
    "US": {
        "tourist": ("B-2 Visitor visa", "US-B1B2"),
        "business": ("B-1 Business visitor visa", "US-B1B2"),
        "conference": ("B-1 Business visitor visa", "US-B1B2"),
        "medical": ("B-2 Visitor visa (medical treatment)", "US-B1B2"),
        "study": ("F-1 Student visa", "US-F1"),
        "work": ("H-1B Specialty occupation visa", "H-1B"),
        "immigration": ("Employment-based green card (EB-2/EB-3)", None),
        "family": ("Family-sponsored immigrant visa", None),
    },
    "UK": {
        "tourist": ("Standard Visitor visa", "UK-SV"),
        "business": ("Standard Visitor visa (business activities)", "UK-SV"),
        "conference": ("Standard Visitor visa (business activities)", "UK-SV"),
        "medical": ("Standard Visitor visa (private medical treatment)", "UK-SV"),
        "study": ("Student visa", "UK-Student"),
        "work": ("Skilled Worker visa", "UK-SW"),
        "immigration": ("Skilled Worker visa leading to settlement", "UK-SW"),
        "family": ("Family visa", None),
    },
    "CA": {
        "tourist": ("Visitor visa (TRV)", "CA-TRV"),
        "business": ("Business visitor (TRV)", "CA-TRV"),
        "conference": ("Business visitor (TRV)", "CA-TRV"),
        "medical": ("Visitor visa (TRV) for medical treatment", "CA-TRV"),
        "study": ("Study permit", "CA-SP"),
        "work": ("Work permit (LMIA-based or IEC)", None),
        "immigration": ("Express Entry permanent residence", "CA-EE"),
        "family": ("Family sponsorship", None),
    },
    "AU": {
        "tourist": ("Visitor visa (subclass 600)", "AUS-600"),
        "business": ("Visitor visa (subclass 600, Business Visitor stream)", "AUS-600"),
        "conference": ("Visitor visa (subclass 600, Business Visitor stream)", "AUS-600"),
        "medical": ("Medical Treatment visa (subclass 602)", None),
        "study": ("Student visa (subclass 500)", "AUS-500"),
        "work": ("Employer Nomination Scheme (subclass 186)", "AUS-186"),
        "immigration": ("Skilled Independent visa (subclass 189)", "AUS-189"),
        "family": ("Partner or Parent visa", None),
    },
}

SCHENGEN_MAP: VisaMap = {
    "tourist": ("Schengen short-stay (type C) visa", None),
    "business": ("Schengen short-stay (type C) business visa", None),
    "conference": ("Schengen short-stay (type C) business visa", None),
    "medical": ("Schengen short-stay (type C) visa for medical treatment", None),
    "study": ("National long-stay (type D) student visa", None),
    "work": ("National work visa or EU Blue Card", None),
    "immigration": ("National residence permit", None),
    "family": ("Family reunification visa", None),
}

GENERIC_MAP: VisaMap = {
    "tourist": ("Tourist/visitor visa", None),
    "business": ("Business visitor visa", None),
    "conference": ("Business visitor visa", None),
    "medical": ("Medical visa", None),
    "study": ("Student visa", None),
    "work": ("Work visa", None),
    "immigration": ("Permanent residence route", None),
    "family": ("Family reunion visa", None),
}

SCHENGEN_IDS = {"DE": "DE-SCH", "FR": "FR-SCH"}


@dataclass
class VisaTypeSuggestion:
    destination: str
    purpose: str
    visa_type: str
    visa_type_id: str | None = None
    alternatives: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


def visa_map_for(destination: str) -> VisaMap:
    if destination in VISA_MAPS:
        return VISA_MAPS[destination]
    if destination in SCHENGEN_CODES:
        return SCHENGEN_MAP
    return GENERIC_MAP


def suggest_visa_type(destination: str, purpose: str, paid_work: bool | None = None) -> VisaTypeSuggestion:
    """Pick the primary visa for a purpose, with alternatives and caveats."""
    mapping = visa_map_for(destination)
    name, type_id = mapping.get(purpose, mapping["tourist"])
    if destination in SCHENGEN_IDS and purpose in VISITOR_PURPOSES:
        type_id = SCHENGEN_IDS[destination]

    alternatives: list[str] = []
    notes: list[str] = []
    if purpose == "conference":
        notes.append("Conference attendance is a business activity; bring the invitation letter.")
    if purpose in VISITOR_PURPOSES and paid_work:
        notes.append("Paid work is not allowed on visitor visas; paid engagements need a work visa.")
        alternatives.append(mapping["work"][0])
    if purpose == "study":
        alternatives.append(mapping["work"][0] + " after graduation")
    if purpose == "work":
        alternatives.append(mapping["immigration"][0])

    return VisaTypeSuggestion(
        destination=destination,
        purpose=purpose,
        visa_type=name,
        visa_type_id=type_id,
        alternatives=alternatives,
        notes=notes,
    )


def render_suggestion(suggestion: VisaTypeSuggestion) -> str:
    lines = [
        f"For {suggestion.purpose} in {country_name(suggestion.destination)}, "
        f"the usual option is the {suggestion.visa_type}."
    ]
    if suggestion.visa_type_id:
        lines.append(f"Reference: {suggestion.visa_type_id}")
    if suggestion.alternatives:
        lines.append("Alternatives: " + "; ".join(suggestion.alternatives))
    lines.extend(f"Note: {note}" for note in suggestion.notes)
    return "\n".join(lines)


class VisaTypeTool(Tool):
    intent = Intent.VISA_TYPE

    def __init__(
        self,
        facts: FactStore,
        retriever: Retriever | None = None,
        top_k: int = DEFAULT_FACTS_TOP_K,
    ) -> None:
        super().__init__(retriever, top_k=top_k)
        self.facts = facts

    @property
    def name(self) -> str:
        return "visa_type"

    @property
    def description(self) -> str:
        return "Suggest the visa category that fits the purpose of travel"

    def hints(self, request: ToolRequest) -> NeedHints:
        ctx = request.context
        return NeedHints(destination=ctx.destination_name, goal=ctx.purpose or ctx.goal)

    async def generate(self, request: ToolRequest) -> ToolResult:
        ctx = request.context
        destination = ctx.destination or ""
        purpose = ctx.purpose or ctx.goal or request.profile.selected_goals[-1]
        suggestion = suggest_visa_type(destination, purpose, ctx.paid_work)
        entry = self.facts.get(destination)
        facts = self.retrieve_facts(f"{purpose} visa {ctx.destination_name}", country=destination)
        return ToolResult.executed(
            self.name,
            render_suggestion(suggestion),
            suggestion,
            citations=self.citations_for(facts, entry.official_site if entry else None),
            warnings=[n for n in suggestion.notes if "not allowed" in n],
        )
