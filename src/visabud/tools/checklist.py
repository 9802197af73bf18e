"""Document checklist generator."""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any

from ..facts import FactStore
from ..facts.countries import country_name
from ..index.retriever import Retriever
from ..intent import Intent
from ..llm.client import CompletionClient
from ..storage import ArtifactStore
from .base import DEFAULT_FACTS_TOP_K, Tool, ToolRequest, ToolResult
from .parsing import as_str_list

logger = logging.getLogger(__name__)

CHECKLIST_SYSTEM = """You are a visa document assistant. Reply with JSON only:
{"requiredDocuments": ["..."], "optionalDocuments": ["..."], "warnings": ["..."]}
List concrete documents for the destination, visa type and profile given."""

BASE_DOCUMENTS = [
    "Valid passport",
    "Passport-size photo per specification",
    "Completed application form",
    "Visa fee payment receipt",
]

FINANCIAL_DOCUMENTS = ["Bank statements (last 3-6 months)", "Proof of funds or sponsorship"]

TYPE_DOCUMENTS: dict[str, list[str]] = {
    "tourist": [
        "Flight booking or travel itinerary",
        "Accommodation booking or address of stay",
        "Travel insurance covering the stay",
    ],
    "study": [
        "Offer or admission letter",
        "Transcripts and degree certificates",
        "Language test results (if required)",
        "Student health insurance (if required)",
    ],
    "work": [
        "Job offer or employment contract",
        "Employer sponsorship document (CoS, LMIA or petition, as applicable)",
        "CV or resume",
        "Credential evaluation or licensing (if applicable)",
    ],
    "immigration": [
        "CV or resume",
        "Employment letters and pay slips",
        "Education credential assessment (if applicable)",
        "Medical examination (panel physician, if required)",
        "Police clearance certificates",
    ],
}

OPTIONAL_DOCUMENTS: dict[str, list[str]] = {
    "tourist": ["Return or onward ticket", "Proof of ties to home country (employment letter, property)",
                "Invitation letter (if visiting family or friends)"],
    "study": ["Proof of tuition payment (if applicable)", "Accommodation letter"],
    "work": ["Reference letters", "Police clearance (sometimes required)"],
    "immigration": ["Tax records", "Civil status documents (marriage or birth certificates)",
                    "Detailed travel history"],
}


@dataclass
class Checklist:
    destination: str
    visa_type: str
    official_site: str = ""
    required_documents: list[str] = field(default_factory=list)
    optional_documents: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def normalize_visa_type(value: str | None) -> str:
    """Map free text onto tourist, study, work, immigration or generic."""
    t = (value or "").strip().lower()
    if "tour" in t or "visit" in t:
        return "tourist"
    if "study" in t or "student" in t:
        return "study"
    if "work" in t or "job" in t:
        return "work"
    if "immig" in t or "residen" in t or t == "pr":
        return "immigration"
    return "generic"


def profile_warnings(request: ToolRequest) -> list[str]:
    warnings = []
    if request.passport_valid is False:
        warnings.append("Passport may expire within ~6 months of travel. Renew if needed.")
    if request.profile.finances == "low":
        warnings.append("Financial status marked low: consider a sponsor letter or additional funds.")
    return warnings


def heuristic_checklist(request: ToolRequest, official_site: str = "") -> Checklist:
    ctx = request.context
    visa_type = normalize_visa_type(ctx.goal)
    required = BASE_DOCUMENTS + FINANCIAL_DOCUMENTS + TYPE_DOCUMENTS.get(visa_type, [])
    optional = list(OPTIONAL_DOCUMENTS.get(visa_type, ["Police clearance (if requested)"]))
    if request.profile.travel_history:
        optional.append("Previous visas and passport pages")
    return Checklist(
        destination=ctx.destination or "",
        visa_type=visa_type,
        official_site=official_site,
        required_documents=list(dict.fromkeys(required)),
        optional_documents=optional,
        warnings=profile_warnings(request),
    )


def parse_checklist(data: Any, request: ToolRequest, official_site: str) -> Checklist | None:
    if not isinstance(data, dict):
        return None
    required = as_str_list(data.get("requiredDocuments", data.get("required_documents")))
    if not required:
        return None
    warnings = as_str_list(data.get("warnings"))
    for warning in profile_warnings(request):
        if warning not in warnings:
            warnings.append(warning)
    return Checklist(
        destination=request.context.destination or "",
        visa_type=normalize_visa_type(request.context.goal),
        official_site=official_site,
        required_documents=required,
        optional_documents=as_str_list(data.get("optionalDocuments", data.get("optional_documents"))),
        warnings=warnings,
    )


def render_checklist(checklist: Checklist) -> str:
    lines = [f"{country_name(checklist.destination)}: {checklist.visa_type} checklist"]
    if checklist.official_site:
        lines.append(f"Official: {checklist.official_site}")
    lines.append("\nRequired:")
    lines.extend(f"- {doc}" for doc in checklist.required_documents)
    if checklist.optional_documents:
        lines.append("\nOptional/If applicable:")
        lines.extend(f"- {doc}" for doc in checklist.optional_documents)
    if checklist.warnings:
        lines.append("\nWarnings:")
        lines.extend(f"- {w}" for w in checklist.warnings)
    return "\n".join(lines)


class ChecklistTool(Tool):
    """Required and optional documents for a destination and visa type."""

    intent = Intent.CHECKLIST

    def __init__(
        self,
        facts: FactStore,
        retriever: Retriever | None = None,
        llm: CompletionClient | None = None,
        artifacts: ArtifactStore | None = None,
        top_k: int = DEFAULT_FACTS_TOP_K,
    ) -> None:
        super().__init__(retriever, llm, top_k)
        self.facts = facts
        self.artifacts = artifacts

    @property
    def name(self) -> str:
        return "checklist"

    @property
    def description(self) -> str:
        return "List required and optional documents for a visa application"

    async def generate(self, request: ToolRequest) -> ToolResult:
        ctx = request.context
        entry = self.facts.get(ctx.destination or "")
        site = entry.official_site if entry else ""
        facts = self.retrieve_facts(f"{ctx.goal} visa documents {ctx.destination_name}", country=ctx.destination)

        checklist: Checklist | None = None
        source = "heuristic"
        if self.llm is not None:
            prompt = (
                f"Destination: {ctx.destination_name}\nVisa type: {ctx.goal}\n"
                f"Profile:\n{request.profile.summary()}"
            )
            checklist = parse_checklist(await self.model_json(CHECKLIST_SYSTEM, prompt), request, site)
            if checklist is not None:
                source = "model"

        if checklist is None:
            checklist = heuristic_checklist(request, site)

        if self.artifacts is not None:
            self.artifacts.save("checklist", asdict(checklist))

        return ToolResult.executed(
            self.name,
            render_checklist(checklist),
            checklist,
            citations=self.citations_for(facts, site or None),
            warnings=checklist.warnings,
            source=source,
        )
