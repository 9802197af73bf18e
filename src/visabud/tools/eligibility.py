"""Eligibility checker: a coarse verdict with reasons and next steps."""

from dataclasses import dataclass, field
from enum import Enum

from ..facts import FactStore
from ..facts.countries import country_name
from ..index.retriever import Retriever
from ..intent import Intent
from .base import DEFAULT_FACTS_TOP_K, Tool, ToolRequest, ToolResult
from .checklist import normalize_visa_type
from .parsing import clamp, CONFIDENCE_RANGE


class EligibilityStatus(Enum):
    ELIGIBLE = "eligible"
    PARTIALLY_ELIGIBLE = "partially_eligible"
    INELIGIBLE = "ineligible"
    UNKNOWN = "unknown"


@dataclass
class EligibilityAssessment:
    destination: str
    visa_type: str
    status: EligibilityStatus
    confidence: int
    reasons: list[str] = field(default_factory=list)
    next_steps: list[str] = field(default_factory=list)


def assess(request: ToolRequest) -> EligibilityAssessment:
    """Score the profile against simple per-goal criteria.

    Any blocking issue makes the result INELIGIBLE; otherwise gaps make it
    PARTIALLY_ELIGIBLE. A profile with no background at all is UNKNOWN.
    """
    ctx = request.context
    profile = request.profile
    goal = normalize_visa_type(ctx.goal)
    negatives: list[str] = []
    partials: list[str] = []
    steps: list[str] = []

    if request.passport_valid is False:
        negatives.append("Passport is not valid for at least 6 more months.")
        steps.append("Renew your passport before applying.")

    if profile.finances == "low":
        partials.append("Funds may be insufficient for the application.")
        steps.append("Gather bank statements or a sponsor letter.")

    if goal == "tourist" and ctx.paid_work:
        negatives.append("Visitor visas do not permit paid work.")
        steps.append("Look at business or work visa categories instead.")

    if goal == "study" and not profile.education:
        partials.append("Academic background not provided.")
        steps.append("Prepare transcripts and an admission offer.")

    if goal == "work":
        if not profile.occupation:
            partials.append("Occupation not provided.")
        if profile.work_years is None:
            partials.append("Work experience not provided.")
        elif profile.work_years < 2:
            partials.append("Most skilled work visas expect 2 or more years of experience.")
        steps.append("Secure a job offer from a licensed sponsor.")

    if goal == "immigration":
        if profile.work_years is not None and profile.work_years < 1:
            negatives.append("Points-based residence routes need skilled work experience.")
        elif profile.work_years is None:
            partials.append("Work experience not provided.")
        if not profile.education:
            partials.append("Education level not provided.")
        steps.append("Take a recognised language test and get credentials assessed.")

    background_known = any(
        [profile.education, profile.work_years is not None, profile.occupation, profile.finances]
    )

    if negatives:
        status = EligibilityStatus.INELIGIBLE
    elif not background_known and goal != "tourist":
        status = EligibilityStatus.UNKNOWN
        steps.append("Share your education, work experience and finances for a clearer answer.")
    elif partials:
        status = EligibilityStatus.PARTIALLY_ELIGIBLE
    else:
        status = EligibilityStatus.ELIGIBLE

    confidence = 80 - 10 * len(partials) - (20 if status is EligibilityStatus.UNKNOWN else 0)
    return EligibilityAssessment(
        destination=ctx.destination or "",
        visa_type=goal,
        status=status,
        confidence=clamp(confidence, *CONFIDENCE_RANGE),
        reasons=negatives + partials,
        next_steps=list(dict.fromkeys(steps)),
    )


def render_assessment(result: EligibilityAssessment) -> str:
    label = result.status.value.replace("_", " ").title()
    lines = [f"{country_name(result.destination)} {result.visa_type} visa: {label} (confidence {result.confidence}/100)"]
    if result.reasons:
        lines.append("\nWhy:")
        lines.extend(f"- {r}" for r in result.reasons)
    if result.next_steps:
        lines.append("\nNext steps:")
        lines.extend(f"- {s}" for s in result.next_steps)
    return "\n".join(lines)


class EligibilityTool(Tool):
    intent = Intent.ELIGIBILITY

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
        return "eligibility"

    @property
    def description(self) -> str:
        return "Assess whether the profile meets typical criteria for a visa type"

    async def generate(self, request: ToolRequest) -> ToolResult:
        result = assess(request)
        entry = self.facts.get(result.destination)
        warnings = []
        if entry is not None and entry.restrictions:
            warnings.append(entry.restrictions)
        facts = self.retrieve_facts(
            f"{result.visa_type} visa requirements {request.context.destination_name}",
            country=result.destination,
        )
        return ToolResult.executed(
            self.name,
            render_assessment(result),
            result,
            citations=self.citations_for(facts, entry.official_site if entry else None),
            warnings=warnings,
        )
