"""Roadmap generator: 1-3 named paths towards a visa goal."""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any

from ..facts.countries import country_name
from ..index.retriever import Retriever
from ..intent import Intent
from ..llm.client import CompletionClient
from ..storage import ArtifactStore
from .base import DEFAULT_FACTS_TOP_K, Tool, ToolRequest, ToolResult
from .parsing import as_str_list, clamp, clamp_confidence, clamp_months, CONFIDENCE_RANGE, MONTHS_RANGE

logger = logging.getLogger(__name__)

MAX_PATHS = 3

ROADMAP_SYSTEM = """You are a visa planning assistant. Reply with JSON only, no prose.
Return an array of 1 to 3 route objects:
[
  {
    "routeName": "<short name>",
    "confidence": <integer 1-100>,
    "steps": [
      {"title": "<step>", "description": "<what to do>", "estimatedMonths": <integer 0-120>,
       "requiredDocs": ["<document>", ...]}
    ]
  }
]
Use only the facts and profile provided. If unsure, lower the confidence."""


@dataclass
class RoadmapStep:
    title: str
    description: str = ""
    estimated_months: int = 0
    required_documents: list[str] = field(default_factory=list)


@dataclass
class RoadmapPath:
    route_name: str
    steps: list[RoadmapStep] = field(default_factory=list)
    confidence: int = 60
    total_months: int = 0


@dataclass
class Roadmap:
    destination: str
    goal: str
    paths: list[RoadmapPath] = field(default_factory=list)


def _parse_step(item: Any) -> RoadmapStep | None:
    if isinstance(item, str) and item.strip():
        return RoadmapStep(title=item.strip())
    if not isinstance(item, dict):
        return None
    title = str(item.get("title") or item.get("name") or "").strip()
    if not title:
        return None
    return RoadmapStep(
        title=title,
        description=str(item.get("description") or "").strip(),
        estimated_months=clamp_months(item.get("estimatedMonths", item.get("estimated_months"))),
        required_documents=as_str_list(item.get("requiredDocs", item.get("required_documents"))),
    )


def _parse_path(item: Any) -> RoadmapPath | None:
    if not isinstance(item, dict):
        return None
    name = str(item.get("routeName") or item.get("route_name") or item.get("name") or "").strip()
    if not name:
        return None
    raw_steps = item.get("steps")
    steps = [s for s in (_parse_step(x) for x in raw_steps or []) if s is not None] if isinstance(raw_steps, list) else []
    total = item.get("totalMonths", item.get("total_months"))
    total_months = clamp_months(total) if total is not None else clamp(sum(s.estimated_months for s in steps), *MONTHS_RANGE)
    return RoadmapPath(
        route_name=name,
        steps=steps,
        confidence=clamp_confidence(item.get("confidence")),
        total_months=total_months,
    )


def parse_roadmap_paths(data: Any) -> list[RoadmapPath] | None:
    """Read model JSON into at most three paths; None if nothing usable."""
    if isinstance(data, dict):
        if isinstance(data.get("paths"), list):
            data = data["paths"]
        elif isinstance(data.get("routes"), list):
            data = data["routes"]
        else:
            data = [data]
    if not isinstance(data, list):
        return None
    paths = [p for p in (_parse_path(item) for item in data) if p is not None]
    return paths[:MAX_PATHS] or None


def _step(title: str, description: str, months: int, docs: list[str]) -> RoadmapStep:
    return RoadmapStep(title=title, description=description, estimated_months=months, required_documents=docs)


def _path(name: str, confidence: int, steps: list[RoadmapStep]) -> RoadmapPath:
    total = clamp(sum(s.estimated_months for s in steps), *MONTHS_RANGE)
    return RoadmapPath(route_name=name, steps=steps, confidence=confidence, total_months=total)


def heuristic_paths(goal: str, destination: str) -> list[RoadmapPath]:
    """Template paths per goal, used when no model answer is available."""
    country = country_name(destination)
    if goal == "study":
        return [
            _path(f"{country} student visa", 70, [
                _step("Shortlist programs", f"Pick accredited institutions in {country}.", 2,
                      ["Academic transcripts", "Language test results"]),
                _step("Secure admission", "Apply and obtain an offer or acceptance letter.", 3,
                      ["Offer letter", "Statement of purpose"]),
                _step("Prepare finances", "Show tuition and living funds.", 1, ["Bank statements", "Scholarship letter"]),
                _step("Apply for the student visa", "Submit the application and biometrics.", 2,
                      ["Passport", "Acceptance letter", "Proof of funds"]),
                _step("Travel and enrol", "Arrive before the course start date.", 1, ["Visa", "Enrolment confirmation"]),
            ]),
            _path("Study then post-study work", 55, [
                _step("Complete an eligible degree", f"Study at a recognised {country} institution.", 24, ["Transcripts"]),
                _step("Apply for post-study work", "Switch to a graduate or post-study work permit.", 2,
                      ["Degree certificate", "Passport"]),
            ]),
        ]
    if goal == "work":
        return [
            _path(f"{country} employer-sponsored work visa", 65, [
                _step("Find a sponsoring employer", f"Target employers licensed to sponsor in {country}.", 4,
                      ["CV", "Reference letters"]),
                _step("Get the job offer and sponsorship", "Employer issues the sponsorship document.", 2,
                      ["Job offer", "Sponsorship certificate"]),
                _step("Apply for the work visa", "Submit the application with supporting documents.", 2,
                      ["Passport", "Qualifications", "Proof of funds"]),
            ]),
            _path("Skilled or talent route", 50, [
                _step("Check skilled occupation lists", "Confirm your occupation is in demand.", 1, []),
                _step("Get skills and language assessed", "Book the required assessments.", 3,
                      ["Skills assessment", "Language test results"]),
                _step("Apply under the skilled stream", "Lodge the application once eligible.", 6, ["Passport", "Assessments"]),
            ]),
        ]
    if goal == "immigration":
        return [
            _path(f"{country} points-based permanent residence", 55, [
                _step("Estimate your points", "Age, education, experience and language scores.", 1, []),
                _step("Complete assessments", "Language test and credential assessment.", 3,
                      ["Language test results", "Credential assessment"]),
                _step("Submit expression of interest", "Enter the selection pool.", 6, ["Passport", "Work references"]),
                _step("Apply after invitation", "Lodge the full application with medicals and police checks.", 6,
                      ["Medical exam", "Police certificates"]),
            ]),
            _path("Work first, then settle", 45, [
                _step("Obtain a work visa", "Start with an employer-sponsored visa.", 6, ["Job offer"]),
                _step("Build qualifying residence", "Meet the residence period for settlement.", 36, []),
                _step("Apply for permanent residence", "Apply once eligible.", 6, ["Residence history"]),
            ]),
        ]
    if goal == "tourist":
        return [
            _path(f"{country} visitor visa", 80, [
                _step("Check visa-free eligibility", "See if your nationality can travel visa-free or with an eTA.", 0, []),
                _step("Prepare documents", "Itinerary, accommodation and funds.", 1,
                      ["Passport", "Itinerary", "Bank statements"]),
                _step("Apply and attend biometrics", "Submit the application online.", 1, ["Application form", "Photo"]),
            ]),
        ]
    return [
        _path(f"Explore {country} options", 40, [
            _step("Clarify your goal", "Decide between study, work, immigration or tourism.", 0, []),
            _step("Review official guidance", f"Read the {country} immigration site.", 1, []),
        ]),
    ]


def adjust_confidence(path: RoadmapPath, request: ToolRequest, goal: str) -> RoadmapPath:
    """Nudge heuristic confidence using what the profile says."""
    profile = request.profile
    delta = 0
    if profile.nationality:
        delta += 5
    if goal == "work" and (profile.work_years or 0) >= 3:
        delta += 10
    if goal == "study" and profile.education:
        delta += 5
    if profile.finances == "low":
        delta -= 15
    if request.passport_valid is False:
        delta -= 10
    path.confidence = clamp(path.confidence + delta, *CONFIDENCE_RANGE)
    return path


def render_roadmap(roadmap: Roadmap) -> str:
    lines = [f"Roadmap for {roadmap.goal} in {country_name(roadmap.destination)}:"]
    for i, path in enumerate(roadmap.paths, 1):
        lines.append(f"\n{i}. {path.route_name} (confidence {path.confidence}/100, ~{path.total_months} months)")
        for j, step in enumerate(path.steps, 1):
            line = f"   {j}. {step.title}"
            if step.estimated_months:
                line += f" ({step.estimated_months} mo)"
            if step.description:
                line += f": {step.description}"
            lines.append(line)
            if step.required_documents:
                lines.append(f"      Documents: {', '.join(step.required_documents)}")
    return "\n".join(lines)


class RoadmapTool(Tool):
    """Builds a roadmap from model JSON, or from templates when that fails."""

    intent = Intent.ROADMAP

    def __init__(
        self,
        retriever: Retriever | None = None,
        llm: CompletionClient | None = None,
        artifacts: ArtifactStore | None = None,
        top_k: int = DEFAULT_FACTS_TOP_K,
    ) -> None:
        super().__init__(retriever, llm, top_k)
        self.artifacts = artifacts

    @property
    def name(self) -> str:
        return "roadmap"

    @property
    def description(self) -> str:
        return "Generate 1-3 step-by-step visa paths with durations, documents and confidence"

    async def generate(self, request: ToolRequest) -> ToolResult:
        ctx = request.context
        assert ctx.destination is not None and ctx.goal is not None
        facts = self.retrieve_facts(f"{ctx.goal} visa {ctx.destination_name}", country=ctx.destination)

        paths: list[RoadmapPath] | None = None
        source = "heuristic"
        if self.llm is not None:
            fact_lines = "\n".join(f"- {f.text}" for f in facts) or "- (no local facts)"
            prompt = (
                f"Destination: {ctx.destination_name}\nGoal: {ctx.goal}\n"
                f"Profile:\n{request.profile.summary()}\n\nFacts:\n{fact_lines}"
            )
            paths = parse_roadmap_paths(await self.model_json(ROADMAP_SYSTEM, prompt))
            if paths:
                source = "model"
            else:
                logger.debug("Roadmap model output unusable, using templates")

        if not paths:
            paths = [adjust_confidence(p, request, ctx.goal) for p in heuristic_paths(ctx.goal, ctx.destination)]

        roadmap = Roadmap(destination=ctx.destination, goal=ctx.goal, paths=paths)
        warnings = []
        if request.passport_valid is False:
            warnings.append("Your passport may expire within 6 months; renew it before applying.")

        if self.artifacts is not None:
            self.artifacts.save("roadmap", asdict(roadmap))

        return ToolResult.executed(
            self.name,
            render_roadmap(roadmap),
            roadmap,
            citations=self.citations_for(facts),
            warnings=warnings,
            source=source,
        )
