"""Country comparison: rank destinations by a rough difficulty score."""

import re
from dataclasses import dataclass, field

from ..facts import SCHENGEN_CODES, FactStore
from ..facts.countries import country_name
from ..index.retriever import Retriever
from ..intent import Intent
from .base import Tool, ToolRequest, ToolResult
from .checklist import normalize_visa_type
from .cost import FeeTable
from .parsing import clamp

BASELINE = 50
DIFFICULTY_RANGE = (1, 100)
COUNTRIES_LABEL = "countries to compare (at least two)"

_PROCESSING = re.compile(r"(\d+)\s*(?:to\s*\d+\s*)?(hours?|working days?|days?|weeks?|months?)")
_UNIT_DAYS = {"hour": 1 / 24, "day": 1, "working day": 1.4, "week": 7, "month": 30}


@dataclass
class CountryComparison:
    code: str
    country: str
    difficulty: int
    processing_time: str | None = None
    fees: str | None = None
    fee_usd: float | None = None
    notes: list[str] = field(default_factory=list)


@dataclass
class Comparison:
    goal: str
    countries: list[CountryComparison] = field(default_factory=list)

    @property
    def easiest(self) -> CountryComparison | None:
        return self.countries[0] if self.countries else None


def processing_days(text: str | None) -> float | None:
    """First duration in a free-text processing time, in days."""
    if not text:
        return None
    match = _PROCESSING.search(text.lower())
    if match is None:
        return None
    unit = match.group(2).rstrip("s")
    return int(match.group(1)) * _UNIT_DAYS[unit]


def comparison_codes(request: ToolRequest) -> list[str]:
    """Codes named in the message; "schengen" adds the Schengen members."""
    codes = list(request.context.countries)
    if "schengen" in request.context.text.lower():
        codes.extend(sorted(SCHENGEN_CODES))
    return list(dict.fromkeys(codes))


def score_country(code: str, goal: str, facts: FactStore, fee_table: FeeTable | None) -> CountryComparison:
    entry = facts.get(code)
    difficulty = BASELINE
    notes: list[str] = []

    days = processing_days(entry.processing_time if entry else None)
    if days is not None:
        difficulty += clamp(int((days - 14) // 3), -15, 25)

    fee_usd = None
    if fee_table is not None:
        schedule = fee_table.find(code, goal if goal != "generic" else "tourist")
        if schedule is not None:
            fee_usd = fee_table.to_usd(float(schedule.base_fee["amount"]), schedule.base_fee["currency"])
    if fee_usd is not None:
        difficulty += clamp(int(fee_usd // 25) - 4, -10, 20)

    if goal in ("work", "immigration"):
        difficulty += 10
    if entry is None:
        notes.append("No local facts; check the official site.")
    else:
        if entry.visa_free_policy:
            notes.append(entry.visa_free_policy)
        if entry.restrictions:
            notes.append(entry.restrictions)

    return CountryComparison(
        code=code,
        country=country_name(code),
        difficulty=clamp(difficulty, *DIFFICULTY_RANGE),
        processing_time=entry.processing_time if entry else None,
        fees=entry.fees if entry else None,
        fee_usd=fee_usd,
        notes=notes,
    )


def compare_countries(
    request: ToolRequest,
    facts: FactStore,
    fee_table: FeeTable | None = None,
) -> Comparison:
    goal = normalize_visa_type(request.context.goal)
    scored = [score_country(code, goal, facts, fee_table) for code in comparison_codes(request)]
    # sorted() is stable, so ties keep the order the user named them in.
    scored = sorted(scored, key=lambda c: c.difficulty)
    return Comparison(goal=goal, countries=scored)


def render_comparison(comparison: Comparison) -> str:
    lines = [f"Comparison for {comparison.goal} visas (lower difficulty is easier):"]
    for rank, item in enumerate(comparison.countries, 1):
        lines.append(f"\n{rank}. {item.country}: difficulty {item.difficulty}/100")
        if item.processing_time:
            lines.append(f"   Processing: {item.processing_time}")
        if item.fees:
            lines.append(f"   Fees: {item.fees}")
        for note in item.notes:
            lines.append(f"   Note: {note}")
    if comparison.easiest is not None:
        lines.append(f"\nLikely easiest: {comparison.easiest.country}")
    return "\n".join(lines)


class CompareTool(Tool):
    """Side-by-side comparison of two or more destinations."""

    intent = Intent.COMPARE

    def __init__(
        self,
        facts: FactStore,
        retriever: Retriever | None = None,
        fee_table: FeeTable | None = None,
    ) -> None:
        super().__init__(retriever)
        self.facts = facts
        self.fee_table = fee_table

    @property
    def name(self) -> str:
        return "compare"

    @property
    def description(self) -> str:
        return "Compare processing times, fees and restrictions across countries"

    def missing_inputs(self, request: ToolRequest) -> list[str]:
        missing = super().missing_inputs(request)
        if len(comparison_codes(request)) < 2:
            missing.append(COUNTRIES_LABEL)
        return missing

    def gate_prompt(self, request: ToolRequest, missing: list[str]) -> str:
        if missing == [COUNTRIES_LABEL]:
            return "Which countries would you like me to compare? Please name at least two."
        return super().gate_prompt(request, missing)

    async def generate(self, request: ToolRequest) -> ToolResult:
        comparison = compare_countries(request, self.facts, self.fee_table)
        sites: list[str] = []
        for item in comparison.countries:
            entry = self.facts.get(item.code)
            if entry is not None and entry.official_site not in sites:
                sites.append(entry.official_site)
        warnings = []
        if not request.profile.nationality:
            warnings.append("Share your nationality for visa-free and fee differences that apply to you.")
        return ToolResult.executed(self.name, render_comparison(comparison), comparison, citations=sites,
                                   warnings=warnings)
