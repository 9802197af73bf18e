"""Cost estimator: itemised visa, travel and living costs in USD."""

import math
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from ..facts import FactStore, load_bundled
from ..facts.countries import country_code, country_name
from ..index.retriever import Retriever
from ..intent import Intent
from .base import DEFAULT_FACTS_TOP_K, Tool, ToolRequest, ToolResult
from .checklist import normalize_visa_type
from .parsing import clamp_months

FEES_RESOURCE = "visa_fees.json"

REGIONS: dict[str, frozenset[str]] = {
    "NA": frozenset({"US", "CA", "MX"}),
    "EU": frozenset({"UK", "FR", "DE", "ES", "IT", "NL", "IE"}),
    "ME": frozenset({"AE"}),
    "SA": frozenset({"IN", "PK", "BD"}),
    "EA": frozenset({"JP", "CN"}),
    "OC": frozenset({"AU", "NZ"}),
    "AF": frozenset({"ZA", "NG", "KE", "EG"}),
}

LOW_COST = frozenset({"IN", "PK", "BD", "NG", "KE", "EG", "ZA"})
HIGH_COST = frozenset({"US", "CA", "UK", "AU", "FR", "DE", "ES", "IT", "NL", "IE", "AE", "JP"})

APPLICATION_FEE = {"tourist": 100.0, "study": 350.0, "work": 190.0, "immigration": 535.0}
BIOMETRICS_FEE = {"immigration": 85.0, "work": 75.0, "study": 75.0}
SERVICE_FEE = {"immigration": 90.0, "work": 70.0, "study": 70.0}
TRANSLATION_FEE = {"immigration": 150.0, "work": 150.0, "study": 150.0}
MEDICAL_FEE = {"immigration": 180.0, "study": 180.0}

FLIGHTS_BY_DISTANCE = {1: 250.0, 2: 600.0, 3: 900.0}
ACCOMMODATION_SETUP = {1: 800.0, 2: 1200.0, 3: 2000.0}
LIVING_PER_MONTH = {1: 600.0, 2: 1000.0, 3: 1700.0}
HOTEL_PER_NIGHT = {1: 40.0, 2: 80.0, 3: 120.0}
BUDGET_FACTOR = {"low": 0.8, "high": 1.2}


@dataclass
class LineItem:
    label: str
    amount: float
    notes: str | None = None
    confidence: int = 70
    optional: bool = False


@dataclass
class CostEstimate:
    destination: str
    goal: str
    currency: str = "USD"
    duration_months: int | None = None
    items: list[LineItem] = field(default_factory=list)
    total: float = 0.0
    low: float = 0.0
    high: float = 0.0
    assumptions: list[str] = field(default_factory=list)
    fee_source: str = "heuristic"


@dataclass(frozen=True)
class FeeSchedule:
    """Official fees for one visa type, as bundled."""

    country_code: str
    visa_type_id: str
    name: str
    category: str
    base_fee: dict[str, Any]
    ancillary_fees: tuple[dict[str, Any], ...] = ()
    optional_fees: tuple[dict[str, Any], ...] = ()


class FeeTable:
    """Bundled fee schedules with currency conversion to USD."""

    def __init__(self, data: dict[str, Any]) -> None:
        self.rates: dict[str, float] = {k.upper(): float(v) for k, v in data.get("rates_to_usd", {}).items()}
        self.schedules = [
            FeeSchedule(
                country_code=item["country_code"],
                visa_type_id=item["visa_type_id"],
                name=item.get("name", item["visa_type_id"]),
                category=item.get("category", "generic"),
                base_fee=item["base_fee"],
                ancillary_fees=tuple(item.get("ancillary_fees", [])),
                optional_fees=tuple(item.get("optional_fees", [])),
            )
            for item in data.get("visa_types", [])
        ]

    @classmethod
    def bundled(cls) -> "FeeTable":
        return _bundled_fee_table()

    def to_usd(self, amount: float, currency: str) -> float | None:
        rate = self.rates.get(currency.upper())
        if rate is None:
            return None
        return round(amount * rate, 2)

    def find(self, destination: str, goal: str, visa_type_id: str | None = None) -> FeeSchedule | None:
        """Schedule by explicit id, else the first one for the destination and goal."""
        if visa_type_id:
            wanted = visa_type_id.replace("-", "").upper()
            for schedule in self.schedules:
                if schedule.visa_type_id.replace("-", "").upper() == wanted:
                    return schedule
        for schedule in self.schedules:
            if schedule.country_code == destination and schedule.category == goal:
                return schedule
        return None


@lru_cache(maxsize=1)
def _bundled_fee_table() -> FeeTable:
    return FeeTable(load_bundled(FEES_RESOURCE))


def region_of(code_or_name: str | None) -> str | None:
    code = country_code(code_or_name)
    if code is None:
        return None
    for region, members in REGIONS.items():
        if code in members:
            return region
    return None


def cost_bucket(destination: str | None) -> int:
    """1 = low, 2 = medium, 3 = high cost of living."""
    if destination in LOW_COST:
        return 1
    if destination in HIGH_COST:
        return 3
    return 2


def flight_distance_class(residence: str | None, destination: str) -> int:
    origin = region_of(residence)
    target = region_of(destination)
    if origin is None or target is None:
        return 2
    return 1 if origin == target else 3


def _fee_items(schedule: FeeSchedule, table: FeeTable, years: int) -> list[LineItem] | None:
    base = table.to_usd(float(schedule.base_fee["amount"]), schedule.base_fee["currency"])
    if base is None:
        return None
    items = [
        LineItem(
            label=schedule.name,
            amount=base,
            notes=f"({schedule.base_fee['amount']} {schedule.base_fee['currency']})",
            confidence=90,
        )
    ]
    for fee in schedule.ancillary_fees:
        amount = table.to_usd(float(fee["amount"]), fee["currency"])
        if amount is None:
            continue
        label = fee["name"]
        if fee.get("per_year"):
            amount = round(amount * years, 2)
            label = f"{label} (x{years} yr)"
        items.append(LineItem(label=label, amount=amount, notes="mandatory", confidence=80))
    for fee in schedule.optional_fees:
        amount = table.to_usd(float(fee["amount"]), fee["currency"])
        if amount is not None:
            items.append(LineItem(label=fee["name"], amount=amount, notes="optional", confidence=60, optional=True))
    return items


def _heuristic_fee_items(goal: str) -> list[LineItem]:
    items = [LineItem("Visa application fee", APPLICATION_FEE.get(goal, 150.0), confidence=80)]
    if goal in BIOMETRICS_FEE:
        items.append(LineItem("Biometrics/centre fee", BIOMETRICS_FEE[goal], confidence=70))
    items.append(LineItem("Service/courier fees", SERVICE_FEE.get(goal, 40.0), confidence=60))
    items.append(LineItem("Translations/photocopies", TRANSLATION_FEE.get(goal, 30.0), confidence=50))
    if goal in MEDICAL_FEE:
        items.append(LineItem("Medical/health checks (if applicable)", MEDICAL_FEE[goal], confidence=50))
    return items


def estimate_costs(
    request: ToolRequest,
    fee_table: FeeTable | None = None,
) -> CostEstimate:
    """Build an itemised estimate from the fee table or heuristics."""
    ctx = request.context
    profile = request.profile
    destination = ctx.destination or ""
    goal = normalize_visa_type(ctx.goal)
    months = clamp_months(ctx.duration_months) if ctx.duration_months is not None else None
    bucket = cost_bucket(destination)
    assumptions: list[str] = []

    items: list[LineItem] | None = None
    fee_source = "heuristic"
    if fee_table is not None:
        schedule = fee_table.find(destination, goal, ctx.visa_type_id)
        if schedule is not None:
            years = max(1, math.ceil((months or 12) / 12))
            items = _fee_items(schedule, fee_table, years)
            if items is not None:
                fee_source = schedule.visa_type_id
                assumptions.append(f"Official fees for {schedule.name} converted to USD.")
    if items is None:
        items = _heuristic_fee_items(goal)
        assumptions.append("Visa fees are typical amounts, not official figures.")

    flights = FLIGHTS_BY_DISTANCE[flight_distance_class(profile.residence, destination)]
    items.append(LineItem("Flights", flights, confidence=40))
    if not profile.residence:
        assumptions.append("Flight cost assumes an unknown departure region.")

    if goal in ("study", "work", "immigration"):
        stay = max(months or 6, 1)
        items.append(LineItem("Local transport/setup", stay * 50.0, confidence=40))
        items.append(LineItem("Accommodation deposit/setup", ACCOMMODATION_SETUP[bucket], confidence=50))
        factor = BUDGET_FACTOR.get(profile.finances or "", 1.0)
        items.append(
            LineItem(
                f"Living expenses ({stay} mo)",
                round(LIVING_PER_MONTH[bucket] * factor * stay, 2),
                notes=f"{profile.finances} budget" if profile.finances else None,
                confidence=50,
            )
        )
        if months is None:
            assumptions.append("Living costs assume a 6-month stay.")
    elif goal == "tourist":
        nights = max((ctx.duration_days or 0), 5)
        items.append(LineItem(f"Accommodation (~{nights} nights)", HOTEL_PER_NIGHT[bucket] * nights, confidence=50))

    total = round(sum(item.amount for item in items if not item.optional), 2)
    return CostEstimate(
        destination=destination,
        goal=goal,
        duration_months=months,
        items=items,
        total=total,
        low=round(total * 0.85, 2),
        high=round(total * 1.2, 2),
        assumptions=assumptions,
        fee_source=fee_source,
    )


def render_estimate(estimate: CostEstimate) -> str:
    lines = [f"Estimated Costs ({estimate.currency})", f"Destination: {country_name(estimate.destination)}",
             f"Goal: {estimate.goal}"]
    if estimate.duration_months:
        lines.append(f"Duration: {estimate.duration_months} months")
    lines.append("")
    for item in estimate.items:
        line = f"- {item.label}: ${item.amount:,.2f}"
        if item.notes:
            line += f" {item.notes}"
        lines.append(line)
    lines.append(f"\nTotal: ${estimate.total:,.2f} (range ${estimate.low:,.0f} - ${estimate.high:,.0f})")
    if estimate.assumptions:
        lines.append("Assumptions:")
        lines.extend(f"- {a}" for a in estimate.assumptions)
    return "\n".join(lines)


class CostTool(Tool):
    """Itemised cost estimate for a destination and visa type."""

    intent = Intent.COST

    def __init__(
        self,
        facts: FactStore,
        retriever: Retriever | None = None,
        fee_table: FeeTable | None = None,
        top_k: int = DEFAULT_FACTS_TOP_K,
    ) -> None:
        super().__init__(retriever, top_k=top_k)
        self.facts = facts
        self.fee_table = fee_table

    @property
    def name(self) -> str:
        return "cost"

    @property
    def description(self) -> str:
        return "Estimate visa fees, travel and living costs in USD"

    async def generate(self, request: ToolRequest) -> ToolResult:
        estimate = estimate_costs(request, self.fee_table)
        entry = self.facts.get(estimate.destination)
        facts = self.retrieve_facts(f"visa fees {request.context.destination_name}", country=estimate.destination)
        warnings = ["Exchange rates and fees change; confirm amounts on the official site."]
        return ToolResult.executed(
            self.name,
            render_estimate(estimate),
            estimate,
            citations=self.citations_for(facts, entry.official_site if entry else None),
            warnings=warnings,
        )
