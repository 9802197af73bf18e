"""Country facts: the catalogue entry plus the closest retrieved statements."""

from dataclasses import dataclass, field

from ..facts import FactStore
from ..facts.countries import country_name
from ..index.retriever import Retriever
from ..intent import Intent
from .base import DEFAULT_FACTS_TOP_K, Tool, ToolRequest, ToolResult


@dataclass
class CountryFacts:
    destination: str
    country: str
    official_site: str = ""
    visa_types: list[str] = field(default_factory=list)
    visa_free_policy: str | None = None
    processing_time: str | None = None
    fees: str | None = None
    restrictions: str | None = None
    statements: list[str] = field(default_factory=list)


def render_facts(facts: CountryFacts) -> str:
    if not facts.official_site and not facts.statements:
        return f"I don't have local facts for {facts.country} yet. Check its official immigration site."
    lines = [f"{facts.country} visa facts:"]
    if facts.visa_free_policy:
        lines.append(f"- Visa-free policy: {facts.visa_free_policy}")
    if facts.visa_types:
        lines.append(f"- Visa types: {', '.join(facts.visa_types)}")
    if facts.processing_time:
        lines.append(f"- Processing: {facts.processing_time}")
    if facts.fees:
        lines.append(f"- Fees: {facts.fees}")
    if facts.restrictions:
        lines.append(f"- Restrictions: {facts.restrictions}")
    lines.extend(f"- {s}" for s in facts.statements)
    if facts.official_site:
        lines.append(f"Official: {facts.official_site}")
    return "\n".join(lines)


class CountryFactsTool(Tool):
    intent = Intent.FACTS

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
        return "facts"

    @property
    def description(self) -> str:
        return "Summarise visa facts for a destination country"

    async def generate(self, request: ToolRequest) -> ToolResult:
        ctx = request.context
        code = ctx.destination or ""
        entry = self.facts.get(code)
        retrieved = self.retrieve_facts(ctx.text, country=code)
        statements = [f.statement for f in retrieved if f.code == code]
        if entry is None:
            payload = CountryFacts(destination=code, country=country_name(code), statements=statements)
        else:
            payload = CountryFacts(
                destination=code,
                country=entry.country,
                official_site=entry.official_site,
                visa_types=list(entry.visa_types),
                visa_free_policy=entry.visa_free_policy,
                processing_time=entry.processing_time,
                fees=entry.fees,
                restrictions=entry.restrictions,
                statements=statements or list(entry.statements[:3]),
            )
        return ToolResult.executed(
            self.name,
            render_facts(payload),
            payload,
            citations=self.citations_for(retrieved, entry.official_site if entry else None),
        )
