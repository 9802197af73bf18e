"""Embassy locator: nearest missions of the destination country."""

from dataclasses import dataclass, field
from urllib.parse import quote_plus

from ..collaborators import Collaborators
from ..facts import FactStore
from ..facts.countries import country_name
from ..facts.gazetteer import City, Mission, haversine_km, lookup_city, missions_for
from ..intent import Intent
from .base import Tool, ToolRequest, ToolResult

LOCATION_LABEL = "current city"
MAX_OFFICES = 3
MAPS_URL = "https://www.google.com/maps/search/?api=1&query="


@dataclass
class OfficeMatch:
    kind: str
    city: str
    distance_km: float
    website: str
    map_url: str


@dataclass
class EmbassyResult:
    destination: str
    origin: str
    offices: list[OfficeMatch] = field(default_factory=list)


def map_link(mission: Mission) -> str:
    return MAPS_URL + quote_plus(f"{mission.kind} of {country_name(mission.destination)} {mission.city}")


def nearest_missions(destination: str, origin: City, limit: int = MAX_OFFICES) -> list[OfficeMatch]:
    """Missions of ``destination`` sorted by great-circle distance from ``origin``."""
    matches = [
        OfficeMatch(
            kind=m.kind,
            city=m.city,
            distance_km=round(haversine_km(origin.lat, origin.lon, m.lat, m.lon), 1),
            website=m.website,
            map_url=map_link(m),
        )
        for m in missions_for(destination)
    ]
    matches.sort(key=lambda o: o.distance_km)
    return matches[:limit]


def render_embassies(result: EmbassyResult) -> str:
    country = country_name(result.destination)
    if not result.offices:
        return f"I don't have mission locations for {country} near {result.origin}. Check the official site."
    lines = [f"Nearest {country} missions to {result.origin}:"]
    for office in result.offices:
        lines.append(f"- {office.kind}, {office.city} (~{office.distance_km:,.0f} km)")
        if office.website:
            lines.append(f"  {office.website}")
        lines.append(f"  Map: {office.map_url}")
    return "\n".join(lines)


class EmbassyTool(Tool):
    """Finds missions near the user's city, residence or device location."""

    intent = Intent.EMBASSY

    def __init__(self, facts: FactStore, collaborators: Collaborators | None = None) -> None:
        super().__init__()
        self.facts = facts
        self.collaborators = collaborators or Collaborators()

    @property
    def name(self) -> str:
        return "embassy"

    @property
    def description(self) -> str:
        return "Locate the nearest embassies or consulates of a destination"

    def resolve_origin(self, request: ToolRequest) -> City | None:
        for candidate in (request.context.city, request.profile.residence):
            city = lookup_city(candidate)
            if city is not None:
                return city
        return lookup_city(self.collaborators.locate())

    def missing_inputs(self, request: ToolRequest) -> list[str]:
        missing = super().missing_inputs(request)
        if self.resolve_origin(request) is None:
            missing.append(LOCATION_LABEL)
        return missing

    async def generate(self, request: ToolRequest) -> ToolResult:
        origin = self.resolve_origin(request)
        assert origin is not None and request.context.destination is not None
        destination = request.context.destination
        result = EmbassyResult(
            destination=destination,
            origin=origin.name,
            offices=nearest_missions(destination, origin),
        )
        entry = self.facts.get(destination)
        sites = [o.website for o in result.offices if o.website]
        if entry is not None:
            sites.append(entry.official_site)
        return ToolResult.executed(
            self.name,
            render_embassies(result),
            result,
            citations=list(dict.fromkeys(sites)),
            warnings=["Opening hours and appointment rules change; confirm before visiting."],
        )
