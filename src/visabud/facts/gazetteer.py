"""City gazetteer and diplomatic missions bundled with the package."""

import math
import re
from dataclasses import dataclass
from functools import lru_cache

from .store import load_bundled

MISSIONS_RESOURCE = "missions.json"
EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class City:
    name: str
    country: str
    lat: float
    lon: float


@dataclass(frozen=True)
class Mission:
    """An embassy, consulate or high commission of ``destination``."""

    destination: str
    kind: str
    city: str
    lat: float
    lon: float
    website: str = ""


@lru_cache(maxsize=1)
def _load() -> tuple[tuple[City, ...], tuple[Mission, ...]]:
    data = load_bundled(MISSIONS_RESOURCE)
    cities = tuple(
        City(name=c["name"], country=c["country"], lat=float(c["lat"]), lon=float(c["lon"]))
        for c in data.get("cities", [])
    )
    missions = tuple(
        Mission(
            destination=m["destination"],
            kind=m.get("type", "Embassy"),
            city=m["city"],
            lat=float(m["lat"]),
            lon=float(m["lon"]),
            website=m.get("website", ""),
        )
        for m in data.get("missions", [])
    )
    return cities, missions


def cities() -> tuple[City, ...]:
    return _load()[0]


def missions_for(destination: str) -> list[Mission]:
    """Missions representing the destination country abroad."""
    code = destination.upper()
    return [m for m in _load()[1] if m.destination == code]


def find_city(text: str) -> City | None:
    """First gazetteer city named in the text (longest name wins on overlap)."""
    low = text.lower()
    best: tuple[int, int, City] | None = None
    for city in cities():
        match = re.search(rf"\b{re.escape(city.name.lower())}\b", low)
        if match is None:
            continue
        key = (match.start(), -len(city.name))
        if best is None or key < best[:2]:
            best = (key[0], key[1], city)
    return best[2] if best else None


def lookup_city(name: str | None) -> City | None:
    """Exact (case-insensitive) gazetteer lookup."""
    if not name:
        return None
    target = name.strip().lower()
    for city in cities():
        if city.name.lower() == target:
            return city
    return None


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))
