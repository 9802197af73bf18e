"""Bundled visa fact catalogue."""

from .countries import (
    COUNTRY_NAMES,
    SCHENGEN_CODES,
    country_code,
    country_name,
    find_countries,
    find_destination,
    normalize_country,
)
from .models import FactEntry
from .store import FactStore, load_bundled

__all__ = [
    "COUNTRY_NAMES",
    "SCHENGEN_CODES",
    "FactEntry",
    "FactStore",
    "country_code",
    "country_name",
    "find_countries",
    "find_destination",
    "load_bundled",
    "normalize_country",
]
