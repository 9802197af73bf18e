"""Data models for the bundled fact catalogue."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class FactEntry:
    """Curated facts about one destination country.

    Attributes:
        code: Country code, the identity of the entry (e.g. 'UK').
        country: Display name.
        official_site: Official immigration site used for citations.
        statements: Short, citable statements.
        visa_types: Named visa categories offered by the country.
        visa_free_policy: Summary of visa-free or visa-on-arrival rules.
        checklist: Typical documents for a short-stay application.
        fees: Free-text fee summary.
        processing_time: Free-text processing time summary.
        restrictions: Notable restrictions (e.g. no work on visitor visas).
    """

    code: str
    country: str
    official_site: str
    statements: tuple[str, ...]
    visa_types: tuple[str, ...] = ()
    visa_free_policy: str | None = None
    checklist: tuple[str, ...] = ()
    fees: str | None = None
    processing_time: str | None = None
    restrictions: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FactEntry":
        """Create from a catalogue JSON object."""
        return cls(
            code=str(data["code"]).upper(),
            country=str(data["country"]),
            official_site=str(data.get("official_site", "")),
            statements=tuple(str(s) for s in data.get("facts", [])),
            visa_types=tuple(str(v) for v in data.get("visa_types", [])),
            visa_free_policy=data.get("visa_free_policy"),
            checklist=tuple(str(c) for c in data.get("checklist", [])),
            fees=data.get("fees"),
            processing_time=data.get("processing_time"),
            restrictions=data.get("restrictions"),
        )

    def structured_tags(self) -> dict[str, Any]:
        """Structured fields carried on every embedded statement."""
        return {
            "code": self.code,
            "country": self.country,
            "site": self.official_site,
            "visa_types": list(self.visa_types),
            "visa_free_policy": self.visa_free_policy,
            "processing_time": self.processing_time,
            "fees": self.fees,
        }
