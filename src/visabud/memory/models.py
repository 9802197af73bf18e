"""Data models for the user profile."""

import time
from dataclasses import asdict, dataclass, field, fields
from typing import Any

SCALAR_FIELDS = (
    "name",
    "dob",
    "nationality",
    "residence",
    "education",
    "work_years",
    "finances",
    "passport_expiry",
    "passport_valid",
    "occupation",
    "work_status",
    "current_visa",
)

LIST_FIELDS = (
    "languages",
    "travel_history",
    "selected_goals",
    "saved_document_ids",
    "preferred_destinations",
)


@dataclass(frozen=True)
class TravelEvent:
    """A past trip.

    Attributes:
        country: Country visited.
        year: Year of travel, if known.
        purpose: Purpose of the trip, if known.
    """

    country: str
    year: int | None = None
    purpose: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TravelEvent":
        year = data.get("year")
        return cls(
            country=str(data["country"]),
            year=int(year) if year is not None else None,
            purpose=data.get("purpose"),
        )


@dataclass
class UserProfile:
    """The single local user profile.

    Scalar fields are None until known. ``finances`` is one of 'low',
    'medium' or 'high'; ``passport_expiry`` is an ISO date string.
    """

    name: str | None = None
    dob: str | None = None
    nationality: str | None = None
    residence: str | None = None
    education: str | None = None
    work_years: int | None = None
    finances: str | None = None
    passport_expiry: str | None = None
    passport_valid: bool | None = None
    occupation: str | None = None
    work_status: str | None = None
    current_visa: str | None = None
    languages: list[str] = field(default_factory=list)
    travel_history: list[TravelEvent] = field(default_factory=list)
    selected_goals: list[str] = field(default_factory=list)
    saved_document_ids: list[str] = field(default_factory=list)
    preferred_destinations: list[str] = field(default_factory=list)
    last_seen: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserProfile":
        """Create from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        values["travel_history"] = [
            TravelEvent.from_dict(item)
            for item in values.get("travel_history") or []
            if isinstance(item, dict) and item.get("country")
        ]
        for name in LIST_FIELDS:
            if name != "travel_history":
                values[name] = [str(v) for v in values.get(name) or []]
        return cls(**values)

    def summary(self) -> str:
        """Short human-readable rendering of the known fields."""
        parts = []
        if self.nationality:
            parts.append(f"Nationality: {self.nationality}")
        if self.residence:
            parts.append(f"Residence: {self.residence}")
        if self.occupation:
            parts.append(f"Occupation: {self.occupation}")
        if self.education:
            parts.append(f"Education: {self.education}")
        if self.work_years is not None:
            parts.append(f"Work experience: {self.work_years} year(s)")
        if self.finances:
            parts.append(f"Finances: {self.finances}")
        if self.passport_expiry:
            parts.append(f"Passport expiry: {self.passport_expiry}")
        elif self.passport_valid:
            parts.append("Passport: valid")
        if self.selected_goals:
            parts.append(f"Goals: {', '.join(self.selected_goals)}")
        if self.travel_history:
            visited = ", ".join(event.country for event in self.travel_history)
            parts.append(f"Travel history: {visited}")
        if self.languages:
            parts.append(f"Languages: {', '.join(self.languages)}")
        return "\n".join(parts) if parts else "No profile details yet."


@dataclass
class ProfileUpdate:
    """A partial profile. None (or an empty list) means "leave unchanged"."""

    name: str | None = None
    dob: str | None = None
    nationality: str | None = None
    residence: str | None = None
    education: str | None = None
    work_years: int | None = None
    finances: str | None = None
    passport_expiry: str | None = None
    passport_valid: bool | None = None
    occupation: str | None = None
    work_status: str | None = None
    current_visa: str | None = None
    languages: list[str] = field(default_factory=list)
    travel_history: list[TravelEvent] = field(default_factory=list)
    selected_goals: list[str] = field(default_factory=list)
    saved_document_ids: list[str] = field(default_factory=list)
    preferred_destinations: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        if any(_has_value(getattr(self, name)) for name in SCALAR_FIELDS):
            return False
        return not any(getattr(self, name) for name in LIST_FIELDS)


def _has_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def merge_profile(profile: UserProfile, update: ProfileUpdate) -> UserProfile:
    """Return a new profile with the update applied.

    Non-empty scalars replace the old value, empty ones keep it. Lists are
    appended with duplicates dropped, keeping first-seen order.
    """
    values = profile.to_dict()
    values["travel_history"] = list(profile.travel_history)

    for name in SCALAR_FIELDS:
        new = getattr(update, name)
        if _has_value(new):
            values[name] = new.strip() if isinstance(new, str) else new

    for name in LIST_FIELDS:
        merged = list(getattr(profile, name))
        for item in getattr(update, name):
            if isinstance(item, str):
                item = item.strip()
                if not item:
                    continue
            if item not in merged:
                merged.append(item)
        values[name] = merged

    return UserProfile(**values)
