"""Per-turn context extracted from the user's message."""

import re
from dataclasses import dataclass, field
from typing import Any, Sequence

from ..facts.countries import country_code, country_name, find_countries, find_destination
from ..facts.gazetteer import find_city
from ..memory.extractor import detect_goals
from ..memory.models import UserProfile
from .parsing import clamp_months

_DURATION_MONTHS = re.compile(r"\b(\d{1,2})\s*(?:months?|mo)\b")
_DURATION_YEARS = re.compile(r"\b(\d{1,2})\s*(?:years?|yrs?)\b(?!\s+(?:of\s+)?(?:work|experience))")
_DURATION_WEEKS = re.compile(r"\b(\d{1,2})\s*(?:weeks?|wks?)\b")
_DURATION_DAYS = re.compile(r"\b(\d{1,3})\s*days?\b")

_VISA_TYPE_IDS = (
    re.compile(r"\b(AUS-\d{3})\b", re.IGNORECASE),
    re.compile(r"\b(H-?1B|L-?1|O-?1|F-?1|J-?1)\b", re.IGNORECASE),
    re.compile(r"\b((?:UK|US|CA|DE|FR|JP)-[A-Z0-9]{2,8})\b", re.IGNORECASE),
)

_PURPOSES = (
    ("conference", re.compile(r"\b(?:conference|summit|seminar|workshop)\b")),
    ("business", re.compile(r"\b(?:business|meeting|client)\b")),
    ("medical", re.compile(r"\b(?:medical|treatment|hospital)\b")),
    ("family", re.compile(r"\b(?:family|spouse|partner|relatives)\b")),
)
_PAID = re.compile(r"\bpaid\b|\bsalary\b|\bhonorarium\b|\bget paid\b|\bearn\b")
_UNPAID = re.compile(r"\bunpaid\b|\bno pay\b|\bvolunteer")


@dataclass
class TurnContext:
    """What the current message (and recent history) tells us.

    ``destination`` is a country code; ``goal`` is one of study, work,
    immigration or tourist.
    """

    text: str
    destination: str | None = None
    goal: str | None = None
    duration_months: int | None = None
    duration_days: int | None = None
    purpose: str | None = None
    paid_work: bool | None = None
    city: str | None = None
    visa_type_id: str | None = None
    countries: list[str] = field(default_factory=list)

    @property
    def destination_name(self) -> str | None:
        return country_name(self.destination) if self.destination else None


def extract_goal(text: str) -> str | None:
    goals = detect_goals(text)
    return goals[0] if goals else None


def extract_duration_months(text: str) -> int | None:
    low = text.lower()
    match = _DURATION_MONTHS.search(low)
    if match:
        return clamp_months(match.group(1))
    match = _DURATION_YEARS.search(low)
    if match:
        return clamp_months(int(match.group(1)) * 12)
    return None


def extract_duration_days(text: str) -> int | None:
    low = text.lower()
    match = _DURATION_DAYS.search(low)
    if match:
        return int(match.group(1))
    match = _DURATION_WEEKS.search(low)
    if match:
        return int(match.group(1)) * 7
    months = extract_duration_months(low)
    return months * 30 if months is not None else None


def extract_purpose(text: str) -> str | None:
    low = text.lower()
    for purpose, pattern in _PURPOSES:
        if pattern.search(low):
            return purpose
    return extract_goal(text)


def detect_paid_work(text: str) -> bool | None:
    low = text.lower()
    if _UNPAID.search(low):
        return False
    if _PAID.search(low):
        return True
    return None


def extract_visa_type_id(text: str) -> str | None:
    for pattern in _VISA_TYPE_IDS:
        match = pattern.search(text)
        if match:
            return match.group(1).upper()
    return None


def _latest_user_value(history: Sequence[dict[str, Any]], extractor: Any) -> Any:
    for message in reversed(history):
        if message.get("role") != "user":
            continue
        value = extractor(str(message.get("content") or ""))
        if value:
            return value
    return None


def build_turn_context(
    text: str,
    history: Sequence[dict[str, Any]] = (),
    profile: UserProfile | None = None,
) -> TurnContext:
    """Extract context from the message, falling back to earlier user
    messages and then to the profile for destination and goal."""
    destination = find_destination(text) or _latest_user_value(history, find_destination)
    if destination is None and profile and profile.preferred_destinations:
        destination = country_code(profile.preferred_destinations[-1])

    goal = extract_goal(text) or _latest_user_value(history, extract_goal)
    if goal is None and profile and profile.selected_goals:
        goal = profile.selected_goals[-1]

    city = find_city(text)
    return TurnContext(
        text=text,
        destination=destination,
        goal=goal,
        duration_months=extract_duration_months(text),
        duration_days=extract_duration_days(text),
        purpose=extract_purpose(text),
        paid_work=detect_paid_work(text),
        city=city.name if city else None,
        visa_type_id=extract_visa_type_id(text),
        countries=find_countries(text),
    )
