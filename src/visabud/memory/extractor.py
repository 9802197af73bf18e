"""Heuristic profile signal extraction from chat messages."""

import re
from datetime import date
from typing import Any, Iterable

from ..facts.countries import country_code, find_destination, normalize_country
from .models import LIST_FIELDS, SCALAR_FIELDS, ProfileUpdate, TravelEvent

USER_WEIGHT = 2
ASSISTANT_WEIGHT = 1

_MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

_NATIONALITY_PATTERNS = [
    re.compile(r"\bmy nationality is\s+([a-z ]{3,40})"),
    re.compile(r"\bnationality\s*:\s*([a-z ]{3,40})"),
    re.compile(r"\bcitizen of\s+(?:the\s+)?([a-z ]{3,40})"),
    re.compile(r"\b(?:i have|i hold)\s+an?\s+([a-z ]{3,30}?)\s+passport"),
    re.compile(r"\b(?:i am|i'm|im)\s+(?:an?\s+)?([a-z ]{3,30}?)\s+(?:citizen|national)\b"),
    re.compile(r"\b(?:i am|i'm|im)\s+from\s+(?:the\s+)?([a-z ]{3,40})"),
    re.compile(r"\b(?:i am|i'm|im)\s+(?:an?\s+)?([a-z]{3,20}(?:\s[a-z]{3,20})?)\b"),
]

_RESIDENCE_PATTERN = re.compile(
    r"(?i:\b(?:i live in|i'm living in|i am living in|i reside in|i'm based in|i am based in|currently in))"
    r"\s+(?:the\s+)?([A-Za-z][A-Za-z]+(?:\s[A-Z][A-Za-z]+)?)"
)

_PASSPORT_EXPIRY = re.compile(
    r"passport.{0,30}?(?:expires?|expiry|expiration|valid (?:until|till|to))\s*"
    r"(?:on|is|date|:)?\s*:?\s*([0-9a-z ,./-]{6,20})"
)
_PASSPORT_VALID = ("valid passport", "passport is valid", "current passport", "have a passport")
_PASSPORT_INVALID = ("expired passport", "passport expired", "no passport", "don't have a passport")

_OCCUPATION_PATTERN = re.compile(
    r"\b(?:i work as|my occupation is|my job is|job:|occupation:)\s*(?:an?\s+)?([a-z /-]{3,40})"
)
_COMMON_OCCUPATIONS = (
    "student", "engineer", "developer", "nurse", "teacher", "manager",
    "designer", "doctor", "accountant", "freelancer", "self-employed", "unemployed",
)

_FINANCE_RULES = (
    ("low", re.compile(r"limited funds|low budget|tight budget|\bbroke\b|financial difficult")),
    ("high", re.compile(r"high budget|ample funds|significant savings|well-funded|well funded")),
    ("medium", re.compile(r"comfortable budget|sufficient funds|\bsavings\b|can afford")),
)

_EDUCATION_RULES = (
    ("phd", re.compile(r"\b(?:phd|ph\.d|doctorate)\b")),
    ("master's degree", re.compile(r"\b(?:master'?s|msc|mba|ma degree)\b")),
    ("bachelor's degree", re.compile(r"\b(?:bachelor'?s|bsc|undergraduate degree|university degree)\b")),
    ("diploma", re.compile(r"\bdiploma\b")),
    ("high school", re.compile(r"\bhigh school\b|\bsecondary school\b")),
)

_WORK_YEARS = re.compile(
    r"\b(\d{1,2})\+?\s*(?:years?|yrs?)\s+(?:of\s+)?(?:work(?:ing)?\s+)?(?:experience|working|in the industry)"
    r"|\bworked\s+(?:for\s+)?(\d{1,2})\s*(?:years?|yrs?)"
)

_VISITED = re.compile(r"\b(?:visited|been to|traveled to|travelled to)\s+([a-z ,]{2,60})")
_LANGUAGES = re.compile(r"\bi speak\s+([a-z ,]{3,60})")

GOAL_KEYWORDS: dict[str, re.Pattern[str]] = {
    "study": re.compile(r"\b(?:study|studying|student|university|masters|degree program)\b"),
    "work": re.compile(r"\b(?:work|working|job|employment|skilled worker)\b"),
    "tourist": re.compile(r"\b(?:tourist|tourism|visit|visiting|vacation|holiday|sightseeing)\b"),
    "immigration": re.compile(
        r"\b(?:immigration|immigrate|migrate|permanent residen(?:ce|cy)|pr|green card|settle)\b"
    ),
}


def normalize_date(value: str | None) -> str | None:
    """Normalise a date string to ISO ``YYYY-MM-DD``; None if unparseable.

    Slash dates are read as DD/MM when the first number exceeds 12,
    otherwise MM/DD.
    """
    if not value or not value.strip():
        return None
    text = value.strip().lower()

    try:
        match = re.search(r"(\d{4})-(\d{1,2})-(\d{1,2})", text)
        if match:
            return date(int(match[1]), int(match[2]), int(match[3])).isoformat()

        match = re.search(r"(\d{1,2})[/.-](\d{1,2})[/.-](\d{4})", text)
        if match:
            first, second, year = int(match[1]), int(match[2]), int(match[3])
            if first > 12:
                return date(year, second, first).isoformat()
            return date(year, first, second).isoformat()

        match = re.search(r"(\d{1,2})\s+([a-z]{3})[a-z]*,?\s+(\d{4})", text)
        if match and match[2] in _MONTHS:
            return date(int(match[3]), _MONTHS[match[2]], int(match[1])).isoformat()

        match = re.search(r"([a-z]{3})[a-z]*\s+(\d{1,2}),?\s+(\d{4})", text)
        if match and match[1] in _MONTHS:
            return date(int(match[3]), _MONTHS[match[1]], int(match[2])).isoformat()

        match = re.search(r"([a-z]{3})[a-z]*\s+(\d{4})", text)
        if match and match[1] in _MONTHS:
            return date(int(match[2]), _MONTHS[match[1]], 1).isoformat()
    except ValueError:
        return None

    return None


def _resolve_country_phrase(phrase: str) -> str | None:
    """Longest leading run of words (up to 3) that names a country."""
    words = phrase.strip().split()
    for size in range(min(3, len(words)), 0, -1):
        candidate = " ".join(words[:size])
        if country_code(candidate):
            return normalize_country(candidate)
    return None


def detect_nationality(text: str) -> str | None:
    low = text.lower()
    for pattern in _NATIONALITY_PATTERNS:
        for match in pattern.finditer(low):
            country = _resolve_country_phrase(match.group(1))
            if country:
                return country
    return None


def detect_residence(text: str) -> str | None:
    match = _RESIDENCE_PATTERN.search(text)
    if not match:
        return None
    phrase = match.group(1)
    return _resolve_country_phrase(phrase) or phrase.strip().title()


def detect_passport_expiry(text: str) -> str | None:
    match = _PASSPORT_EXPIRY.search(text.lower())
    if not match:
        return None
    return normalize_date(match.group(1))


def detect_passport_valid(text: str) -> bool | None:
    low = text.lower()
    if any(phrase in low for phrase in _PASSPORT_INVALID):
        return False
    if any(phrase in low for phrase in _PASSPORT_VALID):
        return True
    return None


def detect_occupation(text: str) -> str | None:
    low = text.lower()
    match = _OCCUPATION_PATTERN.search(low)
    if match:
        occupation = re.split(r"\s+(?:and|at|in|for|with)\s+|[.,;]", match.group(1))[0]
        return occupation.strip() or None
    for occupation in _COMMON_OCCUPATIONS:
        if re.search(rf"\b(?:i am|i'm|im)\s+(?:an?\s+)?{re.escape(occupation)}\b", low):
            return occupation
    return None


def detect_work_status(occupation: str | None) -> str | None:
    if occupation is None:
        return None
    if occupation in ("student", "unemployed", "self-employed"):
        return occupation
    if occupation == "freelancer":
        return "self-employed"
    return "employed"


def detect_finances(text: str) -> str | None:
    low = text.lower()
    for level, pattern in _FINANCE_RULES:
        if pattern.search(low):
            return level
    return None


def detect_education(text: str) -> str | None:
    low = text.lower()
    for label, pattern in _EDUCATION_RULES:
        if pattern.search(low):
            return label
    return None


def detect_work_years(text: str) -> int | None:
    match = _WORK_YEARS.search(text.lower())
    if not match:
        return None
    return int(match.group(1) or match.group(2))


def detect_travel_history(text: str) -> list[TravelEvent]:
    match = _VISITED.search(text.lower())
    if not match:
        return []
    events = []
    for part in re.split(r",|\band\b", match.group(1)):
        country = _resolve_country_phrase(part)
        if country:
            events.append(TravelEvent(country=country))
    return events


def detect_languages(text: str) -> list[str]:
    match = _LANGUAGES.search(text.lower())
    if not match:
        return []
    parts = re.split(r",|\band\b", match.group(1))
    return [p.strip().title() for p in parts if p.strip()][:5]


def detect_goals(text: str) -> list[str]:
    """Visa goals mentioned in the text, in a fixed order."""
    low = text.lower()
    return [goal for goal, pattern in GOAL_KEYWORDS.items() if pattern.search(low)]


def extract_message(text: str) -> ProfileUpdate:
    """Extract every signal from a single message."""
    occupation = detect_occupation(text)
    destination = find_destination(text)
    return ProfileUpdate(
        nationality=detect_nationality(text),
        residence=detect_residence(text),
        education=detect_education(text),
        work_years=detect_work_years(text),
        finances=detect_finances(text),
        passport_expiry=detect_passport_expiry(text),
        passport_valid=detect_passport_valid(text),
        occupation=occupation,
        work_status=detect_work_status(occupation),
        languages=detect_languages(text),
        travel_history=detect_travel_history(text),
        selected_goals=detect_goals(text),
        preferred_destinations=[normalize_country(destination)] if destination else [],
    )


def extract_from_chat(history: Iterable[dict[str, Any]]) -> ProfileUpdate:
    """Combine signals from a whole conversation.

    Messages are scanned oldest first. For scalar fields a later value of
    equal or higher weight replaces an earlier one; user messages weigh
    more than assistant messages, so an assistant echo never overrides
    what the user said. List fields only come from user messages.

    Args:
        history: Messages as ``{"role": ..., "content": ...}`` dicts.
    """
    values: dict[str, Any] = {}
    weights: dict[str, int] = {}
    lists: dict[str, list[Any]] = {name: [] for name in LIST_FIELDS}

    for message in history:
        role = message.get("role")
        if role not in ("user", "assistant"):
            continue
        content = str(message.get("content") or "")
        if not content.strip():
            continue

        weight = USER_WEIGHT if role == "user" else ASSISTANT_WEIGHT
        signals = extract_message(content)

        for name in SCALAR_FIELDS:
            value = getattr(signals, name)
            if value is None:
                continue
            if weight >= weights.get(name, 0):
                values[name] = value
                weights[name] = weight

        if role == "user":
            for name in LIST_FIELDS:
                for item in getattr(signals, name):
                    if item not in lists[name]:
                        lists[name].append(item)

    return ProfileUpdate(**values, **lists)
