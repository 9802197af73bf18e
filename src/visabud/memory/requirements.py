"""Required-field rules per "needed for" context and the missing-info prompt."""

import calendar
from dataclasses import dataclass
from datetime import date
from typing import Callable

from .models import UserProfile

GOAL_LABEL = "visa goal (study, work, immigration, tourist)"
PASSPORT_LABEL = "passport validity"


@dataclass(frozen=True)
class NeedHints:
    """Turn context that can satisfy a requirement outside the profile."""

    destination: str | None = None
    goal: str | None = None


@dataclass(frozen=True)
class Requirement:
    label: str
    satisfied: Callable[[UserProfile, NeedHints], bool]


def _has_destination(profile: UserProfile, hints: NeedHints) -> bool:
    return bool(hints.destination)


def _has_goal(profile: UserProfile, hints: NeedHints) -> bool:
    return bool(hints.goal or profile.selected_goals)


def _has_nationality(profile: UserProfile, hints: NeedHints) -> bool:
    return bool(profile.nationality)


def _has_background(profile: UserProfile, hints: NeedHints) -> bool:
    return bool(profile.education) or profile.work_years is not None


def _has_passport(profile: UserProfile, hints: NeedHints) -> bool:
    return bool(profile.passport_expiry) or profile.passport_valid is True


def _has_occupation(profile: UserProfile, hints: NeedHints) -> bool:
    return bool(profile.occupation or profile.work_status)


def _has_finances(profile: UserProfile, hints: NeedHints) -> bool:
    return bool(profile.finances)


DESTINATION = Requirement("destination country", _has_destination)
GOAL = Requirement(GOAL_LABEL, _has_goal)
VISA_TYPE = Requirement("visa type (study, work, immigration, tourist)", _has_goal)
PURPOSE = Requirement("purpose of travel", _has_goal)
NATIONALITY = Requirement("nationality", _has_nationality)
BACKGROUND = Requirement("education or work years", _has_background)
PASSPORT = Requirement(PASSPORT_LABEL, _has_passport)
OCCUPATION = Requirement("occupation", _has_occupation)
FINANCES = Requirement("financial capacity", _has_finances)

# Context name -> (prompt opener, rules). None is the untargeted pass.
RULES: dict[str | None, tuple[str, tuple[Requirement, ...]]] = {
    None: ("To personalize my advice", (NATIONALITY, PASSPORT, OCCUPATION, FINANCES, PURPOSE)),
    "roadmap": ("To generate a useful roadmap", (DESTINATION, GOAL, NATIONALITY, BACKGROUND)),
    "checklist": ("To prepare your checklist", (DESTINATION, VISA_TYPE, NATIONALITY)),
    "cost estimate": ("To estimate your costs", (DESTINATION, VISA_TYPE)),
    "eligibility check": ("To check your eligibility", (DESTINATION, VISA_TYPE, NATIONALITY, PASSPORT)),
    "comparison": ("To compare visa options", ()),
    "visa type suggestion": ("To suggest the right visa type", (DESTINATION, PURPOSE)),
    "embassy locator": ("To find the nearest embassy", (DESTINATION,)),
    "visa facts": ("To look up visa facts", (DESTINATION,)),
    "general": ("To help with your question", ()),
}


def human_join(items: list[str]) -> str:
    """'a', 'a and b', 'a, b and c'."""
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    return ", ".join(items[:-1]) + " and " + items[-1]


def missing_fields(
    context: str | None,
    profile: UserProfile,
    hints: NeedHints | None = None,
) -> list[str]:
    """Labels of the requirements the profile and hints do not satisfy."""
    hints = hints or NeedHints()
    _, rules = RULES.get(context, RULES["general"])
    return [rule.label for rule in rules if not rule.satisfied(profile, hints)]


def opener_for(context: str | None, destination: str | None = None) -> str:
    opener, _ = RULES.get(context, RULES["general"])
    if destination and context is not None and context not in ("roadmap", "comparison"):
        return f"{opener} for {destination}"
    return opener


def build_prompt(
    context: str | None,
    missing: list[str],
    destination: str | None = None,
) -> str | None:
    """One question covering every missing field, or None if nothing is missing."""
    if not missing:
        return None
    opener = opener_for(context, destination)
    if missing == [PASSPORT_LABEL] and destination:
        return f"{opener}, do you currently have a valid passport?"
    return f"{opener}, could you share your {human_join(missing)}?"


def add_months(day: date, months: int) -> date:
    """Calendar month arithmetic; the day is clamped to the target month's length."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def passport_is_valid(expiry: str | None, today: date, months: int = 6) -> bool:
    """True when ``expiry`` (ISO date) is at least ``months`` calendar months away.

    The boundary is inclusive; a missing or unparseable expiry is invalid.
    """
    if not expiry:
        return False
    try:
        expiry_date = date.fromisoformat(expiry.strip())
    except ValueError:
        return False
    return expiry_date >= add_months(today, months)
