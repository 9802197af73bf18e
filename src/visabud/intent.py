"""Intents and the keyword router that picks one."""

from enum import Enum


class Intent(Enum):
    """What the user is asking for."""

    CHECKLIST = "checklist"
    ROADMAP = "roadmap"
    COST = "cost"
    EMBASSY = "embassy"
    COMPARE = "compare"
    VISA_TYPE = "visa_type"
    ELIGIBILITY = "eligibility"
    FACTS = "facts"
    GENERIC = "generic"


# Ordered: the first rule with a keyword in the message wins.
RULES: tuple[tuple[Intent, tuple[str, ...]], ...] = (
    (Intent.CHECKLIST, ("checklist", "list documents", "what do i need", "requirements")),
    (Intent.ROADMAP, ("roadmap", "path", "how can i get", "options", "plan")),
    (Intent.COST, ("cost", "fee", "fees", "estimate", "how much")),
    (Intent.EMBASSY, ("embassy", "consulate", "where can i apply", "nearest", "closest")),
    (Intent.VISA_TYPE, ("which visa", "what visa", "visa type", "category", "conference")),
    (Intent.COMPARE, ("compare", "easier", "vs ", "versus", "schengen")),
    (
        Intent.ELIGIBILITY,
        ("eligible", "eligibility", "qualify", "qualified", "meet requirements", "am i eligible", "do i qualify"),
    ),
    (Intent.FACTS, ("visa requirement", "need a visa", "do i need a visa", "visa-free", "requirements for")),
)

# Requirement context used when gating each intent.
NEEDED_FOR: dict[Intent, str] = {
    Intent.CHECKLIST: "checklist",
    Intent.ROADMAP: "roadmap",
    Intent.COST: "cost estimate",
    Intent.EMBASSY: "embassy locator",
    Intent.COMPARE: "comparison",
    Intent.VISA_TYPE: "visa type suggestion",
    Intent.ELIGIBILITY: "eligibility check",
    Intent.FACTS: "visa facts",
    Intent.GENERIC: "general",
}


class IntentRouter:
    """Ordered keyword rules over the lower-cased message."""

    def __init__(self, rules: tuple[tuple[Intent, tuple[str, ...]], ...] = RULES) -> None:
        self.rules = rules

    def classify(self, text: str) -> Intent:
        low = text.lower()
        for intent, keywords in self.rules:
            if any(keyword in low for keyword in keywords):
                return intent
        return Intent.GENERIC

    def matches(self, text: str) -> list[Intent]:
        """Every intent whose rule matches, in priority order."""
        low = text.lower()
        return [intent for intent, keywords in self.rules if any(k in low for k in keywords)]


_default_router = IntentRouter()


def classify(text: str) -> Intent:
    """Classify with the default rule table."""
    return _default_router.classify(text)
