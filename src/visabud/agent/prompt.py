"""Canned replies and the grounded prompt for generic questions."""

import re
from typing import Sequence

from ..index.retriever import RetrievedFact

GREETING = (
    "Hi! I'm VisaBud. I can help with visa options, requirements, costs, and embassies. "
    "What would you like to do today?"
)

DISCLAIMER = (
    "\n\nNote: I use local facts and your on-device profile. "
    "Policies change, so always verify on official sites."
)

FALLBACK_NO_DATA = (
    "I couldn't retrieve enough information to answer that. "
    "Try naming a destination country, or ask for a roadmap, checklist or cost estimate."
)

_GREETING = re.compile(r"^(?:hi|hello|hey|good (?:morning|afternoon|evening))[!.]?$")

SYSTEM_PROMPT_BASE = """You are VisaBud, an offline visa and immigration assistant.

Answer using only the facts below and the user's profile. If the facts do not
cover the question, say so and point to the official site. Keep answers short
and practical. Do not invent fees, dates or requirements.

{profile_block}

<facts>
{facts}
</facts>"""


def is_greeting(text: str) -> bool:
    """Exact-match greeting, ignoring case, surrounding space and a final ! or ."""
    return _GREETING.match(text.strip().lower()) is not None


def build_system_preamble(profile_block: str, facts: Sequence[RetrievedFact]) -> str:
    """Build the grounded system prompt for a generic question.

    Args:
        profile_block: Profile formatted for prompts.
        facts: Retrieved facts, best first.

    Returns:
        Complete system prompt string.
    """
    lines = "\n".join(f"- {fact.text} (source: {fact.site})" for fact in facts)
    return SYSTEM_PROMPT_BASE.format(profile_block=profile_block, facts=lines or "- (none)")


def heuristic_summary(facts: Sequence[RetrievedFact]) -> str:
    """Bullet list of retrieved facts, used when no model answer is available."""
    bullets = "\n".join(f"- [{fact.country}] {fact.statement}" for fact in facts)
    return f"Here are verified points relevant to your question:\n{bullets}"
