"""Shared fixtures: a deterministic embedder and small fact catalogues."""

from typing import Any

import numpy as np
import pytest

from visabud.facts import FactStore
from visabud.memory import UserProfile
from visabud.tools import ToolRequest, TurnContext

VOCABULARY = (
    "student",
    "study",
    "work",
    "visitor",
    "tourist",
    "fee",
    "passport",
    "canada",
    "united kingdom",
    "germany",
    "schengen",
    "biometric",
)


class KeywordEmbedder:
    """Counts vocabulary words; texts with no known word embed to zeros."""

    def __init__(self, vocabulary: tuple[str, ...] = VOCABULARY) -> None:
        self.vocabulary = vocabulary
        self.calls: list[str] = []

    def embed(self, text: str) -> np.ndarray:
        self.calls.append(text)
        low = text.lower()
        return np.array([low.count(word) for word in self.vocabulary], dtype=np.float32)


class FailingEmbedder:
    def embed(self, text: str) -> np.ndarray:
        raise RuntimeError("model not loaded")


SMALL_CATALOGUE: list[dict[str, Any]] = [
    {
        "code": "CA",
        "country": "Canada",
        "official_site": "https://www.canada.ca/en/immigration-refugees-citizenship.html",
        "facts": [
            "A study permit is required for most programs longer than six months.",
            "Most visitors must give biometrics with their application.",
        ],
        "visa_types": ["Visitor visa", "Study permit"],
        "processing_time": "Study permits often take 1 to 3 months.",
        "fees": "Visitor visa costs CAD 100.",
    },
    {
        "code": "UK",
        "country": "United Kingdom",
        "official_site": "https://www.gov.uk/browse/visas-immigration",
        "facts": [
            "A Student visa needs a confirmation of acceptance for studies.",
            "A Skilled Worker visa needs a job offer from a licensed sponsor.",
        ],
        "visa_types": ["Standard Visitor", "Student", "Skilled Worker"],
        "processing_time": "Decisions usually take about 3 weeks.",
    },
]


@pytest.fixture
def embedder() -> KeywordEmbedder:
    return KeywordEmbedder()


@pytest.fixture
def small_facts() -> FactStore:
    return FactStore.from_data(SMALL_CATALOGUE)


def make_request(
    profile: UserProfile | None = None,
    passport_valid: bool | None = None,
    text: str = "",
    **context: Any,
) -> ToolRequest:
    """ToolRequest with a hand-built turn context."""
    return ToolRequest(
        profile=profile or UserProfile(),
        context=TurnContext(text=text, **context),
        passport_valid=passport_valid,
    )
