"""Read-only fact catalogue loaded from bundled JSON resources."""

import json
import logging
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Iterator

from .countries import country_code
from .models import FactEntry

logger = logging.getLogger(__name__)

FACTS_RESOURCE = "visa_facts.json"


def load_bundled(name: str) -> Any:
    """Load a JSON resource shipped in ``visabud/facts/data``."""
    resource = resources.files("visabud.facts").joinpath("data", name)
    with resource.open("r", encoding="utf-8") as f:
        return json.load(f)


class FactStore:
    """Immutable catalogue of destination facts, keyed by country code."""

    def __init__(self, entries: list[FactEntry]) -> None:
        self._entries: dict[str, FactEntry] = {}
        for entry in entries:
            if entry.code in self._entries:
                logger.warning("Duplicate fact entry for %s, keeping the first", entry.code)
                continue
            self._entries[entry.code] = entry

    @classmethod
    def from_bundle(cls) -> "FactStore":
        """Load the catalogue bundled with the package."""
        return _bundled_store()

    @classmethod
    def from_file(cls, path: Path) -> "FactStore":
        """Load a catalogue from a JSON file holding an array of entries."""
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_data(json.load(f))

    @classmethod
    def from_data(cls, data: list[dict[str, Any]]) -> "FactStore":
        entries = []
        for item in data:
            try:
                entries.append(FactEntry.from_dict(item))
            except (KeyError, TypeError) as e:
                logger.warning("Skipping invalid fact entry %r: %s", item, e)
        return cls(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[FactEntry]:
        return iter(self._entries.values())

    def get(self, code: str) -> FactEntry | None:
        """Get an entry by country code."""
        return self._entries.get(code.upper())

    def find(self, name_or_code: str | None) -> FactEntry | None:
        """Find an entry by code, name, alias or demonym."""
        code = country_code(name_or_code)
        if code is None:
            return None
        return self._entries.get(code)

    def codes(self) -> list[str]:
        return list(self._entries)


@lru_cache(maxsize=1)
def _bundled_store() -> FactStore:
    return FactStore.from_data(load_bundled(FACTS_RESOURCE))
