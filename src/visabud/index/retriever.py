"""Fact retrieval on top of the embedding index."""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Sequence

import numpy as np

from ..facts import FactStore
from ..llm.embeddings import Embedder
from .records import EmbeddingRecord
from .store import EmbeddingIndex, ScoredRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetrievedFact:
    """A fact statement returned by retrieval, rebuilt from record tags."""

    statement: str
    code: str
    country: str
    site: str
    score: float
    tags: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def text(self) -> str:
        return f"{self.country}: {self.statement}"

    @classmethod
    def from_hit(cls, hit: ScoredRecord) -> "RetrievedFact":
        tags = hit.record.tags
        return cls(
            statement=str(tags.get("fact", hit.record.source_text)),
            code=str(tags.get("code", "")),
            country=str(tags.get("country", "")),
            site=str(tags.get("site", "")),
            score=hit.score,
            tags=tags,
        )


def fact_record_id(code: str, counter: int) -> str:
    return f"visa_fact_{code.lower()}_{counter}"


class Retriever:
    """Ranked, site-deduplicated fact lookup.

    Queries can be raw text (embedded with the configured embedder) or a
    precomputed vector. Embedder failures are reported as an empty result.
    """

    def __init__(
        self,
        index: EmbeddingIndex,
        facts: FactStore,
        embedder: Embedder | None = None,
    ) -> None:
        self.index = index
        self.facts = facts
        self.embedder = embedder

    def ensure_persisted(self, embedder: Embedder | None = None) -> int:
        """Embed the whole catalogue into an empty index.

        Does nothing when the index already holds a record. Every statement
        is embedded before anything is written, so an embedder failure
        leaves the index empty.

        Returns:
            Number of records written.
        """
        embedder = embedder or self.embedder
        if embedder is None:
            logger.debug("No embedder configured, skipping fact indexing")
            return 0

        if self.index.list(limit=1):
            return 0

        created_at = time.time()
        records: list[EmbeddingRecord] = []
        try:
            for entry in self.facts:
                for counter, statement in enumerate(entry.statements):
                    text = f"{entry.country}: {statement}"
                    tags = entry.structured_tags()
                    tags["fact"] = statement
                    records.append(
                        EmbeddingRecord(
                            id=fact_record_id(entry.code, counter),
                            source_text=text,
                            vector=np.asarray(embedder.embed(text), dtype=np.float32),
                            tags=tags,
                            created_at=created_at,
                        )
                    )
        except Exception as e:
            logger.warning("Embedding facts failed, index left empty: %s", e)
            return 0

        if len(records) > self.index.cap:
            logger.warning(
                "Fact catalogue has %d statements but the index cap is %d",
                len(records),
                self.index.cap,
            )
        self.index.upsert_many(records)
        logger.info("Indexed %d fact statement(s)", len(records))
        return len(records)

    def retrieve(
        self,
        query: str,
        top_k: int = 4,
        country: str | None = None,
    ) -> list[RetrievedFact]:
        """Retrieve facts for a free-text query."""
        if self.embedder is None or not query.strip():
            return []
        try:
            vector = self.embedder.embed(query)
        except Exception as e:
            logger.warning("Query embedding failed: %s", e)
            return []
        return self.retrieve_by_vector(vector, top_k=top_k, country=country)

    def retrieve_by_vector(
        self,
        vector: Sequence[float] | np.ndarray,
        top_k: int = 4,
        country: str | None = None,
    ) -> list[RetrievedFact]:
        """Retrieve facts for a precomputed query vector."""
        if top_k <= 0:
            return []

        hits = self.index.search(vector, top_k=len(self.index))
        if country:
            code = country.upper()
            scoped = [hit for hit in hits if hit.record.tags.get("code") == code]
            if scoped:
                hits = scoped

        results: list[RetrievedFact] = []
        seen_sites: set[str] = set()
        for hit in hits:
            fact = RetrievedFact.from_hit(hit)
            key = fact.site or hit.record.id
            if key in seen_sites:
                continue
            seen_sites.add(key)
            results.append(fact)
            if len(results) >= top_k:
                break
        return results


def citations(facts: Sequence[RetrievedFact]) -> list[str]:
    """Distinct source sites in ranking order."""
    sites: list[str] = []
    for fact in facts:
        if fact.site and fact.site not in sites:
            sites.append(fact.site)
    return sites


def build_sources_block(facts: Sequence[RetrievedFact]) -> str:
    """Render a "Sources" section, one line per distinct site."""
    lines = [f"- {fact.country}: {fact.site}" for fact in facts if fact.site]
    unique = list(dict.fromkeys(lines))
    if not unique:
        return ""
    return "Sources:\n" + "\n".join(unique)
