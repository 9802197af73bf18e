"""Persisted embedding index with creation-time eviction."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

import numpy as np

from ..storage import JsonDocument
from .records import EmbeddingRecord
from .similarity import cosine_similarity

logger = logging.getLogger(__name__)

DEFAULT_CAP = 500


@dataclass(frozen=True)
class ScoredRecord:
    """A search hit."""

    record: EmbeddingRecord
    score: float


class EmbeddingIndex:
    """Key to (text, vector, tags) store bounded by ``cap``.

    When an upsert pushes the size over the cap, records are ordered by
    ``created_at`` descending and truncated, so the oldest-created records
    are evicted regardless of when they were inserted or read.

    The whole index is one JSON document. A document that cannot be read
    loads as an empty index; a write that fails leaves the previous file
    in place.
    """

    def __init__(self, path: Path | None = None, cap: int = DEFAULT_CAP) -> None:
        if cap < 1:
            raise ValueError("cap must be at least 1")
        self.cap = cap
        self._doc = JsonDocument(path)
        self._records: list[EmbeddingRecord] | None = None

    def _load(self) -> list[EmbeddingRecord]:
        """Records in stored order (newest first). Caller holds the lock."""
        if self._records is not None:
            return self._records

        data = self._doc.read()
        records: list[EmbeddingRecord] = []
        if isinstance(data, dict):
            try:
                records = [EmbeddingRecord.from_dict(item) for item in data.get("items", [])]
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Discarding unreadable embedding index: %s", e)
                records = []
        self._records = records
        return records

    def _save(self) -> None:
        assert self._records is not None
        self._doc.write({"items": [r.to_dict() for r in self._records]})

    def _insert(self, records: list[EmbeddingRecord], record: EmbeddingRecord) -> None:
        if records and records[0].dimension != record.dimension:
            logger.warning(
                "Record %s has dimension %d, index holds %d",
                record.id,
                record.dimension,
                records[0].dimension,
            )
        for i, existing in enumerate(records):
            if existing.id == record.id:
                records[i] = record
                return
        records.append(record)

    def _evict(self, records: list[EmbeddingRecord]) -> list[EmbeddingRecord]:
        ordered = sorted(records, key=lambda r: r.created_at, reverse=True)
        if len(ordered) > self.cap:
            logger.debug("Evicting %d record(s) over cap %d", len(ordered) - self.cap, self.cap)
        return ordered[: self.cap]

    def upsert(self, record: EmbeddingRecord) -> None:
        """Insert or replace a record by id."""
        self.upsert_many([record])

    def upsert_many(self, records: Iterable[EmbeddingRecord]) -> None:
        """Insert or replace several records with a single write."""
        with self._doc.lock:
            current = list(self._load())
            for record in records:
                self._insert(current, record)
            self._records = self._evict(current)
            self._save()

    def get(self, record_id: str) -> EmbeddingRecord | None:
        with self._doc.lock:
            for record in self._load():
                if record.id == record_id:
                    return record
        return None

    def list(self, limit: int | None = None) -> list[EmbeddingRecord]:
        """Records newest-first, optionally limited."""
        with self._doc.lock:
            records = list(self._load())
        if limit is not None:
            return records[: max(limit, 0)]
        return records

    def snapshot(self) -> tuple[EmbeddingRecord, ...]:
        """Immutable view used by search."""
        with self._doc.lock:
            return tuple(self._load())

    def search(
        self,
        query_vector: Sequence[float] | np.ndarray,
        top_k: int = 5,
    ) -> list[ScoredRecord]:
        """Top-k records by cosine similarity.

        Equal scores keep the stored order.
        """
        if top_k <= 0:
            return []
        scored = [
            ScoredRecord(record=record, score=cosine_similarity(query_vector, record.vector))
            for record in self.snapshot()
        ]
        scored.sort(key=lambda hit: hit.score, reverse=True)
        return scored[:top_k]

    def clear(self) -> None:
        """Remove every record."""
        with self._doc.lock:
            self._records = []
            self._save()

    def __len__(self) -> int:
        with self._doc.lock:
            return len(self._load())
