"""Embedding records and their on-disk encoding."""

import base64
import time
from dataclasses import dataclass, field
from typing import Any, Sequence

import numpy as np

# Fixed-width little-endian float32.
VECTOR_DTYPE = np.dtype("<f4")


def encode_vector(vector: Sequence[float] | np.ndarray) -> str:
    """Pack a vector as base64 of little-endian float32 bytes."""
    array = np.asarray(vector, dtype=VECTOR_DTYPE)
    return base64.b64encode(array.tobytes()).decode("ascii")


def decode_vector(payload: str) -> np.ndarray:
    """Inverse of encode_vector."""
    raw = base64.b64decode(payload.encode("ascii"), validate=True)
    if len(raw) % VECTOR_DTYPE.itemsize:
        raise ValueError(f"Vector payload has {len(raw)} bytes, not a multiple of 4")
    return np.frombuffer(raw, dtype=VECTOR_DTYPE).astype(np.float32)


@dataclass
class EmbeddingRecord:
    """A text, its embedding and opaque tags."""

    id: str
    source_text: str
    vector: np.ndarray
    tags: dict[str, Any] = field(default_factory=dict)
    created_at: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        self.vector = np.asarray(self.vector, dtype=np.float32).reshape(-1)

    @property
    def dimension(self) -> int:
        return int(self.vector.shape[0])

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "source_text": self.source_text,
            "vector": encode_vector(self.vector),
            "tags": self.tags,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EmbeddingRecord":
        """Create from dictionary."""
        return cls(
            id=str(data["id"]),
            source_text=str(data.get("source_text", "")),
            vector=decode_vector(data["vector"]),
            tags=dict(data.get("tags") or {}),
            created_at=float(data.get("created_at", 0.0)),
        )
