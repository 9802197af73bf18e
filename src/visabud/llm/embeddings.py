"""Embedding function interface and the sentence-transformers adapter."""

import logging
from typing import Any, Protocol, Sequence, runtime_checkable

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_EMBEDDING_MODEL = "all-MiniLM-L6-v2"


@runtime_checkable
class Embedder(Protocol):
    """Blocking text embedding function."""

    def embed(self, text: str) -> Sequence[float]:
        """Return a fixed-length vector for the text."""
        ...


class SentenceTransformerEmbedder:
    """Embedder backed by a local sentence-transformers model.

    The model is loaded on first use, which may download it. Callers that
    want to show a "downloading" state can call ``load()`` up front.

    Example:
        embedder = SentenceTransformerEmbedder("all-MiniLM-L6-v2")
        vector = embedder.embed("Student visa for Canada")
    """

    def __init__(
        self,
        model_name: str = DEFAULT_EMBEDDING_MODEL,
        device: str | None = None,
    ) -> None:
        self.model_name = model_name
        self.device = device
        self._model: Any = None

    @property
    def loaded(self) -> bool:
        return self._model is not None

    def load(self) -> None:
        """Load the model if it is not loaded yet."""
        if self._model is not None:
            return
        from sentence_transformers import SentenceTransformer

        logger.info("Loading embedding model %s", self.model_name)
        self._model = SentenceTransformer(self.model_name, device=self.device)

    def embed(self, text: str) -> np.ndarray:
        self.load()
        vector = self._model.encode([text], normalize_embeddings=True)[0]
        return np.asarray(vector, dtype=np.float32)
