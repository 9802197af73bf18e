"""Model collaborators: completion and embedding functions."""

from .client import DEFAULT_MODEL, CompletionClient, GroqLLMClient
from .embeddings import DEFAULT_EMBEDDING_MODEL, Embedder, SentenceTransformerEmbedder

__all__ = [
    "DEFAULT_EMBEDDING_MODEL",
    "DEFAULT_MODEL",
    "CompletionClient",
    "Embedder",
    "GroqLLMClient",
    "SentenceTransformerEmbedder",
]
