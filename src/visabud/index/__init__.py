"""Embedding index and fact retrieval."""

from .records import EmbeddingRecord, decode_vector, encode_vector
from .retriever import RetrievedFact, Retriever, build_sources_block, citations
from .similarity import cosine_similarity
from .store import DEFAULT_CAP, EmbeddingIndex, ScoredRecord

__all__ = [
    "DEFAULT_CAP",
    "EmbeddingIndex",
    "EmbeddingRecord",
    "RetrievedFact",
    "Retriever",
    "ScoredRecord",
    "build_sources_block",
    "citations",
    "cosine_similarity",
    "decode_vector",
    "encode_vector",
]
