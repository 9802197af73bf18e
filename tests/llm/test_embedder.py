"""Tests for the sentence-transformers embedder adapter."""

import sys
from types import SimpleNamespace
from unittest.mock import MagicMock

import numpy as np
import pytest

from visabud.llm import Embedder, SentenceTransformerEmbedder


@pytest.fixture
def fake_model(monkeypatch) -> MagicMock:
    """Installs a fake sentence_transformers module for the test."""
    model = MagicMock()
    model.encode.return_value = np.array([[0.6, 0.8]], dtype=np.float64)
    factory = MagicMock(return_value=model)
    monkeypatch.setitem(sys.modules, "sentence_transformers", SimpleNamespace(SentenceTransformer=factory))
    model.factory = factory
    return model


class TestSentenceTransformerEmbedder:
    def test_lazy(self) -> None:
        embedder = SentenceTransformerEmbedder()
        assert not embedder.loaded
        assert embedder.model_name == "all-MiniLM-L6-v2"
        assert isinstance(embedder, Embedder)

    def test_embed_loads_once(self, fake_model: MagicMock) -> None:
        embedder = SentenceTransformerEmbedder("paraphrase-MiniLM-L3-v2", device="cpu")

        first = embedder.embed("Student visa for Canada")
        embedder.embed("Work visa for Germany")

        assert embedder.loaded
        assert first.dtype == np.float32
        assert first.tolist() == pytest.approx([0.6, 0.8])
        fake_model.factory.assert_called_once_with("paraphrase-MiniLM-L3-v2", device="cpu")
        fake_model.encode.assert_called_with(["Work visa for Germany"], normalize_embeddings=True)

    def test_load_up_front(self, fake_model: MagicMock) -> None:
        embedder = SentenceTransformerEmbedder()
        embedder.load()
        embedder.load()
        assert embedder.loaded
        assert fake_model.factory.call_count == 1
