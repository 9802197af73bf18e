"""Tests for engine configuration loading."""

import json
from pathlib import Path

import pytest

from visabud.config import DEFAULT_DATA_DIR, EngineConfig, config_from_env, load_config
from visabud.index.store import DEFAULT_CAP
from visabud.llm.client import DEFAULT_MODEL


class TestEngineConfig:
    """Tests for EngineConfig dataclass."""

    def test_default_values(self) -> None:
        """Should have sensible defaults."""
        config = EngineConfig()

        assert config.data_dir == DEFAULT_DATA_DIR
        assert config.log_dir == DEFAULT_DATA_DIR / "logs"
        assert config.embedding_cap == DEFAULT_CAP
        assert config.facts_top_k == 4
        assert config.generic_top_k == 6
        assert config.model == DEFAULT_MODEL
        assert config.persist_roadmaps is True

    def test_paths_under_data_dir(self, tmp_path: Path) -> None:
        config = EngineConfig(data_dir=tmp_path)

        assert config.profile_path == tmp_path / "profile.json"
        assert config.chats_dir == tmp_path / "chats"
        assert config.index_path == tmp_path / "embeddings.json"
        assert config.roadmaps_path == tmp_path / "roadmaps.json"
        assert config.exports_dir == tmp_path / "exports"
        assert config.log_dir == tmp_path / "logs"

    def test_invalid_cap(self) -> None:
        """Should reject embedding_cap < 1."""
        with pytest.raises(ValueError, match="must be at least 1"):
            EngineConfig(embedding_cap=0)

    def test_invalid_top_k(self) -> None:
        with pytest.raises(ValueError, match="must be at least 1"):
            EngineConfig(generic_top_k=0)


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file(self, tmp_path: Path) -> None:
        """Should return defaults when the file does not exist."""
        assert load_config(tmp_path / "config.json") == EngineConfig()

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Should return defaults for invalid JSON."""
        path = tmp_path / "config.json"
        path.write_text("{ not json")
        assert load_config(path) == EngineConfig()

    def test_engine_section(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {
                    "engine": {
                        "data_dir": str(tmp_path / "data"),
                        "embedding_cap": 50,
                        "generic_top_k": 3,
                        "model": "llama-3.1-8b-instant",
                        "persist_roadmaps": False,
                    }
                }
            )
        )

        config = load_config(path)

        assert config.data_dir == tmp_path / "data"
        assert config.log_dir == tmp_path / "data" / "logs"
        assert config.embedding_cap == 50
        assert config.generic_top_k == 3
        assert config.facts_top_k == 4
        assert config.model == "llama-3.1-8b-instant"
        assert config.persist_roadmaps is False

    def test_invalid_values_ignored(self, tmp_path: Path) -> None:
        """Should fall back to defaults for values of the wrong type."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"engine": {"embedding_cap": -1, "facts_top_k": "8", "persist_roadmaps": "no"}}))

        config = load_config(path)

        assert config.embedding_cap == DEFAULT_CAP
        assert config.facts_top_k == 4
        assert config.persist_roadmaps is True

    def test_non_dict_engine_section(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"engine": ["data_dir"]}))
        assert load_config(path) == EngineConfig()


class TestConfigFromEnv:
    """Tests for environment overrides."""

    def test_data_dir_moves_default_log_dir(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("VISABUD_DATA_DIR", str(tmp_path))
        monkeypatch.delenv("GROQ_MODEL", raising=False)
        monkeypatch.delenv("VISABUD_EMBEDDING_MODEL", raising=False)

        config = config_from_env(EngineConfig())

        assert config.data_dir == tmp_path
        assert config.log_dir == tmp_path / "logs"

    def test_explicit_log_dir_kept(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("VISABUD_DATA_DIR", str(tmp_path / "data"))
        config = config_from_env(EngineConfig(log_dir=tmp_path / "elsewhere"))
        assert config.log_dir == tmp_path / "elsewhere"

    def test_models(self, monkeypatch) -> None:
        monkeypatch.delenv("VISABUD_DATA_DIR", raising=False)
        monkeypatch.setenv("GROQ_MODEL", "mixtral-8x7b-32768")
        monkeypatch.setenv("VISABUD_EMBEDDING_MODEL", "paraphrase-MiniLM-L3-v2")

        config = config_from_env(EngineConfig())

        assert config.model == "mixtral-8x7b-32768"
        assert config.embedding_model == "paraphrase-MiniLM-L3-v2"

    def test_no_overrides_returns_same_config(self, monkeypatch) -> None:
        for name in ("VISABUD_DATA_DIR", "GROQ_MODEL", "VISABUD_EMBEDDING_MODEL"):
            monkeypatch.delenv(name, raising=False)
        config = EngineConfig()
        assert config_from_env(config) is config
