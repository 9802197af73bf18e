"""Engine configuration loader.

Loads engine settings from ~/.visabud/config.json, then overlays
environment variables (VISABUD_DATA_DIR, GROQ_MODEL,
VISABUD_EMBEDDING_MODEL).
"""

import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from .index.store import DEFAULT_CAP
from .llm.client import DEFAULT_MODEL
from .llm.embeddings import DEFAULT_EMBEDDING_MODEL

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path.home() / ".visabud"
DEFAULT_CONFIG_PATH = DEFAULT_DATA_DIR / "config.json"


@dataclass
class EngineConfig:
    """Configuration for the assistant engine.

    Attributes:
        data_dir: Root of the persisted stores (profile, chats, index, artifacts).
        embedding_cap: Maximum records kept in the embedding index.
        facts_top_k: Facts retrieved per tool call.
        generic_top_k: Facts retrieved for a generic question.
        model: Groq chat model name.
        embedding_model: sentence-transformers model name.
        persist_roadmaps: Save generated roadmaps, checklists and document
            reviews to the artifact store.
        log_dir: Directory for JSONL event logs (data_dir/logs if None).
    """

    data_dir: Path | None = None
    embedding_cap: int = DEFAULT_CAP
    facts_top_k: int = 4
    generic_top_k: int = 6
    model: str = DEFAULT_MODEL
    embedding_model: str = DEFAULT_EMBEDDING_MODEL
    persist_roadmaps: bool = True
    log_dir: Path | None = None

    def __post_init__(self) -> None:
        """Validate config and set defaults."""
        if self.data_dir is None:
            self.data_dir = DEFAULT_DATA_DIR
        self.data_dir = Path(self.data_dir).expanduser()

        if self.log_dir is None:
            self.log_dir = self.data_dir / "logs"
        self.log_dir = Path(self.log_dir).expanduser()

        if self.embedding_cap < 1:
            raise ValueError("embedding_cap must be at least 1")
        if self.facts_top_k < 1 or self.generic_top_k < 1:
            raise ValueError("top_k values must be at least 1")

    @property
    def profile_path(self) -> Path:
        return self.data_dir / "profile.json"

    @property
    def chats_dir(self) -> Path:
        return self.data_dir / "chats"

    @property
    def index_path(self) -> Path:
        return self.data_dir / "embeddings.json"

    @property
    def roadmaps_path(self) -> Path:
        return self.data_dir / "roadmaps.json"

    @property
    def exports_dir(self) -> Path:
        return self.data_dir / "exports"


def load_config(config_path: Path | None = None) -> EngineConfig:
    """Load EngineConfig from a JSON file.

    The config file should have this structure:
    ```json
    {
      "engine": {
        "data_dir": "~/.visabud",
        "embedding_cap": 500,
        "facts_top_k": 4,
        "generic_top_k": 6,
        "model": "llama-3.1-70b-versatile",
        "embedding_model": "all-MiniLM-L6-v2",
        "persist_roadmaps": true
      }
    }
    ```

    Args:
        config_path: Path to config file. Uses DEFAULT_CONFIG_PATH if None.

    Returns:
        EngineConfig instance with loaded values.
    """
    path = config_path or DEFAULT_CONFIG_PATH

    if not path.exists():
        logger.debug("No config file at %s, using defaults", path)
        return EngineConfig()

    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.warning("Invalid JSON in %s: %s. Using defaults.", path, e)
        return EngineConfig()
    except OSError as e:
        logger.warning("Cannot read %s: %s. Using defaults.", path, e)
        return EngineConfig()

    return _parse_config(data)


def _positive_int(value: Any, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return default
    return value


def _parse_config(data: dict[str, Any]) -> EngineConfig:
    """Parse config dictionary into EngineConfig, ignoring invalid values."""
    engine = data.get("engine", {}) if isinstance(data, dict) else {}
    if not isinstance(engine, dict):
        engine = {}

    defaults = EngineConfig()
    data_dir = engine.get("data_dir")
    log_dir = engine.get("log_dir")
    model = engine.get("model")
    embedding_model = engine.get("embedding_model")
    persist = engine.get("persist_roadmaps", True)

    return EngineConfig(
        data_dir=Path(data_dir) if isinstance(data_dir, str) and data_dir else None,
        embedding_cap=_positive_int(engine.get("embedding_cap"), defaults.embedding_cap),
        facts_top_k=_positive_int(engine.get("facts_top_k"), defaults.facts_top_k),
        generic_top_k=_positive_int(engine.get("generic_top_k"), defaults.generic_top_k),
        model=model if isinstance(model, str) and model else defaults.model,
        embedding_model=(
            embedding_model if isinstance(embedding_model, str) and embedding_model else defaults.embedding_model
        ),
        persist_roadmaps=persist if isinstance(persist, bool) else True,
        log_dir=Path(log_dir) if isinstance(log_dir, str) and log_dir else None,
    )


def config_from_env(config: EngineConfig | None = None) -> EngineConfig:
    """Overlay environment variables on ``config`` (or the file config)."""
    config = config or load_config()
    changes: dict[str, Any] = {}
    data_dir = os.environ.get("VISABUD_DATA_DIR")
    if data_dir:
        changes["data_dir"] = Path(data_dir)
        # log_dir follows data_dir unless it was set explicitly
        if config.log_dir == config.data_dir / "logs":
            changes["log_dir"] = None
    model = os.environ.get("GROQ_MODEL")
    if model:
        changes["model"] = model
    embedding_model = os.environ.get("VISABUD_EMBEDDING_MODEL")
    if embedding_model:
        changes["embedding_model"] = embedding_model
    return replace(config, **changes) if changes else config
