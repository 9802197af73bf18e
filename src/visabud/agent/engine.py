"""Engine context: every store and collaborator one orchestrator works with."""

import logging
from dataclasses import dataclass, field

from ..collaborators import Collaborators, LocalFileExporter
from ..config import EngineConfig
from ..facts import FactStore
from ..index import EmbeddingIndex, Retriever
from ..intent import IntentRouter
from ..llm.client import CompletionClient
from ..llm.embeddings import Embedder
from ..logging import JSONLLogger
from ..memory import ProfileMemory
from ..session import ChatStore
from ..storage import ArtifactStore
from ..tools.registry import ToolRegistry, build_default_registry

logger = logging.getLogger(__name__)


@dataclass
class EngineContext:
    """Explicit bundle of stores, passed to the orchestrator at construction.

    Use :meth:`create` for a disk-backed engine under ``config.data_dir`` and
    :meth:`in_memory` for an isolated engine that never touches the disk.
    """

    facts: FactStore
    index: EmbeddingIndex
    retriever: Retriever
    profiles: ProfileMemory
    chats: ChatStore
    artifacts: ArtifactStore
    registry: ToolRegistry
    config: EngineConfig
    router: IntentRouter = field(default_factory=IntentRouter)
    embedder: Embedder | None = None
    llm: CompletionClient | None = None
    collaborators: Collaborators = field(default_factory=Collaborators)
    events: JSONLLogger | None = None

    @classmethod
    def create(
        cls,
        config: EngineConfig | None = None,
        embedder: Embedder | None = None,
        llm: CompletionClient | None = None,
        collaborators: Collaborators | None = None,
        events: JSONLLogger | None = None,
        facts: FactStore | None = None,
    ) -> "EngineContext":
        """Disk-backed engine rooted at ``config.data_dir``."""
        config = config or EngineConfig()
        collaborators = collaborators or Collaborators()
        if collaborators.exporter is None:
            collaborators.exporter = LocalFileExporter(config.exports_dir)
        return cls._build(
            config=config,
            facts=facts or FactStore.from_bundle(),
            index=EmbeddingIndex(config.index_path, cap=config.embedding_cap),
            profiles=ProfileMemory(config.profile_path),
            chats=ChatStore(config.chats_dir),
            artifacts=ArtifactStore(config.roadmaps_path),
            embedder=embedder,
            llm=llm,
            collaborators=collaborators,
            events=events,
        )

    @classmethod
    def in_memory(
        cls,
        embedder: Embedder | None = None,
        llm: CompletionClient | None = None,
        collaborators: Collaborators | None = None,
        facts: FactStore | None = None,
        config: EngineConfig | None = None,
    ) -> "EngineContext":
        """Engine whose stores live only in memory."""
        config = config or EngineConfig()
        return cls._build(
            config=config,
            facts=facts or FactStore.from_bundle(),
            index=EmbeddingIndex(None, cap=config.embedding_cap),
            profiles=ProfileMemory(None),
            chats=ChatStore(None),
            artifacts=ArtifactStore(None),
            embedder=embedder,
            llm=llm,
            collaborators=collaborators or Collaborators(),
            events=None,
        )

    @classmethod
    def _build(
        cls,
        *,
        config: EngineConfig,
        facts: FactStore,
        index: EmbeddingIndex,
        profiles: ProfileMemory,
        chats: ChatStore,
        artifacts: ArtifactStore,
        embedder: Embedder | None,
        llm: CompletionClient | None,
        collaborators: Collaborators,
        events: JSONLLogger | None,
    ) -> "EngineContext":
        retriever = Retriever(index, facts, embedder)
        registry = build_default_registry(
            facts,
            retriever=retriever,
            llm=llm,
            artifacts=artifacts if config.persist_roadmaps else None,
            collaborators=collaborators,
            facts_top_k=config.facts_top_k,
        )
        return cls(
            facts=facts,
            index=index,
            retriever=retriever,
            profiles=profiles,
            chats=chats,
            artifacts=artifacts,
            registry=registry,
            config=config,
            embedder=embedder,
            llm=llm,
            collaborators=collaborators,
            events=events,
        )

    def prepare(self) -> int:
        """Index the fact catalogue if the index is empty."""
        return self.retriever.ensure_persisted()
