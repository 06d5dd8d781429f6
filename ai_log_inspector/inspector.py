"""Wire providers, store, indexer and tools together from settings."""

from __future__ import annotations

from typing import Optional

from .analysis.request_context import RequestContextTool
from .analysis.search import LogSearchTool
from .config import InspectorSettings
from .indexer import LogIndexer
from .providers.base import EmbeddingBackend, GenerationBackend
from .retriever import LogRetriever
from .storage.vector_store import InMemoryVectorStore, PersistentVectorStore, VectorStore
from .vectorizer import Vectorizer


def create_store(settings: InspectorSettings) -> VectorStore:
    if settings.store_dir is None:
        return InMemoryVectorStore()
    return PersistentVectorStore(settings.store_dir)


class LogInspector:
    """Shared dependencies for one embedding provider and one store."""

    def __init__(
        self,
        embedder: EmbeddingBackend,
        *,
        generator: Optional[GenerationBackend] = None,
        store: Optional[VectorStore] = None,
        settings: Optional[InspectorSettings] = None,
    ) -> None:
        self.settings = settings or InspectorSettings()
        self.store = store if store is not None else create_store(self.settings)
        self.vectorizer = Vectorizer(
            embedder,
            batch_size=self.settings.embedding_batch_size,
            timeout=self.settings.provider_timeout,
        )
        self.retriever = LogRetriever(self.vectorizer, self.store)
        self.search_tool = LogSearchTool(self.store, self.retriever, generator, settings=self.settings)
        self.request_context_tool = RequestContextTool(self.store, self.retriever, settings=self.settings)
        self._indexer: Optional[LogIndexer] = None

    @property
    def indexer(self) -> LogIndexer:
        """Built on first use because construction probes the embedding provider."""

        if self._indexer is None:
            self._indexer = LogIndexer(
                self.vectorizer,
                self.store,
                chunk_size=self.settings.chunk_size,
                chunk_overlap=self.settings.chunk_overlap,
                strict=self.settings.strict_indexing,
            )
        return self._indexer


def create_openai_inspector(settings: Optional[InspectorSettings] = None) -> LogInspector:
    """Build a ``LogInspector`` backed by the OpenAI API."""

    from .providers.llm import OpenAIChatModel, OpenAIEmbedder

    settings = settings or InspectorSettings()
    return LogInspector(
        OpenAIEmbedder(model=settings.embedding_model),
        generator=OpenAIChatModel(model=settings.generation_model),
        settings=settings,
    )
