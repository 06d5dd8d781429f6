"""Retrieval-augmented log analysis: index logs as embeddings and explain failures."""

from .analysis.request_context import RequestContextTool
from .analysis.search import LogSearchTool
from .config import InspectorSettings, load_settings
from .documents.factory import create_from_record, create_from_string
from .indexer import IndexingSummary, LogIndexer
from .inspector import LogInspector
from .models import Chunk, LogRecord, SemanticDocument, VectorDocument
from .retriever import LogRetriever
from .storage.vector_store import InMemoryVectorStore, PersistentVectorStore, VectorStore
from .vectorizer import Vectorizer

__all__ = [
    "Chunk",
    "InMemoryVectorStore",
    "IndexingSummary",
    "InspectorSettings",
    "LogIndexer",
    "LogInspector",
    "LogRecord",
    "LogRetriever",
    "LogSearchTool",
    "PersistentVectorStore",
    "RequestContextTool",
    "SemanticDocument",
    "VectorDocument",
    "VectorStore",
    "Vectorizer",
    "create_from_record",
    "create_from_string",
    "load_settings",
]
