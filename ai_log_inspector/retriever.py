"""Query-time composition of the vectorizer and the vector store."""

from __future__ import annotations

from typing import List

from .models import VectorDocument
from .storage.vector_store import VectorStore
from .vectorizer import Vectorizer


class LogRetriever:
    """Embed a free-text query and return the nearest stored documents.

    Results are not filtered by relevance; callers apply their own threshold.
    """

    def __init__(self, vectorizer: Vectorizer, store: VectorStore) -> None:
        self.vectorizer = vectorizer
        self.store = store

    def retrieve(self, query: str, *, max_items: int = 10) -> List[VectorDocument]:
        vector = self.vectorizer.embed_query(query)
        return self.store.query(vector, max_items=max_items)
