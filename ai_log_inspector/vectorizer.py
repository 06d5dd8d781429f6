"""Turn semantic documents and chunks into vector documents."""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from .documents.factory import create_from_string
from .errors import ProviderError, VectorizationError
from .models import Chunk, SemanticDocument, VectorDocument
from .providers.base import EmbeddingBackend, call_with_timeout

logger = logging.getLogger(__name__)

Vectorizable = Union[SemanticDocument, Chunk]

PROBE_TEXT = "ping"


def _item_metadata(item: Vectorizable) -> Dict[str, Any]:
    metadata = dict(item.metadata)
    metadata["content"] = item.content
    if isinstance(item, Chunk):
        metadata["parent_id"] = item.parent_id
        metadata["chunk_index"] = item.index
        metadata["chunk_offset"] = item.offset
    return metadata


class Vectorizer:
    """Adapter between an ``EmbeddingBackend`` and the vector store."""

    def __init__(
        self,
        embedder: EmbeddingBackend,
        *,
        batch_size: int = 64,
        timeout: Optional[float] = None,
    ) -> None:
        self.embedder = embedder
        self.batch_size = max(1, batch_size)
        self.timeout = timeout
        self._embedding_support: Optional[bool] = None
        self._probe_lock = threading.Lock()

    @property
    def model_name(self) -> str:
        return getattr(self.embedder, "model_name", "unknown")

    def _embed(self, texts: Sequence[str]) -> np.ndarray:
        vectors = call_with_timeout(self.embedder.embed, list(texts), timeout=self.timeout)
        vectors = np.asarray(vectors, dtype=np.float32)
        if vectors.ndim != 2 or vectors.shape[0] != len(texts):
            raise ProviderError(
                f"Embedding provider returned shape {vectors.shape} for {len(texts)} inputs"
            )
        return vectors

    def vectorize(self, items: Sequence[Vectorizable]) -> List[VectorDocument]:
        """Embed ``items`` and pair each vector with the item's id and metadata."""

        documents: List[VectorDocument] = []
        for start in range(0, len(items), self.batch_size):
            batch = items[start : start + self.batch_size]
            try:
                vectors = self._embed([item.content for item in batch])
            except Exception as exc:
                raise VectorizationError(batch[0].id, exc) from exc
            for item, vector in zip(batch, vectors):
                documents.append(
                    VectorDocument(
                        id=item.id,
                        vector=tuple(float(value) for value in vector),
                        metadata=_item_metadata(item),
                    )
                )
        return documents

    def embed_query(self, text: str) -> Tuple[float, ...]:
        """Embed a free-text query through the same path as indexed logs."""

        document = create_from_string(text)
        return self.vectorize([document])[0].vector

    def supports_embeddings(self) -> bool:
        """Probe the provider once and cache whether embeddings work."""

        if self._embedding_support is not None:
            return self._embedding_support

        with self._probe_lock:
            if self._embedding_support is None:
                advisory = getattr(self.embedder, "supports_embeddings", None)
                if advisory is False:
                    logger.debug("Provider reports no embedding support for %s; probing anyway", self.model_name)
                try:
                    vectors = self._embed([PROBE_TEXT])
                    self._embedding_support = bool(vectors.shape[1] > 0)
                except Exception as exc:
                    logger.warning("Embedding probe failed for model %s: %s", self.model_name, exc)
                    self._embedding_support = False
        return self._embedding_support
