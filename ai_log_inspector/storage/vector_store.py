"""Vector stores backed by NumPy."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence

import numpy as np

from ..errors import InvalidDocumentError, VectorStoreError
from ..models import VectorDocument

logger = logging.getLogger(__name__)


class VectorStore:
    """Interface every storage backend implements.

    Stores never filter by score; relevance policy belongs to the caller.
    """

    def save(self, documents: Sequence[VectorDocument]) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def query(self, vector: Sequence[float], *, max_items: int = 10) -> List[VectorDocument]:  # pragma: no cover - interface
        raise NotImplementedError

    def scan(self, *, limit: int | None = None) -> List[VectorDocument]:  # pragma: no cover - interface
        raise NotImplementedError

    @property
    def count(self) -> int:  # pragma: no cover - interface
        raise NotImplementedError


class InMemoryVectorStore(VectorStore):
    """Keep embeddings in a single matrix guarded by a lock."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._ids: List[str] = []
        self._metadata: List[Dict[str, Any]] = []
        self._embeddings: np.ndarray | None = None

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------
    def _validate(self, documents: Iterable[Any]) -> np.ndarray:
        rows: List[np.ndarray] = []
        dimension = self.dimension
        for position, document in enumerate(documents):
            if not isinstance(document, VectorDocument):
                raise InvalidDocumentError(
                    f"Item {position} is a {type(document).__name__}, expected VectorDocument"
                )
            if not document.id:
                raise InvalidDocumentError(f"Item {position} has no id")
            try:
                row = np.asarray(document.vector, dtype=np.float32)
            except (TypeError, ValueError) as exc:
                raise InvalidDocumentError(f"Document {document.id} has a non-numeric vector") from exc
            if row.ndim != 1 or row.shape[0] == 0:
                raise InvalidDocumentError(f"Document {document.id} must have a non-empty 1D vector")
            if dimension is None:
                dimension = int(row.shape[0])
            elif row.shape[0] != dimension:
                raise InvalidDocumentError(
                    f"Document {document.id} has dimension {row.shape[0]}, store expects {dimension}"
                )
            rows.append(row)
        return np.vstack(rows)

    def _document_at(self, idx: int, score: float | None = None) -> VectorDocument:
        assert self._embeddings is not None
        return VectorDocument(
            id=self._ids[idx],
            vector=tuple(float(value) for value in self._embeddings[idx]),
            metadata=dict(self._metadata[idx]),
            score=score,
        )

    # ------------------------------------------------------------------
    def save(self, documents: Sequence[VectorDocument]) -> None:
        """Append ``documents``; the batch is rejected as a whole if any item is malformed."""

        documents = list(documents)
        if not documents:
            return

        with self._lock:
            embeddings = self._validate(documents)
            if self._embeddings is None:
                self._embeddings = embeddings
            else:
                self._embeddings = np.vstack([self._embeddings, embeddings])
            self._ids.extend(document.id for document in documents)
            self._metadata.extend(dict(document.metadata) for document in documents)
            self._persist()

    def _persist(self) -> None:
        """Hook for durable subclasses; called with the lock held after each save."""

    # ------------------------------------------------------------------
    def query(self, vector: Sequence[float], *, max_items: int = 10) -> List[VectorDocument]:
        """Return up to ``max_items`` documents ranked by cosine similarity."""

        query_vec = np.asarray(vector, dtype=np.float32)
        if query_vec.ndim != 1:
            raise VectorStoreError("Query vector must be one-dimensional")

        with self._lock:
            if self._embeddings is None or not self._ids or max_items <= 0:
                return []
            if query_vec.shape[0] != self._embeddings.shape[1]:
                raise VectorStoreError(
                    f"Query dimension {query_vec.shape[0]} does not match store dimension "
                    f"{self._embeddings.shape[1]}"
                )

            doc_vectors = self._embeddings
            # Cosine similarity
            doc_norms = np.linalg.norm(doc_vectors, axis=1) + 1e-10
            query_norm = np.linalg.norm(query_vec) + 1e-10
            similarities = (doc_vectors @ query_vec) / (doc_norms * query_norm)

            # Stable sort keeps insertion order for ties so results are reproducible.
            top_indices = np.argsort(-similarities, kind="stable")[:max_items]
            return [self._document_at(int(idx), float(similarities[idx])) for idx in top_indices]

    def scan(self, *, limit: int | None = None) -> List[VectorDocument]:
        """Return stored documents in insertion order without scores."""

        with self._lock:
            total = len(self._ids) if limit is None else min(limit, len(self._ids))
            return [self._document_at(idx) for idx in range(total)]

    # ------------------------------------------------------------------
    @property
    def count(self) -> int:
        with self._lock:
            return len(self._ids)

    @property
    def dimension(self) -> int | None:
        with self._lock:
            if self._embeddings is None:
                return None
            return int(self._embeddings.shape[1])


class PersistentVectorStore(InMemoryVectorStore):
    """Persist embeddings and associated metadata on disk."""

    def __init__(self, storage_dir: str | Path = "data/store") -> None:
        super().__init__()
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        self._vectors_path = self.storage_dir / "vectors.npy"
        self._meta_path = self.storage_dir / "metadata.json"
        self._load()

    # ------------------------------------------------------------------
    # Persistence helpers
    # ------------------------------------------------------------------
    def _load(self) -> None:
        if self._meta_path.exists() and self._vectors_path.exists():
            with self._meta_path.open("r", encoding="utf-8") as fh:
                meta = json.load(fh)
            embeddings = np.load(self._vectors_path)
            documents = meta.get("documents", [])
            if embeddings.ndim != 2 or embeddings.shape[0] != len(documents):
                raise VectorStoreError(f"Corrupted vector store in {self.storage_dir}")
            self._ids = [item["id"] for item in documents]
            self._metadata = [item.get("metadata", {}) for item in documents]
            self._embeddings = embeddings.astype(np.float32)
            logger.debug("Loaded %d vectors from %s", len(self._ids), self.storage_dir)

    def _persist(self) -> None:
        payload = {
            "documents": [
                {"id": doc_id, "metadata": metadata}
                for doc_id, metadata in zip(self._ids, self._metadata)
            ],
        }
        with self._meta_path.open("w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2, default=str)
        if self._embeddings is not None:
            np.save(self._vectors_path, self._embeddings)
