from __future__ import annotations

import time
from collections.abc import Sequence

import numpy as np
import pytest

from ai_log_inspector.errors import ProviderTimeoutError, VectorizationError
from ai_log_inspector.models import Chunk, SemanticDocument
from ai_log_inspector.providers.base import EmbeddingBackend
from ai_log_inspector.vectorizer import Vectorizer
from conftest import ConstantEmbedder, FailingEmbedder, KeywordEmbedder


class SlowEmbedder(EmbeddingBackend):
    model_name = "slow"

    def embed(self, texts: Sequence[str]) -> np.ndarray:
        time.sleep(0.5)
        return np.ones((len(texts), 3), dtype=np.float32)


def test_vectorize_pairs_vectors_with_ids_and_metadata() -> None:
    documents = [
        SemanticDocument(content="payment timeout", metadata={"level": "ERROR"}, id="a"),
        SemanticDocument(content="disk full", metadata={"level": "WARNING"}, id="b"),
    ]

    vectors = Vectorizer(KeywordEmbedder()).vectorize(documents)

    assert [doc.id for doc in vectors] == ["a", "b"]
    assert vectors[0].metadata["level"] == "ERROR"
    assert vectors[0].metadata["content"] == "payment timeout"
    assert vectors[0].score is None
    assert len(vectors[0].vector) == len(vectors[1].vector)


def test_chunk_metadata_records_parent() -> None:
    chunk = Chunk(parent_id="parent", index=2, offset=400, content="tail", metadata={"level": "INFO"})

    (vector,) = Vectorizer(ConstantEmbedder()).vectorize([chunk])

    assert vector.id == "parent-0002"
    assert vector.metadata["parent_id"] == "parent"
    assert vector.metadata["chunk_index"] == 2
    assert vector.metadata["chunk_offset"] == 400


def test_vectorize_batches_calls() -> None:
    embedder = ConstantEmbedder()
    documents = [SemanticDocument(content=f"line {i}") for i in range(5)]

    result = Vectorizer(embedder, batch_size=2).vectorize(documents)

    assert len(result) == 5
    assert embedder.calls == 3


def test_vectorize_failure_carries_document_id() -> None:
    document = SemanticDocument(content="x", id="doc-42")

    with pytest.raises(VectorizationError) as excinfo:
        Vectorizer(FailingEmbedder()).vectorize([document])

    assert excinfo.value.document_id == "doc-42"


def test_timeout_is_reported_as_vectorization_error() -> None:
    vectorizer = Vectorizer(SlowEmbedder(), timeout=0.05)

    with pytest.raises(VectorizationError) as excinfo:
        vectorizer.vectorize([SemanticDocument(content="x")])

    assert isinstance(excinfo.value.__cause__, ProviderTimeoutError)


def test_embed_query_uses_string_document_path() -> None:
    vector = Vectorizer(KeywordEmbedder()).embed_query("payment payment timeout")

    assert vector[0] == 2.0
    assert vector[3] == 1.0


def test_capability_probe_is_cached_on_failure() -> None:
    embedder = FailingEmbedder()
    vectorizer = Vectorizer(embedder)

    assert vectorizer.supports_embeddings() is False
    assert vectorizer.supports_embeddings() is False
    assert embedder.calls == 1


def test_capability_probe_is_cached_on_success() -> None:
    embedder = KeywordEmbedder()
    vectorizer = Vectorizer(embedder)

    assert vectorizer.supports_embeddings() is True
    assert vectorizer.supports_embeddings() is True
    assert embedder.calls == 1


def test_probe_cache_is_per_instance() -> None:
    failing = Vectorizer(FailingEmbedder())
    working = Vectorizer(KeywordEmbedder())

    assert failing.supports_embeddings() is False
    assert working.supports_embeddings() is True
