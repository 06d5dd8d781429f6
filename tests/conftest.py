from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime, timezone

import numpy as np
import pytest

from ai_log_inspector.config import InspectorSettings
from ai_log_inspector.inspector import LogInspector
from ai_log_inspector.models import LogRecord, VectorDocument
from ai_log_inspector.providers.base import EmbeddingBackend, GenerationBackend
from ai_log_inspector.storage.vector_store import InMemoryVectorStore

VOCABULARY = (
    "payment",
    "gateway",
    "stripe",
    "timeout",
    "database",
    "connection",
    "login",
    "memory",
    "disk",
    "user",
)


class KeywordEmbedder(EmbeddingBackend):
    """Deterministic embedder: one dimension per vocabulary word plus a bias."""

    model_name = "fake-keyword-embedding"

    def __init__(self) -> None:
        self.calls = 0

    def embed(self, texts: Sequence[str]) -> np.ndarray:
        self.calls += 1
        rows = []
        for text in texts:
            lowered = text.lower()
            rows.append([float(lowered.count(word)) for word in VOCABULARY] + [0.1])
        return np.asarray(rows, dtype=np.float32)


class ConstantEmbedder(EmbeddingBackend):
    """Every text maps to the same vector, so every similarity is 1.0."""

    model_name = "fake-constant-embedding"

    def __init__(self) -> None:
        self.calls = 0

    def embed(self, texts: Sequence[str]) -> np.ndarray:
        self.calls += 1
        return np.asarray([[1.0, 0.0, 0.0] for _ in texts], dtype=np.float32)


class FailingEmbedder(EmbeddingBackend):
    """Raises on every call after ``succeed_first`` successful calls."""

    model_name = "fake-failing-embedding"

    def __init__(self, *, succeed_first: int = 0) -> None:
        self.calls = 0
        self.succeed_first = succeed_first

    def embed(self, texts: Sequence[str]) -> np.ndarray:
        self.calls += 1
        if self.calls > self.succeed_first:
            raise RuntimeError("embedding endpoint unavailable")
        return np.asarray([[1.0, 0.0, 0.0] for _ in texts], dtype=np.float32)


class CountingGenerator(GenerationBackend):
    model_name = "fake-generator"

    def __init__(self, answer: str = "The payment gateway timed out.") -> None:
        self.answer = answer
        self.prompts: list[str] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    def generate(self, prompt) -> str:
        self.prompts.append(prompt)
        return self.answer


class FailingGenerator(GenerationBackend):
    model_name = "fake-failing-generator"

    def __init__(self) -> None:
        self.calls = 0

    def generate(self, prompt) -> str:
        self.calls += 1
        raise RuntimeError("generation endpoint unavailable")


@pytest.fixture
def fixed_time() -> datetime:
    return datetime(2025, 12, 30, 8, 12, 4, tzinfo=timezone.utc)


@pytest.fixture
def keyword_embedder() -> KeywordEmbedder:
    return KeywordEmbedder()


@pytest.fixture
def generator() -> CountingGenerator:
    return CountingGenerator()


@pytest.fixture
def settings() -> InspectorSettings:
    return InspectorSettings(provider_timeout=None)


@pytest.fixture
def make_inspector(settings: InspectorSettings) -> Callable[..., LogInspector]:
    def _make(embedder: EmbeddingBackend, generator: GenerationBackend | None = None, **overrides) -> LogInspector:
        tuned = settings.model_copy(update=overrides) if overrides else settings
        return LogInspector(embedder, generator=generator, store=InMemoryVectorStore(), settings=tuned)

    return _make


@pytest.fixture
def payment_records(fixed_time: datetime) -> list[LogRecord]:
    return [
        LogRecord(
            message=message,
            level="ERROR",
            timestamp=fixed_time,
            channel="payments",
            context={"source": "payment-service", "tags": ["payment"]},
        )
        for message in (
            "Payment gateway timeout",
            "Stripe 504 error",
            "Payment failed after 3 retries",
        )
    ]


@pytest.fixture
def add_documents() -> Callable[..., None]:
    """Save hand-built vector documents straight into a store."""

    def _add(store: InMemoryVectorStore, contents: Sequence[str], **metadata) -> None:
        store.save(
            [
                VectorDocument(
                    id=f"doc-{idx}",
                    vector=(1.0, 0.0, 0.0),
                    metadata={"content": content, **metadata},
                )
                for idx, content in enumerate(contents)
            ]
        )

    return _add
