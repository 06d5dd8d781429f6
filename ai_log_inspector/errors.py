"""Exception hierarchy shared by the indexing and retrieval layers."""

from __future__ import annotations


class LogInspectorError(Exception):
    """Base class for all errors raised by the log inspector."""


class ConfigurationError(LogInspectorError, ValueError):
    """Invalid configuration detected while constructing a component."""


class UnsupportedEmbeddingModelError(ConfigurationError):
    """The active provider/model cannot produce embeddings."""

    def __init__(self, model: str | None = None) -> None:
        self.model = model
        name = f'"{model}"' if model else "The configured model"
        super().__init__(
            f"{name} does not support embeddings. Configure a provider with an embedding model."
        )


class ProviderError(LogInspectorError):
    """An embedding or generation call failed."""


class ProviderTimeoutError(ProviderError):
    """A provider call did not complete within the configured timeout."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"Provider call timed out after {timeout:g}s")


class VectorizationError(ProviderError):
    """Embedding a document failed."""

    def __init__(self, document_id: str, cause: BaseException | None = None) -> None:
        self.document_id = document_id
        message = f"Failed to vectorize document {document_id}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class VectorStoreError(LogInspectorError):
    """The vector store could not complete an operation."""


class InvalidDocumentError(VectorStoreError, ValueError):
    """A value passed to the store is not a well-formed vector document."""
