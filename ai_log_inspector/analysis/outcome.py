"""Explicit success/failure values passed between search tiers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

from ..errors import ProviderTimeoutError, VectorStoreError

T = TypeVar("T")


class ErrorKind(str, Enum):
    EMBEDDINGS_UNSUPPORTED = "embeddings_unsupported"
    PROVIDER_TIMEOUT = "provider_timeout"
    PROVIDER_FAILURE = "provider_failure"
    STORE_FAILURE = "store_failure"
    GENERATION_FAILURE = "generation_failure"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind, detail: str = "") -> "Outcome[T]":
        return cls(error=error, detail=detail)


def classify(exc: BaseException) -> ErrorKind:
    """Map an exception raised by a lower layer onto an ``ErrorKind``."""

    if isinstance(exc, ProviderTimeoutError) or isinstance(exc.__cause__, ProviderTimeoutError):
        return ErrorKind.PROVIDER_TIMEOUT
    if isinstance(exc, VectorStoreError):
        return ErrorKind.STORE_FAILURE
    # Anything else escaping the vectorizer is treated as a provider fault.
    return ErrorKind.PROVIDER_FAILURE
