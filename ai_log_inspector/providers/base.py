"""Interfaces for the embedding and generation providers."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar, Union

import numpy as np

from ..errors import ProviderTimeoutError

T = TypeVar("T")

Message = Dict[str, str]
# Plain text or an already structured chat transcript.
PromptInput = Union[str, Sequence[Message]]


class EmbeddingBackend:
    """Protocol for embedding providers."""

    model_name: str

    @property
    def supports_embeddings(self) -> Optional[bool]:
        """Advisory capability flag; ``None`` when the provider cannot tell."""

        return None

    def embed(self, texts: Sequence[str]) -> np.ndarray:  # pragma: no cover - interface
        raise NotImplementedError


class GenerationBackend:
    """Protocol for text generation providers."""

    model_name: str
    # Chat-style backends only accept message lists.
    requires_messages: bool = False

    def generate(self, prompt: PromptInput) -> str:  # pragma: no cover - interface
        raise NotImplementedError


def to_messages(prompt: PromptInput) -> List[Message]:
    """Convert a plain prompt into a single user message."""

    if isinstance(prompt, str):
        return [{"role": "user", "content": prompt}]
    return [dict(message) for message in prompt]


def generate_text(backend: GenerationBackend, prompt: PromptInput) -> str:
    """Call ``backend`` with the prompt shape it expects."""

    if backend.requires_messages:
        return backend.generate(to_messages(prompt))
    return backend.generate(prompt)


def call_with_timeout(func: Callable[..., T], *args: Any, timeout: Optional[float] = None) -> T:
    """Run ``func`` and raise ``ProviderTimeoutError`` if it exceeds ``timeout``.

    The worker thread is abandoned on timeout; the provider call itself is not
    interrupted.
    """

    if timeout is None:
        return func(*args)

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="provider-call")
    try:
        future = executor.submit(func, *args)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError as exc:
            future.cancel()
            raise ProviderTimeoutError(timeout) from exc
    finally:
        executor.shutdown(wait=False)
