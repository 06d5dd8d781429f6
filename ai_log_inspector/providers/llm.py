"""Wrappers around the OpenAI API for embedding and chat models."""

from __future__ import annotations

import os
from typing import Optional, Sequence

import numpy as np
from openai import OpenAI

from .base import EmbeddingBackend, GenerationBackend, PromptInput, to_messages

DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"
DEFAULT_CHAT_MODEL = "gpt-4o-mini"


class OpenAIEmbedder(EmbeddingBackend):
    """Thin wrapper around OpenAI's embedding endpoint."""

    def __init__(self, *, model: str = DEFAULT_EMBEDDING_MODEL, client: OpenAI | None = None) -> None:
        self.client = client or OpenAI(api_key=os.getenv("OPENAI_API_KEY"))
        self.model_name = model

    @property
    def supports_embeddings(self) -> Optional[bool]:
        # OpenAI only serves embeddings from the dedicated embedding models.
        return "embedding" in self.model_name

    def embed(self, texts: Sequence[str]) -> np.ndarray:
        response = self.client.embeddings.create(model=self.model_name, input=list(texts))
        vectors = [item.embedding for item in response.data]
        return np.asarray(vectors, dtype=np.float32)


class OpenAIChatModel(GenerationBackend):
    """Wrapper around OpenAI's Chat Completions API."""

    requires_messages = True

    def __init__(self, *, model: str = DEFAULT_CHAT_MODEL, client: OpenAI | None = None) -> None:
        self.client = client or OpenAI(api_key=os.getenv("OPENAI_API_KEY"))
        self.model_name = model

    def generate(self, prompt: PromptInput) -> str:
        response = self.client.chat.completions.create(
            model=self.model_name, messages=to_messages(prompt)
        )
        choice = response.choices[0]
        return choice.message.content or ""
