"""Utilities for splitting semantic documents into embeddable chunks."""

from __future__ import annotations

from typing import List

from ..errors import ConfigurationError
from ..models import Chunk, SemanticDocument

DEFAULT_CHUNK_SIZE = 500
DEFAULT_CHUNK_OVERLAP = 100


def validate_chunking(chunk_size: int, chunk_overlap: int) -> None:
    """Raise ``ConfigurationError`` unless ``0 <= chunk_overlap < chunk_size``."""

    if chunk_size < 1:
        raise ConfigurationError(f"chunk_size must be positive, got {chunk_size}")
    if chunk_overlap < 0:
        raise ConfigurationError(f"chunk_overlap must not be negative, got {chunk_overlap}")
    if chunk_overlap >= chunk_size:
        raise ConfigurationError(
            f"chunk_overlap ({chunk_overlap}) must be smaller than chunk_size ({chunk_size})"
        )


def _chunk_spans(length: int, chunk_size: int, chunk_overlap: int) -> List[tuple[int, int]]:
    spans: List[tuple[int, int]] = []
    start = 0
    step = chunk_size - chunk_overlap
    while start < length:
        end = min(length, start + chunk_size)
        spans.append((start, end))
        if end == length:
            break
        start += step
    return spans


def chunk_text(
    text: str,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> List[str]:
    """Split ``text`` into overlapping character windows.

    Every chunk is at most ``chunk_size`` characters and starts
    ``chunk_overlap`` characters before the end of the previous one.
    """

    validate_chunking(chunk_size, chunk_overlap)
    if not text:
        return []
    return [text[start:end] for start, end in _chunk_spans(len(text), chunk_size, chunk_overlap)]


def split_document(
    document: SemanticDocument,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> List[Chunk]:
    """Split a document into ordered chunks that inherit its metadata."""

    validate_chunking(chunk_size, chunk_overlap)
    spans = _chunk_spans(len(document.content), chunk_size, chunk_overlap)
    return [
        Chunk(
            parent_id=document.id,
            index=idx,
            offset=start,
            content=document.content[start:end],
            metadata=document.metadata,
        )
        for idx, (start, end) in enumerate(spans, start=1)
    ]
