"""Core domain models for the log inspector."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Best-effort conversion of ``value`` to an aware ``datetime``.

    Returns ``None`` for missing or malformed input instead of raising.
    """

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            parsed = datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class LogRecord:
    """A raw log entry as handed to the indexer.

    Records are immutable. ``with_context`` and ``with_enriched`` return a new
    record with merged maps so readers sharing a record never observe changes.
    """

    message: str
    level: str = "INFO"
    timestamp: Optional[datetime] = None
    channel: str = "app"
    context: Mapping[str, Any] = field(default_factory=dict)
    extra: Mapping[str, Any] = field(default_factory=dict)
    enriched: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "context", dict(self.context or {}))
        object.__setattr__(self, "extra", dict(self.extra or {}))
        object.__setattr__(self, "enriched", dict(self.enriched or {}))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LogRecord":
        """Build a record from a loosely structured mapping (e.g. a JSON log line)."""

        enriched = data.get("enriched_data") or data.get("enrichedData") or data.get("enriched") or {}
        return cls(
            message=str(data.get("message") or ""),
            level=str(data.get("level") or data.get("level_name") or "INFO").upper(),
            timestamp=parse_timestamp(data.get("timestamp") or data.get("datetime")),
            channel=str(data.get("channel") or "app"),
            context=data.get("context") or {},
            extra=data.get("extra") or {},
            enriched=enriched,
        )

    def resolved_timestamp(self) -> datetime:
        """Return the record timestamp, falling back to the current time."""

        return self.timestamp or _utcnow()

    def with_context(self, **values: Any) -> "LogRecord":
        return replace(self, context={**self.context, **values})

    def with_enriched(self, **values: Any) -> "LogRecord":
        return replace(self, enriched={**self.enriched, **values})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "level": self.level,
            "timestamp": self.resolved_timestamp().isoformat(),
            "channel": self.channel,
            "context": dict(self.context),
            "extra": dict(self.extra),
            "enriched_data": dict(self.enriched),
        }


@dataclass(frozen=True)
class SemanticDocument:
    """Searchable text derived from a log record or a query string."""

    content: str
    metadata: Mapping[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", dict(self.metadata or {}))


@dataclass(frozen=True)
class Chunk:
    """A window of a document's content, sized for the embedding model."""

    parent_id: str
    index: int
    offset: int
    content: str
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", dict(self.metadata or {}))

    @property
    def id(self) -> str:
        return f"{self.parent_id}-{str(self.index).zfill(4)}"


@dataclass(frozen=True)
class VectorDocument:
    """An embedded document as persisted by a vector store.

    ``score`` is only populated on documents returned from a query.
    """

    id: str
    vector: Tuple[float, ...]
    metadata: Mapping[str, Any] = field(default_factory=dict)
    score: Optional[float] = None

    @property
    def content(self) -> str:
        return str(self.metadata.get("content") or "")

    def with_score(self, score: Optional[float]) -> "VectorDocument":
        return replace(self, score=score)
