"""Stable result shapes returned by the analysis tools."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from ..models import VectorDocument
from .keyword import normalize_tags

SearchMethod = Literal["semantic", "keyword-based", "none"]


class EvidenceEntry(BaseModel):
    """One retrieved log, normalized so the schema never depends on input completeness."""

    id: str
    content: str
    timestamp: str = "unknown"
    level: str = "unknown"
    source: str = "unknown"
    tags: List[str] = Field(default_factory=list)

    @classmethod
    def from_document(cls, document: VectorDocument) -> "EvidenceEntry":
        metadata = document.metadata
        return cls(
            id=str(metadata.get("log_id") or document.id),
            content=document.content or "No content available",
            timestamp=str(metadata.get("timestamp") or "unknown"),
            level=str(metadata.get("level") or "unknown"),
            source=str(metadata.get("source") or "unknown"),
            tags=normalize_tags(metadata.get("tags")),
        )


class SearchOutcome(BaseModel):
    success: bool
    reason: str
    evidence_logs: List[EvidenceEntry] = Field(default_factory=list)
    search_method: SearchMethod = "none"
    query: str = ""
    log_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


class TimelineEvent(BaseModel):
    timestamp: str
    event_type: str
    description: str
    source: str


class TimeSpan(BaseModel):
    start: str
    end: str
    duration_seconds: float


class RequestContextEntry(EvidenceEntry):
    chronological_order: int = 0


class RequestContextOutcome(BaseModel):
    success: bool
    reason: str
    identifier: str = ""
    evidence_logs: List[RequestContextEntry] = Field(default_factory=list)
    search_method: SearchMethod = "none"
    root_cause: Optional[str] = None
    request_timeline: List[TimelineEvent] = Field(default_factory=list)
    services_involved: Dict[str, int] = Field(default_factory=dict)
    log_levels: Dict[str, int] = Field(default_factory=dict)
    time_span: Optional[TimeSpan] = None
    total_logs: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()
