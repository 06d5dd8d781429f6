"""Collect every log line belonging to one request, trace or session id."""

from __future__ import annotations

import logging
import re
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from ..config import InspectorSettings
from ..models import VectorDocument, parse_timestamp
from ..retriever import LogRetriever
from ..storage.vector_store import VectorStore
from .outcome import ErrorKind, Outcome, classify
from .patterns import match_root_cause
from .schemas import RequestContextEntry, RequestContextOutcome, SearchMethod, TimelineEvent, TimeSpan

logger = logging.getLogger(__name__)

EMPTY_IDENTIFIER_MESSAGE = (
    "Request identifier is required. Please provide a request_id, trace_id, or session_id to track."
)
# Identifier lookups cast a wider net than free-text search.
CANDIDATE_POOL = 200
MAX_CONTEXT_LOGS = 50

CONTEXT_TERMS = ("request lifecycle", "request processing", "trace logs")
HINTS = (
    (("req", "request"), "HTTP request processing"),
    (("trace",), "distributed tracing"),
    (("session",), "user session activity"),
    (("order", "transaction"), "business transaction processing"),
    (("user",), "user activity tracking"),
)

EVENT_PATTERNS = (
    ("started", re.compile(r"started|begin|initiated|commenced", re.IGNORECASE)),
    ("completed", re.compile(r"completed|finished|success|done", re.IGNORECASE)),
    ("failed", re.compile(r"failed|error|exception|timeout|abort", re.IGNORECASE)),
    ("warning", re.compile(r"warning|warn|caution", re.IGNORECASE)),
    ("retry", re.compile(r"retry|retrying|attempt", re.IGNORECASE)),
    ("authentication", re.compile(r"auth|login|authenticate", re.IGNORECASE)),
    ("database", re.compile(r"database|\bdb\b|sql|query", re.IGNORECASE)),
    ("payment", re.compile(r"payment|transaction|charge", re.IGNORECASE)),
    ("api_call", re.compile(r"api|http|request|response", re.IGNORECASE)),
)

EPOCH_START = datetime.min.replace(tzinfo=timezone.utc)
MESSAGE_SEGMENT = re.compile(r"Log Message:\s*(?P<message>[^|]*)")


def build_identifier_query(identifier: str) -> str:
    lowered = identifier.lower()
    hints = [label for needles, label in HINTS if any(needle in lowered for needle in needles)]
    return " ".join([identifier, *CONTEXT_TERMS, *hints])


def event_type(content: str) -> str:
    for name, pattern in EVENT_PATTERNS:
        if pattern.search(content):
            return name
    return "info"


def describe(content: str) -> str:
    match = MESSAGE_SEGMENT.search(content)
    text = (match.group("message") if match else content).strip()
    if len(text) > 100:
        text = text[:97] + "..."
    return text or "Log event"


def _sort_key(document: VectorDocument) -> datetime:
    parsed = parse_timestamp(document.metadata.get("timestamp"))
    return parsed or EPOCH_START


class RequestContextTool:
    """Trace a request through the logs in chronological order."""

    name = "request_context"
    description = (
        "Fetch all logs related to a specific request_id, trace_id, or session_id "
        "for complete request lifecycle tracking."
    )

    def __init__(
        self,
        store: VectorStore,
        retriever: LogRetriever,
        *,
        settings: Optional[InspectorSettings] = None,
    ) -> None:
        self.store = store
        self.retriever = retriever
        self.settings = settings or InspectorSettings()

    def _contains(self, document: VectorDocument, identifier: str) -> bool:
        needle = identifier.lower()
        if needle in document.content.lower():
            return True
        return any(needle == str(value).lower() for value in document.metadata.values() if value is not None)

    def semantic_search(self, identifier: str) -> Outcome[List[VectorDocument]]:
        if not self.retriever.vectorizer.supports_embeddings():
            return Outcome.failure(ErrorKind.EMBEDDINGS_UNSUPPORTED)
        try:
            results = self.retriever.retrieve(build_identifier_query(identifier), max_items=CANDIDATE_POOL)
        except Exception as exc:
            return Outcome.failure(classify(exc), str(exc))
        # Identifier presence is the real filter here; similarity only ranks candidates.
        return Outcome.success([doc for doc in results if self._contains(doc, identifier)])

    def keyword_search(self, identifier: str) -> Outcome[List[VectorDocument]]:
        try:
            candidates = self.store.scan(limit=self.settings.keyword_scan_limit)
        except Exception as exc:
            return Outcome.failure(ErrorKind.STORE_FAILURE, str(exc))
        return Outcome.success([doc for doc in candidates if self._contains(doc, identifier)])

    def _format(self, documents: Sequence[VectorDocument], identifier: str, method: SearchMethod) -> RequestContextOutcome:
        ordered = sorted(documents, key=_sort_key)[:MAX_CONTEXT_LOGS]
        entries: List[RequestContextEntry] = []
        timeline: List[TimelineEvent] = []
        for position, document in enumerate(ordered, start=1):
            entry = RequestContextEntry.from_document(document).model_copy(
                update={"chronological_order": position}
            )
            entries.append(entry)
            if entry.timestamp != "unknown":
                timeline.append(
                    TimelineEvent(
                        timestamp=entry.timestamp,
                        event_type=event_type(entry.content),
                        description=describe(entry.content),
                        source=entry.source,
                    )
                )

        services = Counter(entry.source for entry in entries if entry.source != "unknown")
        levels = Counter(entry.level for entry in entries)
        root_cause = None
        if any(entry.level.upper() in ("ERROR", "CRITICAL", "ALERT", "EMERGENCY") for entry in entries):
            root_cause = match_root_cause("\n".join(entry.content for entry in entries))

        return RequestContextOutcome(
            success=True,
            reason=f"Found {len(entries)} log entries for '{identifier}' across {max(len(services), 1)} service(s).",
            identifier=identifier,
            evidence_logs=entries,
            search_method=method,
            root_cause=root_cause,
            request_timeline=timeline,
            services_involved=dict(services),
            log_levels=dict(levels),
            time_span=self._time_span(entries),
            total_logs=len(entries),
        )

    @staticmethod
    def _time_span(entries: Sequence[RequestContextEntry]) -> Optional[TimeSpan]:
        stamps = [ts for ts in (parse_timestamp(entry.timestamp) for entry in entries) if ts is not None]
        if not stamps:
            return None
        start, end = min(stamps), max(stamps)
        return TimeSpan(
            start=start.isoformat(),
            end=end.isoformat(),
            duration_seconds=(end - start).total_seconds(),
        )

    def trace(self, identifier: str) -> RequestContextOutcome:
        identifier = (identifier or "").strip()
        if not identifier:
            return RequestContextOutcome(success=False, reason=EMPTY_IDENTIFIER_MESSAGE)

        found = self.semantic_search(identifier)
        method: SearchMethod = "semantic"
        if not found.ok or not found.value:
            if not found.ok and found.error is not ErrorKind.EMBEDDINGS_UNSUPPORTED:
                logger.warning("Semantic identifier search failed (%s); using keyword scan", found.detail)
            # A semantic miss is not conclusive for exact identifiers, so scan as well.
            found = self.keyword_search(identifier)
            method = "keyword-based"

        if not found.ok:
            return RequestContextOutcome(
                success=False,
                reason=f"Request context search failed: {found.detail or found.error.value}",
                identifier=identifier,
                search_method=method,
            )
        if not found.value:
            return RequestContextOutcome(
                success=False,
                reason=f"No logs found containing identifier '{identifier}' using {method} search.",
                identifier=identifier,
                search_method=method,
            )
        return self._format(found.value, identifier, method)

    def __call__(self, identifier: str = "") -> Dict[str, Any]:
        return self.trace(identifier).to_dict()
