"""Turn log records into semantic documents ready for embedding.

The content built here is what gets embedded, so segment order and the
conditional inclusion of each block must stay stable: changing either changes
every vector in an existing store.
"""

from __future__ import annotations

import os
from datetime import datetime
from typing import Any, Dict, List, Mapping

from ..models import LogRecord, SemanticDocument, _utcnow

SEGMENT_SEPARATOR = " | "


def _present(mapping: Mapping[str, Any], key: str) -> bool:
    return mapping.get(key) is not None


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float, bool))


def _format_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _label(key: str) -> str:
    return key.replace("_", " ").replace("-", " ").title()


def _http_segment(context: Mapping[str, Any]) -> str | None:
    parts: List[str] = []
    if _present(context, "method"):
        parts.append(str(context["method"]).upper())
    if _present(context, "url"):
        parts.append(str(context["url"]))
    if _present(context, "route"):
        parts.append(f"Route: {context['route']}")
    if _present(context, "status_code"):
        parts.append(f"Status: {context['status_code']}")
    if not parts:
        return None
    return "HTTP Request: " + " ".join(parts)


def _user_segment(context: Mapping[str, Any]) -> str | None:
    parts: List[str] = []
    if _present(context, "user_id"):
        parts.append(f"User ID: {context['user_id']}")
    user_name = context.get("user_name")
    if user_name is None:
        user_name = context.get("username")
    if user_name is not None:
        parts.append(f"User: {user_name}")
    roles = context.get("user_roles")
    if isinstance(roles, (list, tuple)):
        parts.append("Roles: " + ", ".join(str(role) for role in roles))
    if not parts:
        return None
    return SEGMENT_SEPARATOR.join(parts)


def _exception_segment(context: Mapping[str, Any]) -> str | None:
    if not _present(context, "exception_class"):
        return None
    parts = [f"Exception: {context['exception_class']}"]
    if _present(context, "exception_message"):
        parts.append(f"Message: {context['exception_message']}")
    if _present(context, "file") and _present(context, "line"):
        parts.append(f"Location: {os.path.basename(str(context['file']))}:{context['line']}")
    if _present(context, "stack_trace"):
        parts.append("Has stack trace")
    if _present(context, "previous_exception"):
        parts.append("Has previous exception")
    return SEGMENT_SEPARATOR.join(parts)


def _query_segment(context: Mapping[str, Any]) -> str | None:
    if not _present(context, "query"):
        return None
    segment = "Database Query"
    if _present(context, "query_time"):
        segment += f" (Duration: {context['query_time']}ms)"
    if _present(context, "query_type"):
        segment += f" Type: {context['query_type']}"
    return segment


def _performance_segment(context: Mapping[str, Any]) -> str | None:
    parts: List[str] = []
    duration = context.get("duration")
    if duration is None:
        duration = context.get("execution_time")
    if duration is not None:
        parts.append(f"Duration: {duration}ms")
    if _present(context, "memory_usage"):
        parts.append(f"Memory: {context['memory_usage']}")
    if _present(context, "cpu_usage"):
        parts.append(f"CPU: {context['cpu_usage']}%")
    if not parts:
        return None
    return "Performance: " + SEGMENT_SEPARATOR.join(parts)


def _enriched_segments(enriched: Mapping[str, Any]) -> List[str]:
    segments: List[str] = []
    for key, value in enriched.items():
        if _is_scalar(value) and value != "":
            segments.append(f"{_label(key)}: {_format_scalar(value)}")
        elif isinstance(value, (list, tuple)) and value:
            scalars = [_format_scalar(item) for item in value if _is_scalar(item)]
            segments.append(f"{_label(key)}: " + ", ".join(scalars))
    return segments


def _extra_segments(extra: Mapping[str, Any], context: Mapping[str, Any]) -> List[str]:
    return [
        f"{_label(key)}: {_format_scalar(value)}"
        for key, value in extra.items()
        if _is_scalar(value) and value != "" and key not in context
    ]


def build_semantic_content(record: LogRecord, *, timestamp: datetime | None = None) -> str:
    """Render ``record`` as a single human-readable line for embedding."""

    ts = timestamp or record.resolved_timestamp()
    context = record.context

    parts: List[str | None] = [
        f"Log Message: {record.message}",
        f"Severity: {record.level}",
        f"Channel: {record.channel}",
        f"Timestamp: {ts.strftime('%Y-%m-%d %H:%M:%S')} {ts.tzname() or 'UTC'}",
        _http_segment(context),
        f"Request ID: {context['request_id']}" if _present(context, "request_id") else None,
        _user_segment(context),
        _exception_segment(context),
        _query_segment(context),
        _performance_segment(context),
    ]
    parts.extend(_enriched_segments(record.enriched))
    parts.extend(_extra_segments(record.extra, context))

    return SEGMENT_SEPARATOR.join(part for part in parts if part)


def build_metadata(record: LogRecord, *, timestamp: datetime | None = None) -> Dict[str, Any]:
    """Flatten a record into filterable metadata.

    The base block (level, channel, message, timestamp and the derived time
    and presence fields) always wins over identically named keys coming from
    context, extra or enriched data.
    """

    ts = timestamp or record.resolved_timestamp()
    context = record.context
    base: Dict[str, Any] = {
        "created_at": _utcnow().isoformat(),
        "timestamp": ts.isoformat(),
        "level": record.level.upper(),
        "channel": record.channel,
        "message": record.message,
        "hour": ts.hour,
        "day_of_week": ts.isoweekday(),
        "day_name": ts.strftime("%A"),
        "is_weekend": ts.isoweekday() in (6, 7),
        "month": ts.month,
        "year": ts.year,
        "has_exception": _present(context, "exception_class"),
        "has_stack_trace": _present(context, "stack_trace"),
        "has_request_context": _present(context, "request_id") or _present(context, "url"),
        "has_user_context": _present(context, "user_id") or _present(context, "username"),
        "has_performance_data": _present(context, "duration") or _present(context, "memory_usage"),
        "has_database_query": _present(context, "query"),
    }

    merged: Dict[str, Any] = {}
    for layer in (context, record.extra, record.enriched):
        merged.update(layer)
    for key in base:
        merged.pop(key, None)
    return {**base, **merged}


def create_from_record(record: LogRecord) -> SemanticDocument:
    """Build the searchable document for one log record."""

    timestamp = record.resolved_timestamp()
    return SemanticDocument(
        content=build_semantic_content(record, timestamp=timestamp),
        metadata=build_metadata(record, timestamp=timestamp),
    )


def create_from_mapping(data: Mapping[str, Any]) -> SemanticDocument:
    return create_from_record(LogRecord.from_mapping(data))


def create_from_string(text: str) -> SemanticDocument:
    """Wrap free text (usually a user query) so it is embedded like a log."""

    now = _utcnow().isoformat()
    return SemanticDocument(
        content=text,
        metadata={
            "created_at": now,
            "timestamp": now,
            "source": "string",
            "string_query": text,
        },
    )
