"""Utilities for loading log records from files on disk."""

from __future__ import annotations

import json
import re
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..models import LogRecord, parse_timestamp

# [2024-01-15 10:30:45] app.ERROR: Payment failed {"order_id": 42} []
LINE_FORMAT = re.compile(
    r"^\[(?P<timestamp>[^\]]+)\]\s+(?P<channel>[\w.-]+?)\.(?P<level>[A-Za-z]+):\s?(?P<rest>.*)$"
)


def _peel_json(text: str) -> Tuple[str, Optional[Dict[str, Any]]]:
    """Strip one trailing JSON object (or ``[]``) from ``text``."""

    stripped = text.rstrip()
    if stripped.endswith("[]"):
        return stripped[:-2].rstrip(), {}
    if not stripped.endswith("}"):
        return text, None

    position = stripped.rfind("{")
    while position >= 0:
        candidate = stripped[position:]
        try:
            value = json.loads(candidate)
        except ValueError:
            position = stripped.rfind("{", 0, position)
            continue
        if isinstance(value, dict):
            return stripped[:position].rstrip(), value
        break
    return text, None


def parse_line(line: str) -> Optional[LogRecord]:
    """Parse one log line; returns ``None`` for blank lines."""

    line = line.strip()
    if not line:
        return None

    if line.startswith("{"):
        try:
            payload = json.loads(line)
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            return LogRecord.from_mapping(payload)

    match = LINE_FORMAT.match(line)
    if match is None:
        return LogRecord(message=line)

    rest, extra = _peel_json(match.group("rest"))
    context: Optional[Dict[str, Any]] = None
    if extra is not None:
        rest, context = _peel_json(rest)
        if context is None:
            # Only one trailing block: it is the context.
            context, extra = extra, {}

    return LogRecord(
        message=rest.strip(),
        level=match.group("level").upper(),
        timestamp=parse_timestamp(match.group("timestamp")),
        channel=match.group("channel"),
        context=context or {},
        extra=extra or {},
    )


def load_log_file(path: str | Path) -> List[LogRecord]:
    """Load every non-empty line of a log file as a ``LogRecord``."""

    file_path = Path(path)
    if not file_path.is_file():
        raise FileNotFoundError(f"Log file not found: {file_path}")

    records: List[LogRecord] = []
    with file_path.open("r", encoding="utf-8", errors="replace") as fh:
        for line_no, line in enumerate(fh, start=1):
            record = parse_line(line)
            if record is None:
                continue
            records.append(
                replace(record, extra={**record.extra, "source_file": file_path.name, "line_no": line_no})
            )
    return records


def find_log_files(directory: str | Path, *, pattern: str = "*.log", recursive: bool = False) -> List[Path]:
    """List log files in ``directory`` matching ``pattern``, sorted by path."""

    root = Path(directory)
    if not root.is_dir():
        raise FileNotFoundError(f"Log directory does not exist: {root}")
    matches = root.rglob(pattern) if recursive else root.glob(pattern)
    return sorted(path for path in matches if path.is_file())
