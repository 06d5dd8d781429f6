"""Last-resort root cause detection by regular expression."""

from __future__ import annotations

import re
from typing import List, Tuple

UNKNOWN_CAUSE = "Unable to determine the specific cause from the available logs."

# Order matters: the first matching pattern wins.
ROOT_CAUSE_PATTERNS: List[Tuple[re.Pattern[str], str]] = [
    (re.compile(r"(database|db).*connection.*(failed|refused|lost)", re.IGNORECASE), "Database connection failure"),
    (re.compile(r"time(d)?\s?out", re.IGNORECASE), "Request timeout occurred"),
    (re.compile(r"authentication.*failed", re.IGNORECASE), "Authentication failure"),
    (re.compile(r"permission.*denied", re.IGNORECASE), "Insufficient permissions"),
    (re.compile(r"out of memory", re.IGNORECASE), "System ran out of memory"),
    (re.compile(r"disk.*full", re.IGNORECASE), "Disk space exhausted"),
    (re.compile(r"invalid.*request", re.IGNORECASE), "Invalid request format or parameters"),
    (re.compile(r"service.*unavailable", re.IGNORECASE), "External service unavailable"),
    (re.compile(r"500.*internal.*server.*error", re.IGNORECASE), "Internal server error occurred"),
]


def match_root_cause(text: str) -> str:
    for pattern, label in ROOT_CAUSE_PATTERNS:
        if pattern.search(text):
            return label
    return UNKNOWN_CAUSE
