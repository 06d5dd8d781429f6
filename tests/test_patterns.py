from __future__ import annotations

import pytest

from ai_log_inspector.analysis.patterns import UNKNOWN_CAUSE, match_root_cause


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Database connection refused by host", "Database connection failure"),
        ("Upstream call timed out", "Request timeout occurred"),
        ("Gateway timeout", "Request timeout occurred"),
        ("Authentication for admin failed", "Authentication failure"),
        ("Permission denied: /etc/shadow", "Insufficient permissions"),
        ("Worker killed: out of memory", "System ran out of memory"),
        ("Disk /dev/sda1 is full", "Disk space exhausted"),
        ("Invalid JSON in request body", "Invalid request format or parameters"),
        ("Mail service temporarily unavailable", "External service unavailable"),
        ("HTTP 500 Internal Server Error", "Internal server error occurred"),
    ],
)
def test_known_causes(text: str, expected: str) -> None:
    assert match_root_cause(text) == expected


def test_first_pattern_wins() -> None:
    # Matches both the database and the timeout patterns.
    assert match_root_cause("db connection lost after timeout") == "Database connection failure"
    assert match_root_cause("DB connection timeout after 30s") == "Request timeout occurred"


def test_unknown_cause() -> None:
    assert match_root_cause("User updated profile picture") == UNKNOWN_CAUSE
