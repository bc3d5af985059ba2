"""
Parse failure diagnostics.

Keeps a bounded, thread-safe history of records that could not be parsed
so that status tooling can show what was skipped and why.
"""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime

# Default number of diagnostics retained
DEFAULT_MAX_ENTRIES = 500

# Characters of the raw record kept in each diagnostic
EXCERPT_LENGTH = 80


def make_excerpt(raw: str, length: int = EXCERPT_LENGTH) -> str:
    """Collapse a raw record to a single short line."""
    flat = " ".join((raw or "").split())
    if len(flat) <= length:
        return flat
    return flat[: length - 3] + "..."


@dataclass(frozen=True)
class ParseDiagnostic:
    """One skipped record."""

    record_id: str
    excerpt: str
    reason: str
    timestamp: datetime = field(default_factory=datetime.now)


class DiagnosticsLog:
    """
    Bounded history of parse diagnostics, oldest first.

    Writers and readers may run on different threads.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES):
        self._entries: deque[ParseDiagnostic] = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    def record(self, record_id: str, raw: str, reason: str) -> ParseDiagnostic:
        diagnostic = ParseDiagnostic(
            record_id=record_id, excerpt=make_excerpt(raw), reason=reason
        )
        with self._lock:
            self._entries.append(diagnostic)
        return diagnostic

    def entries(self) -> list[ParseDiagnostic]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
