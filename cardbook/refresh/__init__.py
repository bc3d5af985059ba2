"""
cardbook.refresh - Refresh scheduling module

Periodic fetch / parse / filter cycles, the published contact set and
parse failure diagnostics.
"""

from cardbook.refresh.diagnostics import (
    DEFAULT_MAX_ENTRIES,
    DiagnosticsLog,
    ParseDiagnostic,
    make_excerpt,
)
from cardbook.refresh.scheduler import (
    SECONDS_PER_HOUR,
    RefreshScheduler,
    RefreshStats,
    SchedulerError,
)

__all__ = [
    "RefreshScheduler",
    "RefreshStats",
    "SchedulerError",
    "SECONDS_PER_HOUR",
    "DiagnosticsLog",
    "ParseDiagnostic",
    "DEFAULT_MAX_ENTRIES",
    "make_excerpt",
]
