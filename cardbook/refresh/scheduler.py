"""
Refresh scheduler for periodic vCard loading.

Provides a RefreshScheduler class that manages:
- Periodic fetch / parse / filter cycles on a background thread
- The published contact set, replaced atomically after each cycle
- Parse failure diagnostics and cycle statistics
- Signal handling for graceful shutdown when run in the foreground
"""

from __future__ import annotations

import logging
import signal
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from cardbook.card.contact import Contact, fingerprint
from cardbook.card.filter import qualifies
from cardbook.card.parser import DEFAULT_PARSER, CardParser, ParseError
from cardbook.config.settings import ConfigurationError, RefreshConfig, validate_interval
from cardbook.refresh.diagnostics import DiagnosticsLog
from cardbook.sources.base import SourceCollector, SourceError

logger = logging.getLogger(__name__)

# Seconds in one interval unit
SECONDS_PER_HOUR = 3600


class SchedulerError(Exception):
    """Raised when the scheduler lifecycle is misused."""

    pass


@dataclass
class RefreshStats:
    """
    Statistics from scheduler operation.

    Counters cover the whole scheduler lifetime; the record counts
    describe the most recent successful cycle.
    """

    started_at: datetime = field(default_factory=datetime.now)
    cycle_count: int = 0
    cycle_success_count: int = 0
    cycle_error_count: int = 0
    last_cycle_at: datetime | None = None
    last_cycle_success: bool = False
    last_error: str | None = None
    records_read: int = 0
    contacts_parsed: int = 0
    contacts_kept: int = 0
    parse_failures: int = 0


class RefreshScheduler:
    """
    Periodically rebuilds the published contact set from a source.

    Each cycle fetches raw records, parses them one by one (bad records are
    logged and skipped), filters the parsed contacts, and swaps the result
    in as a new tuple. Readers calling current_contacts() always get either
    the previous or the new tuple, never a partial one, and never wait for
    a cycle in progress.

    The next cycle is due one interval after the previous one started.
    This is a fixed-rate schedule, not a fixed-delay one: the wait does
    not begin when a cycle finishes. A cycle that overruns the interval
    delays the next one, which then starts as soon as it finishes. Cycles
    never overlap.

    Usage:
        scheduler = RefreshScheduler(
            DirectorySource(Path("~/contacts").expanduser()),
            RefreshConfig(refresh_interval_hours=6, match_category="Family"),
        )
        scheduler.start()

        for contact in scheduler.current_contacts():
            print(contact.full_name)

        scheduler.stop()

    Attributes:
        source: Collector queried once per cycle
        config: Default interval and match category
        parser: Card parser shared by all cycles
        diagnostics: History of parse failures
        stats: Cycle statistics
    """

    def __init__(
        self,
        source: SourceCollector,
        config: Optional[RefreshConfig] = None,
        parser: Optional[CardParser] = None,
        diagnostics: Optional[DiagnosticsLog] = None,
    ):
        self.source = source
        self.config = config or RefreshConfig()
        self.parser = parser or DEFAULT_PARSER
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticsLog()
        self.stats = RefreshStats()

        self._contacts: tuple[Contact, ...] = ()
        self._interval_hours = self.config.refresh_interval_hours
        self._interval_seconds = float(self._interval_hours * SECONDS_PER_HOUR)
        self._match_category = self.config.match_category
        self._stop_event = threading.Event()
        self._cycle_lock = threading.Lock()
        self._lifecycle_lock = threading.Lock()
        self._thread: threading.Thread | None = None
        # Signal handler types are complex in Python's type system
        self._original_sigterm_handler: signal.Handlers | None = None  # type: ignore[assignment]
        self._original_sigint_handler: signal.Handlers | None = None  # type: ignore[assignment]

    @property
    def interval_hours(self) -> int:
        return self._interval_hours

    @property
    def match_category(self) -> str:
        return self._match_category

    def current_contacts(self) -> tuple[Contact, ...]:
        """Return the most recently published contacts."""
        return self._contacts

    def start(
        self,
        interval_hours: Optional[int] = None,
        match_category: Optional[str] = None,
    ) -> None:
        """
        Start periodic refreshes on a background thread.

        The first cycle runs immediately.

        Args:
            interval_hours: Hours between cycle starts. Defaults to the config.
            match_category: Category filter. Defaults to the config.

        Raises:
            ConfigurationError: If the interval or category is invalid
            SchedulerError: If the scheduler was already started or stopped
        """
        interval = self._interval_hours if interval_hours is None else interval_hours
        validate_interval(interval)

        category = self._match_category if match_category is None else match_category
        if not isinstance(category, str):
            raise ConfigurationError(
                f"match_category must be a string, got {type(category).__name__}"
            )

        with self._lifecycle_lock:
            if self._thread is not None:
                raise SchedulerError("Refresh scheduler already started")
            if self._stop_event.is_set():
                raise SchedulerError(
                    "Refresh scheduler was stopped and cannot restart"
                )

            self._interval_hours = interval
            self._interval_seconds = interval * SECONDS_PER_HOUR
            self._match_category = category.strip()
            self.stats = RefreshStats()

            self._thread = threading.Thread(
                target=self._run, name="cardbook-refresh", daemon=True
            )
            self._thread.start()

    def stop(self) -> None:
        """
        Request scheduler shutdown.

        No further cycles are scheduled; a cycle already in progress runs
        to completion and still publishes its result. Safe to call from any
        thread, including from within a cycle.
        """
        logger.info("Stop requested")
        self._stop_event.set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the background thread to exit.

        Returns:
            True if the thread has exited (or never started), False on timeout
        """
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_cycle(self) -> bool:
        """
        Run one fetch / parse / filter / publish cycle synchronously.

        Cycles are serialized: a call made while another cycle is running
        waits for it to finish first.

        Returns:
            True if the source delivered records and a new set was
            published, False if the source failed and the previous set
            was kept.
        """
        with self._cycle_lock:
            self.stats.cycle_count += 1
            self.stats.last_cycle_at = datetime.now()
            logger.info(f"Starting refresh (cycle #{self.stats.cycle_count})")

            try:
                raw_records = list(self.source.fetch_raw_records())
            except SourceError as e:
                self._record_failure(str(e))
                logger.error(
                    f"Source failed: {e}; keeping {len(self._contacts)} "
                    f"published contact(s)"
                )
                return False
            except Exception as e:
                self._record_failure(str(e))
                logger.exception(
                    f"Unexpected source error: {e}; keeping {len(self._contacts)} "
                    f"published contact(s)"
                )
                return False

            logger.debug(f"{len(raw_records)} raw card(s) read")

            contacts, failures = self._parse_all(raw_records)
            logger.debug(
                f"Number of contacts loaded: {len(contacts)}, now filtering"
            )

            match = self._match_category
            kept = tuple(c for c in contacts if qualifies(c, match))

            # Single reference swap; readers see the old or the new tuple
            self._contacts = kept

            self.stats.cycle_success_count += 1
            self.stats.last_cycle_success = True
            self.stats.last_error = None
            self.stats.records_read = len(raw_records)
            self.stats.contacts_parsed = len(contacts)
            self.stats.contacts_kept = len(kept)
            self.stats.parse_failures = failures

            logger.info(
                f"Refresh complete: {len(kept)} contact(s) kept of "
                f"{len(raw_records)} read ({failures} unparsable)"
            )
            return True

    def _parse_all(self, raw_records: list[str]) -> tuple[list[Contact], int]:
        """Parse records in input order, skipping the ones that fail."""
        contacts: list[Contact] = []
        failures = 0

        for raw in raw_records:
            try:
                contacts.append(self.parser.parse(raw))
            except ParseError as e:
                failures += 1
                record_id = e.record_id or fingerprint(raw or "")
                self.diagnostics.record(record_id, raw, str(e))
                logger.warning(f"Error decoding vCard {record_id[:12]}: {e}")
            except Exception as e:
                failures += 1
                record_id = fingerprint(raw or "")
                self.diagnostics.record(record_id, raw, f"Unexpected error: {e}")
                logger.exception(f"Unexpected error decoding vCard {record_id[:12]}")

        return contacts, failures

    def _record_failure(self, message: str) -> None:
        self.stats.cycle_error_count += 1
        self.stats.last_cycle_success = False
        self.stats.last_error = message

    def _run(self) -> None:
        """Worker loop: run a cycle, then wait out the rest of the interval."""
        logger.info(
            f"Refresh scheduler started (interval: {self._interval_hours}h, "
            f"category: {self._match_category or '<any>'})"
        )

        try:
            while not self._stop_event.is_set():
                cycle_started = time.monotonic()

                try:
                    self.run_cycle()
                except Exception as e:
                    # Keep the worker alive; the next cycle may succeed
                    with self._cycle_lock:
                        self._record_failure(str(e))
                    logger.exception(f"Refresh cycle failed: {e}")

                # Fixed rate: the wait is measured from the cycle start
                elapsed = time.monotonic() - cycle_started
                delay = max(0.0, self._interval_seconds - elapsed)
                if delay == 0.0:
                    logger.warning(
                        f"Refresh took {elapsed:.1f}s, longer than the interval; "
                        f"starting the next cycle now"
                    )
                else:
                    logger.debug(f"Next refresh in {delay:.0f} seconds")

                if self._stop_event.wait(delay):
                    break
        finally:
            logger.info("Refresh scheduler stopped")

    def _setup_signal_handlers(self) -> None:
        """Install SIGTERM and SIGINT handlers that stop the scheduler."""
        self._original_sigterm_handler = signal.signal(  # type: ignore[assignment]
            signal.SIGTERM, self._signal_handler
        )
        self._original_sigint_handler = signal.signal(  # type: ignore[assignment]
            signal.SIGINT, self._signal_handler
        )
        logger.debug("Signal handlers installed for SIGTERM and SIGINT")

    def _restore_signal_handlers(self) -> None:
        """Restore original signal handlers."""
        if self._original_sigterm_handler is not None:
            signal.signal(signal.SIGTERM, self._original_sigterm_handler)
        if self._original_sigint_handler is not None:
            signal.signal(signal.SIGINT, self._original_sigint_handler)
        logger.debug("Signal handlers restored")

    def _signal_handler(self, signum: int, frame: object) -> None:
        signal_name = signal.Signals(signum).name
        logger.info(f"Received {signal_name}, initiating graceful shutdown...")
        self.stop()

    def run_until_signal(
        self,
        interval_hours: Optional[int] = None,
        match_category: Optional[str] = None,
    ) -> None:
        """
        Start the scheduler and block until SIGTERM or SIGINT.

        Must be called from the main thread. Returns once the in-flight
        cycle, if any, has finished.

        Raises:
            ConfigurationError: If the interval or category is invalid
            SchedulerError: If the scheduler was already started or stopped
        """
        self.start(interval_hours, match_category)
        self._setup_signal_handlers()
        try:
            while not self.join(timeout=1.0):
                pass
        finally:
            self._restore_signal_handlers()


__all__ = [
    "RefreshScheduler",
    "RefreshStats",
    "SchedulerError",
    "SECONDS_PER_HOUR",
]
