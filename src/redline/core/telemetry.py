"""Parser telemetry - success/fallback/failure counters."""

import threading

from redline.core.models import ParseOutcome, TelemetrySnapshot


class ParserTelemetry:
    """
    Running counters for parse outcomes.

    Safe to share between threads; every update happens under a lock so
    concurrent parses never lose an increment. Each parser owns or is
    handed one of these, so tests can isolate counts.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.total_attempts = 0
        self.success_count = 0
        self.fallback_success_count = 0
        self.failure_count = 0

    def record(self, outcome: ParseOutcome) -> None:
        """Count one top-level parse call."""
        with self._lock:
            self.total_attempts += 1
            if outcome == ParseOutcome.SUCCESS:
                self.success_count += 1
            elif outcome == ParseOutcome.FALLBACK:
                self.fallback_success_count += 1
            else:
                self.failure_count += 1

    def reset(self) -> None:
        """Zero all counters."""
        with self._lock:
            self.total_attempts = 0
            self.success_count = 0
            self.fallback_success_count = 0
            self.failure_count = 0

    def snapshot(self) -> TelemetrySnapshot:
        """Consistent read of the counters with derived rates."""
        with self._lock:
            total = self.total_attempts
            success = self.success_count
            fallback = self.fallback_success_count
            failure = self.failure_count

        return TelemetrySnapshot(
            total_attempts=total,
            success_count=success,
            fallback_success_count=fallback,
            failure_count=failure,
            success_rate=_percent(success + fallback, total),
            primary_success_rate=_percent(success, total),
            fallback_success_rate=_percent(fallback, total),
        )


def _percent(count: int, total: int) -> str:
    if total == 0:
        return "0.00"
    return f"{count / total * 100:.2f}"
