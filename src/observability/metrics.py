import threading
import time

OUTCOMES = ("authorized", "declined", "failed", "rejected")


class PaymentMetrics:
    """Counts payment outcomes over a rolling time window."""

    def __init__(self, window_seconds: float = 300):
        self._window_seconds = window_seconds
        self._events: dict[str, list[float]] = {outcome: [] for outcome in OUTCOMES}  # timestamps
        self._lock = threading.Lock()

    def record(self, outcome: str) -> None:
        if outcome not in self._events:
            raise ValueError(f"Unknown payment outcome: {outcome}")
        with self._lock:
            self._events[outcome].append(time.monotonic())

    def record_authorized(self) -> None:
        self.record("authorized")

    def record_declined(self) -> None:
        self.record("declined")

    def record_failed(self) -> None:
        self.record("failed")

    def record_rejected(self) -> None:
        self.record("rejected")

    def _prune(self, now: float) -> None:
        cutoff = now - self._window_seconds
        for outcome, stamps in self._events.items():
            self._events[outcome] = [t for t in stamps if t >= cutoff]

    def count_in_window(self, outcome: str) -> int:
        with self._lock:
            self._prune(time.monotonic())
            return len(self._events[outcome])

    def total_in_window(self) -> int:
        """Payments that reached the bank (validation rejections excluded)."""
        with self._lock:
            self._prune(time.monotonic())
            return sum(len(self._events[o]) for o in ("authorized", "declined", "failed"))

    def failure_rate(self) -> float:
        """Share of processed payments that ended Failed (0.0 to 1.0)."""
        with self._lock:
            self._prune(time.monotonic())
            failed = len(self._events["failed"])
            total = failed + len(self._events["authorized"]) + len(self._events["declined"])
            if total == 0:
                return 0.0
            return failed / total

    def snapshot(self) -> dict:
        with self._lock:
            self._prune(time.monotonic())
            counts = {outcome: len(stamps) for outcome, stamps in self._events.items()}
        processed = counts["authorized"] + counts["declined"] + counts["failed"]
        return {
            "window_seconds": self._window_seconds,
            "counts": counts,
            "failure_rate": counts["failed"] / processed if processed else 0.0,
        }

    def reset(self) -> None:
        with self._lock:
            for stamps in self._events.values():
                stamps.clear()
