import threading
from collections import deque

from src.models.attempt import AuthorizationAttempt


class AuthorizationLogger:
    """Thread-safe log of the most recent calls made to the bank.

    Holds at most ``max_attempts`` entries; the oldest are dropped first.
    """

    DEFAULT_MAX_ATTEMPTS = 10_000

    def __init__(self, max_attempts: int = DEFAULT_MAX_ATTEMPTS):
        self._attempts: deque[AuthorizationAttempt] = deque(maxlen=max_attempts)
        self._lock = threading.Lock()

    def log(self, attempt: AuthorizationAttempt) -> None:
        with self._lock:
            self._attempts.append(attempt)

    def get_attempts(self, correlation_id: str | None = None) -> list[AuthorizationAttempt]:
        with self._lock:
            if correlation_id is None:
                return list(self._attempts)
            return [a for a in self._attempts if a.correlation_id == correlation_id]

    def get_failed_attempts(self) -> list[AuthorizationAttempt]:
        with self._lock:
            return [a for a in self._attempts if a.failed]

    def clear(self) -> None:
        with self._lock:
            self._attempts.clear()
