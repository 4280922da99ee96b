from src.bank_client.errors import TransientBankError


class RetryPolicy:
    """Retry decisions and exponential backoff for bank authorization calls."""

    DEFAULT_MAX_RETRIES = 3
    DEFAULT_BACKOFF_BASE = 2.0  # 2s, 4s, 8s

    # Status classes worth another attempt: request timeout, throttling, 5xx
    RETRY_CODES = {408, 429}

    def __init__(
        self,
        max_retries: int | None = None,
        backoff_base: float | None = None,
        delay_factor: float = 1.0,
    ):
        self.max_retries = max_retries if max_retries is not None else self.DEFAULT_MAX_RETRIES
        self.backoff_base = backoff_base if backoff_base is not None else self.DEFAULT_BACKOFF_BASE
        self.delay_factor = delay_factor

    @classmethod
    def is_transient_status(cls, status_code: int | None) -> bool:
        """Whether an HTTP status should be treated as a transient failure.

        Returns True for:
        - None (connection error / timeout)
        - 408 and 429
        - 5xx server errors
        """
        if status_code is None:
            return True
        if status_code in cls.RETRY_CODES:
            return True
        return status_code >= 500

    def should_retry(self, error: Exception) -> bool:
        return isinstance(error, TransientBankError)

    def next_delay(self, attempt: int) -> float:
        """Seconds to wait before retry number ``attempt`` (1-indexed)."""
        return float(self.backoff_base ** attempt) * self.delay_factor

    def has_attempts_remaining(self, retries_done: int) -> bool:
        return retries_done < self.max_retries
