class BankClientError(Exception):
    """Base class for failures talking to the bank."""


class TransientBankError(BankClientError):
    """Network failure or retryable HTTP status. Retried by RetryingAuthorizationClient."""

    def __init__(self, message: str, status_code: int | None = None, error: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.error = error


class BankRejectedRequestError(BankClientError):
    """The bank answered with a non-retryable HTTP error status."""

    def __init__(self, status_code: int, body: str = ""):
        super().__init__(f"Bank API returned non-success status code: {status_code}")
        self.status_code = status_code
        self.body = body


class MalformedBankResponseError(BankClientError):
    """A 2xx response whose body is not an authorization outcome."""


class AuthorizationCancelledError(BankClientError):
    """The caller cancelled between retry attempts."""
