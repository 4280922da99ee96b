import logging
import threading
import time
from typing import Protocol

from src.bank_client.errors import AuthorizationCancelledError, BankClientError
from src.bank_client.logger import AuthorizationLogger
from src.bank_client.retry import RetryPolicy
from src.bank_client.transport import HttpBankTransport
from src.config import GatewaySettings
from src.models.authorization import AuthorizationRequest, AuthorizationResponse

logger = logging.getLogger(__name__)


class AuthorizationClient(Protocol):
    def authorize(
        self, request: AuthorizationRequest, cancel_event: threading.Event | None = None
    ) -> AuthorizationResponse: ...


class RetryingAuthorizationClient:
    """Wraps any AuthorizationClient with the retry policy.

    Errors the policy deems retryable are retried with exponential backoff
    until the budget is spent, then the last error is raised. Anything else
    propagates at once. Cancellation is per call: setting the ``cancel_event``
    passed to ``authorize`` stops further attempts for that call only; an
    attempt already in flight is left to finish.
    """

    def __init__(self, inner: AuthorizationClient, policy: RetryPolicy | None = None):
        self.inner = inner
        self.policy = policy or RetryPolicy()

    def authorize(
        self, request: AuthorizationRequest, cancel_event: threading.Event | None = None
    ) -> AuthorizationResponse:
        logger.info(
            "Initiating bank transaction with id: %s for amount %s %s",
            request.correlation_id,
            request.amount,
            request.currency,
        )
        cancel_event = cancel_event or threading.Event()
        start = time.monotonic()
        retries_done = 0

        while True:
            if cancel_event.is_set():
                raise AuthorizationCancelledError(
                    f"Authorization for {request.correlation_id} cancelled after {retries_done} retries"
                )
            try:
                response = self.inner.authorize(request)
            except BankClientError as e:
                if not self.policy.should_retry(e) or not self.policy.has_attempts_remaining(retries_done):
                    logger.error(
                        "Giving up on bank transaction %s after %d retries: %s",
                        request.correlation_id,
                        retries_done,
                        e,
                    )
                    raise
                retries_done += 1
                delay = self.policy.next_delay(retries_done)
                logger.warning("Delaying for %.0fms, then making retry %d.", delay * 1000, retries_done)
                if delay > 0 and cancel_event.wait(delay):
                    raise AuthorizationCancelledError(
                        f"Authorization for {request.correlation_id} cancelled during backoff"
                    ) from e
                continue

            logger.info(
                "Bank transaction completed in %.0fms. Transaction ID: %s, Authorized: %s, AuthorizationCode: %s",
                (time.monotonic() - start) * 1000,
                request.correlation_id,
                response.authorized,
                response.authorization_code,
            )
            return response


def build_bank_client(
    settings: GatewaySettings,
    attempt_log: AuthorizationLogger | None = None,
    delay_factor: float = 1.0,
) -> RetryingAuthorizationClient:
    transport = HttpBankTransport(
        base_url=settings.bank_url,
        timeout_seconds=settings.bank_timeout_seconds,
        attempt_log=attempt_log,
    )
    policy = RetryPolicy(
        max_retries=settings.bank_max_retries,
        backoff_base=settings.bank_backoff_base,
        delay_factor=delay_factor,
    )
    return RetryingAuthorizationClient(transport, policy)
