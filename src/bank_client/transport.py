import json
import logging
import threading
import time
import uuid
from datetime import datetime, timezone

import requests

from src.bank_client.errors import (
    AuthorizationCancelledError,
    BankRejectedRequestError,
    MalformedBankResponseError,
    TransientBankError,
)
from src.bank_client.logger import AuthorizationLogger
from src.bank_client.retry import RetryPolicy
from src.models.attempt import AuthorizationAttempt
from src.models.authorization import AuthorizationRequest, AuthorizationResponse

logger = logging.getLogger(__name__)

PAYMENT_ENDPOINT = "/payments"
CORRELATION_HEADER = "X-Correlation-ID"


class HttpBankTransport:
    """Sends one authorization request to the bank over HTTP.

    No retries happen here; wrap it in RetryingAuthorizationClient for that.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10,
        attempt_log: AuthorizationLogger | None = None,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.attempt_log = attempt_log
        self.session = session or requests.Session()

    @property
    def url(self) -> str:
        return f"{self.base_url}{PAYMENT_ENDPOINT}"

    def authorize(
        self, request: AuthorizationRequest, cancel_event: threading.Event | None = None
    ) -> AuthorizationResponse:
        if cancel_event is not None and cancel_event.is_set():
            raise AuthorizationCancelledError(f"Authorization for {request.correlation_id} cancelled before sending")
        headers = {"Content-Type": "application/json"}
        if request.correlation_id:
            headers[CORRELATION_HEADER] = request.correlation_id

        start = time.monotonic()
        status_code = None
        error = None
        resp = None

        try:
            resp = self.session.post(
                self.url,
                data=json.dumps(request.to_payload()),
                headers=headers,
                timeout=self.timeout_seconds,
            )
            status_code = resp.status_code
        except requests.exceptions.Timeout:
            error = "timeout"
        except requests.exceptions.ConnectionError:
            error = "connection_error"
        except requests.exceptions.RequestException as e:
            error = str(e)

        elapsed_ms = (time.monotonic() - start) * 1000
        self._record(request, status_code, elapsed_ms, error)

        if resp is None:
            logger.error(
                "Bank API is not reachable for transaction %s: %s", request.correlation_id, error
            )
            raise TransientBankError(f"Bank request failed: {error}", error=error)

        if not 200 <= status_code < 300:
            logger.error(
                "Bank API returned non-success status code. Status: %d, Content: %s",
                status_code,
                resp.text[:200],
            )
            if RetryPolicy.is_transient_status(status_code):
                raise TransientBankError(
                    f"Bank API returned retryable status code: {status_code}",
                    status_code=status_code,
                )
            raise BankRejectedRequestError(status_code, resp.text)

        try:
            bank_response = AuthorizationResponse.from_payload(resp.json())
        except ValueError as e:
            # requests' JSONDecodeError is a ValueError as well
            logger.error("Error deserializing bank response for transaction %s", request.correlation_id)
            raise MalformedBankResponseError(
                f"Bank response could not be interpreted: {e}"
            ) from e

        logger.info("Bank API responded in %.0fms", elapsed_ms)
        return bank_response

    def _record(self, request, status_code, elapsed_ms, error) -> None:
        if self.attempt_log is None:
            return
        self.attempt_log.log(
            AuthorizationAttempt(
                attempt_id=f"att_{uuid.uuid4().hex[:16]}",
                correlation_id=request.correlation_id,
                url=self.url,
                status_code=status_code,
                timestamp=datetime.now(timezone.utc),
                response_time_ms=elapsed_ms,
                error=error,
            )
        )
