import logging
import threading
from dataclasses import replace

from src.bank_client.client import AuthorizationClient
from src.gateway.errors import PaymentNotFoundError, PaymentProcessingError, PaymentValidationError
from src.gateway.repository import PaymentRepository
from src.gateway.validation import PaymentRequestValidator
from src.models.authorization import AuthorizationRequest
from src.models.payment import PaymentRecord, PaymentRequest, PaymentResponse, project
from src.observability.metrics import PaymentMetrics
from src.utils.cards import mask_card_number

logger = logging.getLogger(__name__)


class PaymentProcessor:
    """Runs a payment through validation, the bank and the record store.

    Per payment: validate, create an Initiated record, authorize with the
    bank, then persist the record as Completed (bank answered, approved or
    declined) or Failed (anything raised after the record was created).
    """

    def __init__(
        self,
        validator: PaymentRequestValidator,
        repository: PaymentRepository,
        bank_client: AuthorizationClient,
        metrics: PaymentMetrics | None = None,
    ):
        self.validator = validator
        self.repository = repository
        self.bank_client = bank_client
        self.metrics = metrics

    def process_payment(
        self, request: PaymentRequest, cancel_event: threading.Event | None = None
    ) -> PaymentResponse:
        """Authorize ``request`` and return the projected outcome.

        Setting ``cancel_event`` abandons this payment's bank call between
        retries; the record is then marked Failed like any other bank failure.

        Raises:
            PaymentValidationError: the request is invalid; nothing was stored.
            PaymentProcessingError: the bank call or persistence failed after
                the record was created. The record is marked Failed.
        """
        logger.info("Processing payment: %s", request.merchant_transaction_key)
        try:
            self.validator.ensure_valid(request)
        except PaymentValidationError as e:
            logger.warning(
                "Payment validation failed: %s (%d errors)", request.merchant_transaction_key, len(e.errors)
            )
            self._record_outcome("rejected")
            raise

        record = PaymentRecord.from_request(request)
        try:
            payment_id = self.repository.create(record)
        except Exception as e:
            logger.error("Could not create payment record for %s", request.merchant_transaction_key)
            self._record_outcome("failed")
            raise PaymentProcessingError(
                f"Error creating payment record for merchant key: {request.merchant_transaction_key}", e
            ) from e

        initiated = replace(record, payment_id=payment_id)
        logger.info(
            "Payment initiated with Id: %s, Merchant Key: %s, Card: %s",
            payment_id,
            request.merchant_transaction_key,
            mask_card_number(request.card_number),
        )

        try:
            bank_response = self.bank_client.authorize(
                AuthorizationRequest.from_record(initiated), cancel_event=cancel_event
            )
            logger.info("Bank response received for Payment Id: %s", payment_id)
            completed = initiated.complete(bank_response.authorized, bank_response.authorization_code)
            self.repository.update(completed)
        except Exception as e:
            logger.error("Error processing payment with Id: %s: %s", payment_id, e)
            self._mark_failed(initiated)
            self._record_outcome("failed")
            raise PaymentProcessingError(f"Error processing payment with Id: {payment_id}", e, payment_id) from e

        logger.info("Payment updated with Id: %s, Status: %s", payment_id, completed.status.value)
        self._record_outcome("authorized" if completed.authorized else "declined")
        return project(completed)

    def get_payment(self, payment_id: str) -> PaymentResponse:
        logger.info("Retrieving payment details for Payment ID: %s", payment_id)
        record = self.repository.fetch(payment_id)
        if record is None:
            raise PaymentNotFoundError(payment_id)
        return project(record)

    def _mark_failed(self, initiated: PaymentRecord) -> None:
        # Best effort: a failure here is logged and the caller still gets the original cause.
        try:
            self.repository.update(initiated.fail())
        except Exception:
            logger.exception("Could not persist Failed status for payment %s", initiated.payment_id)

    def _record_outcome(self, outcome: str) -> None:
        if self.metrics is not None:
            self.metrics.record(outcome)
