import logging
import threading
import uuid
from collections.abc import Callable
from dataclasses import replace
from typing import Protocol

from src.gateway.errors import DuplicatePaymentError, InvalidPaymentIdError, PaymentNotFoundError
from src.models.payment import PaymentRecord

logger = logging.getLogger(__name__)


class PaymentRepository(Protocol):
    def create(self, record: PaymentRecord) -> str: ...

    def fetch(self, payment_id: str) -> PaymentRecord | None: ...

    def update(self, record: PaymentRecord) -> None: ...


def _new_payment_id() -> str:
    return str(uuid.uuid4())


class InMemoryPaymentRepository:
    """Thread-safe in-memory store of payment records keyed by generated ID."""

    def __init__(self, id_factory: Callable[[], str] = _new_payment_id):
        self._payments: dict[str, PaymentRecord] = {}
        self._lock = threading.Lock()
        self._id_factory = id_factory

    def create(self, record: PaymentRecord) -> str:
        """Insert ``record`` under a freshly generated ID and return the ID."""
        payment_id = self._id_factory()
        with self._lock:
            if payment_id in self._payments:
                logger.warning("Failed to add payment. A payment with ID %s already exists", payment_id)
                raise DuplicatePaymentError(payment_id)
            self._payments[payment_id] = replace(record, payment_id=payment_id)
        logger.info("Successfully added payment with ID: %s", payment_id)
        return payment_id

    def fetch(self, payment_id: str) -> PaymentRecord | None:
        if not payment_id or not payment_id.strip():
            logger.warning("Attempted to get payment with null or empty ID")
            raise InvalidPaymentIdError("ID cannot be null or empty")
        with self._lock:
            record = self._payments.get(payment_id)
        if record is None:
            logger.warning("Payment with ID: %s not found", payment_id)
        return record

    def update(self, record: PaymentRecord) -> None:
        """Replace the stored record with ``record`` as a whole."""
        payment_id = record.payment_id
        if not payment_id or not payment_id.strip():
            logger.error("Attempted to update payment with null or empty ID")
            raise InvalidPaymentIdError()
        with self._lock:
            if payment_id not in self._payments:
                logger.warning("Failed to update payment. Payment with ID: %s not found", payment_id)
                raise PaymentNotFoundError(payment_id)
            self._payments[payment_id] = record
        logger.info("Successfully updated payment with ID: %s, status %s", payment_id, record.status.value)

    def __len__(self) -> int:
        with self._lock:
            return len(self._payments)

    def clear(self) -> None:
        with self._lock:
            self._payments.clear()
