from .errors import (
    DuplicatePaymentError,
    InvalidPaymentIdError,
    PaymentGatewayError,
    PaymentNotFoundError,
    PaymentProcessingError,
    PaymentValidationError,
)
from .processor import PaymentProcessor
from .repository import InMemoryPaymentRepository, PaymentRepository
from .validation import PaymentRequestValidator

__all__ = [
    "PaymentProcessor",
    "PaymentRequestValidator",
    "PaymentRepository", "InMemoryPaymentRepository",
    "PaymentGatewayError", "PaymentValidationError", "PaymentNotFoundError",
    "InvalidPaymentIdError", "DuplicatePaymentError", "PaymentProcessingError",
]
