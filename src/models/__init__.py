from .payment import (
    InvalidTransitionError,
    PaymentRecord,
    PaymentRequest,
    PaymentResponse,
    PaymentStatus,
    RejectedPaymentResponse,
    project,
)
from .authorization import AuthorizationRequest, AuthorizationResponse
from .attempt import AuthorizationAttempt

__all__ = [
    "PaymentRequest", "PaymentRecord", "PaymentStatus",
    "PaymentResponse", "RejectedPaymentResponse", "InvalidTransitionError", "project",
    "AuthorizationRequest", "AuthorizationResponse",
    "AuthorizationAttempt",
]
