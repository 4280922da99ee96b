class PaymentGatewayError(Exception):
    """Base class for errors raised by the payment pipeline."""


class PaymentValidationError(PaymentGatewayError):
    """The request broke one or more validation rules. No record was created."""

    def __init__(self, errors: list[str]):
        super().__init__(f"Payment request failed validation: {'; '.join(errors)}")
        self.errors = list(errors)


class PaymentNotFoundError(PaymentGatewayError):
    def __init__(self, payment_id: str):
        super().__init__(f"Payment not found for ID: {payment_id}")
        self.payment_id = payment_id


class InvalidPaymentIdError(PaymentGatewayError, ValueError):
    def __init__(self, message: str = "Payment ID cannot be null or empty"):
        super().__init__(message)


class DuplicatePaymentError(PaymentGatewayError):
    def __init__(self, payment_id: str):
        super().__init__(f"A payment with ID {payment_id} already exists.")
        self.payment_id = payment_id


class PaymentProcessingError(PaymentGatewayError):
    """Something failed after the payment record was created.

    The original exception is kept on ``cause`` (and chained as ``__cause__``).
    """

    def __init__(self, message: str, cause: BaseException, payment_id: str | None = None):
        super().__init__(message)
        self.cause = cause
        self.payment_id = payment_id
