from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Any

from src.utils.cards import last_four, mask_card_number


class PaymentStatus(Enum):
    INITIATED = "Initiated"
    COMPLETED = "Completed"
    FAILED = "Failed"


ALLOWED_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.INITIATED: frozenset({PaymentStatus.COMPLETED, PaymentStatus.FAILED}),
    PaymentStatus.COMPLETED: frozenset(),
    PaymentStatus.FAILED: frozenset(),
}


class InvalidTransitionError(ValueError):
    """Raised when a payment status change is not in ALLOWED_TRANSITIONS."""

    def __init__(self, current: PaymentStatus, new: PaymentStatus):
        super().__init__(f"Invalid transition: {current.value} -> {new.value}")
        self.current = current
        self.new = new


def validate_transition(current: PaymentStatus, new: PaymentStatus) -> None:
    if new not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(current, new)


REQUEST_FIELDS = (
    "merchant_id",
    "merchant_transaction_key",
    "card_number",
    "expiry_month",
    "expiry_year",
    "currency",
    "amount",
    "cvv",
)


@dataclass(frozen=True)
class PaymentRequest:
    merchant_id: str
    merchant_transaction_key: str
    card_number: str
    expiry_month: int
    expiry_year: int
    currency: str
    amount: int  # minor currency unit
    cvv: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PaymentRequest":
        """Build a request from a decoded JSON body.

        Missing keys become None so the validator can report each of them.
        """
        return cls(**{name: data.get(name) for name in REQUEST_FIELDS})


@dataclass(frozen=True)
class PaymentRecord:
    """Stored payment. Mutations return a new record; the store replaces it whole."""

    merchant_id: str
    merchant_transaction_key: str
    card_number: str
    expiry_month: int
    expiry_year: int
    currency: str
    amount: int
    cvv: str
    status: PaymentStatus = PaymentStatus.INITIATED
    payment_id: str | None = None
    authorization_code: str | None = None
    authorized: bool | None = None

    @classmethod
    def from_request(cls, request: PaymentRequest) -> "PaymentRecord":
        return cls(**{name: getattr(request, name) for name in REQUEST_FIELDS})

    def complete(self, authorized: bool, authorization_code: str) -> "PaymentRecord":
        validate_transition(self.status, PaymentStatus.COMPLETED)
        return replace(
            self,
            status=PaymentStatus.COMPLETED,
            authorized=authorized,
            authorization_code=authorization_code,
        )

    def fail(self) -> "PaymentRecord":
        validate_transition(self.status, PaymentStatus.FAILED)
        return replace(
            self,
            status=PaymentStatus.FAILED,
            authorized=None,
            authorization_code=None,
        )

    def __repr__(self) -> str:
        return (
            f"PaymentRecord(payment_id={self.payment_id!r}, status={self.status.value}, "
            f"card={mask_card_number(self.card_number)}, amount={self.amount} {self.currency})"
        )


@dataclass(frozen=True)
class PaymentResponse:
    id: str
    status: str  # "Authorized" or "Declined"
    last_four_card_digits: str
    expiry_month: int
    expiry_year: int
    currency: str
    amount: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RejectedPaymentResponse:
    errors: list[str]
    status: str = "Rejected"

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status, "errors": list(self.errors)}


def project(record: PaymentRecord) -> PaymentResponse:
    """Project a stored record to its outward response shape."""
    return PaymentResponse(
        id=record.payment_id,
        status="Authorized" if record.authorized is True else "Declined",
        last_four_card_digits=last_four(record.card_number),
        expiry_month=record.expiry_month,
        expiry_year=record.expiry_year,
        currency=record.currency,
        amount=record.amount,
    )
