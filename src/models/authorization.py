from dataclasses import dataclass, field
from typing import Any

from src.models.payment import PaymentRecord
from src.utils.cards import mask_card_number


@dataclass(frozen=True)
class AuthorizationRequest:
    card_number: str
    expiry_date: str  # MM/YYYY
    currency: str
    amount: int
    cvv: str
    # Local tracing only, never part of the bank payload.
    correlation_id: str = field(default="", compare=False)

    @classmethod
    def from_record(cls, record: PaymentRecord) -> "AuthorizationRequest":
        return cls(
            card_number=record.card_number,
            expiry_date=f"{record.expiry_month:02d}/{record.expiry_year}",
            currency=record.currency,
            amount=record.amount,
            cvv=record.cvv,
            correlation_id=record.payment_id or "",
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "card_number": self.card_number,
            "expiry_date": self.expiry_date,
            "currency": self.currency,
            "amount": self.amount,
            "cvv": self.cvv,
        }

    def __repr__(self) -> str:
        return (
            f"AuthorizationRequest(correlation_id={self.correlation_id!r}, "
            f"card={mask_card_number(self.card_number)}, amount={self.amount} {self.currency})"
        )


@dataclass(frozen=True)
class AuthorizationResponse:
    authorized: bool
    authorization_code: str = ""

    @classmethod
    def from_payload(cls, payload: Any) -> "AuthorizationResponse":
        """Interpret a decoded bank response body.

        Raises ValueError when the body does not describe an authorization
        outcome.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
        authorized = payload.get("authorized")
        if not isinstance(authorized, bool):
            raise ValueError("'authorized' must be a boolean")
        code = payload.get("authorization_code")
        if code is None:
            code = ""
        if not isinstance(code, str):
            raise ValueError("'authorization_code' must be a string")
        return cls(authorized=authorized, authorization_code=code)
