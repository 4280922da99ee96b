import uuid
from datetime import date

from src.models.authorization import AuthorizationResponse
from src.models.payment import PaymentRecord, PaymentRequest, PaymentStatus


class PaymentRequestFactory:
    """Factory for creating valid PaymentRequest instances with sensible defaults."""

    @staticmethod
    def create(**overrides) -> PaymentRequest:
        defaults = {
            "merchant_id": f"merch_{uuid.uuid4().hex[:8]}",
            "merchant_transaction_key": f"txn_{uuid.uuid4().hex[:16]}",
            "card_number": "1234567890123456",
            "expiry_month": 12,
            "expiry_year": date.today().year + 1,
            "currency": "USD",
            "amount": 1000,
            "cvv": "123",
        }
        defaults.update(overrides)
        return PaymentRequest(**defaults)

    @staticmethod
    def create_payload(**overrides) -> dict:
        """Same defaults, as the JSON body a merchant would POST."""
        request = PaymentRequestFactory.create(**overrides)
        return {name: getattr(request, name) for name in request.__dataclass_fields__}


class PaymentRecordFactory:
    """Factory for creating PaymentRecord instances in a given state."""

    @staticmethod
    def create(status: PaymentStatus = PaymentStatus.INITIATED, **overrides) -> PaymentRecord:
        authorized = overrides.pop("authorized", True)
        authorization_code = overrides.pop("authorization_code", "AUTH123")
        record = PaymentRecord.from_request(PaymentRequestFactory.create(**overrides))
        if status is PaymentStatus.COMPLETED:
            record = record.complete(authorized, authorization_code)
        elif status is PaymentStatus.FAILED:
            record = record.fail()
        return record


class AuthorizationResponseFactory:
    @staticmethod
    def authorized(code: str = "AUTH123") -> AuthorizationResponse:
        return AuthorizationResponse(authorized=True, authorization_code=code)

    @staticmethod
    def declined() -> AuthorizationResponse:
        return AuthorizationResponse(authorized=False, authorization_code="")
