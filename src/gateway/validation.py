from collections.abc import Callable, Iterable
from datetime import date

from src.gateway.errors import PaymentValidationError
from src.models.payment import PaymentRequest


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_digits(value: str) -> bool:
    return value.isascii() and value.isdigit()


class PaymentRequestValidator:
    """Checks a PaymentRequest against the card, expiry, currency, amount and CVV rules.

    Every field is evaluated so a single rejection lists all of its reasons.
    """

    def __init__(self, allowed_currencies: Iterable[str], today: Callable[[], date] = date.today):
        self.allowed_currencies = frozenset(allowed_currencies)
        self._today = today

    def validate(self, request: PaymentRequest) -> list[str]:
        """Return the validation failures for ``request`` in rule order (empty if valid)."""
        today = self._today()
        errors: list[str] = []
        errors.extend(self._check_card_number(request.card_number))
        errors.extend(self._check_expiry_year(request.expiry_year, today))
        errors.extend(self._check_expiry_month(request.expiry_month))
        errors.extend(self._check_expiry_date(request.expiry_month, request.expiry_year, today))
        errors.extend(self._check_currency(request.currency))
        errors.extend(self._check_amount(request.amount))
        errors.extend(self._check_cvv(request.cvv))
        return errors

    def ensure_valid(self, request: PaymentRequest) -> None:
        errors = self.validate(request)
        if errors:
            raise PaymentValidationError(errors)

    def _check_card_number(self, card_number) -> list[str]:
        if not card_number:
            return ["Card number is required."]
        if not isinstance(card_number, str):
            return ["Card number must only contain numeric characters."]
        errors = []
        if not 14 <= len(card_number) <= 19:
            errors.append("Card number must be between 14 and 19 characters long.")
        if not _is_digits(card_number):
            errors.append("Card number must only contain numeric characters.")
        return errors

    def _check_expiry_year(self, year, today: date) -> list[str]:
        if not year:
            return ["Expiry year is required."]
        if not _is_int(year):
            return ["Expiry year must be a number."]
        if year < today.year:
            return ["Expiry year must be the current year or later."]
        return []

    def _check_expiry_month(self, month) -> list[str]:
        if not month:
            return ["Expiry month is required."]
        if not _is_int(month) or not 1 <= month <= 12:
            return ["Expiry month must be between 1 and 12."]
        return []

    def _check_expiry_date(self, month, year, today: date) -> list[str]:
        # Only judged once month and year are individually usable; the
        # per-field rules already report anything else.
        if not (_is_int(month) and _is_int(year)) or not 1 <= month <= 12 or year <= 0:
            return []
        # A card is valid through the last day of its expiry month.
        if (year, month) < (today.year, today.month):
            return ["The expiry date must be in the future."]
        return []

    def _check_currency(self, currency) -> list[str]:
        if not currency:
            return ["Currency is required."]
        if not isinstance(currency, str):
            return ["Currency must be 3 characters long."]
        errors = []
        if len(currency) != 3:
            errors.append("Currency must be 3 characters long.")
        if currency not in self.allowed_currencies:
            accepted = ", ".join(sorted(self.allowed_currencies))
            errors.append(f"Currency is not valid. Accepted currencies are: {accepted}")
        return errors

    def _check_amount(self, amount) -> list[str]:
        if amount is None:
            return ["Amount is required."]
        if not _is_int(amount):
            return ["Amount must be an integer representing the minor currency unit."]
        if amount <= 0:
            return ["Amount must be greater than 0."]
        return []

    def _check_cvv(self, cvv) -> list[str]:
        if not cvv:
            return ["CVV is required."]
        if not isinstance(cvv, str):
            return ["CVV must only contain numeric characters."]
        errors = []
        if not 3 <= len(cvv) <= 4:
            errors.append("CVV must be 3 or 4 characters long.")
        if not _is_digits(cvv):
            errors.append("CVV must only contain numeric characters.")
        return errors
