"""Integration tests for bank authorization retry behavior."""

import pytest

from src.bank_client.client import RetryingAuthorizationClient
from src.bank_client.errors import BankRejectedRequestError, MalformedBankResponseError, TransientBankError
from src.bank_client.retry import RetryPolicy
from src.models.authorization import AuthorizationRequest


pytestmark = pytest.mark.integration


def _request(correlation_id: str = "pay-retry-1") -> AuthorizationRequest:
    return AuthorizationRequest(
        card_number="1234567890123457",
        expiry_date="01/2028",
        currency="USD",
        amount=1000,
        cvv="123",
        correlation_id=correlation_id,
    )


class TestBankRetry:
    """Test retry behavior with real HTTP calls."""

    @pytest.mark.parametrize("code", [500, 502, 503])
    def test_retry_on_5xx_until_budget_spent(self, bank_client, bank_server, code):
        bank_server.set_response_code(code)

        with pytest.raises(TransientBankError):
            bank_client.authorize(_request())

        assert bank_server.get_request_count() == 4  # initial + 3 retries

    def test_transient_recovery_503_503_200(self, bank_client, bank_server):
        bank_server.fail_next(2, code=503)

        response = bank_client.authorize(_request())

        assert response.authorized is True
        assert bank_server.get_request_count() == 3

    def test_recovery_on_last_retry(self, bank_client, bank_server):
        bank_server.fail_next(3, code=502)

        response = bank_client.authorize(_request())

        assert response.authorized is True
        assert bank_server.get_request_count() == 4

    def test_no_retry_on_client_error(self, bank_client, bank_server):
        bank_server.set_response_code(400)

        with pytest.raises(BankRejectedRequestError):
            bank_client.authorize(_request())

        assert bank_server.get_request_count() == 1

    def test_no_retry_on_malformed_body(self, bank_client, bank_server):
        bank_server.set_malformed_body(b"definitely not json")

        with pytest.raises(MalformedBankResponseError):
            bank_client.authorize(_request())

        assert bank_server.get_request_count() == 1

    def test_custom_retry_budget(self, transport, bank_server):
        client = RetryingAuthorizationClient(transport, RetryPolicy(max_retries=1, delay_factor=0))
        bank_server.set_response_code(500)

        with pytest.raises(TransientBankError):
            client.authorize(_request())

        assert bank_server.get_request_count() == 2

    def test_retry_on_connection_refused(self, attempt_log):
        from src.bank_client.transport import HttpBankTransport

        transport = HttpBankTransport("http://127.0.0.1:19999", timeout_seconds=2, attempt_log=attempt_log)
        client = RetryingAuthorizationClient(transport, RetryPolicy(delay_factor=0))

        with pytest.raises(TransientBankError):
            client.authorize(_request(correlation_id="pay-unreachable"))

        attempts = attempt_log.get_attempts(correlation_id="pay-unreachable")
        assert len(attempts) == 4
        assert all(a.error == "connection_error" for a in attempts)
