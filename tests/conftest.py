from datetime import date

import pytest

from src.api.server import PaymentGatewayServer
from src.bank_client.client import RetryingAuthorizationClient
from src.bank_client.logger import AuthorizationLogger
from src.bank_client.retry import RetryPolicy
from src.bank_client.transport import HttpBankTransport
from src.bank_simulator.server import BankSimulatorServer
from src.gateway.processor import PaymentProcessor
from src.gateway.repository import InMemoryPaymentRepository
from src.gateway.validation import PaymentRequestValidator
from src.models.authorization import AuthorizationResponse
from src.observability.metrics import PaymentMetrics
from src.utils.factories import PaymentRecordFactory, PaymentRequestFactory


ALLOWED_CURRENCIES = {"USD", "EUR", "GBP"}


class FakeBankClient:
    """Scripted AuthorizationClient: returns or raises the queued outcomes in order."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests = []
        self.cancel_events = []

    def authorize(self, request, cancel_event=None):
        self.requests.append(request)
        self.cancel_events.append(cancel_event)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def allowed_currencies():
    return ALLOWED_CURRENCIES


@pytest.fixture
def validator():
    return PaymentRequestValidator(ALLOWED_CURRENCIES, today=lambda: date(2026, 10, 18))


@pytest.fixture
def repository():
    return InMemoryPaymentRepository()


@pytest.fixture
def attempt_log():
    return AuthorizationLogger()


@pytest.fixture
def retry_policy():
    return RetryPolicy()


@pytest.fixture
def metrics():
    return PaymentMetrics(window_seconds=300)


@pytest.fixture
def fake_bank():
    return FakeBankClient


@pytest.fixture
def authorized_bank():
    return FakeBankClient(AuthorizationResponse(authorized=True, authorization_code="AUTH123"))


@pytest.fixture
def processor(validator, repository, authorized_bank, metrics):
    return PaymentProcessor(
        validator=validator,
        repository=repository,
        bank_client=authorized_bank,
        metrics=metrics,
    )


@pytest.fixture
def bank_server():
    server = BankSimulatorServer()
    server.start()
    yield server
    server.stop()


@pytest.fixture
def transport(bank_server, attempt_log):
    return HttpBankTransport(base_url=bank_server.url, timeout_seconds=5, attempt_log=attempt_log)


@pytest.fixture
def bank_client(transport):
    return RetryingAuthorizationClient(transport, RetryPolicy(delay_factor=0))


@pytest.fixture
def gateway(bank_client, attempt_log, metrics):
    processor = PaymentProcessor(
        validator=PaymentRequestValidator(ALLOWED_CURRENCIES),
        repository=InMemoryPaymentRepository(),
        bank_client=bank_client,
        metrics=metrics,
    )
    server = PaymentGatewayServer(processor, metrics=metrics)
    server.start()
    yield server
    server.stop()


@pytest.fixture
def request_factory():
    return PaymentRequestFactory


@pytest.fixture
def record_factory():
    return PaymentRecordFactory
