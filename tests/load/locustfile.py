# Locust load test for payment processing throughput.
#
# How to run:
#   locust -f tests/load/locustfile.py --headless -u 50 -r 10 --run-time 30s --host http://127.0.0.1:5000
#
# The test starts a BankSimulatorServer on port 8080 and a PaymentGatewayServer
# on port 5000 via on_test_start/on_test_stop events, so nothing else needs to
# be running.

import logging
import random
import threading

from locust import HttpUser, between, events, task

from src.api.server import PaymentGatewayServer
from src.bank_simulator.server import BankSimulatorServer
from src.config import GatewaySettings
from src.main import build_gateway
from src.utils.factories import PaymentRequestFactory

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Shared state: tracking submitted vs processed for loss assertions
# ---------------------------------------------------------------------------
_stats_lock = threading.Lock()
_sent_count: int = 0
_success_count: int = 0
_failure_count: int = 0
_created_ids: list[str] = []

_bank: BankSimulatorServer | None = None
_gateway: PaymentGatewayServer | None = None

# Last digit decides the simulated bank outcome; 0 is left out so every
# payment is expected to succeed (authorized or declined).
CARD_SUFFIXES = "123456789"


def _increment_sent() -> None:
    global _sent_count
    with _stats_lock:
        _sent_count += 1


def _record_success(payment_id: str) -> None:
    global _success_count
    with _stats_lock:
        _success_count += 1
        _created_ids.append(payment_id)


def _increment_failure() -> None:
    global _failure_count
    with _stats_lock:
        _failure_count += 1


def _random_created_id() -> str | None:
    with _stats_lock:
        return random.choice(_created_ids) if _created_ids else None


# ---------------------------------------------------------------------------
# Locust lifecycle events
# ---------------------------------------------------------------------------
@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    """Start the bank simulator and the gateway before the load test begins."""
    global _bank, _gateway, _sent_count, _success_count, _failure_count

    with _stats_lock:
        _sent_count = 0
        _success_count = 0
        _failure_count = 0
        _created_ids.clear()

    _bank = BankSimulatorServer(host="127.0.0.1", port=8080)
    _bank.start()
    settings = GatewaySettings(_env_file=None, bank_url=_bank.url)
    processor, metrics = build_gateway(settings)
    _gateway = PaymentGatewayServer(processor, host="127.0.0.1", port=5000, metrics=metrics)
    _gateway.start()
    logger.info("BankSimulatorServer on 8080, PaymentGatewayServer on 5000")


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    """Stop both servers and report processing stats."""
    global _bank, _gateway

    bank_received = 0
    if _gateway is not None:
        _gateway.stop()
        _gateway = None
    if _bank is not None:
        bank_received = _bank.get_request_count()
        _bank.stop()
        _bank = None
        logger.info("Servers stopped")

    with _stats_lock:
        total_sent = _sent_count
        total_ok = _success_count
        total_fail = _failure_count

    logger.info(
        "Load test summary: sent=%d, processed=%d, failed=%d, bank_received=%d",
        total_sent,
        total_ok,
        total_fail,
        bank_received,
    )

    if total_sent > 0:
        success_rate = total_ok / total_sent * 100
        logger.info("Success rate: %.2f%% (target: >99%%)", success_rate)

        if success_rate < 99.0:
            environment.process_exit_code = 1
            logger.error(
                "ASSERTION FAILED: Success rate %.2f%% is below 99%% threshold",
                success_rate,
            )
        if bank_received < total_ok:
            environment.process_exit_code = 1
            logger.error(
                "ASSERTION FAILED: %d payments processed but the bank saw only %d",
                total_ok,
                bank_received,
            )

    # Latency assertion: p95 response time must be below 5000ms (5s)
    for stat in environment.runner.stats.entries.values():
        p95 = stat.get_response_time_percentile(0.95)
        if p95 and p95 > 5000:
            environment.process_exit_code = 1
            logger.error(
                "ASSERTION FAILED: p95 latency %dms exceeds 5000ms for '%s'",
                p95,
                stat.name,
            )


# ---------------------------------------------------------------------------
# Locust user
# ---------------------------------------------------------------------------
class MerchantUser(HttpUser):
    """Simulates a merchant submitting card payments and reading them back."""

    wait_time = between(0.01, 0.05)

    @task(3)
    def submit_payment(self) -> None:
        card_number = "123456789012345" + random.choice(CARD_SUFFIXES)
        payload = PaymentRequestFactory.create_payload(
            card_number=card_number,
            amount=random.randint(1, 100_000),
            currency=random.choice(["USD", "EUR", "GBP"]),
        )

        _increment_sent()

        with self.client.post(
            "/api/payments",
            json=payload,
            catch_response=True,
            name="/api/payments",
        ) as response:
            if response.status_code == 200:
                _record_success(response.json()["id"])
                response.success()
            else:
                _increment_failure()
                response.failure(f"HTTP {response.status_code}: {response.text[:200]}")

    @task(1)
    def fetch_payment(self) -> None:
        payment_id = _random_created_id()
        if payment_id is None:
            return
        with self.client.get(
            f"/api/payments/{payment_id}",
            catch_response=True,
            name="/api/payments/[id]",
        ) as response:
            if response.status_code == 200:
                response.success()
            else:
                response.failure(f"HTTP {response.status_code}")
