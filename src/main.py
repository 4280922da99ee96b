import logging

from src.api.server import PaymentGatewayServer
from src.bank_client.client import build_bank_client
from src.bank_client.logger import AuthorizationLogger
from src.config import GatewaySettings, get_settings
from src.gateway.processor import PaymentProcessor
from src.gateway.repository import InMemoryPaymentRepository
from src.gateway.validation import PaymentRequestValidator
from src.observability.logging import configure_logging
from src.observability.metrics import PaymentMetrics

logger = logging.getLogger(__name__)


def build_gateway(
    settings: GatewaySettings,
    attempt_log: AuthorizationLogger | None = None,
    delay_factor: float = 1.0,
) -> tuple[PaymentProcessor, PaymentMetrics]:
    """Wire the processor and its collaborators from ``settings``."""
    metrics = PaymentMetrics(window_seconds=settings.metrics_window_seconds)
    processor = PaymentProcessor(
        validator=PaymentRequestValidator(settings.currency_allow_list),
        repository=InMemoryPaymentRepository(),
        bank_client=build_bank_client(settings, attempt_log=attempt_log, delay_factor=delay_factor),
        metrics=metrics,
    )
    return processor, metrics


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    processor, metrics = build_gateway(settings)
    logger.info(
        "Application starting up; bank at %s, currencies %s",
        settings.bank_url,
        ", ".join(sorted(settings.currency_allow_list)),
    )
    PaymentGatewayServer(processor, settings.api_host, settings.api_port, metrics=metrics).serve_forever()


if __name__ == "__main__":
    main()
