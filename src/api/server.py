import json
import logging
import threading
import uuid
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

from src.gateway.errors import (
    InvalidPaymentIdError,
    PaymentNotFoundError,
    PaymentProcessingError,
    PaymentValidationError,
)
from src.gateway.processor import PaymentProcessor
from src.models.payment import PaymentRequest, RejectedPaymentResponse
from src.observability.logging import correlation_scope
from src.observability.metrics import PaymentMetrics

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
PAYMENTS_PATH = "/api/payments"


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


class _GatewayHandler(BaseHTTPRequestHandler):
    """Translates HTTP requests into PaymentProcessor calls."""

    def _send_json(self, code: int, body: dict, correlation_id: str) -> None:
        self.send_response(code)
        self.send_header("Content-Type", "application/json")
        self.send_header(CORRELATION_HEADER, correlation_id)
        self.end_headers()
        self.wfile.write(json.dumps(body).encode())

    def _correlation_id(self) -> str:
        return self.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())

    def do_POST(self):
        correlation_id = self._correlation_id()
        with correlation_scope(correlation_id):
            if self.path.rstrip("/") != PAYMENTS_PATH:
                self._send_json(404, {"error": "not found"}, correlation_id)
                return
            self._process_payment(correlation_id)

    def do_GET(self):
        correlation_id = self._correlation_id()
        with correlation_scope(correlation_id):
            if self.path == "/health":
                self._send_json(200, self.server.health(), correlation_id)  # type: ignore[attr-defined]
                return
            prefix = PAYMENTS_PATH + "/"
            if not self.path.startswith(prefix):
                self._send_json(404, {"error": "not found"}, correlation_id)
                return
            self._get_payment(self.path[len(prefix):], correlation_id)

    def _process_payment(self, correlation_id: str) -> None:
        processor: PaymentProcessor = self.server.processor  # type: ignore[attr-defined]
        try:
            content_length = int(self.headers.get("Content-Length", 0))
        except ValueError:
            content_length = -1
        if content_length < 0:
            logger.warning("Received a payment with an invalid Content-Length header")
            self.close_connection = True
            rejected = RejectedPaymentResponse(errors=["Invalid Content-Length header"])
            self._send_json(400, rejected.to_dict(), correlation_id)
            return

        payload = None
        if content_length:
            try:
                payload = json.loads(self.rfile.read(content_length))
            except ValueError:
                payload = None
        if not isinstance(payload, dict):
            logger.warning("Received a payment body that is not a JSON object")
            rejected = RejectedPaymentResponse(errors=["Invalid payment command"])
            self._send_json(400, rejected.to_dict(), correlation_id)
            return

        request = PaymentRequest.from_dict(payload)
        try:
            response = processor.process_payment(request)
        except PaymentValidationError as e:
            self._send_json(400, RejectedPaymentResponse(errors=e.errors).to_dict(), correlation_id)
            return
        except PaymentProcessingError:
            logger.exception("Error processing payment: %s", request.merchant_transaction_key)
            self._send_json(
                500, {"error": "An error occurred while processing the payment."}, correlation_id
            )
            return
        except Exception:
            logger.exception("Unexpected error in payment processing: %s", request.merchant_transaction_key)
            self._send_json(
                500, {"error": "An unexpected error occurred while processing the payment."}, correlation_id
            )
            return

        logger.info("Payment processed successfully: %s", request.merchant_transaction_key)
        self._send_json(200, response.to_dict(), correlation_id)

    def _get_payment(self, payment_id: str, correlation_id: str) -> None:
        processor: PaymentProcessor = self.server.processor  # type: ignore[attr-defined]
        if not payment_id.strip():
            self._send_json(400, {"errors": ["Payment ID is required."]}, correlation_id)
            return
        if not _is_uuid(payment_id):
            self._send_json(400, {"errors": ["Payment ID must be a valid GUID."]}, correlation_id)
            return

        try:
            response = processor.get_payment(payment_id)
        except PaymentNotFoundError as e:
            self._send_json(404, {"error": str(e)}, correlation_id)
            return
        except InvalidPaymentIdError as e:
            self._send_json(400, {"errors": [str(e)]}, correlation_id)
            return
        except Exception:
            logger.exception("Error retrieving payment details: %s", payment_id)
            self._send_json(
                500,
                {"error": "An unexpected error occurred while retrieving the payment details."},
                correlation_id,
            )
            return

        self._send_json(200, response.to_dict(), correlation_id)

    def log_message(self, format, *args):
        """Route request lines through the module logger."""
        logger.debug("%s - %s", self.address_string(), format % args)


class _GatewayHTTPServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address, processor: PaymentProcessor, metrics: PaymentMetrics | None):
        super().__init__(address, _GatewayHandler)
        self.processor = processor
        self.metrics = metrics

    def health(self) -> dict:
        body = {"status": "Healthy", "checks": {"self": "Healthy", "bank": "Healthy"}}
        if self.metrics is not None:
            body["metrics"] = self.metrics.snapshot()
        return body


class PaymentGatewayServer:
    """HTTP front for the payment processor, served from a background thread."""

    def __init__(
        self,
        processor: PaymentProcessor,
        host: str = "127.0.0.1",
        port: int = 0,
        metrics: PaymentMetrics | None = None,
    ):
        self._processor = processor
        self._metrics = metrics
        self._host = host
        self._port = port
        self._server: _GatewayHTTPServer | None = None
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        self._server = _GatewayHTTPServer((self._host, self._port), self._processor, self._metrics)
        # Get the actual port (useful when port=0)
        self._port = self._server.server_address[1]
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()
        logger.info("Payment gateway listening on %s", self.url)

    def serve_forever(self) -> None:
        self.start()
        try:
            self._thread.join()
        except KeyboardInterrupt:
            logger.info("Shutting down payment gateway")
        finally:
            self.stop()

    def stop(self) -> None:
        if self._server:
            self._server.shutdown()
            self._server.server_close()
            self._server = None
        if self._thread:
            self._thread.join(timeout=5)
            self._thread = None

    @property
    def url(self) -> str:
        return f"http://{self._host}:{self._port}"

    @property
    def port(self) -> int:
        return self._port
