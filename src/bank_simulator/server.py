import json
import threading
import time
import uuid
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Self


class _BankHandler(BaseHTTPRequestHandler):
    """HTTP request handler standing in for the acquiring bank."""

    def _send_json(self, code: int, body) -> None:
        self.send_response(code)
        self.send_header("Content-Type", "application/json")
        self.end_headers()
        if body is not None:
            self.wfile.write(body if isinstance(body, bytes) else json.dumps(body).encode())

    def do_POST(self):
        if self.path != "/payments":
            self._send_json(404, {"error": "not found"})
            return

        content_length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(content_length)

        server_config = self.server.config  # type: ignore[attr-defined]

        # Simulate slow response
        if server_config["response_delay"] > 0:
            time.sleep(server_config["response_delay"])

        try:
            payload = json.loads(body)
        except (json.JSONDecodeError, ValueError):
            self._send_json(400, {"error": "invalid JSON"})
            return

        required_fields = ["card_number", "expiry_date", "currency", "amount", "cvv"]
        missing = [f for f in required_fields if f not in payload]
        if missing:
            self._send_json(400, {"errorMessage": f"missing fields: {missing}"})
            return

        with server_config["lock"]:
            server_config["received_requests"].append({
                "payload": payload,
                "headers": dict(self.headers),
            })
            forced_failures = server_config["forced_failures"]
            if forced_failures:
                server_config["forced_failures"] = forced_failures - 1
                forced_code = server_config["forced_failure_code"]
            else:
                forced_code = None

        if forced_code is not None:
            self._send_json(forced_code, {"errorMessage": "simulated transient failure"})
            return

        code = server_config["response_code"]
        if code is not None and not 200 <= code < 300:
            self._send_json(code, {"errorMessage": "simulated bank error"})
            return

        if server_config["malformed_body"] is not None:
            self._send_json(code or 200, server_config["malformed_body"])
            return

        last_digit = str(payload["card_number"])[-1:]
        if last_digit == "0":
            self._send_json(503, {"errorMessage": "bank unavailable"})
            return
        if last_digit and last_digit in "13579":
            self._send_json(code or 200, {"authorized": True, "authorization_code": str(uuid.uuid4())})
        else:
            self._send_json(code or 200, {"authorized": False, "authorization_code": ""})

    def log_message(self, format, *args):
        """Suppress default request logging."""
        pass


class BankSimulatorServer:
    """Configurable HTTP server that simulates the acquiring bank.

    By default the decision follows the card number's last digit: odd is
    authorized, even is declined and 0 answers 503.
    """

    def __init__(self, host: str = "127.0.0.1", port: int = 0):
        self._host = host
        self._port = port
        self._config = {
            "response_code": None,
            "response_delay": 0,
            "malformed_body": None,
            "forced_failures": 0,
            "forced_failure_code": 503,
            "received_requests": [],
            "lock": threading.Lock(),
        }
        self._server: ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None

    def set_response_code(self, code: int | None) -> Self:
        self._config["response_code"] = code
        return self

    def set_response_delay(self, seconds: float) -> Self:
        self._config["response_delay"] = seconds
        return self

    def set_malformed_body(self, body: bytes | None) -> Self:
        """Answer 2xx with ``body`` verbatim instead of an authorization."""
        self._config["malformed_body"] = body
        return self

    def fail_next(self, count: int, code: int = 503) -> Self:
        with self._config["lock"]:
            self._config["forced_failures"] = count
            self._config["forced_failure_code"] = code
        return self

    def start(self) -> None:
        self._server = ThreadingHTTPServer((self._host, self._port), _BankHandler)
        self._server.config = self._config  # type: ignore[attr-defined]
        # Get the actual port (useful when port=0)
        self._port = self._server.server_address[1]
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()

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

    def get_received_requests(self) -> list[dict]:
        with self._config["lock"]:
            return list(self._config["received_requests"])

    def get_request_count(self) -> int:
        with self._config["lock"]:
            return len(self._config["received_requests"])

    def clear_requests(self) -> None:
        with self._config["lock"]:
            self._config["received_requests"].clear()
