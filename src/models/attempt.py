from dataclasses import dataclass
from datetime import datetime


@dataclass
class AuthorizationAttempt:
    attempt_id: str
    correlation_id: str
    url: str
    status_code: int | None
    timestamp: datetime
    response_time_ms: float
    error: str | None = None  # "timeout", "connection_error" or a message

    @property
    def failed(self) -> bool:
        return self.status_code is None or self.status_code >= 400
