"""Environment-driven settings for the payment gateway.

Values are read once, at startup, from ``GATEWAY_*`` environment variables
(or a ``.env`` file) and treated as immutable afterwards.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GatewaySettings(BaseSettings):
    """Typed view of the gateway's runtime configuration."""

    allowed_currencies: str = Field(
        default="USD,EUR,GBP", description="Accepted ISO currency codes (comma-separated)"
    )
    bank_url: str = Field(default="http://localhost:8080", description="Base URL of the acquiring bank")
    bank_timeout_seconds: float = Field(default=10.0, gt=0, description="Per-call bank timeout")
    bank_max_retries: int = Field(default=3, ge=0, description="Retries after the first bank call")
    bank_backoff_base: float = Field(default=2.0, ge=0, description="Backoff base; delay = base ** attempt")
    api_host: str = "127.0.0.1"
    api_port: int = 5000
    log_level: str = "INFO"
    metrics_window_seconds: float = 300
    model_config = SettingsConfigDict(env_prefix="GATEWAY_", env_file=".env", extra="ignore", frozen=True)

    @field_validator("bank_url")
    @classmethod
    def bank_url_must_be_set(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("bank_url is not configured")
        return value.strip()

    @property
    def currency_allow_list(self) -> frozenset[str]:
        return frozenset(
            code.strip().upper() for code in self.allowed_currencies.split(",") if code.strip()
        )


@lru_cache
def get_settings() -> GatewaySettings:
    return GatewaySettings()
