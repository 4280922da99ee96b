from .client import AuthorizationClient, RetryingAuthorizationClient, build_bank_client
from .logger import AuthorizationLogger
from .retry import RetryPolicy
from .transport import HttpBankTransport

__all__ = [
    "AuthorizationClient",
    "RetryingAuthorizationClient",
    "build_bank_client",
    "AuthorizationLogger",
    "RetryPolicy",
    "HttpBankTransport",
]
