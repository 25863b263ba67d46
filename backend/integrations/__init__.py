"""External API integrations.

This package contains:
- Gateway protocol: The interface the link/sync workflow depends on
- Exceptions: Typed gateway failures with recovery hints
- Plaid client: Implementation of the gateway via the plaid-python SDK
"""

from integrations.exceptions import (
    ExchangeError,
    GatewayError,
    GatewayTimeoutError,
    ReauthRequiredError,
    RecoveryAction,
)
from integrations.gateway_protocol import BankingGateway, ExchangeResult, GatewayAccount

__all__ = [
    "BankingGateway",
    "ExchangeError",
    "ExchangeResult",
    "GatewayAccount",
    "GatewayError",
    "GatewayTimeoutError",
    "ReauthRequiredError",
    "RecoveryAction",
]
