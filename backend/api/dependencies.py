"""FastAPI dependencies for the banking gateway and link service.

Both are overridable in tests via ``app.dependency_overrides``.
"""

from fastapi import Depends

from integrations.gateway_protocol import BankingGateway
from integrations.plaid_client import PlaidClient
from services.link_service import LinkSyncService


def get_gateway() -> BankingGateway:
    """Dependency for injecting the banking gateway client."""
    return PlaidClient()


def get_link_service(gateway: BankingGateway = Depends(get_gateway)) -> LinkSyncService:
    """Dependency for injecting the link/sync service."""
    return LinkSyncService(gateway=gateway)
