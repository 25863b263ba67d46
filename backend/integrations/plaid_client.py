"""Plaid API client.

This module implements the BankingGateway protocol via the plaid-python
SDK: minting link tokens, exchanging public tokens for access tokens,
and reading real-time account balances.

Every call is bounded by ``GATEWAY_TIMEOUT_SECONDS`` and every failure is
translated into the gateway exception hierarchy, so nothing above this
module ever sees a raw ``ApiException`` or urllib3 error.
"""

import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

import urllib3
from plaid import ApiException, Environment
from plaid.api.plaid_api import PlaidApi
from plaid.api_client import ApiClient
from plaid.configuration import Configuration
from plaid.model.accounts_balance_get_request import AccountsBalanceGetRequest
from plaid.model.country_code import CountryCode
from plaid.model.item_public_token_exchange_request import ItemPublicTokenExchangeRequest
from plaid.model.item_remove_request import ItemRemoveRequest
from plaid.model.link_token_create_request import LinkTokenCreateRequest
from plaid.model.link_token_create_request_user import LinkTokenCreateRequestUser
from plaid.model.products import Products

from config import settings
from integrations.exceptions import (
    ExchangeError,
    GatewayError,
    GatewayTimeoutError,
    ReauthRequiredError,
)
from integrations.gateway_protocol import ExchangeResult, GatewayAccount

logger = logging.getLogger(__name__)

# Map PLAID_ENVIRONMENT setting to SDK host URLs.
# Plaid's Development environment is deprecated; only sandbox and production
# are supported.
_ENVIRONMENT_MAP: dict[str, str] = {
    "sandbox": Environment.Sandbox,
    "production": Environment.Production,
}

# Error codes meaning the stored access token can no longer be used
REAUTH_ERROR_CODES: frozenset[str] = frozenset(
    {
        "ITEM_LOGIN_REQUIRED",
        "INVALID_ACCESS_TOKEN",
        "ITEM_NOT_FOUND",
        "ACCESS_NOT_GRANTED",
        "PENDING_EXPIRATION",
        "USER_PERMISSION_REVOKED",
    }
)

# Error codes meaning a public token cannot be exchanged
EXCHANGE_ERROR_CODES: frozenset[str] = frozenset(
    {
        "INVALID_PUBLIC_TOKEN",
    }
)


class PlaidClient:
    """Wrapper around the Plaid API implementing ``BankingGateway``."""

    def __init__(
        self,
        client_id: str | None = None,
        secret: str | None = None,
        environment: str | None = None,
        timeout: float | None = None,
    ):
        self._client_id = client_id or settings.PLAID_CLIENT_ID
        self._secret = secret or settings.PLAID_SECRET
        self._environment = environment or settings.PLAID_ENVIRONMENT
        self._timeout = timeout or settings.GATEWAY_TIMEOUT_SECONDS

        # Lazily created on first use
        self._api: PlaidApi | None = None

    def _get_api(self) -> PlaidApi:
        """Return (and cache) a PlaidApi instance."""
        if self._api is None:
            env_key = self._environment.lower()
            host = _ENVIRONMENT_MAP.get(env_key)
            if host is None:
                logger.warning(
                    "Unknown PLAID_ENVIRONMENT=%r, falling back to sandbox. "
                    "Valid values: sandbox, production",
                    self._environment,
                )
                host = Environment.Sandbox
            logger.info(
                "Plaid API client: environment=%s, host=%s, client_id=<configured>",
                env_key,
                host,
            )
            configuration = Configuration(
                host=host,
                api_key={
                    "clientId": self._client_id,
                    "secret": self._secret,
                },
            )
            api_client = ApiClient(configuration)
            self._api = PlaidApi(api_client)
        return self._api

    def is_configured(self) -> bool:
        """Check if Plaid credentials are configured."""
        return bool(self._client_id) and bool(self._secret)

    # ------------------------------------------------------------------
    # Link Token & Token Exchange
    # ------------------------------------------------------------------

    def create_link_token(self, user_id: str) -> str:
        """Create a Plaid Link token for the browser-based linking flow.

        Args:
            user_id: Our user id, sent as Plaid's ``client_user_id``.

        Returns:
            The link_token string to be passed to Plaid Link.
        """
        api = self._get_api()
        request = LinkTokenCreateRequest(
            user=LinkTokenCreateRequestUser(client_user_id=user_id),
            client_name=settings.PLAID_CLIENT_NAME,
            products=[Products(p) for p in settings.PLAID_PRODUCTS],
            country_codes=[CountryCode(c) for c in settings.PLAID_COUNTRY_CODES],
            language="en",
        )
        response = self._call("link_token_create", api.link_token_create, request)
        return response["link_token"]

    def exchange_public_token(self, public_token: str) -> ExchangeResult:
        """Exchange a Plaid Link public_token for a permanent access_token.

        Raises:
            ExchangeError: The public token is invalid, expired or consumed.
        """
        api = self._get_api()
        request = ItemPublicTokenExchangeRequest(public_token=public_token)
        response = self._call(
            "item_public_token_exchange",
            api.item_public_token_exchange,
            request,
        )
        return ExchangeResult(
            access_token=response["access_token"],
            item_id=response["item_id"],
        )

    def remove_item(self, access_token: str) -> None:
        """Revoke an access token by calling Plaid's /item/remove endpoint."""
        api = self._get_api()
        self._call("item_remove", api.item_remove, ItemRemoveRequest(access_token=access_token))

    # ------------------------------------------------------------------
    # Balances
    # ------------------------------------------------------------------

    def fetch_balances(self, access_token: str) -> list[GatewayAccount]:
        """Fetch real-time balances for every account on the Item.

        Raises:
            ReauthRequiredError: Plaid rejected the access token.
        """
        api = self._get_api()
        request = AccountsBalanceGetRequest(access_token=access_token)
        response = self._call("accounts_balance_get", api.accounts_balance_get, request)

        payload = response.to_dict() if hasattr(response, "to_dict") else response
        accounts: list[GatewayAccount] = []
        for acct in payload.get("accounts", []) or []:
            mapped = self._map_account(acct)
            if mapped is not None:
                accounts.append(mapped)

        logger.info(
            "Plaid: %d accounts with balances fetched (request_id=%s)",
            len(accounts), payload.get("request_id"),
        )
        return accounts

    def _map_account(self, acct: dict) -> GatewayAccount | None:
        """Map a single Plaid account dict to a GatewayAccount."""
        account_id = acct.get("account_id")
        if not account_id:
            return None

        balances = acct.get("balances") or {}
        currency = balances.get("iso_currency_code") or balances.get("unofficial_currency_code")

        return GatewayAccount(
            external_id=account_id,
            name=acct.get("name") or acct.get("official_name") or "Bank Account",
            mask=acct.get("mask"),
            type=self._enum_value(acct.get("type")),
            subtype=self._enum_value(acct.get("subtype")),
            current_balance=self._to_decimal(balances.get("current")),
            available_balance=self._to_decimal(balances.get("available")),
            iso_currency_code=currency.upper() if currency else None,
        )

    # ------------------------------------------------------------------
    # Transport & error mapping
    # ------------------------------------------------------------------

    def _call(self, operation: str, method: Callable[..., Any], request: Any) -> Any:
        """Invoke a PlaidApi method with the timeout, mapping every failure."""
        try:
            return method(request, _request_timeout=self._timeout)
        except ApiException as e:
            raise self._map_plaid_error(e, operation) from e
        except urllib3.exceptions.MaxRetryError as e:
            if isinstance(e.reason, urllib3.exceptions.TimeoutError):
                raise self._timeout_error(operation) from e
            logger.warning("Plaid %s connection failed: %s", operation, e.reason)
            raise GatewayError(f"Could not reach Plaid during {operation}") from e
        except urllib3.exceptions.TimeoutError as e:
            raise self._timeout_error(operation) from e
        except urllib3.exceptions.HTTPError as e:
            logger.warning("Plaid %s transport error: %s", operation, e)
            raise GatewayError(f"Could not reach Plaid during {operation}") from e

    def _timeout_error(self, operation: str) -> GatewayTimeoutError:
        logger.warning("Plaid %s timed out after %.1fs", operation, self._timeout)
        return GatewayTimeoutError(
            f"Plaid {operation} timed out after {self._timeout:g}s"
        )

    @staticmethod
    def _map_plaid_error(exc: ApiException, operation: str) -> GatewayError:
        """Map a Plaid ApiException to the gateway exception hierarchy."""
        status = exc.status or None
        message = f"Plaid {operation} failed"

        error_type = ""
        error_code = ""
        request_id = None
        try:
            body = json.loads(exc.body) if exc.body else {}
            error_type = body.get("error_type", "") or ""
            error_code = body.get("error_code", "") or ""
            request_id = body.get("request_id")
            error_message = body.get("error_message", "")
            if error_message:
                message = f"Plaid error ({error_code}): {error_message}"
        except (TypeError, ValueError, AttributeError):
            logger.debug("Unparseable Plaid error body for %s", operation)

        logger.warning(
            "Plaid %s error: status=%s type=%s code=%s request_id=%s",
            operation, status, error_type, error_code, request_id,
        )

        kwargs = {"error_code": error_code, "status_code": status, "request_id": request_id}
        if error_code in REAUTH_ERROR_CODES:
            return ReauthRequiredError(message, **kwargs)
        if operation == "item_public_token_exchange" and (
            error_code in EXCHANGE_ERROR_CODES or error_type == "INVALID_INPUT"
        ):
            return ExchangeError(message, **kwargs)
        return GatewayError(message, **kwargs)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _enum_value(value) -> str | None:
        """Unwrap SDK enum models to their string value."""
        if value is None:
            return None
        return str(getattr(value, "value", value))

    @staticmethod
    def _to_decimal(value) -> Decimal | None:
        """Convert a value to Decimal, returning None on failure."""
        if value is None:
            return None
        try:
            return Decimal(str(value))
        except (InvalidOperation, ValueError):
            return None
