#!/usr/bin/env python3
"""Plaid API setup script.

Validates Plaid API credentials by minting a test link token, then
offers to store them (plus a freshly generated access-token encryption
key) in the OS keychain. Bank linking itself happens in the browser
via Plaid Link, not through this script.

Usage:
    1. Sign up at https://dashboard.plaid.com/
    2. Get your client_id and secret from the Keys page
    3. cd backend && python -m scripts.setup_plaid

    python -m scripts.setup_plaid --status   # show which keys are stored
    python -m scripts.setup_plaid --clear    # remove stored Plaid keys
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from cryptography.fernet import Fernet

from integrations.exceptions import GatewayError
from integrations.plaid_client import PlaidClient
from services.credential_manager import (
    delete_credential,
    get_credential,
    list_credentials,
    set_credential,
)

PLAID_KEYS = ("PLAID_CLIENT_ID", "PLAID_SECRET")


def validate_credentials(client_id: str, secret: str, env: str) -> None:
    """Validate Plaid credentials by creating a test link token.

    Raises:
        GatewayError: If the API call fails.
    """
    client = PlaidClient(client_id=client_id, secret=secret, environment=env)
    link_token = client.create_link_token("setup-test")
    if not link_token:
        raise GatewayError("Plaid returned an empty link_token")


def _offer_keychain_store(credentials: dict[str, str]) -> None:
    """Prompt the user to store credentials in the keychain."""
    answer = input("\nStore these credentials in the keychain? [Y/n] ").strip().lower()
    if answer in ("", "y", "yes"):
        for key, value in credentials.items():
            if set_credential(key, value):
                print(f"  Stored {key} in keychain")
            else:
                print(f"  Failed to store {key}")
    else:
        print("  Skipped keychain storage.")


def show_status() -> None:
    """Print which secrets are stored in the keychain, masked."""
    stored = list_credentials()
    if not stored:
        print("No Finale secrets are stored in the keychain.")
        return
    print("Stored in keychain:")
    for key, value in stored.items():
        print(f"  {key} = {_mask(value)}")


def clear_plaid_credentials() -> int:
    """Remove the Plaid API keys from the keychain.

    CREDENTIAL_ENCRYPTION_KEY is never removed here; stored bank
    credentials cannot be decrypted without it.

    Returns:
        Number of keys removed.
    """
    removed = 0
    for key in PLAID_KEYS:
        if delete_credential(key):
            print(f"  Removed {key}")
            removed += 1
        else:
            print(f"  {key} was not stored")
    return removed


def _mask(value: str) -> str:
    if len(value) <= 4:
        return "****"
    return "****" + value[-4:]


def run_setup() -> None:
    """Prompt for credentials and validate them."""
    print("Plaid API Setup")
    print("=" * 50)
    print()

    client_id = input("Enter your Plaid client_id: ").strip()
    if not client_id:
        print("Error: No client_id provided")
        sys.exit(1)

    secret = input("Enter your Plaid secret: ").strip()
    if not secret:
        print("Error: No secret provided")
        sys.exit(1)

    print()
    print("Choose environment:")
    print("  1. sandbox (for testing with fake data)")
    print("  2. production (for live use)")
    env_choice = input("Enter choice (1 or 2) [1]: ").strip() or "1"
    env = {"1": "sandbox", "2": "production"}.get(env_choice, "sandbox")

    print()
    print(f"Validating credentials against {env} environment...")

    try:
        validate_credentials(client_id, secret, env)
    except GatewayError as e:
        print(f"Error: {e}")
        print()
        print("Common issues:")
        print("  - Incorrect client_id or secret")
        print("  - Wrong environment selected (each environment has its own secret)")
        print("  - Network connectivity issue")
        sys.exit(1)

    credentials = {
        "PLAID_CLIENT_ID": client_id,
        "PLAID_SECRET": secret,
    }
    if get_credential("CREDENTIAL_ENCRYPTION_KEY") is None:
        credentials["CREDENTIAL_ENCRYPTION_KEY"] = Fernet.generate_key().decode()

    print()
    print("Success! Add the following to your .env file:")
    print()
    for key, value in credentials.items():
        print(f"{key}={value}")
    print(f"PLAID_ENVIRONMENT={env}")

    _offer_keychain_store(credentials)

    print()
    print("Keep these values secure. Losing CREDENTIAL_ENCRYPTION_KEY means")
    print("every linked bank has to be relinked.")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Plaid API setup utility")
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--status",
        action="store_true",
        help="Show which secrets are stored in the keychain",
    )
    group.add_argument(
        "--clear",
        action="store_true",
        help="Remove the stored Plaid client_id and secret from the keychain",
    )
    args = parser.parse_args(argv)

    if args.status:
        show_status()
    elif args.clear:
        clear_plaid_credentials()
    else:
        run_setup()


if __name__ == "__main__":
    main()
