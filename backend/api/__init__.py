"""API route handlers."""
from . import accounts, link, users

__all__ = ["accounts", "link", "users"]
