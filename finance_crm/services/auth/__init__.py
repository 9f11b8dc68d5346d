"""Authentication services package."""

from finance_crm.services.auth.exchange import (
    DASHBOARD_ROUTE,
    LOGIN_ROUTE,
    AuthConfigurationError,
    AuthError,
    AuthExchange,
    InvalidCredentialsError,
)
from finance_crm.services.auth.tokens import decode_token, mint_token, token_expiry

__all__ = [
    "DASHBOARD_ROUTE",
    "LOGIN_ROUTE",
    "AuthConfigurationError",
    "AuthError",
    "AuthExchange",
    "InvalidCredentialsError",
    "decode_token",
    "mint_token",
    "token_expiry",
]
