"""Configuration package."""

from finance_crm.config.settings import (
    ApiSettings,
    AppSettings,
    AuthMode,
    AuthSettings,
    SessionBackend,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "ApiSettings",
    "AppSettings",
    "AuthMode",
    "AuthSettings",
    "SessionBackend",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
