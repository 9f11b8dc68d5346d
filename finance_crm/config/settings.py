"""
Configuration Management for Finance CRM

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
How tokens are obtained and whether the summary endpoint receives the
list filters are both settings, not code changes.
"""

from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthMode(str, Enum):
    """
    Where the API bearer token comes from.

    DELEGATED: the API issues the token from POST /auth/login.
    LOCAL: credentials are checked against the configured admin identity
    and the token is minted locally with the shared secret.
    """
    DELEGATED = "delegated"
    LOCAL = "local"


class SessionBackend(str, Enum):
    """Where the session is kept between interactions."""
    MEMORY = "memory"
    FILE = "file"


class ApiSettings(BaseSettings):
    """Remote finance API configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    base_url: str = Field(
        ...,
        description="Base URL of the finance API (e.g. https://api.example.com)"
    )
    summary_honors_filters: bool = Field(
        default=False,
        description="Send inicio/fim/busca to GET /dashboard as well"
    )
    offline_fallback_enabled: bool = Field(
        default=True,
        description="Answer from the passive response cache when the network fails"
    )
    offline_cache_populate: bool = Field(
        default=False,
        description="Store successful GET responses in the fallback cache"
    )

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Paths always start with '/', so the base must not end with one."""
        v = v.strip()
        if not v:
            raise ValueError("FINANCE_API_BASE_URL must not be empty")
        return v.rstrip("/")


class AuthSettings(BaseSettings):
    """Authentication exchange configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    mode: AuthMode = Field(
        default=AuthMode.DELEGATED,
        description="delegated (API issues tokens) or local (mint locally)"
    )

    # Only used in LOCAL mode
    admin_email: Optional[str] = Field(
        default=None,
        description="The single identity accepted in local mode"
    )
    admin_password: Optional[str] = Field(
        default=None,
        description="Password for the local identity"
    )
    jwt_secret: Optional[str] = Field(
        default=None,
        description="Shared secret used to sign locally minted tokens"
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="Signing algorithm for locally minted tokens"
    )
    token_ttl_hours: int = Field(
        default=8,
        ge=1,
        le=72,
        description="Validity window of locally minted tokens"
    )

    session_backend: SessionBackend = Field(
        default=SessionBackend.MEMORY,
        description="memory (tab lifetime) or file (persisted token)"
    )
    session_file: str = Field(
        default=".finance_crm_session.json",
        description="Path of the persisted session when session_backend=file"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )

    # Dashboard
    recent_movements_limit: int = Field(
        default=6,
        ge=1,
        le=100,
        description="How many movements the 'recent movements' view shows"
    )
    audit_history_size: int = Field(
        default=200,
        ge=10,
        description="How many audit events the in-memory history keeps"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def api(self) -> ApiSettings:
        return ApiSettings()

    @property
    def auth(self) -> AuthSettings:
        return AuthSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.api
        results["api"] = True
    except Exception as e:
        results["api"] = False
        results["api_error"] = str(e)

    try:
        auth = settings.auth
        results["auth"] = True
        if auth.mode == AuthMode.LOCAL and not (
            auth.admin_email and auth.admin_password and auth.jwt_secret
        ):
            results["auth"] = False
            results["auth_error"] = (
                "Local mode needs AUTH_ADMIN_EMAIL, AUTH_ADMIN_PASSWORD and AUTH_JWT_SECRET"
            )
    except Exception as e:
        results["auth"] = False
        results["auth_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
