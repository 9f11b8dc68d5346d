"""
Tests for configuration loading.
"""

import pytest
from pydantic import ValidationError

from finance_crm.config import (
    ApiSettings,
    AuthMode,
    AuthSettings,
    SessionBackend,
    get_settings,
    validate_all_settings,
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run without any .env file and without stray variables."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "FINANCE_API_BASE_URL",
        "AUTH_MODE",
        "AUTH_ADMIN_EMAIL",
        "AUTH_ADMIN_PASSWORD",
        "AUTH_JWT_SECRET",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


class TestApiSettings:
    """Tests for the API section."""

    def test_base_url_from_env(self, clean_env):
        """Test that the base URL is read from FINANCE_API_BASE_URL."""
        clean_env.setenv("FINANCE_API_BASE_URL", "https://api.example.com/")
        settings = ApiSettings()
        assert settings.base_url == "https://api.example.com"
        assert settings.summary_honors_filters is False
        assert settings.offline_fallback_enabled is True
        assert settings.offline_cache_populate is False

    def test_base_url_required(self, clean_env):
        """Test that a missing base URL is a configuration error."""
        with pytest.raises(ValidationError):
            ApiSettings()

    def test_blank_base_url(self, clean_env):
        """Test that whitespace is not a URL."""
        with pytest.raises(ValidationError):
            ApiSettings(base_url="   ")


class TestAuthSettings:
    """Tests for the auth section."""

    def test_defaults(self, clean_env):
        """Test that delegated auth with an in-memory session is the default."""
        settings = AuthSettings()
        assert settings.mode == AuthMode.DELEGATED
        assert settings.session_backend == SessionBackend.MEMORY
        assert settings.token_ttl_hours == 8
        assert settings.jwt_algorithm == "HS256"

    def test_mode_from_env(self, clean_env):
        """Test that AUTH_MODE selects local auth."""
        clean_env.setenv("AUTH_MODE", "local")
        assert AuthSettings().mode == AuthMode.LOCAL


class TestValidateAllSettings:
    """Tests for the settings page status check."""

    def test_missing_api_section(self, clean_env):
        """Test that an unconfigured API is reported with its error."""
        status = validate_all_settings()
        assert status["api"] is False
        assert "api_error" in status
        assert status["auth"] is True
        assert status["app"] is True

    def test_local_mode_needs_credentials(self, clean_env):
        """Test that local mode without its identity is flagged."""
        clean_env.setenv("FINANCE_API_BASE_URL", "http://api.test")
        clean_env.setenv("AUTH_MODE", "local")

        status = validate_all_settings()
        assert status["api"] is True
        assert status["auth"] is False
        assert "AUTH_JWT_SECRET" in status["auth_error"]

    def test_local_mode_complete(self, clean_env):
        """Test that a complete local configuration passes."""
        clean_env.setenv("FINANCE_API_BASE_URL", "http://api.test")
        clean_env.setenv("AUTH_MODE", "local")
        clean_env.setenv("AUTH_ADMIN_EMAIL", "demo@demo.com")
        clean_env.setenv("AUTH_ADMIN_PASSWORD", "secret1")
        clean_env.setenv("AUTH_JWT_SECRET", "x" * 32)

        assert validate_all_settings()["auth"] is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
