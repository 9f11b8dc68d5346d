"""
Tests for component wiring, end to end over a fake transport.
"""

import asyncio

import pytest
import requests

from conftest import BASE_URL, DESPESAS, RECEITAS, SUMMARY, FakeTransport
from finance_crm.config import (
    ApiSettings,
    AppSettings,
    AuthMode,
    AuthSettings,
    SessionBackend,
)
from finance_crm.models.audit import AuditEventType
from finance_crm.models.movement import LoadStatus
from finance_crm.orchestrator import create_app_components
from finance_crm.services.api import OfflineFallbackAdapter
from finance_crm.services.storage import FileSessionStore, InMemorySessionStore


JWT_SECRET = "test-secret-with-at-least-32-bytes!!"

ROUTES = {
    ("GET", "/dashboard"): (200, SUMMARY),
    ("GET", "/receitas"): (200, RECEITAS),
    ("GET", "/despesas"): (200, DESPESAS),
    ("POST", "/auth/login"): (200, {"access_token": "api-token", "token_type": "bearer"}),
}


def build(transport=None, offline=False, **auth_overrides):
    http = requests.Session()
    if transport is not None:
        http.mount("http://", transport)

    auth_values = {"mode": AuthMode.DELEGATED}
    auth_values.update(auth_overrides)

    return create_app_components(
        api_settings=ApiSettings(base_url=f"{BASE_URL}/", offline_fallback_enabled=offline),
        auth_settings=AuthSettings(**auth_values),
        app_settings=AppSettings(),
        http_session=http,
    )


class TestWiring:
    """Tests for what create_app_components builds."""

    def test_shared_session_store(self):
        """Test that auth and API client use the same store."""
        components = build()
        assert isinstance(components.session_store, InMemorySessionStore)
        assert components.api_client.base_url == BASE_URL

    def test_file_backend(self, tmp_path):
        """Test that the file backend is selected from settings."""
        components = build(
            session_backend=SessionBackend.FILE,
            session_file=str(tmp_path / "session.json"),
        )
        assert isinstance(components.session_store, FileSessionStore)

    def test_offline_fallback_mounted_at_base_url(self):
        """Test that the fallback adapter covers the API and nothing else."""
        components = build(offline=True)
        http = components.api_client.http_session

        assert isinstance(components.offline_adapter, OfflineFallbackAdapter)
        assert http.get_adapter(f"{BASE_URL}/receitas") is components.offline_adapter
        assert http.get_adapter("http://other.test/") is not components.offline_adapter

    def test_offline_fallback_can_be_disabled(self):
        """Test that no adapter is mounted when disabled."""
        assert build(offline=False).offline_adapter is None


class TestEndToEnd:
    """Tests for login followed by a dashboard load."""

    def test_delegated_login_then_load(self):
        """Test that the API-issued token is used by the dashboard requests."""
        transport = FakeTransport(ROUTES)
        components = build(transport)

        asyncio.run(components.auth.login("demo@demo.com", "secret1"))
        assert asyncio.run(components.dashboard.load_all()) is True

        gets = [r for r in transport.requests if r.method == "GET"]
        assert len(gets) == 3
        assert all(r.headers["Authorization"] == "Bearer api-token" for r in gets)
        assert components.dashboard.state.status == LoadStatus.LOADED

    def test_local_login_then_load(self):
        """Test that a locally minted token is presented to the API."""
        transport = FakeTransport(ROUTES)
        components = build(
            transport,
            mode=AuthMode.LOCAL,
            admin_email="demo@demo.com",
            admin_password="secret1",
            jwt_secret=JWT_SECRET,
        )

        session = asyncio.run(components.auth.login("demo@demo.com", "secret1"))
        asyncio.run(components.dashboard.load_all())

        assert transport.requests[0].headers["Authorization"] == f"Bearer {session.api_token}"
        assert not any(r.url.endswith("/auth/login") for r in transport.requests)

    def test_activity_is_recorded(self):
        """Test that the shared audit logger sees auth and dashboard events."""
        components = build(FakeTransport(ROUTES))

        asyncio.run(components.auth.login("demo@demo.com", "secret1"))
        asyncio.run(components.dashboard.load_all())
        asyncio.run(components.dashboard.logout())

        events = asyncio.run(components.audit_logger.storage.get_recent_events())
        types = [e.event_type for e in events]
        assert types[0] == AuditEventType.LOGOUT
        assert AuditEventType.LOAD_COMPLETED in types
        assert types[-1] == AuditEventType.LOGIN_SUCCEEDED


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
