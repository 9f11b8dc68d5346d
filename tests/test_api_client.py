"""
Tests for the Finance API client.

HTTP goes through FakeTransport mounted on a real requests.Session, so
URL building, headers and body encoding are checked on the prepared
request exactly as it would leave the process.
"""

import asyncio
import json
from decimal import Decimal

import pytest
import requests

from conftest import BASE_URL, FakeTransport, make_response
from finance_crm.models.session import Session
from finance_crm.services.api import (
    FinanceApiClient,
    NetworkError,
    NonSuccessStatusError,
    RequestFailedError,
    ensure_success,
    is_success,
)
from finance_crm.services.storage import InMemorySessionStore


def build_client(store, routes=None, base_url=BASE_URL):
    transport = FakeTransport(routes)
    http = requests.Session()
    http.mount("http://", transport)
    http.mount("https://", transport)
    return FinanceApiClient(base_url, store, http_session=http), transport


class TestRequestShaping:
    """Tests for URL, header and body construction."""

    def test_url_is_base_plus_path(self):
        """Test that the absolute URL is the base followed by the path."""
        client, _ = build_client(InMemorySessionStore())
        assert client.url_for("/receitas") == "http://api.test/receitas"
        assert client.url_for("despesas") == "http://api.test/despesas"

    def test_trailing_slash_on_base_is_trimmed(self):
        """Test that a base URL ending in '/' does not produce '//'."""
        client, _ = build_client(InMemorySessionStore(), base_url="http://api.test/v1/")
        assert client.base_url == "http://api.test/v1"
        assert client.url_for("/dashboard") == "http://api.test/v1/dashboard"

    def test_bearer_header_when_session_has_token(self, logged_in_store):
        """Test that the session token is sent as a bearer header."""
        client, transport = build_client(
            logged_in_store,
            {("GET", "/dashboard"): (200, {})},
        )
        asyncio.run(client.request("/dashboard"))

        sent = transport.requests[0]
        assert sent.headers["Authorization"] == "Bearer token-abc"
        assert sent.headers["Content-Type"] == "application/json"

    def test_no_authorization_without_session(self, session_store):
        """Test that no Authorization header is sent when logged out."""
        client, transport = build_client(
            session_store,
            {("GET", "/dashboard"): (200, {})},
        )
        asyncio.run(client.request("/dashboard"))

        sent = transport.requests[0]
        assert "Authorization" not in sent.headers
        assert sent.headers["Content-Type"] == "application/json"

    def test_no_authorization_for_session_without_token(self):
        """Test that a session lacking a token sends no bearer header."""
        store = InMemorySessionStore(Session(user_email="demo@demo.com"))
        client, transport = build_client(store, {("GET", "/receitas"): (200, [])})
        asyncio.run(client.request("/receitas"))

        assert "Authorization" not in transport.requests[0].headers

    def test_token_change_applies_to_next_request(self, session_store):
        """Test that a login after construction is picked up per request."""
        client, transport = build_client(session_store, {("GET", "/receitas"): (200, [])})

        asyncio.run(client.request("/receitas"))
        asyncio.run(session_store.set_session(Session(user_email="a@b.com", api_token="new")))
        asyncio.run(client.request("/receitas"))

        assert "Authorization" not in transport.requests[0].headers
        assert transport.requests[1].headers["Authorization"] == "Bearer new"

    def test_body_is_json_encoded(self, logged_in_store):
        """Test that payloads are serialized as JSON, decimals as numbers."""
        client, transport = build_client(
            logged_in_store,
            {("POST", "/receitas"): (201, {"id": 7})},
        )
        payload = {
            "descricao": "Salario",
            "valor": Decimal("1500.50"),
            "categoria": "Trabalho",
            "data": "2024-03-05",
        }
        response = asyncio.run(client.request("/receitas", method="POST", body=payload))

        sent = transport.requests[0]
        assert sent.method == "POST"
        assert json.loads(sent.body) == {
            "descricao": "Salario",
            "valor": 1500.5,
            "categoria": "Trabalho",
            "data": "2024-03-05",
        }
        assert response.status_code == 201

    def test_query_params_are_encoded(self, logged_in_store):
        """Test that filter params end up in the query string."""
        client, transport = build_client(logged_in_store, {("GET", "/despesas"): (200, [])})
        asyncio.run(client.request(
            "/despesas",
            params={"inicio": "2024-03-01", "busca": "mercado central"},
        ))

        url = transport.requests[0].url
        assert "inicio=2024-03-01" in url
        assert "busca=mercado+central" in url

    def test_get_without_body_sends_no_body(self, logged_in_store):
        """Test that no body is attached when none is given."""
        client, transport = build_client(logged_in_store, {("GET", "/receitas"): (200, [])})
        asyncio.run(client.request("/receitas"))
        assert transport.requests[0].body is None


class TestStatusHandling:
    """Tests for status normalization and transport failures."""

    @pytest.mark.parametrize("status_code", [200, 201, 204, 299])
    def test_success_range(self, status_code):
        """Test that 2xx statuses are successes."""
        assert is_success(make_response(status_code))

    @pytest.mark.parametrize("status_code", [199, 300, 304, 400, 401, 404, 500, 503])
    def test_non_success(self, status_code):
        """Test that anything outside 2xx is not a success."""
        response = make_response(status_code)
        assert not is_success(response)
        with pytest.raises(NonSuccessStatusError) as exc_info:
            ensure_success(response, "/dashboard")
        assert exc_info.value.status_code == status_code
        assert exc_info.value.endpoint == "/dashboard"

    def test_non_success_is_returned_not_raised(self, logged_in_store):
        """Test that the client itself does not interpret status codes."""
        client, _ = build_client(logged_in_store, {("GET", "/dashboard"): (500, {"detail": "boom"})})
        response = asyncio.run(client.request("/dashboard"))
        assert response.status_code == 500

    def test_connection_failure_raises_request_failed(self, logged_in_store):
        """Test that a transport failure surfaces as RequestFailedError."""
        client, _ = build_client(
            logged_in_store,
            {("GET", "/receitas"): requests.ConnectionError("connection refused")},
        )
        with pytest.raises(RequestFailedError) as exc_info:
            asyncio.run(client.request("/receitas"))

        assert isinstance(exc_info.value, NetworkError)
        assert exc_info.value.endpoint == "/receitas"
        assert "connection refused" in str(exc_info.value)

    def test_requests_run_concurrently(self, logged_in_store):
        """Test that several requests can be awaited together."""
        client, transport = build_client(
            logged_in_store,
            {
                ("GET", "/dashboard"): (200, {}),
                ("GET", "/receitas"): (200, []),
                ("GET", "/despesas"): (200, []),
            },
        )

        async def fetch_all():
            return await asyncio.gather(
                client.request("/dashboard"),
                client.request("/receitas"),
                client.request("/despesas"),
            )

        responses = asyncio.run(fetch_all())
        assert [r.status_code for r in responses] == [200, 200, 200]
        assert len(transport.requests) == 3


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
