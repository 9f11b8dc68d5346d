"""
Shared test doubles.

No test talks to a real server:
- FakeTransport is a requests adapter mounted on a real requests.Session,
  so the API client is exercised down to the prepared request.
- FakeApiClient replaces the API client for controller tests. Each
  (method, path) has a script of responses; an entry wrapped in Gated
  is held until its asyncio.Event is set, which is how overlapping
  load cycles are reproduced.
"""

import asyncio
import json
from typing import Any, Optional
from urllib.parse import urlsplit

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from finance_crm.models.session import Session
from finance_crm.services.api import RequestFailedError
from finance_crm.services.storage import InMemorySessionStore


BASE_URL = "http://api.test"


def make_response(
    status_code: int = 200,
    json_body: Any = None,
    url: str = "",
    request: Optional[requests.PreparedRequest] = None,
) -> requests.Response:
    """Build a requests.Response without any network."""
    response = requests.Response()
    response.status_code = status_code
    response.headers = CaseInsensitiveDict({"Content-Type": "application/json"})
    response._content = b"" if json_body is None else json.dumps(json_body).encode("utf-8")
    response.encoding = "utf-8"
    response.url = url or (request.url if request is not None else "")
    response.request = request
    return response


class FakeTransport(BaseAdapter):
    """
    requests adapter answering from a routing table.

    routes maps (METHOD, path) to a Response factory argument tuple
    (status, body) or to an exception instance to raise.
    """

    def __init__(self, routes: Optional[dict] = None):
        super().__init__()
        self.routes = dict(routes or {})
        self.requests: list[requests.PreparedRequest] = []

    def send(self, request, **kwargs):
        self.requests.append(request)
        key = (request.method, urlsplit(request.url).path)
        route = self.routes.get(key, (404, {"detail": "not found"}))
        if isinstance(route, Exception):
            raise route
        status_code, body = route
        return make_response(status_code, body, request=request)

    def close(self):
        pass


class Gated:
    """A scripted entry released only once `event` is set."""

    def __init__(self, event: asyncio.Event, entry: Any):
        self.event = event
        self.entry = entry


class FakeApiClient:
    """
    Scripted stand-in for FinanceApiClient.

    Each call pops the next scripted entry for its (method, path); the
    last entry is sticky so repeated reloads keep getting it.
    """

    def __init__(self):
        self.scripts: dict[tuple[str, str], list[Any]] = {}
        self.calls: list[dict[str, Any]] = []

    def script(self, method: str, path: str, *entries: Any) -> None:
        self.scripts[(method, path)] = list(entries)

    def calls_to(self, method: str, path: str) -> list[dict[str, Any]]:
        return [c for c in self.calls if c["method"] == method and c["path"] == path]

    async def request(
        self,
        path: str,
        method: str = "GET",
        body: Optional[Any] = None,
        params: Optional[dict[str, str]] = None,
    ) -> requests.Response:
        self.calls.append({"path": path, "method": method, "body": body, "params": params})

        queue = self.scripts.get((method, path))
        if not queue:
            raise RequestFailedError(path, "no scripted response")
        entry = queue.pop(0) if len(queue) > 1 else queue[0]

        if isinstance(entry, Gated):
            await entry.event.wait()
            entry = entry.entry
        if isinstance(entry, Exception):
            raise entry
        return entry


async def wait_for_calls(api: FakeApiClient, count: int, max_spins: int = 100) -> None:
    """Yield to the event loop until `count` requests have been made."""
    for _ in range(max_spins):
        if len(api.calls) >= count:
            return
        await asyncio.sleep(0)
    raise AssertionError(f"expected {count} calls, saw {len(api.calls)}")


SUMMARY = {"total_receitas": 5000.0, "total_despesas": 1250.5, "saldo": 3749.5}

RECEITAS = [
    {"id": 1, "descricao": "Salario", "valor": 4000, "categoria": "Trabalho", "data": "2024-03-05"},
    {"id": 2, "descricao": "Freela", "valor": "600.00", "categoria": "Trabalho", "data": "2024-03-12"},
    {"id": 3, "descricao": "Rendimento", "valor": 150.25, "categoria": "Investimentos", "data": "2024-02-28"},
    {"id": 4, "descricao": "Reembolso", "valor": 249.75, "categoria": "Outros", "data": "2024-03-01"},
]

DESPESAS = [
    {"id": 10, "descricao": "Aluguel", "valor": 900, "categoria": "Moradia", "data": "2024-03-10"},
    {"id": 11, "descricao": "Mercado", "valor": 300.5, "categoria": "Alimentacao", "data": "2024-03-11"},
    {"id": 12, "descricao": "Internet", "valor": 50, "categoria": "Casa", "data": "2024-03-02"},
]


@pytest.fixture
def session_store():
    return InMemorySessionStore()


@pytest.fixture
def logged_in_store():
    return InMemorySessionStore(Session(user_email="demo@demo.com", api_token="token-abc"))


@pytest.fixture
def fake_api():
    api = FakeApiClient()
    api.script("GET", "/dashboard", make_response(200, SUMMARY))
    api.script("GET", "/receitas", make_response(200, RECEITAS))
    api.script("GET", "/despesas", make_response(200, DESPESAS))
    return api
