"""
Finance API Client

DESIGN DECISION: The client is deliberately thin. It:
1. Resolves the absolute URL from the configured base
2. Attaches the bearer token when a session exists
3. Serializes JSON bodies
4. Returns the raw response

It does NOT retry, does NOT set a local timeout and does NOT interpret
status codes. Callers decide what a response means, using is_success()
or ensure_success() before touching the body.

The blocking requests call runs in a worker thread, so several requests
can be in flight at once from the event loop (the dashboard fetches
summary and both lists concurrently).
"""

import asyncio
import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

import requests
import structlog

from finance_crm.services.storage import SessionStoreInterface


logger = structlog.get_logger("finance_crm.api")


class NetworkError(Exception):
    """Base exception for API communication errors."""

    def __init__(self, endpoint: str, message: str):
        self.endpoint = endpoint
        super().__init__(message)


class RequestFailedError(NetworkError):
    """The request never produced a response (DNS, refused, reset...)."""

    def __init__(self, endpoint: str, reason: str = ""):
        self.reason = reason
        message = f"Request to {endpoint} failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(endpoint, message)


class NonSuccessStatusError(NetworkError):
    """The API answered with a status outside 200-299."""

    def __init__(self, endpoint: str, status_code: int):
        self.status_code = status_code
        super().__init__(endpoint, f"{endpoint} answered with status {status_code}")


def is_success(response: requests.Response) -> bool:
    """A response is a success iff its status code is in 200-299."""
    return 200 <= response.status_code <= 299


def ensure_success(response: requests.Response, endpoint: str) -> requests.Response:
    """
    Return the response if it is a success, raise otherwise.

    Raises:
        NonSuccessStatusError: For any status outside 200-299
    """
    if not is_success(response):
        raise NonSuccessStatusError(endpoint, response.status_code)
    return response


def _json_default(value: Any):
    """JSON encoder for the types our payloads carry."""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class FinanceApiClient:
    """
    HTTP client for the finance API.

    The session store is read on every call, so a login or logout takes
    effect on the next request without rebuilding the client.
    """

    def __init__(
        self,
        base_url: str,
        session_store: SessionStoreInterface,
        http_session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._session_store = session_store
        self._http = http_session or requests.Session()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def http_session(self) -> requests.Session:
        return self._http

    def url_for(self, path: str) -> str:
        """Absolute URL for an API path."""
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self._base_url}{path}"

    async def _build_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        session = await self._session_store.get_session()
        if session and session.authorization_header:
            headers["Authorization"] = session.authorization_header
        return headers

    async def request(
        self,
        path: str,
        method: str = "GET",
        body: Optional[Any] = None,
        params: Optional[dict[str, str]] = None,
    ) -> requests.Response:
        """
        Send a request and return the raw response.

        Args:
            path: API path, e.g. "/receitas"
            method: HTTP method
            body: JSON-serializable payload, sent only when not None
            params: Query parameters

        Returns:
            The response, whatever its status code

        Raises:
            RequestFailedError: If no response was received
        """
        url = self.url_for(path)
        headers = await self._build_headers()
        data = json.dumps(body, default=_json_default) if body is not None else None

        logger.debug("api_request", method=method, path=path, params=params or {})
        try:
            response = await asyncio.to_thread(
                self._http.request,
                method,
                url,
                params=params or None,
                data=data,
                headers=headers,
            )
        except requests.RequestException as e:
            logger.warning("api_request_failed", method=method, path=path, error=str(e))
            raise RequestFailedError(path, str(e)) from e

        logger.debug("api_response", method=method, path=path, status=response.status_code)
        return response

    def close(self) -> None:
        """Release pooled connections."""
        self._http.close()
