"""
Offline Fallback

Network first, cache only on network failure. Financial figures go
stale quickly, so a cached answer is never preferred over a live one;
the cache is a safety net for when the API cannot be reached at all.

Installing the fallback mounts a transport adapter on the live
requests session for the API base URL. It applies immediately to every
client sharing that session.
"""

from typing import Optional

import requests
import structlog
from requests.adapters import HTTPAdapter
from requests.structures import CaseInsensitiveDict


logger = structlog.get_logger("finance_crm.offline")

OFFLINE_HEADER = "X-Offline-Fallback"


class ResponseCache:
    """
    Passive response cache keyed by method and full URL.

    Nothing is stored here unless an adapter is told to populate it or
    a caller puts entries explicitly.
    """

    def __init__(self):
        self._entries: dict[tuple[str, str], tuple[int, dict, bytes, Optional[str]]] = {}

    @staticmethod
    def _key(request: requests.PreparedRequest) -> tuple[str, str]:
        return ((request.method or "GET").upper(), request.url or "")

    def put(self, request: requests.PreparedRequest, response: requests.Response) -> None:
        """Store a copy of the response for this request."""
        self._entries[self._key(request)] = (
            response.status_code,
            dict(response.headers),
            response.content,
            response.encoding,
        )

    def match(self, request: requests.PreparedRequest) -> Optional[requests.Response]:
        """A fresh Response rebuilt from the cached entry, or None."""
        entry = self._entries.get(self._key(request))
        if entry is None:
            return None

        status_code, headers, content, encoding = entry
        response = requests.Response()
        response.status_code = status_code
        response.headers = CaseInsensitiveDict(headers)
        response.headers[OFFLINE_HEADER] = "1"
        response._content = content
        response.encoding = encoding
        response.url = request.url
        response.request = request
        return response

    def __len__(self) -> int:
        return len(self._entries)


class OfflineFallbackAdapter(HTTPAdapter):
    """
    Transport adapter that falls back to a cache when the network fails.

    Only connection failures and timeouts trigger the fallback. An HTTP
    error status is a network success and is returned as-is.
    """

    def __init__(
        self,
        cache: Optional[ResponseCache] = None,
        populate: bool = False,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.cache = cache if cache is not None else ResponseCache()
        self.populate = populate

    def send(self, request, **kwargs):
        try:
            response = super().send(request, **kwargs)
        except (requests.ConnectionError, requests.Timeout) as e:
            cached = self.cache.match(request)
            if cached is None:
                raise
            logger.warning(
                "offline_fallback_used",
                method=request.method,
                url=request.url,
                error=str(e),
            )
            return cached

        if (
            self.populate
            and (request.method or "").upper() == "GET"
            and 200 <= response.status_code <= 299
        ):
            self.cache.put(request, response)

        return response


def install_offline_fallback(
    http_session: requests.Session,
    scope: str,
    cache: Optional[ResponseCache] = None,
    populate: bool = False,
) -> OfflineFallbackAdapter:
    """
    Mount the fallback adapter on a session for every URL under `scope`.

    Returns the installed adapter so callers can reach its cache.
    """
    adapter = OfflineFallbackAdapter(cache=cache, populate=populate)
    http_session.mount(scope, adapter)
    logger.info("offline_fallback_installed", scope=scope, populate=populate)
    return adapter
