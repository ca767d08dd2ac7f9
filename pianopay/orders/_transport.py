"""
Transport — how the order client reaches the backend.

The client only needs `request(method, path, json) -> HttpResponse`; network
failures are raised and turned into TRANSIENT errors by the client.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

import requests

from pianopay.orders._config import ApiConfig

logger = logging.getLogger(__name__)

type TokenProvider = Callable[[], str | None]
"""Returns the current bearer token, or None when signed out."""


@dataclass(frozen=True, slots=True)
class HttpResponse:
    status_code: int
    body: Any

    @property
    def ok(self) -> bool:
        return self.status_code < 400


class Transport(Protocol):
    async def request(
        self,
        method: str,
        path: str,
        json: Any | None = None,
    ) -> HttpResponse:
        """Send request. Raises on network failure."""
        ...


def _no_token() -> str | None:
    return None


class RequestsTransport:
    """
    Blocking `requests` session driven from a worker thread.

    Example:
        transport = RequestsTransport(
            ApiConfig.from_env(),
            token=lambda: auth.access_token,
        )
        client = O.OrderClient(transport)

    Note: Any object with a requests-compatible `request()` can be passed as
    `session` (a FastAPI TestClient, for instance).
    """

    def __init__(
        self,
        config: ApiConfig | None = None,
        token: TokenProvider = _no_token,
        session: Any | None = None,
    ) -> None:
        self._config = config or ApiConfig()
        self._token = token
        self._session = session if session is not None else requests.Session()

    async def request(
        self,
        method: str,
        path: str,
        json: Any | None = None,
    ) -> HttpResponse:
        return await asyncio.to_thread(self._send, method, path, json)

    def _send(self, method: str, path: str, json: Any | None) -> HttpResponse:
        headers = {"Content-Type": "application/json"}
        token = self._token()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        url = self._config.url(path)
        logger.debug("%s %s", method, url)
        response = self._session.request(
            method,
            url,
            json=json,
            headers=headers,
            timeout=self._config.timeout,
        )
        try:
            body = response.json()
        except ValueError:
            body = None
        return HttpResponse(response.status_code, body)

    def close(self) -> None:
        self._session.close()


__all__ = (
    "TokenProvider",
    "HttpResponse",
    "Transport",
    "RequestsTransport",
)
