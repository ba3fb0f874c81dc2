# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
HTTP transport used by the audit client.

The audit client depends only on the :class:`HttpClient` protocol, so tests
and callers with their own transport can inject any object that satisfies
it. :class:`HttpxClient` is the default implementation.

Every call takes an optional ``timeout`` in seconds. When omitted the
configured default applies, so no request can block indefinitely. Calls are
never retried here; retry policy belongs to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

import httpx

from kiket.config import ClientConfig
from kiket.errors import APIError, ResponseParseError, TransportError

logger = logging.getLogger("kiket.http")

API_KEY_HEADER = "X-Kiket-API-Key"


# ---------------------------------------------------------------------------
# HTTP client protocol
# ---------------------------------------------------------------------------


class HttpClient(Protocol):
    """
    Protocol for the HTTP dependency of :class:`~kiket.audit.client.AuditClient`.

    Implementations return the decoded JSON body and raise
    :class:`~kiket.errors.AuditServiceError` subclasses on failure.
    """

    def get(
        self,
        path: str,
        params: Mapping[str, str] | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Perform a GET request and return the parsed JSON response."""
        ...

    def post(
        self,
        path: str,
        data: Any,
        *,
        timeout: float | None = None,
    ) -> Any:
        """POST *data* as JSON and return the parsed JSON response."""
        ...


# ---------------------------------------------------------------------------
# httpx implementation
# ---------------------------------------------------------------------------


def auth_headers(config: ClientConfig) -> dict[str, str]:
    """Return the authentication headers for *config*; the API key wins."""
    if config.api_key:
        return {API_KEY_HEADER: config.api_key}
    if config.workspace_token:
        return {"Authorization": f"Bearer {config.workspace_token}"}
    return {}


class HttpxClient:
    """
    :class:`HttpClient` backed by a synchronous :class:`httpx.Client`.

    Use as a context manager, or call :meth:`close` when done::

        with HttpxClient(ClientConfig(api_key="ext_123")) as http:
            anchors = AuditClient(http).list_anchors()

    Args:
        config: Base URL, default timeout and credentials.
        transport: Optional httpx transport, e.g. ``httpx.MockTransport``
            in tests.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config or ClientConfig()
        headers = {"Accept": "application/json", **auth_headers(self._config)}
        self._client = httpx.Client(
            base_url=self._config.base_url,
            headers=headers,
            timeout=self._config.timeout_seconds,
            transport=transport,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    def get(
        self,
        path: str,
        params: Mapping[str, str] | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        return self._request("GET", path, params=params, timeout=timeout)

    def post(
        self,
        path: str,
        data: Any,
        *,
        timeout: float | None = None,
    ) -> Any:
        return self._request("POST", path, json_body=data, timeout=timeout)

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Any = None,
        timeout: float | None = None,
    ) -> Any:
        effective_timeout = timeout if timeout is not None else self._config.timeout_seconds
        logger.debug("audit service request", extra={"method": method, "path": path})
        try:
            response = self._client.request(
                method,
                path,
                params=dict(params) if params else None,
                json=json_body,
                timeout=effective_timeout,
            )
        except httpx.HTTPError as exc:
            logger.warning(
                "audit service request failed: %s",
                exc,
                extra={"method": method, "path": path},
            )
            raise TransportError(f"request failed: {exc}") from exc

        if response.status_code >= 400:
            logger.warning(
                "audit service returned status %d",
                response.status_code,
                extra={"method": method, "path": path},
            )
            raise APIError(response.status_code, response.text)

        try:
            return response.json()
        except ValueError as exc:
            raise ResponseParseError(str(exc)) from exc

    def close(self) -> None:
        """Release pooled connections."""
        self._client.close()

    def __enter__(self) -> HttpxClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
