# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
"""
Authentication of inbound webhook deliveries.

A delivery is accepted only when all of the following hold, checked in this
order (the first failing check decides the error):

1. a webhook secret is configured;
2. the signature header is present;
3. the timestamp header is present;
4. the timestamp is a base-10 signed integer;
5. the timestamp lies within ``tolerance_seconds`` of now, in either
   direction (the boundary is accepted);
6. the HMAC-SHA256 of ``<timestamp>.<body>`` matches the signature header
   under a constant-time comparison.

The authenticator is a pure predicate over its inputs and the injected clock.
It performs no I/O and keeps no state between calls, so one instance may be
shared freely across threads.
"""
from __future__ import annotations

import hmac
import logging
import re

from kiket.config import DEFAULT_TOLERANCE_SECONDS, WebhookAuthConfig
from kiket.errors import (
    ConfigurationError,
    FreshnessError,
    IntegrityError,
    ProtocolError,
    WebhookAuthenticationError,
)
from kiket.types import Clock, Headers, system_clock
from kiket.webhook.signature import compute_signature

logger = logging.getLogger("kiket.auth")

_TIMESTAMP_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def _lookup(headers: Headers, name: str) -> str:
    """Return the header value under *name* or its lowercase form, else ''."""
    value = headers.get(name)
    if not value:
        value = headers.get(name.lower())
    return value or ""


def parse_timestamp(raw: str) -> int:
    """
    Parse a wire timestamp as a signed 64-bit base-10 integer.

    Surrounding whitespace, digit separators and non-ASCII digits are all
    rejected, unlike :func:`int`.

    Raises:
        ProtocolError: If *raw* is not a valid timestamp.
    """
    if not _TIMESTAMP_RE.fullmatch(raw):
        raise ProtocolError("invalid timestamp", code="INVALID_TIMESTAMP", header="timestamp")
    value = int(raw)
    if value < _INT64_MIN or value > _INT64_MAX:
        raise ProtocolError("invalid timestamp", code="INVALID_TIMESTAMP", header="timestamp")
    return value


class WebhookAuthenticator:
    """
    Verifies the HMAC signature and freshness of webhook deliveries.

    Example::

        auth = WebhookAuthenticator(WebhookAuthConfig(secret="s3cr3t"))
        try:
            auth.verify(request_body, request_headers)
        except WebhookAuthenticationError as exc:
            return Response(status_code=exc.http_status)

    Args:
        config: Secret, replay window and header names.
        clock: Source of the current Unix time in seconds. Defaults to the
            system clock; tests pass a fixed value.
    """

    def __init__(
        self,
        config: WebhookAuthConfig | None = None,
        *,
        clock: Clock | None = None,
    ) -> None:
        self._config = config or WebhookAuthConfig()
        self._clock = clock or system_clock

    @property
    def config(self) -> WebhookAuthConfig:
        """The configuration this authenticator was constructed with."""
        return self._config

    def verify(
        self,
        body: str | bytes,
        headers: Headers,
        *,
        secret: str | bytes | None = None,
    ) -> None:
        """
        Authenticate a single delivery.

        Args:
            body: The raw request body, exactly as received.
            headers: Request headers.
            secret: Overrides the configured secret for this call only, for
                receivers that look up a per-installation secret.

        Raises:
            ConfigurationError: No secret is configured.
            ProtocolError: A header is missing or the timestamp is malformed.
            FreshnessError: The timestamp is outside the replay window.
            IntegrityError: The signature does not match.
        """
        try:
            self._verify(body, headers, self._config.secret if secret is None else secret)
        except WebhookAuthenticationError as exc:
            logger.warning(
                "webhook rejected: %s",
                exc.message,
                extra={"auth_failure_kind": exc.kind.value, "auth_failure_code": exc.code},
            )
            raise
        logger.debug("webhook signature verified")

    def _verify(self, body: str | bytes, headers: Headers, secret: str | bytes) -> None:
        cfg = self._config
        if not secret:
            raise ConfigurationError()

        signature = _lookup(headers, cfg.signature_header)
        if not signature:
            raise ProtocolError(
                "missing signature header",
                code="MISSING_SIGNATURE",
                header=cfg.signature_header,
            )

        timestamp = _lookup(headers, cfg.timestamp_header)
        if not timestamp:
            raise ProtocolError(
                "missing timestamp header",
                code="MISSING_TIMESTAMP",
                header=cfg.timestamp_header,
            )

        request_time = parse_timestamp(timestamp)

        now = int(self._clock())
        age = abs(now - request_time)
        if age > cfg.tolerance_seconds:
            raise FreshnessError(age_seconds=age, tolerance_seconds=cfg.tolerance_seconds)

        expected = compute_signature(secret, timestamp, body)
        if not hmac.compare_digest(signature.encode("utf-8"), expected.encode("ascii")):
            raise IntegrityError()


def verify_signature(
    secret: str | bytes,
    body: str | bytes,
    headers: Headers,
    *,
    tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS,
    clock: Clock | None = None,
) -> None:
    """
    Authenticate a delivery without constructing an authenticator first.

    Equivalent to ``WebhookAuthenticator(WebhookAuthConfig(secret=secret,
    tolerance_seconds=tolerance_seconds), clock=clock).verify(body, headers)``.
    """
    config = WebhookAuthConfig(secret=secret, tolerance_seconds=tolerance_seconds)
    WebhookAuthenticator(config, clock=clock).verify(body, headers)
