# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

from enum import Enum


class KiketError(Exception):
    """Base class for all kiket SDK errors."""

    def __init__(self, message: str, code: str = "KIKET_ERROR") -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


# ---------------------------------------------------------------------------
# Webhook authentication
# ---------------------------------------------------------------------------


class AuthFailureKind(str, Enum):
    """
    Closed set of reasons a webhook delivery can be rejected.

    Every :class:`WebhookAuthenticationError` carries exactly one of these.
    """

    CONFIGURATION = "configuration"
    PROTOCOL = "protocol"
    FRESHNESS = "freshness"
    INTEGRITY = "integrity"


class WebhookAuthenticationError(KiketError):
    """
    Raised when an inbound webhook delivery fails authentication.

    The subclasses form a closed family; match on :attr:`kind` or use
    :func:`is_authentication_error`. None of them are retryable, the caller
    must reject the request.

    Attributes:
        kind: The :class:`AuthFailureKind` tag for this failure.
    """

    kind: AuthFailureKind
    http_status: int = 401

    def __init__(self, message: str, code: str) -> None:
        super().__init__(message, code=code)


class ConfigurationError(WebhookAuthenticationError):
    """Raised when no webhook secret is configured."""

    kind = AuthFailureKind.CONFIGURATION

    def __init__(self, message: str = "webhook secret not configured") -> None:
        super().__init__(message, code="WEBHOOK_SECRET_NOT_CONFIGURED")


class ProtocolError(WebhookAuthenticationError):
    """Raised when a required header is missing or malformed."""

    kind = AuthFailureKind.PROTOCOL

    def __init__(self, message: str, code: str, header: str) -> None:
        super().__init__(message, code=code)
        self.header = header


class FreshnessError(WebhookAuthenticationError):
    """
    Raised when the request timestamp falls outside the replay window.

    Attributes:
        age_seconds: Absolute difference between receipt time and the
            request timestamp.
        tolerance_seconds: The window that was exceeded.
    """

    kind = AuthFailureKind.FRESHNESS

    def __init__(self, age_seconds: int, tolerance_seconds: int) -> None:
        super().__init__(
            f"request timestamp too old or too far in future: {age_seconds}s "
            f"(tolerance {tolerance_seconds}s)",
            code="STALE_TIMESTAMP",
        )
        self.age_seconds = age_seconds
        self.tolerance_seconds = tolerance_seconds


class IntegrityError(WebhookAuthenticationError):
    """Raised when the HMAC signature does not match the payload."""

    kind = AuthFailureKind.INTEGRITY

    def __init__(self, message: str = "invalid signature") -> None:
        super().__init__(message, code="INVALID_SIGNATURE")


def is_authentication_error(exc: BaseException) -> bool:
    """Return True when *exc* belongs to the webhook authentication family."""
    return isinstance(exc, WebhookAuthenticationError)


# ---------------------------------------------------------------------------
# Audit service
# ---------------------------------------------------------------------------


class AuditServiceError(KiketError):
    """Base class for failures talking to the remote audit service."""

    def __init__(self, message: str, code: str = "AUDIT_SERVICE_ERROR") -> None:
        super().__init__(message, code=code)


class TransportError(AuditServiceError):
    """Raised when the request could not be completed (network, timeout)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="TRANSPORT_ERROR")


class APIError(AuditServiceError):
    """
    Raised when the audit service answers with an error status.

    Attributes:
        status_code: HTTP status code of the response.
        body: Raw response body text.
    """

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(
            f"API error (status {status_code}): {body}",
            code="API_ERROR",
        )
        self.status_code = status_code
        self.body = body


class ResponseParseError(AuditServiceError):
    """Raised when a response body is not the JSON shape that was expected."""

    def __init__(self, message: str) -> None:
        super().__init__(f"failed to parse response: {message}", code="RESPONSE_PARSE_ERROR")
