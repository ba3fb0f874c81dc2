# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, Field

DEFAULT_BASE_URL = "https://kiket.dev"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_TOLERANCE_SECONDS = 300

SIGNATURE_HEADER = "X-Kiket-Signature"
TIMESTAMP_HEADER = "X-Kiket-Timestamp"


class WebhookAuthConfig(BaseModel, frozen=True):
    """
    Configuration for the WebhookAuthenticator.

    Attributes:
        secret: Shared HMAC secret, as text or raw bytes. An empty secret makes
            every verification fail with a configuration error.
        tolerance_seconds: Maximum allowed difference, in either direction,
            between the request timestamp and the receipt time. The boundary
            itself is accepted.
        signature_header: Canonical name of the signature header. The
            all-lowercase variant is also consulted.
        timestamp_header: Canonical name of the timestamp header. The
            all-lowercase variant is also consulted.
    """

    secret: str | bytes = ""
    tolerance_seconds: Annotated[int, Field(ge=0)] = DEFAULT_TOLERANCE_SECONDS
    signature_header: str = SIGNATURE_HEADER
    timestamp_header: str = TIMESTAMP_HEADER


class ClientConfig(BaseModel, frozen=True):
    """
    Configuration for the audit service HTTP client.

    Attributes:
        base_url: Root URL of the Kiket API.
        timeout_seconds: Default per-request deadline, used whenever a call
            does not supply its own.
        api_key: Extension API key, sent as ``X-Kiket-API-Key``. Takes
            precedence over ``workspace_token``.
        workspace_token: Workspace token, sent as a bearer token.
    """

    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: Annotated[float, Field(gt=0)] = DEFAULT_TIMEOUT_SECONDS
    api_key: str | None = None
    workspace_token: str | None = None


class KiketConfig(BaseModel, frozen=True):
    """
    Top-level configuration grouping webhook and client settings.

    Example::

        config = KiketConfig(
            webhook=WebhookAuthConfig(secret="s3cr3t"),
            client=ClientConfig(api_key="ext_123", timeout_seconds=10),
        )
        authenticator = WebhookAuthenticator(config.webhook)
        audit = AuditClient.from_config(config.client)
    """

    webhook: WebhookAuthConfig = Field(default_factory=WebhookAuthConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
