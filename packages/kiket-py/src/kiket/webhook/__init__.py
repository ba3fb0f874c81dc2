# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
"""Webhook delivery authentication."""
from __future__ import annotations

from kiket.webhook.authenticator import (
    WebhookAuthenticator,
    parse_timestamp,
    verify_signature,
)
from kiket.webhook.signature import (
    build_signed_headers,
    compute_signature,
    generate_signature,
    signing_message,
)

__all__ = [
    "WebhookAuthenticator",
    "verify_signature",
    "parse_timestamp",
    "generate_signature",
    "compute_signature",
    "build_signed_headers",
    "signing_message",
]
