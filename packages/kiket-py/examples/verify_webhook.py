# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
"""
Webhook authentication example.

Signs a delivery the way the Kiket platform does, then authenticates it and
shows how each failure maps to an HTTP status.

Run with:
    python examples/verify_webhook.py
"""
from __future__ import annotations

import logging

from kiket import (
    WebhookAuthConfig,
    WebhookAuthenticator,
    build_signed_headers,
    is_authentication_error,
)


def handle(auth: WebhookAuthenticator, body: bytes, headers: dict[str, str]) -> int:
    """Return the HTTP status a webhook endpoint would answer with."""
    try:
        auth.verify(body, headers)
    except Exception as exc:
        if is_authentication_error(exc):
            print(f"  rejected ({exc.kind.value}): {exc}")
            return exc.http_status
        raise
    return 200


def main() -> None:
    logging.basicConfig(level=logging.INFO)

    now = 1_700_000_000
    auth = WebhookAuthenticator(WebhookAuthConfig(secret="s3cr3t"), clock=lambda: now)
    body = b'{"event":"issue.created","issue":{"id":7}}'

    print("=== Valid delivery ===")
    headers = build_signed_headers("s3cr3t", body, now)
    print(f"  status {handle(auth, body, headers)}")

    print("=== Tampered body ===")
    print(f"  status {handle(auth, body.replace(b'7', b'8'), headers)}")

    print("=== Replayed delivery (six minutes old) ===")
    stale = build_signed_headers("s3cr3t", body, now - 360)
    print(f"  status {handle(auth, body, stale)}")

    print("=== Missing timestamp ===")
    partial = {"X-Kiket-Signature": headers["X-Kiket-Signature"]}
    print(f"  status {handle(auth, body, partial)}")


if __name__ == "__main__":
    main()
