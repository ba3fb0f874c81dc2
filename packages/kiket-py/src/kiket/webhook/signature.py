# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
"""
HMAC-SHA256 signing for Kiket webhook deliveries.

The signed message is ``<timestamp>.<raw body>`` where ``<timestamp>`` is the
decimal Unix-seconds string carried in the timestamp header, byte for byte.
Signing and verification both go through :func:`compute_signature` so the two
sides can never drift apart.
"""
from __future__ import annotations

import hashlib
import hmac

from kiket.config import SIGNATURE_HEADER, TIMESTAMP_HEADER
from kiket.types import Clock, system_clock


def _as_bytes(value: str | bytes) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def signing_message(timestamp: str, body: str | bytes) -> bytes:
    """Return the exact byte string that is fed to the HMAC."""
    return timestamp.encode("utf-8") + b"." + _as_bytes(body)


def compute_signature(secret: str | bytes, timestamp: str, body: str | bytes) -> str:
    """
    Compute the lowercase hex HMAC-SHA256 signature for a delivery.

    Args:
        secret: Shared webhook secret.
        timestamp: Timestamp string exactly as it appears on the wire.
        body: Raw request body.

    Returns:
        64 lowercase hex characters.
    """
    mac = hmac.new(_as_bytes(secret), signing_message(timestamp, body), hashlib.sha256)
    return mac.hexdigest()


def generate_signature(
    secret: str | bytes,
    body: str | bytes,
    timestamp: int | None = None,
    *,
    clock: Clock | None = None,
) -> tuple[str, str]:
    """
    Generate a signature and its timestamp string for a payload.

    Intended for building test fixtures and for senders. When *timestamp* is
    omitted the current time is sampled from *clock* (the system clock by
    default), so the result is deterministic only with an explicit timestamp.

    Returns:
        ``(signature_hex, timestamp_str)``.
    """
    if timestamp is None:
        timestamp = int((clock or system_clock)())
    ts = str(timestamp)
    return compute_signature(secret, ts, body), ts


def build_signed_headers(
    secret: str | bytes,
    body: str | bytes,
    timestamp: int | None = None,
    *,
    clock: Clock | None = None,
) -> dict[str, str]:
    """Return signature and timestamp headers for *body*, ready to send."""
    signature, ts = generate_signature(secret, body, timestamp, clock=clock)
    return {SIGNATURE_HEADER: signature, TIMESTAMP_HEADER: ts}
