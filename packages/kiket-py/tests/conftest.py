# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
"""Shared fixtures for kiket Python SDK tests."""

from __future__ import annotations

import hashlib

import pytest

from kiket.audit.merkle import format_hash
from kiket.config import WebhookAuthConfig
from kiket.webhook import WebhookAuthenticator

FIXED_NOW = 1_700_000_000
SECRET = "s3cr3t"


@pytest.fixture
def fixed_clock():
    """A clock frozen at 1700000000 (2023-11-14T22:13:20Z)."""
    return lambda: float(FIXED_NOW)


@pytest.fixture
def authenticator(fixed_clock) -> WebhookAuthenticator:
    """An authenticator with secret 's3cr3t' and the default 300s window."""
    return WebhookAuthenticator(WebhookAuthConfig(secret=SECRET), clock=fixed_clock)


@pytest.fixture
def leaves() -> list[str]:
    """Five distinct leaf hashes."""
    return [format_hash(hashlib.sha256(f"record-{i}".encode()).digest()) for i in range(5)]
