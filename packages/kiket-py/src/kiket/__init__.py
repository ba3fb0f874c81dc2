# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
"""
kiket — Python SDK for verifying Kiket webhook deliveries and audit proofs.

Quick start::

    from kiket import WebhookAuthenticator, WebhookAuthConfig
    from kiket import compute_content_hash, verify_proof_locally

    auth = WebhookAuthenticator(WebhookAuthConfig(secret="s3cr3t"))
    auth.verify(body, headers)  # raises WebhookAuthenticationError

    leaf = compute_content_hash({"id": 1, "action": "issue.created"})
    included = verify_proof_locally(leaf, proof.proof, proof.leaf_index, proof.merkle_root)
"""
from __future__ import annotations

from kiket.audit.client import AuditClient
from kiket.audit.merkle import (
    ProofCheck,
    build_inclusion_proof,
    build_merkle_root,
    check_proof,
    compute_content_hash,
    verify_proof_locally,
)
from kiket.audit.models import (
    AnchorRecord,
    BlockchainAnchor,
    BlockchainProof,
    ListAnchorsOptions,
    ListAnchorsResult,
    PaginationInfo,
    VerificationResult,
    VerifyRequest,
)
from kiket.config import ClientConfig, KiketConfig, WebhookAuthConfig
from kiket.errors import (
    APIError,
    AuditServiceError,
    AuthFailureKind,
    ConfigurationError,
    FreshnessError,
    IntegrityError,
    KiketError,
    ProtocolError,
    ResponseParseError,
    TransportError,
    WebhookAuthenticationError,
    is_authentication_error,
)
from kiket.http import HttpClient, HttpxClient
from kiket.types import AnchorStatus, Clock, Headers
from kiket.webhook import (
    WebhookAuthenticator,
    build_signed_headers,
    generate_signature,
    verify_signature,
)

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "KiketConfig",
    "WebhookAuthConfig",
    "ClientConfig",
    # Types
    "Headers",
    "Clock",
    "AnchorStatus",
    # Webhook authentication
    "WebhookAuthenticator",
    "verify_signature",
    "generate_signature",
    "build_signed_headers",
    # Audit proofs
    "AuditClient",
    "AnchorRecord",
    "BlockchainAnchor",
    "BlockchainProof",
    "ListAnchorsOptions",
    "ListAnchorsResult",
    "PaginationInfo",
    "VerificationResult",
    "VerifyRequest",
    "ProofCheck",
    "compute_content_hash",
    "verify_proof_locally",
    "check_proof",
    "build_merkle_root",
    "build_inclusion_proof",
    # Transport
    "HttpClient",
    "HttpxClient",
    # Errors
    "KiketError",
    "AuthFailureKind",
    "WebhookAuthenticationError",
    "ConfigurationError",
    "ProtocolError",
    "FreshnessError",
    "IntegrityError",
    "is_authentication_error",
    "AuditServiceError",
    "TransportError",
    "APIError",
    "ResponseParseError",
    "__version__",
]
