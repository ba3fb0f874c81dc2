# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

from kiket.audit.client import AuditClient
from kiket.audit.merkle import (
    ProofCheck,
    build_inclusion_proof,
    build_merkle_root,
    check_proof,
    compute_content_hash,
    expected_proof_length,
    hash_pair,
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

__all__ = [
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
    "hash_pair",
    "expected_proof_length",
    "build_merkle_root",
    "build_inclusion_proof",
]
