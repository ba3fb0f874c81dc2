# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
Wire models for the audit service.

All models are frozen Pydantic v2 models. Response models ignore unknown
fields so that additions on the service side do not break parsing; the hash
and index invariants are validated on construction.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from kiket.audit.merkle import HASH_PATTERN, expected_proof_length

HashHex = Annotated[str, Field(pattern=HASH_PATTERN)]
"""A SHA-256 digest as ``0x`` + 64 lowercase hex characters."""

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 25


# ---------------------------------------------------------------------------
# Anchors
# ---------------------------------------------------------------------------


class AnchorRecord(BaseModel, frozen=True):
    """One leaf of an anchor."""

    id: int
    type: str = ""
    leaf_index: int = Field(..., ge=0)
    content_hash: HashHex


class BlockchainAnchor(BaseModel, frozen=True):
    """
    A batch of audit records whose Merkle root was committed on chain.

    Created by the audit service; the SDK only reads it. ``status`` is the
    service's lifecycle string, see :class:`~kiket.types.AnchorStatus`.
    """

    id: int
    merkle_root: HashHex
    leaf_count: int = Field(..., ge=1)
    first_record_at: str | None = None
    last_record_at: str | None = None
    network: str
    status: str
    tx_hash: str | None = None
    block_number: int | None = None
    block_timestamp: str | None = None
    confirmed_at: str | None = None
    explorer_url: str | None = None
    created_at: str | None = None
    records: list[AnchorRecord] = Field(default_factory=list)

    @model_validator(mode="after")
    def _records_within_tree(self) -> BlockchainAnchor:
        for record in self.records:
            if record.leaf_index >= self.leaf_count:
                raise ValueError(
                    f"record {record.id} has leaf_index {record.leaf_index} "
                    f"but the anchor only has {self.leaf_count} leaves"
                )
        return self


class PaginationInfo(BaseModel, frozen=True):
    page: int
    per_page: int
    total: int
    total_pages: int


class ListAnchorsResult(BaseModel, frozen=True):
    anchors: list[BlockchainAnchor] = Field(default_factory=list)
    pagination: PaginationInfo


def _rfc3339(value: datetime) -> str:
    """Format *value* as RFC 3339 with second precision; naive means UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.replace(microsecond=0).isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


class ListAnchorsOptions(BaseModel, frozen=True):
    """
    Filters and paging for :meth:`~kiket.audit.client.AuditClient.list_anchors`.

    Attributes:
        status: Only anchors in this lifecycle state.
        network: Only anchors on this network.
        from_: Only anchors covering records at or after this time.
        to: Only anchors covering records at or before this time.
        page: 1-based page number. Values below 1 fall back to 1.
        per_page: Page size. Values below 1 fall back to 25.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status: str | None = None
    network: str | None = None
    from_: datetime | None = Field(default=None, alias="from")
    to: datetime | None = None
    page: int = DEFAULT_PAGE
    per_page: int = DEFAULT_PER_PAGE

    def to_params(self) -> dict[str, str]:
        """Return the query parameters for this listing request."""
        params = {
            "page": str(self.page if self.page > 0 else DEFAULT_PAGE),
            "per_page": str(self.per_page if self.per_page > 0 else DEFAULT_PER_PAGE),
        }
        if self.status:
            params["status"] = self.status
        if self.network:
            params["network"] = self.network
        if self.from_ is not None:
            params["from"] = _rfc3339(self.from_)
        if self.to is not None:
            params["to"] = _rfc3339(self.to)
        return params


# ---------------------------------------------------------------------------
# Proofs and verification
# ---------------------------------------------------------------------------


class BlockchainProof(BaseModel, frozen=True):
    """
    Merkle inclusion proof for a single audit record.

    ``proof`` lists sibling hashes from the leaf towards the root; its length
    is ``ceil(log2(leaf_count))``, so a single-leaf anchor has an empty proof
    and the record hash is the root.
    """

    record_id: int
    record_type: str = ""
    content_hash: HashHex
    anchor_id: int
    merkle_root: HashHex
    leaf_index: int = Field(..., ge=0)
    leaf_count: int = Field(..., ge=1)
    proof: list[HashHex] = Field(default_factory=list)
    network: str
    tx_hash: str | None = None
    block_number: int | None = None
    block_timestamp: str | None = None
    verified: bool = False
    verification_url: str | None = None

    @model_validator(mode="after")
    def _check_tree_shape(self) -> BlockchainProof:
        if self.leaf_index >= self.leaf_count:
            raise ValueError(
                f"leaf_index {self.leaf_index} out of range for {self.leaf_count} leaves"
            )
        expected = expected_proof_length(self.leaf_count)
        if len(self.proof) != expected:
            raise ValueError(
                f"proof has {len(self.proof)} siblings; a tree of "
                f"{self.leaf_count} leaves needs {expected}"
            )
        return self


class VerifyRequest(BaseModel, frozen=True):
    """Request body for remote proof verification."""

    content_hash: str
    merkle_root: str
    proof: list[str]
    leaf_index: int
    tx_hash: str | None = None

    @classmethod
    def from_proof(cls, proof: BlockchainProof) -> VerifyRequest:
        return cls(
            content_hash=proof.content_hash,
            merkle_root=proof.merkle_root,
            proof=list(proof.proof),
            leaf_index=proof.leaf_index,
            tx_hash=proof.tx_hash,
        )

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body; ``tx_hash`` is always present, possibly null."""
        return self.model_dump(mode="json")


class VerificationResult(BaseModel, frozen=True):
    """
    Outcome of a local or remote proof verification.

    Attributes:
        verified: Overall verdict: the Merkle path is valid and the root was
            confirmed on chain. Always False for local verification.
        proof_valid: The Merkle path recomputes to the root.
        blockchain_verified: The root was confirmed on chain. Always False
            for local verification.
        error: Human-readable reason when verification could not be
            completed or failed.
    """

    verified: bool
    proof_valid: bool
    blockchain_verified: bool
    content_hash: str
    merkle_root: str
    leaf_index: int
    block_number: int | None = None
    block_timestamp: str | None = None
    network: str | None = None
    explorer_url: str | None = None
    error: str | None = None
