# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
Client for the Kiket blockchain audit service.

Read calls fetch anchors and proofs; :meth:`AuditClient.verify` asks the
service for an authoritative verdict, which may disagree with a local check
when, for example, the anchoring transaction was reorganised away or never
confirmed. :meth:`AuditClient.verify_locally` performs only the Merkle check
and never touches the network.

No call is retried and no failure is swallowed: transport errors, error
statuses and unparseable bodies all surface as
:class:`~kiket.errors.AuditServiceError` subclasses.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, TypeVar
from urllib.parse import quote

from pydantic import BaseModel, ValidationError

from kiket.audit.merkle import check_proof
from kiket.audit.models import (
    BlockchainAnchor,
    BlockchainProof,
    ListAnchorsOptions,
    ListAnchorsResult,
    VerificationResult,
    VerifyRequest,
)
from kiket.config import ClientConfig
from kiket.errors import ResponseParseError
from kiket.http import HttpClient, HttpxClient

logger = logging.getLogger("kiket.audit")

AUDIT_PREFIX = "/api/v1/audit"

M = TypeVar("M", bound=BaseModel)


def _parse(model: type[M], payload: Any) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ResponseParseError(f"invalid {model.__name__}: {exc}") from exc


class AuditClient:
    """
    Anchor and proof operations against the audit service.

    Example::

        with HttpxClient(ClientConfig(api_key="ext_123")) as http:
            audit = AuditClient(http)
            proof = audit.get_proof(42)
            assert audit.verify_locally(proof).proof_valid
            result = audit.verify(proof, timeout=5.0)

    Args:
        http: Transport satisfying :class:`~kiket.http.HttpClient`.
    """

    def __init__(self, http: HttpClient) -> None:
        self._http = http

    @classmethod
    def from_config(cls, config: ClientConfig | None = None) -> AuditClient:
        """Build a client over a fresh :class:`~kiket.http.HttpxClient`."""
        return cls(HttpxClient(config))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_anchors(
        self,
        options: ListAnchorsOptions | None = None,
        *,
        status: str | None = None,
        network: str | None = None,
        from_: datetime | None = None,
        to: datetime | None = None,
        page: int | None = None,
        per_page: int | None = None,
        timeout: float | None = None,
    ) -> ListAnchorsResult:
        """
        List anchors for the organisation, one page at a time.

        Filters may be given either as a :class:`ListAnchorsOptions` or as
        keyword arguments; keywords override fields of *options*.
        """
        overrides = {
            key: value
            for key, value in (
                ("status", status),
                ("network", network),
                ("from_", from_),
                ("to", to),
                ("page", page),
                ("per_page", per_page),
            )
            if value is not None
        }
        opts = (options or ListAnchorsOptions()).model_copy(update=overrides)
        payload = self._http.get(f"{AUDIT_PREFIX}/anchors", opts.to_params(), timeout=timeout)
        return _parse(ListAnchorsResult, payload)

    def get_anchor(
        self,
        merkle_root: str,
        *,
        include_records: bool = False,
        timeout: float | None = None,
    ) -> BlockchainAnchor:
        """Fetch one anchor by its Merkle root, optionally with its leaf records."""
        params = {"include_records": "true"} if include_records else None
        payload = self._http.get(
            f"{AUDIT_PREFIX}/anchors/{quote(merkle_root, safe='')}",
            params,
            timeout=timeout,
        )
        return _parse(BlockchainAnchor, payload)

    def get_proof(self, record_id: int, *, timeout: float | None = None) -> BlockchainProof:
        """Fetch the inclusion proof for an audit record."""
        payload = self._http.get(f"{AUDIT_PREFIX}/records/{int(record_id)}/proof", timeout=timeout)
        return _parse(BlockchainProof, payload)

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    def verify(self, proof: BlockchainProof, *, timeout: float | None = None) -> VerificationResult:
        """
        Submit *proof* to the audit service for on-chain confirmation.

        Args:
            proof: The proof to confirm.
            timeout: Deadline in seconds for this call; the transport default
                applies when omitted.

        Returns:
            The service's :class:`VerificationResult`.

        Raises:
            AuditServiceError: On transport failure, an error status, or an
                unparseable response.
        """
        request = VerifyRequest.from_proof(proof)
        payload = self._http.post(f"{AUDIT_PREFIX}/verify", request.to_payload(), timeout=timeout)
        result = _parse(VerificationResult, payload)
        logger.info(
            "remote proof verification: verified=%s",
            result.verified,
            extra={"record_id": proof.record_id, "anchor_id": proof.anchor_id},
        )
        return result

    def verify_locally(self, proof: BlockchainProof) -> VerificationResult:
        """
        Check the Merkle path of *proof* without contacting the service.

        The Merkle outcome is reported in ``proof_valid``. ``verified`` and
        ``blockchain_verified`` stay False because the anchor was not confirmed
        on chain; use :meth:`verify` for the full verdict. ``error`` carries the
        failure reason when the path does not recompute to the root.
        """
        check = check_proof(
            proof.content_hash,
            proof.proof,
            proof.leaf_index,
            proof.merkle_root,
            leaf_count=proof.leaf_count,
        )
        return VerificationResult(
            verified=False,
            proof_valid=check.valid,
            blockchain_verified=False,
            content_hash=proof.content_hash,
            merkle_root=proof.merkle_root,
            leaf_index=proof.leaf_index,
            block_number=proof.block_number,
            block_timestamp=proof.block_timestamp,
            network=proof.network,
            error=None if check.valid else check.reason,
        )
