# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
"""
Audit proof example.

Hashes a handful of audit records, builds the anchor tree locally, and checks
inclusion of one record both with the bare function and through
AuditClient.verify_locally. Pass ``--remote RECORD_ID`` together with the
KIKET_API_KEY environment variable to fetch and confirm a real proof.

Run with:
    python examples/verify_audit_proof.py
    KIKET_API_KEY=... python examples/verify_audit_proof.py --remote 42
"""
from __future__ import annotations

import argparse
import os

from kiket import (
    AuditClient,
    BlockchainProof,
    ClientConfig,
    build_inclusion_proof,
    build_merkle_root,
    compute_content_hash,
    verify_proof_locally,
)


def local_demo() -> None:
    records = [
        {"id": i, "action": "issue.updated", "actor": f"user-{i}", "changes": {"status": "done"}}
        for i in range(1, 6)
    ]
    leaves = [compute_content_hash(record) for record in records]
    root = build_merkle_root(leaves)
    print(f"anchor root: {root} ({len(leaves)} leaves)")

    index = 3
    path = build_inclusion_proof(leaves, index)
    print(f"record {records[index]['id']} included: "
          f"{verify_proof_locally(leaves[index], path, index, root)}")

    proof = BlockchainProof(
        record_id=records[index]["id"],
        record_type="AuditLog",
        content_hash=leaves[index],
        anchor_id=1,
        merkle_root=root,
        leaf_index=index,
        leaf_count=len(leaves),
        proof=path,
        network="polygon_amoy",
    )
    client = AuditClient.from_config()
    result = client.verify_locally(proof)
    print(f"verify_locally: proof_valid={result.proof_valid} error={result.error}")


def remote_demo(record_id: int) -> None:
    config = ClientConfig(
        api_key=os.environ.get("KIKET_API_KEY"),
        base_url=os.environ.get("KIKET_BASE_URL", "https://kiket.dev"),
    )
    client = AuditClient.from_config(config)
    proof = client.get_proof(record_id)
    local = client.verify_locally(proof)
    remote = client.verify(proof, timeout=10.0)
    print(f"local proof_valid={local.proof_valid}")
    print(f"remote verified={remote.verified} on-chain={remote.blockchain_verified} "
          f"explorer={remote.explorer_url}")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--remote", type=int, metavar="RECORD_ID")
    args = parser.parse_args()
    if args.remote is not None:
        remote_demo(args.remote)
    else:
        local_demo()


if __name__ == "__main__":
    main()
