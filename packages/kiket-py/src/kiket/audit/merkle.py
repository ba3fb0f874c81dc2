# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
Content hashing and Merkle inclusion proofs for anchored audit records.

Hashes are SHA-256 digests written as ``0x`` followed by 64 lowercase hex
characters. Inner nodes are ``SHA256(min(a, b) || max(a, b))`` where the
operands are ordered by raw byte value before concatenation. Because of that
ordering the combine is commutative and the leaf index does not influence the
recomputed root; the anchoring service builds its trees with the same rule, so
it must not be replaced by a left/right combine.

Everything in this module is pure and safe to call from any thread.
"""

from __future__ import annotations

import hashlib
import json
import logging
import math
import re
from decimal import Decimal
from typing import Any, Literal, Mapping, Sequence

from pydantic import BaseModel, Field
from pydantic_core import to_jsonable_python

logger = logging.getLogger("kiket.audit")

HASH_PREFIX = "0x"
HASH_PATTERN = r"^0x[0-9a-f]{64}$"

_HEX_DIGEST_RE = re.compile(r"[0-9a-fA-F]{64}")

ProofCheckReason = Literal[
    "included",
    "root_mismatch",
    "malformed_hash",
    "leaf_index_out_of_range",
    "proof_length_mismatch",
]


class ProofCheck(BaseModel, frozen=True):
    """Outcome of a local Merkle inclusion check."""

    valid: bool = Field(..., description="True if the leaf is included under the root.")
    reason: ProofCheckReason = Field(..., description="Why the check passed or failed.")
    computed_root: str | None = Field(
        default=None,
        description="Root recomputed from the leaf and proof, when the inputs were well formed.",
    )


# ---------------------------------------------------------------------------
# Hash encoding
# ---------------------------------------------------------------------------


def format_hash(digest: bytes) -> str:
    """Render a raw digest in the ``0x``-prefixed lowercase hex form."""
    return HASH_PREFIX + digest.hex()


def normalize_hash(value: str) -> bytes:
    """
    Decode a hash string to raw bytes, accepting an optional ``0x`` prefix.

    Raises:
        ValueError: If the remainder is not exactly 64 hex characters.
    """
    if value.startswith(HASH_PREFIX):
        value = value[len(HASH_PREFIX):]
    if not _HEX_DIGEST_RE.fullmatch(value):
        raise ValueError(f"not a SHA-256 hex digest: {value!r}")
    return bytes.fromhex(value)


def hash_pair(a: bytes, b: bytes) -> bytes:
    """Combine two sibling nodes: sort by byte value, concatenate, SHA-256."""
    if a > b:
        a, b = b, a
    return hashlib.sha256(a + b).digest()


# ---------------------------------------------------------------------------
# Content hash
# ---------------------------------------------------------------------------


_JSON_ESCAPES = str.maketrans(
    {
        "<": "\\u003c",
        ">": "\\u003e",
        "&": "\\u0026",
        "\u2028": "\\u2028",
        "\u2029": "\\u2029",
    }
)


def _format_float(value: float) -> str:
    """Shortest round-trip digits; exponent form only below 1e-6 or from 1e21."""
    if math.isnan(value) or math.isinf(value):
        raise ValueError(f"unsupported float value in record: {value!r}")
    magnitude = abs(value)
    if magnitude != 0 and (magnitude < 1e-6 or magnitude >= 1e21):
        mantissa, _, exponent = repr(value).partition("e")
        if exponent.startswith("-0"):
            exponent = "-" + exponent[2:]
        return f"{mantissa}e{exponent}"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _encode_key(key: Any) -> str:
    if not isinstance(key, str):
        raise TypeError(f"record keys must be strings; got {type(key).__name__}.")
    return key


def _encode(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False).translate(_JSON_ESCAPES)
    if isinstance(value, int):
        return str(int(value))
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, Mapping):
        keys = sorted((_encode_key(key) for key in value), key=lambda k: k.encode("utf-8"))
        return "{" + ",".join(f"{_encode(key)}:{_encode(value[key])}" for key in keys) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_encode(item) for item in value) + "]"
    return _encode(to_jsonable_python(value))


def canonical_bytes(record: Mapping[str, Any]) -> bytes:
    """
    Serialise *record* into the byte form the audit service hashes.

    The output is compact JSON with these rules:

    * mapping keys are sorted by UTF-8 byte value at every nesting level;
    * non-ASCII text is written as UTF-8, except U+2028 and U+2029, which are
      escaped;
    * ``<``, ``>`` and ``&`` are written as ``\\u003c``, ``\\u003e`` and
      ``\\u0026``;
    * floats use their shortest round-trip digits. Integral floats have no
      fraction (``1.0`` becomes ``1``), and exponent form appears only below
      1e-6 or from 1e21.

    Values that JSON cannot encode natively (datetimes, UUIDs, models) go
    through Pydantic's JSON conversion first.

    Raises:
        ValueError: If the record contains NaN or infinity.
        TypeError: If a mapping has a non-string key.
    """
    return _encode(record).encode("utf-8")


def compute_content_hash(record: Mapping[str, Any]) -> str:
    """
    Compute the canonical content hash of an audit record.

    Example::

        compute_content_hash({"b": 2, "a": 1}) == compute_content_hash({"a": 1, "b": 2})

    Returns:
        ``0x`` followed by the lowercase hex SHA-256 of :func:`canonical_bytes`.
    """
    return format_hash(hashlib.sha256(canonical_bytes(record)).digest())


# ---------------------------------------------------------------------------
# Proof verification
# ---------------------------------------------------------------------------


def expected_proof_length(leaf_count: int) -> int:
    """Return the proof length for a tree of *leaf_count* leaves."""
    if leaf_count < 1:
        raise ValueError(f"leaf_count must be >= 1; got {leaf_count}.")
    # ceil(log2(n)) without floating point
    return (leaf_count - 1).bit_length()


def check_proof(
    content_hash: str,
    proof: Sequence[str],
    leaf_index: int,
    merkle_root: str,
    leaf_count: int | None = None,
) -> ProofCheck:
    """
    Recompute the root from a leaf and its inclusion path.

    When *leaf_count* is known the index range and proof length are checked
    before any hashing. Malformed hex never raises; it is reported through
    ``reason``.

    Args:
        content_hash: Leaf hash.
        proof: Sibling hashes ordered from the leaf towards the root.
        leaf_index: Position of the leaf in the tree.
        merkle_root: Root the leaf is claimed to be included under.
        leaf_count: Optional size of the tree.

    Returns:
        A :class:`ProofCheck`; ``valid`` is the primary signal.
    """
    if leaf_index < 0 or (leaf_count is not None and leaf_index >= leaf_count):
        return ProofCheck(valid=False, reason="leaf_index_out_of_range")
    if leaf_count is not None and len(proof) != expected_proof_length(leaf_count):
        return ProofCheck(valid=False, reason="proof_length_mismatch")

    try:
        current = normalize_hash(content_hash)
        siblings = [normalize_hash(sibling) for sibling in proof]
        expected = normalize_hash(merkle_root)
    except ValueError:
        return ProofCheck(valid=False, reason="malformed_hash")

    # sorted combine: leaf_index parity never selects the operand order
    for sibling in siblings:
        current = hash_pair(current, sibling)

    computed = format_hash(current)
    if current != expected:
        logger.debug("merkle proof rejected: root mismatch", extra={"computed_root": computed})
        return ProofCheck(valid=False, reason="root_mismatch", computed_root=computed)
    return ProofCheck(valid=True, reason="included", computed_root=computed)


def verify_proof_locally(
    content_hash: str,
    proof: Sequence[str],
    leaf_index: int,
    merkle_root: str,
) -> bool:
    """
    Return True if *content_hash* is included under *merkle_root*.

    ``False`` does not distinguish a malformed input from a genuine
    non-inclusion; call :func:`check_proof` when the reason matters.
    """
    return check_proof(content_hash, proof, leaf_index, merkle_root).valid


# ---------------------------------------------------------------------------
# Tree construction (fixtures, examples)
# ---------------------------------------------------------------------------


def _levels(leaves: Sequence[str]) -> list[list[bytes]]:
    if not leaves:
        raise ValueError("cannot build a Merkle tree with no leaves.")
    level = [normalize_hash(leaf) for leaf in leaves]
    levels = [level]
    while len(level) > 1:
        if len(level) % 2:
            level = level + [level[-1]]
            levels[-1] = level
        level = [hash_pair(level[i], level[i + 1]) for i in range(0, len(level), 2)]
        levels.append(level)
    return levels


def build_merkle_root(leaves: Sequence[str]) -> str:
    """
    Build the root over *leaves* using the sorted-pair combine.

    Odd-sized levels duplicate their last node. A single leaf is its own root.
    """
    return format_hash(_levels(leaves)[-1][0])


def build_inclusion_proof(leaves: Sequence[str], index: int) -> list[str]:
    """Return the sibling path, leaf to root, for the leaf at *index*."""
    if index < 0 or index >= len(leaves):
        raise IndexError(f"leaf index {index} out of range for {len(leaves)} leaves.")
    proof: list[str] = []
    for level in _levels(leaves)[:-1]:
        proof.append(format_hash(level[index ^ 1]))
        index //= 2
    return proof
