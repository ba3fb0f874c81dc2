# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
"""
Tests for the audit models, HttpxClient and AuditClient.

HTTP traffic goes through httpx.MockTransport; nothing touches the network.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import httpx
import pytest
from pydantic import ValidationError

from kiket.audit.client import AuditClient
from kiket.audit.merkle import build_inclusion_proof, build_merkle_root
from kiket.audit.models import (
    BlockchainAnchor,
    BlockchainProof,
    ListAnchorsOptions,
    VerifyRequest,
)
from kiket.config import ClientConfig
from kiket.errors import APIError, AuditServiceError, ResponseParseError, TransportError
from kiket.http import HttpxClient
from kiket.types import AnchorStatus

Handler = Callable[[httpx.Request], httpx.Response]


def _client(handler: Handler, **config: Any) -> AuditClient:
    http = HttpxClient(ClientConfig(**config), transport=httpx.MockTransport(handler))
    return AuditClient(http)


def _proof_payload(leaves: list[str], index: int, **overrides: Any) -> dict[str, Any]:
    payload = {
        "record_id": 42,
        "record_type": "AuditLog",
        "content_hash": leaves[index],
        "anchor_id": 7,
        "merkle_root": build_merkle_root(leaves),
        "leaf_index": index,
        "leaf_count": len(leaves),
        "proof": build_inclusion_proof(leaves, index),
        "network": "polygon_amoy",
        "tx_hash": "0xdeadbeef",
        "block_number": 123,
        "block_timestamp": "2024-05-01T12:00:00Z",
        "verified": True,
        "verification_url": "https://amoy.polygonscan.com/tx/0xdeadbeef",
    }
    payload.update(overrides)
    return payload


def _anchor_payload(root: str, **overrides: Any) -> dict[str, Any]:
    payload = {
        "id": 7,
        "merkle_root": root,
        "leaf_count": 5,
        "first_record_at": "2024-05-01T00:00:00Z",
        "last_record_at": "2024-05-01T01:00:00Z",
        "network": "polygon_amoy",
        "status": "confirmed",
        "tx_hash": "0xdeadbeef",
        "block_number": 123,
        "block_timestamp": "2024-05-01T12:00:00Z",
        "confirmed_at": "2024-05-01T12:01:00Z",
        "explorer_url": "https://amoy.polygonscan.com/tx/0xdeadbeef",
        "created_at": "2024-05-01T01:05:00Z",
    }
    payload.update(overrides)
    return payload


# ---------------------------------------------------------------------------
# TestModels
# ---------------------------------------------------------------------------


class TestModels:
    def test_proof_parses_service_payload(self, leaves: list[str]) -> None:
        proof = BlockchainProof.model_validate(_proof_payload(leaves, 1))
        assert proof.leaf_index == 1
        assert len(proof.proof) == 3

    def test_proof_is_frozen(self, leaves: list[str]) -> None:
        proof = BlockchainProof.model_validate(_proof_payload(leaves, 1))
        with pytest.raises(ValidationError):
            proof.leaf_index = 2  # type: ignore[misc]

    def test_proof_rejects_leaf_index_out_of_range(self, leaves: list[str]) -> None:
        with pytest.raises(ValidationError, match="out of range"):
            BlockchainProof.model_validate(_proof_payload(leaves, 1, leaf_index=5))

    def test_proof_rejects_wrong_proof_length(self, leaves: list[str]) -> None:
        payload = _proof_payload(leaves, 1)
        payload["proof"] = payload["proof"][:2]
        with pytest.raises(ValidationError, match="needs 3"):
            BlockchainProof.model_validate(payload)

    def test_proof_rejects_uppercase_hash(self, leaves: list[str]) -> None:
        payload = _proof_payload(leaves, 1, content_hash="0x" + leaves[1][2:].upper())
        with pytest.raises(ValidationError):
            BlockchainProof.model_validate(payload)

    def test_single_leaf_proof_is_empty(self, leaves: list[str]) -> None:
        proof = BlockchainProof.model_validate(_proof_payload(leaves[:1], 0))
        assert proof.proof == []
        assert proof.merkle_root == proof.content_hash

    def test_anchor_rejects_record_outside_tree(self, leaves: list[str]) -> None:
        payload = _anchor_payload(
            build_merkle_root(leaves),
            records=[{"id": 1, "type": "AuditLog", "leaf_index": 5, "content_hash": leaves[0]}],
        )
        with pytest.raises(ValidationError):
            BlockchainAnchor.model_validate(payload)

    def test_anchor_ignores_unknown_fields(self, leaves: list[str]) -> None:
        anchor = BlockchainAnchor.model_validate(
            _anchor_payload(build_merkle_root(leaves), gas_used=21000)
        )
        assert anchor.records == []

    def test_verify_request_always_carries_tx_hash(self, leaves: list[str]) -> None:
        proof = BlockchainProof.model_validate(_proof_payload(leaves, 0, tx_hash=None))
        payload = VerifyRequest.from_proof(proof).to_payload()
        assert payload == {
            "content_hash": leaves[0],
            "merkle_root": build_merkle_root(leaves),
            "proof": build_inclusion_proof(leaves, 0),
            "leaf_index": 0,
            "tx_hash": None,
        }


# ---------------------------------------------------------------------------
# TestListAnchorsOptions
# ---------------------------------------------------------------------------


class TestListAnchorsOptions:
    def test_defaults(self) -> None:
        assert ListAnchorsOptions().to_params() == {"page": "1", "per_page": "25"}

    def test_non_positive_paging_falls_back_to_defaults(self) -> None:
        params = ListAnchorsOptions(page=0, per_page=-3).to_params()
        assert params == {"page": "1", "per_page": "25"}

    def test_filters_and_rfc3339_times(self) -> None:
        options = ListAnchorsOptions(
            status="confirmed",
            network="polygon",
            from_=datetime(2024, 5, 1, 0, 0, 0, 123456, tzinfo=timezone.utc),
            to=datetime(2024, 5, 2, 2, 0, 0, tzinfo=timezone(timedelta(hours=2))),
            page=3,
            per_page=50,
        )
        assert options.to_params() == {
            "page": "3",
            "per_page": "50",
            "status": "confirmed",
            "network": "polygon",
            "from": "2024-05-01T00:00:00Z",
            "to": "2024-05-02T02:00:00+02:00",
        }

    def test_naive_datetime_is_treated_as_utc(self) -> None:
        params = ListAnchorsOptions(to=datetime(2024, 5, 1, 12, 0, 0)).to_params()
        assert params["to"] == "2024-05-01T12:00:00Z"

    def test_from_alias(self) -> None:
        options = ListAnchorsOptions.model_validate({"from": "2024-05-01T00:00:00Z"})
        assert options.to_params()["from"] == "2024-05-01T00:00:00Z"


# ---------------------------------------------------------------------------
# TestAuditClientReads
# ---------------------------------------------------------------------------


class TestAuditClientReads:
    def test_list_anchors_sends_defaults(self, leaves: list[str]) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "anchors": [_anchor_payload(build_merkle_root(leaves))],
                    "pagination": {"page": 1, "per_page": 25, "total": 1, "total_pages": 1},
                },
            )

        result = _client(handler).list_anchors()
        assert seen[0].method == "GET"
        assert seen[0].url.path == "/api/v1/audit/anchors"
        assert dict(seen[0].url.params) == {"page": "1", "per_page": "25"}
        assert result.pagination.total == 1
        assert result.anchors[0].status == AnchorStatus.CONFIRMED

    def test_list_anchors_keyword_filters_override_options(self, leaves: list[str]) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={"anchors": [], "pagination": {"page": 2, "per_page": 10, "total": 0, "total_pages": 0}},
            )

        _client(handler).list_anchors(
            ListAnchorsOptions(status="pending", page=5), page=2, per_page=10, network="polygon"
        )
        assert dict(seen[0].url.params) == {
            "page": "2",
            "per_page": "10",
            "status": "pending",
            "network": "polygon",
        }

    def test_get_anchor_with_records(self, leaves: list[str]) -> None:
        root = build_merkle_root(leaves)
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            records = [
                {"id": i, "type": "AuditLog", "leaf_index": i, "content_hash": leaf}
                for i, leaf in enumerate(leaves)
            ]
            return httpx.Response(200, json=_anchor_payload(root, records=records))

        anchor = _client(handler).get_anchor(root, include_records=True)
        assert seen[0].url.path == f"/api/v1/audit/anchors/{root}"
        assert seen[0].url.params["include_records"] == "true"
        assert [r.content_hash for r in anchor.records] == leaves

    def test_get_anchor_without_records_sends_no_query(self, leaves: list[str]) -> None:
        root = build_merkle_root(leaves)
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_anchor_payload(root))

        _client(handler).get_anchor(root)
        assert seen[0].url.query == b""

    def test_get_proof(self, leaves: list[str]) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/v1/audit/records/42/proof"
            return httpx.Response(200, json=_proof_payload(leaves, 2))

        proof = _client(handler).get_proof(42)
        assert proof.record_id == 42
        assert proof.content_hash == leaves[2]


# ---------------------------------------------------------------------------
# TestAuditClientVerify
# ---------------------------------------------------------------------------


class TestAuditClientVerify:
    def test_verify_posts_request_contract(self, leaves: list[str]) -> None:
        proof = BlockchainProof.model_validate(_proof_payload(leaves, 3))
        bodies: list[dict[str, Any]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "POST"
            assert request.url.path == "/api/v1/audit/verify"
            assert request.headers["content-type"] == "application/json"
            bodies.append(json.loads(request.content))
            return httpx.Response(
                200,
                json={
                    "verified": True,
                    "proof_valid": True,
                    "blockchain_verified": True,
                    "content_hash": proof.content_hash,
                    "merkle_root": proof.merkle_root,
                    "leaf_index": 3,
                    "block_number": 123,
                    "block_timestamp": "2024-05-01T12:00:00Z",
                    "network": "polygon_amoy",
                    "explorer_url": "https://amoy.polygonscan.com/tx/0xdeadbeef",
                    "error": None,
                },
            )

        result = _client(handler).verify(proof)
        assert bodies == [
            {
                "content_hash": proof.content_hash,
                "merkle_root": proof.merkle_root,
                "proof": proof.proof,
                "leaf_index": 3,
                "tx_hash": "0xdeadbeef",
            }
        ]
        assert result.verified is True
        assert result.blockchain_verified is True
        assert result.block_number == 123

    def test_remote_verdict_may_disagree_with_local(self, leaves: list[str]) -> None:
        proof = BlockchainProof.model_validate(_proof_payload(leaves, 0))

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "verified": False,
                    "proof_valid": True,
                    "blockchain_verified": False,
                    "content_hash": proof.content_hash,
                    "merkle_root": proof.merkle_root,
                    "leaf_index": 0,
                    "error": "transaction not found",
                },
            )

        client = _client(handler)
        assert client.verify_locally(proof).proof_valid is True
        remote = client.verify(proof)
        assert remote.verified is False
        assert remote.error == "transaction not found"

    def test_verify_locally_valid(self, leaves: list[str]) -> None:
        proof = BlockchainProof.model_validate(_proof_payload(leaves, 4))
        result = AuditClient(_unused_http()).verify_locally(proof)
        assert result.verified is False
        assert result.proof_valid is True
        assert result.blockchain_verified is False
        assert result.error is None
        assert result.network == "polygon_amoy"

    def test_verify_locally_reports_reason(self, leaves: list[str]) -> None:
        other_root = build_merkle_root(list(reversed(leaves)) + [leaves[0]])
        proof = BlockchainProof.model_validate(_proof_payload(leaves, 4, merkle_root=other_root))
        result = AuditClient(_unused_http()).verify_locally(proof)
        assert result.verified is False
        assert result.error == "root_mismatch"


def _unused_http() -> HttpxClient:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("local verification must not make requests")

    return HttpxClient(transport=httpx.MockTransport(handler))


# ---------------------------------------------------------------------------
# TestHttpxClient
# ---------------------------------------------------------------------------


class TestHttpxClient:
    def test_api_key_header_takes_precedence(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        with HttpxClient(
            ClientConfig(api_key="ext_123", workspace_token="wk_456"),
            transport=httpx.MockTransport(handler),
        ) as http:
            http.get("/ping")
        assert seen[0].headers["X-Kiket-API-Key"] == "ext_123"
        assert "authorization" not in seen[0].headers
        assert seen[0].headers["accept"] == "application/json"

    def test_bearer_token_when_no_api_key(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        with HttpxClient(
            ClientConfig(workspace_token="wk_456"), transport=httpx.MockTransport(handler)
        ) as http:
            http.get("/ping")
        assert seen[0].headers["Authorization"] == "Bearer wk_456"

    def test_base_url_is_applied(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        with HttpxClient(
            ClientConfig(base_url="https://audit.example.test"),
            transport=httpx.MockTransport(handler),
        ) as http:
            http.get("/api/v1/audit/anchors")
        assert str(seen[0].url) == "https://audit.example.test/api/v1/audit/anchors"

    def test_per_call_timeout_overrides_default(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        with HttpxClient(
            ClientConfig(timeout_seconds=30), transport=httpx.MockTransport(handler)
        ) as http:
            http.get("/a")
            http.get("/b", timeout=1.5)
        assert seen[0].extensions["timeout"]["read"] == 30
        assert seen[1].extensions["timeout"]["read"] == 1.5

    def test_error_status_raises_api_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text='{"error":"not found"}')

        with pytest.raises(APIError) as info:
            _client(handler).get_proof(1)
        assert info.value.status_code == 404
        assert info.value.body == '{"error":"not found"}'
        assert "status 404" in str(info.value)

    def test_transport_failure_is_wrapped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError) as info:
            _client(handler).list_anchors()
        assert isinstance(info.value.__cause__, httpx.ConnectError)

    def test_timeout_is_wrapped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(TransportError):
            _client(handler).get_anchor("0x" + "a" * 64, timeout=0.01)

    def test_non_json_body_raises_parse_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>oops</html>")

        with pytest.raises(ResponseParseError):
            _client(handler).get_proof(1)

    def test_wrong_shape_raises_parse_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"unexpected": True})

        with pytest.raises(ResponseParseError):
            _client(handler).get_proof(1)

    def test_all_failures_share_service_error_base(self) -> None:
        for exc in (TransportError("x"), APIError(500, ""), ResponseParseError("x")):
            assert isinstance(exc, AuditServiceError)

    def test_failures_are_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="unavailable")

        with caplog.at_level("WARNING", logger="kiket.http"):
            with pytest.raises(APIError):
                _client(handler).get_proof(1)
        assert "503" in caplog.text
