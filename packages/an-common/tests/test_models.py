"""
Tests for an-common shared data models.

Validates key normalisation, passthrough extras, defaults and the
cross-field invariants on dispatcher and verification models.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from an_common.models import (
    JSON_HEADERS,
    AnchorAssertion,
    EndpointRequest,
    FetchResult,
    Proof,
    ProofHandle,
    SubmitHashesResponse,
    VerificationResult,
)


# ===========================================================================
# Dispatcher envelope tests
# ===========================================================================


class TestEndpointRequest:

    def test_defaults(self) -> None:
        req = EndpointRequest(uri="http://10.0.0.1/proofs")
        assert req.method == "GET"
        assert req.headers == JSON_HEADERS
        assert req.body is None

    def test_headers_are_not_shared(self) -> None:
        req = EndpointRequest(uri="http://10.0.0.1/proofs")
        req.headers["proofids"] = "x"
        assert "proofids" not in JSON_HEADERS

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            EndpointRequest(uri="http://10.0.0.1", timeout_s=0)


class TestFetchResult:

    def test_response(self) -> None:
        r = FetchResult(origin_uri="http://10.0.0.1", response={"a": 1})
        assert r.ok

    def test_error(self) -> None:
        r = FetchResult(origin_uri="http://10.0.0.1", error="HTTP 500")
        assert not r.ok

    def test_empty_string_response_is_a_response(self) -> None:
        assert FetchResult(origin_uri="http://10.0.0.1", response="").ok

    def test_neither_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FetchResult(origin_uri="http://10.0.0.1")

    def test_both_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FetchResult(origin_uri="http://10.0.0.1", response=[], error="x")


# ===========================================================================
# Proof model tests
# ===========================================================================


class TestProofModels:

    def test_submit_response_camel_case(self) -> None:
        resp = SubmitHashesResponse.model_validate(
            {
                "meta": {"submittedAt": "t", "processingHints": {"cal": "x"}},
                "hashes": [{"proofId": "p", "hash": "aa"}],
            }
        )
        assert resp.meta.submitted_at == "t"
        assert resp.meta.processing_hints == {"cal": "x"}
        assert resp.hashes[0].proof_id == "p"

    def test_proof_handle_camel_case(self) -> None:
        h = ProofHandle.model_validate({"uri": "u", "hash": "aa", "proofId": "p", "groupId": "g"})
        assert (h.proof_id, h.group_id) == ("p", "g")

    def test_proof_handle_requires_fields(self) -> None:
        with pytest.raises(ValidationError):
            ProofHandle.model_validate({"uri": "u"})

    def test_proof_anchors_complete_null(self) -> None:
        p = Proof.model_validate({"proofId": "p", "proof": None, "anchorsComplete": None})
        assert p.anchors_complete == []
        assert p.proof is None

    def test_proof_keeps_extra_fields(self) -> None:
        p = Proof.model_validate({"proofId": "p", "nodeVersion": "2.0"})
        assert p.model_dump()["node_version"] == "2.0"


# ===========================================================================
# Verification model tests
# ===========================================================================


class TestVerificationModels:

    def test_position_id(self) -> None:
        a = AnchorAssertion(uri="http://10.0.0.1/calendar/1024/data", expected_value="ab")
        assert a.position_id == "1024"

    def test_identity_depends_on_every_field(self) -> None:
        a = AnchorAssertion(uri="http://10.0.0.1/calendar/1/data", expected_value="ab", branch="x")
        b = AnchorAssertion(uri="http://10.0.0.1/calendar/1/data", expected_value="ab", branch="y")
        assert a.identity() != b.identity()
        assert a.identity() == a.model_copy().identity()

    def test_verified_requires_timestamp(self) -> None:
        with pytest.raises(ValidationError):
            VerificationResult(uri="u/1/d", expected_value="ab", verified=True)

    def test_unverified_forbids_timestamp(self) -> None:
        with pytest.raises(ValidationError):
            VerificationResult(
                uri="u/1/d",
                expected_value="ab",
                verified=False,
                verified_at=datetime.now(timezone.utc),
            )

    def test_valid_results(self) -> None:
        ok = VerificationResult(
            uri="u/1/d",
            expected_value="ab",
            verified=True,
            verified_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )
        no = VerificationResult(uri="u/1/d", expected_value="ab", verified=False)
        assert ok.verified and no.verified_at is None
