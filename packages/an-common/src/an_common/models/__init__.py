"""
Shared Pydantic data models for AnchorNet.

This package contains the request/result envelopes used by the endpoint
dispatcher and the proof handle, proof, assertion and verification models
exchanged by the pipeline.
"""

from an_common.models.base import WireModel
from an_common.models.fetch import JSON_HEADERS, EndpointRequest, FetchResult
from an_common.models.proof import (
    Proof,
    ProofHandle,
    SubmitHashesResponse,
    SubmitMeta,
    SubmittedHash,
)
from an_common.models.verification import AnchorAssertion, VerificationResult

__all__ = [
    "JSON_HEADERS",
    "AnchorAssertion",
    "EndpointRequest",
    "FetchResult",
    "Proof",
    "ProofHandle",
    "SubmitHashesResponse",
    "SubmitMeta",
    "SubmittedHash",
    "VerificationResult",
    "WireModel",
]
