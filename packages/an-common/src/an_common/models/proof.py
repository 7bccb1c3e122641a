"""
Proof handle and proof models for AnchorNet.

Defines the Gateway submission response schema, the ``ProofHandle``
produced by submission (everything needed to fetch a proof later), and the
normalised ``Proof`` returned by retrieval.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from an_common.models.base import WireModel


class SubmittedHash(WireModel):
    """One accepted hash in a Gateway's ``POST /hashes`` response."""

    proof_id: str = Field(..., description="Gateway-issued proof id (UUIDv1 or ULID).")
    hash: str = Field(..., description="The submitted hash.")


class SubmitMeta(WireModel):
    """Metadata block of a ``POST /hashes`` response.

    ``submitted_to`` is stamped by the client, not the Gateway: a Gateway
    cannot reliably report the address callers reach it at.
    """

    submitted_at: str | None = Field(default=None, description="Gateway receive timestamp.")
    processing_hints: dict[str, Any] | None = Field(
        default=None,
        description="Expected anchoring times reported by the Gateway.",
    )
    submitted_to: str | None = Field(default=None, description="Gateway URI the hashes were sent to.")


class SubmitHashesResponse(WireModel):
    """Full ``POST /hashes`` response body."""

    meta: SubmitMeta = Field(default_factory=SubmitMeta)
    hashes: list[SubmittedHash] = Field(default_factory=list)


class ProofHandle(WireModel):
    """Reference to a proof that has not been fetched yet.

    Attributes:
        uri: Gateway that accepted the hash.
        hash: The submitted hash.
        proof_id: Gateway-issued proof id (UUIDv1 or ULID).
        group_id: Shared by every handle for the same submitted hash.
    """

    uri: str = Field(..., description="Gateway that accepted the hash.")
    hash: str = Field(..., description="The submitted hash.")
    proof_id: str = Field(..., description="Gateway-issued proof id.")
    group_id: str | None = Field(default=None, description="Groups handles of one hash across Gateways.")


class Proof(WireModel):
    """A retrieved proof, keys normalised to snake_case.

    Attributes:
        proof_id: Proof id the Gateway answered for.
        proof: Encoded proof, ``None`` while anchoring is still pending.
        anchors_complete: Anchor types already included in ``proof``.
    """

    proof_id: str | None = Field(default=None, description="Proof id.")
    hash: str | None = Field(default=None, description="Hash the proof covers.")
    proof: Any = Field(default=None, description="Encoded proof, if available yet.")
    anchors_complete: list[str] = Field(
        default_factory=list,
        description="Anchor types already included in the proof.",
    )

    @field_validator("anchors_complete", mode="before")
    @classmethod
    def _default_anchors(cls, value: Any) -> Any:
        return [] if value is None else value
