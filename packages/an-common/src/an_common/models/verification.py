"""
Anchor assertion and verification result models for AnchorNet.

An ``AnchorAssertion`` is one (proof, anchor position) claim expanded from a
proof by the evaluator. A ``VerificationResult`` is that claim plus the
verdict reached against a Gateway's view of the network.
"""

from __future__ import annotations

import json
from datetime import datetime

from pydantic import Field, model_validator

from an_common.models.base import WireModel
from an_common.utils import position_id as _position_id


class AnchorAssertion(WireModel):
    """A claim that ``expected_value`` was anchored at the position ``uri`` addresses.

    The position identifier is the second-to-last path segment of ``uri``,
    e.g. ``http://gw/calendar/1024/data`` addresses position ``1024``.
    """

    uri: str = Field(..., description="Position-addressed endpoint URI.")
    expected_value: str = Field(..., description="Value the proof claims was anchored.")
    hash: str | None = Field(default=None, description="Hash the proof covers.")
    proof_id: str | None = Field(default=None, description="Proof id.")
    hash_received: str | None = Field(default=None, description="Gateway receive timestamp.")
    branch: str | None = Field(default=None, description="Proof branch label.")
    type: str | None = Field(default=None, description="Anchor type, e.g. ``cal`` or ``btc``.")
    anchor_id: str | None = Field(default=None, description="Anchor id within its type.")

    @property
    def position_id(self) -> str:
        """Second-to-last path segment of ``uri``."""
        return _position_id(self.uri)

    def identity(self) -> str:
        """Stable key for full-equality deduplication."""
        return json.dumps(self.model_dump(mode="json"), sort_keys=True, default=str)


class VerificationResult(AnchorAssertion):
    """Verdict for one assertion; ``verified_at`` is set iff ``verified``."""

    verified: bool = Field(..., description="Expected value matched the actual value.")
    verified_at: datetime | None = Field(default=None, description="UTC verification time, whole seconds.")

    @model_validator(mode="after")
    def _timestamp_matches_verdict(self) -> VerificationResult:
        if self.verified != (self.verified_at is not None):
            raise ValueError("verified_at must be set exactly when verified is true")
        return self
