"""
Proof evaluator boundary for the AnchorNet proof client.

Verification needs each proof flattened into :class:`AnchorAssertion`
records: "value X was anchored at the position URI Y". How a proof blob
is decoded is not this package's concern; any object satisfying
:class:`ProofEvaluator` can be injected into
:func:`anchor_client.verify.verify_proofs`.

The bundled :class:`JsonProofEvaluator` reads proofs that are already
decoded to JSON and carry pre-computed expected values::

    {
      "hash": "...", "proof_id": "...", "hash_received": "...",
      "branches": [
        {"label": "cal_anchor_branch",
         "anchors": [{"type": "cal", "anchor_id": "1024",
                      "uris": ["http://gw/calendar/1024/data"],
                      "expected_value": "..."}],
         "branches": [...]}
      ]
    }

Binary or base64-encoded proofs are rejected.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from pydantic import ValidationError

from an_common.models import AnchorAssertion, Proof
from an_common.utils import normalize_keys

from anchor_client.errors import InvalidArgumentError


class ProofEvaluator(Protocol):
    """Expands proofs into anchor assertions."""

    def evaluate(self, proofs: Sequence[Any]) -> list[AnchorAssertion]:
        ...


class JsonProofEvaluator:
    """Evaluate JSON proofs that carry their anchors' expected values."""

    def evaluate(self, proofs: Sequence[Any]) -> list[AnchorAssertion]:
        if not isinstance(proofs, (list, tuple)) or not proofs:
            raise InvalidArgumentError("proofs arg must be a non-empty list")
        assertions: list[AnchorAssertion] = []
        for proof in proofs:
            assertions.extend(self._evaluate_one(self._load(proof)))
        return assertions

    # ── decoding ──

    def _load(self, proof: Any) -> dict[str, Any]:
        """Resolve *proof* to a normalised JSON object with ``branches``."""
        if isinstance(proof, Proof):
            proof = proof.proof
        if isinstance(proof, str):
            try:
                proof = json.loads(proof)
            except ValueError as exc:
                raise InvalidArgumentError("proof is not a decoded JSON proof") from exc
        if not isinstance(proof, Mapping):
            raise InvalidArgumentError(f"unsupported proof type: {type(proof).__name__}")

        data = normalize_keys(proof)
        if "branches" not in data and "proof" in data:
            # A retrieval result wrapping the proof body.
            return self._load(data["proof"])
        if not isinstance(data.get("branches"), list):
            raise InvalidArgumentError("proof has no branches")
        return data

    # ── flattening ──

    def _evaluate_one(self, data: dict[str, Any]) -> list[AnchorAssertion]:
        base = {
            "hash": data.get("hash"),
            "proof_id": data.get("proof_id"),
            "hash_received": data.get("hash_received"),
        }
        assertions: list[AnchorAssertion] = []
        self._walk(data["branches"], base, assertions)
        return assertions

    def _walk(
        self,
        branches: list[Any],
        base: dict[str, Any],
        out: list[AnchorAssertion],
    ) -> None:
        for raw_branch in branches:
            if not isinstance(raw_branch, Mapping):
                raise InvalidArgumentError("proof branch must be an object")
            branch = normalize_keys(raw_branch)
            for raw_anchor in branch.get("anchors") or []:
                if not isinstance(raw_anchor, Mapping):
                    raise InvalidArgumentError("proof anchor must be an object")
                anchor = normalize_keys(raw_anchor)
                anchor_id = anchor.get("anchor_id")
                for uri in anchor.get("uris") or []:
                    try:
                        assertion = AnchorAssertion(
                            **base,
                            branch=branch.get("label"),
                            uri=uri,
                            type=anchor.get("type"),
                            anchor_id=None if anchor_id is None else str(anchor_id),
                            expected_value=anchor.get("expected_value"),
                        )
                    except ValidationError as exc:
                        raise InvalidArgumentError(f"malformed anchor in proof: {exc}") from exc
                    out.append(assertion)
            self._walk(branch.get("branches") or [], base, out)


_default = JsonProofEvaluator()


def evaluate_proofs(proofs: Sequence[Any]) -> list[AnchorAssertion]:
    """Evaluate *proofs* with the bundled :class:`JsonProofEvaluator`."""
    return _default.evaluate(proofs)
