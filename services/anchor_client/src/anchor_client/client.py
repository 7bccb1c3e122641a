"""
High-level facade over the AnchorNet proof pipeline.

Bundles one ``Settings`` value, one shared :class:`EndpointDispatcher` and
one :class:`NetworkDiscovery` so a caller running several operations reuses
the same HTTP connection pool.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import Any

import httpx

from an_common.config import Settings, get_settings
from an_common.models import Proof, ProofHandle, VerificationResult

from anchor_client.discovery import NetworkDiscovery
from anchor_client.dispatcher import EndpointDispatcher
from anchor_client.evaluator import JsonProofEvaluator, ProofEvaluator
from anchor_client.health import probe_gateways
from anchor_client.retrieve import get_proofs
from anchor_client.submit import submit_hashes
from anchor_client.verify import verify_proofs


class ProofClient:
    """Submit, retrieve and verify proofs with shared configuration.

    Args:
        settings: Configuration; defaults to :func:`get_settings`.
        transport: Optional ``httpx`` transport used for every request.
        evaluator: Proof evaluator for :meth:`verify_proofs`.
        rng: Random source for discovery seed shuffling.

    Usage::

        async with ProofClient() as client:
            handles = await client.submit_hashes(["1a2b..."])
            proofs = await client.get_proofs(handles)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        evaluator: ProofEvaluator | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.dispatcher = EndpointDispatcher(transport=transport)
        self.discovery = NetworkDiscovery(self.settings, transport=transport, rng=rng)
        self.evaluator = evaluator or JsonProofEvaluator()

    async def submit_hashes(self, hashes: Any, uris: Any = None) -> list[ProofHandle]:
        return await submit_hashes(
            hashes,
            uris,
            settings=self.settings,
            dispatcher=self.dispatcher,
            discovery=self.discovery,
        )

    async def get_proofs(self, proof_handles: Any) -> list[Proof]:
        return await get_proofs(proof_handles, settings=self.settings, dispatcher=self.dispatcher)

    async def verify_proofs(self, proofs: Any, uri: Any = None) -> list[VerificationResult]:
        return await verify_proofs(
            proofs,
            uri,
            settings=self.settings,
            dispatcher=self.dispatcher,
            evaluator=self.evaluator,
        )

    async def probe_gateways(self, uris: Sequence[str]) -> list[str]:
        return await probe_gateways(uris, settings=self.settings, dispatcher=self.dispatcher)

    async def close(self) -> None:
        """Release the shared HTTP client."""
        await self.dispatcher.close()

    async def __aenter__(self) -> ProofClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
