"""
Proof retrieval for the AnchorNet proof client.

Groups proof handles by the Gateway that issued them and fetches every
proof for a Gateway in a single ``GET /proofs`` round trip, so the request
count grows with distinct Gateways rather than with proofs.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog
from pydantic import ValidationError

from an_common.config import Settings, get_settings
from an_common.models import JSON_HEADERS, EndpointRequest, Proof, ProofHandle

from anchor_client.dispatcher import EndpointDispatcher, drop_failures
from anchor_client.errors import NoResultsError
from anchor_client.validation import validate_proof_handles

logger = structlog.get_logger()


def group_proof_ids_by_gateway(handles: Sequence[ProofHandle]) -> dict[str, list[str]]:
    """Map each Gateway URI to its proof ids, both in first-seen order."""
    grouped: dict[str, list[str]] = {}
    for handle in handles:
        grouped.setdefault(handle.uri, []).append(handle.proof_id)
    return grouped


def build_get_requests(grouped: dict[str, list[str]], timeout_s: float) -> list[EndpointRequest]:
    """One ``GET {gateway}/proofs`` per Gateway with comma-joined ``proofids``."""
    return [
        EndpointRequest(
            method="GET",
            uri=f"{uri.rstrip('/')}/proofs",
            headers={**JSON_HEADERS, "proofids": ",".join(proof_ids)},
            timeout_s=timeout_s,
        )
        for uri, proof_ids in grouped.items()
    ]


def normalize_proofs(bodies: Sequence[Any]) -> list[Proof]:
    """Flatten per-Gateway response arrays into normalised ``Proof`` models."""
    proofs: list[Proof] = []
    for body in bodies:
        items = body if isinstance(body, list) else [body]
        for item in items:
            try:
                proofs.append(Proof.model_validate(item))
            except ValidationError as exc:
                logger.warning("proof_response_invalid", error=str(exc))
    return proofs


async def get_proofs(
    proof_handles: Any,
    *,
    settings: Settings | None = None,
    dispatcher: EndpointDispatcher | None = None,
) -> list[Proof]:
    """Retrieve the proofs referenced by *proof_handles*.

    The output of :func:`anchor_client.submit.submit_hashes` can be passed in
    directly, either as models or as their serialised dicts.

    Raises:
        InvalidArgumentError: On malformed handles, before any network call.
        NoResultsError: If every Gateway failed to answer.
    """
    settings = settings or get_settings()
    handles = validate_proof_handles(proof_handles, max_items=settings.max_hashes)

    grouped = group_proof_ids_by_gateway(handles)
    requests = build_get_requests(grouped, settings.request_timeout_s)

    owned = dispatcher is None
    dispatcher = dispatcher or EndpointDispatcher()
    try:
        results = await dispatcher.fetch_endpoints(requests)
    finally:
        if owned:
            await dispatcher.close()

    succeeded = drop_failures(results, "get_proofs_gateway_failed")
    if not succeeded:
        logger.error("get_proofs_all_gateways_failed", gateways=list(grouped))
        raise NoResultsError("No Gateway returned the requested proofs")

    proofs = normalize_proofs([r.response for r in succeeded])
    logger.info("proofs_retrieved", gateway_count=len(succeeded), proof_count=len(proofs))
    return proofs
