"""
Hash submission for the AnchorNet proof client.

Posts the full hash list to every target Gateway at once and turns each
accepted (hash, Gateway) pair into a :class:`ProofHandle`. Targets are
either the caller's URIs or the result of service discovery; when
discovery is exhausted the static fallback Gateways are used instead.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from typing import Any

import structlog
from pydantic import ValidationError

from an_common.config import Settings, get_settings
from an_common.metrics import DISCOVERY_FALLBACK_TOTAL
from an_common.models import (
    JSON_HEADERS,
    EndpointRequest,
    ProofHandle,
    SubmitHashesResponse,
)
from an_common.utils import is_hex, is_valid_proof_id

from anchor_client.discovery import NetworkDiscovery
from anchor_client.dispatcher import EndpointDispatcher, drop_failures
from anchor_client.errors import DiscoveryError, NoResultsError
from anchor_client.validation import (
    dedupe,
    validate_hashes_arg,
    validate_uri_values,
    validate_uris_arg,
)

logger = structlog.get_logger()


async def resolve_gateway_uris(
    settings: Settings,
    discovery: NetworkDiscovery | None = None,
) -> list[str]:
    """Discover Gateways, degrading to the static fallback list on exhaustion."""
    discovery = discovery or NetworkDiscovery(settings)
    try:
        return await discovery.discover_gateways()
    except DiscoveryError as exc:
        logger.warning(
            "gateway_discovery_failed_using_fallback",
            error=str(exc),
            fallback=settings.fallback_gateway_uris,
        )
        DISCOVERY_FALLBACK_TOTAL.inc()
        return list(settings.fallback_gateway_uris)


def build_submit_requests(
    gateway_uris: Sequence[str],
    hashes: list[str],
    timeout_s: float,
) -> list[EndpointRequest]:
    """One ``POST {gateway}/hashes`` per Gateway, each carrying every hash."""
    return [
        EndpointRequest(
            method="POST",
            uri=f"{uri.rstrip('/')}/hashes",
            headers=dict(JSON_HEADERS),
            body={"hashes": hashes},
            timeout_s=timeout_s,
        )
        for uri in gateway_uris
    ]


def map_submit_responses_to_handles(responses: Sequence[SubmitHashesResponse]) -> list[ProofHandle]:
    """Flatten Gateway responses into one handle per (hash, Gateway).

    Handles for the same hash share a ``group_id`` across Gateways. Entries
    whose ``proof_id`` is neither a v1 UUID nor a ULID are logged and dropped.
    """
    group_ids: dict[str, str] = {}
    handles: list[ProofHandle] = []
    for resp in responses:
        for submitted in resp.hashes:
            if not is_valid_proof_id(submitted.proof_id):
                logger.warning(
                    "submit_hashes_proof_id_invalid",
                    origin_uri=resp.meta.submitted_to,
                    hash=submitted.hash,
                    proof_id=submitted.proof_id,
                )
                continue
            group_id = group_ids.setdefault(submitted.hash, str(uuid.uuid1()))
            handles.append(
                ProofHandle(
                    uri=resp.meta.submitted_to or "",
                    hash=submitted.hash,
                    proof_id=submitted.proof_id,
                    group_id=group_id,
                )
            )
    return handles


async def submit_hashes(
    hashes: Any,
    uris: Any = None,
    *,
    settings: Settings | None = None,
    dispatcher: EndpointDispatcher | None = None,
    discovery: NetworkDiscovery | None = None,
) -> list[ProofHandle]:
    """Submit *hashes* to one or more Gateways.

    Args:
        hashes: Non-empty list of even-length hex strings.
        uris: Optional list of ``http(s)://<IPv4>`` Gateway URIs. When empty,
              Gateways are found through service discovery.
        settings: Configuration; defaults to :func:`get_settings`.
        dispatcher: Shared dispatcher; a private one is created if omitted.
        discovery: Discovery chain; built from *settings* if omitted.

    Returns:
        One :class:`ProofHandle` per hash per Gateway that accepted the batch.

    Raises:
        InvalidArgumentError: On malformed input, before any network call.
        NoResultsError: If no Gateway accepted the submission.
    """
    settings = settings or get_settings()
    uris = [] if uris is None else uris

    validate_hashes_arg(hashes, is_hex, max_items=settings.max_hashes)
    validate_uris_arg(uris, max_items=settings.max_uris)

    if uris:
        validate_uri_values(uris)
        gateway_uris = dedupe(uris)
    else:
        gateway_uris = await resolve_gateway_uris(settings, discovery)

    requests = build_submit_requests(gateway_uris, hashes, settings.request_timeout_s)
    owned = dispatcher is None
    dispatcher = dispatcher or EndpointDispatcher()
    try:
        results = await dispatcher.fetch_endpoints(requests)
    finally:
        if owned:
            await dispatcher.close()

    responses: list[SubmitHashesResponse] = []
    for result in drop_failures(results, "submit_hashes_gateway_failed"):
        try:
            parsed = SubmitHashesResponse.model_validate(result.response)
        except ValidationError as exc:
            logger.warning(
                "submit_hashes_response_invalid",
                origin_uri=result.origin_uri,
                error=str(exc),
            )
            continue
        # Gateways cannot be trusted to know the address they are reachable
        # at, so record the one this client used.
        parsed.meta.submitted_to = result.origin_uri
        responses.append(parsed)

    handles = map_submit_responses_to_handles(responses)
    if not handles:
        logger.error("submit_hashes_no_gateway_accepted", gateways=gateway_uris)
        raise NoResultsError("No Gateway accepted the submitted hashes")

    logger.info(
        "hashes_submitted",
        hash_count=len(hashes),
        gateway_count=len(responses),
        handle_count=len(handles),
    )
    return handles
