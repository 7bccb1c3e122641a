"""
Proof verification for the AnchorNet proof client.

Expands proofs into anchor assertions, points every assertion at a single
Gateway, fetches the value actually anchored at each referenced position
once, and compares it with the value each proof claims.

Flow
----
1. Evaluate proofs into :class:`AnchorAssertion` records.
2. Rebase every assertion URI onto the chosen Gateway, keeping the path.
3. Deduplicate assertions, then deduplicate position URIs.
4. ``GET`` each position once; index non-empty answers by position id.
5. No ground truth at all is a terminal error; otherwise each assertion is
   verified iff its expected value equals the value found for its position.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog

from an_common.config import Settings, get_settings
from an_common.models import (
    JSON_HEADERS,
    AnchorAssertion,
    EndpointRequest,
    FetchResult,
    VerificationResult,
)
from an_common.utils import is_valid_gateway_uri, position_id, uri_path, utc_now_seconds

from anchor_client.dispatcher import EndpointDispatcher
from anchor_client.errors import InvalidArgumentError, NoResultsError
from anchor_client.evaluator import JsonProofEvaluator, ProofEvaluator
from anchor_client.validation import dedupe

logger = structlog.get_logger()


def resolve_verify_gateway(uri: Any, settings: Settings) -> str:
    """Return the Gateway all assertions are checked against."""
    if uri is None or uri == "":
        return settings.default_verify_gateway_uri.rstrip("/")
    if not isinstance(uri, str):
        raise InvalidArgumentError("uri arg must be a string")
    if not is_valid_gateway_uri(uri):
        raise InvalidArgumentError(f"uri arg contains invalid Gateway URI : {uri}")
    return uri.rstrip("/")


def rebase_assertions(assertions: Sequence[AnchorAssertion], gateway_uri: str) -> list[AnchorAssertion]:
    """Point every assertion at *gateway_uri*, keeping only its path."""
    return [a.model_copy(update={"uri": gateway_uri + uri_path(a.uri)}) for a in assertions]


def dedupe_assertions(assertions: Sequence[AnchorAssertion]) -> list[AnchorAssertion]:
    """Drop assertions that are equal in every field, keeping first occurrences."""
    unique: dict[str, AnchorAssertion] = {}
    for assertion in assertions:
        unique.setdefault(assertion.identity(), assertion)
    return list(unique.values())


def _actual_value(body: Any) -> Any:
    """The anchored value carried by a position response, or ``None`` if absent."""
    if isinstance(body, list):
        body = body[0] if body else None
    if body is None or body == "":
        return None
    return body


def index_actual_values(
    requests: Sequence[EndpointRequest],
    results: Sequence[FetchResult],
) -> dict[str, Any]:
    """Map position id → anchored value for every position that returned one.

    Positions that failed or answered with nothing are left out, so an empty
    answer can never verify an empty expected value.
    """
    found: dict[str, Any] = {}
    for request, result in zip(requests, results):
        if result.error is not None:
            logger.warning("verify_position_request_failed", uri=request.uri, error=result.error)
            continue
        value = _actual_value(result.response)
        if value is None:
            logger.info("verify_position_empty", uri=request.uri)
            continue
        found[position_id(request.uri)] = value
    return found


async def verify_proofs(
    proofs: Any,
    uri: Any = None,
    *,
    settings: Settings | None = None,
    dispatcher: EndpointDispatcher | None = None,
    evaluator: ProofEvaluator | None = None,
) -> list[VerificationResult]:
    """Verify *proofs* against a single Gateway's view of the network.

    Args:
        proofs: Proofs understood by *evaluator*.
        uri: Gateway URI to verify against; the configured default if omitted.
        settings: Configuration; defaults to :func:`get_settings`.
        dispatcher: Shared dispatcher; a private one is created if omitted.
        evaluator: Proof evaluator; :class:`JsonProofEvaluator` if omitted.

    Returns:
        One :class:`VerificationResult` per distinct assertion.

    Raises:
        InvalidArgumentError: On a malformed Gateway URI or undecodable proofs.
        NoResultsError: If no referenced position returned an anchored value.
    """
    settings = settings or get_settings()
    gateway_uri = resolve_verify_gateway(uri, settings)
    assertions = (evaluator or JsonProofEvaluator()).evaluate(proofs)

    unique = dedupe_assertions(rebase_assertions(assertions, gateway_uri))
    requests = [
        EndpointRequest(
            method="GET",
            uri=anchor_uri,
            headers=dict(JSON_HEADERS),
            timeout_s=settings.request_timeout_s,
        )
        for anchor_uri in dedupe([a.uri for a in unique])
    ]

    owned = dispatcher is None
    dispatcher = dispatcher or EndpointDispatcher()
    try:
        results = await dispatcher.fetch_endpoints(requests)
    finally:
        if owned:
            await dispatcher.close()

    found = index_actual_values(requests, results)
    if not found:
        logger.error("verify_no_values_found", gateway_uri=gateway_uri, position_count=len(requests))
        raise NoResultsError("No hashes were found.")

    verified_results: list[VerificationResult] = []
    for assertion in unique:
        actual = found.get(assertion.position_id)
        verified = actual is not None and assertion.expected_value == actual
        verified_results.append(
            VerificationResult(
                **assertion.model_dump(),
                verified=verified,
                verified_at=utc_now_seconds() if verified else None,
            )
        )

    logger.info(
        "proofs_verified",
        gateway_uri=gateway_uri,
        assertion_count=len(verified_results),
        verified_count=sum(1 for r in verified_results if r.verified),
    )
    return verified_results
