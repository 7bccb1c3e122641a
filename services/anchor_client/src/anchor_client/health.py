"""
Lightweight Gateway health probes for the AnchorNet proof client.

Probes ``GET {gateway}/config`` on every candidate concurrently with a
very short timeout and keeps the Gateways that answered with a 2xx.
A slow Gateway is treated exactly like a dead one.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from an_common.config import Settings, get_settings
from an_common.models import JSON_HEADERS, EndpointRequest

from anchor_client.dispatcher import EndpointDispatcher

logger = structlog.get_logger()


async def probe_gateways(
    uris: Sequence[str],
    *,
    settings: Settings | None = None,
    dispatcher: EndpointDispatcher | None = None,
) -> list[str]:
    """Return the subset of *uris* that answered the probe, in input order."""
    settings = settings or get_settings()
    requests = [
        EndpointRequest(
            method="GET",
            uri=f"{uri.rstrip('/')}/config",
            headers=dict(JSON_HEADERS),
            timeout_s=settings.probe_timeout_s,
        )
        for uri in uris
    ]

    owned = dispatcher is None
    dispatcher = dispatcher or EndpointDispatcher()
    try:
        results = await dispatcher.fetch_endpoints(requests)
    finally:
        if owned:
            await dispatcher.close()

    healthy: list[str] = []
    for uri, result in zip(uris, results):
        if result.error is not None:
            logger.warning("gateway_probe_failed", gateway_uri=uri, error=result.error)
            continue
        healthy.append(uri)
    logger.info("gateways_probed", probed=len(requests), healthy=len(healthy))
    return healthy
