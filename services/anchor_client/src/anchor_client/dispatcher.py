"""
Concurrent endpoint dispatcher for the AnchorNet proof client.

Issues a batch of independent HTTP requests at once and settles every one
of them. Network errors, timeouts and non-2xx responses are captured on
the matching ``FetchResult`` instead of being raised, so one unreachable
Gateway never aborts its siblings.

Flow
----
1. Each ``EndpointRequest`` becomes one coroutine on a shared
   ``httpx.AsyncClient``.
2. ``asyncio.gather`` awaits all of them; results come back in input order
   regardless of completion order.
3. Every result carries ``origin_uri`` (scheme + host of the request URI) so
   callers can map it back to the node they targeted.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from typing import Any

import httpx
import structlog

from an_common.metrics import DISPATCH_LATENCY_SECONDS, DISPATCH_REQUESTS_TOTAL
from an_common.models import EndpointRequest, FetchResult
from an_common.utils import base_uri

logger = structlog.get_logger()


def _origin_of(uri: str) -> str:
    """``scheme://host`` of *uri*, or *uri* itself when it cannot be parsed."""
    try:
        return base_uri(uri)
    except ValueError:
        return uri


def _is_json_response(response: httpx.Response) -> bool:
    media_type = response.headers.get("content-type", "").split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


def _decode_body(response: httpx.Response) -> Any:
    """Decode a JSON response body, keeping any other body as text.

    Only ``application/json`` and ``+json`` bodies are parsed, so a plain-text
    value such as ``1234`` stays the string the Gateway sent. Empty bodies and
    JSON ``null`` decode to ``""`` so a successful result always carries a
    non-null body.
    """
    if not response.content:
        return ""
    if not _is_json_response(response):
        return response.text
    try:
        body = response.json()
    except ValueError:
        return response.text
    return "" if body is None else body


class EndpointDispatcher:
    """Fan out HTTP requests concurrently and collect one result per request.

    Args:
        transport: Optional ``httpx`` transport, e.g. ``httpx.MockTransport``
                   in tests. ``None`` uses the default network transport.
    """

    def __init__(self, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Return (and lazily create) the shared ``httpx.AsyncClient``."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(transport=self._transport)
        return self._client

    # ── dispatch ──

    async def fetch_endpoints(self, requests: Sequence[EndpointRequest]) -> list[FetchResult]:
        """Issue every request in *requests* concurrently.

        Returns:
            One ``FetchResult`` per request, in input order.
        """
        if not requests:
            return []
        client = await self._get_client()
        results = await asyncio.gather(*(self._fetch(client, req) for req in requests))
        return list(results)

    async def _fetch(self, client: httpx.AsyncClient, request: EndpointRequest) -> FetchResult:
        """Run one request and settle it into a ``FetchResult``; never raises."""
        origin = _origin_of(request.uri)
        method = request.method.upper()
        log = logger.bind(method=method, uri=request.uri)
        started = time.monotonic()
        error: str | None = None
        body: Any = None

        try:
            # httpx applies timeout_s per phase; the outer deadline caps the whole exchange.
            async with asyncio.timeout(request.timeout_s):
                response = await client.request(
                    method,
                    request.uri,
                    headers=request.headers,
                    json=request.body,
                    timeout=request.timeout_s,
                )
            if response.is_success:
                body = _decode_body(response)
            else:
                error = f"HTTP {response.status_code} {response.reason_phrase}".strip()
        except (httpx.TimeoutException, TimeoutError):
            error = f"request timed out after {request.timeout_s:g}s"
        except httpx.HTTPError as exc:
            error = str(exc) or type(exc).__name__
        except Exception as exc:  # noqa: BLE001
            error = f"{type(exc).__name__}: {exc}"

        DISPATCH_LATENCY_SECONDS.labels(method=method).observe(time.monotonic() - started)
        if error is not None:
            DISPATCH_REQUESTS_TOTAL.labels(method=method, outcome="error").inc()
            log.debug("endpoint_request_failed", error=error)
            return FetchResult(origin_uri=origin, error=error)

        DISPATCH_REQUESTS_TOTAL.labels(method=method, outcome="ok").inc()
        return FetchResult(origin_uri=origin, response=body)

    # ── lifecycle ──

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> EndpointDispatcher:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


def drop_failures(results: Sequence[FetchResult], event: str) -> list[FetchResult]:
    """Log and remove failed results, keeping successful ones in order.

    Args:
        results: Output of :meth:`EndpointDispatcher.fetch_endpoints`.
        event: Log event name used for every dropped result.
    """
    kept: list[FetchResult] = []
    for result in results:
        if result.error is not None:
            logger.warning(event, origin_uri=result.origin_uri, error=result.error)
            continue
        kept.append(result)
    return kept
