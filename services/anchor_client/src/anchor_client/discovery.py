"""
Cascading service discovery for the AnchorNet proof client.

Resolves a working set of Gateway URIs starting from a seed list of Core
addresses:

1. ``get_cores``: shuffle the configured seeds and take a few.
2. ``get_core_peer_list``: ask one seed at a time for its peer list; the
   first seed that answers wins (:func:`first_success`).
3. ``get_gateway_list``: ask one Core at a time for its public Gateways,
   accumulating across Cores until enough distinct Gateways are known
   (:func:`accumulate_until`).

Candidates are tried sequentially, never raced. Exhaustion raises
:class:`~anchor_client.errors.DiscoveryError`; falling back to a static
Gateway list is the caller's decision (see :mod:`anchor_client.submit`).
"""

from __future__ import annotations

import ipaddress
import random
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar
from urllib.parse import urlsplit

import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from an_common.config import Settings, get_settings
from an_common.models import JSON_HEADERS
from an_common.utils import is_valid_core_uri, is_valid_uri

from anchor_client.errors import DiscoveryError, InvalidArgumentError
from anchor_client.validation import dedupe

logger = structlog.get_logger()

T = TypeVar("T")

# Failures that disqualify a single candidate without ending discovery.
CANDIDATE_ERRORS: tuple[type[Exception], ...] = (httpx.HTTPError, ValueError)


# ── strategies ──


async def first_success(
    candidates: list[str],
    attempt: Callable[[str], Awaitable[T]],
    *,
    event: str,
    exhausted_message: str,
) -> tuple[str, T]:
    """Pop candidates from the end of *candidates* until one attempt succeeds.

    Args:
        candidates: Ordered candidates; consumed in place.
        attempt: Async callable run against one candidate.
        event: Log event for a failed candidate.
        exhausted_message: ``DiscoveryError`` message once all have failed.

    Returns:
        ``(candidate, result)`` for the first successful attempt.
    """
    while candidates:
        candidate = candidates.pop()
        try:
            return candidate, await attempt(candidate)
        except CANDIDATE_ERRORS as exc:
            logger.warning(event, candidate=candidate, error=str(exc) or type(exc).__name__)
    raise DiscoveryError(exhausted_message)


async def accumulate_until(
    candidates: list[str],
    attempt: Callable[[str], Awaitable[list[str]]],
    *,
    threshold: int,
    event: str,
    exhausted_message: str,
) -> list[str]:
    """Pop candidates and accumulate their results until *threshold* distinct items.

    A candidate whose attempt raises or returns nothing is logged and
    skipped. Successes keep accumulating; discovery does not stop at the
    first one.

    Returns:
        At least *threshold* distinct items, in first-seen order.
    """
    found: dict[str, None] = {}
    while candidates:
        candidate = candidates.pop()
        try:
            items = await attempt(candidate)
        except CANDIDATE_ERRORS as exc:
            logger.warning(event, candidate=candidate, error=str(exc) or type(exc).__name__)
            continue
        if not items:
            logger.warning(event, candidate=candidate, error="no items returned")
            continue
        found.update(dict.fromkeys(items))
        if len(found) >= threshold:
            return list(found)
    raise DiscoveryError(exhausted_message)


# ── helpers ──


def _expect_str_list(data: Any, url: str) -> list[str]:
    """Raise ``ValueError`` unless *data* is a list of strings."""
    if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
        raise ValueError(f"unexpected response shape from {url}")
    return data


def _is_ipv4(value: str) -> bool:
    try:
        ipaddress.IPv4Address(value)
    except ValueError:
        return False
    return True


def _as_gateway_uri(entry: str) -> str:
    """Gateways are listed as bare IPs; full URIs are passed through."""
    if entry.startswith(("http://", "https://")):
        return entry.rstrip("/")
    return f"http://{entry}"


class NetworkDiscovery:
    """Resolve Core and Gateway addresses from the configured seed list.

    Args:
        settings: Seed lists, thresholds and timeouts. Defaults to
                  :func:`an_common.config.get_settings`.
        transport: Optional ``httpx`` transport (``httpx.MockTransport`` in tests).
        rng: Random source used for shuffling seeds.
        retry_backoff_s: Base delay for exponential back-off between attempts
                         on one candidate (only used when
                         ``settings.discovery_max_attempts > 1``).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        rng: random.Random | None = None,
        retry_backoff_s: float = 1.0,
    ) -> None:
        self._settings = settings or get_settings()
        self._transport = transport
        self._rng = rng or random.Random()
        self._retry_backoff_s = retry_backoff_s

    # ── Cores ──

    def _is_acceptable_seed(self, seed: str) -> bool:
        if not self._settings.strict_core_discovery:
            return True
        return _is_ipv4(seed) or is_valid_core_uri(
            f"http://{seed}", self._settings.core_host_suffix
        )

    async def get_cores(self, count: int = 1) -> list[str]:
        """Return up to *count* Core addresses picked at random from the seeds."""
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise InvalidArgumentError("count arg must be an integer >= 1")

        seeds = [s for s in self._settings.core_ips if self._is_acceptable_seed(s)]
        rejected = [s for s in self._settings.core_ips if s not in seeds]
        if rejected:
            logger.warning("core_seeds_rejected", seeds=rejected)
        self._rng.shuffle(seeds)
        return seeds[:count]

    # ── HTTP ──

    async def _get_json(self, client: httpx.AsyncClient, url: str) -> Any:
        """GET *url* and decode JSON, retrying per ``discovery_max_attempts``.

        The retry decorator is built per call so the attempt count follows
        the injected settings.
        """

        @retry(
            stop=stop_after_attempt(self._settings.discovery_max_attempts),
            wait=wait_exponential(
                multiplier=self._retry_backoff_s,
                min=self._retry_backoff_s,
                max=10 * self._retry_backoff_s,
            ),
            retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.TransportError)),
            reraise=True,
        )
        async def _inner() -> Any:
            resp = await client.get(
                url,
                headers=JSON_HEADERS,
                timeout=self._settings.discovery_timeout_s,
            )
            resp.raise_for_status()
            return resp.json()

        return await _inner()

    async def _fetch_peers(self, client: httpx.AsyncClient, core_ip: str) -> list[str]:
        url = f"http://{core_ip}/peers"
        return _expect_str_list(await self._get_json(client, url), url)

    async def _fetch_gateways(self, client: httpx.AsyncClient, core_ip: str) -> list[str]:
        url = f"http://{core_ip}/gateways/public"
        entries = _expect_str_list(await self._get_json(client, url), url)
        denied = set(self._settings.denylisted_gateway_ips)

        gateways: list[str] = []
        for entry in entries:
            uri = _as_gateway_uri(entry)
            if urlsplit(uri).hostname in denied:
                continue
            if not is_valid_uri(uri):
                logger.warning("gateway_entry_invalid", core_ip=core_ip, entry=entry)
                continue
            gateways.append(uri)
        return gateways

    # ── discovery steps ──

    async def get_core_peer_list(self, seed_ips: list[str]) -> list[str]:
        """Return the peer list of the first responsive seed, plus that seed.

        Raises:
            DiscoveryError: If no seed answered.
        """
        pool = list(seed_ips)
        self._rng.shuffle(pool)
        async with httpx.AsyncClient(transport=self._transport) as client:
            seed, peers = await first_success(
                pool,
                lambda ip: self._fetch_peers(client, ip),
                event="core_peers_request_failed",
                exhausted_message="Unable to retrieve Core peer list",
            )
        logger.info("core_peers_discovered", seed=seed, peer_count=len(peers))
        return dedupe([*peers, seed])

    async def get_gateway_list(self, core_ips: list[str]) -> list[str]:
        """Accumulate Gateway URIs across Cores until ``min_gateways`` are known.

        Denylisted and malformed entries never count toward the threshold.

        Raises:
            DiscoveryError: If the Cores are exhausted first.
        """
        pool = list(core_ips)
        async with httpx.AsyncClient(transport=self._transport) as client:
            gateways = await accumulate_until(
                pool,
                lambda ip: self._fetch_gateways(client, ip),
                threshold=self._settings.min_gateways,
                event="core_gateways_request_failed",
                exhausted_message="Unable to retrieve Gateway list",
            )
        logger.info("gateways_discovered", gateway_count=len(gateways))
        return gateways

    async def discover_gateways(self) -> list[str]:
        """Run the full chain: seeds → peer expansion → Gateway-list expansion."""
        cores = await self.get_cores(3)
        all_cores = await self.get_core_peer_list(cores)
        return await self.get_gateway_list(all_cores)
