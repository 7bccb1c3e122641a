"""
Prometheus metrics helpers for AnchorNet.

Shared metric definitions for the proof pipeline: dispatched request
counters, request latency, and discovery fallbacks. Nothing here starts an
exporter; callers that want to scrape the default registry mount it
themselves.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

DISPATCH_REQUESTS_TOTAL = Counter(
    "anchornet_dispatch_requests_total",
    "Outbound requests issued by the endpoint dispatcher",
    ["method", "outcome"],
)
DISPATCH_LATENCY_SECONDS = Histogram(
    "anchornet_dispatch_latency_seconds",
    "Latency of outbound requests issued by the endpoint dispatcher",
    ["method"],
)
DISCOVERY_FALLBACK_TOTAL = Counter(
    "anchornet_discovery_fallback_total",
    "Submissions that fell back to the static Gateway list",
)
