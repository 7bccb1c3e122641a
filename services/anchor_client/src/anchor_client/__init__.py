"""
AnchorNet Proof Client.

Submits content hashes to Gateway nodes, retrieves the resulting proofs,
and verifies those proofs against anchor values published by the network.
Gateway discovery falls back from Core peer expansion to a static list, and
every batch of outbound requests tolerates per-endpoint failure.
"""

from anchor_client.client import ProofClient
from anchor_client.errors import (
    AnchorClientError,
    DiscoveryError,
    InvalidArgumentError,
    NoResultsError,
)
from anchor_client.retrieve import get_proofs
from anchor_client.submit import submit_hashes
from anchor_client.verify import verify_proofs

__all__ = [
    "AnchorClientError",
    "DiscoveryError",
    "InvalidArgumentError",
    "NoResultsError",
    "ProofClient",
    "get_proofs",
    "submit_hashes",
    "verify_proofs",
]
