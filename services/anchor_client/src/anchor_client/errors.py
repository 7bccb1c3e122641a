"""
Exception hierarchy for the AnchorNet proof client.

Per-endpoint failures never surface as exceptions; they are captured on
each ``FetchResult``. Only validation errors, discovery exhaustion and
terminal "nothing usable came back" conditions are raised.
"""

from __future__ import annotations


class AnchorClientError(Exception):
    """Base class for all proof client errors."""


class InvalidArgumentError(AnchorClientError, ValueError):
    """Raised before any network I/O when caller input is malformed."""


class DiscoveryError(AnchorClientError):
    """Raised when every seed or Core candidate has been tried and failed."""


class NoResultsError(AnchorClientError):
    """Raised when partial-failure filtering leaves zero usable results."""
