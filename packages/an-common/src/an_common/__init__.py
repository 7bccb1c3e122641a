"""
an-common: Shared library for AnchorNet.

Provides configuration management, structured logging, Prometheus metrics
helpers, syntax validators and the data models used by the AnchorNet proof
client.
"""

from an_common.config import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
