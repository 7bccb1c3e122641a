"""
Environment-based configuration management for AnchorNet.

Uses pydantic-settings to load configuration values from environment
variables and .env files. Every pipeline component receives a ``Settings``
instance at construction so tests can inject fake endpoints and seed lists
without touching process-wide state.

All environment variables are prefixed with ``AN_`` to avoid collisions.
List values are read as JSON arrays, e.g.
``AN_CORE_IPS='["10.0.0.1", "10.0.0.2"]'``.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from ``AN_``-prefixed environment variables.

    Attributes:
        core_ips: Seed Core addresses used to start service discovery.
        core_host_suffix: DNS suffix accepted for Core hostnames when
            strict discovery is enabled.
        strict_core_discovery: Only accept seeds that are IPv4 literals or
            ``<letter>.<core_host_suffix>`` hostnames.
        fallback_gateway_uris: Known-good Gateways used when discovery fails.
        default_verify_gateway_uri: Gateway used by verification when the
            caller does not name one.
        denylisted_gateway_ips: Gateway IPs never returned by discovery.
        min_gateways: Number of Gateways discovery must accumulate.
        request_timeout_s: Per-request timeout for submit/get/verify calls.
        probe_timeout_s: Timeout for lightweight Gateway health probes.
        discovery_timeout_s: Timeout for peer and Gateway-list calls.
        discovery_max_attempts: Attempts per discovery candidate (1 = no retry).
        max_hashes: Upper bound on hashes or proof handles per call.
        max_uris: Upper bound on explicit target Gateway URIs.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_json: Render log lines as JSON (``False`` = console renderer).
    """

    model_config = SettingsConfigDict(
        env_prefix="AN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Discovery ──
    core_ips: list[str] = Field(
        default=[
            "3.142.136.148",
            "18.118.26.31",
            "3.133.161.241",
            "18.220.31.138",
            "3.145.43.113",
        ],
        description="Seed Core addresses.",
    )
    core_host_suffix: str = Field(
        default="chainpoint.org",
        description="DNS suffix accepted for Core hostnames in strict discovery.",
    )
    strict_core_discovery: bool = Field(
        default=False,
        description="Restrict seeds to IPv4 literals or suffix-matching hostnames.",
    )
    min_gateways: int = Field(default=3, ge=1, description="Gateways discovery must accumulate.")
    discovery_timeout_s: float = Field(
        default=10.0,
        gt=0.0,
        description="Timeout for peer and Gateway-list calls.",
    )
    discovery_max_attempts: int = Field(
        default=1,
        ge=1,
        le=10,
        description="Attempts per discovery candidate.",
    )

    # ── Gateways ──
    fallback_gateway_uris: list[str] = Field(
        default=[
            "http://3.133.135.157",
            "http://18.191.50.129",
            "http://18.224.185.143",
        ],
        description="Static Gateway list used when discovery fails.",
    )
    default_verify_gateway_uri: str = Field(
        default="http://3.17.155.208",
        description="Gateway used for verification when none is given.",
    )
    denylisted_gateway_ips: list[str] = Field(
        default=["3.92.247.27"],
        description="Gateway IPs excluded from discovery results.",
    )

    # ── Requests ──
    request_timeout_s: float = Field(
        default=10.0,
        gt=0.0,
        description="Per-request timeout for submit/get/verify calls.",
    )
    probe_timeout_s: float = Field(
        default=0.15,
        gt=0.0,
        description="Timeout for Gateway health probes.",
    )

    # ── Limits ──
    max_hashes: int = Field(default=250, ge=1, description="Max hashes or handles per call.")
    max_uris: int = Field(default=5, ge=1, description="Max explicit Gateway URIs.")

    # ── Logging ──
    log_level: str = Field(default="INFO", description="Logging level.")
    log_json: bool = Field(default=True, description="Render log lines as JSON.")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached application settings singleton.

    Returns:
        The global ``Settings`` instance.
    """
    return Settings()
