"""
Shared utility functions for AnchorNet.

Syntax predicates for hashes, proof identifiers and node URIs, key-casing
normalisation for network payloads, timestamp helpers, and file hashing.
All predicates return ``False`` for non-string input instead of raising.
"""

from __future__ import annotations

import hashlib
import ipaddress
import re
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

_HEX_RE = re.compile(r"^[0-9a-f]{2,}$", re.IGNORECASE)
_ULID_RE = re.compile(r"^[0-9A-HJKMNP-TV-Z]{26}$", re.IGNORECASE)
_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_SEPARATOR_RE = re.compile(r"[\s\-.]+")

_HTTP_SCHEMES = ("http", "https")
_HOST_DENYLIST = frozenset({"0.0.0.0"})
_READ_CHUNK = 64 * 1024


# ── hashes & identifiers ──


def is_hex(value: Any) -> bool:
    """Return ``True`` if *value* is an even-length hex string of at least one byte."""
    if not isinstance(value, str):
        return False
    return bool(_HEX_RE.match(value)) and len(value) % 2 == 0


def is_valid_uuid(value: Any) -> bool:
    """Return ``True`` if *value* is a canonical, hyphenated version 1 UUID."""
    if not isinstance(value, str):
        return False
    try:
        parsed = uuid.UUID(value)
    except ValueError:
        return False
    return (
        parsed.version == 1
        and parsed.variant == uuid.RFC_4122
        and str(parsed) == value.lower()
    )


def is_valid_ulid(value: Any) -> bool:
    """Return ``True`` if *value* is a 26-character Crockford base32 ULID."""
    if not isinstance(value, str):
        return False
    return bool(_ULID_RE.match(value))


def is_valid_proof_id(value: Any) -> bool:
    """Proof ids issued by Gateways are either v1 UUIDs or ULIDs."""
    return is_valid_uuid(value) or is_valid_ulid(value)


# ── node URIs ──


def is_valid_uri(uri: Any) -> bool:
    """Check that *uri* is an ``http(s)://`` URI addressing a literal IPv4 host.

    Hostnames are rejected, as is the unspecified address ``0.0.0.0``.
    """
    if not isinstance(uri, str):
        return False
    try:
        parsed = urlsplit(uri)
        host = parsed.hostname
        parsed.port  # invalid ports only surface on access
    except ValueError:
        return False
    if parsed.scheme not in _HTTP_SCHEMES or not host:
        return False
    if host in _HOST_DENYLIST:
        return False
    try:
        ipaddress.IPv4Address(host)
    except ValueError:
        return False
    return True


def is_valid_gateway_uri(uri: Any) -> bool:
    """A Gateway URI is a valid node URI carrying no path, query or fragment."""
    if not is_valid_uri(uri):
        return False
    parsed = urlsplit(uri)
    return parsed.path in ("", "/") and not parsed.query and not parsed.fragment


def is_valid_core_uri(uri: Any, suffix: str) -> bool:
    """Strict-discovery check: ``http(s)://<letter>.<suffix>`` with nothing after the host."""
    if not isinstance(uri, str):
        return False
    try:
        parsed = urlsplit(uri)
        host = parsed.hostname
    except ValueError:
        return False
    if parsed.scheme not in _HTTP_SCHEMES or not host:
        return False
    if parsed.path not in ("", "/") or parsed.query or parsed.fragment:
        return False
    return bool(re.fullmatch(rf"[a-z]\.{re.escape(suffix.lower())}", host))


def base_uri(uri: str) -> str:
    """Strip path, query and fragment, keeping ``scheme://host[:port]``."""
    parsed = urlsplit(uri)
    return f"{parsed.scheme}://{parsed.netloc}"


def uri_path(uri: str) -> str:
    """Return the path (plus query, if any) of *uri*."""
    parsed = urlsplit(uri)
    if parsed.query:
        return f"{parsed.path}?{parsed.query}"
    return parsed.path


def position_id(uri: str) -> str:
    """Second-to-last path segment of *uri*, e.g. ``1024`` in ``.../calendar/1024/data``."""
    segments = uri.split("/")
    return segments[-2] if len(segments) >= 2 else ""


# ── payload keys ──


def snake_case(key: str) -> str:
    """Rewrite a camelCase, kebab-case or spaced key to snake_case."""
    key = _CAMEL_BOUNDARY_RE.sub("_", key.strip())
    key = _SEPARATOR_RE.sub("_", key)
    return key.lower()


def normalize_keys(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Return a shallow copy of *payload* with every key in snake_case."""
    return {snake_case(str(key)): value for key, value in payload.items()}


# ── time ──


def utc_now_seconds() -> datetime:
    """Return the current UTC datetime truncated to whole seconds."""
    return datetime.now(timezone.utc).replace(microsecond=0)


# ── files ──


def sha256_file(path: str | Path) -> str:
    """Return the hex SHA-256 digest of the file at *path*, read in chunks."""
    digest = hashlib.sha256()
    with open(path, "rb") as handle:
        for chunk in iter(lambda: handle.read(_READ_CHUNK), b""):
            digest.update(chunk)
    return digest.hexdigest()
