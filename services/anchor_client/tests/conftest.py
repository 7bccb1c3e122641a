"""Shared fixtures for anchor_client tests."""

from __future__ import annotations

import json
import random
from collections.abc import Callable
from typing import Any

import httpx
import pytest
import structlog

from an_common.config import Settings

# ─── Fake network ────────────────────────────────────────────────


class FakeNetwork:
    """Route table behind an ``httpx.MockTransport``.

    Unknown routes fail with a connection error, the same way an
    unreachable node would.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def reply(
        self,
        method: str,
        url: str,
        *,
        json_body: Any = None,
        status: int = 200,
        text: str | None = None,
    ) -> None:
        def _handler(request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status, text=text)
            return httpx.Response(status, json=json_body)

        self.routes[(method, url)] = _handler

    def fail(self, method: str, url: str, exc_type: type[httpx.HTTPError] = httpx.ConnectError) -> None:
        def _handler(request: httpx.Request) -> httpx.Response:
            raise exc_type("simulated failure", request=request)

        self.routes[(method, url)] = _handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, str(request.url)))
        if handler is None:
            raise httpx.ConnectError("connection refused", request=request)
        return handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def calls(self, method: str | None = None, url: str | None = None) -> list[httpx.Request]:
        return [
            r
            for r in self.requests
            if (method is None or r.method == method) and (url is None or str(r.url) == url)
        ]

    @staticmethod
    def body(request: httpx.Request) -> Any:
        return json.loads(request.content)


# ─── Fixtures ────────────────────────────────────────────────────


@pytest.fixture()
def fake_network() -> FakeNetwork:
    return FakeNetwork()


@pytest.fixture()
def settings() -> Settings:
    """Settings with test seeds and no .env lookup."""
    return Settings(
        _env_file=None,
        core_ips=["10.0.0.1", "10.0.0.2", "10.0.0.3"],
        fallback_gateway_uris=["http://10.9.9.1", "http://10.9.9.2", "http://10.9.9.3"],
        default_verify_gateway_uri="http://10.8.8.8",
        denylisted_gateway_ips=["10.6.6.6"],
        discovery_max_attempts=1,
    )


@pytest.fixture()
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture()
def hashes() -> list[str]:
    return [
        "1957db7fe23e4be1740ddeb941ddda7ae0a6b782e536a9e00b5aa82db1e84547",
        "a0b1c2d3e4f5",
    ]


@pytest.fixture()
def proof_ids() -> list[str]:
    """Two v1 UUIDs and a ULID."""
    return [
        "23d57c30-afe7-11e4-ab7d-12e3f512a338",
        "3d3a1520-afe8-11e4-ab7d-12e3f512a338",
        "01ARZ3NDEKTSV4RRFFQ69G5FAV",
    ]


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()
