"""
Request/response envelope models for the endpoint dispatcher.

``EndpointRequest`` describes one outbound HTTP call; ``FetchResult`` is the
settled outcome of that call. A batch always yields one ``FetchResult`` per
request, carrying either the decoded body or a human-readable error.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator

JSON_HEADERS: dict[str, str] = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class EndpointRequest(BaseModel):
    """One outbound HTTP request.

    Attributes:
        method: HTTP method (``GET``, ``POST``).
        uri: Absolute request URI including path.
        headers: Request headers.
        body: JSON-serialisable body, or ``None`` for no body.
        timeout_s: Per-request timeout in seconds.
    """

    method: str = Field(default="GET", description="HTTP method.")
    uri: str = Field(..., description="Absolute request URI.")
    headers: dict[str, str] = Field(
        default_factory=lambda: dict(JSON_HEADERS),
        description="Request headers.",
    )
    body: Any = Field(default=None, description="JSON body, if any.")
    timeout_s: float = Field(default=10.0, gt=0.0, description="Per-request timeout in seconds.")


class FetchResult(BaseModel):
    """Settled outcome of one dispatched request.

    Exactly one of ``response`` and ``error`` is set.

    Attributes:
        origin_uri: ``scheme://host[:port]`` of the request URI.
        response: Decoded response body (``""`` for an empty body).
        error: Failure description for network errors, timeouts and non-2xx.
    """

    origin_uri: str = Field(..., description="Scheme and host the request targeted.")
    response: Any = Field(default=None, description="Decoded response body.")
    error: str | None = Field(default=None, description="Failure description.")

    @model_validator(mode="after")
    def _exactly_one_outcome(self) -> FetchResult:
        if (self.response is None) == (self.error is None):
            raise ValueError("FetchResult requires exactly one of response or error")
        return self

    @property
    def ok(self) -> bool:
        """``True`` when the request settled successfully."""
        return self.error is None
