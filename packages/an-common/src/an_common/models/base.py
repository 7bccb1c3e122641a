"""
Base model for payloads that cross the network boundary.

Gateways and Cores answer with arbitrary JSON whose key casing differs
between endpoints and versions. Models deriving from ``WireModel`` rewrite
every incoming key to snake_case before validation and keep unknown fields
as passthrough extras, so internal code never depends on the wire casing.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, model_validator

from an_common.utils import normalize_keys


class WireModel(BaseModel):
    """Pydantic model with snake_case key normalisation and extra passthrough."""

    model_config = {"extra": "allow"}

    @model_validator(mode="before")
    @classmethod
    def _normalize_keys(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return normalize_keys(data)
        return data
