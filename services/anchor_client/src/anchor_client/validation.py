"""
Argument validation for the public proof client operations.

Every check here runs before any network I/O and raises
:class:`~anchor_client.errors.InvalidArgumentError` listing all offending
values, not just the first.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from an_common.models import ProofHandle
from an_common.utils import is_valid_proof_id, is_valid_uri

from anchor_client.errors import InvalidArgumentError


def validate_array_arg(arg: Any) -> None:
    """Raise unless *arg* is a non-empty list."""
    if not isinstance(arg, list):
        raise InvalidArgumentError("Argument must be a list")
    if not arg:
        raise InvalidArgumentError("Argument must be a non-empty list")


def validate_hashes_arg(
    args: Any,
    validator: Callable[[Any], bool],
    *,
    max_items: int = 250,
) -> None:
    """Validate a list argument of hashes (or paths) against *validator*.

    Args:
        args: Candidate list.
        validator: Predicate every item must satisfy.
        max_items: Maximum list length.
    """
    if not isinstance(args, list):
        raise InvalidArgumentError("1st arg must be a list")
    if not args:
        raise InvalidArgumentError("1st arg must be a non-empty list")
    if len(args) > max_items:
        raise InvalidArgumentError(f"1st arg must be a list with <= {max_items} elements")
    if not callable(validator):
        raise InvalidArgumentError("Need a validator function to test argument")
    rejects = [item for item in args if not validator(item)]
    if rejects:
        raise InvalidArgumentError(
            f"arg contains invalid items : {', '.join(str(r) for r in rejects)}"
        )


def validate_uris_arg(uris: Any, *, max_items: int = 5) -> None:
    """Raise unless *uris* is a list of at most *max_items* entries."""
    if not isinstance(uris, list):
        raise InvalidArgumentError("uris arg must be a list of URI strings")
    if len(uris) > max_items:
        raise InvalidArgumentError(f"uris arg must be a list with <= {max_items} elements")


def dedupe(items: list[str]) -> list[str]:
    """Drop duplicates, keeping first occurrences in order."""
    return list(dict.fromkeys(items))


def validate_uri_values(uris: list[str]) -> None:
    """Raise listing every entry that is not an ``http(s)://<IPv4>`` URI."""
    bad = [str(u) for u in uris if not is_valid_uri(u)]
    if bad:
        raise InvalidArgumentError(f"uris arg contains invalid URIs : {', '.join(bad)}")


def _coerce_handle(handle: Any) -> ProofHandle | None:
    if isinstance(handle, ProofHandle):
        return handle
    if not isinstance(handle, Mapping):
        return None
    try:
        parsed = ProofHandle.model_validate(handle)
    except ValidationError:
        return None
    if not parsed.uri or not parsed.proof_id:
        return None
    return parsed


def validate_proof_handles(handles: Any, *, max_items: int = 250) -> list[ProofHandle]:
    """Validate and parse proof handles for retrieval.

    Accepts ``ProofHandle`` instances or plain mappings in either snake_case
    or camelCase (the shape ``submit_hashes`` callers usually serialise).

    Returns:
        The parsed handles, in input order.
    """
    validate_array_arg(handles)
    parsed = [_coerce_handle(h) for h in handles]
    if any(h is None for h in parsed):
        raise InvalidArgumentError("proof_handles list contains invalid objects")
    if len(parsed) > max_items:
        raise InvalidArgumentError(f"proof_handles arg must be a list with <= {max_items} elements")

    valid: list[ProofHandle] = [h for h in parsed if h is not None]
    bad_uris = [h.uri for h in valid if not is_valid_uri(h.uri)]
    if bad_uris:
        raise InvalidArgumentError(
            f"some proof handles contain invalid URI values : {', '.join(bad_uris)}"
        )
    bad_ids = [h.proof_id for h in valid if not is_valid_proof_id(h.proof_id)]
    if bad_ids:
        raise InvalidArgumentError(
            f"some proof handles contain invalid proof_id values : {', '.join(bad_ids)}"
        )
    return valid
