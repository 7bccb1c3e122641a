"""
Local file hashing for the AnchorNet proof client.

Produces the SHA-256 digests callers submit with
:func:`anchor_client.submit.submit_hashes`. Files the process may not read
are logged and skipped rather than failing the whole batch.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog

from an_common.utils import sha256_file

from anchor_client.validation import validate_hashes_arg

logger = structlog.get_logger()


def _is_regular_file(path: Any) -> bool:
    return isinstance(path, (str, Path)) and Path(path).is_file()


def hash_files(paths: Any, *, max_items: int = 250) -> list[dict[str, str]]:
    """Hash every file in *paths*.

    Returns:
        ``{"path": ..., "hash": ...}`` per readable file, in input order.

    Raises:
        InvalidArgumentError: If *paths* is not a non-empty list of at most
            *max_items* existing regular files.
    """
    validate_hashes_arg(paths, _is_regular_file, max_items=max_items)

    hashed: list[dict[str, str]] = []
    for path in paths:
        try:
            digest = sha256_file(path)
        except PermissionError:
            logger.error("file_hash_permission_denied", path=str(path))
            continue
        hashed.append({"path": str(path), "hash": digest})
    return hashed
