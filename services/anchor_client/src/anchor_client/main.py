"""
Command-line entry point for the AnchorNet proof client.

Usage:
    anchor-client submit 1a2b3c... --uri http://10.0.0.1
    anchor-client get handles.json
    anchor-client verify proofs.json --uri http://10.0.0.1
    anchor-client health http://10.0.0.1 http://10.0.0.2
    anchor-client hash-files ./report.pdf

JSON results go to stdout; structured logs go to stderr. ``-`` reads a
JSON file argument from stdin.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

import structlog
from pydantic import BaseModel

from an_common.config import get_settings
from an_common.logging import configure_logging

from anchor_client.client import ProofClient
from anchor_client.errors import AnchorClientError
from anchor_client.files import hash_files

logger = structlog.get_logger()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="anchor-client",
        description="Submit, retrieve and verify AnchorNet proofs",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    submit = sub.add_parser("submit", help="Submit hashes to Gateways")
    submit.add_argument("hashes", nargs="+", help="Hex hashes to submit")
    submit.add_argument("--uri", action="append", default=[], help="Target Gateway URI (repeatable)")

    get = sub.add_parser("get", help="Retrieve proofs for proof handles")
    get.add_argument("handles_file", help="JSON file of proof handles, or - for stdin")

    verify = sub.add_parser("verify", help="Verify proofs against a Gateway")
    verify.add_argument("proofs_file", help="JSON file of proofs, or - for stdin")
    verify.add_argument("--uri", default=None, help="Gateway URI to verify against")

    health = sub.add_parser("health", help="Probe Gateways for liveness")
    health.add_argument("uris", nargs="+", help="Gateway URIs to probe")

    files = sub.add_parser("hash-files", help="SHA-256 hash local files")
    files.add_argument("paths", nargs="+", help="Files to hash")

    return parser.parse_args(argv)


def _read_json(path: str) -> Any:
    if path == "-":
        return json.load(sys.stdin)
    with open(path, encoding="utf-8") as handle:
        return json.load(handle)


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [_to_jsonable(v) for v in value]
    return value


async def run(args: argparse.Namespace) -> Any:
    """Execute the selected sub-command and return its JSON-able result."""
    if args.command == "hash-files":
        return hash_files(args.paths, max_items=get_settings().max_hashes)

    async with ProofClient() as client:
        if args.command == "submit":
            return await client.submit_hashes(args.hashes, args.uri)
        if args.command == "get":
            return await client.get_proofs(_read_json(args.handles_file))
        if args.command == "verify":
            return await client.verify_proofs(_read_json(args.proofs_file), args.uri)
        if args.command == "health":
            return await client.probe_gateways(args.uris)
    raise AnchorClientError(f"unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    """Run the CLI; returns the process exit status."""
    args = parse_args(argv)
    try:
        settings = get_settings()
        configure_logging(settings.log_level, json_output=settings.log_json)
        result = asyncio.run(run(args))
    except (AnchorClientError, OSError, ValueError) as exc:
        logger.error("command_failed", command=args.command, error=str(exc))
        return 1
    print(json.dumps(_to_jsonable(result), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
