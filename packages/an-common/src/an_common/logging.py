"""
Structured logging setup for AnchorNet.

Configures structlog for JSON-formatted structured logging. Every log line
includes timestamp, level, service name, and event. Per-request context
(gateway_uri, core_ip) is bound at the call site.
"""

from __future__ import annotations

import logging
import sys

import structlog


def _resolve_level(level: str) -> int:
    """Map a level name such as ``"info"`` to its numeric value."""
    value = getattr(logging, level.upper(), None)
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def configure_logging(
    level: str = "INFO",
    *,
    json_output: bool = True,
    service: str = "anchor_client",
) -> None:
    """Configure structlog for the current process.

    Log lines go to stderr so command output on stdout stays machine-readable.

    Args:
        level: Minimum level name to emit.
        json_output: Use the JSON renderer; ``False`` selects the console renderer.
        service: Service name bound to every log line.
    """
    renderer: structlog.types.Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_resolve_level(level)),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=service)
