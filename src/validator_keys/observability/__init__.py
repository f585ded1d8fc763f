"""Observability module for validator key tooling.

Structured logging (structlog) with console output for development and
JSON output for automation, plus redaction of secret key material.
"""

from validator_keys.observability.logging import (
    configure_logging,
    get_logger,
    sanitize_for_logging,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "sanitize_for_logging",
]
