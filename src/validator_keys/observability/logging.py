"""Structured logging configuration for validator key tooling.

This module configures structlog for structured logging with support for
both development (console) and production (JSON) output formats. Output
goes to stderr so that manifests and signatures printed on stdout stay
machine-readable.

Environment Variables:
    VALIDATOR_KEYS_LOG_FORMAT: Set to "json" for JSON output, "console" for colored output
    VALIDATOR_KEYS_LOG_LEVEL: Set log level (DEBUG, INFO, WARNING, ERROR)

Example:
    >>> from validator_keys.observability.logging import get_logger, configure_logging
    >>>
    >>> configure_logging(log_format="json", log_level="INFO")
    >>> logger = get_logger("validator_keys.manifest.builder")
    >>> logger.info("manifest.created", sequence=5)
"""

import logging
import os
import sys
from typing import Any

import structlog
from structlog.typing import Processor

DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_LOG_FORMAT = "console"

ENV_LOG_FORMAT = "VALIDATOR_KEYS_LOG_FORMAT"
ENV_LOG_LEVEL = "VALIDATOR_KEYS_LOG_LEVEL"

REDACTED_PLACEHOLDER = "***REDACTED***"

# Key substrings (case-insensitive) that indicate secret material
_SENSITIVE_KEY_PATTERNS = frozenset({"secret", "seed", "private", "password", "token"})

_logging_configured = False


def _is_sensitive_key(key: str) -> bool:
    """Return True if the key name indicates secret material that should be redacted."""
    lower = key.lower()
    return any(pattern in lower for pattern in _SENSITIVE_KEY_PATTERNS)


def sanitize_for_logging(data: dict[str, Any]) -> dict[str, Any]:
    """Copy of a flat event dict with secret-bearing values redacted.

    Keys matching (case-insensitive) secret, seed, private, password or token
    have their values replaced with REDACTED_PLACEHOLDER. Public keys are left intact.

    Example:
        >>> sanitize_for_logging({"public_key": "ED01", "secret_key": "00AA"})
        {'public_key': 'ED01', 'secret_key': '***REDACTED***'}
    """
    return {k: REDACTED_PLACEHOLDER if _is_sensitive_key(k) else v for k, v in data.items()}


def _redact_processor(
    _logger: Any, _method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    return sanitize_for_logging(event_dict)


def _get_log_level() -> str:
    return os.environ.get(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL).upper()


def _get_log_format() -> str:
    return os.environ.get(ENV_LOG_FORMAT, DEFAULT_LOG_FORMAT).lower()


def _get_shared_processors() -> list[Processor]:
    return [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        _redact_processor,
    ]


def configure_logging(
    log_format: str | None = None,
    log_level: str | None = None,
    force: bool = False,
) -> None:
    """Configure structured logging for the application.

    Args:
        log_format: Output format - "json" or "console". Defaults to env var or "console"
        log_level: Minimum log level. Defaults to env var or "WARNING"
        force: If True, reconfigure even if already configured
    """
    global _logging_configured

    if _logging_configured and not force:
        return

    log_format = log_format or _get_log_format()
    log_level = log_level or _get_log_level()

    shared_processors = _get_shared_processors()

    if log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level, logging.WARNING))

    _logging_configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for the given name.

    If logging has not been configured, it will be configured with default settings.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("manifest.revoked", public_key="ED...")
    """
    if not _logging_configured:
        configure_logging()

    return structlog.stdlib.get_logger(name)
