"""
Structured logging for the staff API.

Provides:
- setup_logging(): configure stdlib logging + structlog from LoggingSettings
- get_logger(): get a structlog logger for a module
- hash_ip(): hash client IPs outside development

Production uses JSON output, development a coloured console renderer.
Sensitive keys (passwords, tokens, OTP codes, secrets) are redacted from
every event before rendering.
"""

from __future__ import annotations

import hashlib
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

import structlog
from structlog.stdlib import BoundLogger
from structlog.types import EventDict, Processor

# Keys redacted wherever they appear in an event
REDACTED_FIELDS = {
    "password",
    "password_hash",
    "new_password",
    "token",
    "otp",
    "otp_code",
    "code",
    "authorization",
    "cookie",
    "secret",
    "api_key",
}

# Substrings that mark a key as sensitive
_SENSITIVE_FRAGMENTS = ("password", "token", "secret", "otp")

_PASSTHROUGH_KEYS = {"level", "event", "timestamp", "logger"}

_hash_ips = False


def get_logger(name: str) -> BoundLogger:
    """Return a structlog logger bound to *name* (usually ``__name__``).

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("login_success", staff_id="65f0...", role="admin")
    """
    return structlog.get_logger(name)


def hash_ip(ip_address: Optional[str]) -> Optional[str]:
    """Return a short SHA-256 digest of *ip_address* when IP hashing is on.

    Hashing is enabled by setup_logging() for non-development environments;
    otherwise the address is returned unchanged for easier debugging.
    """
    if not ip_address or not _hash_ips:
        return ip_address
    return hashlib.sha256(ip_address.encode()).hexdigest()[:16]


def add_timestamp(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add ISO format UTC timestamp to event dict."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def redact_sensitive_fields(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Redact sensitive fields from logs."""
    for key in list(event_dict.keys()):
        if key in _PASSTHROUGH_KEYS:
            continue
        lowered = key.lower()
        if lowered in REDACTED_FIELDS or any(
            fragment in lowered for fragment in _SENSITIVE_FRAGMENTS
        ):
            event_dict[key] = "***REDACTED***"
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_timestamp,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        redact_sensitive_fields,
        structlog.processors.format_exc_info,
    ]


def configure_structlog(log_format: str = "console") -> None:
    """Configure structlog processors for JSON or console rendering."""
    if log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            pad_event=15,
            sort_keys=False,
        )

    structlog.configure(
        processors=_shared_processors() + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_stdlib_logging(log_level: str = "INFO") -> None:
    """Route stdlib logging to stdout and quiet noisy third-party loggers."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)


def setup_logging(
    log_level: str = "INFO", log_format: str = "console", env: str = "development"
) -> None:
    """Initialize the logging system. Call once, early in application startup."""
    global _hash_ips
    _hash_ips = env != "development"

    configure_stdlib_logging(log_level)
    configure_structlog(log_format)

    get_logger(__name__).info(
        "logging_initialized",
        env=env,
        log_level=log_level,
        log_format=log_format,
    )
