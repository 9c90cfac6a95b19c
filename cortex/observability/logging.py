"""Structured logging configuration using structlog.

Provides JSON logging for production and console logging for development,
with automatic context binding and PII redaction. Memory content is free
text supplied by callers, so redaction also covers string values.
"""

import re
import sys
from collections.abc import MutableMapping
from typing import Any, cast

import structlog
from structlog.types import EventDict, WrappedLogger

from cortex.config.models.observability import LoggingConfig

# Sensitive key names (O(1) lookup)
SENSITIVE_KEYS: frozenset[str] = frozenset({
    "password",
    "passwd",
    "secret",
    "token",
    "api_key",
    "apikey",
    "authorization",
    "credential",
    "credentials",
    "email",
    "phone",
    "ssn",
    "credit_card",
    "private_key",
    "access_token",
    "refresh_token",
})

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
PHONE_PATTERN = re.compile(r"(?<![\w-])\+?[\d\s\-\(\)]{10,}(?![\w-])")
SSN_PATTERN = re.compile(r"\d{3}-\d{2}-\d{4}")

# Keys holding generated ids; their hex and digit runs look like phone numbers
IDENTIFIER_SUFFIXES = ("_id", "_ids")

LEVELS: dict[str, int] = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}


class PIIRedactor:
    """Processor that redacts PII from log events.

    Keys listed in SENSITIVE_KEYS are replaced wholesale. Identifier keys
    (ending in _id or _ids) pass through untouched. Other string values
    anywhere in the event (including nested dicts and lists) are scanned
    for email, phone and SSN patterns.
    """

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        return cast(EventDict, self._redact(event_dict))

    def _redact(self, value: Any) -> Any:
        if isinstance(value, MutableMapping):
            return {key: self._redact_item(key, item) for key, item in value.items()}
        if isinstance(value, list):
            return [self._redact(item) for item in value]
        if isinstance(value, str):
            return self._redact_string(value)
        return value

    def _redact_item(self, key: str, item: Any) -> Any:
        name = str(key).lower()
        if name in SENSITIVE_KEYS:
            return "[REDACTED]"
        if name.endswith(IDENTIFIER_SUFFIXES):
            return item
        return self._redact(item)

    def _redact_string(self, value: str) -> str:
        value = EMAIL_PATTERN.sub("[EMAIL]", value)
        value = SSN_PATTERN.sub("[SSN]", value)
        return PHONE_PATTERN.sub("[PHONE]", value)


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    redact_pii: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Output format - "json" for production, "console" for development
        redact_pii: Whether to redact PII from logs
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
    ]

    if redact_pii:
        processors.append(PIIRedactor())

    processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(LEVELS.get(level.upper(), 20)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )


def configure_logging(config: LoggingConfig) -> None:
    """Configure structured logging from a LoggingConfig section."""
    setup_logging(level=config.level, format=config.format, redact_pii=config.redact_pii)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance bound to the given name.

    Args:
        name: Logger name (typically __name__ of the module)
    """
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
