"""Structured logging configuration for gitbridge.

This module provides structlog-based logging with:
- JSON output when GITBRIDGE_LOG_FORMAT=json
- Pretty console output otherwise
- A redaction processor that keeps tokens and passwords out of every log line
- Context binding for the remote being synchronized (remote, domain, provider)

Usage:
    from gitbridge.logging import get_logger, configure_logging

    configure_logging()

    log = get_logger(__name__).bind(domain="github.com")
    log.info("credential_saved", username="octocat", has_token=True)
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog
from structlog.types import Processor

__all__ = [
    "get_logger",
    "configure_logging",
    "bind_context",
    "clear_context",
    "redact_secrets",
]

LOG_FORMAT_ENV_VAR = "GITBRIDGE_LOG_FORMAT"

LOG_LEVEL_ENV_VAR = "GITBRIDGE_LOG_LEVEL"

DEFAULT_LOG_LEVEL = "INFO"

#: Event keys whose values must never reach a log sink
REDACTED_KEYS: frozenset[str] = frozenset(
    {"secret", "token", "password", "master_key", "private_token"}
)

REDACTED_VALUE = "***"


def _get_log_level() -> int:
    level_name = os.environ.get(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL).upper()
    return getattr(logging, level_name, logging.INFO)


def _is_json_output() -> bool:
    return os.environ.get(LOG_FORMAT_ENV_VAR, "").lower() == "json"


def redact_secrets(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Replace credential material in an event dict with a placeholder.

    Args:
        logger: The wrapped logger (unused).
        method_name: The log method name (unused).
        event_dict: The structlog event dictionary.

    Returns:
        The same event dictionary with sensitive values masked.
    """
    for key in event_dict.keys() & REDACTED_KEYS:
        event_dict[key] = REDACTED_VALUE
    return event_dict


def _get_shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        redact_secrets,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _get_renderer(use_json: bool) -> Processor:
    if use_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stderr.isatty(),
        exception_formatter=structlog.dev.plain_traceback,
    )


def configure_logging(
    *,
    force_json: bool = False,
    level: int | None = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    Call once at startup; calling again reconfigures.

    Args:
        force_json: Force JSON output regardless of GITBRIDGE_LOG_FORMAT.
        level: Override log level. If None, reads GITBRIDGE_LOG_LEVEL.
    """
    use_json = force_json or _is_json_output()
    log_level = level if level is not None else _get_log_level()

    exception_processor: Processor = (
        structlog.processors.dict_tracebacks
        if use_json
        else structlog.processors.format_exc_info
    )

    structlog.configure(
        processors=[
            *_get_shared_processors(),
            exception_processor,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _get_renderer(use_json),
            ],
            foreign_pre_chain=_get_shared_processors(),
        )
    )
    root_logger.addHandler(handler)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance.

    Args:
        name: Logger name, normally ``__name__``.

    Returns:
        A bound structlog logger.
    """
    log: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return log


def bind_context(**context: Any) -> None:
    """Bind context variables included in every subsequent log line.

    Uses structlog contextvars, so the context follows the current asyncio
    task. The orchestrator binds ``remote`` and ``domain`` per operation.

    Args:
        **context: Key-value pairs to bind to log context.
    """
    structlog.contextvars.bind_contextvars(**context)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
