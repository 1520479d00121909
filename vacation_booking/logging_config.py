from __future__ import annotations

import logging
import sys
from typing import Any, Callable, MutableMapping, cast

import structlog

from vacation_booking.config import LOG_LEVEL

Processor = Callable[[Any, str, MutableMapping[str, Any]], Any]

# Event keys that must never reach the log sink
REDACTED_KEYS = frozenset(
    {
        "payment_token",
        "client_secret",
        "stripe_secret_key",
        "authorization",
        "guest_phone",
    }
)
REDACTED = "[redacted]"

QUIET_LOGGERS = ("urllib3", "requests", "stripe", "uvicorn.access", "sqlalchemy.engine")


def redact_sensitive_fields(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Replace payment secrets and guest contact numbers with a placeholder."""
    for key in REDACTED_KEYS.intersection(event_dict):
        if event_dict[key] is not None:
            event_dict[key] = REDACTED
    return event_dict


def setup_logging() -> None:
    """
    Configure structlog for the booking service.

    INFO renders one JSON object per event for the log pipeline; any other
    level renders colored console output for local work. Request IDs bound by
    RequestIDMiddleware are merged into every event, and payment tokens are
    redacted before rendering.
    """
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
        level=LOG_LEVEL,
    )
    # The payment SDK and HTTP clients log every request at INFO
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    renderer = cast(
        Processor,
        (
            structlog.processors.JSONRenderer()
            if LOG_LEVEL == "INFO"
            else structlog.dev.ConsoleRenderer(colors=True)
        ),
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            redact_sensitive_fields,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(LOG_LEVEL)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
