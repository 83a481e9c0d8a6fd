"""Structured logging for Cognate Finder, built on structlog.

Every entry is an event name plus key/value fields:

    logger = get_logger(__name__)
    logger.info("cognates_fetched", word="dedo", edges=12)

Development (``debug`` or ``log_level=DEBUG``) renders to a colored
console; anything else emits one JSON object per line. Request and search
context bound here is attached to every entry logged while it is active.
"""

import logging
import sys
from contextvars import ContextVar
from time import perf_counter
from typing import Optional

import structlog
from structlog.typing import EventDict, WrappedLogger

from cognate_finder.config import Settings, get_settings


request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Chatty per-request loggers of the HTTP stack
_NOISY_LOGGERS = ("httpx", "httpcore")


# ═════════════════════════════════════════════════════════════════════════════
# Configuration
# ═════════════════════════════════════════════════════════════════════════════

def add_request_id(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict
) -> EventDict:
    request_id = request_id_var.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Route structlog through stdlib logging at the configured level."""
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    is_dev = settings.debug or level == logging.DEBUG

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    processors = [
        structlog.contextvars.merge_contextvars,
        add_request_id,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if is_dev:
        processors += [structlog.dev.set_exc_info, structlog.dev.ConsoleRenderer(colors=True)]
    else:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Structured logger for a module (pass ``__name__``)."""
    return structlog.get_logger(name)


# ═════════════════════════════════════════════════════════════════════════════
# Context
# ═════════════════════════════════════════════════════════════════════════════

def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def bind_search(word: str, src_lang: str, trg_lang: str) -> None:
    """Attach the current search to subsequent entries in this context."""
    structlog.contextvars.bind_contextvars(
        search_word=word, search_src=src_lang, search_trg=trg_lang
    )


def clear_context() -> None:
    """Drop the request ID and any bound search."""
    request_id_var.set(None)
    structlog.contextvars.clear_contextvars()


# ═════════════════════════════════════════════════════════════════════════════
# Timing
# ═════════════════════════════════════════════════════════════════════════════

class timer:
    """Log the duration of a block as ``<operation>_completed`` (debug).

    Failures are logged as ``<operation>_failed`` and re-raised.
    ``elapsed_ms`` is available after the block exits.

    Example:
        with timer(logger, "hydrate", edges=len(raw.edges)):
            chains = hydrate(raw)
    """

    def __init__(self, logger: structlog.stdlib.BoundLogger, operation: str, **context):
        self.logger = logger
        self.operation = operation
        self.context = context
        self.elapsed_ms = 0.0
        self._start = 0.0

    def __enter__(self) -> "timer":
        self._start = perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.elapsed_ms = round((perf_counter() - self._start) * 1000, 2)
        if exc_type is None:
            self.logger.debug(
                f"{self.operation}_completed", duration_ms=self.elapsed_ms, **self.context
            )
        else:
            self.logger.error(
                f"{self.operation}_failed",
                duration_ms=self.elapsed_ms,
                error=str(exc_val),
                error_type=exc_type.__name__,
                **self.context
            )
        return False


# ═════════════════════════════════════════════════════════════════════════════
# Standard events
# ═════════════════════════════════════════════════════════════════════════════

def log_api_request(
    logger: structlog.stdlib.BoundLogger,
    method: str,
    path: str,
    status_code: int,
    duration_ms: float,
    **extra
) -> None:
    """One ``api_request`` entry per HTTP request; level follows the status."""
    if status_code >= 500:
        log = logger.error
    elif status_code >= 400:
        log = logger.warning
    else:
        log = logger.info
    log(
        "api_request",
        method=method,
        path=path,
        status_code=status_code,
        duration_ms=round(duration_ms, 2),
        **extra
    )


def log_service_call(
    logger: structlog.stdlib.BoundLogger,
    service: str,
    operation: str,
    duration_ms: float,
    success: bool = True,
    **extra
) -> None:
    """One ``service_call`` entry per upstream call (graph store, Wiktionary).

    Failures log at warning; callers receive them as error values.
    """
    log = logger.info if success else logger.warning
    log(
        "service_call",
        service=service,
        operation=operation,
        duration_ms=round(duration_ms, 2),
        success=success,
        **extra
    )
