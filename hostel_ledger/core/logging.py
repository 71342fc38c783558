"""
Logging setup for the ledger service.

Two pipelines share one configuration:
- ``structlog`` loggers (audit trail) render key/value or JSON lines
- stdlib loggers obtained through :func:`get_logger` go through a
  ``python-json-logger`` formatter when LOG_FORMAT is ``json``

Both carry the request id and the acting staff user from context vars,
and both mask credential-looking keys.
"""

import asyncio
import logging
import sys
import time
from contextvars import ContextVar
from functools import wraps
from typing import Any, Dict, MutableMapping, Optional

import structlog
from pythonjsonlogger import jsonlogger

from hostel_ledger.config.settings import settings

SERVICE_NAME = "hostel-ledger"

request_id: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
user_id: ContextVar[Optional[str]] = ContextVar('user_id', default=None)

REDACTED = "[REDACTED]"
SENSITIVE_FRAGMENTS = ("password", "token", "secret", "authorization", "cookie")

# Libraries that are chatty at INFO
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "aiosqlite", "asyncio")


def _redact(values: MutableMapping[str, Any]) -> None:
    for key, value in list(values.items()):
        if any(fragment in str(key).lower() for fragment in SENSITIVE_FRAGMENTS):
            values[key] = REDACTED
        elif isinstance(value, dict):
            _redact(value)


def add_request_context(logger, method_name, event_dict):
    """structlog processor: request id, staff user and service tags."""
    event_dict.setdefault('request_id', request_id.get())
    staff = user_id.get()
    if staff:
        event_dict.setdefault('user_id', staff)
    event_dict['service'] = SERVICE_NAME
    event_dict['environment'] = settings.ENVIRONMENT
    return event_dict


def redact_sensitive(logger, method_name, event_dict):
    """structlog processor masking credential-looking keys."""
    _redact(event_dict)
    return event_dict


class ContextFilter(logging.Filter):
    """Attach request id and staff user to stdlib records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, 'request_id', None) is None:
            record.request_id = request_id.get()
        if getattr(record, 'user_id', None) is None:
            record.user_id = user_id.get()
        return True


class LedgerJsonFormatter(jsonlogger.JsonFormatter):
    """JSON lines with a fixed set of top-level fields."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['service'] = SERVICE_NAME
        log_record.setdefault('timestamp', self.formatTime(record))
        _redact(log_record)


def _configure_structlog(json_output: bool) -> None:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.processors.KeyValueRenderer(key_order=['event', 'request_id'])
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            add_request_context,
            redact_sensitive,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def _configure_stdlib(level: int, json_output: bool) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(ContextFilter())
    if json_output:
        handler.setFormatter(LedgerJsonFormatter('%(message)s %(request_id)s %(user_id)s'))
    else:
        handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)-7s %(name)s [%(request_id)s] %(message)s'
        ))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.LOG_SQL_QUERIES else logging.WARNING
    )


def setup_logging() -> None:
    """Configure logging once at application start."""
    level = logging.getLevelName(settings.LOG_LEVEL)
    if not isinstance(level, int):
        level = logging.INFO
    json_output = settings.LOG_FORMAT == "json"

    _configure_stdlib(level, json_output)
    if settings.ENABLE_STRUCTURED_LOGGING:
        _configure_structlog(json_output)

    get_logger(__name__).info("Logging configured", extra={
        'log_level': settings.LOG_LEVEL,
        'log_format': settings.LOG_FORMAT,
    })


class LoggerAdapter:
    """
    Thin wrapper over a stdlib logger.

    Call sites pass structured fields through ``extra=``; the wrapper makes
    sure the dict is a fresh copy so formatters may mutate it.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def _log(self, level: int, message: str, *args, **kwargs):
        kwargs['extra'] = dict(kwargs.get('extra') or {})
        self.logger.log(level, message, *args, **kwargs)

    def debug(self, message: str, *args, **kwargs):
        self._log(logging.DEBUG, message, *args, **kwargs)

    def info(self, message: str, *args, **kwargs):
        self._log(logging.INFO, message, *args, **kwargs)

    def warning(self, message: str, *args, **kwargs):
        self._log(logging.WARNING, message, *args, **kwargs)

    def error(self, message: str, *args, **kwargs):
        self._log(logging.ERROR, message, *args, **kwargs)

    def exception(self, message: str, *args, **kwargs):
        kwargs.setdefault('exc_info', True)
        self._log(logging.ERROR, message, *args, **kwargs)

    def critical(self, message: str, *args, **kwargs):
        self._log(logging.CRITICAL, message, *args, **kwargs)


def get_logger(name: str = "hostel_ledger") -> LoggerAdapter:
    return LoggerAdapter(logging.getLogger(name))


def log_execution_time(logger_name: Optional[str] = None):
    """
    Decorator logging the duration of a service coroutine at DEBUG.

    Args:
        logger_name: Logger to write to (defaults to the function's module)
    """
    def decorator(func):
        logger = get_logger(logger_name or func.__module__)

        def _report(started: float) -> None:
            fields: Dict[str, Any] = {
                'function': func.__qualname__,
                'duration_ms': round((time.perf_counter() - started) * 1000, 2),
            }
            logger.debug("Service call finished", extra=fields)

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                return await func(*args, **kwargs)
            finally:
                _report(started)

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                _report(started)

        return async_wrapper if asyncio.iscoroutinefunction(func) else sync_wrapper

    return decorator


__all__ = [
    'get_logger',
    'setup_logging',
    'log_execution_time',
    'LoggerAdapter',
    'request_id',
    'user_id',
]
