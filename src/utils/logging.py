"""Structured logging helpers: per-request correlation IDs, PII masking and timing."""

import asyncio
import hashlib
import logging
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from functools import wraps
from typing import Any, Callable, Dict, Iterator, Optional

from src.utils.logging_config import LoggingConfig, get_logger


_correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)


def generate_correlation_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


def get_correlation_id() -> Optional[str]:
    return _correlation_id_var.get()


@contextmanager
def correlation_context(correlation_id: Optional[str] = None) -> Iterator[str]:
    """
    Bind a correlation ID for the duration of one request.

    A caller-supplied ID (from the request header) is reused so log lines
    can be joined with the client's; otherwise a fresh one is minted.
    """
    token = _correlation_id_var.set(correlation_id or generate_correlation_id())
    try:
        yield _correlation_id_var.get()
    finally:
        _correlation_id_var.reset(token)


def mask_phone(phone: Optional[str]) -> Optional[str]:
    """Keep only the last four digits of a contact phone."""
    if not phone or not LoggingConfig.LOG_MASK_SENSITIVE:
        return phone
    return f"******{phone[-4:]}"


def mask_user_id(user_id: str) -> str:
    """Shorten long account IDs to a prefix plus a hash."""
    if not LoggingConfig.LOG_MASK_SENSITIVE or not user_id:
        return user_id

    if len(user_id) > 12:
        digest = hashlib.sha256(user_id.encode()).hexdigest()[:8]
        return f"{user_id[:4]}...{digest}"
    return user_id


class StructuredLogger:
    """Wraps a stdlib logger; keyword arguments become fields on the record."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def _fields(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        correlation_id = get_correlation_id()
        if correlation_id:
            return {"correlation_id": correlation_id, **fields}
        return fields

    def _log(self, level: int, message: str, exc_info: bool = False, **fields: Any) -> None:
        if self.logger.isEnabledFor(level):
            self.logger.log(level, message, extra=self._fields(fields), exc_info=exc_info)

    def debug(self, message: str, **fields: Any) -> None:
        self._log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log(logging.WARNING, message, **fields)

    def error(self, message: str, exc_info: bool = False, **fields: Any) -> None:
        self._log(logging.ERROR, message, exc_info=exc_info, **fields)


def get_structured_logger(name: str) -> StructuredLogger:
    return StructuredLogger(get_logger(name))


@contextmanager
def log_timing(operation: str, logger: Optional[StructuredLogger] = None, **fields: Any) -> Iterator[None]:
    """Log how long the wrapped block took; warn past the slow threshold."""
    log = logger or get_structured_logger(__name__)
    started = time.perf_counter()
    log.debug(f"Starting {operation}", operation=operation, **fields)

    try:
        yield
    finally:
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        threshold = LoggingConfig.LOG_SLOW_OPERATION_THRESHOLD_MS
        if elapsed_ms > threshold:
            log.warning(
                f"Slow operation: {operation}",
                operation=operation,
                processing_time_ms=elapsed_ms,
                threshold_ms=threshold,
                **fields
            )
        else:
            log.info(f"Completed {operation}", operation=operation, processing_time_ms=elapsed_ms, **fields)


def timed(operation: Optional[str] = None, logger: Optional[StructuredLogger] = None):
    """Decorator form of log_timing for sync or async callables."""
    def decorator(func: Callable) -> Callable:
        name = operation or f"{func.__module__}.{func.__name__}"
        log = logger or get_structured_logger(func.__module__)

        if asyncio.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                with log_timing(name, logger=log):
                    return await func(*args, **kwargs)
            return async_wrapper

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            with log_timing(name, logger=log):
                return func(*args, **kwargs)
        return sync_wrapper

    return decorator


def setup_logging() -> logging.Logger:
    """Configure the root logger for a serverless function; returns the app logger."""
    LoggingConfig.setup_logging()
    return get_logger("src")
