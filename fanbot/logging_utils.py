"""
Centralized logging and error classification utilities for FanBot.

This module provides decorators and helper functions to standardize logging
and error reporting across the assistant, the Ollama client and the CLI.

Features:
- Structured logging with contextual information
- Error category detection for user-facing diagnostics
- Performance timing for async operations
"""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any, ParamSpec, TypeVar

import httpx
import structlog

from fanbot.llm.exceptions import (
    ChatHTTPError,
    LLMError,
    NoStreamBody,
    StreamTimeoutError,
    TransportFailure,
)

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(colors=True),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

# Type variables for generic decorators
P = ParamSpec("P")
T = TypeVar("T")
AsyncCallable = Callable[P, Awaitable[T]]

logger = structlog.get_logger(__name__)


def configure_logging(config: dict[str, Any] | None = None) -> None:
    """Apply the ``logging`` section of config.yaml to the stdlib root logger."""
    config = config or {}
    level_name = str(config.get("level", "INFO")).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown logging level '{level_name}'")

    logging.basicConfig(
        level=level, format="%(asctime)s - %(levelname)s - %(message)s"
    )
    logging.getLogger().setLevel(level)

    # httpx logs every request at INFO
    if not config.get("log_http_requests", False):
        logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


class ErrorClassifier:
    """Maps exceptions to stable categories for logs and diagnostics."""

    @staticmethod
    def classify_error(error: BaseException) -> str:
        """
        Classify an error into a category string.

        Args:
            error: The exception to classify

        Returns:
            Error category
        """
        if isinstance(error, NoStreamBody):
            return "no_stream_body"
        if isinstance(error, ChatHTTPError):
            return "http_status_error"
        if isinstance(error, StreamTimeoutError | TimeoutError):
            return "timeout_error"
        if isinstance(error, TransportFailure | httpx.TransportError):
            return "transport_error"
        if isinstance(error, LLMError):
            return "llm_error"
        if isinstance(error, ConnectionError | OSError):
            return "transport_error"
        if isinstance(error, ValueError | TypeError):
            return "parameter_error"
        return "unknown_error"


def log_operation(
    operation: str,
    *,
    log_args: bool = False,
    log_result: bool = False,
    log_timing: bool = True,
    context: dict[str, Any] | None = None,
) -> Callable[[AsyncCallable[P, T]], AsyncCallable[P, T]]:
    """
    Decorator for logging async operations with structured context.

    Args:
        operation: Description of the operation being performed
        log_args: Whether to log function arguments
        log_result: Whether to log function result
        log_timing: Whether to log execution timing
        context: Additional context to include in logs

    Returns:
        Decorated function with logging
    """
    def decorator(func: AsyncCallable[P, T]) -> AsyncCallable[P, T]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            operation_logger = logger.bind(
                operation=operation,
                function=func.__name__,
                **(context or {}),
            )

            log_data = {}
            if log_args:
                log_data.update({
                    "args": args[1:] if args else [],  # Skip 'self' if present
                    "kwargs": kwargs,
                })

            operation_logger.info("Operation started", **log_data)

            start_time = time.perf_counter() if log_timing else None

            try:
                result = await func(*args, **kwargs)

                end_log_data: dict[str, Any] = {}
                if log_timing and start_time is not None:
                    duration = round((time.perf_counter() - start_time) * 1000, 2)
                    end_log_data["duration_ms"] = duration
                if log_result:
                    end_log_data["result"] = result

                operation_logger.info(
                    "Operation completed successfully", **end_log_data
                )
                return result

            except Exception as e:
                error_log_data: dict[str, Any] = {
                    "error_type": type(e).__name__,
                    "error_category": ErrorClassifier.classify_error(e),
                    "error_message": str(e),
                }
                if log_timing and start_time is not None:
                    duration = round((time.perf_counter() - start_time) * 1000, 2)
                    error_log_data["duration_ms"] = duration

                operation_logger.error("Operation failed", **error_log_data)
                raise

        return wrapper
    return decorator


@asynccontextmanager
async def operation_context(
    operation: str,
    *,
    log: ContextualLogger | None = None,
    context: dict[str, Any] | None = None,
):
    """
    Async context manager timing one operation.

    Failures are logged with their ``ErrorClassifier`` category and re-raised.

    Args:
        operation: Name of the operation
        log: Logger whose context is extended, module logger if omitted
        context: Additional context for logging

    Yields:
        ContextualLogger bound to the operation
    """
    operation_logger = (log or ContextualLogger()).bind(
        operation=operation, **(context or {})
    )
    start_time = time.perf_counter()

    try:
        yield operation_logger
    except Exception as e:
        operation_logger.error(
            "Operation failed",
            error_type=type(e).__name__,
            error_category=ErrorClassifier.classify_error(e),
            error_message=str(e),
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        raise

    operation_logger.debug(
        "Operation finished",
        duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
    )


class ContextualLogger:
    """Logger that maintains context across related operations."""

    def __init__(self, base_context: dict[str, Any] | None = None):
        self.base_context = base_context or {}
        self._logger = logger.bind(**self.base_context)

    def bind(self, **context: Any) -> ContextualLogger:
        """Create a new logger with additional context."""
        merged_context = {**self.base_context, **context}
        return ContextualLogger(merged_context)

    def info(self, message: str, **context: Any) -> None:
        self._logger.info(message, **context)

    def warning(self, message: str, **context: Any) -> None:
        self._logger.warning(message, **context)

    def error(self, message: str, **context: Any) -> None:
        self._logger.error(message, **context)

    def debug(self, message: str, **context: Any) -> None:
        self._logger.debug(message, **context)
