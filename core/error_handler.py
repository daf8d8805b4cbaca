"""Decorators and helpers for consistent, loguru-backed error handling."""
from __future__ import annotations

import functools
import time
from typing import Any, Callable, Optional, TypeVar

from loguru import logger

T = TypeVar('T')


def handle_exceptions(
    logger_instance=logger,
    default_return: Optional[Any] = None,
    reraise: bool = False,
    message: Optional[str] = None
):
    """Log any exception raised by the wrapped callable.

    Args:
        logger_instance: Logger used for the error line
        default_return: Value returned when an exception was swallowed
        reraise: Re-raise after logging instead of returning ``default_return``
        message: Prefix for the logged error
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                error_msg = message or f"Error in {func.__name__}"
                logger_instance.opt(exception=e).error(f"{error_msg}: {e}")
                if reraise:
                    raise
                return default_return
        return wrapper
    return decorator


def log_execution_time(logger_instance=logger, level: str = "DEBUG"):
    """Log how long the wrapped callable took.

    Fuzzy matching cost grows with the alias table, so parse calls are timed
    at DEBUG level.
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                elapsed = time.perf_counter() - start_time
                logger_instance.log(level.upper(), f"{func.__name__} executed in {elapsed:.3f}s")
        return wrapper
    return decorator


class ErrorHandler:
    """Central place to log errors raised by callbacks of the session layer."""

    def __init__(self, logger_instance=logger):
        self.logger = logger_instance

    def handle(self, error: Exception, context: str = "", reraise: bool = False) -> None:
        message = f"Error in {context}: {error}" if context else str(error)
        self.logger.error(message)
        if reraise:
            raise error

    def safe_execute(
        self,
        func: Callable[..., T],
        *args,
        default: Optional[T] = None,
        context: str = "",
        **kwargs
    ) -> Optional[T]:
        """Run ``func`` and return ``default`` if it raises."""
        try:
            return func(*args, **kwargs)
        except Exception as e:
            self.handle(e, context=context or getattr(func, "__name__", "callable"))
            return default
