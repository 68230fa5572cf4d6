"""
Utility functions and performance helpers for RLSight.

This module provides:
- Performance timing decorators
- Tagged-value helpers for decoded replay payloads
"""

import logging
import time
from collections.abc import Callable, Mapping
from functools import wraps
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

# Type variable for generic decorators
F = TypeVar("F", bound=Callable[..., Any])


def timed(func: F) -> F:
    """
    Decorator to measure and log function execution time.

    Usage:
        @timed
        def compute_zone_occupancy(...):
            ...
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = time.perf_counter() - start_time
        logger.info(f"{func.__name__} completed in {elapsed:.3f}s")
        return result

    return wrapper  # type: ignore


class PerformanceMonitor:
    """
    Context manager for monitoring performance of code blocks.

    Usage:
        with PerformanceMonitor("reconstructing replay"):
            parser.parse()
    """

    def __init__(self, operation_name: str, log_level: int = logging.INFO):
        self.operation_name = operation_name
        self.log_level = log_level
        self.start_time: float | None = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.perf_counter() - (self.start_time or 0)
        if exc_type is not None:
            logger.error(f"{self.operation_name} failed after {elapsed:.3f}s: {exc_val}")
        else:
            logger.log(self.log_level, f"{self.operation_name} completed in {elapsed:.3f}s")
        return False


# =============================================================================
# Tagged values
# =============================================================================


def unwrap(value: Any, default: Any = None) -> Any:
    """
    Strip the ``{"Value": ...}`` tag the decoder puts around attribute values.

    Bare values pass through unchanged; ``None`` becomes ``default``.
    """
    if isinstance(value, Mapping) and "Value" in value:
        value = value["Value"]
    return default if value is None else value


def entity_ref(value: Any) -> str | None:
    """
    Read an entity reference (``{"Int": id}``, optionally tagged) as a string id.

    Returns None when the value does not carry a reference.
    """
    inner = unwrap(value)
    if isinstance(inner, Mapping):
        inner = inner.get("Int")
    if inner is None or isinstance(inner, (Mapping, list, bool)):
        return None
    return str(inner)


def stat_value(attrs: Mapping[str, Any], attribute: str) -> Any:
    """Read a counter attribute, 0 when the entity never reported it."""
    return unwrap(attrs.get(attribute), 0)
