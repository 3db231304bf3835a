"""Timing helpers for recommendation requests and strategies."""
import time
from contextlib import contextmanager
from typing import Optional, Callable
import logging

logger = logging.getLogger(__name__)

# Strategy runs at or above this are logged as warnings regardless of DEBUG
SLOW_STRATEGY_THRESHOLD_MS = 500.0


def now_ms() -> float:
    """Return current time in milliseconds using high-resolution timer."""
    return time.perf_counter() * 1000


@contextmanager
def time_operation(
    label: str,
    log_fn: Optional[Callable[[str], None]] = None,
    slow_ms: Optional[float] = None,
):
    """
    Time the wrapped block and log how long it took.

    Args:
        label: What is being timed, e.g. "strategy=nearby limit=10"
        log_fn: Logging function for normal runs (defaults to logger.debug)
        slow_ms: Runs at or above this many milliseconds log a SLOW_STRATEGY
            warning instead; None disables the check

    Example:
        with time_operation("strategy=nearby", slow_ms=SLOW_STRATEGY_THRESHOLD_MS):
            monasteries = repository.nearest(lat, lng, limit=10)
    """
    start = now_ms()
    try:
        yield
    finally:
        elapsed = now_ms() - start
        if slow_ms is not None and elapsed >= slow_ms:
            logger.warning("SLOW_STRATEGY: %.2fms - %s", elapsed, label)
        else:
            (log_fn or logger.debug)(f"{label}: {elapsed:.2f}ms")


def log_elapsed(start_ms: float, label: str, log_fn: Optional[Callable[[str], None]] = None) -> float:
    """Log time since start_ms under label and return the elapsed milliseconds."""
    elapsed = now_ms() - start_ms
    (log_fn or logger.debug)(f"{label}: {elapsed:.2f}ms")
    return elapsed
