# backend/fincatch/utils/context.py
"""
Fetch-cycle context management for the valuation engine.

Every aggregation, history build or benchmark comparison runs as one
"fetch cycle" that issues many provider requests. The cycle's correlation
ID is stored in a ContextVar so it propagates through async/await calls
and into every log line emitted while the cycle runs.

Usage:
    from fincatch.utils.context import get_correlation_id, set_correlation_id

    set_correlation_id("abc-123")
    correlation_id = get_correlation_id()  # Returns "abc-123"
"""

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> str | None:
    """
    Get the current fetch cycle's correlation ID.

    Returns:
        The correlation ID, or None if not set.
    """
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """
    Set the correlation ID for the current context.

    Args:
        correlation_id: Unique identifier for this fetch cycle
    """
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    """Clear the correlation ID."""
    _correlation_id_var.set(None)


def new_correlation_id() -> str:
    """Generate a short random correlation ID."""
    return uuid.uuid4().hex[:12]


@contextmanager
def fetch_cycle(prefix: str) -> Iterator[str]:
    """
    Bind a correlation ID for the duration of a fetch cycle.

    An ID that is already set (e.g. by a caller tracing a larger
    operation) is kept; otherwise a new one is generated and removed
    again when the block exits.

    Args:
        prefix: Short label for the kind of cycle ("perf", "hist", ...)

    Yields:
        The correlation ID in effect inside the block
    """
    existing = _correlation_id_var.get()
    if existing is not None:
        yield existing
        return

    token = _correlation_id_var.set(f"{prefix}-{new_correlation_id()}")
    try:
        yield _correlation_id_var.get()
    finally:
        _correlation_id_var.reset(token)
