# backend/fincatch/utils/__init__.py
"""
Utility modules for the Fin-Catch valuation engine.

This package contains cross-cutting utilities used throughout the engine:
- logging: Logging configuration and setup with correlation ID support
- context: Fetch-cycle context (correlation IDs)
- date_utils: Unix timestamp helpers (trading windows, sampling)

Usage:
    from fincatch.utils import setup_logging, get_logger
    from fincatch.utils import get_correlation_id, fetch_cycle
    from fincatch.utils.date_utils import generate_sample_timestamps
"""

from fincatch.utils.context import (
    get_correlation_id,
    set_correlation_id,
    clear_correlation_id,
    fetch_cycle,
)
from fincatch.utils.logging import setup_logging, get_logger

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    # Context
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
    "fetch_cycle",
]
