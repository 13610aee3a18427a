"""Structured logging module for ffwatch.

Text or JSON output to stderr or a rotating file. Records logged during a
supervised run are tagged with that run's id.
"""

from ffwatch.logging.config import JSONFormatter, configure_logging
from ffwatch.logging.context import (
    RunContextFilter,
    clear_run_context,
    get_run_context,
    run_context,
    set_run_context,
)

__all__ = [
    "JSONFormatter",
    "RunContextFilter",
    "clear_run_context",
    "configure_logging",
    "get_run_context",
    "run_context",
    "set_run_context",
]
