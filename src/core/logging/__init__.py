"""
Structured logging module.

Provides JSON logging with context propagation:
    - JSONFormatter / ConsoleFormatter
    - Log context (domain, stage, run, worker) via contextvars
    - setup_logging() with a rotating per-stage file
    - log_with_context() for records carrying exchange fields
"""

from core.logging.context import clear_log_context, get_log_context, set_log_context
from core.logging.formatters import ConsoleFormatter, JSONFormatter
from core.logging.setup import get_logger, log_file_path, setup_logging
from core.logging.utilities import log_with_context

__all__ = [
    "clear_log_context",
    "get_log_context",
    "set_log_context",
    "ConsoleFormatter",
    "JSONFormatter",
    "get_logger",
    "log_file_path",
    "setup_logging",
    "log_with_context",
]
