"""
Exception hierarchy and cause-chain helpers.

Provides:
- PipelineError hierarchy for typed exceptions
- Cause-chain utilities for redelivery decisions
"""

from core.errors.exceptions import (
    # Base class
    PipelineError,
    # Typed errors
    ConnectionError,
    ConfigurationError,
    InvalidUsageError,
    # Cause chain utilities
    CONNECT_ERROR_TYPES,
    iter_exception_chain,
    is_caused_by,
    qualified_name,
)

__all__ = [
    "PipelineError",
    "ConnectionError",
    "ConfigurationError",
    "InvalidUsageError",
    "CONNECT_ERROR_TYPES",
    "iter_exception_chain",
    "is_caused_by",
    "qualified_name",
]
