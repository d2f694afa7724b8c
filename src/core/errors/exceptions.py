"""
Exception hierarchy and cause-chain helpers.

Provides:
- PipelineError base with an optional wrapped cause and debug context
- ConnectionError / ConfigurationError / InvalidUsageError
- Cause-chain walking used to spot connection failures behind wrappers
"""

import builtins
from typing import Iterator, Optional, Tuple, Type


class PipelineError(Exception):
    """
    Base exception for all errors raised by this package.

    Attributes:
        message: Human-readable error description
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        context: Optional[dict] = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message} | Caused by: {self.cause}"


class ConnectionError(PipelineError):
    """Could not connect to the target endpoint."""


class ConfigurationError(PipelineError):
    """Invalid configuration."""


class InvalidUsageError(PipelineError):
    """A component was called outside the situation it was written for."""


# Failure kinds that mean the target endpoint could not be reached
CONNECT_ERROR_TYPES: Tuple[Type[BaseException], ...] = (
    builtins.ConnectionRefusedError,
    ConnectionError,
)


def iter_exception_chain(exc: Optional[BaseException]) -> Iterator[BaseException]:
    """
    Yield an exception followed by each exception it was caused by.

    Only explicit causes count: ``raise ... from`` and the ``cause`` of a
    wrapping PipelineError. An exception merely raised while another was
    being handled (``__context__``) is not part of the chain.
    """
    seen = set()
    current = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current

        if current.__cause__ is not None:
            current = current.__cause__
        elif isinstance(current, PipelineError):
            current = current.cause
        else:
            current = None


def is_caused_by(
    exc: Optional[BaseException],
    types: Tuple[Type[BaseException], ...],
) -> bool:
    """Check whether exc or anything in its cause chain is one of types."""
    return any(isinstance(e, types) for e in iter_exception_chain(exc))


def qualified_name(exc: BaseException) -> str:
    """
    Get the importable name of an exception's class.

    Builtins are reported by bare name (``ValueError``), everything else
    by module path (``core.errors.exceptions.InvalidUsageError``).
    """
    cls = type(exc)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"
