"""Log context variables propagated through contextvars."""

from contextvars import ContextVar
from typing import Dict, Optional

_domain: ContextVar[Optional[str]] = ContextVar("domain", default=None)
_stage: ContextVar[Optional[str]] = ContextVar("stage", default=None)
_run_id: ContextVar[Optional[str]] = ContextVar("run_id", default=None)
_worker_id: ContextVar[Optional[str]] = ContextVar("worker_id", default=None)

_VARS = {
    "domain": _domain,
    "stage": _stage,
    "run_id": _run_id,
    "worker_id": _worker_id,
}


def set_log_context(
    domain: Optional[str] = None,
    stage: Optional[str] = None,
    run_id: Optional[str] = None,
    worker_id: Optional[str] = None,
) -> None:
    """
    Set log context values for the current context.

    Only non-None arguments are applied; others keep their current value.
    """
    values = {
        "domain": domain,
        "stage": stage,
        "run_id": run_id,
        "worker_id": worker_id,
    }
    for key, value in values.items():
        if value is not None:
            _VARS[key].set(value)


def get_log_context() -> Dict[str, Optional[str]]:
    """Get all log context values (None when unset)."""
    return {key: var.get() for key, var in _VARS.items()}


def clear_log_context() -> None:
    """Reset all log context values to None."""
    for var in _VARS.values():
        var.set(None)
