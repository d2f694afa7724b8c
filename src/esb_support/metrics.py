"""
Prometheus metrics for redelivery decisions.

Provides instrumentation for:
- Redelivery decisions by route, failure kind and outcome
- Counter resets when a connection failure run ends
"""

from typing import Optional

from prometheus_client import Counter

redelivery_decisions_total = Counter(
    "esb_redelivery_decisions_total",
    "Total number of redelivery decisions made by the consumer policy",
    ["route", "error_kind", "decision"],  # error_kind: connect, other; decision: retry, exhausted
)

redelivery_counter_resets_total = Counter(
    "esb_redelivery_counter_resets_total",
    "Total number of consumer redelivery counter resets",
    ["route"],
)


def _route_label(route_id: Optional[str]) -> str:
    return route_id or "unknown"


def record_redelivery_decision(
    route_id: Optional[str], connect_error: bool, allowed: bool
) -> None:
    """
    Record a redelivery decision.

    Args:
        route_id: Route the failed message came from
        connect_error: Whether the failure was a connection failure
        allowed: Whether redelivery was allowed
    """
    redelivery_decisions_total.labels(
        route=_route_label(route_id),
        error_kind="connect" if connect_error else "other",
        decision="retry" if allowed else "exhausted",
    ).inc()


def record_counter_reset(route_id: Optional[str]) -> None:
    """
    Record a consumer redelivery counter reset.

    Args:
        route_id: Route the failed message came from
    """
    redelivery_counter_resets_total.labels(route=_route_label(route_id)).inc()
