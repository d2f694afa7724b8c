"""
Redelivery handling for ESB consumers.

Provides:
- RedeliveryPolicy: contract the host framework calls on a failed attempt
- ConsumerRedeliveryPolicy: separate retry ceilings for connection failures
  and other failures, tracked on the exchange
"""

from esb_support.redelivery.policy import (
    CONSUMER_REDELIVERY_COUNTER,
    LAST_EXCEPTION_WAS_CONNECT_EXCEPTION,
    TRANSACTION_ID_HEADER,
    ConsumerRedeliveryPolicy,
    RedeliveryPolicy,
)

__all__ = [
    "CONSUMER_REDELIVERY_COUNTER",
    "LAST_EXCEPTION_WAS_CONNECT_EXCEPTION",
    "TRANSACTION_ID_HEADER",
    "ConsumerRedeliveryPolicy",
    "RedeliveryPolicy",
]
