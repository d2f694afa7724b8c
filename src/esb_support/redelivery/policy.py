"""
Consumer redelivery policy.

Decides whether a failed exchange should be redelivered, giving connection
failures and all other failures separate retry ceilings. The bookkeeping
lives on the exchange itself, so one policy instance can be shared by every
consumer route.
"""

import logging
from typing import Optional, Protocol, Tuple, Type, runtime_checkable

from core.errors import (
    CONNECT_ERROR_TYPES,
    InvalidUsageError,
    is_caused_by,
    qualified_name,
)
from core.logging import get_logger, log_with_context
from core.security import sanitize_error_message
from esb_support.config import RedeliveryConfig
from esb_support.exchange import Exchange
from esb_support.metrics import record_counter_reset, record_redelivery_decision

logger = get_logger(__name__)

# Exchange property and header names
CONSUMER_REDELIVERY_COUNTER = "consumerRedeliveryCounter"
LAST_EXCEPTION_WAS_CONNECT_EXCEPTION = "lastExceptionWasConnectException"
TRANSACTION_ID_HEADER = "transactionId"

# Logged in place of the raw text of connection failures
CONNECT_ERROR_NAME = "ConnectionRefusedError"
CONNECT_ERROR_MESSAGE = "Exception on connecting to the target"

OPERATION_RETRY = "Retry"
OPERATION_COUNTER_RESET = "Counter reset"
OPERATION_EXCEPTION_DETAILS = "Exception details"

_FLAG_VALUES = {"true": True, "false": False}


def _bad_property(exchange: Exchange, name: str, value: object) -> InvalidUsageError:
    return InvalidUsageError(
        f"Exchange property {name} holds {value!r}, which this redelivery policy did not write",
        context={"exchange_id": exchange.exchange_id, "property": name},
    )


@runtime_checkable
class RedeliveryPolicy(Protocol):
    """Contract the host framework calls when a delivery attempt fails."""

    maximum_redeliveries: int
    redelivery_delay_ms: int

    def decide(self, exchange: Exchange) -> bool:
        """Return True to redeliver the exchange, False to give up."""
        ...


class ConsumerRedeliveryPolicy:
    """
    Redelivery policy with separate ceilings for connection failures.

    A connection failure anywhere in the exception's cause chain is retried
    up to connect_error_max_retries times; anything else up to
    other_error_max_retries times. The first non-connection failure after
    a run of connection failures restarts the count from zero.

    State kept on the exchange between attempts:
        consumerRedeliveryCounter: attempts made so far (default 0)
        lastExceptionWasConnectException: kind of the previous failure
            (default False)

    The instance itself only holds immutable settings and is safe to share
    across threads, provided the host never evaluates the same exchange
    concurrently.

    Usage:
        >>> policy = ConsumerRedeliveryPolicy(10, 2, 30000)
        >>> exchange = Exchange(exception=ConnectionRefusedError())
        >>> policy.decide(exchange)
        True
        >>> exchange.get_property("consumerRedeliveryCounter")
        1
    """

    def __init__(
        self,
        connect_error_max_retries: int,
        other_error_max_retries: int,
        retry_delay_ms: int,
        connect_error_types: Tuple[Type[BaseException], ...] = CONNECT_ERROR_TYPES,
        transaction_id_header: str = TRANSACTION_ID_HEADER,
    ):
        # Validates the ceilings and delay
        self.config = RedeliveryConfig(
            connect_error_max_retries=connect_error_max_retries,
            other_error_max_retries=other_error_max_retries,
            retry_delay_ms=retry_delay_ms,
        )
        self.connect_error_types = tuple(connect_error_types)
        self.transaction_id_header = transaction_id_header

    @classmethod
    def from_config(cls, config: RedeliveryConfig, **kwargs) -> "ConsumerRedeliveryPolicy":
        return cls(
            config.connect_error_max_retries,
            config.other_error_max_retries,
            config.retry_delay_ms,
            **kwargs,
        )

    @property
    def connect_error_max_retries(self) -> int:
        return self.config.connect_error_max_retries

    @property
    def other_error_max_retries(self) -> int:
        return self.config.other_error_max_retries

    @property
    def redelivery_delay_ms(self) -> int:
        return self.config.retry_delay_ms

    @property
    def maximum_redeliveries(self) -> int:
        """Upper bound the host should allow; the policy narrows it per failure."""
        return self.config.connect_error_max_retries

    def decide(self, exchange: Exchange) -> bool:
        """
        Decide whether the failed exchange should be redelivered.

        Args:
            exchange: Exchange whose current attempt failed

        Returns:
            True to redeliver, False when retries are exhausted

        Raises:
            InvalidUsageError: If the exchange carries no exception, or its
                bookkeeping properties hold values this policy cannot read
        """
        exc = exchange.exception
        if exc is None:
            raise InvalidUsageError(
                "This redelivery policy must be used within an exception handling clause",
                context={"exchange_id": exchange.exchange_id},
            )

        last_was_connect_error = self._get_last_was_connect_error(exchange)
        counter = self._get_counter(exchange)
        connect_error = self.is_caused_by_connect_error(exc)

        if connect_error:
            allowed = counter < self.connect_error_max_retries
        else:
            if last_was_connect_error:
                counter = 0
                self._log_counter_reset(exchange, counter)
            allowed = counter < self.other_error_max_retries

        self._log_retry(exchange, counter, allowed)
        self._log_exception_details(exchange, connect_error)
        record_redelivery_decision(exchange.from_route_id, connect_error, allowed)

        exchange.set_property(CONSUMER_REDELIVERY_COUNTER, counter + 1)
        exchange.set_property(LAST_EXCEPTION_WAS_CONNECT_EXCEPTION, connect_error)

        return allowed

    def is_caused_by_connect_error(self, exc: BaseException) -> bool:
        """Check the exception and its whole cause chain for a connection failure."""
        return is_caused_by(exc, self.connect_error_types)

    # -------------------------------------------------------------------------
    # Exchange bookkeeping
    # -------------------------------------------------------------------------

    # Hosts that copy properties through message headers hand them back as text
    @staticmethod
    def _get_counter(exchange: Exchange) -> int:
        value = exchange.get_property(CONSUMER_REDELIVERY_COUNTER)
        if value is None:
            return 0
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().isdigit():
            return int(value)
        raise _bad_property(exchange, CONSUMER_REDELIVERY_COUNTER, value)

    @staticmethod
    def _get_last_was_connect_error(exchange: Exchange) -> bool:
        value = exchange.get_property(LAST_EXCEPTION_WAS_CONNECT_EXCEPTION)
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in _FLAG_VALUES:
            return _FLAG_VALUES[value.strip().lower()]
        raise _bad_property(exchange, LAST_EXCEPTION_WAS_CONNECT_EXCEPTION, value)

    # -------------------------------------------------------------------------
    # Diagnostics
    # -------------------------------------------------------------------------

    def _log_prefix(self, exchange: Exchange, operation: str) -> str:
        return (
            f"{exchange.context_name} - {exchange.from_route_id} - {exchange.exchange_id}"
            f" | {operation} | PROCESS"
            f" | transactionId: {self._transaction_id(exchange)}"
        )

    def _transaction_id(self, exchange: Exchange) -> Optional[str]:
        return exchange.get_header(self.transaction_id_header)

    def _log_fields(self, exchange: Exchange, operation: str) -> dict:
        return {
            "context_name": exchange.context_name,
            "route_id": exchange.from_route_id,
            "exchange_id": exchange.exchange_id,
            "operation": operation,
            "transaction_id": self._transaction_id(exchange),
        }

    def _log_retry(self, exchange: Exchange, counter: int, allowed: bool) -> None:
        log_with_context(
            logger,
            logging.WARNING,
            f"{self._log_prefix(exchange, OPERATION_RETRY)} | counter: {counter}",
            retry_count=counter,
            redelivery_allowed=allowed,
            **self._log_fields(exchange, OPERATION_RETRY),
        )

    def _log_counter_reset(self, exchange: Exchange, counter: int) -> None:
        record_counter_reset(exchange.from_route_id)
        log_with_context(
            logger,
            logging.WARNING,
            f"{self._log_prefix(exchange, OPERATION_COUNTER_RESET)} | counter: {counter}",
            retry_count=counter,
            **self._log_fields(exchange, OPERATION_COUNTER_RESET),
        )

    def _log_exception_details(self, exchange: Exchange, connect_error: bool) -> None:
        if connect_error:
            name = CONNECT_ERROR_NAME
            message = CONNECT_ERROR_MESSAGE
        else:
            name = qualified_name(exchange.exception)
            message = sanitize_error_message(str(exchange.exception))

        log_with_context(
            logger,
            logging.WARNING,
            f"{self._log_prefix(exchange, OPERATION_EXCEPTION_DETAILS)}"
            f" | name: {name} | message: {message}",
            exception_name=name,
            exception_message=message,
            connect_error=connect_error,
            **self._log_fields(exchange, OPERATION_EXCEPTION_DETAILS),
        )
