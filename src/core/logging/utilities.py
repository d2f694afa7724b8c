"""Structured logging helper."""

import logging
from typing import Any


def log_with_context(
    logger: logging.Logger,
    level: int,
    msg: str,
    **fields: Any,
) -> None:
    """
    Log msg with fields attached to the record as attributes.

    JSONFormatter writes the known fields as top-level keys, so a
    redelivery line can be found by exchange_id or operation:

        log_with_context(
            logger, logging.WARNING, line,
            exchange_id=exchange.exchange_id,
            operation="Retry",
        )
    """
    logger.log(level, msg, extra=fields)
