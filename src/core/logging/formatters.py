"""Log formatters for JSON and console output."""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from core.logging.context import get_log_context


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line, with log context and exchange fields.

    Grep-friendly: every redelivery line carries its exchange_id and
    operation as top-level keys.
    """

    # Record attributes copied into the JSON object when set
    EXTRA_FIELDS = (
        "context_name",
        "route_id",
        "exchange_id",
        "transaction_id",
        "operation",
        "retry_count",
        "redelivery_allowed",
        "connect_error",
        "exception_name",
        "exception_message",
    )

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_entry: Dict[str, Any] = {
            "ts": created.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        for key, value in get_log_context().items():
            if value:
                log_entry[key] = value

        for field in self.EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable console formatter.

    Adds [domain] [stage] from the log context and the first 8 characters
    of the exchange id when the record has one.
    """

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_log_context()

        parts = [
            datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S"),
            record.levelname,
        ]
        parts.extend(f"[{ctx[key]}]" for key in ("domain", "stage") if ctx[key])
        prefix = " - ".join(parts)

        exchange_id = getattr(record, "exchange_id", None)
        if exchange_id:
            return f"{prefix} - [{str(exchange_id)[:8]}] {record.getMessage()}"
        return f"{prefix} - {record.getMessage()}"
