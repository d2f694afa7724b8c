"""
Replay a sequence of delivery failures through the consumer redelivery policy.

Usage:
    # Three connection failures followed by two other failures
    python -m esb_support connect connect connect other other

    # Custom ceilings
    python -m esb_support --connect-max 3 --other-max 1 connect other

    # Settings from a YAML file (redelivery: / logging: sections)
    python -m esb_support --config config.yaml connect other

Exit codes:
    0: last decision allowed redelivery
    1: retries exhausted on the last decision
    2: invalid usage or configuration
"""

import argparse
import logging
import os
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from core.errors import ConfigurationError
from core.logging import get_logger, set_log_context, setup_logging
from esb_support.config import RedeliveryConfig, load_config
from esb_support.exchange import Exchange
from esb_support.redelivery import CONSUMER_REDELIVERY_COUNTER, ConsumerRedeliveryPolicy
from esb_support.uuid_producer import generate_uuid

logger = logging.getLogger(__name__)

FAILURE_KINDS = ("connect", "other")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="python -m esb_support",
        description="Replay delivery failures through the consumer redelivery policy",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m esb_support connect connect other
    python -m esb_support --connect-max 3 --other-max 1 connect other
        """,
    )

    parser.add_argument(
        "failures",
        nargs="+",
        choices=FAILURE_KINDS,
        help="Failure kinds in delivery order",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML config file (default: environment variables)",
    )

    parser.add_argument("--connect-max", type=int, default=None, help="Connection failure ceiling")
    parser.add_argument("--other-max", type=int, default=None, help="Other failure ceiling")
    parser.add_argument("--delay-ms", type=int, default=None, help="Redelivery delay (ms)")

    parser.add_argument(
        "--route-id",
        default="replay",
        help="Route identifier for log correlation (default: replay)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Console logging level (default: from config, INFO)",
    )

    parser.add_argument(
        "--log-dir",
        type=str,
        default=None,
        help="Log directory path (default: from config or LOG_DIR env var)",
    )

    parser.add_argument(
        "--no-json-logs",
        action="store_true",
        help="Write plain text log files instead of JSON",
    )

    return parser.parse_args(argv)


def _build_failure(kind: str) -> Exception:
    if kind == "connect":
        return ConnectionRefusedError(111, "Connection refused")
    return RuntimeError("Message processing failed")


def _resolve_redelivery_config(
    args: argparse.Namespace, base: RedeliveryConfig
) -> RedeliveryConfig:
    """Apply command line ceilings on top of file or environment settings."""
    changes = {}
    if args.connect_max is not None:
        changes["connect_error_max_retries"] = args.connect_max
    if args.other_max is not None:
        changes["other_error_max_retries"] = args.other_max
    if args.delay_ms is not None:
        changes["retry_delay_ms"] = args.delay_ms
    return replace(base, **changes) if changes else base


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    global logger
    args = parse_args(argv)

    try:
        if args.config is not None:
            app_config = load_config(args.config)
            base = app_config.redelivery
        else:
            app_config = None
            base = RedeliveryConfig.from_env()
        redelivery_config = _resolve_redelivery_config(args, base)
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    log_config = app_config.logging if app_config is not None else None
    level_name = args.log_level or (log_config.level if log_config else "INFO")
    log_dir = Path(
        args.log_dir
        or (log_config.log_dir if log_config else os.getenv("LOG_DIR", "logs"))
    )
    json_logs = not args.no_json_logs and (log_config.json_logs if log_config else True)

    setup_logging(
        "redelivery",
        log_dir=log_dir,
        level=getattr(logging, level_name.upper()),
        json_format=json_logs,
        worker_id=os.getenv("WORKER_ID", "esb-replay"),
    )
    set_log_context(run_id=generate_uuid())
    logger = get_logger(__name__)

    policy = ConsumerRedeliveryPolicy.from_config(redelivery_config)
    exchange = Exchange(context_name="esb-support", from_route_id=args.route_id)
    logger.info(
        f"Replaying {len(args.failures)} failures: "
        f"connect_max={policy.connect_error_max_retries}, "
        f"other_max={policy.other_error_max_retries}, "
        f"delay_ms={policy.redelivery_delay_ms}"
    )

    allowed = True
    for attempt, kind in enumerate(args.failures, start=1):
        exchange.exception = _build_failure(kind)
        allowed = policy.decide(exchange)
        print(
            f"{attempt}\t{kind}\t{'retry' if allowed else 'exhausted'}"
            f"\tcounter={exchange.get_property(CONSUMER_REDELIVERY_COUNTER)}"
        )

    return 0 if allowed else 1


if __name__ == "__main__":
    sys.exit(main())
