"""Logging setup for redelivery processes."""

import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from core.logging.context import set_log_context
from core.logging.formatters import ConsoleFormatter, JSONFormatter

DEFAULT_LOG_DIR = Path("logs")
DEFAULT_DOMAIN = "esb"
MAX_LOG_BYTES = 10 * 1024 * 1024  # 10MB
LOG_BACKUP_COUNT = 5

PLAIN_FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def log_file_path(log_dir: Path, stage: str, domain: str = DEFAULT_DOMAIN) -> Path:
    """
    Path of the log file for one stage of a domain.

    Files are grouped per day: {log_dir}/{domain}/{YYYY-MM-DD}/{domain}_{stage}.log
    """
    day = datetime.now().strftime("%Y-%m-%d")
    return log_dir / domain / day / f"{domain}_{stage}.log"


def setup_logging(
    stage: str,
    log_dir: Optional[Path] = None,
    domain: str = DEFAULT_DOMAIN,
    level: int = logging.INFO,
    json_format: bool = True,
    worker_id: Optional[str] = None,
) -> Path:
    """
    Route all logging to stdout and a rotating per-stage file.

    The console shows records at ``level`` and above; the file keeps
    everything from DEBUG. Calling it again replaces the handlers of the
    previous call.

    Returns:
        Path of the log file
    """
    set_log_context(domain=domain, stage=stage, worker_id=worker_id)

    log_file = log_file_path(log_dir or DEFAULT_LOG_DIR, stage, domain)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        JSONFormatter() if json_format else logging.Formatter(PLAIN_FILE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(ConsoleFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in root_logger.handlers:
        handler.close()
    root_logger.handlers.clear()
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.getLogger(__name__).debug(f"Logging to {log_file} (json={json_format})")
    return log_file


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
