"""
pytest configuration for esb-redelivery tests.

Adds src directory to Python path for imports and sets up test environment.
"""

import logging
import os
import sys
from pathlib import Path

import pytest

# Set test environment variables BEFORE any imports
os.environ.setdefault("TEST_MODE", "true")

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))


@pytest.fixture(autouse=True)
def clean_redelivery_env(monkeypatch):
    """Keep host environment settings out of config defaults."""
    for name in (
        "REDELIVERY_CONNECT_MAX_RETRIES",
        "REDELIVERY_OTHER_MAX_RETRIES",
        "REDELIVERY_DELAY_MS",
        "WORKER_ID",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def restore_root_logger():
    """Drop the handlers installed by setup_logging() and restore the root level."""
    root_logger = logging.getLogger()
    level = root_logger.level
    yield
    for handler in root_logger.handlers:
        if isinstance(handler, logging.FileHandler):
            handler.close()
    root_logger.handlers.clear()
    root_logger.setLevel(level)
