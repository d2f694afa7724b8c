"""Tests for logging setup."""

import json
import logging
from datetime import datetime

import pytest

from core.logging.context import clear_log_context, get_log_context, set_log_context
from core.logging.setup import log_file_path, setup_logging


@pytest.fixture(autouse=True)
def cleanup(restore_root_logger):
    """Clean up log context and root handlers after each test."""
    clear_log_context()
    yield
    clear_log_context()


def flush_handlers():
    for handler in logging.getLogger().handlers:
        handler.flush()


def read_entries(log_file):
    flush_handlers()
    return [json.loads(line) for line in log_file.read_text().splitlines()]


def test_log_file_path(tmp_path):
    path = log_file_path(tmp_path, "redelivery")

    assert path == (
        tmp_path / "esb" / datetime.now().strftime("%Y-%m-%d") / "esb_redelivery.log"
    )


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_creates_file_and_console_handlers(self, tmp_path):
        log_file = setup_logging("redelivery", log_dir=tmp_path)

        assert len(logging.getLogger().handlers) == 2
        assert log_file.exists()
        assert list(tmp_path.rglob("*.log")) == [log_file]

    def test_sets_log_context(self, tmp_path):
        setup_logging("redelivery", log_dir=tmp_path, worker_id="w-1")

        ctx = get_log_context()

        assert ctx["domain"] == "esb"
        assert ctx["stage"] == "redelivery"
        assert ctx["worker_id"] == "w-1"

    def test_json_file_contains_structured_fields(self, tmp_path):
        log_file = setup_logging("redelivery", log_dir=tmp_path)
        set_log_context(run_id="run-1")

        logging.getLogger("test.redelivery").warning(
            "Retry",
            extra={"exchange_id": "ex-1", "operation": "Retry", "retry_count": 3},
        )

        entry = next(e for e in read_entries(log_file) if e["msg"] == "Retry")

        assert entry["level"] == "WARNING"
        assert entry["exchange_id"] == "ex-1"
        assert entry["operation"] == "Retry"
        assert entry["retry_count"] == 3
        assert entry["domain"] == "esb"
        assert entry["stage"] == "redelivery"
        assert entry["run_id"] == "run-1"

    def test_unknown_extras_not_written(self, tmp_path):
        log_file = setup_logging("redelivery", log_dir=tmp_path)

        logging.getLogger("test.redelivery").info("Note", extra={"payload": "body"})

        entry = next(e for e in read_entries(log_file) if e["msg"] == "Note")

        assert "payload" not in entry

    def test_file_keeps_debug_below_console_level(self, tmp_path, capsys):
        log_file = setup_logging("redelivery", log_dir=tmp_path, level=logging.WARNING)

        logging.getLogger("test.redelivery").debug("Counter read")

        assert any(e["msg"] == "Counter read" for e in read_entries(log_file))
        assert "Counter read" not in capsys.readouterr().out

    def test_plain_text_file_format(self, tmp_path):
        log_file = setup_logging("redelivery", log_dir=tmp_path, json_format=False)

        logging.getLogger("test.plain").info("Plain message")
        flush_handlers()

        content = log_file.read_text()

        assert "Plain message" in content
        assert " - test.plain - INFO - " in content

    def test_console_receives_logs(self, tmp_path, capsys):
        setup_logging("redelivery", log_dir=tmp_path)

        logging.getLogger("test").warning("Console test", extra={"exchange_id": "abcdef123456"})

        captured = capsys.readouterr()

        assert "Console test" in captured.out
        assert "[esb] - [redelivery]" in captured.out
        assert "[abcdef12]" in captured.out

    def test_reinit_does_not_duplicate_handlers(self, tmp_path):
        setup_logging("redelivery", log_dir=tmp_path)
        setup_logging("redelivery", log_dir=tmp_path)

        assert len(logging.getLogger().handlers) == 2
