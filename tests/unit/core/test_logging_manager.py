"""
Tests for logging_manager module.

Tests the EntrelLogger file layout, the safe_logger / NullLogger pair and
the CLI error handler.
"""
import json
import pytest
from unittest.mock import MagicMock

import click

from entrel.core.logging_manager import (
    EntrelLogger,
    NullLogger,
    handle_cli_error,
    safe_logger,
)


class TestNullLogger:
    """Tests for NullLogger class."""

    def test_null_logger_methods_are_no_ops(self):
        """NullLogger should accept every logging call silently."""
        logger = NullLogger()
        logger.log_operation("op", {"key": "value"})
        logger.log_error(ValueError("boom"), {"context": "test"})
        logger.log_debug("debug", {"key": "value"})
        logger.log_info("info")
        logger.log_warning("warning")

    def test_null_logger_log_cli_error_returns_formatted(self):
        """NullLogger.log_cli_error should return formatted error string."""
        result = NullLogger().log_cli_error(ValueError("test error"))
        assert "ValueError" in result
        assert "test error" in result


class TestSafeLogger:
    """Tests for safe_logger function."""

    def test_returns_logger_when_provided(self):
        mock_logger = MagicMock(spec=EntrelLogger)
        assert safe_logger(mock_logger) is mock_logger

    def test_returns_null_logger_when_none(self):
        assert isinstance(safe_logger(None), NullLogger)

    def test_null_logger_is_singleton(self):
        assert safe_logger(None) is safe_logger(None)

    def test_forwards_calls_with_details(self):
        mock_logger = MagicMock(spec=EntrelLogger)
        details = {"address": "mod_booking/option/42"}

        safe_logger(mock_logger).log_operation("relation_saved", details)

        mock_logger.log_operation.assert_called_once_with("relation_saved", details)


class TestEntrelLogger:
    """Tests for the rotating file logger."""

    def test_creates_log_directory(self, tmp_path):
        log_dir = tmp_path / "nested" / "logs"
        EntrelLogger(log_dir, "test")
        assert log_dir.is_dir()

    def test_operation_written_to_component_log(self, tmp_path):
        logger = EntrelLogger(tmp_path, "relations")

        logger.log_operation("relation_saved", {"entityid": 5})

        content = (tmp_path / "relations.log").read_text(encoding="utf-8")
        assert "OPERATION - relation_saved" in content
        assert json.dumps({"entityid": 5}) in content

    def test_error_written_to_errors_log(self, tmp_path):
        logger = EntrelLogger(tmp_path, "relations")

        logger.log_error(RuntimeError("disk full"), {"operation": "upsert"})

        content = (tmp_path / "errors.log").read_text(encoding="utf-8")
        assert "RuntimeError: disk full" in content
        assert "operation=upsert" in content

    def test_debug_message_includes_details(self, tmp_path):
        logger = EntrelLogger(tmp_path, "relations")

        logger.log_debug("Checked sub-instance entities", {"distinct": 2})

        content = (tmp_path / "relations.log").read_text(encoding="utf-8")
        assert 'DEBUG - Checked sub-instance entities: {"distinct": 2}' in content

    def test_log_cli_error_returns_one_line(self, tmp_path):
        logger = EntrelLogger(tmp_path, "cli")

        message = logger.log_cli_error(ValueError("bad id"))

        assert message == "❌ ValueError: bad id"


class TestHandleCliError:
    """Tests for handle_cli_error."""

    def test_logs_and_exits(self):
        mock_logger = MagicMock(spec=EntrelLogger)
        mock_logger.log_cli_error.return_value = "❌ ValueError: bad"
        ctx = click.Context(click.Command("test"), obj={"logger": mock_logger})

        with pytest.raises(SystemExit) as exc_info:
            handle_cli_error(ctx, ValueError("bad"), "relation_set", {"id": 3})

        assert exc_info.value.code == 1
        context = mock_logger.log_cli_error.call_args[0][1]
        assert context == {"operation": "relation_set", "id": 3}

    def test_works_without_logger(self):
        ctx = click.Context(click.Command("test"), obj={})

        with pytest.raises(SystemExit):
            handle_cli_error(ctx, ValueError("bad"), "init", exit_code=2)
