"""Unit tests for spectr logging and observability.

This module tests the logging setup, performance monitoring,
and the discovery observability hooks.
"""

import json
import logging
import sys
from unittest.mock import MagicMock

import pytest

from spectr_discovery.spectr_logging import (
    MAX_METRIC_SAMPLES,
    JsonFormatter,
    ObservabilityHooks,
    PerformanceMonitor,
    log_directory_skipped,
    log_error_with_context,
    log_operation,
    log_performance,
    log_root_found,
    observability_hooks,
    performance_monitor,
    setup_logging,
)


def _record(message="Test message", exc_info=None):
    return logging.LogRecord("spectr.test", logging.INFO, __file__, 10, message, (), exc_info)


@pytest.fixture
def restore_spectr_logger():
    logger = logging.getLogger("spectr")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)


class TestJsonFormatter:
    """Test cases for JsonFormatter."""

    def test_basic_fields(self):
        data = json.loads(JsonFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "spectr.test"
        assert data["message"] == "Test message"
        assert data["line"] == 10
        assert "timestamp" in data

    def test_with_exception(self):
        try:
            raise ValueError("bad path")
        except ValueError:
            record = _record(exc_info=sys.exc_info())

        data = json.loads(JsonFormatter().format(record))

        assert "ValueError: bad path" in data["exception"]

    def test_extra_fields_are_merged(self, tmp_path):
        record = _record()
        record.extra_fields = {"path": tmp_path, "count": 2}

        data = json.loads(JsonFormatter().format(record))

        assert data["path"] == str(tmp_path)
        assert data["count"] == 2


class TestSetupLogging:
    """Test cases for setup_logging."""

    def test_console_handler(self, restore_spectr_logger):
        setup_logging("DEBUG")

        assert restore_spectr_logger.level == logging.DEBUG
        assert len(restore_spectr_logger.handlers) == 1

    def test_level_from_environment(self, restore_spectr_logger, monkeypatch):
        monkeypatch.setenv("SPECTR_LOG_LEVEL", "warning")

        setup_logging()

        assert restore_spectr_logger.level == logging.WARNING

    def test_json_file_handler(self, restore_spectr_logger, tmp_path):
        log_file = tmp_path / "spectr.log"

        setup_logging("INFO", log_file)
        logging.getLogger("spectr.discovery").info("walk finished")
        for handler in restore_spectr_logger.handlers:
            handler.flush()

        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert json.loads(lines[-1])["message"] == "walk finished"

    def test_repeated_setup_does_not_duplicate_handlers(self, restore_spectr_logger):
        setup_logging("INFO")
        setup_logging("INFO")

        assert len(restore_spectr_logger.handlers) == 1


class TestPerformanceMonitor:
    """Test cases for PerformanceMonitor."""

    def test_record_and_get(self):
        monitor = PerformanceMonitor()
        monitor.record_metric("walk_down_duration", 0.5, {"status": "success"})

        metrics = monitor.get_metrics("walk_down_duration")["walk_down_duration"]

        assert metrics[0]["value"] == 0.5
        assert metrics[0]["tags"] == {"status": "success"}

    def test_unknown_metric(self):
        assert PerformanceMonitor().get_metrics("missing") == {"missing": []}

    def test_get_all_and_clear(self):
        monitor = PerformanceMonitor()
        monitor.record_metric("a", 1)
        monitor.record_metric("b", 2)

        assert set(monitor.get_metrics()) == {"a", "b"}
        monitor.clear()
        assert monitor.get_metrics() == {}

    def test_samples_are_capped(self):
        """Test a long-running process keeps only the newest samples per metric."""
        monitor = PerformanceMonitor(max_samples=3)
        for value in range(10):
            monitor.record_metric("find_roots_duration", value)

        samples = monitor.get_metrics("find_roots_duration")["find_roots_duration"]

        assert [sample["value"] for sample in samples] == [7, 8, 9]

    def test_default_cap(self):
        monitor = PerformanceMonitor()
        for value in range(MAX_METRIC_SAMPLES + 5):
            monitor.record_metric("walk", value)

        assert len(monitor.get_metrics()["walk"]) == MAX_METRIC_SAMPLES


class TestLogPerformance:
    """Test cases for the log_performance decorator."""

    def setup_method(self):
        performance_monitor.clear()

    def test_success(self):
        @log_performance("unit_success")
        def work(value):
            return value * 2

        assert work(21) == 42
        metric = performance_monitor.get_metrics("unit_success_duration")["unit_success_duration"][0]
        assert metric["tags"]["status"] == "success"
        assert metric["value"] >= 0

    def test_error_is_recorded_and_raised(self):
        @log_performance("unit_failure")
        def work():
            raise OSError("disk gone")

        with pytest.raises(OSError):
            work()

        metric = performance_monitor.get_metrics("unit_failure_duration")["unit_failure_duration"][0]
        assert metric["tags"] == {"status": "error", "error_type": "OSError"}

    def test_preserves_metadata(self):
        @log_performance("named")
        def documented():
            """Docstring."""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docstring."


class TestLogOperation:
    """Test cases for the log_operation context manager."""

    def test_success(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="spectr.operations"):
            with log_operation("scan", path="/repo"):
                pass

        statuses = [record.extra_fields["status"] for record in caplog.records]
        assert statuses == ["started", "completed"]
        assert caplog.records[-1].extra_fields["path"] == "/repo"

    def test_failure_is_logged_and_raised(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="spectr.operations"):
            with pytest.raises(KeyError):
                with log_operation("scan"):
                    raise KeyError("missing")

        failed = caplog.records[-1]
        assert failed.levelno == logging.ERROR
        assert failed.extra_fields["status"] == "failed"
        assert failed.extra_fields["error_type"] == "KeyError"

    def test_failure_level(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="spectr.operations"):
            with pytest.raises(ValueError):
                with log_operation("resolve", failure_level=logging.WARNING):
                    raise ValueError("bad input")

        failed = caplog.records[-1]
        assert failed.levelno == logging.WARNING
        assert failed.extra_fields["status"] == "failed"
        assert "failure_level" not in failed.extra_fields


class TestObservabilityHooks:
    """Test cases for ObservabilityHooks."""

    def test_register_and_trigger(self):
        hooks = ObservabilityHooks()
        callback = MagicMock()
        hooks.register_hook("root_found", callback)

        hooks.trigger_hooks("root_found", path="/repo")

        callback.assert_called_once_with(path="/repo")

    def test_unregister(self):
        hooks = ObservabilityHooks()
        callback = MagicMock()
        hooks.register_hook("root_found", callback)
        hooks.unregister_hook("root_found", callback)
        hooks.unregister_hook("never_registered", callback)

        hooks.trigger_hooks("root_found", path="/repo")

        callback.assert_not_called()

    def test_failing_hook_does_not_stop_others(self):
        hooks = ObservabilityHooks()
        second = MagicMock()
        hooks.register_hook("root_found", MagicMock(side_effect=RuntimeError("observer bug")))
        hooks.register_hook("root_found", second)

        hooks.trigger_hooks("root_found", path="/repo")

        second.assert_called_once()

    def test_discovery_event_adds_timestamp(self):
        hooks = ObservabilityHooks()
        callback = MagicMock()
        hooks.register_hook("discovery_completed", callback)

        hooks.log_discovery_event("discovery_completed", count=3)

        kwargs = callback.call_args.kwargs
        assert kwargs["count"] == 3
        assert "timestamp" in kwargs
        assert "event_type" not in kwargs


class TestDiscoveryEventHelpers:
    """Test cases for the module-level event helpers."""

    def test_root_found(self, tmp_path):
        callback = MagicMock()
        observability_hooks.register_hook("root_found", callback)
        try:
            log_root_found(tmp_path, "upward", relative_to=".")
        finally:
            observability_hooks.unregister_hook("root_found", callback)

        kwargs = callback.call_args.kwargs
        assert kwargs["path"] == str(tmp_path)
        assert kwargs["source"] == "upward"
        assert kwargs["relative_to"] == "."

    def test_directory_skipped(self, tmp_path):
        callback = MagicMock()
        observability_hooks.register_hook("directory_skipped", callback)
        try:
            log_directory_skipped(tmp_path / "node_modules", "skip_list")
        finally:
            observability_hooks.unregister_hook("directory_skipped", callback)

        assert callback.call_args.kwargs["reason"] == "skip_list"

    def test_error_with_context(self, caplog):
        with caplog.at_level(logging.WARNING, logger="spectr.errors"):
            log_error_with_context(PermissionError("denied"), {"operation": "walk_down", "path": "/x"})

        record = caplog.records[-1]
        assert "walk_down" in record.getMessage()
        assert record.extra_fields["error_type"] == "PermissionError"
        assert record.extra_fields["context"]["path"] == "/x"
