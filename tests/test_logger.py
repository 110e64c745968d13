"""
Tests for logger functionality.
"""

import pytest
from kickahead.logger import StructuredLogger, get_logger, reset_logger


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_logger_creation(self, tmp_path):
        """Logger should be created with default settings."""
        logger = StructuredLogger(
            name="test",
            level="INFO",
            log_dir=tmp_path,
            enable_console=False,
        )

        assert logger.logger.name == "test"
        assert logger.metrics["ticks"] == 0

    def test_log_methods(self, tmp_path):
        """All log level methods should work."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")
        logger.error("Error message")
        logger.critical("Critical message")

    def test_context_is_serialized(self, tmp_path):
        """Context kwargs end up in the log line, non-JSON values as strings."""
        logger = StructuredLogger(
            name="test_context",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Job scheduled", job_type="send_invoice", job_id=7, when=tmp_path)

        content = next(tmp_path.glob("*.log")).read_text()
        assert '"job_type": "send_invoice"' in content
        assert '"job_id": 7' in content
        assert str(tmp_path) in content

    def test_metrics_tracking(self, tmp_path):
        """Metrics should be tracked correctly."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.record_tick(due=3)
        logger.record_job_attempt("send_invoice")
        logger.record_job_success("send_invoice")
        logger.record_job_attempt("send_invoice")
        logger.record_job_failure("send_invoice", "TimeoutError")
        logger.record_out_of_time("ignore")
        logger.record_out_of_time("hook")
        logger.record_out_of_time("raise_exception")

        metrics = logger.get_metrics()

        assert metrics["ticks"] == 1
        assert metrics["jobs_due"] == 3
        assert metrics["jobs_executed"] == 1
        assert metrics["jobs_failed"] == 1
        assert metrics["jobs_ignored"] == 1
        assert metrics["jobs_hooked"] == 1
        assert metrics["out_of_interval"] == 1
        assert metrics["errors_by_type"]["TimeoutError"] == 1

        stats = metrics["job_type_stats"]["send_invoice"]
        assert stats["attempts"] == 2
        assert stats["successes"] == 1
        assert stats["success_rate"] == 0.5

    def test_success_rate_calculation(self, tmp_path):
        """Success rate should be calculated correctly."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        for _ in range(3):
            logger.record_job_attempt("cleanup")

        logger.record_job_success("cleanup")
        logger.record_job_success("cleanup")

        metrics = logger.get_metrics()
        success_rate = metrics["job_type_stats"]["cleanup"]["success_rate"]

        assert success_rate == pytest.approx(0.667, rel=0.01)

    def test_log_metrics_summary(self, tmp_path):
        """Summary lines are written to the log."""
        logger = StructuredLogger(
            name="test_summary",
            log_dir=tmp_path,
            enable_console=False,
        )
        logger.record_job_attempt("cleanup")
        logger.record_job_failure("cleanup", "ValueError")

        logger.log_metrics_summary()

        content = next(tmp_path.glob("*.log")).read_text()
        assert "=== Dispatcher Metrics ===" in content
        assert "cleanup: 0/1" in content
        assert "ValueError: 1" in content

    def test_log_file_creation(self, tmp_path):
        """Log file should be created in specified directory."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Test message")

        log_files = list(tmp_path.glob("kickahead_*.log"))
        assert len(log_files) == 1

        log_content = log_files[0].read_text()
        assert "Test message" in log_content


class TestGlobalLogger:
    """Test global logger singleton."""

    def test_get_logger_singleton(self, tmp_path):
        """get_logger should return same instance."""
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger2 = get_logger()

        assert logger1 is logger2

    def test_reset_logger(self, tmp_path):
        """reset_logger should create new instance."""
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger1.record_tick(due=1)

        reset_logger()

        logger2 = get_logger(log_dir=tmp_path, enable_console=False)

        assert logger2.metrics["ticks"] == 0
